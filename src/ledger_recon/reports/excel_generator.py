"""
Excel report generator for matching runs.
Creates a workbook with a summary, the matches color-tagged by tier,
the outstanding check register rows and the unmatched bank rows.
"""

from datetime import date
from pathlib import Path
from typing import Optional
import logging

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig
from ..matching.engine import TIER_NUMBERS
from ..models.ledger import MatchRunResult
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
UNMATCHED_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExcelReportGenerator:
    """Generates the Excel report of one matching run."""

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()
        self.output_config = self.config.output
        self.tier_fills = {
            tier: PatternFill(start_color=color, end_color=color, fill_type="solid")
            for tier, color in self.config.ledger.tier_colors.items()
        }

    def generate_report(
        self,
        result: MatchRunResult,
        output_path: Path,
        as_of: Optional[date] = None,
    ) -> Path:
        """
        Write the run report.

        Args:
            result: Output of a matching run
            output_path: Path for the .xlsx file
            as_of: Day used for check aging (defaults to the run day)

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")
        as_of = as_of or result.run_at.date()

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_summary_sheet(wb, result)
        self._create_matched_sheet(wb, result)
        self._create_outstanding_checks_sheet(wb, result, as_of)
        self._create_unmatched_bank_sheet(wb, result)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Cannot write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(self, wb: Workbook, result: MatchRunResult) -> None:
        ws = wb.create_sheet(self.output_config.summary_sheet)

        ws["A1"] = "Check Register Matching Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:C1")

        ws["A3"] = "Run Timestamp:"
        ws["B3"] = result.run_at.strftime("%Y-%m-%d %H:%M:%S")

        ws["A5"] = "Matches by Tier"
        ws["A5"].font = Font(bold=True)

        rows = []
        for tier in TIER_NUMBERS:
            rows.append((self._tier_label(tier), len(result.matches_for(tier))))
        rows.append(("Total Matches", result.total_matches))
        rows.append(("Outstanding Check Rows", len(result.unmatched_check_items)))
        rows.append(("Unmatched Bank Rows", len(result.unmatched_bank_items)))

        for i, (label, value) in enumerate(rows, start=6):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 24

    def _tier_label(self, tier: int) -> str:
        tier_config = self.config.matching.get_tier(tier)
        if tier_config is None:
            return f"Tier {tier} (not configured)"
        tolerance = tier_config.date_tolerance_days
        label = "exact date" if tolerance <= 0 else f"within {tolerance} days"
        if not tier_config.enabled:
            label += ", disabled"
        return f"Tier {tier} ({label})"

    def _create_matched_sheet(self, wb: Workbook, result: MatchRunResult) -> None:
        ws = wb.create_sheet(self.output_config.matched_sheet)

        self._write_headers(
            ws,
            [
                "Tier",
                "Check Row",
                "Check Date",
                "Check Number",
                "Check Description",
                "Check Amount",
                "Bank Transaction ID",
                "Bank Date",
                "Bank Description",
                "Bank Amount",
                "Similarity",
                "Date Variance (Days)",
            ],
        )

        for row_num, match in enumerate(result.matches, start=2):
            check_item = match.check_item
            bank_item = match.bank_item
            row_data = [
                match.tier,
                check_item.row,
                check_item.date,
                check_item.check_number or "",
                check_item.description,
                float(check_item.signed_amount),
                bank_item.transaction_id,
                bank_item.date,
                bank_item.description,
                float(bank_item.amount),
                round(match.similarity, 4),
                match.date_variance_days,
            ]

            fill = self.tier_fills.get(match.tier)
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                if fill:
                    cell.fill = fill

        self._auto_fit_columns(ws)

    def _create_outstanding_checks_sheet(
        self, wb: Workbook, result: MatchRunResult, as_of: date
    ) -> None:
        ws = wb.create_sheet(self.output_config.outstanding_checks_sheet)

        self._write_headers(
            ws,
            [
                "Row",
                "Date",
                "Check Number",
                "Description",
                "Withdrawal",
                "Deposit",
                "Aging",
            ],
        )

        for row_num, item in enumerate(result.unmatched_check_items, start=2):
            row_data = [
                item.row,
                item.date,
                item.check_number or "",
                item.description,
                float(item.withdrawal) if item.withdrawal is not None else "",
                float(item.deposit) if item.deposit is not None else "",
                item.aging_bucket(as_of),
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _create_unmatched_bank_sheet(self, wb: Workbook, result: MatchRunResult) -> None:
        ws = wb.create_sheet(self.output_config.unmatched_bank_sheet)

        self._write_headers(ws, ["Transaction ID", "Date", "Description", "Amount"])

        for row_num, item in enumerate(result.unmatched_bank_items, start=2):
            row_data = [
                item.transaction_id,
                item.date,
                item.description,
                float(item.amount),
            ]
            for col, value in enumerate(row_data, start=1):
                cell = ws.cell(row=row_num, column=col, value=value)
                cell.border = THIN_BORDER
                cell.fill = UNMATCHED_FILL

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column_cells[0].column_letter].width = min(max_length + 2, 50)
