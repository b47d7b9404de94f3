"""
Excel workbook record store.

The ledger workbook holds the check register, the imported bank statement
and a reconciliation sheet that collects every applied match, color-tagged
by tier.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional
from zipfile import BadZipFile
import logging

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from ..config import LedgerConfig
from ..models.ledger import BankItem, CheckItem, to_calendar_day
from ..utils.exceptions import SourceUnavailableError
from ..utils.values import parse_amount, text_value
from .base import RecordStore

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

RECONCILIATION_HEADERS = [
    "Tier",
    "Check Date",
    "Check Description",
    "Check Amount",
    "Bank Date",
    "Bank Description",
    "Bank Amount",
    "Transaction ID",
    "Similarity",
    "Match Status",
    "Bank Status",
]

REQUIRED_CHECK_FIELDS = ("date", "description", "withdrawal", "deposit", "status")
REQUIRED_BANK_FIELDS = ("transaction_id", "date", "description", "amount")

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%d-%b-%Y")


def parse_cell_date(value: Any) -> Optional[date]:
    """Convert a date cell (datetime or text) to a calendar day."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return to_calendar_day(value)

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


class WorkbookRecordStore(RecordStore):
    """Record store backed by an .xlsx ledger workbook."""

    def __init__(self, path: Path, config: Optional[LedgerConfig] = None):
        """
        Open a ledger workbook.

        Args:
            path: Path to the .xlsx file
            config: Sheet names and column mappings

        Raises:
            SourceUnavailableError: If the workbook cannot be opened or a
                required sheet or column is missing
        """
        self.config = config or LedgerConfig()
        super().__init__(self.config.beginning_balance_label)
        self.path = Path(path)
        self.refresh()

    def refresh(self) -> None:
        """Re-read the workbook from disk, dropping unsaved writes."""
        try:
            self.workbook = load_workbook(self.path)
        except (OSError, BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise SourceUnavailableError(f"Cannot open ledger workbook {self.path}: {e}") from e

        self._check_sheet = self._require_sheet(self.config.check_register_sheet)
        self._bank_sheet = self._require_sheet(self.config.bank_statement_sheet)
        self._check_columns = self._resolve_columns(
            self._check_sheet, self.config.check_columns, REQUIRED_CHECK_FIELDS
        )
        self._bank_columns = self._resolve_columns(
            self._bank_sheet, self.config.bank_columns, REQUIRED_BANK_FIELDS
        )

    @classmethod
    def create(
        cls,
        path: Path,
        check_items: list[CheckItem],
        bank_items: list[BankItem],
        config: Optional[LedgerConfig] = None,
    ) -> "WorkbookRecordStore":
        """
        Write a new ledger workbook and open it as a store.

        Row ids of the given items are ignored; rows are numbered by their
        position in the new sheets.
        """
        config = config or LedgerConfig()
        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        check_fields = list(config.check_columns.keys())
        ws = wb.create_sheet(config.check_register_sheet)
        _write_header(ws, [config.check_columns[f] for f in check_fields])
        for item in check_items:
            values = {
                "date": item.date,
                "check_number": item.check_number,
                "description": item.description,
                "withdrawal": float(item.withdrawal) if item.withdrawal is not None else None,
                "deposit": float(item.deposit) if item.deposit is not None else None,
                "balance": float(item.balance) if item.balance is not None else None,
                "status": item.status or None,
            }
            ws.append([values.get(f) for f in check_fields])

        bank_fields = list(config.bank_columns.keys())
        ws = wb.create_sheet(config.bank_statement_sheet)
        _write_header(ws, [config.bank_columns[f] for f in bank_fields])
        for item in bank_items:
            values = {
                "transaction_id": item.transaction_id,
                "date": item.date,
                "description": item.description,
                "amount": float(item.amount),
                "balance": float(item.balance) if item.balance is not None else None,
            }
            ws.append([values.get(f) for f in bank_fields])

        ws = wb.create_sheet(config.reconciliation_sheet)
        _write_header(ws, RECONCILIATION_HEADERS)

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        logger.info(
            f"Created ledger workbook {path}: {len(check_items)} check rows, "
            f"{len(bank_items)} bank rows"
        )
        return cls(path, config)

    def _require_sheet(self, name: str) -> Worksheet:
        if name not in self.workbook.sheetnames:
            raise SourceUnavailableError(f"Ledger workbook {self.path} has no sheet '{name}'")
        return self.workbook[name]

    def _resolve_columns(
        self,
        ws: Worksheet,
        mappings: dict[str, str],
        required: tuple[str, ...],
    ) -> dict[str, int]:
        """
        Map field names to 1-based column indexes using the header row.

        Raises:
            SourceUnavailableError: If a required column is missing
        """
        headers = {
            str(cell.value).strip(): cell.column
            for cell in ws[1]
            if cell.value is not None
        }
        columns: dict[str, int] = {}
        for field_name, header in mappings.items():
            if header in headers:
                columns[field_name] = headers[header]

        missing = [f for f in required if f not in columns]
        if missing:
            raise SourceUnavailableError(
                f"Sheet '{ws.title}' is missing column(s): "
                + ", ".join(mappings.get(f, f) for f in missing)
            )
        return columns

    def _value(self, row: tuple, columns: dict[str, int], field_name: str) -> Any:
        index = columns.get(field_name)
        if index is None or index > len(row):
            return None
        return row[index - 1]

    def load_all_check_items(self) -> list[CheckItem]:
        items: list[CheckItem] = []
        cols = self._check_columns

        for row_number, row in enumerate(
            self._check_sheet.iter_rows(min_row=2, values_only=True), start=2
        ):
            if all(value is None for value in row):
                continue

            check_number = self._value(row, cols, "check_number")
            items.append(
                CheckItem(
                    row=row_number,
                    date=parse_cell_date(self._value(row, cols, "date")),
                    check_number=text_value(check_number) or None,
                    description=text_value(self._value(row, cols, "description")),
                    withdrawal=parse_amount(self._value(row, cols, "withdrawal")),
                    deposit=parse_amount(self._value(row, cols, "deposit")),
                    balance=parse_amount(self._value(row, cols, "balance")),
                    status=text_value(self._value(row, cols, "status")),
                )
            )

        return items

    def load_all_bank_items(self) -> list[BankItem]:
        items: list[BankItem] = []
        cols = self._bank_columns

        for row_number, row in enumerate(
            self._bank_sheet.iter_rows(min_row=2, values_only=True), start=2
        ):
            if all(value is None for value in row):
                continue

            transaction_id = text_value(self._value(row, cols, "transaction_id"))
            amount = parse_amount(self._value(row, cols, "amount"))
            if not transaction_id or amount is None:
                logger.warning(
                    f"Bank statement row {row_number}: missing transaction id or amount, skipping"
                )
                continue

            items.append(
                BankItem(
                    row=row_number,
                    transaction_id=transaction_id,
                    date=parse_cell_date(self._value(row, cols, "date")),
                    description=text_value(self._value(row, cols, "description")),
                    amount=amount,
                    balance=parse_amount(self._value(row, cols, "balance")),
                )
            )

        return items

    def write_check_item_status(self, row: int, value: str) -> None:
        if row < 2 or row > self._check_sheet.max_row:
            raise SourceUnavailableError(
                f"Check register row {row} is outside sheet '{self._check_sheet.title}'"
            )
        self._check_sheet.cell(row=row, column=self._check_columns["status"], value=value)

    def append_reconciliation_row(
        self,
        tier: int,
        check_item: CheckItem,
        bank_item: BankItem,
        similarity: Optional[float] = None,
    ) -> None:
        name = self.config.reconciliation_sheet
        if name in self.workbook.sheetnames:
            ws = self.workbook[name]
        else:
            ws = self.workbook.create_sheet(name)
            _write_header(ws, RECONCILIATION_HEADERS)

        ws.append(
            [
                tier,
                check_item.date,
                check_item.description,
                float(check_item.signed_amount),
                bank_item.date,
                bank_item.description,
                float(bank_item.amount),
                bank_item.transaction_id,
                round(similarity, 4) if similarity is not None else None,
                "Matched",
                "Clear",
            ]
        )

        color = self.config.tier_colors.get(tier)
        fill = (
            PatternFill(start_color=color, end_color=color, fill_type="solid")
            if color
            else None
        )
        for cell in ws[ws.max_row]:
            cell.border = THIN_BORDER
            if fill:
                cell.fill = fill

    def flush(self) -> None:
        try:
            self.workbook.save(self.path)
        except OSError as e:
            raise SourceUnavailableError(f"Cannot save ledger workbook {self.path}: {e}") from e
        logger.info(f"Saved ledger workbook: {self.path}")


def _write_header(ws: Worksheet, headers: list[str]) -> None:
    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center")
