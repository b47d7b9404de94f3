"""
Check register CSV parser.
Reads a manually kept register export into CheckItem rows.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.ledger import CheckItem
from .base import CsvLedgerParser

logger = logging.getLogger(__name__)


class CheckRegisterParser(CsvLedgerParser):
    """Parser for check register CSV exports."""

    source_name = "check register"

    def __init__(self, config: ReconConfig):
        super().__init__(config.input.check_register)

    def parse_file(self, file_path: Path) -> list[CheckItem]:
        """
        Parse a check register CSV file.

        Args:
            file_path: Path to the CSV file

        Returns:
            Check items, numbered by CSV row (first data row is row 2)

        Raises:
            ParseError: If the file cannot be read
        """
        df = self.read_frame(file_path)
        items: list[CheckItem] = []

        for idx, row in df.iterrows():
            item = self._normalize_row(row, int(idx) + 2)
            if item:
                items.append(item)

        logger.info(f"Extracted {len(items)} rows from check register CSV")
        return items

    def _normalize_row(self, row: pd.Series, row_number: int) -> Optional[CheckItem]:
        item_date = self.parse_date(self.text(row, "date"))
        description = self.text(row, "description")
        if item_date is None and not description:
            logger.warning(f"Row {row_number}: no date or description, skipping")
            return None

        withdrawal = self.parse_amount(self.text(row, "withdrawal"))
        deposit = self.parse_amount(self.text(row, "deposit"))

        # Registers sometimes type withdrawals as negative numbers
        if withdrawal is not None and withdrawal < 0:
            withdrawal = -withdrawal
        if deposit is not None and deposit < 0:
            if withdrawal is not None:
                logger.warning(
                    f"Row {row_number}: withdrawal {withdrawal} and negative deposit "
                    f"{deposit} both set, skipping"
                )
                return None
            withdrawal, deposit = -deposit, None

        return CheckItem(
            row=row_number,
            date=item_date,
            check_number=self.text(row, "check_number") or None,
            description=description,
            withdrawal=withdrawal,
            deposit=deposit,
            balance=self.parse_amount(self.text(row, "balance")),
            status=self.text(row, "status"),
        )
