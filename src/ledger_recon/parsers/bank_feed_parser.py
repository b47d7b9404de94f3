"""
Bank statement feed CSV parser.
Reads a bank export with signed amounts into BankItem rows.
"""

from pathlib import Path
from typing import Optional
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.ledger import BankItem
from .base import CsvLedgerParser

logger = logging.getLogger(__name__)


class BankFeedParser(CsvLedgerParser):
    """Parser for bank statement CSV exports (negative amount = outflow)."""

    source_name = "bank feed"

    def __init__(self, config: ReconConfig):
        super().__init__(config.input.bank_feed)

    def parse_file(self, file_path: Path) -> list[BankItem]:
        """
        Parse a bank feed CSV file.

        Rows without a transaction id get a generated one (BANK-00001).

        Raises:
            ParseError: If the file cannot be read
        """
        df = self.read_frame(file_path)
        items: list[BankItem] = []

        for idx, row in df.iterrows():
            item = self._normalize_row(row, int(idx) + 2)
            if item:
                items.append(item)

        logger.info(f"Extracted {len(items)} transactions from bank feed CSV")
        return items

    def _normalize_row(self, row: pd.Series, row_number: int) -> Optional[BankItem]:
        item_date = self.parse_date(self.text(row, "date"))
        if item_date is None:
            logger.warning(f"Row {row_number}: invalid date, skipping")
            return None

        amount = self.parse_amount(self.text(row, "amount"))
        if amount is None:
            logger.warning(f"Row {row_number}: no valid amount found, skipping")
            return None

        transaction_id = self.text(row, "transaction_id") or f"BANK-{row_number - 1:05d}"

        return BankItem(
            row=row_number,
            transaction_id=transaction_id,
            date=item_date,
            description=self.text(row, "description"),
            amount=amount,
            balance=self.parse_amount(self.text(row, "balance")),
        )
