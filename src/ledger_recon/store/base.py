"""
Record store interface.

The matching core reads both ledgers and writes match results only through
this interface, so it does not know how the ledgers are persisted.
"""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..models.ledger import (
    BankItem,
    CheckItem,
    CheckStatus,
    normalize_transaction_reference,
)

logger = logging.getLogger(__name__)

DEFAULT_BEGINNING_BALANCE_LABEL = "Beginning Balance"


class RecordStore(ABC):
    """Abstract source and sink for check register and bank feed rows."""

    def __init__(self, beginning_balance_label: str = DEFAULT_BEGINNING_BALANCE_LABEL):
        """
        Args:
            beginning_balance_label: Description of the register's opening
                balance row, which never takes part in matching
        """
        self.beginning_balance_label = beginning_balance_label

    @abstractmethod
    def load_all_check_items(self) -> list[CheckItem]:
        """Every check register row, reconciled or not."""
        pass

    @abstractmethod
    def load_all_bank_items(self) -> list[BankItem]:
        """Every bank feed row."""
        pass

    @abstractmethod
    def write_check_item_status(self, row: int, value: str) -> None:
        """Set the status column of a check register row."""
        pass

    @abstractmethod
    def append_reconciliation_row(
        self,
        tier: int,
        check_item: CheckItem,
        bank_item: BankItem,
        similarity: Optional[float] = None,
    ) -> None:
        """Record an applied match in the reconciliation report."""
        pass

    def refresh(self) -> None:
        """Re-read backing data. Called right after the ledger lock is taken."""
        pass

    def flush(self) -> None:
        """Persist pending writes. Stores that write through need not override."""
        pass

    def matched_transaction_ids(self) -> set[str]:
        """
        Bank transaction ids referenced by any check register status.

        Spreadsheet-rendered ids ("10234.0") are returned as "10234".
        """
        ids: set[str] = set()
        for item in self.load_all_check_items():
            status = item.status.strip()
            if status and status not in CheckStatus.RECONCILED:
                ids.add(normalize_transaction_reference(status))
        return ids

    def load_unmatched_check_items(self) -> list[CheckItem]:
        """
        Check register rows still waiting for a bank counterpart.

        Excludes the beginning balance row and rows that are cleared,
        matched, or carry a transaction id in their status.
        """
        known_ids = frozenset(b.transaction_id for b in self.load_all_bank_items())
        items = [
            item
            for item in self.load_all_check_items()
            if not item.is_beginning_balance(self.beginning_balance_label)
            and not item.is_reconciled(known_ids)
        ]
        logger.debug(f"Loaded {len(items)} unmatched check register rows")
        return items

    def load_unmatched_bank_items(self) -> list[BankItem]:
        """Bank feed rows whose transaction id no check row references."""
        matched_ids = self.matched_transaction_ids()
        items = [
            item
            for item in self.load_all_bank_items()
            if item.transaction_id not in matched_ids
        ]
        logger.debug(f"Loaded {len(items)} unmatched bank feed rows")
        return items

    def find_check_item(self, row: int) -> Optional[CheckItem]:
        return next((c for c in self.load_all_check_items() if c.row == row), None)

    def find_bank_item(self, transaction_id: str) -> Optional[BankItem]:
        return next(
            (b for b in self.load_all_bank_items() if b.transaction_id == transaction_id),
            None,
        )

