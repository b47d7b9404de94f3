"""In-memory record store, used by tests and for CSV-only reconciliation."""

from copy import deepcopy
from typing import Any, Optional
import logging

from ..models.ledger import BankItem, CheckItem
from ..utils.exceptions import SourceUnavailableError
from .base import DEFAULT_BEGINNING_BALANCE_LABEL, RecordStore

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Keeps both ledgers and the reconciliation report in lists."""

    def __init__(
        self,
        check_items: Optional[list[CheckItem]] = None,
        bank_items: Optional[list[BankItem]] = None,
        beginning_balance_label: str = DEFAULT_BEGINNING_BALANCE_LABEL,
    ):
        super().__init__(beginning_balance_label)
        self.check_items: list[CheckItem] = list(check_items or [])
        self.bank_items: list[BankItem] = list(bank_items or [])
        self.reconciliation_rows: list[dict[str, Any]] = []

    def load_all_check_items(self) -> list[CheckItem]:
        # Copies, so matching never sees a later status write
        return deepcopy(self.check_items)

    def load_all_bank_items(self) -> list[BankItem]:
        return deepcopy(self.bank_items)

    def write_check_item_status(self, row: int, value: str) -> None:
        for item in self.check_items:
            if item.row == row:
                item.status = value
                return
        raise SourceUnavailableError(f"Check register row {row} does not exist")

    def append_reconciliation_row(
        self,
        tier: int,
        check_item: CheckItem,
        bank_item: BankItem,
        similarity: Optional[float] = None,
    ) -> None:
        self.reconciliation_rows.append(
            {
                "tier": tier,
                "check_row": check_item.row,
                "check_date": check_item.date,
                "check_description": check_item.description,
                "check_amount": check_item.signed_amount,
                "bank_date": bank_item.date,
                "bank_description": bank_item.description,
                "bank_amount": bank_item.amount,
                "transaction_id": bank_item.transaction_id,
                "similarity": similarity,
                "match_status": "Matched",
                "bank_status": "Clear",
            }
        )
