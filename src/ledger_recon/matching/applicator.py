"""
Writing accepted matches back to the record store, and validating
operator-supplied pairings before they are written.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from ..models.ledger import BankItem, CheckItem, Match, MatchRunResult
from ..store.base import RecordStore
from ..utils.exceptions import (
    IdAlreadyUsedError,
    IdNotFoundError,
    InvalidIdError,
    InvalidRowError,
    PartialApplyError,
)
from .engine import TIER_NUMBERS

logger = logging.getLogger(__name__)


@dataclass
class ApplyFailure:
    """A match that could not be written."""

    match: Match
    message: str

    def __str__(self) -> str:
        return (
            f"tier {self.match.tier} check row {self.match.check_item.row} -> "
            f"{self.match.bank_item.transaction_id}: {self.message}"
        )


class MatchApplicator:
    """Persists matches into the record store."""

    def __init__(self, store: RecordStore):
        self.store = store

    def apply_matches(self, result: MatchRunResult) -> int:
        """
        Write every match of a run, tier by tier.

        A failing match does not stop the remaining ones. Matches already
        written are not rolled back.

        Args:
            result: Output of a matching run

        Returns:
            Number of matches written

        Raises:
            PartialApplyError: If at least one match could not be written
        """
        failures: list[ApplyFailure] = []
        applied = 0

        for tier in TIER_NUMBERS:
            for match in result.matches_for(tier):
                try:
                    self.apply_match(match)
                except Exception as e:
                    logger.error(
                        f"Failed to apply tier {tier} match for check row "
                        f"{match.check_item.row}: {e}"
                    )
                    failures.append(ApplyFailure(match=match, message=str(e)))
                    continue
                applied += 1

        logger.info(f"Applied {applied} match(es), {len(failures)} failure(s)")

        if failures:
            raise PartialApplyError(failures, applied)
        return applied

    def apply_match(self, match: Match) -> None:
        """Write the back-reference, then the reconciliation row."""
        self.store.write_check_item_status(
            match.check_item.row, match.bank_item.transaction_id
        )
        self.store.append_reconciliation_row(
            match.tier, match.check_item, match.bank_item, match.similarity
        )

    def apply_manual_match(self, transaction_id: str, check_row: int) -> None:
        """Operator override: status write only, no tier or report row."""
        self.store.write_check_item_status(check_row, transaction_id)
        logger.info(f"Manually matched check row {check_row} to {transaction_id}")


class ManualMatchValidator:
    """Checks an operator pairing against the same rules as automatic matching."""

    def __init__(self, store: RecordStore):
        self.store = store

    def validate(self, transaction_id) -> BankItem:
        """
        Validate a bank transaction id typed by an operator.

        Rules are checked in order: the id must be a non-empty string, it
        must exist in the bank feed, and no check row may reference it yet.

        Returns:
            The bank row the id refers to

        Raises:
            InvalidIdError, IdNotFoundError, IdAlreadyUsedError
        """
        if not isinstance(transaction_id, str) or not transaction_id.strip():
            raise InvalidIdError("Transaction id must be a non-empty string")
        transaction_id = transaction_id.strip()

        bank_item = self.store.find_bank_item(transaction_id)
        if bank_item is None:
            raise IdNotFoundError(f"No bank transaction with id {transaction_id}")

        if transaction_id in self.store.matched_transaction_ids():
            raise IdAlreadyUsedError(
                f"Bank transaction {transaction_id} is already matched to a check register row"
            )

        return bank_item

    def validate_row(self, row: Optional[int]) -> CheckItem:
        """
        Validate the check register row an operator wants to match.

        Raises:
            InvalidRowError: If the row does not exist, is the beginning
                balance row, or is already reconciled
        """
        if not isinstance(row, int) or isinstance(row, bool):
            raise InvalidRowError(f"Check register row must be an integer, got {row!r}")

        check_item = self.store.find_check_item(row)
        if check_item is None:
            raise InvalidRowError(f"Check register row {row} does not exist")
        if check_item.is_beginning_balance(self.store.beginning_balance_label):
            raise InvalidRowError(f"Check register row {row} is the beginning balance")
        known_ids = frozenset(b.transaction_id for b in self.store.load_all_bank_items())
        if check_item.is_reconciled(known_ids):
            raise InvalidRowError(
                f"Check register row {row} is already reconciled ({check_item.status})"
            )

        return check_item
