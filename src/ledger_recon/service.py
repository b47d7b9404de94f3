"""
Reconciliation service: the entry points callers use.

Both operations run under the exclusive ledger lock and report their
outcome as a ServiceResult instead of raising, so every failure reaches
the operator as an error kind plus a message.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union
import logging

from pydantic import ValidationError

from .config import ReconConfig
from .locking import LedgerLock, ThreadLedgerLock
from .matching.applicator import ManualMatchValidator, MatchApplicator
from .matching.engine import TieredMatcher
from .models.ledger import ManualMatchConfirmation, MatchCriteria, MatchRunResult
from .store.base import RecordStore
from .utils.exceptions import (
    ApplyError,
    ConfigurationError,
    ErrorKind,
    PartialApplyError,
    ReconciliationError,
    SourceUnavailableError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ErrorInfo:
    """Structured error reported to the caller."""

    kind: ErrorKind
    message: str
    details: list[str] = field(default_factory=list)

    @classmethod
    def from_exception(cls, error: Exception) -> "ErrorInfo":
        kind = getattr(error, "kind", ErrorKind.INTERNAL)
        details = [str(f) for f in getattr(error, "failures", [])]
        return cls(kind=kind, message=str(error), details=details)


@dataclass
class ServiceResult(Generic[T]):
    """Outcome of a service operation."""

    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorInfo] = None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(ok=False, value=value, error=ErrorInfo.from_exception(error))


class ReconciliationService:
    """Runs automatic matching and operator matches against a record store."""

    def __init__(
        self,
        store: RecordStore,
        lock: Optional[LedgerLock] = None,
        config: Optional[ReconConfig] = None,
    ):
        """
        Args:
            store: Record store holding both ledgers
            lock: Exclusive lock over the store (in-process lock by default)
            config: Application configuration
        """
        self.store = store
        self.lock = lock or ThreadLedgerLock()
        self.config = config or ReconConfig()
        self.matcher = TieredMatcher(self.config)
        self.applicator = MatchApplicator(store)
        self.validator = ManualMatchValidator(store)

    @property
    def lock_timeout(self) -> float:
        return self.config.lock.timeout_seconds

    def run_auto_matching_process(
        self,
        criteria: Union[MatchCriteria, dict[str, Any], None] = None,
    ) -> ServiceResult[MatchRunResult]:
        """
        Load unmatched rows, run the enabled tiers and apply the matches.

        Args:
            criteria: MatchCriteria or a dict such as {"enableTier1": False}

        Returns:
            The run result on success. On a partial apply failure the
            result is still attached next to the ApplyFailure error.
        """
        try:
            run_criteria = _coerce_criteria(criteria)
        except ConfigurationError as e:
            logger.error(f"Rejected matching criteria: {e}")
            return ServiceResult.failure(e)

        try:
            with self.lock.hold(self.lock_timeout):
                check_items, bank_items, persisted_ids = self._load_run_inputs()

                result = self.matcher.run_matching(
                    check_items,
                    bank_items,
                    run_criteria,
                    persisted_transaction_ids=persisted_ids,
                )

                try:
                    self.applicator.apply_matches(result)
                except PartialApplyError as e:
                    # Keep what was written
                    self.store.flush()
                    logger.error(f"Matching run partially applied: {e}")
                    return ServiceResult.failure(e, value=result)

                self.store.flush()
        except ReconciliationError as e:
            logger.error(f"Matching run failed ({e.kind.value}): {e}")
            return ServiceResult.failure(e)
        except Exception as e:
            logger.exception("Unexpected error during matching run")
            return ServiceResult.failure(e)

        return ServiceResult.success(result)

    def validate_and_apply_manual_match(
        self,
        transaction_id: str,
        check_register_row: int,
    ) -> ServiceResult[ManualMatchConfirmation]:
        """
        Pair a check register row with a bank transaction chosen by an operator.

        Validation failures never write anything.
        """
        try:
            with self.lock.hold(self.lock_timeout):
                try:
                    self.store.refresh()
                    bank_item = self.validator.validate(transaction_id)
                    check_item = self.validator.validate_row(check_register_row)
                except ReconciliationError:
                    raise
                except Exception as e:
                    raise SourceUnavailableError(f"Cannot read ledger records: {e}") from e

                try:
                    self.applicator.apply_manual_match(
                        bank_item.transaction_id, check_register_row
                    )
                    self.store.flush()
                except Exception as e:
                    raise ApplyError(
                        f"Could not write manual match {bank_item.transaction_id} "
                        f"to row {check_register_row}: {e}"
                    ) from e
        except ReconciliationError as e:
            logger.error(f"Manual match rejected ({e.kind.value}): {e}")
            return ServiceResult.failure(e)
        except Exception as e:
            logger.exception("Unexpected error during manual match")
            return ServiceResult.failure(e)

        check_item.status = bank_item.transaction_id
        return ServiceResult.success(
            ManualMatchConfirmation(
                transaction_id=bank_item.transaction_id,
                check_register_row=check_register_row,
                bank_item=bank_item,
                check_item=check_item,
            )
        )

    def _load_run_inputs(self):
        """
        Read both unmatched sets and the ids matched by earlier runs.

        Raises:
            SourceUnavailableError: If the store cannot be read
        """
        try:
            self.store.refresh()
            check_items = self.store.load_unmatched_check_items()
            bank_items = self.store.load_unmatched_bank_items()
            persisted_ids = self.store.matched_transaction_ids()
        except ReconciliationError:
            raise
        except Exception as e:
            raise SourceUnavailableError(f"Cannot read ledger records: {e}") from e

        return check_items, bank_items, persisted_ids


def _coerce_criteria(
    criteria: Union[MatchCriteria, dict[str, Any], None],
) -> MatchCriteria:
    if criteria is None:
        return MatchCriteria()
    if isinstance(criteria, MatchCriteria):
        return criteria
    try:
        return MatchCriteria.model_validate(criteria)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid matching criteria: {e}") from e
