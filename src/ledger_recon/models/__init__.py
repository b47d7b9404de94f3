"""Data models for reconciliation."""

from .ledger import (
    BankItem,
    CheckItem,
    CheckStatus,
    ManualMatchConfirmation,
    Match,
    MatchCriteria,
    MatchRunResult,
    is_transaction_reference,
    normalize_transaction_reference,
)

__all__ = [
    "BankItem",
    "CheckItem",
    "CheckStatus",
    "ManualMatchConfirmation",
    "Match",
    "MatchCriteria",
    "MatchRunResult",
    "is_transaction_reference",
    "normalize_transaction_reference",
]
