"""Data models for check register items, bank feed items and match results."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
import re

from pydantic import BaseModel, ConfigDict, Field

DateLike = Union[date, datetime]

# Spreadsheets render numeric ids as floats, e.g. "10234.0"
_TRANSACTION_REFERENCE_PATTERN = re.compile(r"^\d+(\.0+)?$")

AGING_BUCKETS = (
    (30, "0-30"),
    (60, "31-60"),
    (90, "61-90"),
)
AGING_BUCKET_OVERFLOW = "90+"


class CheckStatus:
    """Status values a check register row can carry besides a transaction id."""

    OPEN = ""
    CLEARED = "Cleared"
    MATCHED = "Matched"

    RECONCILED = (CLEARED, MATCHED)


def is_transaction_reference(status: Optional[str]) -> bool:
    """Return True if a status value looks like a bank transaction id."""
    if status is None:
        return False
    return bool(_TRANSACTION_REFERENCE_PATTERN.match(str(status).strip()))


def normalize_transaction_reference(status: str) -> str:
    """Strip whitespace and a spreadsheet ".0" suffix: "10234.0" -> "10234"."""
    text = str(status).strip()
    if is_transaction_reference(text):
        return text.split(".", 1)[0]
    return text


def to_calendar_day(value: DateLike) -> date:
    """Drop any time component from a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


@dataclass
class CheckItem:
    """
    A row of the manually kept check register.

    Exactly one of withdrawal/deposit is meaningfully set for a real
    transaction. The status column holds "", "Cleared", "Matched" or the id
    of the bank transaction the row was reconciled against.
    """

    # Worksheet row (or other store-specific row id)
    row: int

    date: Optional[DateLike]

    description: str = ""
    check_number: Optional[str] = None

    # Always non-negative when present
    withdrawal: Optional[Decimal] = None
    deposit: Optional[Decimal] = None

    balance: Optional[Decimal] = None
    status: str = CheckStatus.OPEN

    @property
    def amount(self) -> Decimal:
        """Withdrawal if set, otherwise deposit, otherwise zero."""
        if self.withdrawal:
            return self.withdrawal
        if self.deposit:
            return self.deposit
        return Decimal("0")

    @property
    def is_withdrawal(self) -> bool:
        return self.withdrawal is not None and self.withdrawal > 0

    @property
    def is_deposit(self) -> bool:
        return self.deposit is not None and self.deposit > 0

    @property
    def signed_amount(self) -> Decimal:
        """Amount using the bank feed sign convention (outflow negative)."""
        if self.is_withdrawal:
            return -self.withdrawal
        return self.amount

    def is_beginning_balance(self, label: str) -> bool:
        """Check whether this is the register's opening balance row."""
        return self.description.strip().lower() == label.strip().lower()

    def is_reconciled(self, known_transaction_ids: frozenset = frozenset()) -> bool:
        """
        Check whether the row was already cleared or matched.

        Args:
            known_transaction_ids: Bank transaction ids; a status equal to one
                of them counts as a match even when it is not numeric.
        """
        status = self.status.strip()
        if not status:
            return False
        return (
            status in CheckStatus.RECONCILED
            or is_transaction_reference(status)
            or status in known_transaction_ids
        )

    def aging_bucket(self, as_of: Optional[date] = None) -> str:
        """
        Bucket the number of days this item has been outstanding.

        Args:
            as_of: Reference day (defaults to today)

        Returns:
            One of "0-30", "31-60", "61-90", "90+"
        """
        if self.date is None:
            return AGING_BUCKET_OVERFLOW
        as_of = to_calendar_day(as_of or date.today())
        age = max(0, (as_of - to_calendar_day(self.date)).days)
        for limit, label in AGING_BUCKETS:
            if age <= limit:
                return label
        return AGING_BUCKET_OVERFLOW


@dataclass
class BankItem:
    """A row of the imported bank statement feed (negative amount = outflow)."""

    row: int
    transaction_id: str
    date: Optional[DateLike]
    amount: Decimal
    description: str = ""
    balance: Optional[Decimal] = None


@dataclass(frozen=True)
class Match:
    """A check register row paired with a bank feed row by one matching tier."""

    tier: int
    check_item: CheckItem
    bank_item: BankItem
    similarity: float

    @property
    def date_variance_days(self) -> Optional[int]:
        if self.check_item.date is None or self.bank_item.date is None:
            return None
        return abs(
            (to_calendar_day(self.check_item.date) - to_calendar_day(self.bank_item.date)).days
        )


@dataclass
class MatchRunResult:
    """Output of one automatic matching run."""

    tier1: list[Match] = field(default_factory=list)
    tier2: list[Match] = field(default_factory=list)
    tier3: list[Match] = field(default_factory=list)

    run_at: datetime = field(default_factory=datetime.now)

    # Items left over after all enabled tiers ran
    unmatched_check_items: list[CheckItem] = field(default_factory=list)
    unmatched_bank_items: list[BankItem] = field(default_factory=list)

    @property
    def tier1_count(self) -> int:
        return len(self.tier1)

    @property
    def tier2_count(self) -> int:
        return len(self.tier2)

    @property
    def tier3_count(self) -> int:
        return len(self.tier3)

    @property
    def total_matches(self) -> int:
        return self.tier1_count + self.tier2_count + self.tier3_count

    @property
    def matches(self) -> list[Match]:
        """All matches in tier order."""
        return [*self.tier1, *self.tier2, *self.tier3]

    def matches_for(self, tier: int) -> list[Match]:
        """Match list of a single tier."""
        if tier == 1:
            return self.tier1
        if tier == 2:
            return self.tier2
        if tier == 3:
            return self.tier3
        raise ValueError(f"Unknown matching tier: {tier}")

    def counts(self) -> dict[str, int]:
        return {
            "tier1Count": self.tier1_count,
            "tier2Count": self.tier2_count,
            "tier3Count": self.tier3_count,
            "totalMatches": self.total_matches,
        }


class MatchCriteria(BaseModel):
    """Caller options for an automatic matching run."""

    model_config = ConfigDict(populate_by_name=True)

    enable_tier1: bool = Field(default=True, alias="enableTier1")
    enable_tier2: bool = Field(default=True, alias="enableTier2")
    enable_tier3: bool = Field(default=True, alias="enableTier3")

    def is_enabled(self, tier: int) -> bool:
        return {
            1: self.enable_tier1,
            2: self.enable_tier2,
            3: self.enable_tier3,
        }.get(tier, False)


@dataclass
class ManualMatchConfirmation:
    """Confirmation returned after an operator pairing was written."""

    transaction_id: str
    check_register_row: int
    bank_item: BankItem
    check_item: CheckItem
    matched_at: datetime = field(default_factory=datetime.now)
