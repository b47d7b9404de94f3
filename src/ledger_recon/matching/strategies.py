"""
Matching strategies for the tiered matcher.
Each strategy is one tier's acceptance rule; they differ only in how far
apart the two dates may be.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from ..models.ledger import BankItem, CheckItem
from .predicates import (
    AMOUNT_TOLERANCE,
    amount_direction_valid,
    amount_magnitude_match,
    date_within_range,
    exact_date_match,
)
from .similarity import similarity


class MatchingStrategy(ABC):
    """Abstract base class for tier acceptance rules."""

    def __init__(
        self,
        similarity_threshold: float = 0.8,
        amount_tolerance: Decimal = AMOUNT_TOLERANCE,
    ):
        """
        Initialize with the shared acceptance thresholds.

        Args:
            similarity_threshold: Description score that must be exceeded
            amount_tolerance: Maximum difference between unsigned amounts
        """
        self.similarity_threshold = similarity_threshold
        self.amount_tolerance = amount_tolerance

    @abstractmethod
    def dates_match(self, check_item: CheckItem, bank_item: BankItem) -> bool:
        """Date rule of this tier."""
        pass

    @abstractmethod
    def describe(self) -> str:
        pass

    def evaluate(self, check_item: CheckItem, bank_item: BankItem) -> Optional[float]:
        """
        Decide whether a pair is accepted by this tier.

        Returns:
            The description similarity if the pair is accepted, else None
        """
        if not self.dates_match(check_item, bank_item):
            return None
        if not amount_magnitude_match(check_item, bank_item, self.amount_tolerance):
            return None
        if not amount_direction_valid(check_item, bank_item):
            return None

        score = similarity(check_item.description, bank_item.description)
        if score > self.similarity_threshold:
            return score
        return None


class ExactDateStrategy(MatchingStrategy):
    """Same calendar day. Highest confidence tier."""

    def dates_match(self, check_item: CheckItem, bank_item: BankItem) -> bool:
        return exact_date_match(check_item.date, bank_item.date)

    def describe(self) -> str:
        return "exact date"


class DateRangeStrategy(MatchingStrategy):
    """Dates within a number of days of each other."""

    def __init__(self, tolerance_days: int, **kwargs):
        """
        Args:
            tolerance_days: Maximum whole days between the two dates
        """
        super().__init__(**kwargs)
        self.tolerance_days = tolerance_days

    def dates_match(self, check_item: CheckItem, bank_item: BankItem) -> bool:
        return date_within_range(check_item.date, bank_item.date, self.tolerance_days)

    def describe(self) -> str:
        return f"within {self.tolerance_days} day(s)"
