"""Matching engine, tier strategies and description similarity."""

from .applicator import ApplyFailure, ManualMatchValidator, MatchApplicator
from .engine import TieredMatcher
from .predicates import (
    amount_direction_valid,
    amount_magnitude_match,
    date_within_range,
    exact_date_match,
)
from .similarity import similarity
from .strategies import DateRangeStrategy, ExactDateStrategy, MatchingStrategy

__all__ = [
    "ApplyFailure",
    "DateRangeStrategy",
    "ExactDateStrategy",
    "ManualMatchValidator",
    "MatchApplicator",
    "MatchingStrategy",
    "TieredMatcher",
    "amount_direction_valid",
    "amount_magnitude_match",
    "date_within_range",
    "exact_date_match",
    "similarity",
]
