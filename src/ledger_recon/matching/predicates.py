"""Boolean checks used to decide whether a check row can pair with a bank row."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models.ledger import BankItem, CheckItem, DateLike, to_calendar_day

# Currency precision
AMOUNT_TOLERANCE = Decimal("0.01")


def exact_date_match(d1: Optional[DateLike], d2: Optional[DateLike]) -> bool:
    """True if both dates fall on the same calendar day, ignoring time of day."""
    if d1 is None or d2 is None:
        return False
    return to_calendar_day(d1).isoformat() == to_calendar_day(d2).isoformat()


def date_within_range(
    d1: Optional[DateLike], d2: Optional[DateLike], tolerance_days: int
) -> bool:
    """True if the dates are at most tolerance_days whole days apart."""
    if d1 is None or d2 is None:
        return False
    if isinstance(d1, datetime) and isinstance(d2, datetime):
        delta = abs(d1 - d2)
    else:
        delta = abs(to_calendar_day(d1) - to_calendar_day(d2))
    # timedelta.days floors, so a partial day does not count
    return delta.days <= tolerance_days


def amount_magnitude_match(
    check: CheckItem,
    bank: BankItem,
    tolerance: Decimal = AMOUNT_TOLERANCE,
) -> bool:
    """True if the unsigned amounts agree to within a cent."""
    if bank.amount is None:
        return False
    return abs(abs(check.amount) - abs(bank.amount)) < tolerance


def amount_direction_valid(check: CheckItem, bank: BankItem) -> bool:
    """
    True if the bank sign agrees with the register column.

    Withdrawals pair with outflows (negative bank amounts), deposits with
    inflows. A row with neither a positive withdrawal nor a positive
    deposit never pairs with anything.
    """
    if bank.amount is None:
        return False
    if check.is_withdrawal and bank.amount < 0:
        return True
    if check.is_deposit and bank.amount > 0:
        return True
    return False
