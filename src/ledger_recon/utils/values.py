"""Conversions for cell and CSV values."""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def parse_amount(value: Any) -> Optional[Decimal]:
    """
    Convert a number or currency text such as "$1,234.56" or "(12.00)".

    Returns:
        Decimal amount, or None for empty or unparsable values
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        amount = Decimal(str(value))
        return amount if amount.is_finite() else None

    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return None

    negative = text.startswith("(") and text.endswith(")")
    text = text.strip("()")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return -amount if negative else amount


def text_value(value: Any) -> str:
    """Render a cell value as trimmed text; whole floats lose their ".0"."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
