"""
Money Utilities - Safe Decimal operations for storefront amounts.

The storefront returns amounts as decimal strings; thresholds arrive in
minor units (cents). Everything is converted to Decimal before arithmetic.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

MONEY_PRECISION = Decimal("0.01")

Number = Union[str, int, float, Decimal, None]


def to_decimal(value: Number) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def from_minor_units(amount: Number) -> Decimal:
    """Convert minor units (cents) to a decimal amount: 15000 -> 150.00."""
    return to_decimal(amount) / Decimal(100)


def round_money(value: Number) -> Decimal:
    """Round a monetary value to two decimal places (half up)."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def format_money(value: Number, symbol: str = "$") -> str:
    """Format as ``$12.50``."""
    return f"{symbol}{round_money(value):.2f}"
