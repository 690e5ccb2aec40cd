"""
Domain: fixed-point money values.

All monetary fields (price_at_sale, total_amount) are Decimals with exactly two
fractional digits. Binary floats are only ever accepted as input and are
converted through their shortest repr (str) so 9.99 stays 9.99.

Rounding is ROUND_HALF_UP to cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a loosely typed numeric value to an exact Decimal.

    Raises ValueError for booleans, None, non-numeric strings and
    non-finite values (NaN, Infinity).
    """

    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Not a number: {value!r}") from None
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def quantize_money(amount: Decimal) -> Decimal:
    """Round a Decimal to cents. Negative zero collapses to 0.00."""

    try:
        result = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount out of range: {amount}") from None
    return ZERO if result.is_zero() else result


def to_money(value: Any) -> Decimal:
    """Parse any accepted numeric input into a 2-place Decimal."""

    return quantize_money(to_decimal(value))


def format_money(amount: Decimal) -> str:
    """Canonical wire form: exactly two fractional digits, e.g. '12.30'."""

    return f"{quantize_money(amount):.2f}"


def parse_money(text: str) -> Decimal:
    """Inverse of format_money."""

    return to_money(text)


__all__ = [
    "CENTS",
    "ZERO",
    "to_decimal",
    "quantize_money",
    "to_money",
    "format_money",
    "parse_money",
]
