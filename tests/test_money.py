"""
Tests for `domain/money.py`.

Covers:
- Floats are read through their shortest repr, never their binary expansion.
- Rounding to cents is half-up.
- Wire strings always carry two fractional digits and parse back exactly.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from domain.money import format_money, parse_money, quantize_money, to_decimal, to_money


def test_float_input_does_not_drift() -> None:
    assert to_decimal(9.99) == Decimal("9.99")
    assert to_money(0.1) + to_money(0.2) == Decimal("0.30")


@pytest.mark.parametrize(
    "value, expected",
    [("1.005", "1.01"), ("1.004", "1.00"), ("2.675", "2.68"), (5, "5.00"), ("12.3", "12.30")],
)
def test_to_money_rounds_half_up(value, expected) -> None:
    assert to_money(value) == Decimal(expected)
    assert format_money(to_money(value)) == expected


@pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity", [1], object()])
def test_to_decimal_rejects_non_numbers(value) -> None:
    with pytest.raises(ValueError):
        to_decimal(value)


def test_negative_zero_collapses() -> None:
    assert format_money(quantize_money(Decimal("-0.001"))) == "0.00"


@pytest.mark.parametrize("text", ["0.00", "0.01", "25.48", "1234567.89"])
def test_wire_string_round_trips(text) -> None:
    amount = parse_money(text)

    assert format_money(amount) == text
    assert parse_money(format_money(amount)) == amount
