"""
Domain: sale line items and their normalization.

`normalize_items` is the single parse-and-validate step for raw line items
coming from a request payload. It turns an untyped list of mappings into an
ordered tuple of SaleItem records, or raises a ValidationError.

Rules per item (1-based position i):
- product_id: required, integral, > 0
- name: required string, length >= 2 after trimming
- quantity: required, integral, >= 1 (fractional values rejected)
- price_at_sale: required, finite, >= 0; stored with two fractional digits

Validation stops at the first invalid item. The input is never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Tuple

from .errors import ValidationError
from .money import quantize_money, to_decimal

EMPTY_ITEMS_MESSAGE = "Sale must contain at least one product"
MIN_NAME_LENGTH = 2
# Bound checked before int() so exponent forms like "1e999999999" never expand.
MAX_INT_DIGITS = 18


@dataclass(frozen=True, slots=True)
class SaleItem:
    """Canonical line item: what was sold, at which unit price, how many."""

    product_id: int
    name: str
    price_at_sale: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.price_at_sale * self.quantity


def coerce_int(value: Any) -> Optional[int]:
    """
    Coerce a loosely typed value to an int, or None if it is not integral.

    Accepts ints, integral floats (3.0) and integral numeric strings ("3",
    "3.0"). Booleans are not numbers here, and values with more than
    MAX_INT_DIGITS integer digits are rejected.
    """

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    try:
        number = to_decimal(value)
    except ValueError:
        return None
    if number.adjusted() >= MAX_INT_DIGITS:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def _item_error(position: int, field: str, detail: str) -> ValidationError:
    return ValidationError(
        f"Item at position {position} {detail}",
        field=field,
        position=position,
    )


def normalize_item(raw: Any, position: int) -> SaleItem:
    """Validate and canonicalize one raw line item."""

    if not isinstance(raw, Mapping):
        raise _item_error(position, "items", "is not a valid product")

    product_id_raw = raw.get("product_id")
    if product_id_raw is None:
        raise _item_error(position, "product_id", "has no product_id")
    product_id = coerce_int(product_id_raw)
    if product_id is None or product_id <= 0:
        raise _item_error(position, "product_id", "has an invalid product_id")

    name = raw.get("name")
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        raise _item_error(position, "name", "has an invalid name")

    quantity = coerce_int(raw.get("quantity"))
    if quantity is None or quantity <= 0:
        raise _item_error(position, "quantity", "must have an integer quantity greater than 0")

    try:
        price = to_decimal(raw.get("price_at_sale"))
        if price < 0:
            raise ValueError(f"Negative price: {price}")
        price = quantize_money(price)
    except ValueError:
        raise _item_error(position, "price_at_sale", "must have a valid price") from None

    return SaleItem(
        product_id=product_id,
        name=name.strip(),
        price_at_sale=price,
        quantity=quantity,
    )


def normalize_items(raw_items: Any) -> Tuple[SaleItem, ...]:
    """
    Normalize a raw item list into canonical SaleItems.

    Raises ValidationError with EMPTY_ITEMS_MESSAGE if the input is missing,
    empty or not a list-like sequence.
    """

    if (
        not isinstance(raw_items, Sequence)
        or isinstance(raw_items, (str, bytes, bytearray))
        or len(raw_items) == 0
    ):
        raise ValidationError(EMPTY_ITEMS_MESSAGE, field="items")

    return tuple(normalize_item(raw, position) for position, raw in enumerate(raw_items, start=1))


__all__ = [
    "EMPTY_ITEMS_MESSAGE",
    "SaleItem",
    "coerce_int",
    "normalize_item",
    "normalize_items",
]
