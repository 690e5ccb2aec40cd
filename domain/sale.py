"""
Domain: Sale aggregate.

A Sale is one point-of-sale transaction: an ordered, non-empty list of line
items plus payment method, status, owner and timestamps. The Sale and its
items are validated and persisted as one unit.

Invariants for any stored or returned Sale:
- items is non-empty.
- total_amount == round(sum(price_at_sale * quantity), 2), rounded half-up.
  It is derived by `validate_and_derive` before every write and is never
  taken from caller input.
- total_amount > 0.
- status and payment_method are valid enum members.

The storage layer does not recompute anything; callers run
`validate_and_derive` explicitly before insert/update.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple
from uuid import UUID

from .errors import ValidationError
from .money import ZERO, format_money, parse_money, quantize_money, to_decimal
from .sale_item import EMPTY_ITEMS_MESSAGE, SaleItem, coerce_int
from .time import parse_utc_datetime, require_utc_timestamp


class SaleStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @staticmethod
    def parse(value: Any) -> "SaleStatus":
        if isinstance(value, SaleStatus):
            return value
        if isinstance(value, str):
            try:
                return SaleStatus(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError("Invalid sale status", field="status")


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"

    @staticmethod
    def parse(value: Any) -> "PaymentMethod":
        if isinstance(value, PaymentMethod):
            return value
        if isinstance(value, str):
            try:
                return PaymentMethod(value.strip().lower())
            except ValueError:
                pass
        raise ValidationError("Invalid payment method", field="payment_method")


@dataclass(frozen=True, slots=True)
class Sale:
    """
    Immutable Sale aggregate.

    sale_id, created_at and updated_at are assigned by persistence.
    Transitions return new instances (dataclasses.replace).
    """

    owner_id: UUID
    items: Tuple[SaleItem, ...]
    payment_method: PaymentMethod
    sale_date: datetime
    status: SaleStatus = SaleStatus.COMPLETED
    total_amount: Decimal = ZERO
    sale_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("sale_date", self.sale_date)
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)
        if self.updated_at is not None:
            require_utc_timestamp("updated_at", self.updated_at)

    def to_wire(self) -> Dict[str, Any]:
        """
        External representation.

        Money fields become strings with exactly two fractional digits so that
        no client ever sees a binary float.
        """

        return {
            "id": str(self.sale_id) if self.sale_id is not None else None,
            "sale_date": self.sale_date.isoformat(),
            "user_id": str(self.owner_id),
            "items": [item_to_wire(item) for item in self.items],
            "status": self.status.value,
            "payment_method": self.payment_method.value,
            "total_amount": format_money(self.total_amount),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @staticmethod
    def from_wire(data: Mapping[str, Any]) -> "Sale":
        """
        Rebuild a Sale from its external representation.

        Values are trusted to have been produced by `to_wire` (or an equivalent
        storage row); use the service layer for untrusted input.
        """

        sale_id = data.get("id")
        return Sale(
            sale_id=UUID(str(sale_id)) if sale_id else None,
            owner_id=UUID(str(data["user_id"])),
            items=tuple(item_from_wire(item) for item in data["items"]),
            payment_method=PaymentMethod.parse(data["payment_method"]),
            status=SaleStatus.parse(data.get("status") or SaleStatus.COMPLETED.value),
            sale_date=parse_utc_datetime(data["sale_date"]),
            total_amount=parse_money(str(data["total_amount"])),
            created_at=parse_utc_datetime(data["created_at"]) if data.get("created_at") else None,
            updated_at=parse_utc_datetime(data["updated_at"]) if data.get("updated_at") else None,
        )


def item_to_wire(item: SaleItem) -> Dict[str, Any]:
    return {
        "product_id": item.product_id,
        "name": item.name,
        "price_at_sale": format_money(item.price_at_sale),
        "quantity": item.quantity,
    }


def item_from_wire(data: Mapping[str, Any]) -> SaleItem:
    return SaleItem(
        product_id=int(data["product_id"]),
        name=str(data["name"]),
        price_at_sale=parse_money(str(data["price_at_sale"])),
        quantity=int(data["quantity"]),
    )


def compute_total(items: Iterable[SaleItem]) -> Decimal:
    """
    Exact total of a list of items, rounded to cents.

    Every price is re-parsed as a Decimal and every quantity re-checked as a
    positive integer, so an item built outside `normalize_items` cannot slip
    a float or a fractional quantity into the sum.
    """

    total = Decimal("0")
    for item in items:
        try:
            price = to_decimal(item.price_at_sale)
        except ValueError:
            raise ValidationError("A product has an invalid price", field="price_at_sale") from None
        quantity = coerce_int(item.quantity)
        if quantity is None or quantity <= 0:
            raise ValidationError("A product has an invalid quantity", field="quantity")
        total += price * quantity

    try:
        return quantize_money(total)
    except ValueError:
        raise ValidationError("Sale total is out of range", field="total_amount") from None


def validate_and_derive(sale: Sale) -> Sale:
    """
    Validate a Sale and return it with its derived total.

    Run before every insert or update. Any total_amount already on `sale`
    is overwritten.
    """

    if not sale.items:
        raise ValidationError(EMPTY_ITEMS_MESSAGE, field="items")

    total = compute_total(sale.items)
    if total <= 0:
        raise ValidationError("Sale total must be greater than zero", field="total_amount")

    return replace(sale, total_amount=total)


__all__ = [
    "SaleStatus",
    "PaymentMethod",
    "Sale",
    "item_to_wire",
    "item_from_wire",
    "compute_total",
    "validate_and_derive",
]
