"""
Sale repository (persistence).

This module provides *only* persistence operations for the Sale aggregate. It
does not enforce business rules and never recomputes or rewrites aggregate
data: callers run `domain.sale.validate_and_derive` before every write.

`SaleRepository` is the collaborator contract used by the service layer;
`SupabaseSaleRepository` implements it on a Supabase (PostgREST) table.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Protocol
from uuid import UUID, uuid4

import httpx
from postgrest.exceptions import APIError
from supabase import Client  # type: ignore[import-not-found]

from domain.errors import NotFoundError, PersistenceError
from domain.policy import SaleFilter
from domain.sale import Sale, item_to_wire
from domain.time import require_utc_timestamp, utc_now
from repositories.client import SALES_TABLE, get_supabase

logger = logging.getLogger(__name__)


class SaleRepository(Protocol):
    def insert(self, sale: Sale) -> Sale:
        """Store a new sale; returns it with sale_id/created_at/updated_at set."""

    def find_by_id(self, sale_id: UUID) -> Optional[Sale]:
        """Return the sale or None."""

    def find(self, sale_filter: SaleFilter) -> List[Sale]:
        """Return matching sales, newest sale_date first."""

    def update(self, sale: Sale) -> Sale:
        """Overwrite a stored sale; returns the revised aggregate."""


def _to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.isoformat()


def _sale_to_row(sale: Sale) -> dict[str, Any]:
    return {
        "user_id": str(sale.owner_id),
        "sale_date_utc": _to_iso_utc(sale.sale_date, name="sale_date"),
        "items": [item_to_wire(item) for item in sale.items],
        "status": sale.status.value,
        "payment_method": sale.payment_method.value,
        "total_amount": str(sale.total_amount),
    }


def _row_to_sale(row: Mapping[str, Any]) -> Sale:
    """Convert a Supabase row into a Sale."""

    return Sale.from_wire(
        {
            "id": row["sale_id"],
            "user_id": row["user_id"],
            "sale_date": row["sale_date_utc"],
            "items": row.get("items") or [],
            "status": row.get("status"),
            "payment_method": row["payment_method"],
            "total_amount": row["total_amount"],
            "created_at": row.get("created_at_utc"),
            "updated_at": row.get("updated_at_utc"),
        }
    )


class SupabaseSaleRepository:
    """SaleRepository backed by the Supabase `sales` table."""

    def __init__(self, client: Optional[Client] = None, table: str = SALES_TABLE) -> None:
        self._client = client
        self._table = table

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def _execute(self, action: str, build: Callable[[Client], Any]) -> List[Mapping[str, Any]]:
        """Run a query and return its rows, translating client failures to PersistenceError."""

        try:
            response = build(self.client).execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error("Supabase %s on table %s failed: %s", action, self._table, e)
            raise PersistenceError(f"Failed to {action}") from e

        error = getattr(response, "error", None)
        if error:
            logger.error("Supabase %s on table %s returned error: %s", action, self._table, error)
            raise PersistenceError(f"Failed to {action}")

        return getattr(response, "data", None) or []

    def insert(self, sale: Sale) -> Sale:
        """
        Insert a new sale aggregate.

        Returns:
            The stored Sale with sale_id, created_at and updated_at assigned
        """

        sale_id = uuid4()
        now = utc_now()

        payload = _sale_to_row(sale)
        payload.update(
            {
                "sale_id": str(sale_id),
                "created_at_utc": now.isoformat(),
                "updated_at_utc": now.isoformat(),
            }
        )

        self._execute("record sale", lambda c: c.table(self._table).insert(payload))

        return Sale(
            sale_id=sale_id,
            owner_id=sale.owner_id,
            items=sale.items,
            payment_method=sale.payment_method,
            status=sale.status,
            sale_date=sale.sale_date,
            total_amount=sale.total_amount,
            created_at=now,
            updated_at=now,
        )

    def find_by_id(self, sale_id: UUID) -> Optional[Sale]:
        """
        Retrieve a single sale by its ID.

        Returns:
            Sale or None if not found
        """

        rows = self._execute(
            "get sale",
            lambda c: c.table(self._table).select("*").eq("sale_id", str(sale_id)).limit(1),
        )
        if not rows:
            return None
        return _row_to_sale(rows[0])

    def find(self, sale_filter: SaleFilter) -> List[Sale]:
        """
        Retrieve sales matching the filter, newest sale_date first.

        Returns:
            List[Sale] (possibly empty)
        """

        def build(c: Client) -> Any:
            query = c.table(self._table).select("*")
            if sale_filter.owner_id is not None:
                query = query.eq("user_id", str(sale_filter.owner_id))
            if sale_filter.status is not None:
                query = query.eq("status", sale_filter.status.value)
            return query.order("sale_date_utc", desc=True)

        rows = self._execute("list sales", build)
        return [_row_to_sale(row) for row in rows]

    def update(self, sale: Sale) -> Sale:
        """
        Overwrite the stored fields of an existing sale.

        Last write wins; there is no version check.
        """

        if sale.sale_id is None:
            raise ValueError("Cannot update a sale without sale_id")

        payload = _sale_to_row(sale)
        payload["updated_at_utc"] = utc_now().isoformat()

        rows = self._execute(
            "update sale",
            lambda c: c.table(self._table).update(payload).eq("sale_id", str(sale.sale_id)),
        )
        if not rows:
            raise NotFoundError("Sale not found")
        return _row_to_sale(rows[0])


__all__ = [
    "SaleRepository",
    "SupabaseSaleRepository",
]
