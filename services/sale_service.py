"""
Sale service: create, list, read and update sales on behalf of a principal.

Handles:
- Normalizing raw request payloads into typed domain values
- Role/ownership checks via domain.policy
- Deriving the total before every write (domain.sale.validate_and_derive)

Check order for single-sale operations:
1. identifier shape        -> ValidationError
2. existence               -> NotFoundError
3. role / ownership        -> AuthorizationError
4. payload validation      -> ValidationError
5. write

Each call is one independent unit of work. Concurrent updates of the same sale
are not coordinated; the later write wins.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.errors import AuthorizationError, NotFoundError, ValidationError
from domain.policy import (
    SaleFilter,
    ensure_can_update,
    ensure_can_view,
    resolve_sale_owner,
    scope_sale_filter,
)
from domain.principal import Principal
from domain.sale import PaymentMethod, Sale, SaleStatus, validate_and_derive
from domain.sale_item import normalize_items
from domain.time import parse_sale_date, utc_now
from repositories.principal_repository import PrincipalDirectory
from repositories.sale_repository import SaleRepository

logger = logging.getLogger(__name__)


def parse_uuid(value: Any, message: str, field: str) -> UUID:
    """Parse an identifier, raising ValidationError(message) if malformed."""

    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(message, field=field) from None


class SaleService:
    def __init__(
        self,
        sale_repository: SaleRepository,
        principal_directory: PrincipalDirectory,
    ) -> None:
        self.sale_repository = sale_repository
        self.principal_directory = principal_directory

    def _require_existing_owner(self, owner_id: UUID) -> None:
        if not self.principal_directory.principal_exists(owner_id):
            raise NotFoundError("Assigned user not found")

    def _load_sale(self, raw_sale_id: Any) -> Sale:
        sale_id = parse_uuid(raw_sale_id, "Invalid sale id", "id")
        sale = self.sale_repository.find_by_id(sale_id)
        if sale is None:
            raise NotFoundError("Sale not found")
        return sale

    def create_sale(self, principal: Principal, payload: Mapping[str, Any]) -> Sale:
        """
        Record a new sale.

        Args:
            principal: Acting principal
            payload: Raw request body with items, payment_method and optional
                status, sale_date, user_id. Any total_amount is ignored.

        Returns:
            The stored Sale, with total_amount derived from its items
        """

        items = normalize_items(payload.get("items"))

        raw_payment_method = payload.get("payment_method")
        if not raw_payment_method:
            raise ValidationError("Payment method is required", field="payment_method")
        payment_method = PaymentMethod.parse(raw_payment_method)

        raw_status = payload.get("status")
        status = SaleStatus.parse(raw_status) if raw_status else SaleStatus.COMPLETED

        raw_sale_date = payload.get("sale_date")
        sale_date = parse_sale_date(raw_sale_date) if raw_sale_date else utc_now()

        requested_owner = None
        raw_owner = payload.get("user_id")
        if raw_owner:
            requested_owner = parse_uuid(raw_owner, "Invalid assigned user", "user_id")

        owner_id = resolve_sale_owner(principal, requested_owner)
        if owner_id != principal.principal_id:
            self._require_existing_owner(owner_id)

        sale = validate_and_derive(
            Sale(
                owner_id=owner_id,
                items=items,
                payment_method=payment_method,
                status=status,
                sale_date=sale_date,
            )
        )
        stored = self.sale_repository.insert(sale)

        logger.info(
            "Sale %s recorded by %s (%s) for owner %s, total %s",
            stored.sale_id,
            principal.principal_id,
            principal.role.value,
            stored.owner_id,
            stored.total_amount,
        )
        return stored

    def list_sales(
        self,
        principal: Principal,
        status: Optional[str] = None,
        user: Optional[str] = None,
    ) -> List[Sale]:
        """
        List sales visible to the principal, newest sale_date first.

        Sellers always get their own sales; a `user` filter from a seller is
        ignored rather than rejected.
        """

        requested = SaleFilter(status=SaleStatus.parse(status) if status else None)
        if user and principal.is_elevated:
            requested = replace(
                requested,
                owner_id=parse_uuid(user, "Invalid user parameter", "user"),
            )

        scoped = scope_sale_filter(principal, requested)
        sales = self.sale_repository.find(scoped)
        logger.debug(
            "Listed %d sales for %s (owner=%s status=%s)",
            len(sales),
            principal.principal_id,
            scoped.owner_id,
            scoped.status,
        )
        return sales

    def get_sale(self, principal: Principal, sale_id: Any) -> Sale:
        sale = self._load_sale(sale_id)
        try:
            ensure_can_view(principal, sale)
        except AuthorizationError:
            logger.warning(
                "Principal %s (%s) denied read of sale %s",
                principal.principal_id,
                principal.role.value,
                sale.sale_id,
            )
            raise
        return sale

    def update_sale(self, principal: Principal, sale_id: Any, payload: Mapping[str, Any]) -> Sale:
        """
        Update an existing sale (admin/manager only).

        Only supplied fields change. When items are supplied they are
        re-normalized; the total is re-derived before every write regardless,
        so a caller-supplied total_amount never survives.
        """

        sale = self._load_sale(sale_id)
        try:
            ensure_can_update(principal)
        except AuthorizationError:
            logger.warning(
                "Principal %s (%s) denied update of sale %s",
                principal.principal_id,
                principal.role.value,
                sale.sale_id,
            )
            raise

        changes: dict[str, Any] = {}

        if payload.get("items") is not None:
            changes["items"] = normalize_items(payload["items"])
        if payload.get("payment_method"):
            changes["payment_method"] = PaymentMethod.parse(payload["payment_method"])
        if payload.get("status"):
            changes["status"] = SaleStatus.parse(payload["status"])
        if payload.get("sale_date"):
            changes["sale_date"] = parse_sale_date(payload["sale_date"])
        if payload.get("user_id"):
            owner_id = parse_uuid(payload["user_id"], "Invalid assigned user", "user_id")
            if owner_id != sale.owner_id:
                self._require_existing_owner(owner_id)
            changes["owner_id"] = owner_id

        revised = validate_and_derive(replace(sale, **changes))
        stored = self.sale_repository.update(revised)

        logger.info(
            "Sale %s updated by %s (%s): fields=%s total %s",
            stored.sale_id,
            principal.principal_id,
            principal.role.value,
            sorted(changes),
            stored.total_amount,
        )
        return stored


__all__ = ["SaleService", "parse_uuid"]
