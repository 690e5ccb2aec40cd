"""
Domain: role-scoped authorization policy for sales.

Capability matrix:

| operation                   | admin / manager       | seller                          |
|-----------------------------|-----------------------|---------------------------------|
| create (own)                | allowed               | allowed                         |
| create (assign other owner) | allowed               | forbidden                       |
| list                        | any sale, any filter  | own sales only; owner filter    |
|                             |                       | from the request is overridden  |
| read one                    | any sale              | own sale only                   |
| update                      | allowed               | forbidden, even for own sales   |

Pure functions only. Existence checks (sale or owner) happen in the service
layer before these are called, so a forbidden outcome never depends on
anything but the principal and the already-loaded sale.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional
from uuid import UUID

from .errors import AuthorizationError
from .principal import Principal
from .sale import Sale, SaleStatus


@dataclass(frozen=True, slots=True)
class SaleFilter:
    """Query filter handed to the persistence layer (sorted by sale_date desc)."""

    owner_id: Optional[UUID] = None
    status: Optional[SaleStatus] = None


def resolve_sale_owner(principal: Principal, requested_owner_id: Optional[UUID]) -> UUID:
    """
    Decide who owns a new sale.

    No owner requested (or the principal itself) -> the principal.
    Another owner -> only admins and managers may assign it.
    """

    if requested_owner_id is None or principal.owns(requested_owner_id):
        return principal.principal_id
    if not principal.is_elevated:
        raise AuthorizationError("You are not allowed to assign sales to other users")
    return requested_owner_id


def scope_sale_filter(principal: Principal, requested: SaleFilter) -> SaleFilter:
    """Sellers only ever see their own sales, whatever owner they asked for."""

    if principal.is_elevated:
        return requested
    return replace(requested, owner_id=principal.principal_id)


def ensure_can_view(principal: Principal, sale: Sale) -> None:
    if principal.is_elevated or principal.owns(sale.owner_id):
        return
    raise AuthorizationError("You are not allowed to view this sale")


def ensure_can_update(principal: Principal) -> None:
    if not principal.is_elevated:
        raise AuthorizationError("Only an admin or manager can modify sales")


__all__ = [
    "SaleFilter",
    "resolve_sale_owner",
    "scope_sale_filter",
    "ensure_can_view",
    "ensure_can_update",
]
