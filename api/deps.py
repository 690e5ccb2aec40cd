"""
API dependencies.

Authentication happens upstream: the gateway verifies credentials and forwards
the acting principal as `X-User-Id` (UUID) and `X-User-Role` headers. This
module only turns those headers into a domain Principal.
"""

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException

from domain.principal import Principal, Role
from repositories.principal_repository import SupabasePrincipalDirectory
from repositories.sale_repository import SupabaseSaleRepository
from services.sale_service import SaleService


def get_current_principal(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Principal:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        principal_id = UUID(x_user_id.strip())
        role = Role.parse(x_user_role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid authentication context")

    return Principal(principal_id=principal_id, role=role)


def get_sale_service() -> SaleService:
    return SaleService(
        sale_repository=SupabaseSaleRepository(),
        principal_directory=SupabasePrincipalDirectory(),
    )
