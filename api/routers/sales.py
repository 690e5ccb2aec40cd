"""
Sales API Endpoints.

Endpoints for recording, listing, reading and updating point-of-sale
transactions. Domain errors raised by the service are translated to HTTP
responses by the exception handlers registered in `api.main`.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_current_principal, get_sale_service
from api.models import (
    ErrorResponse,
    SaleCreateRequest,
    SaleEnvelope,
    SaleListResponse,
    SaleResponse,
    SaleUpdateRequest,
)
from domain.principal import Principal
from domain.sale import Sale
from services.sale_service import SaleService

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
}


def _to_response(sale: Sale) -> SaleResponse:
    return SaleResponse(**sale.to_wire())


@router.post(
    "/sales",
    response_model=SaleEnvelope,
    status_code=201,
    responses=_ERRORS,
    summary="Record Sale",
    description="Record a sale. The total is always derived from the items."
)
def create_sale(
    request: SaleCreateRequest,
    principal: Principal = Depends(get_current_principal),
    service: SaleService = Depends(get_sale_service),
):
    """
    Record a new sale for the acting principal.

    **Rules:**
    - `items` must contain at least one product
    - `payment_method` is required (`cash` or `card`)
    - `status` defaults to `completed`, `sale_date` to now
    - `user_id` assigns the sale to someone else (admin/manager only)
    - any `total_amount` sent by the client is ignored

    **Example request:**
    ```json
    {
      "items": [
        {"product_id": 1, "name": "Widget", "price_at_sale": 9.99, "quantity": 2},
        {"product_id": 2, "name": "Gadget", "price_at_sale": 5.50, "quantity": 1}
      ],
      "payment_method": "cash"
    }
    ```
    Response `sale.total_amount` is `"25.48"`.
    """
    sale = service.create_sale(principal, request.model_dump())
    return SaleEnvelope(message="Sale recorded successfully", sale=_to_response(sale))


@router.get(
    "/sales",
    response_model=SaleListResponse,
    responses=_ERRORS,
    summary="List Sales",
    description="List sales, newest first. Sellers only ever see their own sales."
)
def list_sales(
    status: Optional[str] = Query(None, description="Filter by status ('completed' or 'cancelled')"),
    user: Optional[str] = Query(None, description="Filter by owner id (ignored for sellers)"),
    principal: Principal = Depends(get_current_principal),
    service: SaleService = Depends(get_sale_service),
):
    sales = service.list_sales(principal, status=status, user=user)
    return SaleListResponse(count=len(sales), sales=[_to_response(sale) for sale in sales])


@router.get(
    "/sales/{sale_id}",
    response_model=SaleEnvelope,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Get Sale",
    description="Get one sale. Sellers may only read their own sales."
)
def get_sale(
    sale_id: str,
    principal: Principal = Depends(get_current_principal),
    service: SaleService = Depends(get_sale_service),
):
    sale = service.get_sale(principal, sale_id)
    return SaleEnvelope(sale=_to_response(sale))


@router.put(
    "/sales/{sale_id}",
    response_model=SaleEnvelope,
    responses={**_ERRORS, 404: {"model": ErrorResponse}},
    summary="Update Sale",
    description="Update a sale (admin/manager only). Changing items recomputes the total."
)
def update_sale(
    sale_id: str,
    request: SaleUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    service: SaleService = Depends(get_sale_service),
):
    """
    Update any of `items`, `payment_method`, `status`, `sale_date`, `user_id`.

    Omitted fields keep their stored values. The total is re-derived before
    the write, so it always matches the items.
    """
    sale = service.update_sale(principal, sale_id, request.model_dump(exclude_unset=True))
    return SaleEnvelope(message="Sale updated successfully", sale=_to_response(sale))
