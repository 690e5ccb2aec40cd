"""
API Request and Response Models.

Pydantic models for request bodies and serialized responses.

Request models are deliberately loose (`Any`): the domain normalizer is the
one place that parses and validates sale input, so the API only has to make
sure it received a JSON object. Unknown keys (such as a client-computed
`total_amount`) are dropped.

Monetary fields in responses are strings with exactly two fractional digits.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


# ============================================================================
# Sale Request Models
# ============================================================================

class SaleCreateRequest(BaseModel):
    """Request to record a sale."""
    items: Any = None
    payment_method: Any = None
    status: Any = None
    sale_date: Any = None
    user_id: Any = None

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {"product_id": 1, "name": "Widget", "price_at_sale": 9.99, "quantity": 2},
                    {"product_id": 2, "name": "Gadget", "price_at_sale": "5.50", "quantity": 1}
                ],
                "payment_method": "cash",
                "status": "completed",
                "sale_date": "2025-01-01T12:00:00Z"
            }
        }


class SaleUpdateRequest(BaseModel):
    """Request to update a sale. Every field is optional."""
    items: Any = None
    payment_method: Any = None
    status: Any = None
    sale_date: Any = None
    user_id: Any = None

    class Config:
        json_schema_extra = {
            "example": {
                "items": [
                    {"product_id": 3, "name": "Part", "price_at_sale": "1.005", "quantity": 3}
                ],
                "status": "cancelled"
            }
        }


# ============================================================================
# Sale Response Models
# ============================================================================

class SaleItemResponse(BaseModel):
    """Single line item of a sale."""
    product_id: int
    name: str
    price_at_sale: str
    quantity: int


class SaleResponse(BaseModel):
    """A sale in its external representation."""
    id: Optional[str] = None
    sale_date: str
    user_id: str
    items: List[SaleItemResponse]
    status: str
    payment_method: str
    total_amount: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174003",
                "sale_date": "2025-01-01T12:00:00+00:00",
                "user_id": "123e4567-e89b-12d3-a456-426614174002",
                "items": [
                    {"product_id": 1, "name": "Widget", "price_at_sale": "9.99", "quantity": 2},
                    {"product_id": 2, "name": "Gadget", "price_at_sale": "5.50", "quantity": 1}
                ],
                "status": "completed",
                "payment_method": "cash",
                "total_amount": "25.48",
                "created_at": "2025-01-01T12:00:01+00:00",
                "updated_at": "2025-01-01T12:00:01+00:00"
            }
        }


class SaleEnvelope(BaseModel):
    """Response wrapping a single sale."""
    success: bool = True
    message: Optional[str] = None
    sale: SaleResponse


class SaleListResponse(BaseModel):
    """Response for sale listing."""
    success: bool = True
    count: int
    sales: List[SaleResponse]


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    message: str

    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Item at position 2 must have an integer quantity greater than 0"
            }
        }
