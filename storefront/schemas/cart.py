"""
Cart and wishlist schemas for API request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.catalog import ProductResponse
from storefront.services.cart.service import CartView


class AddToCartRequest(BaseModel):
    """Request to add a product to the cart."""

    product_id: UUID = Field(..., description="Product to add")
    quantity: int = Field(default=1, description="Quantity the cart line ends up with")


class UpdateCartItemRequest(BaseModel):
    """Request to change the quantity of a cart line."""

    quantity: int = Field(..., description="New quantity (at least 1)")


class CartItemResponse(BaseModel):
    """Cart line with its live unit price."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    quantity: int
    product: ProductResponse
    created_at: datetime


class CartSummary(BaseModel):
    """Priced cart totals."""

    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    item_count: int
    promo_code: Optional[str] = None
    amount_to_free_shipping: Decimal


class CartResponse(BaseModel):
    """Cart lines and summary."""

    items: list[CartItemResponse]
    summary: CartSummary

    @classmethod
    def from_view(cls, view: CartView) -> "CartResponse":
        return cls(
            items=[CartItemResponse.model_validate(item) for item in view.items],
            summary=CartSummary(**view.summary.model_dump()),
        )


class WishlistItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    product: ProductResponse
    created_at: datetime


class WishlistToggleResponse(BaseModel):
    product_id: UUID
    in_wishlist: bool
