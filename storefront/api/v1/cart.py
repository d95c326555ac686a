"""
Shopping cart and wishlist endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import CartServiceDep, CurrentUserId, WishlistServiceDep
from storefront.core.logging import get_logger
from storefront.schemas.cart import (
    AddToCartRequest,
    CartItemResponse,
    CartResponse,
    UpdateCartItemRequest,
    WishlistItemResponse,
    WishlistToggleResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])


@router.get(
    "",
    response_model=CartResponse,
    summary="Get cart with pricing summary",
)
async def get_cart(
    user_id: CurrentUserId,
    cart: CartServiceDep,
    promo_code: Optional[str] = Query(None, max_length=50),
) -> CartResponse:
    view = await cart.get_cart(user_id, promo_code)
    return CartResponse.from_view(view)


@router.post(
    "/items",
    response_model=CartItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add product to cart",
)
async def add_to_cart(
    request: AddToCartRequest,
    user_id: CurrentUserId,
    cart: CartServiceDep,
) -> CartItemResponse:
    item = await cart.add_to_cart(user_id, request.product_id, request.quantity)
    return CartItemResponse.model_validate(item)


@router.patch(
    "/items/{item_id}",
    response_model=CartItemResponse,
    summary="Update cart item quantity",
)
async def update_cart_item(
    item_id: UUID,
    request: UpdateCartItemRequest,
    user_id: CurrentUserId,
    cart: CartServiceDep,
) -> CartItemResponse:
    item = await cart.update_quantity(user_id, item_id, request.quantity)
    return CartItemResponse.model_validate(item)


@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove cart item",
)
async def remove_cart_item(
    item_id: UUID,
    user_id: CurrentUserId,
    cart: CartServiceDep,
) -> None:
    await cart.remove_item(user_id, item_id)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear cart",
)
async def clear_cart(user_id: CurrentUserId, cart: CartServiceDep) -> None:
    await cart.clear_cart(user_id)


@wishlist_router.get(
    "",
    response_model=list[WishlistItemResponse],
    summary="List wishlist",
)
async def list_wishlist(
    user_id: CurrentUserId,
    wishlist: WishlistServiceDep,
) -> list[WishlistItemResponse]:
    items = await wishlist.list_items(user_id)
    return [WishlistItemResponse.model_validate(item) for item in items]


@wishlist_router.post(
    "/{product_id}/toggle",
    response_model=WishlistToggleResponse,
    summary="Add or remove a product from the wishlist",
)
async def toggle_wishlist(
    product_id: UUID,
    user_id: CurrentUserId,
    wishlist: WishlistServiceDep,
) -> WishlistToggleResponse:
    in_wishlist = await wishlist.toggle(user_id, product_id)
    return WishlistToggleResponse(product_id=product_id, in_wishlist=in_wishlist)
