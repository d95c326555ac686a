"""
Order endpoints for customers: checkout, order tracking, cancellation and
refund requests.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Header, Query, status

from storefront.api.deps import CurrentUserId, OrderServiceDep
from storefront.core.logging import get_logger
from storefront.schemas.orders import (
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    RefundRequest,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place order from cart",
    description=(
        "Create an order from the current cart. Send an Idempotency-Key header "
        "to make retries safe: a repeated key returns the original order."
    ),
)
async def place_order(
    request: PlaceOrderRequest,
    user_id: CurrentUserId,
    orders: OrderServiceDep,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key", max_length=255),
) -> OrderResponse:
    logger.info(
        "Placing order",
        user_id=str(user_id),
        payment_method=request.payment_method,
        has_idempotency_key=idempotency_key is not None,
    )

    order = await orders.place_order(
        user_id=user_id,
        address_id=request.address_id,
        payment_method=request.payment_method,
        promo_code=request.promo_code,
        idempotency_key=idempotency_key,
    )
    return OrderResponse.model_validate(order)


@router.get("", response_model=OrderListResponse, summary="List own orders")
async def list_orders(
    user_id: CurrentUserId,
    orders: OrderServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> OrderListResponse:
    items, total = await orders.list_orders(user_id, page=page, page_size=page_size)
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{order_id}", response_model=OrderResponse, summary="Get own order")
async def get_order(
    order_id: UUID,
    user_id: CurrentUserId,
    orders: OrderServiceDep,
) -> OrderResponse:
    order = await orders.get_order(user_id, order_id)
    return OrderResponse.model_validate(order)


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel own order",
    description="Only pending or processing orders can be cancelled.",
)
async def cancel_order(
    order_id: UUID,
    user_id: CurrentUserId,
    orders: OrderServiceDep,
) -> OrderResponse:
    order = await orders.cancel_by_customer(user_id, order_id)
    return OrderResponse.model_validate(order)


@router.post(
    "/{order_id}/refund-request",
    response_model=OrderResponse,
    summary="Request refund of a delivered order",
)
async def request_refund(
    order_id: UUID,
    user_id: CurrentUserId,
    orders: OrderServiceDep,
    request: Optional[RefundRequest] = None,
) -> OrderResponse:
    order = await orders.request_refund(
        user_id,
        order_id,
        reason=request.reason if request else None,
    )
    return OrderResponse.model_validate(order)
