"""
Admin console endpoints: order workflow, product maintenance and user roles.

Every route requires the admin role.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import (
    AccountServiceDep,
    AdminUserId,
    CatalogServiceDep,
    OrderServiceDep,
)
from storefront.core.exceptions import ValidationError
from storefront.core.logging import get_logger
from storefront.schemas.accounts import UserListResponse, UserSummaryResponse
from storefront.schemas.catalog import (
    ProductCreateRequest,
    ProductResponse,
    ProductUpdateRequest,
)
from storefront.schemas.orders import (
    AdminOrderListResponse,
    AdminOrderResponse,
    OrderResponse,
    OrderStatisticsResponse,
    OrderStatusUpdateRequest,
    TrackingUpdateRequest,
)
from storefront.services.orders.enums import OrderStatus

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus.from_string(value)
    except ValueError as e:
        raise ValidationError(str(e), code="INVALID_STATUS", status=value) from e


# Orders


@router.get(
    "/orders/stats",
    response_model=OrderStatisticsResponse,
    summary="Order dashboard statistics",
)
async def get_order_statistics(
    admin_id: AdminUserId,
    orders: OrderServiceDep,
) -> OrderStatisticsResponse:
    return OrderStatisticsResponse(**await orders.get_statistics())


@router.get(
    "/orders",
    response_model=AdminOrderListResponse,
    summary="List all orders",
)
async def list_all_orders(
    admin_id: AdminUserId,
    orders: OrderServiceDep,
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    search: Optional[str] = Query(None, max_length=100, description="Order number or customer name"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> AdminOrderListResponse:
    order_status = _parse_status(status_filter) if status_filter else None
    rows, total = await orders.list_all_orders(
        status=order_status,
        search=search,
        page=page,
        page_size=page_size,
    )
    items = [
        AdminOrderResponse.model_validate(order).model_copy(update={"customer_name": name})
        for order, name in rows
    ]
    return AdminOrderListResponse(items=items, total=total, page=page, page_size=page_size)


@router.patch(
    "/orders/{order_id}/status",
    response_model=OrderResponse,
    summary="Change order status",
)
async def update_order_status(
    order_id: UUID,
    request: OrderStatusUpdateRequest,
    admin_id: AdminUserId,
    orders: OrderServiceDep,
) -> OrderResponse:
    target = _parse_status(request.status)
    logger.info(
        "Admin status change requested",
        order_id=str(order_id),
        target_status=target.value,
        admin_id=str(admin_id),
    )
    order = await orders.transition_status(order_id, target, admin_id, request.notes)
    return OrderResponse.model_validate(order)


@router.patch(
    "/orders/{order_id}/tracking",
    response_model=OrderResponse,
    summary="Set tracking number",
)
async def update_tracking_number(
    order_id: UUID,
    request: TrackingUpdateRequest,
    admin_id: AdminUserId,
    orders: OrderServiceDep,
) -> OrderResponse:
    order = await orders.set_tracking_number(order_id, request.tracking_number)
    return OrderResponse.model_validate(order)


# Products


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    admin_id: AdminUserId,
    catalog: CatalogServiceDep,
) -> ProductResponse:
    product = await catalog.create_product(request.model_dump())
    return ProductResponse.model_validate(product)


@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="Update product",
)
async def update_product(
    product_id: UUID,
    request: ProductUpdateRequest,
    admin_id: AdminUserId,
    catalog: CatalogServiceDep,
) -> ProductResponse:
    product = await catalog.update_product(product_id, request.model_dump(exclude_unset=True))
    return ProductResponse.model_validate(product)


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete product",
)
async def delete_product(
    product_id: UUID,
    admin_id: AdminUserId,
    catalog: CatalogServiceDep,
) -> None:
    await catalog.delete_product(product_id)


# Users


@router.get("/users", response_model=UserListResponse, summary="List users")
async def list_users(
    admin_id: AdminUserId,
    accounts: AccountServiceDep,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> UserListResponse:
    users, total = await accounts.list_users(
        search=search,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return UserListResponse(
        items=[
            UserSummaryResponse(
                id=u.profile.id,
                full_name=u.profile.full_name,
                phone=u.profile.phone,
                is_admin=u.is_admin,
                created_at=u.profile.created_at,
            )
            for u in users
        ],
        total=total,
    )


@router.post(
    "/users/{user_id}/admin-role",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Grant admin role",
)
async def grant_admin_role(
    user_id: UUID,
    admin_id: AdminUserId,
    accounts: AccountServiceDep,
) -> None:
    await accounts.grant_admin(user_id)
    logger.info("Admin role granted via API", target_user_id=str(user_id), admin_id=str(admin_id))


@router.delete(
    "/users/{user_id}/admin-role",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke admin role",
)
async def revoke_admin_role(
    user_id: UUID,
    admin_id: AdminUserId,
    accounts: AccountServiceDep,
) -> None:
    await accounts.revoke_admin(user_id, acting_user_id=admin_id)
