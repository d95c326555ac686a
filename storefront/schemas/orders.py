"""
Order schemas for API request/response validation.

This module defines the checkout request, order detail and list responses,
and the admin status, tracking and statistics schemas.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.services.orders.enums import OrderStatus, PaymentMethod, PaymentStatus


class PlaceOrderRequest(BaseModel):
    """Checkout request.

    The payment method is validated by the order service so an unsupported
    value is reported as a validation error.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    address_id: UUID = Field(..., description="Saved address to ship to")
    payment_method: str = Field(..., max_length=20, description="cod, upi or card")
    promo_code: Optional[str] = Field(None, max_length=50)


class RefundRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdateRequest(BaseModel):
    """Admin request to move an order to a new status."""

    status: str = Field(..., description="Target status")
    notes: Optional[str] = Field(None, max_length=1000)


class TrackingUpdateRequest(BaseModel):
    tracking_number: Optional[str] = Field(None, max_length=100)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: Optional[UUID] = None
    product_name: str
    quantity: int
    price: Decimal
    line_total: Decimal


class OrderStatusHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: OrderStatus
    notes: Optional[str] = None
    changed_by: Optional[UUID] = None
    created_at: datetime


class OrderResponse(BaseModel):
    """Order with items and status history."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    order_number: str
    user_id: UUID
    status: OrderStatus
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    subtotal: Decimal
    discount_amount: Decimal
    shipping_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    promo_code: Optional[str] = None
    shipping_address: dict[str, Any]
    tracking_number: Optional[str] = None
    can_cancel: bool
    confirmed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemResponse]
    status_history: list[OrderStatusHistoryResponse]


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    page_size: int


class AdminOrderResponse(OrderResponse):
    """Order as shown in the admin console."""

    customer_name: Optional[str] = None


class AdminOrderListResponse(BaseModel):
    items: list[AdminOrderResponse]
    total: int
    page: int
    page_size: int


class OrderStatisticsResponse(BaseModel):
    total_orders: int
    status_breakdown: dict[str, int]
    total_revenue: Decimal
    average_order_value: Decimal
    pending_orders: int
