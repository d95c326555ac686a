"""
Order models for checkout and fulfillment tracking.

This module defines the Order header, its line items and the append-only
status history. Prices and the shipping address are copied onto the order at
checkout so later catalogue or address changes never alter a placed order.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database.base import Base, BaseModel, JSONType, UUIDMixin, utcnow
from storefront.services.orders.enums import OrderStatus, PaymentMethod, PaymentStatus


def _enum_values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]


order_status_type = SQLEnum(
    OrderStatus,
    name="order_status",
    values_callable=_enum_values,
    create_constraint=True,
)


class Order(BaseModel):
    """
    Customer order.

    Created once at checkout. Afterwards only the status, payment status,
    tracking number and lifecycle timestamps change; orders are never
    deleted.

    Attributes:
        order_number: Human-readable order number
        user_id: User who placed the order
        status: Current order status
        payment_method: cod, upi or card
        payment_status: Current payment status
        subtotal: Sum of line prices times quantities
        discount_amount: Promo discount
        shipping_amount: Shipping fee
        tax_amount: Tax on the discounted subtotal
        total: subtotal - discount + shipping + tax
        promo_code: Applied promo code, if any
        shipping_address: Address snapshot taken at checkout
        tracking_number: Carrier tracking number set by an admin
        idempotency_key: Client supplied key for safe checkout retries
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Human-readable order number",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="User who placed the order",
    )

    status: Mapped[OrderStatus] = mapped_column(
        order_status_type,
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
        comment="Current order status",
    )

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(
            PaymentMethod,
            name="payment_method",
            values_callable=_enum_values,
            create_constraint=True,
        ),
        nullable=False,
        comment="Payment method chosen at checkout",
    )

    payment_status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(
            PaymentStatus,
            name="payment_status",
            values_callable=_enum_values,
            create_constraint=True,
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
        comment="Current payment status",
    )

    # Pricing fields
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Sum of item price times quantity",
    )

    discount_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Promo discount",
    )

    shipping_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Shipping charges",
    )

    tax_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Tax amount",
    )

    total: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Amount charged",
    )

    promo_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    shipping_address: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        comment="Shipping address snapshot",
    )

    tracking_number: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="Carrier tracking number",
    )

    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Client supplied checkout idempotency key",
    )

    # Lifecycle timestamps
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    shipped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        "OrderItem",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    status_history: Mapped[list["OrderStatusHistory"]] = relationship(
        "OrderStatusHistory",
        back_populates="order",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="OrderStatusHistory.created_at",
    )

    __table_args__ = (
        Index("ix_orders_user_created", "user_id", "created_at"),
        Index("ix_orders_status_created", "status", "created_at"),
        UniqueConstraint("user_id", "idempotency_key", name="uq_orders_user_idempotency_key"),
        CheckConstraint("subtotal >= 0", name="ck_orders_subtotal_non_negative"),
        CheckConstraint("discount_amount >= 0", name="ck_orders_discount_non_negative"),
        CheckConstraint("shipping_amount >= 0", name="ck_orders_shipping_non_negative"),
        CheckConstraint("tax_amount >= 0", name="ck_orders_tax_non_negative"),
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
        {"comment": "Customer orders with status tracking"},
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, order_number={self.order_number}, "
            f"user_id={self.user_id}, status={self.status.value}, "
            f"total={self.total})>"
        )

    @property
    def is_terminal(self) -> bool:
        """Check if order is in a terminal state."""
        return self.status.is_terminal()

    @property
    def can_cancel(self) -> bool:
        """Check if the customer may still cancel this order."""
        return self.status.can_cancel_by_customer()

    @property
    def item_count(self) -> int:
        """Total number of units across all lines."""
        return sum(item.quantity for item in self.items)


class OrderItem(BaseModel):
    """
    Line item of an order.

    Product name and unit price are snapshots taken at checkout.
    """

    __tablename__ = "order_items"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        comment="Ordered product; kept nullable so products can be deleted",
    )

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Unit price at purchase time",
    )

    order: Mapped[Order] = relationship(Order, back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        CheckConstraint("price >= 0", name="ck_order_items_price_non_negative"),
    )

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class OrderStatusHistory(Base, UUIDMixin):
    """
    Append-only status log of an order.

    One row is written when the order is placed and one per transition.
    Rows are never updated or deleted.
    """

    __tablename__ = "order_status_history"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[OrderStatus] = mapped_column(order_status_type, nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    changed_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        comment="User who made the change",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    order: Mapped[Order] = relationship(Order, back_populates="status_history")

    __table_args__ = (
        Index("ix_order_status_history_order_created", "order_id", "created_at"),
    )
