"""
Order data access repository.

This module implements the OrderRepository class providing async methods for
writing the order header, line items and status history, and for reading
orders for customers and the admin console. Writes only flush; the caller
owns the transaction and decides when to commit or roll back.
"""

import uuid
from decimal import Decimal
from typing import Any, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.base import utcnow
from storefront.database.models.account import Profile
from storefront.database.models.order import Order, OrderItem, OrderStatusHistory
from storefront.services.orders.enums import OrderStatus

logger = get_logger(__name__)

# Statuses whose totals are not counted as revenue
NON_REVENUE_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


class OrderConflictError(RepositoryError):
    """Raised when an order insert violates a uniqueness constraint."""

    default_code = "ORDER_CONFLICT"


class OrderRepository:
    """
    Repository for order data access operations.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize order repository.

        Args:
            session: Async database session
        """
        self.session = session

    def _with_details(self, stmt):
        return stmt.options(
            selectinload(Order.items),
            selectinload(Order.status_history),
        ).execution_options(populate_existing=True)

    async def create_order(
        self,
        user_id: uuid.UUID,
        order_number: str,
        payment_method,
        payment_status,
        subtotal: Decimal,
        discount_amount: Decimal,
        shipping_amount: Decimal,
        tax_amount: Decimal,
        total: Decimal,
        shipping_address: dict[str, Any],
        promo_code: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Insert the order header with status pending.

        Raises:
            OrderConflictError: If the order number or idempotency key is taken
            RepositoryError: If the insert fails
        """
        try:
            order = Order(
                user_id=user_id,
                order_number=order_number,
                status=OrderStatus.PENDING,
                payment_method=payment_method,
                payment_status=payment_status,
                subtotal=subtotal,
                discount_amount=discount_amount,
                shipping_amount=shipping_amount,
                tax_amount=tax_amount,
                total=total,
                shipping_address=shipping_address,
                promo_code=promo_code,
                idempotency_key=idempotency_key,
            )
            self.session.add(order)
            await self.session.flush()

            logger.debug(
                "Order header inserted",
                order_id=str(order.id),
                order_number=order_number,
            )

            return order
        except IntegrityError as e:
            logger.warning(
                "Order header insert conflicted",
                order_number=order_number,
                idempotency_key=idempotency_key,
                error=str(e),
            )
            raise OrderConflictError(
                "Order conflicts with an existing order",
                order_number=order_number,
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                "Order header insert failed",
                order_number=order_number,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Order header insert failed",
                order_number=order_number,
            ) from e

    async def add_items(
        self, order_id: uuid.UUID, items: Sequence[dict[str, Any]]
    ) -> list[OrderItem]:
        """
        Insert line items for an order.

        Args:
            order_id: Parent order
            items: Dicts with product_id, product_name, quantity and price

        Raises:
            RepositoryError: If the insert fails
        """
        try:
            order_items = []
            for item_data in items:
                order_item = OrderItem(
                    order_id=order_id,
                    product_id=item_data["product_id"],
                    product_name=item_data["product_name"],
                    quantity=item_data["quantity"],
                    price=item_data["price"],
                )
                order_items.append(order_item)
                self.session.add(order_item)

            await self.session.flush()

            logger.debug(
                "Order items inserted",
                order_id=str(order_id),
                item_count=len(order_items),
            )

            return order_items
        except SQLAlchemyError as e:
            logger.error(
                "Order items insert failed",
                order_id=str(order_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Order items insert failed", order_id=str(order_id)) from e

    async def add_status_history(
        self,
        order_id: uuid.UUID,
        status: OrderStatus,
        notes: Optional[str] = None,
        changed_by: Optional[uuid.UUID] = None,
    ) -> OrderStatusHistory:
        """
        Append a status history row.

        Raises:
            RepositoryError: If the insert fails
        """
        try:
            entry = OrderStatusHistory(
                order_id=order_id,
                status=status,
                notes=notes,
                changed_by=changed_by,
                created_at=utcnow(),
            )
            self.session.add(entry)
            await self.session.flush()

            logger.debug(
                "Status history recorded",
                order_id=str(order_id),
                status=status.value,
            )

            return entry
        except SQLAlchemyError as e:
            logger.error(
                "Status history insert failed",
                order_id=str(order_id),
                status=status.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Status history insert failed",
                order_id=str(order_id),
            ) from e

    async def get_by_id(
        self, order_id: uuid.UUID, user_id: Optional[uuid.UUID] = None
    ) -> Optional[Order]:
        """
        Retrieve an order with items and history.

        Args:
            order_id: Order identifier
            user_id: When given, only return the order if the user owns it

        Returns:
            Order if found, None otherwise
        """
        try:
            stmt = select(Order).where(Order.id == order_id)
            if user_id is not None:
                stmt = stmt.where(Order.user_id == user_id)
            result = await self.session.execute(self._with_details(stmt))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve order",
                order_id=str(order_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve order", order_id=str(order_id)) from e

    async def get_for_update(self, order_id: uuid.UUID) -> Optional[Order]:
        """
        Re-read an order's row under a row lock.

        Loaded attributes are overwritten with the committed values, so a
        caller holding an older copy sees the current status. The lock is
        held until the surrounding transaction ends (no-op on SQLite).
        """
        try:
            stmt = (
                select(Order)
                .where(Order.id == order_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to lock order",
                order_id=str(order_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to lock order", order_id=str(order_id)) from e

    async def get_by_idempotency_key(
        self, user_id: uuid.UUID, idempotency_key: str
    ) -> Optional[Order]:
        """Retrieve the user's order created with an idempotency key."""
        try:
            stmt = select(Order).where(
                Order.user_id == user_id,
                Order.idempotency_key == idempotency_key,
            )
            result = await self.session.execute(self._with_details(stmt))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve order by idempotency key",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve order") from e

    async def list_for_user(
        self, user_id: uuid.UUID, limit: int = 20, offset: int = 0
    ) -> tuple[Sequence[Order], int]:
        """
        List a user's orders, newest first.

        Returns:
            Tuple of (orders on this page, total count)
        """
        try:
            total = (
                await self.session.execute(
                    select(func.count(Order.id)).where(Order.user_id == user_id)
                )
            ).scalar_one()

            stmt = (
                select(Order)
                .where(Order.user_id == user_id)
                .order_by(Order.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await self.session.execute(self._with_details(stmt))
            return result.scalars().all(), total
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list user orders",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list orders", user_id=str(user_id)) from e

    async def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[Sequence[tuple[Order, Optional[str]]], int]:
        """
        List all orders for the admin console.

        Args:
            status: Only orders in this status
            search: Case-insensitive match on order number or customer name

        Returns:
            Tuple of ((order, customer name) pairs, total count)
        """
        try:
            conditions = []
            if status is not None:
                conditions.append(Order.status == status)
            if search:
                pattern = f"%{search.strip()}%"
                conditions.append(
                    or_(
                        Order.order_number.ilike(pattern),
                        Profile.full_name.ilike(pattern),
                    )
                )

            base = select(Order, Profile.full_name).outerjoin(
                Profile, Profile.id == Order.user_id
            )

            count_stmt = (
                select(func.count(Order.id))
                .select_from(Order)
                .outerjoin(Profile, Profile.id == Order.user_id)
                .where(*conditions)
            )
            total = (await self.session.execute(count_stmt)).scalar_one()

            stmt = (
                base.where(*conditions)
                .order_by(Order.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await self.session.execute(self._with_details(stmt))
            rows = [(row[0], row[1]) for row in result.all()]

            logger.debug(
                "Listed orders",
                status=status.value if status else None,
                search=search,
                count=len(rows),
                total=total,
            )

            return rows, total
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list orders",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list orders") from e

    async def update_tracking_number(
        self, order: Order, tracking_number: Optional[str]
    ) -> Order:
        try:
            order.tracking_number = tracking_number
            await self.session.flush()
            return order
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update tracking number",
                order_id=str(order.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to update tracking number",
                order_id=str(order.id),
            ) from e

    async def get_order_statistics(self) -> dict[str, Any]:
        """
        Get order statistics for the admin dashboard.

        Returns:
            Dictionary with total orders, status breakdown, revenue
            (excluding cancelled and refunded orders) and average order value
        """
        try:
            total_count = (
                await self.session.execute(select(func.count()).select_from(Order))
            ).scalar_one()

            status_result = await self.session.execute(
                select(Order.status, func.count()).group_by(Order.status)
            )
            status_breakdown = {
                status.value: count for status, count in status_result.all()
            }

            revenue_result = await self.session.execute(
                select(func.sum(Order.total), func.count(Order.id)).where(
                    Order.status.not_in(NON_REVENUE_STATUSES)
                )
            )
            revenue, revenue_orders = revenue_result.one()
            revenue = Decimal(str(revenue or 0)).quantize(Decimal("0.01"))

            average = Decimal("0.00")
            if revenue_orders:
                average = (revenue / revenue_orders).quantize(Decimal("0.01"))

            statistics = {
                "total_orders": total_count,
                "status_breakdown": status_breakdown,
                "total_revenue": revenue,
                "average_order_value": average,
                "pending_orders": status_breakdown.get(OrderStatus.PENDING.value, 0),
            }

            logger.debug("Order statistics fetched", total_orders=total_count)

            return statistics
        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch order statistics",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to fetch order statistics") from e
