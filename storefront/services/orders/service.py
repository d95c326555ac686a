"""
Order service orchestrating checkout and the order lifecycle.

This module implements the OrderService class. ``place_order`` is the order
creation sequencer:

    0. guards (cart not empty, address owned, payment method valid) and
       idempotency key lookup
    1. order header with computed pricing and an address snapshot
    2. one line item per cart line with current price and name
    3. initial status history row
    4. cart clear, after the commit of steps 1-3

Steps 1-3 share one transaction. A failure in any of them rolls the whole
transaction back and surfaces as a single OrderCreationError, leaving the
cart untouched. A failure in step 4 is logged and does not undo the order.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import (
    NotFoundError,
    OrderCreationError,
    StorefrontError,
    ValidationError,
)
from storefront.core.logging import get_logger, log_performance
from storefront.database.models.address import Address
from storefront.database.models.cart import CartItem
from storefront.database.models.order import Order
from storefront.services.addresses.repository import AddressRepository
from storefront.services.cart.service import CartService, to_pricing_lines
from storefront.services.orders.enums import (
    CUSTOMER_CANCELLABLE_STATUSES,
    OrderStatus,
    PaymentMethod,
)
from storefront.services.orders.repository import OrderConflictError, OrderRepository
from storefront.services.orders.state_machine import OrderStateMachine
from storefront.services.pricing.calculator import PricingCalculator

logger = get_logger(__name__)

ORDER_PLACED_NOTE = "Order placed successfully"
CUSTOMER_CANCEL_NOTE = "Order cancelled by customer"
REFUND_REQUEST_NOTE = "Refund requested by customer"


class OrderService:
    """
    Order service orchestrating checkout and order status changes.

    Attributes:
        repository: Order repository for data access
        state_machine: State machine for order lifecycle management
        cart_service: Cart service used to read and clear the cart
        calculator: Pricing calculator for order totals
    """

    def __init__(
        self,
        session: AsyncSession,
        calculator: Optional[PricingCalculator] = None,
    ):
        """
        Initialize order service.

        Args:
            session: Request scoped database session
            calculator: Pricing calculator; defaults to the configured policy
        """
        self.session = session
        self.calculator = calculator or PricingCalculator()
        self.repository = OrderRepository(session)
        self.addresses = AddressRepository(session)
        self.state_machine = OrderStateMachine(session)
        self.cart_service = CartService(session, calculator=self.calculator)

    def _parse_payment_method(self, payment_method: Any) -> PaymentMethod:
        if isinstance(payment_method, PaymentMethod):
            return payment_method
        try:
            return PaymentMethod.from_string(str(payment_method))
        except ValueError as e:
            raise ValidationError(
                str(e),
                code="INVALID_PAYMENT_METHOD",
                payment_method=str(payment_method),
            ) from e

    async def _resolve_address(
        self, user_id: uuid.UUID, address_id: uuid.UUID
    ) -> Address:
        """
        Find the selected address among the user's saved addresses.

        Raises:
            ValidationError: If the user has no saved address (NO_ADDRESS)
            NotFoundError: If the address is not one of the user's
        """
        if await self.addresses.count_for_user(user_id) == 0:
            raise ValidationError(
                "Please add a shipping address before placing an order",
                code="NO_ADDRESS",
            )

        address = await self.addresses.get_for_user(user_id, address_id)
        if address is None:
            raise NotFoundError("Address", address_id)
        return address

    def _generate_order_number(self) -> str:
        """
        Generate unique order number.

        Returns:
            Order number string
        """
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        random_suffix = uuid.uuid4().hex[:6].upper()
        return f"ORD-{timestamp}-{random_suffix}"

    def _build_order_items(self, cart_items: Sequence[CartItem]) -> list[dict[str, Any]]:
        return [
            {
                "product_id": item.product_id,
                "product_name": item.product.name,
                "quantity": item.quantity,
                "price": item.product.price,
            }
            for item in cart_items
        ]

    async def place_order(
        self,
        user_id: uuid.UUID,
        address_id: uuid.UUID,
        payment_method: Any,
        promo_code: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Create an order from the user's cart.

        Args:
            user_id: Authenticated user placing the order
            address_id: Selected saved address
            payment_method: cod, upi or card
            promo_code: Optional promo code
            idempotency_key: Optional client key; a retry with the same key
                returns the order created by the first attempt

        Returns:
            The created (or previously created) order with items and history

        Raises:
            ValidationError: EMPTY_CART, NO_ADDRESS, invalid payment method
                or unknown promo code
            NotFoundError: If the address is not the user's
            OrderCreationError: If writing the order failed
        """
        method = self._parse_payment_method(payment_method)

        if idempotency_key:
            existing = await self.repository.get_by_idempotency_key(user_id, idempotency_key)
            if existing is not None:
                logger.info(
                    "Returning existing order for idempotency key",
                    user_id=str(user_id),
                    order_id=str(existing.id),
                )
                return existing

        cart_items = await self.cart_service.get_items(user_id)
        if not cart_items:
            raise ValidationError("Your cart is empty", code="EMPTY_CART")

        address = await self._resolve_address(user_id, address_id)
        pricing = self.calculator.calculate(to_pricing_lines(cart_items), promo_code)
        order_items = self._build_order_items(cart_items)
        order_number = self._generate_order_number()

        with log_performance(logger, "place_order", user_id=str(user_id)):
            try:
                order = await self.repository.create_order(
                    user_id=user_id,
                    order_number=order_number,
                    payment_method=method,
                    payment_status=method.initial_payment_status(),
                    subtotal=pricing.subtotal,
                    discount_amount=pricing.discount,
                    shipping_amount=pricing.shipping,
                    tax_amount=pricing.tax,
                    total=pricing.total,
                    shipping_address=address.to_snapshot(),
                    promo_code=pricing.promo_code,
                    idempotency_key=idempotency_key,
                )
                order_id = order.id
                await self.repository.add_items(order_id, order_items)
                await self.repository.add_status_history(
                    order_id,
                    OrderStatus.PENDING,
                    notes=ORDER_PLACED_NOTE,
                    changed_by=user_id,
                )
                await self.session.commit()
            except OrderConflictError as e:
                await self.session.rollback()
                if idempotency_key:
                    winner = await self.repository.get_by_idempotency_key(
                        user_id, idempotency_key
                    )
                    if winner is not None:
                        logger.info(
                            "Concurrent checkout resolved to existing order",
                            user_id=str(user_id),
                            order_id=str(winner.id),
                        )
                        return winner
                raise OrderCreationError(
                    "Failed to create order",
                    order_number=order_number,
                ) from e
            except Exception as e:
                await self.session.rollback()
                logger.error(
                    "Order creation failed",
                    user_id=str(user_id),
                    order_number=order_number,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise OrderCreationError(
                    "Failed to create order",
                    order_number=order_number,
                ) from e

        logger.info(
            "Order created",
            user_id=str(user_id),
            order_id=str(order_id),
            order_number=order_number,
            item_count=len(order_items),
            total=str(pricing.total),
            payment_method=method.value,
        )

        try:
            await self.cart_service.clear_cart(user_id)
        except StorefrontError as e:
            logger.warning(
                "Failed to clear cart after order creation",
                user_id=str(user_id),
                order_id=str(order_id),
                error=str(e),
            )

        created = await self.repository.get_by_id(order_id)
        if created is None:
            raise NotFoundError("Order", order_id)
        return created

    async def get_order(self, user_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        """
        Get one of the user's orders with items and history.

        Raises:
            NotFoundError: If the order does not exist or belongs to another user
        """
        order = await self.repository.get_by_id(order_id, user_id=user_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_orders(
        self, user_id: uuid.UUID, page: int = 1, page_size: int = 20
    ) -> tuple[Sequence[Order], int]:
        """List the user's orders, newest first."""
        return await self.repository.list_for_user(
            user_id, limit=page_size, offset=(page - 1) * page_size
        )

    async def cancel_by_customer(self, user_id: uuid.UUID, order_id: uuid.UUID) -> Order:
        """
        Cancel an order on behalf of its owner.

        Customers may only cancel while the order is pending or processing.

        Raises:
            NotFoundError: If the order is not the user's
            InvalidTransitionError: If the order can no longer be cancelled
        """
        order = await self.get_order(user_id, order_id)

        order = await self.state_machine.apply_transition(
            order,
            OrderStatus.CANCELLED,
            changed_by=user_id,
            notes=CUSTOMER_CANCEL_NOTE,
            allowed_from=CUSTOMER_CANCELLABLE_STATUSES,
        )

        logger.info("Order cancelled by customer", user_id=str(user_id), order_id=str(order_id))
        return order

    async def request_refund(
        self,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        reason: Optional[str] = None,
    ) -> Order:
        """
        Ask for a refund of a delivered order.

        Raises:
            NotFoundError: If the order is not the user's
            InvalidTransitionError: If the order is not delivered
        """
        order = await self.get_order(user_id, order_id)

        notes = REFUND_REQUEST_NOTE
        if reason and reason.strip():
            notes = f"{REFUND_REQUEST_NOTE}: {reason.strip()}"

        return await self.state_machine.apply_transition(
            order,
            OrderStatus.REFUND_REQUESTED,
            changed_by=user_id,
            notes=notes,
        )

    # Admin operations

    async def get_order_admin(self, order_id: uuid.UUID) -> Order:
        """
        Get any order (admin).

        Raises:
            NotFoundError: If the order does not exist
        """
        order = await self.repository.get_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    async def list_all_orders(
        self,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[Sequence[tuple[Order, Optional[str]]], int]:
        """List orders with optional status filter and search (admin)."""
        return await self.repository.list_orders(
            status=status,
            search=search,
            limit=page_size,
            offset=(page - 1) * page_size,
        )

    async def transition_status(
        self,
        order_id: uuid.UUID,
        target_status: OrderStatus,
        changed_by: uuid.UUID,
        notes: Optional[str] = None,
    ) -> Order:
        """
        Move an order to a new status (admin).

        Raises:
            NotFoundError: If the order does not exist
            InvalidTransitionError: If the table does not allow the move
        """
        order = await self.get_order_admin(order_id)
        return await self.state_machine.apply_transition(
            order,
            target_status,
            changed_by=changed_by,
            notes=notes,
        )

    async def set_tracking_number(
        self, order_id: uuid.UUID, tracking_number: Optional[str]
    ) -> Order:
        """Set or clear the carrier tracking number (admin)."""
        order = await self.get_order_admin(order_id)
        value = tracking_number.strip() if tracking_number and tracking_number.strip() else None

        try:
            await self.repository.update_tracking_number(order, value)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Tracking number updated", order_id=str(order_id), tracking_number=value)
        return order

    async def get_statistics(self) -> dict[str, Any]:
        """Dashboard statistics (admin)."""
        return await self.repository.get_order_statistics()
