"""Order state machine implementation with transition validation.

This module implements the OrderStateMachine class for managing order lifecycle
transitions. Each applied transition appends one history row and updates the
order status inside a single transaction, then runs the side effects bound
to the target status.
"""

from typing import AbstractSet, Any, Callable, Dict, Optional, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import InvalidTransitionError, NotFoundError
from storefront.core.logging import get_logger
from storefront.database.base import utcnow
from storefront.database.models.order import Order
from storefront.services.orders.enums import (
    OrderStatus,
    PaymentStatus,
    get_allowed_order_transitions,
    validate_order_status_transition,
)
from storefront.services.orders.repository import OrderRepository

logger = get_logger(__name__)


class OrderStateMachine:
    """State machine for managing order lifecycle transitions.

    Validates transitions against the transition table, records history and
    applies side effects such as lifecycle timestamps.
    """

    def __init__(self, session: AsyncSession):
        """Initialize state machine with database session.

        Args:
            session: Async database session used for persistence
        """
        self.session = session
        self.repository = OrderRepository(session)
        self._side_effects: Dict[
            OrderStatus,
            Callable[[Order], None]
        ] = self._initialize_side_effects()

    def _initialize_side_effects(self) -> Dict[OrderStatus, Callable[[Order], None]]:
        """Map target states to side effect functions."""
        return {
            OrderStatus.CONFIRMED: self._effect_confirmed,
            OrderStatus.SHIPPED: self._effect_shipped,
            OrderStatus.DELIVERED: self._effect_delivered,
            OrderStatus.CANCELLED: self._effect_cancelled,
            OrderStatus.REFUNDED: self._effect_refunded,
        }

    def validate_transition(
        self,
        order: Order,
        target_status: OrderStatus,
        allowed_from: Optional[AbstractSet[OrderStatus]] = None,
    ) -> bool:
        """Validate if transition to target status is allowed.

        Args:
            order: Order instance to validate
            target_status: Desired target status
            allowed_from: Further restrict the statuses the move may start
                from (customer cancellation is narrower than the table)

        Returns:
            True if transition is valid

        Raises:
            InvalidTransitionError: If transition is not in the table,
                including a transition to the current status
        """
        current_status = order.status

        if allowed_from is not None and current_status not in allowed_from:
            raise InvalidTransitionError(
                current_status.value,
                target_status.value,
                order_id=str(order.id),
                allowed_from=sorted(s.value for s in allowed_from),
            )

        if not validate_order_status_transition(current_status, target_status):
            allowed = get_allowed_order_transitions(current_status)
            raise InvalidTransitionError(
                current_status.value,
                target_status.value,
                order_id=str(order.id),
                allowed_transitions=sorted(s.value for s in allowed),
            )

        return True

    async def apply_transition(
        self,
        order: Order,
        target_status: OrderStatus,
        changed_by: Optional[UUID] = None,
        notes: Optional[str] = None,
        allowed_from: Optional[AbstractSet[OrderStatus]] = None,
    ) -> Order:
        """Apply state transition to order with side effects.

        The order row is re-read under a lock before validation, so the
        check runs against the committed status and not the caller's copy.
        The history row and the new status are committed together; if any
        write fails the transaction is rolled back and the order keeps its
        previous status.

        Args:
            order: Order instance to transition
            target_status: Target status to transition to
            changed_by: User initiating the transition
            notes: Optional note stored in the history row
            allowed_from: Optional narrower set of starting statuses

        Returns:
            The order reloaded with its updated history

        Raises:
            NotFoundError: If the order no longer exists
            InvalidTransitionError: If transition is invalid
        """
        order_id = order.id

        current = await self.repository.get_for_update(order_id)
        if current is None:
            raise NotFoundError("Order", order_id)
        order = current

        self.validate_transition(order, target_status, allowed_from)

        old_status = order.status

        try:
            await self._record_status_change(order_id, target_status, changed_by, notes)

            order.status = target_status
            side_effect = self._side_effects.get(target_status)
            if side_effect is not None:
                side_effect(order)

            await self.session.flush()
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(
                "State transition failed",
                order_id=str(order_id),
                transition=f"{old_status.value}->{target_status.value}",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        logger.info(
            "State transition applied",
            order_id=str(order_id),
            transition=f"{old_status.value}->{target_status.value}",
            changed_by=str(changed_by) if changed_by else None,
        )

        reloaded = await self.repository.get_by_id(order_id)
        if reloaded is None:
            raise NotFoundError("Order", order_id)
        return reloaded

    def get_allowed_transitions(self, order: Order) -> Set[OrderStatus]:
        """Get allowed transitions from current order status."""
        return get_allowed_order_transitions(order.status)

    async def _record_status_change(
        self,
        order_id: UUID,
        new_status: OrderStatus,
        changed_by: Optional[UUID],
        notes: Optional[str],
    ) -> Any:
        """Append the history row for a transition."""
        return await self.repository.add_status_history(
            order_id,
            new_status,
            notes=notes,
            changed_by=changed_by,
        )

    # Side effects

    def _effect_confirmed(self, order: Order) -> None:
        order.confirmed_at = utcnow()

    def _effect_shipped(self, order: Order) -> None:
        order.shipped_at = utcnow()

    def _effect_delivered(self, order: Order) -> None:
        order.delivered_at = utcnow()

    def _effect_cancelled(self, order: Order) -> None:
        order.cancelled_at = utcnow()

    def _effect_refunded(self, order: Order) -> None:
        order.refunded_at = utcnow()
        order.payment_status = PaymentStatus.REFUNDED


def get_order_state_machine(session: AsyncSession) -> OrderStateMachine:
    """Factory function to create an order state machine."""
    return OrderStateMachine(session)
