"""
Test suite for the order status lifecycle.

Tests cover the transition table, side effects, history recording and
atomicity of a transition when the history write fails.
"""

from typing import Callable
from unittest.mock import AsyncMock, patch
from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.core.exceptions import InvalidTransitionError, NotFoundError, RepositoryError
from storefront.services.orders.enums import (
    CUSTOMER_CANCELLABLE_STATUSES,
    ORDER_STATUS_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    get_allowed_order_transitions,
    validate_order_status_transition,
)
from storefront.services.orders.repository import OrderRepository
from storefront.services.orders.service import OrderService
from storefront.services.orders.state_machine import (
    OrderStateMachine,
    get_order_state_machine,
)


# ============================================================================
# Transition Table Tests
# ============================================================================


class TestTransitionTable:
    """Test the static transition table."""

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
            (OrderStatus.PROCESSING, OrderStatus.PACKED),
            (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
            (OrderStatus.PACKED, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.OUT_FOR_DELIVERY),
            (OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED),
            (OrderStatus.DELIVERED, OrderStatus.REFUND_REQUESTED),
            (OrderStatus.REFUND_REQUESTED, OrderStatus.REFUNDED),
        ],
    )
    def test_allowed_transitions(self, current: OrderStatus, target: OrderStatus) -> None:
        assert validate_order_status_transition(current, target) is True

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PACKED, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
            (OrderStatus.REFUNDED, OrderStatus.REFUND_REQUESTED),
            (OrderStatus.CONFIRMED, OrderStatus.PENDING),
        ],
    )
    def test_rejected_transitions(self, current: OrderStatus, target: OrderStatus) -> None:
        assert validate_order_status_transition(current, target) is False

    @pytest.mark.parametrize("current", list(OrderStatus))
    def test_same_state_never_allowed(self, current: OrderStatus) -> None:
        assert validate_order_status_transition(current, current) is False

    def test_terminal_states(self) -> None:
        terminal = {s for s in OrderStatus if s.is_terminal()}

        assert terminal == {OrderStatus.CANCELLED, OrderStatus.REFUNDED}

    def test_every_status_has_an_entry(self) -> None:
        assert set(ORDER_STATUS_TRANSITIONS) == set(OrderStatus)

    def test_allowed_transitions_returns_copy(self) -> None:
        allowed = get_allowed_order_transitions(OrderStatus.PENDING)
        allowed.add(OrderStatus.REFUNDED)

        assert OrderStatus.REFUNDED not in ORDER_STATUS_TRANSITIONS[OrderStatus.PENDING]

    def test_customer_cancellable_statuses(self) -> None:
        assert CUSTOMER_CANCELLABLE_STATUSES == {OrderStatus.PENDING, OrderStatus.PROCESSING}
        assert OrderStatus.CONFIRMED.can_cancel_by_customer() is False

    def test_from_string(self) -> None:
        assert OrderStatus.from_string(" Out_For_Delivery ") is OrderStatus.OUT_FOR_DELIVERY

        with pytest.raises(ValueError):
            OrderStatus.from_string("lost")

    def test_display_name(self) -> None:
        assert OrderStatus.REFUND_REQUESTED.display_name == "Refund Requested"

    @pytest.mark.parametrize(
        ("method", "expected"),
        [
            (PaymentMethod.COD, PaymentStatus.PENDING),
            (PaymentMethod.UPI, PaymentStatus.PAID),
            (PaymentMethod.CARD, PaymentStatus.PAID),
        ],
    )
    def test_initial_payment_status(
        self, method: PaymentMethod, expected: PaymentStatus
    ) -> None:
        assert method.initial_payment_status() is expected


# ============================================================================
# Applied Transition Tests
# ============================================================================


class TestApplyTransition:
    """Test transitions applied to stored orders."""

    def test_factory_function(self, db_session: AsyncSession) -> None:
        machine = get_order_state_machine(db_session)

        assert isinstance(machine, OrderStateMachine)
        assert isinstance(machine.repository, OrderRepository)

    async def test_transition_appends_history(
        self,
        db_session: AsyncSession,
        place_order: Callable,
        admin_id: UUID,
    ) -> None:
        order = await place_order()
        machine = OrderStateMachine(db_session)

        updated = await machine.apply_transition(
            order, OrderStatus.CONFIRMED, changed_by=admin_id, notes="Payment verified"
        )

        assert updated.status is OrderStatus.CONFIRMED
        assert updated.confirmed_at is not None
        assert [h.status for h in updated.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CONFIRMED,
        ]
        assert updated.status_history[-1].notes == "Payment verified"
        assert updated.status_history[-1].changed_by == admin_id

    async def test_invalid_transition_changes_nothing(
        self,
        db_session: AsyncSession,
        place_order: Callable,
    ) -> None:
        order = await place_order()
        machine = OrderStateMachine(db_session)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await machine.apply_transition(order, OrderStatus.SHIPPED)

        error = exc_info.value
        assert error.status_code == 409
        assert error.current_status == "pending"
        assert error.target_status == "shipped"
        assert error.context["allowed_transitions"] == ["cancelled", "confirmed"]

        reloaded = await OrderRepository(db_session).get_by_id(order.id)
        assert reloaded.status is OrderStatus.PENDING
        assert len(reloaded.status_history) == 1
        assert machine.get_allowed_transitions(reloaded) == {
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        }

    async def test_same_state_rejected(
        self, db_session: AsyncSession, place_order: Callable
    ) -> None:
        order = await place_order()

        with pytest.raises(InvalidTransitionError):
            await OrderStateMachine(db_session).apply_transition(order, OrderStatus.PENDING)

    async def test_history_failure_rolls_back_status(
        self,
        db_session: AsyncSession,
        place_order: Callable,
        admin_id: UUID,
    ) -> None:
        """Test a failed history write leaves the order in its previous status."""
        order = await place_order()
        order_id = order.id
        machine = OrderStateMachine(db_session)

        with patch.object(
            OrderRepository,
            "add_status_history",
            AsyncMock(side_effect=RepositoryError("Status history insert failed")),
        ):
            with pytest.raises(RepositoryError):
                await machine.apply_transition(
                    order, OrderStatus.CONFIRMED, changed_by=admin_id
                )

        reloaded = await OrderRepository(db_session).get_by_id(order_id)
        assert reloaded.status is OrderStatus.PENDING
        assert reloaded.confirmed_at is None
        assert len(reloaded.status_history) == 1

    async def test_full_lifecycle_timestamps(
        self,
        place_order: Callable,
        deliver: Callable,
        order_service: OrderService,
        customer_id: UUID,
        admin_id: UUID,
    ) -> None:
        order = await place_order()

        delivered = await deliver(order.id)

        assert delivered.status is OrderStatus.DELIVERED
        assert delivered.confirmed_at is not None
        assert delivered.shipped_at is not None
        assert delivered.delivered_at is not None
        assert len(delivered.status_history) == 7
        assert delivered.is_terminal is False

        await order_service.request_refund(customer_id, order.id)
        refunded = await order_service.transition_status(
            order.id, OrderStatus.REFUNDED, admin_id, notes="Refund issued"
        )

        assert refunded.status is OrderStatus.REFUNDED
        assert refunded.payment_status is PaymentStatus.REFUNDED
        assert refunded.refunded_at is not None
        assert refunded.is_terminal is True

        with pytest.raises(InvalidTransitionError):
            await order_service.transition_status(order.id, OrderStatus.PENDING, admin_id)

    async def test_cancel_sets_timestamp(
        self,
        place_order: Callable,
        order_service: OrderService,
        admin_id: UUID,
    ) -> None:
        order = await place_order()

        cancelled = await order_service.transition_status(
            order.id, OrderStatus.CANCELLED, admin_id
        )

        assert cancelled.cancelled_at is not None
        assert cancelled.can_cancel is False


# ============================================================================
# Concurrent Transition Tests
# ============================================================================


class TestConcurrentTransitions:
    """Test transitions applied to an order read before another change."""

    async def test_stale_copy_checked_against_committed_status(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        place_order: Callable,
        customer_id: UUID,
        admin_id: UUID,
    ) -> None:
        order = await place_order()
        order_id = order.id

        async with session_factory() as admin_session:
            stale = await OrderRepository(admin_session).get_by_id(order_id)
            assert stale.status is OrderStatus.PENDING

            async with session_factory() as customer_session:
                await OrderService(customer_session).cancel_by_customer(customer_id, order_id)

            with pytest.raises(InvalidTransitionError) as exc_info:
                await OrderStateMachine(admin_session).apply_transition(
                    stale, OrderStatus.CONFIRMED, changed_by=admin_id
                )

        assert exc_info.value.current_status == "cancelled"
        assert exc_info.value.context["allowed_transitions"] == []

        async with session_factory() as session:
            reloaded = await OrderRepository(session).get_by_id(order_id)

        assert reloaded.status is OrderStatus.CANCELLED
        assert [h.status for h in reloaded.status_history] == [
            OrderStatus.PENDING,
            OrderStatus.CANCELLED,
        ]

    async def test_customer_cancel_uses_committed_status(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        place_order: Callable,
        customer_id: UUID,
        admin_id: UUID,
    ) -> None:
        """A customer holding a pending copy cannot cancel once an admin confirmed."""
        order = await place_order()
        order_id = order.id

        async with session_factory() as customer_session:
            stale = await OrderRepository(customer_session).get_by_id(order_id, user_id=customer_id)

            async with session_factory() as admin_session:
                await OrderService(admin_session).transition_status(
                    order_id, OrderStatus.CONFIRMED, admin_id
                )

            with pytest.raises(InvalidTransitionError) as exc_info:
                await OrderStateMachine(customer_session).apply_transition(
                    stale,
                    OrderStatus.CANCELLED,
                    changed_by=customer_id,
                    allowed_from=CUSTOMER_CANCELLABLE_STATUSES,
                )

        assert exc_info.value.current_status == "confirmed"
        assert exc_info.value.context["allowed_from"] == ["pending", "processing"]

        async with session_factory() as session:
            reloaded = await OrderRepository(session).get_by_id(order_id)

        assert reloaded.status is OrderStatus.CONFIRMED
        assert len(reloaded.status_history) == 2

    async def test_deleted_order_is_not_found(
        self,
        db_session: AsyncSession,
        place_order: Callable,
    ) -> None:
        order = await place_order()
        await db_session.delete(order)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await OrderStateMachine(db_session).apply_transition(order, OrderStatus.CONFIRMED)
