"""Order status, payment and transition enums for the order lifecycle.

This module defines the order status vocabulary, payment status and payment
method enums, together with the transition table every status change is
validated against.
"""

from enum import Enum
from typing import Dict, FrozenSet, Set


class OrderStatus(str, Enum):
    """Order lifecycle status.

    Valid transitions:
    - PENDING -> CONFIRMED, CANCELLED
    - CONFIRMED -> PROCESSING, CANCELLED
    - PROCESSING -> PACKED, CANCELLED
    - PACKED -> SHIPPED
    - SHIPPED -> OUT_FOR_DELIVERY
    - OUT_FOR_DELIVERY -> DELIVERED
    - DELIVERED -> REFUND_REQUESTED
    - REFUND_REQUESTED -> REFUNDED
    - CANCELLED -> (terminal state)
    - REFUNDED -> (terminal state)
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    PACKED = "packed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUND_REQUESTED = "refund_requested"
    REFUNDED = "refunded"

    @classmethod
    def from_string(cls, value: str) -> "OrderStatus":
        """Convert string to OrderStatus enum.

        Args:
            value: String representation of status

        Returns:
            OrderStatus enum value

        Raises:
            ValueError: If value is not a valid status
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid_values = ", ".join([s.value for s in cls])
            raise ValueError(
                f"Invalid order status: {value}. "
                f"Valid values are: {valid_values}"
            )

    def is_terminal(self) -> bool:
        """Check if status is a terminal state."""
        return not ORDER_STATUS_TRANSITIONS.get(self)

    def can_cancel_by_customer(self) -> bool:
        """Check if the customer may still cancel from this status."""
        return self in CUSTOMER_CANCELLABLE_STATUSES

    @property
    def display_name(self) -> str:
        """Get human-readable display name for status."""
        return self.value.replace("_", " ").title()


class PaymentStatus(str, Enum):
    """Payment status recorded on an order."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    """Payment methods offered at checkout."""

    COD = "cod"
    UPI = "upi"
    CARD = "card"

    @classmethod
    def from_string(cls, value: str) -> "PaymentMethod":
        """Convert string to PaymentMethod enum.

        Raises:
            ValueError: If value is not a supported payment method
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid_values = ", ".join([m.value for m in cls])
            raise ValueError(
                f"Invalid payment method: {value}. "
                f"Valid values are: {valid_values}"
            )

    def initial_payment_status(self) -> PaymentStatus:
        """Payment status an order starts with for this method.

        Cash on delivery is collected later; prepaid methods are settled
        before the order is placed.
        """
        if self is PaymentMethod.COD:
            return PaymentStatus.PENDING
        return PaymentStatus.PAID


ORDER_STATUS_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.PACKED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PACKED: {
        OrderStatus.SHIPPED,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.OUT_FOR_DELIVERY,
    },
    OrderStatus.OUT_FOR_DELIVERY: {
        OrderStatus.DELIVERED,
    },
    OrderStatus.DELIVERED: {
        OrderStatus.REFUND_REQUESTED,
    },
    OrderStatus.REFUND_REQUESTED: {
        OrderStatus.REFUNDED,
    },
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

# Statuses a customer may cancel from; narrower than the admin table
CUSTOMER_CANCELLABLE_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PROCESSING}
)


def validate_order_status_transition(
    current: OrderStatus,
    new: OrderStatus
) -> bool:
    """Validate if order status transition is allowed.

    Same-state transitions are never allowed.

    Args:
        current: Current order status
        new: Desired new status

    Returns:
        True if transition is valid
    """
    return new in ORDER_STATUS_TRANSITIONS.get(current, set())


def get_allowed_order_transitions(
    current: OrderStatus
) -> Set[OrderStatus]:
    """Get all allowed transitions from current order status.

    Args:
        current: Current order status

    Returns:
        Set of allowed next statuses
    """
    return ORDER_STATUS_TRANSITIONS.get(current, set()).copy()
