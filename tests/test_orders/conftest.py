"""
Shared fixtures for order tests: a user with a saved address and a filled
cart, plus services bound to the test session.
"""

from typing import Callable
from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database.models import Address, Order, Product
from storefront.services.addresses.service import AddressService
from storefront.services.cart.service import CartService
from storefront.services.orders.enums import OrderStatus
from storefront.services.orders.service import OrderService
from storefront.services.pricing.calculator import PricingCalculator

# Admin path from pending to delivered
FULFILLMENT_PATH = (
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.PACKED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)


@pytest.fixture
def order_service(db_session: AsyncSession, calculator: PricingCalculator) -> OrderService:
    return OrderService(db_session, calculator=calculator)


@pytest.fixture
def cart_service(db_session: AsyncSession, calculator: PricingCalculator) -> CartService:
    return CartService(db_session, calculator=calculator)


@pytest.fixture
def address_service(db_session: AsyncSession) -> AddressService:
    return AddressService(db_session)


@pytest.fixture
async def address(address_service: AddressService, customer_id: UUID) -> Address:
    """The customer's default shipping address."""
    return await address_service.add_address(
        customer_id,
        {
            "label": "Home",
            "street": "221 Residency Road",
            "city": "Bengaluru",
            "state": "Karnataka",
            "postal_code": "560025",
        },
    )


@pytest.fixture
async def filled_cart(
    cart_service: CartService, customer_id: UUID, products: dict[str, Product]
) -> CartService:
    """Cart with 2 x 500 and 1 x 250 (subtotal 1250)."""
    await cart_service.add_to_cart(customer_id, products["oak"].id, 2)
    await cart_service.add_to_cart(customer_id, products["walnut"].id, 1)
    return cart_service


@pytest.fixture
def place_order(
    order_service: OrderService,
    customer_id: UUID,
    address: Address,
    filled_cart: CartService,
) -> Callable:
    """Place an order from the filled cart with sensible defaults."""
    # Read now; a rolled back checkout expires every loaded instance
    address_id = address.id

    async def _place(**overrides) -> Order:
        arguments = {
            "user_id": customer_id,
            "address_id": address_id,
            "payment_method": "upi",
        }
        arguments.update(overrides)
        return await order_service.place_order(**arguments)

    return _place


@pytest.fixture
def advance(order_service: OrderService, admin_id: UUID) -> Callable:
    """Walk an order through admin transitions."""

    async def _advance(order_id: UUID, *statuses: OrderStatus) -> Order:
        order = None
        for target in statuses:
            order = await order_service.transition_status(order_id, target, admin_id)
        return order

    return _advance


@pytest.fixture
def deliver(advance: Callable) -> Callable:
    """Walk an order from pending to delivered."""

    async def _deliver(order_id: UUID) -> Order:
        return await advance(order_id, *FULFILLMENT_PATH)

    return _deliver
