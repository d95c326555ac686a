"""
Shopping cart service orchestrating cart operations.

This module implements the CartService class providing add to cart, update
quantity, remove, clear and a priced view of the cart. Unit prices are
never stored on cart lines; every read prices the lines with the products'
current prices through the PricingCalculator.
"""

import uuid
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.cart import CartItem
from storefront.database.models.catalog import Product
from storefront.services.cart.repository import CartRepository
from storefront.services.catalog.repository import ProductRepository
from storefront.services.pricing.calculator import (
    PricingBreakdown,
    PricingCalculator,
    PricingLine,
)

logger = get_logger(__name__)

MAX_QUANTITY_PER_LINE = 99


@dataclass
class CartView:
    """Cart lines together with their pricing summary."""

    items: Sequence[CartItem]
    summary: PricingBreakdown

    @property
    def is_empty(self) -> bool:
        return not self.items


def to_pricing_lines(items: Sequence[CartItem]) -> list[PricingLine]:
    """Pair each cart line with the live price of its product."""
    return [
        PricingLine(unit_price=item.product.price, quantity=item.quantity)
        for item in items
    ]


class CartService:
    """
    Service for shopping cart operations.

    Args:
        session: Request scoped database session
        calculator: Pricing calculator; defaults to the configured policy
    """

    def __init__(
        self,
        session: AsyncSession,
        calculator: Optional[PricingCalculator] = None,
    ):
        self.session = session
        self.repository = CartRepository(session)
        self.products = ProductRepository(session)
        self.calculator = calculator or PricingCalculator()

    def _validate_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError(
                "Quantity must be at least 1",
                code="INVALID_QUANTITY",
                quantity=quantity,
            )
        if quantity > MAX_QUANTITY_PER_LINE:
            raise ValidationError(
                f"Quantity cannot exceed {MAX_QUANTITY_PER_LINE}",
                code="INVALID_QUANTITY",
                quantity=quantity,
            )

    def _check_stock(self, product: Product, quantity: int) -> None:
        if quantity > product.stock:
            raise ValidationError(
                f"Only {product.stock} unit(s) of {product.name} in stock",
                code="INSUFFICIENT_STOCK",
                product_id=str(product.id),
                requested=quantity,
                available=product.stock,
            )

    async def get_items(self, user_id: uuid.UUID) -> Sequence[CartItem]:
        """Cart lines of a user with products loaded."""
        return await self.repository.get_items(user_id)

    async def get_cart(
        self, user_id: uuid.UUID, promo_code: Optional[str] = None
    ) -> CartView:
        """
        Get the cart with a pricing summary.

        Raises:
            ValidationError: If the promo code is unknown
        """
        items = await self.repository.get_items(user_id)
        summary = self.calculator.calculate(to_pricing_lines(items), promo_code)
        return CartView(items=items, summary=summary)

    async def add_to_cart(
        self, user_id: uuid.UUID, product_id: uuid.UUID, quantity: int = 1
    ) -> CartItem:
        """
        Add a product to the cart.

        If the product is already in the cart its quantity is replaced by
        the given quantity.

        Raises:
            ValidationError: If the quantity is out of range or exceeds stock
            NotFoundError: If the product does not exist
        """
        self._validate_quantity(quantity)

        product = await self.products.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        self._check_stock(product, quantity)

        try:
            item = await self.repository.upsert_item(user_id, product_id, quantity)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Item added to cart",
            user_id=str(user_id),
            product_id=str(product_id),
            quantity=quantity,
        )

        return await self.repository.get_item(user_id, item.id)

    async def update_quantity(
        self, user_id: uuid.UUID, item_id: uuid.UUID, quantity: int
    ) -> CartItem:
        """
        Set the quantity of a cart line.

        Raises:
            ValidationError: If the quantity is below one, too large or
                exceeds stock
            NotFoundError: If the line is not in the user's cart
        """
        self._validate_quantity(quantity)

        item = await self.repository.get_item(user_id, item_id)
        if item is None:
            raise NotFoundError("Cart item", item_id)
        self._check_stock(item.product, quantity)

        try:
            await self.repository.update_quantity(item, quantity)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Cart item quantity updated",
            user_id=str(user_id),
            item_id=str(item_id),
            quantity=quantity,
        )

        return item

    async def remove_item(self, user_id: uuid.UUID, item_id: uuid.UUID) -> None:
        """
        Remove a line from the cart.

        Raises:
            NotFoundError: If the line is not in the user's cart
        """
        try:
            removed = await self.repository.delete_item(user_id, item_id)
            if not removed:
                raise NotFoundError("Cart item", item_id)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Cart item removed", user_id=str(user_id), item_id=str(item_id))

    async def clear_cart(self, user_id: uuid.UUID) -> int:
        """
        Remove every line from the cart.

        Returns:
            Number of lines removed
        """
        try:
            removed = await self.repository.clear(user_id)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Cart cleared", user_id=str(user_id), items_removed=removed)
        return removed
