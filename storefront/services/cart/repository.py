"""
Cart repository for data access operations.

This module implements the CartRepository class providing async methods for
cart line management. Lines are keyed by (user, product); the product is
loaded with every line so the live unit price is always available.
"""

import uuid
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.cart import CartItem

logger = get_logger(__name__)


class CartRepository:
    """
    Repository for cart data access operations.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize cart repository.

        Args:
            session: Async database session for operations
        """
        self.session = session

    async def get_items(self, user_id: uuid.UUID) -> Sequence[CartItem]:
        """
        Retrieve all cart lines of a user with products eagerly loaded.

        Raises:
            RepositoryError: If database operation fails
        """
        try:
            stmt = (
                select(CartItem)
                .options(selectinload(CartItem.product))
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at.asc())
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(stmt)
            items = result.scalars().all()

            logger.debug(
                "Cart retrieved for user",
                user_id=str(user_id),
                item_count=len(items),
            )

            return items
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve cart for user",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve cart", user_id=str(user_id)) from e

    async def get_item(
        self, user_id: uuid.UUID, item_id: uuid.UUID
    ) -> Optional[CartItem]:
        """Retrieve one of the user's cart lines by ID."""
        try:
            stmt = (
                select(CartItem)
                .options(selectinload(CartItem.product))
                .where(CartItem.id == item_id, CartItem.user_id == user_id)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve cart item",
                item_id=str(item_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve cart item", item_id=str(item_id)) from e

    async def get_item_by_product(
        self, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> Optional[CartItem]:
        """Retrieve the user's line for a product, if any."""
        try:
            stmt = select(CartItem).where(
                CartItem.user_id == user_id,
                CartItem.product_id == product_id,
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve cart item by product",
                product_id=str(product_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to retrieve cart item",
                product_id=str(product_id),
            ) from e

    async def upsert_item(
        self, user_id: uuid.UUID, product_id: uuid.UUID, quantity: int
    ) -> CartItem:
        """
        Insert a line or overwrite the quantity of the existing one.

        Args:
            user_id: Cart owner
            product_id: Product to add
            quantity: Quantity the line ends up with

        Returns:
            The inserted or updated line
        """
        existing = await self.get_item_by_product(user_id, product_id)

        try:
            if existing is not None:
                existing.quantity = quantity
                await self.session.flush()
                return existing

            item = CartItem(user_id=user_id, product_id=product_id, quantity=quantity)
            self.session.add(item)
            await self.session.flush()
            return item
        except SQLAlchemyError as e:
            logger.error(
                "Failed to add item to cart",
                user_id=str(user_id),
                product_id=str(product_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to add item to cart",
                product_id=str(product_id),
            ) from e

    async def update_quantity(self, item: CartItem, quantity: int) -> CartItem:
        try:
            item.quantity = quantity
            await self.session.flush()
            return item
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update cart item",
                item_id=str(item.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to update cart item", item_id=str(item.id)) from e

    async def delete_item(self, user_id: uuid.UUID, item_id: uuid.UUID) -> bool:
        """
        Delete one of the user's lines.

        Returns:
            True if a row was deleted
        """
        try:
            result = await self.session.execute(
                delete(CartItem).where(
                    CartItem.id == item_id,
                    CartItem.user_id == user_id,
                )
            )
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(
                "Failed to remove cart item",
                item_id=str(item_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to remove cart item", item_id=str(item_id)) from e

    async def clear(self, user_id: uuid.UUID) -> int:
        """
        Delete every line of the user's cart.

        Returns:
            Number of lines removed
        """
        try:
            result = await self.session.execute(
                delete(CartItem).where(CartItem.user_id == user_id)
            )
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(
                "Failed to clear cart",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to clear cart", user_id=str(user_id)) from e
