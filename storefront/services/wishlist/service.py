"""
Wishlist service.

A wishlist holds each product at most once; toggling adds a missing product
and removes a present one.
"""

import uuid
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import NotFoundError, RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.cart import WishlistItem
from storefront.services.catalog.repository import ProductRepository

logger = get_logger(__name__)


class WishlistService:
    """Service for wishlist operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.products = ProductRepository(session)

    async def list_items(self, user_id: uuid.UUID) -> Sequence[WishlistItem]:
        """Wishlist entries of a user, newest first, with products loaded."""
        try:
            stmt = (
                select(WishlistItem)
                .options(selectinload(WishlistItem.product))
                .where(WishlistItem.user_id == user_id)
                .order_by(WishlistItem.created_at.desc())
            )
            result = await self.session.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list wishlist",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list wishlist", user_id=str(user_id)) from e

    async def is_in_wishlist(self, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        """Check whether a product is on the user's wishlist."""
        try:
            stmt = select(WishlistItem.id).where(
                WishlistItem.user_id == user_id,
                WishlistItem.product_id == product_id,
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error(
                "Failed to check wishlist",
                user_id=str(user_id),
                product_id=str(product_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to check wishlist") from e

    async def toggle(self, user_id: uuid.UUID, product_id: uuid.UUID) -> bool:
        """
        Add the product if absent, remove it if present.

        Returns:
            True if the product is on the wishlist afterwards

        Raises:
            NotFoundError: If the product does not exist
        """
        if await self.products.get_by_id(product_id) is None:
            raise NotFoundError("Product", product_id)

        present = await self.is_in_wishlist(user_id, product_id)

        try:
            if present:
                await self.session.execute(
                    delete(WishlistItem).where(
                        WishlistItem.user_id == user_id,
                        WishlistItem.product_id == product_id,
                    )
                )
            else:
                self.session.add(WishlistItem(user_id=user_id, product_id=product_id))
                await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to toggle wishlist item",
                user_id=str(user_id),
                product_id=str(product_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to update wishlist") from e

        logger.info(
            "Wishlist toggled",
            user_id=str(user_id),
            product_id=str(product_id),
            in_wishlist=not present,
        )

        return not present
