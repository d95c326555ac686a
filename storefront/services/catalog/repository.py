"""
Product repository for catalogue queries and admin maintenance.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.cart import CartItem, WishlistItem
from storefront.database.models.catalog import Product
from storefront.database.models.merchandising import BundleProduct, ProductCollection

logger = get_logger(__name__)


class ProductRepository:
    """
    Repository for product data access operations.

    Provides filtered, paginated listing for the storefront and plain CRUD
    for the admin console.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        """Retrieve a product by ID."""
        try:
            result = await self.session.execute(
                select(Product).where(Product.id == product_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve product",
                product_id=str(product_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to retrieve product",
                product_id=str(product_id),
            ) from e

    async def get_many(self, product_ids: Sequence[uuid.UUID]) -> Sequence[Product]:
        """Retrieve the products among the given IDs that exist."""
        if not product_ids:
            return []
        try:
            result = await self.session.execute(
                select(Product).where(Product.id.in_(product_ids))
            )
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve products",
                count=len(product_ids),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve products") from e

    async def list_products(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[Sequence[Product], int]:
        """
        List products with filters and pagination.

        Args:
            category: Only products in this category
            featured: Only featured (or non-featured) products
            search: Case-insensitive match on name or description
            limit: Page size
            offset: Number of rows to skip

        Returns:
            Tuple of (products on this page, total matching count)
        """
        try:
            conditions = []
            if category:
                conditions.append(Product.category == category)
            if featured is not None:
                conditions.append(Product.featured == featured)
            if search:
                pattern = f"%{search.strip()}%"
                conditions.append(
                    or_(
                        Product.name.ilike(pattern),
                        Product.description.ilike(pattern),
                    )
                )

            count_stmt = select(func.count(Product.id)).where(*conditions)
            total = (await self.session.execute(count_stmt)).scalar_one()

            stmt = (
                select(Product)
                .where(*conditions)
                .order_by(Product.featured.desc(), Product.created_at.desc())
                .limit(limit)
                .offset(offset)
            )
            result = await self.session.execute(stmt)
            products = result.scalars().all()

            logger.debug(
                "Listed products",
                category=category,
                featured=featured,
                search=search,
                count=len(products),
                total=total,
            )

            return products, total
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list products",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list products") from e

    async def create(self, fields: dict[str, Any]) -> Product:
        try:
            product = Product(**fields)
            self.session.add(product)
            await self.session.flush()
            return product
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create product",
                name=fields.get("name"),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create product") from e

    async def update(self, product: Product, fields: dict[str, Any]) -> Product:
        try:
            for key, value in fields.items():
                setattr(product, key, value)
            await self.session.flush()
            return product
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update product",
                product_id=str(product.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to update product",
                product_id=str(product.id),
            ) from e

    async def delete(self, product: Product) -> None:
        """
        Delete a product together with the cart, wishlist, collection and
        bundle rows that point to it.

        Order items keep their name and price snapshot.
        """
        try:
            await self.session.execute(
                delete(CartItem).where(CartItem.product_id == product.id)
            )
            await self.session.execute(
                delete(WishlistItem).where(WishlistItem.product_id == product.id)
            )
            await self.session.execute(
                delete(ProductCollection).where(ProductCollection.product_id == product.id)
            )
            await self.session.execute(
                delete(BundleProduct).where(BundleProduct.product_id == product.id)
            )
            await self.session.delete(product)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete product",
                product_id=str(product.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to delete product",
                product_id=str(product.id),
            ) from e
