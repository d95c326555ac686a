"""
Collection repository: collection rows and their product membership.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.merchandising import Collection, ProductCollection

logger = get_logger(__name__)


class CollectionRepository:
    """Repository for collection data access operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, collection_id: uuid.UUID) -> Optional[Collection]:
        """Retrieve a collection with its products freshly loaded."""
        try:
            stmt = (
                select(Collection)
                .where(Collection.id == collection_id)
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve collection",
                collection_id=str(collection_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to retrieve collection",
                collection_id=str(collection_id),
            ) from e

    async def list_collections(
        self, featured: Optional[bool] = None
    ) -> Sequence[Collection]:
        """List collections, featured first then newest first."""
        try:
            stmt = select(Collection)
            if featured is not None:
                stmt = stmt.where(Collection.featured == featured)
            stmt = stmt.order_by(Collection.featured.desc(), Collection.created_at.desc())
            result = await self.session.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list collections",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list collections") from e

    async def create(self, fields: dict[str, Any]) -> Collection:
        try:
            collection = Collection(**fields)
            self.session.add(collection)
            await self.session.flush()
            return collection
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create collection",
                name=fields.get("name"),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create collection") from e

    async def update(self, collection: Collection, fields: dict[str, Any]) -> Collection:
        try:
            for key, value in fields.items():
                setattr(collection, key, value)
            await self.session.flush()
            return collection
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update collection",
                collection_id=str(collection.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to update collection",
                collection_id=str(collection.id),
            ) from e

    async def replace_products(
        self, collection_id: uuid.UUID, product_ids: Sequence[uuid.UUID]
    ) -> None:
        """Make the given products the collection's only members."""
        try:
            await self.session.execute(
                delete(ProductCollection).where(
                    ProductCollection.collection_id == collection_id
                )
            )
            for product_id in product_ids:
                self.session.add(
                    ProductCollection(collection_id=collection_id, product_id=product_id)
                )
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to set collection products",
                collection_id=str(collection_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to set collection products",
                collection_id=str(collection_id),
            ) from e

    async def delete(self, collection: Collection) -> None:
        """Delete a collection and its membership rows; products are kept."""
        try:
            await self.session.execute(
                delete(ProductCollection).where(
                    ProductCollection.collection_id == collection.id
                )
            )
            await self.session.delete(collection)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete collection",
                collection_id=str(collection.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to delete collection",
                collection_id=str(collection.id),
            ) from e
