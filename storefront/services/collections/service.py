"""
Collection service: storefront browsing and admin curation of collections.
"""

import uuid
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.merchandising import Collection
from storefront.services.catalog.repository import ProductRepository
from storefront.services.collections.repository import CollectionRepository

logger = get_logger(__name__)

COLLECTION_FIELDS = ("name", "description", "image_url", "featured")


async def resolve_product_ids(
    products: ProductRepository, product_ids: Sequence[uuid.UUID]
) -> list[uuid.UUID]:
    """
    Drop duplicate product IDs (first occurrence wins) and check they exist.

    Raises:
        ValidationError: If any product does not exist
    """
    unique_ids = list(dict.fromkeys(product_ids))
    found = {product.id for product in await products.get_many(unique_ids)}
    missing = [str(product_id) for product_id in unique_ids if product_id not in found]
    if missing:
        raise ValidationError(
            "Unknown products",
            code="UNKNOWN_PRODUCTS",
            field="product_ids",
            product_ids=missing,
        )
    return unique_ids


class CollectionService:
    """Service for collection operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = CollectionRepository(session)
        self.products = ProductRepository(session)

    def _validate_fields(
        self, fields: Mapping[str, Any], partial: bool = False
    ) -> dict[str, Any]:
        """
        Keep known collection fields and validate them.

        Raises:
            ValidationError: If the name is blank
        """
        cleaned = {key: value for key, value in fields.items() if key in COLLECTION_FIELDS}

        if "name" in cleaned or not partial:
            name = cleaned.get("name")
            if name is None or not str(name).strip():
                raise ValidationError("Collection name is required", field="name")
            cleaned["name"] = str(name).strip()

        if "featured" in cleaned and cleaned["featured"] is None:
            cleaned["featured"] = False

        return cleaned

    async def list_collections(self, featured: Optional[bool] = None) -> Sequence[Collection]:
        return await self.repository.list_collections(featured=featured)

    async def get_collection(self, collection_id: uuid.UUID) -> Collection:
        """
        Get a collection with its products.

        Raises:
            NotFoundError: If the collection does not exist
        """
        collection = await self.repository.get_by_id(collection_id)
        if collection is None:
            raise NotFoundError("Collection", collection_id)
        return collection

    async def create_collection(self, fields: Mapping[str, Any]) -> Collection:
        """Create a collection (admin); it starts with no products."""
        cleaned = self._validate_fields(fields)

        try:
            collection = await self.repository.create(cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Collection created", collection_id=str(collection.id), name=collection.name)
        return await self.get_collection(collection.id)

    async def update_collection(
        self, collection_id: uuid.UUID, fields: Mapping[str, Any]
    ) -> Collection:
        """Update a collection (admin)."""
        collection = await self.get_collection(collection_id)
        cleaned = self._validate_fields(fields, partial=True)

        try:
            await self.repository.update(collection, cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Collection updated",
            collection_id=str(collection_id),
            fields=sorted(cleaned.keys()),
        )
        return collection

    async def set_products(
        self, collection_id: uuid.UUID, product_ids: Sequence[uuid.UUID]
    ) -> Collection:
        """
        Replace a collection's products (admin).

        Raises:
            NotFoundError: If the collection does not exist
            ValidationError: If any product does not exist
        """
        await self.get_collection(collection_id)
        unique_ids = await resolve_product_ids(self.products, product_ids)

        try:
            await self.repository.replace_products(collection_id, unique_ids)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Collection products set",
            collection_id=str(collection_id),
            product_count=len(unique_ids),
        )
        return await self.get_collection(collection_id)

    async def delete_collection(self, collection_id: uuid.UUID) -> None:
        """Delete a collection (admin); its products stay in the catalogue."""
        collection = await self.get_collection(collection_id)

        try:
            await self.repository.delete(collection)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Collection deleted", collection_id=str(collection_id))
