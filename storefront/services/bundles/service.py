"""
Bundle service: storefront bundles with live pricing and admin maintenance.

A bundle's price is never stored; it is computed from the current prices
of its products and the bundle's discount percentage each time it is read.
"""

import uuid
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.merchandising import Bundle
from storefront.services.bundles.repository import BundleRepository
from storefront.services.catalog.repository import ProductRepository
from storefront.services.collections.service import resolve_product_ids
from storefront.services.pricing.bundle import (
    BundlePrice,
    calculate_bundle_price,
    validate_discount_percentage,
)

logger = get_logger(__name__)

BUNDLE_FIELDS = ("name", "description", "image_url", "discount_percentage", "featured")


class BundleService:
    """Service for bundle operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = BundleRepository(session)
        self.products = ProductRepository(session)

    def _validate_fields(
        self, fields: Mapping[str, Any], partial: bool = False
    ) -> dict[str, Any]:
        """
        Keep known bundle fields and validate them.

        Raises:
            ValidationError: If the name is blank or the discount is outside [0, 100]
        """
        cleaned = {key: value for key, value in fields.items() if key in BUNDLE_FIELDS}

        if "name" in cleaned or not partial:
            name = cleaned.get("name")
            if name is None or not str(name).strip():
                raise ValidationError("Bundle name is required", field="name")
            cleaned["name"] = str(name).strip()

        if "discount_percentage" in cleaned:
            if cleaned["discount_percentage"] is None:
                raise ValidationError(
                    "Discount percentage is required", field="discount_percentage"
                )
            cleaned["discount_percentage"] = validate_discount_percentage(
                cleaned["discount_percentage"]
            )

        if "featured" in cleaned and cleaned["featured"] is None:
            cleaned["featured"] = False

        return cleaned

    def price(self, bundle: Bundle) -> BundlePrice:
        """Price a bundle from the live prices of its products."""
        return calculate_bundle_price(
            (product.price for product in bundle.products),
            bundle.discount_percentage,
        )

    async def list_bundles(self, featured: Optional[bool] = None) -> Sequence[Bundle]:
        return await self.repository.list_bundles(featured=featured)

    async def get_bundle(self, bundle_id: uuid.UUID) -> Bundle:
        """
        Get a bundle with its products.

        Raises:
            NotFoundError: If the bundle does not exist
        """
        bundle = await self.repository.get_by_id(bundle_id)
        if bundle is None:
            raise NotFoundError("Bundle", bundle_id)
        return bundle

    async def create_bundle(self, fields: Mapping[str, Any]) -> Bundle:
        """Create a bundle (admin); it starts with no products."""
        cleaned = self._validate_fields(fields)

        try:
            bundle = await self.repository.create(cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Bundle created",
            bundle_id=str(bundle.id),
            name=bundle.name,
            discount_percentage=str(bundle.discount_percentage),
        )
        return await self.get_bundle(bundle.id)

    async def update_bundle(self, bundle_id: uuid.UUID, fields: Mapping[str, Any]) -> Bundle:
        """Update a bundle (admin)."""
        bundle = await self.get_bundle(bundle_id)
        cleaned = self._validate_fields(fields, partial=True)

        try:
            await self.repository.update(bundle, cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Bundle updated",
            bundle_id=str(bundle_id),
            fields=sorted(cleaned.keys()),
        )
        return bundle

    async def set_products(
        self, bundle_id: uuid.UUID, product_ids: Sequence[uuid.UUID]
    ) -> Bundle:
        """
        Replace a bundle's products (admin).

        Raises:
            NotFoundError: If the bundle does not exist
            ValidationError: If any product does not exist
        """
        await self.get_bundle(bundle_id)
        unique_ids = await resolve_product_ids(self.products, product_ids)

        try:
            await self.repository.replace_products(bundle_id, unique_ids)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Bundle products set",
            bundle_id=str(bundle_id),
            product_count=len(unique_ids),
        )
        return await self.get_bundle(bundle_id)

    async def delete_bundle(self, bundle_id: uuid.UUID) -> None:
        """Delete a bundle (admin); its products stay in the catalogue."""
        bundle = await self.get_bundle(bundle_id)

        try:
            await self.repository.delete(bundle)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Bundle deleted", bundle_id=str(bundle_id))
