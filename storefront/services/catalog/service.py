"""
Catalogue service: public product browsing and admin product maintenance.
"""

import uuid
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.catalog import Product
from storefront.services.catalog.repository import ProductRepository

logger = get_logger(__name__)

PRODUCT_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "material",
    "size",
    "color",
    "finish",
    "image_url",
    "stock",
    "featured",
)

MAX_PAGE_SIZE = 100


class CatalogService:
    """Service for product catalogue operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = ProductRepository(session)

    def _validate_product_fields(
        self, fields: Mapping[str, Any], partial: bool = False
    ) -> dict[str, Any]:
        """
        Keep known product fields and validate them.

        Args:
            fields: Incoming field values
            partial: Allow missing name and price (for updates)

        Raises:
            ValidationError: If name is blank or price/stock is negative
        """
        cleaned = {key: value for key, value in fields.items() if key in PRODUCT_FIELDS}

        if "name" in cleaned or not partial:
            name = cleaned.get("name")
            if name is None or not str(name).strip():
                raise ValidationError("Product name is required", field="name")
            cleaned["name"] = str(name).strip()

        if "price" in cleaned or not partial:
            price = cleaned.get("price")
            if price is None or Decimal(str(price)) < 0:
                raise ValidationError("Price must be zero or more", field="price")
            cleaned["price"] = Decimal(str(price))

        if cleaned.get("stock") is not None and cleaned["stock"] < 0:
            raise ValidationError("Stock cannot be negative", field="stock")
        if "stock" in cleaned and cleaned["stock"] is None:
            cleaned["stock"] = 0

        return cleaned

    async def list_products(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[Sequence[Product], int]:
        """
        List products for the storefront.

        Raises:
            ValidationError: If pagination parameters are out of range
        """
        if page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(
                f"Page size must be between 1 and {MAX_PAGE_SIZE}",
                field="page_size",
            )

        return await self.repository.list_products(
            category=category,
            featured=featured,
            search=search,
            limit=page_size,
            offset=(page - 1) * page_size,
        )

    async def get_product(self, product_id: uuid.UUID) -> Product:
        """
        Get a product.

        Raises:
            NotFoundError: If the product does not exist
        """
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def create_product(self, fields: Mapping[str, Any]) -> Product:
        """Create a product (admin)."""
        cleaned = self._validate_product_fields(fields)

        try:
            product = await self.repository.create(cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Product created", product_id=str(product.id), name=product.name)
        return product

    async def update_product(
        self, product_id: uuid.UUID, fields: Mapping[str, Any]
    ) -> Product:
        """Update a product (admin)."""
        product = await self.get_product(product_id)
        cleaned = self._validate_product_fields(fields, partial=True)

        try:
            await self.repository.update(product, cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Product updated",
            product_id=str(product_id),
            fields=sorted(cleaned.keys()),
        )
        return product

    async def delete_product(self, product_id: uuid.UUID) -> None:
        """Delete a product (admin)."""
        product = await self.get_product(product_id)

        try:
            await self.repository.delete(product)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Product deleted", product_id=str(product_id))
