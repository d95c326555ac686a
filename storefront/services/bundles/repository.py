"""
Bundle repository: bundle rows and their product membership.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.merchandising import Bundle, BundleProduct

logger = get_logger(__name__)


class BundleRepository:
    """Repository for bundle data access operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, bundle_id: uuid.UUID) -> Optional[Bundle]:
        """Retrieve a bundle with its products freshly loaded."""
        try:
            stmt = (
                select(Bundle)
                .where(Bundle.id == bundle_id)
                .execution_options(populate_existing=True)
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve bundle",
                bundle_id=str(bundle_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve bundle", bundle_id=str(bundle_id)) from e

    async def list_bundles(self, featured: Optional[bool] = None) -> Sequence[Bundle]:
        """List bundles, featured first then newest first."""
        try:
            stmt = select(Bundle)
            if featured is not None:
                stmt = stmt.where(Bundle.featured == featured)
            stmt = stmt.order_by(Bundle.featured.desc(), Bundle.created_at.desc())
            result = await self.session.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list bundles",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list bundles") from e

    async def create(self, fields: dict[str, Any]) -> Bundle:
        try:
            bundle = Bundle(**fields)
            self.session.add(bundle)
            await self.session.flush()
            return bundle
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create bundle",
                name=fields.get("name"),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create bundle") from e

    async def update(self, bundle: Bundle, fields: dict[str, Any]) -> Bundle:
        try:
            for key, value in fields.items():
                setattr(bundle, key, value)
            await self.session.flush()
            return bundle
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update bundle",
                bundle_id=str(bundle.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to update bundle", bundle_id=str(bundle.id)) from e

    async def replace_products(
        self, bundle_id: uuid.UUID, product_ids: Sequence[uuid.UUID]
    ) -> None:
        """Make the given products the bundle's only members."""
        try:
            await self.session.execute(
                delete(BundleProduct).where(BundleProduct.bundle_id == bundle_id)
            )
            for product_id in product_ids:
                self.session.add(BundleProduct(bundle_id=bundle_id, product_id=product_id))
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to set bundle products",
                bundle_id=str(bundle_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to set bundle products",
                bundle_id=str(bundle_id),
            ) from e

    async def delete(self, bundle: Bundle) -> None:
        """Delete a bundle and its membership rows; products are kept."""
        try:
            await self.session.execute(
                delete(BundleProduct).where(BundleProduct.bundle_id == bundle.id)
            )
            await self.session.delete(bundle)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete bundle",
                bundle_id=str(bundle.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to delete bundle", bundle_id=str(bundle.id)) from e
