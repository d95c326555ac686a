"""
Custom frame option repository.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.custom_frame import CustomFrameOption

logger = get_logger(__name__)


class CustomFrameOptionRepository:
    """Repository for custom frame option data access operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, option_id: uuid.UUID) -> Optional[CustomFrameOption]:
        try:
            result = await self.session.execute(
                select(CustomFrameOption).where(CustomFrameOption.id == option_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve frame option",
                option_id=str(option_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to retrieve frame option",
                option_id=str(option_id),
            ) from e

    async def get_many(self, option_ids: Sequence[uuid.UUID]) -> Sequence[CustomFrameOption]:
        """Retrieve the options among the given IDs that exist."""
        if not option_ids:
            return []
        try:
            result = await self.session.execute(
                select(CustomFrameOption).where(CustomFrameOption.id.in_(option_ids))
            )
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve frame options",
                count=len(option_ids),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve frame options") from e

    async def list_options(
        self,
        category: Optional[str] = None,
        available_only: bool = True,
    ) -> Sequence[CustomFrameOption]:
        """
        List options ordered by category then sort order.

        Args:
            category: Only options of this builder step
            available_only: Hide options customers cannot pick
        """
        try:
            stmt = select(CustomFrameOption)
            if category:
                stmt = stmt.where(CustomFrameOption.category == category)
            if available_only:
                stmt = stmt.where(CustomFrameOption.available.is_(True))
            stmt = stmt.order_by(
                CustomFrameOption.category,
                CustomFrameOption.sort_order,
                CustomFrameOption.name,
            )
            result = await self.session.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list frame options",
                category=category,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list frame options") from e

    async def create(self, fields: dict[str, Any]) -> CustomFrameOption:
        try:
            option = CustomFrameOption(**fields)
            self.session.add(option)
            await self.session.flush()
            return option
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create frame option",
                name=fields.get("name"),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create frame option") from e

    async def update(
        self, option: CustomFrameOption, fields: dict[str, Any]
    ) -> CustomFrameOption:
        try:
            for key, value in fields.items():
                setattr(option, key, value)
            await self.session.flush()
            return option
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update frame option",
                option_id=str(option.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to update frame option",
                option_id=str(option.id),
            ) from e

    async def delete(self, option: CustomFrameOption) -> None:
        try:
            await self.session.delete(option)
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete frame option",
                option_id=str(option.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to delete frame option",
                option_id=str(option.id),
            ) from e
