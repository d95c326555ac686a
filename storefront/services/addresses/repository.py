"""
Address repository for data access operations.

All queries are scoped by user id so one user can never read or modify
another user's addresses.
"""

import uuid
from typing import Any, Optional, Sequence

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import RepositoryError
from storefront.core.logging import get_logger
from storefront.database.models.address import Address

logger = get_logger(__name__)


class AddressRepository:
    """Repository for address data access operations."""

    def __init__(self, session: AsyncSession):
        """
        Initialize address repository.

        Args:
            session: Async database session for operations
        """
        self.session = session

    async def list_for_user(self, user_id: uuid.UUID) -> Sequence[Address]:
        """
        List a user's addresses, default first, then oldest first.

        Raises:
            RepositoryError: If database operation fails
        """
        try:
            stmt = (
                select(Address)
                .where(Address.user_id == user_id)
                .order_by(Address.is_default.desc(), Address.created_at.asc())
            )
            result = await self.session.execute(stmt)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list addresses",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list addresses", user_id=str(user_id)) from e

    async def get_for_user(
        self, user_id: uuid.UUID, address_id: uuid.UUID
    ) -> Optional[Address]:
        """
        Get an address owned by the user.

        Returns:
            Address if it exists and belongs to the user, None otherwise
        """
        try:
            stmt = select(Address).where(
                Address.id == address_id,
                Address.user_id == user_id,
            )
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve address",
                user_id=str(user_id),
                address_id=str(address_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to retrieve address",
                address_id=str(address_id),
            ) from e

    async def count_for_user(self, user_id: uuid.UUID) -> int:
        """Number of saved addresses for a user."""
        try:
            stmt = select(func.count(Address.id)).where(Address.user_id == user_id)
            result = await self.session.execute(stmt)
            return result.scalar_one()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to count addresses",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to count addresses", user_id=str(user_id)) from e

    async def create(self, user_id: uuid.UUID, fields: dict[str, Any]) -> Address:
        """
        Insert a new address.

        Raises:
            RepositoryError: If database operation fails
        """
        try:
            address = Address(user_id=user_id, **fields)
            self.session.add(address)
            await self.session.flush()
            return address
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create address",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create address", user_id=str(user_id)) from e

    async def update(self, address: Address, fields: dict[str, Any]) -> Address:
        """Apply field changes to an address."""
        try:
            for key, value in fields.items():
                setattr(address, key, value)
            await self.session.flush()
            return address
        except SQLAlchemyError as e:
            logger.error(
                "Failed to update address",
                address_id=str(address.id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to update address",
                address_id=str(address.id),
            ) from e

    async def delete(self, user_id: uuid.UUID, address_id: uuid.UUID) -> bool:
        """
        Delete an owned address.

        Returns:
            True if a row was deleted
        """
        try:
            stmt = delete(Address).where(
                Address.id == address_id,
                Address.user_id == user_id,
            )
            result = await self.session.execute(stmt)
            return result.rowcount > 0
        except SQLAlchemyError as e:
            logger.error(
                "Failed to delete address",
                user_id=str(user_id),
                address_id=str(address_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to delete address",
                address_id=str(address_id),
            ) from e

    async def set_default(self, user_id: uuid.UUID, address_id: uuid.UUID) -> int:
        """
        Make one address the default in a single statement.

        Every address of the user gets ``is_default = (id == address_id)``,
        so no intermediate state with zero or two defaults is ever visible.

        Returns:
            Number of rows updated
        """
        try:
            stmt = (
                update(Address)
                .where(Address.user_id == user_id)
                .values(
                    is_default=case((Address.id == address_id, True), else_=False)
                )
                .execution_options(synchronize_session="fetch")
            )
            result = await self.session.execute(stmt)
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error(
                "Failed to set default address",
                user_id=str(user_id),
                address_id=str(address_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError(
                "Failed to set default address",
                address_id=str(address_id),
            ) from e
