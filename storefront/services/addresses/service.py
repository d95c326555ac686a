"""
Address service managing a user's saved shipping addresses.

Maintains the single-default invariant: a user has at most one default
address, the first address saved becomes the default, and after
``set_default`` exactly one address is the default.
"""

import uuid
from typing import Any, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.address import DEFAULT_COUNTRY, Address
from storefront.services.addresses.repository import AddressRepository

logger = get_logger(__name__)

REQUIRED_FIELDS = ("label", "street", "city", "state", "postal_code")


class AddressService:
    """
    Service for address management.

    Args:
        session: Request scoped database session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repository = AddressRepository(session)

    def _validate_fields(self, fields: Mapping[str, Any]) -> dict[str, str]:
        """
        Check required fields and normalize values.

        Whitespace-only values count as blank.

        Raises:
            ValidationError: Naming the first blank required field
        """
        cleaned: dict[str, str] = {}

        for name in REQUIRED_FIELDS:
            value = fields.get(name)
            if value is None or not str(value).strip():
                raise ValidationError(
                    f"{name.replace('_', ' ').capitalize()} is required",
                    code="MISSING_FIELD",
                    field=name,
                )
            cleaned[name] = str(value).strip()

        country = fields.get("country")
        cleaned["country"] = str(country).strip() if country and str(country).strip() else DEFAULT_COUNTRY

        return cleaned

    async def list_addresses(self, user_id: uuid.UUID) -> Sequence[Address]:
        """List addresses, default first then by creation time."""
        return await self.repository.list_for_user(user_id)

    async def get_address(self, user_id: uuid.UUID, address_id: uuid.UUID) -> Address:
        """
        Get an owned address.

        Raises:
            NotFoundError: If the address does not exist or is not the user's
        """
        address = await self.repository.get_for_user(user_id, address_id)
        if address is None:
            raise NotFoundError("Address", address_id)
        return address

    async def add_address(self, user_id: uuid.UUID, fields: Mapping[str, Any]) -> Address:
        """
        Save a new address.

        The first address a user saves becomes the default. Asking for
        ``is_default`` on a later address goes through ``set_default``.

        Raises:
            ValidationError: If a required field is blank
        """
        cleaned = self._validate_fields(fields)

        try:
            is_first = await self.repository.count_for_user(user_id) == 0
            address = await self.repository.create(
                user_id, {**cleaned, "is_default": is_first}
            )

            if fields.get("is_default") and not is_first:
                await self.repository.set_default(user_id, address.id)

            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Address added",
            user_id=str(user_id),
            address_id=str(address.id),
            is_first=is_first,
        )

        return await self.get_address(user_id, address.id)

    async def update_address(
        self,
        user_id: uuid.UUID,
        address_id: uuid.UUID,
        fields: Mapping[str, Any],
    ) -> Address:
        """
        Replace the fields of an owned address.

        Raises:
            NotFoundError: If the address is not the user's
            ValidationError: If a required field is blank
        """
        address = await self.get_address(user_id, address_id)
        cleaned = self._validate_fields(fields)

        try:
            await self.repository.update(address, cleaned)
            if fields.get("is_default") and not address.is_default:
                await self.repository.set_default(user_id, address_id)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Address updated", user_id=str(user_id), address_id=str(address_id))

        return await self.get_address(user_id, address_id)

    async def set_default(self, user_id: uuid.UUID, address_id: uuid.UUID) -> Address:
        """
        Make an owned address the user's only default.

        Ownership is checked first; the flag is then rewritten for all the
        user's addresses in one statement within one transaction.

        Raises:
            NotFoundError: If the address is not the user's
        """
        await self.get_address(user_id, address_id)

        try:
            updated = await self.repository.set_default(user_id, address_id)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Default address set",
            user_id=str(user_id),
            address_id=str(address_id),
            rows_updated=updated,
        )

        return await self.get_address(user_id, address_id)

    async def delete_address(self, user_id: uuid.UUID, address_id: uuid.UUID) -> None:
        """
        Delete an owned address.

        Deleting the last or the default address is allowed; placed orders
        keep their own address snapshot.

        Raises:
            NotFoundError: If the address is not the user's
        """
        try:
            deleted = await self.repository.delete(user_id, address_id)
            if not deleted:
                raise NotFoundError("Address", address_id)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Address deleted", user_id=str(user_id), address_id=str(address_id))
