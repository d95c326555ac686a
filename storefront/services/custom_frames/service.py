"""
Custom frame service: builder options and quotes.

Admins maintain the options offered in each builder step. A quote prices
the customer's material, size and extras with the CustomFramePricer and
adds the price modifiers of any colour or finish options they picked.
"""

import uuid
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, StorefrontError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.custom_frame import (
    FRAME_OPTION_CATEGORIES,
    CustomFrameOption,
)
from storefront.services.custom_frames.repository import CustomFrameOptionRepository
from storefront.services.pricing.custom_frame import (
    CustomFramePricer,
    FrameQuote,
    FrameSpec,
    get_custom_frame_pricer,
)

logger = get_logger(__name__)

OPTION_FIELDS = (
    "category",
    "name",
    "description",
    "price_modifier",
    "image_url",
    "available",
    "sort_order",
)

# Material and size are priced by multipliers; only these add a modifier
ADD_ON_CATEGORIES = frozenset({"color", "finish"})


class CustomFrameService:
    """Service for custom frame options and quotes."""

    def __init__(self, session: AsyncSession, pricer: Optional[CustomFramePricer] = None):
        self.session = session
        self.repository = CustomFrameOptionRepository(session)
        self.pricer = pricer or get_custom_frame_pricer()

    def _validate_fields(
        self, fields: Mapping[str, Any], partial: bool = False
    ) -> dict[str, Any]:
        """
        Keep known option fields and validate them.

        Raises:
            ValidationError: If the category is unknown or the name is blank
        """
        cleaned = {key: value for key, value in fields.items() if key in OPTION_FIELDS}

        if "category" in cleaned or not partial:
            category = str(cleaned.get("category") or "").strip().lower()
            if category not in FRAME_OPTION_CATEGORIES:
                raise ValidationError(
                    f"Unknown option category: {cleaned.get('category')}",
                    field="category",
                    allowed=list(FRAME_OPTION_CATEGORIES),
                )
            cleaned["category"] = category

        if "name" in cleaned or not partial:
            name = cleaned.get("name")
            if name is None or not str(name).strip():
                raise ValidationError("Option name is required", field="name")
            cleaned["name"] = str(name).strip()

        if "price_modifier" in cleaned:
            cleaned["price_modifier"] = Decimal(str(cleaned["price_modifier"] or 0))
        for key, default in (("available", True), ("sort_order", 0)):
            if key in cleaned and cleaned[key] is None:
                cleaned[key] = default

        return cleaned

    async def list_options(
        self,
        category: Optional[str] = None,
        include_unavailable: bool = False,
    ) -> Sequence[CustomFrameOption]:
        return await self.repository.list_options(
            category=category,
            available_only=not include_unavailable,
        )

    async def get_option(self, option_id: uuid.UUID) -> CustomFrameOption:
        """
        Get a frame option.

        Raises:
            NotFoundError: If the option does not exist
        """
        option = await self.repository.get_by_id(option_id)
        if option is None:
            raise NotFoundError("Frame option", option_id)
        return option

    async def create_option(self, fields: Mapping[str, Any]) -> CustomFrameOption:
        """Create a frame option (admin)."""
        cleaned = self._validate_fields(fields)

        try:
            option = await self.repository.create(cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Frame option created",
            option_id=str(option.id),
            category=option.category,
            name=option.name,
        )
        return option

    async def update_option(
        self, option_id: uuid.UUID, fields: Mapping[str, Any]
    ) -> CustomFrameOption:
        """Update a frame option (admin)."""
        option = await self.get_option(option_id)
        cleaned = self._validate_fields(fields, partial=True)

        try:
            await self.repository.update(option, cleaned)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info(
            "Frame option updated",
            option_id=str(option_id),
            fields=sorted(cleaned.keys()),
        )
        return option

    async def delete_option(self, option_id: uuid.UUID) -> None:
        """Delete a frame option (admin)."""
        option = await self.get_option(option_id)

        try:
            await self.repository.delete(option)
            await self.session.commit()
        except StorefrontError:
            await self.session.rollback()
            raise

        logger.info("Frame option deleted", option_id=str(option_id))

    async def quote(
        self,
        spec: FrameSpec,
        option_ids: Sequence[uuid.UUID] = (),
    ) -> FrameQuote:
        """
        Quote a custom frame.

        Args:
            spec: Material, size and extras chosen in the builder
            option_ids: Selected colour or finish options

        Raises:
            ValidationError: If a choice is not offered, or an option is
                unknown, unavailable or not a colour or finish
        """
        unique_ids = list(dict.fromkeys(option_ids))
        options = {option.id: option for option in await self.repository.get_many(unique_ids)}

        for option_id in unique_ids:
            option = options.get(option_id)
            if option is None or not option.available:
                raise ValidationError(
                    "Frame option is not available",
                    code="INVALID_FRAME_OPTION",
                    field="option_ids",
                    option_id=str(option_id),
                )
            if option.category not in ADD_ON_CATEGORIES:
                raise ValidationError(
                    f"Options of category {option.category} cannot be added to a quote",
                    code="INVALID_FRAME_OPTION",
                    field="option_ids",
                    option_id=str(option_id),
                )

        return self.pricer.quote(
            spec,
            option_modifiers=[options[option_id].price_modifier for option_id in unique_ids],
        )
