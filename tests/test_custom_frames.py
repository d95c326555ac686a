"""
Test suite for the custom frame builder.

Tests cover the quote calculator (multipliers, add-on fees, whole unit
rounding), builder option maintenance and the quote endpoint.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.services.custom_frames.service import CustomFrameService
from storefront.services.pricing.custom_frame import (
    CustomFramePricer,
    FramePricingPolicy,
    FrameSpec,
)


@pytest.fixture
def pricer() -> CustomFramePricer:
    return CustomFramePricer(FramePricingPolicy())


@pytest.fixture
def frames(db_session: AsyncSession, pricer: CustomFramePricer) -> CustomFrameService:
    return CustomFrameService(db_session, pricer)


# ============================================================================
# Quote Calculator Tests
# ============================================================================


class TestCustomFramePricer:
    """Test custom frame quotes."""

    def test_standard_frame_with_matting(self, pricer: CustomFramePricer) -> None:
        quote = pricer.quote(FrameSpec(material="wood", size="8x10", matting="white"))

        assert quote.frame_price == Decimal("1299.00")
        assert quote.matting == Decimal("299.00")
        assert quote.glazing == Decimal("0.00")
        assert quote.total == Decimal("1598.00")
        assert quote.currency == "INR"

    def test_all_add_ons(self, pricer: CustomFramePricer) -> None:
        """Test metal 16x20 with anti-glare glass and engraving rounds to 2676."""
        quote = pricer.quote(
            FrameSpec(
                material="metal",
                size="16x20",
                glazing="anti-glare",
                engraving="Happy 10th",
            )
        )

        assert quote.frame_price == Decimal("2078.40")
        assert quote.glazing == Decimal("199.00")
        assert quote.engraving == Decimal("399.00")
        assert quote.total == Decimal("2676.00")

    @pytest.mark.parametrize(
        ("material", "size", "matting", "expected"),
        [
            ("acrylic", "5x7", "cream", "1390.00"),
            ("wood", "custom", "none", "3248.00"),
            ("metal", "11x14", "double", "1754.00"),
        ],
    )
    def test_total_rounded_half_up_to_whole_unit(
        self,
        pricer: CustomFramePricer,
        material: str,
        size: str,
        matting: str,
        expected: str,
    ) -> None:
        quote = pricer.quote(FrameSpec(material=material, size=size, matting=matting))

        assert quote.total == Decimal(expected)

    def test_choices_are_case_insensitive(self, pricer: CustomFramePricer) -> None:
        quote = pricer.quote(FrameSpec(material=" Wood", size="8X10", glazing="Anti-Glare"))

        assert quote.total == Decimal("1498.00")

    def test_blank_engraving_is_free(self, pricer: CustomFramePricer) -> None:
        quote = pricer.quote(FrameSpec(material="wood", size="8x10", engraving="   "))

        assert quote.engraving == Decimal("0.00")
        assert quote.total == Decimal("1299.00")

    def test_option_modifiers_added_before_rounding(self, pricer: CustomFramePricer) -> None:
        quote = pricer.quote(
            FrameSpec(material="wood", size="8x10"),
            option_modifiers=[Decimal("150.00"), Decimal("49.50")],
        )

        assert quote.options == Decimal("199.50")
        assert quote.total == Decimal("1499.00")

    @pytest.mark.parametrize(
        ("spec", "field"),
        [
            (FrameSpec(material="bamboo", size="8x10"), "material"),
            (FrameSpec(material="wood", size="24x36"), "size"),
            (FrameSpec(material="wood", size="8x10", matting="gold"), "matting"),
            (FrameSpec(material="wood", size="8x10", glazing="plexi"), "glazing"),
            (FrameSpec(material="wood", size="8x10", mounting="cork"), "mounting"),
        ],
    )
    def test_unknown_choice_rejected(
        self, pricer: CustomFramePricer, spec: FrameSpec, field: str
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            pricer.quote(spec)

        assert exc_info.value.code == "INVALID_FRAME_OPTION"
        assert exc_info.value.context["field"] == field

    def test_custom_policy(self) -> None:
        policy = FramePricingPolicy(
            base_price=Decimal("1000"),
            material_multipliers={"Oak": Decimal("1.5")},
            size_multipliers={"A4": Decimal("1.0")},
        )

        quote = CustomFramePricer(policy).quote(FrameSpec(material="oak", size="a4"))

        assert quote.total == Decimal("1500.00")

    def test_policy_rejects_non_positive_multiplier(self) -> None:
        with pytest.raises(PydanticValidationError):
            FramePricingPolicy(material_multipliers={"wood": Decimal("0")})


# ============================================================================
# Service Tests
# ============================================================================


class TestCustomFrameService:
    """Test builder options and quotes backed by stored options."""

    async def test_options_ordered_by_category_then_sort_order(
        self, frames: CustomFrameService
    ) -> None:
        await frames.create_option({"category": "size", "name": "8x10", "sort_order": 1})
        await frames.create_option({"category": "color", "name": "Walnut", "sort_order": 2})
        await frames.create_option({"category": "color", "name": "Black", "sort_order": 1})

        options = await frames.list_options()

        assert [(o.category, o.name) for o in options] == [
            ("color", "Black"),
            ("color", "Walnut"),
            ("size", "8x10"),
        ]

    async def test_unavailable_options_hidden_from_customers(
        self, frames: CustomFrameService
    ) -> None:
        await frames.create_option({"category": "finish", "name": "Matte"})
        await frames.create_option({"category": "finish", "name": "Gloss", "available": False})

        public = await frames.list_options(category="finish")
        everything = await frames.list_options(category="finish", include_unavailable=True)

        assert [o.name for o in public] == ["Matte"]
        assert {o.name for o in everything} == {"Matte", "Gloss"}

    async def test_create_rejects_unknown_category(self, frames: CustomFrameService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await frames.create_option({"category": "ribbon", "name": "Red"})

        assert exc_info.value.context["field"] == "category"

    async def test_update_and_delete(self, frames: CustomFrameService) -> None:
        option = await frames.create_option({"category": "color", "name": "Gold"})

        updated = await frames.update_option(option.id, {"price_modifier": "120.50"})
        assert updated.price_modifier == Decimal("120.50")
        assert updated.name == "Gold"

        await frames.delete_option(option.id)
        with pytest.raises(NotFoundError):
            await frames.get_option(option.id)

    async def test_quote_adds_selected_option_modifiers(
        self, frames: CustomFrameService
    ) -> None:
        gold = await frames.create_option(
            {"category": "color", "name": "Gold", "price_modifier": Decimal("150.00")}
        )
        satin = await frames.create_option(
            {"category": "finish", "name": "Satin", "price_modifier": Decimal("49.50")}
        )

        quote = await frames.quote(
            FrameSpec(material="wood", size="8x10"), [gold.id, satin.id, gold.id]
        )

        assert quote.options == Decimal("199.50")
        assert quote.total == Decimal("1499.00")

    async def test_quote_rejects_unavailable_option(self, frames: CustomFrameService) -> None:
        hidden = await frames.create_option(
            {"category": "color", "name": "Rose", "available": False}
        )

        with pytest.raises(ValidationError) as exc_info:
            await frames.quote(FrameSpec(material="wood", size="8x10"), [hidden.id])

        assert exc_info.value.code == "INVALID_FRAME_OPTION"
        assert exc_info.value.context["option_id"] == str(hidden.id)

    async def test_quote_rejects_material_option(self, frames: CustomFrameService) -> None:
        """Material is priced by its multiplier, never by a stored modifier."""
        oak = await frames.create_option(
            {"category": "material", "name": "Oak", "price_modifier": Decimal("500")}
        )

        with pytest.raises(ValidationError) as exc_info:
            await frames.quote(FrameSpec(material="wood", size="8x10"), [oak.id])

        assert exc_info.value.code == "INVALID_FRAME_OPTION"

    async def test_quote_rejects_unknown_option(self, frames: CustomFrameService) -> None:
        with pytest.raises(ValidationError):
            await frames.quote(FrameSpec(material="wood", size="8x10"), [uuid4()])


# ============================================================================
# API Tests
# ============================================================================


class TestCustomFrameAPI:
    """Test builder endpoints."""

    async def test_quote_is_public(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/custom-frames/quote",
            json={
                "material": "metal",
                "size": "16x20",
                "glazing": "anti-glare",
                "engraving": "Happy 10th",
            },
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert Decimal(body["total"]) == Decimal("2676.00")
        assert Decimal(body["frame_price"]) == Decimal("2078.40")
        assert body["currency"] == "INR"

    async def test_quote_unknown_material_returns_400(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/custom-frames/quote",
            json={"material": "bamboo", "size": "8x10"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "INVALID_FRAME_OPTION"
        assert response.json()["details"]["allowed"] == ["acrylic", "metal", "wood"]

    async def test_customer_cannot_manage_options(
        self, client: AsyncClient, auth_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/admin/frame-options",
            json={"category": "color", "name": "Gold"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_admin_option_lifecycle(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        created = await client.post(
            "/api/v1/admin/frame-options",
            json={"category": "color", "name": "Gold", "price_modifier": "150.00"},
            headers=admin_headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        option_id = created.json()["id"]

        hidden = await client.put(
            f"/api/v1/admin/frame-options/{option_id}",
            json={"available": False},
            headers=admin_headers,
        )
        assert hidden.status_code == status.HTTP_200_OK

        public = await client.get("/api/v1/custom-frames/options")
        assert public.json() == []

        admin_list = await client.get("/api/v1/admin/frame-options", headers=admin_headers)
        assert [o["id"] for o in admin_list.json()] == [option_id]

        deleted = await client.delete(
            f"/api/v1/admin/frame-options/{option_id}", headers=admin_headers
        )
        assert deleted.status_code == status.HTTP_204_NO_CONTENT

    async def test_unknown_category_rejected_by_schema(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/admin/frame-options",
            json={"category": "ribbon", "name": "Red"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
