"""
Test suite for collections and bundles.

Tests cover bundle pricing, collection and bundle curation (membership
replacement, unknown products, deletes) and the public and admin
endpoints.
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.database.models import Product
from storefront.services.bundles.service import BundleService
from storefront.services.catalog.service import CatalogService
from storefront.services.collections.service import CollectionService
from storefront.services.pricing.bundle import calculate_bundle_price


@pytest.fixture
def collections(db_session: AsyncSession) -> CollectionService:
    return CollectionService(db_session)


@pytest.fixture
def bundles(db_session: AsyncSession) -> BundleService:
    return BundleService(db_session)


# ============================================================================
# Bundle Pricing Tests
# ============================================================================


class TestBundlePricing:
    """Test bundle price calculation."""

    def test_discount_off_summed_prices(self) -> None:
        price = calculate_bundle_price(
            [Decimal("500.00"), Decimal("250.00")], Decimal("15")
        )

        assert price.original_price == Decimal("750.00")
        assert price.bundle_price == Decimal("637.50")
        assert price.savings == Decimal("112.50")
        assert price.product_count == 2

    def test_rounds_half_up_and_savings_balance(self) -> None:
        price = calculate_bundle_price([Decimal("99.99")], Decimal("12.5"))

        assert price.bundle_price == Decimal("87.49")
        assert price.savings == Decimal("12.50")
        assert price.bundle_price + price.savings == price.original_price

    def test_empty_bundle_prices_at_zero(self) -> None:
        price = calculate_bundle_price([], Decimal("20"))

        assert price.original_price == Decimal("0.00")
        assert price.bundle_price == Decimal("0.00")
        assert price.product_count == 0

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [("0", "300.00"), ("100", "0.00")],
    )
    def test_discount_bounds_inclusive(self, percent: str, expected: str) -> None:
        price = calculate_bundle_price([Decimal("100.00"), Decimal("200.00")], Decimal(percent))

        assert price.bundle_price == Decimal(expected)

    @pytest.mark.parametrize("percent", ["-1", "100.01"])
    def test_out_of_range_discount_rejected(self, percent: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            calculate_bundle_price([Decimal("100.00")], Decimal(percent))

        assert exc_info.value.context["field"] == "discount_percentage"


# ============================================================================
# Collection Service Tests
# ============================================================================


class TestCollectionService:
    """Test collection curation."""

    async def test_create_starts_empty(self, collections: CollectionService) -> None:
        collection = await collections.create_collection(
            {"name": "  Wedding  ", "description": "For the big day"}
        )

        assert collection.name == "Wedding"
        assert collection.featured is False
        assert collection.products == []

    async def test_create_requires_name(self, collections: CollectionService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await collections.create_collection({"name": " "})

        assert exc_info.value.context["field"] == "name"

    async def test_set_products_dedupes_and_orders_by_name(
        self, collections: CollectionService, products: dict[str, Product]
    ) -> None:
        collection = await collections.create_collection({"name": "Gifts"})

        updated = await collections.set_products(
            collection.id,
            [products["mini"].id, products["oak"].id, products["mini"].id],
        )

        assert [p.name for p in updated.products] == ["Classic Oak Frame", "Mini Desk Frame"]

    async def test_set_products_replaces_members(
        self, collections: CollectionService, products: dict[str, Product]
    ) -> None:
        collection = await collections.create_collection({"name": "Gifts"})
        await collections.set_products(collection.id, [products["oak"].id, products["mini"].id])

        updated = await collections.set_products(collection.id, [products["walnut"].id])

        assert [p.id for p in updated.products] == [products["walnut"].id]

    async def test_unknown_product_leaves_members_unchanged(
        self, collections: CollectionService, products: dict[str, Product]
    ) -> None:
        collection = await collections.create_collection({"name": "Gifts"})
        await collections.set_products(collection.id, [products["oak"].id])
        missing = uuid4()

        with pytest.raises(ValidationError) as exc_info:
            await collections.set_products(collection.id, [products["walnut"].id, missing])

        assert exc_info.value.code == "UNKNOWN_PRODUCTS"
        assert exc_info.value.context["product_ids"] == [str(missing)]
        reloaded = await collections.get_collection(collection.id)
        assert [p.id for p in reloaded.products] == [products["oak"].id]

    async def test_list_featured_first(self, collections: CollectionService) -> None:
        await collections.create_collection({"name": "Everyday"})
        await collections.create_collection({"name": "Wedding", "featured": True})

        items = await collections.list_collections()
        featured = await collections.list_collections(featured=True)

        assert [c.name for c in items] == ["Wedding", "Everyday"]
        assert [c.name for c in featured] == ["Wedding"]

    async def test_partial_update(self, collections: CollectionService) -> None:
        collection = await collections.create_collection({"name": "Minimal"})

        updated = await collections.update_collection(collection.id, {"featured": True})

        assert updated.featured is True
        assert updated.name == "Minimal"

    async def test_delete_keeps_products(
        self,
        collections: CollectionService,
        db_session: AsyncSession,
        products: dict[str, Product],
    ) -> None:
        collection = await collections.create_collection({"name": "Gifts"})
        await collections.set_products(collection.id, [products["oak"].id])

        await collections.delete_collection(collection.id)

        with pytest.raises(NotFoundError):
            await collections.get_collection(collection.id)
        product = await CatalogService(db_session).get_product(products["oak"].id)
        assert product.name == "Classic Oak Frame"

    async def test_deleted_product_leaves_collection(
        self,
        collections: CollectionService,
        db_session: AsyncSession,
        products: dict[str, Product],
    ) -> None:
        collection = await collections.create_collection({"name": "Gifts"})
        await collections.set_products(collection.id, [products["oak"].id, products["mini"].id])

        await CatalogService(db_session).delete_product(products["oak"].id)

        reloaded = await collections.get_collection(collection.id)
        assert [p.id for p in reloaded.products] == [products["mini"].id]

    async def test_get_unknown_collection(self, collections: CollectionService) -> None:
        with pytest.raises(NotFoundError):
            await collections.get_collection(uuid4())


# ============================================================================
# Bundle Service Tests
# ============================================================================


class TestBundleService:
    """Test bundle maintenance and live pricing."""

    async def test_price_from_member_products(
        self, bundles: BundleService, products: dict[str, Product]
    ) -> None:
        bundle = await bundles.create_bundle({"name": "Pair", "discount_percentage": 20})
        bundle = await bundles.set_products(bundle.id, [products["oak"].id, products["walnut"].id])

        price = bundles.price(bundle)

        assert price.original_price == Decimal("750.00")
        assert price.bundle_price == Decimal("600.00")
        assert price.savings == Decimal("150.00")

    async def test_price_follows_product_price(
        self,
        bundles: BundleService,
        db_session: AsyncSession,
        products: dict[str, Product],
    ) -> None:
        bundle = await bundles.create_bundle({"name": "Pair", "discount_percentage": 20})
        await bundles.set_products(bundle.id, [products["oak"].id, products["walnut"].id])

        await CatalogService(db_session).update_product(
            products["oak"].id, {"price": Decimal("600.00")}
        )

        price = bundles.price(await bundles.get_bundle(bundle.id))
        assert price.original_price == Decimal("850.00")
        assert price.bundle_price == Decimal("680.00")

    async def test_discount_defaults_to_zero(self, bundles: BundleService) -> None:
        bundle = await bundles.create_bundle({"name": "Starter"})

        assert bundle.discount_percentage == Decimal("0")
        assert bundles.price(bundle).bundle_price == Decimal("0.00")

    @pytest.mark.parametrize("percent", [Decimal("-5"), Decimal("150")])
    async def test_create_rejects_out_of_range_discount(
        self, bundles: BundleService, percent: Decimal
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await bundles.create_bundle({"name": "Bad", "discount_percentage": percent})

        assert exc_info.value.context["field"] == "discount_percentage"
        assert await bundles.list_bundles() == []

    async def test_update_rejects_null_discount(self, bundles: BundleService) -> None:
        bundle = await bundles.create_bundle({"name": "Pair", "discount_percentage": 10})

        with pytest.raises(ValidationError):
            await bundles.update_bundle(bundle.id, {"discount_percentage": None})

        reloaded = await bundles.get_bundle(bundle.id)
        assert reloaded.discount_percentage == Decimal("10")

    async def test_delete_bundle(
        self, bundles: BundleService, products: dict[str, Product]
    ) -> None:
        bundle = await bundles.create_bundle({"name": "Pair"})
        await bundles.set_products(bundle.id, [products["oak"].id])

        await bundles.delete_bundle(bundle.id)

        with pytest.raises(NotFoundError):
            await bundles.get_bundle(bundle.id)


# ============================================================================
# API Tests
# ============================================================================


class TestCollectionAPI:
    """Test collection endpoints."""

    async def test_customer_cannot_create(
        self, client: AsyncClient, auth_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/admin/collections", json={"name": "Wedding"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_admin_curates_public_reads(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        created = await client.post(
            "/api/v1/admin/collections",
            json={"name": "Wedding", "featured": True},
            headers=admin_headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        collection_id = created.json()["id"]

        members = await client.put(
            f"/api/v1/admin/collections/{collection_id}/products",
            json={"product_ids": [str(products["collage"].id), str(products["oak"].id)]},
            headers=admin_headers,
        )
        assert members.status_code == status.HTTP_200_OK

        detail = await client.get(f"/api/v1/collections/{collection_id}")
        assert detail.status_code == status.HTTP_200_OK
        assert [p["name"] for p in detail.json()["products"]] == [
            "Classic Oak Frame",
            "Family Collage Frame",
        ]

        listing = await client.get("/api/v1/collections", params={"featured": True})
        assert [c["id"] for c in listing.json()] == [collection_id]

        deleted = await client.delete(
            f"/api/v1/admin/collections/{collection_id}", headers=admin_headers
        )
        assert deleted.status_code == status.HTTP_204_NO_CONTENT
        assert (await client.get(f"/api/v1/collections/{collection_id}")).status_code == 404

    async def test_unknown_product_returns_400(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        created = await client.post(
            "/api/v1/admin/collections", json={"name": "Wedding"}, headers=admin_headers
        )

        response = await client.put(
            f"/api/v1/admin/collections/{created.json()['id']}/products",
            json={"product_ids": [str(uuid4())]},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "UNKNOWN_PRODUCTS"


class TestBundleAPI:
    """Test bundle endpoints."""

    async def test_bundle_priced_live(
        self,
        client: AsyncClient,
        admin_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        created = await client.post(
            "/api/v1/admin/bundles",
            json={"name": "Desk Duo", "discount_percentage": "10"},
            headers=admin_headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        bundle_id = created.json()["id"]

        await client.put(
            f"/api/v1/admin/bundles/{bundle_id}/products",
            json={"product_ids": [str(products["oak"].id), str(products["mini"].id)]},
            headers=admin_headers,
        )

        response = await client.get(f"/api/v1/bundles/{bundle_id}")

        assert response.status_code == status.HTTP_200_OK
        pricing = response.json()["pricing"]
        assert Decimal(pricing["original_price"]) == Decimal("600.00")
        assert Decimal(pricing["bundle_price"]) == Decimal("540.00")
        assert Decimal(pricing["savings"]) == Decimal("60.00")
        assert pricing["product_count"] == 2
        assert len(response.json()["products"]) == 2

    async def test_discount_above_hundred_returns_400(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/admin/bundles",
            json={"name": "Too Good", "discount_percentage": "150"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "VALIDATION_ERROR"

    async def test_update_and_list(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        created = await client.post(
            "/api/v1/admin/bundles", json={"name": "Starter"}, headers=admin_headers
        )
        bundle_id = created.json()["id"]

        updated = await client.put(
            f"/api/v1/admin/bundles/{bundle_id}",
            json={"featured": True, "discount_percentage": "25"},
            headers=admin_headers,
        )
        assert updated.status_code == status.HTTP_200_OK
        assert Decimal(updated.json()["discount_percentage"]) == Decimal("25")

        listing = await client.get("/api/v1/bundles")
        assert [b["name"] for b in listing.json()] == ["Starter"]
        assert listing.json()[0]["featured"] is True
