"""
Integration tests for order endpoints.

Covers the checkout flow over HTTP, idempotent retries, customer actions,
the admin order console and the error contract (status code and error
code) for every failure path.
"""

from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, patch
from uuid import UUID, uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from storefront.core.exceptions import RepositoryError
from storefront.database.models import Product
from storefront.services.orders.repository import OrderRepository

ADDRESS = {
    "label": "Home",
    "street": "221 Residency Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560025",
}


async def prepare_checkout(
    client: AsyncClient,
    headers: dict[str, str],
    products: dict[str, Product],
) -> str:
    """Fill the cart with 2 x 500 and 1 x 250 and save an address."""
    for alias, quantity in (("oak", 2), ("walnut", 1)):
        response = await client.post(
            "/api/v1/cart/items",
            json={"product_id": str(products[alias].id), "quantity": quantity},
            headers=headers,
        )
        assert response.status_code == status.HTTP_201_CREATED

    response = await client.post("/api/v1/addresses", json=ADDRESS, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["id"]


async def checkout(
    client: AsyncClient,
    headers: dict[str, str],
    address_id: str,
    payment_method: str = "upi",
    **extra: Any,
):
    return await client.post(
        "/api/v1/orders",
        json={"address_id": address_id, "payment_method": payment_method},
        headers={**headers, **extra.pop("extra_headers", {})},
    )


# ============================================================================
# Checkout Tests
# ============================================================================


class TestCheckoutAPI:
    """Test POST /orders."""

    async def test_place_order(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        address_id = await prepare_checkout(client, auth_headers, products)

        response = await checkout(client, auth_headers, address_id, "cod")

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["status"] == "pending"
        assert body["payment_method"] == "cod"
        assert body["payment_status"] == "pending"
        assert Decimal(body["subtotal"]) == Decimal("1250.00")
        assert Decimal(body["tax_amount"]) == Decimal("225.00")
        assert Decimal(body["total"]) == Decimal("1475.00")
        assert body["shipping_address"]["city"] == "Bengaluru"
        assert body["can_cancel"] is True
        assert len(body["items"]) == 2
        assert [h["status"] for h in body["status_history"]] == ["pending"]

        cart = (await client.get("/api/v1/cart", headers=auth_headers)).json()
        assert cart["items"] == []

    async def test_idempotency_key_header(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        address_id = await prepare_checkout(client, auth_headers, products)
        key = {"Idempotency-Key": "2f1c9a7e-checkout"}

        first = await checkout(client, auth_headers, address_id, extra_headers=key)
        second = await checkout(client, auth_headers, address_id, extra_headers=key)

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_201_CREATED
        assert second.json()["id"] == first.json()["id"]

        listing = (await client.get("/api/v1/orders", headers=auth_headers)).json()
        assert listing["total"] == 1

    async def test_empty_cart(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
    ) -> None:
        address = await client.post("/api/v1/addresses", json=ADDRESS, headers=auth_headers)

        response = await checkout(client, auth_headers, address.json()["id"])

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "EMPTY_CART"

    async def test_no_address(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        address_id = await prepare_checkout(client, auth_headers, products)
        await client.delete(f"/api/v1/addresses/{address_id}", headers=auth_headers)

        response = await checkout(client, auth_headers, address_id)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "NO_ADDRESS"

    async def test_invalid_payment_method(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        address_id = await prepare_checkout(client, auth_headers, products)

        response = await checkout(client, auth_headers, address_id, "cheque")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "INVALID_PAYMENT_METHOD"

    async def test_malformed_body_is_422(
        self, client: AsyncClient, auth_headers: dict[str, str]
    ) -> None:
        response = await client.post(
            "/api/v1/orders",
            json={"address_id": "not-a-uuid", "payment_method": "upi"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["error"] == "REQUEST_VALIDATION_ERROR"
        assert body["details"][0]["loc"][-1] == "address_id"

    async def test_write_failure_is_500_and_keeps_cart(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> None:
        address_id = await prepare_checkout(client, auth_headers, products)

        with patch.object(
            OrderRepository,
            "add_items",
            AsyncMock(side_effect=RepositoryError("Order items insert failed")),
        ):
            response = await checkout(client, auth_headers, address_id)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "ORDER_CREATION_FAILED"

        cart = (await client.get("/api/v1/cart", headers=auth_headers)).json()
        assert len(cart["items"]) == 2
        orders = (await client.get("/api/v1/orders", headers=auth_headers)).json()
        assert orders["total"] == 0

    async def test_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/orders",
            json={"address_id": str(uuid4()), "payment_method": "upi"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# ============================================================================
# Customer Order Tests
# ============================================================================


class TestCustomerOrderAPI:
    """Test order reads and customer actions."""

    @pytest.fixture
    async def order_id(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> str:
        address_id = await prepare_checkout(client, auth_headers, products)
        response = await checkout(client, auth_headers, address_id)
        return response.json()["id"]

    async def test_get_own_order(
        self, client: AsyncClient, auth_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.get(f"/api/v1/orders/{order_id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == order_id

    async def test_other_user_gets_404(
        self,
        client: AsyncClient,
        headers_for,
        order_id: str,
    ) -> None:
        response = await client.get(
            f"/api/v1/orders/{order_id}", headers=headers_for(uuid4())
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_cancel(
        self, client: AsyncClient, auth_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.post(
            f"/api/v1/orders/{order_id}/cancel", headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "cancelled"
        assert body["can_cancel"] is False
        assert body["status_history"][-1]["notes"] == "Order cancelled by customer"

        again = await client.post(f"/api/v1/orders/{order_id}/cancel", headers=auth_headers)
        assert again.status_code == status.HTTP_409_CONFLICT
        assert again.json()["error"] == "INVALID_TRANSITION"

    async def test_refund_request_requires_delivery(
        self, client: AsyncClient, auth_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.post(
            f"/api/v1/orders/{order_id}/refund-request",
            json={"reason": "Changed my mind"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT


# ============================================================================
# Admin Order Console Tests
# ============================================================================


class TestAdminOrderAPI:
    """Test the admin order workflow."""

    @pytest.fixture
    async def order_id(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        products: dict[str, Product],
    ) -> str:
        address_id = await prepare_checkout(client, auth_headers, products)
        response = await checkout(client, auth_headers, address_id)
        return response.json()["id"]

    async def test_customer_forbidden(
        self, client: AsyncClient, auth_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "confirmed"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_fulfillment_and_refund(
        self,
        client: AsyncClient,
        auth_headers: dict[str, str],
        admin_headers: dict[str, str],
        admin_id: UUID,
        order_id: str,
    ) -> None:
        for target in ("confirmed", "processing", "packed", "shipped"):
            response = await client.patch(
                f"/api/v1/admin/orders/{order_id}/status",
                json={"status": target, "notes": f"Moved to {target}"},
                headers=admin_headers,
            )
            assert response.status_code == status.HTTP_200_OK
            assert response.json()["status"] == target

        tracking = await client.patch(
            f"/api/v1/admin/orders/{order_id}/tracking",
            json={"tracking_number": "BLUEDART-99812"},
            headers=admin_headers,
        )
        assert tracking.json()["tracking_number"] == "BLUEDART-99812"

        for target in ("out_for_delivery", "delivered"):
            await client.patch(
                f"/api/v1/admin/orders/{order_id}/status",
                json={"status": target},
                headers=admin_headers,
            )

        refund = await client.post(
            f"/api/v1/orders/{order_id}/refund-request", headers=auth_headers
        )
        assert refund.status_code == status.HTTP_200_OK
        assert refund.json()["status"] == "refund_requested"

        refunded = await client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "refunded"},
            headers=admin_headers,
        )
        body = refunded.json()
        assert body["status"] == "refunded"
        assert body["payment_status"] == "refunded"
        assert len(body["status_history"]) == 9
        assert body["status_history"][1]["changed_by"] == str(admin_id)

    async def test_invalid_transition_is_409(
        self, client: AsyncClient, admin_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "delivered"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        details = response.json()["details"]
        assert details["current_status"] == "pending"
        assert details["allowed_transitions"] == ["cancelled", "confirmed"]

    async def test_unknown_status_is_400(
        self, client: AsyncClient, admin_headers: dict[str, str], order_id: str
    ) -> None:
        response = await client.patch(
            f"/api/v1/admin/orders/{order_id}/status",
            json={"status": "teleported"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "INVALID_STATUS"

    async def test_list_and_stats(
        self, client: AsyncClient, admin_headers: dict[str, str], order_id: str
    ) -> None:
        listing = await client.get(
            "/api/v1/admin/orders", params={"status": "pending"}, headers=admin_headers
        )
        assert listing.status_code == status.HTTP_200_OK
        assert listing.json()["total"] == 1
        assert listing.json()["items"][0]["id"] == order_id

        stats = (await client.get("/api/v1/admin/orders/stats", headers=admin_headers)).json()
        assert stats["total_orders"] == 1
        assert stats["pending_orders"] == 1
        assert Decimal(stats["total_revenue"]) == Decimal("1475.00")
