"""
Tests for application wiring: health checks, request correlation and the
error envelope.
"""

from unittest.mock import AsyncMock, patch
from uuid import UUID

from fastapi import status
from httpx import AsyncClient


class TestHealthEndpoints:
    """Test liveness and readiness checks."""

    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"

    async def test_live(self, client: AsyncClient) -> None:
        response = await client.get("/live")

        assert response.json()["status"] == "alive"

    async def test_ready(self, client: AsyncClient) -> None:
        with patch("storefront.main.check_database_health", AsyncMock(return_value=True)):
            response = await client.get("/ready")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["database"] == "healthy"

    async def test_not_ready(self, client: AsyncClient) -> None:
        with patch("storefront.main.check_database_health", AsyncMock(return_value=False)):
            response = await client.get("/ready")

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["status"] == "not_ready"


class TestRequestCorrelation:
    """Test X-Request-ID handling."""

    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        response = await client.get("/live", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"

    async def test_request_id_generated(self, client: AsyncClient) -> None:
        response = await client.get("/live")

        UUID(response.headers["X-Request-ID"])

    async def test_error_carries_request_id(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/cart", headers={"X-Request-ID": "req-401"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["request_id"] == "req-401"


class TestErrorEnvelope:
    """Test the shape of error responses."""

    async def test_validation_error(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/products", params={"page": 0})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        body = response.json()
        assert body["error"] == "REQUEST_VALIDATION_ERROR"
        assert body["details"][0]["loc"] == ["query", "page"]

    async def test_not_found_error(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/products/7a0b3c57-1f7e-4c55-9d6e-3c1b2a4f9e10")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        body = response.json()
        assert body["error"] == "NOT_FOUND"
        assert set(body) == {"error", "message", "details", "request_id"}
