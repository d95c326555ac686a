"""
Pytest configuration and shared test fixtures.

This module provides the in-memory SQLite database, seeded catalogue,
identity helpers (signed access tokens, admin role) and an async HTTP
client wired to the FastAPI application with the database dependency
overridden.
"""

import os

# Settings are cached on first use; point them at the test database before
# any storefront module is imported.
os.environ.setdefault("APP_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("APP_LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Callable
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from storefront.core.config import get_settings
from storefront.database.connection import get_db
from storefront.database.models import AppRole, Base, Product, Profile, UserRole
from storefront.main import app
from storefront.services.pricing.calculator import PricingCalculator, PricingPolicy


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a fresh in-memory database with the full schema.

    A StaticPool keeps the single in-memory connection alive for every
    session created from this engine.
    """
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for service level tests.

    Yields:
        AsyncSession bound to the in-memory test database
    """
    async with session_factory() as session:
        yield session


# ============================================================================
# Pricing Fixtures
# ============================================================================


@pytest.fixture
def pricing_policy() -> PricingPolicy:
    """Default policy: 18% tax, free shipping from 1000, flat fee 100."""
    return PricingPolicy(
        tax_rate=Decimal("0.18"),
        free_shipping_threshold=Decimal("1000.00"),
        flat_shipping_fee=Decimal("100.00"),
        promo_rules={"WELCOME10": Decimal("10")},
        currency="INR",
    )


@pytest.fixture
def calculator(pricing_policy: PricingPolicy) -> PricingCalculator:
    return PricingCalculator(pricing_policy)


# ============================================================================
# Catalogue Fixtures
# ============================================================================


async def create_product(
    session: AsyncSession,
    name: str,
    price: str,
    stock: int = 10,
    **fields,
) -> Product:
    """Insert and commit a product."""
    product = Product(name=name, price=Decimal(price), stock=stock, **fields)
    session.add(product)
    await session.commit()
    return product


@pytest.fixture
def product_factory(db_session: AsyncSession) -> Callable:
    """Create extra products inside a test."""

    async def factory(name: str, price: str, stock: int = 10, **fields) -> Product:
        return await create_product(db_session, name, price, stock, **fields)

    return factory


@pytest.fixture
async def products(db_session: AsyncSession) -> dict[str, Product]:
    """
    Seed a small catalogue.

    Returns:
        Products keyed by a short alias
    """
    return {
        "oak": await create_product(
            db_session,
            "Classic Oak Frame",
            "500.00",
            category="wooden",
            material="oak",
            size="8x10",
            featured=True,
        ),
        "walnut": await create_product(
            db_session,
            "Walnut Gallery Frame",
            "250.00",
            category="wooden",
            material="walnut",
        ),
        "mini": await create_product(
            db_session,
            "Mini Desk Frame",
            "100.00",
            category="metal",
            material="aluminium",
        ),
        "collage": await create_product(
            db_session,
            "Family Collage Frame",
            "1500.00",
            category="collage",
            featured=True,
        ),
    }


# ============================================================================
# Identity Fixtures
# ============================================================================


def make_access_token(user_id: UUID, expires_in: timedelta = timedelta(hours=1)) -> str:
    """
    Sign an access token the way the identity provider does.

    Args:
        user_id: Value of the ``sub`` claim
        expires_in: Lifetime of the token; negative for an expired token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "aud": "authenticated",
        "role": "authenticated",
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def bearer(user_id: UUID) -> dict[str, str]:
    """Authorization header for a user."""
    return {"Authorization": f"Bearer {make_access_token(user_id)}"}


@pytest.fixture
def customer_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_customer_id() -> UUID:
    return uuid4()


@pytest.fixture
async def admin_id(db_session: AsyncSession) -> UUID:
    """A user holding the admin role."""
    user_id = uuid4()
    db_session.add(Profile(id=user_id, full_name="Store Admin"))
    db_session.add(UserRole(user_id=user_id, role=AppRole.ADMIN))
    await db_session.commit()
    return user_id


@pytest.fixture
def auth_headers(customer_id: UUID) -> dict[str, str]:
    return bearer(customer_id)


@pytest.fixture
def admin_headers(admin_id: UUID) -> dict[str, str]:
    return bearer(admin_id)


@pytest.fixture
def token_factory() -> Callable[..., str]:
    return make_access_token


@pytest.fixture
def headers_for() -> Callable[[UUID], dict[str, str]]:
    """Build the Authorization header for any user id."""
    return bearer


# ============================================================================
# HTTP Client Fixtures
# ============================================================================


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an asynchronous test client for the FastAPI application.

    Every request gets its own session on the test database, mirroring the
    request scoped session of the real dependency.

    Example:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as async_client:
        yield async_client

    app.dependency_overrides.clear()
