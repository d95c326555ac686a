"""
FastAPI dependencies for authentication, authorization and services.

Access tokens are issued by the external identity provider. This module only
verifies their signature and expiry and reads the user id from the ``sub``
claim; admin rights come from the ``user_roles`` table.
"""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import get_settings
from storefront.core.exceptions import ForbiddenError, UnauthorizedError
from storefront.core.logging import get_logger, set_user_id
from storefront.database.connection import get_db
from storefront.services.accounts.service import AccountService
from storefront.services.addresses.service import AddressService
from storefront.services.bundles.service import BundleService
from storefront.services.cart.service import CartService
from storefront.services.catalog.service import CatalogService
from storefront.services.collections.service import CollectionService
from storefront.services.custom_frames.service import CustomFrameService
from storefront.services.orders.service import OrderService
from storefront.services.wishlist.service import WishlistService

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def decode_access_token(token: str) -> UUID:
    """
    Verify an access token and return the user id it was issued for.

    Raises:
        UnauthorizedError: If the token is invalid, expired or has no usable
            ``sub`` claim
    """
    settings = get_settings()
    options = {"verify_aud": settings.jwt_audience is not None}

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as e:
        logger.warning(
            "Authentication failed: JWT validation error",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise UnauthorizedError("Could not validate credentials") from e

    user_id_str: Optional[str] = payload.get("sub")
    if user_id_str is None:
        logger.warning("Authentication failed: Token missing 'sub' claim")
        raise UnauthorizedError("Could not validate credentials")

    try:
        return UUID(user_id_str)
    except ValueError as e:
        logger.warning(
            "Authentication failed: Invalid user ID format",
            user_id=user_id_str,
        )
        raise UnauthorizedError("Could not validate credentials") from e


async def get_current_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> UUID:
    """
    Authenticate the request from its bearer token.

    Returns:
        UUID: Identity provider user id

    Raises:
        UnauthorizedError: If no valid bearer token was sent
    """
    if credentials is None:
        logger.warning("Authentication failed: No credentials provided")
        raise UnauthorizedError("Authentication required")

    user_id = decode_access_token(credentials.credentials)
    set_user_id(str(user_id))
    return user_id


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]


def get_account_service(db: DatabaseSession) -> AccountService:
    return AccountService(db)


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]


async def get_current_admin_id(
    user_id: CurrentUserId,
    accounts: AccountServiceDep,
) -> UUID:
    """
    Dependency for endpoints requiring admin access.

    Raises:
        ForbiddenError: If the user does not hold the admin role
    """
    if not await accounts.is_admin(user_id):
        logger.warning("Access denied: admin role required", user_id=str(user_id))
        raise ForbiddenError("Admin access required")
    return user_id


AdminUserId = Annotated[UUID, Depends(get_current_admin_id)]


def get_catalog_service(db: DatabaseSession) -> CatalogService:
    return CatalogService(db)


def get_collection_service(db: DatabaseSession) -> CollectionService:
    return CollectionService(db)


def get_bundle_service(db: DatabaseSession) -> BundleService:
    return BundleService(db)


def get_custom_frame_service(db: DatabaseSession) -> CustomFrameService:
    return CustomFrameService(db)


def get_cart_service(db: DatabaseSession) -> CartService:
    return CartService(db)


def get_wishlist_service(db: DatabaseSession) -> WishlistService:
    return WishlistService(db)


def get_address_service(db: DatabaseSession) -> AddressService:
    return AddressService(db)


def get_order_service(db: DatabaseSession) -> OrderService:
    return OrderService(db)


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
CollectionServiceDep = Annotated[CollectionService, Depends(get_collection_service)]
BundleServiceDep = Annotated[BundleService, Depends(get_bundle_service)]
CustomFrameServiceDep = Annotated[CustomFrameService, Depends(get_custom_frame_service)]
CartServiceDep = Annotated[CartService, Depends(get_cart_service)]
WishlistServiceDep = Annotated[WishlistService, Depends(get_wishlist_service)]
AddressServiceDep = Annotated[AddressService, Depends(get_address_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
