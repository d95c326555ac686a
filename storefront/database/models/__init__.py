"""
Database models package initialization.

Models are imported here so they are registered with the Base metadata for
Alembic auto-generation and relationship resolution.
"""

from storefront.database.base import Base, BaseModel, TimestampMixin, UUIDMixin
from storefront.database.models.account import AppRole, Profile, UserRole
from storefront.database.models.address import Address
from storefront.database.models.cart import CartItem, WishlistItem
from storefront.database.models.catalog import Product
from storefront.database.models.custom_frame import CustomFrameOption
from storefront.database.models.merchandising import (
    Bundle,
    BundleProduct,
    Collection,
    ProductCollection,
)
from storefront.database.models.order import Order, OrderItem, OrderStatusHistory

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "AppRole",
    "Profile",
    "UserRole",
    "Address",
    "CartItem",
    "WishlistItem",
    "Product",
    "Collection",
    "ProductCollection",
    "Bundle",
    "BundleProduct",
    "CustomFrameOption",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
]
