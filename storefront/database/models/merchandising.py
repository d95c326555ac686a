"""
Collection and bundle models.

Collections group products for browsing; bundles group products sold
together at a percentage off the sum of their live prices. Membership rows
are plain link rows, written by replacing a grouping's whole product list.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database.base import Base, BaseModel, UUIDMixin, utcnow
from storefront.database.models.catalog import Product


class Collection(BaseModel):
    """
    Curated group of products (e.g. "Wedding", "Minimalist").

    Attributes:
        name: Display name
        description: Long form description
        image_url: Cover image
        featured: Whether the collection is highlighted on the storefront
        products: Member products ordered by name (read only)
    """

    __tablename__ = "collections"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Collection display name",
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Highlighted on the storefront",
    )

    products: Mapped[list[Product]] = relationship(
        Product,
        secondary="product_collections",
        viewonly=True,
        lazy="selectin",
        order_by=Product.name,
    )

    __table_args__ = {"comment": "Curated product collections"}

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, name={self.name!r})>"


class ProductCollection(Base, UUIDMixin):
    """Membership of a product in a collection."""

    __tablename__ = "product_collections"

    collection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        UniqueConstraint(
            "collection_id", "product_id", name="uq_product_collections_collection_product"
        ),
    )


class Bundle(BaseModel):
    """
    Products sold together at a discount.

    Attributes:
        name: Display name
        description: Long form description
        image_url: Cover image
        discount_percentage: Percent taken off the sum of member prices
        featured: Whether the bundle is highlighted on the storefront
        products: Member products ordered by name (read only)
    """

    __tablename__ = "bundles"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bundle display name",
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    discount_percentage: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=2),
        nullable=False,
        default=Decimal("0"),
        comment="Percent off the summed product prices",
    )

    featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Highlighted on the storefront",
    )

    products: Mapped[list[Product]] = relationship(
        Product,
        secondary="bundle_products",
        viewonly=True,
        lazy="selectin",
        order_by=Product.name,
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_bundles_discount_percentage_range",
        ),
        {"comment": "Discounted product bundles"},
    )

    def __repr__(self) -> str:
        return (
            f"<Bundle(id={self.id}, name={self.name!r}, "
            f"discount_percentage={self.discount_percentage})>"
        )


class BundleProduct(Base, UUIDMixin):
    """Membership of a product in a bundle."""

    __tablename__ = "bundle_products"

    bundle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("bundles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("bundle_id", "product_id", name="uq_bundle_products_bundle_product"),
    )
