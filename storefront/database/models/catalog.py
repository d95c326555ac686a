"""
Product model for the frame catalogue.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import BaseModel


class Product(BaseModel):
    """
    Catalogue product (a photo frame).

    Attributes:
        name: Display name
        description: Long form description
        price: Unit price in the store currency
        category: Category slug used for browsing filters
        material: Frame material (wood, metal, ...)
        size: Frame size label
        color: Frame color
        finish: Surface finish
        image_url: Hosted product image
        stock: Units on hand
        featured: Whether the product is highlighted on the storefront
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Product display name",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Product description",
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        comment="Unit price",
    )

    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
        comment="Product category",
    )

    material: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    size: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    finish: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
        comment="Product image URL",
    )

    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Units in stock",
    )

    featured: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Highlighted on the storefront",
    )

    __table_args__ = (
        Index("ix_products_category_featured", "category", "featured"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        {"comment": "Catalogue of frames offered in the storefront"},
    )

    @property
    def in_stock(self) -> bool:
        """Check if at least one unit is available."""
        return self.stock > 0

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name={self.name!r}, price={self.price})>"
