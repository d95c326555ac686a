"""
Custom frame builder options.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import BaseModel

FRAME_OPTION_CATEGORIES = ("material", "size", "color", "finish")


class CustomFrameOption(BaseModel):
    """
    Option shown in the custom frame builder.

    Attributes:
        category: One of material, size, color or finish
        name: Display name
        description: Short description
        price_modifier: Amount added to a quote that selects the option
        image_url: Swatch or preview image
        available: Whether customers can pick the option
        sort_order: Position within its category
    """

    __tablename__ = "custom_frame_options"

    category: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Builder step the option belongs to",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    price_modifier: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
        default=Decimal("0"),
        comment="Amount added to the quote",
    )

    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    sort_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    __table_args__ = (
        Index("ix_custom_frame_options_category_sort", "category", "sort_order"),
        CheckConstraint(
            "category IN ('material', 'size', 'color', 'finish')",
            name="ck_custom_frame_options_category",
        ),
        {"comment": "Options offered by the custom frame builder"},
    )

    def __repr__(self) -> str:
        return (
            f"<CustomFrameOption(id={self.id}, category={self.category!r}, "
            f"name={self.name!r})>"
        )
