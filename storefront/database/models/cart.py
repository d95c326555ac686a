"""
Cart and wishlist models.

Cart lines hold only a product reference and a quantity; the unit price is
always read live from the product. Both tables allow one row per
(user, product).
"""

import uuid

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.database.base import BaseModel
from storefront.database.models.catalog import Product


class CartItem(BaseModel):
    """
    One product line in a user's shopping cart.

    Attributes:
        user_id: Owner of the cart
        product_id: Product in the cart
        quantity: Number of units (at least one)
        product: Loaded product, used for the live unit price
    """

    __tablename__ = "cart_items"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="Cart owner",
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        comment="Product in the cart",
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Number of units",
    )

    product: Mapped[Product] = relationship(Product, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<CartItem(id={self.id}, user_id={self.user_id}, "
            f"product_id={self.product_id}, quantity={self.quantity})>"
        )


class WishlistItem(BaseModel):
    """Product saved to a user's wishlist."""

    __tablename__ = "wishlist_items"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )

    product: Mapped[Product] = relationship(Product, lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_wishlist_items_user_product"),
    )
