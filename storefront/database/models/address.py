"""
Shipping address model.

A user owns any number of addresses; at most one of them is the default.
"""

import uuid
from typing import Any

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import BaseModel

DEFAULT_COUNTRY = "India"


class Address(BaseModel):
    """
    Saved shipping address.

    Attributes:
        user_id: Address owner
        label: Short name chosen by the user (Home, Office, ...)
        street: Street and house details
        city: City
        state: State or province
        postal_code: Postal / PIN code
        country: Country, defaults to India
        is_default: Whether this is the user's default address
    """

    __tablename__ = "addresses"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
        comment="Address owner",
    )

    label: Mapped[str] = mapped_column(String(50), nullable=False)
    street: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)

    country: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default=DEFAULT_COUNTRY,
    )

    is_default: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Default shipping address for the user",
    )

    __table_args__ = (
        Index("ix_addresses_user_default", "user_id", "is_default"),
    )

    def to_snapshot(self) -> dict[str, Any]:
        """
        Copy of the address as stored on an order.

        Later edits or deletion of the address do not affect the snapshot.
        """
        return {
            "label": self.label,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }
