"""
Profile and role models.

Identities live with the external identity provider; these tables only hold
the storefront's view of a user keyed by the provider's user id.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database.base import Base, BaseModel, TimestampMixin


class AppRole(str, Enum):
    """Roles a user can hold in the storefront."""

    ADMIN = "admin"
    CUSTOMER = "customer"


class Profile(Base, TimestampMixin):
    """
    Customer profile.

    The primary key is the identity provider's user id, so there is at most
    one profile per user.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        comment="Identity provider user id",
    )

    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)


class UserRole(BaseModel):
    """Role granted to a user."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        index=True,
    )

    role: Mapped[AppRole] = mapped_column(
        SQLEnum(
            AppRole,
            name="app_role",
            values_callable=lambda enum: [member.value for member in enum],
            create_constraint=True,
        ),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
