"""
Account service: customer profiles and role management.

Users are created by the identity provider; a profile row is created the
first time the storefront sees a user.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError, RepositoryError, ValidationError
from storefront.core.logging import get_logger
from storefront.database.models.account import AppRole, Profile, UserRole

logger = get_logger(__name__)

PROFILE_FIELDS = ("full_name", "phone", "avatar_url")


@dataclass
class UserSummary:
    """Profile with its admin flag, as shown in the admin user list."""

    profile: Profile
    is_admin: bool


class AccountService:
    """Service for profiles and roles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find_profile(self, user_id: uuid.UUID) -> Optional[Profile]:
        try:
            result = await self.session.execute(
                select(Profile).where(Profile.id == user_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to retrieve profile",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to retrieve profile", user_id=str(user_id)) from e

    async def get_profile(self, user_id: uuid.UUID) -> Profile:
        """
        Get the user's profile, creating an empty one on first access.
        """
        profile = await self._find_profile(user_id)
        if profile is not None:
            return profile

        try:
            profile = Profile(id=user_id)
            self.session.add(profile)
            await self.session.commit()
        except IntegrityError:
            # Created concurrently by another request
            await self.session.rollback()
            profile = await self._find_profile(user_id)
            if profile is None:
                raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to create profile",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to create profile", user_id=str(user_id)) from e

        logger.info("Profile created", user_id=str(user_id))
        return profile

    async def update_profile(
        self, user_id: uuid.UUID, fields: Mapping[str, Any]
    ) -> Profile:
        """
        Update name, phone or avatar.

        Raises:
            ValidationError: If full_name is given but blank
        """
        changes = {key: value for key, value in fields.items() if key in PROFILE_FIELDS}

        if "full_name" in changes:
            if changes["full_name"] is None or not str(changes["full_name"]).strip():
                raise ValidationError("Full name cannot be blank", field="full_name")
            changes["full_name"] = str(changes["full_name"]).strip()

        profile = await self.get_profile(user_id)

        try:
            for key, value in changes.items():
                setattr(profile, key, value)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to update profile",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to update profile", user_id=str(user_id)) from e

        logger.info("Profile updated", user_id=str(user_id), fields=sorted(changes.keys()))
        return profile

    async def is_admin(self, user_id: uuid.UUID) -> bool:
        """Check whether the user holds the admin role."""
        try:
            result = await self.session.execute(
                select(UserRole.id).where(
                    UserRole.user_id == user_id,
                    UserRole.role == AppRole.ADMIN,
                )
            )
            return result.scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            logger.error(
                "Failed to check admin role",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to check admin role") from e

    async def grant_admin(self, user_id: uuid.UUID) -> None:
        """
        Grant the admin role. Granting it twice is a no-op.

        Raises:
            NotFoundError: If the user has no profile
        """
        if await self._find_profile(user_id) is None:
            raise NotFoundError("User", user_id)
        if await self.is_admin(user_id):
            return

        try:
            self.session.add(UserRole(user_id=user_id, role=AppRole.ADMIN))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to grant admin role",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to grant admin role") from e

        logger.info("Admin role granted", target_user_id=str(user_id))

    async def revoke_admin(self, user_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
        """
        Revoke the admin role.

        Raises:
            ValidationError: If an admin tries to revoke their own role
        """
        if user_id == acting_user_id:
            raise ValidationError(
                "Admins cannot revoke their own admin role",
                code="SELF_REVOKE",
            )

        try:
            await self.session.execute(
                delete(UserRole).where(
                    UserRole.user_id == user_id,
                    UserRole.role == AppRole.ADMIN,
                )
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Failed to revoke admin role",
                user_id=str(user_id),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to revoke admin role") from e

        logger.info(
            "Admin role revoked",
            target_user_id=str(user_id),
            revoked_by=str(acting_user_id),
        )

    async def list_users(
        self, search: Optional[str] = None, limit: int = 50, offset: int = 0
    ) -> tuple[Sequence[UserSummary], int]:
        """
        List profiles with their admin flag (admin console).

        Args:
            search: Case-insensitive match on name or phone
        """
        try:
            conditions = []
            if search:
                pattern = f"%{search.strip()}%"
                conditions.append(
                    or_(Profile.full_name.ilike(pattern), Profile.phone.ilike(pattern))
                )

            total = (
                await self.session.execute(
                    select(func.count(Profile.id)).where(*conditions)
                )
            ).scalar_one()

            profiles = (
                await self.session.execute(
                    select(Profile)
                    .where(*conditions)
                    .order_by(Profile.created_at.desc())
                    .limit(limit)
                    .offset(offset)
                )
            ).scalars().all()

            admin_ids = set(
                (
                    await self.session.execute(
                        select(UserRole.user_id).where(
                            UserRole.role == AppRole.ADMIN,
                            UserRole.user_id.in_([p.id for p in profiles]),
                        )
                    )
                ).scalars().all()
            )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list users",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise RepositoryError("Failed to list users") from e

        return [UserSummary(profile=p, is_admin=p.id in admin_ids) for p in profiles], total
