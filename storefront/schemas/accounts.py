"""
Profile and user management schemas.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileUpdateRequest(BaseModel):
    """Profile update; only sent fields change."""

    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=30)
    avatar_url: Optional[str] = Field(None, max_length=1000)


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime


class AdminStatusResponse(BaseModel):
    is_admin: bool


class UserSummaryResponse(BaseModel):
    """User row in the admin console."""

    id: UUID
    full_name: Optional[str] = None
    phone: Optional[str] = None
    is_admin: bool
    created_at: datetime


class UserListResponse(BaseModel):
    items: list[UserSummaryResponse]
    total: int
