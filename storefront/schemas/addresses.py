"""
Address schemas for API request/response validation.

Required address fields are checked by the address service so that a blank
value is reported as a validation error naming the field.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AddressRequest(BaseModel):
    """Address create or replace request."""

    label: Optional[str] = Field(None, max_length=50, description="Home, Office, ...")
    street: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    postal_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100, description="Defaults to India")
    is_default: bool = False


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    label: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool
    created_at: datetime
