"""
Custom frame builder schemas for API request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.services.pricing.custom_frame import FrameSpec

OptionCategory = Literal["material", "size", "color", "finish"]


class FrameOptionCreateRequest(BaseModel):
    """Admin request to create a builder option."""

    model_config = ConfigDict(str_strip_whitespace=True)

    category: OptionCategory
    name: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price_modifier: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1000)
    available: bool = True
    sort_order: int = 0


class FrameOptionUpdateRequest(BaseModel):
    """Admin request to update a builder option; only sent fields change."""

    model_config = ConfigDict(str_strip_whitespace=True)

    category: Optional[OptionCategory] = None
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=2000)
    price_modifier: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=1000)
    available: Optional[bool] = None
    sort_order: Optional[int] = None


class FrameOptionResponse(BaseModel):
    """Builder option as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    category: str
    name: str
    description: Optional[str] = None
    price_modifier: Decimal
    image_url: Optional[str] = None
    available: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class FrameQuoteRequest(BaseModel):
    """Builder choices to price."""

    model_config = ConfigDict(str_strip_whitespace=True)

    material: str = Field(..., max_length=50, examples=["wood"])
    size: str = Field(..., max_length=50, examples=["8x10"])
    matting: str = Field(default="none", max_length=50)
    glazing: str = Field(default="glass", max_length=50)
    mounting: str = Field(default="paper", max_length=50)
    engraving: Optional[str] = Field(None, max_length=100)
    option_ids: list[UUID] = Field(default_factory=list, max_length=20)

    def to_spec(self) -> FrameSpec:
        return FrameSpec(
            material=self.material,
            size=self.size,
            matting=self.matting,
            glazing=self.glazing,
            mounting=self.mounting,
            engraving=self.engraving,
        )


class FrameQuoteResponse(BaseModel):
    """Itemised custom frame quote."""

    frame_price: Decimal
    matting: Decimal
    glazing: Decimal
    engraving: Decimal
    options: Decimal
    total: Decimal
    currency: str
