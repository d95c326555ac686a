"""
Collection and bundle schemas for API request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from storefront.database.models.merchandising import Bundle
from storefront.schemas.catalog import ProductResponse
from storefront.services.pricing.bundle import BundlePrice


class GroupingBase(BaseModel):
    """Fields shared by collection and bundle requests."""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(None, max_length=5000)
    image_url: Optional[str] = Field(None, max_length=1000)


class CollectionCreateRequest(GroupingBase):
    """Admin request to create a collection."""

    name: str = Field(..., max_length=255, description="Collection name")
    featured: bool = Field(default=False)


class CollectionUpdateRequest(GroupingBase):
    """Admin request to update a collection; only sent fields change."""

    name: Optional[str] = Field(None, max_length=255)
    featured: Optional[bool] = None


class SetProductsRequest(BaseModel):
    """Admin request replacing the products of a collection or bundle."""

    product_ids: list[UUID] = Field(..., max_length=200, description="Member products")


class CollectionResponse(BaseModel):
    """Collection with its products."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    featured: bool
    products: list[ProductResponse]
    created_at: datetime
    updated_at: datetime


class BundleCreateRequest(GroupingBase):
    """Admin request to create a bundle."""

    name: str = Field(..., max_length=255, description="Bundle name")
    discount_percentage: Decimal = Field(
        default=Decimal("0"),
        max_digits=5,
        decimal_places=2,
        description="Percent off the summed product prices",
    )
    featured: bool = Field(default=False)


class BundleUpdateRequest(GroupingBase):
    """Admin request to update a bundle; only sent fields change."""

    name: Optional[str] = Field(None, max_length=255)
    discount_percentage: Optional[Decimal] = Field(None, max_digits=5, decimal_places=2)
    featured: Optional[bool] = None


class BundlePriceResponse(BaseModel):
    """Live bundle pricing."""

    original_price: Decimal
    bundle_price: Decimal
    savings: Decimal
    discount_percentage: Decimal
    product_count: int


class BundleResponse(BaseModel):
    """Bundle with its products and live pricing."""

    id: UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    discount_percentage: Decimal
    featured: bool
    products: list[ProductResponse]
    pricing: BundlePriceResponse
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_bundle(cls, bundle: Bundle, pricing: BundlePrice) -> "BundleResponse":
        return cls(
            id=bundle.id,
            name=bundle.name,
            description=bundle.description,
            image_url=bundle.image_url,
            discount_percentage=bundle.discount_percentage,
            featured=bundle.featured,
            products=[ProductResponse.model_validate(p) for p in bundle.products],
            pricing=BundlePriceResponse(**pricing.model_dump()),
            created_at=bundle.created_at,
            updated_at=bundle.updated_at,
        )
