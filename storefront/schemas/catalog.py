"""
Product schemas for API request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    """Fields shared by product create and update requests."""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, max_length=100)
    material: Optional[str] = Field(None, max_length=100)
    size: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=100)
    finish: Optional[str] = Field(None, max_length=100)
    image_url: Optional[str] = Field(None, max_length=1000)


class ProductCreateRequest(ProductBase):
    """Admin request to create a product."""

    name: str = Field(..., max_length=255, description="Product name")
    price: Decimal = Field(..., max_digits=10, decimal_places=2, description="Unit price")
    stock: int = Field(default=0, description="Units in stock")
    featured: bool = Field(default=False)


class ProductUpdateRequest(ProductBase):
    """Admin request to update a product; only sent fields change."""

    name: Optional[str] = Field(None, max_length=255)
    price: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    stock: Optional[int] = None
    featured: Optional[bool] = None


class ProductResponse(BaseModel):
    """Product as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    price: Decimal
    category: Optional[str] = None
    material: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    finish: Optional[str] = None
    image_url: Optional[str] = None
    stock: int
    featured: bool
    in_stock: bool
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    """Paginated product list."""

    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
