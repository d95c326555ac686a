"""
Public catalogue endpoints.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from storefront.api.deps import CatalogServiceDep
from storefront.schemas.catalog import ProductListResponse, ProductResponse

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
)
async def list_products(
    catalog: CatalogServiceDep,
    category: Optional[str] = Query(None, description="Filter by category"),
    featured: Optional[bool] = Query(None, description="Filter by featured flag"),
    search: Optional[str] = Query(None, max_length=100, description="Search name and description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ProductListResponse:
    products, total = await catalog.list_products(
        category=category,
        featured=featured,
        search=search,
        page=page,
        page_size=page_size,
    )
    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product",
)
async def get_product(product_id: UUID, catalog: CatalogServiceDep) -> ProductResponse:
    product = await catalog.get_product(product_id)
    return ProductResponse.model_validate(product)
