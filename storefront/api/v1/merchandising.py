"""
Collection and bundle endpoints: public browsing and admin curation.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import AdminUserId, BundleServiceDep, CollectionServiceDep
from storefront.schemas.merchandising import (
    BundleCreateRequest,
    BundleResponse,
    BundleUpdateRequest,
    CollectionCreateRequest,
    CollectionResponse,
    CollectionUpdateRequest,
    SetProductsRequest,
)

collections_router = APIRouter(prefix="/collections", tags=["collections"])
bundles_router = APIRouter(prefix="/bundles", tags=["bundles"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


# Collections


@collections_router.get(
    "",
    response_model=list[CollectionResponse],
    summary="List collections",
)
async def list_collections(
    collections: CollectionServiceDep,
    featured: Optional[bool] = Query(None, description="Filter by featured flag"),
) -> list[CollectionResponse]:
    items = await collections.list_collections(featured=featured)
    return [CollectionResponse.model_validate(c) for c in items]


@collections_router.get(
    "/{collection_id}",
    response_model=CollectionResponse,
    summary="Get collection with its products",
)
async def get_collection(
    collection_id: UUID, collections: CollectionServiceDep
) -> CollectionResponse:
    collection = await collections.get_collection(collection_id)
    return CollectionResponse.model_validate(collection)


@admin_router.post(
    "/collections",
    response_model=CollectionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create collection",
)
async def create_collection(
    request: CollectionCreateRequest,
    admin_id: AdminUserId,
    collections: CollectionServiceDep,
) -> CollectionResponse:
    collection = await collections.create_collection(request.model_dump())
    return CollectionResponse.model_validate(collection)


@admin_router.put(
    "/collections/{collection_id}",
    response_model=CollectionResponse,
    summary="Update collection",
)
async def update_collection(
    collection_id: UUID,
    request: CollectionUpdateRequest,
    admin_id: AdminUserId,
    collections: CollectionServiceDep,
) -> CollectionResponse:
    collection = await collections.update_collection(
        collection_id, request.model_dump(exclude_unset=True)
    )
    return CollectionResponse.model_validate(collection)


@admin_router.put(
    "/collections/{collection_id}/products",
    response_model=CollectionResponse,
    summary="Replace collection products",
)
async def set_collection_products(
    collection_id: UUID,
    request: SetProductsRequest,
    admin_id: AdminUserId,
    collections: CollectionServiceDep,
) -> CollectionResponse:
    collection = await collections.set_products(collection_id, request.product_ids)
    return CollectionResponse.model_validate(collection)


@admin_router.delete(
    "/collections/{collection_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete collection",
)
async def delete_collection(
    collection_id: UUID,
    admin_id: AdminUserId,
    collections: CollectionServiceDep,
) -> None:
    await collections.delete_collection(collection_id)


# Bundles


@bundles_router.get(
    "",
    response_model=list[BundleResponse],
    summary="List bundles with live pricing",
)
async def list_bundles(
    bundles: BundleServiceDep,
    featured: Optional[bool] = Query(None, description="Filter by featured flag"),
) -> list[BundleResponse]:
    items = await bundles.list_bundles(featured=featured)
    return [BundleResponse.from_bundle(b, bundles.price(b)) for b in items]


@bundles_router.get(
    "/{bundle_id}",
    response_model=BundleResponse,
    summary="Get bundle with its products and pricing",
)
async def get_bundle(bundle_id: UUID, bundles: BundleServiceDep) -> BundleResponse:
    bundle = await bundles.get_bundle(bundle_id)
    return BundleResponse.from_bundle(bundle, bundles.price(bundle))


@admin_router.post(
    "/bundles",
    response_model=BundleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create bundle",
)
async def create_bundle(
    request: BundleCreateRequest,
    admin_id: AdminUserId,
    bundles: BundleServiceDep,
) -> BundleResponse:
    bundle = await bundles.create_bundle(request.model_dump())
    return BundleResponse.from_bundle(bundle, bundles.price(bundle))


@admin_router.put(
    "/bundles/{bundle_id}",
    response_model=BundleResponse,
    summary="Update bundle",
)
async def update_bundle(
    bundle_id: UUID,
    request: BundleUpdateRequest,
    admin_id: AdminUserId,
    bundles: BundleServiceDep,
) -> BundleResponse:
    bundle = await bundles.update_bundle(bundle_id, request.model_dump(exclude_unset=True))
    return BundleResponse.from_bundle(bundle, bundles.price(bundle))


@admin_router.put(
    "/bundles/{bundle_id}/products",
    response_model=BundleResponse,
    summary="Replace bundle products",
)
async def set_bundle_products(
    bundle_id: UUID,
    request: SetProductsRequest,
    admin_id: AdminUserId,
    bundles: BundleServiceDep,
) -> BundleResponse:
    bundle = await bundles.set_products(bundle_id, request.product_ids)
    return BundleResponse.from_bundle(bundle, bundles.price(bundle))


@admin_router.delete(
    "/bundles/{bundle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete bundle",
)
async def delete_bundle(
    bundle_id: UUID,
    admin_id: AdminUserId,
    bundles: BundleServiceDep,
) -> None:
    await bundles.delete_bundle(bundle_id)
