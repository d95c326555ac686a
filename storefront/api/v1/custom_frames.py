"""
Custom frame builder endpoints: options, quotes and admin option maintenance.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from storefront.api.deps import AdminUserId, CustomFrameServiceDep
from storefront.schemas.custom_frames import (
    FrameOptionCreateRequest,
    FrameOptionResponse,
    FrameOptionUpdateRequest,
    FrameQuoteRequest,
    FrameQuoteResponse,
    OptionCategory,
)

router = APIRouter(prefix="/custom-frames", tags=["custom-frames"])
admin_router = APIRouter(prefix="/admin/frame-options", tags=["admin"])


@router.get(
    "/options",
    response_model=list[FrameOptionResponse],
    summary="List available builder options",
)
async def list_options(
    frames: CustomFrameServiceDep,
    category: Optional[OptionCategory] = Query(None, description="Builder step"),
) -> list[FrameOptionResponse]:
    options = await frames.list_options(category=category)
    return [FrameOptionResponse.model_validate(o) for o in options]


@router.post(
    "/quote",
    response_model=FrameQuoteResponse,
    summary="Price a custom frame",
)
async def quote_frame(
    request: FrameQuoteRequest,
    frames: CustomFrameServiceDep,
) -> FrameQuoteResponse:
    quote = await frames.quote(request.to_spec(), request.option_ids)
    return FrameQuoteResponse(**quote.model_dump())


@admin_router.get(
    "",
    response_model=list[FrameOptionResponse],
    summary="List all builder options",
)
async def admin_list_options(
    admin_id: AdminUserId,
    frames: CustomFrameServiceDep,
    category: Optional[OptionCategory] = Query(None),
) -> list[FrameOptionResponse]:
    options = await frames.list_options(category=category, include_unavailable=True)
    return [FrameOptionResponse.model_validate(o) for o in options]


@admin_router.post(
    "",
    response_model=FrameOptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create builder option",
)
async def create_option(
    request: FrameOptionCreateRequest,
    admin_id: AdminUserId,
    frames: CustomFrameServiceDep,
) -> FrameOptionResponse:
    option = await frames.create_option(request.model_dump())
    return FrameOptionResponse.model_validate(option)


@admin_router.put(
    "/{option_id}",
    response_model=FrameOptionResponse,
    summary="Update builder option",
)
async def update_option(
    option_id: UUID,
    request: FrameOptionUpdateRequest,
    admin_id: AdminUserId,
    frames: CustomFrameServiceDep,
) -> FrameOptionResponse:
    option = await frames.update_option(option_id, request.model_dump(exclude_unset=True))
    return FrameOptionResponse.model_validate(option)


@admin_router.delete(
    "/{option_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete builder option",
)
async def delete_option(
    option_id: UUID,
    admin_id: AdminUserId,
    frames: CustomFrameServiceDep,
) -> None:
    await frames.delete_option(option_id)
