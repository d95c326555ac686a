"""
Saved address and profile endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, status

from storefront.api.deps import AccountServiceDep, AddressServiceDep, CurrentUserId
from storefront.schemas.accounts import (
    AdminStatusResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from storefront.schemas.addresses import AddressRequest, AddressResponse

router = APIRouter(prefix="/addresses", tags=["addresses"])
profile_router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=list[AddressResponse], summary="List saved addresses")
async def list_addresses(
    user_id: CurrentUserId,
    addresses: AddressServiceDep,
) -> list[AddressResponse]:
    items = await addresses.list_addresses(user_id)
    return [AddressResponse.model_validate(a) for a in items]


@router.post(
    "",
    response_model=AddressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add address",
)
async def add_address(
    request: AddressRequest,
    user_id: CurrentUserId,
    addresses: AddressServiceDep,
) -> AddressResponse:
    address = await addresses.add_address(user_id, request.model_dump())
    return AddressResponse.model_validate(address)


@router.put("/{address_id}", response_model=AddressResponse, summary="Update address")
async def update_address(
    address_id: UUID,
    request: AddressRequest,
    user_id: CurrentUserId,
    addresses: AddressServiceDep,
) -> AddressResponse:
    address = await addresses.update_address(user_id, address_id, request.model_dump())
    return AddressResponse.model_validate(address)


@router.delete(
    "/{address_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete address",
)
async def delete_address(
    address_id: UUID,
    user_id: CurrentUserId,
    addresses: AddressServiceDep,
) -> None:
    await addresses.delete_address(user_id, address_id)


@router.post(
    "/{address_id}/default",
    response_model=AddressResponse,
    summary="Make address the default",
)
async def set_default_address(
    address_id: UUID,
    user_id: CurrentUserId,
    addresses: AddressServiceDep,
) -> AddressResponse:
    address = await addresses.set_default(user_id, address_id)
    return AddressResponse.model_validate(address)


@profile_router.get("", response_model=ProfileResponse, summary="Get own profile")
async def get_profile(user_id: CurrentUserId, accounts: AccountServiceDep) -> ProfileResponse:
    profile = await accounts.get_profile(user_id)
    return ProfileResponse.model_validate(profile)


@profile_router.patch("", response_model=ProfileResponse, summary="Update own profile")
async def update_profile(
    request: ProfileUpdateRequest,
    user_id: CurrentUserId,
    accounts: AccountServiceDep,
) -> ProfileResponse:
    profile = await accounts.update_profile(user_id, request.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)


@profile_router.get(
    "/admin-status",
    response_model=AdminStatusResponse,
    summary="Check whether the current user is an admin",
)
async def get_admin_status(
    user_id: CurrentUserId,
    accounts: AccountServiceDep,
) -> AdminStatusResponse:
    return AdminStatusResponse(is_admin=await accounts.is_admin(user_id))
