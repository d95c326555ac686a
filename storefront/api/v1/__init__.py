"""
API v1 package initialization.
"""

from fastapi import APIRouter

from storefront.api.v1.addresses import profile_router
from storefront.api.v1.addresses import router as addresses_router
from storefront.api.v1.admin import router as admin_router
from storefront.api.v1.cart import router as cart_router
from storefront.api.v1.cart import wishlist_router
from storefront.api.v1.custom_frames import admin_router as frame_options_admin_router
from storefront.api.v1.custom_frames import router as custom_frames_router
from storefront.api.v1.merchandising import admin_router as merchandising_admin_router
from storefront.api.v1.merchandising import bundles_router, collections_router
from storefront.api.v1.orders import router as orders_router
from storefront.api.v1.products import router as products_router

api_router = APIRouter()
api_router.include_router(products_router)
api_router.include_router(collections_router)
api_router.include_router(bundles_router)
api_router.include_router(custom_frames_router)
api_router.include_router(cart_router)
api_router.include_router(wishlist_router)
api_router.include_router(addresses_router)
api_router.include_router(profile_router)
api_router.include_router(orders_router)
api_router.include_router(admin_router)
api_router.include_router(merchandising_admin_router)
api_router.include_router(frame_options_admin_router)

__all__ = ["api_router"]
