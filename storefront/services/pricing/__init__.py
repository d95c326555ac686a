"""
Cart, bundle and custom frame pricing.
"""

from storefront.services.pricing.bundle import BundlePrice, calculate_bundle_price
from storefront.services.pricing.calculator import (
    PricingBreakdown,
    PricingCalculator,
    PricingLine,
    PricingPolicy,
    get_pricing_calculator,
    quantize_money,
)
from storefront.services.pricing.custom_frame import (
    CustomFramePricer,
    FramePricingPolicy,
    FrameQuote,
    FrameSpec,
    get_custom_frame_pricer,
)

__all__ = [
    "BundlePrice",
    "calculate_bundle_price",
    "PricingBreakdown",
    "PricingCalculator",
    "PricingLine",
    "PricingPolicy",
    "get_pricing_calculator",
    "quantize_money",
    "CustomFramePricer",
    "FramePricingPolicy",
    "FrameQuote",
    "FrameSpec",
    "get_custom_frame_pricer",
]
