"""
Bundle pricing.

A bundle costs the sum of its products' live prices less the bundle's
discount percentage, rounded half-up to the currency minor unit. Savings
are taken from the rounded amounts, so

    bundle_price + savings == original_price

holds exactly.
"""

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from storefront.core.exceptions import ValidationError
from storefront.services.pricing.calculator import ZERO, quantize_money

HUNDRED = Decimal("100")


class BundlePrice(BaseModel):
    """Priced bundle."""

    model_config = ConfigDict(frozen=True)

    original_price: Decimal
    bundle_price: Decimal
    savings: Decimal
    discount_percentage: Decimal
    product_count: int


def validate_discount_percentage(discount_percentage: Decimal) -> Decimal:
    """
    Check a bundle discount lies in [0, 100].

    Raises:
        ValidationError: If the percentage is out of range
    """
    percent = Decimal(str(discount_percentage))
    if percent < 0 or percent > HUNDRED:
        raise ValidationError(
            "Discount percentage must be between 0 and 100",
            field="discount_percentage",
            value=str(percent),
        )
    return percent


def calculate_bundle_price(
    unit_prices: Iterable[Decimal], discount_percentage: Decimal
) -> BundlePrice:
    """
    Price a bundle from its products' unit prices.

    An empty bundle prices at zero.

    Raises:
        ValidationError: If the discount percentage is out of range
    """
    prices = [Decimal(str(price)) for price in unit_prices]
    percent = validate_discount_percentage(discount_percentage)

    original = quantize_money(sum(prices, ZERO))
    bundle_price = quantize_money(original * (HUNDRED - percent) / HUNDRED)

    return BundlePrice(
        original_price=original,
        bundle_price=bundle_price,
        savings=original - bundle_price,
        discount_percentage=percent,
        product_count=len(prices),
    )
