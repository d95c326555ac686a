"""
Cart pricing calculator.

Computes subtotal, promo discount, threshold based shipping, tax and total
for a set of cart lines under a single PricingPolicy. All amounts are
Decimal and rounded half-up to the currency minor unit; the total is summed
from the already rounded parts so

    total == subtotal - discount + shipping + tax

holds exactly for every result.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.config import Settings, get_settings, normalize_promo_codes
from storefront.core.exceptions import ValidationError
from storefront.core.logging import get_logger

logger = get_logger(__name__)

MINOR_UNIT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_money(amount: Decimal) -> Decimal:
    """Round an amount to the currency minor unit, half-up."""
    return Decimal(amount).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingLine:
    """Unit price and quantity of one cart line."""

    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class PricingPolicy(BaseModel):
    """
    Immutable pricing parameters.

    Attributes:
        tax_rate: Fraction of the discounted subtotal charged as tax
        free_shipping_threshold: Subtotal at or above which shipping is free
        flat_shipping_fee: Fee charged below the threshold
        promo_rules: Upper-case promo code mapped to percent off
        currency: ISO currency code
    """

    model_config = ConfigDict(frozen=True)

    tax_rate: Decimal = Field(default=Decimal("0.18"), ge=0, lt=1)
    free_shipping_threshold: Decimal = Field(default=Decimal("1000.00"), ge=0)
    flat_shipping_fee: Decimal = Field(default=Decimal("100.00"), ge=0)
    promo_rules: Mapping[str, Decimal] = Field(
        default_factory=lambda: {"WELCOME10": Decimal("10")}
    )
    currency: str = "INR"

    @field_validator("promo_rules")
    @classmethod
    def validate_promo_rules(cls, v: Mapping[str, Decimal]) -> dict[str, Decimal]:
        """Normalize codes to upper case and check percentages."""
        return normalize_promo_codes(v)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PricingPolicy":
        """Build the policy from application settings."""
        settings = settings or get_settings()
        return cls(
            tax_rate=settings.tax_rate,
            free_shipping_threshold=settings.free_shipping_threshold,
            flat_shipping_fee=settings.flat_shipping_fee,
            promo_rules=dict(settings.promo_codes),
            currency=settings.currency,
        )

    def percent_off(self, promo_code: str) -> Optional[Decimal]:
        """Percent off for a promo code (case-insensitive), None if unknown."""
        return self.promo_rules.get(promo_code.strip().upper())


class PricingBreakdown(BaseModel):
    """Result of a pricing calculation."""

    model_config = ConfigDict(frozen=True)

    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    item_count: int
    promo_code: Optional[str] = None
    amount_to_free_shipping: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        """Serialize amounts as strings so no precision is lost."""
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "shipping": str(self.shipping),
            "tax": str(self.tax),
            "total": str(self.total),
            "currency": self.currency,
            "item_count": self.item_count,
            "promo_code": self.promo_code,
            "amount_to_free_shipping": str(self.amount_to_free_shipping),
        }


class PricingCalculator:
    """
    Pricing calculator driven by a PricingPolicy.

    The calculator never fails on an empty cart; refusing to check out an
    empty cart is the caller's decision.
    """

    def __init__(self, policy: Optional[PricingPolicy] = None):
        self.policy = policy or PricingPolicy.from_settings()

    def calculate_subtotal(self, lines: Iterable[PricingLine]) -> Decimal:
        """
        Sum of unit price times quantity.

        Raises:
            ValidationError: If a line has a negative price or a quantity below one
        """
        subtotal = ZERO
        for line in lines:
            if line.unit_price < 0:
                raise ValidationError(
                    "Unit price cannot be negative",
                    field="unit_price",
                    value=str(line.unit_price),
                )
            if line.quantity < 1:
                raise ValidationError(
                    "Quantity must be at least 1",
                    field="quantity",
                    value=line.quantity,
                )
            subtotal += line.line_total
        return quantize_money(subtotal)

    def calculate_shipping(self, subtotal: Decimal) -> Decimal:
        """Shipping fee; free when subtotal reaches the threshold (inclusive)."""
        if subtotal >= self.policy.free_shipping_threshold:
            return ZERO
        return quantize_money(self.policy.flat_shipping_fee)

    def calculate_discount(self, subtotal: Decimal, promo_code: Optional[str]) -> Decimal:
        """
        Promo discount on the subtotal.

        Raises:
            ValidationError: If the promo code is not recognised
        """
        if not promo_code or not promo_code.strip():
            return ZERO

        percent = self.policy.percent_off(promo_code)
        if percent is None:
            raise ValidationError(
                f"Unknown promo code: {promo_code}",
                code="INVALID_PROMO_CODE",
                promo_code=promo_code,
            )

        return quantize_money(subtotal * percent / Decimal("100"))

    def calculate_tax(self, taxable_amount: Decimal) -> Decimal:
        """Tax on the discounted subtotal."""
        return quantize_money(taxable_amount * self.policy.tax_rate)

    def calculate(
        self,
        lines: Iterable[PricingLine],
        promo_code: Optional[str] = None,
    ) -> PricingBreakdown:
        """
        Price a set of cart lines.

        Args:
            lines: Cart lines with their live unit prices
            promo_code: Optional promo code

        Returns:
            Pricing breakdown with rounded amounts

        Raises:
            ValidationError: If a line is invalid or the promo code is unknown
        """
        lines = list(lines)

        subtotal = self.calculate_subtotal(lines)
        discount = self.calculate_discount(subtotal, promo_code)
        shipping = self.calculate_shipping(subtotal)
        tax = self.calculate_tax(subtotal - discount)
        total = subtotal - discount + shipping + tax

        amount_to_free_shipping = ZERO
        if shipping > ZERO:
            amount_to_free_shipping = quantize_money(
                self.policy.free_shipping_threshold - subtotal
            )

        breakdown = PricingBreakdown(
            subtotal=subtotal,
            discount=discount,
            shipping=shipping,
            tax=tax,
            total=total,
            currency=self.policy.currency,
            item_count=sum(line.quantity for line in lines),
            promo_code=promo_code.strip().upper() if promo_code and promo_code.strip() else None,
            amount_to_free_shipping=amount_to_free_shipping,
        )

        logger.debug(
            "Calculated cart pricing",
            line_count=len(lines),
            subtotal=str(subtotal),
            discount=str(discount),
            shipping=str(shipping),
            tax=str(tax),
            total=str(total),
        )

        return breakdown


def get_pricing_calculator() -> PricingCalculator:
    """Create a calculator using the configured pricing policy."""
    return PricingCalculator(PricingPolicy.from_settings())
