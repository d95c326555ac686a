"""
Custom frame quote calculator.

A custom frame starts from a base price scaled by a material multiplier and
a size multiplier. Flat fees are added for matting, anti-glare glazing and
engraving, plus the price modifiers of any selected colour or finish
options. The total is rounded half-up to a whole currency unit.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.core.config import get_settings
from storefront.core.exceptions import ValidationError
from storefront.core.logging import get_logger
from storefront.services.pricing.calculator import ZERO, quantize_money

logger = get_logger(__name__)

WHOLE_UNIT = Decimal("1")

MATTING_STYLES = ("none", "white", "cream", "black", "double")
GLAZING_TYPES = ("glass", "anti-glare", "acrylic")
MOUNTING_TYPES = ("paper", "foam", "archival")


@dataclass(frozen=True)
class FrameSpec:
    """Choices made in the custom frame builder."""

    material: str
    size: str
    matting: str = "none"
    glazing: str = "glass"
    mounting: str = "paper"
    engraving: Optional[str] = None

    @property
    def has_engraving(self) -> bool:
        return bool(self.engraving and self.engraving.strip())


class FramePricingPolicy(BaseModel):
    """
    Immutable custom frame price parameters.

    Attributes:
        base_price: Price of a wood 8x10 frame with no extras
        material_multipliers: Material name mapped to its price multiplier
        size_multipliers: Size label mapped to its price multiplier
        matting_fee: Added for any matting other than none
        anti_glare_fee: Added for anti-glare glazing
        engraving_fee: Added when engraving text is given
        currency: ISO currency code
    """

    model_config = ConfigDict(frozen=True)

    base_price: Decimal = Field(default=Decimal("1299"), gt=0)
    material_multipliers: Mapping[str, Decimal] = Field(
        default_factory=lambda: {
            "wood": Decimal("1.0"),
            "metal": Decimal("0.8"),
            "acrylic": Decimal("1.2"),
        }
    )
    size_multipliers: Mapping[str, Decimal] = Field(
        default_factory=lambda: {
            "5x7": Decimal("0.7"),
            "8x10": Decimal("1.0"),
            "11x14": Decimal("1.4"),
            "16x20": Decimal("2.0"),
            "custom": Decimal("2.5"),
        }
    )
    matting_fee: Decimal = Field(default=Decimal("299"), ge=0)
    anti_glare_fee: Decimal = Field(default=Decimal("199"), ge=0)
    engraving_fee: Decimal = Field(default=Decimal("399"), ge=0)
    currency: str = "INR"

    @field_validator("material_multipliers", "size_multipliers")
    @classmethod
    def validate_multipliers(cls, v: Mapping[str, Decimal]) -> dict[str, Decimal]:
        """Lower-case keys and require positive multipliers."""
        normalized = {}
        for key, multiplier in v.items():
            multiplier = Decimal(str(multiplier))
            if multiplier <= 0:
                raise ValueError(f"Multiplier for {key} must be positive")
            normalized[key.strip().lower()] = multiplier
        return normalized


class FrameQuote(BaseModel):
    """Itemised custom frame quote."""

    model_config = ConfigDict(frozen=True)

    frame_price: Decimal
    matting: Decimal
    glazing: Decimal
    engraving: Decimal
    options: Decimal
    total: Decimal
    currency: str


class CustomFramePricer:
    """Quote custom frames under a FramePricingPolicy."""

    def __init__(self, policy: Optional[FramePricingPolicy] = None):
        self.policy = policy or FramePricingPolicy()

    def _choice(self, value: str, allowed: Iterable[str], field: str) -> str:
        normalized = (value or "").strip().lower()
        allowed = list(allowed)
        if normalized not in allowed:
            raise ValidationError(
                f"Unknown {field}: {value}",
                code="INVALID_FRAME_OPTION",
                field=field,
                value=value,
                allowed=sorted(allowed),
            )
        return normalized

    def calculate_frame_price(self, material: str, size: str) -> Decimal:
        """
        Base price scaled by the material and size multipliers (unrounded).

        Raises:
            ValidationError: If the material or size is not offered
        """
        material = self._choice(material, self.policy.material_multipliers, "material")
        size = self._choice(size, self.policy.size_multipliers, "size")
        return (
            self.policy.base_price
            * self.policy.material_multipliers[material]
            * self.policy.size_multipliers[size]
        )

    def quote(
        self,
        spec: FrameSpec,
        option_modifiers: Iterable[Decimal] = (),
    ) -> FrameQuote:
        """
        Quote a custom frame.

        Args:
            spec: Builder choices
            option_modifiers: Price modifiers of the selected add-on options

        Returns:
            Itemised quote; the total is rounded to a whole unit

        Raises:
            ValidationError: If any choice is not offered
        """
        frame_price = self.calculate_frame_price(spec.material, spec.size)
        matting = self._choice(spec.matting, MATTING_STYLES, "matting")
        glazing = self._choice(spec.glazing, GLAZING_TYPES, "glazing")
        self._choice(spec.mounting, MOUNTING_TYPES, "mounting")

        matting_fee = self.policy.matting_fee if matting != "none" else ZERO
        glazing_fee = self.policy.anti_glare_fee if glazing == "anti-glare" else ZERO
        engraving_fee = self.policy.engraving_fee if spec.has_engraving else ZERO
        options = sum((Decimal(str(m)) for m in option_modifiers), ZERO)

        raw_total = frame_price + matting_fee + glazing_fee + engraving_fee + options
        total = quantize_money(raw_total.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP))

        quote = FrameQuote(
            frame_price=quantize_money(frame_price),
            matting=quantize_money(matting_fee),
            glazing=quantize_money(glazing_fee),
            engraving=quantize_money(engraving_fee),
            options=quantize_money(options),
            total=total,
            currency=self.policy.currency,
        )

        logger.debug(
            "Quoted custom frame",
            material=spec.material,
            size=spec.size,
            matting=matting,
            glazing=glazing,
            total=str(total),
        )

        return quote


def get_custom_frame_pricer() -> CustomFramePricer:
    """Create a pricer with the standard builder prices in the store currency."""
    return CustomFramePricer(FramePricingPolicy(currency=get_settings().currency))
