"""Discount acceptance bounds."""

from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dealnorm.config import Settings


class DiscountBounds(BaseModel):
    """Configured range of plausible discount percentages.

    ``tolerance_percent`` and ``estimation_ratios`` enable two optional
    checks: agreement between a stated and a computed discount, and
    rejection of list prices fabricated as a fixed multiple of the sale
    price.
    """

    model_config = ConfigDict(frozen=True)

    min_percent: int = Field(5, ge=0, le=100)
    max_percent: int = Field(90, ge=0, le=100)
    tolerance_percent: Optional[int] = Field(None, ge=0)
    estimation_ratios: Tuple[Decimal, ...] = ()

    @model_validator(mode="after")
    def min_not_above_max(self) -> "DiscountBounds":
        if self.min_percent > self.max_percent:
            raise ValueError(
                f"min_percent ({self.min_percent}) exceeds max_percent ({self.max_percent})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "DiscountBounds":
        return cls(
            min_percent=settings.MIN_DISCOUNT_PERCENT,
            max_percent=settings.MAX_DISCOUNT_PERCENT,
            tolerance_percent=settings.DISCOUNT_TOLERANCE_PERCENT,
            estimation_ratios=tuple(settings.get_estimation_ratios()),
        )
