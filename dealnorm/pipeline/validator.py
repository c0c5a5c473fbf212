"""Discount validation against configured bounds."""

from decimal import Decimal
from typing import Optional, Union

from dealnorm.schemas import (
    DiscountBounds,
    FailureReason,
    ResolvedPrice,
    ValidatedDiscount,
    ValidationFailure,
)
from dealnorm.utils import PriceNormalizer

# |original/sale - ratio| below this counts as a fabricated list price
ESTIMATION_RATIO_EPSILON = Decimal("0.01")


class DiscountValidator:
    """Accepts or rejects a resolved price pair by its discount percentage."""

    def __init__(self, bounds: Optional[DiscountBounds] = None):
        self.bounds = bounds or DiscountBounds()

    def validate(
        self,
        price: ResolvedPrice,
        stated_discount: Optional[int] = None,
    ) -> Union[ValidatedDiscount, ValidationFailure]:
        """Validate a resolved price pair.

        Args:
            price: Resolved (original, sale) pair
            stated_discount: Discount percentage printed on the card, used only
                when the bounds carry a tolerance

        Returns:
            ValidatedDiscount on success, ValidationFailure otherwise
        """
        bounds = self.bounds
        pct = PriceNormalizer.discount_percent(price.original_price, price.sale_price)

        if pct <= 0:
            return ValidationFailure(
                reason=FailureReason.NON_POSITIVE_DISCOUNT,
                detail=f"discount rounds to {pct}%",
            )
        if pct < bounds.min_percent:
            return ValidationFailure(
                reason=FailureReason.TOO_SMALL,
                detail=f"{pct}% < minimum {bounds.min_percent}%",
            )
        if pct > bounds.max_percent:
            return ValidationFailure(
                reason=FailureReason.TOO_LARGE,
                detail=f"{pct}% > maximum {bounds.max_percent}%",
            )

        ratio = price.original_price / price.sale_price
        for estimated in bounds.estimation_ratios:
            if abs(ratio - estimated) < ESTIMATION_RATIO_EPSILON:
                return ValidationFailure(
                    reason=FailureReason.ESTIMATED_DISCOUNT,
                    detail=f"original is {estimated}x sale, looks estimated",
                )

        if bounds.tolerance_percent is not None and stated_discount is not None:
            if abs(stated_discount - pct) > bounds.tolerance_percent:
                return ValidationFailure(
                    reason=FailureReason.DISCOUNT_MISMATCH,
                    detail=f"stated {stated_discount}% vs computed {pct}%",
                )

        return ValidatedDiscount(discount_percent=pct)


def validate(
    price: ResolvedPrice, bounds: Optional[DiscountBounds] = None
) -> Union[ValidatedDiscount, ValidationFailure]:
    """Validate a price pair against ``bounds`` (defaults: 5% to 90%)."""
    return DiscountValidator(bounds).validate(price)
