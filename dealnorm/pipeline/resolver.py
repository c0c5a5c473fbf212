"""Price resolution: reduce candidate price tokens to one (original, sale) pair.

Rules, first applicable wins:

1. Both an "original" and a "sale" token are labeled: use them.
2. Only one role is labeled and unlabeled tokens exist: the labeled token
   keeps its role and the counterpart is the unlabeled extreme (max for a
   missing original, min for a missing sale).
3. Two or more distinct values without a usable label: min is the sale
   price, max the original. DOM order is never trusted.
4. A single token plus a stated discount in (0, 95]: derive the missing
   price from the percentage.
5. A single token alone cannot represent a sale.
6. No tokens at all.

Whatever rule fires, an inverted pair is swapped and an equal pair is
rejected.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Union

from dealnorm.schemas import (
    ExtractedFields,
    FailureReason,
    PriceHint,
    PriceRole,
    ResolutionFailure,
    ResolvedPrice,
)
from dealnorm.utils import PriceNormalizer

MAX_DERIVABLE_DISCOUNT = 95


def _first(tokens: Sequence[PriceHint], role: PriceRole) -> Optional[PriceHint]:
    for token in tokens:
        if token.role == role:
            return token
    return None


class PriceResolver:
    """Stateless price disambiguation."""

    def resolve(
        self, fields: ExtractedFields
    ) -> Union[ResolvedPrice, ResolutionFailure]:
        tokens = list(fields.price_tokens)
        if not tokens:
            return ResolutionFailure(
                reason=FailureReason.NO_PRICE_FOUND, detail="no price tokens"
            )

        pair = self._pick_pair(tokens, fields.explicit_discount_percent)
        if isinstance(pair, ResolutionFailure):
            return pair

        original, sale = (PriceNormalizer.round_money(p) for p in pair)
        if original < sale:
            original, sale = sale, original
        if original == sale:
            return ResolutionFailure(
                reason=FailureReason.NO_DISCOUNT_SIGNAL,
                detail=f"original and sale both {original}",
            )
        return ResolvedPrice(original_price=original, sale_price=sale)

    def _pick_pair(
        self, tokens: List[PriceHint], explicit_discount: Optional[int]
    ):
        original = _first(tokens, PriceRole.ORIGINAL)
        sale = _first(tokens, PriceRole.SALE)
        unlabeled = [t.amount for t in tokens if t.role == PriceRole.UNLABELED]

        # Rule 1
        if original and sale:
            return original.amount, sale.amount

        # Rule 2
        if sale and unlabeled:
            return max(unlabeled), sale.amount
        if original and unlabeled:
            return original.amount, min(unlabeled)

        # Rule 3
        amounts = {t.amount for t in tokens}
        if len(amounts) >= 2:
            return max(amounts), min(amounts)

        # Rules 4-5: exactly one distinct value remains
        only = tokens[0]
        if explicit_discount is None:
            return ResolutionFailure(
                reason=FailureReason.NO_DISCOUNT_SIGNAL,
                detail=f"single price {only.amount} without discount text",
            )
        if not 0 < explicit_discount <= MAX_DERIVABLE_DISCOUNT:
            return ResolutionFailure(
                reason=FailureReason.NO_DISCOUNT_SIGNAL,
                detail=f"stated discount {explicit_discount}% outside (0, {MAX_DERIVABLE_DISCOUNT}]",
            )

        remaining = 1 - Decimal(explicit_discount) / 100
        if only.role == PriceRole.ORIGINAL:
            return only.amount, PriceNormalizer.round_money(only.amount * remaining)
        return PriceNormalizer.round_money(only.amount / remaining), only.amount


_default_resolver = PriceResolver()


def resolve(fields: ExtractedFields) -> Union[ResolvedPrice, ResolutionFailure]:
    """Resolve prices with the default resolver."""
    return _default_resolver.resolve(fields)
