"""Field extraction: pick a name, brand and candidate price tokens from a container."""

import re
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Union

from dealnorm.config import Settings
from dealnorm.schemas import (
    ExtractedFields,
    ExtractionFailure,
    FailureReason,
    PriceHint,
    PriceRole,
    RawContainer,
)
from dealnorm.utils import (
    CURRENCY_SYMBOLS,
    KNOWN_BRANDS,
    BrandNormalizer,
    PriceNormalizer,
    normalize_url,
)

UNKNOWN_BRAND = "Unknown"
DEFAULT_MAX_PRICE = Decimal("100000")

_NUMERIC_ONLY_RE = re.compile(r"^[\d%\s.,]+$")


class FieldExtractor:
    """Extracts name, brand and price tokens using ordered-preference rules.

    Instances hold only read-only configuration and may be shared freely
    between threads.
    """

    def __init__(
        self,
        brand_lexicon: Optional[Iterable[str]] = None,
        max_price: Decimal = DEFAULT_MAX_PRICE,
        min_name_length: int = 3,
        max_name_length: int = 200,
        require_currency_symbol: bool = False,
    ):
        self.brand_lexicon = tuple(brand_lexicon) if brand_lexicon else KNOWN_BRANDS
        self.max_price = Decimal(max_price)
        self.min_name_length = min_name_length
        self.max_name_length = max_name_length
        self.require_currency_symbol = require_currency_symbol

    @classmethod
    def from_settings(cls, settings: Settings) -> "FieldExtractor":
        return cls(
            brand_lexicon=settings.get_brand_list() or None,
            max_price=settings.MAX_PRICE,
            min_name_length=settings.MIN_NAME_LENGTH,
            max_name_length=settings.MAX_NAME_LENGTH,
            require_currency_symbol=settings.TEXT_PRICE_REQUIRES_SYMBOL,
        )

    def extract(
        self, container: RawContainer
    ) -> Union[ExtractedFields, ExtractionFailure]:
        name = self.resolve_name(container.candidate_names)
        if name is None:
            return ExtractionFailure(
                reason=FailureReason.NO_VALID_NAME,
                detail=f"{len(container.candidate_names)} candidate name(s), none usable",
            )

        return ExtractedFields(
            name=name,
            brand=self.resolve_brand(container.candidate_brand, name),
            price_tokens=tuple(self.collect_price_tokens(container, name)),
            explicit_discount_percent=container.explicit_discount_percent,
            image_url=container.image_url or None,
            product_url=normalize_url(container.product_url) if container.product_url else None,
        )

    def is_valid_name(self, candidate: str) -> bool:
        if not (self.min_name_length <= len(candidate) <= self.max_name_length):
            return False
        if candidate[0] in CURRENCY_SYMBOLS:
            return False
        return not _NUMERIC_ONLY_RE.match(candidate)

    def resolve_name(self, candidates: Iterable[str]) -> Optional[str]:
        """First candidate that looks like a product name, trimmed."""
        for candidate in candidates:
            candidate = (candidate or "").strip()
            if candidate and self.is_valid_name(candidate):
                return candidate
        return None

    def resolve_brand(self, candidate_brand: Optional[str], name: str) -> str:
        if candidate_brand and candidate_brand.strip():
            return BrandNormalizer.canonicalize(candidate_brand, self.brand_lexicon)
        return BrandNormalizer.match_prefix(name, self.brand_lexicon) or UNKNOWN_BRAND

    def collect_price_tokens(self, container: RawContainer, name: str) -> List[PriceHint]:
        """Merge labeled hints with amounts scraped from the visible text.

        Tokens are deduplicated by value. A labeled observation replaces an
        unlabeled one of the same value (keeping its position); otherwise the
        first observation wins. Values outside (0, max_price] are dropped.
        The product name is blanked out of the text first so model numbers
        ("574", "990") are not read as prices.
        """
        tokens: Dict[Decimal, PriceHint] = {}

        def add(role: PriceRole, amount: Decimal) -> None:
            # Bound before rounding: quantize raises past 28 significant digits.
            if not amount.is_finite() or amount <= 0 or amount > self.max_price:
                return
            amount = PriceNormalizer.round_money(amount)
            if amount <= 0:
                return
            held = tokens.get(amount)
            if held is None or (
                held.role == PriceRole.UNLABELED and role != PriceRole.UNLABELED
            ):
                tokens[amount] = PriceHint(role=role, amount=amount)

        for hint in container.price_hints:
            add(hint.role, hint.amount)

        text = container.text_content.replace(name, " ") if container.text_content else ""
        for amount in PriceNormalizer.extract_prices_from_text(
            text, require_symbol=self.require_currency_symbol
        ):
            add(PriceRole.UNLABELED, amount)

        return list(tokens.values())


_default_extractor = FieldExtractor()


def extract(container: RawContainer) -> Union[ExtractedFields, ExtractionFailure]:
    """Extract fields with the default configuration."""
    return _default_extractor.extract(container)
