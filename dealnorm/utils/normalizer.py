"""Data normalization utilities for price parsing, brands and URLs."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


CURRENCY_SYMBOLS = "$€£¥₩"

_MONEY = Decimal("0.01")
_WHOLE = Decimal("1")

# Optional currency symbol, at most nine integer digits with optional
# thousands separators, and an optional two-digit fraction. Longer digit runs
# (tracking numbers, barcodes) never match. The guards keep fragments of
# larger numbers, percentages ("30% off") and ratings ("4.5") from matching.
_PRICE_RE = re.compile(
    r"(?<![\w.,])"
    r"(?P<symbol>[" + re.escape(CURRENCY_SYMBOLS) + r"]\s?)?"
    r"(?P<amount>\d{1,3}(?:,\d{3}){1,3}|\d{1,9})"
    r"(?P<fraction>\.\d{2})?"
    r"(?![\w%]|[.,]\d)"
)

_DISCOUNT_RE = re.compile(
    r"(?P<off>\d{1,3})\s*%\s*off\b"
    r"|\bsave\s+(?P<save>\d{1,3})\s*%"
    r"|(?<![\w.])-\s?(?P<minus>\d{1,3})\s*%",
    re.IGNORECASE,
)


# Known-brand lexicon used to recover a brand from a product name. Order is
# irrelevant; lookups try longer names first so "Polo Ralph Lauren" wins
# over "Ralph Lauren".
KNOWN_BRANDS: tuple = (
    "Nike", "Adidas", "Jordan", "Puma", "Reebok", "New Balance", "Under Armour",
    "Converse", "Vans", "Asics", "Saucony", "Brooks", "Hoka", "On Running",
    "Skechers", "Crocs", "Fila", "Champion", "Salomon", "Merrell", "Allbirds",
    "Timberland", "Dr. Martens", "Columbia", "The North Face", "Patagonia",
    "Arc'teryx", "Canada Goose", "Moncler", "Barbour", "Fred Perry", "Lacoste",
    "Zara", "H&M", "Mango", "ASOS", "Uniqlo", "Pull&Bear", "Bershka", "GAP",
    "Old Navy", "Levi's", "Tommy Hilfiger", "Calvin Klein", "Ralph Lauren",
    "Polo Ralph Lauren", "Gucci", "Prada", "Versace", "Armani", "Burberry",
    "Balenciaga", "Givenchy", "Saint Laurent", "Off-White", "Supreme",
    "Stone Island", "Boss", "Diesel", "Guess", "Everlane", "Reformation",
    "Ganni", "Acne Studios", "COS", "Arket", "Massimo Dutti", "AllSaints",
    "Superdry", "Lululemon", "Urban Outfitters", "Forever 21", "Steve Madden",
)


class PriceNormalizer:
    """Price parsing and monetary arithmetic.

    All amounts are Decimals; rounding is always half-up.
    """

    @staticmethod
    def round_money(value: Decimal) -> Decimal:
        """Round to cents, half-up."""
        return value.quantize(_MONEY, rounding=ROUND_HALF_UP)

    @staticmethod
    def discount_percent(original: Decimal, sale: Decimal) -> int:
        """Whole-number discount of ``sale`` against ``original``, half-up.

        Args:
            original: Original price, must be positive
            sale: Sale price

        Returns:
            round(100 * (original - sale) / original)
        """
        pct = (original - sale) * 100 / original
        return int(pct.quantize(_WHOLE, rounding=ROUND_HALF_UP))

    @staticmethod
    def clean_price_string(raw: str) -> Optional[Decimal]:
        """Parse a price string and extract numeric value.

        Handles various formats:
        - "$12.99" -> 12.99
        - "$1,234.56" -> 1234.56
        - "€ 45" -> 45
        - "1234.56" -> 1234.56

        Args:
            raw: Raw price string

        Returns:
            Decimal price value, or None if parsing fails
        """
        if not raw:
            return None

        cleaned = raw.strip()
        for symbol in CURRENCY_SYMBOLS:
            cleaned = cleaned.replace(symbol, "")

        # Remove thousand separators (commas)
        cleaned = cleaned.replace(",", "")

        # Remove any remaining non-digit/non-decimal characters
        cleaned = re.sub(r"[^\d.]", "", cleaned)

        if not cleaned:
            return None

        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    @classmethod
    def extract_prices_from_text(
        cls, text: str, require_symbol: bool = False
    ) -> List[Decimal]:
        """Extract every dollar-amount-shaped value from text, in order.

        Args:
            text: Free text such as a product card's visible content
            require_symbol: Only accept amounts prefixed by a currency symbol

        Returns:
            List of Decimal amounts (may contain duplicates)
        """
        if not text:
            return []

        prices: List[Decimal] = []
        for match in _PRICE_RE.finditer(text):
            if require_symbol and not match.group("symbol"):
                continue
            amount = match.group("amount").replace(",", "")
            price = Decimal(amount + (match.group("fraction") or ""))
            prices.append(price)
        return prices


def parse_discount_text(text: Optional[str]) -> Optional[int]:
    """Find an explicitly stated discount such as "30% off" or "Save 30%".

    Returns:
        The first percentage between 1 and 100, or None
    """
    if not text:
        return None

    for match in _DISCOUNT_RE.finditer(text):
        value = match.group("off") or match.group("save") or match.group("minus")
        pct = int(value)
        if 0 < pct <= 100:
            return pct
    return None


class BrandNormalizer:
    """Brand lookup against a known-brand lexicon."""

    @staticmethod
    def _by_length(brands: Iterable[str]) -> Sequence[str]:
        return sorted(brands, key=len, reverse=True)

    @classmethod
    def canonicalize(cls, brand: str, brands: Iterable[str] = KNOWN_BRANDS) -> str:
        """Return the lexicon spelling of ``brand`` if known, else it trimmed."""
        brand = " ".join(brand.split())
        lowered = brand.lower()
        for known in brands:
            if known.lower() == lowered:
                return known
        return brand

    @classmethod
    def match_prefix(
        cls, name: str, brands: Iterable[str] = KNOWN_BRANDS
    ) -> Optional[str]:
        """Find a known brand that the product name starts with.

        The brand must end on a word boundary, so "Vans" matches
        "Vans Old Skool" but not "Vansion Hoodie".

        Returns:
            The brand in lexicon spelling, or None
        """
        lowered = name.strip().lower()
        for known in cls._by_length(brands):
            prefix = known.lower()
            if not lowered.startswith(prefix):
                continue
            rest = lowered[len(prefix):]
            if not rest or not rest[0].isalnum():
                return known
        return None


TRACKING_PARAMS = frozenset({
    "ref", "source", "fbclid", "gclid", "msclkid", "mc_cid", "mc_eid", "_ga",
})


def _is_tracking_param(key: str) -> bool:
    key = key.lower()
    return key in TRACKING_PARAMS or key.startswith("utm_")


def normalize_url(url: str) -> str:
    """Canonical product URL used for the de-duplication key.

    Campaign parameters (any ``utm_*``, click ids, mailing ids) and the
    fragment are dropped so the same product shared through different
    campaigns keys identically. Remaining parameters keep their order and
    repeats.
    """
    if not url:
        return url

    parsed = urlparse(url)
    kept = [
        (key, value)
        for key, value in parse_qsl(parsed.query, keep_blank_values=True)
        if not _is_tracking_param(key)
    ]
    return urlunparse(parsed._replace(query=urlencode(kept), fragment=""))
