"""Normalization helpers shared by the pipeline stages and collectors."""

from .normalizer import (
    CURRENCY_SYMBOLS,
    KNOWN_BRANDS,
    BrandNormalizer,
    PriceNormalizer,
    normalize_url,
    parse_discount_text,
)

__all__ = [
    "CURRENCY_SYMBOLS",
    "KNOWN_BRANDS",
    "BrandNormalizer",
    "PriceNormalizer",
    "normalize_url",
    "parse_discount_text",
]
