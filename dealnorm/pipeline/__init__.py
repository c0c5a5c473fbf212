"""Extraction and normalization pipeline stages.

This package provides:
- FieldExtractor: name, brand and price-token extraction
- PriceResolver: (original, sale) disambiguation
- DiscountValidator: discount bounds checking
- Categorizer: keyword taxonomy classification
- ProductPipeline: batch driver combining the four
"""

from .extractor import FieldExtractor, extract
from .resolver import PriceResolver, resolve
from .validator import DiscountValidator, validate
from .categorizer import CATEGORY_KEYWORDS, Categorizer, categorize
from .runner import PipelineResult, ProductPipeline

__all__ = [
    "FieldExtractor",
    "PriceResolver",
    "DiscountValidator",
    "Categorizer",
    "CATEGORY_KEYWORDS",
    "ProductPipeline",
    "PipelineResult",
    "extract",
    "resolve",
    "validate",
    "categorize",
]
