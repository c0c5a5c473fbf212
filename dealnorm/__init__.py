"""dealnorm: product extraction and price/discount normalization for deal aggregation."""

from .pipeline import (
    FieldExtractor,
    PriceResolver,
    DiscountValidator,
    Categorizer,
    ProductPipeline,
    PipelineResult,
    extract,
    resolve,
    validate,
    categorize,
)
from .schemas import (
    Category,
    DiscountBounds,
    PriceHint,
    PriceRole,
    Product,
    RawContainer,
)

__version__ = "0.1.0"

__all__ = [
    "FieldExtractor",
    "PriceResolver",
    "DiscountValidator",
    "Categorizer",
    "ProductPipeline",
    "PipelineResult",
    "extract",
    "resolve",
    "validate",
    "categorize",
    "Category",
    "DiscountBounds",
    "PriceHint",
    "PriceRole",
    "Product",
    "RawContainer",
]
