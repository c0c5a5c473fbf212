"""Pydantic schemas and stage outcome types."""

from .container import PriceHint, PriceRole, RawContainer
from .product import Category, Product
from .bounds import DiscountBounds
from .outcome import (
    ExtractedFields,
    ExtractionFailure,
    FailureReason,
    FailureStage,
    Rejection,
    ResolutionFailure,
    ResolvedPrice,
    StageFailure,
    ValidatedDiscount,
    ValidationFailure,
)

__all__ = [
    "PriceHint",
    "PriceRole",
    "RawContainer",
    "Category",
    "Product",
    "DiscountBounds",
    "ExtractedFields",
    "ExtractionFailure",
    "FailureReason",
    "FailureStage",
    "Rejection",
    "ResolutionFailure",
    "ResolvedPrice",
    "StageFailure",
    "ValidatedDiscount",
    "ValidationFailure",
]
