"""Intermediate stage values and typed failure outcomes.

Every pipeline stage returns either its value or a failure instance; none
of them raise on bad input data.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

from .container import PriceHint


class FailureStage(str, Enum):
    EXTRACTION = "extraction"
    RESOLUTION = "resolution"
    VALIDATION = "validation"


class FailureReason(str, Enum):
    """Why a container produced no product."""

    # Extraction
    NO_VALID_NAME = "no_valid_name"
    # Resolution
    NO_PRICE_FOUND = "no_price_found"
    NO_DISCOUNT_SIGNAL = "no_discount_signal"
    # Validation
    TOO_SMALL = "too_small"
    TOO_LARGE = "too_large"
    NON_POSITIVE_DISCOUNT = "non_positive_discount"
    ESTIMATED_DISCOUNT = "estimated_discount"
    DISCOUNT_MISMATCH = "discount_mismatch"


@dataclass(frozen=True)
class ExtractedFields:
    """Output of the field extractor."""

    name: str
    brand: str
    price_tokens: Tuple[PriceHint, ...]
    explicit_discount_percent: Optional[int] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None


@dataclass(frozen=True)
class ResolvedPrice:
    """A single (original, sale) price pair."""

    original_price: Decimal
    sale_price: Decimal

    def __post_init__(self):
        if self.original_price <= 0 or self.sale_price <= 0:
            raise ValueError("prices must be positive")
        if self.sale_price > self.original_price:
            raise ValueError("sale_price must not exceed original_price")


@dataclass(frozen=True)
class ValidatedDiscount:
    discount_percent: int


@dataclass(frozen=True)
class ExtractionFailure:
    reason: FailureReason
    detail: str = ""
    stage: ClassVar[FailureStage] = FailureStage.EXTRACTION


@dataclass(frozen=True)
class ResolutionFailure:
    reason: FailureReason
    detail: str = ""
    stage: ClassVar[FailureStage] = FailureStage.RESOLUTION


@dataclass(frozen=True)
class ValidationFailure:
    reason: FailureReason
    detail: str = ""
    stage: ClassVar[FailureStage] = FailureStage.VALIDATION


StageFailure = Union[ExtractionFailure, ResolutionFailure, ValidationFailure]


@dataclass(frozen=True)
class Rejection:
    """A container that produced no product, kept for diagnostics."""

    index: int  # Position of the container in its batch
    identifier: str
    source_id: str
    stage: FailureStage
    reason: FailureReason
    detail: str = ""

    @classmethod
    def from_failure(
        cls, failure: StageFailure, *, index: int, identifier: str, source_id: str
    ) -> "Rejection":
        return cls(
            index=index,
            identifier=identifier,
            source_id=source_id,
            stage=failure.stage,
            reason=failure.reason,
            detail=failure.detail,
        )
