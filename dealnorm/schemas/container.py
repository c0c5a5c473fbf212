"""Pydantic schemas for the collector boundary.

A ``RawContainer`` is one product card's worth of loosely structured data,
produced by a collector from rendered DOM or a JSON payload.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PriceRole(str, Enum):
    """Role a collector could infer for a price from markup semantics."""

    ORIGINAL = "original"
    SALE = "sale"
    UNLABELED = "unlabeled"


class PriceHint(BaseModel):
    """A single price observed in a container, possibly labeled with a role."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    role: PriceRole = PriceRole.UNLABELED
    amount: Decimal


class RawContainer(BaseModel):
    """Unnormalized product container handed to the pipeline by a collector.

    ``candidate_names`` is ordered most-authoritative first (explicit title
    field, ARIA label, heading, image alt text, link text) and must not be
    empty; collectors drop nameless cards before building a container.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    text_content: str = ""
    candidate_names: List[str] = Field(..., min_length=1)
    candidate_brand: Optional[str] = None
    price_hints: List[PriceHint] = Field(default_factory=list)
    explicit_discount_percent: Optional[int] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None

    @property
    def identifier(self) -> str:
        """Best available human-readable identifier for diagnostics."""
        if self.product_url:
            return self.product_url
        return self.candidate_names[0].strip()
