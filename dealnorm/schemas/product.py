"""Normalized product record emitted by the pipeline."""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Category(str, Enum):
    """Closed product taxonomy."""

    SHOES = "shoes"
    CLOTHING = "clothing"
    ACCESSORIES = "accessories"
    OTHER = "other"


class Product(BaseModel):
    """Validated deal record. Immutable once produced."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    category: Category
    original_price: Decimal = Field(..., gt=0)
    sale_price: Decimal = Field(..., gt=0)
    discount_percent: int
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    source_id: str

    @model_validator(mode="after")
    def sale_not_above_original(self) -> "Product":
        if self.sale_price > self.original_price:
            raise ValueError(
                f"sale_price {self.sale_price} exceeds original_price {self.original_price}"
            )
        return self

    @property
    def dedup_key(self) -> str:
        """Stable key for de-duplication by the sink.

        The product URL when known, otherwise source id plus lower-cased name.
        """
        if self.product_url:
            return self.product_url
        return f"{self.source_id}:{self.name.lower()}"
