"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
import structlog

from dealnorm.pipeline import ProductPipeline
from dealnorm.schemas import PriceHint, PriceRole, RawContainer


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def shoe_container() -> RawContainer:
    """The canonical labeled running-shoe card."""
    return RawContainer(
        candidate_names=["Men's Running Shoe — Model X"],
        price_hints=[
            PriceHint(role=PriceRole.ORIGINAL, amount=Decimal("120.00")),
            PriceHint(role=PriceRole.SALE, amount=Decimal("84.00")),
        ],
        product_url="https://shop.example.com/p/model-x",
    )


@pytest.fixture
def pipeline() -> ProductPipeline:
    return ProductPipeline()
