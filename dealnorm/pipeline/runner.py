"""Batch driver connecting the four pipeline stages.

Runs Extractor -> Resolver -> Validator -> Categorizer over a batch of
containers, collecting products and rejections side by side so callers can
see why items were dropped rather than just how many.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

import structlog

from dealnorm.config import Settings
from dealnorm.schemas import (
    Category,
    DiscountBounds,
    ExtractionFailure,
    FailureReason,
    Product,
    RawContainer,
    Rejection,
    ResolutionFailure,
    StageFailure,
    ValidationFailure,
)

from .categorizer import Categorizer
from .extractor import FieldExtractor
from .resolver import PriceResolver
from .validator import DiscountValidator

logger = structlog.get_logger(__name__)

_FAILURES = (ExtractionFailure, ResolutionFailure, ValidationFailure)


@dataclass
class PipelineResult:
    """Products and rejections from one batch, both in input order."""

    source_id: str
    products: List[Product] = field(default_factory=list)
    rejections: List[Rejection] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.products) + len(self.rejections)

    def rejection_counts(self) -> Dict[FailureReason, int]:
        return dict(Counter(r.reason for r in self.rejections))

    @property
    def average_discount(self) -> Optional[float]:
        if not self.products:
            return None
        return sum(p.discount_percent for p in self.products) / len(self.products)

    def stats(self) -> Dict[str, object]:
        """Flat counters suitable for structured logging."""
        stats: Dict[str, object] = {
            "received": self.total,
            "accepted": len(self.products),
            "rejected": len(self.rejections),
        }
        for reason, count in self.rejection_counts().items():
            stats[f"rejected_{reason.value}"] = count
        if self.average_discount is not None:
            stats["average_discount"] = round(self.average_discount, 1)
        return stats


class ProductPipeline:
    """Normalizes raw containers into validated products.

    Holds only read-only stage configuration, so one instance can serve any
    number of sources and threads.
    """

    def __init__(
        self,
        extractor: Optional[FieldExtractor] = None,
        resolver: Optional[PriceResolver] = None,
        validator: Optional[DiscountValidator] = None,
        categorizer: Optional[Categorizer] = None,
        max_workers: int = 1,
    ):
        self.extractor = extractor or FieldExtractor()
        self.resolver = resolver or PriceResolver()
        self.validator = validator or DiscountValidator()
        self.categorizer = categorizer or Categorizer()
        self.max_workers = max(1, max_workers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductPipeline":
        return cls(
            extractor=FieldExtractor.from_settings(settings),
            validator=DiscountValidator(DiscountBounds.from_settings(settings)),
            categorizer=Categorizer(default=settings.DEFAULT_CATEGORY),
            max_workers=settings.PIPELINE_MAX_WORKERS,
        )

    def process(
        self,
        container: RawContainer,
        source_id: str,
        default_category: Union[Category, str, None] = None,
    ) -> Union[Product, StageFailure]:
        """Run one container through every stage.

        Returns:
            The Product, or the failure of the first stage that rejected it
        """
        fields = self.extractor.extract(container)
        if isinstance(fields, ExtractionFailure):
            return fields

        price = self.resolver.resolve(fields)
        if isinstance(price, ResolutionFailure):
            return price

        discount = self.validator.validate(price, fields.explicit_discount_percent)
        if isinstance(discount, ValidationFailure):
            return discount

        return Product(
            name=fields.name,
            brand=fields.brand,
            category=self.categorizer.categorize(fields.name, default_category),
            original_price=price.original_price,
            sale_price=price.sale_price,
            discount_percent=discount.discount_percent,
            image_url=fields.image_url,
            product_url=fields.product_url,
            source_id=source_id,
        )

    def run(
        self,
        containers: Iterable[RawContainer],
        source_id: str,
        default_category: Union[Category, str, None] = None,
    ) -> PipelineResult:
        """Process a batch; one bad container never stops the rest.

        Args:
            containers: Containers from a single collector
            source_id: Opaque identifier of that collector/site
            default_category: Category for names matching no keyword set

        Returns:
            PipelineResult with products and rejections in input order
        """
        log = logger.bind(source_id=source_id)
        indexed = list(enumerate(containers))

        def work(item: Tuple[int, RawContainer]):
            return self.process(item[1], source_id, default_category)

        if self.max_workers > 1 and len(indexed) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                outcomes = list(pool.map(work, indexed))
        else:
            outcomes = [work(item) for item in indexed]

        result = PipelineResult(source_id=source_id)
        for (index, container), outcome in zip(indexed, outcomes):
            if isinstance(outcome, _FAILURES):
                rejection = Rejection.from_failure(
                    outcome,
                    index=index,
                    identifier=container.identifier,
                    source_id=source_id,
                )
                result.rejections.append(rejection)
                log.debug(
                    "container_rejected",
                    index=index,
                    identifier=rejection.identifier,
                    stage=rejection.stage.value,
                    reason=rejection.reason.value,
                    detail=rejection.detail,
                )
            else:
                result.products.append(outcome)
                hits = self.categorizer.keyword_hits(outcome.name)
                if len(hits) > 1:
                    log.debug(
                        "category_ambiguous",
                        index=index,
                        name=outcome.name,
                        category=outcome.category.value,
                        hits={c.value: words for c, words in hits.items()},
                    )

        log.info("pipeline_run_complete", **result.stats())
        return result
