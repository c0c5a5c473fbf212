"""Collection orchestration service.

Connects a collector to the normalization pipeline: collect containers,
normalize them, return products and rejections. Persisting the products is
left to the caller.
"""

from typing import Any, Optional

import structlog

from dealnorm.collectors import BaseCollector, CollectorFactory, get_collector_factory
from dealnorm.config import settings
from dealnorm.core.exceptions import CollectorError
from dealnorm.pipeline import PipelineResult, ProductPipeline

logger = structlog.get_logger(__name__)


class CollectionService:
    """Runs collectors through a shared, read-only pipeline."""

    def __init__(
        self,
        pipeline: Optional[ProductPipeline] = None,
        factory: Optional[CollectorFactory] = None,
    ):
        self.pipeline = pipeline or ProductPipeline.from_settings(settings)
        self.factory = factory or get_collector_factory()
        self.logger = logger.bind(service="collection_service")

    async def run_collector(self, collector: BaseCollector) -> PipelineResult:
        """Collect from one collector and normalize the result.

        Raises:
            CollectorError: If the collector cannot fetch its source
        """
        self.logger.info("running_collector", source_id=collector.source_id)
        try:
            containers = await collector.collect()
        except CollectorError as e:
            self.logger.error(
                "collector_failed", source_id=collector.source_id, error=e.message
            )
            raise

        self.logger.info(
            "containers_collected",
            source_id=collector.source_id,
            count=len(containers),
        )
        return self.pipeline.run(
            containers, collector.source_id, collector.default_category
        )

    async def run_source(self, source_id: str, **overrides: Any) -> PipelineResult:
        """Create the registered collector for ``source_id`` and run it.

        Raises:
            NotFoundError: If no collector is registered for the source
            CollectorError: If the collector cannot fetch its source
        """
        collector = self.factory.create(source_id, **overrides)
        return await self.run_collector(collector)
