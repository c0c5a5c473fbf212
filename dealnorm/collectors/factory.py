"""Factory for creating and managing collector instances."""

from typing import Any, Callable, Dict, Optional

import httpx
import structlog

from dealnorm.config import settings
from dealnorm.core.exceptions import NotFoundError

from .base import BaseCollector


logger = structlog.get_logger(__name__)

CollectorBuilder = Callable[..., BaseCollector]


class CollectorFactory:
    """Registry of per-site collector builders.

    Provides dependency injection for the shared HTTP client and timeout.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.http_client = http_client
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS
        self._registry: Dict[str, CollectorBuilder] = {}

    def register(self, source_id: str, builder: CollectorBuilder, **defaults: Any) -> None:
        """Register a collector class (or any builder) for a source.

        Args:
            source_id: Source identifier (e.g., "asos-sale")
            builder: Callable returning a BaseCollector; receives source_id,
                http_client, timeout and the registered defaults as keywords
            **defaults: Keyword arguments passed on every create()
        """
        if not callable(builder):
            raise ValueError(f"Collector builder must be callable: {builder!r}")

        def build(**overrides: Any) -> BaseCollector:
            return builder(source_id=source_id, **{**defaults, **overrides})

        self._registry[source_id] = build
        logger.info("collector_registered", source_id=source_id)

    def create(self, source_id: str, **overrides: Any) -> BaseCollector:
        """Create and configure a collector instance.

        Raises:
            NotFoundError: If no collector is registered for ``source_id``
        """
        build = self._registry.get(source_id)
        if build is None:
            logger.warning("collector_not_found", source_id=source_id)
            raise NotFoundError("Collector", source_id)

        overrides.setdefault("http_client", self.http_client)
        overrides.setdefault("timeout", self.timeout)
        collector = build(**overrides)
        if not isinstance(collector, BaseCollector):
            raise TypeError(f"Builder for {source_id} returned {type(collector).__name__}")

        logger.info("collector_created", source_id=source_id, collector_type=type(collector).__name__)
        return collector

    def get_registered_sources(self) -> list[str]:
        return list(self._registry.keys())

    def has_collector(self, source_id: str) -> bool:
        return source_id in self._registry


# Global factory instance
collector_factory = CollectorFactory()


def get_collector_factory() -> CollectorFactory:
    """Get the global collector factory instance."""
    return collector_factory
