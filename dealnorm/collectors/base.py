"""Base collector interface.

A collector turns one retailer source into a list of RawContainers. It is
the only place that does I/O; the pipeline never calls back into it.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

import httpx
import structlog

from dealnorm.core.exceptions import CollectorError
from dealnorm.schemas import Category, RawContainer

DEFAULT_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": "Mozilla/5.0 (compatible; dealnorm/0.1)",
}


class BaseCollector(ABC):
    """Abstract base class for all collectors.

    Subclasses implement ``collect()``. An ``httpx.AsyncClient`` may be
    injected (the factory shares one); otherwise a short-lived client is
    opened per fetch.
    """

    def __init__(
        self,
        source_id: str,
        default_category: Union[Category, str, None] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        if not source_id:
            raise ValueError("source_id is required")
        self.source_id = source_id
        self.default_category = Category(default_category) if default_category else None
        self.http_client = http_client
        self.timeout = timeout
        self.logger = structlog.get_logger(__name__).bind(collector=source_id)

    @abstractmethod
    async def collect(self) -> List[RawContainer]:
        """Fetch the source and return its product containers.

        Returns:
            List of RawContainer objects, possibly empty

        Raises:
            CollectorError: If the source cannot be fetched or interpreted
        """

    async def _fetch(self, url: str) -> httpx.Response:
        """GET a URL, raising CollectorError on transport or HTTP errors."""
        self.logger.info("fetching_url", url=url)
        try:
            if self.http_client is not None:
                response = await self.http_client.get(url, headers=DEFAULT_HEADERS)
            else:
                async with httpx.AsyncClient(
                    timeout=self.timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url, headers=DEFAULT_HEADERS)
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.warning("fetch_failed", url=url, error=str(e))
            raise CollectorError(self.source_id, f"GET {url} failed: {e}") from e
        return response
