"""Collectors: the boundary that turns retailer sources into RawContainers.

This package provides:
- BaseCollector, the single-method collect() interface
- HtmlCardCollector for server-rendered listing pages (BeautifulSoup)
- JsonFeedCollector for JSON product APIs
- CollectorFactory registry with shared HTTP client injection
"""

from .base import BaseCollector
from .html import HtmlCardCollector
from .json_feed import JsonFeedCollector
from .factory import CollectorFactory, collector_factory, get_collector_factory

__all__ = [
    "BaseCollector",
    "HtmlCardCollector",
    "JsonFeedCollector",
    "CollectorFactory",
    "collector_factory",
    "get_collector_factory",
]
