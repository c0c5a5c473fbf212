"""JSON feed collector.

Turns product objects from a JSON API response into RawContainers. Field
names vary by retailer, so each container field is looked up through an
ordered list of candidate keys; dotted keys ("price.original") walk nested
objects and numeric segments index into lists ("images.0").
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union
from urllib.parse import urljoin

import httpx

from dealnorm.core.exceptions import CollectorError
from dealnorm.schemas import Category, PriceHint, PriceRole, RawContainer
from dealnorm.utils import PriceNormalizer, parse_discount_text

from .base import BaseCollector

DEFAULT_FIELD_MAP: Dict[str, Sequence[str]] = {
    "name": (
        "title", "name", "productName", "product_name", "displayName",
        "display_name", "goodsName", "goods_name",
    ),
    "aria": ("ariaLabel", "aria_label", "altText", "alt_text"),
    "brand": ("brand.name", "brand", "brandName", "brand_name", "manufacturer"),
    "original": (
        "originalPrice", "original_price", "listPrice", "list_price",
        "regularPrice", "regular_price", "compareAtPrice", "compare_at_price",
        "wasPrice", "was_price", "price.original", "price.regular",
        "price.list", "prices.original", "prices.regular",
    ),
    "sale": (
        "salePrice", "sale_price", "currentPrice", "current_price",
        "finalPrice", "final_price", "price.sale", "price.current",
        "price.final", "prices.sale", "prices.current",
    ),
    "unlabeled": ("price", "price.value", "price.amount"),
    "discount": (
        "discountPercent", "discount_percent", "percentOff", "percent_off",
        "discount", "badge",
    ),
    "image": (
        "imageUrl", "image_url", "image.url", "image", "thumbnail",
        "images.0.url", "images.0",
    ),
    "url": ("productUrl", "product_url", "url", "link", "href"),
}

# String fields left out of the flattened text: identifiers and links are
# digit-heavy and would read as prices.
_ID_KEY_RE = re.compile(r"^(?:id|sku|upc|gtin|ean|code|ID|SKU|UPC)$|_(?:id|sku|code)$|(?:Id|ID|Sku|SKU|Code)$")
_URL_VALUE_RE = re.compile(r"^(?:https?:)?//|^/")

_MISSING = object()


def get_path(item: Any, path: str) -> Any:
    """Resolve a dotted path in nested dicts/lists, or return a sentinel."""
    node = item
    for part in path.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            return _MISSING
    return node


def flatten_strings(item: Any, key: str = "") -> List[str]:
    """All string values in ``item``, depth first, minus ids and URLs."""
    if isinstance(item, str):
        if _ID_KEY_RE.search(key) or _URL_VALUE_RE.match(item.strip()):
            return []
        return [item]
    if isinstance(item, dict):
        out: List[str] = []
        for k, v in item.items():
            out.extend(flatten_strings(v, str(k)))
        return out
    if isinstance(item, list):
        out = []
        for v in item:
            out.extend(flatten_strings(v, key))
        return out
    return []


def to_amount(value: Any) -> Optional[Decimal]:
    """Coerce a JSON scalar to a Decimal price."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    if isinstance(value, str):
        return PriceNormalizer.clean_price_string(value)
    return None


class JsonFeedCollector(BaseCollector):
    """Collects product objects from a JSON endpoint."""

    def __init__(
        self,
        source_id: str,
        url: str,
        items_path: str = "products",
        base_url: Optional[str] = None,
        field_map: Optional[Dict[str, Sequence[str]]] = None,
        default_category: Union[Category, str, None] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        super().__init__(source_id, default_category, http_client, timeout)
        self.url = url
        self.items_path = items_path
        self.base_url = base_url or url
        self.field_map = {**DEFAULT_FIELD_MAP, **(field_map or {})}

    async def collect(self) -> List[RawContainer]:
        response = await self._fetch(self.url)
        try:
            payload = response.json()
        except ValueError as e:
            raise CollectorError(self.source_id, f"response is not JSON: {e}") from e

        items = payload if not self.items_path else get_path(payload, self.items_path)
        if not isinstance(items, list):
            raise CollectorError(
                self.source_id, f"no product list at '{self.items_path}'"
            )
        return self.parse_items(items)

    def parse_items(self, items: Iterable[Any]) -> List[RawContainer]:
        containers: List[RawContainer] = []
        skipped = 0
        for item in items:
            container = self.item_to_container(item) if isinstance(item, dict) else None
            if container is None:
                skipped += 1
                continue
            containers.append(container)

        self.logger.info("containers_built", count=len(containers), skipped=skipped)
        return containers

    def _values(self, item: Dict[str, Any], field: str) -> List[Any]:
        found = []
        for path in self.field_map.get(field, ()):
            value = get_path(item, path)
            if value is not _MISSING and value is not None:
                found.append(value)
        return found

    def _first_string(self, item: Dict[str, Any], field: str) -> Optional[str]:
        for value in self._values(item, field):
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    def item_to_container(self, item: Dict[str, Any]) -> Optional[RawContainer]:
        """Build a container from one product object, or None if it has no name."""
        names = [
            v.strip()
            for v in self._values(item, "name") + self._values(item, "aria")
            if isinstance(v, str) and v.strip()
        ]
        if not names:
            return None

        hints: List[PriceHint] = []
        for field, role in (
            ("original", PriceRole.ORIGINAL),
            ("sale", PriceRole.SALE),
            ("unlabeled", PriceRole.UNLABELED),
        ):
            for value in self._values(item, field):
                amount = to_amount(value)
                if amount is not None:
                    hints.append(PriceHint(role=role, amount=amount))

        text = " ".join(flatten_strings(item))
        url = self._first_string(item, "url")
        image = self._first_string(item, "image")

        return RawContainer(
            text_content=text,
            candidate_names=list(dict.fromkeys(names)),
            candidate_brand=self._first_string(item, "brand"),
            price_hints=hints,
            explicit_discount_percent=self._discount(item, text),
            image_url=urljoin(self.base_url, image) if image else None,
            product_url=urljoin(self.base_url, url) if url else None,
        )

    def _discount(self, item: Dict[str, Any], text: str) -> Optional[int]:
        for value in self._values(item, "discount"):
            if isinstance(value, bool):
                continue
            if isinstance(value, (int, float)) and 1 <= round(value) <= 100:
                return int(round(value))
            if isinstance(value, str):
                stripped = value.strip().rstrip("%").strip()
                if stripped.isdigit() and 0 < int(stripped) <= 100:
                    return int(stripped)
                parsed = parse_discount_text(value)
                if parsed is not None:
                    return parsed
        return parse_discount_text(text)
