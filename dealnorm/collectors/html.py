"""HTML product-card collector.

Parses rendered listing pages with BeautifulSoup. Each card matching
``card_selector`` becomes one RawContainer:

- name candidates in preference order: explicit title/name element, ARIA
  label, heading, image alt text, link text
- price hints labeled from markup: strikethrough or original/was/compare
  classes mark the original price, sale/current/now classes the sale price
- "N% off" style text becomes the explicit discount
"""

import re
from typing import List, Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag
import httpx

from dealnorm.schemas import Category, PriceHint, PriceRole, RawContainer
from dealnorm.utils import PriceNormalizer, parse_discount_text

from .base import BaseCollector

DEFAULT_CARD_SELECTOR = ", ".join([
    "[data-product-id]",
    "[class*='product-card']",
    "[class*='product-tile']",
    "[class*='ProductCard']",
    "li[class*='product']",
])

_TITLE_SELECTOR = "[itemprop='name'], [class*='title'], [class*='name'], [class*='Title'], [class*='Name']"
_HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"
_BRAND_SELECTOR = "[itemprop='brand'], [class*='brand'], [class*='Brand']"

_ORIGINAL_SELECTOR = ", ".join([
    "s", "del", "strike",
    "[style*='line-through']",
    "[class*='original']", "[class*='Original']",
    "[class*='was']", "[class*='Was']",
    "[class*='compare']", "[class*='Compare']",
    "[class*='regular']", "[class*='Regular']",
    "[class*='strike']", "[class*='list-price']",
])
_SALE_SELECTOR = ", ".join([
    "[class*='sale']", "[class*='Sale']",
    "[class*='current']", "[class*='Current']",
    "[class*='now']", "[class*='final']",
    "[class*='promo']",
])
_PRICE_SELECTOR = "[itemprop='price'], [class*='price'], [class*='Price']"

_BRAND_CLASS_RE = re.compile(r"brand", re.IGNORECASE)


def _text(elem: Tag) -> str:
    return " ".join(elem.get_text(" ", strip=True).split())


class HtmlCardCollector(BaseCollector):
    """Collects product cards from a server-rendered listing page."""

    def __init__(
        self,
        source_id: str,
        url: str,
        card_selector: str = DEFAULT_CARD_SELECTOR,
        base_url: Optional[str] = None,
        default_category: Union[Category, str, None] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        super().__init__(source_id, default_category, http_client, timeout)
        self.url = url
        self.card_selector = card_selector
        self.base_url = base_url or url

    async def collect(self) -> List[RawContainer]:
        response = await self._fetch(self.url)
        return self.parse(response.text)

    def parse(self, html: str) -> List[RawContainer]:
        """Turn every product card in ``html`` into a container."""
        soup = BeautifulSoup(html, "html.parser")
        cards = soup.select(self.card_selector)
        self.logger.info("product_cards_found", count=len(cards))

        containers: List[RawContainer] = []
        for card in cards:
            container = self.card_to_container(card)
            if container is None:
                self.logger.debug("card_without_name", snippet=_text(card)[:80])
                continue
            containers.append(container)

        self.logger.info("containers_built", count=len(containers), skipped=len(cards) - len(containers))
        return containers

    def card_to_container(self, card: Tag) -> Optional[RawContainer]:
        """Build a container from one card, or None when it has no name text."""
        names = self._candidate_names(card)
        if not names:
            return None

        text = _text(card)
        return RawContainer(
            text_content=text,
            candidate_names=names,
            candidate_brand=self._brand(card),
            price_hints=self._price_hints(card),
            explicit_discount_percent=parse_discount_text(text),
            image_url=self._image_url(card),
            product_url=self._product_url(card),
        )

    def _candidate_names(self, card: Tag) -> List[str]:
        names: List[str] = []

        for elem in card.select(_TITLE_SELECTOR):
            if _BRAND_CLASS_RE.search(" ".join(elem.get("class", []))):
                continue
            names.append(_text(elem))

        if card.get("aria-label"):
            names.append(card["aria-label"])
        for elem in card.select("[aria-label]"):
            names.append(elem["aria-label"])

        names.extend(_text(h) for h in card.select(_HEADING_SELECTOR))
        names.extend(img.get("alt", "") for img in card.select("img[alt]"))
        names.extend(_text(a) for a in card.select("a"))

        seen = set()
        ordered: List[str] = []
        for name in names:
            name = " ".join(name.split())
            if name and name not in seen:
                seen.add(name)
                ordered.append(name)
        return ordered

    def _brand(self, card: Tag) -> Optional[str]:
        elem = card.select_one(_BRAND_SELECTOR)
        if elem is None:
            return None
        return _text(elem) or None

    def _price_hints(self, card: Tag) -> List[PriceHint]:
        """Label prices by markup; an element counts only if it holds one price."""
        hints: List[PriceHint] = []
        seen = set()

        for selector, role in (
            (_ORIGINAL_SELECTOR, PriceRole.ORIGINAL),
            (_SALE_SELECTOR, PriceRole.SALE),
            (_PRICE_SELECTOR, PriceRole.UNLABELED),
        ):
            for elem in card.select(selector):
                if id(elem) in seen:
                    continue
                seen.add(id(elem))
                prices = PriceNormalizer.extract_prices_from_text(_text(elem))
                if len(prices) == 1:
                    hints.append(PriceHint(role=role, amount=prices[0]))
        return hints

    def _image_url(self, card: Tag) -> Optional[str]:
        img = card.select_one("img")
        if img is None:
            return None
        src = img.get("src") or img.get("data-src")
        if not src and img.get("srcset"):
            src = img["srcset"].split(",")[0].split()[0]
        if not src or src.startswith("data:"):
            return None
        return urljoin(self.base_url, src)

    def _product_url(self, card: Tag) -> Optional[str]:
        link = card if card.name == "a" and card.get("href") else card.select_one("a[href]")
        if link is None:
            return None
        href = link["href"]
        if href.startswith(("#", "javascript:")):
            return None
        return urljoin(self.base_url, href)
