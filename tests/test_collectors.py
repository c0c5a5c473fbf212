"""Tests for collectors, the collector factory and the collection service.

HTTP is served by ``httpx.MockTransport``; nothing leaves the process.
"""

from decimal import Decimal

import httpx
import pytest

from dealnorm.collectors import (
    BaseCollector,
    CollectorFactory,
    HtmlCardCollector,
    JsonFeedCollector,
)
from dealnorm.collectors.json_feed import flatten_strings, get_path, to_amount
from dealnorm.core.exceptions import CollectorError, NotFoundError
from dealnorm.pipeline import ProductPipeline
from dealnorm.schemas import Category, FailureReason, PriceRole
from dealnorm.service import CollectionService

SALE_URL = "https://shop.example.com/sale"
FEED_URL = "https://api.example.com/v1/products"

LISTING_HTML = """
<html><body>
<section id="grid">
  <li class="product-card" data-product-id="1">
    <a href="/p/pegasus?utm_source=feed&color=black">
      <img src="/img/pegasus.jpg" alt="Pegasus 41 Road Running Shoes">
    </a>
    <span class="product-brand">nike</span>
    <h3 class="product-title">Pegasus 41 Road Running Shoes</h3>
    <div class="pricing">
      <s>$120.00</s>
      <span class="sale-price">$84.00</span>
      <span class="badge">30% off</span>
    </div>
  </li>
  <div class="product-tile" data-product-id="2">
    <a href="/p/merino-sweater">Merino Crew Sweater</a>
    <span class="price">$49.99</span>
  </div>
  <div class="product-card" data-product-id="3">
    <span class="price">$10.00</span>
  </div>
</section>
</body></html>
"""

FEED_PAYLOAD = {
    "data": {
        "items": [
            {
                "id": "SAL-1001",
                "title": "XT-6 Trail Running Shoes",
                "brand": {"name": "salomon"},
                "price": {"original": 150, "current": 105},
                "url": "/p/xt-6",
            },
            {
                "sku": "SCF-22",
                "name": "Wool Scarf",
                "salePrice": "$29.99",
                "badge": "25% off",
                "image": "https://cdn.example.com/scarf.jpg",
            },
            {"id": "X-3", "price": 10},
        ]
    }
}


def _client(routes):
    """AsyncClient answering from a {path: response} mapping, 404 otherwise."""

    def handler(request: httpx.Request) -> httpx.Response:
        return routes.get(request.url.path, httpx.Response(404))

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ============================================================================
# TESTS: HTML CARD COLLECTOR
# ============================================================================

class TestHtmlCardCollector:
    @pytest.fixture
    def collector(self):
        return HtmlCardCollector(source_id="demo-shop", url=SALE_URL)

    def test_parse_skips_cards_without_name(self, collector):
        containers = collector.parse(LISTING_HTML)
        assert len(containers) == 2

    def test_labeled_card(self, collector):
        card = collector.parse(LISTING_HTML)[0]

        assert card.candidate_names == ["Pegasus 41 Road Running Shoes"]
        assert card.candidate_brand == "nike"
        assert [(h.role, h.amount) for h in card.price_hints] == [
            (PriceRole.ORIGINAL, Decimal("120.00")),
            (PriceRole.SALE, Decimal("84.00")),
        ]
        assert card.explicit_discount_percent == 30
        assert card.image_url == "https://shop.example.com/img/pegasus.jpg"
        assert card.product_url == "https://shop.example.com/p/pegasus?utm_source=feed&color=black"

    def test_unlabeled_card(self, collector):
        card = collector.parse(LISTING_HTML)[1]
        assert card.candidate_names == ["Merino Crew Sweater"]
        assert [(h.role, h.amount) for h in card.price_hints] == [
            (PriceRole.UNLABELED, Decimal("49.99")),
        ]
        assert card.explicit_discount_percent is None

    def test_parse_feeds_pipeline(self, collector):
        result = ProductPipeline().run(collector.parse(LISTING_HTML), "demo-shop")

        assert len(result.products) == 1
        product = result.products[0]
        assert product.brand == "Nike"
        assert product.discount_percent == 30
        assert product.category == Category.SHOES
        assert product.product_url == "https://shop.example.com/p/pegasus?color=black"

        assert [r.reason for r in result.rejections] == [FailureReason.NO_DISCOUNT_SIGNAL]
        assert result.rejections[0].identifier == "https://shop.example.com/p/merino-sweater"

    def test_custom_card_selector(self):
        collector = HtmlCardCollector(
            source_id="demo-shop", url=SALE_URL, card_selector="li.product-card"
        )
        assert len(collector.parse(LISTING_HTML)) == 1

    def test_aria_label_used_when_no_title(self, collector):
        html = '<div class="product-card" aria-label="Canvas Tote Bag"><span class="price">$20</span></div>'
        card = collector.parse(html)[0]
        assert card.candidate_names == ["Canvas Tote Bag"]

    async def test_collect(self, collector):
        async with _client({"/sale": httpx.Response(200, text=LISTING_HTML)}) as client:
            collector.http_client = client
            containers = await collector.collect()
        assert len(containers) == 2

    async def test_collect_http_error(self, collector):
        async with _client({"/sale": httpx.Response(503)}) as client:
            collector.http_client = client
            with pytest.raises(CollectorError) as exc_info:
                await collector.collect()
        assert exc_info.value.source_id == "demo-shop"
        assert "503" in exc_info.value.message


# ============================================================================
# TESTS: JSON FEED COLLECTOR
# ============================================================================

class TestJsonHelpers:
    def test_get_path(self):
        item = {"images": [{"url": "a.jpg"}], "price": {"sale": 5}}
        assert get_path(item, "images.0.url") == "a.jpg"
        assert get_path(item, "price.sale") == 5
        assert get_path(item, "images.3") is get_path(item, "nope")

    def test_flatten_strings_skips_ids_and_urls(self):
        item = {
            "productId": "88812",
            "sku": "A-100",
            "title": "Leather Belt",
            "link": "https://shop.example.com/p/belt",
            "tags": ["sale", "/relative/path"],
            "paid": "yes",
        }
        assert flatten_strings(item) == ["Leather Belt", "sale", "yes"]

    @pytest.mark.parametrize(
        "value,expected",
        [
            (105, Decimal("105")),
            (29.99, Decimal("29.99")),
            ("$1,299.00", Decimal("1299.00")),
            (True, None),
            (None, None),
            ({"amount": 5}, None),
        ],
    )
    def test_to_amount(self, value, expected):
        assert to_amount(value) == expected


class TestJsonFeedCollector:
    @pytest.fixture
    def collector(self):
        return JsonFeedCollector(source_id="demo-api", url=FEED_URL, items_path="data.items")

    def test_parse_items(self, collector):
        containers = collector.parse_items(FEED_PAYLOAD["data"]["items"])
        assert len(containers) == 2

        shoe, scarf = containers
        assert shoe.candidate_names == ["XT-6 Trail Running Shoes"]
        assert shoe.candidate_brand == "salomon"
        assert [(h.role, h.amount) for h in shoe.price_hints] == [
            (PriceRole.ORIGINAL, Decimal("150")),
            (PriceRole.SALE, Decimal("105")),
        ]
        assert shoe.product_url == "https://api.example.com/p/xt-6"

        assert scarf.explicit_discount_percent == 25
        assert scarf.image_url == "https://cdn.example.com/scarf.jpg"

    def test_numeric_discount_field(self, collector):
        container = collector.item_to_container(
            {"name": "Leather Belt", "price": 40, "discountPercent": 20}
        )
        assert container.explicit_discount_percent == 20

    def test_fractional_discount_field_ignored(self, collector):
        container = collector.item_to_container(
            {"name": "Leather Belt", "price": 40, "discountPercent": 0.3}
        )
        assert container.explicit_discount_percent is None

    def test_custom_field_map(self):
        collector = JsonFeedCollector(
            source_id="demo-api",
            url=FEED_URL,
            field_map={"name": ("label",)},
        )
        container = collector.item_to_container({"label": "Suede Loafer", "title": "ignored"})
        assert container.candidate_names == ["Suede Loafer"]

    async def test_collect_feeds_pipeline(self, collector):
        async with _client({"/v1/products": httpx.Response(200, json=FEED_PAYLOAD)}) as client:
            collector.http_client = client
            containers = await collector.collect()

        result = ProductPipeline().run(containers, "demo-api")
        assert not result.rejections

        shoe, scarf = result.products
        assert shoe.brand == "Salomon"
        assert shoe.discount_percent == 30
        assert shoe.category == Category.SHOES

        assert scarf.original_price == Decimal("39.99")
        assert scarf.sale_price == Decimal("29.99")
        assert scarf.discount_percent == 25
        assert scarf.category == Category.ACCESSORIES

    async def test_collect_rejects_non_json(self, collector):
        async with _client({"/v1/products": httpx.Response(200, text="<html>")}) as client:
            collector.http_client = client
            with pytest.raises(CollectorError, match="not JSON"):
                await collector.collect()

    async def test_collect_rejects_missing_items(self, collector):
        async with _client({"/v1/products": httpx.Response(200, json={"data": {}})}) as client:
            collector.http_client = client
            with pytest.raises(CollectorError, match="data.items"):
                await collector.collect()


# ============================================================================
# TESTS: FACTORY AND SERVICE
# ============================================================================

class TestCollectorFactory:
    def test_register_and_create(self):
        factory = CollectorFactory(timeout=5.0)
        factory.register("demo-shop", HtmlCardCollector, url=SALE_URL, default_category="shoes")

        collector = factory.create("demo-shop")
        assert isinstance(collector, HtmlCardCollector)
        assert collector.source_id == "demo-shop"
        assert collector.default_category == Category.SHOES
        assert collector.timeout == 5.0
        assert factory.has_collector("demo-shop")
        assert factory.get_registered_sources() == ["demo-shop"]

    def test_overrides(self):
        factory = CollectorFactory()
        factory.register("demo-shop", HtmlCardCollector, url=SALE_URL)
        collector = factory.create("demo-shop", card_selector="li.product-card")
        assert collector.card_selector == "li.product-card"

    def test_unknown_source(self):
        with pytest.raises(NotFoundError, match="No collector registered as 'missing'") as exc_info:
            CollectorFactory().create("missing")
        assert exc_info.value.identifier == "missing"

    def test_builder_must_return_collector(self):
        factory = CollectorFactory()
        factory.register("broken", lambda **kwargs: object())
        with pytest.raises(TypeError):
            factory.create("broken")

    def test_source_id_required(self):
        with pytest.raises(ValueError):
            HtmlCardCollector(source_id="", url=SALE_URL)

    def test_base_collector_is_abstract(self):
        with pytest.raises(TypeError):
            BaseCollector("demo-shop")


class TestCollectionService:
    async def test_run_source(self):
        async with _client({"/sale": httpx.Response(200, text=LISTING_HTML)}) as client:
            factory = CollectorFactory(http_client=client)
            factory.register("demo-shop", HtmlCardCollector, url=SALE_URL)
            service = CollectionService(pipeline=ProductPipeline(), factory=factory)

            result = await service.run_source("demo-shop")

        assert result.source_id == "demo-shop"
        assert [p.brand for p in result.products] == ["Nike"]
        assert result.rejection_counts() == {FailureReason.NO_DISCOUNT_SIGNAL: 1}

    async def test_collector_error_propagates(self):
        async with _client({}) as client:
            factory = CollectorFactory(http_client=client)
            factory.register("demo-shop", HtmlCardCollector, url=SALE_URL)
            service = CollectionService(pipeline=ProductPipeline(), factory=factory)

            with pytest.raises(CollectorError):
                await service.run_source("demo-shop")

    async def test_unknown_source(self):
        service = CollectionService(pipeline=ProductPipeline(), factory=CollectorFactory())
        with pytest.raises(NotFoundError):
            await service.run_source("missing")
