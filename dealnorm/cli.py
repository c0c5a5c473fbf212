"""Manual collector runner for testing and debugging sources.

Fetches one page or feed, runs it through the pipeline and prints the
accepted deals plus a rejection summary.

Usage:
    dealnorm html https://shop.example.com/sale --source-id demo-shop
    dealnorm html https://shop.example.com/sale --card-selector "li.product"
    dealnorm json https://api.example.com/v1/products --items-path data.items
    dealnorm json https://api.example.com/v1/products --output json
"""

import argparse
import asyncio
import json
import sys
from decimal import Decimal
from typing import List, Optional

import httpx

from dealnorm.collectors import BaseCollector, HtmlCardCollector, JsonFeedCollector
from dealnorm.config import settings
from dealnorm.core.exceptions import CollectorError
from dealnorm.core.logging import configure_logging
from dealnorm.pipeline import PipelineResult, ProductPipeline
from dealnorm.schemas import Category
from dealnorm.service import CollectionService


def build_collector(
    args: argparse.Namespace, http_client: Optional[httpx.AsyncClient] = None
) -> BaseCollector:
    """Create the collector described by parsed command-line arguments."""
    common = dict(
        source_id=args.source_id,
        url=args.url,
        default_category=args.category,
        http_client=http_client,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )
    if args.kind == "html":
        if args.card_selector:
            common["card_selector"] = args.card_selector
        return HtmlCardCollector(**common)
    return JsonFeedCollector(items_path=args.items_path, **common)


async def run(
    args: argparse.Namespace, http_client: Optional[httpx.AsyncClient] = None
) -> PipelineResult:
    service = CollectionService(pipeline=ProductPipeline.from_settings(settings))
    return await service.run_collector(build_collector(args, http_client))


def _format_price(price: Decimal) -> str:
    return f"{price:,.2f}"


def render_text(result: PipelineResult, limit: int) -> str:
    lines: List[str] = ["=" * 70, f"  {result.source_id}", "=" * 70]

    for i, product in enumerate(result.products[:limit], 1):
        lines.append(f"[{i}] {product.name}")
        lines.append(
            f"    Price: {_format_price(product.sale_price)}"
            f" (was {_format_price(product.original_price)}, -{product.discount_percent}%)"
        )
        lines.append(f"    Brand: {product.brand}  Category: {product.category.value}")
        if product.product_url:
            lines.append(f"    URL: {product.product_url}")

    lines.extend(["=" * 70, "  Summary", "=" * 70])
    lines.append(f"  Containers: {result.total}")
    lines.append(f"  Accepted: {len(result.products)}")
    if result.average_discount is not None:
        lines.append(f"  Avg Discount: {result.average_discount:.1f}%")
    counts = result.rejection_counts()
    if counts:
        lines.append("  Rejected:")
        for reason, count in sorted(counts.items(), key=lambda kv: kv[0].value):
            lines.append(f"    - {reason.value}: {count}")
    return "\n".join(lines)


def render_json(result: PipelineResult) -> str:
    payload = {
        "products": [p.model_dump(by_alias=True, mode="json") for p in result.products],
        "rejections": [
            {
                "index": r.index,
                "identifier": r.identifier,
                "stage": r.stage.value,
                "reason": r.reason.value,
                "detail": r.detail,
            }
            for r in result.rejections
        ],
        "stats": result.stats(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dealnorm",
        description="Collect one source and print the normalized deals",
    )
    parser.add_argument("kind", choices=["html", "json"], help="Collector type")
    parser.add_argument("url", help="Listing page or JSON feed URL")
    parser.add_argument(
        "--source-id",
        default="manual",
        help="Identifier stamped on every product (default: manual)",
    )
    parser.add_argument(
        "--category",
        choices=[c.value for c in Category],
        help="Category for names matching no keyword",
    )
    parser.add_argument("--card-selector", help="CSS selector for product cards (html)")
    parser.add_argument(
        "--items-path",
        default="products",
        help="Dotted path to the product list (json, default: products)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Maximum number of deals to display (default: 20)",
    )
    parser.add_argument("--output", choices=["text", "json"], default="text")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse arguments and run the collector."""
    args = make_parser().parse_args(argv)
    configure_logging(settings.LOG_LEVEL, json=settings.LOG_JSON)

    try:
        result = asyncio.run(run(args))
    except CollectorError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.output == "json":
        print(render_json(result))
    else:
        print(render_text(result, args.limit))
    return 0


if __name__ == "__main__":
    sys.exit(main())
