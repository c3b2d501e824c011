"""
Run café menu crawlers from CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import replace

from cafe_crawler.config import TestModeConfig, get_crawler_settings, load_test_mode_config
from cafe_crawler.crawling.browser.static_driver import StaticBrowserSession
from cafe_crawler.crawling.config.models import CrawlerOptions
from cafe_crawler.crawling.engine import CrawlEngine
from cafe_crawler.crawling.logging_utils import configure_logging
from cafe_crawler.crawling.sites import BRAND_NAMES, build_default_registry
from cafe_crawler.crawling.storage import HttpUploadStorage, JsonFileProductStorage, ProductStorage
from cafe_crawler.crawling.strategies.base import playwright_session_factory
from cafe_crawler.errors import StorageConfigurationError, UnknownBrandError


def static_session_factory(options: CrawlerOptions) -> StaticBrowserSession:
    return StaticBrowserSession(
        user_agent=get_crawler_settings().user_agent,
        timeout_seconds=options.navigation_timeout_ms / 1000,
    )


def _test_mode(args: argparse.Namespace) -> TestModeConfig:
    test_mode = load_test_mode_config()
    if args.test and not test_mode.enabled:
        test_mode = TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1)
    if not test_mode.enabled:
        return test_mode
    if args.max_products is not None:
        test_mode = replace(test_mode, max_products=max(1, args.max_products))
    if args.max_requests is not None:
        test_mode = replace(test_mode, max_requests=max(1, args.max_requests))
    return test_mode


def _storage(args: argparse.Namespace) -> ProductStorage:
    settings = get_crawler_settings()
    if args.upload:
        return HttpUploadStorage(
            base_url=settings.upload_url,
            upload_secret=settings.upload_secret,
            dry_run=args.dry_run,
            timeout_seconds=settings.upload_timeout_seconds,
        )
    return JsonFileProductStorage(output_dir=args.output_dir or settings.output_dir)


def main() -> int:
    parser = argparse.ArgumentParser(description="Crawl café beverage menus.")
    parser.add_argument("brands", nargs="*", help="Brand keys to crawl. Defaults to every brand.")
    parser.add_argument("--list", action="store_true", help="List available brands and exit.")
    parser.add_argument("--all", action="store_true", help="Crawl every registered brand.")
    parser.add_argument("--parallel", action="store_true", help="Crawl brands concurrently.")
    parser.add_argument("--test", action="store_true", help="Enable test mode limits.")
    parser.add_argument("--max-products", type=int, default=None, help="Test mode product cap per listing.")
    parser.add_argument("--max-requests", type=int, default=None, help="Test mode request cap per crawler.")
    parser.add_argument("--output-dir", default=None, help="Directory for JSON output files.")
    parser.add_argument("--upload", action="store_true", help="Upload products instead of writing JSON.")
    parser.add_argument("--dry-run", action="store_true", help="With --upload, compute changes without writing.")
    parser.add_argument(
        "--static",
        action="store_true",
        help="Fetch pages over plain HTTP instead of driving a browser.",
    )
    args = parser.parse_args()

    settings = get_crawler_settings()
    configure_logging(settings.log_level)

    if args.list:
        for brand, name in BRAND_NAMES.items():
            print(f"{brand:<12} {name}")
        return 0

    registry = build_default_registry(
        session_factory=static_session_factory if args.static else playwright_session_factory,
        test_mode=_test_mode(args),
        navigation_timeout_ms=settings.navigation_timeout_ms,
    )
    try:
        storage = _storage(args)
    except StorageConfigurationError as exc:
        parser.error(str(exc))

    engine = CrawlEngine(registry=registry, storage=storage)
    brands = None if args.all else args.brands
    try:
        summaries = asyncio.run(engine.run(brands=brands, parallel=args.parallel))
    except UnknownBrandError as exc:
        parser.error(str(exc))

    payload = [
        {
            "brand": summary.brand,
            "products_scraped": summary.products_scraped,
            "products_stored": summary.products_stored,
            "failed_requests": summary.failed_requests,
            "status": summary.status,
            "errors": summary.errors,
            "output": summary.output,
        }
        for summary in summaries
    ]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 1 if any(summary.status == "failed" for summary in summaries) else 0


if __name__ == "__main__":
    raise SystemExit(main())
