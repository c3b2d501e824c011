"""
Crawler option resolution against test-mode limits.
"""

from __future__ import annotations

from dataclasses import replace

from cafe_crawler.config import TestModeConfig
from cafe_crawler.crawling.config.models import CrawlerOptions

TEST_MODE_MAX_CONCURRENCY = 2
TEST_MODE_HANDLER_TIMEOUT_SECS = 30
TEST_MODE_LOAD_MORE_CLICKS = 1
TEST_MODE_PAGINATION_PAGES = 1


def resolve_crawler_options(
    options: CrawlerOptions,
    test_mode: TestModeConfig,
    *,
    navigation_timeout_ms: int | None = None,
) -> CrawlerOptions:
    """
    Return `options` clamped to the test-mode limits when test mode is on.
    """

    if navigation_timeout_ms is not None:
        options = replace(options, navigation_timeout_ms=navigation_timeout_ms)
    if not test_mode.enabled:
        return options

    max_requests = options.max_requests_per_crawl
    if test_mode.max_requests is not None:
        max_requests = min(max_requests, test_mode.max_requests)

    return replace(
        options,
        max_concurrency=min(options.max_concurrency, TEST_MODE_MAX_CONCURRENCY),
        max_requests_per_crawl=max_requests,
        request_handler_timeout_secs=min(
            options.request_handler_timeout_secs,
            TEST_MODE_HANDLER_TIMEOUT_SECS,
        ),
        max_load_more_clicks=min(options.max_load_more_clicks, TEST_MODE_LOAD_MORE_CLICKS),
        max_pagination_pages=min(options.max_pagination_pages, TEST_MODE_PAGINATION_PAGES),
    )
