"""
tests/test_inline_data_crawler.py

Inline-data strategy against in-memory pages: category walk, discovery
order, per-item and per-category isolation, pagination, de-duplication,
retries, nutrition tables and test-mode limits.
"""

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from cafe_crawler.config import TestModeConfig
from cafe_crawler.crawling.browser.static_driver import StaticBrowserSession, StaticPageHandle, mapping_fetcher
from cafe_crawler.crawling.config.models import (
    CrawlerOptions,
    CrawlerStrategyType,
    PaginationSelectors,
    PaginationType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    SiteDefinition,
    SiteExtensions,
)
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions
from cafe_crawler.crawling.strategies import InlineDataCrawler, create_crawler_from_definition
from cafe_crawler.crawling.types import CrawlRequest, RequestLabel
from cafe_crawler.errors import NavigationError

BASE_URL = "https://cafe.example"
START_URL = f"{BASE_URL}/menu"


def item(name: str, facts: str = "") -> str:
    return (
        f'<li class="item"><h3 class="name">{name}</h3><span class="en">{name} EN</span>'
        f'<img src="/img/{name.replace(" ", "_")}.png"><div class="facts">{facts}</div></li>'
    )


def listing(*items: str, extra: str = "") -> str:
    return f'<html><body><ul class="list">{"".join(items)}</ul>{extra}</body></html>'


def definition(**overrides) -> SiteDefinition:
    values = {
        "config": SiteConfig(brand="testcafe", base_url=BASE_URL, start_url=START_URL),
        "selectors": SelectorConfig(
            product_containers=(".list > li.item",),
            product_data=ProductDataSelectors(name=".name", name_en=".en", image="img"),
            category_links=".tabs a",
            pagination=PaginationSelectors(page_links=".paging a"),
        ),
        "strategy": CrawlerStrategyType.INLINE_DATA,
        "options": CrawlerOptions(max_request_retries=0, max_concurrency=2),
        "nutrition": NutritionExtractorOptions(method=NutritionExtractionMethod.TEXT, selector=".facts"),
    }
    values.update(overrides)
    return SiteDefinition(**values)


def run(crawler):
    return asyncio.run(crawler.run())


# ---------------------------------------------------------------------------
# Category walk
# ---------------------------------------------------------------------------


class TestCategoryWalk:
    def test_products_follow_category_and_item_order(self, static_sessions) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/coffee">Coffee</a></li>'
            '<li><a href="/menu/tea">Tea</a></li><li><a href="#">Top</a></li></ul>',
            f"{BASE_URL}/menu/coffee": listing(item("Americano", "열량 10kcal"), item("Latte", "열량 180kcal")),
            f"{BASE_URL}/menu/tea": listing(item("Green Tea"), item("Earl Grey")),
        }
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )
        assert isinstance(crawler, InlineDataCrawler)

        result = run(crawler)

        assert [product.name for product in result.products] == ["Americano", "Latte", "Green Tea", "Earl Grey"]
        assert result.requests_failed == 0
        americano = result.products[0]
        assert americano.external_category == "Coffee"
        assert americano.category == "Drinks"
        assert americano.external_id == "testcafe_Coffee_Americano"
        assert americano.external_url == f"{BASE_URL}/menu/coffee"
        assert americano.external_image_url == f"{BASE_URL}/img/Americano.png"
        assert americano.name_en == "Americano EN"
        assert americano.nutritions is not None
        assert americano.nutritions.get("calories") == (10.0, "kcal")
        assert result.products[2].nutritions is None

    def test_start_page_without_categories_is_one_listing(self, static_sessions) -> None:
        pages = {START_URL: listing(item("Mocha"), item("Vanilla Latte"))}
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Mocha", "Vanilla Latte"]
        assert {product.external_category for product in result.products} == {"All Items"}

    def test_failed_category_does_not_stop_the_others(self, static_sessions) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/gone">Gone</a></li>'
            '<li><a href="/menu/tea">Tea</a></li></ul>',
            f"{BASE_URL}/menu/tea": listing(item("Green Tea")),
        }
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Green Tea"]
        assert result.requests_failed == 1
        assert "/menu/gone" in result.errors[0]


# ---------------------------------------------------------------------------
# Item isolation and de-duplication
# ---------------------------------------------------------------------------


class FailingThirdItem(SiteExtensions):
    async def extract_product(self, element, context):
        if "Item 3" in (await element.text_content() or ""):
            raise RuntimeError("broken markup")
        return None


class TestItems:
    def test_one_broken_item_is_skipped(self, static_sessions) -> None:
        pages = {START_URL: listing(*(item(f"Item {index}") for index in range(1, 11)))}
        crawler = create_crawler_from_definition(
            definition(extensions=FailingThirdItem()),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        names = [product.name for product in result.products]
        assert len(names) == 9
        assert "Item 3" not in names
        assert names[:3] == ["Item 1", "Item 2", "Item 4"]
        assert result.requests_failed == 0

    def test_duplicate_items_on_one_listing_are_dropped(self, static_sessions) -> None:
        pages = {START_URL: listing(item("Americano"), item("Americano"), item("Latte"))}
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Americano", "Latte"]

    def test_containers_without_a_name_are_ignored(self, static_sessions) -> None:
        pages = {START_URL: listing(item("Americano"), '<li class="item"><img src="/x.png"></li>')}
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        assert [product.name for product in run(crawler).products] == ["Americano"]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestPageNumbers:
    def test_numbered_pages_are_visited_in_order(self, static_sessions) -> None:
        paging = '<div class="paging"><a href="/menu?page=1">1</a><a href="/menu?page=2">2</a><a href="#">next</a></div>'
        pages = {
            START_URL: listing(item("Page One A"), item("Page One B"), extra=paging),
            f"{BASE_URL}/menu?page=2": listing(item("Page Two A"), extra=paging),
        }
        crawler = create_crawler_from_definition(
            definition(pagination=PaginationType.PAGE_NUMBERS),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Page One A", "Page One B", "Page Two A"]
        assert result.products[2].external_url == f"{BASE_URL}/menu?page=2"


# ---------------------------------------------------------------------------
# Test mode
# ---------------------------------------------------------------------------


class TestTestMode:
    def test_product_cap_per_listing(self, static_sessions) -> None:
        pages = {START_URL: listing(*(item(f"Drink {index}") for index in range(50)))}
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Drink 0", "Drink 1", "Drink 2"]

    def test_category_cap(self, static_sessions) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/coffee">Coffee</a></li>'
            '<li><a href="/menu/tea">Tea</a></li></ul>',
            f"{BASE_URL}/menu/coffee": listing(item("Americano")),
            f"{BASE_URL}/menu/tea": listing(item("Green Tea")),
        }
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(enabled=True, max_products=3, max_requests=10, max_categories=1),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Americano"]

    def test_request_budget_stops_the_walk(self, static_sessions) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/coffee">Coffee</a></li>'
            '<li><a href="/menu/tea">Tea</a></li></ul>',
            f"{BASE_URL}/menu/coffee": listing(item("Americano")),
            f"{BASE_URL}/menu/tea": listing(item("Green Tea")),
        }
        crawler = create_crawler_from_definition(
            definition(),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(enabled=True, max_products=3, max_requests=2, max_categories=5),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Americano"]
        assert result.requests_failed == 0
        assert crawler.budget.used == 2


# ---------------------------------------------------------------------------
# Retries
# ---------------------------------------------------------------------------


def flaky_sessions(pages, *, fail_once=(), slow=(), delay: float = 0.0):
    """
    Session factory whose fetcher fails the first load of each URL in
    `fail_once` and sleeps `delay` seconds before serving URLs in `slow`.
    """

    serve = mapping_fetcher(pages)
    failed: set[str] = set()

    def fetch(url: str) -> str:
        if url in fail_once and url not in failed:
            failed.add(url)
            raise NavigationError(f"Connection reset for {url}")
        if url in slow:
            time.sleep(delay)
        return serve(url)

    return lambda options: StaticBrowserSession(fetch=fetch)


class TestRetries:
    def test_retried_category_does_not_duplicate_products(self) -> None:
        paging = '<div class="paging"><a href="/menu?page=1">1</a><a href="/menu?page=2">2</a></div>'
        page_two = f"{BASE_URL}/menu?page=2"
        pages = {
            START_URL: listing(item("Americano"), item("Latte"), extra=paging),
            page_two: listing(item("Mocha"), extra=paging),
        }
        crawler = create_crawler_from_definition(
            definition(
                pagination=PaginationType.PAGE_NUMBERS,
                options=CrawlerOptions(max_request_retries=1, max_concurrency=1),
            ),
            session_factory=flaky_sessions(pages, fail_once={page_two}),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.external_id for product in result.products] == [
            "testcafe_All Items_Americano",
            "testcafe_All Items_Latte",
            "testcafe_All Items_Mocha",
        ]
        assert result.requests_failed == 0

    def test_slow_category_times_out_on_its_own(self) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/coffee">Coffee</a></li>'
            '<li><a href="/menu/tea">Tea</a></li></ul>',
            f"{BASE_URL}/menu/coffee": listing(item("Americano"), item("Latte")),
            f"{BASE_URL}/menu/tea": listing(item("Green Tea")),
        }
        crawler = create_crawler_from_definition(
            definition(
                options=CrawlerOptions(max_request_retries=1, max_concurrency=2, request_handler_timeout_secs=0.2)
            ),
            session_factory=flaky_sessions(pages, slow={f"{BASE_URL}/menu/tea"}, delay=0.5),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        ids = [product.external_id for product in result.products]
        assert ids == ["testcafe_Coffee_Americano", "testcafe_Coffee_Latte"]
        assert len(set(ids)) == len(ids)
        assert result.requests_failed == 1
        assert "/menu/tea" in result.errors[0]


# ---------------------------------------------------------------------------
# Nutrition tables
# ---------------------------------------------------------------------------


NUTRITION_TABLE = (
    "<table><tr><th>1회 제공량(g)</th><th>열량(kcal)</th><th>당류(g)</th><th>카페인(mg)</th></tr>"
    "<tr><td>-</td><td>250</td><td>35</td><td>-</td></tr></table>"
)


class TestNutritionTables:
    @pytest.mark.parametrize("method", [NutritionExtractionMethod.TABLE, NutritionExtractionMethod.BEST_ROW])
    def test_placeholder_cells_are_left_out(self, static_sessions, method: NutritionExtractionMethod) -> None:
        pages = {
            START_URL: '<ul class="tabs"><li><a href="/menu/coffee">Coffee</a></li>'
            '<li><a href="/menu/tea">Tea</a></li></ul>',
            f"{BASE_URL}/menu/coffee": listing(item("Americano", NUTRITION_TABLE), item("Latte", NUTRITION_TABLE)),
            f"{BASE_URL}/menu/tea": listing(item("Green Tea", NUTRITION_TABLE), item("Earl Grey", NUTRITION_TABLE)),
        }
        crawler = create_crawler_from_definition(
            definition(nutrition=NutritionExtractorOptions(method=method, selector=".facts")),
            session_factory=static_sessions(pages),
            test_mode=TestModeConfig(),
        )

        result = run(crawler)

        assert [product.name for product in result.products] == ["Americano", "Latte", "Green Tea", "Earl Grey"]
        for product in result.products:
            nutritions = product.nutritions
            assert nutritions is not None
            assert nutritions.get("calories") == (250.0, "kcal")
            assert nutritions.get("sugar") == (35.0, "g")
            assert nutritions.get("serving_size") is None
            assert nutritions.get("caffeine") is None


# ---------------------------------------------------------------------------
# Request routing
# ---------------------------------------------------------------------------


class TestRequestRouting:
    def test_detail_request_is_logged_and_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        crawler = create_crawler_from_definition(definition(), test_mode=TestModeConfig())
        page = StaticPageHandle(fetch=mapping_fetcher({}))
        request = CrawlRequest(url=f"{BASE_URL}/drinks/1", label=RequestLabel.DETAIL)

        with caplog.at_level(logging.WARNING, logger="cafe_crawler.crawling.strategies.base"):
            asyncio.run(crawler.handle_detail(page, request))

        assert "detail_request_unsupported" in caplog.text
        assert len(crawler.dataset) == 0
