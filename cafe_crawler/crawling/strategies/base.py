"""
Base crawler shared by every traversal strategy.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import replace
from typing import TypeVar
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from cafe_crawler.config import TestModeConfig, get_crawler_settings, load_test_mode_config
from cafe_crawler.crawling.browser.base import BrowserSession, ElementHandle, PageHandle
from cafe_crawler.crawling.config.models import CrawlerOptions, ProductDataSelectors, SiteDefinition
from cafe_crawler.crawling.config.options import resolve_crawler_options
from cafe_crawler.crawling.dataset import ProductDataset
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.nutrition.extractor import (
    NutritionExtractionMethod,
    NutritionExtractor,
    create_nutrition_extractor,
)
from cafe_crawler.crawling.nutrition.parsing import parse_numeric_value
from cafe_crawler.crawling.readiness import WaitPolicy, wait_until_ready
from cafe_crawler.crawling.runner import CrawlRunner, RequestBudget
from cafe_crawler.crawling.types import (
    CategoryInfo,
    CrawlRequest,
    CrawlRunResult,
    ExtractionContext,
    ProductFields,
    RequestLabel,
)
from cafe_crawler.domain.products import Nutritions, Product

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Drinks"
DEFAULT_EXTERNAL_CATEGORY = "Default"

SessionFactory = Callable[[CrawlerOptions], BrowserSession]
Scope = ElementHandle | PageHandle
T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


def playwright_session_factory(options: CrawlerOptions) -> BrowserSession:
    from cafe_crawler.crawling.browser.playwright_driver import PlaywrightBrowserSession

    return PlaywrightBrowserSession(
        headless=options.headless,
        launch_args=options.launch_args,
        user_agent=get_crawler_settings().user_agent,
        navigation_timeout_ms=options.navigation_timeout_ms,
    )


def make_external_id(brand: str, category: str | None, name: str) -> str:
    """
    Build the default external id `{brand}_{category}_{name}`.
    """

    parts = [brand, category or DEFAULT_EXTERNAL_CATEGORY, name]
    return "_".join(_WHITESPACE.sub(" ", part).strip() for part in parts)


def clean_text(raw: str | None) -> str | None:
    if raw is None:
        return None
    text = _WHITESPACE.sub(" ", raw).strip()
    return text or None


def with_page_param(url: str, page_number: int, *, param: str = "page") -> str:
    parsed = urlparse(url)
    query = [(key, value) for key, value in parse_qsl(parsed.query, keep_blank_values=True) if key != param]
    query.append((param, str(page_number)))
    return urlunparse(parsed._replace(query=urlencode(query)))


class BaseCrawler(ABC):
    """
    Drives a browser through one site definition and collects products.

    Subclasses implement the MAIN and CATEGORY request handlers; extraction,
    test-mode limits, budgeted navigation and pagination live here.
    """

    def __init__(
        self,
        definition: SiteDefinition,
        *,
        session_factory: SessionFactory | None = None,
        test_mode: TestModeConfig | None = None,
        navigation_timeout_ms: int | None = None,
    ) -> None:
        self.definition = definition
        self.config = definition.config
        self.selectors = definition.selectors
        self.extensions = definition.extensions
        self.test_mode = test_mode if test_mode is not None else load_test_mode_config()
        self.options = resolve_crawler_options(
            definition.options,
            self.test_mode,
            navigation_timeout_ms=navigation_timeout_ms,
        )
        self.session_factory = session_factory or playwright_session_factory
        self.wait_policy = WaitPolicy(timeout_ms=self.options.load_timeout_ms)
        self.nutrition_extractor = self._build_nutrition_extractor()

        self.dataset = ProductDataset()
        self.budget = RequestBudget(self.options.max_requests_per_crawl)
        self.runner: CrawlRunner | None = None

    @property
    def brand(self) -> str:
        return self.config.brand

    def _build_nutrition_extractor(self) -> NutritionExtractor | None:
        options = self.definition.nutrition
        if options is None:
            return None
        custom = self.extensions.extract_nutrition
        if options.method is not NutritionExtractionMethod.CUSTOM:
            custom = None
        return create_nutrition_extractor(options, custom)

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> CrawlRunResult:
        """
        Crawl the site from its start URLs and return the collected products.
        """

        self.dataset = ProductDataset()
        self.budget = RequestBudget(self.options.max_requests_per_crawl)

        log_event(
            logger,
            logging.INFO,
            "crawler_started",
            brand=self.brand,
            strategy=self.definition.strategy.value,
            test_mode=self.test_mode.enabled,
            max_requests=self.options.max_requests_per_crawl,
            max_concurrency=self.options.max_concurrency,
        )
        async with self.session_factory(self.options) as session:
            self.runner = CrawlRunner(
                brand=self.brand,
                session=session,
                handler=self.handle_request,
                options=self.options,
                budget=self.budget,
            )
            stats = await self.runner.run(self.initial_requests())

        products = self.dataset.items()
        result = CrawlRunResult(
            brand=self.brand,
            products=products,
            requests_handled=stats.handled,
            requests_failed=stats.failed,
            errors=list(stats.errors),
        )
        log_event(
            logger,
            logging.INFO,
            "crawl_completed",
            brand=self.brand,
            products=len(products),
            requests_handled=result.requests_handled,
            requests_failed=result.requests_failed,
            budget_used=self.budget.used,
        )
        return result

    def initial_requests(self) -> list[CrawlRequest]:
        if self.config.category_urls:
            return [
                CrawlRequest(url=url, label=RequestLabel.CATEGORY, order=(index,))
                for index, url in enumerate(self.config.category_urls)
            ]
        return [CrawlRequest(url=self.config.start_url, label=RequestLabel.MAIN, order=(0,))]

    async def handle_request(self, page: PageHandle, request: CrawlRequest) -> None:
        await self.wait_ready(page)
        if request.label is RequestLabel.MAIN:
            await self.handle_main(page, request)
        elif request.label is RequestLabel.CATEGORY:
            await self.handle_category(page, request)
        else:
            await self.handle_detail(page, request)

    @abstractmethod
    async def handle_main(self, page: PageHandle, request: CrawlRequest) -> None:
        """Handle the start page."""

    @abstractmethod
    async def handle_category(self, page: PageHandle, request: CrawlRequest) -> None:
        """Handle one category listing page."""

    async def handle_detail(self, page: PageHandle, request: CrawlRequest) -> None:
        log_event(
            logger,
            logging.WARNING,
            "detail_request_unsupported",
            brand=self.brand,
            strategy=self.definition.strategy.value,
            url=request.url,
        )

    def enqueue(self, request: CrawlRequest) -> bool:
        if self.runner is None:
            raise RuntimeError("Requests can only be enqueued while the crawler is running.")
        return self.runner.add_request(request)

    def emit(self, product: Product, order: tuple[int, ...]) -> None:
        self.dataset.push(product, order)
        log_event(
            logger,
            logging.DEBUG,
            "product_extracted",
            brand=self.brand,
            name=product.name,
            external_id=product.external_id,
            has_nutritions=product.nutritions is not None,
        )

    # ------------------------------------------------------------------
    # Navigation and limits
    # ------------------------------------------------------------------

    def context_for(self, page: PageHandle, category_name: str | None) -> ExtractionContext:
        return ExtractionContext(
            base_url=self.config.base_url,
            page_url=page.url,
            category_name=category_name,
            brand=self.brand,
        )

    async def navigate(self, page: PageHandle, url: str) -> None:
        self.budget.consume()
        await page.goto(url, timeout_ms=self.options.navigation_timeout_ms)
        await self.wait_ready(page)

    async def wait_ready(self, page: PageHandle, *, selector: str | None = None) -> bool:
        return await wait_until_ready(page, self.wait_policy, selector=selector)

    def limit_items(self, items: Sequence[T]) -> list[T]:
        if self.test_mode.enabled and self.test_mode.max_products is not None:
            return list(items[: self.test_mode.max_products])
        return list(items)

    def limit_categories(self, categories: Sequence[T]) -> list[T]:
        if self.test_mode.enabled and self.test_mode.max_categories is not None:
            return list(categories[: self.test_mode.max_categories])
        return list(categories)

    # ------------------------------------------------------------------
    # Element helpers
    # ------------------------------------------------------------------

    async def find_containers(self, scope: Scope) -> list[ElementHandle]:
        for selector in self.selectors.product_containers:
            found = await scope.query_selector_all(selector)
            if found:
                return found
        return []

    async def text_of(self, scope: Scope, selector: str | None) -> str | None:
        if not selector:
            return None
        try:
            element = await scope.query_selector(selector)
            if element is None:
                return None
            return clean_text(await element.text_content())
        except Exception as exc:
            log_event(logger, logging.DEBUG, "text_lookup_failed", selector=selector, error=str(exc))
            return None

    async def attribute_of(self, scope: Scope, selector: str | None, *names: str) -> str | None:
        if not selector:
            return None
        try:
            element = await scope.query_selector(selector)
            if element is None:
                return None
            for name in names:
                value = await element.get_attribute(name)
                if value and value.strip():
                    return value.strip()
        except Exception as exc:
            log_event(logger, logging.DEBUG, "attribute_lookup_failed", selector=selector, error=str(exc))
        return None

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract_categories(self, page: PageHandle, context: ExtractionContext) -> list[CategoryInfo]:
        custom = await self.extensions.extract_categories(page, context)
        if custom is not None:
            return custom
        if not self.selectors.category_links:
            return []

        categories: list[CategoryInfo] = []
        seen_urls: set[str] = set()
        for link in await page.query_selector_all(self.selectors.category_links):
            name = clean_text(await link.text_content())
            href = await link.get_attribute("href")
            if not name or not href or href.startswith(("#", "javascript:")):
                continue
            url = context.build_url(href)
            if url in seen_urls:
                continue
            seen_urls.add(url)
            categories.append(CategoryInfo(name=name, url=url))
        return categories

    async def read_fields(
        self,
        scope: Scope,
        selectors: ProductDataSelectors,
        context: ExtractionContext,
    ) -> ProductFields | None:
        name = await self.text_of(scope, selectors.name)
        if not name:
            return None
        link = await self.attribute_of(scope, selectors.link, "href")
        price_text = await self.text_of(scope, selectors.price)
        return ProductFields(
            name=name,
            name_en=await self.text_of(scope, selectors.name_en),
            description=await self.text_of(scope, selectors.description),
            price=parse_numeric_value(price_text) if price_text else None,
            image_url=await self.attribute_of(scope, selectors.image, "src", "data-src") or "",
            external_url=context.build_url(link) if link and not link.startswith(("#", "javascript:")) else None,
        )

    async def extract_product_fields(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        custom = await self.extensions.extract_product(element, context)
        if custom is not None:
            return custom
        return await self.read_fields(element, self.selectors.product_data, context)

    async def extract_nutrition(self, element: ElementHandle | None, context: ExtractionContext) -> Nutritions | None:
        if self.nutrition_extractor is None or element is None:
            return None
        return await self.nutrition_extractor(element, context)

    def external_id_for(self, fields: ProductFields, context: ExtractionContext, product_id: str | None) -> str:
        if fields.external_id:
            return fields.external_id
        if product_id:
            return f"{self.brand}_{product_id}"
        return make_external_id(self.brand, fields.category or context.category_name, fields.name)

    def build_product(
        self,
        fields: ProductFields,
        context: ExtractionContext,
        nutritions: Nutritions | None,
        *,
        product_id: str | None = None,
    ) -> Product:
        return Product(
            name=fields.name,
            name_en=fields.name_en,
            description=fields.description,
            price=fields.price,
            external_image_url=context.build_url(fields.image_url) if fields.image_url else "",
            category=DEFAULT_CATEGORY,
            external_category=fields.category or context.category_name or DEFAULT_EXTERNAL_CATEGORY,
            external_id=self.external_id_for(fields, context, product_id),
            external_url=fields.external_url or context.page_url,
            nutritions=nutritions,
        )

    async def process_container(
        self,
        page: PageHandle,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> Product | None:
        fields = await self.extract_product_fields(element, context)
        if fields is None:
            return None
        product_id = await self.extensions.extract_product_id(element, context)
        nutritions = await self.extract_nutrition(element, context)
        return self.build_product(fields, context, nutritions, product_id=product_id)

    async def safe_process_container(
        self,
        page: PageHandle,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> Product | None:
        try:
            return await self.process_container(page, element, context)
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "product_extraction_failed",
                brand=self.brand,
                category=context.category_name,
                page_url=context.page_url,
                error=str(exc),
            )
            return None

    def accept(self, product: Product, seen: set[str]) -> bool:
        """Drop products whose external id was already emitted on this listing."""
        if product.external_id in seen:
            log_event(
                logger,
                logging.DEBUG,
                "duplicate_product_skipped",
                brand=self.brand,
                external_id=product.external_id,
            )
            return False
        seen.add(product.external_id)
        return True

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    async def click_load_more(self, page: PageHandle) -> int:
        selector = self.selectors.pagination.load_more
        if not selector:
            return 0

        clicks = 0
        while clicks < self.options.max_load_more_clicks:
            try:
                button = await page.query_selector(selector)
                if button is None or not await button.is_visible():
                    break
                await button.click(timeout_ms=self.wait_policy.timeout_ms)
                await page.wait(self.options.load_more_wait_ms)
                clicks += 1
            except Exception as exc:
                log_event(
                    logger,
                    logging.DEBUG,
                    "load_more_stopped",
                    brand=self.brand,
                    clicks=clicks,
                    error=str(exc),
                )
                break
        log_event(logger, logging.DEBUG, "load_more_completed", brand=self.brand, clicks=clicks)
        return clicks

    async def go_to_next_page(self, page: PageHandle) -> bool:
        """
        Click the next-page control in place. Bounded by
        `max_pagination_pages` only, not by the request budget.
        """

        selector = self.selectors.pagination.next_button
        if not selector:
            return False
        button = await page.query_selector(selector)
        if button is None or not await button.is_visible() or not await button.is_enabled():
            return False
        await button.click(timeout_ms=self.wait_policy.timeout_ms)
        await self.wait_ready(page)
        return True

    async def page_number_urls(self, page: PageHandle, context: ExtractionContext) -> list[str]:
        """
        URLs for pages 2..N of the current listing, N being the highest
        page number shown in the page links.
        """

        selector = self.selectors.pagination.page_links
        if not selector:
            return []

        links: dict[int, str | None] = {}
        for link in await page.query_selector_all(selector):
            label = clean_text(await link.text_content()) or ""
            if not label.isdigit():
                continue
            href = await link.get_attribute("href")
            if href and href.startswith(("#", "javascript:")):
                href = None
            links[int(label)] = context.build_url(href) if href else None

        if not links:
            return []
        last_page = max(links)
        return [links.get(number) or with_page_param(page.url, number) for number in range(2, last_page + 1)]
