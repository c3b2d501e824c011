"""
Compose Coffee: paginated category listings with nutrition facts printed
as "label : value" lines under each item.
"""

from __future__ import annotations

from cafe_crawler.crawling.browser.base import ElementHandle
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
from cafe_crawler.crawling.sites.common import first_attribute
from cafe_crawler.crawling.types import ExtractionContext

BASE_URL = "https://composecoffee.com"


class ComposeExtensions(SiteExtensions):
    async def extract_product_id(self, element: ElementHandle, context: ExtractionContext) -> str | None:
        return await first_attribute(element, ":scope > div[id]", "id")


COMPOSE = SiteDefinition(
    config=SiteConfig(
        brand="compose",
        display_name="컴포즈커피",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/menu",
    ),
    selectors=SelectorConfig(
        product_containers=(".itemBox",),
        product_data=ProductDataSelectors(name="h3.undertitle", image=".rthumbnailimg"),
        category_links='.dropdown-menu a[href*="/menu/category/"]',
        pagination=PaginationSelectors(page_links='a[href*="page="], .pagination a, .page-link'),
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    pagination=PaginationType.PAGE_NUMBERS,
    options=CrawlerOptions(
        max_concurrency=3,
        max_requests_per_crawl=100,
        max_request_retries=2,
        request_handler_timeout_secs=60,
    ),
    nutrition=NutritionExtractorOptions(method=NutritionExtractionMethod.TEXT, selector="ul.info.g-0"),
    extensions=ComposeExtensions(),
)
