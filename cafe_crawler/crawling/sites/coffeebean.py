"""
Coffee Bean Korea: paginated category listings; each item's nutrition
panel lists the value in `dt` and the label in `dd`.
"""

from __future__ import annotations

from cafe_crawler.crawling.config.models import (
    CrawlerOptions,
    CrawlerStrategyType,
    PaginationSelectors,
    PaginationType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    SiteDefinition,
)
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions

BASE_URL = "https://www.coffeebeankorea.com"

COFFEEBEAN = SiteDefinition(
    config=SiteConfig(
        brand="coffeebean",
        display_name="커피빈",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/menu/list.asp?category=13",
    ),
    selectors=SelectorConfig(
        product_containers=(".menu_list > li",),
        product_data=ProductDataSelectors(
            name="dl.txt > dt > span:nth-child(2)",
            name_en="dl.txt > dt > span:nth-child(1)",
            description="dl.txt > dd",
            image="img",
        ),
        category_links="ul.lnb_wrap2 > li:nth-child(1) > ul:nth-child(2) li a",
        pagination=PaginationSelectors(page_links="div.paging > a"),
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    pagination=PaginationType.PAGE_NUMBERS,
    options=CrawlerOptions(
        max_concurrency=2,
        max_requests_per_crawl=50,
        max_request_retries=2,
        request_handler_timeout_secs=60,
    ),
    nutrition=NutritionExtractorOptions(
        method=NutritionExtractionMethod.DL,
        selector=".info",
        value_first=True,
    ),
)
