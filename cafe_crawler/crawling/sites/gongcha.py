"""
Gong cha Korea: fixed category list, detail pages opened from each item.
"""

from __future__ import annotations

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.config.models import (
    CrawlerOptions,
    CrawlerStrategyType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    SiteDefinition,
    SiteExtensions,
)
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions
from cafe_crawler.crawling.sites.common import file_stem, first_attribute
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import CategoryInfo, ExtractionContext, ProductFields

BASE_URL = "https://www.gong-cha.co.kr"

# (category code, display name)
CATEGORIES: tuple[tuple[str, str], ...] = (
    ("001001", "New 시즌 메뉴"),
    ("001002", "베스트셀러"),
    ("001006", "밀크티"),
    ("001010", "스무디"),
    ("001003", "오리지널 티"),
    ("001015", "프룻티&모어"),
    ("001011", "커피"),
    ("002001", "베이커리"),
    ("002004", "스낵"),
    ("002006", "아이스크림"),
    ("003001", "비식품"),
    ("003002", "식품"),
)


def category_url(code: str) -> str:
    return f"{BASE_URL}/brand/menu/product?category={code}"


class GongchaExtensions(SiteExtensions):
    async def extract_categories(self, page: PageHandle, context: ExtractionContext) -> list[CategoryInfo] | None:
        return [CategoryInfo(name=name, url=category_url(code)) for code, name in CATEGORIES]

    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        name = clean_text(await element.text_content())
        if not name:
            return None
        image_url = await first_attribute(element, "img", "src") or ""
        link = await first_attribute(element, 'a[href*="detail"]', "href")
        # Item markup carries no id; the image file name is stable per product.
        return ProductFields(
            name=name,
            image_url=image_url,
            external_id=file_stem(image_url),
            external_url=context.build_url(link) if link else None,
        )


GONGCHA = SiteDefinition(
    config=SiteConfig(
        brand="gongcha",
        display_name="공차",
        base_url=BASE_URL,
        start_url=category_url(CATEGORIES[0][0]),
    ),
    selectors=SelectorConfig(
        product_containers=('li:has(a[href*="detail"])',),
        product_data=ProductDataSelectors(name='a[href*="detail"]', image="img", link='a[href*="detail"]'),
        detail=ProductDataSelectors(name=".text-a .t1", description=".text-a .t2"),
        detail_trigger='a[href*="detail"]',
        detail_ready=".text-a",
    ),
    strategy=CrawlerStrategyType.LIST_DETAIL,
    options=CrawlerOptions(
        max_concurrency=3,
        max_requests_per_crawl=150,
        max_request_retries=1,
        request_handler_timeout_secs=90,
    ),
    nutrition=NutritionExtractorOptions(
        method=NutritionExtractionMethod.BEST_ROW,
        selector=".table-list",
        table_selector="table",
    ),
    extensions=GongchaExtensions(),
)
