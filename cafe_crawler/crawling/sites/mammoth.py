"""
Mammoth Coffee: two listing pages whose items open by script; the menu
sequence number in each item's link identifies the product.
"""

from __future__ import annotations

import re

from cafe_crawler.crawling.browser.base import ElementHandle
from cafe_crawler.crawling.config.models import (
    CrawlerOptions,
    CrawlerStrategyType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    SiteDefinition,
    SiteExtensions,
)
from cafe_crawler.crawling.sites.common import first_attribute, first_text
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import ExtractionContext, ProductFields

BASE_URL = "https://mmthcoffee.com"
DETAIL_URL = f"{BASE_URL}/sub/menu/list_coffee_view.php?menuSeq="
CATEGORY_NAME = "Coffee"
MENU_SEQ_PATTERN = re.compile(r"goViewB\(['\"]?(\d+)['\"]?\)")


def menu_seq_from(href: str | None) -> str | None:
    if not href:
        return None
    match = MENU_SEQ_PATTERN.search(href)
    return match.group(1) if match else None


class MammothExtensions(SiteExtensions):
    async def extract_product_id(self, element: ElementHandle, context: ExtractionContext) -> str | None:
        return menu_seq_from(await element.get_attribute("href"))

    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        menu_seq = await self.extract_product_id(element, context)
        name = await first_text(element, "strong")
        if not menu_seq or not name:
            return None
        full_text = clean_text(await element.text_content()) or ""
        return ProductFields(
            name=name,
            name_en=clean_text(full_text.replace(name, "", 1)),
            image_url=await first_attribute(element, "img", "src") or "",
            external_id=menu_seq,
            external_url=f"{DETAIL_URL}{menu_seq}",
            category=CATEGORY_NAME,
        )


MAMMOTH = SiteDefinition(
    config=SiteConfig(
        brand="mammoth",
        display_name="매머드커피",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/sub/menu/list_coffee.php",
        category_urls=(
            f"{BASE_URL}/sub/menu/list_coffee.php",
            f"{BASE_URL}/sub/menu/list_sub.php?menuType=F",
        ),
    ),
    selectors=SelectorConfig(
        product_containers=('ul li a[href*="goViewB"]',),
        product_data=ProductDataSelectors(name="strong", image="img"),
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    options=CrawlerOptions(
        max_concurrency=4,
        max_requests_per_crawl=150,
        max_request_retries=2,
        request_handler_timeout_secs=30,
    ),
    extensions=MammothExtensions(),
)
