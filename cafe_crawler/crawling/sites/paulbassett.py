"""
Paul Bassett: one listing per category code (`cid1`), every field inline.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

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

BASE_URL = "https://www.baristapaulbassett.co.kr"

CATEGORY_NAMES: dict[str, str] = {
    "A": "COFFEE",
    "B": "BEVERAGE",
    "C": "ICE-CREAM",
    "D": "FOOD",
    "E": "PRODUCT",
}
DEFAULT_CATEGORY_NAME = "COFFEE"

_EXTERNAL_ID_INVALID = re.compile(r"[^\w-]")
_WHITESPACE = re.compile(r"\s+")


def category_from_url(url: str) -> str:
    codes = parse_qs(urlparse(url).query).get("cid1") or [""]
    return CATEGORY_NAMES.get(codes[0], DEFAULT_CATEGORY_NAME)


def slugify(name: str) -> str:
    return _EXTERNAL_ID_INVALID.sub("", _WHITESPACE.sub("-", name.strip()).lower())


def status_label(text: str) -> str | None:
    if "[New]" in text or "NEW" in text:
        return "New Product"
    if "[Best]" in text or "BEST" in text:
        return "Best Seller"
    return None


class PaulBassettExtensions(SiteExtensions):
    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        full_name = await first_text(element, ".txtArea") or ""
        name_en = await first_text(element, ".txtArea .sTxt")
        name = clean_text(full_name.replace(name_en, "", 1)) if name_en else clean_text(full_name)
        if not name:
            return None
        return ProductFields(
            name=name,
            name_en=name_en,
            description=status_label(await element.text_content() or ""),
            image_url=await first_attribute(element, "img", "src") or "",
            external_id=slugify(name_en or name),
            category=category_from_url(context.page_url),
        )


PAULBASSETT = SiteDefinition(
    config=SiteConfig(
        brand="paulbassett",
        display_name="폴바셋",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/menu/List.pb?cid1=A",
        category_urls=tuple(f"{BASE_URL}/menu/List.pb?cid1={code}" for code in CATEGORY_NAMES),
    ),
    selectors=SelectorConfig(
        product_containers=('ul li:has(img[src*="/upload/product/"])',),
        product_data=ProductDataSelectors(name=".txtArea", name_en=".txtArea .sTxt", image="img"),
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    options=CrawlerOptions(
        max_concurrency=3,
        max_requests_per_crawl=100,
        max_request_retries=2,
        request_handler_timeout_secs=30,
    ),
    extensions=PaulBassettExtensions(),
)
