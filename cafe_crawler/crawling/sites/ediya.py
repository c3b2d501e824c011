"""
Ediya Coffee: one listing filtered by category checkboxes, expanded with
a "more" button; nutrition sits in a hidden panel inside each item.
"""

from __future__ import annotations

import re

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
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
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions, extract_from_dl
from cafe_crawler.crawling.sites.common import first_attribute, first_text
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import CategoryInfo, ExtractionContext, ProductFields
from cafe_crawler.domain.products import NutritionBuilder, Nutritions

START_URL = "https://ediya.com/contents/drink.html"

GIFT_SUFFIX_PATTERN = re.compile(r"\s*선물하기\s*$")
SERVING_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*ml", re.IGNORECASE)


def category_url(value: str) -> str:
    return f"{START_URL}?chked_val={value},&skeyword=#blockcate"


def strip_gift_suffix(name: str) -> str:
    return GIFT_SUFFIX_PATTERN.sub("", name).strip()


class EdiyaExtensions(SiteExtensions):
    async def extract_categories(self, page: PageHandle, context: ExtractionContext) -> list[CategoryInfo] | None:
        categories: list[CategoryInfo] = []
        for label in await page.query_selector_all('label:has(input[name="chkList"])'):
            value = await first_attribute(label, 'input[name="chkList"]', "value")
            if not value:
                continue
            name = clean_text(await label.text_content())
            categories.append(CategoryInfo(name=name or value, url=category_url(value)))
        return categories

    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        raw_name = await first_text(element, ".menu_tt > a > span")
        name = strip_gift_suffix(raw_name) if raw_name else ""
        if not name:
            return None
        return ProductFields(
            name=name,
            name_en=await first_text(element, "div.detail_con > h2 > span"),
            description=await first_text(element, ".detail_txt"),
            image_url=await first_attribute(element, ":scope > a > img", "src") or "",
        )

    async def extract_nutrition(self, element: ElementHandle, context: ExtractionContext) -> Nutritions | None:
        panel = await element.query_selector(".pro_comp")
        if panel is None:
            return None

        builder = NutritionBuilder()
        size_text = await first_text(panel, ".pro_size")
        serving_match = SERVING_SIZE_PATTERN.search(size_text or "")
        if serving_match:
            builder.set("serving_size", float(serving_match.group(1)), "ml")
        builder.merge(await extract_from_dl(panel, dl_selector=".pro_nutri dl"))
        return builder.build()


EDIYA = SiteDefinition(
    config=SiteConfig(
        brand="ediya",
        display_name="이디야",
        base_url="https://ediya.com",
        start_url=START_URL,
    ),
    selectors=SelectorConfig(
        product_containers=("#menu_ul > li",),
        product_data=ProductDataSelectors(
            name=".menu_tt > a > span",
            name_en="div.detail_con > h2 > span",
            description=".detail_txt",
            image=":scope > a > img",
        ),
        pagination=PaginationSelectors(load_more='a:has-text("더보기")'),
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    pagination=PaginationType.LOAD_MORE,
    options=CrawlerOptions(
        max_concurrency=2,
        max_requests_per_crawl=50,
        request_handler_timeout_secs=120,
    ),
    nutrition=NutritionExtractorOptions(method=NutritionExtractionMethod.CUSTOM),
    extensions=EdiyaExtensions(),
)
