"""
Starbucks Korea: drink listing with one detail page per product code.
"""

from __future__ import annotations

import re

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
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions, parse_numeric_value
from cafe_crawler.crawling.sites.common import first_attribute, first_text
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import ExtractionContext, ProductFields
from cafe_crawler.domain.products import NutritionBuilder, Nutritions

PRODUCT_CODE_PATTERN = re.compile(r"\[(\d+)\]")
PRODUCT_CODE_PARAM_PATTERN = re.compile(r"product_cd=(\d+)")
SERVING_SIZE_PATTERN = re.compile(r"(\d+)\s*ml", re.IGNORECASE)

DETAIL_NAME = ".myAssignZone > h4"
DETAIL_NAME_EN = ".myAssignZone > h4 > span"

# (field, selector under .product_info_content, unit)
NUTRITION_ITEMS: tuple[tuple[str, str, str], ...] = (
    ("calories", "li.kcal dd", "kcal"),
    ("carbohydrates", "li.chabo dd", "g"),
    ("sugar", "li.sugars dd", "g"),
    ("protein", "li.protein dd", "g"),
    ("fat", "li.fat dd", "g"),
    ("saturated_fat", "li.sat_FAT dd", "g"),
    ("trans_fat", "li.trans_FAT dd", "g"),
    ("natrium", "li.sodium dd", "mg"),
    ("cholesterol", "li.cholesterol dd", "mg"),
    ("caffeine", "li.caffeine dd", "mg"),
)


def product_code_from(*candidates: str | None) -> str | None:
    """
    Find the numeric product code in a link's href, onclick or markup,
    written either as `[9200000002487]` or as a `product_cd=` parameter.
    """

    for candidate in candidates:
        if not candidate:
            continue
        match = PRODUCT_CODE_PATTERN.search(candidate) or PRODUCT_CODE_PARAM_PATTERN.search(candidate)
        if match:
            return match.group(1)
    return None


class StarbucksExtensions(SiteExtensions):
    async def extract_product_id(self, element: ElementHandle, context: ExtractionContext) -> str | None:
        return product_code_from(
            await element.get_attribute("href"),
            await element.get_attribute("onclick"),
            await element.inner_html(),
        )

    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        product_code = await self.extract_product_id(element, context)
        if product_code is None:
            return None
        name = (
            await first_attribute(element, "img", "alt")
            or clean_text(await element.text_content())
            or product_code
        )
        return ProductFields(
            name=name,
            image_url=await first_attribute(element, "img", "src") or "",
            external_id=product_code,
        )

    async def extract_detail(
        self,
        page: PageHandle,
        context: ExtractionContext,
        listing: ProductFields,
    ) -> ProductFields | None:
        full_name = await first_text(page, DETAIL_NAME)
        if not full_name:
            return None
        name_en = await first_text(page, DETAIL_NAME_EN)
        name = full_name
        if name_en and name.endswith(name_en):
            name = name[: -len(name_en)].strip() or full_name

        return ProductFields(
            name=name,
            name_en=name_en,
            description=await first_text(page, ".myAssignZone p.t1"),
            image_url=await first_attribute(page, ".elevatezoom-gallery > img:first-child", "src")
            or listing.image_url,
            external_id=listing.external_id,
            category=await first_text(page, ".cate") or listing.category,
        )

    async def extract_nutrition(self, element: ElementHandle, context: ExtractionContext) -> Nutritions | None:
        info = await element.query_selector("#product_info01")
        if info is None:
            return None

        builder = NutritionBuilder()
        serving_match = SERVING_SIZE_PATTERN.search(await info.text_content() or "")
        if serving_match:
            builder.set("serving_size", float(serving_match.group(1)), "ml")

        for field_name, selector, unit in NUTRITION_ITEMS:
            raw = await first_text(element, f".product_info_content {selector}")
            builder.set(field_name, parse_numeric_value(raw), unit)
        return builder.build()


STARBUCKS = SiteDefinition(
    config=SiteConfig(
        brand="starbucks",
        display_name="스타벅스",
        base_url="https://www.starbucks.co.kr",
        start_url="https://www.starbucks.co.kr/menu/drink_list.do",
        product_url_template="https://www.starbucks.co.kr/menu/drink_view.do?product_cd=",
    ),
    selectors=SelectorConfig(
        product_containers=(
            "a.goDrinkView",
            'a[href*="drink_view.do"]',
            'a[href*="product_cd"]',
        ),
        product_data=ProductDataSelectors(name="img"),
        detail=ProductDataSelectors(
            name=DETAIL_NAME,
            name_en=DETAIL_NAME_EN,
            description=".myAssignZone p.t1",
            image=".elevatezoom-gallery > img:first-child",
        ),
        detail_ready=DETAIL_NAME,
    ),
    strategy=CrawlerStrategyType.LIST_DETAIL,
    options=CrawlerOptions(
        max_concurrency=10,
        max_requests_per_crawl=300,
        max_request_retries=1,
        request_handler_timeout_secs=25,
        load_timeout_ms=5_000,
    ),
    nutrition=NutritionExtractorOptions(method=NutritionExtractionMethod.CUSTOM),
    extensions=StarbucksExtensions(),
)
