"""
Paik's Coffee: category tabs over inline listings with an ingredient table
per item. Serving sizes are published in ounces.
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
from cafe_crawler.crawling.nutrition import OUNCE_TO_ML, NutritionExtractionMethod, NutritionExtractorOptions, build_from_pairs
from cafe_crawler.crawling.sites.common import all_texts, first_text
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import CategoryInfo, ExtractionContext
from cafe_crawler.domain.products import NutritionBuilder, Nutritions

BASE_URL = "https://paikdabang.com"
CATEGORY_LINKS = "ul.page_tab a"
SKIPPED_CATEGORIES = frozenset({"신메뉴"})
SERVING_SIZE_PATTERN = re.compile(r"(\d+)\s*oz", re.IGNORECASE)


def ounces_to_ml(ounces: float) -> float:
    return float(round(ounces * OUNCE_TO_ML))


class PaikExtensions(SiteExtensions):
    async def extract_categories(self, page: PageHandle, context: ExtractionContext) -> list[CategoryInfo] | None:
        categories: list[CategoryInfo] = []
        for link in await page.query_selector_all(CATEGORY_LINKS):
            name = clean_text(await link.text_content())
            href = await link.get_attribute("href")
            # "New" lists items that also appear under their own category.
            if not name or not href or name in SKIPPED_CATEGORIES:
                continue
            categories.append(CategoryInfo(name=name, url=context.build_url(href)))
        return categories

    async def extract_nutrition(self, element: ElementHandle, context: ExtractionContext) -> Nutritions | None:
        box = await element.query_selector(".ingredient_table_box")
        if box is None:
            return None

        builder = NutritionBuilder()
        basis = await first_text(box, ".menu_ingredient_basis")
        serving_match = SERVING_SIZE_PATTERN.search(basis or "")
        if serving_match:
            builder.set("serving_size", ounces_to_ml(float(serving_match.group(1))), "ml")

        pairs: list[tuple[str, str]] = []
        for item in await box.query_selector_all(".ingredient_table li"):
            cells = await all_texts(item, "div")
            if len(cells) == 2:
                pairs.append((cells[0], cells[1]))
        builder.merge(build_from_pairs(pairs))
        return builder.build()


PAIK = SiteDefinition(
    config=SiteConfig(
        brand="paik",
        display_name="빽다방",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/menu/menu_new/",
    ),
    selectors=SelectorConfig(
        product_containers=(".menu_list > ul > li",),
        product_data=ProductDataSelectors(name="p.menu_tit", description="p.txt", image="img"),
        category_links=CATEGORY_LINKS,
    ),
    strategy=CrawlerStrategyType.INLINE_DATA,
    options=CrawlerOptions(
        max_concurrency=2,
        max_requests_per_crawl=30,
        request_handler_timeout_secs=45,
    ),
    nutrition=NutritionExtractorOptions(method=NutritionExtractionMethod.CUSTOM),
    extensions=PaikExtensions(),
)
