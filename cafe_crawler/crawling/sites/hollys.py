"""
Hollys Coffee (mobile site): category links over listings of product
links, one detail page per product. No nutrition facts are published.
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
from cafe_crawler.crawling.nutrition import parse_numeric_value
from cafe_crawler.crawling.sites.common import first_attribute, first_text
from cafe_crawler.crawling.strategies.base import clean_text
from cafe_crawler.crawling.types import CategoryInfo, ExtractionContext, ProductFields

BASE_URL = "https://m.hollys.co.kr"
CATEGORY_LINKS = ".sec_menu > ul > li > a"
NAME_SEPARATOR_PATTERN = re.compile(r"\s*\n\s*")

DETAIL_NAME = "h3"
DETAIL_IMAGE = "p.img img"
DETAIL_DESCRIPTION = ".menuList .description, .menuList p:not(.img)"
DETAIL_PRICE = ".price, .menuPrice"


def split_name(raw: str | None) -> tuple[str | None, str | None]:
    """
    Split a detail heading into its Korean line and its English line.
    """

    if not raw or not raw.strip():
        return None, None
    parts = [part for part in NAME_SEPARATOR_PATTERN.split(raw.strip()) if part]
    if len(parts) >= 2:
        return clean_text(parts[0]), clean_text(parts[1])
    return clean_text(raw), None


class HollysExtensions(SiteExtensions):
    async def extract_categories(self, page: PageHandle, context: ExtractionContext) -> list[CategoryInfo] | None:
        categories: list[CategoryInfo] = []
        for link in await page.query_selector_all(CATEGORY_LINKS):
            name = clean_text(await link.text_content())
            href = await link.get_attribute("href")
            # The same bar also links to store and event pages.
            if not name or not href or not href.startswith("/menu"):
                continue
            categories.append(CategoryInfo(name=name, url=context.build_url(href)))
        return categories

    async def extract_product(self, element: ElementHandle, context: ExtractionContext) -> ProductFields | None:
        href = await first_attribute(element, "a", "href")
        if not href:
            return None
        name = (
            await first_text(element, ".menu_name")
            or await first_attribute(element, "img", "alt")
            or clean_text(await element.text_content())
        )
        if not name:
            return None
        price = await first_text(element, ".menu_price")
        return ProductFields(
            name=name,
            price=parse_numeric_value(price) if price else None,
            image_url=await first_attribute(element, ".menu_img img", "src") or "",
            external_url=context.build_url(href),
        )

    async def extract_detail(
        self,
        page: PageHandle,
        context: ExtractionContext,
        listing: ProductFields,
    ) -> ProductFields | None:
        heading = await page.query_selector(DETAIL_NAME)
        if heading is None:
            return None
        name, name_en = split_name(await heading.text_content())
        price = await first_text(page, DETAIL_PRICE)
        parsed_price = parse_numeric_value(price) if price else None
        return ProductFields(
            name=name or listing.name,
            name_en=name_en,
            description=await first_text(page, DETAIL_DESCRIPTION),
            price=parsed_price if parsed_price is not None else listing.price,
            image_url=await first_attribute(page, DETAIL_IMAGE, "src") or listing.image_url,
            category=listing.category,
        )


HOLLYS = SiteDefinition(
    config=SiteConfig(
        brand="hollys",
        display_name="할리스",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/menu/menuList.do",
    ),
    selectors=SelectorConfig(
        product_containers=(".menu_list li",),
        product_data=ProductDataSelectors(
            name=".menu_name",
            image=".menu_img img",
            price=".menu_price",
            link="a",
        ),
        detail=ProductDataSelectors(
            name=DETAIL_NAME,
            description=DETAIL_DESCRIPTION,
            image=DETAIL_IMAGE,
            price=DETAIL_PRICE,
        ),
        detail_ready=DETAIL_NAME,
        category_links=CATEGORY_LINKS,
    ),
    strategy=CrawlerStrategyType.LIST_DETAIL,
    options=CrawlerOptions(
        max_concurrency=3,
        max_requests_per_crawl=250,
        max_request_retries=3,
        request_handler_timeout_secs=180,
    ),
    extensions=HollysExtensions(),
)
