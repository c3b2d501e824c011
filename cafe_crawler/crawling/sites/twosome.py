"""
Twosome Place: a mobile listing whose items carry a menu code; each code
opens a detail page with a dt/dd nutrition list.

Category tabs switch the listing by script and expose no URLs, so only
the default listing is walked.
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
from cafe_crawler.crawling.nutrition import NutritionExtractionMethod, NutritionExtractorOptions
from cafe_crawler.crawling.types import ExtractionContext

BASE_URL = "https://mo.twosome.co.kr"
MENU_CODE_PATTERN = re.compile(r"menuCd=([^&]+)")

DETAIL_NAME = ".menu-detail-info-title h1"


def menu_code_from(value: str | None) -> str | None:
    if not value:
        return None
    match = MENU_CODE_PATTERN.search(value)
    return match.group(1) if match else None


class TwosomeExtensions(SiteExtensions):
    async def extract_product_id(self, element: ElementHandle, context: ExtractionContext) -> str | None:
        link = await element.query_selector("a")
        if link is None:
            return None
        return menu_code_from(await link.get_attribute("data")) or menu_code_from(await link.get_attribute("href"))


TWOSOME = SiteDefinition(
    config=SiteConfig(
        brand="twosome",
        display_name="투썸플레이스",
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/mn/menuInfoList.do",
        product_url_template=f"{BASE_URL}/mn/menuInfoDetail.do?menuCd=",
    ),
    selectors=SelectorConfig(
        product_containers=("ul.ui-goods-list-default > li",),
        product_data=ProductDataSelectors(name=".menu-title", image=".thum-img > img"),
        detail=ProductDataSelectors(
            name=DETAIL_NAME,
            description="dl.menu-detail-info-title > dd",
            image=".menu-detail-img img",
        ),
        detail_ready=DETAIL_NAME,
    ),
    strategy=CrawlerStrategyType.LIST_DETAIL,
    options=CrawlerOptions(
        max_concurrency=1,
        max_requests_per_crawl=150,
        max_request_retries=2,
        request_handler_timeout_secs=180,
    ),
    nutrition=NutritionExtractorOptions(
        method=NutritionExtractionMethod.DL,
        dl_selector=".menu-detail-dl",
    ),
    extensions=TwosomeExtensions(),
)
