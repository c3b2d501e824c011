"""
Mega MGC Coffee: a single paginated menu whose nutrition facts open in a
modal per item.
"""

from __future__ import annotations

from cafe_crawler.crawling.config.models import (
    CrawlerOptions,
    CrawlerStrategyType,
    ModalSelectors,
    PaginationSelectors,
    PaginationType,
    ProductDataSelectors,
    SelectorConfig,
    SiteConfig,
    SiteDefinition,
)

MEGA = SiteDefinition(
    config=SiteConfig(
        brand="mega",
        display_name="메가커피",
        base_url="https://www.mega-mgccoffee.com",
        start_url="https://www.mega-mgccoffee.com/menu/",
        default_category_name="All Menu",
    ),
    selectors=SelectorConfig(
        product_containers=("ul#menu_list > li",),
        product_data=ProductDataSelectors(
            name=".cont_text_title",
            name_en=".cont_text_info div.text1",
            description=".cont_text_info div.text2",
            image="img",
        ),
        pagination=PaginationSelectors(next_button=".board_page_next"),
        modal=ModalSelectors(
            trigger="img",
            container='.inner_modal[style*="display: block"]',
            close=".inner_modal .close",
            serving_info=".cont_text .cont_text_inner",
            nutrition_items=".cont_list ul li",
        ),
    ),
    strategy=CrawlerStrategyType.MODAL,
    pagination=PaginationType.NEXT_BUTTON,
    options=CrawlerOptions(
        max_concurrency=1,
        max_requests_per_crawl=10,
        max_request_retries=2,
        request_handler_timeout_secs=300,
    ),
)
