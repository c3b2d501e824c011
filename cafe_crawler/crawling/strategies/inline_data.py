"""
Inline-data strategy: every field is visible on the listing page.
"""

from __future__ import annotations

import asyncio
import logging

from cafe_crawler.crawling.browser.base import PageHandle
from cafe_crawler.crawling.config.models import PaginationType
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.strategies.base import BaseCrawler
from cafe_crawler.crawling.types import CrawlRequest, ExtractionContext, RequestLabel

logger = logging.getLogger(__name__)


class InlineDataCrawler(BaseCrawler):
    """
    Walks categories in discovery order and reads products straight from
    the listing containers, following the configured pagination.
    """

    async def handle_main(self, page: PageHandle, request: CrawlRequest) -> None:
        """
        Queue one CATEGORY request per discovered category, so each gets its
        own handler timeout and retries. A start page without categories is
        read as a single listing.
        """

        context = self.context_for(page, None)
        categories = self.limit_categories(await self.extract_categories(page, context))
        if not categories:
            log_event(
                logger,
                logging.INFO,
                "categories_discovered",
                brand=self.brand,
                categories=[self.config.default_category_name],
            )
            await self.process_category(page, self.config.default_category_name, order=(*request.order, 0))
            return

        log_event(
            logger,
            logging.INFO,
            "categories_discovered",
            brand=self.brand,
            categories=[category.name for category in categories],
        )
        for index, category in enumerate(categories):
            self.enqueue(
                request.child(
                    url=category.url,
                    label=RequestLabel.CATEGORY,
                    index=index,
                    category=category.name,
                )
            )

    async def handle_category(self, page: PageHandle, request: CrawlRequest) -> None:
        await self.process_category(page, request.user_data.get("category"), order=request.order)

    async def process_category(self, page: PageHandle, category_name: str | None, *, order: tuple[int, ...]) -> None:
        seen: set[str] = set()
        pagination = self.definition.pagination
        if pagination is PaginationType.LOAD_MORE:
            await self.click_load_more(page)

        emitted = await self.process_listing_page(page, self.context_for(page, category_name), (*order, 0), seen)
        page_index = 1

        if pagination is PaginationType.PAGE_NUMBERS:
            urls = await self.page_number_urls(page, self.context_for(page, category_name))
            for url in urls[: max(0, self.options.max_pagination_pages - 1)]:
                await self.navigate(page, url)
                emitted += await self.process_listing_page(
                    page,
                    self.context_for(page, category_name),
                    (*order, page_index),
                    seen,
                )
                page_index += 1
        elif pagination is PaginationType.NEXT_BUTTON:
            while page_index < self.options.max_pagination_pages and await self.go_to_next_page(page):
                emitted += await self.process_listing_page(
                    page,
                    self.context_for(page, category_name),
                    (*order, page_index),
                    seen,
                )
                page_index += 1

        log_event(
            logger,
            logging.INFO,
            "category_processed",
            brand=self.brand,
            category=category_name,
            pages=page_index,
            products=emitted,
        )

    async def process_listing_page(
        self,
        page: PageHandle,
        context: ExtractionContext,
        order: tuple[int, ...],
        seen: set[str],
    ) -> int:
        containers = self.limit_items(await self.find_containers(page))
        log_event(
            logger,
            logging.DEBUG,
            "containers_found",
            brand=self.brand,
            page_url=page.url,
            count=len(containers),
        )

        emitted = 0
        batch_size = max(1, self.options.item_batch_size)
        for start in range(0, len(containers), batch_size):
            batch = containers[start : start + batch_size]
            products = await asyncio.gather(
                *(self.safe_process_container(page, element, context) for element in batch)
            )
            for offset, product in enumerate(products):
                if product is not None and self.accept(product, seen):
                    self.emit(product, (*order, start + offset))
                    emitted += 1
        return emitted
