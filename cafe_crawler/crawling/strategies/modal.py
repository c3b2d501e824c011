"""
Modal strategy: nutrition facts appear in an overlay opened per item.
"""

from __future__ import annotations

import logging

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.interaction import ModalView
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.nutrition.text import extract_from_text
from cafe_crawler.crawling.strategies.inline_data import InlineDataCrawler
from cafe_crawler.crawling.types import ExtractionContext
from cafe_crawler.domain.products import Nutritions, Product

logger = logging.getLogger(__name__)


class ModalCrawler(InlineDataCrawler):
    """
    Same category and pagination walk as the inline-data strategy, but
    items are handled one at a time because only one modal can be open.
    """

    async def process_listing_page(
        self,
        page: PageHandle,
        context: ExtractionContext,
        order: tuple[int, ...],
        seen: set[str],
    ) -> int:
        containers = self.limit_items(await self.find_containers(page))
        emitted = 0
        for index, element in enumerate(containers):
            product = await self.safe_process_container(page, element, context)
            if product is not None and self.accept(product, seen):
                self.emit(product, (*order, index))
                emitted += 1
        return emitted

    async def process_container(
        self,
        page: PageHandle,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> Product | None:
        fields = await self.extract_product_fields(element, context)
        if fields is None:
            return None
        product_id = await self.extensions.extract_product_id(element, context)
        nutritions = await self.extract_nutrition(element, context)
        if nutritions is None:
            nutritions = await self.read_modal(page, element, context)
        return self.build_product(fields, context, nutritions, product_id=product_id)

    async def read_modal(
        self,
        page: PageHandle,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> Nutritions | None:
        selectors = self.selectors.modal
        if selectors is None:
            return None

        # Any failure here means no nutrition; the listing fields still count.
        try:
            trigger = await element.query_selector(selectors.trigger) or element
            async with ModalView(
                page,
                trigger=trigger,
                selectors=selectors,
                timeout_ms=self.options.modal_timeout_ms,
            ) as modal:
                texts = [
                    *await modal.texts(selectors.serving_info),
                    *await modal.texts(selectors.nutrition_items),
                ]
        except Exception as exc:
            log_event(
                logger,
                logging.DEBUG,
                "modal_open_failed",
                brand=self.brand,
                page_url=context.page_url,
                error=str(exc),
            )
            return None
        return extract_from_text("\n".join(texts))
