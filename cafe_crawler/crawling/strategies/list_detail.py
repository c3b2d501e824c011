"""
List-detail strategy: listings link to per-product detail pages.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.config.models import PaginationType
from cafe_crawler.crawling.interaction import DetailView
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.nutrition.parsing import parse_numeric_value
from cafe_crawler.crawling.strategies.base import BaseCrawler
from cafe_crawler.crawling.types import (
    CategoryInfo,
    CrawlRequest,
    ExtractionContext,
    ProductFields,
    RequestLabel,
)
from cafe_crawler.domain.products import Product
from cafe_crawler.errors import RequestBudgetExhausted

logger = logging.getLogger(__name__)


def _same_page(left: str, right: str) -> bool:
    return left.rstrip("/") == right.rstrip("/")


class ListDetailCrawler(BaseCrawler):
    """
    Reads basic fields on the listing, then description and nutrition on
    each product's detail page.

    Detail pages are either queued as DETAIL requests (URL mode) or opened
    one at a time by clicking `selectors.detail_trigger` (click mode).
    """

    async def handle_main(self, page: PageHandle, request: CrawlRequest) -> None:
        context = self.context_for(page, None)
        categories = await self.extract_categories(page, context)
        current = next((category for category in categories if _same_page(category.url, page.url)), None)
        start = current or CategoryInfo(name=self.config.default_category_name, url=page.url)

        others = [category for category in categories if not _same_page(category.url, page.url)]
        others = self.limit_categories([start, *others])[1:]
        log_event(
            logger,
            logging.INFO,
            "categories_discovered",
            brand=self.brand,
            current=start.name,
            queued=[category.name for category in others],
        )

        for index, category in enumerate(others, start=1):
            self.enqueue(
                CrawlRequest(
                    url=category.url,
                    label=RequestLabel.CATEGORY,
                    user_data={"category": category.name},
                    order=(index,),
                )
            )

        await self.process_category_page(page, start.name, order=(0,))

    async def handle_category(self, page: PageHandle, request: CrawlRequest) -> None:
        await self.process_category_page(page, request.user_data.get("category"), order=request.order)

    async def process_category_page(self, page: PageHandle, category_name: str | None, *, order: tuple[int, ...]) -> None:
        if self.definition.pagination is PaginationType.LOAD_MORE:
            await self.click_load_more(page)

        context = self.context_for(page, category_name)
        if self.selectors.detail_trigger:
            processed = await self.process_by_click(page, context, order)
        else:
            processed = await self.enqueue_details(page, context, order)
        log_event(
            logger,
            logging.INFO,
            "category_processed",
            brand=self.brand,
            category=category_name,
            products=processed,
        )

    async def listing_fields(
        self,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> tuple[ProductFields, str | None] | None:
        fields = await self.extract_product_fields(element, context)
        if fields is None:
            return None
        product_id = await self.extensions.extract_product_id(element, context)
        external_id = self.external_id_for(fields, context, product_id)
        category = fields.category or context.category_name
        return replace(fields, external_id=external_id, category=category), product_id

    def detail_url(self, fields: ProductFields, product_id: str | None) -> str | None:
        template = self.config.product_url_template
        if template and product_id:
            if "{product_id}" in template:
                return template.format(product_id=product_id)
            return f"{template}{product_id}"
        return fields.external_url

    async def enqueue_details(self, page: PageHandle, context: ExtractionContext, order: tuple[int, ...]) -> int:
        containers = self.limit_items(await self.find_containers(page))
        seen: set[str] = set()
        queued = 0
        for index, element in enumerate(containers):
            try:
                listing = await self.listing_fields(element, context)
                if listing is None:
                    continue
                fields, product_id = listing
                if fields.external_id in seen:
                    continue
                seen.add(fields.external_id)  # type: ignore[arg-type]

                url = self.detail_url(fields, product_id)
                if not url:
                    nutritions = await self.extract_nutrition(element, context)
                    self.emit(self.build_product(fields, context, nutritions), (*order, index))
                    continue
                added = self.enqueue(
                    CrawlRequest(
                        url=url,
                        label=RequestLabel.DETAIL,
                        user_data={"listing": fields, "product_id": product_id},
                        order=(*order, index),
                    )
                )
                queued += int(added)
            except Exception as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "product_extraction_failed",
                    brand=self.brand,
                    category=context.category_name,
                    page_url=context.page_url,
                    error=str(exc),
                )
        return queued

    async def handle_detail(self, page: PageHandle, request: CrawlRequest) -> None:
        listing: ProductFields = request.user_data["listing"]
        if self.selectors.detail_ready:
            await self.wait_ready(page, selector=self.selectors.detail_ready)
        context = self.context_for(page, listing.category)
        product = await self.product_from_detail(page, context, listing)
        self.emit(product, request.order)

    async def product_from_detail(
        self,
        page: PageHandle,
        context: ExtractionContext,
        listing: ProductFields,
    ) -> Product:
        detail = await self.extensions.extract_detail(page, context, listing)
        if detail is None:
            detail = await self.read_detail_fields(page, context, listing)
        root = await page.query_selector("body")
        nutritions = await self.extract_nutrition(root, context)
        return self.build_product(
            replace(detail, external_id=listing.external_id, external_url=page.url),
            context,
            nutritions,
        )

    async def read_detail_fields(
        self,
        page: PageHandle,
        context: ExtractionContext,
        listing: ProductFields,
    ) -> ProductFields:
        selectors = self.selectors.detail
        if selectors is None:
            return listing
        price_text = await self.text_of(page, selectors.price)
        price = parse_numeric_value(price_text) if price_text else None
        return replace(
            listing,
            name_en=await self.text_of(page, selectors.name_en) or listing.name_en,
            description=await self.text_of(page, selectors.description) or listing.description,
            price=price if price is not None else listing.price,
            image_url=await self.attribute_of(page, selectors.image, "src", "data-src") or listing.image_url,
        )

    async def process_by_click(self, page: PageHandle, context: ExtractionContext, order: tuple[int, ...]) -> int:
        """
        Open each item's detail view in turn on the same page.

        Containers are re-located on every iteration because returning to
        the listing replaces the document.
        """

        listing_url = page.url
        total = len(self.limit_items(await self.find_containers(page)))
        seen: set[str] = set()
        emitted = 0

        for index in range(total):
            try:
                containers = await self.find_containers(page)
                if index >= len(containers):
                    break
                element = containers[index]
                listing = await self.listing_fields(element, context)
                if listing is None:
                    continue
                fields, _ = listing
                if fields.external_id in seen:
                    continue
                seen.add(fields.external_id)  # type: ignore[arg-type]

                trigger = await element.query_selector(self.selectors.detail_trigger)  # type: ignore[arg-type]
                if trigger is None:
                    nutritions = await self.extract_nutrition(element, context)
                    self.emit(self.build_product(fields, context, nutritions), (*order, index))
                    emitted += 1
                    continue

                self.budget.consume()
                async with DetailView(
                    page,
                    trigger=trigger,
                    return_url=listing_url,
                    wait_policy=self.wait_policy,
                    ready_selector=self.selectors.detail_ready,
                    navigation_timeout_ms=self.options.navigation_timeout_ms,
                ):
                    product = await self.product_from_detail(
                        page,
                        self.context_for(page, context.category_name),
                        fields,
                    )
                self.emit(product, (*order, index))
                emitted += 1
            except RequestBudgetExhausted:
                log_event(logger, logging.INFO, "request_budget_exhausted", brand=self.brand, page_url=listing_url)
                break
            except Exception as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "product_extraction_failed",
                    brand=self.brand,
                    category=context.category_name,
                    page_url=listing_url,
                    index=index,
                    error=str(exc),
                )
        return emitted
