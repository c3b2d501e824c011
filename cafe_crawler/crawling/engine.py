"""
Menu crawl engine.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.registry import CrawlerRegistry
from cafe_crawler.crawling.storage import ProductStorage
from cafe_crawler.domain.crawl import CrawlSummary, StoreResult
from cafe_crawler.errors import UnknownBrandError

logger = logging.getLogger(__name__)


def summary_status(*, products: int, failures: int) -> str:
    if products == 0:
        return "failed"
    if failures > 0:
        return "partial_success"
    return "success"


class CrawlEngine:
    """
    Runs registered crawlers and hands each brand's products to storage.
    """

    def __init__(
        self,
        *,
        registry: CrawlerRegistry,
        storage: ProductStorage | None = None,
    ) -> None:
        self._registry = registry
        self._storage = storage

    async def run(
        self,
        *,
        brands: Sequence[str] | None = None,
        parallel: bool = False,
    ) -> list[CrawlSummary]:
        selected = self._select_brands(brands)
        if not selected:
            raise ValueError("No registered crawlers matched the run criteria.")

        if parallel:
            return list(await asyncio.gather(*(self.run_brand(brand) for brand in selected)))

        summaries: list[CrawlSummary] = []
        for brand in selected:
            summaries.append(await self.run_brand(brand))
        return summaries

    async def run_brand(self, brand: str) -> CrawlSummary:
        try:
            result = await self._registry.run(brand)
            stored = StoreResult()
            if self._storage is not None:
                stored = await asyncio.to_thread(self._storage.store, brand=brand, products=result.products)

            errors = [*result.errors, *stored.errors]
            summary = CrawlSummary(
                brand=brand,
                products_scraped=len(result.products),
                products_stored=stored.processed,
                failed_requests=result.requests_failed,
                status=summary_status(products=len(result.products), failures=result.requests_failed),
                errors=errors,
                output=stored.location,
            )
            log_event(
                logger,
                logging.INFO,
                "brand_crawl_completed",
                brand=brand,
                products_scraped=summary.products_scraped,
                products_stored=summary.products_stored,
                failed_requests=summary.failed_requests,
                status=summary.status,
            )
            return summary
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            log_event(logger, logging.ERROR, "brand_crawl_failed", brand=brand, error=message)
            return CrawlSummary(
                brand=brand,
                products_scraped=0,
                products_stored=0,
                failed_requests=1,
                status="failed",
                errors=[message],
            )

    def _select_brands(self, brands: Sequence[str] | None) -> list[str]:
        if not brands:
            return self._registry.brands()

        selected: list[str] = []
        for item in brands:
            brand = item.strip().lower()
            if not brand or brand in selected:
                continue
            if not self._registry.has(brand):
                raise UnknownBrandError(brand, self._registry.brands())
            selected.append(brand)
        return selected
