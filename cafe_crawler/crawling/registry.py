"""
Brand-keyed crawler registry.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cafe_crawler.crawling.config.models import SiteDefinition
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.strategies import BaseCrawler, create_crawler_from_definition
from cafe_crawler.crawling.types import CrawlRunResult
from cafe_crawler.errors import UnknownBrandError

logger = logging.getLogger(__name__)

CrawlerFactory = Callable[..., BaseCrawler]


@dataclass(frozen=True)
class RegisteredCrawler:
    """
    A site definition paired with an already-built crawler.
    """

    definition: SiteDefinition
    crawler: BaseCrawler


class CrawlerRegistry:
    """
    Maps brand keys to crawler factories.

    Factories are called with the registry's `crawler_kwargs` (session
    factory, test-mode limits, timeouts) each time a crawler is requested.
    """

    def __init__(self, **crawler_kwargs: Any) -> None:
        self.crawler_kwargs = crawler_kwargs
        self._factories: dict[str, CrawlerFactory] = {}
        self._definitions: dict[str, SiteDefinition] = {}

    @staticmethod
    def _normalize(brand: str) -> str:
        return brand.strip().lower()

    def register(self, brand: str, crawler: CrawlerFactory | RegisteredCrawler) -> None:
        key = self._normalize(brand)
        if not key:
            raise ValueError("Brand key must be non-empty.")
        if key in self._factories:
            log_event(logger, logging.WARNING, "crawler_registration_overwritten", brand=key)

        if isinstance(crawler, RegisteredCrawler):
            instance = crawler.crawler
            self._factories[key] = lambda **_: instance
            self._definitions[key] = crawler.definition
        else:
            self._factories[key] = crawler
            self._definitions.pop(key, None)

    def register_definition(self, definition: SiteDefinition) -> None:
        self.register(
            definition.brand,
            lambda **kwargs: create_crawler_from_definition(definition, **kwargs),
        )
        self._definitions[self._normalize(definition.brand)] = definition

    def brands(self) -> list[str]:
        return sorted(self._factories)

    def has(self, brand: str) -> bool:
        return self._normalize(brand) in self._factories

    def definition(self, brand: str) -> SiteDefinition | None:
        return self._definitions.get(self._normalize(brand))

    def get(self, brand: str) -> BaseCrawler:
        key = self._normalize(brand)
        factory = self._factories.get(key)
        if factory is None:
            raise UnknownBrandError(key, self.brands())
        return factory(**self.crawler_kwargs)

    async def run(self, brand: str) -> CrawlRunResult:
        crawler = self.get(brand)
        return await crawler.run()

    async def run_all(self, *, sequential: bool = True) -> dict[str, CrawlRunResult]:
        """
        Run every registered crawler.

        A crawler that raises is logged and left out of the result; the other
        brands still run.
        """

        results: dict[str, CrawlRunResult] = {}
        brands = self.brands()

        if sequential:
            for brand in brands:
                try:
                    results[brand] = await self.run(brand)
                except Exception as exc:
                    log_event(logger, logging.ERROR, "crawler_run_failed", brand=brand, error=str(exc))
            return results

        outcomes = await asyncio.gather(*(self.run(brand) for brand in brands), return_exceptions=True)
        for brand, outcome in zip(brands, outcomes):
            if isinstance(outcome, BaseException):
                log_event(logger, logging.ERROR, "crawler_run_failed", brand=brand, error=str(outcome))
                continue
            results[brand] = outcome
        return results
