"""
Traversal strategies and the definition-to-crawler factory.
"""

from __future__ import annotations

from typing import Any

from cafe_crawler.crawling.config.models import CrawlerStrategyType, SiteDefinition
from cafe_crawler.crawling.strategies.base import BaseCrawler
from cafe_crawler.crawling.strategies.inline_data import InlineDataCrawler
from cafe_crawler.crawling.strategies.list_detail import ListDetailCrawler
from cafe_crawler.crawling.strategies.modal import ModalCrawler

STRATEGY_CLASSES: dict[CrawlerStrategyType, type[BaseCrawler]] = {
    CrawlerStrategyType.INLINE_DATA: InlineDataCrawler,
    CrawlerStrategyType.LIST_DETAIL: ListDetailCrawler,
    CrawlerStrategyType.MODAL: ModalCrawler,
}


def create_crawler_from_definition(definition: SiteDefinition, **kwargs: Any) -> BaseCrawler:
    """
    Instantiate the strategy class named by `definition.strategy`.
    """

    try:
        strategy = CrawlerStrategyType(definition.strategy)
    except ValueError:
        allowed = ", ".join(item.value for item in CrawlerStrategyType)
        raise ValueError(
            f"Unknown strategy='{definition.strategy}' for brand='{definition.brand}'. "
            f"Allowed strategies: {allowed}."
        ) from None
    return STRATEGY_CLASSES[strategy](definition, **kwargs)


__all__ = [
    "STRATEGY_CLASSES",
    "BaseCrawler",
    "InlineDataCrawler",
    "ListDetailCrawler",
    "ModalCrawler",
    "create_crawler_from_definition",
]
