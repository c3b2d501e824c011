"""
Site definition models and option resolution.
"""

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
    SiteExtensions,
)
from cafe_crawler.crawling.config.options import resolve_crawler_options

__all__ = [
    "CrawlerOptions",
    "CrawlerStrategyType",
    "ModalSelectors",
    "PaginationSelectors",
    "PaginationType",
    "ProductDataSelectors",
    "SelectorConfig",
    "SiteConfig",
    "SiteDefinition",
    "SiteExtensions",
    "resolve_crawler_options",
]
