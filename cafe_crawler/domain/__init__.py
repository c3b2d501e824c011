"""
Domain models shared by crawlers, storage backends and the CLI.
"""

from cafe_crawler.domain.crawl import CrawlSummary, StoreResult
from cafe_crawler.domain.products import (
    NUTRITION_FIELDS,
    NutritionBuilder,
    Nutritions,
    Product,
)

__all__ = [
    "NUTRITION_FIELDS",
    "CrawlSummary",
    "NutritionBuilder",
    "Nutritions",
    "Product",
    "StoreResult",
]
