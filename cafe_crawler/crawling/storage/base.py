"""
Storage layer interfaces for crawled products.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from cafe_crawler.domain.crawl import StoreResult
from cafe_crawler.domain.products import Product


class ProductStorage(ABC):
    """
    Storage abstraction for one brand's product snapshot.
    """

    @abstractmethod
    def store(self, *, brand: str, products: Sequence[Product]) -> StoreResult:
        """
        Persist products and return reconciliation counts.
        """
