"""
cafe_crawler/domain/crawl.py

Domain models for crawl orchestration and persistence outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StoreResult:
    """
    Counts reported by a storage backend after persisting one brand's products.
    """

    processed: int = 0
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    removed: int = 0
    reactivated: int = 0
    errors: list[str] = field(default_factory=list)
    location: str | None = None


@dataclass(frozen=True)
class CrawlSummary:
    """
    Summary for one brand crawl run.
    """

    brand: str
    products_scraped: int
    products_stored: int
    failed_requests: int
    status: str
    errors: list[str] = field(default_factory=list)
    output: str | None = None
