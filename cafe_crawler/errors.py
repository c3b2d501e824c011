"""
Crawler exception taxonomy.
"""

from __future__ import annotations


class CrawlerError(Exception):
    """Base exception for crawler failures."""


class BrowserError(CrawlerError):
    """Raised when the browser surface fails to complete an operation."""


class BrowserTimeoutError(BrowserError):
    """Raised when a navigation, wait or selector lookup exceeds its timeout."""


class NavigationError(BrowserError):
    """Raised when a page cannot be loaded."""


class RequestBudgetExhausted(CrawlerError):
    """Raised when a crawl has used every request it is allowed."""


class UnknownBrandError(CrawlerError, KeyError):
    """Raised when no crawler is registered for a brand."""

    def __init__(self, brand: str, available: list[str] | None = None) -> None:
        self.brand = brand
        self.available = list(available or [])
        super().__init__(brand)

    def __str__(self) -> str:
        allowed = ", ".join(self.available) or "none"
        return f"No crawler registered for brand='{self.brand}'. Available brands: {allowed}."


class StorageError(CrawlerError):
    """Base exception for product persistence failures."""


class StorageConfigurationError(StorageError):
    """Raised when a storage backend is missing required configuration."""


class UploadError(StorageError):
    """Raised when the upload endpoint rejects or fails a request."""
