"""
Shared crawling runtime data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cafe_crawler.domain.products import Product


def build_absolute_url(base_url: str, path: str | None) -> str:
    """
    Resolve a site-relative path against the site base URL.
    """

    if not path:
        return ""
    path = path.strip()
    if path.startswith(("http://", "https://")):
        return path
    if path.startswith("//"):
        return f"https:{path}"
    base = base_url.rstrip("/")
    if path.startswith("/"):
        return f"{base}{path}"
    return f"{base}/{path}"


@dataclass(frozen=True)
class ExtractionContext:
    """
    Read-only inputs handed to extractors for one page.
    """

    base_url: str
    page_url: str
    category_name: str | None = None
    brand: str = ""

    def build_url(self, path: str | None) -> str:
        return build_absolute_url(self.base_url, path)


@dataclass(frozen=True)
class CategoryInfo:
    name: str
    url: str


@dataclass(frozen=True)
class ProductFields:
    """
    Raw product fields pulled from a listing or detail page, before
    identifiers and defaults are applied.
    """

    name: str
    name_en: str | None = None
    description: str | None = None
    price: float | None = None
    image_url: str = ""
    external_id: str | None = None
    external_url: str | None = None
    category: str | None = None


class RequestLabel(str, Enum):
    MAIN = "MAIN"
    CATEGORY = "CATEGORY"
    DETAIL = "DETAIL"


@dataclass(frozen=True)
class CrawlRequest:
    """
    One unit of work for the crawl runner.

    `order` places the request's products in discovery order: a child
    request extends its parent's order with its own index.
    """

    url: str
    label: RequestLabel = RequestLabel.MAIN
    user_data: dict[str, Any] = field(default_factory=dict)
    order: tuple[int, ...] = ()

    @property
    def unique_key(self) -> str:
        return f"{self.label.value}:{self.url}"

    def child(self, *, url: str, label: RequestLabel, index: int, **user_data: Any) -> "CrawlRequest":
        return CrawlRequest(url=url, label=label, user_data=user_data, order=(*self.order, index))


@dataclass(frozen=True)
class CrawlRunResult:
    """
    Outcome for one crawler execution.
    """

    brand: str
    products: list[Product]
    requests_handled: int
    requests_failed: int
    errors: list[str] = field(default_factory=list)
