"""
Declarative site definition models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.nutrition.extractor import NutritionExtractorOptions
from cafe_crawler.crawling.types import CategoryInfo, ExtractionContext, ProductFields
from cafe_crawler.domain.products import Nutritions

DEFAULT_LAUNCH_ARGS: tuple[str, ...] = ("--no-sandbox", "--disable-setuid-sandbox")


class CrawlerStrategyType(str, Enum):
    INLINE_DATA = "inline-data"
    LIST_DETAIL = "list-detail"
    MODAL = "modal"


class PaginationType(str, Enum):
    NONE = "none"
    LOAD_MORE = "load-more"
    PAGE_NUMBERS = "page-numbers"
    NEXT_BUTTON = "next-button"


@dataclass(frozen=True)
class SiteConfig:
    """
    Where a site lives and where crawling starts.
    """

    brand: str
    base_url: str
    start_url: str
    category_urls: tuple[str, ...] = ()
    product_url_template: str | None = None
    display_name: str | None = None
    default_category_name: str = "All Items"


@dataclass(frozen=True)
class ProductDataSelectors:
    name: str
    name_en: str | None = None
    description: str | None = None
    image: str | None = None
    price: str | None = None
    link: str | None = None


@dataclass(frozen=True)
class PaginationSelectors:
    load_more: str | None = None
    next_button: str | None = None
    page_links: str | None = None


@dataclass(frozen=True)
class ModalSelectors:
    trigger: str
    container: str
    close: str | None = None
    serving_info: str | None = None
    nutrition_items: str | None = None


@dataclass(frozen=True)
class SelectorConfig:
    """
    CSS selectors for one site.

    `product_containers` are alternatives: the first selector that matches
    anything on a page is used.
    """

    product_containers: tuple[str, ...]
    product_data: ProductDataSelectors
    detail: ProductDataSelectors | None = None
    detail_trigger: str | None = None
    detail_ready: str | None = None
    category_links: str | None = None
    pagination: PaginationSelectors = field(default_factory=PaginationSelectors)
    modal: ModalSelectors | None = None


@dataclass(frozen=True)
class CrawlerOptions:
    """
    Runtime limits for one crawler.
    """

    max_concurrency: int = 3
    max_requests_per_crawl: int = 100
    max_request_retries: int = 2
    request_handler_timeout_secs: float = 60
    headless: bool = True
    launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    navigation_timeout_ms: int = 30_000
    load_timeout_ms: int = 15_000
    item_batch_size: int = 5
    max_pagination_pages: int = 50
    max_load_more_clicks: int = 20
    load_more_wait_ms: int = 1_000
    modal_timeout_ms: int = 1_000


class SiteExtensions:
    """
    Per-site hooks. Every hook returns None to fall back to the default
    selector-driven behaviour; sites override only what they need.
    """

    async def extract_product(
        self,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> ProductFields | None:
        return None

    async def extract_detail(
        self,
        page: PageHandle,
        context: ExtractionContext,
        listing: ProductFields,
    ) -> ProductFields | None:
        return None

    async def extract_nutrition(
        self,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> Nutritions | None:
        return None

    async def extract_categories(
        self,
        page: PageHandle,
        context: ExtractionContext,
    ) -> list[CategoryInfo] | None:
        return None

    async def extract_product_id(
        self,
        element: ElementHandle,
        context: ExtractionContext,
    ) -> str | None:
        return None


@dataclass(frozen=True)
class SiteDefinition:
    """
    Everything a strategy needs to crawl one café website.
    """

    config: SiteConfig
    selectors: SelectorConfig
    strategy: CrawlerStrategyType
    pagination: PaginationType = PaginationType.NONE
    options: CrawlerOptions = field(default_factory=CrawlerOptions)
    nutrition: NutritionExtractorOptions | None = None
    extensions: SiteExtensions = field(default_factory=SiteExtensions)

    @property
    def brand(self) -> str:
        return self.config.brand
