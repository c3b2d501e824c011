"""
Nutrition extractor factory.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from cafe_crawler.crawling.browser.base import ElementHandle
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.nutrition.labels import DEFAULT_KOREAN_LABELS, LabelMapping
from cafe_crawler.crawling.nutrition.structured import (
    extract_best_row_from_table,
    extract_from_dl,
    extract_from_table,
)
from cafe_crawler.crawling.nutrition.text import extract_from_text
from cafe_crawler.domain.products import Nutritions

if TYPE_CHECKING:
    from cafe_crawler.crawling.types import ExtractionContext

logger = logging.getLogger(__name__)

NutritionExtractor = Callable[[ElementHandle, "ExtractionContext"], Awaitable[Nutritions | None]]


class NutritionExtractionMethod(str, Enum):
    TEXT = "text"
    DL = "dl"
    TABLE = "table"
    BEST_ROW = "best-row"
    CUSTOM = "custom"


@dataclass(frozen=True)
class NutritionExtractorOptions:
    """
    How a site exposes nutrition facts.

    `selector` scopes extraction to a descendant of the element handed to
    the extractor; when it matches nothing the product has no nutrition.
    """

    method: NutritionExtractionMethod
    selector: str | None = None
    table_selector: str = "table"
    dl_selector: str = "dl"
    header_row: int = 0
    data_row: int = 1
    value_first: bool = False
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS


def create_nutrition_extractor(
    options: NutritionExtractorOptions,
    custom: NutritionExtractor | None = None,
) -> NutritionExtractor:
    """
    Build an extractor for `options`.

    The returned callable never raises: any failure is logged and reported
    as "no nutrition data".
    """

    if options.method is NutritionExtractionMethod.CUSTOM and custom is None:
        raise ValueError("Custom nutrition extraction requires a custom extractor.")

    async def extract(element: ElementHandle, context: "ExtractionContext") -> Nutritions | None:
        try:
            if options.method is NutritionExtractionMethod.CUSTOM:
                return await custom(element, context)  # type: ignore[misc]

            scope: ElementHandle | None = element
            if options.selector:
                scope = await element.query_selector(options.selector)
            if scope is None:
                return None

            if options.method is NutritionExtractionMethod.TEXT:
                return extract_from_text(await scope.text_content())
            if options.method is NutritionExtractionMethod.DL:
                return await extract_from_dl(
                    scope,
                    dl_selector=options.dl_selector,
                    label_mapping=options.label_mapping,
                    value_first=options.value_first,
                )
            if options.method is NutritionExtractionMethod.TABLE:
                return await extract_from_table(
                    scope,
                    table_selector=options.table_selector,
                    header_row=options.header_row,
                    data_row=options.data_row,
                    label_mapping=options.label_mapping,
                )
            return await extract_best_row_from_table(
                scope,
                table_selector=options.table_selector,
                label_mapping=options.label_mapping,
            )
        except Exception as exc:
            log_event(
                logger,
                logging.DEBUG,
                "nutrition_extraction_failed",
                method=options.method.value,
                page_url=context.page_url,
                error=str(exc),
            )
            return None

    return extract
