"""
Dated JSON file output for crawled products.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path

from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.storage.base import ProductStorage
from cafe_crawler.domain.crawl import StoreResult
from cafe_crawler.domain.products import Product

logger = logging.getLogger(__name__)


def output_filename(brand: str, day: date) -> str:
    return f"{brand}-products-{day.isoformat()}.json"


class JsonFileProductStorage(ProductStorage):
    """
    Writes `<brand>-products-<YYYY-MM-DD>.json` under `output_dir`.

    An empty product list writes nothing.
    """

    def __init__(self, *, output_dir: str | Path, today: Callable[[], date] = date.today) -> None:
        self.output_dir = Path(output_dir)
        self._today = today

    def path_for(self, brand: str) -> Path:
        return self.output_dir / output_filename(brand, self._today())

    def store(self, *, brand: str, products: Sequence[Product]) -> StoreResult:
        if not products:
            log_event(logger, logging.WARNING, "no_products_to_write", brand=brand)
            return StoreResult()

        path = self.path_for(brand)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [product.to_dict() for product in products]
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        log_event(
            logger,
            logging.INFO,
            "products_written",
            brand=brand,
            products=len(products),
            path=str(path),
        )
        return StoreResult(processed=len(products), created=len(products), location=str(path))


def load_products(path: str | Path) -> list[Product]:
    """
    Read a JSON output file back into products.
    """

    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Expected a JSON array of products in {path}.")
    return [Product.from_dict(item) for item in raw if isinstance(item, dict)]


def latest_output_file(output_dir: str | Path, brand: str) -> Path | None:
    """
    Return the most recently modified output file for `brand`, if any.
    """

    directory = Path(output_dir)
    if not directory.is_dir():
        return None
    candidates = sorted(
        directory.glob(f"{brand}-products-*.json"),
        key=lambda candidate: candidate.stat().st_mtime,
        reverse=True,
    )
    return candidates[0] if candidates else None
