"""
Upload previously crawled product files from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging

from cafe_crawler.config import get_crawler_settings
from cafe_crawler.crawling.logging_utils import configure_logging, log_event
from cafe_crawler.crawling.sites import BRAND_NAMES
from cafe_crawler.crawling.storage import HttpUploadStorage, latest_output_file, load_products
from cafe_crawler.errors import StorageConfigurationError, StorageError

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload crawled café products.")
    parser.add_argument("brands", nargs="*", help="Brand keys to upload. Defaults to every brand.")
    parser.add_argument("--file", default=None, help="Upload this file instead of the latest output.")
    parser.add_argument("--dry-run", action="store_true", help="Compute changes without writing.")
    args = parser.parse_args()

    settings = get_crawler_settings()
    configure_logging(settings.log_level)

    brands = [brand.strip().lower() for brand in args.brands] or list(BRAND_NAMES)
    unknown = [brand for brand in brands if brand not in BRAND_NAMES]
    if unknown:
        parser.error(f"Unknown brands: {', '.join(unknown)}. Available brands: {', '.join(BRAND_NAMES)}")
    if args.file and len(brands) != 1:
        parser.error("--file requires exactly one brand.")

    try:
        storage = HttpUploadStorage(
            base_url=settings.upload_url,
            upload_secret=settings.upload_secret,
            dry_run=args.dry_run,
            timeout_seconds=settings.upload_timeout_seconds,
        )
    except StorageConfigurationError as exc:
        parser.error(str(exc))

    payload = []
    failed = False
    for brand in brands:
        path = args.file or latest_output_file(settings.output_dir, brand)
        if path is None:
            log_event(logger, logging.ERROR, "products_file_missing", brand=brand, output_dir=settings.output_dir)
            failed = True
            continue
        try:
            result = storage.store(brand=brand, products=load_products(path))
        except (StorageError, OSError, ValueError) as exc:
            log_event(logger, logging.ERROR, "upload_failed", brand=brand, path=str(path), error=str(exc))
            failed = True
            continue
        payload.append(
            {
                "brand": brand,
                "file": str(path),
                "processed": result.processed,
                "created": result.created,
                "updated": result.updated,
                "unchanged": result.unchanged,
                "removed": result.removed,
                "reactivated": result.reactivated,
                "errors": result.errors,
            }
        )

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
