"""
Upload crawled products to the menu backend's HTTP mutation endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import requests
from pydantic import ValidationError

from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.storage.base import ProductStorage
from cafe_crawler.domain.crawl import StoreResult
from cafe_crawler.domain.products import Product
from cafe_crawler.errors import StorageConfigurationError, UploadError
from cafe_crawler.schemas.upload import MutationResponse, UploadResultResponse

logger = logging.getLogger(__name__)

UPLOAD_MUTATION_PATH = "dataUploader:uploadProductsFromJson"


class HttpUploadStorage(ProductStorage):
    """
    Sends one brand's full product snapshot; the backend reports how many
    rows were created, updated, left unchanged, removed or reactivated.

    With `dry_run` the backend computes the same counts without writing.
    """

    def __init__(
        self,
        *,
        base_url: str | None,
        upload_secret: str | None,
        dry_run: bool = False,
        timeout_seconds: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise StorageConfigurationError("VITE_CONVEX_URL is not set.")
        if not upload_secret:
            raise StorageConfigurationError("CONVEX_UPLOAD_SECRET is not set.")
        self.base_url = base_url.rstrip("/")
        self.upload_secret = upload_secret
        self.dry_run = dry_run
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def store(self, *, brand: str, products: Sequence[Product]) -> StoreResult:
        payload = {
            "path": UPLOAD_MUTATION_PATH,
            "format": "json",
            "args": {
                "cafeSlug": brand,
                "products": [product.to_dict() for product in products],
                "dryRun": self.dry_run,
                "downloadImages": False,
                "uploadSecret": self.upload_secret,
            },
        }
        try:
            response = self.session.post(
                f"{self.base_url}/api/mutation",
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UploadError(f"Upload request failed for brand={brand}: {exc}") from exc

        try:
            envelope = MutationResponse.model_validate(response.json())
            if envelope.status != "success":
                raise UploadError(envelope.error_message or f"Upload failed with status={envelope.status}.")
            result = UploadResultResponse.model_validate(envelope.value or {})
        except (ValueError, ValidationError) as exc:
            raise UploadError(f"Invalid upload response for brand={brand}: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "products_uploaded",
            brand=brand,
            dry_run=self.dry_run,
            processed=result.processed,
            created=result.created,
            updated=result.updated,
            unchanged=result.unchanged,
            skipped=result.skipped,
            removed=result.removed,
            reactivated=result.reactivated,
            errors=len(result.errors),
        )
        return StoreResult(
            processed=result.processed,
            created=result.created,
            updated=result.updated,
            unchanged=result.unchanged,
            skipped=result.skipped,
            removed=result.removed,
            reactivated=result.reactivated,
            errors=list(result.errors),
            location=f"{self.base_url} (dry run)" if self.dry_run else self.base_url,
        )
