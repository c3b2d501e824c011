"""
Request queue and worker pool driving one crawl.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

from cafe_crawler.crawling.browser.base import BrowserSession, PageHandle
from cafe_crawler.crawling.config.models import CrawlerOptions
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.types import CrawlRequest
from cafe_crawler.errors import RequestBudgetExhausted

logger = logging.getLogger(__name__)

RequestHandler = Callable[[PageHandle, CrawlRequest], Awaitable[None]]


class RequestBudget:
    """
    Shared cap on page loads for one crawl. A limit of None is unlimited.
    """

    def __init__(self, limit: int | None) -> None:
        self.limit = limit
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.limit is not None and self.used >= self.limit

    def consume(self) -> None:
        if self.exhausted:
            raise RequestBudgetExhausted(f"Request budget of {self.limit} exhausted.")
        self.used += 1


@dataclass
class RunnerStats:
    handled: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


class CrawlRunner:
    """
    Runs queued requests on up to `max_concurrency` pages.

    Requests are de-duplicated by their unique key. Each request loads its
    URL, then runs the handler under the handler timeout; failures are
    retried up to `max_request_retries` times and then recorded.
    """

    def __init__(
        self,
        *,
        brand: str,
        session: BrowserSession,
        handler: RequestHandler,
        options: CrawlerOptions,
        budget: RequestBudget,
    ) -> None:
        self.brand = brand
        self.session = session
        self.handler = handler
        self.options = options
        self.budget = budget
        self.stats = RunnerStats()
        self._queue: asyncio.Queue[CrawlRequest] = asyncio.Queue()
        self._seen: set[str] = set()

    def add_request(self, request: CrawlRequest) -> bool:
        if request.unique_key in self._seen:
            return False
        self._seen.add(request.unique_key)
        self._queue.put_nowait(request)
        return True

    async def run(self, requests: Iterable[CrawlRequest]) -> RunnerStats:
        for request in requests:
            self.add_request(request)

        worker_count = max(1, self.options.max_concurrency)
        pages = [await self.session.new_page() for _ in range(worker_count)]
        workers = [asyncio.create_task(self._worker(page)) for page in pages]
        try:
            await self._queue.join()
        finally:
            for worker in workers:
                worker.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            for page in pages:
                await page.close()
        return self.stats

    async def _worker(self, page: PageHandle) -> None:
        while True:
            request = await self._queue.get()
            try:
                await self._process(page, request)
            finally:
                self._queue.task_done()

    async def _process(self, page: PageHandle, request: CrawlRequest) -> None:
        try:
            self.budget.consume()
        except RequestBudgetExhausted:
            self.stats.skipped += 1
            log_event(
                logger,
                logging.INFO,
                "request_skipped_budget",
                brand=self.brand,
                url=request.url,
                label=request.label.value,
            )
            return

        last_error: Exception | None = None
        for attempt in range(self.options.max_request_retries + 1):
            try:
                await asyncio.wait_for(
                    self._handle(page, request),
                    timeout=self.options.request_handler_timeout_secs,
                )
                self.stats.handled += 1
                return
            except RequestBudgetExhausted:
                self.stats.handled += 1
                log_event(
                    logger,
                    logging.INFO,
                    "request_budget_exhausted",
                    brand=self.brand,
                    url=request.url,
                )
                return
            except Exception as exc:
                last_error = exc
                log_event(
                    logger,
                    logging.WARNING,
                    "request_attempt_failed",
                    brand=self.brand,
                    url=request.url,
                    label=request.label.value,
                    attempt=attempt + 1,
                    error=str(exc) or type(exc).__name__,
                )

        self.stats.failed += 1
        message = f"url={request.url} label={request.label.value} error={last_error!s}"
        self.stats.errors.append(message)
        log_event(
            logger,
            logging.ERROR,
            "request_failed",
            brand=self.brand,
            url=request.url,
            label=request.label.value,
            error=str(last_error) or type(last_error).__name__,
        )

    async def _handle(self, page: PageHandle, request: CrawlRequest) -> None:
        await page.goto(request.url, timeout_ms=self.options.navigation_timeout_ms)
        await self.handler(page, request)
