"""
Per-item interaction state machines for detail pages and modals.

Both views are async context managers: entering opens the detail view,
leaving always returns the page to the listing, including when extraction
or opening fails.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import TracebackType

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.config.models import ModalSelectors
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.crawling.readiness import WaitPolicy, wait_until_ready
from cafe_crawler.errors import BrowserTimeoutError

logger = logging.getLogger(__name__)


class InteractionState(str, Enum):
    LISTING_READY = "listing_ready"
    DETAIL_OPENING = "detail_opening"
    DETAIL_READY = "detail_ready"
    DETAIL_CLOSING = "detail_closing"


class DetailView:
    """
    Click a listing item, wait for its detail page, then navigate back.
    """

    def __init__(
        self,
        page: PageHandle,
        *,
        trigger: ElementHandle,
        return_url: str,
        wait_policy: WaitPolicy,
        ready_selector: str | None = None,
        navigation_timeout_ms: int | None = None,
    ) -> None:
        self.page = page
        self.trigger = trigger
        self.return_url = return_url
        self.wait_policy = wait_policy
        self.ready_selector = ready_selector
        self.navigation_timeout_ms = navigation_timeout_ms
        self.state = InteractionState.LISTING_READY

    async def __aenter__(self) -> "DetailView":
        self.state = InteractionState.DETAIL_OPENING
        try:
            await self.trigger.click(timeout_ms=self.wait_policy.timeout_ms)
            await wait_until_ready(self.page, self.wait_policy, selector=self.ready_selector)
        except BaseException:
            await self._close()
            raise
        self.state = InteractionState.DETAIL_READY
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self._close()

    async def _close(self) -> None:
        self.state = InteractionState.DETAIL_CLOSING
        try:
            await self.page.goto(self.return_url, timeout_ms=self.navigation_timeout_ms)
            await wait_until_ready(self.page, self.wait_policy)
        finally:
            self.state = InteractionState.LISTING_READY


class ModalView:
    """
    Open an in-page modal for one item and dismiss it afterwards.

    Dismissal clicks the close control and falls back to the Escape key.
    """

    def __init__(
        self,
        page: PageHandle,
        *,
        trigger: ElementHandle,
        selectors: ModalSelectors,
        timeout_ms: int,
    ) -> None:
        self.page = page
        self.trigger = trigger
        self.selectors = selectors
        self.timeout_ms = timeout_ms
        self.state = InteractionState.LISTING_READY
        self.element: ElementHandle | None = None

    async def __aenter__(self) -> "ModalView":
        self.state = InteractionState.DETAIL_OPENING
        try:
            await self.trigger.click(timeout_ms=self.timeout_ms)
            self.element = await self.page.wait_for_selector(
                self.selectors.container,
                state="visible",
                timeout_ms=self.timeout_ms,
            )
            if self.element is None:
                raise BrowserTimeoutError(f"Modal '{self.selectors.container}' did not open.")
        except BaseException:
            await self._dismiss()
            raise
        self.state = InteractionState.DETAIL_READY
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self._dismiss()

    async def texts(self, selector: str | None) -> list[str]:
        if self.element is None or not selector:
            return []
        texts: list[str] = []
        for item in await self.element.query_selector_all(selector):
            text = (await item.text_content() or "").strip()
            if text:
                texts.append(text)
        return texts

    async def _dismiss(self) -> None:
        self.state = InteractionState.DETAIL_CLOSING
        try:
            closed = False
            if self.selectors.close:
                try:
                    close_button = await self.page.query_selector(self.selectors.close)
                    if close_button is not None and await close_button.is_visible():
                        await close_button.click(timeout_ms=self.timeout_ms)
                        closed = True
                except Exception as exc:
                    log_event(
                        logger,
                        logging.DEBUG,
                        "modal_close_click_failed",
                        page_url=self.page.url,
                        error=str(exc),
                    )
            if not closed:
                try:
                    await self.page.press_key("Escape")
                except Exception as exc:
                    log_event(
                        logger,
                        logging.DEBUG,
                        "modal_escape_failed",
                        page_url=self.page.url,
                        error=str(exc),
                    )
        finally:
            self.state = InteractionState.LISTING_READY
