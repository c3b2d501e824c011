"""
Headless Chromium implementation of the browser surface.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import ElementHandle as PlaywrightElement
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from cafe_crawler.crawling.browser.base import BrowserSession, ElementHandle, PageHandle
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.errors import BrowserError, BrowserTimeoutError, NavigationError

logger = logging.getLogger(__name__)


class PlaywrightElementHandle(ElementHandle):
    def __init__(self, element: PlaywrightElement) -> None:
        self._element = element

    async def query_selector(self, selector: str) -> ElementHandle | None:
        found = await self._element.query_selector(selector)
        return PlaywrightElementHandle(found) if found is not None else None

    async def query_selector_all(self, selector: str) -> list[ElementHandle]:
        return [PlaywrightElementHandle(item) for item in await self._element.query_selector_all(selector)]

    async def text_content(self) -> str | None:
        return await self._element.text_content()

    async def get_attribute(self, name: str) -> str | None:
        return await self._element.get_attribute(name)

    async def inner_html(self) -> str:
        return await self._element.inner_html()

    async def click(self, *, timeout_ms: int | None = None) -> None:
        try:
            await self._element.click(timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise BrowserTimeoutError(str(exc)) from exc
        except PlaywrightError as exc:
            raise BrowserError(str(exc)) from exc

    async def is_visible(self) -> bool:
        return await self._element.is_visible()

    async def is_enabled(self) -> bool:
        return await self._element.is_enabled()


class PlaywrightPageHandle(PageHandle):
    def __init__(self, page: Page, *, navigation_timeout_ms: int) -> None:
        self._page = page
        self._navigation_timeout_ms = navigation_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, *, timeout_ms: int | None = None) -> None:
        try:
            await self._page.goto(
                url,
                timeout=timeout_ms or self._navigation_timeout_ms,
                wait_until="domcontentloaded",
            )
        except PlaywrightTimeoutError as exc:
            raise BrowserTimeoutError(f"Timed out loading {url}: {exc}") from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Failed to load {url}: {exc}") from exc

    async def wait_for_load_state(self, state: str = "domcontentloaded", *, timeout_ms: int) -> None:
        try:
            await self._page.wait_for_load_state(state, timeout=timeout_ms)  # type: ignore[arg-type]
        except PlaywrightTimeoutError as exc:
            raise BrowserTimeoutError(str(exc)) from exc

    async def query_selector(self, selector: str) -> ElementHandle | None:
        found = await self._page.query_selector(selector)
        return PlaywrightElementHandle(found) if found is not None else None

    async def query_selector_all(self, selector: str) -> list[ElementHandle]:
        return [PlaywrightElementHandle(item) for item in await self._page.query_selector_all(selector)]

    async def wait_for_selector(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int,
    ) -> ElementHandle | None:
        try:
            found = await self._page.wait_for_selector(
                selector,
                state=state,  # type: ignore[arg-type]
                timeout=timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise BrowserTimeoutError(str(exc)) from exc
        return PlaywrightElementHandle(found) if found is not None else None

    async def press_key(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def wait(self, milliseconds: int) -> None:
        await self._page.wait_for_timeout(milliseconds)

    async def close(self) -> None:
        await self._page.close()


class PlaywrightBrowserSession(BrowserSession):
    """
    Launches Chromium once and opens one page per worker.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        launch_args: Sequence[str] = (),
        user_agent: str | None = None,
        navigation_timeout_ms: int = 30_000,
    ) -> None:
        self.headless = headless
        self.launch_args = list(launch_args)
        self.user_agent = user_agent
        self.navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def start(self) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=self.launch_args,
        )
        self._context = await self._browser.new_context(user_agent=self.user_agent)
        log_event(
            logger,
            logging.DEBUG,
            "browser_started",
            headless=self.headless,
            launch_args=self.launch_args,
        )

    async def stop(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def new_page(self) -> PageHandle:
        if self._context is None:
            raise BrowserError("Browser session has not been started.")
        page = await self._context.new_page()
        page.set_default_navigation_timeout(self.navigation_timeout_ms)
        return PlaywrightPageHandle(page, navigation_timeout_ms=self.navigation_timeout_ms)
