"""
Browser surface over server-rendered HTML fetched with requests.

Pages are parsed with BeautifulSoup. Clicking a link navigates to its href;
subclasses of `StaticPageHandle` can script other interactions.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable, Mapping
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup, Tag

from cafe_crawler.crawling.browser.base import BrowserSession, ElementHandle, PageHandle
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.errors import BrowserTimeoutError, NavigationError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

Fetcher = Callable[[str], str]

_HIDDEN_STYLE = re.compile(r"(display\s*:\s*none|visibility\s*:\s*hidden)", re.IGNORECASE)


class HttpFetcher:
    """
    GET pages with bounded retries and exponential backoff.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        user_agent: str | None = None,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        backoff_initial_seconds: float = 0.5,
        backoff_multiplier: float = 2.0,
    ) -> None:
        self.session = session or requests.Session()
        self.headers = {"User-Agent": user_agent} if user_agent else {}
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.backoff_initial_seconds = backoff_initial_seconds
        self.backoff_multiplier = backoff_multiplier

    def __call__(self, url: str) -> str:
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self.session.get(
                    url,
                    headers=self.headers,
                    timeout=self.timeout_seconds,
                    allow_redirects=True,
                )
                if response.status_code in RETRYABLE_STATUS_CODES:
                    raise requests.HTTPError(
                        f"Retryable status={response.status_code}",
                        response=response,
                    )
                response.raise_for_status()
                return response.text
            except (requests.Timeout, requests.ConnectionError, requests.HTTPError) as exc:
                last_error = exc
                if isinstance(exc, requests.HTTPError):
                    status_code = exc.response.status_code if exc.response is not None else None
                    if status_code not in RETRYABLE_STATUS_CODES:
                        raise

            if attempt >= self.max_retries:
                break

            time.sleep(self.backoff_initial_seconds * (self.backoff_multiplier**attempt))

        raise NavigationError(f"Failed to fetch {url} after retries: {last_error}")


def _is_hidden(tag: Tag) -> bool:
    node: Tag | None = tag
    while node is not None and node.name != "[document]":
        if node.has_attr("hidden"):
            return True
        if _HIDDEN_STYLE.search(str(node.get("style") or "")):
            return True
        if node.get("type") == "hidden":
            return True
        node = node.parent
    return False


class StaticElementHandle(ElementHandle):
    def __init__(self, tag: Tag, page: "StaticPageHandle") -> None:
        self.tag = tag
        self.page = page

    async def query_selector(self, selector: str) -> ElementHandle | None:
        found = self.tag.select_one(selector)
        return StaticElementHandle(found, self.page) if found is not None else None

    async def query_selector_all(self, selector: str) -> list[ElementHandle]:
        return [StaticElementHandle(item, self.page) for item in self.tag.select(selector)]

    async def text_content(self) -> str | None:
        return self.tag.get_text()

    async def get_attribute(self, name: str) -> str | None:
        value = self.tag.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    async def inner_html(self) -> str:
        return "".join(str(child) for child in self.tag.contents)

    async def click(self, *, timeout_ms: int | None = None) -> None:
        if _is_hidden(self.tag):
            raise BrowserTimeoutError(f"Element <{self.tag.name}> is not visible and cannot be clicked.")
        await self.page.handle_click(self)

    async def is_visible(self) -> bool:
        return not _is_hidden(self.tag)

    async def is_enabled(self) -> bool:
        if self.tag.has_attr("disabled"):
            return False
        return str(self.tag.get("aria-disabled") or "").lower() != "true"


class StaticPageHandle(PageHandle):
    """
    One HTML document. Navigation replaces the document.
    """

    def __init__(self, *, fetch: Fetcher) -> None:
        self._fetch = fetch
        self._url = "about:blank"
        self.document: BeautifulSoup | None = None

    @property
    def url(self) -> str:
        return self._url

    async def goto(self, url: str, *, timeout_ms: int | None = None) -> None:
        try:
            html = await asyncio.to_thread(self._fetch, url)
        except NavigationError:
            raise
        except Exception as exc:
            raise NavigationError(f"Failed to load {url}: {exc}") from exc
        self.document = BeautifulSoup(html, "html.parser")
        self._url = url

    async def wait_for_load_state(self, state: str = "domcontentloaded", *, timeout_ms: int) -> None:
        if self.document is None:
            raise BrowserTimeoutError(f"No document loaded after {timeout_ms}ms.")

    def _root(self) -> BeautifulSoup:
        if self.document is None:
            raise NavigationError("No document loaded.")
        return self.document

    async def query_selector(self, selector: str) -> ElementHandle | None:
        found = self._root().select_one(selector)
        return StaticElementHandle(found, self) if found is not None else None

    async def query_selector_all(self, selector: str) -> list[ElementHandle]:
        return [StaticElementHandle(item, self) for item in self._root().select(selector)]

    async def wait_for_selector(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int,
    ) -> ElementHandle | None:
        # A static document cannot change while waiting, so check once.
        matches = self._root().select(selector)
        if state == "attached":
            if matches:
                return StaticElementHandle(matches[0], self)
        elif state == "detached":
            if not matches:
                return None
        elif state == "hidden":
            if all(_is_hidden(item) for item in matches):
                return None
        else:
            for item in matches:
                if not _is_hidden(item):
                    return StaticElementHandle(item, self)
        raise BrowserTimeoutError(f"Timed out after {timeout_ms}ms waiting for '{selector}' to be {state}.")

    async def handle_click(self, element: StaticElementHandle) -> None:
        """
        Follow the href of the element or its closest link ancestor.
        """

        node: Tag | None = element.tag
        while node is not None and node.name != "[document]":
            href = node.get("href")
            if isinstance(href, str) and href.strip() and not href.startswith(("#", "javascript:")):
                await self.goto(_resolve(self._url, href))
                return
            node = node.parent
        log_event(
            logger,
            logging.DEBUG,
            "static_click_ignored",
            page_url=self._url,
            tag=element.tag.name,
        )

    async def press_key(self, key: str) -> None:
        return None

    async def wait(self, milliseconds: int) -> None:
        await asyncio.sleep(0)

    async def close(self) -> None:
        self.document = None


def _resolve(current_url: str, href: str) -> str:
    return urljoin(current_url, href.strip())


def mapping_fetcher(pages: Mapping[str, str]) -> Fetcher:
    """
    Serve documents from memory; unknown URLs fail like a 404.
    """

    def fetch(url: str) -> str:
        try:
            return pages[url]
        except KeyError:
            raise NavigationError(f"No document for {url}") from None

    return fetch


class StaticBrowserSession(BrowserSession):
    """
    Hands out static pages sharing one fetcher.
    """

    def __init__(
        self,
        *,
        fetch: Fetcher | None = None,
        page_class: type[StaticPageHandle] = StaticPageHandle,
        user_agent: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.fetch = fetch or HttpFetcher(user_agent=user_agent, timeout_seconds=timeout_seconds)
        self.page_class = page_class
        self.pages: list[StaticPageHandle] = []

    async def new_page(self) -> PageHandle:
        page = self.page_class(fetch=self.fetch)
        self.pages.append(page)
        return page
