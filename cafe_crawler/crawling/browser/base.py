"""
Browser surface consumed by the traversal strategies.

Strategies only talk to these interfaces so that the same crawl logic can
drive a headless Chromium page or a server-rendered HTML snapshot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class ElementHandle(ABC):
    """
    One element located on a page.
    """

    @abstractmethod
    async def query_selector(self, selector: str) -> "ElementHandle | None":
        """Return the first descendant matching `selector`."""

    @abstractmethod
    async def query_selector_all(self, selector: str) -> list["ElementHandle"]:
        """Return every descendant matching `selector` in document order."""

    @abstractmethod
    async def text_content(self) -> str | None:
        ...

    @abstractmethod
    async def get_attribute(self, name: str) -> str | None:
        ...

    @abstractmethod
    async def inner_html(self) -> str:
        ...

    @abstractmethod
    async def click(self, *, timeout_ms: int | None = None) -> None:
        ...

    @abstractmethod
    async def is_visible(self) -> bool:
        ...

    @abstractmethod
    async def is_enabled(self) -> bool:
        ...


class PageHandle(ABC):
    """
    One browser tab.
    """

    @property
    @abstractmethod
    def url(self) -> str:
        ...

    @abstractmethod
    async def goto(self, url: str, *, timeout_ms: int | None = None) -> None:
        """Navigate and wait for the document to be committed."""

    @abstractmethod
    async def wait_for_load_state(self, state: str = "domcontentloaded", *, timeout_ms: int) -> None:
        """Wait for a load state; raises BrowserTimeoutError on timeout."""

    @abstractmethod
    async def query_selector(self, selector: str) -> ElementHandle | None:
        ...

    @abstractmethod
    async def query_selector_all(self, selector: str) -> list[ElementHandle]:
        ...

    @abstractmethod
    async def wait_for_selector(
        self,
        selector: str,
        *,
        state: str = "visible",
        timeout_ms: int,
    ) -> ElementHandle | None:
        """Wait until `selector` reaches `state`; raises BrowserTimeoutError on timeout."""

    @abstractmethod
    async def press_key(self, key: str) -> None:
        ...

    @abstractmethod
    async def wait(self, milliseconds: int) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class BrowserSession(ABC):
    """
    Owns the browser process and hands out pages.
    """

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.stop()

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None

    @abstractmethod
    async def new_page(self) -> PageHandle:
        ...
