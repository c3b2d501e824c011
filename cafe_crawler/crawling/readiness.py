"""
Best-effort page readiness waits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from cafe_crawler.crawling.browser.base import PageHandle
from cafe_crawler.crawling.logging_utils import log_event
from cafe_crawler.errors import BrowserTimeoutError

logger = logging.getLogger(__name__)


class OnTimeout(str, Enum):
    PROCEED = "proceed"
    ABORT = "abort"


@dataclass(frozen=True)
class WaitPolicy:
    """
    How long to wait for a page and what to do when the wait runs out.
    """

    timeout_ms: int = 15_000
    on_timeout: OnTimeout = OnTimeout.PROCEED
    load_state: str = "domcontentloaded"


async def wait_until_ready(
    page: PageHandle,
    policy: WaitPolicy,
    *,
    selector: str | None = None,
) -> bool:
    """
    Wait for the load state, or for `selector` to be attached when given.

    Returns False when the wait timed out and the policy says to proceed.
    """

    try:
        if selector:
            await page.wait_for_selector(selector, state="attached", timeout_ms=policy.timeout_ms)
        else:
            await page.wait_for_load_state(policy.load_state, timeout_ms=policy.timeout_ms)
        return True
    except BrowserTimeoutError as exc:
        if policy.on_timeout is OnTimeout.ABORT:
            raise
        log_event(
            logger,
            logging.WARNING,
            "page_load_timeout",
            page_url=page.url,
            selector=selector,
            timeout_ms=policy.timeout_ms,
            error=str(exc),
        )
        return False
