"""
Shared fixtures: crawlers run against in-memory HTML through the static
browser driver.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping

import pytest

from cafe_crawler.crawling.browser.static_driver import StaticBrowserSession, StaticPageHandle, mapping_fetcher
from cafe_crawler.crawling.config.models import CrawlerOptions

SessionFactoryBuilder = Callable[..., Callable[[CrawlerOptions], StaticBrowserSession]]


@pytest.fixture()
def static_sessions() -> SessionFactoryBuilder:
    """
    Return a builder: pages (url -> html) in, crawler session factory out.
    """

    def build(
        pages: Mapping[str, str],
        page_class: type[StaticPageHandle] = StaticPageHandle,
    ) -> Callable[[CrawlerOptions], StaticBrowserSession]:
        fetch = mapping_fetcher(pages)
        return lambda options: StaticBrowserSession(fetch=fetch, page_class=page_class)

    return build
