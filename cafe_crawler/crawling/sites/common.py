"""
Small lookup helpers shared by the site extensions.
"""

from __future__ import annotations

import re

from cafe_crawler.crawling.browser.base import ElementHandle, PageHandle
from cafe_crawler.crawling.strategies.base import clean_text

Scope = ElementHandle | PageHandle

_FILE_EXTENSION = re.compile(r"\.[A-Za-z0-9]+$")


async def first_text(scope: Scope, selector: str) -> str | None:
    element = await scope.query_selector(selector)
    if element is None:
        return None
    return clean_text(await element.text_content())


async def all_texts(scope: Scope, selector: str) -> list[str]:
    texts: list[str] = []
    for element in await scope.query_selector_all(selector):
        text = clean_text(await element.text_content())
        if text:
            texts.append(text)
    return texts


async def first_attribute(scope: Scope, selector: str, name: str) -> str | None:
    element = await scope.query_selector(selector)
    if element is None:
        return None
    value = await element.get_attribute(name)
    return value.strip() if value and value.strip() else None


def file_stem(url: str | None) -> str | None:
    """
    Return the last path segment of `url` without its extension.
    """

    if not url:
        return None
    segment = url.split("?", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    stem = _FILE_EXTENSION.sub("", segment)
    return stem or None
