"""
Browser surface and its implementations.
"""

from cafe_crawler.crawling.browser.base import BrowserSession, ElementHandle, PageHandle

__all__ = ["BrowserSession", "ElementHandle", "PageHandle"]
