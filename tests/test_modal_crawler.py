"""
tests/test_modal_crawler.py

Modal strategy against a scripted static page: clicking an item image shows
the shared overlay filled with that item's facts; the close button and the
Escape key hide it again.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

from cafe_crawler.config import TestModeConfig
from cafe_crawler.crawling.browser.static_driver import StaticElementHandle, StaticPageHandle
from cafe_crawler.crawling.sites.mega import MEGA
from cafe_crawler.crawling.strategies import ModalCrawler, create_crawler_from_definition

START_URL = MEGA.config.start_url
PAGE_TWO_URL = f"{MEGA.config.base_url}/menu/?page=2"

OVERLAY = (
    '<div class="inner_modal" style="display: none">'
    '<div class="cont_text"><div class="cont_text_inner"></div></div>'
    '<div class="cont_list"><ul><li class="fact"></li></ul></div>'
    '<a class="close">x</a></div>'
)


def menu_item(name: str, serving: str | None = None, facts: str | None = None) -> str:
    image = f'<img src="/img/{name}.jpg" data-serving="{serving}" data-facts="{facts}">' if serving else ""
    return (
        f'<li>{image}<div class="cont_text_title">{name}</div>'
        f'<div class="cont_text_info"><div class="text1">{name} EN</div><div class="text2">{name} 설명</div></div></li>'
    )


def menu_page(*items: str, next_link: str = "") -> str:
    return f'<html><body><ul id="menu_list">{"".join(items)}</ul>{next_link}{OVERLAY}</body></html>'


class OverlayPage(StaticPageHandle):
    def _overlay(self):
        return self.document.select_one(".inner_modal")

    async def handle_click(self, element: StaticElementHandle) -> None:
        tag = element.tag
        if tag.name == "img" and tag.has_attr("data-serving"):
            overlay = self._overlay()
            overlay["style"] = "display: block"
            overlay.select_one(".cont_text_inner").string = tag["data-serving"]
            overlay.select_one("li.fact").string = tag["data-facts"]
            return
        if "close" in (tag.get("class") or []):
            self._overlay()["style"] = "display: none"
            return
        await super().handle_click(element)

    async def press_key(self, key: str) -> None:
        if key == "Escape":
            self._overlay()["style"] = "display: none"


PAGES = {
    START_URL: menu_page(
        menu_item("아메리카노", "355ml 10kcal", "당류 0g 카페인 150mg"),
        menu_item("바닐라라떼", "591ml 250kcal", "당류 30g 나트륨 120mg"),
        menu_item("시즌한정"),
        next_link='<a class="board_page_next" href="/menu/?page=2">다음</a>',
    ),
    PAGE_TWO_URL: menu_page(menu_item("녹차라떼", "591ml 300kcal", "당류 40g")),
}


def build_crawler(static_sessions, test_mode: TestModeConfig | None = None) -> ModalCrawler:
    crawler = create_crawler_from_definition(
        MEGA,
        session_factory=static_sessions(PAGES, page_class=OverlayPage),
        test_mode=test_mode or TestModeConfig(),
    )
    assert isinstance(crawler, ModalCrawler)
    return crawler


class TestModalCrawler:
    def test_facts_are_read_from_the_overlay_per_item(self, static_sessions) -> None:
        result = asyncio.run(build_crawler(static_sessions).run())

        names = [product.name for product in result.products]
        assert names == ["아메리카노", "바닐라라떼", "시즌한정", "녹차라떼"]

        americano = result.products[0].nutritions
        assert americano is not None
        assert americano.get("serving_size") == (355.0, "ml")
        assert americano.get("calories") == (10.0, "kcal")
        assert americano.get("caffeine") == (150.0, "mg")

        latte = result.products[1].nutritions
        assert latte.get("calories") == (250.0, "kcal")
        assert latte.get("sugar") == (30.0, "g")
        assert latte.get("natrium") == (120.0, "mg")

    def test_item_without_overlay_keeps_its_listing_fields(self, static_sessions) -> None:
        result = asyncio.run(build_crawler(static_sessions).run())

        seasonal = result.products[2]
        assert seasonal.nutritions is None
        assert seasonal.name_en == "시즌한정 EN"
        assert seasonal.external_category == "All Menu"
        assert result.requests_failed == 0

    def test_next_button_pages_are_followed(self, static_sessions) -> None:
        crawler = build_crawler(static_sessions)
        result = asyncio.run(crawler.run())

        last = result.products[-1]
        assert last.name == "녹차라떼"
        assert last.external_url == PAGE_TWO_URL
        assert last.nutritions.get("sugar") == (40.0, "g")

    def test_test_mode_stays_on_the_first_page(self, static_sessions) -> None:
        crawler = build_crawler(
            static_sessions,
            TestModeConfig(enabled=True, max_products=2, max_requests=10, max_categories=1),
        )
        result = asyncio.run(crawler.run())

        assert [product.name for product in result.products] == ["아메리카노", "바닐라라떼"]


# ---------------------------------------------------------------------------
# Failures inside the modal
# ---------------------------------------------------------------------------


class DetachedElement(StaticElementHandle):
    async def query_selector_all(self, selector: str):
        raise RuntimeError("Element is not attached to the DOM")


class DetachedOverlayPage(OverlayPage):
    async def wait_for_selector(self, selector: str, *, state: str = "visible", timeout_ms: int):
        found = await super().wait_for_selector(selector, state=state, timeout_ms=timeout_ms)
        if found is not None and selector == MEGA.selectors.modal.container:
            return DetachedElement(found.tag, self)
        return found


class BrokenEscapePage(OverlayPage):
    async def press_key(self, key: str) -> None:
        raise RuntimeError("Target page, context or browser has been closed")


class TestModalFailures:
    def test_unreadable_modal_keeps_the_product(self, static_sessions) -> None:
        crawler = create_crawler_from_definition(
            MEGA,
            session_factory=static_sessions(PAGES, page_class=DetachedOverlayPage),
            test_mode=TestModeConfig(),
        )

        result = asyncio.run(crawler.run())

        assert [product.name for product in result.products] == ["아메리카노", "바닐라라떼", "시즌한정", "녹차라떼"]
        assert all(product.nutritions is None for product in result.products)
        assert result.products[0].name_en == "아메리카노 EN"
        assert result.requests_failed == 0

    def test_failed_escape_does_not_drop_the_product(self, static_sessions) -> None:
        without_close = replace(
            MEGA,
            selectors=replace(MEGA.selectors, modal=replace(MEGA.selectors.modal, close=None)),
        )
        crawler = create_crawler_from_definition(
            without_close,
            session_factory=static_sessions(PAGES, page_class=BrokenEscapePage),
            test_mode=TestModeConfig(),
        )

        result = asyncio.run(crawler.run())

        assert [product.name for product in result.products] == ["아메리카노", "바닐라라떼", "시즌한정", "녹차라떼"]
        assert result.products[0].nutritions.get("caffeine") == (150.0, "mg")


# ---------------------------------------------------------------------------
# Long next-button walks
# ---------------------------------------------------------------------------


def numbered_pages(count: int) -> dict[str, str]:
    pages: dict[str, str] = {}
    for number in range(1, count + 1):
        url = START_URL if number == 1 else f"{MEGA.config.base_url}/menu/?page={number}"
        next_link = (
            f'<a class="board_page_next" href="/menu/?page={number + 1}">다음</a>' if number < count else ""
        )
        pages[url] = menu_page(menu_item(f"메뉴{number:02d}"), next_link=next_link)
    return pages


class TestNextButtonWalk:
    def test_clicks_are_not_charged_to_the_request_budget(self, static_sessions) -> None:
        assert MEGA.options.max_requests_per_crawl == 10
        crawler = create_crawler_from_definition(
            MEGA,
            session_factory=static_sessions(numbered_pages(15), page_class=OverlayPage),
            test_mode=TestModeConfig(),
        )

        result = asyncio.run(crawler.run())

        assert [product.name for product in result.products] == [f"메뉴{number:02d}" for number in range(1, 16)]
        assert crawler.budget.used == 1
