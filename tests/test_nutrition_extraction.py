"""
tests/test_nutrition_extraction.py

Nutrition extraction over free text, definition lists and tables, plus the
extractor factory. HTML fixtures are parsed by the static browser driver.
"""

from __future__ import annotations

import asyncio

import pytest

from cafe_crawler.crawling.browser.static_driver import StaticPageHandle, mapping_fetcher
from cafe_crawler.crawling.nutrition import (
    NutritionExtractionMethod,
    NutritionExtractorOptions,
    create_nutrition_extractor,
    extract_best_row_from_table,
    extract_from_best_row,
    extract_from_dl,
    extract_from_table,
    extract_from_text,
    select_best_row,
)
from cafe_crawler.crawling.types import ExtractionContext

PAGE_URL = "https://cafe.example/menu"
CONTEXT = ExtractionContext(base_url="https://cafe.example", page_url=PAGE_URL, brand="example")


def load_page(html: str) -> StaticPageHandle:
    page = StaticPageHandle(fetch=mapping_fetcher({PAGE_URL: html}))
    asyncio.run(page.goto(PAGE_URL))
    return page


def first_element(page: StaticPageHandle, selector: str):
    element = asyncio.run(page.query_selector(selector))
    assert element is not None
    return element


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------


class TestTextExtraction:
    def test_inline_labels(self) -> None:
        nutritions = extract_from_text("열량 250kcal 당류 35g 나트륨 150mg 포화지방 5g 지방 9g 카페인 75mg")
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("sugar") == (35.0, "g")
        assert nutritions.get("natrium") == (150.0, "mg")
        assert nutritions.get("saturated_fat") == (5.0, "g")
        assert nutritions.get("fat") == (9.0, "g")
        assert nutritions.get("caffeine") == (75.0, "mg")

    def test_label_value_lines_with_units_in_labels(self) -> None:
        nutritions = extract_from_text("용량 : 355ml\n열량(kcal) : 250\n당류(g) : 35")
        assert nutritions is not None
        assert nutritions.get("serving_size") == (355.0, "ml")
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("sugar") == (35.0, "g")

    def test_unlabelled_ounces_become_millilitres(self) -> None:
        nutritions = extract_from_text("Tall 12oz")
        assert nutritions is not None
        value, unit = nutritions.get("serving_size")
        assert unit == "ml"
        assert value == pytest.approx(354.882)

    def test_text_without_facts(self) -> None:
        assert extract_from_text("시원하고 달콤한 음료") is None
        assert extract_from_text("") is None
        assert extract_from_text(None) is None


# ---------------------------------------------------------------------------
# Definition lists and tables
# ---------------------------------------------------------------------------


class TestStructuredExtraction:
    def test_definition_list_with_value_first(self) -> None:
        page = load_page(
            """
            <div class="info">
              <dl><dt>250</dt><dd>열량(kcal)</dd></dl>
              <dl><dt>15</dt><dd>나트륨(mg)</dd></dl>
              <dl><dt>-</dt><dd>당류(g)</dd></dl>
            </div>
            """
        )
        nutritions = asyncio.run(extract_from_dl(first_element(page, ".info"), value_first=True))
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("natrium") == (15.0, "mg")
        assert nutritions.get("sugar") is None

    def test_definition_list_with_label_first(self) -> None:
        page = load_page("<div id='n'><dl><dt>단백질</dt><dd>(4g)</dd><dt>열량</dt><dd>(120kcal)</dd></dl></div>")
        nutritions = asyncio.run(extract_from_dl(first_element(page, "#n")))
        assert nutritions is not None
        assert nutritions.get("protein") == (4.0, "g")
        assert nutritions.get("calories") == (120.0, "kcal")

    def test_header_and_data_row_table(self) -> None:
        page = load_page(
            """
            <div id="n"><table>
              <tr><th>열량(kcal)</th><th>당류(g)</th><th>나트륨(mg)</th></tr>
              <tr><td>250</td><td>35</td><td>-</td></tr>
            </table></div>
            """
        )
        nutritions = asyncio.run(extract_from_table(first_element(page, "#n")))
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("sugar") == (35.0, "g")
        assert nutritions.get("natrium") is None

    def test_missing_table(self) -> None:
        page = load_page("<div id='n'><p>준비중</p></div>")
        assert asyncio.run(extract_from_table(first_element(page, "#n"))) is None


# ---------------------------------------------------------------------------
# Best-row selection
# ---------------------------------------------------------------------------

SIZE_ROWS = [
    ["핫 R", "120", "-", "-"],
    ["아이스 R", "250", "35", "150"],
    ["아이스 L", "300", "40", "180"],
    ["-", "-", "-", "-"],
]


class TestBestRow:
    def test_most_numeric_row_wins_and_ties_keep_the_first(self) -> None:
        assert select_best_row(SIZE_ROWS) == 1

    def test_all_placeholder_rows_have_no_best_row(self) -> None:
        assert select_best_row([["-", "-"], ["", ""]]) is None

    def test_headers_align_to_value_cells(self) -> None:
        nutritions = extract_from_best_row(["구분", "열량(kcal)", "당류(g)", "나트륨(mg)"], SIZE_ROWS)
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("sugar") == (35.0, "g")
        assert nutritions.get("natrium") == (150.0, "mg")

    def test_best_row_from_table(self) -> None:
        page = load_page(
            """
            <div class="table-list"><table>
              <thead><tr><th>사이즈</th><th>열량(kcal)</th><th>당류(g)</th><th>단백질(g)</th></tr></thead>
              <tbody>
                <tr><td>Regular</td><td>-</td><td>-</td><td>-</td></tr>
                <tr><td>Large</td><td>250</td><td>35</td><td>4</td></tr>
              </tbody>
            </table></div>
            """
        )
        nutritions = asyncio.run(extract_best_row_from_table(first_element(page, ".table-list")))
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")
        assert nutritions.get("sugar") == (35.0, "g")
        assert nutritions.get("protein") == (4.0, "g")


# ---------------------------------------------------------------------------
# Extractor factory
# ---------------------------------------------------------------------------


class TestExtractorFactory:
    def test_custom_method_requires_a_callable(self) -> None:
        with pytest.raises(ValueError):
            create_nutrition_extractor(NutritionExtractorOptions(method=NutritionExtractionMethod.CUSTOM))

    def test_selector_narrows_the_scope(self) -> None:
        page = load_page("<li><p>열량 999kcal</p><ul class='info'><li>열량 : 250</li></ul></li>")
        extractor = create_nutrition_extractor(
            NutritionExtractorOptions(method=NutritionExtractionMethod.TEXT, selector="ul.info")
        )
        nutritions = asyncio.run(extractor(first_element(page, "li"), CONTEXT))
        assert nutritions is not None
        assert nutritions.get("calories") == (250.0, "kcal")

    def test_missing_scope_yields_none(self) -> None:
        page = load_page("<li><p>열량 250kcal</p></li>")
        extractor = create_nutrition_extractor(
            NutritionExtractorOptions(method=NutritionExtractionMethod.TEXT, selector="ul.info")
        )
        assert asyncio.run(extractor(first_element(page, "li"), CONTEXT)) is None

    def test_failures_are_reported_as_no_data(self) -> None:
        async def broken(element, context):
            raise RuntimeError("layout changed")

        extractor = create_nutrition_extractor(
            NutritionExtractorOptions(method=NutritionExtractionMethod.CUSTOM),
            broken,
        )
        page = load_page("<li>item</li>")
        assert asyncio.run(extractor(first_element(page, "li"), CONTEXT)) is None
