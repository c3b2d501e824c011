"""
Nutrition extraction from definition lists and tables.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from cafe_crawler.crawling.browser.base import ElementHandle
from cafe_crawler.crawling.nutrition.labels import DEFAULT_KOREAN_LABELS, LabelMapping, match_label
from cafe_crawler.crawling.nutrition.parsing import (
    DEFAULT_UNITS,
    is_numeric_cell,
    is_placeholder,
    normalize_serving_size,
    parse_numeric_value,
    split_value_and_unit,
    unit_from_label,
)
from cafe_crawler.domain.products import NutritionBuilder, Nutritions


def build_from_pairs(
    pairs: Iterable[tuple[str | None, str | None]],
    *,
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS,
) -> Nutritions | None:
    """
    Turn (label, value-text) pairs into nutrition facts.

    The unit comes from the value cell when it carries one ("12oz"), then
    from the label's parentheses ("나트륨(mg)"), then from the field default.
    The first pair seen for a field wins.
    """

    builder = NutritionBuilder()
    for label, raw_value in pairs:
        field_name = match_label(label, label_mapping)
        if field_name is None or builder.has(field_name):
            continue
        value = parse_numeric_value(raw_value)
        if value is None:
            continue
        _, cell_unit = split_value_and_unit(raw_value)
        unit = cell_unit or unit_from_label(label) or DEFAULT_UNITS[field_name]
        if field_name == "serving_size":
            value, unit = normalize_serving_size(value, unit)
        builder.set(field_name, value, unit)
    return builder.build()


async def _text(element: ElementHandle) -> str:
    return (await element.text_content() or "").strip()


async def _cell_texts(row: ElementHandle, selector: str) -> list[str]:
    return [await _text(cell) for cell in await row.query_selector_all(selector)]


async def extract_from_dl(
    container: ElementHandle,
    *,
    dl_selector: str = "dl",
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS,
    value_first: bool = False,
) -> Nutritions | None:
    """
    Read dt/dd pairs. With `value_first` the value sits in dt and the label in dd.
    """

    pairs: list[tuple[str, str]] = []
    for definition_list in await container.query_selector_all(dl_selector):
        terms = await _cell_texts(definition_list, "dt")
        details = await _cell_texts(definition_list, "dd")
        for term, detail in zip(terms, details):
            pairs.append((detail, term) if value_first else (term, detail))
    return build_from_pairs(pairs, label_mapping=label_mapping)


async def extract_from_table(
    container: ElementHandle,
    *,
    table_selector: str = "table",
    header_row: int = 0,
    data_row: int = 1,
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS,
) -> Nutritions | None:
    """
    Zip one header row with one data row by column index.
    """

    table = await container.query_selector(table_selector)
    if table is None:
        return None
    rows = await table.query_selector_all("tr")
    if len(rows) <= max(header_row, data_row):
        return None
    headers = await _cell_texts(rows[header_row], "th, td")
    values = await _cell_texts(rows[data_row], "td")
    return build_from_pairs(zip(headers, values), label_mapping=label_mapping)


def _value_start(row: Sequence[str]) -> int:
    # Leading non-numeric cells are row labels ("아이스 L"); placeholders are values.
    for index, cell in enumerate(row):
        if is_numeric_cell(cell) or is_placeholder(cell):
            return index
    return len(row)


def score_row(row: Sequence[str]) -> int:
    """Count the value cells of a row that parse as numbers."""
    return sum(1 for cell in row[_value_start(row):] if parse_numeric_value(cell) is not None)


def select_best_row(rows: Sequence[Sequence[str]]) -> int | None:
    """
    Pick the row with the most numeric value cells.

    Ties go to the earliest row; a table where every row scores zero has no
    best row.
    """

    best_index: int | None = None
    best_score = 0
    for index, row in enumerate(rows):
        score = score_row(row)
        if score > best_score:
            best_index = index
            best_score = score
    return best_index


def extract_from_best_row(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS,
) -> Nutritions | None:
    """
    Align headers to the value cells of the best row, right to left, so
    label columns at the start of the header row are skipped.
    """

    best_index = select_best_row(rows)
    if best_index is None:
        return None
    row = rows[best_index]
    values = list(row[_value_start(row):])
    aligned_headers = list(headers[-len(values):]) if values and len(headers) >= len(values) else list(headers)
    return build_from_pairs(zip(aligned_headers, values), label_mapping=label_mapping)


async def extract_best_row_from_table(
    container: ElementHandle,
    *,
    table_selector: str = "table",
    label_mapping: LabelMapping = DEFAULT_KOREAN_LABELS,
) -> Nutritions | None:
    table = await container.query_selector(table_selector)
    if table is None:
        return None

    headers = await _cell_texts(table, "thead th")
    body_rows = await table.query_selector_all("tbody tr")
    if not headers:
        all_rows = await table.query_selector_all("tr")
        if not all_rows:
            return None
        headers = await _cell_texts(all_rows[0], "th, td")
        body_rows = all_rows[1:]

    rows = [await _cell_texts(row, "td") for row in body_rows]
    return extract_from_best_row(headers, rows, label_mapping=label_mapping)
