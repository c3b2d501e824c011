"""
Numeric and unit parsing for nutrition cells.
"""

from __future__ import annotations

import math
import re

OUNCE_TO_ML = 29.5735

PLACEHOLDER_VALUES = frozenset({"", "-", "–", "—", "n/a", "N/A", "x"})
KNOWN_UNITS = frozenset({"kcal", "g", "mg", "mcg", "ml", "oz", "l"})

DEFAULT_UNITS: dict[str, str] = {
    "serving_size": "ml",
    "calories": "kcal",
    "carbohydrates": "g",
    "sugar": "g",
    "protein": "g",
    "fat": "g",
    "trans_fat": "g",
    "saturated_fat": "g",
    "natrium": "mg",
    "cholesterol": "mg",
    "caffeine": "mg",
}

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")
_NUMERIC_CELL = re.compile(r"^\d*\.?\d+$")
_VALUE_WITH_UNIT = re.compile(r"([+-]?\d+(?:\.\d+)?)\s*([A-Za-z]+)?")
_LABEL_UNIT = re.compile(r"[(\[]\s*([^)\]]+?)\s*[)\]]")


def _clean(raw: str) -> str:
    return raw.strip().replace(",", "")


def parse_numeric_value(raw: object) -> float | None:
    """
    Parse the leading decimal number of a cell.

    Empty, whitespace-only and placeholder cells ("-") yield None, never zero.
    Thousands separators are ignored; trailing units are allowed ("250kcal").
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw) if math.isfinite(raw) else None

    text = _clean(str(raw)).strip("()[]").strip()
    if text in PLACEHOLDER_VALUES:
        return None
    match = _LEADING_NUMBER.match(text)
    if match is None:
        return None
    value = float(match.group())
    return value if math.isfinite(value) else None


def is_placeholder(raw: str | None) -> bool:
    return raw is None or raw.strip() in PLACEHOLDER_VALUES


def is_numeric_cell(raw: str | None) -> bool:
    if raw is None:
        return False
    return bool(_NUMERIC_CELL.match(_clean(raw)))


def unit_from_label(label: str | None) -> str | None:
    """
    Return the unit written in parentheses inside a label, e.g. "나트륨(mg)".
    """

    if not label:
        return None
    match = _LABEL_UNIT.search(label)
    if match is None:
        return None
    unit = match.group(1).strip().lower()
    return unit or None


def split_value_and_unit(raw: str | None) -> tuple[float | None, str | None]:
    """
    Split a cell like "12oz" or "355 ml" into value and recognised unit.
    """

    if raw is None or is_placeholder(raw):
        return None, None
    match = _VALUE_WITH_UNIT.search(_clean(raw))
    if match is None:
        return None, None
    value = parse_numeric_value(match.group(1))
    unit = (match.group(2) or "").lower() or None
    if unit not in KNOWN_UNITS:
        unit = None
    return value, unit


def normalize_serving_size(value: float | None, unit: str | None) -> tuple[float | None, str | None]:
    """
    Convert ounces to millilitres and lowercase unit spellings such as "mL".
    """

    if value is None or unit is None:
        return value, unit
    normalized_unit = unit.strip().lower()
    if normalized_unit in {"oz", "fl oz", "floz"}:
        return value * OUNCE_TO_ML, "ml"
    return value, normalized_unit
