"""
Labeled regular-expression extraction over free nutrition text.
"""

from __future__ import annotations

import re

from cafe_crawler.crawling.nutrition.parsing import (
    DEFAULT_UNITS,
    KNOWN_UNITS,
    normalize_serving_size,
    parse_numeric_value,
)
from cafe_crawler.domain.products import NutritionBuilder, Nutritions

_NUMBER = r"(\d+(?:,\d{3})*(?:\.\d+)?)"
_GAP = r"(?:\s*[(\[][^)\]]*[)\]])?\s*[:：]?[^\d\n]{0,3}?"
_UNIT = r"\s*(kcal|mg|g|ml|oz)?"


def _labeled(labels: str) -> re.Pattern[str]:
    return re.compile(rf"(?:{labels}){_GAP}{_NUMBER}{_UNIT}", re.IGNORECASE)


# Each field is tried pattern by pattern; the first match wins.
TEXT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "serving_size": (
        _labeled(r"1회\s*제공량|제공량|내용량|용량|serving\s*size"),
        re.compile(rf"{_NUMBER}\s*(ml|oz)\b", re.IGNORECASE),
    ),
    "calories": (
        _labeled(r"열량|칼로리|calories?"),
        re.compile(rf"{_NUMBER}\s*(kcal)", re.IGNORECASE),
    ),
    "saturated_fat": (_labeled(r"포화\s*지방|saturated\s*fat"),),
    "trans_fat": (_labeled(r"트랜스\s*지방|trans\s*fat"),),
    "fat": (_labeled(r"(?<!포화)(?<!포화\s)(?<!트랜스)(?<!트랜스\s)지방|(?<!saturated\s)(?<!trans\s)\bfat"),),
    "carbohydrates": (_labeled(r"탄수화물|carbohydrates?"),),
    "sugar": (_labeled(r"당류|(?<![가-힣])당(?![가-힣])|sugars?"),),
    "natrium": (_labeled(r"나트륨|sodium"),),
    "protein": (_labeled(r"단백질|protein"),),
    "cholesterol": (_labeled(r"콜레스테롤|cholesterol"),),
    "caffeine": (_labeled(r"카페인|caffeine"),),
}


def _resolve_unit(field_name: str, raw_unit: str | None) -> str:
    if raw_unit and raw_unit.lower() in KNOWN_UNITS:
        return raw_unit.lower()
    return DEFAULT_UNITS[field_name]


def extract_from_text(text: str | None) -> Nutritions | None:
    """
    Extract nutrition facts from free text such as "열량 250kcal 당류 35g".
    """

    if not text or not text.strip():
        return None

    builder = NutritionBuilder()
    for field_name, patterns in TEXT_PATTERNS.items():
        for pattern in patterns:
            match = pattern.search(text)
            if match is None:
                continue
            value = parse_numeric_value(match.group(1))
            if value is None:
                continue
            unit = _resolve_unit(field_name, match.group(2))
            if field_name == "serving_size":
                value, unit = normalize_serving_size(value, unit)
            builder.set(field_name, value, unit)
            break
    return builder.build()
