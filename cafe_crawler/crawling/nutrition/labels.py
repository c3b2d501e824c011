"""
Nutrition label mappings.
"""

from __future__ import annotations

import re

LabelMapping = tuple[tuple[str, tuple[str, ...]], ...]

# Order matters: specific labels are matched before the generic ones they contain.
DEFAULT_KOREAN_LABELS: LabelMapping = (
    ("serving_size", ("1회 제공량", "제공량", "내용량", "용량", "serving size")),
    ("calories", ("열량", "칼로리", "kcal", "calories")),
    ("saturated_fat", ("포화지방", "포화 지방", "saturated fat")),
    ("trans_fat", ("트랜스지방", "트랜스 지방", "trans fat")),
    ("fat", ("지방", "fat")),
    ("carbohydrates", ("탄수화물", "carbohydrate")),
    ("sugar", ("당류", "당", "sugar")),
    ("natrium", ("나트륨", "sodium")),
    ("protein", ("단백질", "protein")),
    ("cholesterol", ("콜레스테롤", "cholesterol")),
    ("caffeine", ("카페인", "caffeine")),
)

_WHITESPACE = re.compile(r"\s+")


def _squash(text: str) -> str:
    return _WHITESPACE.sub("", text).lower()


def match_label(label: str | None, mapping: LabelMapping = DEFAULT_KOREAN_LABELS) -> str | None:
    """
    Map a site label to a canonical nutrition field by keyword containment.
    """

    if not label:
        return None
    squashed = _squash(label)
    if not squashed:
        return None
    for field_name, keywords in mapping:
        for keyword in keywords:
            if _squash(keyword) in squashed:
                return field_name
    return None
