"""
Nutrition extraction: numeric parsing, label mapping and extraction modes.
"""

from cafe_crawler.crawling.nutrition.extractor import (
    NutritionExtractionMethod,
    NutritionExtractor,
    NutritionExtractorOptions,
    create_nutrition_extractor,
)
from cafe_crawler.crawling.nutrition.labels import DEFAULT_KOREAN_LABELS, LabelMapping, match_label
from cafe_crawler.crawling.nutrition.parsing import (
    OUNCE_TO_ML,
    normalize_serving_size,
    parse_numeric_value,
    unit_from_label,
)
from cafe_crawler.crawling.nutrition.structured import (
    build_from_pairs,
    extract_best_row_from_table,
    extract_from_best_row,
    extract_from_dl,
    extract_from_table,
    select_best_row,
)
from cafe_crawler.crawling.nutrition.text import extract_from_text

__all__ = [
    "DEFAULT_KOREAN_LABELS",
    "OUNCE_TO_ML",
    "LabelMapping",
    "NutritionExtractionMethod",
    "NutritionExtractor",
    "NutritionExtractorOptions",
    "build_from_pairs",
    "create_nutrition_extractor",
    "extract_best_row_from_table",
    "extract_from_best_row",
    "extract_from_dl",
    "extract_from_table",
    "extract_from_text",
    "match_label",
    "normalize_serving_size",
    "parse_numeric_value",
    "select_best_row",
    "unit_from_label",
]
