"""
cafe_crawler/domain/products.py

Normalized product and nutrition records produced by every crawler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Canonical nutrition fields in output order, paired with their JSON key.
NUTRITION_FIELDS: tuple[tuple[str, str], ...] = (
    ("serving_size", "servingSize"),
    ("calories", "calories"),
    ("carbohydrates", "carbohydrates"),
    ("sugar", "sugar"),
    ("protein", "protein"),
    ("fat", "fat"),
    ("trans_fat", "transFat"),
    ("saturated_fat", "saturatedFat"),
    ("natrium", "natrium"),
    ("cholesterol", "cholesterol"),
    ("caffeine", "caffeine"),
)

_FIELD_NAMES = frozenset(name for name, _ in NUTRITION_FIELDS)


@dataclass(frozen=True)
class Nutritions:
    """
    Nutrition facts for one beverage.

    Every value is paired with a unit; a value without a unit (or the
    reverse) is rejected at construction time.
    """

    serving_size: float | None = None
    serving_size_unit: str | None = None
    calories: float | None = None
    calories_unit: str | None = None
    carbohydrates: float | None = None
    carbohydrates_unit: str | None = None
    sugar: float | None = None
    sugar_unit: str | None = None
    protein: float | None = None
    protein_unit: str | None = None
    fat: float | None = None
    fat_unit: str | None = None
    trans_fat: float | None = None
    trans_fat_unit: str | None = None
    saturated_fat: float | None = None
    saturated_fat_unit: str | None = None
    natrium: float | None = None
    natrium_unit: str | None = None
    cholesterol: float | None = None
    cholesterol_unit: str | None = None
    caffeine: float | None = None
    caffeine_unit: str | None = None

    def __post_init__(self) -> None:
        for name, _ in NUTRITION_FIELDS:
            value = getattr(self, name)
            unit = getattr(self, f"{name}_unit")
            if (value is None) != (unit is None):
                raise ValueError(f"Nutrition field '{name}' must have both a value and a unit.")

    def get(self, name: str) -> tuple[float, str] | None:
        value = getattr(self, name)
        if value is None:
            return None
        return value, getattr(self, f"{name}_unit")

    def populated_fields(self) -> list[str]:
        return [name for name, _ in NUTRITION_FIELDS if getattr(self, name) is not None]

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for name, key in NUTRITION_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            payload[key] = value
            payload[f"{key}Unit"] = getattr(self, f"{name}_unit")
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Nutritions | None":
        builder = NutritionBuilder()
        for name, key in NUTRITION_FIELDS:
            builder.set(name, payload.get(key), payload.get(f"{key}Unit"))
        return builder.build()


class NutritionBuilder:
    """
    Accumulates value/unit pairs and produces a `Nutritions` or None.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def set(self, name: str, value: float | None, unit: str | None) -> bool:
        if name not in _FIELD_NAMES:
            raise KeyError(f"Unknown nutrition field: {name}")
        if value is None or not unit:
            return False
        self._values[name] = value
        self._values[f"{name}_unit"] = unit
        return True

    def has(self, name: str) -> bool:
        return name in self._values

    def merge(self, other: Nutritions | None) -> None:
        """Fill fields that are still empty from another record."""
        if other is None:
            return
        for name in other.populated_fields():
            if not self.has(name):
                value, unit = other.get(name)  # type: ignore[misc]
                self.set(name, value, unit)

    def build(self) -> Nutritions | None:
        if not self._values:
            return None
        return Nutritions(**self._values)


@dataclass(frozen=True)
class Product:
    """
    One beverage scraped from a café menu.
    """

    name: str
    external_category: str
    external_id: str
    external_url: str
    external_image_url: str = ""
    name_en: str | None = None
    description: str | None = None
    price: float | None = None
    category: str | None = None
    nutritions: Nutritions | None = None
    image_storage_id: str | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Product name must be non-empty.")
        if not self.external_id:
            raise ValueError("Product external_id must be non-empty.")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "nameEn": self.name_en,
            "description": self.description,
            "price": self.price,
            "externalImageUrl": self.external_image_url,
            "category": self.category,
            "externalCategory": self.external_category,
            "externalId": self.external_id,
            "externalUrl": self.external_url,
            "nutritions": self.nutritions.to_dict() if self.nutritions else None,
        }
        if self.image_storage_id:
            payload["imageStorageId"] = self.image_storage_id
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Product":
        raw_nutritions = payload.get("nutritions")
        return cls(
            name=str(payload.get("name", "")),
            name_en=payload.get("nameEn"),
            description=payload.get("description"),
            price=payload.get("price"),
            external_image_url=str(payload.get("externalImageUrl") or ""),
            category=payload.get("category"),
            external_category=str(payload.get("externalCategory") or ""),
            external_id=str(payload.get("externalId", "")),
            external_url=str(payload.get("externalUrl") or ""),
            nutritions=Nutritions.from_dict(raw_nutritions) if isinstance(raw_nutritions, dict) else None,
            image_storage_id=payload.get("imageStorageId"),
        )

