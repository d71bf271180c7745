"""Domain models for logged food entries."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class MealType(StrEnum):
    """Meal category a user assigns to an entry."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


@dataclass(frozen=True)
class NutritionFacts:
    """Per-portion nutrition estimate. Values are display strings."""

    calories: str = ""
    protein: str = ""
    carbs: str = ""
    fat: str = ""
    fiber: str = ""
    sugar: str = ""
    sodium: str = ""
    cholesterol: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, object] | None) -> "NutritionFacts":
        """Build facts from a stored or wire dict, ignoring unknown keys."""
        raw = raw or {}
        values = {}
        for item in fields(cls):
            value = raw.get(item.name)
            values[item.name] = "" if value is None else str(value)
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        """Return the facts as a plain dict."""
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class FoodEntry:
    """One logged meal owned by a single user."""

    id: UUID
    user_id: UUID
    created_at: datetime
    timestamp: datetime
    identified_food: str
    image: str
    portion_size: str
    recognized_serving_size: str
    nutrition: NutritionFacts
    meal_type: MealType | None = None
    notes: str | None = None
    additional_notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class FoodEntryDraft:
    """Client-supplied data for a new entry."""

    identified_food: str
    image: str
    portion_size: str
    recognized_serving_size: str
    nutrition: NutritionFacts
    meal_type: MealType | None = None
    notes: str | None = None
    additional_notes: list[str] = field(default_factory=list)
    timestamp: datetime | None = None


@dataclass(frozen=True)
class FoodEntryUpdate:
    """Partial update for an entry. ``None`` leaves a field unchanged."""

    identified_food: str | None = None
    image: str | None = None
    portion_size: str | None = None
    recognized_serving_size: str | None = None
    nutrition: NutritionFacts | None = None
    meal_type: MealType | None = None
    notes: str | None = None
    additional_notes: list[str] | None = None
    timestamp: datetime | None = None

    def is_empty(self) -> bool:
        """Return true when no field is set."""
        return all(getattr(self, item.name) is None for item in fields(self))


@dataclass(frozen=True)
class FieldMapping:
    """Names of one entry attribute on the wire and in storage."""

    attribute: str
    wire_name: str
    column: str
    writable: bool = True


FOOD_ENTRY_FIELDS: tuple[FieldMapping, ...] = (
    FieldMapping("id", "id", "id", writable=False),
    FieldMapping("user_id", "user_id", "user_id", writable=False),
    FieldMapping("created_at", "created_at", "created_at", writable=False),
    FieldMapping("timestamp", "timestamp", "timestamp"),
    FieldMapping("identified_food", "identifiedFood", "identified_food"),
    FieldMapping("image", "image", "image"),
    FieldMapping("meal_type", "mealType", "meal_type"),
    FieldMapping("notes", "notes", "notes"),
    FieldMapping("portion_size", "portionSize", "portion_size"),
    FieldMapping(
        "recognized_serving_size", "recognizedServingSize", "recognized_serving_size"
    ),
    FieldMapping(
        "nutrition", "nutritionFactsPerPortion", "nutrition_facts_per_portion"
    ),
    FieldMapping("additional_notes", "additionalNotes", "additional_notes"),
)

COLUMN_BY_ATTRIBUTE: dict[str, str] = {
    mapping.attribute: mapping.column for mapping in FOOD_ENTRY_FIELDS
}
WRITABLE_ATTRIBUTES: tuple[str, ...] = tuple(
    mapping.attribute for mapping in FOOD_ENTRY_FIELDS if mapping.writable
)
