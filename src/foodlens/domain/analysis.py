"""Models for nutrition analysis results."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

UNKNOWN_FOOD = "unknown"


class NutritionFactsPerPortion(BaseModel):
    """Nutrition estimate as returned by the model."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    calories: str = ""
    protein: str = ""
    carbs: str = ""
    fat: str = ""
    fiber: str = ""
    sugar: str = ""
    sodium: str = ""
    cholesterol: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class FoodAnalysis(BaseModel):
    """Structured nutrition estimate for one photographed meal."""

    model_config = ConfigDict(
        coerce_numbers_to_str=True, extra="ignore", populate_by_name=True
    )

    identified_food: str = Field(default=UNKNOWN_FOOD, alias="identifiedFood")
    portion_size: str = Field(default="", alias="portionSize")
    recognized_serving_size: str = Field(default="", alias="recognizedServingSize")
    nutrition_facts_per_portion: NutritionFactsPerPortion = Field(
        default_factory=NutritionFactsPerPortion, alias="nutritionFactsPerPortion"
    )
    additional_notes: list[str] = Field(default_factory=list, alias="additionalNotes")

    @field_validator("identified_food", mode="before")
    @classmethod
    def _normalize_unknown(cls, value: object) -> object:
        if value is None:
            return UNKNOWN_FOOD
        if isinstance(value, str):
            cleaned = value.strip()
            if not cleaned or cleaned.lower() == UNKNOWN_FOOD:
                return UNKNOWN_FOOD
            return cleaned
        return value

    @field_validator("portion_size", "recognized_serving_size", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("additional_notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]
        return value

    @model_validator(mode="after")
    def _require_portion_for_known_food(self) -> "FoodAnalysis":
        if self.is_unknown:
            return self
        missing = [
            name
            for name, value in (
                ("portionSize", self.portion_size),
                ("recognizedServingSize", self.recognized_serving_size),
            )
            if not value.strip()
        ]
        if missing:
            raise ValueError(f"{self.identified_food} is missing {', '.join(missing)}")
        return self

    @property
    def is_unknown(self) -> bool:
        """Return true when the model could not identify any food."""
        return self.identified_food == UNKNOWN_FOOD


class AnalysisEnvelope(BaseModel):
    """Top-level JSON object the model is asked to produce."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    food_analysis: FoodAnalysis = Field(alias="foodAnalysis")


class InlineImage(BaseModel):
    """Inline image payload: base64 data plus MIME type."""

    model_config = ConfigDict(populate_by_name=True)

    data: str = ""
    mime_type: str | None = Field(default=None, alias="mimeType")
