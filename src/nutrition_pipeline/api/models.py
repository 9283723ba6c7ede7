"""Pydantic models for API request payloads."""

from pydantic import BaseModel, Field

from nutrition_pipeline.domain.grading import WellnessFocus
from nutrition_pipeline.domain.nutrition import FoodDescriptor


class AnalyzeRequest(BaseModel):
    """Meal analysis payload."""

    items: list[FoodDescriptor]
    focus: WellnessFocus = WellnessFocus.BALANCED
    generate_insights: bool = True
    meal_type: str = "unknown"


class CompareRequest(BaseModel):
    """Food comparison payload."""

    items: list[FoodDescriptor] = Field(min_length=2)
    focus: WellnessFocus = WellnessFocus.BALANCED


class GradeRequest(BaseModel):
    """Direct grading payload for a known nutrition record."""

    nutrition: dict[str, float]
    serving_grams: float = Field(default=100, gt=0)
    food_group: str | None = None
    is_beverage: bool = False
    food_name: str | None = None
