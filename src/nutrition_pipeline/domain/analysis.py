"""Assembled per-item, per-meal and comparison results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from nutrition_pipeline.domain.glycemic import GIResult
from nutrition_pipeline.domain.grading import GradingResult, WellnessFocus
from nutrition_pipeline.domain.nutrition import (
    FoodType,
    NutritionRecord,
    ResolutionSource,
)


class FoodInsight(BaseModel):
    """Prose insight produced outside the deterministic pipeline."""

    summary: str
    focus_explanation: str
    tips: list[str] = Field(default_factory=list, max_length=3)
    considerations: list[str] = Field(default_factory=list, max_length=2)


@dataclass
class AnalyzedFood:
    """Resolved, GI-annotated and graded food item."""

    id: str
    name: str
    quantity: float
    unit: str
    estimated_grams: float
    food_type: FoodType
    nutrition: NutritionRecord
    nutrition_source: ResolutionSource
    nutrition_confidence: float
    grading: GradingResult
    gi: GIResult | None = None
    restaurant_name: str | None = None
    brand_name: str | None = None
    insight: FoodInsight | None = None

    def to_dict(self) -> dict[str, object]:
        nutrition: dict[str, object] = dict(self.nutrition.to_dict())
        if self.gi is not None:
            nutrition.update(
                gi=self.gi.gi,
                gl=self.gi.gl,
                gi_band=self.gi.gi_band.value,
                gl_band=self.gi.gl_band.value,
            )
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "estimated_grams": self.estimated_grams,
            "food_type": self.food_type.value,
            "nutrition": nutrition,
            "nutrition_source": self.nutrition_source.value,
            "nutrition_confidence": self.nutrition_confidence,
            "gi": self.gi.to_dict() if self.gi else None,
            "grading": self.grading.to_dict(),
            "restaurant_name": self.restaurant_name,
            "brand_name": self.brand_name,
            "insight": self.insight.model_dump() if self.insight else None,
        }


@dataclass
class MealAnalysis:
    """All analyzed items of a meal plus totals."""

    items: list[AnalyzedFood]
    totals: NutritionRecord
    focus: WellnessFocus
    analyzed_at: datetime
    meal_type: str = "unknown"
    total_gi: GIResult | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "items": [item.to_dict() for item in self.items],
            "totals": self.totals.to_dict(),
            "total_gi": self.total_gi.to_dict() if self.total_gi else None,
            "focus": self.focus.value,
            "meal_type": self.meal_type,
            "analyzed_at": self.analyzed_at.isoformat(),
        }


class ComparisonMargin(str, Enum):
    DECISIVE = "decisive"
    MODERATE = "moderate"
    SLIGHT = "slight"
    TIE = "tie"


@dataclass(frozen=True)
class ComparisonWinner:
    food_id: str
    food_name: str
    margin: ComparisonMargin
    score: int

    def to_dict(self) -> dict[str, object]:
        return {
            "food_id": self.food_id,
            "food_name": self.food_name,
            "margin": self.margin.value,
            "score": self.score,
        }


@dataclass(frozen=True)
class NutrientComparison:
    values: dict[str, float]
    leader: str


@dataclass
class ComparisonResult:
    """Deterministic comparison across two or more foods."""

    foods: list[AnalyzedFood]
    focus: WellnessFocus
    winner: ComparisonWinner
    focus_winners: dict[WellnessFocus, ComparisonWinner]
    nutrient_comparison: dict[str, NutrientComparison] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "foods": [food.to_dict() for food in self.foods],
            "focus": self.focus.value,
            "winner": self.winner.to_dict(),
            "focus_winners": {
                focus.value: winner.to_dict()
                for focus, winner in self.focus_winners.items()
            },
            "nutrient_comparison": {
                name: {"values": dict(entry.values), "leader": entry.leader}
                for name, entry in self.nutrient_comparison.items()
            },
        }
