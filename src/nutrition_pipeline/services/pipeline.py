"""Resolve, GI-annotate, grade and explain foods and meals."""

import asyncio
import logging
import math
import re
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from nutrition_pipeline.domain.analysis import (
    AnalyzedFood,
    ComparisonMargin,
    ComparisonResult,
    ComparisonWinner,
    FoodInsight,
    MealAnalysis,
    NutrientComparison,
)
from nutrition_pipeline.domain.glycemic import GIMatchSource, GIResult
from nutrition_pipeline.domain.grading import WellnessFocus
from nutrition_pipeline.domain.nutrition import (
    FoodDescriptor,
    FoodType,
    NutritionRecord,
    ResolutionResult,
)
from nutrition_pipeline.services import glycemic, grading
from nutrition_pipeline.services.insights import InsightGenerator, InsightRequest
from nutrition_pipeline.services.resolver import NutritionResolver

MEAL_GI_CONFIDENCE = 0.8
DEFAULT_INSIGHT_CONCURRENCY = 3

COMPARED_NUTRIENTS = (
    "calories",
    "protein",
    "carbs",
    "fat",
    "fiber",
    "sugar",
    "sodium",
    "saturated_fat",
    "trans_fat",
    "monounsaturated_fat",
    "polyunsaturated_fat",
    "cholesterol",
    "potassium",
    "calcium",
    "iron",
    "magnesium",
    "zinc",
    "phosphorus",
    "vitamin_a",
    "vitamin_d",
    "vitamin_e",
    "vitamin_k",
    "vitamin_c",
    "thiamin",
    "riboflavin",
    "niacin",
    "vitamin_b6",
    "folate",
    "vitamin_b12",
)
LOWER_IS_BETTER = frozenset(
    {"calories", "sodium", "sugar", "saturated_fat", "trans_fat", "cholesterol"}
)

_BEVERAGE = re.compile(r"\b(juice|milk|tea|coffee|drink|soda)s?\b", re.IGNORECASE)

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class NutritionPipeline:
    """Turns food descriptors into graded, optionally explained results."""

    resolver: NutritionResolver
    insight_generator: InsightGenerator | None = None
    insight_concurrency: int = DEFAULT_INSIGHT_CONCURRENCY
    clock: Callable[[], datetime] = _utc_now
    id_factory: Callable[[], str] = field(default=_new_id)

    async def analyze_food(
        self,
        descriptor: FoodDescriptor,
        focus: WellnessFocus = WellnessFocus.BALANCED,
        generate_insights: bool = True,
    ) -> AnalyzedFood:
        """Analyze a single food."""
        resolution = await self.resolver.resolve(descriptor)
        item = self._process(descriptor, resolution)
        if generate_insights:
            await self._attach_insights([item], focus)
        return item

    async def analyze_meal(
        self,
        descriptors: Sequence[FoodDescriptor],
        focus: WellnessFocus = WellnessFocus.BALANCED,
        generate_insights: bool = True,
        meal_type: str = "unknown",
    ) -> MealAnalysis:
        """Analyze every item of a meal and total it."""
        if not descriptors:
            return MealAnalysis(
                items=[],
                totals=NutritionRecord.empty(),
                focus=focus,
                analyzed_at=self.clock(),
                meal_type=meal_type,
            )

        resolutions = await self.resolver.batch_resolve(descriptors)
        items: list[AnalyzedFood] = []
        for descriptor in descriptors:
            resolution = resolutions.get(descriptor.name)
            # Results are keyed by name; a repeated name at another size needs its own.
            if resolution is None or not math.isclose(
                resolution.serving_grams, descriptor.estimated_grams
            ):
                resolution = await self.resolver.resolve(descriptor)
            items.append(self._process(descriptor, resolution))

        if generate_insights:
            await self._attach_insights(items, focus)

        return MealAnalysis(
            items=items,
            totals=NutritionRecord.total(item.nutrition for item in items),
            focus=focus,
            analyzed_at=self.clock(),
            meal_type=meal_type,
            total_gi=meal_glycemic_profile(items),
        )

    async def compare(
        self,
        descriptors: Sequence[FoodDescriptor],
        focus: WellnessFocus = WellnessFocus.BALANCED,
    ) -> ComparisonResult:
        """Analyze and compare two or more foods without insights."""
        if len(descriptors) < 2:
            raise ValueError("Need at least 2 foods to compare")
        meal = await self.analyze_meal(descriptors, focus, generate_insights=False)
        return compare_foods(meal.items, focus)

    def _process(self, descriptor: FoodDescriptor, resolution: ResolutionResult) -> AnalyzedFood:
        nutrition = resolution.nutrition
        gi_result = None
        if glycemic.has_relevant_gi(nutrition):
            gi_result = glycemic.lookup(descriptor.name, nutrition, descriptor.estimated_grams)
        is_beverage = descriptor.food_type is FoodType.WHOLE_FOOD and bool(
            _BEVERAGE.search(descriptor.name)
        )
        graded = grading.grade(
            nutrition,
            descriptor.estimated_grams,
            food_group=gi_result.category if gi_result else None,
            is_beverage=is_beverage,
            gi_result=gi_result,
        )
        return AnalyzedFood(
            id=self.id_factory(),
            name=descriptor.name,
            quantity=descriptor.quantity,
            unit=descriptor.unit,
            estimated_grams=descriptor.estimated_grams,
            food_type=descriptor.food_type,
            nutrition=nutrition,
            nutrition_source=resolution.source,
            nutrition_confidence=resolution.confidence,
            grading=graded,
            gi=gi_result,
            restaurant_name=descriptor.restaurant_name,
            brand_name=descriptor.brand_name,
        )

    async def _attach_insights(self, items: list[AnalyzedFood], focus: WellnessFocus) -> None:
        if self.insight_generator is None:
            return
        semaphore = asyncio.Semaphore(max(1, self.insight_concurrency))

        async def run(item: AnalyzedFood) -> None:
            async with semaphore:
                item.insight = await self._insight_for(item, focus)

        await asyncio.gather(*(run(item) for item in items))

    async def _insight_for(self, item: AnalyzedFood, focus: WellnessFocus) -> FoodInsight | None:
        request = InsightRequest(
            food_name=item.name,
            serving_description=f"{item.quantity:g} {item.unit}",
            nutrition=item.nutrition,
            grading=item.grading,
            focus=focus,
            gi=item.gi,
        )
        try:
            return await self.insight_generator.generate(request)
        except Exception:
            _logger.exception("Insight generation failed: food=%s", item.name)
            return None


def meal_glycemic_profile(items: Sequence[AnalyzedFood]) -> GIResult | None:
    """Combine item GI/GL over the items where GI is meaningful."""
    contributing = [
        glycemic.MealGIItem(gi=item.gi.gi, gl=item.gi.gl, carbs=item.nutrition.carbs)
        for item in items
        if item.gi is not None and glycemic.has_relevant_gi(item.nutrition)
    ]
    if not contributing:
        return None
    meal_gi = glycemic.meal_gi(contributing)
    meal_gl = glycemic.meal_gl(contributing)
    return GIResult(
        gi=meal_gi.gi,
        gl=meal_gl.gl,
        gi_band=meal_gi.gi_band,
        gl_band=meal_gl.gl_band,
        source=GIMatchSource.EXACT,
        confidence=MEAL_GI_CONFIDENCE,
    )


def compare_foods(
    foods: Sequence[AnalyzedFood], focus: WellnessFocus = WellnessFocus.BALANCED
) -> ComparisonResult:
    """Pick deterministic per-focus winners and per-nutrient leaders."""
    if len(foods) < 2:
        raise ValueError("Need at least 2 foods to compare")
    focus_winners = {each: _focus_winner(foods, each) for each in WellnessFocus}
    return ComparisonResult(
        foods=list(foods),
        focus=focus,
        winner=focus_winners[focus],
        focus_winners=focus_winners,
        nutrient_comparison={
            nutrient: _nutrient_leader(foods, nutrient) for nutrient in COMPARED_NUTRIENTS
        },
    )


def comparison_margin(score_diff: int) -> ComparisonMargin:
    if score_diff >= 25:
        return ComparisonMargin.DECISIVE
    if score_diff >= 15:
        return ComparisonMargin.MODERATE
    if score_diff >= 5:
        return ComparisonMargin.SLIGHT
    return ComparisonMargin.TIE


def _focus_winner(foods: Sequence[AnalyzedFood], focus: WellnessFocus) -> ComparisonWinner:
    ranked = sorted(foods, key=lambda food: food.grading.focus(focus).score, reverse=True)
    winner, runner_up = ranked[0], ranked[1]
    winner_score = winner.grading.focus(focus).score
    return ComparisonWinner(
        food_id=winner.id,
        food_name=winner.name,
        margin=comparison_margin(winner_score - runner_up.grading.focus(focus).score),
        score=winner_score,
    )


def _nutrient_leader(foods: Sequence[AnalyzedFood], nutrient: str) -> NutrientComparison:
    values = {food.id: getattr(food.nutrition, nutrient) for food in foods}
    pick = min if nutrient in LOWER_IS_BETTER else max
    # min/max return the first food among equal values.
    leader = pick(foods, key=lambda food: values[food.id]).id
    return NutrientComparison(values=values, leader=leader)
