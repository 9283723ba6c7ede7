"""Glycemic index lookup and glycemic load calculation.

Lookup cascade: exact name, alias, fuzzy word overlap, then a category
default inferred from the name or the nutrition profile.
GL = GI x net carbs per serving / 100.
"""

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_pipeline.domain.glycemic import (
    GIBand,
    GIConfidence,
    GIMatchSource,
    GIReferenceEntry,
    GIResult,
    MealGI,
    MealGL,
)
from nutrition_pipeline.domain.nutrition import NutritionRecord
from nutrition_pipeline.services.gi_reference import (
    CATEGORY_DEFAULTS,
    CATEGORY_KEYWORDS,
    GI_REFERENCE,
)

GI_LOW_MAX = 55
GI_MEDIUM_MAX = 69
GL_LOW_MAX = 10
GL_MEDIUM_MAX = 19
FUZZY_MATCH_THRESHOLD = 0.5
MIN_RELEVANT_CARBS = 5.0

BASE_CONFIDENCE: dict[GIConfidence, float] = {
    GIConfidence.HIGH: 0.95,
    GIConfidence.MEDIUM: 0.80,
    GIConfidence.LOW: 0.65,
}
SOURCE_MULTIPLIER: dict[GIMatchSource, float] = {
    GIMatchSource.EXACT: 1.0,
    GIMatchSource.FUZZY: 0.85,
    GIMatchSource.CATEGORY: 0.60,
    GIMatchSource.DEFAULT: 0.40,
}

_MODIFIERS = re.compile(r"\b(raw|fresh|cooked|boiled|baked|grilled|roasted|steamed|organic)\b")
_WHITESPACE = re.compile(r"\s+")

_GI_TEXT = {
    GIBand.LOW: "Low GI foods cause a slower, steadier rise in blood sugar",
    GIBand.MEDIUM: "Medium GI foods cause a moderate rise in blood sugar",
    GIBand.HIGH: "High GI foods cause a rapid spike in blood sugar",
}
_GL_TEXT = {
    GIBand.LOW: "This serving has a low glycemic load",
    GIBand.MEDIUM: "This serving has a moderate glycemic load",
    GIBand.HIGH: "This serving has a high glycemic load",
}


@dataclass(frozen=True)
class MealGIItem:
    """Contribution of one item to a meal's GI and GL."""

    gi: int
    gl: int
    carbs: float


def normalize_food_name(name: str) -> str:
    """Lowercase a name and drop cooking modifiers that do not change GI."""
    normalized = _WHITESPACE.sub(" ", name.lower().strip())
    normalized = _MODIFIERS.sub("", normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def gi_band(gi: int) -> GIBand:
    if gi <= GI_LOW_MAX:
        return GIBand.LOW
    if gi <= GI_MEDIUM_MAX:
        return GIBand.MEDIUM
    return GIBand.HIGH


def gl_band(gl: int) -> GIBand:
    if gl <= GL_LOW_MAX:
        return GIBand.LOW
    if gl <= GL_MEDIUM_MAX:
        return GIBand.MEDIUM
    return GIBand.HIGH


def net_carbs(nutrition: NutritionRecord) -> float:
    """Return available carbohydrate: carbs minus fiber, never negative."""
    return max(0.0, nutrition.carbs - nutrition.fiber)


def glycemic_load(gi: int, nutrition: NutritionRecord) -> int:
    return _round_half_up(gi * net_carbs(nutrition) / 100)


def has_relevant_gi(nutrition: NutritionRecord) -> bool:
    """Foods under 5 g of carbs per serving have no meaningful GI."""
    return nutrition.carbs >= MIN_RELEVANT_CARBS


def lookup(
    food_name: str, nutrition: NutritionRecord, serving_grams: float | None = None
) -> GIResult:
    """Return GI, GL and bands for one serving of a food."""
    del serving_grams  # GL uses the carbs already scaled to the serving
    normalized = normalize_food_name(food_name)

    entry = GI_REFERENCE.get(normalized) or _find_by_alias(normalized)
    source = GIMatchSource.EXACT
    if entry is None:
        entry = _find_fuzzy(normalized)
        source = GIMatchSource.FUZZY
    if entry is None:
        category = infer_category(normalized, nutrition)
        entry = GIReferenceEntry(
            name=category,
            gi=CATEGORY_DEFAULTS[category],
            serving_grams=100,
            carbs_per_serving=nutrition.carbs,
            confidence=GIConfidence.LOW,
            category=category,
        )
        source = GIMatchSource.CATEGORY

    gl = glycemic_load(entry.gi, nutrition)
    return GIResult(
        gi=entry.gi,
        gl=gl,
        gi_band=gi_band(entry.gi),
        gl_band=gl_band(gl),
        source=source,
        confidence=BASE_CONFIDENCE[entry.confidence] * SOURCE_MULTIPLIER[source],
        matched_food=entry.name if source is not GIMatchSource.CATEGORY else None,
        category=entry.category,
    )


def batch_lookup(
    foods: Iterable[tuple[str, NutritionRecord, float | None]],
) -> dict[str, GIResult]:
    """Look up several foods, keyed by the name given."""
    return {name: lookup(name, nutrition, grams) for name, nutrition, grams in foods}


def infer_category(name: str, nutrition: NutritionRecord) -> str:
    """Guess a GI category from name keywords, then from the nutrition profile."""
    lowered = name.lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    if nutrition.protein > 15 and nutrition.carbs < 10:
        return "other"
    if nutrition.carbs > 40:
        return "grain"
    if nutrition.sugar > 15 and nutrition.carbs > 20:
        return "fruit"
    if nutrition.fiber > 5 and nutrition.carbs < 15:
        return "vegetable"
    return "other"


def explain(result: GIResult) -> str:
    """Return a two-sentence description of the GI and GL bands."""
    return f"{_GI_TEXT[result.gi_band]}. {_GL_TEXT[result.gl_band]}."


def meal_gi(items: Iterable[MealGIItem]) -> MealGI:
    """Carbohydrate-weighted GI of a meal; a meal without carbs is low."""
    items = list(items)
    total_carbs = sum(item.carbs for item in items)
    if total_carbs == 0:
        return MealGI(gi=0, gi_band=GIBand.LOW)
    weighted = sum(item.gi * item.carbs for item in items) / total_carbs
    gi = _round_half_up(weighted)
    return MealGI(gi=gi, gi_band=gi_band(gi))


def meal_gl(items: Iterable[MealGIItem]) -> MealGL:
    total = sum(item.gl for item in items)
    return MealGL(gl=total, gl_band=gl_band(total))


def _find_by_alias(normalized: str) -> GIReferenceEntry | None:
    for entry in GI_REFERENCE.values():
        for alias in entry.aliases:
            alias = alias.lower()
            if alias == normalized or alias in normalized:
                return entry
    return None


def _overlap(query_words: list[str], candidate: str) -> float:
    candidate_words = candidate.lower().split()
    matching = sum(
        1
        for word in query_words
        if any(cw == word or word in cw or cw in word for cw in candidate_words)
    )
    return matching / max(len(query_words), len(candidate_words))


def _find_fuzzy(normalized: str) -> GIReferenceEntry | None:
    query_words = normalized.split()
    if not query_words:
        return None
    best: GIReferenceEntry | None = None
    best_score = 0.0
    for name, entry in GI_REFERENCE.items():
        score = max(
            [_overlap(query_words, name)]
            + [_overlap(query_words, alias) for alias in entry.aliases]
        )
        if score > FUZZY_MATCH_THRESHOLD and score > best_score:
            best, best_score = entry, score
    return best


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
