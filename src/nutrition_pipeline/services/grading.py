"""Deterministic food grading.

Every grade here is a pure function of a nutrition record: a Nutri-Score
style overall grade, ten threshold-based wellness focus grades, a satiety
score and a simplified dietary inflammatory index. Records carry no omega-3
or water values, so rubrics that use them fall back to their neutral scores.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass, replace

from nutrition_pipeline.domain.glycemic import GIBand, GIResult
from nutrition_pipeline.domain.grading import (
    FocusGrade,
    Grade,
    GradingResult,
    InflammatoryCategory,
    InflammatoryResult,
    OverallGrade,
    SatietyCategory,
    SatietyResult,
    WellnessFocus,
)
from nutrition_pipeline.domain.nutrition import NutritionRecord

GRADE_THRESHOLDS: tuple[tuple[int, Grade], ...] = (
    (85, Grade.A),
    (70, Grade.B),
    (55, Grade.C),
    (40, Grade.D),
)
MIN_GI_CONFIDENCE = 0.6
WEIGHT_GI_FACTOR = 0.6
ENERGY_GI_FACTOR = 0.4
MAX_SUMMARY_ITEMS = 5
DEFAULT_SERVING_GRAMS = 100.0

# Absent omega-3 scores as "unknown" rather than zero.
_UNKNOWN_OMEGA3_SCORE = 40
_DEFAULT_WATER_PER_100G = 50.0

_BEVERAGE_ENERGY_KJ = (0, 30, 60, 90, 120, 150, 180, 210, 240, 270)
_FOOD_ENERGY_KJ = (335, 670, 1005, 1340, 1675, 2010, 2345, 2680, 3015, 3350)
_BEVERAGE_SUGAR = (0, 1.5, 3, 4.5, 6, 7.5, 9, 10.5, 12, 13.5)
_FOOD_SUGAR = (4.5, 9, 13.5, 18, 22.5, 27, 31, 36, 40, 45)
_SATURATED_FAT = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10)
_SODIUM_MG = (90, 180, 270, 360, 450, 540, 630, 720, 810, 900)
_FIBER = (0.9, 1.9, 2.8, 3.7, 4.7)
_PROTEIN = (1.6, 3.2, 4.8, 6.4, 8.0)

_GI_INSIGHT_PREFIX = {
    GIBand.LOW: "Low GI supports stable blood sugar. ",
    GIBand.MEDIUM: "Moderate GI impact on blood sugar. ",
    GIBand.HIGH: "High GI may cause blood sugar spikes. ",
}


@dataclass(frozen=True)
class _Profile:
    nutrition: NutritionRecord
    serving_grams: float
    food_group: str
    is_beverage: bool

    def group_has(self, *words: str) -> bool:
        return any(word in self.food_group for word in words)

    def per_100g(self, value: float) -> float:
        return value / self.serving_grams * 100


def score_to_grade(score: float) -> Grade:
    """Map a 0-100 score to a letter: 85 A, 70 B, 55 C, 40 D, else F."""
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


def grade(
    nutrition: NutritionRecord,
    serving_grams: float | None = None,
    food_group: str | None = None,
    is_beverage: bool = False,
    gi_result: GIResult | None = None,
) -> GradingResult:
    """Grade one serving across every focus, with an optional GI adjustment."""
    profile = _profile(nutrition, serving_grams, food_group, is_beverage)
    focus_grades = {focus: rubric(profile) for focus, rubric in _RUBRICS.items()}

    strengths: list[str] = []
    concerns: list[str] = []
    for focus_grade in focus_grades.values():
        strengths.extend(focus_grade.pros)
        concerns.extend(focus_grade.cons)

    if gi_result is not None and gi_result.confidence >= MIN_GI_CONFIDENCE:
        focus_grades = _adjust_for_gi(focus_grades, gi_result)

    return GradingResult(
        overall=_nutri_score(profile),
        focus_grades=focus_grades,
        satiety=_satiety(profile),
        inflammatory=_inflammatory(profile),
        strengths=tuple(dict.fromkeys(strengths))[:MAX_SUMMARY_ITEMS],
        concerns=tuple(dict.fromkeys(concerns))[:MAX_SUMMARY_ITEMS],
    )


def grade_focus(
    nutrition: NutritionRecord,
    serving_grams: float | None,
    focus: WellnessFocus,
    food_group: str | None = None,
) -> FocusGrade:
    """Grade a single focus without computing the others."""
    return _RUBRICS[focus](_profile(nutrition, serving_grams, food_group, False))


def overall_grade(
    nutrition: NutritionRecord,
    serving_grams: float | None = None,
    is_beverage: bool = False,
    food_group: str | None = None,
) -> OverallGrade:
    """Return only the Nutri-Score based overall grade."""
    return _nutri_score(_profile(nutrition, serving_grams, food_group, is_beverage))


def gi_adjustment(gi: int, band: GIBand) -> int:
    """Score points for a GI value: +5..+15 low, -5..+5 medium, -5..-15 high."""
    if band is GIBand.LOW:
        return _round(15 - gi / 55 * 10)
    if band is GIBand.MEDIUM:
        return _round(5 - (gi - 55) / 14 * 10)
    return _round(-5 - (gi - 70) / 30 * 10)


def satiety(nutrition: NutritionRecord, serving_grams: float | None = None) -> SatietyResult:
    return _satiety(_profile(nutrition, serving_grams, None, False))


def inflammatory(nutrition: NutritionRecord) -> InflammatoryResult:
    return _inflammatory(_profile(nutrition, None, None, False))


def _profile(
    nutrition: NutritionRecord,
    serving_grams: float | None,
    food_group: str | None,
    is_beverage: bool,
) -> _Profile:
    return _Profile(
        nutrition=nutrition,
        serving_grams=serving_grams or DEFAULT_SERVING_GRAMS,
        food_group=(food_group or "").lower(),
        is_beverage=is_beverage,
    )


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(score: float) -> int:
    return max(0, min(100, _round(score)))


def _component(
    value: float,
    excellent: float,
    good: float,
    fair: float,
    poor: float,
    higher_is_better: bool = True,
) -> int:
    """Score one nutrient against four thresholds: 100, 80, 60, 40 or 20."""
    for threshold, points in ((excellent, 100), (good, 80), (fair, 60), (poor, 40)):
        if (value >= threshold) if higher_is_better else (value <= threshold):
            return points
    return 20


def _optional_component(
    value: float, excellent: float, good: float, fair: float, poor: float, missing: int
) -> int:
    if not value:
        return missing
    return _component(value, excellent, good, fair, poor)


def _points(value: float, thresholds: tuple[float, ...]) -> int:
    return sum(1 for threshold in thresholds if value > threshold)


def _focus(
    score: float,
    insight: str,
    pros: list[str],
    cons: list[str],
) -> FocusGrade:
    clamped = _clamp(score)
    return FocusGrade(
        grade=score_to_grade(clamped),
        score=clamped,
        insight=insight,
        pros=tuple(pros),
        cons=tuple(cons),
    )


def _tiered(score: float, texts: tuple[str, ...], tiers: tuple[int, ...] = (85, 70, 55)) -> str:
    for tier, text in zip(tiers, texts, strict=False):
        if score >= tier:
            return text
    return texts[-1]


def _grade_balanced(p: _Profile) -> FocusGrade:
    n = p.nutrition
    score = _round(
        _component(n.protein, 20, 15, 10, 5) * 0.25
        + _component(n.fiber, 8, 5, 3, 1) * 0.25
        + _component(n.saturated_fat, 2, 4, 6, 10, higher_is_better=False) * 0.20
        + _component(n.sodium, 300, 500, 700, 1000, higher_is_better=False) * 0.15
        + _component(n.sugar, 5, 10, 15, 25, higher_is_better=False) * 0.15
    )
    pros, cons = [], []
    if n.protein >= 15:
        pros.append("Good protein content")
    if n.fiber >= 5:
        pros.append("Good fiber source")
    if n.saturated_fat <= 3:
        pros.append("Low saturated fat")
    if n.saturated_fat > 6:
        cons.append("High in saturated fat")
    if n.sodium > 700:
        cons.append("High sodium")
    if n.sugar > 15:
        cons.append("High sugar content")
    if n.fiber < 2:
        cons.append("Low fiber")
    insight = _tiered(
        score,
        (
            "Nutrient-dense with balanced macros and minimal negatives.",
            "Good nutritional profile with minor areas for improvement.",
            "Moderate nutrition - consider balancing with healthier options.",
            "Several nutritional concerns - best enjoyed occasionally.",
            "Low nutritional value relative to calories.",
        ),
        tiers=(85, 70, 55, 40),
    )
    return _focus(score, insight, pros, cons)


def _grade_muscle_building(p: _Profile) -> FocusGrade:
    n = p.nutrition
    complete_protein = p.group_has("meat", "fish", "egg", "dairy", "legume")
    density = n.protein / n.calories * 100 if n.calories > 0 else 0.0
    score = _round(
        _component(n.protein, 30, 20, 12, 6) * 0.60
        + (10 if complete_protein else 0)
        + _component(density, 15, 10, 5, 2) * 0.20
        + (80 if 15 <= n.carbs <= 60 else 60) * 0.10
    )
    pros, cons = [], []
    if n.protein >= 25:
        pros.append("Excellent protein for muscle synthesis")
    elif n.protein >= 18:
        pros.append("Good protein content")
    if complete_protein:
        pros.append("Complete amino acid profile")
    if density > 10:
        pros.append("High protein density")
    if n.protein < 8:
        cons.append("Very low protein")
    if n.calories > 600 and n.protein < 20:
        cons.append("High calories without proportional protein")
    if n.protein >= 25:
        insight = "Excellent for muscle protein synthesis with optimal protein content."
    elif n.protein >= 18:
        insight = "Good protein source to support muscle building."
    elif n.protein >= 10:
        insight = "Moderate protein - pair with other protein sources."
    else:
        insight = "Low protein content - not ideal for muscle building alone."
    return _focus(score, insight, pros, cons)


def _grade_heart_health(p: _Profile) -> FocusGrade:
    n = p.nutrition
    score = _round(
        _component(n.saturated_fat, 2, 4, 7, 12, higher_is_better=False) * 0.30
        + _component(n.sodium, 300, 500, 800, 1200, higher_is_better=False) * 0.25
        + (0 if n.trans_fat > 0.5 else 100) * 0.10
        + _component(n.cholesterol, 50, 100, 150, 250, higher_is_better=False) * 0.10
        + _component(n.fiber, 8, 5, 3, 1) * 0.15
        + _optional_component(n.potassium, 500, 300, 150, 50, missing=50) * 0.10
    )
    pros, cons = [], []
    if n.saturated_fat <= 3:
        pros.append("Low saturated fat")
    if n.sodium <= 400:
        pros.append("Low sodium")
    if n.fiber >= 5:
        pros.append("Heart-healthy fiber")
    if n.potassium >= 300:
        pros.append("Good potassium source")
    if n.saturated_fat > 7:
        cons.append("High saturated fat")
    if n.sodium > 800:
        cons.append("High sodium")
    if n.trans_fat > 0:
        cons.append("Contains trans fat")
    if n.cholesterol > 150:
        cons.append("High cholesterol")
    insight = _tiered(
        score,
        (
            "Heart-healthy profile with low saturated fat and sodium.",
            "Generally supportive of heart health with minor concerns.",
            "Some heart health concerns - balance with cardio-protective foods.",
            "Multiple heart health risk factors present.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_energy_endurance(p: _Profile) -> FocusGrade:
    n = p.nutrition
    complex_ratio = (n.carbs - n.sugar) / n.carbs if n.carbs > 0 else 0.0
    if n.carbs >= 30 and complex_ratio >= 0.6:
        carb_score = 100
    elif n.carbs >= 20 and complex_ratio >= 0.5:
        carb_score = 80
    elif n.carbs >= 10:
        carb_score = 60
    else:
        carb_score = 40
    sugar_crash = n.sugar > 15 and n.fiber < 3
    score = _round(
        carb_score * 0.35
        + _optional_component(n.iron, 4, 2.5, 1.5, 0.5, missing=50) * 0.20
        + _optional_component(n.magnesium, 80, 50, 25, 10, missing=50) * 0.15
        + _component(n.fiber, 6, 4, 2, 1) * 0.20
        + 10
    ) - (20 if sugar_crash else 0)
    pros, cons = [], []
    if complex_ratio >= 0.7 and n.carbs >= 25:
        pros.append("Good complex carbohydrates")
    if n.iron >= 3:
        pros.append("Iron for oxygen transport")
    if n.magnesium >= 50:
        pros.append("Magnesium for ATP production")
    if n.fiber >= 4:
        pros.append("Sustained energy release")
    if sugar_crash:
        cons.append("High sugar may cause energy crash")
    if n.carbs < 10:
        cons.append("Low carbs may limit endurance")
    insight = _tiered(
        score,
        (
            "Excellent sustained energy source with complex carbs and key minerals.",
            "Good for energy with sustained release nutrients.",
            "Moderate energy profile - may not sustain long activity.",
            "Limited energy-supporting nutrients.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_weight_management(p: _Profile) -> FocusGrade:
    n = p.nutrition
    density = n.calories / p.serving_grams
    score = _round(
        _component(density, 0.8, 1.2, 1.8, 2.5, higher_is_better=False) * 0.30
        + _component(n.protein, 25, 18, 12, 5) * 0.30
        + _component(n.fiber, 8, 5, 3, 1) * 0.25
        + _component(n.sugar, 3, 8, 15, 25, higher_is_better=False) * 0.15
    )
    pros, cons = [], []
    if density <= 1.0:
        pros.append("Low calorie density")
    if n.protein >= 18:
        pros.append("High protein for satiety")
    if n.fiber >= 5:
        pros.append("Fiber promotes fullness")
    if n.calories <= 200 and n.protein >= 10:
        pros.append("Low cal with good protein")
    if density > 2.0:
        cons.append("High calorie density")
    if n.sugar > 15:
        cons.append("High sugar may increase hunger")
    if n.calories > 500 and n.protein < 15:
        cons.append("High calories without satiety")
    insight = _tiered(
        score,
        (
            "Excellent for weight management - filling with controlled calories.",
            "Supportive of weight goals with good satiety factors.",
            "Moderate - watch portions to fit calorie goals.",
            "High calorie density with limited satiety.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_brain_focus(p: _Profile) -> FocusGrade:
    n = p.nutrition
    stable_sugar = n.sugar < 8 and n.fiber >= 3
    if stable_sugar:
        glycemic_score = 100
    elif n.sugar < 12 and n.fiber >= 2:
        glycemic_score = 80
    elif n.sugar < 18:
        glycemic_score = 60
    else:
        glycemic_score = 40
    has_choline = p.group_has("egg", "fish")
    score = _round(
        _UNKNOWN_OMEGA3_SCORE * 0.30
        + glycemic_score * 0.25
        + _optional_component(n.vitamin_c, 30, 15, 8, 2, missing=50) * 0.20
        + _component(n.fiber, 6, 4, 2, 1) * 0.15
        + 10
        + (15 if has_choline else 0)
    ) - (15 if n.trans_fat > 0 else 0)
    pros, cons = [], []
    if stable_sugar:
        pros.append("Stable blood sugar for focus")
    if n.vitamin_c >= 15:
        pros.append("Antioxidants protect brain cells")
    if has_choline:
        pros.append("Contains choline for neurotransmitters")
    if n.trans_fat > 0:
        cons.append("Trans fat harms brain function")
    if n.sugar > 20:
        cons.append("High sugar impairs focus")
    insight = _tiered(
        score,
        (
            "Brain-boosting nutrients with stable energy release.",
            "Supportive of cognitive function and focus.",
            "Some brain benefits but watch sugar content.",
            "Limited brain-supporting nutrients.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_gut_health(p: _Profile) -> FocusGrade:
    n = p.nutrition
    prebiotic = p.group_has("legume", "onion", "garlic", "banana", "oat")
    fermented = p.group_has("yogurt", "kefir", "kimchi", "sauerkraut")
    penalty = (10 if n.trans_fat > 0 else 0) + (10 if n.sodium > 1000 else 0)
    score = _round(
        _component(n.fiber, 8, 5, 3, 1) * 0.70
        + 20
        + (15 if prebiotic else 0)
        + (15 if fermented else 0)
    ) - penalty
    pros, cons = [], []
    if n.fiber >= 8:
        pros.append("Excellent fiber for microbiome")
    elif n.fiber >= 5:
        pros.append("Good fiber content")
    if prebiotic:
        pros.append("Contains prebiotic fibers")
    if fermented:
        pros.append("Fermented - live probiotics")
    if n.fiber < 2:
        cons.append("Very low fiber")
    if penalty > 10:
        cons.append("Processing may harm gut health")
    insight = _tiered(
        score,
        (
            "Excellent for gut health with high fiber and beneficial compounds.",
            "Good fiber source supporting digestive health.",
            "Moderate fiber - aim for more fiber-rich foods.",
            "Low fiber content - not ideal for gut health.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_blood_sugar(p: _Profile) -> FocusGrade:
    n = p.nutrition
    complex_ratio = (n.carbs - n.sugar) / n.carbs if n.carbs > 0 else 1.0
    if complex_ratio >= 0.8:
        quality = 100
    elif complex_ratio >= 0.6:
        quality = 80
    elif complex_ratio >= 0.4:
        quality = 60
    else:
        quality = 40
    heavy_load = n.carbs > 50 and n.fiber < 5
    score = _round(
        _component(n.sugar, 3, 8, 15, 25, higher_is_better=False) * 0.35
        + _component(n.fiber, 8, 5, 3, 1) * 0.25
        + _component(n.protein, 20, 12, 6, 3) * 0.20
        + quality * 0.20
    ) - (15 if heavy_load else 0)
    pros, cons = [], []
    if n.sugar < 5:
        pros.append("Very low sugar")
    if n.fiber >= 5:
        pros.append("Fiber slows glucose absorption")
    if n.protein >= 15 and n.carbs < 30:
        pros.append("Protein moderates blood sugar")
    if complex_ratio >= 0.7:
        pros.append("Complex carbohydrates")
    if n.sugar > 15:
        cons.append("High sugar content")
    if heavy_load:
        cons.append("High carb load without fiber")
    if complex_ratio < 0.5:
        cons.append("Mostly simple carbs")
    insight = _tiered(
        score,
        (
            "Excellent for blood sugar stability with minimal glucose impact.",
            "Good blood sugar profile with balanced macros.",
            "Moderate blood sugar impact - pair with protein/fiber.",
            "May cause blood sugar spikes.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_bone_joint(p: _Profile) -> FocusGrade:
    n = p.nutrition
    sodium_penalty = (
        _component(n.sodium, 400, 600, 1000, 1500, higher_is_better=False) * 0.2
        if n.sodium > 800
        else 0
    )
    score = _round(
        _optional_component(n.calcium, 300, 150, 75, 25, missing=40) * 0.35
        + _optional_component(n.vitamin_d, 5, 2.5, 1, 0.3, missing=40) * 0.25
        + _optional_component(n.magnesium, 80, 50, 25, 10, missing=40) * 0.20
        + 15
    ) - _round(sodium_penalty)
    pros, cons = [], []
    if n.calcium >= 150:
        pros.append("Good calcium for bones")
    if n.vitamin_d >= 2:
        pros.append("Vitamin D aids calcium absorption")
    if n.magnesium >= 50:
        pros.append("Magnesium for bone matrix")
    if n.calcium < 50:
        cons.append("Low calcium content")
    if n.sodium > 1000:
        cons.append("High sodium may deplete calcium")
    insight = _tiered(
        score,
        (
            "Excellent bone-building nutrients present.",
            "Good support for bone and joint health.",
            "Some bone-supporting nutrients.",
            "Limited bone-building nutrients.",
        ),
    )
    return _focus(score, insight, pros, cons)


def _grade_anti_inflammatory(p: _Profile) -> FocusGrade:
    n = p.nutrition
    plant = p.group_has("fruit", "vegetable", "berry")
    score = _round(
        _UNKNOWN_OMEGA3_SCORE * 0.25
        + _component(n.saturated_fat, 2, 4, 7, 12, higher_is_better=False) * 0.25
        + _component(n.sugar, 5, 10, 15, 25, higher_is_better=False) * 0.20
        + _optional_component(n.vitamin_c, 30, 15, 8, 2, missing=50) * 0.15
        + _component(n.fiber, 6, 4, 2, 1) * 0.15
        + (10 if plant else 0)
    ) - (20 if n.trans_fat > 0 else 0)
    pros, cons = [], []
    if n.saturated_fat <= 3:
        pros.append("Low saturated fat")
    if n.vitamin_c >= 15:
        pros.append("Antioxidants reduce inflammation")
    if plant:
        pros.append("Plant compounds with anti-inflammatory effects")
    if n.trans_fat > 0:
        cons.append("Trans fat promotes inflammation")
    if n.saturated_fat > 7:
        cons.append("High saturated fat is pro-inflammatory")
    if n.sugar > 15:
        cons.append("Excess sugar increases inflammation")
    insight = _tiered(
        score,
        (
            "Strong anti-inflammatory profile with protective nutrients.",
            "Generally anti-inflammatory with some beneficial compounds.",
            "Neutral inflammation impact.",
            "Pro-inflammatory factors present.",
        ),
    )
    return _focus(score, insight, pros, cons)


_RUBRICS: dict[WellnessFocus, Callable[[_Profile], FocusGrade]] = {
    WellnessFocus.BALANCED: _grade_balanced,
    WellnessFocus.MUSCLE_BUILDING: _grade_muscle_building,
    WellnessFocus.HEART_HEALTH: _grade_heart_health,
    WellnessFocus.ENERGY_ENDURANCE: _grade_energy_endurance,
    WellnessFocus.WEIGHT_MANAGEMENT: _grade_weight_management,
    WellnessFocus.BRAIN_FOCUS: _grade_brain_focus,
    WellnessFocus.GUT_HEALTH: _grade_gut_health,
    WellnessFocus.BLOOD_SUGAR_BALANCE: _grade_blood_sugar,
    WellnessFocus.BONE_JOINT_SUPPORT: _grade_bone_joint,
    WellnessFocus.ANTI_INFLAMMATORY: _grade_anti_inflammatory,
}


def _nutri_score(p: _Profile) -> OverallGrade:
    n = p.nutrition
    energy_kj = p.per_100g(n.calories * 4.184)
    sugar = p.per_100g(n.sugar)
    fiber_points = _points(p.per_100g(n.fiber), _FIBER)
    protein_points = _points(p.per_100g(n.protein), _PROTEIN)

    negative = min(
        40,
        _points(energy_kj, _BEVERAGE_ENERGY_KJ if p.is_beverage else _FOOD_ENERGY_KJ)
        + _points(sugar, _BEVERAGE_SUGAR if p.is_beverage else _FOOD_SUGAR)
        + _points(p.per_100g(n.saturated_fat), _SATURATED_FAT)
        + _points(p.per_100g(n.sodium), _SODIUM_MG),
    )

    fruit_or_vegetable = p.group_has("fruit", "vegetable")
    if fruit_or_vegetable:
        fvn_points = 5
    elif p.group_has("nut", "legume"):
        fvn_points = 4
    elif n.vitamin_c > 50:
        fvn_points = 3
    elif n.vitamin_c > 20:
        fvn_points = 2
    elif n.vitamin_c > 5:
        fvn_points = 1
    else:
        fvn_points = 0
    positive = min(15, fiber_points + protein_points + fvn_points)

    # Protein stops counting for high-negative foods unless fiber or produce offsets it.
    if negative >= 11 and fiber_points < 5 and not fruit_or_vegetable:
        positive -= protein_points

    points = negative - positive
    score = _clamp(100 - (points + 15) / 55 * 100)
    return OverallGrade(grade=score_to_grade(score), score=score, nutri_score_points=points)


def _satiety(p: _Profile) -> SatietyResult:
    n = p.nutrition
    score = (
        40
        + min(30, p.per_100g(n.protein) * 1.5)
        + min(25, p.per_100g(n.fiber) * 5)
        + min(20, _DEFAULT_WATER_PER_100G * 0.25)
        - min(25, p.per_100g(n.calories) * 0.08)
        - min(15, p.per_100g(n.fat) * 0.3)
    )
    clamped = _clamp(score)
    if clamped >= 80:
        category = SatietyCategory.VERY_HIGH
    elif clamped >= 65:
        category = SatietyCategory.HIGH
    elif clamped >= 45:
        category = SatietyCategory.MODERATE
    elif clamped >= 25:
        category = SatietyCategory.LOW
    else:
        category = SatietyCategory.VERY_LOW
    return SatietyResult(score=clamped, category=category)


def _inflammatory(p: _Profile) -> InflammatoryResult:
    n = p.nutrition
    index = (
        n.saturated_fat * 0.0373
        + n.trans_fat * 0.5
        + n.sugar * 0.01
        + n.cholesterol * 0.00042
        - n.fiber * 0.0663
        - n.magnesium * 0.00484
        - n.vitamin_c * 0.00848
        - n.iron * 0.0064
    )
    index = math.floor(index * 100 + 0.5) / 100
    if index <= -0.5:
        category = InflammatoryCategory.ANTI_INFLAMMATORY
    elif index <= 0.2:
        category = InflammatoryCategory.NEUTRAL
    elif index <= 0.7:
        category = InflammatoryCategory.MILDLY_INFLAMMATORY
    else:
        category = InflammatoryCategory.INFLAMMATORY
    return InflammatoryResult(index=index, category=category)


def _adjust_for_gi(
    focus_grades: dict[WellnessFocus, FocusGrade], gi_result: GIResult
) -> dict[WellnessFocus, FocusGrade]:
    adjustment = gi_adjustment(gi_result.gi, gi_result.gi_band)
    adjusted = dict(focus_grades)

    blood_sugar = focus_grades[WellnessFocus.BLOOD_SUGAR_BALANCE]
    score = _clamp(blood_sugar.score + adjustment)
    pros = blood_sugar.pros
    cons = blood_sugar.cons
    if gi_result.gi_band is GIBand.LOW:
        pros = (*pros, "Low glycemic index")
    elif gi_result.gi_band is GIBand.HIGH:
        cons = (*cons, "High glycemic index")
    adjusted[WellnessFocus.BLOOD_SUGAR_BALANCE] = replace(
        blood_sugar,
        score=score,
        grade=score_to_grade(score),
        insight=_GI_INSIGHT_PREFIX[gi_result.gi_band] + blood_sugar.insight,
        pros=pros,
        cons=cons,
    )

    for focus, factor in (
        (WellnessFocus.WEIGHT_MANAGEMENT, WEIGHT_GI_FACTOR),
        (WellnessFocus.ENERGY_ENDURANCE, ENERGY_GI_FACTOR),
    ):
        current = focus_grades[focus]
        score = _clamp(current.score + _round(adjustment * factor))
        adjusted[focus] = replace(current, score=score, grade=score_to_grade(score))
    return adjusted
