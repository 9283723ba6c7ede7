"""Tests for glycemic index lookup and glycemic load."""

import pytest

from nutrition_pipeline.domain.glycemic import GIBand, GIMatchSource
from nutrition_pipeline.domain.nutrition import NutritionRecord
from nutrition_pipeline.services import glycemic
from nutrition_pipeline.services.glycemic import MealGIItem


@pytest.mark.parametrize(
    ("gi", "band"),
    [
        (0, GIBand.LOW),
        (55, GIBand.LOW),
        (56, GIBand.MEDIUM),
        (69, GIBand.MEDIUM),
        (70, GIBand.HIGH),
    ],
)
def test_gi_band_boundaries(gi: int, band: GIBand) -> None:
    assert glycemic.gi_band(gi) is band


@pytest.mark.parametrize(
    ("gl", "band"),
    [(10, GIBand.LOW), (11, GIBand.MEDIUM), (19, GIBand.MEDIUM), (20, GIBand.HIGH)],
)
def test_gl_band_boundaries(gl: int, band: GIBand) -> None:
    assert glycemic.gl_band(gl) is band


def test_glycemic_load_uses_net_carbs() -> None:
    nutrition = NutritionRecord(carbs=45, fiber=5)

    assert glycemic.net_carbs(nutrition) == 40
    assert glycemic.glycemic_load(73, nutrition) == 29
    assert glycemic.net_carbs(NutritionRecord(carbs=2, fiber=6)) == 0


def test_has_relevant_gi_requires_five_grams_of_carbs() -> None:
    assert glycemic.has_relevant_gi(NutritionRecord(carbs=5))
    assert not glycemic.has_relevant_gi(NutritionRecord(carbs=4.9))


def test_normalize_food_name_drops_cooking_modifiers() -> None:
    assert glycemic.normalize_food_name("  Steamed   White Rice ") == "white rice"
    assert glycemic.normalize_food_name("Fresh Organic Apple") == "apple"


def test_exact_lookup() -> None:
    result = glycemic.lookup("Raw Apple", NutritionRecord(carbs=25, fiber=4), 182)

    assert result.gi == 36
    assert result.gl == 8
    assert result.gi_band is GIBand.LOW
    assert result.gl_band is GIBand.LOW
    assert result.source is GIMatchSource.EXACT
    assert result.confidence == pytest.approx(0.95)
    assert result.matched_food == "apple"
    assert result.category == "fruit"


def test_alias_lookup_counts_as_exact() -> None:
    result = glycemic.lookup("pizza", NutritionRecord(carbs=33, fiber=2))

    assert result.matched_food == "cheese pizza"
    assert result.source is GIMatchSource.EXACT
    assert result.confidence == pytest.approx(0.80)
    assert result.gi_band is GIBand.HIGH


def test_fuzzy_lookup() -> None:
    result = glycemic.lookup("basmati rice pilaf", NutritionRecord(carbs=40))

    assert result.matched_food == "basmati rice"
    assert result.source is GIMatchSource.FUZZY
    assert result.confidence == pytest.approx(0.95 * 0.85)
    assert result.gl == 23


def test_category_fallback_from_nutrition_profile() -> None:
    result = glycemic.lookup("xyzzy", NutritionRecord(carbs=45))

    assert result.source is GIMatchSource.CATEGORY
    assert result.category == "grain"
    assert result.gi == 55
    assert result.gl == 25
    assert result.matched_food is None
    assert result.confidence == pytest.approx(0.65 * 0.60)


def test_infer_category_prefers_keywords() -> None:
    empty = NutritionRecord()

    assert glycemic.infer_category("sourdough toast", empty) == "bread"
    assert glycemic.infer_category("chicken curry", empty) == "mixed_meal"
    assert glycemic.infer_category("steak", NutritionRecord(protein=25, carbs=0)) == "other"
    assert glycemic.infer_category("jelly", NutritionRecord(sugar=20, carbs=25)) == "fruit"
    assert glycemic.infer_category("kelp", NutritionRecord(fiber=6, carbs=8)) == "vegetable"


def test_batch_lookup_keys_by_name() -> None:
    results = glycemic.batch_lookup(
        [
            ("banana", NutritionRecord(carbs=27, fiber=3), 118),
            ("white rice", NutritionRecord(carbs=45), 158),
        ]
    )

    assert results["banana"].gi == 51
    assert results["white rice"].gi == 73


def test_explain_describes_both_bands() -> None:
    result = glycemic.lookup("glucose", NutritionRecord(carbs=50))

    assert glycemic.explain(result) == (
        "High GI foods cause a rapid spike in blood sugar. "
        "This serving has a high glycemic load."
    )


def test_meal_gi_is_carb_weighted_and_gl_is_summed() -> None:
    items = [MealGIItem(gi=70, gl=21, carbs=30), MealGIItem(gi=40, gl=4, carbs=10)]

    meal_gi = glycemic.meal_gi(items)
    meal_gl = glycemic.meal_gl(items)

    assert meal_gi.gi == 63
    assert meal_gi.gi_band is GIBand.MEDIUM
    assert meal_gl.gl == 25
    assert meal_gl.gl_band is GIBand.HIGH


def test_meal_without_carbs_is_low() -> None:
    meal_gi = glycemic.meal_gi([MealGIItem(gi=80, gl=0, carbs=0)])

    assert meal_gi.gi == 0
    assert meal_gi.gi_band is GIBand.LOW
