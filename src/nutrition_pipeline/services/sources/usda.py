"""USDA FoodData Central nutrition source."""

import logging
from dataclasses import dataclass

import httpx

from nutrition_pipeline.adapters.fdc_client import FdcClient
from nutrition_pipeline.domain.nutrition import (
    NutritionRecord,
    ResolutionSource,
    SourceMatch,
    scale_to_serving,
)
from nutrition_pipeline.services.sources.base import (
    DEFAULT_CONCURRENCY,
    NutritionSource,
    run_batch_search,
    status_code_from_exception,
)
from nutrition_pipeline.services.sources.matching import best_match, match_confidence

NUTRIENT_IDS: dict[int, str] = {
    1008: "calories",
    1003: "protein",
    1005: "carbs",
    1004: "fat",
    1079: "fiber",
    2000: "sugar",
    1093: "sodium",
    1258: "saturated_fat",
    1257: "trans_fat",
    1292: "monounsaturated_fat",
    1293: "polyunsaturated_fat",
    1253: "cholesterol",
    1092: "potassium",
    1087: "calcium",
    1089: "iron",
    1090: "magnesium",
    1095: "zinc",
    1091: "phosphorus",
    1106: "vitamin_a",
    1114: "vitamin_d",
    1109: "vitamin_e",
    1185: "vitamin_k",
    1162: "vitamin_c",
    1165: "thiamin",
    1166: "riboflavin",
    1167: "niacin",
    1175: "vitamin_b6",
    1177: "folate",
    1178: "vitamin_b12",
    1180: "choline",
    1170: "pantothenic_acid",
}

DATA_TYPE_BONUS = {"Foundation": 0.1, "SR Legacy": 0.05}

EXACT_CONFIDENCE = 0.98
QUERY_IN_LABEL_CONFIDENCE = 0.92
LABEL_IN_QUERY_CONFIDENCE = 0.88
BY_ID_CONFIDENCE = 0.98

_REFERENCE_GRAMS = 100.0

_logger = logging.getLogger(__name__)


@dataclass
class UsdaSource(NutritionSource):
    """Authoritative generic-food database."""

    client: FdcClient
    concurrency: int = DEFAULT_CONCURRENCY
    page_size: int = 5
    name: str = "usda"

    async def search(self, query: str) -> SourceMatch | None:
        """Search USDA and return the best match scaled to its serving size."""
        try:
            payload = await self.client.search_foods(query, page_size=self.page_size)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "USDA search failed: query=%s status=%s error=%s",
                query,
                status_code_from_exception(exc),
                exc,
            )
            return None
        try:
            foods = [food for food in payload.get("foods") or [] if isinstance(food, dict)]
            if not foods:
                return None
            food = best_match(
                query,
                foods,
                label_of=lambda item: item.get("description"),
                bonus_of=lambda item: DATA_TYPE_BONUS.get(item.get("dataType"), 0.0),
            )
            if food is None:
                return None
            confidence = match_confidence(
                query,
                str(food.get("description", "")),
                exact=EXACT_CONFIDENCE,
                query_in_label=QUERY_IN_LABEL_CONFIDENCE,
                label_in_query=LABEL_IN_QUERY_CONFIDENCE,
            )
            confidence = min(1.0, confidence + DATA_TYPE_BONUS.get(food.get("dataType"), 0.0))
            return _to_match(food, confidence)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            _logger.warning("USDA payload could not be parsed: query=%s error=%s", query, exc)
            return None

    async def get_by_id(self, fdc_id: int) -> SourceMatch | None:
        """Fetch one food by FDC id."""
        try:
            payload = await self.client.get_food(fdc_id)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "USDA food lookup failed: fdc_id=%s status=%s error=%s",
                fdc_id,
                status_code_from_exception(exc),
                exc,
            )
            return None
        try:
            return _to_match(payload, BY_ID_CONFIDENCE)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            _logger.warning("USDA food could not be parsed: fdc_id=%s error=%s", fdc_id, exc)
            return None

    async def batch_search(self, queries: list[str]) -> dict[str, SourceMatch]:
        """Search many foods with bounded concurrency."""
        return await run_batch_search(self, queries, concurrency=self.concurrency)


def _to_match(food: dict[str, object], confidence: float) -> SourceMatch:
    per_100g = extract_nutrients(food.get("foodNutrients") or [])
    serving_grams = _serving_grams(food)
    return SourceMatch(
        nutrition=scale_to_serving(per_100g, _REFERENCE_GRAMS, serving_grams),
        confidence=confidence,
        serving_grams=serving_grams,
        source_id=str(food["fdcId"]),
        label=str(food.get("description", "")),
        source=ResolutionSource.USDA,
    )


def _serving_grams(food: dict[str, object]) -> float:
    serving = food.get("servingSize")
    if isinstance(serving, int | float) and serving > 0:
        return float(serving)
    return _REFERENCE_GRAMS


def extract_nutrients(food_nutrients: list[dict[str, object]]) -> NutritionRecord:
    """Map FDC nutrient entries onto a record, per 100 g.

    Search results carry ``nutrientId``/``value``; food details carry
    ``nutrient.id``/``amount``.
    """
    values: dict[str, float] = {}
    for nutrient in food_nutrients:
        nutrient_info = nutrient.get("nutrient") or {}
        nutrient_id = nutrient.get("nutrientId") or nutrient_info.get("id")
        field_name = NUTRIENT_IDS.get(nutrient_id)
        if field_name is None:
            continue
        amount = nutrient.get("value", nutrient.get("amount"))
        if amount is None:
            continue
        values[field_name] = float(amount)
    return NutritionRecord.from_mapping(values)
