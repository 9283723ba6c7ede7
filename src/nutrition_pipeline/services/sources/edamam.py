"""Edamam food database nutrition source."""

import logging
from dataclasses import dataclass

import httpx

from nutrition_pipeline.adapters.edamam_client import EdamamClient
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

NUTRIENT_CODES: dict[str, str] = {
    "ENERC_KCAL": "calories",
    "PROCNT": "protein",
    "CHOCDF": "carbs",
    "FAT": "fat",
    "FIBTG": "fiber",
    "SUGAR": "sugar",
    "NA": "sodium",
    "FASAT": "saturated_fat",
    "FATRN": "trans_fat",
    "FAMS": "monounsaturated_fat",
    "FAPU": "polyunsaturated_fat",
    "CHOLE": "cholesterol",
    "K": "potassium",
    "CA": "calcium",
    "FE": "iron",
    "MG": "magnesium",
    "ZN": "zinc",
    "P": "phosphorus",
    "VITA_RAE": "vitamin_a",
    "VITD": "vitamin_d",
    "TOCPHA": "vitamin_e",
    "VITK1": "vitamin_k",
    "VITC": "vitamin_c",
    "THIA": "thiamin",
    "RIBF": "riboflavin",
    "NIA": "niacin",
    "VITB6A": "vitamin_b6",
    "FOLDFE": "folate",
    "VITB12": "vitamin_b12",
}

PARSED_CONFIDENCE = 0.95
HINT_CONFIDENCE = 0.80

_PREFERRED_MEASURES = ("serving", "cup", "piece")
_REFERENCE_GRAMS = 100.0

_logger = logging.getLogger(__name__)


@dataclass
class EdamamSource(NutritionSource):
    """Broad commercial and restaurant food database."""

    client: EdamamClient
    concurrency: int = DEFAULT_CONCURRENCY
    name: str = "edamam"

    async def search(self, query: str) -> SourceMatch | None:
        """Parse a query; a parsed food beats a hint."""
        try:
            payload = await self.client.parse(query)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Edamam search failed: query=%s status=%s error=%s",
                query,
                status_code_from_exception(exc),
                exc,
            )
            return None
        try:
            parsed = payload.get("parsed") or []
            if parsed:
                item = parsed[0]
                measure = item.get("measure") or {}
                return _to_match(item["food"], measure.get("weight"), PARSED_CONFIDENCE)
            hints = payload.get("hints") or []
            if hints:
                hint = hints[0]
                measure = _preferred_measure(hint.get("measures") or [])
                return _to_match(hint["food"], measure.get("weight"), HINT_CONFIDENCE)
            return None
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            _logger.warning("Edamam payload could not be parsed: query=%s error=%s", query, exc)
            return None

    async def search_restaurant(
        self, name: str, restaurant_name: str | None = None
    ) -> SourceMatch | None:
        """Search a restaurant-qualified name, retrying unqualified on a miss."""
        if not restaurant_name:
            return await self.search(name)
        match = await self.search(f"{restaurant_name} {name}")
        if match is None:
            return await self.search(name)
        return match

    async def batch_search(self, queries: list[str]) -> dict[str, SourceMatch]:
        """Search many foods with bounded concurrency."""
        return await run_batch_search(self, queries, concurrency=self.concurrency)


def _preferred_measure(measures: list[dict[str, object]]) -> dict[str, object]:
    for measure in measures:
        label = str(measure.get("label") or "").lower()
        if any(preferred in label for preferred in _PREFERRED_MEASURES):
            return measure
    return measures[0] if measures else {}


def _to_match(food: dict[str, object], weight: object, confidence: float) -> SourceMatch:
    serving_grams = (
        float(weight) if isinstance(weight, int | float) and weight > 0 else _REFERENCE_GRAMS
    )
    per_100g = extract_nutrients(food.get("nutrients") or {})
    return SourceMatch(
        nutrition=scale_to_serving(per_100g, _REFERENCE_GRAMS, serving_grams),
        confidence=confidence,
        serving_grams=serving_grams,
        source_id=str(food["foodId"]),
        label=str(food.get("label") or ""),
        source=ResolutionSource.EDAMAM,
    )


def extract_nutrients(nutrients: dict[str, object]) -> NutritionRecord:
    """Map Edamam nutrient codes onto a record.

    Values may be bare numbers or ``{"quantity": ..., "unit": ...}`` objects.
    """
    values: dict[str, float] = {}
    for code, raw in nutrients.items():
        field_name = NUTRIENT_CODES.get(code)
        if field_name is None:
            continue
        if isinstance(raw, dict):
            raw = raw.get("quantity") or 0
        values[field_name] = float(raw)
    return NutritionRecord.from_mapping(values)
