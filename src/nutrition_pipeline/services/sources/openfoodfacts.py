"""Open Food Facts nutrition source."""

import logging
from dataclasses import dataclass

import httpx

from nutrition_pipeline.adapters.off_client import OpenFoodFactsClient
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

# nutriment key -> (record field, multiplier to our unit)
NUTRIMENT_KEYS: dict[str, tuple[str, float]] = {
    "energy-kcal_100g": ("calories", 1.0),
    "energy_kcal_100g": ("calories", 1.0),
    "proteins_100g": ("protein", 1.0),
    "carbohydrates_100g": ("carbs", 1.0),
    "fat_100g": ("fat", 1.0),
    "fiber_100g": ("fiber", 1.0),
    "sugars_100g": ("sugar", 1.0),
    "sodium_100g": ("sodium", 1000.0),
    "saturated-fat_100g": ("saturated_fat", 1.0),
    "trans-fat_100g": ("trans_fat", 1.0),
    "cholesterol_100g": ("cholesterol", 1000.0),
    "potassium_100g": ("potassium", 1000.0),
    "calcium_100g": ("calcium", 1000.0),
    "iron_100g": ("iron", 1000.0),
    "vitamin-d_100g": ("vitamin_d", 1_000_000.0),
}

EXACT_CONFIDENCE = 0.95
SUBSTRING_CONFIDENCE = 0.88
BARCODE_CONFIDENCE = 0.95

_REFERENCE_GRAMS = 100.0

_logger = logging.getLogger(__name__)


@dataclass
class OpenFoodFactsSource(NutritionSource):
    """Barcode and label database for packaged products."""

    client: OpenFoodFactsClient
    concurrency: int = DEFAULT_CONCURRENCY
    page_size: int = 5
    name: str = "openfoodfacts"

    async def search(self, query: str) -> SourceMatch | None:
        """Search products and return the best label match per serving."""
        try:
            payload = await self.client.search_products(query, page_size=self.page_size)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Open Food Facts search failed: query=%s status=%s error=%s",
                query,
                status_code_from_exception(exc),
                exc,
            )
            return None
        try:
            products = [
                product
                for product in payload.get("products") or []
                if isinstance(product, dict) and product.get("nutriments")
            ]
            if not products:
                return None
            product = best_match(
                query,
                products,
                label_of=lambda item: item.get("product_name"),
                bonus_of=_completeness_bonus,
            )
            if product is None:
                return None
            confidence = match_confidence(
                query,
                str(product["product_name"]),
                exact=EXACT_CONFIDENCE,
                query_in_label=SUBSTRING_CONFIDENCE,
                label_in_query=SUBSTRING_CONFIDENCE,
            )
            return _to_match(product, confidence, str(product.get("code", "")))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            _logger.warning(
                "Open Food Facts payload could not be parsed: query=%s error=%s",
                query,
                exc,
            )
            return None

    async def get_by_barcode(self, barcode: str) -> SourceMatch | None:
        """Look up a single product by barcode."""
        try:
            payload = await self.client.get_product(barcode)
        except (httpx.HTTPError, ValueError) as exc:
            _logger.warning(
                "Open Food Facts barcode lookup failed: barcode=%s status=%s error=%s",
                barcode,
                status_code_from_exception(exc),
                exc,
            )
            return None
        if not isinstance(payload, dict):
            _logger.warning(
                "Open Food Facts barcode lookup returned %s: barcode=%s",
                type(payload).__name__,
                barcode,
            )
            return None
        product = payload.get("product")
        if payload.get("status") != 1 or not isinstance(product, dict):
            return None
        try:
            return _to_match(product, BARCODE_CONFIDENCE, barcode)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            _logger.warning(
                "Open Food Facts product could not be parsed: barcode=%s error=%s",
                barcode,
                exc,
            )
            return None

    async def batch_search(self, queries: list[str]) -> dict[str, SourceMatch]:
        """Search many products with bounded concurrency."""
        return await run_batch_search(self, queries, concurrency=self.concurrency)


def _completeness_bonus(product: dict[str, object]) -> float:
    nutriments = product.get("nutriments") or {}
    return min(0.1, len(nutriments) * 0.005)


def _to_match(product: dict[str, object], confidence: float, source_id: str) -> SourceMatch:
    per_100g, reliable = extract_nutriments(product.get("nutriments") or {})
    serving_grams = _serving_grams(product)
    return SourceMatch(
        nutrition=scale_to_serving(per_100g, _REFERENCE_GRAMS, serving_grams),
        confidence=confidence,
        serving_grams=serving_grams,
        source_id=source_id,
        label=str(product.get("product_name") or ""),
        source=ResolutionSource.OPENFOODFACTS,
        reliable_fields=reliable,
    )


def _serving_grams(product: dict[str, object]) -> float:
    quantity = product.get("serving_quantity")
    try:
        grams = float(quantity) if quantity is not None else 0.0
    except (TypeError, ValueError):
        grams = 0.0
    return grams if grams > 0 else _REFERENCE_GRAMS


def extract_nutriments(
    nutriments: dict[str, object],
) -> tuple[NutritionRecord, frozenset[str]]:
    """Map ``_100g`` nutriments onto a record and report which fields were present."""
    values: dict[str, float] = {}
    for key, (field_name, multiplier) in NUTRIMENT_KEYS.items():
        if field_name in values:
            continue
        raw = nutriments.get(key)
        if raw is None or isinstance(raw, bool):
            continue
        try:
            values[field_name] = float(raw) * multiplier
        except (TypeError, ValueError):
            continue
    return NutritionRecord.from_mapping(values), frozenset(values)
