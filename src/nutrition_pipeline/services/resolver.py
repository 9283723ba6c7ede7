"""Cache-first, multi-source nutrition resolver."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from nutrition_pipeline.domain.nutrition import (
    FoodDescriptor,
    FoodType,
    NutritionRecord,
    ResolutionResult,
    ResolutionSource,
    SourceMatch,
    scale_to_serving,
)
from nutrition_pipeline.services.background import BackgroundTasks
from nutrition_pipeline.services.cache import CacheWrite, NutritionCache, cache_key
from nutrition_pipeline.services.sources.edamam import EdamamSource
from nutrition_pipeline.services.sources.openfoodfacts import OpenFoodFactsSource
from nutrition_pipeline.services.sources.usda import UsdaSource

PRIMARY_MIN_CONFIDENCE = 0.7
LAST_RESORT_MIN_CONFIDENCE = 0.6
HYBRID_MICROS_MIN_CONFIDENCE = 0.6
CACHE_WRITE_MIN_CONFIDENCE = 0.6
INGREDIENT_MIN_CONFIDENCE = 0.5
DECOMPOSITION_PENALTY = 0.9

_BRAND_PREFIX = re.compile(
    r"^(KIND|Clif|Luna|RXBar|Quest|ThinkThin|Nature Valley|Kashi)\s+", re.IGNORECASE
)
_BAR_SUFFIX = re.compile(r"\s+(bar|bars)$", re.IGNORECASE)

ResolutionStrategy = Callable[[FoodDescriptor], Awaitable[ResolutionResult | None]]

_logger = logging.getLogger(__name__)


def extract_generic_name(name: str) -> str:
    """Strip known snack-bar brand prefixes and a trailing "bar"."""
    generic = _BRAND_PREFIX.sub(" ", name)
    generic = _BAR_SUFFIX.sub(" ", generic)
    return generic.strip().lower()


@dataclass
class NutritionResolver:
    """Maps a food descriptor to a per-serving nutrition record."""

    cache: NutritionCache
    usda: UsdaSource
    off: OpenFoodFactsSource
    edamam: EdamamSource
    background: BackgroundTasks

    async def resolve(self, descriptor: FoodDescriptor) -> ResolutionResult:
        """Resolve one descriptor; never raises for source or cache failures."""
        cached = await self.cache.get(descriptor.name, descriptor.estimated_grams)
        if cached is not None:
            _logger.debug("Cache hit: name=%s", descriptor.name)
            return ResolutionResult(
                nutrition=scale_to_serving(
                    cached.nutrition, cached.serving_grams, descriptor.estimated_grams
                ),
                source=ResolutionSource.CACHE,
                confidence=cached.confidence,
                serving_grams=descriptor.estimated_grams,
            )

        result = await self._run_chain(descriptor, self._strategies_for(descriptor))
        if result is None:
            _logger.info(
                "No source matched: name=%s food_type=%s",
                descriptor.name,
                descriptor.food_type.value,
            )
            return ResolutionResult.unresolved(descriptor.estimated_grams)

        _logger.info(
            "Resolved: name=%s source=%s confidence=%.2f",
            descriptor.name,
            result.source.value,
            result.confidence,
        )
        if result.confidence >= CACHE_WRITE_MIN_CONFIDENCE:
            self.background.spawn(
                f"cache-set:{descriptor.name}",
                lambda: self.cache.set(
                    descriptor.name,
                    result.nutrition,
                    result.source,
                    result.confidence,
                    result.serving_grams,
                    descriptor.food_type.value,
                ),
            )
        return result

    async def batch_resolve(
        self, descriptors: Sequence[FoodDescriptor]
    ) -> dict[str, ResolutionResult]:
        """Resolve many descriptors, grouping source calls by food type."""
        results: dict[str, ResolutionResult] = {}
        if not descriptors:
            return results

        cached = await self.cache.batch_get(
            (descriptor.name, descriptor.estimated_grams) for descriptor in descriptors
        )
        uncached: list[FoodDescriptor] = []
        for descriptor in descriptors:
            entry = cached.get(_cache_key_of(descriptor))
            if entry is None:
                uncached.append(descriptor)
                continue
            results[descriptor.name] = ResolutionResult(
                nutrition=scale_to_serving(
                    entry.nutrition, entry.serving_grams, descriptor.estimated_grams
                ),
                source=ResolutionSource.CACHE,
                confidence=entry.confidence,
                serving_grams=descriptor.estimated_grams,
            )
        if not uncached:
            return results

        whole = [d for d in uncached if d.food_type is FoodType.WHOLE_FOOD]
        branded = [d for d in uncached if d.food_type is FoodType.BRANDED_PACKAGED]
        restaurant = [d for d in uncached if d.food_type is FoodType.RESTAURANT_ITEM]

        usda_hits, off_hits, edamam_hits = await asyncio.gather(
            self.usda.batch_search([d.name for d in whole]),
            self.off.batch_search([d.qualified_name(d.brand_name) for d in branded]),
            self.edamam.batch_search(
                [d.qualified_name(d.restaurant_name) for d in restaurant]
            ),
        )
        for descriptor in whole:
            match = usda_hits.get(descriptor.name.lower())
            if match is not None:
                results[descriptor.name] = _from_match(match, descriptor)
        for descriptor in branded:
            match = off_hits.get(descriptor.qualified_name(descriptor.brand_name).lower())
            if match is not None:
                results[descriptor.name] = _from_match(match, descriptor)
        for descriptor in restaurant:
            key = descriptor.qualified_name(descriptor.restaurant_name).lower()
            match = edamam_hits.get(key)
            if match is not None:
                results[descriptor.name] = _from_match(match, descriptor)

        fresh: dict[str, FoodDescriptor] = {}
        for descriptor in uncached:
            if descriptor.name not in results:
                results[descriptor.name] = await self._resolve_uncached(descriptor)
            fresh.setdefault(descriptor.name, descriptor)

        writes = [
            CacheWrite(
                name=name,
                nutrition=results[name].nutrition,
                source=results[name].source,
                confidence=results[name].confidence,
                serving_grams=results[name].serving_grams,
                food_type=descriptor.food_type.value,
            )
            for name, descriptor in fresh.items()
            if results[name].source is not ResolutionSource.CACHE
            and results[name].confidence >= CACHE_WRITE_MIN_CONFIDENCE
        ]
        if writes:
            self.background.spawn("cache-batch-set", lambda: self.cache.batch_set(writes))
        return results

    async def resolve_barcode(self, barcode: str) -> ResolutionResult | None:
        """Resolve a packaged product by barcode at its labelled serving."""
        match = await self.off.get_by_barcode(barcode)
        if match is None:
            return None
        return ResolutionResult(
            nutrition=match.nutrition,
            source=ResolutionSource.OPENFOODFACTS,
            confidence=match.confidence,
            serving_grams=match.serving_grams,
        )

    async def _resolve_uncached(self, descriptor: FoodDescriptor) -> ResolutionResult:
        # Batch fallback path: chain only, the batch writes the cache itself.
        result = await self._run_chain(descriptor, self._strategies_for(descriptor))
        return result or ResolutionResult.unresolved(descriptor.estimated_grams)

    def _strategies_for(self, descriptor: FoodDescriptor) -> list[ResolutionStrategy]:
        if descriptor.food_type is FoodType.WHOLE_FOOD:
            return [self._usda_primary, self._off_primary, self._edamam_last_resort]
        if descriptor.food_type is FoodType.BRANDED_PACKAGED:
            return [self._off_branded, self._edamam_branded]
        if descriptor.food_type is FoodType.RESTAURANT_ITEM:
            return [
                self._edamam_restaurant,
                self._off_restaurant,
                *self._generic_dish_chain(),
            ]
        if descriptor.food_type is FoodType.HOMEMADE_DISH:
            if descriptor.ingredients:
                return [self._decompose]
            return self._generic_dish_chain()
        return self._generic_dish_chain()

    def _generic_dish_chain(self) -> list[ResolutionStrategy]:
        return [self._usda_primary, self._edamam_last_resort]

    @staticmethod
    async def _run_chain(
        descriptor: FoodDescriptor, strategies: list[ResolutionStrategy]
    ) -> ResolutionResult | None:
        for strategy in strategies:
            result = await strategy(descriptor)
            if result is not None:
                return result
        return None

    async def _usda_primary(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        match = await self.usda.search(descriptor.name)
        return _accept(match, descriptor, PRIMARY_MIN_CONFIDENCE)

    async def _off_primary(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        match = await self.off.search(descriptor.name)
        return _accept(match, descriptor, PRIMARY_MIN_CONFIDENCE)

    async def _edamam_last_resort(
        self, descriptor: FoodDescriptor
    ) -> ResolutionResult | None:
        match = await self.edamam.search(descriptor.name)
        return _accept(match, descriptor, LAST_RESORT_MIN_CONFIDENCE)

    async def _off_branded(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        off_match = await self.off.search(descriptor.qualified_name(descriptor.brand_name))
        if off_match is None or off_match.confidence < PRIMARY_MIN_CONFIDENCE:
            return None
        micros = await self.usda.search(extract_generic_name(descriptor.name))
        if micros is None or micros.confidence < HYBRID_MICROS_MIN_CONFIDENCE:
            return _from_match(off_match, descriptor)

        # Label macros from OFF over USDA micros, both at the OFF serving.
        usda_at_label_serving = scale_to_serving(
            micros.nutrition, micros.serving_grams, off_match.serving_grams
        )
        hybrid = usda_at_label_serving.merged(
            off_match.nutrition, off_match.reliable_fields
        )
        return ResolutionResult(
            nutrition=scale_to_serving(
                hybrid, off_match.serving_grams, descriptor.estimated_grams
            ),
            source=ResolutionSource.HYBRID,
            confidence=min(off_match.confidence, micros.confidence),
            serving_grams=descriptor.estimated_grams,
        )

    async def _edamam_branded(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        match = await self.edamam.search(descriptor.qualified_name(descriptor.brand_name))
        return _accept(match, descriptor, LAST_RESORT_MIN_CONFIDENCE)

    async def _edamam_restaurant(
        self, descriptor: FoodDescriptor
    ) -> ResolutionResult | None:
        match = await self.edamam.search_restaurant(
            descriptor.name, descriptor.restaurant_name
        )
        return _accept(match, descriptor, PRIMARY_MIN_CONFIDENCE)

    async def _off_restaurant(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        match = await self.off.search(descriptor.qualified_name(descriptor.restaurant_name))
        return _accept(match, descriptor, PRIMARY_MIN_CONFIDENCE)

    async def _decompose(self, descriptor: FoodDescriptor) -> ResolutionResult | None:
        ingredients = descriptor.ingredients or []
        resolved = await self.batch_resolve(
            [
                FoodDescriptor(
                    name=ingredient.name,
                    unit="g",
                    estimated_grams=ingredient.estimated_grams,
                    food_type=FoodType.WHOLE_FOOD,
                )
                for ingredient in ingredients
            ]
        )
        usable = [
            resolved[ingredient.name]
            for ingredient in ingredients
            if ingredient.name in resolved
            and resolved[ingredient.name].confidence >= INGREDIENT_MIN_CONFIDENCE
        ]
        if not usable:
            return None
        average = sum(result.confidence for result in usable) / len(usable)
        return ResolutionResult(
            nutrition=NutritionRecord.total(result.nutrition for result in usable),
            source=ResolutionSource.DECOMPOSED,
            confidence=average * DECOMPOSITION_PENALTY,
            serving_grams=descriptor.estimated_grams,
        )


def _cache_key_of(descriptor: FoodDescriptor) -> str:
    return cache_key(descriptor.name, descriptor.estimated_grams)


def _accept(
    match: SourceMatch | None, descriptor: FoodDescriptor, minimum: float
) -> ResolutionResult | None:
    if match is None or match.confidence < minimum:
        return None
    return _from_match(match, descriptor)


def _from_match(match: SourceMatch, descriptor: FoodDescriptor) -> ResolutionResult:
    return ResolutionResult(
        nutrition=scale_to_serving(
            match.nutrition, match.serving_grams, descriptor.estimated_grams
        ),
        source=match.source,
        confidence=match.confidence,
        serving_grams=descriptor.estimated_grams,
    )
