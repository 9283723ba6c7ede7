"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from nutrition_pipeline.config import Settings
from nutrition_pipeline.containers import AppContainer
from nutrition_pipeline.domain.analysis import FoodInsight
from nutrition_pipeline.domain.cache import CacheEntry
from nutrition_pipeline.domain.nutrition import (
    NUTRIENT_FIELDS,
    NutritionRecord,
    ResolutionSource,
    SourceMatch,
)
from nutrition_pipeline.services.background import BackgroundTasks
from nutrition_pipeline.services.cache import (
    InMemoryNutritionCacheRepository,
    NutritionCache,
    NutritionCacheRepository,
)
from nutrition_pipeline.services.insights import InsightGenerator, InsightRequest
from nutrition_pipeline.services.pipeline import NutritionPipeline
from nutrition_pipeline.services.resolver import NutritionResolver
from nutrition_pipeline.services.sources.base import run_batch_search

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def make_match(  # noqa: PLR0913
    source: ResolutionSource,
    confidence: float,
    serving_grams: float = 100,
    label: str = "",
    reliable_fields: frozenset[str] = frozenset(NUTRIENT_FIELDS),
    **nutrients: float,
) -> SourceMatch:
    """Build a source match with the given per-serving nutrients."""
    return SourceMatch(
        nutrition=NutritionRecord(**nutrients),
        confidence=confidence,
        serving_grams=serving_grams,
        source_id=label or "id",
        label=label,
        source=source,
        reliable_fields=reliable_fields,
    )


@dataclass
class FakeSource:
    """In-memory nutrition source keyed by lowercased query."""

    name: str
    matches: dict[str, SourceMatch] = field(default_factory=dict)
    barcodes: dict[str, SourceMatch] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def search(self, query: str) -> SourceMatch | None:
        self.calls.append(query)
        return self.matches.get(query.lower())

    async def search_restaurant(
        self, name: str, restaurant_name: str | None = None
    ) -> SourceMatch | None:
        if restaurant_name:
            match = await self.search(f"{restaurant_name} {name}")
            if match is not None:
                return match
        return await self.search(name)

    async def get_by_barcode(self, barcode: str) -> SourceMatch | None:
        self.calls.append(barcode)
        return self.barcodes.get(barcode)

    async def batch_search(self, queries: list[str]) -> dict[str, SourceMatch]:
        return await run_batch_search(self, queries)


@dataclass
class FailingCacheRepository(NutritionCacheRepository):
    """Repository whose every call fails."""

    def get(self, key: str) -> CacheEntry | None:
        raise RuntimeError("cache unavailable")

    def get_many(self, keys: list[str]) -> list[CacheEntry]:
        raise RuntimeError("cache unavailable")

    def upsert(self, entries: list[CacheEntry]) -> None:
        raise RuntimeError("cache unavailable")

    def delete(self, key: str) -> None:
        raise RuntimeError("cache unavailable")

    def delete_many(self, keys: list[str]) -> None:
        raise RuntimeError("cache unavailable")

    def increment_hit_count(self, key: str) -> None:
        raise RuntimeError("cache unavailable")

    def list_expired_keys(self, now: datetime, limit: int) -> list[str]:
        raise RuntimeError("cache unavailable")

    def list_all(self) -> list[CacheEntry]:
        raise RuntimeError("cache unavailable")


@dataclass
class FakeInsightGenerator(InsightGenerator):
    """Insight generator that records requests and can be told to fail."""

    fail_for: set[str] = field(default_factory=set)
    requests: list[InsightRequest] = field(default_factory=list)

    async def generate(self, request: InsightRequest) -> FoodInsight:
        self.requests.append(request)
        if request.food_name in self.fail_for:
            raise RuntimeError("insight backend down")
        return FoodInsight(
            summary=f"About {request.food_name}",
            focus_explanation="Because.",
            tips=["Pair with vegetables"],
            considerations=[],
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        usda_api_key="usda-key",
        edamam_app_id="edamam-id",
        edamam_app_key="edamam-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def background() -> BackgroundTasks:
    return BackgroundTasks()


@pytest.fixture
def cache_repository() -> InMemoryNutritionCacheRepository:
    return InMemoryNutritionCacheRepository()


@pytest.fixture
def cache(
    cache_repository: InMemoryNutritionCacheRepository, background: BackgroundTasks
) -> NutritionCache:
    return NutritionCache(
        repository=cache_repository, background=background, clock=lambda: FIXED_NOW
    )


@pytest.fixture
def usda() -> FakeSource:
    return FakeSource(name="usda")


@pytest.fixture
def off() -> FakeSource:
    return FakeSource(name="openfoodfacts")


@pytest.fixture
def edamam() -> FakeSource:
    return FakeSource(name="edamam")


@pytest.fixture
def resolver(
    cache: NutritionCache,
    usda: FakeSource,
    off: FakeSource,
    edamam: FakeSource,
    background: BackgroundTasks,
) -> NutritionResolver:
    return NutritionResolver(
        cache=cache, usda=usda, off=off, edamam=edamam, background=background
    )


@pytest.fixture
def insight_generator() -> FakeInsightGenerator:
    return FakeInsightGenerator()


@pytest.fixture
def pipeline(
    resolver: NutritionResolver, insight_generator: FakeInsightGenerator
) -> NutritionPipeline:
    return NutritionPipeline(resolver=resolver, insight_generator=insight_generator)


@pytest.fixture
def container(
    settings: Settings,
    cache: NutritionCache,
    resolver: NutritionResolver,
    pipeline: NutritionPipeline,
    background: BackgroundTasks,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        resolver=resolver,
        pipeline=pipeline,
        background=background,
        close_resources=close_resources,
    )
