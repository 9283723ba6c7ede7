"""Tests for the nutrition cache."""

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta

import pytest

from nutrition_pipeline.domain.cache import CacheEntry
from nutrition_pipeline.domain.nutrition import NutritionRecord, ResolutionSource
from nutrition_pipeline.services.background import BackgroundTasks
from nutrition_pipeline.services.cache import (
    AI_FALLBACK_TTL,
    BATCH_SIZE,
    DATABASE_TTL,
    CacheUnavailableError,
    CacheWrite,
    InMemoryNutritionCacheRepository,
    NutritionCache,
    cache_key,
    ttl_for,
)
from tests.conftest import FIXED_NOW, FailingCacheRepository


@dataclass
class RecordingRepository(InMemoryNutritionCacheRepository):
    upsert_batches: list[int] = field(default_factory=list)

    def upsert(self, entries: list[CacheEntry]) -> None:
        self.upsert_batches.append(len(entries))
        super().upsert(entries)


def _entry(  # type: ignore[no-untyped-def]
    key: str, expires_in: timedelta, **overrides
) -> CacheEntry:
    values = {
        "key": key,
        "nutrition": NutritionRecord(calories=100),
        "source": ResolutionSource.USDA,
        "confidence": 0.9,
        "serving_grams": 100,
        "cached_at": FIXED_NOW - timedelta(days=1),
        "expires_at": FIXED_NOW + expires_in,
    }
    values.update(overrides)
    return CacheEntry(**values)


def test_cache_key_normalizes_name_and_buckets_serving() -> None:
    assert cache_key("  Grilled   Chicken! ") == "grilled chicken"
    assert cache_key("Rice", 105) == "rice"
    assert cache_key("Rice", 110) == "rice"
    assert cache_key("Rice", 111) == "rice_111g"
    assert cache_key("Rice", 89) == "rice_89g"
    assert cache_key("Rice", 150.5) == "rice_151g"


def test_ttl_depends_on_source() -> None:
    assert ttl_for(ResolutionSource.USDA) == DATABASE_TTL
    assert ttl_for(ResolutionSource.HYBRID) == DATABASE_TTL
    assert ttl_for(ResolutionSource.AI_FALLBACK) == AI_FALLBACK_TTL


def test_set_then_get_returns_entry_and_bumps_hits(cache, cache_repository, background) -> None:
    async def run() -> CacheEntry | None:
        await cache.set(
            "Grilled Chicken",
            NutritionRecord(calories=280, protein=53),
            ResolutionSource.USDA,
            0.9,
            170,
            "whole_food",
        )
        entry = await cache.get("grilled chicken", 170)
        await background.drain()
        return entry

    entry = asyncio.run(run())

    assert entry is not None
    assert entry.key == "grilled chicken_170g"
    assert entry.original_query == "Grilled Chicken"
    assert entry.food_type == "whole_food"
    assert entry.expires_at == FIXED_NOW + DATABASE_TTL
    assert cache_repository.entries["grilled chicken_170g"].hit_count == 1


def test_get_expired_entry_is_a_miss_and_gets_evicted(
    cache, cache_repository, background
) -> None:
    cache_repository.entries["oatmeal"] = _entry("oatmeal", timedelta(seconds=-1))

    async def run() -> CacheEntry | None:
        entry = await cache.get("oatmeal")
        await background.drain()
        return entry

    assert asyncio.run(run()) is None
    assert "oatmeal" not in cache_repository.entries


def test_repository_failures_degrade_to_misses() -> None:
    cache = NutritionCache(repository=FailingCacheRepository(), background=BackgroundTasks())

    async def run() -> tuple[object, ...]:
        entry = await cache.get("rice")
        await cache.set("rice", NutritionRecord(), ResolutionSource.USDA, 0.9, 100)
        batch = await cache.batch_get([("rice", 100)])
        await cache.batch_set(
            [CacheWrite("rice", NutritionRecord(), ResolutionSource.USDA, 0.9, 100)]
        )
        await cache.invalidate("rice")
        deleted = await cache.cleanup_expired()
        return entry, batch, deleted

    assert asyncio.run(run()) == (None, {}, 0)


def test_batch_get_skips_expired_and_deduplicates(cache, cache_repository) -> None:
    cache_repository.entries["apple"] = _entry("apple", timedelta(days=3))
    cache_repository.entries["banana"] = _entry("banana", timedelta(seconds=-5))

    results = asyncio.run(
        cache.batch_get([("Apple", 100), ("apple", 95), ("banana", None), ("kiwi", None)])
    )

    assert list(results) == ["apple"]


def test_batch_set_writes_in_chunks(background) -> None:
    repository = RecordingRepository()
    cache = NutritionCache(repository=repository, background=background, clock=lambda: FIXED_NOW)
    writes = [
        CacheWrite(
            f"food {index}", NutritionRecord(calories=index), ResolutionSource.EDAMAM, 0.8, 100
        )
        for index in range(BATCH_SIZE + 20)
    ]

    asyncio.run(cache.batch_set(writes))

    assert repository.upsert_batches == [BATCH_SIZE, 20]
    assert len(repository.entries) == BATCH_SIZE + 20


def test_invalidate_removes_serving_specific_entry(cache, cache_repository) -> None:
    cache_repository.entries["rice_200g"] = _entry("rice_200g", timedelta(days=1))
    cache_repository.entries["rice"] = _entry("rice", timedelta(days=1))

    asyncio.run(cache.invalidate("Rice", 200))

    assert list(cache_repository.entries) == ["rice"]


def test_cleanup_expired_deletes_and_counts(cache, cache_repository) -> None:
    cache_repository.entries["old"] = _entry("old", timedelta(days=-2))
    cache_repository.entries["older"] = _entry("older", timedelta(days=-9))
    cache_repository.entries["fresh"] = _entry("fresh", timedelta(days=2))

    deleted = asyncio.run(cache.cleanup_expired())

    assert deleted == 2
    assert list(cache_repository.entries) == ["fresh"]
    assert asyncio.run(cache.cleanup_expired()) == 0


def test_stats_summarizes_entries(cache, cache_repository) -> None:
    cache_repository.entries["a"] = _entry("a", timedelta(days=1), hit_count=3)
    cache_repository.entries["b"] = _entry(
        "b",
        timedelta(days=-1),
        source=ResolutionSource.EDAMAM,
        confidence=0.6,
        hit_count=1,
    )

    stats = asyncio.run(cache.stats())

    assert stats.total_entries == 2
    assert stats.expired_entries == 1
    assert stats.source_breakdown == {"usda": 1, "edamam": 1}
    assert stats.avg_confidence == 0.75
    assert stats.total_hits == 4


def test_stats_raises_when_repository_fails(background) -> None:
    cache = NutritionCache(repository=FailingCacheRepository(), background=background)

    with pytest.raises(CacheUnavailableError):
        asyncio.run(cache.stats())
