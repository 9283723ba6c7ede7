"""TTL-keyed nutrition cache."""

import asyncio
import logging
import math
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from typing import Protocol

from nutrition_pipeline.domain.cache import CacheEntry, CacheStats
from nutrition_pipeline.domain.nutrition import NutritionRecord, ResolutionSource
from nutrition_pipeline.services.background import BackgroundTasks

DATABASE_TTL = timedelta(days=30)
AI_FALLBACK_TTL = timedelta(days=7)
BATCH_SIZE = 100
CLEANUP_LIMIT = 500
DEFAULT_SERVING_GRAMS = 100
SERVING_BUCKET_TOLERANCE = 10

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[^\w\s]")

_logger = logging.getLogger(__name__)


class CacheUnavailableError(RuntimeError):
    """The cache repository could not be read."""


class NutritionCacheRepository(Protocol):
    """Persistence interface for cache entries."""

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under a key."""

    def get_many(self, keys: list[str]) -> list[CacheEntry]:
        """Return the entries that exist for the given keys."""

    def upsert(self, entries: list[CacheEntry]) -> None:
        """Insert or replace entries in one write."""

    def delete(self, key: str) -> None:
        """Delete one entry."""

    def delete_many(self, keys: list[str]) -> None:
        """Delete several entries in one write."""

    def increment_hit_count(self, key: str) -> None:
        """Bump the hit counter of an entry."""

    def list_expired_keys(self, now: datetime, limit: int) -> list[str]:
        """Return keys of entries that expired before ``now``."""

    def list_all(self) -> list[CacheEntry]:
        """Return every stored entry."""


@dataclass
class InMemoryNutritionCacheRepository(NutritionCacheRepository):
    """Dict-backed repository for local runs and tests."""

    entries: dict[str, CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> CacheEntry | None:
        return self.entries.get(key)

    def get_many(self, keys: list[str]) -> list[CacheEntry]:
        return [self.entries[key] for key in keys if key in self.entries]

    def upsert(self, entries: list[CacheEntry]) -> None:
        for entry in entries:
            self.entries[entry.key] = entry

    def delete(self, key: str) -> None:
        self.entries.pop(key, None)

    def delete_many(self, keys: list[str]) -> None:
        for key in keys:
            self.entries.pop(key, None)

    def increment_hit_count(self, key: str) -> None:
        entry = self.entries.get(key)
        if entry is not None:
            self.entries[key] = replace(entry, hit_count=entry.hit_count + 1)

    def list_expired_keys(self, now: datetime, limit: int) -> list[str]:
        expired = [key for key, entry in self.entries.items() if entry.is_expired(now)]
        return expired[:limit]

    def list_all(self) -> list[CacheEntry]:
        return list(self.entries.values())


@dataclass(frozen=True)
class CacheWrite:
    """One item for a batch cache write."""

    name: str
    nutrition: NutritionRecord
    source: ResolutionSource
    confidence: float
    serving_grams: float
    food_type: str | None = None


def cache_key(name: str, serving_grams: float | None = None) -> str:
    """Normalize a food name into a cache key.

    A ``_{grams}g`` suffix is added only when the serving differs from 100 g
    by more than 10 g.
    """
    normalized = _WHITESPACE.sub(" ", name.lower().strip())
    normalized = _PUNCTUATION.sub("", normalized)
    if serving_grams and abs(serving_grams - DEFAULT_SERVING_GRAMS) > SERVING_BUCKET_TOLERANCE:
        return f"{normalized}_{math.floor(serving_grams + 0.5)}g"
    return normalized


def ttl_for(source: ResolutionSource) -> timedelta:
    """Return how long an entry from this source stays valid."""
    if source is ResolutionSource.AI_FALLBACK:
        return AI_FALLBACK_TTL
    return DATABASE_TTL


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NutritionCache:
    """Cache facade.

    Lookups and writes degrade to a miss or a no-op when the repository fails.
    ``stats`` raises ``CacheUnavailableError`` instead.
    """

    repository: NutritionCacheRepository
    background: BackgroundTasks
    clock: Callable[[], datetime] = _utc_now

    async def get(self, name: str, serving_grams: float | None = None) -> CacheEntry | None:
        """Return a live entry, evicting it in the background if expired."""
        key = cache_key(name, serving_grams)
        try:
            entry = await asyncio.to_thread(self.repository.get, key)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Cache lookup failed: key=%s error=%s", key, exc)
            return None
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            self.background.spawn(
                f"cache-evict:{key}", lambda: asyncio.to_thread(self.repository.delete, key)
            )
            return None
        self.background.spawn(
            f"cache-hit:{key}",
            lambda: asyncio.to_thread(self.repository.increment_hit_count, key),
        )
        return entry

    async def set(  # noqa: PLR0913
        self,
        name: str,
        nutrition: NutritionRecord,
        source: ResolutionSource,
        confidence: float,
        serving_grams: float,
        food_type: str | None = None,
    ) -> None:
        """Store a resolution; write failures are logged and dropped."""
        entry = self._build_entry(
            CacheWrite(
                name=name,
                nutrition=nutrition,
                source=source,
                confidence=confidence,
                serving_grams=serving_grams,
                food_type=food_type,
            ),
            self.clock(),
        )
        try:
            await asyncio.to_thread(self.repository.upsert, [entry])
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Cache write failed: key=%s error=%s", entry.key, exc)

    async def batch_get(
        self, items: Iterable[tuple[str, float | None]]
    ) -> dict[str, CacheEntry]:
        """Look up many (name, grams) pairs; failing chunks are skipped."""
        keys = list(dict.fromkeys(cache_key(name, grams) for name, grams in items))
        now = self.clock()
        results: dict[str, CacheEntry] = {}
        for start in range(0, len(keys), BATCH_SIZE):
            chunk = keys[start : start + BATCH_SIZE]
            try:
                entries = await asyncio.to_thread(self.repository.get_many, chunk)
            except Exception as exc:  # noqa: BLE001
                _logger.warning(
                    "Cache batch lookup failed: keys=%s error=%s", len(chunk), exc
                )
                continue
            for entry in entries:
                if not entry.is_expired(now):
                    results[entry.key] = entry
        return results

    async def batch_set(self, items: Iterable[CacheWrite]) -> None:
        """Store many entries, one repository write per chunk."""
        now = self.clock()
        entries = [self._build_entry(item, now) for item in items]
        for start in range(0, len(entries), BATCH_SIZE):
            chunk = entries[start : start + BATCH_SIZE]
            try:
                await asyncio.to_thread(self.repository.upsert, chunk)
            except Exception as exc:  # noqa: BLE001
                _logger.warning(
                    "Cache batch write failed: entries=%s error=%s", len(chunk), exc
                )

    async def invalidate(self, name: str, serving_grams: float | None = None) -> None:
        """Delete one entry."""
        key = cache_key(name, serving_grams)
        try:
            await asyncio.to_thread(self.repository.delete, key)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Cache invalidation failed: key=%s error=%s", key, exc)

    async def cleanup_expired(self) -> int:
        """Delete up to CLEANUP_LIMIT expired entries and return how many."""
        try:
            keys = await asyncio.to_thread(
                self.repository.list_expired_keys, self.clock(), CLEANUP_LIMIT
            )
            if not keys:
                return 0
            await asyncio.to_thread(self.repository.delete_many, keys)
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Cache cleanup failed: %s", exc)
            return 0
        _logger.info("Cache cleanup removed %s expired entries", len(keys))
        return len(keys)

    async def stats(self) -> CacheStats:
        """Summarize every stored entry."""
        try:
            entries = await asyncio.to_thread(self.repository.list_all)
        except Exception as exc:
            _logger.warning("Cache stats failed: %s", exc)
            raise CacheUnavailableError("Nutrition cache is unavailable") from exc
        now = self.clock()
        breakdown: dict[str, int] = {}
        for entry in entries:
            breakdown[entry.source.value] = breakdown.get(entry.source.value, 0) + 1
        total = len(entries)
        avg_confidence = (
            round(sum(entry.confidence for entry in entries) / total, 2) if total else 0.0
        )
        return CacheStats(
            total_entries=total,
            expired_entries=sum(1 for entry in entries if entry.is_expired(now)),
            source_breakdown=breakdown,
            avg_confidence=avg_confidence,
            total_hits=sum(entry.hit_count for entry in entries),
        )

    @staticmethod
    def _build_entry(item: CacheWrite, now: datetime) -> CacheEntry:
        return CacheEntry(
            key=cache_key(item.name, item.serving_grams),
            nutrition=item.nutrition,
            source=item.source,
            confidence=item.confidence,
            serving_grams=item.serving_grams,
            cached_at=now,
            expires_at=now + ttl_for(item.source),
            hit_count=0,
            original_query=item.name,
            food_type=item.food_type,
        )
