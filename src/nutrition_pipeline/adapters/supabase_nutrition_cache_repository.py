"""Supabase repository for cached nutrition resolutions."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from nutrition_pipeline.domain.cache import CacheEntry
from nutrition_pipeline.domain.nutrition import NutritionRecord, ResolutionSource
from nutrition_pipeline.services.cache import NutritionCacheRepository

_COLUMNS = (
    "key, nutrition, source, confidence, serving_grams, cached_at, expires_at, "
    "hit_count, original_query, food_type"
)


@dataclass
class SupabaseNutritionCacheRepository(NutritionCacheRepository):
    """Supabase implementation storing one row per cache key."""

    client: Client
    table_name: str = "nutrition_cache_v2"

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry stored under a key."""
        response = (
            self.client.table(self.table_name)
            .select(_COLUMNS)
            .eq("key", key)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return _parse_row(rows[0]) if rows else None

    def get_many(self, keys: list[str]) -> list[CacheEntry]:
        """Return the entries that exist for the given keys."""
        if not keys:
            return []
        response = (
            self.client.table(self.table_name).select(_COLUMNS).in_("key", keys).execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def upsert(self, entries: list[CacheEntry]) -> None:
        """Insert or replace entries in a single request."""
        if not entries:
            return
        self.client.table(self.table_name).upsert(
            [_to_row(entry) for entry in entries], on_conflict="key"
        ).execute()

    def delete(self, key: str) -> None:
        """Delete one entry."""
        self.client.table(self.table_name).delete().eq("key", key).execute()

    def delete_many(self, keys: list[str]) -> None:
        """Delete several entries."""
        if not keys:
            return
        self.client.table(self.table_name).delete().in_("key", keys).execute()

    def increment_hit_count(self, key: str) -> None:
        """Read-then-write hit counter bump; concurrent bumps may be lost."""
        response = (
            self.client.table(self.table_name)
            .select("hit_count")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        if not rows:
            return
        hit_count = int(rows[0].get("hit_count") or 0) + 1
        self.client.table(self.table_name).update({"hit_count": hit_count}).eq(
            "key", key
        ).execute()

    def list_expired_keys(self, now: datetime, limit: int) -> list[str]:
        """Return keys of expired entries, oldest expiry first."""
        response = (
            self.client.table(self.table_name)
            .select("key")
            .lt("expires_at", now.isoformat())
            .order("expires_at", desc=False)
            .limit(limit)
            .execute()
        )
        return [str(row["key"]) for row in response.data or []]

    def list_all(self) -> list[CacheEntry]:
        """Return every stored entry."""
        response = self.client.table(self.table_name).select(_COLUMNS).execute()
        return [_parse_row(row) for row in response.data or []]


def _to_row(entry: CacheEntry) -> dict[str, object]:
    return {
        "key": entry.key,
        "nutrition": entry.nutrition.to_dict(),
        "source": entry.source.value,
        "confidence": entry.confidence,
        "serving_grams": entry.serving_grams,
        "cached_at": entry.cached_at.isoformat(),
        "expires_at": entry.expires_at.isoformat(),
        "hit_count": entry.hit_count,
        "original_query": entry.original_query,
        "food_type": entry.food_type,
    }


def _parse_row(row: dict[str, object]) -> CacheEntry:
    nutrition_raw = row.get("nutrition")
    return CacheEntry(
        key=str(row["key"]),
        nutrition=NutritionRecord.from_mapping(
            nutrition_raw if isinstance(nutrition_raw, dict) else {}
        ),
        source=ResolutionSource(str(row.get("source", "ai_fallback"))),
        confidence=float(row.get("confidence") or 0.0),
        serving_grams=float(row.get("serving_grams") or 0.0),
        cached_at=_parse_timestamp(row.get("cached_at")),
        expires_at=_parse_timestamp(row.get("expires_at")),
        hit_count=int(row.get("hit_count") or 0),
        original_query=str(row.get("original_query") or ""),
        food_type=row.get("food_type") if isinstance(row.get("food_type"), str) else None,
    )


def _parse_timestamp(raw: object) -> datetime:
    if isinstance(raw, str) and raw:
        parsed = datetime.fromisoformat(raw)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.min.replace(tzinfo=UTC)
