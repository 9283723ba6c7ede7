"""Tests for the Supabase nutrition cache repository."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from nutrition_pipeline.adapters.supabase_nutrition_cache_repository import (
    SupabaseNutritionCacheRepository,
)
from nutrition_pipeline.domain.cache import CacheEntry
from nutrition_pipeline.domain.nutrition import NutritionRecord, ResolutionSource

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {
            "select": [],
            "upsert": [],
            "update": [],
            "delete": [],
        }
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    upsert_conflicts: list[str] = field(default_factory=list)
    executed: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, on_conflict: str = "") -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.upsert_conflicts.append(on_conflict)
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def in_(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def lt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.executed.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _row(key: str, **overrides) -> dict[str, object]:  # type: ignore[no-untyped-def]
    row: dict[str, object] = {
        "key": key,
        "nutrition": {"calories": 280, "protein": 52.7, "bogus": "x"},
        "source": "usda",
        "confidence": 0.92,
        "serving_grams": 170,
        "cached_at": NOW.isoformat(),
        "expires_at": (NOW + timedelta(days=30)).isoformat(),
        "hit_count": 2,
        "original_query": "Grilled Chicken",
        "food_type": "whole_food",
    }
    row.update(overrides)
    return row


def test_get_parses_row() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")
    table.queue("select", [_row("grilled chicken_170g")])

    entry = SupabaseNutritionCacheRepository(client).get("grilled chicken_170g")

    assert entry is not None
    assert entry.source is ResolutionSource.USDA
    assert entry.nutrition.calories == 280
    assert entry.nutrition.protein == 52.7
    assert entry.serving_grams == 170
    assert entry.expires_at == NOW + timedelta(days=30)
    assert entry.hit_count == 2
    assert table.last_filters == [("key", "grilled chicken_170g")]


def test_get_missing_and_naive_timestamps() -> None:
    client = FakeSupabaseClient()
    table = client.table("cache")
    table.queue("select", [])
    table.queue(
        "select", [_row("rice", cached_at="2026-03-01T12:00:00", food_type=None)]
    )
    repository = SupabaseNutritionCacheRepository(client, table_name="cache")

    assert repository.get("rice") is None
    entry = repository.get("rice")

    assert entry is not None
    assert entry.cached_at == NOW
    assert entry.food_type is None


def test_upsert_serializes_entries_with_key_conflict() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")
    entry = CacheEntry(
        key="oatmeal_250g",
        nutrition=NutritionRecord(calories=150, fiber=4),
        source=ResolutionSource.EDAMAM,
        confidence=0.8,
        serving_grams=250,
        cached_at=NOW,
        expires_at=NOW + timedelta(days=30),
        original_query="Oatmeal",
    )
    repository = SupabaseNutritionCacheRepository(client)

    repository.upsert([entry])
    repository.upsert([])

    assert table.upsert_conflicts == ["key"]
    payload = table.last_payload
    assert isinstance(payload, list)
    assert payload[0]["key"] == "oatmeal_250g"
    assert payload[0]["source"] == "edamam"
    assert payload[0]["nutrition"]["fiber"] == 4
    assert payload[0]["expires_at"] == "2026-03-31T12:00:00+00:00"


def test_get_many_and_delete_many() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")
    table.queue("select", [_row("apple"), _row("banana", source="openfoodfacts")])
    repository = SupabaseNutritionCacheRepository(client)

    entries = repository.get_many(["apple", "banana"])
    repository.delete_many(["apple"])

    assert [entry.key for entry in entries] == ["apple", "banana"]
    assert entries[1].source is ResolutionSource.OPENFOODFACTS
    assert ("key", ["apple"]) in table.last_filters
    assert repository.get_many([]) == []


def test_increment_hit_count_reads_then_writes() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")
    table.queue("select", [{"hit_count": 4}])
    repository = SupabaseNutritionCacheRepository(client)

    repository.increment_hit_count("apple")

    assert table.last_payload == {"hit_count": 5}
    assert table.executed == ["select", "update"]


def test_increment_hit_count_skips_missing_rows() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")

    SupabaseNutritionCacheRepository(client).increment_hit_count("ghost")

    assert table.executed == ["select"]


def test_list_expired_keys_filters_by_expiry() -> None:
    client = FakeSupabaseClient()
    table = client.table("nutrition_cache_v2")
    table.queue("select", [{"key": "old"}, {"key": "older"}])

    keys = SupabaseNutritionCacheRepository(client).list_expired_keys(NOW, 500)

    assert keys == ["old", "older"]
    assert ("expires_at", NOW.isoformat()) in table.last_filters
