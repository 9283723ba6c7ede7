"""Domain models for the nutrition cache."""

from dataclasses import dataclass, field
from datetime import datetime

from nutrition_pipeline.domain.nutrition import NutritionRecord, ResolutionSource


@dataclass(frozen=True)
class CacheEntry:
    """Persisted resolution keyed by normalized food name and serving bucket."""

    key: str
    nutrition: NutritionRecord
    source: ResolutionSource
    confidence: float
    serving_grams: float
    cached_at: datetime
    expires_at: datetime
    hit_count: int = 0
    original_query: str = ""
    food_type: str | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return True once the entry is past its expiry."""
        return self.expires_at < now


@dataclass(frozen=True)
class CacheStats:
    """Aggregate view over every stored cache entry."""

    total_entries: int
    expired_entries: int
    source_breakdown: dict[str, int] = field(default_factory=dict)
    avg_confidence: float = 0.0
    total_hits: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "total_entries": self.total_entries,
            "expired_entries": self.expired_entries,
            "source_breakdown": dict(self.source_breakdown),
            "avg_confidence": self.avg_confidence,
            "total_hits": self.total_hits,
        }
