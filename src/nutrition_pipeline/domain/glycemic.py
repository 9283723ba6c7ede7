"""Domain models for glycemic index and load."""

from dataclasses import dataclass
from enum import Enum


class GIBand(str, Enum):
    """Low, medium or high band for GI and GL values."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GIMatchSource(str, Enum):
    """How a GI value was matched to a food."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    CATEGORY = "category"
    DEFAULT = "default"


class GIConfidence(str, Enum):
    """Trust level of a reference table entry."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class GIReferenceEntry:
    """Static reference value for one food."""

    name: str
    gi: int
    serving_grams: float
    carbs_per_serving: float
    confidence: GIConfidence
    category: str
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class GIResult:
    """Glycemic profile of one serving."""

    gi: int
    gl: int
    gi_band: GIBand
    gl_band: GIBand
    source: GIMatchSource
    confidence: float
    matched_food: str | None = None
    category: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "gi": self.gi,
            "gl": self.gl,
            "gi_band": self.gi_band.value,
            "gl_band": self.gl_band.value,
            "source": self.source.value,
            "confidence": self.confidence,
            "matched_food": self.matched_food,
            "category": self.category,
        }


@dataclass(frozen=True)
class MealGI:
    """Carbohydrate-weighted GI for a group of items."""

    gi: int
    gi_band: GIBand


@dataclass(frozen=True)
class MealGL:
    """Summed GL for a group of items."""

    gl: int
    gl_band: GIBand
