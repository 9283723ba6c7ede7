"""Nutrition domain models."""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum

from pydantic import BaseModel, Field


class FoodType(str, Enum):
    """Classification of a food mention; drives resolution routing."""

    WHOLE_FOOD = "whole_food"
    BRANDED_PACKAGED = "branded_packaged"
    RESTAURANT_ITEM = "restaurant_item"
    HOMEMADE_DISH = "homemade_dish"
    GENERIC_DISH = "generic_dish"


class ResolutionSource(str, Enum):
    """Where a resolved nutrition record came from."""

    CACHE = "cache"
    USDA = "usda"
    OPENFOODFACTS = "openfoodfacts"
    EDAMAM = "edamam"
    HYBRID = "hybrid"
    DECOMPOSED = "decomposed"
    AI_FALLBACK = "ai_fallback"


class IngredientDescriptor(BaseModel):
    """Single ingredient of a composite dish."""

    name: str = Field(min_length=1)
    estimated_grams: float = Field(gt=0)


class FoodDescriptor(BaseModel):
    """Normalized, already-identified food mention."""

    name: str = Field(min_length=1)
    quantity: float = 1.0
    unit: str = "serving"
    estimated_grams: float = Field(gt=0)
    food_type: FoodType = FoodType.GENERIC_DISH
    restaurant_name: str | None = None
    brand_name: str | None = None
    cuisine_type: str | None = None
    meal_type: str | None = None
    ingredients: list[IngredientDescriptor] | None = None
    confidence: float = Field(default=0.8, ge=0.0, le=1.0)

    def qualified_name(self, qualifier: str | None) -> str:
        """Return the name prefixed with a brand or restaurant, when given."""
        if qualifier:
            return f"{qualifier} {self.name}"
        return self.name


@dataclass(frozen=True)
class NutritionRecord:
    """Per-serving nutrition. Energy in kcal, macros in g, minerals in mg."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    sodium: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    monounsaturated_fat: float = 0.0
    polyunsaturated_fat: float = 0.0
    cholesterol: float = 0.0
    potassium: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    magnesium: float = 0.0
    zinc: float = 0.0
    phosphorus: float = 0.0
    iodine: float = 0.0
    chromium: float = 0.0
    vitamin_a: float = 0.0
    vitamin_d: float = 0.0
    vitamin_e: float = 0.0
    vitamin_k: float = 0.0
    vitamin_c: float = 0.0
    thiamin: float = 0.0
    riboflavin: float = 0.0
    niacin: float = 0.0
    vitamin_b6: float = 0.0
    folate: float = 0.0
    vitamin_b12: float = 0.0
    pantothenic_acid: float = 0.0
    choline: float = 0.0

    @classmethod
    def empty(cls) -> "NutritionRecord":
        """Return an all-zero record."""
        return cls()

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "NutritionRecord":
        """Build a record from a mapping, ignoring unknown and non-numeric keys."""
        known = {}
        for name in NUTRIENT_FIELDS:
            value = values.get(name)
            if isinstance(value, int | float) and not isinstance(value, bool):
                known[name] = float(value)
        return cls(**known)

    def to_dict(self) -> dict[str, float]:
        """Return the record as a plain dict."""
        return asdict(self)

    def scaled(self, factor: float) -> "NutritionRecord":
        """Multiply every nutrient by a factor and apply the rounding policy."""
        return round_record(
            NutritionRecord(
                **{name: value * factor for name, value in self.to_dict().items()}
            )
        )

    def merged(
        self, primary: "NutritionRecord", primary_fields: Iterable[str]
    ) -> "NutritionRecord":
        """Return this record with the given fields taken from ``primary``."""
        overrides = {name: getattr(primary, name) for name in primary_fields}
        return replace(self, **overrides)

    @classmethod
    def total(cls, records: Iterable["NutritionRecord"]) -> "NutritionRecord":
        """Sum records field by field and round with the shared policy."""
        sums = dict.fromkeys(NUTRIENT_FIELDS, 0.0)
        for record in records:
            for name in NUTRIENT_FIELDS:
                sums[name] += getattr(record, name)
        return round_record(cls(**sums))


NUTRIENT_FIELDS: tuple[str, ...] = tuple(field.name for field in fields(NutritionRecord))

# Nutrients reported in whole units (kcal or mg).
WHOLE_UNIT_NUTRIENTS = frozenset(
    {
        "calories",
        "sodium",
        "potassium",
        "calcium",
        "cholesterol",
        "phosphorus",
        "magnesium",
    }
)

# Trace nutrients that keep two decimals.
TRACE_NUTRIENTS = frozenset(
    {
        "thiamin",
        "riboflavin",
        "vitamin_b6",
        "vitamin_b12",
        "vitamin_d",
        "vitamin_k",
    }
)


def round_nutrient(name: str, value: float) -> float:
    """Round a nutrient value according to the shared rounding policy."""
    if name in WHOLE_UNIT_NUTRIENTS:
        return float(_round_half_up(value, 0))
    if name in TRACE_NUTRIENTS:
        return _round_half_up(value, 2)
    return _round_half_up(value, 1)


def round_record(record: NutritionRecord) -> NutritionRecord:
    """Round every field of a record."""
    return NutritionRecord(
        **{name: round_nutrient(name, value) for name, value in record.to_dict().items()}
    )


def _round_half_up(value: float, digits: int) -> float:
    # Half-up, unlike round() which rounds half to even.
    factor = 10**digits
    scaled = abs(value) * factor
    rounded = int(scaled + 0.5 + 1e-9) / factor
    return rounded if value >= 0 else -rounded


@dataclass(frozen=True)
class SourceMatch:
    """Best match returned by one external nutrition source."""

    nutrition: NutritionRecord
    confidence: float
    serving_grams: float
    source_id: str
    label: str
    source: ResolutionSource
    reliable_fields: frozenset[str] = frozenset(NUTRIENT_FIELDS)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one food descriptor."""

    nutrition: NutritionRecord
    source: ResolutionSource
    confidence: float
    serving_grams: float

    @classmethod
    def unresolved(cls, serving_grams: float) -> "ResolutionResult":
        """Zero-confidence result used when every source misses."""
        return cls(
            nutrition=NutritionRecord.empty(),
            source=ResolutionSource.AI_FALLBACK,
            confidence=0.0,
            serving_grams=serving_grams,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize for API responses."""
        return {
            "nutrition": self.nutrition.to_dict(),
            "source": self.source.value,
            "confidence": self.confidence,
            "serving_grams": self.serving_grams,
        }


def scale_to_serving(
    nutrition: NutritionRecord, source_grams: float, target_grams: float
) -> NutritionRecord:
    """Linearly scale a record from one serving size to another."""
    if source_grams <= 0 or source_grams == target_grams:
        return round_record(nutrition)
    return nutrition.scaled(target_grams / source_grams)
