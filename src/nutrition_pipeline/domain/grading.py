"""Domain models for deterministic food grading."""

from dataclasses import dataclass, field
from enum import Enum


class Grade(str, Enum):
    """Letter grade derived from a 0-100 score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class WellnessFocus(str, Enum):
    """Nutritional priority with its own grading rubric."""

    BALANCED = "balanced"
    MUSCLE_BUILDING = "muscle_building"
    HEART_HEALTH = "heart_health"
    ENERGY_ENDURANCE = "energy_endurance"
    WEIGHT_MANAGEMENT = "weight_management"
    BRAIN_FOCUS = "brain_focus"
    GUT_HEALTH = "gut_health"
    BLOOD_SUGAR_BALANCE = "blood_sugar_balance"
    BONE_JOINT_SUPPORT = "bone_joint_support"
    ANTI_INFLAMMATORY = "anti_inflammatory"


class SatietyCategory(str, Enum):
    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"


class InflammatoryCategory(str, Enum):
    ANTI_INFLAMMATORY = "anti_inflammatory"
    NEUTRAL = "neutral"
    MILDLY_INFLAMMATORY = "mildly_inflammatory"
    INFLAMMATORY = "inflammatory"


@dataclass(frozen=True)
class FocusGrade:
    """Grade for one wellness focus."""

    grade: Grade
    score: int
    insight: str
    pros: tuple[str, ...] = ()
    cons: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "grade": self.grade.value,
            "score": self.score,
            "insight": self.insight,
            "pros": list(self.pros),
            "cons": list(self.cons),
        }


@dataclass(frozen=True)
class OverallGrade:
    """Nutri-Score based overall grade."""

    grade: Grade
    score: int
    nutri_score_points: int

    def to_dict(self) -> dict[str, object]:
        return {
            "grade": self.grade.value,
            "score": self.score,
            "nutri_score_points": self.nutri_score_points,
        }


@dataclass(frozen=True)
class SatietyResult:
    score: int
    category: SatietyCategory


@dataclass(frozen=True)
class InflammatoryResult:
    index: float
    category: InflammatoryCategory


@dataclass(frozen=True)
class GradingResult:
    """All grades and derived scores for one food."""

    overall: OverallGrade
    focus_grades: dict[WellnessFocus, FocusGrade]
    satiety: SatietyResult
    inflammatory: InflammatoryResult
    strengths: tuple[str, ...] = field(default_factory=tuple)
    concerns: tuple[str, ...] = field(default_factory=tuple)

    def focus(self, focus: WellnessFocus) -> FocusGrade:
        """Return the grade for a single focus."""
        return self.focus_grades[focus]

    def to_dict(self) -> dict[str, object]:
        """Serialize for API responses."""
        return {
            "overall": self.overall.to_dict(),
            "focus_grades": {
                focus.value: grade.to_dict() for focus, grade in self.focus_grades.items()
            },
            "satiety": {
                "score": self.satiety.score,
                "category": self.satiety.category.value,
            },
            "inflammatory": {
                "index": self.inflammatory.index,
                "category": self.inflammatory.category.value,
            },
            "strengths": list(self.strengths),
            "concerns": list(self.concerns),
        }
