"""
FitEstimate — Shared Domain Types
Enums, immutable records and the rounding convention used by every engine.

All estimates built on these types are simulated heuristics, not medical advice.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

DISCLAIMER = (
    "These estimates come from simulated heuristic formulas based on self-reported data. "
    "They are not medically validated and do not constitute medical or nutritional advice."
)


class InvalidInputError(ValueError):
    """Raised when a profile or request value falls outside its declared range."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding towards +inf."""
    return int(math.floor(value + 0.5))


# ══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════════════════════

class _AliasedEnum(str, Enum):
    """
    String enum that also accepts the legacy Portuguese values emitted by the
    calculator forms (e.g. "masculino", "intenso").
    """

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            key = value.strip().lower()
            canonical = cls._aliases().get(key, key)
            for member in cls:
                if member.value == canonical:
                    return member
        return None

    @classmethod
    def parse(cls, value: Any) -> "_AliasedEnum":
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise InvalidInputError(f"Invalid {cls.__name__} '{value}'. Expected one of: {allowed}.")


class Sex(_AliasedEnum):
    male = "male"
    female = "female"

    @classmethod
    def _aliases(cls):
        return {"masculino": "male", "feminino": "female"}


class ActivityLevel(_AliasedEnum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    intense = "intense"

    @classmethod
    def _aliases(cls):
        return {
            "sedentario": "sedentary",
            "leve": "light",
            "moderado": "moderate",
            "intenso": "intense",
        }


class ExperienceLevel(_AliasedEnum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"

    @classmethod
    def _aliases(cls):
        return {
            "iniciante": "beginner",
            "intermediario": "intermediate",
            "avancado": "advanced",
        }


class DominantType(str, Enum):
    power = "power"
    endurance = "endurance"


class TrainingGoal(str, Enum):
    strength = "strength"
    hypertrophy = "hypertrophy"
    endurance = "endurance"


class MuscleGroup(str, Enum):
    chest = "chest"
    back = "back"
    shoulders = "shoulders"
    arms = "arms"
    legs = "legs"
    core = "core"


class Difficulty(_AliasedEnum):
    too_easy = "too_easy"
    just_right = "just_right"
    too_hard = "too_hard"

    @classmethod
    def _aliases(cls):
        return {
            "muito_facil": "too_easy",
            "adequado": "just_right",
            "muito_dificil": "too_hard",
        }


class Recovery(_AliasedEnum):
    poor = "poor"
    good = "good"
    excellent = "excellent"

    @classmethod
    def _aliases(cls):
        return {"ruim": "poor", "boa": "good", "excelente": "excellent"}


# ══════════════════════════════════════════════════════════════════════════════
# USER PROFILE
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class UserPhysicalProfile:
    age: int
    sex: Sex
    height_cm: float
    weight_kg: float
    activity_level: ActivityLevel = ActivityLevel.sedentary
    experience_level: ExperienceLevel = ExperienceLevel.beginner
    confidence: Optional[int] = 5       # 1–10 self-efficacy; None falls back to 5

    def __post_init__(self):
        # Frozen: normalise through object.__setattr__
        object.__setattr__(self, "sex", Sex.parse(self.sex))
        object.__setattr__(self, "activity_level", ActivityLevel.parse(self.activity_level))
        object.__setattr__(self, "experience_level", ExperienceLevel.parse(self.experience_level))
        if self.confidence is None:
            object.__setattr__(self, "confidence", 5)

        if self.age <= 0:
            raise InvalidInputError(f"Age must be positive, got {self.age}.")
        if self.height_cm <= 0:
            raise InvalidInputError(f"Height must be positive, got {self.height_cm}.")
        if self.weight_kg <= 0:
            raise InvalidInputError(f"Weight must be positive, got {self.weight_kg}.")
        if not 1 <= self.confidence <= 10:
            raise InvalidInputError(f"Confidence must be between 1 and 10, got {self.confidence}.")

    @property
    def bmi(self) -> float:
        return self.weight_kg / (self.height_cm / 100) ** 2


@dataclass(frozen=True)
class GeneticProfile:
    power_score: int                # 0–5
    endurance_score: int            # 0–5
    dominant_type: DominantType


# ══════════════════════════════════════════════════════════════════════════════
# PROGRAM STRUCTURES
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SecondsRange:
    min: int
    max: int


@dataclass(frozen=True)
class Workout:
    name: str
    sets: int
    intensity_percent: float        # % of one-rep max
    rest_seconds: SecondsRange


@dataclass(frozen=True)
class TrainingProgram:
    workouts: tuple[Workout, ...]
    rest_days: int


@dataclass(frozen=True)
class MacroSplit:
    protein_g: int
    carb_g: int
    fat_g: int


@dataclass(frozen=True)
class NutritionPlan:
    daily_calories: float
    macros: MacroSplit


@dataclass(frozen=True)
class ProgramState:
    """One version of a user's combined training + nutrition program."""
    training: TrainingProgram
    nutrition: NutritionPlan


# ══════════════════════════════════════════════════════════════════════════════
# FEEDBACK & AUDIT
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Feedback:
    difficulty: Difficulty = Difficulty.just_right
    recovery: Recovery = Recovery.good

    def __post_init__(self):
        object.__setattr__(self, "difficulty", Difficulty.parse(self.difficulty))
        object.__setattr__(self, "recovery", Recovery.parse(self.recovery))


@dataclass(frozen=True)
class ProgressSnapshot:
    weight_change: float            # kg observed this period
    target: float                   # kg expected this period


class AdaptationKind(str, Enum):
    program_adaptation = "program_adaptation"
    refeed_recommended = "refeed_recommended"


@dataclass(frozen=True)
class AdaptationEvent:
    timestamp: datetime
    kind: AdaptationKind
    feedback: Optional[Feedback]
    progress: Optional[ProgressSnapshot]
    adjustments: Mapping[str, float] = field(default_factory=dict)
