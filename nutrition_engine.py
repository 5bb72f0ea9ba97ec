"""
FitEstimate — Adaptive Nutrition Engine
Mifflin-St Jeor BMR → TDEE → macro split, plus week-over-week calorie
adjustment from observed progress and static meal-timing guidance.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence

from adaptation_log import AdaptationLog, Clock, utc_now
from fitness_types import (
    ActivityLevel, AdaptationEvent, AdaptationKind, InvalidInputError, MacroSplit,
    NutritionPlan, ProgressSnapshot, Sex, UserPhysicalProfile, round_half_up,
)

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ══════════════════════════════════════════════════════════════════════════════

KCAL_PER_KG_FAT = 7700.0
DEFAULT_TARGET_WEEKLY_CHANGE_KG = 0.5
ON_TARGET_TOLERANCE_KG = 0.2
MAX_DAILY_ADJUSTMENT = 200

REFEED_WINDOW_WEEKS = 4
REFEED_THRESHOLD_RATIO = 0.6
REFEED_EXTRA_CALORIES = 300

ACTIVITY_FACTORS = {
    ActivityLevel.sedentary: 1.2,
    ActivityLevel.light:     1.375,
    ActivityLevel.moderate:  1.55,
    ActivityLevel.intense:   1.725,
}

# Strength-training days per week → TDEE multiplier
TRAINING_DAY_FACTORS = {2: 1.4, 3: 1.5, 4: 1.6, 5: 1.7, 6: 1.8, 7: 1.9}
DEFAULT_TRAINING_DAY_FACTOR = 1.5

# Share of calories: protein / carbs / fat
DEFAULT_MACRO_RATIOS = (0.25, 0.45, 0.30)


# ══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ══════════════════════════════════════════════════════════════════════════════

@dataclass
class CalorieAdjustment:
    new_calories: float
    adjustment: int                 # kcal/day, within ±200
    reasoning: str
    refeed: Optional[AdaptationEvent] = None


@dataclass(frozen=True)
class MacroRatios:
    carbs: float
    protein: float
    fat: float


@dataclass(frozen=True)
class MealWindow:
    timing_minutes: int             # relative to workout start (negative = before)
    macros: MacroRatios
    calories: int


@dataclass(frozen=True)
class MealShare:
    percentage: float
    timing: str


@dataclass(frozen=True)
class SessionWindow:
    workout_time: str
    pre_workout_at: str
    post_workout_at: str


@dataclass
class MealTiming:
    pre_workout: MealWindow
    post_workout: MealWindow
    main_meals: dict[str, MealShare]
    sessions: list[SessionWindow] = field(default_factory=list)


PRE_WORKOUT = MealWindow(timing_minutes=-60, macros=MacroRatios(carbs=0.5, protein=0.3, fat=0.2), calories=200)
POST_WORKOUT = MealWindow(timing_minutes=30, macros=MacroRatios(carbs=0.6, protein=0.4, fat=0.0), calories=300)

MEAL_DISTRIBUTION = {
    "breakfast": MealShare(percentage=0.25, timing="07:00"),
    "lunch":     MealShare(percentage=0.35, timing="12:00"),
    "dinner":    MealShare(percentage=0.30, timing="19:00"),
    "snacks":    MealShare(percentage=0.10, timing="flexible"),
}


# ══════════════════════════════════════════════════════════════════════════════
# ENERGY CALCULATOR
# ══════════════════════════════════════════════════════════════════════════════

def bmi_category(bmi: float) -> str:
    if bmi < 18.5: return "underweight"
    if bmi < 25:   return "normal"
    if bmi < 30:   return "overweight"
    if bmi < 35:   return "obesity_class_1"
    if bmi < 40:   return "obesity_class_2"
    return "obesity_class_3"


class EnergyCalculator:
    """
    BMR via Mifflin-St Jeor:
        10 × weight + 6.25 × height − 5 × age + 5     (male)
        10 × weight + 6.25 × height − 5 × age − 161   (female)
    """

    def bmr(self, profile: UserPhysicalProfile) -> float:
        base = 10 * profile.weight_kg + 6.25 * profile.height_cm - 5 * profile.age
        return base + 5 if profile.sex == Sex.male else base - 161

    def tdee(self, bmr: float, activity_level: ActivityLevel) -> float:
        return bmr * ACTIVITY_FACTORS.get(activity_level, 1.2)

    def training_tdee(self, bmr: float, training_days: int) -> float:
        return bmr * TRAINING_DAY_FACTORS.get(training_days, DEFAULT_TRAINING_DAY_FACTOR)

    def macros(self, calories: float, ratios: tuple[float, float, float] = DEFAULT_MACRO_RATIOS) -> MacroSplit:
        protein, carbs, fat = ratios
        return MacroSplit(
            protein_g=round_half_up(calories * protein / 4),
            carb_g=round_half_up(calories * carbs / 4),
            fat_g=round_half_up(calories * fat / 9),
        )

    def nutrition_plan(self, calories: float) -> NutritionPlan:
        return NutritionPlan(daily_calories=calories, macros=self.macros(calories))


# ══════════════════════════════════════════════════════════════════════════════
# ADAPTIVE NUTRITION
# ══════════════════════════════════════════════════════════════════════════════

def _reasoning(adjustment: int, actual: float, target: float) -> str:
    if adjustment > 0:
        return f"Progress slower than expected ({actual:.1f}kg vs {target:g}kg). Increasing deficit."
    if adjustment < 0:
        return f"Progress faster than expected ({actual:.1f}kg vs {target:g}kg). Reducing deficit."
    return "Progress within expectations. Keeping current calories."


def _shift_clock(hhmm: str, minutes: int) -> str:
    try:
        start = datetime.strptime(hhmm, "%H:%M")
    except ValueError:
        raise InvalidInputError(f"Workout time must be HH:MM, got '{hhmm}'.")
    return (start + timedelta(minutes=minutes)).strftime("%H:%M")


class AdaptiveNutritionEngine:

    def __init__(self, adaptation_log: Optional[AdaptationLog] = None, clock: Clock = utc_now):
        self._log = adaptation_log
        self._clock = clock
        self.energy = EnergyCalculator()

    def dynamic_calorie_adjustment(
        self,
        weekly_progress: Sequence[float],
        current_calories: float,
        target_weekly_change_kg: float = DEFAULT_TARGET_WEEKLY_CHANGE_KG,
    ) -> CalorieAdjustment:
        """
        Compare the latest weekly change with the target. Off by more than
        0.2 kg → shift daily calories by (target − actual) × 7700 / 7, capped
        at ±200 kcal. A stalled 4-week average also yields an advisory refeed
        event, which is never folded into new_calories.
        """
        actual = weekly_progress[-1] if weekly_progress else 0.0
        target = target_weekly_change_kg

        adjustment = 0
        if abs(actual - target) > ON_TARGET_TOLERANCE_KG:
            adjustment = round_half_up((target - actual) * KCAL_PER_KG_FAT / 7)
            adjustment = max(-MAX_DAILY_ADJUSTMENT, min(MAX_DAILY_ADJUSTMENT, adjustment))

        refeed = None
        if len(weekly_progress) >= REFEED_WINDOW_WEEKS:
            recent = weekly_progress[-REFEED_WINDOW_WEEKS:]
            recent_average = sum(recent) / REFEED_WINDOW_WEEKS
            if recent_average < target * REFEED_THRESHOLD_RATIO:
                refeed = AdaptationEvent(
                    timestamp=self._clock(),
                    kind=AdaptationKind.refeed_recommended,
                    feedback=None,
                    progress=ProgressSnapshot(weight_change=recent_average, target=target),
                    adjustments={
                        "week": float(len(weekly_progress)),
                        "refeed_calories": float(REFEED_EXTRA_CALORIES),
                    },
                )
                if self._log is not None:
                    self._log.append(refeed)
                log.info(
                    f"Metabolic adaptation suspected at week {len(weekly_progress)}: "
                    f"avg {recent_average:.2f}kg vs target {target}kg, refeed recommended"
                )

        return CalorieAdjustment(
            new_calories=current_calories + adjustment,
            adjustment=adjustment,
            reasoning=_reasoning(adjustment, actual, target),
            refeed=refeed,
        )

    def meal_timing(self, workout_times: Sequence[str] = ()) -> MealTiming:
        sessions = [
            SessionWindow(
                workout_time=t,
                pre_workout_at=_shift_clock(t, PRE_WORKOUT.timing_minutes),
                post_workout_at=_shift_clock(t, POST_WORKOUT.timing_minutes),
            )
            for t in workout_times
        ]
        return MealTiming(
            pre_workout=PRE_WORKOUT,
            post_workout=POST_WORKOUT,
            main_meals=dict(MEAL_DISTRIBUTION),
            sessions=sessions,
        )


# Module-level singleton, no log attached
nutrition_engine = AdaptiveNutritionEngine()
