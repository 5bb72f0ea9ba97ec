"""
FitEstimate — Adaptive Personalization Engine
Feedback-driven program versioning. Each cycle builds a new ProgramState from
the previous one plus bounded adjustments and records one audit event.
"""

import logging
from dataclasses import replace
from typing import Optional

from adaptation_log import AdaptationLog, Clock, InMemoryAdaptationLog, utc_now
from config import settings
from fitness_types import (
    AdaptationEvent, AdaptationKind, Difficulty, Feedback, ProgramState,
    ProgressSnapshot, Recovery, round_half_up,
)

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ══════════════════════════════════════════════════════════════════════════════

INTENSITY_MULTIPLIERS = {
    Difficulty.too_easy:   1.15,
    Difficulty.too_hard:   0.85,
    Difficulty.just_right: 1.0,
}

VOLUME_MULTIPLIERS = {
    Recovery.poor:      0.9,
    Recovery.excellent: 1.1,
}

MIN_REST_DAYS = 1
MAX_REST_DAYS = 3

UNDERPERFORMING_RATIO = 0.5
OVERPERFORMING_RATIO = 1.5
UNDERPERFORMING_CALORIES = -100
OVERPERFORMING_CALORIES = +50


# ══════════════════════════════════════════════════════════════════════════════
# ENGINE
# ══════════════════════════════════════════════════════════════════════════════

class AdaptivePersonalizationEngine:
    """
    Rules, each applied independently:
        difficulty too_easy / too_hard   intensity ×1.15 / ×0.85 (else ×1.0)
        recovery poor                    sets ×0.9, rest days +1 (max 3)
        recovery excellent               sets ×1.1, rest days −1 (min 1)
        weight change < 0.5 × target     calories −100
        weight change > 1.5 × target     calories +50
    A calorie cut stops at min_daily_calories and leaves a plan already
    below it unchanged; either way the floor is recorded as "calorie_floor".
    Rounded values use round-half-up.
    """

    def __init__(
        self,
        adaptation_log: Optional[AdaptationLog] = None,
        clock: Clock = utc_now,
        min_daily_calories: float = settings.MIN_DAILY_CALORIES,
    ):
        self.log = adaptation_log if adaptation_log is not None else InMemoryAdaptationLog()
        self._clock = clock
        self.min_daily_calories = min_daily_calories

    def adjustments_for(self, program: ProgramState, feedback: Feedback, progress: ProgressSnapshot) -> dict[str, float]:
        adjustments: dict[str, float] = {
            "intensity_multiplier": INTENSITY_MULTIPLIERS.get(feedback.difficulty, 1.0),
        }

        if feedback.recovery in VOLUME_MULTIPLIERS:
            adjustments["volume_multiplier"] = VOLUME_MULTIPLIERS[feedback.recovery]
            rest_days = program.training.rest_days
            if feedback.recovery == Recovery.poor:
                adjustments["rest_days"] = min(rest_days + 1, MAX_REST_DAYS)
            else:
                adjustments["rest_days"] = max(rest_days - 1, MIN_REST_DAYS)

        if progress.weight_change < progress.target * UNDERPERFORMING_RATIO:
            current = program.nutrition.daily_calories
            cut = UNDERPERFORMING_CALORIES
            if current + cut < self.min_daily_calories:
                cut = min(0, max(cut, self.min_daily_calories - current))
                adjustments["calorie_floor"] = self.min_daily_calories
            adjustments["calorie_adjustment"] = cut
        elif progress.weight_change > progress.target * OVERPERFORMING_RATIO:
            adjustments["calorie_adjustment"] = OVERPERFORMING_CALORIES

        return adjustments

    def apply(self, program: ProgramState, adjustments: dict[str, float]) -> ProgramState:
        intensity = adjustments.get("intensity_multiplier", 1.0)
        volume = adjustments.get("volume_multiplier")

        workouts = tuple(
            replace(
                w,
                intensity_percent=round_half_up(w.intensity_percent * intensity),
                sets=round_half_up(w.sets * volume) if volume is not None else w.sets,
            )
            for w in program.training.workouts
        )
        training = replace(
            program.training,
            workouts=workouts,
            rest_days=int(adjustments.get("rest_days", program.training.rest_days)),
        )
        nutrition = replace(
            program.nutrition,
            daily_calories=program.nutrition.daily_calories + adjustments.get("calorie_adjustment", 0),
        )
        return ProgramState(training=training, nutrition=nutrition)

    def adapt(self, program: ProgramState, feedback: Feedback, progress: ProgressSnapshot) -> ProgramState:
        adjustments = self.adjustments_for(program, feedback, progress)
        self.log.append(AdaptationEvent(
            timestamp=self._clock(),
            kind=AdaptationKind.program_adaptation,
            feedback=feedback,
            progress=progress,
            adjustments=dict(adjustments),
        ))
        log.info(
            f"Program adapted (difficulty={feedback.difficulty.value}, "
            f"recovery={feedback.recovery.value}): {adjustments}"
        )
        return self.apply(program, adjustments)
