"""
FitEstimate — Success Predictor
Weighted linear model estimating the probability of sticking with a weight-loss plan.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from fitness_types import ActivityLevel, Sex, UserPhysicalProfile

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ══════════════════════════════════════════════════════════════════════════════

@dataclass
class SuccessAssessment:
    probability: float                  # 0–1
    contributions: dict[str, float]     # weighted term per feature; absent terms omitted
    samples_used: int


# ══════════════════════════════════════════════════════════════════════════════
# CONSISTENCY
# ══════════════════════════════════════════════════════════════════════════════

def progress_consistency(weekly_progress: Sequence[float]) -> float:
    """
    1 − (population std / mean) of the weekly changes, bounded to [0, 1].
    A single sample is treated as neutral (0.5). A non-positive mean means no
    net progress, which scores 0.
    """
    if len(weekly_progress) < 2:
        return 0.5

    arr = np.asarray(weekly_progress, dtype=float)
    mean = float(arr.mean())
    if mean <= 0:
        return 0.0
    std = float(arr.std())
    return min(max(0.0, 1.0 - std / mean), 1.0)


# ══════════════════════════════════════════════════════════════════════════════
# PREDICTOR
# ══════════════════════════════════════════════════════════════════════════════

class SuccessPredictor:
    """
    Weights (sum to 1.0 only when every term is present):
        age                 0.15
        sex                 0.12
        height              0.08
        initial_weight_loss 0.25
        self_efficacy       0.18
        activity_level      0.12
        consistency         0.10

    With short history the initial-loss and consistency terms drop out and the
    remaining weights are *not* renormalised, so the reachable maximum is lower.
    """

    WEIGHTS = {
        "age":                 0.15,
        "sex":                 0.12,
        "height":              0.08,
        "initial_weight_loss": 0.25,
        "self_efficacy":       0.18,
        "activity_level":      0.12,
        "consistency":         0.10,
    }

    ACTIVITY_SCORES = {
        ActivityLevel.sedentary: 0.3,
        ActivityLevel.light:     0.5,
        ActivityLevel.moderate:  0.7,
        ActivityLevel.intense:   0.9,
    }

    def _age_score(self, age: int) -> float:
        if age > 35:
            return 0.8
        if age > 25:
            return 0.6
        return 0.4

    def _height_score(self, height_cm: float) -> float:
        if height_cm > 175:
            return 0.8
        if height_cm > 165:
            return 0.6
        return 0.4

    def _initial_loss_score(self, first_two_weeks_kg: float) -> float:
        if first_two_weeks_kg > 0.5:
            return 0.9
        if first_two_weeks_kg > 0.2:
            return 0.6
        return 0.3

    def assess(
        self,
        profile: UserPhysicalProfile,
        weekly_progress: Sequence[float] = (),
    ) -> SuccessAssessment:
        w = self.WEIGHTS
        contributions: dict[str, float] = {}

        contributions["age"] = w["age"] * self._age_score(profile.age)
        contributions["sex"] = w["sex"] * (0.7 if profile.sex == Sex.male else 0.5)
        contributions["height"] = w["height"] * self._height_score(profile.height_cm)

        if len(weekly_progress) >= 2:
            initial = weekly_progress[0] + weekly_progress[1]
            contributions["initial_weight_loss"] = w["initial_weight_loss"] * self._initial_loss_score(initial)

        confidence = profile.confidence or 5
        contributions["self_efficacy"] = w["self_efficacy"] * (confidence / 10)
        contributions["activity_level"] = w["activity_level"] * self.ACTIVITY_SCORES.get(profile.activity_level, 0.5)

        if len(weekly_progress) > 0:
            contributions["consistency"] = w["consistency"] * progress_consistency(weekly_progress)

        raw = 0.0
        for value in contributions.values():
            raw += value
        probability = min(raw, 1.0)

        log.debug(f"Success probability {probability:.3f} from {len(weekly_progress)} weekly samples")
        return SuccessAssessment(
            probability=probability,
            contributions={k: round(v, 4) for k, v in contributions.items()},
            samples_used=len(weekly_progress),
        )

    def predict(
        self,
        profile: UserPhysicalProfile,
        weekly_progress: Sequence[float] = (),
    ) -> float:
        return self.assess(profile, weekly_progress).probability


# Module-level singleton
success_predictor = SuccessPredictor()
