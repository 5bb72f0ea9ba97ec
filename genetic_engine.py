"""
FitEstimate — Genetic Profile Estimator
Synthetic "power vs endurance" predisposition from observable traits.
Not a genetic test: every point below is an arbitrary calibration constant.
"""

import logging

from fitness_types import (
    ActivityLevel, DominantType, GeneticProfile, Sex, UserPhysicalProfile,
)

log = logging.getLogger(__name__)

MAX_SCORE = 5

# Calibration thresholds; every downstream plan depends on these
BMI_LEAN_BELOW = 22.0
BMI_HEAVY_ABOVE = 25.0
AGE_YOUNG_BELOW = 25
AGE_MATURE_ABOVE = 40


class GeneticProfileEstimator:
    """
    Point system, applied in order:
        BMI < 22        endurance +2
        BMI > 25        power +2
        otherwise       power +1, endurance +1
        male            power +1     (female: endurance +1)
        age < 25        power +1, endurance +1
        age > 40        endurance +1
        intense         power +1
        moderate        endurance +1
    Both scores are capped at 5. Ties resolve to endurance.
    """

    def estimate(self, profile: UserPhysicalProfile) -> GeneticProfile:
        power = 0
        endurance = 0

        bmi = profile.bmi
        if bmi < BMI_LEAN_BELOW:
            endurance += 2
        elif bmi > BMI_HEAVY_ABOVE:
            power += 2
        else:
            power += 1
            endurance += 1

        if profile.sex == Sex.male:
            power += 1
        else:
            endurance += 1

        if profile.age < AGE_YOUNG_BELOW:
            power += 1
            endurance += 1
        elif profile.age > AGE_MATURE_ABOVE:
            endurance += 1

        if profile.activity_level == ActivityLevel.intense:
            power += 1
        elif profile.activity_level == ActivityLevel.moderate:
            endurance += 1

        power = min(power, MAX_SCORE)
        endurance = min(endurance, MAX_SCORE)
        dominant = DominantType.power if power > endurance else DominantType.endurance

        log.debug(f"Genetic profile: bmi={bmi:.1f} power={power} endurance={endurance} -> {dominant.value}")
        return GeneticProfile(power_score=power, endurance_score=endurance, dominant_type=dominant)


# Module-level singleton
genetic_estimator = GeneticProfileEstimator()
