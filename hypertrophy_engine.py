"""
FitEstimate — Hypertrophy Planner
Weekly volume, %1RM intensity bands, rest periods and progression rates
keyed off the synthetic genetic profile and training experience.
"""

import logging
from dataclasses import dataclass
from typing import Union

from fitness_types import (
    DominantType, ExperienceLevel, GeneticProfile, InvalidInputError, MuscleGroup,
    SecondsRange, TrainingGoal, TrainingProgram, Workout, round_half_up,
)

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# CONSTANTS
# ══════════════════════════════════════════════════════════════════════════════

# Sets per muscle group per week
BASE_VOLUMES = {
    ExperienceLevel.beginner:     (8, 12),
    ExperienceLevel.intermediate: (12, 18),
    ExperienceLevel.advanced:     (16, 24),
}

MUSCLE_MULTIPLIERS = {
    MuscleGroup.chest:     1.0,
    MuscleGroup.back:      1.2,
    MuscleGroup.shoulders: 0.8,
    MuscleGroup.arms:      0.9,
    MuscleGroup.legs:      1.3,
    MuscleGroup.core:      1.1,
}

# % of one-rep max
INTENSITY_TABLES = {
    DominantType.power: {
        TrainingGoal.strength:    (85, 95),
        TrainingGoal.hypertrophy: (70, 85),
        TrainingGoal.endurance:   (60, 75),
    },
    DominantType.endurance: {
        TrainingGoal.strength:    (80, 90),
        TrainingGoal.hypertrophy: (65, 80),
        TrainingGoal.endurance:   (55, 70),
    },
}

BASE_REST_SECONDS = {
    TrainingGoal.strength:    (180, 300),
    TrainingGoal.hypertrophy: (90, 180),
    TrainingGoal.endurance:   (30, 90),
}

REST_DELTA_SECONDS = {
    DominantType.power:     +30,
    DominantType.endurance: -15,
}

MAIN_MUSCLE_GROUPS = 6


# ══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VolumeRange:
    min: int
    max: int
    optimal: int


@dataclass(frozen=True)
class PercentRange:
    min: int
    max: int


@dataclass(frozen=True)
class IntensityBands:
    strength: PercentRange
    hypertrophy: PercentRange
    endurance: PercentRange

    def for_goal(self, goal: TrainingGoal) -> PercentRange:
        return getattr(self, TrainingGoal(goal).value)


@dataclass(frozen=True)
class ProgressionRate:
    weight_increase_kg_per_week: float
    volume_increase_percent_per_month: float
    frequency: str


@dataclass(frozen=True)
class WorkoutPlan:
    goal: TrainingGoal
    days_per_week: int
    weekly_volume: int
    intensity: PercentRange
    rest_between_sets: SecondsRange
    progression: ProgressionRate


# ══════════════════════════════════════════════════════════════════════════════
# PLANNER
# ══════════════════════════════════════════════════════════════════════════════

def _goal(goal: Union[TrainingGoal, str]) -> TrainingGoal:
    try:
        return TrainingGoal(goal)
    except ValueError:
        raise InvalidInputError(f"Unknown training goal '{goal}'.")


class HypertrophyPlanner:

    def optimal_volume(
        self,
        genetic: GeneticProfile,
        experience: ExperienceLevel,
        muscle_group: Union[MuscleGroup, str],
    ) -> VolumeRange:
        """
        Base weekly sets by experience, shifted by dominant type
        (power +2/+2, endurance −1/+1), then scaled per muscle group.
        Each bound is rounded independently after scaling.
        """
        base_min, base_max = BASE_VOLUMES[ExperienceLevel.parse(experience)]

        if genetic.dominant_type == DominantType.power:
            vol_min, vol_max = base_min + 2, base_max + 2
        else:
            vol_min, vol_max = base_min - 1, base_max + 1

        try:
            multiplier = MUSCLE_MULTIPLIERS[MuscleGroup(muscle_group)]
        except ValueError:
            multiplier = 1.0

        return VolumeRange(
            min=round_half_up(vol_min * multiplier),
            max=round_half_up(vol_max * multiplier),
            optimal=round_half_up((vol_min + vol_max) / 2 * multiplier),
        )

    def optimal_intensity(self, genetic: GeneticProfile) -> IntensityBands:
        table = INTENSITY_TABLES[genetic.dominant_type]
        return IntensityBands(
            strength=PercentRange(*table[TrainingGoal.strength]),
            hypertrophy=PercentRange(*table[TrainingGoal.hypertrophy]),
            endurance=PercentRange(*table[TrainingGoal.endurance]),
        )

    def rest_period(self, genetic: GeneticProfile, goal: Union[TrainingGoal, str]) -> SecondsRange:
        base_min, base_max = BASE_REST_SECONDS[_goal(goal)]
        delta = REST_DELTA_SECONDS[genetic.dominant_type]
        return SecondsRange(min=base_min + delta, max=base_max + delta)

    def progression_rate(self, genetic: GeneticProfile) -> ProgressionRate:
        if genetic.dominant_type == DominantType.power:
            return ProgressionRate(
                weight_increase_kg_per_week=2.5,
                volume_increase_percent_per_month=5.0,
                frequency="weekly",
            )
        return ProgressionRate(
            weight_increase_kg_per_week=1.5,
            volume_increase_percent_per_month=8.0,
            frequency="bi-weekly",
        )

    def volume_by_muscle_group(
        self,
        genetic: GeneticProfile,
        experience: ExperienceLevel,
    ) -> dict[MuscleGroup, VolumeRange]:
        return {group: self.optimal_volume(genetic, experience, group) for group in MuscleGroup}

    def workout_plan(
        self,
        genetic: GeneticProfile,
        experience: ExperienceLevel,
        goal: Union[TrainingGoal, str],
        days_per_week: int,
    ) -> WorkoutPlan:
        """Summary plan: chest volume stands in as the per-group baseline."""
        try:
            goal = TrainingGoal(goal)
        except ValueError:
            goal = TrainingGoal.hypertrophy
        if not 1 <= days_per_week <= 7:
            raise InvalidInputError(f"Training days per week must be 1–7, got {days_per_week}.")

        volume = self.optimal_volume(genetic, experience, MuscleGroup.chest)
        return WorkoutPlan(
            goal=goal,
            days_per_week=days_per_week,
            weekly_volume=volume.optimal * MAIN_MUSCLE_GROUPS,
            intensity=self.optimal_intensity(genetic).for_goal(goal),
            rest_between_sets=self.rest_period(genetic, goal),
            progression=self.progression_rate(genetic),
        )

    def build_program(
        self,
        genetic: GeneticProfile,
        experience: ExperienceLevel,
        goal: Union[TrainingGoal, str],
        days_per_week: int,
    ) -> TrainingProgram:
        """
        Starting program for the adaptation loop: one workout entry per muscle
        group at its optimal weekly volume and the midpoint of the goal band.
        """
        goal = _goal(goal)
        if not 1 <= days_per_week <= 7:
            raise InvalidInputError(f"Training days per week must be 1–7, got {days_per_week}.")

        band = self.optimal_intensity(genetic).for_goal(goal)
        rest = self.rest_period(genetic, goal)
        workouts = tuple(
            Workout(
                name=group.value,
                sets=self.optimal_volume(genetic, experience, group).optimal,
                intensity_percent=(band.min + band.max) / 2,
                rest_seconds=rest,
            )
            for group in MuscleGroup
        )
        rest_days = min(max(7 - days_per_week, 1), 3)
        return TrainingProgram(workouts=workouts, rest_days=rest_days)


# Module-level singleton
hypertrophy_planner = HypertrophyPlanner()
