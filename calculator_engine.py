"""
FitEstimate — Calculator Pipeline
Runs Estimator → Predictor → Planner → Nutrition for the weight-loss,
muscle-gain and body-recomposition calculators and assembles one result record.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence

from config import settings
from fitness_types import (
    DISCLAIMER, ActivityLevel, DominantType, ExperienceLevel, GeneticProfile, InvalidInputError,
    MuscleGroup, NutritionPlan, ProgramState, SecondsRange, Sex, TrainingGoal,
    UserPhysicalProfile, round_half_up,
)
from genetic_engine import GeneticProfileEstimator
from hypertrophy_engine import (
    HypertrophyPlanner, IntensityBands, ProgressionRate, VolumeRange, WorkoutPlan,
)
from nutrition_engine import KCAL_PER_KG_FAT, EnergyCalculator, bmi_category
from success_engine import SuccessPredictor

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ══════════════════════════════════════════════════════════════════════════════

@dataclass
class WeightLossResult:
    bmi: float
    bmi_category: str
    bmr: int
    tdee: int
    daily_calories: int
    daily_deficit: int
    weekly_loss_kg: float
    estimated_weeks: Optional[int]      # None when the plan produces no deficit
    success_probability: float
    motivational_score: int
    genetic_profile: GeneticProfile
    workout_plan: WorkoutPlan
    nutrition: NutritionPlan
    recommendations: list[str]
    disclaimer: str = DISCLAIMER


@dataclass
class MuscleGainResult:
    bmi: float
    bmi_category: str
    bmr: int
    tdee: int
    bulking_calories: int
    calorie_surplus: float
    weekly_gain_kg: float
    estimated_weeks: Optional[int]
    hypertrophy_potential: float
    genetic_profile: GeneticProfile
    volume_by_muscle_group: dict[MuscleGroup, VolumeRange]
    intensity: IntensityBands
    rest_between_sets: SecondsRange
    progression: ProgressionRate
    program: ProgramState
    limiting_factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    disclaimer: str = DISCLAIMER


class RecompositionStrategy(str, Enum):
    moderate_deficit = "deficit_moderado"
    maintenance = "manutencao_calorica"
    calorie_cycling = "ciclagem_calorica"


@dataclass(frozen=True)
class HybridTrainingPlan:
    days_per_week: int
    split: str
    cardio_frequency: str
    cardio_type: str
    hypertrophy_strength_mix: str


@dataclass(frozen=True)
class RecompositionMilestone:
    month: int
    estimated_weight_kg: float
    estimated_body_fat_percent: float
    cumulative_fat_loss_kg: float
    cumulative_muscle_gain_kg: float
    visual_marker: str


@dataclass
class RecompositionResult:
    bmi: float
    bmi_category: str
    body_fat_percent: float
    body_fat_class: str
    relative_muscle_mass_percent: float
    fat_to_lose_kg: float
    muscle_gain_kg: float
    estimated_final_weight_kg: float
    estimated_months: int
    difficulty_score: int
    difficulty: str
    strategy: RecompositionStrategy
    bmr: int
    energy_expenditure: int
    training_day: NutritionPlan
    rest_day: NutritionPlan
    success_probability: float
    genetic_profile: GeneticProfile
    training: HybridTrainingPlan
    workout_plan: WorkoutPlan
    milestones: list[RecompositionMilestone]
    critical_factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    disclaimer: str = DISCLAIMER


WEIGHT_LOSS_RECOMMENDATIONS = [
    "Keep training consistently through the week.",
    "Stay hydrated (2–3 L/day).",
    "Sleep 7–9 hours per night.",
    "Eat regular meals.",
]

# Upper bounds of each body-fat class, % of body weight
BODY_FAT_CLASSES = {
    Sex.male:   ((6, "very_low"), (14, "athletic"), (18, "fitness"), (25, "acceptable")),
    Sex.female: ((16, "very_low"), (21, "athletic"), (25, "fitness"), (32, "acceptable")),
}

# Monthly lean mass gain while recomposing, before the power and recomposition factors
MONTHLY_MUSCLE_GAIN_KG = {
    ExperienceLevel.beginner:     0.5,
    ExperienceLevel.intermediate: 0.25,
    ExperienceLevel.advanced:     0.1,
}
RECOMPOSITION_GAIN_FACTOR = 0.7
RECOMPOSITION_SUCCESS_FACTOR = 0.7
MIN_RECOMPOSITION_SUCCESS = 0.1

RECOMPOSITION_ACTIVITY_FACTOR = 1.6
MAX_FAT_LOSS_KG_PER_WEEK = 0.3
WEEKS_PER_MONTH = 4.33

# (training day, rest day) offsets from expenditure, kcal
STRATEGY_CALORIE_OFFSETS = {
    RecompositionStrategy.moderate_deficit: (-200, -300),
    RecompositionStrategy.maintenance:      (+100, -100),
    RecompositionStrategy.calorie_cycling:  (+200, -400),
}

# protein / carbs / fat
TRAINING_DAY_MACROS = (0.30, 0.40, 0.30)
REST_DAY_MACROS = (0.35, 0.25, 0.40)

HYBRID_TRAINING = {
    RecompositionStrategy.moderate_deficit: ("4-5x/week", "LISS + 2x HIIT", "70% hypertrophy / 30% strength"),
    RecompositionStrategy.calorie_cycling:  ("3-4x/week", "HIIT on low-carb days", "60% hypertrophy / 40% strength"),
    RecompositionStrategy.maintenance:      ("3x/week", "LISS after lifting", "80% hypertrophy / 20% strength"),
}


def body_fat_class(body_fat_percent: float, sex: Sex) -> str:
    for upper, label in BODY_FAT_CLASSES[Sex.parse(sex)]:
        if body_fat_percent < upper:
            return label
    return "high"


def _difficulty_level(score: int) -> str:
    if score <= 2:
        return "low"
    if score <= 4:
        return "moderate"
    return "high"


def _visual_marker(month: int) -> str:
    if month <= 2:
        return "Sharper definition"
    if month <= 4:
        return "Clearly visible changes"
    return "Full transformation"


# ══════════════════════════════════════════════════════════════════════════════
# PIPELINE
# ══════════════════════════════════════════════════════════════════════════════

class FitnessCalculator:

    def __init__(self, min_daily_calories: float = settings.MIN_DAILY_CALORIES):
        self.min_daily_calories = min_daily_calories
        self.estimator = GeneticProfileEstimator()
        self.predictor = SuccessPredictor()
        self.planner = HypertrophyPlanner()
        self.energy = EnergyCalculator()

    def weight_loss(
        self,
        profile: UserPhysicalProfile,
        target_weight_kg: float,
        timeframe_weeks: float,
        weekly_progress: Sequence[float] = (),
    ) -> WeightLossResult:
        if timeframe_weeks <= 0:
            raise InvalidInputError(f"Timeframe must be positive, got {timeframe_weeks} weeks.")
        if target_weight_kg <= 0:
            raise InvalidInputError(f"Target weight must be positive, got {target_weight_kg}.")
        if target_weight_kg >= profile.weight_kg:
            raise InvalidInputError(
                f"Target weight {target_weight_kg} kg must be below the current {profile.weight_kg} kg."
            )

        genetic = self.estimator.estimate(profile)
        probability = self.predictor.predict(profile, weekly_progress)
        plan = self.planner.workout_plan(genetic, profile.experience_level, TrainingGoal.hypertrophy, 4)

        bmr = self.energy.bmr(profile)
        tdee = self.energy.tdee(bmr, profile.activity_level)

        kg_to_lose = profile.weight_kg - target_weight_kg
        requested_deficit = kg_to_lose / timeframe_weeks * KCAL_PER_KG_FAT / 7
        calories = max(self.min_daily_calories, tdee - requested_deficit)
        deficit = tdee - calories
        weekly_loss = deficit * 7 / KCAL_PER_KG_FAT

        estimated_weeks = None
        if kg_to_lose > 0 and weekly_loss > 0:
            estimated_weeks = math.ceil(kg_to_lose / weekly_loss)

        recommendations = list(WEIGHT_LOSS_RECOMMENDATIONS)
        if tdee - requested_deficit < self.min_daily_calories:
            recommendations.insert(0, "Requested timeframe needs an unsafe deficit; calories held at the minimum.")

        log.info(
            f"Weight-loss plan: tdee={tdee:.0f} calories={calories:.0f} "
            f"weekly_loss={weekly_loss:.2f}kg p_success={probability:.2f}"
        )
        return WeightLossResult(
            bmi=round(profile.bmi, 1),
            bmi_category=bmi_category(profile.bmi),
            bmr=round_half_up(bmr),
            tdee=round_half_up(tdee),
            daily_calories=round_half_up(calories),
            daily_deficit=round_half_up(deficit),
            weekly_loss_kg=round(weekly_loss, 2),
            estimated_weeks=estimated_weeks,
            success_probability=round(probability, 2),
            motivational_score=round_half_up(probability * 100),
            genetic_profile=genetic,
            workout_plan=plan,
            nutrition=self.energy.nutrition_plan(round_half_up(calories)),
            recommendations=recommendations,
        )

    def _surplus(self, profile: UserPhysicalProfile, genetic: GeneticProfile) -> float:
        surplus = 300.0
        if genetic.dominant_type == DominantType.power:
            surplus = 400.0
        # Experience overrides the genetic bump
        if profile.experience_level == ExperienceLevel.beginner:
            surplus = 500.0
        elif profile.experience_level == ExperienceLevel.advanced:
            surplus = 200.0
        if profile.age > 35:
            surplus *= 0.8
        if profile.bmi > 25:
            surplus *= 0.7
        return surplus

    def _weekly_gain(self, profile: UserPhysicalProfile, genetic: GeneticProfile) -> float:
        gain = 0.25
        if profile.experience_level == ExperienceLevel.beginner:
            gain = 0.5
        elif profile.experience_level == ExperienceLevel.advanced:
            gain = 0.1
        if genetic.dominant_type == DominantType.power:
            gain *= 1.2
        return gain

    def _potential(self, profile: UserPhysicalProfile, genetic: GeneticProfile) -> float:
        potential = 0.5
        if profile.age < 30:
            potential += 0.2
        if profile.sex == Sex.male:
            potential += 0.1
        if profile.experience_level == ExperienceLevel.beginner:
            potential += 0.2
        if genetic.power_score >= 4:
            potential += 0.1
        return min(potential, 1.0)

    def muscle_gain(
        self,
        profile: UserPhysicalProfile,
        target_weight_kg: float,
        training_days: int,
        goal: TrainingGoal = TrainingGoal.hypertrophy,
    ) -> MuscleGainResult:
        if not 1 <= training_days <= 7:
            raise InvalidInputError(f"Training days per week must be 1–7, got {training_days}.")
        if target_weight_kg <= 0:
            raise InvalidInputError(f"Target weight must be positive, got {target_weight_kg}.")

        genetic = self.estimator.estimate(profile)
        experience = profile.experience_level

        bmr = self.energy.bmr(profile)
        tdee = self.energy.training_tdee(bmr, training_days)
        surplus = self._surplus(profile, genetic)
        calories = tdee + surplus

        weekly_gain = self._weekly_gain(profile, genetic)
        kg_to_gain = target_weight_kg - profile.weight_kg
        estimated_weeks = math.ceil(kg_to_gain / weekly_gain) if kg_to_gain > 0 else None
        potential = self._potential(profile, genetic)

        limiting = []
        if profile.age > 40:
            limiting.append("Age above 40: slower recovery between sessions.")
        if profile.bmi > 25:
            limiting.append("Elevated body fat: surplus reduced to limit fat gain.")
        if training_days < 3:
            limiting.append("Fewer than 3 training days per week.")
        if experience == ExperienceLevel.advanced:
            limiting.append("Advanced lifter: gains come more slowly.")

        recommendations = []
        if genetic.dominant_type == DominantType.power:
            recommendations.append("Focus on heavy compound lifts (squat, bench press, deadlift).")
            recommendations.append("Use 75–85% 1RM for hypertrophy work.")
        else:
            recommendations.append("Favour more volume with moderate loads (65–75% 1RM).")
            recommendations.append("Prioritise time under tension and controlled tempo.")
        if experience == ExperienceLevel.beginner:
            recommendations.append("Master technique before adding load.")
        if potential < 0.6:
            recommendations.append("Consider structured periodisation and 8h+ of sleep.")

        program = ProgramState(
            training=self.planner.build_program(genetic, experience, goal, training_days),
            nutrition=self.energy.nutrition_plan(round_half_up(calories)),
        )

        log.info(
            f"Muscle-gain plan: tdee={tdee:.0f} surplus={surplus:.0f} "
            f"weekly_gain={weekly_gain:.2f}kg potential={potential:.2f}"
        )
        return MuscleGainResult(
            bmi=round(profile.bmi, 1),
            bmi_category=bmi_category(profile.bmi),
            bmr=round_half_up(bmr),
            tdee=round_half_up(tdee),
            bulking_calories=round_half_up(calories),
            calorie_surplus=round(surplus, 1),
            weekly_gain_kg=round(weekly_gain, 3),
            estimated_weeks=estimated_weeks,
            hypertrophy_potential=round(potential, 2),
            genetic_profile=genetic,
            volume_by_muscle_group=self.planner.volume_by_muscle_group(genetic, experience),
            intensity=self.planner.optimal_intensity(genetic),
            rest_between_sets=self.planner.rest_period(genetic, goal),
            progression=self.planner.progression_rate(genetic),
            program=program,
            limiting_factors=limiting,
            recommendations=recommendations,
        )


    def _strategy(self, body_fat_percent: float, difficulty: str, experience: ExperienceLevel) -> RecompositionStrategy:
        if body_fat_percent > 20 or difficulty == "low":
            return RecompositionStrategy.moderate_deficit
        if difficulty == "high" or experience == ExperienceLevel.advanced:
            return RecompositionStrategy.calorie_cycling
        return RecompositionStrategy.maintenance

    def recomposition(
        self,
        profile: UserPhysicalProfile,
        fat_mass_kg: float,
        muscle_mass_kg: float,
        target_body_fat_percent: float,
        timeframe_months: int,
        training_days: int = 4,
    ) -> RecompositionResult:
        """
        Lose fat and gain muscle at roughly stable weight. Assumes intense
        activity throughout; fat loss is paced at no more than 0.3 kg/week.
        """
        weight = profile.weight_kg
        if not 0 < fat_mass_kg < weight:
            raise InvalidInputError(f"Fat mass must be between 0 and body weight, got {fat_mass_kg} kg.")
        if not 0 < muscle_mass_kg < weight:
            raise InvalidInputError(f"Muscle mass must be between 0 and body weight, got {muscle_mass_kg} kg.")
        if not 0 < target_body_fat_percent < 100:
            raise InvalidInputError(f"Target body fat must be a percentage, got {target_body_fat_percent}.")
        if timeframe_months < 1:
            raise InvalidInputError(f"Timeframe must be at least one month, got {timeframe_months}.")
        if not 1 <= training_days <= 7:
            raise InvalidInputError(f"Training days per week must be 1–7, got {training_days}.")

        training_profile = replace(profile, activity_level=ActivityLevel.intense)
        genetic = self.estimator.estimate(training_profile)
        experience = profile.experience_level

        body_fat = fat_mass_kg / weight * 100
        fat_to_lose = max(0.0, fat_mass_kg - target_body_fat_percent / 100 * weight)

        monthly_gain = MONTHLY_MUSCLE_GAIN_KG[experience]
        if genetic.dominant_type == DominantType.power:
            monthly_gain *= 1.2
        monthly_gain *= RECOMPOSITION_GAIN_FACTOR
        muscle_gain = monthly_gain * timeframe_months

        score = 0
        if experience == ExperienceLevel.advanced:
            score += 2
        if (profile.sex == Sex.male and body_fat < 15) or (profile.sex == Sex.female and body_fat < 20):
            score += 2
        if profile.age > 35:
            score += 1
        if fat_to_lose > 10:
            score += 1
        difficulty = _difficulty_level(score)
        strategy = self._strategy(body_fat, difficulty, experience)

        bmr = self.energy.bmr(profile)
        expenditure = bmr * RECOMPOSITION_ACTIVITY_FACTOR
        training_offset, rest_offset = STRATEGY_CALORIE_OFFSETS[strategy]
        training_calories = round_half_up(expenditure + training_offset)
        rest_calories = round_half_up(expenditure + rest_offset)

        probability = self.predictor.predict(training_profile, [])
        probability = max(MIN_RECOMPOSITION_SUCCESS, probability * RECOMPOSITION_SUCCESS_FACTOR)

        paced_months = fat_to_lose / MAX_FAT_LOSS_KG_PER_WEEK / WEEKS_PER_MONTH
        estimated_months = round_half_up(max(timeframe_months, paced_months))

        milestones = []
        for month in range(1, timeframe_months + 1):
            lost = fat_to_lose / timeframe_months * month
            gained = muscle_gain / timeframe_months * month
            milestones.append(RecompositionMilestone(
                month=month,
                estimated_weight_kg=round(weight - lost + gained, 2),
                estimated_body_fat_percent=round(body_fat - fat_to_lose / weight * 100 * month / timeframe_months, 1),
                cumulative_fat_loss_kg=round(lost, 2),
                cumulative_muscle_gain_kg=round(gained, 2),
                visual_marker=_visual_marker(month),
            ))

        cardio_frequency, cardio_type, mix = HYBRID_TRAINING[strategy]
        training = HybridTrainingPlan(
            days_per_week=training_days,
            split="Push/Pull/Legs + cardio" if training_days >= 5 else "Upper/Lower + cardio",
            cardio_frequency=cardio_frequency,
            cardio_type=cardio_type,
            hypertrophy_strength_mix=mix,
        )

        critical = []
        if difficulty == "high":
            critical.append("Advanced recomposition: expect slower visible progress.")
        if body_fat < 15:
            critical.append("Low body fat: higher risk of losing muscle in a deficit.")
        if profile.age > 40:
            critical.append("Age above 40: slower recovery between sessions.")

        recommendations = []
        if strategy == RecompositionStrategy.calorie_cycling:
            recommendations.append("Track the calorie cycle closely.")
            recommendations.append("Shift carbohydrates towards training days.")
        if difficulty == "high":
            recommendations.append("Consider working with a coach or dietitian.")
            recommendations.append("Be patient: recomposition at this level takes longer.")
        recommendations.append("Prioritise quality sleep (8+ hours).")
        recommendations.append("Stay consistent with training and diet.")

        log.info(
            f"Recomposition plan: body_fat={body_fat:.1f}% fat_to_lose={fat_to_lose:.1f}kg "
            f"difficulty={difficulty} strategy={strategy.value}"
        )
        return RecompositionResult(
            bmi=round(profile.bmi, 1),
            bmi_category=bmi_category(profile.bmi),
            body_fat_percent=round(body_fat, 1),
            body_fat_class=body_fat_class(body_fat, profile.sex),
            relative_muscle_mass_percent=round(muscle_mass_kg / weight * 100, 1),
            fat_to_lose_kg=round(fat_to_lose, 2),
            muscle_gain_kg=round(muscle_gain, 2),
            estimated_final_weight_kg=round(weight - fat_to_lose + muscle_gain, 2),
            estimated_months=estimated_months,
            difficulty_score=score,
            difficulty=difficulty,
            strategy=strategy,
            bmr=round_half_up(bmr),
            energy_expenditure=round_half_up(expenditure),
            training_day=NutritionPlan(training_calories, self.energy.macros(training_calories, TRAINING_DAY_MACROS)),
            rest_day=NutritionPlan(rest_calories, self.energy.macros(rest_calories, REST_DAY_MACROS)),
            success_probability=round(probability, 2),
            genetic_profile=genetic,
            training=training,
            workout_plan=self.planner.workout_plan(genetic, experience, TrainingGoal.hypertrophy, training_days),
            milestones=milestones,
            critical_factors=critical,
            recommendations=recommendations,
        )


# Module-level singleton
fitness_calculator = FitnessCalculator()
