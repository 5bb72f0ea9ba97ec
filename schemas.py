"""
FitEstimate — Pydantic Schemas
Request/response models for all API endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime

from calculator_engine import RecompositionStrategy
from fitness_types import (
    DISCLAIMER, ActivityLevel, AdaptationKind, Difficulty, DominantType, ExperienceLevel,
    Feedback, MacroSplit, MuscleGroup, NutritionPlan, ProgramState, ProgressSnapshot,
    Recovery, SecondsRange, Sex, TrainingGoal, TrainingProgram, UserPhysicalProfile, Workout,
)


# ══════════════════════════════════════════════════════════════════════════════
# PROFILE
# ══════════════════════════════════════════════════════════════════════════════

class ProfileSchema(BaseModel):
    age: int = Field(..., ge=13, le=100)
    sex: Sex
    height_cm: float = Field(..., ge=100, le=250)
    weight_kg: float = Field(..., ge=30, le=300)
    activity_level: ActivityLevel = ActivityLevel.sedentary
    experience_level: ExperienceLevel = ExperienceLevel.beginner
    confidence: Optional[int] = Field(5, ge=1, le=10, description="Self-efficacy 1 (low) to 10 (high)")

    def to_domain(self) -> UserPhysicalProfile:
        return UserPhysicalProfile(
            age=self.age,
            sex=self.sex,
            height_cm=self.height_cm,
            weight_kg=self.weight_kg,
            activity_level=self.activity_level,
            experience_level=self.experience_level,
            confidence=self.confidence,
        )


def weekly_progress_field():
    return Field(
        default_factory=list,
        max_length=520,
        description="Weekly kg change, oldest first (positive = progress towards goal)",
    )


class GeneticProfileSchema(BaseModel):
    power_score: int = Field(..., ge=0, le=5)
    endurance_score: int = Field(..., ge=0, le=5)
    dominant_type: DominantType


# ══════════════════════════════════════════════════════════════════════════════
# CALCULATORS
# ══════════════════════════════════════════════════════════════════════════════

class SuccessRequestSchema(BaseModel):
    profile: ProfileSchema
    weekly_progress: List[float] = weekly_progress_field()


class SuccessPredictionSchema(BaseModel):
    probability: float = Field(..., ge=0.0, le=1.0)
    contributions: Dict[str, float]
    samples_used: int
    disclaimer: str = DISCLAIMER


class HypertrophyRequestSchema(BaseModel):
    profile: ProfileSchema
    goal: TrainingGoal = TrainingGoal.hypertrophy
    days_per_week: int = Field(4, ge=1, le=7)


class VolumeRangeSchema(BaseModel):
    min: int
    max: int
    optimal: int


class PercentRangeSchema(BaseModel):
    min: int
    max: int


class SecondsRangeSchema(BaseModel):
    min: int
    max: int


class IntensityBandsSchema(BaseModel):
    strength: PercentRangeSchema
    hypertrophy: PercentRangeSchema
    endurance: PercentRangeSchema


class ProgressionSchema(BaseModel):
    weight_increase_kg_per_week: float
    volume_increase_percent_per_month: float
    frequency: str


class WorkoutPlanSchema(BaseModel):
    goal: TrainingGoal
    days_per_week: int
    weekly_volume: int
    intensity: PercentRangeSchema
    rest_between_sets: SecondsRangeSchema
    progression: ProgressionSchema


class HypertrophyPlanSchema(BaseModel):
    genetic_profile: GeneticProfileSchema
    volume_by_muscle_group: Dict[MuscleGroup, VolumeRangeSchema]
    intensity: IntensityBandsSchema
    rest_between_sets: SecondsRangeSchema
    progression: ProgressionSchema
    workout_plan: WorkoutPlanSchema


class MacroSchema(BaseModel):
    protein_g: int = Field(..., ge=0)
    carb_g: int = Field(..., ge=0)
    fat_g: int = Field(..., ge=0)


class NutritionPlanSchema(BaseModel):
    daily_calories: float = Field(..., gt=0)
    macros: MacroSchema

    def to_domain(self) -> NutritionPlan:
        return NutritionPlan(
            daily_calories=self.daily_calories,
            macros=MacroSplit(
                protein_g=self.macros.protein_g,
                carb_g=self.macros.carb_g,
                fat_g=self.macros.fat_g,
            ),
        )


class WeightLossRequestSchema(BaseModel):
    profile: ProfileSchema
    target_weight_kg: float = Field(..., ge=30, le=300)
    timeframe_weeks: float = Field(..., gt=0, le=104)
    weekly_progress: List[float] = weekly_progress_field()


class WeightLossResultSchema(BaseModel):
    bmi: float
    bmi_category: str
    bmr: int
    tdee: int
    daily_calories: int
    daily_deficit: int
    weekly_loss_kg: float
    estimated_weeks: Optional[int]
    success_probability: float = Field(..., ge=0.0, le=1.0)
    motivational_score: int = Field(..., ge=0, le=100)
    genetic_profile: GeneticProfileSchema
    workout_plan: WorkoutPlanSchema
    nutrition: NutritionPlanSchema
    recommendations: List[str]
    disclaimer: str = DISCLAIMER


class MuscleGainRequestSchema(BaseModel):
    profile: ProfileSchema
    target_weight_kg: float = Field(..., ge=30, le=300)
    training_days: int = Field(4, ge=1, le=7)
    goal: TrainingGoal = TrainingGoal.hypertrophy


# ══════════════════════════════════════════════════════════════════════════════
# PROGRAM / ADAPTATION
# ══════════════════════════════════════════════════════════════════════════════

class WorkoutSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    sets: int = Field(..., ge=0)
    intensity_percent: float = Field(..., ge=0, description="% of one-rep max")
    rest_seconds: SecondsRangeSchema


class TrainingProgramSchema(BaseModel):
    workouts: List[WorkoutSchema]
    rest_days: int = Field(..., ge=0, le=7)

    def to_domain(self) -> TrainingProgram:
        return TrainingProgram(
            workouts=tuple(
                Workout(
                    name=w.name,
                    sets=w.sets,
                    intensity_percent=w.intensity_percent,
                    rest_seconds=SecondsRange(min=w.rest_seconds.min, max=w.rest_seconds.max),
                )
                for w in self.workouts
            ),
            rest_days=self.rest_days,
        )


class ProgramSchema(BaseModel):
    training: TrainingProgramSchema
    nutrition: NutritionPlanSchema

    def to_domain(self) -> ProgramState:
        return ProgramState(training=self.training.to_domain(), nutrition=self.nutrition.to_domain())


class MuscleGainResultSchema(BaseModel):
    bmi: float
    bmi_category: str
    bmr: int
    tdee: int
    bulking_calories: int
    calorie_surplus: float
    weekly_gain_kg: float
    estimated_weeks: Optional[int]
    hypertrophy_potential: float = Field(..., ge=0.0, le=1.0)
    genetic_profile: GeneticProfileSchema
    volume_by_muscle_group: Dict[MuscleGroup, VolumeRangeSchema]
    intensity: IntensityBandsSchema
    rest_between_sets: SecondsRangeSchema
    progression: ProgressionSchema
    program: ProgramSchema
    limiting_factors: List[str]
    recommendations: List[str]
    disclaimer: str = DISCLAIMER


class RecompositionRequestSchema(BaseModel):
    profile: ProfileSchema
    fat_mass_kg: float = Field(..., gt=0, le=200, description="Fat mass from bioimpedance")
    muscle_mass_kg: float = Field(..., gt=0, le=150)
    target_body_fat_percent: float = Field(..., ge=3, le=60)
    timeframe_months: int = Field(..., ge=1, le=24)
    training_days: int = Field(4, ge=1, le=7)


class HybridTrainingPlanSchema(BaseModel):
    days_per_week: int
    split: str
    cardio_frequency: str
    cardio_type: str
    hypertrophy_strength_mix: str


class RecompositionMilestoneSchema(BaseModel):
    month: int
    estimated_weight_kg: float
    estimated_body_fat_percent: float
    cumulative_fat_loss_kg: float
    cumulative_muscle_gain_kg: float
    visual_marker: str


class RecompositionResultSchema(BaseModel):
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
    training_day: NutritionPlanSchema
    rest_day: NutritionPlanSchema
    success_probability: float = Field(..., ge=0.0, le=1.0)
    genetic_profile: GeneticProfileSchema
    training: HybridTrainingPlanSchema
    workout_plan: WorkoutPlanSchema
    milestones: List[RecompositionMilestoneSchema]
    critical_factors: List[str]
    recommendations: List[str]
    disclaimer: str = DISCLAIMER


class FeedbackSchema(BaseModel):
    difficulty: Difficulty = Difficulty.just_right
    recovery: Recovery = Recovery.good

    def to_domain(self) -> Feedback:
        return Feedback(difficulty=self.difficulty, recovery=self.recovery)


class ProgressSnapshotSchema(BaseModel):
    weight_change: float = Field(..., ge=-10, le=10)
    target: float = Field(..., ge=-10, le=10)

    def to_domain(self) -> ProgressSnapshot:
        return ProgressSnapshot(weight_change=self.weight_change, target=self.target)


class AdaptRequestSchema(BaseModel):
    program: ProgramSchema
    feedback: FeedbackSchema
    progress: ProgressSnapshotSchema


class AdaptationEventSchema(BaseModel):
    timestamp: datetime
    kind: AdaptationKind
    feedback: Optional[Dict[str, str]] = None
    progress: Optional[Dict[str, float]] = None
    adjustments: Dict[str, float]


# ══════════════════════════════════════════════════════════════════════════════
# NUTRITION / PROGRESS
# ══════════════════════════════════════════════════════════════════════════════

class CalorieAdjustmentRequestSchema(BaseModel):
    weekly_progress: List[float] = weekly_progress_field()
    current_calories: float = Field(..., gt=0, le=10_000)
    target_weekly_change_kg: Optional[float] = Field(None, gt=0, le=2)


class StoredCalorieAdjustmentRequestSchema(BaseModel):
    current_calories: float = Field(..., gt=0, le=10_000)
    target_weekly_change_kg: Optional[float] = Field(None, gt=0, le=2)


class CalorieAdjustmentSchema(BaseModel):
    new_calories: float
    adjustment: int = Field(..., ge=-200, le=200)
    reasoning: str
    refeed_recommended: bool = False
    refeed_calories: Optional[int] = None


class MacroRatiosSchema(BaseModel):
    carbs: float
    protein: float
    fat: float


class MealWindowSchema(BaseModel):
    timing_minutes: int
    macros: MacroRatiosSchema
    calories: int


class MealShareSchema(BaseModel):
    percentage: float
    timing: str


class SessionWindowSchema(BaseModel):
    workout_time: str
    pre_workout_at: str
    post_workout_at: str


class MealTimingSchema(BaseModel):
    pre_workout: MealWindowSchema
    post_workout: MealWindowSchema
    main_meals: Dict[str, MealShareSchema]
    sessions: List[SessionWindowSchema] = []


class ProgressInputSchema(BaseModel):
    week_number: int = Field(..., ge=1, le=520)
    change_kg: float = Field(..., ge=-10, le=10, description="kg change during the week")

    @field_validator("change_kg")
    @classmethod
    def round_change(cls, v: float) -> float:
        return round(v, 3)


class ProgressHistorySchema(BaseModel):
    subject_id: str
    weekly_progress: List[float]


# ══════════════════════════════════════════════════════════════════════════════
# GENERIC
# ══════════════════════════════════════════════════════════════════════════════

class MessageSchema(BaseModel):
    message: str
    detail: Optional[str] = None
