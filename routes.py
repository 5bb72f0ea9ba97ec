"""
FitEstimate — API Routes
All endpoint implementations.
"""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from adaptation_log import InMemoryAdaptationLog
from calculator_engine import fitness_calculator
from config import settings
from fitness_types import InvalidInputError, UserPhysicalProfile
from genetic_engine import genetic_estimator
from hypertrophy_engine import hypertrophy_planner
from nutrition_engine import AdaptiveNutritionEngine, CalorieAdjustment, nutrition_engine
from personalization_engine import AdaptivePersonalizationEngine
from progress_store import SqlProgressStore, get_progress_store
from schemas import (
    ProfileSchema, GeneticProfileSchema,
    SuccessRequestSchema, SuccessPredictionSchema,
    HypertrophyRequestSchema, HypertrophyPlanSchema,
    WeightLossRequestSchema, WeightLossResultSchema,
    MuscleGainRequestSchema, MuscleGainResultSchema,
    RecompositionRequestSchema, RecompositionResultSchema,
    CalorieAdjustmentRequestSchema, StoredCalorieAdjustmentRequestSchema,
    CalorieAdjustmentSchema, MealTimingSchema,
    ProgressInputSchema, ProgressHistorySchema,
    AdaptRequestSchema, AdaptationEventSchema, ProgramSchema, MessageSchema,
)
from success_engine import success_predictor

log = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════════════════════

def _profile(data: ProfileSchema) -> UserPhysicalProfile:
    try:
        return data.to_domain()
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _calorie_out(result: CalorieAdjustment) -> CalorieAdjustmentSchema:
    refeed_calories = None
    if result.refeed is not None:
        refeed_calories = int(result.refeed.adjustments["refeed_calories"])
    return CalorieAdjustmentSchema(
        new_calories=result.new_calories,
        adjustment=result.adjustment,
        reasoning=result.reasoning,
        refeed_recommended=result.refeed is not None,
        refeed_calories=refeed_calories,
    )


def _target(requested: float | None) -> float:
    return requested if requested is not None else settings.DEFAULT_TARGET_WEEKLY_CHANGE_KG


async def _store_events(store: SqlProgressStore, subject_id: str, audit: InMemoryAdaptationLog) -> None:
    try:
        await store.save_events(subject_id, audit.events())
    except Exception as e:
        log.error(f"Storing adaptation events failed for subject {subject_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Could not record adaptation events. Please try again.")


# ══════════════════════════════════════════════════════════════════════════════
# CALCULATOR ROUTER
# ══════════════════════════════════════════════════════════════════════════════

calculator_router = APIRouter()


@calculator_router.post("/genetic_profile", response_model=GeneticProfileSchema)
async def genetic_profile(data: ProfileSchema):
    """Synthetic power/endurance predisposition from body metrics."""
    result = genetic_estimator.estimate(_profile(data))
    return GeneticProfileSchema.model_validate(asdict(result))


@calculator_router.post("/success_probability", response_model=SuccessPredictionSchema)
async def success_probability(data: SuccessRequestSchema):
    assessment = success_predictor.assess(_profile(data.profile), data.weekly_progress)
    return SuccessPredictionSchema(
        probability=assessment.probability,
        contributions=assessment.contributions,
        samples_used=assessment.samples_used,
    )


@calculator_router.post("/hypertrophy", response_model=HypertrophyPlanSchema)
async def hypertrophy(data: HypertrophyRequestSchema):
    """Volume per muscle group, intensity bands, rest and progression."""
    profile = _profile(data.profile)
    genetic = genetic_estimator.estimate(profile)
    try:
        plan = hypertrophy_planner.workout_plan(genetic, profile.experience_level, data.goal, data.days_per_week)
        rest = hypertrophy_planner.rest_period(genetic, data.goal)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return HypertrophyPlanSchema.model_validate({
        "genetic_profile": asdict(genetic),
        "volume_by_muscle_group": {
            group: asdict(volume)
            for group, volume in hypertrophy_planner.volume_by_muscle_group(genetic, profile.experience_level).items()
        },
        "intensity": asdict(hypertrophy_planner.optimal_intensity(genetic)),
        "rest_between_sets": asdict(rest),
        "progression": asdict(hypertrophy_planner.progression_rate(genetic)),
        "workout_plan": asdict(plan),
    })


@calculator_router.post("/weight_loss", response_model=WeightLossResultSchema)
async def weight_loss(data: WeightLossRequestSchema):
    try:
        result = fitness_calculator.weight_loss(
            profile=_profile(data.profile),
            target_weight_kg=data.target_weight_kg,
            timeframe_weeks=data.timeframe_weeks,
            weekly_progress=data.weekly_progress,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return WeightLossResultSchema.model_validate(asdict(result))


@calculator_router.post("/muscle_gain", response_model=MuscleGainResultSchema)
async def muscle_gain(data: MuscleGainRequestSchema):
    try:
        result = fitness_calculator.muscle_gain(
            profile=_profile(data.profile),
            target_weight_kg=data.target_weight_kg,
            training_days=data.training_days,
            goal=data.goal,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return MuscleGainResultSchema.model_validate(asdict(result))


@calculator_router.post("/recomposition", response_model=RecompositionResultSchema)
async def recomposition(data: RecompositionRequestSchema):
    """Fat loss with concurrent muscle gain, with calorie cycling and monthly milestones."""
    try:
        result = fitness_calculator.recomposition(
            profile=_profile(data.profile),
            fat_mass_kg=data.fat_mass_kg,
            muscle_mass_kg=data.muscle_mass_kg,
            target_body_fat_percent=data.target_body_fat_percent,
            timeframe_months=data.timeframe_months,
            training_days=data.training_days,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return RecompositionResultSchema.model_validate(asdict(result))


# ══════════════════════════════════════════════════════════════════════════════
# NUTRITION ROUTER
# ══════════════════════════════════════════════════════════════════════════════

nutrition_router = APIRouter()


@nutrition_router.post("/calorie_adjustment", response_model=CalorieAdjustmentSchema)
async def calorie_adjustment(data: CalorieAdjustmentRequestSchema):
    """Stateless adjustment from a caller-supplied progress history."""
    result = nutrition_engine.dynamic_calorie_adjustment(
        weekly_progress=data.weekly_progress,
        current_calories=data.current_calories,
        target_weekly_change_kg=_target(data.target_weekly_change_kg),
    )
    return _calorie_out(result)


@nutrition_router.get("/meal_timing", response_model=MealTimingSchema)
async def meal_timing(workout_time: List[str] = Query(default=[], description="Workout start times, HH:MM")):
    try:
        timing = nutrition_engine.meal_timing(workout_time)
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return MealTimingSchema.model_validate(asdict(timing))


# ══════════════════════════════════════════════════════════════════════════════
# PROGRESS ROUTER
# ══════════════════════════════════════════════════════════════════════════════

progress_router = APIRouter()


@progress_router.post("/{subject_id}", response_model=MessageSchema, status_code=201)
async def record_progress(
    subject_id: str,
    data: ProgressInputSchema,
    store: SqlProgressStore = Depends(get_progress_store),
):
    await store.record_progress(subject_id, data.week_number, data.change_kg)
    return MessageSchema(message="Weekly progress saved.", detail=f"Week {data.week_number}: {data.change_kg:+.2f} kg")


@progress_router.get("/{subject_id}", response_model=ProgressHistorySchema)
async def get_progress(
    subject_id: str,
    store: SqlProgressStore = Depends(get_progress_store),
):
    history = await store.weekly_progress(subject_id)
    return ProgressHistorySchema(subject_id=subject_id, weekly_progress=history)


@progress_router.post("/{subject_id}/calorie_adjustment", response_model=CalorieAdjustmentSchema)
async def stored_calorie_adjustment(
    subject_id: str,
    data: StoredCalorieAdjustmentRequestSchema,
    store: SqlProgressStore = Depends(get_progress_store),
):
    """
    Adjustment from the stored weekly history. Any refeed recommendation is
    written to the subject's adaptation log.
    """
    history = await store.weekly_progress(subject_id)
    if not history:
        raise HTTPException(status_code=404, detail="No weekly progress found. POST /progress/{subject_id} first.")

    audit = InMemoryAdaptationLog()
    engine = AdaptiveNutritionEngine(adaptation_log=audit)
    result = engine.dynamic_calorie_adjustment(
        weekly_progress=history,
        current_calories=data.current_calories,
        target_weekly_change_kg=_target(data.target_weekly_change_kg),
    )
    if len(audit):
        await _store_events(store, subject_id, audit)
    return _calorie_out(result)


# ══════════════════════════════════════════════════════════════════════════════
# ADAPTATION ROUTER
# ══════════════════════════════════════════════════════════════════════════════

adaptation_router = APIRouter()


@adaptation_router.post("/{subject_id}", response_model=ProgramSchema)
async def adapt_program(
    subject_id: str,
    data: AdaptRequestSchema,
    store: SqlProgressStore = Depends(get_progress_store),
):
    """Return the next program version for the given feedback and progress."""
    audit = InMemoryAdaptationLog()
    engine = AdaptivePersonalizationEngine(adaptation_log=audit)
    try:
        adapted = engine.adapt(
            data.program.to_domain(),
            data.feedback.to_domain(),
            data.progress.to_domain(),
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    await _store_events(store, subject_id, audit)
    return ProgramSchema.model_validate(asdict(adapted))


@adaptation_router.get("/{subject_id}/events", response_model=List[AdaptationEventSchema])
async def list_adaptation_events(
    subject_id: str,
    store: SqlProgressStore = Depends(get_progress_store),
):
    events = await store.list_events(subject_id, limit=settings.ADAPTATION_EVENTS_PAGE_SIZE)
    return [AdaptationEventSchema.model_validate(e) for e in events]
