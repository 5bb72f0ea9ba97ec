"""
FitEstimate — Unit Tests
All estimation formulas must be numerically verified.
Run with: pytest test_engines.py -v
"""

import pytest


def make_profile(**overrides):
    from fitness_types import UserPhysicalProfile
    data = dict(age=30, sex="male", height_cm=180, weight_kg=90)
    data.update(overrides)
    return UserPhysicalProfile(**data)


def make_program(sets=10, intensity=70, rest_days=2, calories=2000.0):
    from fitness_types import (
        MacroSplit, NutritionPlan, ProgramState, SecondsRange, TrainingProgram, Workout,
    )
    return ProgramState(
        training=TrainingProgram(
            workouts=(Workout("chest", sets, intensity, SecondsRange(90, 180)),),
            rest_days=rest_days,
        ),
        nutrition=NutritionPlan(daily_calories=calories, macros=MacroSplit(125, 225, 67)),
    )


# ══════════════════════════════════════════════════════════════════════════════
# SHARED TYPES
# ══════════════════════════════════════════════════════════════════════════════

class TestFitnessTypes:

    def test_round_half_up(self):
        from fitness_types import round_half_up
        assert round_half_up(2.5) == 3
        assert round_half_up(59.5) == 60
        assert round_half_up(-2.5) == -2
        assert round_half_up(9.4) == 9

    def test_portuguese_aliases_normalised(self):
        from fitness_types import ActivityLevel, ExperienceLevel, Sex
        p = make_profile(sex="masculino", activity_level="intenso", experience_level="avancado")
        assert p.sex == Sex.male
        assert p.activity_level == ActivityLevel.intense
        assert p.experience_level == ExperienceLevel.advanced

    def test_confidence_defaults_to_5(self):
        assert make_profile(confidence=None).confidence == 5
        assert make_profile().confidence == 5

    @pytest.mark.parametrize("field,value", [
        ("age", 0), ("height_cm", -170), ("weight_kg", 0), ("confidence", 11), ("sex", "other"),
    ])
    def test_invalid_profile_rejected(self, field, value):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            make_profile(**{field: value})

    def test_invalid_input_is_value_error(self):
        from fitness_types import InvalidInputError
        assert issubclass(InvalidInputError, ValueError)

    def test_feedback_aliases(self):
        from fitness_types import Difficulty, Feedback, Recovery
        fb = Feedback(difficulty="muito_dificil", recovery="ruim")
        assert fb.difficulty == Difficulty.too_hard
        assert fb.recovery == Recovery.poor


# ══════════════════════════════════════════════════════════════════════════════
# GENETIC PROFILE ESTIMATOR
# ══════════════════════════════════════════════════════════════════════════════

class TestGeneticProfileEstimator:

    def setup_method(self):
        from genetic_engine import GeneticProfileEstimator
        self.estimator = GeneticProfileEstimator()

    def test_heavy_male_is_power(self):
        # BMI 27.8 → power +2, male +1, age 30 and sedentary add nothing
        g = self.estimator.estimate(make_profile())
        assert g.power_score == 3
        assert g.endurance_score == 0
        assert g.dominant_type.value == "power"

    def test_tie_favours_endurance(self):
        # BMI 22.9 → both +1, male power +1, moderate endurance +1 → 2 vs 2
        g = self.estimator.estimate(make_profile(height_cm=175, weight_kg=70, activity_level="moderate"))
        assert g.power_score == g.endurance_score == 2
        assert g.dominant_type.value == "endurance"

    def test_lean_young_female(self):
        # BMI 19.5 → endurance +2, female +1, age 22 both +1
        g = self.estimator.estimate(make_profile(sex="female", age=22, height_cm=165, weight_kg=53))
        assert g.power_score == 1
        assert g.endurance_score == 4
        assert g.dominant_type.value == "endurance"

    def test_older_adult_gains_endurance(self):
        g = self.estimator.estimate(make_profile(age=45))
        assert g.endurance_score == 1

    def test_intense_activity_adds_power(self):
        g = self.estimator.estimate(make_profile(activity_level="intense"))
        assert g.power_score == 4

    def test_scores_bounded(self):
        for sex in ("male", "female"):
            for age in (18, 30, 50):
                for weight in (50, 70, 110):
                    for activity in ("sedentary", "light", "moderate", "intense"):
                        g = self.estimator.estimate(
                            make_profile(sex=sex, age=age, weight_kg=weight, activity_level=activity)
                        )
                        assert 0 <= g.power_score <= 5
                        assert 0 <= g.endurance_score <= 5
                        expected = "power" if g.power_score > g.endurance_score else "endurance"
                        assert g.dominant_type.value == expected

    def test_reproducible(self):
        p = make_profile(age=24, activity_level="intense")
        assert self.estimator.estimate(p) == self.estimator.estimate(p)


# ══════════════════════════════════════════════════════════════════════════════
# SUCCESS PREDICTOR
# ══════════════════════════════════════════════════════════════════════════════

class TestSuccessPredictor:

    def setup_method(self):
        from success_engine import SuccessPredictor
        self.predictor = SuccessPredictor()

    def test_weights_sum_to_one(self):
        assert sum(self.predictor.WEIGHTS.values()) == pytest.approx(1.0)

    def test_full_history_example(self):
        p = make_profile(age=40, height_cm=178, confidence=8, activity_level="intenso")
        score = self.predictor.predict(p, [0.3, 0.4])
        # .12 + .084 + .064 + .225 + .144 + .108 + .1 × (1 − .05/.35)
        assert score == pytest.approx(0.8307, abs=1e-3)
        assert 0.7 < score <= 1.0

    def test_empty_history_uses_five_terms(self):
        p = make_profile(age=40, height_cm=178, confidence=8, activity_level="intense")
        result = self.predictor.assess(p, [])
        assert set(result.contributions) == {"age", "sex", "height", "self_efficacy", "activity_level"}
        assert result.probability == pytest.approx(0.12 + 0.084 + 0.064 + 0.144 + 0.108)

    def test_single_sample_is_neutral_consistency(self):
        p = make_profile(age=40, height_cm=178, confidence=8, activity_level="intense")
        result = self.predictor.assess(p, [0.4])
        assert "initial_weight_loss" not in result.contributions
        assert result.contributions["consistency"] == pytest.approx(0.05)

    def test_initial_loss_tiers(self):
        p = make_profile()
        strong = self.predictor.assess(p, [0.3, 0.3]).contributions["initial_weight_loss"]
        medium = self.predictor.assess(p, [0.15, 0.15]).contributions["initial_weight_loss"]
        weak = self.predictor.assess(p, [0.05, 0.05]).contributions["initial_weight_loss"]
        assert strong == pytest.approx(0.225)
        assert medium == pytest.approx(0.15)
        assert weak == pytest.approx(0.075)

    def test_maximal_inputs_do_not_exceed_one(self):
        p = make_profile(age=45, height_cm=190, confidence=10, activity_level="intense")
        score = self.predictor.predict(p, [1.0, 1.0, 1.0, 1.0])
        assert score <= 1.0
        assert score == pytest.approx(0.881)

    def test_output_always_in_unit_interval(self):
        for progress in ([], [0.1], [0.5, -0.5], [-0.2, -0.4], [2.0, 0.0, 1.0]):
            for confidence in (1, 5, 10):
                s = self.predictor.predict(make_profile(confidence=confidence), progress)
                assert 0.0 <= s <= 1.0

    def test_consistency_helper(self):
        from success_engine import progress_consistency
        assert progress_consistency([0.4]) == 0.5
        assert progress_consistency([0.5, 0.5, 0.5]) == pytest.approx(1.0)
        assert progress_consistency([-0.2, -0.4]) == 0.0
        assert progress_consistency([0.1, 1.0]) == pytest.approx(1 - 0.45 / 0.55)


# ══════════════════════════════════════════════════════════════════════════════
# HYPERTROPHY PLANNER
# ══════════════════════════════════════════════════════════════════════════════

class TestHypertrophyPlanner:

    def setup_method(self):
        from fitness_types import DominantType, GeneticProfile
        from hypertrophy_engine import HypertrophyPlanner
        self.planner = HypertrophyPlanner()
        self.power = GeneticProfile(3, 0, DominantType.power)
        self.endurance = GeneticProfile(1, 4, DominantType.endurance)

    def test_power_beginner_chest(self):
        v = self.planner.optimal_volume(self.power, "beginner", "chest")
        assert (v.min, v.max, v.optimal) == (10, 14, 12)

    def test_endurance_beginner_legs(self):
        # (7, 13) × 1.3
        v = self.planner.optimal_volume(self.endurance, "beginner", "legs")
        assert (v.min, v.max, v.optimal) == (9, 17, 13)

    def test_power_advanced_shoulders(self):
        # (18, 26) × 0.8
        v = self.planner.optimal_volume(self.power, "advanced", "shoulders")
        assert (v.min, v.max, v.optimal) == (14, 21, 18)

    def test_unknown_muscle_group_uses_neutral_multiplier(self):
        v = self.planner.optimal_volume(self.power, "intermediate", "neck")
        assert (v.min, v.max, v.optimal) == (14, 20, 17)

    def test_optimal_within_bounds_everywhere(self):
        from fitness_types import ExperienceLevel, MuscleGroup
        for genetic in (self.power, self.endurance):
            for level in ExperienceLevel:
                for group in MuscleGroup:
                    v = self.planner.optimal_volume(genetic, level, group)
                    assert v.min <= v.optimal <= v.max

    def test_base_table_not_mutated(self):
        first = self.planner.optimal_volume(self.power, "beginner", "chest")
        self.planner.optimal_volume(self.endurance, "beginner", "chest")
        assert self.planner.optimal_volume(self.power, "beginner", "chest") == first

    def test_intensity_tables(self):
        power = self.planner.optimal_intensity(self.power)
        endurance = self.planner.optimal_intensity(self.endurance)
        assert (power.strength.min, power.strength.max) == (85, 95)
        assert (power.hypertrophy.min, power.hypertrophy.max) == (70, 85)
        assert (endurance.endurance.min, endurance.endurance.max) == (55, 70)

    def test_rest_periods(self):
        r = self.planner.rest_period(self.power, "strength")
        assert (r.min, r.max) == (210, 330)
        r = self.planner.rest_period(self.endurance, "endurance")
        assert (r.min, r.max) == (15, 75)

    def test_rest_period_unknown_goal(self):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self.planner.rest_period(self.power, "cardio")

    def test_progression(self):
        p = self.planner.progression_rate(self.power)
        assert (p.weight_increase_kg_per_week, p.volume_increase_percent_per_month, p.frequency) == (2.5, 5.0, "weekly")
        e = self.planner.progression_rate(self.endurance)
        assert (e.weight_increase_kg_per_week, e.volume_increase_percent_per_month, e.frequency) == (1.5, 8.0, "bi-weekly")

    def test_workout_plan(self):
        plan = self.planner.workout_plan(self.power, "beginner", "hypertrophy", 4)
        assert plan.weekly_volume == 72
        assert (plan.intensity.min, plan.intensity.max) == (70, 85)

    def test_workout_plan_unknown_goal_falls_back_to_hypertrophy(self):
        plan = self.planner.workout_plan(self.endurance, "beginner", "mobility", 3)
        assert plan.goal.value == "hypertrophy"

    def test_build_program(self):
        program = self.planner.build_program(self.endurance, "intermediate", "hypertrophy", 4)
        assert len(program.workouts) == 6
        assert program.rest_days == 3
        assert all(w.intensity_percent == 72.5 for w in program.workouts)
        assert self.planner.build_program(self.power, "beginner", "strength", 6).rest_days == 1


# ══════════════════════════════════════════════════════════════════════════════
# ADAPTIVE NUTRITION ENGINE
# ══════════════════════════════════════════════════════════════════════════════

class TestAdaptiveNutritionEngine:

    def setup_method(self):
        from adaptation_log import InMemoryAdaptationLog
        from nutrition_engine import AdaptiveNutritionEngine
        self.log = InMemoryAdaptationLog()
        self.engine = AdaptiveNutritionEngine(adaptation_log=self.log)

    def test_slow_progress_capped_increase(self):
        r = self.engine.dynamic_calorie_adjustment([0.1], 2000)
        assert r.adjustment == 200
        assert r.new_calories == 2200
        assert "slower" in r.reasoning

    def test_fast_progress_capped_decrease(self):
        r = self.engine.dynamic_calorie_adjustment([0.9], 2000)
        assert r.adjustment == -200
        assert r.new_calories == 1800
        assert "faster" in r.reasoning

    def test_on_target_holds(self):
        r = self.engine.dynamic_calorie_adjustment([0.6], 2000)
        assert r.adjustment == 0
        assert r.new_calories == 2000
        assert "within" in r.reasoning

    def test_empty_history_treated_as_no_change(self):
        r = self.engine.dynamic_calorie_adjustment([], 1800)
        assert r.adjustment == 200

    def test_adjustment_always_bounded(self):
        for actual in (-3.0, -0.5, 0.0, 0.25, 0.45, 0.8, 3.0):
            r = self.engine.dynamic_calorie_adjustment([actual], 2000)
            assert -200 <= r.adjustment <= 200

    def test_refeed_recommended_on_stall(self):
        r = self.engine.dynamic_calorie_adjustment([0.2, 0.2, 0.2, 0.2], 2000)
        assert r.refeed is not None
        assert r.refeed.kind.value == "refeed_recommended"
        assert r.refeed.adjustments["refeed_calories"] == 300
        # Advisory only
        assert r.new_calories == 2200
        assert len(self.log) == 1

    def test_no_refeed_with_short_history(self):
        r = self.engine.dynamic_calorie_adjustment([0.0, 0.0, 0.0], 2000)
        assert r.refeed is None
        assert len(self.log) == 0

    def test_no_refeed_when_on_track(self):
        r = self.engine.dynamic_calorie_adjustment([0.5, 0.5, 0.5, 0.5], 2000)
        assert r.refeed is None

    def test_meal_timing_static_structure(self):
        t = self.engine.meal_timing()
        assert t.pre_workout.timing_minutes == -60
        assert (t.pre_workout.macros.carbs, t.pre_workout.macros.protein, t.pre_workout.macros.fat) == (0.5, 0.3, 0.2)
        assert (t.post_workout.macros.carbs, t.post_workout.macros.protein, t.post_workout.macros.fat) == (0.6, 0.4, 0.0)
        assert sum(m.percentage for m in t.main_meals.values()) == pytest.approx(1.0)
        assert t.sessions == []

    def test_meal_timing_sessions(self):
        t = self.engine.meal_timing(["18:00", "07:30"])
        assert (t.sessions[0].pre_workout_at, t.sessions[0].post_workout_at) == ("17:00", "18:30")
        assert t.sessions[1].pre_workout_at == "06:30"

    def test_meal_timing_rejects_bad_time(self):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self.engine.meal_timing(["six pm"])


class TestEnergyCalculator:

    def setup_method(self):
        from nutrition_engine import EnergyCalculator
        self.calc = EnergyCalculator()

    def test_bmr_mifflin_st_jeor(self):
        assert self.calc.bmr(make_profile()) == pytest.approx(1880)
        assert self.calc.bmr(make_profile(sex="female")) == pytest.approx(1714)

    def test_tdee_moderate(self):
        from fitness_types import ActivityLevel
        assert self.calc.tdee(1880, ActivityLevel.moderate) == pytest.approx(1880 * 1.55)

    def test_training_day_factor_default(self):
        assert self.calc.training_tdee(1000, 1) == pytest.approx(1500)
        assert self.calc.training_tdee(1000, 5) == pytest.approx(1700)

    def test_macros(self):
        m = self.calc.macros(2000)
        assert (m.protein_g, m.carb_g, m.fat_g) == (125, 225, 67)

    def test_bmi_category(self):
        from nutrition_engine import bmi_category
        assert bmi_category(17) == "underweight"
        assert bmi_category(22) == "normal"
        assert bmi_category(27.8) == "overweight"
        assert bmi_category(41) == "obesity_class_3"


# ══════════════════════════════════════════════════════════════════════════════
# ADAPTIVE PERSONALIZATION ENGINE
# ══════════════════════════════════════════════════════════════════════════════

class TestAdaptivePersonalizationEngine:

    def setup_method(self):
        from datetime import datetime, timezone
        from adaptation_log import InMemoryAdaptationLog
        from personalization_engine import AdaptivePersonalizationEngine
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.log = InMemoryAdaptationLog()
        self.engine = AdaptivePersonalizationEngine(adaptation_log=self.log, clock=lambda: moment)

    def _adapt(self, program, difficulty="just_right", recovery="good", change=0.5, target=0.5):
        from fitness_types import Feedback, ProgressSnapshot
        return self.engine.adapt(program, Feedback(difficulty, recovery), ProgressSnapshot(change, target))

    def test_too_hard_and_poor_recovery(self):
        out = self._adapt(make_program(), "too_hard", "poor")
        w = out.training.workouts[0]
        assert w.sets == 9
        assert w.intensity_percent == 60      # 59.5 rounds half-up
        assert out.training.rest_days == 3
        assert out.nutrition.daily_calories == 2000

    def test_too_easy_and_excellent_recovery(self):
        out = self._adapt(make_program(intensity=60), "too_easy", "excellent")
        w = out.training.workouts[0]
        assert w.sets == 11
        assert w.intensity_percent == 69
        assert out.training.rest_days == 1

    def test_rest_days_bounds(self):
        assert self._adapt(make_program(rest_days=3), recovery="poor").training.rest_days == 3
        assert self._adapt(make_program(rest_days=1), recovery="excellent").training.rest_days == 1

    def test_neutral_feedback_keeps_volume(self):
        out = self._adapt(make_program(intensity=70.4))
        w = out.training.workouts[0]
        assert w.sets == 10
        assert w.intensity_percent == 70
        assert out.training.rest_days == 2

    def test_underperforming_cuts_calories(self):
        out = self._adapt(make_program(), change=0.1, target=0.5)
        assert out.nutrition.daily_calories == 1900

    def test_overperforming_adds_calories(self):
        out = self._adapt(make_program(), change=1.0, target=0.5)
        assert out.nutrition.daily_calories == 2050

    def test_macros_carried_over(self):
        program = make_program()
        assert self._adapt(program, change=0.0).nutrition.macros == program.nutrition.macros

    def test_input_not_mutated(self):
        program = make_program()
        self._adapt(program, "too_easy", "excellent", change=0.0)
        assert program == make_program()

    def test_referentially_transparent(self):
        a = self._adapt(make_program(), "too_hard", "poor", change=0.1)
        b = self._adapt(make_program(), "too_hard", "poor", change=0.1)
        assert a == b

    def test_one_event_per_cycle(self):
        self._adapt(make_program(), "too_hard", "poor", change=0.1)
        self._adapt(make_program())
        events = self.log.events()
        assert len(events) == 2
        first = events[0]
        assert first.kind.value == "program_adaptation"
        assert first.adjustments == {
            "intensity_multiplier": 0.85,
            "volume_multiplier": 0.9,
            "rest_days": 3,
            "calorie_adjustment": -100,
        }

    def test_separate_logs_do_not_interleave(self):
        from adaptation_log import InMemoryAdaptationLog
        from personalization_engine import AdaptivePersonalizationEngine
        other = AdaptivePersonalizationEngine(adaptation_log=InMemoryAdaptationLog())
        self._adapt(make_program())
        assert len(other.log.events()) == 0
        assert len(self.log) == 1

    def test_calorie_cut_stops_at_floor(self):
        out = self._adapt(make_program(calories=1250.0), change=0.0)
        assert out.nutrition.daily_calories == 1200
        adjustments = self.log.events()[-1].adjustments
        assert adjustments["calorie_adjustment"] == -50
        assert adjustments["calorie_floor"] == 1200

    def test_plan_below_floor_not_cut_further(self):
        out = self._adapt(make_program(calories=80.0), change=0.0, target=0.5)
        assert out.nutrition.daily_calories == 80
        assert self.log.events()[-1].adjustments["calorie_adjustment"] == 0

    def test_floor_is_configurable(self):
        from personalization_engine import AdaptivePersonalizationEngine
        from fitness_types import Feedback, ProgressSnapshot
        engine = AdaptivePersonalizationEngine(min_daily_calories=1500)
        out = engine.adapt(make_program(calories=1550.0), Feedback(), ProgressSnapshot(0.0, 0.5))
        assert out.nutrition.daily_calories == 1500


# ══════════════════════════════════════════════════════════════════════════════
# CALCULATOR PIPELINE
# ══════════════════════════════════════════════════════════════════════════════

class TestFitnessCalculator:

    def setup_method(self):
        from calculator_engine import FitnessCalculator
        self.calc = FitnessCalculator(min_daily_calories=1200)

    def test_weight_loss_plan(self):
        r = self.calc.weight_loss(make_profile(activity_level="moderate"), 80, 20)
        assert r.bmr == 1880
        assert r.tdee == 2914
        assert r.daily_calories == 2364
        assert r.daily_deficit == 550
        assert r.weekly_loss_kg == pytest.approx(0.5)
        assert r.estimated_weeks == 20
        assert r.genetic_profile.dominant_type.value == "power"
        assert abs(r.motivational_score - r.success_probability * 100) <= 1
        assert "medical" in r.disclaimer

    def test_weight_loss_calorie_floor(self):
        r = self.calc.weight_loss(make_profile(), 60, 2)
        assert r.daily_calories == 1200
        assert "minimum" in r.recommendations[0]

    def test_weight_loss_invalid_timeframe(self):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self.calc.weight_loss(make_profile(), 80, 0)

    def test_weight_loss_rejects_target_above_current(self):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self.calc.weight_loss(make_profile(weight_kg=50, height_cm=165), 60, 10)
        with pytest.raises(InvalidInputError):
            self.calc.weight_loss(make_profile(), 90, 10)

    def test_half_kcal_rounds_up(self):
        # BMR 700 + 1062.5 − 155 + 5 = 1612.5
        r = self.calc.weight_loss(make_profile(age=31, height_cm=170, weight_kg=70), 65, 10)
        assert r.bmr == 1613

    def test_muscle_gain_plan(self):
        r = self.calc.muscle_gain(make_profile(age=22, weight_kg=70), 76, 4)
        assert r.genetic_profile.dominant_type.value == "endurance"
        assert r.bmr == 1720
        assert r.tdee == 2752
        assert r.calorie_surplus == 500
        assert r.bulking_calories == 3252
        assert r.weekly_gain_kg == pytest.approx(0.5)
        assert r.estimated_weeks == 12
        assert r.hypertrophy_potential == pytest.approx(1.0)
        assert len(r.volume_by_muscle_group) == 6
        assert len(r.program.training.workouts) == 6
        assert r.program.nutrition.daily_calories == 3252

    def test_muscle_gain_surplus_damped_for_older_heavier(self):
        r = self.calc.muscle_gain(make_profile(age=40, experience_level="intermediate"), 95, 4)
        # power → 400, ×0.8 (age) ×0.7 (BMI)
        assert r.calorie_surplus == pytest.approx(224.0)
        assert any("Elevated body fat" in f for f in r.limiting_factors)

    def test_muscle_gain_invalid_days(self):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self.calc.muscle_gain(make_profile(), 95, 0)


# ══════════════════════════════════════════════════════════════════════════════
# BODY RECOMPOSITION
# ══════════════════════════════════════════════════════════════════════════════

class TestRecomposition:

    def setup_method(self):
        from calculator_engine import FitnessCalculator
        self.calc = FitnessCalculator()

    def _plan(self, profile=None, fat=18, muscle=40, target=15, months=6, days=4):
        return self.calc.recomposition(profile or make_profile(experience_level="intermediate"), fat, muscle, target, months, days)

    def test_body_fat_classes(self):
        from calculator_engine import body_fat_class
        assert body_fat_class(5, "male") == "very_low"
        assert body_fat_class(12, "male") == "athletic"
        assert body_fat_class(17, "male") == "fitness"
        assert body_fat_class(20, "male") == "acceptable"
        assert body_fat_class(25, "male") == "high"
        assert body_fat_class(15, "feminino") == "very_low"
        assert body_fat_class(20, "female") == "athletic"
        assert body_fat_class(30, "female") == "acceptable"
        assert body_fat_class(32, "female") == "high"

    def test_moderate_deficit_plan(self):
        r = self._plan()
        assert r.body_fat_percent == 20.0
        assert r.body_fat_class == "acceptable"
        assert r.fat_to_lose_kg == pytest.approx(4.5)
        # intermediate 0.25 × 1.2 (power) × 0.7 per month
        assert r.muscle_gain_kg == pytest.approx(1.26)
        assert r.estimated_final_weight_kg == pytest.approx(86.76)
        assert r.difficulty_score == 0
        assert r.difficulty == "low"
        assert r.strategy.value == "deficit_moderado"
        assert r.genetic_profile.dominant_type.value == "power"
        assert r.energy_expenditure == 3008
        assert r.training_day.daily_calories == 2808
        assert r.rest_day.daily_calories == 2708

    def test_macro_cycling(self):
        r = self._plan()
        t, rest = r.training_day.macros, r.rest_day.macros
        assert (t.protein_g, t.carb_g, t.fat_g) == (211, 281, 94)
        assert (rest.protein_g, rest.carb_g, rest.fat_g) == (237, 169, 120)

    def test_success_discounted_for_recomposition(self):
        # intense activity, no history: .436 × 0.7
        assert self._plan().success_probability == pytest.approx(0.31)

    def test_milestones(self):
        r = self._plan()
        assert [m.month for m in r.milestones] == [1, 2, 3, 4, 5, 6]
        last = r.milestones[-1]
        assert last.cumulative_fat_loss_kg == pytest.approx(4.5)
        assert last.cumulative_muscle_gain_kg == pytest.approx(1.26)
        assert last.estimated_weight_kg == pytest.approx(86.76)
        assert last.estimated_body_fat_percent == pytest.approx(15.0)
        assert r.milestones[0].visual_marker == "Sharper definition"
        assert r.milestones[2].visual_marker == "Clearly visible changes"
        assert last.visual_marker == "Full transformation"

    def test_timeline_paced_at_max_fat_loss(self):
        # 20 kg / 0.3 kg per week / 4.33 weeks per month ≈ 15.4 months
        r = self._plan(make_profile(weight_kg=100), fat=30, target=10, months=3)
        assert r.fat_to_lose_kg == pytest.approx(20)
        assert r.estimated_months == 15
        assert len(r.milestones) == 3
        assert r.difficulty_score == 1

    def test_requested_timeframe_kept_when_slower(self):
        assert self._plan(months=6).estimated_months == 6

    def test_lean_advanced_lifter_cycles_calories(self):
        profile = make_profile(age=38, experience_level="advanced")
        r = self._plan(profile, fat=9, muscle=42, target=8)
        assert r.difficulty_score == 5
        assert r.difficulty == "high"
        assert r.strategy.value == "ciclagem_calorica"
        assert r.training_day.daily_calories == 3144
        assert r.rest_day.daily_calories == 2544
        assert len(r.critical_factors) == 2
        assert "Track the calorie cycle closely." in r.recommendations

    def test_moderate_difficulty_keeps_maintenance(self):
        profile = make_profile(sex="female", age=36, height_cm=165, weight_kg=60, experience_level="intermediate")
        r = self._plan(profile, fat=10.8, muscle=25, target=16)
        assert r.body_fat_class == "athletic"
        assert r.difficulty == "moderate"
        assert r.strategy.value == "manutencao_calorica"

    def test_target_above_current_means_nothing_to_lose(self):
        r = self._plan(target=25)
        assert r.fat_to_lose_kg == 0

    def test_split_follows_training_days(self):
        assert self._plan(days=5).training.split.startswith("Push/Pull/Legs")
        assert self._plan(days=3).training.split.startswith("Upper/Lower")

    @pytest.mark.parametrize("kwargs", [
        dict(fat=95), dict(muscle=0), dict(months=0), dict(days=8), dict(target=0),
    ])
    def test_invalid_inputs(self, kwargs):
        from fitness_types import InvalidInputError
        with pytest.raises(InvalidInputError):
            self._plan(**kwargs)
