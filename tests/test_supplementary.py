"""
Tests for Strength and Core Placement

The supplementary pass runs on a finished running week and only ever adds
workouts; it never removes or moves running sessions.
"""

import pytest

from services.training_engine.constants import (
    ExperienceLevel,
    Intensity,
    Methodology,
    Phase,
    RaceGoal,
    WorkoutType,
)
from services.training_engine.evidence import HeuristicEvidence
from services.training_engine.methodologies import WeekContext, get_strategy
from services.training_engine.pace_resolver import resolve_pace_set_for_anchor
from services.training_engine.supplementary import (
    add_supplementary_sessions,
    build_strength_workout,
    candidate_days,
)


def template_week(methodology=Methodology.POLARIZED, phase=Phase.BASE, sessions=5):
    anchor = HeuristicEvidence(ExperienceLevel.INTERMEDIATE).to_anchor()
    context = WeekContext(
        week_number=1,
        phase=phase,
        week_in_phase=1,
        phase_length=4,
        sessions_per_week=sessions,
        goal=RaceGoal.MARATHON,
        paces=resolve_pace_set_for_anchor(anchor, methodology),
    )
    return get_strategy(methodology).build_week_days(context)


def count(day, workout_type):
    return sum(1 for w in day.workouts if w.workout_type == workout_type)


@pytest.fixture
def polarized_week():
    """Running Mon-Thu and Sunday; Friday and Saturday rest."""
    return template_week()


class TestStrengthWorkouts:

    def test_first_session_is_full(self):
        workout = build_strength_workout(Phase.BASE, 0)

        assert workout.name == "Strength - full session"
        assert workout.duration_min == 45
        assert workout.intensity == Intensity.MODERATE

    def test_later_sessions_are_maintenance(self):
        workout = build_strength_workout(Phase.BASE, 1)

        assert workout.name == "Strength - maintenance"
        assert workout.duration_min == 30

    def test_build_phase_is_heavy(self):
        assert build_strength_workout(Phase.BUILD, 0).intensity == Intensity.THRESHOLD


class TestCandidateDays:

    def test_rest_days_first(self, polarized_week):
        assert candidate_days(polarized_week, after_running=False) == [4, 5]

    def test_after_running(self, polarized_week):
        assert candidate_days(polarized_week, after_running=True) == [0, 1, 2, 3, 6]

    def test_emptiest_when_no_rest_days(self):
        """Doubles fill every day; single-session days come before double days."""
        week = template_week(Methodology.NORWEGIAN_DOUBLES)
        assert candidate_days(week, after_running=False) == [0, 2, 4, 5, 6, 1, 3]


class TestAddSupplementary:

    def test_no_sessions_requested(self, polarized_week):
        assert add_supplementary_sessions(polarized_week, Phase.BASE) == polarized_week

    def test_strength_on_rest_days(self, polarized_week):
        week = add_supplementary_sessions(polarized_week, Phase.BASE, strength_sessions=2)

        assert week[4].workouts[0].name == "Strength - full session"
        assert week[5].workouts[0].name == "Strength - maintenance"
        assert week[4].notes == "Strength - full session"

    def test_strength_after_running(self, polarized_week):
        week = add_supplementary_sessions(
            polarized_week, Phase.BASE, strength_sessions=2, strength_after_running=True,
        )

        assert [w.workout_type for w in week[0].workouts] == [WorkoutType.RUNNING, WorkoutType.STRENGTH]
        assert week[0].notes == "Easy run + Strength - full session"
        assert count(week[1], WorkoutType.STRENGTH) == 1
        assert week[4].is_rest_day

    def test_core_offset_from_strength(self, polarized_week):
        """One strength and one core session land on different days."""
        week = add_supplementary_sessions(polarized_week, Phase.BASE, strength_sessions=1, core_sessions=1)

        assert count(week[4], WorkoutType.STRENGTH) == 1
        assert count(week[4], WorkoutType.CORE) == 0
        assert count(week[5], WorkoutType.CORE) == 1

    def test_capped_by_eligible_days(self, polarized_week):
        week = add_supplementary_sessions(
            polarized_week, Phase.BASE, strength_sessions=5, core_sessions=5,
        )

        assert sum(count(d, WorkoutType.STRENGTH) for d in week) == 2
        assert sum(count(d, WorkoutType.CORE) for d in week) == 2

    @pytest.mark.parametrize("strength,core", [(1, 1), (2, 2), (3, 3), (7, 7)])
    def test_at_most_one_of_each_per_day(self, strength, core):
        for after_running in (False, True):
            week = add_supplementary_sessions(
                template_week(sessions=4), Phase.BUILD,
                strength_sessions=strength, core_sessions=core,
                strength_after_running=after_running, core_after_running=after_running,
            )
            for day in week:
                assert count(day, WorkoutType.STRENGTH) <= 1
                assert count(day, WorkoutType.CORE) <= 1

    def test_running_untouched(self, polarized_week):
        week = add_supplementary_sessions(
            polarized_week, Phase.BASE, strength_sessions=3, core_sessions=3, core_after_running=True,
        )

        for before, after in zip(polarized_week, week):
            running_before = [w for w in before.workouts if w.workout_type == WorkoutType.RUNNING]
            running_after = [w for w in after.workouts if w.workout_type == WorkoutType.RUNNING]
            assert running_before == running_after

    def test_input_week_unchanged(self, polarized_week):
        snapshot = tuple(polarized_week)
        add_supplementary_sessions(polarized_week, Phase.BASE, strength_sessions=2, core_sessions=2)

        assert polarized_week == snapshot
        assert polarized_week[4].is_rest_day

    def test_seven_days_kept(self, polarized_week):
        week = add_supplementary_sessions(polarized_week, Phase.PEAK, strength_sessions=2, core_sessions=2)
        assert len(week) == 7
