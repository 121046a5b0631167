"""
Polarized (Seiler 80/20)

The default methodology. Roughly 80% of sessions easy, 20% hard, with very
little in between. Hard days are long VO2max intervals on Tuesday and
Thursday that lengthen through Base and Build; the long run is Sunday.
"""

import math
from typing import Dict, Tuple

from ..constants import Intensity, Methodology, Phase
from ..models import DayPlan, FitnessAnchor, MethodologyPaceSet, WorkoutPrescription
from ..workout_builder import (
    ZONE_AEROBIC,
    ZONE_EASY,
    interval_session,
    steady_run,
    training_day,
)
from .base import MethodologyStrategy, WeekContext, interval_pace_for_duration
from .registry import MethodologyRegistry

EASY_FACTOR = 0.85
REPETITION_FACTOR = 1.31
REFERENCE_INTERVAL_MIN = 4

QUALITY_DAYS = (2, 4)
EASY_DAYS = (1, 3, 5, 6)
LONG_RUN_DAY = 7
LONG_RUN_CAP_MIN = 150
INTERVAL_REST_MIN = 2


def long_run_base_minutes(phase: Phase) -> int:
    if phase == Phase.TAPER:
        return 60
    if phase == Phase.BASE:
        return 75
    return 90


def seiler_intervals(phase: Phase, week_in_phase: int) -> Tuple[int, int, str]:
    """(reps, work minutes, name) for the week's hard session."""
    if phase == Phase.BASE:
        if week_in_phase <= 2:
            return 4, 4, "4x4 min intervals"
        if week_in_phase <= 4:
            return 4, 5, "4x5 min intervals"
        return 4, 6, "4x6 min intervals"
    if phase == Phase.BUILD:
        if week_in_phase <= 3:
            return 4, 7, "4x7 min intervals"
        return 4, 8, "4x8 min intervals"
    if phase == Phase.PEAK:
        return 5, 5, "Race-specific intervals"
    return 3, 4, "Maintenance intervals"


@MethodologyRegistry.register
class PolarizedStrategy(MethodologyStrategy):
    focus_templates = {
        Phase.BASE: "Aerobic base 80/20 @ ~{pace}",
        Phase.BUILD: "Tempo work @ ~{pace}",
        Phase.PEAK: "Race-specific @ {pace}",
        Phase.TAPER: "Recovery",
    }

    @property
    def methodology(self) -> Methodology:
        return Methodology.POLARIZED

    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        mp = anchor.marathon_kmh
        easy = mp * EASY_FACTOR
        threshold = self._threshold(anchor)
        interval = interval_pace_for_duration(mp, REFERENCE_INTERVAL_MIN)
        return self._pace_set(
            anchor,
            easy_kmh=easy,
            threshold_kmh=threshold,
            interval_kmh=interval,
            repetition_kmh=mp * REPETITION_FACTOR,
            zones={"zone1": easy, "zone2": threshold, "zone3": interval},
        )

    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        sessions = week.sessions_per_week
        has_long_run = sessions >= 3

        hard_sessions = max(1, math.ceil(sessions * 0.20))
        quality_days = QUALITY_DAYS[:hard_sessions]
        easy_count = sessions - len(quality_days) - (1 if has_long_run else 0)
        easy_days = EASY_DAYS[:max(0, easy_count)]

        days: Dict[int, DayPlan] = {}
        if has_long_run:
            days[LONG_RUN_DAY] = training_day(
                LONG_RUN_DAY, self._long_run(week), notes="Long run - zone 1, conversational",
            )
        for day in quality_days:
            days[day] = training_day(day, self._quality_workout(week), notes="Quality session")
        for day in easy_days:
            days[day] = training_day(day, self._easy_run(week), notes="Easy run")
        return self._assemble(days)

    # -------------------------------------------------------------------------

    def _long_run(self, week: WeekContext) -> WorkoutPrescription:
        minutes = min(long_run_base_minutes(week.phase) + week.week_in_phase * 5, LONG_RUN_CAP_MIN)
        return steady_run("Long run", minutes, week.paces.easy_kmh, Intensity.EASY, ZONE_AEROBIC)

    def _easy_run(self, week: WeekContext) -> WorkoutPrescription:
        minutes = 30 if week.is_taper else 40
        return steady_run("Easy run", minutes, week.paces.easy_kmh, Intensity.EASY, ZONE_EASY)

    def _quality_workout(self, week: WeekContext) -> WorkoutPrescription:
        reps, work_min, name = seiler_intervals(week.phase, week.week_in_phase)
        mp = week.paces.marathon_kmh
        if week.phase == Phase.PEAK:
            work_pace = mp * 1.19 if week.is_short_race else mp * 1.08
        else:
            work_pace = interval_pace_for_duration(mp, work_min)
        return interval_session(
            name,
            reps=reps,
            work_min=work_min,
            work_pace_kmh=work_pace,
            rest_min=INTERVAL_REST_MIN,
            easy_pace_kmh=week.paces.easy_kmh,
        )
