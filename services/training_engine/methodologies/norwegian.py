"""
Norwegian Method

Two variants built around controlled threshold work:

- Singles: one session per day, 2-3 sub-threshold interval sessions a week
  just under LT2 (~97% of threshold speed) with short 1 min rests.
- Doubles: Tuesday and Thursday are double-threshold days, a low AM session
  (2-3 mmol/L) and a higher PM session (3-4 mmol/L), plus a Saturday hill
  HIT session.
"""

from typing import Dict, Tuple

from ..constants import Intensity, Methodology, Phase, SegmentType
from ..models import DayPlan, FitnessAnchor, MethodologyPaceSet, Segment, WorkoutPrescription
from ..workout_builder import (
    ZONE_AEROBIC,
    ZONE_ANAEROBIC,
    ZONE_EASY,
    ZONE_TEMPO,
    ZONE_THRESHOLD,
    interval_session,
    interval_segments,
    running_workout,
    steady_run,
    training_day,
)
from .base import MethodologyStrategy, WeekContext, interval_pace_for_duration
from .registry import MethodologyRegistry

SUB_THRESHOLD_FACTOR = 0.97
EASY_FACTOR = 0.78
RECOVERY_FACTOR = 0.82
AEROBIC_FACTOR = 0.85
REPETITION_FACTOR = 1.31

LONG_RUN_DAY = 7
LONG_RUN_CAP_MIN = 120


def singles_session(phase: Phase, week_in_phase: int, session_number: int) -> Tuple[int, float, float, str]:
    """(reps, work min, rest min, name) for a Norwegian singles quality day."""
    if phase == Phase.BASE:
        if week_in_phase <= 2:
            return 5, 5, 1, "5x5 min sub-threshold"
        if week_in_phase <= 4:
            return 4, 6, 1, "4x6 min sub-threshold"
        return 5, 6, 1, "5x6 min sub-threshold"
    if phase == Phase.BUILD:
        if session_number == 1:
            return 5, 6, 1, "5x6 min threshold minus"
        if session_number == 2:
            return 4, 8, 1, "4x8 min threshold minus"
        return 3, 10, 1.5, "3x10 min threshold minus"
    if phase == Phase.PEAK:
        return 4, 8, 1, "Race-specific intervals"
    return 3, 5, 1, "Sub-threshold maintenance"


@MethodologyRegistry.register
class NorwegianSingleStrategy(MethodologyStrategy):
    focus_templates = {
        Phase.BASE: "Aerobic base - sub-threshold @ ~{pace}",
        Phase.BUILD: "Progressive threshold sessions @ ~{pace}",
        Phase.PEAK: "Race-specific @ {pace}",
        Phase.TAPER: "Taper - hold pace {pace}",
    }

    @property
    def methodology(self) -> Methodology:
        return Methodology.NORWEGIAN_SINGLE

    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        mp = anchor.marathon_kmh
        threshold = self._threshold(anchor)
        return self._pace_set(
            anchor,
            easy_kmh=mp * EASY_FACTOR,
            threshold_kmh=threshold,
            interval_kmh=interval_pace_for_duration(mp, 4),
            repetition_kmh=mp * REPETITION_FACTOR,
            zones={
                "sub_threshold": threshold * SUB_THRESHOLD_FACTOR,
                "recovery": mp * RECOVERY_FACTOR,
                "aerobic": mp * AEROBIC_FACTOR,
            },
        )

    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        sessions = week.sessions_per_week
        quality_count = 3 if sessions >= 6 else 2
        quality_days = (2, 4, 6)[:quality_count]
        easy_days = (1, 3, 5)[:max(0, sessions - quality_count - 1)]

        days: Dict[int, DayPlan] = {}
        if sessions >= 3:
            days[LONG_RUN_DAY] = training_day(
                LONG_RUN_DAY, self._long_run(week), notes="Long run - green zone",
            )
        for number, day in enumerate(quality_days, start=1):
            days[day] = training_day(day, self._quality_workout(week, number), notes="Sub-threshold intervals")
        for day in easy_days:
            days[day] = training_day(day, self._easy_run(week), notes="Easy run - green zone")
        return self._assemble(days)

    def _long_run(self, week: WeekContext) -> WorkoutPrescription:
        base = 60 if week.is_taper else (75 if week.phase == Phase.BASE else 90)
        minutes = min(base + week.week_in_phase * 5, LONG_RUN_CAP_MIN)
        return steady_run("Long run", minutes, week.paces.zone("aerobic"), Intensity.EASY, ZONE_AEROBIC)

    def _easy_run(self, week: WeekContext) -> WorkoutPrescription:
        minutes = 30 if week.is_taper else 45
        return steady_run("Easy run", minutes, week.paces.zone("recovery"), Intensity.EASY, ZONE_EASY)

    def _quality_workout(self, week: WeekContext, session_number: int) -> WorkoutPrescription:
        reps, work_min, rest_min, name = singles_session(week.phase, week.week_in_phase, session_number)
        mp = week.paces.marathon_kmh
        if week.phase == Phase.PEAK:
            work_pace = mp * 1.12 if week.is_short_race else mp * 1.06
        else:
            work_pace = week.paces.zone("sub_threshold")
        return interval_session(
            name,
            reps=reps,
            work_min=work_min,
            work_pace_kmh=work_pace,
            rest_min=rest_min,
            easy_pace_kmh=week.paces.zone("aerobic"),
            intensity=Intensity.THRESHOLD,
            work_zone=ZONE_TEMPO,
        )


# Doubles
AM_THRESHOLD_FACTOR = 0.94
PM_THRESHOLD_FACTOR = 0.97
HILL_SPRINT_KMH = 16.0
HILL_REPS = 12
HILL_REP_MIN = 0.6
HILL_JOG_MIN = 2
HILL_POST_REST_MIN = 3
DOUBLE_DAYS = (2, 4)
DOUBLES_EASY_DAYS = (1, 3, 5)
HILL_DAY = 6


@MethodologyRegistry.register
class NorwegianDoublesStrategy(MethodologyStrategy):
    focus_templates = {
        Phase.BASE: "Double threshold sessions @ ~{pace}",
        Phase.BUILD: "Intensified double days @ ~{pace}",
        Phase.PEAK: "Race preparation @ {pace}",
        Phase.TAPER: "Taper",
    }

    @property
    def methodology(self) -> Methodology:
        return Methodology.NORWEGIAN_DOUBLES

    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        mp = anchor.marathon_kmh
        threshold = self._threshold(anchor)
        return self._pace_set(
            anchor,
            easy_kmh=mp * AEROBIC_FACTOR,
            threshold_kmh=threshold,
            interval_kmh=interval_pace_for_duration(mp, 4),
            repetition_kmh=mp * REPETITION_FACTOR,
            zones={
                "am_threshold": threshold * AM_THRESHOLD_FACTOR,
                "pm_threshold": threshold * PM_THRESHOLD_FACTOR,
                "hill": HILL_SPRINT_KMH,
            },
        )

    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        easy = week.paces.easy_kmh
        days: Dict[int, DayPlan] = {}

        long_min = 70 if week.is_taper else min(90 + week.week_in_phase * 5, LONG_RUN_CAP_MIN)
        days[LONG_RUN_DAY] = training_day(
            LONG_RUN_DAY,
            steady_run("Long run", long_min, easy, Intensity.EASY, ZONE_AEROBIC),
            notes="Long run - green zone",
        )
        days[HILL_DAY] = training_day(HILL_DAY, self._hill_session(week), notes="Zone 4 HIT")

        if not week.is_taper:
            for day in DOUBLE_DAYS:
                days[day] = training_day(
                    day, self._am_session(week), self._pm_session(week),
                    notes="Double threshold day (AM + PM)",
                )

        easy_min = 30 if week.is_taper else 45
        for day in DOUBLES_EASY_DAYS:
            days[day] = training_day(
                day, steady_run("Easy run", easy_min, easy, Intensity.EASY, ZONE_EASY),
                notes="Easy run - green zone",
            )
        return self._assemble(days)

    def _am_session(self, week: WeekContext) -> WorkoutPrescription:
        return interval_session(
            "AM: low threshold (2-3 mmol/L)",
            reps=5, work_min=6, work_pace_kmh=week.paces.zone("am_threshold"),
            rest_min=1, easy_pace_kmh=week.paces.easy_kmh,
            intensity=Intensity.THRESHOLD, work_zone=ZONE_TEMPO,
        )

    def _pm_session(self, week: WeekContext) -> WorkoutPrescription:
        return interval_session(
            "PM: high threshold (3-4 mmol/L)",
            reps=4, work_min=8, work_pace_kmh=week.paces.zone("pm_threshold"),
            rest_min=1.5, easy_pace_kmh=week.paces.easy_kmh,
            intensity=Intensity.THRESHOLD, work_zone=ZONE_THRESHOLD,
        )

    def _hill_session(self, week: WeekContext) -> WorkoutPrescription:
        easy = week.paces.easy_kmh
        segments = [Segment(SegmentType.WARMUP, 7.5, easy, ZONE_EASY)]
        segments.extend(interval_segments(
            HILL_REPS, HILL_REP_MIN, week.paces.zone("hill"), HILL_JOG_MIN, easy,
            work_zone=ZONE_ANAEROBIC, rest_notes="jog back down",
        ))
        segments.append(Segment(SegmentType.REST, HILL_POST_REST_MIN, None, ZONE_EASY, "full stop"))
        segments.append(Segment(SegmentType.COOLDOWN, 7.5, easy, ZONE_EASY))
        return running_workout("Hill intervals", Intensity.INTERVAL, segments)
