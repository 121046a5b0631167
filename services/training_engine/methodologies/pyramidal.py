"""
Pyramidal (70/20/10)

70% zone 1, 20% zone 2 tempo, 10% zone 3 VO2max. Paces are the polarized
set plus a tempo zone at threshold; the week has a Tuesday tempo run, a
Thursday VO2max session (dropped in the taper) and a Sunday long run.
"""

from typing import Dict, Tuple

from ..constants import Intensity, Methodology, Phase
from ..models import DayPlan, FitnessAnchor, MethodologyPaceSet, WorkoutPrescription
from ..workout_builder import (
    ZONE_AEROBIC,
    ZONE_EASY,
    interval_session,
    steady_run,
    tempo_run,
    training_day,
)
from .base import WeekContext, interval_pace_for_duration
from .polarized import PolarizedStrategy
from .registry import MethodologyRegistry

EASY_DAYS = (1, 3, 5, 6)
MAX_EASY_DAYS = 4
LONG_RUN_CAP_MIN = 120
TEMPO_CAP_MIN = 35
VO2_REST_MIN = 3


@MethodologyRegistry.register
class PyramidalStrategy(PolarizedStrategy):
    focus_templates = {
        Phase.BASE: "Aerobic base 70/20/10 @ ~{pace}",
        Phase.BUILD: "Progressive intensity @ ~{pace}",
        Phase.PEAK: "Race-specific @ {pace}",
        Phase.TAPER: "Taper",
    }

    @property
    def methodology(self) -> Methodology:
        return Methodology.PYRAMIDAL

    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        paces = super().resolve_paces(anchor)
        zones = dict(paces.zones, tempo=paces.threshold_kmh)
        return self._pace_set(
            anchor,
            easy_kmh=paces.easy_kmh,
            threshold_kmh=paces.threshold_kmh,
            interval_kmh=paces.interval_kmh,
            repetition_kmh=paces.repetition_kmh,
            zones=zones,
        )

    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        easy = week.paces.easy_kmh
        days: Dict[int, DayPlan] = {}

        long_min = 60 if week.is_taper else min(80 + week.week_in_phase * 5, LONG_RUN_CAP_MIN)
        days[7] = training_day(
            7, steady_run("Long run", long_min, easy, Intensity.EASY, ZONE_AEROBIC),
            notes="Long run - zone 1",
        )
        days[2] = training_day(2, self._tempo(week), notes="Tempo - zone 2")
        if not week.is_taper:
            days[4] = training_day(4, self._vo2max(week), notes="VO2max intervals - zone 3")

        if week.sessions_per_week > 3:
            easy_min = 30 if week.is_taper else 40
            for day in EASY_DAYS[:min(week.sessions_per_week - 3, MAX_EASY_DAYS)]:
                days[day] = training_day(
                    day, steady_run("Easy run", easy_min, easy, Intensity.EASY, ZONE_EASY),
                    notes="Easy run - zone 1",
                )
        return self._assemble(days)

    def _tempo(self, week: WeekContext) -> WorkoutPrescription:
        tempo_min = 15 if week.is_taper else min(20 + week.week_in_phase * 2, TEMPO_CAP_MIN)
        return tempo_run(
            "Tempo run",
            tempo_min=tempo_min,
            tempo_pace_kmh=week.paces.zone("tempo"),
            easy_pace_kmh=week.paces.easy_kmh,
            warmup_min=15,
            cooldown_min=10,
        )

    def _vo2max(self, week: WeekContext) -> WorkoutPrescription:
        if week.phase == Phase.BASE:
            reps, work_min = 4, 3
        else:
            reps, work_min = 5, 4
        return interval_session(
            "VO2max intervals",
            reps=reps,
            work_min=work_min,
            work_pace_kmh=interval_pace_for_duration(week.paces.marathon_kmh, work_min),
            rest_min=VO2_REST_MIN,
            easy_pace_kmh=week.paces.easy_kmh,
        )
