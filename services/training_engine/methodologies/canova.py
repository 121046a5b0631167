"""
Canova Percentage System

Marathon-specialist periodization. Every pace is a percentage of goal
marathon pace, and the program moves through three periods:

- FUNDAMENTAL (Base): varied fartlek and progressive tempo
- SPECIAL (Build): long intervals at marathon pace, special blocks
- COMPETITION (Peak, Taper): short race-sharpening sessions

Recoveries inside quality sessions are run at active-recovery pace
(~87.5% of MP), never a full stop.
"""

from enum import Enum
from typing import Dict, Tuple

from ..constants import (
    CANOVA_COMPRESSION_FACTORS,
    ExperienceLevel,
    Intensity,
    Methodology,
    Phase,
    SegmentType,
)
from ..models import DayPlan, FitnessAnchor, MethodologyPaceSet, Segment, WorkoutPrescription
from ..workout_builder import (
    ZONE_AEROBIC,
    ZONE_EASY,
    ZONE_TEMPO,
    ZONE_THRESHOLD,
    ZONE_VO2,
    interval_segments,
    interval_session,
    long_run,
    running_workout,
    steady_run,
    training_day,
)
from .base import MethodologyStrategy, WeekContext
from .registry import MethodologyRegistry


class CanovaPeriod(str, Enum):
    FUNDAMENTAL = "FUNDAMENTAL"
    SPECIAL = "SPECIAL"
    COMPETITION = "COMPETITION"


PERIOD_FOR_PHASE = {
    Phase.BASE: CanovaPeriod.FUNDAMENTAL,
    Phase.BUILD: CanovaPeriod.SPECIAL,
    Phase.PEAK: CanovaPeriod.COMPETITION,
    Phase.TAPER: CanovaPeriod.COMPETITION,
}

# Zones as % of goal marathon pace
CANOVA_ZONES = {
    "regeneration": 0.65,
    "fundamental": 0.80,
    "active_recovery": 0.875,
    "special_endurance": 0.925,
    "specific": 1.00,
    "special_speed": 1.075,
}

REPETITION_FACTOR = 1.31
WARMUP_MIN = 15
LONG_RUN_CAP_MIN = 150
LONG_RUN_MP_FINISH_MIN = {CanovaPeriod.SPECIAL: 25, CanovaPeriod.COMPETITION: 30}


def km_to_minutes(km: float, speed_kmh: float) -> float:
    return round(km / speed_kmh * 60, 1)


@MethodologyRegistry.register
class CanovaStrategy(MethodologyStrategy):
    focus_templates = {
        Phase.BASE: "Fundamental aerobic @ ~{pace}",
        Phase.BUILD: "Marathon-specific @ ~{pace}",
        Phase.PEAK: "Race preparation @ {pace}",
        Phase.TAPER: "Taper",
    }

    @property
    def methodology(self) -> Methodology:
        return Methodology.CANOVA

    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        """Threshold comes from MP through the experience compression factor."""
        mp = anchor.marathon_kmh
        zones = {name: mp * pct for name, pct in CANOVA_ZONES.items()}
        compression = CANOVA_COMPRESSION_FACTORS.get(
            anchor.experience_level, CANOVA_COMPRESSION_FACTORS[ExperienceLevel.INTERMEDIATE]
        )
        threshold = anchor.threshold_kmh or mp / compression
        return self._pace_set(
            anchor,
            easy_kmh=zones["fundamental"],
            threshold_kmh=threshold,
            interval_kmh=zones["special_speed"],
            repetition_kmh=mp * REPETITION_FACTOR,
            zones=zones,
        )

    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        period = PERIOD_FOR_PHASE[week.phase]
        sessions = week.sessions_per_week
        days: Dict[int, DayPlan] = {}

        days[7] = training_day(7, self._long_run(week, period), notes="Canova long run")
        days[2] = training_day(2, self._quality_workout(week, period, 1), notes="Quality session 1")
        days[4] = training_day(4, self._quality_workout(week, period, 2), notes="Quality session 2")

        if sessions >= 6:
            minutes = 45 if week.is_taper else 60
            days[6] = training_day(6, steady_run(
                "Medium-long run", minutes, week.paces.zone("fundamental"),
                Intensity.MODERATE, ZONE_AEROBIC,
            ), notes="Medium-long run")

        easy_min = 30 if week.is_taper else 40
        for day in (1, 3, 5):
            if sessions >= day:
                days[day] = training_day(day, steady_run(
                    "Easy run", easy_min, week.paces.zone("fundamental"), Intensity.EASY, ZONE_EASY,
                ), notes="Easy run")
        return self._assemble(days)

    # -------------------------------------------------------------------------

    def _long_run(self, week: WeekContext, period: CanovaPeriod) -> WorkoutPrescription:
        if week.is_taper:
            base = 60
        elif period == CanovaPeriod.FUNDAMENTAL:
            base = 90
        else:
            base = 105
        minutes = min(base + week.week_in_phase * 5, LONG_RUN_CAP_MIN)

        easy = week.paces.zone("fundamental")
        if period == CanovaPeriod.FUNDAMENTAL:
            return long_run("Fundamental long run", minutes, easy)
        return long_run(
            "Progressive long run", minutes, easy,
            finish_min=LONG_RUN_MP_FINISH_MIN[period],
            finish_pace_kmh=week.paces.zone("specific"),
            finish_notes="marathon pace",
        )

    def _quality_workout(self, week: WeekContext, period: CanovaPeriod, session: int) -> WorkoutPrescription:
        if period == CanovaPeriod.FUNDAMENTAL:
            return self._fartlek(week) if session == 1 else self._progressive_tempo(week)
        if period == CanovaPeriod.SPECIAL:
            return self._mp_intervals(week) if session == 1 else self._special_block(week)
        return self._sharpening(week)

    def _float(self, week: WeekContext) -> float:
        return week.paces.zone("active_recovery")

    def _fartlek(self, week: WeekContext) -> WorkoutPrescription:
        return interval_session(
            "Varied fartlek",
            reps=8, work_min=2.5, work_pace_kmh=week.paces.zone("special_endurance"),
            rest_min=1.5, easy_pace_kmh=week.paces.zone("fundamental"),
            rest_pace_kmh=self._float(week),
            intensity=Intensity.MODERATE, work_zone=ZONE_TEMPO,
            warmup_min=WARMUP_MIN, rest_notes="active recovery",
        )

    def _progressive_tempo(self, week: WeekContext) -> WorkoutPrescription:
        paces = week.paces
        segments = [
            Segment(SegmentType.WARMUP, WARMUP_MIN, paces.zone("fundamental"), ZONE_EASY),
            Segment(SegmentType.WORK, 8, paces.zone("active_recovery"), ZONE_AEROBIC),
            Segment(SegmentType.WORK, 8, paces.zone("special_endurance"), ZONE_TEMPO),
            Segment(SegmentType.WORK, 8, paces.threshold_kmh, ZONE_THRESHOLD),
            Segment(SegmentType.COOLDOWN, 10, paces.zone("fundamental"), ZONE_EASY),
        ]
        return running_workout("Progressive tempo", Intensity.THRESHOLD, segments)

    def _mp_intervals(self, week: WeekContext) -> WorkoutPrescription:
        paces = week.paces
        if week.is_short_race:
            reps = 6 if week.week_in_phase <= 2 else 8
            rep_km, float_km = 1.0, 0.2
            work_pace = paces.zone("special_speed")
            name = f"{reps}x1000m race-specific"
        else:
            reps = 4 if week.week_in_phase <= 2 else 5
            rep_km, float_km = 2.0, 0.4
            work_pace = paces.zone("specific")
            name = f"{reps}x2000m at marathon pace"
        return interval_session(
            name,
            reps=reps,
            work_min=km_to_minutes(rep_km, work_pace),
            work_pace_kmh=work_pace,
            rest_min=km_to_minutes(float_km, self._float(week)),
            easy_pace_kmh=paces.zone("fundamental"),
            rest_pace_kmh=self._float(week),
            intensity=Intensity.THRESHOLD,
            work_zone=ZONE_TEMPO,
            warmup_min=WARMUP_MIN,
            rest_notes="active recovery",
        )

    def _special_block(self, week: WeekContext) -> WorkoutPrescription:
        """3 x (3 km at MP + 1 km at threshold), floats between blocks."""
        paces = week.paces
        mp, threshold, float_pace = paces.zone("specific"), paces.threshold_kmh, self._float(week)
        segments = [Segment(SegmentType.WARMUP, WARMUP_MIN, paces.zone("fundamental"), ZONE_EASY)]
        for block in range(3):
            segments.append(Segment(SegmentType.WORK, km_to_minutes(3, mp), mp, ZONE_TEMPO, "marathon pace"))
            segments.append(Segment(SegmentType.WORK, km_to_minutes(1, threshold), threshold, ZONE_THRESHOLD, "threshold"))
            if block < 2:
                segments.append(Segment(SegmentType.REST, 3, float_pace, ZONE_AEROBIC, "active recovery"))
        segments.append(Segment(SegmentType.COOLDOWN, 10, paces.zone("fundamental"), ZONE_EASY))
        return running_workout("Canova special block", Intensity.THRESHOLD, segments)

    def _sharpening(self, week: WeekContext) -> WorkoutPrescription:
        paces = week.paces
        if week.is_short_race:
            reps = 4 if week.is_taper else 5
            work_pace = paces.zone("special_speed")
            return interval_session(
                f"{reps}x1000m race pace",
                reps=reps, work_min=km_to_minutes(1, work_pace), work_pace_kmh=work_pace,
                rest_min=3, easy_pace_kmh=paces.zone("fundamental"), rest_pace_kmh=self._float(week),
                intensity=Intensity.INTERVAL, work_zone=ZONE_VO2,
                warmup_min=WARMUP_MIN, rest_notes="active recovery",
            )
        mp = paces.zone("specific")
        return interval_session(
            "2x3 km at marathon pace",
            reps=2, work_min=km_to_minutes(3, mp), work_pace_kmh=mp,
            rest_min=5, easy_pace_kmh=paces.zone("fundamental"), rest_pace_kmh=self._float(week),
            intensity=Intensity.INTERVAL, work_zone=ZONE_TEMPO,
            warmup_min=WARMUP_MIN, rest_notes="active recovery",
        )
