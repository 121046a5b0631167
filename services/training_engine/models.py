"""
Input schemas and output structures for program generation.

Caller-authored inputs are pydantic models so structural validation happens at
the boundary. Everything the engine produces is a frozen dataclass; stages
build new objects instead of editing earlier output.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from services.vdot_calculator import DanielsPaces
from .constants import (
    DAY_NAMES,
    GOAL_ALIASES,
    Confidence,
    DataSource,
    ExperienceLevel,
    Intensity,
    Methodology,
    Phase,
    RaceGoal,
    SegmentType,
    WorkoutType,
)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class FieldTestResult(BaseModel):
    """Speed at a measured blood-lactate threshold."""
    model_config = ConfigDict(frozen=True)

    threshold_speed_kmh: float
    threshold_heart_rate: Optional[int] = None
    lactate_mmol: Optional[float] = None


class RaceResult(BaseModel):
    """A recent race: distance label plus seconds or "HH:MM:SS"."""
    model_config = ConfigDict(frozen=True)

    distance: str
    time: Union[float, str]


class PhysiologicalProfile(BaseModel):
    """Snapshot of the athlete's evidence for one generation request."""
    model_config = ConfigDict(frozen=True)

    lab_vo2max: Optional[float] = None
    field_test: Optional[FieldTestResult] = None
    race_result: Optional[RaceResult] = None
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    current_weekly_volume_km: Optional[float] = None

    @field_validator("experience_level", mode="before")
    @classmethod
    def _lower_experience(cls, value):
        return value.lower() if isinstance(value, str) else value


class SchedulingParams(BaseModel):
    """Caller-supplied scheduling parameters."""
    model_config = ConfigDict(frozen=True)

    sessions_per_week: int = Field(default=5, ge=1, le=14)
    duration_weeks: int = Field(default=12, ge=1, le=52)
    goal: RaceGoal = RaceGoal.MARATHON
    goal_time: Optional[str] = None
    start_date: Optional[date] = None
    target_race_date: Optional[date] = None
    strength_sessions_per_week: int = Field(default=0, ge=0, le=7)
    core_sessions_per_week: int = Field(default=0, ge=0, le=7)
    schedule_strength_after_running: bool = False
    schedule_core_after_running: bool = False

    @field_validator("goal", mode="before")
    @classmethod
    def _normalize_goal(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return GOAL_ALIASES.get(key, key)
        return value


class AltitudePeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: date
    end: date
    altitude_m: Optional[int] = None


class CalendarConstraints(BaseModel):
    """Date exclusions from the athlete's calendar."""
    model_config = ConfigDict(frozen=True)

    blocked: FrozenSet[date] = frozenset()
    reduced: FrozenSet[date] = frozenset()
    altitude_periods: Tuple[AltitudePeriod, ...] = ()


# ---------------------------------------------------------------------------
# Pace resolution
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeartRateZone:
    """Heart-rate band anchored on the measured threshold heart rate."""
    zone: int
    name: str
    min_bpm: int
    max_bpm: int

    def to_dict(self) -> Dict[str, Any]:
        return {"zone": self.zone, "name": self.name, "min_bpm": self.min_bpm, "max_bpm": self.max_bpm}


@dataclass(frozen=True)
class FitnessAnchor:
    """The single prioritized fitness estimate all pace sets derive from."""
    data_source: DataSource
    confidence: Confidence
    marathon_kmh: float
    experience_level: ExperienceLevel
    threshold_kmh: Optional[float] = None   # only when measured
    vdot: Optional[float] = None
    daniels: Optional[DanielsPaces] = None
    heart_rate_zones: Tuple[HeartRateZone, ...] = ()

    def scaled_to(self, marathon_kmh: float) -> "FitnessAnchor":
        """Same evidence, re-expressed at a different marathon-equivalent pace."""
        if marathon_kmh == self.marathon_kmh:
            return self
        ratio = marathon_kmh / self.marathon_kmh
        return replace(
            self,
            marathon_kmh=marathon_kmh,
            threshold_kmh=self.threshold_kmh * ratio if self.threshold_kmh else None,
        )


@dataclass(frozen=True)
class MethodologyPaceSet:
    """Methodology-tagged bundle of paces (km/h)."""
    methodology: Methodology
    data_source: DataSource
    confidence: Confidence
    marathon_kmh: float
    easy_kmh: float
    threshold_kmh: float
    interval_kmh: float
    repetition_kmh: float
    zones: Dict[str, float] = field(default_factory=dict)
    vdot: Optional[float] = None
    heart_rate_zones: Tuple[HeartRateZone, ...] = ()

    def zone(self, name: str) -> float:
        return self.zones[name]

    def all_paces(self) -> Dict[str, float]:
        paces = {
            "marathon": self.marathon_kmh,
            "easy": self.easy_kmh,
            "threshold": self.threshold_kmh,
            "interval": self.interval_kmh,
            "repetition": self.repetition_kmh,
        }
        paces.update(self.zones)
        return paces

    def to_dict(self) -> Dict[str, Any]:
        return {
            "methodology": self.methodology.value,
            "data_source": self.data_source.value,
            "confidence": self.confidence.value,
            "vdot": self.vdot,
            "paces_kmh": {k: round(v, 2) for k, v in self.all_paces().items()},
            "heart_rate_zones": [z.to_dict() for z in self.heart_rate_zones],
        }


@dataclass(frozen=True)
class PhaseDistribution:
    """Week count per phase; always sums to the program length."""
    base: int
    build: int
    peak: int
    taper: int

    @property
    def total(self) -> int:
        return self.base + self.build + self.peak + self.taper

    def weeks_for(self, phase: Phase) -> int:
        return {
            Phase.BASE: self.base,
            Phase.BUILD: self.build,
            Phase.PEAK: self.peak,
            Phase.TAPER: self.taper,
        }[phase]

    def to_dict(self) -> Dict[str, int]:
        return {"base": self.base, "build": self.build, "peak": self.peak, "taper": self.taper}


# ---------------------------------------------------------------------------
# Plan output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Segment:
    """One block of a structured workout."""
    segment_type: SegmentType
    duration_min: float
    pace_kmh: Optional[float] = None
    zone: int = 1
    notes: str = ""

    @property
    def distance_km(self) -> float:
        if not self.pace_kmh:
            return 0.0
        return self.duration_min / 60 * self.pace_kmh

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.segment_type.value,
            "duration_min": self.duration_min,
            "pace_kmh": round(self.pace_kmh, 2) if self.pace_kmh else None,
            "zone": self.zone,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class WorkoutPrescription:
    """
    A single session. Duration and distance are derived from the segments,
    so they can never disagree with the structure.
    """
    workout_type: WorkoutType
    name: str
    intensity: Intensity
    instructions: str
    segments: Tuple[Segment, ...]

    @property
    def duration_min(self) -> float:
        return round(sum(s.duration_min for s in self.segments), 1)

    @property
    def distance_km(self) -> Optional[float]:
        if not any(s.pace_kmh for s in self.segments):
            return None
        return round(sum(s.distance_km for s in self.segments), 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.workout_type.value,
            "name": self.name,
            "intensity": self.intensity.value,
            "duration_min": self.duration_min,
            "distance_km": self.distance_km,
            "instructions": self.instructions,
            "segments": [s.to_dict() for s in self.segments],
        }


@dataclass(frozen=True)
class DayPlan:
    """One day; no workouts means rest."""
    day_number: int
    notes: str
    workouts: Tuple[WorkoutPrescription, ...] = ()
    annotations: Tuple[str, ...] = ()
    is_race_day: bool = False

    @property
    def is_rest_day(self) -> bool:
        return not self.workouts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_number": self.day_number,
            "day_name": DAY_NAMES[self.day_number],
            "notes": self.notes,
            "annotations": list(self.annotations),
            "is_race_day": self.is_race_day,
            "workouts": [w.to_dict() for w in self.workouts],
        }


@dataclass(frozen=True)
class WeekPlan:
    week_number: int
    phase: Phase
    week_in_phase: int
    volume_percent: int
    focus: str
    target_pace_kmh: float
    days: Tuple[DayPlan, ...]

    @property
    def total_distance_km(self) -> float:
        return round(sum(
            w.distance_km or 0.0 for d in self.days for w in d.workouts
        ), 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_number": self.week_number,
            "phase": self.phase.value,
            "week_in_phase": self.week_in_phase,
            "volume_percent": self.volume_percent,
            "focus": self.focus,
            "target_pace_kmh": round(self.target_pace_kmh, 2),
            "total_distance_km": self.total_distance_km,
            "days": [d.to_dict() for d in self.days],
        }


@dataclass(frozen=True)
class ProgramPlan:
    """Complete generated program."""
    methodology: Methodology
    goal: RaceGoal
    start_date: date
    phases: PhaseDistribution
    pace_set: MethodologyPaceSet
    current_pace_kmh: float
    goal_pace_kmh: float
    weeks: Tuple[WeekPlan, ...]

    @property
    def duration_weeks(self) -> int:
        return len(self.weeks)

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.duration_weeks * 7 - 1)

    def day_date(self, week_number: int, day_number: int) -> date:
        return self.start_date + timedelta(days=(week_number - 1) * 7 + (day_number - 1))

    def get_week(self, week_number: int) -> WeekPlan:
        return self.weeks[week_number - 1]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "methodology": self.methodology.value,
            "goal": self.goal.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "duration_weeks": self.duration_weeks,
            "phases": self.phases.to_dict(),
            "pace_set": self.pace_set.to_dict(),
            "current_pace_kmh": round(self.current_pace_kmh, 2),
            "goal_pace_kmh": round(self.goal_pace_kmh, 2),
            "weeks": [w.to_dict() for w in self.weeks],
        }
