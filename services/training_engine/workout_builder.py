"""
Workout Builder

Segment-based constructors for every session the composer prescribes.
A workout is only ever described by its segments; duration and distance
are read back from them, so "5x5 min @ 4:10/km" and its 11.3 km total can
never drift apart.

Interval sessions follow one shape:
    warmup, N x (work, rest) with no rest after the last rep, cooldown
"""

import logging
from typing import List, Optional, Sequence

from .constants import Intensity, SegmentType, WorkoutType
from .formatting import format_duration, format_pace, format_reps
from .models import DayPlan, Segment, WorkoutPrescription

logger = logging.getLogger(__name__)

DEFAULT_WARMUP_MIN = 10
DEFAULT_COOLDOWN_MIN = 10

# Zone numbers used on segments
ZONE_EASY = 1
ZONE_AEROBIC = 2
ZONE_TEMPO = 3
ZONE_THRESHOLD = 4
ZONE_VO2 = 5
ZONE_ANAEROBIC = 6


# =============================================================================
# SEGMENT DESCRIPTION
# =============================================================================

def describe_segment(segment: Segment) -> str:
    text = format_duration(segment.duration_min)
    if segment.pace_kmh:
        text += f" @ {format_pace(segment.pace_kmh)}"
    if segment.notes:
        text += f" ({segment.notes})"
    return text


def describe_segments(segments: Sequence[Segment]) -> str:
    """Compact one-line description, collapsing repeated work/rest pairs."""
    parts: List[str] = []
    i = 0
    while i < len(segments):
        seg = segments[i]
        if seg.segment_type == SegmentType.WORK:
            # count a run of identical work reps with identical rests between
            reps = 1
            rest = None
            j = i + 1
            while j < len(segments):
                nxt = segments[j]
                if (
                    nxt.segment_type == SegmentType.REST
                    and j + 1 < len(segments)
                    and segments[j + 1] == seg
                    and (rest is None or nxt == rest)
                ):
                    rest = nxt
                    reps += 1
                    j += 2
                else:
                    break
            if reps > 1:
                text = format_reps(reps, seg.duration_min)
                if seg.pace_kmh:
                    text += f" @ {format_pace(seg.pace_kmh)}"
                text += f" w/ {describe_segment(rest)} recovery"
                parts.append(text)
                i = j
                continue
        label = "" if seg.segment_type == SegmentType.WORK else f"{seg.segment_type.value} "
        parts.append(f"{label}{describe_segment(seg)}".strip())
        i += 1
    return ", ".join(parts)


# =============================================================================
# RUNNING WORKOUTS
# =============================================================================

def running_workout(
    name: str,
    intensity: Intensity,
    segments: Sequence[Segment],
    instructions: Optional[str] = None,
) -> WorkoutPrescription:
    segments = tuple(segments)
    return WorkoutPrescription(
        workout_type=WorkoutType.RUNNING,
        name=name,
        intensity=intensity,
        instructions=instructions or describe_segments(segments),
        segments=segments,
    )


def steady_run(
    name: str,
    duration_min: float,
    pace_kmh: float,
    intensity: Intensity = Intensity.EASY,
    zone: int = ZONE_EASY,
    notes: str = "",
) -> WorkoutPrescription:
    """A single continuous segment (easy, recovery, plain long run)."""
    segment = Segment(SegmentType.WORK, duration_min, pace_kmh, zone, notes)
    return running_workout(name, intensity, [segment])


def interval_segments(
    reps: int,
    work_min: float,
    work_pace_kmh: float,
    rest_min: float,
    rest_pace_kmh: Optional[float],
    work_zone: int = ZONE_VO2,
    rest_zone: int = ZONE_EASY,
    rest_notes: str = "",
) -> List[Segment]:
    """N x (work, rest) without a trailing rest."""
    work = Segment(SegmentType.WORK, work_min, work_pace_kmh, work_zone)
    rest = Segment(SegmentType.REST, rest_min, rest_pace_kmh, rest_zone, rest_notes)
    segments: List[Segment] = []
    for rep in range(reps):
        segments.append(work)
        if rep < reps - 1:
            segments.append(rest)
    return segments


def interval_session(
    name: str,
    reps: int,
    work_min: float,
    work_pace_kmh: float,
    rest_min: float,
    easy_pace_kmh: float,
    rest_pace_kmh: Optional[float] = None,
    intensity: Intensity = Intensity.INTERVAL,
    work_zone: int = ZONE_VO2,
    warmup_min: float = DEFAULT_WARMUP_MIN,
    cooldown_min: float = DEFAULT_COOLDOWN_MIN,
    rest_notes: str = "",
) -> WorkoutPrescription:
    """
    Warmup, reps x (work, rest), cooldown.

    Rest defaults to jogging at easy pace. Pass rest_pace_kmh for an active
    recovery float instead.
    """
    segments = [Segment(SegmentType.WARMUP, warmup_min, easy_pace_kmh, ZONE_EASY)]
    segments.extend(interval_segments(
        reps, work_min, work_pace_kmh, rest_min,
        rest_pace_kmh if rest_pace_kmh is not None else easy_pace_kmh,
        work_zone=work_zone,
        rest_zone=ZONE_AEROBIC if rest_pace_kmh is not None else ZONE_EASY,
        rest_notes=rest_notes,
    ))
    segments.append(Segment(SegmentType.COOLDOWN, cooldown_min, easy_pace_kmh, ZONE_EASY))
    return running_workout(name, intensity, segments)


def tempo_run(
    name: str,
    tempo_min: float,
    tempo_pace_kmh: float,
    easy_pace_kmh: float,
    warmup_min: float = DEFAULT_WARMUP_MIN,
    cooldown_min: float = DEFAULT_COOLDOWN_MIN,
    zone: int = ZONE_THRESHOLD,
    intensity: Intensity = Intensity.THRESHOLD,
) -> WorkoutPrescription:
    segments = [
        Segment(SegmentType.WARMUP, warmup_min, easy_pace_kmh, ZONE_EASY),
        Segment(SegmentType.WORK, tempo_min, tempo_pace_kmh, zone),
        Segment(SegmentType.COOLDOWN, cooldown_min, easy_pace_kmh, ZONE_EASY),
    ]
    return running_workout(name, intensity, segments)


def long_run(
    name: str,
    total_min: float,
    easy_pace_kmh: float,
    finish_min: float = 0,
    finish_pace_kmh: Optional[float] = None,
    finish_notes: str = "",
) -> WorkoutPrescription:
    """Long run, optionally closing with a faster segment at goal pace."""
    if not finish_min or finish_pace_kmh is None:
        return steady_run(name, total_min, easy_pace_kmh, Intensity.EASY, ZONE_AEROBIC)

    easy_min = max(total_min - finish_min, 0)
    segments = [
        Segment(SegmentType.WORK, easy_min, easy_pace_kmh, ZONE_AEROBIC),
        Segment(SegmentType.WORK, finish_min, finish_pace_kmh, ZONE_TEMPO, finish_notes),
    ]
    return running_workout(name, Intensity.MODERATE, segments)


# =============================================================================
# SUPPLEMENTARY WORKOUTS
# =============================================================================

def strength_session(
    name: str,
    duration_min: float,
    intensity: Intensity,
    instructions: str,
) -> WorkoutPrescription:
    segment = Segment(SegmentType.WORK, duration_min, None, ZONE_EASY)
    return WorkoutPrescription(
        workout_type=WorkoutType.STRENGTH,
        name=name,
        intensity=intensity,
        instructions=instructions,
        segments=(segment,),
    )


def core_session(duration_min: float, instructions: str) -> WorkoutPrescription:
    segment = Segment(SegmentType.WORK, duration_min, None, ZONE_EASY)
    return WorkoutPrescription(
        workout_type=WorkoutType.CORE,
        name="Core stability",
        intensity=Intensity.MODERATE,
        instructions=instructions,
        segments=(segment,),
    )


# =============================================================================
# DAYS
# =============================================================================

REST_NOTE = "Rest"


def training_day(day_number: int, *workouts: WorkoutPrescription, notes: str = "") -> DayPlan:
    if not notes:
        notes = " + ".join(w.name for w in workouts) if workouts else REST_NOTE
    return DayPlan(day_number=day_number, notes=notes, workouts=tuple(workouts))


def rest_day(day_number: int, notes: str = REST_NOTE) -> DayPlan:
    return DayPlan(day_number=day_number, notes=notes)
