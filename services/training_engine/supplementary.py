"""
Supplementary Sessions

Adds strength and core work to a week that the methodology template has
already laid out. Runs after the running template, never before, and adds
at most one strength and one core session to any day.

Placement:
- "after running" requested: days that already hold a running session
- otherwise: rest days first, falling back to the emptiest days
- core is offset by the number of strength sessions placed so the two
  spread across different days when there is room
"""

import logging
from dataclasses import replace
from typing import List, Sequence, Tuple

from .constants import Intensity, Phase, WorkoutType
from .models import DayPlan, WorkoutPrescription
from .workout_builder import REST_NOTE, core_session, strength_session

logger = logging.getLogger(__name__)

FULL_STRENGTH_MIN = 45
MAINTENANCE_STRENGTH_MIN = 30
CORE_MIN = 20

STRENGTH_FOCUS = {
    Phase.BASE: "Anatomical adaptation: 2-3 sets x 12-15 reps, bodyweight to light loads",
    Phase.BUILD: "Maximal strength: 3-4 sets x 4-6 reps on heavy compound lifts",
    Phase.PEAK: "Explosive power: plyometrics plus 3 sets x 3-5 fast reps",
    Phase.TAPER: "Maintenance: 2 sets x 6-8 reps, stop well short of fatigue",
}

CORE_INSTRUCTIONS = "Planks, side planks, dead bugs and bird dogs: 3 rounds of 40 s each"


def build_strength_workout(phase: Phase, session_index: int) -> WorkoutPrescription:
    """First session of the week is the full one; the rest are maintenance."""
    intensity = Intensity.THRESHOLD if phase == Phase.BUILD else Intensity.MODERATE
    if session_index == 0:
        return strength_session("Strength - full session", FULL_STRENGTH_MIN, intensity, STRENGTH_FOCUS[phase])
    return strength_session(
        "Strength - maintenance", MAINTENANCE_STRENGTH_MIN, intensity, STRENGTH_FOCUS[Phase.TAPER],
    )


def _has_running(day: DayPlan) -> bool:
    return any(w.workout_type == WorkoutType.RUNNING for w in day.workouts)


def _is_rest(day: DayPlan) -> bool:
    return not day.workouts or day.notes == REST_NOTE


def candidate_days(days: Sequence[DayPlan], after_running: bool) -> List[int]:
    """Indexes of days eligible for a supplementary session, in placement order."""
    if after_running:
        indexes = [i for i, day in enumerate(days) if _has_running(day)]
    else:
        indexes = [i for i, day in enumerate(days) if _is_rest(day)]
    if not indexes:
        # emptiest first, weekday order breaks ties
        indexes = sorted(range(len(days)), key=lambda i: (len(days[i].workouts), i))
    return indexes


def _append(day: DayPlan, workout: WorkoutPrescription) -> DayPlan:
    notes = day.notes
    if day.is_rest_day or notes == REST_NOTE:
        notes = workout.name
    else:
        notes = f"{notes} + {workout.name}"
    return replace(day, workouts=day.workouts + (workout,), notes=notes)


def add_supplementary_sessions(
    days: Sequence[DayPlan],
    phase: Phase,
    strength_sessions: int = 0,
    core_sessions: int = 0,
    strength_after_running: bool = False,
    core_after_running: bool = False,
) -> Tuple[DayPlan, ...]:
    """New week with strength and core sessions added."""
    week = list(days)

    strength_days = candidate_days(week, strength_after_running)
    strength_added = min(strength_sessions, len(strength_days))
    for i in range(strength_added):
        idx = strength_days[i]
        week[idx] = _append(week[idx], build_strength_workout(phase, i))

    core_days = candidate_days(days, core_after_running)
    core_added = min(core_sessions, len(core_days))
    for i in range(core_added):
        idx = core_days[(i + strength_added) % len(core_days)]
        week[idx] = _append(week[idx], core_session(CORE_MIN, CORE_INSTRUCTIONS))

    if strength_added < strength_sessions or core_added < core_sessions:
        logger.debug(
            "Supplementary sessions capped: strength %d/%d, core %d/%d",
            strength_added, strength_sessions, core_added, core_sessions,
        )
    return tuple(week)
