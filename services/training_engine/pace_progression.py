"""
Progressive Pace Interpolation

Moves the week's marathon-equivalent target from current fitness toward
goal pace across the program:

    BASE   covers  0% -> 20% of the gap
    BUILD  covers 20% -> 90% of the gap
    PEAK   holds goal pace
    TAPER  holds goal pace

Progress inside a phase is linear in week-in-phase, so the target is
continuous and never gets slower from one week to the next. An athlete
already at or beyond goal pace keeps their current pace.

Also home to the volume ramp and goal-time -> target-pace conversion.
"""

import logging
import math
from typing import Optional, Union

from services.vdot_calculator import parse_time_to_seconds
from .constants import GOAL_DISTANCE_KM, MARATHON_EQUIVALENT_FACTORS, Phase, RaceGoal

logger = logging.getLogger(__name__)

BASE_GAP_SHARE = 0.2
BUILD_GAP_SHARE = 0.7


def calculate_progressive_pace(
    current_kmh: float,
    goal_kmh: float,
    phase: Phase,
    week_in_phase: int,
    phase_length: int,
) -> float:
    """Target marathon-equivalent speed (km/h) for one week."""
    if current_kmh >= goal_kmh:
        return current_kmh

    gap = goal_kmh - current_kmh
    progress = min((week_in_phase - 1) / max(phase_length - 1, 1), 1.0)

    if phase == Phase.BASE:
        return current_kmh + gap * BASE_GAP_SHARE * progress
    if phase == Phase.BUILD:
        return current_kmh + gap * (BASE_GAP_SHARE + BUILD_GAP_SHARE * progress)
    return goal_kmh


def calculate_volume_percent(phase: Phase, week_in_phase: int) -> int:
    """
    Weekly volume as % of peak.

    Base 70 -> 85, Build 85 -> 95, Peak 100, Taper 70 -> 50.
    """
    step = week_in_phase - 1
    if phase == Phase.BASE:
        volume = min(70 + 3 * step, 85)
    elif phase == Phase.BUILD:
        volume = min(85 + 2 * step, 95)
    elif phase == Phase.PEAK:
        volume = 100
    else:
        volume = max(70 - 10 * step, 50)
    return max(0, min(volume, 150))


def calculate_target_pace(goal: RaceGoal, goal_time: Union[str, float, None]) -> Optional[float]:
    """
    Marathon-equivalent speed (km/h) implied by a goal race time.

    Returns None when the goal has no race distance, the time won't parse,
    or the implied speed is not a positive finite number.
    """
    distance_km = GOAL_DISTANCE_KM.get(goal)
    if distance_km is None:
        return None

    seconds = parse_time_to_seconds(goal_time)
    if not seconds or seconds <= 0:
        return None

    race_kmh = distance_km * 3600 / seconds
    target = race_kmh * MARATHON_EQUIVALENT_FACTORS[goal]
    if not math.isfinite(target) or target <= 0:
        return None
    return target
