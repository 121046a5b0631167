"""
Training Pace Calculator - Based on Daniels' Running Formula

Fitness scores (VDOT), predicted race times and training paces from the
published oxygen-cost and fraction-of-VO2max regressions.
Based on publicly available formulas from Dr. Jack Daniels' research in
"Daniels' Running Formula."

Fails closed: anything that cannot be computed returns None so callers can
fall back to a lower-fidelity estimate.

Usage:
    vdot = calculate_vdot(5000, 1200)            # ~49.8
    vdot = calculate_vdot_from_race("5K", "20:00")
    seconds = predict_race_time(vdot, 10000)
    paces = calculate_daniels_paces(vdot)
"""
from typing import Dict, Optional, Union
from dataclasses import dataclass
import logging
import math

from core.config import settings

logger = logging.getLogger(__name__)


# Race distances in meters keyed by canonical label
RACE_DISTANCES = {
    "3K": 3000,
    "MILE": 1609.34,
    "5K": 5000,
    "10K": 10000,
    "HALF": 21097.5,
    "MARATHON": 42195,
}

DISTANCE_ALIASES = {
    "3000M": "3K",
    "1MI": "MILE",
    "5000M": "5K",
    "10000M": "10K",
    "HALF_MARATHON": "HALF",
    "HALF-MARATHON": "HALF",
    "HM": "HALF",
    "FULL": "MARATHON",
}

# Fractions of VDOT VO2 for each Daniels training intensity
DANIELS_INTENSITY = {
    "easy_min": 0.59,
    "easy_max": 0.74,
    "marathon": 0.84,
    "threshold": 0.88,
    "interval": 1.00,
    "repetition": 1.10,
}

BASELINE_DISTANCE_M = 5000
BASELINE_VO2_FRACTION = 0.95


@dataclass(frozen=True)
class DanielsPaces:
    """Daniels training speeds in km/h."""
    vdot: float
    easy_min_kmh: float
    easy_max_kmh: float
    marathon_kmh: float
    threshold_kmh: float
    interval_kmh: float
    repetition_kmh: float


def normalize_distance_label(label: str) -> Optional[str]:
    """Map a user-supplied distance label onto a RACE_DISTANCES key."""
    if not label:
        return None
    key = label.strip().upper().replace(" ", "_")
    key = DISTANCE_ALIASES.get(key, key)
    return key if key in RACE_DISTANCES else None


def parse_time_to_seconds(value: Union[str, int, float, None]) -> Optional[float]:
    """
    Parse a finish time into seconds.

    Accepts a number of seconds, "HH:MM:SS" or "MM:SS". Returns None when the
    value cannot be parsed or is not a positive finite number.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) and value > 0 else None

    parts = value.strip().split(":")
    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        return None
    if any(n < 0 or not math.isfinite(n) for n in numbers):
        return None

    if len(numbers) == 3:
        total = numbers[0] * 3600 + numbers[1] * 60 + numbers[2]
    elif len(numbers) == 2:
        total = numbers[0] * 60 + numbers[1]
    else:
        return None
    return total if math.isfinite(total) and total > 0 else None


def oxygen_cost(velocity_m_per_min: float) -> float:
    """VO2 (ml/kg/min) required to run at a velocity."""
    return -4.60 + 0.182258 * velocity_m_per_min + 0.000104 * velocity_m_per_min ** 2


def fraction_of_vo2max(time_minutes: float) -> float:
    """Fraction of VO2max sustainable for a race lasting time_minutes."""
    return (
        0.8
        + 0.1894393 * math.exp(-0.012778 * time_minutes)
        + 0.2989558 * math.exp(-0.1932605 * time_minutes)
    )


def velocity_for_oxygen_cost(vo2: float) -> float:
    """Invert the oxygen-cost quadratic. Returns m/min."""
    a, b, c = 0.000104, 0.182258, -4.60 - vo2
    discriminant = b * b - 4 * a * c
    return (-b + math.sqrt(max(discriminant, 0.0))) / (2 * a)


def calculate_vdot(distance_meters: float, time_seconds: float) -> Optional[float]:
    """
    Calculate VDOT from a race distance and finish time.

    Args:
        distance_meters: Race distance in meters
        time_seconds: Finish time in seconds

    Returns:
        VDOT rounded to 0.1, or None for non-positive input
    """
    if not distance_meters or not time_seconds:
        return None
    if distance_meters <= 0 or time_seconds <= 0:
        return None

    time_minutes = time_seconds / 60.0
    velocity = distance_meters / time_minutes

    vo2 = oxygen_cost(velocity)
    pct_max = fraction_of_vo2max(time_minutes)
    if vo2 <= 0 or pct_max <= 0:
        return None

    return round(vo2 / pct_max, 1)


def calculate_vdot_from_race(distance_label: str, finish_time: Union[str, int, float]) -> Optional[float]:
    """VDOT from a labelled race ("5K", "HALF", ...) and a time string or seconds."""
    key = normalize_distance_label(distance_label)
    if key is None:
        logger.debug("Unrecognized race distance %r", distance_label)
        return None

    seconds = parse_time_to_seconds(finish_time)
    if seconds is None:
        logger.debug("Unparsable race time %r", finish_time)
        return None

    return calculate_vdot(RACE_DISTANCES[key], seconds)


def predict_race_time(vdot: float, distance_meters: float) -> Optional[float]:
    """
    Predict a finish time (seconds) for a distance at a given VDOT.

    Seeds from a 5K baseline scaled by a power law, then refines for a fixed
    number of iterations so the loop always terminates.
    """
    if not vdot or vdot <= 0 or not distance_meters or distance_meters <= 0:
        return None

    baseline_velocity = velocity_for_oxygen_cost(vdot * BASELINE_VO2_FRACTION)
    if baseline_velocity <= 0:
        return None
    baseline_minutes = BASELINE_DISTANCE_M / baseline_velocity
    time_minutes = baseline_minutes * (distance_meters / BASELINE_DISTANCE_M) ** settings.VDOT_POWER_LAW_EXPONENT

    for _ in range(settings.VDOT_PREDICTION_ITERATIONS):
        vo2 = vdot * fraction_of_vo2max(time_minutes)
        velocity = velocity_for_oxygen_cost(vo2)
        if velocity <= 0:
            return None
        time_minutes = distance_meters / velocity

    return round(time_minutes * 60.0, 1)


def speed_at_intensity(vdot: float, fraction: float) -> float:
    """Running speed (km/h) whose oxygen cost equals vdot * fraction."""
    return velocity_for_oxygen_cost(vdot * fraction) * 60.0 / 1000.0


def calculate_daniels_paces(vdot: float) -> Optional[DanielsPaces]:
    """Training speeds for every Daniels intensity at a given VDOT."""
    if not vdot or vdot <= 0:
        return None

    speeds: Dict[str, float] = {
        name: round(speed_at_intensity(vdot, fraction), 2)
        for name, fraction in DANIELS_INTENSITY.items()
    }
    return DanielsPaces(
        vdot=vdot,
        easy_min_kmh=speeds["easy_min"],
        easy_max_kmh=speeds["easy_max"],
        marathon_kmh=speeds["marathon"],
        threshold_kmh=speeds["threshold"],
        interval_kmh=speeds["interval"],
        repetition_kmh=speeds["repetition"],
    )
