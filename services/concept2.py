"""
Concept2 Pace / Power Conversion

Concept2 ergometers report pace per 500m; power is proportional to the
inverse cube of pace:

    watts = 2.80 / (pace / 500)^3
    pace  = 500 * (2.80 / watts)^(1/3)

Both directions are exact inverses. Values outside plausible ranges still
convert but carry a warning.

Usage:
    pace = watts_to_pace(250).value          # seconds per 500m
    watts = pace_to_watts(105.0).value
"""
from typing import List
from dataclasses import dataclass, field
import logging

from core.config import settings
from core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

SPLIT_DISTANCE_M = 500


@dataclass(frozen=True)
class Conversion:
    value: float
    warnings: List[str] = field(default_factory=list)


def watts_to_pace(watts: float) -> Conversion:
    """Seconds per 500m for a power output."""
    if watts <= 0:
        raise InvalidInputError("Power must be positive", field="watts")

    warnings = []
    if watts < settings.ERGOMETER_MIN_POWER_W or watts > settings.ERGOMETER_MAX_POWER_W:
        warnings.append(
            f"Power {watts:.0f}W is outside the plausible range "
            f"({settings.ERGOMETER_MIN_POWER_W:.0f}-{settings.ERGOMETER_MAX_POWER_W:.0f}W)"
        )

    pace = SPLIT_DISTANCE_M * (settings.CONCEPT2_PACE_CONSTANT / watts) ** (1 / 3)
    return Conversion(value=pace, warnings=warnings)


def pace_to_watts(pace_seconds: float) -> Conversion:
    """Power for a pace given in seconds per 500m."""
    if pace_seconds <= 0:
        raise InvalidInputError("Pace must be positive", field="pace")

    warnings = []
    if pace_seconds < settings.CONCEPT2_MIN_PACE_S or pace_seconds > settings.CONCEPT2_MAX_PACE_S:
        warnings.append(
            f"Pace {format_split(pace_seconds)} is outside the plausible range "
            f"({format_split(settings.CONCEPT2_MIN_PACE_S)}-{format_split(settings.CONCEPT2_MAX_PACE_S)})"
        )

    watts = settings.CONCEPT2_PACE_CONSTANT / (pace_seconds / SPLIT_DISTANCE_M) ** 3
    return Conversion(value=watts, warnings=warnings)


def format_split(seconds: float) -> str:
    """Format seconds as M:SS.s"""
    minutes = int(seconds // 60)
    rest = seconds - minutes * 60
    return f"{minutes}:{rest:04.1f}"

