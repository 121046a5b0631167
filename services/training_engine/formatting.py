"""
Display helpers for paces, durations and distances.

Internally everything is km/h, minutes and km; these turn values into the
strings used in workout instructions and week focus lines.
"""

from typing import Optional


def kmh_to_seconds_per_km(speed_kmh: float) -> float:
    return 3600 / speed_kmh


def format_pace(speed_kmh: Optional[float]) -> str:
    """Format a speed as min:ss/km."""
    if not speed_kmh or speed_kmh <= 0:
        return "-"
    total = round(kmh_to_seconds_per_km(speed_kmh))
    minutes, seconds = divmod(total, 60)
    return f"{minutes}:{seconds:02d}/km"


def format_duration(minutes: float) -> str:
    """45 -> '45 min', 95 -> '1h 35min'."""
    whole = round(minutes)
    if whole < 60:
        return f"{whole} min"
    hours, rest = divmod(whole, 60)
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest:02d}min"


def format_distance(km: Optional[float]) -> str:
    if km is None:
        return "-"
    return f"{km:.1f} km"


def format_reps(reps: int, work_min: float) -> str:
    """4, 4.0 -> '4x4 min'; 12, 0.6 -> '12x36 s'."""
    if work_min < 1:
        return f"{reps}x{round(work_min * 60)} s"
    if float(work_min).is_integer():
        return f"{reps}x{int(work_min)} min"
    return f"{reps}x{work_min:g} min"
