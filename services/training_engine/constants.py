"""
Constants for program generation.

Closed enums for every branching dimension (methodology, phase, evidence
tier, workout shape) plus the methodology-specific ratio tables.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from services.physiology_types import ConfidenceLevel


class Methodology(str, Enum):
    """Periodization philosophies."""
    POLARIZED = "POLARIZED"                  # Default, Seiler 80/20
    NORWEGIAN_SINGLE = "NORWEGIAN_SINGLE"    # Sub-threshold, one session per day
    NORWEGIAN_DOUBLES = "NORWEGIAN_DOUBLES"  # AM/PM double-threshold days
    CANOVA = "CANOVA"                        # Marathon-pace-relative, long peak
    PYRAMIDAL = "PYRAMIDAL"                  # 70/20/10


METHODOLOGY_ALIASES = {
    "DEFAULT": Methodology.POLARIZED,
    "NORWEGIAN_SINGLES": Methodology.NORWEGIAN_SINGLE,
    "NORWEGIAN": Methodology.NORWEGIAN_DOUBLES,
    "NORWEGIAN_DOUBLE": Methodology.NORWEGIAN_DOUBLES,
}


def parse_methodology(value) -> Optional[Methodology]:
    """Resolve a caller-supplied methodology name; None if unknown."""
    if isinstance(value, Methodology):
        return value
    if not value:
        return None
    key = str(value).strip().upper().replace("-", "_").replace(" ", "_")
    if key in METHODOLOGY_ALIASES:
        return METHODOLOGY_ALIASES[key]
    try:
        return Methodology(key)
    except ValueError:
        return None


class Phase(str, Enum):
    """Periodization phases, in order."""
    BASE = "BASE"
    BUILD = "BUILD"
    PEAK = "PEAK"
    TAPER = "TAPER"


PHASE_ORDER = (Phase.BASE, Phase.BUILD, Phase.PEAK, Phase.TAPER)


class DataSource(str, Enum):
    """Evidence tier a pace set was derived from."""
    LAB = "LAB"
    FIELD_TEST = "FIELD_TEST"
    RACE_TIME = "RACE_TIME"
    ESTIMATE = "ESTIMATE"


Confidence = ConfidenceLevel


class ExperienceLevel(str, Enum):
    """Ordinal training experience."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ELITE = "elite"


class RaceGoal(str, Enum):
    """Goal event for the program."""
    FIVE_K = "5k"
    TEN_K = "10k"
    HALF_MARATHON = "half-marathon"
    MARATHON = "marathon"
    FITNESS = "fitness"


GOAL_ALIASES = {
    "half": RaceGoal.HALF_MARATHON,
    "half_marathon": RaceGoal.HALF_MARATHON,
    "hm": RaceGoal.HALF_MARATHON,
    "full": RaceGoal.MARATHON,
    "custom": RaceGoal.FITNESS,
}


class WorkoutType(str, Enum):
    RUNNING = "RUNNING"
    STRENGTH = "STRENGTH"
    CORE = "CORE"


class Intensity(str, Enum):
    RECOVERY = "RECOVERY"
    EASY = "EASY"
    MODERATE = "MODERATE"
    THRESHOLD = "THRESHOLD"
    INTERVAL = "INTERVAL"
    MAX = "MAX"


class SegmentType(str, Enum):
    WARMUP = "warmup"
    WORK = "work"
    REST = "rest"
    COOLDOWN = "cooldown"


# (base, build, peak, taper) share of total weeks
PHASE_RATIOS: Dict[Methodology, Tuple[float, float, float, float]] = {
    Methodology.POLARIZED: (0.40, 0.35, 0.15, 0.10),
    Methodology.NORWEGIAN_SINGLE: (0.30, 0.45, 0.15, 0.10),
    Methodology.NORWEGIAN_DOUBLES: (0.35, 0.40, 0.15, 0.10),
    Methodology.CANOVA: (0.25, 0.27, 0.40, 0.08),
    Methodology.PYRAMIDAL: (0.45, 0.30, 0.15, 0.10),
}

# Goal distance in km
GOAL_DISTANCE_KM = {
    RaceGoal.FIVE_K: 5.0,
    RaceGoal.TEN_K: 10.0,
    RaceGoal.HALF_MARATHON: 21.0975,
    RaceGoal.MARATHON: 42.195,
}

# Goal race pace -> marathon-equivalent pace
MARATHON_EQUIVALENT_FACTORS = {
    RaceGoal.FIVE_K: 0.89,
    RaceGoal.TEN_K: 0.926,
    RaceGoal.HALF_MARATHON: 0.97,
    RaceGoal.MARATHON: 1.0,
}

# Heuristic tier: marathon pace (km/h) by experience
HEURISTIC_MARATHON_KMH = {
    ExperienceLevel.BEGINNER: 9.0,
    ExperienceLevel.INTERMEDIATE: 11.0,
    ExperienceLevel.ADVANCED: 13.0,
    ExperienceLevel.ELITE: 15.0,
}
HEURISTIC_FALLBACK_KMH = 10.0

# Lab tier: effective VDOT = lab VO2max * efficiency
LAB_EFFICIENCY_FACTORS = {
    ExperienceLevel.ELITE: 1.00,
    ExperienceLevel.ADVANCED: 0.97,
    ExperienceLevel.INTERMEDIATE: 0.96,
    ExperienceLevel.BEGINNER: 0.95,
}

# Canova: marathon pace as a fraction of LT2
CANOVA_COMPRESSION_FACTORS = {
    ExperienceLevel.ELITE: 0.96,
    ExperienceLevel.ADVANCED: 0.88,
    ExperienceLevel.INTERMEDIATE: 0.85,
    ExperienceLevel.BEGINNER: 0.78,
}

# Daniels ratio of threshold to marathon speed (88% / 84% VDOT)
THRESHOLD_TO_MARATHON_RATIO = 1.048

DAY_NAMES = {
    1: "Monday",
    2: "Tuesday",
    3: "Wednesday",
    4: "Thursday",
    5: "Friday",
    6: "Saturday",
    7: "Sunday",
}

DAYS_PER_WEEK = 7
