"""
Shared enums for physiological estimates.

Used by the ergometer estimators and by the training engine when it records
how much a derived pace or power can be trusted.
"""
from enum import Enum


class ConfidenceLevel(str, Enum):
    """Confidence tier attached to every estimate."""
    VERY_HIGH = "VERY_HIGH"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ModelFitQuality(str, Enum):
    """How well measured data agrees with the fitted model."""
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"


class ErgometerType(str, Enum):
    """Ergometers with published reference data."""
    CYCLING = "CYCLING"
    ROWING = "ROWING"
    SKIERG = "SKIERG"
    AIR_BIKE = "AIR_BIKE"


class AthleteLevel(str, Enum):
    """Training status used for reference-range lookups."""
    RECREATIONAL = "recreational"
    TRAINED = "trained"
    ELITE = "elite"


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class BenchmarkTier(str, Enum):
    """Performance tier, ordered lowest to highest."""
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    ELITE = "ELITE"

    @property
    def rank(self) -> int:
        return list(BenchmarkTier).index(self)
