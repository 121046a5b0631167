"""
4x4-minute interval test analysis.

Well-paced 4x4 min intervals average roughly 105% of CP, so CP is estimated
as a fraction of the mean interval power. The fraction moves with pacing
quality: uneven or fading efforts inflate the average, while very even
pacing suggests the athlete held back.
"""
from typing import List, Optional, Sequence
from dataclasses import dataclass, field
import logging
import statistics

from core.config import settings
from core.exceptions import InsufficientDataError, InvalidInputError
from services.physiology_types import ConfidenceLevel, ModelFitQuality

logger = logging.getLogger(__name__)

EXPECTED_INTERVALS = 4


@dataclass
class IntervalTestResult:
    avg_power: float
    estimated_cp: int
    power_variation_pct: float   # coefficient of variation
    decoupling_pct: float        # positive = power dropped first -> last
    hr_drift_pct: Optional[float]
    consistency: ModelFitQuality
    confidence: ConfidenceLevel
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


def coefficient_of_variation(values: Sequence[float]) -> float:
    mean = statistics.fmean(values)
    return statistics.pstdev(values) / mean * 100 if mean else 0.0


def assess_consistency(variation_pct: float) -> ModelFitQuality:
    if variation_pct < settings.INTERVAL_CV_EXCELLENT_PCT:
        return ModelFitQuality.EXCELLENT
    if variation_pct < settings.INTERVAL_CV_GOOD_PCT:
        return ModelFitQuality.GOOD
    if variation_pct < settings.INTERVAL_CV_FAIR_PCT:
        return ModelFitQuality.FAIR
    return ModelFitQuality.POOR


def calculate_decoupling(powers: Sequence[float]) -> float:
    """Percent drop from the first to the last interval."""
    return (powers[0] - powers[-1]) / powers[0] * 100


def analyze_4x4_interval_test(
    interval_powers: Sequence[float],
    interval_heart_rates: Optional[Sequence[float]] = None,
) -> IntervalTestResult:
    """
    Estimate CP from average power of each work interval.

    Raises:
        InsufficientDataError: fewer than two intervals
        InvalidInputError: a non-positive interval power
    """
    if len(interval_powers) < 2:
        raise InsufficientDataError(
            f"Need at least 2 intervals, got {len(interval_powers)}",
            required=2,
            received=len(interval_powers),
        )
    if any(p <= 0 for p in interval_powers):
        raise InvalidInputError("Interval power must be positive", field="interval_power")

    warnings: List[str] = []
    recommendations: List[str] = []

    if len(interval_powers) != EXPECTED_INTERVALS:
        warnings.append(
            f"Expected {EXPECTED_INTERVALS} intervals, got {len(interval_powers)}. CP estimate is less reliable."
        )

    avg_power = statistics.fmean(interval_powers)
    variation = coefficient_of_variation(interval_powers)
    consistency = assess_consistency(variation)
    decoupling = calculate_decoupling(interval_powers)

    hr_drift = None
    if interval_heart_rates and len(interval_heart_rates) >= 2 and interval_heart_rates[0] > 0:
        hr_drift = (interval_heart_rates[-1] - interval_heart_rates[0]) / interval_heart_rates[0] * 100

    factor = settings.INTERVAL_CP_FACTOR
    if consistency == ModelFitQuality.POOR or decoupling > settings.INTERVAL_DECOUPLING_HIGH_PCT:
        factor = settings.INTERVAL_CP_FACTOR_POOR_PACING
    elif consistency == ModelFitQuality.EXCELLENT and decoupling < settings.INTERVAL_DECOUPLING_LOW_PCT:
        factor = settings.INTERVAL_CP_FACTOR_EVEN_PACING

    if consistency == ModelFitQuality.EXCELLENT and decoupling < 5:
        confidence = ConfidenceLevel.HIGH
    elif consistency in (ModelFitQuality.EXCELLENT, ModelFitQuality.GOOD) and decoupling < 8:
        confidence = ConfidenceLevel.HIGH
    elif consistency == ModelFitQuality.FAIR or decoupling < 12:
        confidence = ConfidenceLevel.MEDIUM
    else:
        confidence = ConfidenceLevel.LOW

    if decoupling > 10:
        warnings.append(
            f"Power dropped {decoupling:.1f}% from first to last interval. Start more conservatively."
        )
    if interval_powers[-1] > interval_powers[0] * 1.05:
        recommendations.append("Last interval was strongest - you may be able to start harder next time.")
    if hr_drift is not None and hr_drift > 10:
        warnings.append(f"Heart rate drifted {hr_drift:.1f}% across intervals.")

    estimated_cp = round(avg_power * factor)
    recommendations.append(f"Estimated CP: {estimated_cp}W ({factor * 100:.0f}% of average interval power).")

    return IntervalTestResult(
        avg_power=round(avg_power, 1),
        estimated_cp=estimated_cp,
        power_variation_pct=round(variation, 2),
        decoupling_pct=round(decoupling, 2),
        hr_drift_pct=round(hr_drift, 2) if hr_drift is not None else None,
        consistency=consistency,
        confidence=confidence,
        warnings=warnings,
        recommendations=recommendations,
    )
