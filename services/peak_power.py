"""
Peak Power Tests

Short maximal efforts that characterise the neuromuscular and glycolytic
end of the power curve, complementing the CP / W' model:

1. 6-second peak power: alactic peak on a bike or air bike
2. 7-stroke max power: Concept2 standing-start stroke sequence
3. 30-second sprint: Wingate-style peak, mean and fatigue index

Peak outputs can be classified against sex-specific benchmark tiers, by
absolute watts and (when body mass is known) watts per kilogram.

Reference: Bar-Or (1987) Wingate test, Concept2 PM5 max-power protocol

Usage:
    result = analyze_6s_peak_power(peak_power=1180, avg_power=1010)
    strokes = analyze_7_stroke_max_power([820, 905, 890, 870, 850, 830, 810])
    tier = classify_peak_power_tier(1180, Sex.MALE, body_mass_kg=78)
"""
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from enum import Enum
import logging
import statistics

from core.config import settings
from core.exceptions import InvalidInputError
from services.physiology_types import (
    BenchmarkTier,
    ConfidenceLevel,
    ModelFitQuality,
    Sex,
)

logger = logging.getLogger(__name__)

SEVEN_STROKE_COUNT = 7
SPRINT_DURATION_S = 30


class PowerProfile(str, Enum):
    """Where in a 7-stroke sequence the peak landed."""
    EARLY_PEAK = "EARLY_PEAK"
    MID_PEAK = "MID_PEAK"
    LATE_PEAK = "LATE_PEAK"
    FLAT = "FLAT"


class AnaerobicCapacity(str, Enum):
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    LOW = "LOW"


@dataclass(frozen=True)
class PeakPowerBenchmark:
    power_min: float
    watts_per_kg: float


# Minimum peak power for each tier
PEAK_POWER_BENCHMARKS: Dict[Sex, Dict[BenchmarkTier, PeakPowerBenchmark]] = {
    Sex.MALE: {
        BenchmarkTier.ELITE: PeakPowerBenchmark(1500, 19),
        BenchmarkTier.ADVANCED: PeakPowerBenchmark(1200, 16),
        BenchmarkTier.INTERMEDIATE: PeakPowerBenchmark(900, 12),
        BenchmarkTier.BEGINNER: PeakPowerBenchmark(600, 8),
    },
    Sex.FEMALE: {
        BenchmarkTier.ELITE: PeakPowerBenchmark(1000, 16),
        BenchmarkTier.ADVANCED: PeakPowerBenchmark(800, 13),
        BenchmarkTier.INTERMEDIATE: PeakPowerBenchmark(600, 10),
        BenchmarkTier.BEGINNER: PeakPowerBenchmark(400, 6),
    },
}

TIER_DESCRIPTIONS: Dict[BenchmarkTier, str] = {
    BenchmarkTier.ELITE: "Elite level peak power output. Comparable to professional athletes.",
    BenchmarkTier.ADVANCED: "Advanced peak power. Above average for competitive athletes.",
    BenchmarkTier.INTERMEDIATE: "Intermediate peak power. Room for improvement with power training.",
    BenchmarkTier.BEGINNER: "Developing peak power. Focus on neuromuscular training.",
}


@dataclass
class PeakPowerResult:
    """6-second peak power analysis."""
    peak_power: int
    avg_power: int
    peak_to_avg_ratio: float
    power_decay_pct: float
    quality: ModelFitQuality
    confidence: ConfidenceLevel
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "peak_power": self.peak_power,
            "avg_power": self.avg_power,
            "peak_to_avg_ratio": self.peak_to_avg_ratio,
            "power_decay_pct": self.power_decay_pct,
            "quality": self.quality.value,
            "confidence": self.confidence.value,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass
class SevenStrokeResult:
    peak_power: int
    avg_power: int
    peak_stroke: int          # 1-indexed
    power_profile: PowerProfile
    consistency_pct: float
    quality: ModelFitQuality
    confidence: ConfidenceLevel
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "peak_power": self.peak_power,
            "avg_power": self.avg_power,
            "peak_stroke": self.peak_stroke,
            "power_profile": self.power_profile.value,
            "consistency_pct": self.consistency_pct,
            "quality": self.quality.value,
            "confidence": self.confidence.value,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass
class SprintResult:
    """30-second sprint analysis."""
    peak_power: int
    avg_power: int
    min_power: int
    fatigue_index_pct: float
    fatigue_rating: ModelFitQuality
    anaerobic_capacity: AnaerobicCapacity
    total_work_kj: float
    confidence: ConfidenceLevel
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "peak_power": self.peak_power,
            "avg_power": self.avg_power,
            "min_power": self.min_power,
            "fatigue_index_pct": self.fatigue_index_pct,
            "fatigue_rating": self.fatigue_rating.value,
            "anaerobic_capacity": self.anaerobic_capacity.value,
            "total_work_kj": self.total_work_kj,
            "confidence": self.confidence.value,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class TierClassification:
    tier: BenchmarkTier
    absolute_tier: BenchmarkTier
    relative_tier: Optional[BenchmarkTier]
    watts_per_kg: Optional[float]
    description: str

    def to_dict(self) -> Dict:
        return {
            "tier": self.tier.value,
            "absolute_tier": self.absolute_tier.value,
            "relative_tier": self.relative_tier.value if self.relative_tier else None,
            "watts_per_kg": self.watts_per_kg,
            "description": self.description,
        }


def _grade(score: int) -> Tuple[ModelFitQuality, ConfidenceLevel]:
    if score >= settings.PEAK_POWER_SCORE_VERY_HIGH:
        return ModelFitQuality.EXCELLENT, ConfidenceLevel.VERY_HIGH
    if score >= settings.PEAK_POWER_SCORE_HIGH:
        return ModelFitQuality.GOOD, ConfidenceLevel.HIGH
    if score >= settings.PEAK_POWER_SCORE_MEDIUM:
        return ModelFitQuality.FAIR, ConfidenceLevel.MEDIUM
    return ModelFitQuality.POOR, ConfidenceLevel.LOW


# ---------------------------------------------------------------------------
# 6-second peak power
# ---------------------------------------------------------------------------


def analyze_6s_peak_power(
    peak_power: float,
    avg_power: float,
    duration_s: float = 6,
    power_samples: Optional[Sequence[float]] = None,
) -> PeakPowerResult:
    """
    Analyze a 6-second all-out effort.

    Power decay uses the samples when at least six are given (first three
    against the rest), otherwise the peak-to-average ratio.

    Raises:
        InvalidInputError: non-positive peak or average power
    """
    if peak_power <= 0 or avg_power <= 0:
        raise InvalidInputError("Peak and average power must be positive", field="power")

    warnings: List[str] = []
    recommendations: List[str] = []
    samples = list(power_samples or [])

    if duration_s != settings.PEAK_POWER_TEST_DURATION_S:
        warnings.append(f"Test duration was {duration_s:g}s instead of {settings.PEAK_POWER_TEST_DURATION_S}s")
    if peak_power < settings.ERGOMETER_MIN_POWER_W:
        warnings.append(f"Peak power ({peak_power:.0f}W) is unusually low")
    elif peak_power > settings.ERGOMETER_MAX_POWER_W:
        warnings.append(f"Peak power ({peak_power:.0f}W) is unusually high - verify data")

    ratio = peak_power / avg_power
    if len(samples) >= 6:
        opening = statistics.mean(samples[:3])
        closing = statistics.mean(samples[3:])
        decay = (opening - closing) / opening * 100 if opening > 0 else 0.0
    else:
        decay = (ratio - 1) * 100

    score = 100
    if ratio < settings.PEAK_POWER_RATIO_MIN or ratio > settings.PEAK_POWER_RATIO_MAX:
        score -= 15
    if decay > settings.PEAK_POWER_DECAY_HIGH_PCT:
        score -= 20
    elif decay < settings.PEAK_POWER_DECAY_LOW_PCT:
        # suspiciously flat, probably not all-out
        score -= 10
    if len(samples) >= 6:
        if samples.index(max(samples)) > 3:
            score -= 15
        if not samples[0] > samples[5] * 0.85:
            score -= 10
    quality, confidence = _grade(score)

    if ratio > 1.3:
        recommendations.append(
            "Large peak-to-average ratio. Power maintenance could be improved with sprint training."
        )
    elif ratio < 1.1:
        recommendations.append(
            "Excellent power maintenance. Consider higher gear/resistance to challenge peak output."
        )
    if decay > 20:
        recommendations.append(
            "Significant power decay detected. Focus on alactic power training (short sprints, full recovery)."
        )
    recommendations.extend([
        f"Peak Power: {round(peak_power)}W",
        f"Average Power: {round(avg_power)}W",
        f"Power Decay: {decay:.1f}%",
    ])

    return PeakPowerResult(
        peak_power=round(peak_power),
        avg_power=round(avg_power),
        peak_to_avg_ratio=round(ratio, 2),
        power_decay_pct=round(decay, 1),
        quality=quality,
        confidence=confidence,
        warnings=warnings,
        recommendations=recommendations,
    )


# ---------------------------------------------------------------------------
# 7-stroke max power (Concept2)
# ---------------------------------------------------------------------------


def power_profile(powers: Sequence[float]) -> PowerProfile:
    peak_index = list(powers).index(max(powers))
    if min(powers) > 0 and max(powers) / min(powers) < 1.1:
        return PowerProfile.FLAT
    if peak_index <= 2:
        return PowerProfile.EARLY_PEAK
    if peak_index <= 4:
        return PowerProfile.MID_PEAK
    return PowerProfile.LATE_PEAK


def analyze_7_stroke_max_power(stroke_powers: Sequence[float]) -> SevenStrokeResult:
    """
    Analyze a 7-stroke standing-start max power test.

    Raises:
        InvalidInputError: not exactly seven strokes, or non-positive mean power
    """
    powers = list(stroke_powers)
    if len(powers) != SEVEN_STROKE_COUNT:
        raise InvalidInputError(
            f"Expected {SEVEN_STROKE_COUNT} strokes, got {len(powers)}", field="strokes"
        )
    avg_power = statistics.mean(powers)
    if avg_power <= 0:
        raise InvalidInputError("Stroke power must be positive", field="strokes")

    peak_power = max(powers)
    peak_index = powers.index(peak_power)
    peak_stroke = peak_index + 1
    profile = power_profile(powers)
    consistency = 100 - statistics.pstdev(powers) / avg_power * 100

    score = 100
    # one build-up stroke allowed
    if peak_stroke < 2 or peak_stroke > 4:
        score -= 15
    if profile == PowerProfile.LATE_PEAK:
        score -= 20
    elif profile == PowerProfile.FLAT:
        score -= 10
    after_peak = powers[peak_index:]
    if not all(cur <= prev * 1.05 for prev, cur in zip(after_peak, after_peak[1:])):
        score -= 10
    quality, confidence = _grade(score)

    warnings: List[str] = []
    recommendations: List[str] = []
    if peak_stroke > 5:
        warnings.append("Peak power occurred late (stroke 6-7). Ensure maximal effort from first stroke.")
    if profile == PowerProfile.LATE_PEAK:
        warnings.append("Power increased throughout test. May indicate poor starting technique or pacing.")
    if profile == PowerProfile.EARLY_PEAK and peak_stroke <= 3:
        recommendations.append("Ideal power profile. Peak achieved early with controlled decay.")
    if consistency < 80:
        recommendations.append("Inconsistent stroke power. Focus on technique consistency.")
    recommendations.extend([
        f"Peak Power: {round(peak_power)}W (stroke {peak_stroke})",
        f"Average Power: {round(avg_power)}W",
        f"Consistency: {consistency:.1f}%",
    ])

    return SevenStrokeResult(
        peak_power=round(peak_power),
        avg_power=round(avg_power),
        peak_stroke=peak_stroke,
        power_profile=profile,
        consistency_pct=round(consistency, 1),
        quality=quality,
        confidence=confidence,
        warnings=warnings,
        recommendations=recommendations,
    )


# ---------------------------------------------------------------------------
# 30-second sprint
# ---------------------------------------------------------------------------


def analyze_30s_sprint(
    peak_power: float,
    avg_power: float,
    power_samples: Optional[Sequence[float]] = None,
    min_power: Optional[float] = None,
) -> SprintResult:
    """
    Analyze a 30-second Wingate-style sprint.

    Minimum power is taken as given, else the mean of the last five
    samples, else estimated from average power (with a warning).

    Raises:
        InvalidInputError: non-positive peak or average power
    """
    if peak_power <= 0 or avg_power <= 0:
        raise InvalidInputError("Peak and average power must be positive", field="power")

    warnings: List[str] = []
    recommendations: List[str] = []
    samples = list(power_samples or [])
    measured = min_power is not None or len(samples) >= settings.SPRINT_MIN_SAMPLES

    if min_power is None:
        if len(samples) >= settings.SPRINT_MIN_SAMPLES:
            min_power = statistics.mean(samples[-5:])
        else:
            min_power = avg_power * settings.SPRINT_MIN_POWER_FRACTION
            warnings.append("Minimum power estimated - actual value may differ")

    fatigue_index = (peak_power - min_power) / peak_power * 100
    if fatigue_index < settings.SPRINT_FATIGUE_EXCELLENT_PCT:
        rating = ModelFitQuality.EXCELLENT
    elif fatigue_index < settings.SPRINT_FATIGUE_GOOD_PCT:
        rating = ModelFitQuality.GOOD
    elif fatigue_index < settings.SPRINT_FATIGUE_FAIR_PCT:
        rating = ModelFitQuality.FAIR
    else:
        rating = ModelFitQuality.POOR

    # absolute watts; body mass not considered
    if avg_power > settings.SPRINT_CAPACITY_HIGH_W:
        capacity = AnaerobicCapacity.HIGH
    elif avg_power > settings.SPRINT_CAPACITY_MODERATE_W:
        capacity = AnaerobicCapacity.MODERATE
    else:
        capacity = AnaerobicCapacity.LOW

    total_work = avg_power * SPRINT_DURATION_S

    if fatigue_index > 50:
        recommendations.append(
            "High fatigue index. Consider glycolytic capacity training (30-60s intervals)."
        )
    if fatigue_index < 30:
        recommendations.append(
            "Excellent fatigue resistance. May benefit from higher-intensity power training."
        )
    if peak_power / avg_power > 1.5:
        recommendations.append(
            "Large peak-to-average gap. Good power but rapid fatigue - train lactate tolerance."
        )
    recommendations.extend([
        f"Peak Power: {round(peak_power)}W",
        f"Average Power: {round(avg_power)}W",
        f"Minimum Power: {round(min_power)}W",
        f"Fatigue Index: {fatigue_index:.1f}%",
        f"Total Work: {total_work / 1000:.1f}kJ",
    ])

    return SprintResult(
        peak_power=round(peak_power),
        avg_power=round(avg_power),
        min_power=round(min_power),
        fatigue_index_pct=round(fatigue_index, 1),
        fatigue_rating=rating,
        anaerobic_capacity=capacity,
        total_work_kj=round(total_work / 1000, 1),
        confidence=ConfidenceLevel.HIGH if measured else ConfidenceLevel.MEDIUM,
        warnings=warnings,
        recommendations=recommendations,
    )


# ---------------------------------------------------------------------------
# Relative power and benchmark tiers
# ---------------------------------------------------------------------------


def calculate_relative_power(power: float, body_mass_kg: float) -> float:
    """Watts per kilogram, 2 dp."""
    if body_mass_kg <= 0:
        raise InvalidInputError("Body mass must be positive", field="body_mass_kg")
    return round(power / body_mass_kg, 2)


def _tier_for(value: float, benchmarks: Dict[BenchmarkTier, PeakPowerBenchmark], attr: str) -> BenchmarkTier:
    for tier in (BenchmarkTier.ELITE, BenchmarkTier.ADVANCED, BenchmarkTier.INTERMEDIATE):
        if value >= getattr(benchmarks[tier], attr):
            return tier
    return BenchmarkTier.BEGINNER


def classify_peak_power_tier(
    peak_power: float,
    sex: Sex,
    body_mass_kg: Optional[float] = None,
) -> TierClassification:
    """
    Benchmark tier for a peak power.

    With body mass the higher of the absolute and relative tiers wins, so
    a heavy athlete with big absolute watts is not marked down.
    """
    benchmarks = PEAK_POWER_BENCHMARKS[Sex(sex)]
    absolute = _tier_for(peak_power, benchmarks, "power_min")

    relative = None
    wpk = None
    if body_mass_kg is not None:
        wpk = calculate_relative_power(peak_power, body_mass_kg)
        relative = _tier_for(wpk, benchmarks, "watts_per_kg")

    tier = absolute
    if relative is not None and relative.rank > absolute.rank:
        tier = relative

    logger.debug("Peak power %.0fW (%s) classified %s", peak_power, sex, tier.value)
    return TierClassification(
        tier=tier,
        absolute_tier=absolute,
        relative_tier=relative,
        watts_per_kg=wpk,
        description=TIER_DESCRIPTIONS[tier],
    )
