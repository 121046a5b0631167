"""
Critical Power (CP) Model Calculations

The Critical Power model marks the boundary between sustainable (heavy) and
unsustainable (severe) exercise. Two parameters:

- CP: the highest power sustainable in a quasi-steady state (tens of minutes)
- W' (W-prime): the finite work capacity above CP, in joules

Supported methods:
1. 3-minute all-out test: single maximal effort, CP = end power
2. Multi-trial method: 2-4 time trials, linear regression of work on time

Hard failures (too few samples/trials, non-positive duration) raise
EngineError subclasses. Implausible results are returned with warnings.

Reference: Monod & Scherrer (1965), Vanhatalo et al. (2007), Skiba et al. (2012)

Usage:
    result = calculate_3min_all_out(samples)
    result = calculate_multi_trial_cp([CPTrial(180, 420), CPTrial(720, 330)])
    balance = calculate_w_prime_balance(ride, result.critical_power, result.w_prime)
"""
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
import logging
import math
import statistics

from core.config import settings
from core.exceptions import InsufficientDataError, InvalidInputError
from services.physiology_types import (
    AthleteLevel,
    ConfidenceLevel,
    ErgometerType,
    ModelFitQuality,
)

logger = logging.getLogger(__name__)


# Typical W' (kJ) by ergometer and athlete level
TYPICAL_W_PRIME_VALUES: Dict[ErgometerType, Dict[AthleteLevel, Tuple[float, float]]] = {
    ErgometerType.CYCLING: {
        AthleteLevel.RECREATIONAL: (12, 18),
        AthleteLevel.TRAINED: (15, 25),
        AthleteLevel.ELITE: (20, 35),
    },
    ErgometerType.ROWING: {
        AthleteLevel.RECREATIONAL: (15, 25),
        AthleteLevel.TRAINED: (20, 35),
        AthleteLevel.ELITE: (30, 45),
    },
    ErgometerType.SKIERG: {
        AthleteLevel.RECREATIONAL: (12, 20),
        AthleteLevel.TRAINED: (18, 30),
        AthleteLevel.ELITE: (25, 40),
    },
    ErgometerType.AIR_BIKE: {
        AthleteLevel.RECREATIONAL: (18, 28),
        AthleteLevel.TRAINED: (25, 40),
        AthleteLevel.ELITE: (35, 55),
    },
}


@dataclass(frozen=True)
class CPTrial:
    """One maximal time trial."""
    duration_s: float
    avg_power: float


@dataclass
class CPModelResult:
    """CP / W' estimate with quality assessment."""
    critical_power: int
    w_prime: int              # joules
    w_prime_kj: float
    confidence: ConfidenceLevel
    model_fit: ModelFitQuality
    r_squared: Optional[float] = None
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "critical_power": self.critical_power,
            "w_prime": self.w_prime,
            "w_prime_kj": self.w_prime_kj,
            "confidence": self.confidence.value,
            "model_fit": self.model_fit.value,
            "r_squared": self.r_squared,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class WPrimeValidation:
    valid: bool
    warning: Optional[str] = None


# ---------------------------------------------------------------------------
# 3-minute all-out test
# ---------------------------------------------------------------------------


def calculate_3min_all_out(power_samples: Sequence[float]) -> CPModelResult:
    """
    Calculate CP and W' from a 3-minute all-out test.

    CP is the mean power of the final 30 seconds; W' is the total work minus
    CP x duration. Samples are 1-second power readings.

    Raises:
        InsufficientDataError: fewer than CP_3MIN_MIN_SAMPLES samples
    """
    warnings: List[str] = []
    recommendations: List[str] = []

    n = len(power_samples)
    if n < settings.CP_3MIN_MIN_SAMPLES:
        raise InsufficientDataError(
            f"Insufficient data: need at least {settings.CP_3MIN_MIN_SAMPLES} samples, got {n}",
            required=settings.CP_3MIN_MIN_SAMPLES,
            received=n,
        )

    if n < settings.CP_3MIN_NOMINAL_SAMPLES:
        warnings.append(f"Test duration was {n}s instead of {settings.CP_3MIN_NOMINAL_SAMPLES}s")

    valid = [p for p in power_samples if 0 <= p < settings.CP_3MIN_MAX_VALID_POWER]
    if len(valid) < n * settings.CP_3MIN_MIN_VALID_FRACTION:
        warnings.append("More than 10% of power samples were invalid")
    if len(valid) < settings.CP_3MIN_FINAL_WINDOW_S * 2:
        raise InsufficientDataError(
            f"Too few valid power samples ({len(valid)}) to evaluate the test",
            required=settings.CP_3MIN_FINAL_WINDOW_S * 2,
            received=len(valid),
        )

    window = settings.CP_3MIN_FINAL_WINDOW_S
    critical_power = statistics.fmean(valid[-window:])

    total_work = sum(valid)
    w_prime = total_work - critical_power * len(valid)
    if w_prime < 0:
        warnings.append("Negative W' detected - test may have been paced incorrectly")

    w_prime_kj = w_prime / 1000
    confidence, model_fit = _assess_3min_quality(valid, critical_power, w_prime)

    if w_prime_kj < 10:
        recommendations.append("Low W' may indicate test was paced. Ensure athlete goes all-out from start.")
    if w_prime_kj > 50:
        recommendations.append("Very high W' - verify athlete is well-rested and motivated.")

    last_60 = valid[-2 * window:]
    early_end = statistics.fmean(last_60[:window])
    late_end = statistics.fmean(last_60[window:])
    drift = abs(early_end - late_end) / early_end * 100 if early_end > 0 else 0.0
    if drift > settings.CP_3MIN_END_DRIFT_PCT:
        warnings.append(
            f"End power not stable ({drift:.1f}% drift in final 60s). CP may be overestimated."
        )

    recommendations.append(f"CP: {round(critical_power)}W represents your sustainable threshold power.")
    recommendations.append(f"W': {w_prime_kj:.1f}kJ is your anaerobic \"battery\" for efforts above CP.")

    return CPModelResult(
        critical_power=round(critical_power),
        w_prime=round(w_prime),
        w_prime_kj=round(w_prime_kj, 1),
        confidence=confidence,
        model_fit=model_fit,
        warnings=warnings,
        recommendations=recommendations,
    )


def _assess_3min_quality(
    samples: List[float],
    cp: float,
    w_prime: float,
) -> Tuple[ConfidenceLevel, ModelFitQuality]:
    """Score the power profile of an all-out test (0-100)."""
    score = 100

    first_30 = statistics.fmean(samples[:30])
    mid_30 = statistics.fmean(samples[75:105]) if len(samples) >= 105 else statistics.fmean(samples[75:])
    last_30 = statistics.fmean(samples[-30:])

    # Power should fall first > mid > last
    if first_30 <= mid_30:
        score -= settings.CP_3MIN_PENALTY_NO_START_SURGE
    if mid_30 <= last_30 * 1.05:
        score -= settings.CP_3MIN_PENALTY_FLAT_MIDDLE

    peak_index = samples.index(max(samples))
    if peak_index > settings.CP_3MIN_LATE_PEAK_S:
        score -= settings.CP_3MIN_PENALTY_LATE_PEAK

    w_prime_kj = w_prime / 1000
    if w_prime_kj < settings.CP_3MIN_W_PRIME_MIN_KJ or w_prime_kj > settings.CP_3MIN_W_PRIME_MAX_KJ:
        score -= settings.CP_3MIN_PENALTY_W_PRIME_RANGE

    decay_pct = (first_30 - last_30) / first_30 * 100 if first_30 > 0 else 0.0
    if decay_pct < settings.CP_3MIN_MIN_DECAY_PCT:
        score -= settings.CP_3MIN_PENALTY_LOW_DECAY

    if score >= settings.CP_3MIN_SCORE_VERY_HIGH:
        return ConfidenceLevel.VERY_HIGH, ModelFitQuality.EXCELLENT
    elif score >= settings.CP_3MIN_SCORE_HIGH:
        return ConfidenceLevel.HIGH, ModelFitQuality.GOOD
    elif score >= settings.CP_3MIN_SCORE_MEDIUM:
        return ConfidenceLevel.MEDIUM, ModelFitQuality.FAIR
    else:
        return ConfidenceLevel.LOW, ModelFitQuality.POOR


# ---------------------------------------------------------------------------
# Multi-trial model
# ---------------------------------------------------------------------------


def calculate_multi_trial_cp(trials: Sequence[CPTrial]) -> CPModelResult:
    """
    Calculate CP and W' from several maximal time trials.

    Linear model: Work = CP x Time + W'. Slope is CP, intercept is W'.

    Raises:
        InsufficientDataError: fewer than CP_TRIAL_MIN_COUNT trials
        InvalidInputError: a trial with non-positive duration or power
    """
    warnings: List[str] = []
    recommendations: List[str] = []

    if len(trials) < settings.CP_TRIAL_MIN_COUNT:
        raise InsufficientDataError(
            f"Need at least {settings.CP_TRIAL_MIN_COUNT} trials, got {len(trials)}",
            required=settings.CP_TRIAL_MIN_COUNT,
            received=len(trials),
        )
    for trial in trials:
        if trial.duration_s <= 0 or trial.avg_power <= 0:
            raise InvalidInputError("Trial duration and power must be positive", field="trial")

    if len(trials) < settings.CP_TRIAL_RECOMMENDED_COUNT:
        warnings.append(
            f"Only {len(trials)} trials provided. "
            f"{settings.CP_TRIAL_RECOMMENDED_COUNT}+ recommended for accuracy."
        )

    ordered = sorted(trials, key=lambda t: t.duration_s)
    times = [t.duration_s for t in ordered]
    work = [t.duration_s * t.avg_power for t in ordered]

    if len(set(times)) < 2:
        raise InvalidInputError("Trials must span at least two different durations", field="trial")

    duration_ratio = times[-1] / times[0]
    if duration_ratio < settings.CP_TRIAL_MIN_DURATION_RATIO:
        warnings.append(
            f"Duration spread ({duration_ratio:.1f}:1) is narrow. Consider adding a longer trial."
        )

    slope, intercept, r2 = linear_regression(times, work)
    critical_power = slope
    w_prime = intercept

    if critical_power < settings.CP_PLAUSIBLE_MIN_W or critical_power > settings.CP_PLAUSIBLE_MAX_W:
        warnings.append(f"Unusual CP value ({round(critical_power)}W). Verify trial data.")
    if w_prime < 0:
        warnings.append("Negative W' indicates model fit issues. Check trial data for errors.")

    w_prime_kj = w_prime / 1000
    confidence, model_fit = _assess_multi_trial_quality(r2, duration_ratio, len(trials))

    if r2 < settings.CP_R2_GOOD:
        recommendations.append("Consider adding another trial to improve model fit.")
    if len(trials) >= settings.CP_TRIAL_RECOMMENDED_COUNT and r2 >= settings.CP_R2_EXCELLENT:
        recommendations.append("Excellent model fit. Results are highly reliable.")

    for i, (t, w) in enumerate(zip(times, work)):
        predicted = critical_power * t + w_prime
        residual_pct = abs((w - predicted) / w) * 100
        if residual_pct > settings.CP_TRIAL_RESIDUAL_PCT:
            warnings.append(f"Trial {i + 1} ({round(t)}s) deviates {residual_pct:.1f}% from model.")

    recommendations.append(f"CP: {round(critical_power)}W (sustainable threshold)")
    recommendations.append(f"W': {w_prime_kj:.1f}kJ (anaerobic capacity)")
    recommendations.append(f"Model R²: {r2 * 100:.1f}%")

    return CPModelResult(
        critical_power=round(critical_power),
        w_prime=round(w_prime),
        w_prime_kj=round(w_prime_kj, 1),
        confidence=confidence,
        model_fit=model_fit,
        r_squared=r2,
        warnings=warnings,
        recommendations=recommendations,
    )


def _assess_multi_trial_quality(
    r2: float,
    duration_ratio: float,
    trial_count: int,
) -> Tuple[ConfidenceLevel, ModelFitQuality]:
    if r2 >= settings.CP_R2_EXCELLENT:
        model_fit = ModelFitQuality.EXCELLENT
    elif r2 >= settings.CP_R2_GOOD:
        model_fit = ModelFitQuality.GOOD
    elif r2 >= settings.CP_R2_FAIR:
        model_fit = ModelFitQuality.FAIR
    else:
        model_fit = ModelFitQuality.POOR

    score = r2 * 100
    if trial_count >= settings.CP_TRIAL_OPTIMAL_COUNT:
        score += 5
    if trial_count >= settings.CP_TRIAL_RECOMMENDED_COUNT:
        score += 3
    if duration_ratio >= 3:
        score += 3
    if duration_ratio >= 4:
        score += 2

    if score >= settings.CP_CONFIDENCE_VERY_HIGH:
        confidence = ConfidenceLevel.VERY_HIGH
    elif score >= settings.CP_CONFIDENCE_HIGH:
        confidence = ConfidenceLevel.HIGH
    elif score >= settings.CP_CONFIDENCE_MEDIUM:
        confidence = ConfidenceLevel.MEDIUM
    else:
        confidence = ConfidenceLevel.LOW

    return confidence, model_fit


def linear_regression(x: Sequence[float], y: Sequence[float]) -> Tuple[float, float, float]:
    """Ordinary least squares. Returns (slope, intercept, r_squared)."""
    n = len(x)
    mean_x = statistics.fmean(x)
    mean_y = statistics.fmean(y)

    sxx = sum((xi - mean_x) ** 2 for xi in x)
    sxy = sum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y))
    if n < 2 or sxx == 0:
        raise InvalidInputError("Regression needs at least two distinct x values", field="x")

    slope = sxy / sxx
    intercept = mean_y - slope * mean_x

    ss_total = sum((yi - mean_y) ** 2 for yi in y)
    ss_residual = sum((yi - (slope * xi + intercept)) ** 2 for xi, yi in zip(x, y))
    r2 = 1 - ss_residual / ss_total if ss_total > 0 else 1.0

    return slope, intercept, r2


# ---------------------------------------------------------------------------
# W' balance and derived predictions
# ---------------------------------------------------------------------------


def calculate_w_prime_balance(
    power_samples: Sequence[float],
    cp: float,
    w_prime: float,
    tau: Optional[float] = None,
) -> List[int]:
    """
    Second-by-second W' balance.

    Above CP the balance drops by the power surplus; at or below CP it
    recovers toward full W' with time constant tau. Clamped to [0, W'].
    """
    tau = tau if tau is not None else settings.W_PRIME_TAU_S
    if tau <= 0:
        raise InvalidInputError("Recovery time constant must be positive", field="tau")

    recovery_rate = 1 - math.exp(-1 / tau)
    balance = w_prime
    history: List[int] = []

    for power in power_samples:
        if power > cp:
            balance -= power - cp
        else:
            balance += (w_prime - balance) * recovery_rate

        balance = max(0.0, min(w_prime, balance))
        history.append(round(balance))

    return history


def estimate_time_to_exhaustion(power: float, cp: float, w_prime: float) -> float:
    """Seconds until W' runs out at a constant power; inf at or below CP."""
    if power <= cp:
        return math.inf
    return w_prime / (power - cp)


def estimate_power_for_duration(duration_s: float, cp: float, w_prime: float) -> float:
    """Power sustainable for exactly duration_s seconds: CP + W'/T."""
    if duration_s <= 0:
        raise InvalidInputError("Duration must be positive", field="duration")
    return cp + w_prime / duration_s


def validate_w_prime(
    w_prime_kj: float,
    ergometer: ErgometerType,
    level: AthleteLevel = AthleteLevel.TRAINED,
) -> WPrimeValidation:
    """Compare W' against typical values for the ergometer and level."""
    ranges = TYPICAL_W_PRIME_VALUES.get(ergometer, {}).get(level)
    if ranges is None:
        return WPrimeValidation(valid=True)

    low, high = ranges
    if w_prime_kj < low * settings.W_PRIME_LOW_FACTOR:
        return WPrimeValidation(
            valid=False,
            warning=(
                f"W' ({w_prime_kj:.1f}kJ) is unusually low for {level.value} "
                f"{ergometer.value.lower()}. Expected: {low}-{high}kJ"
            ),
        )
    if w_prime_kj > high * settings.W_PRIME_HIGH_FACTOR:
        return WPrimeValidation(
            valid=False,
            warning=f"W' ({w_prime_kj:.1f}kJ) is unusually high. Verify test execution.",
        )
    return WPrimeValidation(valid=True)
