"""
Ergometer Race Pacing

Builds 500m split targets for a race distance from the athlete's CP model,
shaping power to an even, negative or positive split and simulating W'
balance along the way.

Reference: Skiba et al. (2012) W'bal model, Vanhatalo et al. (2011)

Usage:
    plan = generate_race_pacing(cp=280, w_prime=18000, distance_m=2000)
    for split in plan.splits:
        print(split.split_number, format_split(split.target_pace))
    pick = recommend_strategy(cp=280, distance_m=2000, level=BenchmarkTier.ADVANCED)
"""
from typing import Callable, Dict, List, Optional, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import math

from core.exceptions import InvalidInputError
from services.concept2 import SPLIT_DISTANCE_M, pace_to_watts, watts_to_pace
from services.critical_power import calculate_w_prime_balance
from services.ergometer_zones import zone_for_percent
from services.physiology_types import BenchmarkTier

logger = logging.getLogger(__name__)

# Fraction of W' a well-judged race spends by the finish line
TARGET_W_PRIME_USAGE = 0.90

# Estimated race length bands for strategy recommendation
SHORT_RACE_S = 240
MIDDLE_RACE_S = 600


class PacingStrategy(str, Enum):
    EVEN = "EVEN"
    NEGATIVE = "NEGATIVE"
    POSITIVE = "POSITIVE"


def _even(split: int, total: int, base: float, cp: float) -> float:
    return base


def _negative(split: int, total: int, base: float, cp: float) -> float:
    # 95% -> 110% of base over the race
    return max(cp * 0.9, base * (0.95 + split / total * 0.15))


def _positive(split: int, total: int, base: float, cp: float) -> float:
    # 110% -> 95% of base over the race
    return max(cp * 0.85, base * (1.10 - split / total * 0.15))


POWER_PROFILES: Dict[PacingStrategy, Callable[[int, int, float, float], float]] = {
    PacingStrategy.EVEN: _even,
    PacingStrategy.NEGATIVE: _negative,
    PacingStrategy.POSITIVE: _positive,
}


@dataclass(frozen=True)
class SplitTarget:
    split_number: int
    distance_m: float           # cumulative
    target_power: int
    target_pace: float          # seconds / 500m
    split_time: float
    cumulative_time: float
    zone: int
    w_prime_remaining_pct: int


@dataclass
class RacePacingPlan:
    strategy: PacingStrategy
    splits: List[SplitTarget]
    predicted_time: float
    avg_power: int
    min_w_prime_pct: int
    finish_w_prime_pct: int
    warnings: List[str] = field(default_factory=list)


def optimal_race_power(cp: float, w_prime: float, distance_m: float) -> float:
    """Bisect for the constant power that spends ~90% of W' over the distance."""
    target_usage = w_prime * TARGET_W_PRIME_USAGE
    low, high = cp, cp * 1.5
    mid = cp * 1.05

    for _ in range(30):
        mid = (low + high) / 2
        duration = distance_m / SPLIT_DISTANCE_M * watts_to_pace(mid).value
        used = (mid - cp) * duration
        if used < target_usage:
            low = mid
        else:
            high = mid
        if abs(used - target_usage) < 50:
            break

    return mid


def generate_race_pacing(
    cp: float,
    w_prime: float,
    distance_m: float,
    strategy: PacingStrategy = PacingStrategy.EVEN,
    goal_time_s: Optional[float] = None,
) -> RacePacingPlan:
    """
    Split-by-split power and pace targets for an ergometer race.

    Raises:
        InvalidInputError: non-positive CP, distance or goal time, negative W'
    """
    if cp <= 0:
        raise InvalidInputError("Critical power must be positive", field="cp")
    if distance_m <= 0:
        raise InvalidInputError("Distance must be positive", field="distance")
    if w_prime < 0:
        raise InvalidInputError("W' cannot be negative", field="w_prime")

    warnings: List[str] = []

    if goal_time_s is not None:
        if goal_time_s <= 0:
            raise InvalidInputError("Goal time must be positive", field="goal_time")
        required_pace = goal_time_s / (distance_m / SPLIT_DISTANCE_M)
        base_power = pace_to_watts(required_pace).value
        if (base_power - cp) * goal_time_s > w_prime * 0.95:
            warnings.append("Goal time needs more than 95% of W' - consider a slower target")
    else:
        base_power = optimal_race_power(cp, w_prime, distance_m)

    profile = POWER_PROFILES[strategy]
    total_splits = math.ceil(distance_m / SPLIT_DISTANCE_M)
    last_split = distance_m - (total_splits - 1) * SPLIT_DISTANCE_M

    splits: List[SplitTarget] = []
    per_second_power: List[float] = []
    split_end_index: List[int] = []
    elapsed = 0.0

    for i in range(total_splits):
        split_distance = last_split if i == total_splits - 1 else SPLIT_DISTANCE_M
        power = profile(i + 1, total_splits, base_power, cp)
        pace = watts_to_pace(power).value
        split_time = split_distance / SPLIT_DISTANCE_M * pace
        elapsed += split_time

        per_second_power.extend([power] * max(1, round(split_time)))
        split_end_index.append(len(per_second_power) - 1)

        splits.append(SplitTarget(
            split_number=i + 1,
            distance_m=min((i + 1) * SPLIT_DISTANCE_M, distance_m),
            target_power=round(power),
            target_pace=round(pace, 1),
            split_time=round(split_time, 1),
            cumulative_time=round(elapsed, 1),
            zone=zone_for_percent(power / cp * 100),
            w_prime_remaining_pct=100,
        ))

    balance = calculate_w_prime_balance(per_second_power, cp, w_prime)
    remaining = [
        round(balance[idx] / w_prime * 100) if w_prime > 0 else 0
        for idx in split_end_index
    ]
    splits = [replace(s, w_prime_remaining_pct=pct) for s, pct in zip(splits, remaining)]

    min_remaining = min(remaining)
    if min_remaining < 5:
        warnings.append("W' is almost fully depleted - expect a sharp fade")
    if min_remaining < 20 and strategy == PacingStrategy.POSITIVE:
        warnings.append("Positive split with low W' reserve - consider even pacing instead")

    avg_power = sum(per_second_power) / len(per_second_power)
    logger.debug(
        "Race pacing %s over %.0fm: %.1fs at avg %.0fW",
        strategy.value, distance_m, elapsed, avg_power,
    )

    return RacePacingPlan(
        strategy=strategy,
        splits=splits,
        predicted_time=round(elapsed, 1),
        avg_power=round(avg_power),
        min_w_prime_pct=min_remaining,
        finish_w_prime_pct=remaining[-1],
        warnings=warnings,
    )


def compare_strategies(
    cp: float,
    w_prime: float,
    distance_m: float,
    strategies: Sequence[PacingStrategy] = tuple(PacingStrategy),
    goal_time_s: Optional[float] = None,
) -> Dict[PacingStrategy, RacePacingPlan]:
    """Pacing plan for each strategy over the same race, keyed by strategy."""
    return {
        strategy: generate_race_pacing(cp, w_prime, distance_m, strategy, goal_time_s)
        for strategy in strategies
    }


@dataclass(frozen=True)
class StrategyRecommendation:
    strategy: PacingStrategy
    rationale: str
    estimated_duration_s: float


def recommend_strategy(
    cp: float,
    distance_m: float,
    level: BenchmarkTier = BenchmarkTier.INTERMEDIATE,
) -> StrategyRecommendation:
    """
    Pick a pacing strategy from race length and athlete experience.

    Race length is estimated at 105% of CP. Sprints suit a fast start for
    experienced athletes, middle distances a negative split for all but
    beginners, and anything longer a negative split.
    """
    if cp <= 0:
        raise InvalidInputError("Critical power must be positive", field="cp")
    if distance_m <= 0:
        raise InvalidInputError("Distance must be positive", field="distance")

    duration = distance_m / SPLIT_DISTANCE_M * watts_to_pace(cp * 1.05).value

    if duration < SHORT_RACE_S:
        if level in (BenchmarkTier.ELITE, BenchmarkTier.ADVANCED):
            strategy = PacingStrategy.POSITIVE
            rationale = "Short race: experienced athletes can use a fast start"
        else:
            strategy = PacingStrategy.EVEN
            rationale = "Short race: even pacing is safest without race experience"
    elif duration < MIDDLE_RACE_S:
        if level == BenchmarkTier.BEGINNER:
            strategy = PacingStrategy.EVEN
            rationale = "Middle-distance race: even pacing while learning race pace"
        else:
            strategy = PacingStrategy.NEGATIVE
            rationale = "Middle-distance race: a negative split protects W' for the finish"
    else:
        strategy = PacingStrategy.NEGATIVE
        rationale = "Long race: a negative split avoids early W' depletion"

    return StrategyRecommendation(strategy, rationale, round(duration, 1))
