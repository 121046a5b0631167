"""
Evidence Tiers

The athlete's physiological evidence, modelled as one of four tiers in
descending fidelity:

    Lab        -> lab VO2max, scaled by running efficiency
    FieldTest  -> measured lactate-threshold speed
    Race       -> VDOT from a recent race
    Heuristic  -> experience level and weekly volume

`resolve_fitness_anchor` walks the tiers in that order and turns the first
one whose input validates into a single FitnessAnchor. A tier that fails
validation is skipped with a warning and a trace step; Heuristic always
succeeds, so resolution is total.

Once a tier is chosen, every lower measured tier that also validates is
compared against it. Marathon paces that disagree by more than
EVIDENCE_MAX_MISMATCH_PCT produce a warning; the chosen anchor stands.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from core.config import settings
from core.exceptions import EngineError, InvalidInputError, UnknownDistanceError
from services.vdot_calculator import (
    RACE_DISTANCES,
    calculate_daniels_paces,
    calculate_vdot,
    normalize_distance_label,
    parse_time_to_seconds,
)
from .constants import (
    HEURISTIC_FALLBACK_KMH,
    HEURISTIC_MARATHON_KMH,
    LAB_EFFICIENCY_FACTORS,
    THRESHOLD_TO_MARATHON_RATIO,
    Confidence,
    DataSource,
    ExperienceLevel,
)
from .models import FitnessAnchor, HeartRateZone, PhysiologicalProfile
from .trace import GenerationTrace

logger = logging.getLogger(__name__)

# Plausibility bounds for caller-supplied measurements
VO2MAX_RANGE = (20.0, 95.0)
THRESHOLD_SPEED_RANGE_KMH = (6.0, 30.0)
THRESHOLD_HR_RANGE_BPM = (100, 220)
LACTATE_RANGE_MMOL = (1.0, 10.0)

# Fractions of threshold heart rate bounding each zone
HEART_RATE_ZONES = (
    (1, "Recovery", 0.75, 0.85),
    (2, "Aerobic", 0.85, 0.90),
    (3, "Tempo", 0.90, 0.95),
    (4, "Threshold", 0.95, 1.00),
    (5, "VO2max", 1.00, 1.06),
)

# Long races predict marathon pace better than short ones
LONG_RACE_LABELS = ("HALF", "MARATHON")


@dataclass(frozen=True)
class LabEvidence:
    vo2max: float
    experience_level: ExperienceLevel

    source = DataSource.LAB

    def to_anchor(self) -> FitnessAnchor:
        low, high = VO2MAX_RANGE
        if not (low <= self.vo2max <= high):
            raise InvalidInputError(
                f"Lab VO2max {self.vo2max} outside plausible range {low:.0f}-{high:.0f}",
                field="lab_vo2max",
            )
        efficiency = LAB_EFFICIENCY_FACTORS.get(self.experience_level, 0.96)
        vdot = round(self.vo2max * efficiency, 1)
        daniels = calculate_daniels_paces(vdot)
        return FitnessAnchor(
            data_source=self.source,
            confidence=Confidence.VERY_HIGH,
            marathon_kmh=daniels.marathon_kmh,
            experience_level=self.experience_level,
            vdot=vdot,
            daniels=daniels,
        )


def build_heart_rate_zones(threshold_hr: int) -> Tuple[HeartRateZone, ...]:
    """Five contiguous bands from the threshold heart rate, zone 4 topping out at threshold."""
    return tuple(
        HeartRateZone(zone, name, round(threshold_hr * low), round(threshold_hr * high))
        for zone, name, low, high in HEART_RATE_ZONES
    )


@dataclass(frozen=True)
class FieldTestEvidence:
    threshold_speed_kmh: float
    experience_level: ExperienceLevel
    threshold_heart_rate: Optional[int] = None
    lactate_mmol: Optional[float] = None

    source = DataSource.FIELD_TEST

    def to_anchor(self) -> FitnessAnchor:
        low, high = THRESHOLD_SPEED_RANGE_KMH
        if not (low <= self.threshold_speed_kmh <= high):
            raise InvalidInputError(
                f"Threshold speed {self.threshold_speed_kmh} km/h outside plausible range",
                field="threshold_speed",
            )
        zones: Tuple[HeartRateZone, ...] = ()
        if self.threshold_heart_rate is not None:
            low, high = THRESHOLD_HR_RANGE_BPM
            if not (low <= self.threshold_heart_rate <= high):
                raise InvalidInputError(
                    f"Threshold heart rate {self.threshold_heart_rate} bpm outside plausible range {low}-{high}",
                    field="threshold_heart_rate",
                )
            zones = build_heart_rate_zones(self.threshold_heart_rate)
        if self.lactate_mmol is not None:
            low, high = LACTATE_RANGE_MMOL
            if not (low <= self.lactate_mmol <= high):
                raise InvalidInputError(
                    f"Threshold lactate {self.lactate_mmol} mmol/L outside plausible range {low:g}-{high:g}",
                    field="lactate_mmol",
                )
        return FitnessAnchor(
            data_source=self.source,
            confidence=Confidence.HIGH,
            marathon_kmh=self.threshold_speed_kmh / THRESHOLD_TO_MARATHON_RATIO,
            experience_level=self.experience_level,
            threshold_kmh=self.threshold_speed_kmh,
            heart_rate_zones=zones,
        )


@dataclass(frozen=True)
class RaceEvidence:
    distance: str
    time: Union[float, str]
    experience_level: ExperienceLevel

    source = DataSource.RACE_TIME

    def to_anchor(self) -> FitnessAnchor:
        label = normalize_distance_label(self.distance)
        if label is None:
            raise UnknownDistanceError(self.distance)
        seconds = parse_time_to_seconds(self.time)
        if seconds is None:
            raise InvalidInputError(f"Unparsable race time: {self.time!r}", field="race_time")

        vdot = calculate_vdot(RACE_DISTANCES[label], seconds)
        if vdot is None or vdot <= 0:
            raise InvalidInputError("Race result gives no usable VDOT", field="race_time")

        daniels = calculate_daniels_paces(vdot)
        confidence = Confidence.HIGH if label in LONG_RACE_LABELS else Confidence.MEDIUM
        return FitnessAnchor(
            data_source=self.source,
            confidence=confidence,
            marathon_kmh=daniels.marathon_kmh,
            experience_level=self.experience_level,
            vdot=vdot,
            daniels=daniels,
        )


@dataclass(frozen=True)
class HeuristicEvidence:
    experience_level: ExperienceLevel
    weekly_volume_km: Optional[float] = None

    source = DataSource.ESTIMATE

    def to_anchor(self) -> FitnessAnchor:
        marathon_kmh = HEURISTIC_MARATHON_KMH.get(self.experience_level, HEURISTIC_FALLBACK_KMH)

        volume = self.weekly_volume_km
        if volume is not None:
            if volume > 60:
                marathon_kmh += 1.0
            elif volume > 40:
                marathon_kmh += 0.5
            elif volume < 20:
                marathon_kmh -= 0.5

        return FitnessAnchor(
            data_source=self.source,
            confidence=Confidence.LOW,
            marathon_kmh=marathon_kmh,
            experience_level=self.experience_level,
        )


Evidence = Union[LabEvidence, FieldTestEvidence, RaceEvidence, HeuristicEvidence]


def collect_evidence(profile: PhysiologicalProfile) -> List[Evidence]:
    """Every tier the profile carries input for, highest fidelity first."""
    level = profile.experience_level
    tiers: List[Evidence] = []
    if profile.lab_vo2max is not None:
        tiers.append(LabEvidence(profile.lab_vo2max, level))
    if profile.field_test is not None:
        field_test = profile.field_test
        tiers.append(FieldTestEvidence(
            field_test.threshold_speed_kmh,
            level,
            threshold_heart_rate=field_test.threshold_heart_rate,
            lactate_mmol=field_test.lactate_mmol,
        ))
    if profile.race_result is not None:
        tiers.append(RaceEvidence(profile.race_result.distance, profile.race_result.time, level))
    tiers.append(HeuristicEvidence(level, profile.current_weekly_volume_km))
    return tiers


def resolve_fitness_anchor(
    profile: PhysiologicalProfile,
    trace: Optional[GenerationTrace] = None,
    warnings: Optional[List[str]] = None,
) -> FitnessAnchor:
    """First valid tier wins; failures are recorded and skipped."""
    trace = trace if trace is not None else GenerationTrace()
    warnings = warnings if warnings is not None else []

    tiers = collect_evidence(profile)
    for index, evidence in enumerate(tiers):
        try:
            anchor = evidence.to_anchor()
        except EngineError as e:
            message = f"{evidence.source.value} evidence rejected: {e.detail}"
            logger.warning(message)
            warnings.append(message)
            trace.record("evidence", message, tier=evidence.source.value, error_code=e.error_code)
            continue

        trace.record(
            "evidence",
            f"Using {anchor.data_source.value} evidence",
            tier=anchor.data_source.value,
            confidence=anchor.confidence.value,
            marathon_kmh=round(anchor.marathon_kmh, 2),
            threshold_kmh=anchor.threshold_kmh,
            vdot=anchor.vdot,
            heart_rate_zones=len(anchor.heart_rate_zones),
            lactate_mmol=getattr(evidence, "lactate_mmol", None),
        )
        check_consistency(anchor, tiers[index + 1:], trace=trace, warnings=warnings)
        return anchor

    # collect_evidence always ends with the heuristic tier, which cannot fail
    raise RuntimeError("No evidence tier produced an anchor")


def check_consistency(
    anchor: FitnessAnchor,
    lower_tiers: Sequence[Evidence],
    trace: Optional[GenerationTrace] = None,
    warnings: Optional[List[str]] = None,
) -> List[float]:
    """
    Compare the chosen anchor's marathon pace with each lower measured tier.

    Heuristic estimates and tiers that fail validation are not compared.
    Returns the mismatch percentage for each tier compared.
    """
    trace = trace if trace is not None else GenerationTrace()
    warnings = warnings if warnings is not None else []
    limit = settings.EVIDENCE_MAX_MISMATCH_PCT
    mismatches: List[float] = []

    for evidence in lower_tiers:
        if isinstance(evidence, HeuristicEvidence):
            continue
        try:
            other = evidence.to_anchor()
        except EngineError as e:
            logger.debug("%s not compared: %s", evidence.source.value, e.detail)
            continue

        mismatch = abs(other.marathon_kmh - anchor.marathon_kmh) / anchor.marathon_kmh * 100
        mismatches.append(mismatch)
        trace.record(
            "consistency",
            f"{anchor.data_source.value} vs {other.data_source.value}",
            mismatch_pct=round(mismatch, 1),
            consistent=mismatch <= limit,
        )
        if mismatch > limit:
            message = (
                f"{anchor.data_source.value} and {other.data_source.value} evidence disagree: "
                f"marathon pace differs by {mismatch:.1f}%; using {anchor.data_source.value}"
            )
            logger.warning(message)
            warnings.append(message)

    return mismatches
