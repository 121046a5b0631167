"""
Methodology Pace Resolver

Turns the athlete's evidence into a methodology-tagged pace set:

    profile -> evidence tiers -> FitnessAnchor -> strategy.resolve_paces

The anchor carries the data source and confidence of the tier that won,
so every pace set discloses how much it can be trusted.

Usage:
    paces = resolve_pace_set(profile, Methodology.POLARIZED)
    paces.threshold_kmh, paces.data_source, paces.confidence
"""

import logging
from typing import List, Optional

from core.exceptions import EngineError
from .constants import Methodology
from .evidence import resolve_fitness_anchor
from .methodologies import get_strategy
from .models import FitnessAnchor, MethodologyPaceSet, PhysiologicalProfile
from .trace import GenerationTrace

logger = logging.getLogger(__name__)

# Methodologies whose pace set must be strictly ordered easy -> repetition
ORDERED_METHODOLOGIES = (Methodology.POLARIZED, Methodology.PYRAMIDAL)


def pace_set_problems(pace_set: MethodologyPaceSet) -> List[str]:
    """Invariant violations in a pace set; empty when valid."""
    problems = [
        f"{name} pace is not positive"
        for name, value in pace_set.all_paces().items()
        if not value or value <= 0
    ]
    if pace_set.methodology in ORDERED_METHODOLOGIES:
        ordered = [
            ("easy", pace_set.easy_kmh),
            ("marathon", pace_set.marathon_kmh),
            ("threshold", pace_set.threshold_kmh),
            ("interval", pace_set.interval_kmh),
            ("repetition", pace_set.repetition_kmh),
        ]
        for (slow_name, slow), (fast_name, fast) in zip(ordered, ordered[1:]):
            # marathon may equal threshold; every other step is strict
            if slow_name == "marathon":
                bad = slow > fast
            else:
                bad = slow >= fast
            if bad:
                problems.append(f"{slow_name} pace ({slow:.2f}) not slower than {fast_name} ({fast:.2f})")
    return problems


def resolve_pace_set_for_anchor(anchor: FitnessAnchor, methodology: Methodology) -> MethodologyPaceSet:
    """
    Pace set for an already-resolved anchor.

    Raises:
        EngineError: the strategy produced an invalid pace set
    """
    pace_set = get_strategy(methodology).resolve_paces(anchor)
    problems = pace_set_problems(pace_set)
    if problems:
        raise EngineError("; ".join(problems), error_code="INVALID_PACE_SET")
    return pace_set


def resolve_pace_set(
    profile: PhysiologicalProfile,
    methodology: Methodology,
    trace: Optional[GenerationTrace] = None,
    warnings: Optional[List[str]] = None,
) -> MethodologyPaceSet:
    anchor = resolve_fitness_anchor(profile, trace=trace, warnings=warnings)
    pace_set = resolve_pace_set_for_anchor(anchor, methodology)
    logger.debug(
        "Resolved %s paces from %s (%s): MP %.2f km/h",
        methodology.value, pace_set.data_source.value, pace_set.confidence.value, pace_set.marathon_kmh,
    )
    return pace_set
