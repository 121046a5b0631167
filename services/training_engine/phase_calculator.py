"""
Phase Distribution Calculator

Splits a program into Base / Build / Peak / Taper weeks using each
methodology's ratios. Base, Build and Peak are floored (minimum one week);
Taper takes whatever is left, so the four always sum to the program length.

Programs shorter than four weeks can't hold every phase and are compressed
in priority order Peak, Taper, Build:
    1 week  -> Peak
    2 weeks -> Peak + Taper
    3 weeks -> Build + Peak + Taper

Usage:
    distribution = calculate_phase_distribution(12, Methodology.POLARIZED)
    schedule = PhaseSchedule(distribution)
    phase, week_in_phase, phase_length = schedule.locate(5)
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from core.exceptions import InvalidInputError
from .constants import PHASE_ORDER, PHASE_RATIOS, Methodology, Phase
from .models import PhaseDistribution

# Guards floor() against 0.35 * 20 = 6.999999...
_FLOOR_EPSILON = 1e-9

SHORT_PROGRAMS = {
    1: PhaseDistribution(base=0, build=0, peak=1, taper=0),
    2: PhaseDistribution(base=0, build=0, peak=1, taper=1),
    3: PhaseDistribution(base=0, build=1, peak=1, taper=1),
}


def calculate_phase_distribution(total_weeks: int, methodology: Methodology) -> PhaseDistribution:
    """
    Week count per phase.

    Raises:
        InvalidInputError: total_weeks < 1
    """
    if total_weeks < 1:
        raise InvalidInputError("Program must be at least one week", field="duration_weeks")
    if total_weeks in SHORT_PROGRAMS:
        return SHORT_PROGRAMS[total_weeks]

    base_ratio, build_ratio, peak_ratio, _ = PHASE_RATIOS[methodology]
    counts = {
        Phase.BASE: max(1, math.floor(total_weeks * base_ratio + _FLOOR_EPSILON)),
        Phase.BUILD: max(1, math.floor(total_weeks * build_ratio + _FLOOR_EPSILON)),
        Phase.PEAK: max(1, math.floor(total_weeks * peak_ratio + _FLOOR_EPSILON)),
    }
    taper = total_weeks - sum(counts.values())

    # Remainder too small: borrow from the largest phase until taper has a week
    while taper < 1:
        largest = max(counts, key=lambda phase: counts[phase])
        counts[largest] -= 1
        taper += 1

    return PhaseDistribution(
        base=counts[Phase.BASE],
        build=counts[Phase.BUILD],
        peak=counts[Phase.PEAK],
        taper=taper,
    )


@dataclass(frozen=True)
class PhaseBlock:
    phase: Phase
    first_week: int
    length: int

    @property
    def weeks(self) -> List[int]:
        return list(range(self.first_week, self.first_week + self.length))


class PhaseSchedule:
    """Week-number lookups over a phase distribution."""

    def __init__(self, distribution: PhaseDistribution):
        self.distribution = distribution
        self.blocks: List[PhaseBlock] = []
        week = 1
        for phase in PHASE_ORDER:
            length = distribution.weeks_for(phase)
            if length > 0:
                self.blocks.append(PhaseBlock(phase, week, length))
                week += length

    @property
    def total_weeks(self) -> int:
        return self.distribution.total

    def locate(self, week_number: int) -> Tuple[Phase, int, int]:
        """
        (phase, week_in_phase, phase_length) for a 1-indexed week.

        Raises:
            InvalidInputError: week outside the program
        """
        for block in self.blocks:
            if block.first_week <= week_number < block.first_week + block.length:
                return block.phase, week_number - block.first_week + 1, block.length
        raise InvalidInputError(
            f"Week {week_number} is outside a {self.total_weeks}-week program",
            field="week_number",
        )
