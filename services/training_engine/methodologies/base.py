"""
Base class for methodology strategies.

Every periodization philosophy implements this interface so the composer
can treat them uniformly:
- Pace resolution from the athlete's fitness anchor
- The seven-day template for a given week
- Phase ratios and the focus line shown for each week
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple
import logging

from ..constants import (
    DAYS_PER_WEEK,
    PHASE_RATIOS,
    Methodology,
    Phase,
    RaceGoal,
)
from ..formatting import format_pace
from ..models import DayPlan, FitnessAnchor, MethodologyPaceSet
from ..workout_builder import rest_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekContext:
    """Everything a template needs to lay out one week."""
    week_number: int
    phase: Phase
    week_in_phase: int
    phase_length: int
    sessions_per_week: int
    goal: RaceGoal
    paces: MethodologyPaceSet

    @property
    def is_taper(self) -> bool:
        return self.phase == Phase.TAPER

    @property
    def is_short_race(self) -> bool:
        return self.goal in (RaceGoal.FIVE_K, RaceGoal.TEN_K)


def interval_pace_for_duration(marathon_kmh: float, work_min: float) -> float:
    """
    Daniels interval speed by rep length, relative to marathon pace.

    - <= 1.5 min: repetition (110% VDOT)
    - <= 3 min:   fast interval (~103%)
    - <= 5 min:   VO2max interval (100%)
    - <= 8 min:   long interval (~94%)
    - longer:     cruise interval at threshold (88%)
    """
    if work_min <= 1.5:
        return marathon_kmh * 1.31
    if work_min <= 3:
        return marathon_kmh * 1.23
    if work_min <= 5:
        return marathon_kmh * 1.19
    if work_min <= 8:
        return marathon_kmh * 1.12
    return marathon_kmh * 1.05


class MethodologyStrategy(ABC):
    """
    One periodization philosophy.

    Subclasses register themselves with MethodologyRegistry and implement
    resolve_paces and build_week_days. Adding a methodology means adding a
    subclass; nothing else dispatches on the methodology value.
    """

    # Phase -> focus line; "{pace}" is replaced with the week's target pace
    focus_templates: Mapping[Phase, str] = {}

    @property
    @abstractmethod
    def methodology(self) -> Methodology:
        pass

    @property
    def display_name(self) -> str:
        return self.methodology.value.replace("_", " ").title()

    @property
    def phase_ratios(self) -> Tuple[float, float, float, float]:
        """(base, build, peak, taper) share of the program."""
        return PHASE_RATIOS[self.methodology]

    @abstractmethod
    def resolve_paces(self, anchor: FitnessAnchor) -> MethodologyPaceSet:
        """Methodology-tagged pace set for the anchor's marathon pace."""
        pass

    @abstractmethod
    def build_week_days(self, week: WeekContext) -> Tuple[DayPlan, ...]:
        """Exactly seven DayPlans, Monday first."""
        pass

    def week_focus(self, phase: Phase, target_pace_kmh: float) -> str:
        template = self.focus_templates.get(phase, "{phase} @ {pace}")
        return template.format(pace=format_pace(target_pace_kmh), phase=phase.value)

    # -------------------------------------------------------------------------
    # Helpers for subclasses
    # -------------------------------------------------------------------------

    def _pace_set(
        self,
        anchor: FitnessAnchor,
        easy_kmh: float,
        threshold_kmh: float,
        interval_kmh: float,
        repetition_kmh: float,
        zones: Dict[str, float],
    ) -> MethodologyPaceSet:
        return MethodologyPaceSet(
            methodology=self.methodology,
            data_source=anchor.data_source,
            confidence=anchor.confidence,
            marathon_kmh=anchor.marathon_kmh,
            easy_kmh=easy_kmh,
            threshold_kmh=threshold_kmh,
            interval_kmh=interval_kmh,
            repetition_kmh=repetition_kmh,
            zones=zones,
            vdot=anchor.vdot,
            heart_rate_zones=anchor.heart_rate_zones,
        )

    @staticmethod
    def _threshold(anchor: FitnessAnchor) -> float:
        """Measured threshold when there is one, else 105% of marathon pace."""
        return anchor.threshold_kmh or anchor.marathon_kmh * 1.05

    @staticmethod
    def _assemble(days: Mapping[int, DayPlan]) -> Tuple[DayPlan, ...]:
        """Fill unassigned weekdays with rest so the week is always seven days."""
        return tuple(
            days.get(day_number) or rest_day(day_number)
            for day_number in range(1, DAYS_PER_WEEK + 1)
        )
