"""
Week Composer

Builds the program one week at a time:

1. Locate the week's phase and week-in-phase
2. Interpolate the week's marathon-equivalent target pace
3. Re-express the fitness anchor at that pace and resolve the week's paces
4. Volume percentage and focus line
5. Seven days from the methodology template
6. Strength / core pass

Weeks are independent given the schedule and the anchor; continuity of the
target pace comes from the interpolator, not from earlier weeks' output.
"""

import logging
from typing import Optional, Tuple

from core.exceptions import EngineError
from .constants import DAYS_PER_WEEK
from .methodologies import MethodologyStrategy, WeekContext
from .models import FitnessAnchor, SchedulingParams, WeekPlan
from .pace_progression import calculate_progressive_pace, calculate_volume_percent
from .pace_resolver import resolve_pace_set_for_anchor
from .phase_calculator import PhaseSchedule
from .supplementary import add_supplementary_sessions
from .trace import GenerationTrace

logger = logging.getLogger(__name__)


class WeekComposer:
    """
    Composes WeekPlans for one program.

    Usage:
        composer = WeekComposer(strategy, schedule, anchor, params, goal_kmh)
        weeks = composer.compose_all()
    """

    def __init__(
        self,
        strategy: MethodologyStrategy,
        schedule: PhaseSchedule,
        anchor: FitnessAnchor,
        params: SchedulingParams,
        goal_kmh: float,
        trace: Optional[GenerationTrace] = None,
    ):
        self.strategy = strategy
        self.schedule = schedule
        self.anchor = anchor
        self.params = params
        self.current_kmh = anchor.marathon_kmh
        self.goal_kmh = goal_kmh
        self.trace = trace if trace is not None else GenerationTrace()

    def compose_week(self, week_number: int) -> WeekPlan:
        phase, week_in_phase, phase_length = self.schedule.locate(week_number)

        target_kmh = calculate_progressive_pace(
            self.current_kmh, self.goal_kmh, phase, week_in_phase, phase_length,
        )
        paces = resolve_pace_set_for_anchor(
            self.anchor.scaled_to(target_kmh), self.strategy.methodology,
        )

        context = WeekContext(
            week_number=week_number,
            phase=phase,
            week_in_phase=week_in_phase,
            phase_length=phase_length,
            sessions_per_week=self.params.sessions_per_week,
            goal=self.params.goal,
            paces=paces,
        )
        days = self.strategy.build_week_days(context)
        if len(days) != DAYS_PER_WEEK:
            raise EngineError(
                f"{self.strategy.display_name} template returned {len(days)} days for week {week_number}",
                error_code="INVALID_WEEK_SHAPE",
            )

        days = add_supplementary_sessions(
            days,
            phase,
            strength_sessions=self.params.strength_sessions_per_week,
            core_sessions=self.params.core_sessions_per_week,
            strength_after_running=self.params.schedule_strength_after_running,
            core_after_running=self.params.schedule_core_after_running,
        )

        week = WeekPlan(
            week_number=week_number,
            phase=phase,
            week_in_phase=week_in_phase,
            volume_percent=calculate_volume_percent(phase, week_in_phase),
            focus=self.strategy.week_focus(phase, target_kmh),
            target_pace_kmh=target_kmh,
            days=days,
        )
        self.trace.record(
            "week",
            f"Week {week_number}: {phase.value} {week_in_phase}/{phase_length}",
            target_pace_kmh=round(target_kmh, 2),
            volume_percent=week.volume_percent,
            total_distance_km=week.total_distance_km,
        )
        return week

    def compose_all(self) -> Tuple[WeekPlan, ...]:
        return tuple(
            self.compose_week(week_number)
            for week_number in range(1, self.schedule.total_weeks + 1)
        )
