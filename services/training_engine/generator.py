"""
Program Generator

Single entry point for program generation. Coordinates evidence
resolution, phase distribution, week composition and calendar constraints
into one ProgramPlan.

Generation is total for structurally valid input: an unknown methodology
falls back to Polarized, invalid evidence falls through to a lower tier,
and an unusable goal time falls back to current fitness. Every fallback
is reported in the result's warnings and trace. The one hard failure is a
program whose dates fall outside the calendar.

Usage:
    result = generate_program(
        profile=PhysiologicalProfile(race_result=RaceResult(distance="10K", time="42:30")),
        methodology="POLARIZED",
        params=SchedulingParams(sessions_per_week=5, duration_weeks=12, goal="marathon",
                                goal_time="3:15:00", start_date=date(2026, 1, 5)),
    )
    result.plan.to_dict()
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Union

from core.exceptions import InvalidInputError
from core.logging import generation_context, new_generation_id
from .composer import WeekComposer
from .constants import Methodology, parse_methodology
from .constraints import apply_calendar_constraints
from .evidence import resolve_fitness_anchor
from .methodologies import get_strategy
from .models import (
    CalendarConstraints,
    FitnessAnchor,
    PhysiologicalProfile,
    ProgramPlan,
    SchedulingParams,
)
from .pace_progression import calculate_target_pace
from .pace_resolver import resolve_pace_set_for_anchor
from .phase_calculator import PhaseSchedule, calculate_phase_distribution
from .trace import GenerationTrace

logger = logging.getLogger(__name__)

DEFAULT_METHODOLOGY = Methodology.POLARIZED


@dataclass
class GenerationResult:
    """Plan plus the non-fatal warnings and trace behind it."""
    plan: ProgramPlan
    warnings: List[str] = field(default_factory=list)
    trace: GenerationTrace = field(default_factory=GenerationTrace)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plan": self.plan.to_dict(),
            "warnings": list(self.warnings),
            "trace": self.trace.to_list(),
        }


def next_monday(today: date) -> date:
    return today + timedelta(days=7 - today.weekday())


class ProgramGenerator:
    """
    Generates complete training programs.

    Usage:
        generator = ProgramGenerator()
        result = generator.generate(profile, Methodology.CANOVA, params)
    """

    def __init__(
        self,
        trace_factory: Callable[[], GenerationTrace] = GenerationTrace,
        today: Callable[[], date] = date.today,
        id_factory: Callable[[], str] = new_generation_id,
    ):
        self.trace_factory = trace_factory
        self.today = today
        self.id_factory = id_factory

    def generate(
        self,
        profile: PhysiologicalProfile,
        methodology: Union[Methodology, str, None],
        params: Optional[SchedulingParams] = None,
        constraints: Optional[CalendarConstraints] = None,
    ) -> GenerationResult:
        """Generate under a fresh generation id; every log record of the run carries it."""
        with generation_context(self.id_factory()):
            return self._generate(profile, methodology, params, constraints)

    def _generate(
        self,
        profile: PhysiologicalProfile,
        methodology: Union[Methodology, str, None],
        params: Optional[SchedulingParams],
        constraints: Optional[CalendarConstraints],
    ) -> GenerationResult:
        started = time.perf_counter()
        params = params or SchedulingParams()
        warnings: List[str] = []
        trace = self.trace_factory()

        resolved = self._resolve_methodology(methodology, warnings, trace)
        strategy = get_strategy(resolved)

        anchor = resolve_fitness_anchor(profile, trace=trace, warnings=warnings)
        pace_set = resolve_pace_set_for_anchor(anchor, resolved)
        goal_kmh = self._goal_pace(anchor, params, warnings, trace)

        distribution = calculate_phase_distribution(params.duration_weeks, resolved)
        trace.record("phases", "Phase distribution", **distribution.to_dict())
        schedule = PhaseSchedule(distribution)

        start_date = self._start_date(params)
        weeks = WeekComposer(strategy, schedule, anchor, params, goal_kmh, trace=trace).compose_all()

        plan = ProgramPlan(
            methodology=resolved,
            goal=params.goal,
            start_date=start_date,
            phases=distribution,
            pace_set=pace_set,
            current_pace_kmh=anchor.marathon_kmh,
            goal_pace_kmh=goal_kmh,
            weeks=weeks,
        )

        race_date = params.target_race_date
        if race_date is not None and not (plan.start_date <= race_date <= plan.end_date):
            message = f"Target race date {race_date.isoformat()} is outside the program; no race day marked"
            warnings.append(message)
            trace.record("constraints", message)
            race_date = None
        plan = apply_calendar_constraints(plan, constraints, race_date)
        if constraints is not None:
            trace.record(
                "constraints",
                "Calendar applied",
                blocked=len(constraints.blocked),
                reduced=len(constraints.reduced),
                race_date=race_date.isoformat() if race_date else None,
            )

        logger.info(
            "Generated %d-week %s program (%s, %s confidence, %d warnings)",
            plan.duration_weeks, resolved.value, anchor.data_source.value,
            anchor.confidence.value, len(warnings),
            extra={
                "extra_fields": {
                    "methodology": resolved.value,
                    "data_source": anchor.data_source.value,
                    "duration_weeks": plan.duration_weeks,
                    "warnings": len(warnings),
                    "process_time_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            },
        )
        return GenerationResult(plan=plan, warnings=warnings, trace=trace)

    # -------------------------------------------------------------------------

    def _resolve_methodology(self, methodology, warnings: List[str], trace: GenerationTrace) -> Methodology:
        resolved = parse_methodology(methodology)
        if resolved is None:
            message = f"Unknown methodology {methodology!r}; using {DEFAULT_METHODOLOGY.value}"
            logger.warning(message)
            warnings.append(message)
            resolved = DEFAULT_METHODOLOGY
        trace.record("methodology", f"Using {resolved.value}", requested=str(methodology))
        return resolved

    def _goal_pace(
        self,
        anchor: FitnessAnchor,
        params: SchedulingParams,
        warnings: List[str],
        trace: GenerationTrace,
    ) -> float:
        """Marathon-equivalent goal speed; current fitness when there is no usable goal time."""
        current = anchor.marathon_kmh
        if not params.goal_time:
            trace.record("goal", "No goal time; holding current fitness", goal_kmh=round(current, 2))
            return current

        target = calculate_target_pace(params.goal, params.goal_time)
        if target is None:
            message = f"Goal time {params.goal_time!r} could not be used for a {params.goal.value} goal; targeting current fitness"
            logger.warning(message)
            warnings.append(message)
            trace.record("goal", message, goal_kmh=round(current, 2))
            return current

        if target < current:
            trace.record("goal", "Goal pace slower than current fitness; holding current", goal_kmh=round(target, 2))
        else:
            trace.record("goal", "Goal pace from goal time", goal_kmh=round(target, 2))
        return target

    def _start_date(self, params: SchedulingParams) -> date:
        span = timedelta(days=params.duration_weeks * 7 - 1)
        try:
            if params.start_date is not None:
                start = params.start_date
            elif params.target_race_date is not None:
                # race falls on the last day of the program
                start = params.target_race_date - span
            else:
                start = next_monday(self.today())
            start + span  # last day must exist too
        except OverflowError:
            from_race = params.start_date is None and params.target_race_date is not None
            field_name = "target_race_date" if from_race else "start_date"
            raise InvalidInputError(
                f"A {params.duration_weeks}-week program does not fit in the calendar",
                field=field_name,
            )
        return start


def generate_program(
    profile: PhysiologicalProfile,
    methodology: Union[Methodology, str, None],
    params: Optional[SchedulingParams] = None,
    constraints: Optional[CalendarConstraints] = None,
) -> GenerationResult:
    """
    Generate a complete program.

    Raises:
        InvalidInputError: the program would run off either end of the calendar
    """
    return ProgramGenerator().generate(profile, methodology, params, constraints)
