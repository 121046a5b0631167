"""
Calendar Constraint Applicator

Walks a finished plan day by day and applies the athlete's calendar:

- blocked date   -> workouts removed, rest annotation
- reduced date   -> workouts kept, capacity annotation
- altitude stay  -> workouts kept, altitude annotation
- race date      -> day replaced by the race marker, no workouts

Each day's date is start + 7 * (week - 1) + (day - 1). Applying the same
constraints twice gives the same plan as applying them once, and the
week/day structure never changes.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Tuple

from .constants import RaceGoal
from .models import AltitudePeriod, CalendarConstraints, DayPlan, ProgramPlan, WeekPlan

logger = logging.getLogger(__name__)

BLOCKED_NOTE = "Blocked in calendar - rest day"
REDUCED_NOTE = "Reduced capacity - scale down volume and intensity"
ALTITUDE_NOTE = "At altitude - expect slower paces and higher heart rate"

RACE_LABELS = {
    RaceGoal.FIVE_K: "5K",
    RaceGoal.TEN_K: "10K",
    RaceGoal.HALF_MARATHON: "Half marathon",
    RaceGoal.MARATHON: "Marathon",
    RaceGoal.FITNESS: "Goal event",
}


def race_marker(goal: RaceGoal) -> str:
    return f"RACE DAY - {RACE_LABELS.get(goal, goal.value)}"


def _annotate(day: DayPlan, note: str) -> DayPlan:
    if note in day.annotations:
        return day
    return replace(day, annotations=day.annotations + (note,))


def _in_altitude_period(day_date: date, periods: Tuple[AltitudePeriod, ...]) -> bool:
    return any(p.start <= day_date <= p.end for p in periods)


def apply_day_constraints(
    day: DayPlan,
    day_date: date,
    constraints: CalendarConstraints,
    race_date: Optional[date],
    goal: RaceGoal,
) -> DayPlan:
    if race_date is not None and day_date == race_date:
        return DayPlan(day_number=day.day_number, notes=race_marker(goal), is_race_day=True)

    if day_date in constraints.blocked:
        day = _annotate(replace(day, workouts=()), BLOCKED_NOTE)
    elif day_date in constraints.reduced:
        day = _annotate(day, REDUCED_NOTE)

    if _in_altitude_period(day_date, constraints.altitude_periods):
        day = _annotate(day, ALTITUDE_NOTE)
    return day


def apply_calendar_constraints(
    plan: ProgramPlan,
    constraints: Optional[CalendarConstraints] = None,
    race_date: Optional[date] = None,
) -> ProgramPlan:
    """New plan with the calendar applied; the input plan is untouched."""
    constraints = constraints or CalendarConstraints()
    if race_date is not None and not (plan.start_date <= race_date <= plan.end_date):
        logger.warning("Race date %s falls outside the plan (%s - %s)", race_date, plan.start_date, plan.end_date)
        race_date = None

    weeks: Tuple[WeekPlan, ...] = tuple(
        replace(week, days=tuple(
            apply_day_constraints(
                day,
                plan.day_date(week.week_number, day.day_number),
                constraints,
                race_date,
                plan.goal,
            )
            for day in week.days
        ))
        for week in plan.weeks
    )
    return replace(plan, weeks=weeks)
