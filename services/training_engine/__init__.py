# Training Prescription Engine
#
# Turns an athlete's physiological evidence, a methodology and scheduling
# parameters into a complete periodized program.
#
# Architecture:
# - Evidence tiers resolved once into a single fitness anchor
# - One strategy per methodology behind a common interface
# - Phase distribution and progressive pace interpolation
# - Segment-based workouts (distance always derived)
# - Calendar constraints applied last
# - Structured trace returned with every result

from .constants import (
    Methodology,
    Phase,
    DataSource,
    Confidence,
    ExperienceLevel,
    RaceGoal,
    WorkoutType,
    Intensity,
    SegmentType,
    parse_methodology,
)
from .models import (
    PhysiologicalProfile,
    FieldTestResult,
    RaceResult,
    SchedulingParams,
    CalendarConstraints,
    AltitudePeriod,
    FitnessAnchor,
    MethodologyPaceSet,
    PhaseDistribution,
    Segment,
    WorkoutPrescription,
    DayPlan,
    WeekPlan,
    ProgramPlan,
)
from .pace_resolver import resolve_pace_set
from .phase_calculator import calculate_phase_distribution, PhaseSchedule
from .pace_progression import (
    calculate_progressive_pace,
    calculate_volume_percent,
    calculate_target_pace,
)
from .constraints import apply_calendar_constraints
from .trace import GenerationTrace, TraceStep
from .generator import ProgramGenerator, GenerationResult, generate_program

__all__ = [
    # Entry point
    'generate_program',
    'ProgramGenerator',
    'GenerationResult',

    # Stages
    'resolve_pace_set',
    'calculate_phase_distribution',
    'PhaseSchedule',
    'calculate_progressive_pace',
    'calculate_volume_percent',
    'calculate_target_pace',
    'apply_calendar_constraints',
    'GenerationTrace',
    'TraceStep',

    # Inputs
    'PhysiologicalProfile',
    'FieldTestResult',
    'RaceResult',
    'SchedulingParams',
    'CalendarConstraints',
    'AltitudePeriod',

    # Outputs
    'FitnessAnchor',
    'MethodologyPaceSet',
    'PhaseDistribution',
    'Segment',
    'WorkoutPrescription',
    'DayPlan',
    'WeekPlan',
    'ProgramPlan',

    # Constants
    'Methodology',
    'Phase',
    'DataSource',
    'Confidence',
    'ExperienceLevel',
    'RaceGoal',
    'WorkoutType',
    'Intensity',
    'SegmentType',
    'parse_methodology',
]
