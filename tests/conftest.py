"""
Pytest configuration and fixtures

Everything under test is pure computation; fixtures only build input
snapshots. No fixture touches the filesystem, network or clock.
"""
import pytest
import sys
import os
from datetime import date

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.training_engine.models import (
    FieldTestResult,
    PhysiologicalProfile,
    RaceResult,
    SchedulingParams,
)


# A Monday, so day 1 of every week is a Monday
PROGRAM_START = date(2026, 1, 5)


@pytest.fixture
def race_profile():
    """Intermediate runner with a recent 10K in 42:30."""
    return PhysiologicalProfile(
        race_result=RaceResult(distance="10K", time="42:30"),
        experience_level="intermediate",
    )


@pytest.fixture
def field_test_profile():
    """Advanced runner with a measured threshold of 15 km/h."""
    return PhysiologicalProfile(
        field_test=FieldTestResult(threshold_speed_kmh=15.0, threshold_heart_rate=172),
        experience_level="advanced",
    )


@pytest.fixture
def heuristic_profile():
    """No test data at all."""
    return PhysiologicalProfile(experience_level="intermediate", current_weekly_volume_km=45)


@pytest.fixture
def marathon_params():
    return SchedulingParams(
        sessions_per_week=5,
        duration_weeks=12,
        goal="marathon",
        goal_time="2:55:00",
        start_date=PROGRAM_START,
    )
