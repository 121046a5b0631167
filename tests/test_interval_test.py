"""
Tests for 4x4 Interval Test Analysis

CP is estimated as a fraction of average interval power; the fraction and
the confidence depend on pacing consistency and first-to-last decoupling.
"""

import pytest

from core.exceptions import InsufficientDataError, InvalidInputError
from services.interval_test import (
    analyze_4x4_interval_test,
    assess_consistency,
    calculate_decoupling,
    coefficient_of_variation,
)
from services.physiology_types import ConfidenceLevel, ModelFitQuality


class TestIntervalAnalysis:
    """Tests for analyze_4x4_interval_test."""

    def test_even_pacing(self):
        """Identical intervals use the even-pacing factor (97%)."""
        result = analyze_4x4_interval_test([300, 300, 300, 300])

        assert result.avg_power == 300
        assert result.estimated_cp == 291
        assert result.consistency == ModelFitQuality.EXCELLENT
        assert result.confidence == ConfidenceLevel.HIGH
        assert result.warnings == []

    def test_standard_pacing(self):
        """A moderate fade uses the standard factor (95%)."""
        result = analyze_4x4_interval_test([310, 300, 298, 292])

        assert result.consistency == ModelFitQuality.EXCELLENT
        assert result.estimated_cp == round(300 * 0.95)
        assert result.confidence == ConfidenceLevel.HIGH

    def test_fading_effort(self):
        """A large fade uses the poor-pacing factor and warns."""
        result = analyze_4x4_interval_test([320, 300, 290, 270])

        assert result.decoupling_pct == pytest.approx(15.62, abs=0.01)
        assert result.estimated_cp == round(295 * 0.92)
        assert result.consistency == ModelFitQuality.FAIR
        assert result.confidence == ConfidenceLevel.MEDIUM
        assert any("Power dropped" in w for w in result.warnings)

    def test_negative_split_recommendation(self):
        """Strong last interval suggests starting harder."""
        result = analyze_4x4_interval_test([280, 290, 295, 300])

        assert any("start harder" in r for r in result.recommendations)

    def test_heart_rate_drift(self):
        result = analyze_4x4_interval_test([300, 300, 300, 300], [160, 168, 174, 180])

        assert result.hr_drift_pct == pytest.approx(12.5)
        assert any("Heart rate drifted" in w for w in result.warnings)

    def test_unexpected_interval_count(self):
        result = analyze_4x4_interval_test([300, 300, 300])

        assert any("Expected 4 intervals" in w for w in result.warnings)

    def test_too_few_intervals(self):
        with pytest.raises(InsufficientDataError):
            analyze_4x4_interval_test([300])

    def test_non_positive_power(self):
        with pytest.raises(InvalidInputError):
            analyze_4x4_interval_test([300, 0, 300, 300])


class TestHelpers:
    """Tests for the consistency helpers."""

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation([100, 100, 100]) == 0
        assert coefficient_of_variation([90, 110]) == pytest.approx(10.0)

    @pytest.mark.parametrize("variation,expected", [
        (1.0, ModelFitQuality.EXCELLENT),
        (4.0, ModelFitQuality.GOOD),
        (8.0, ModelFitQuality.FAIR),
        (12.0, ModelFitQuality.POOR),
    ])
    def test_consistency_bands(self, variation, expected):
        assert assess_consistency(variation) == expected

    def test_decoupling(self):
        assert calculate_decoupling([300, 290, 280, 270]) == pytest.approx(10.0)
