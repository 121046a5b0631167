"""
Tests for Critical Power Model

Tests cover:
- 3-minute all-out test: CP from end power, W' from work above CP
- Multi-trial regression recovering a known CP / W'
- W' balance, time to exhaustion and power-duration predictions
- W' plausibility against reference ranges
"""

import math

import pytest

from core.exceptions import InsufficientDataError, InvalidInputError
from services.critical_power import (
    CPTrial,
    calculate_3min_all_out,
    calculate_multi_trial_cp,
    calculate_w_prime_balance,
    estimate_power_for_duration,
    estimate_time_to_exhaustion,
    linear_regression,
    validate_w_prime,
)
from services.physiology_types import (
    AthleteLevel,
    ConfidenceLevel,
    ErgometerType,
    ModelFitQuality,
)


def decaying_test(start=400, end=250, decay_s=150, hold_s=30):
    """Linear decay from start to just above end, then a flat hold at end."""
    step = (start - end) / decay_s
    return [start - i * step for i in range(decay_s)] + [end] * hold_s


def trials_from_model(cp, w_prime, durations):
    """Noise-free trials: average power = CP + W'/t."""
    return [CPTrial(duration_s=t, avg_power=cp + w_prime / t) for t in durations]


class TestThreeMinuteAllOut:
    """Tests for the 3-minute all-out test."""

    def test_well_paced_test(self):
        """400W decaying to a stable 250W gives CP 250 and a positive W'."""
        result = calculate_3min_all_out(decaying_test())

        assert result.critical_power == 250
        assert result.w_prime > 0
        assert result.w_prime == 11325
        assert result.w_prime_kj == pytest.approx(11.3, abs=0.05)
        assert not any("Negative W'" in w for w in result.warnings)
        assert result.model_fit in (ModelFitQuality.GOOD, ModelFitQuality.EXCELLENT)

    def test_recommendations_include_results(self):
        """CP and W' are echoed in the recommendations."""
        result = calculate_3min_all_out(decaying_test())

        assert any("CP: 250W" in r for r in result.recommendations)
        assert any("11.3kJ" in r for r in result.recommendations)

    def test_too_few_samples(self):
        """Fewer than 150 samples is a hard failure."""
        with pytest.raises(InsufficientDataError) as exc:
            calculate_3min_all_out([300] * 100)

        assert exc.value.required == 150
        assert exc.value.received == 100
        assert exc.value.error_code == "INSUFFICIENT_DATA"

    def test_short_test_warns(self):
        """160 seconds is accepted with a duration warning."""
        result = calculate_3min_all_out(decaying_test(decay_s=130, hold_s=30))

        assert any("Test duration was 160s" in w for w in result.warnings)

    def test_negative_w_prime_warns(self):
        """Power rising at the end gives a negative W' and a warning."""
        samples = [250] * 150 + [300] * 30
        result = calculate_3min_all_out(samples)

        assert result.w_prime < 0
        assert any("Negative W'" in w for w in result.warnings)

    def test_flat_effort_scores_poorly(self):
        """A constant-power effort looks paced, not all-out."""
        result = calculate_3min_all_out([280] * 180)

        assert result.model_fit == ModelFitQuality.POOR
        assert result.confidence == ConfidenceLevel.LOW
        assert any("Low W'" in r for r in result.recommendations)

    def test_invalid_samples_warn(self):
        """Dropout spikes are discarded with a warning."""
        samples = decaying_test()
        samples[10:30] = [5000] * 20
        result = calculate_3min_all_out(samples)

        assert any("invalid" in w for w in result.warnings)
        assert result.critical_power == 250

    def test_to_dict(self):
        data = calculate_3min_all_out(decaying_test()).to_dict()

        assert data["critical_power"] == 250
        assert data["confidence"] in {c.value for c in ConfidenceLevel}
        assert data["r_squared"] is None


class TestMultiTrial:
    """Tests for multi-trial CP regression."""

    def test_recovers_known_model(self):
        """Noise-free trials recover CP and W' with R^2 ~ 1."""
        trials = trials_from_model(250, 20000, [180, 420, 720, 1200])
        result = calculate_multi_trial_cp(trials)

        assert result.critical_power == 250
        assert result.w_prime == 20000
        assert result.r_squared == pytest.approx(1.0, abs=1e-9)
        assert result.model_fit == ModelFitQuality.EXCELLENT
        assert result.confidence == ConfidenceLevel.VERY_HIGH
        assert not any("deviates" in w for w in result.warnings)

    def test_trial_order_does_not_matter(self):
        """Trials are sorted by duration before fitting."""
        trials = trials_from_model(300, 15000, [720, 180, 420])
        result = calculate_multi_trial_cp(trials)

        assert result.critical_power == 300
        assert result.w_prime == 15000

    def test_two_trials_warn(self):
        """Two trials work but ask for a third."""
        result = calculate_multi_trial_cp(trials_from_model(250, 20000, [180, 720]))

        assert any("Only 2 trials" in w for w in result.warnings)

    def test_narrow_duration_spread_warns(self):
        result = calculate_multi_trial_cp(trials_from_model(250, 20000, [300, 360, 420]))

        assert any("Duration spread" in w for w in result.warnings)

    def test_noisy_trial_flagged(self):
        """A trial off the line is reported with its residual."""
        trials = trials_from_model(250, 20000, [180, 420, 720])
        trials.append(CPTrial(duration_s=1200, avg_power=200))
        result = calculate_multi_trial_cp(trials)

        assert any("deviates" in w for w in result.warnings)

    def test_single_trial_fails(self):
        with pytest.raises(InsufficientDataError):
            calculate_multi_trial_cp([CPTrial(180, 400)])

    def test_non_positive_trial_fails(self):
        with pytest.raises(InvalidInputError):
            calculate_multi_trial_cp([CPTrial(180, 400), CPTrial(0, 300)])

    def test_identical_durations_fail(self):
        with pytest.raises(InvalidInputError):
            calculate_multi_trial_cp([CPTrial(300, 400), CPTrial(300, 390)])

    def test_linear_regression(self):
        """OLS on an exact line."""
        slope, intercept, r2 = linear_regression([1, 2, 3], [5, 7, 9])

        assert slope == pytest.approx(2.0)
        assert intercept == pytest.approx(3.0)
        assert r2 == pytest.approx(1.0)


class TestWPrimeBalance:
    """Tests for W' balance and derived predictions."""

    def test_depletes_above_cp(self):
        """Each second above CP spends the surplus."""
        balance = calculate_w_prime_balance([350] * 10, cp=250, w_prime=20000)

        assert balance[0] == 19900
        assert balance[-1] == 19000

    def test_clamped_at_zero(self):
        balance = calculate_w_prime_balance([600] * 100, cp=250, w_prime=20000)

        assert min(balance) == 0
        assert balance[-1] == 0

    def test_recovers_below_cp(self):
        """Balance climbs back toward full W' below CP but never exceeds it."""
        ride = [400] * 60 + [150] * 600
        balance = calculate_w_prime_balance(ride, cp=250, w_prime=20000)

        assert balance[59] == 11000
        assert balance[-1] > balance[59]
        assert max(balance) <= 20000

    def test_invalid_tau(self):
        with pytest.raises(InvalidInputError):
            calculate_w_prime_balance([300], cp=250, w_prime=20000, tau=0)

    def test_time_to_exhaustion(self):
        assert estimate_time_to_exhaustion(350, 250, 20000) == pytest.approx(200)

    def test_time_to_exhaustion_at_or_below_cp_is_infinite(self):
        assert estimate_time_to_exhaustion(250, 250, 20000) == math.inf
        assert estimate_time_to_exhaustion(200, 250, 20000) == math.inf

    def test_power_for_duration(self):
        assert estimate_power_for_duration(200, 250, 20000) == pytest.approx(350)

    def test_power_for_non_positive_duration(self):
        with pytest.raises(InvalidInputError):
            estimate_power_for_duration(0, 250, 20000)


class TestValidateWPrime:
    """Tests for W' plausibility checks."""

    def test_typical_value(self):
        assert validate_w_prime(20, ErgometerType.CYCLING, AthleteLevel.TRAINED).valid

    def test_low_value(self):
        result = validate_w_prime(5, ErgometerType.ROWING, AthleteLevel.TRAINED)

        assert not result.valid
        assert "unusually low" in result.warning
        assert "Expected: 20-35kJ" in result.warning

    def test_high_value(self):
        result = validate_w_prime(80, ErgometerType.SKIERG, AthleteLevel.ELITE)

        assert not result.valid
        assert "unusually high" in result.warning
