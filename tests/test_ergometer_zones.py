"""
Tests for Ergometer Training Zones

Six CP-based (or MAP-based) power zones from whichever threshold the
athlete tested, with optional Concept2 pace per zone.
"""

import pytest

from core.exceptions import InvalidInputError
from services.concept2 import watts_to_pace
from services.ergometer_zones import (
    CyclingBackground,
    ThresholdMethod,
    anchor_from_test,
    calculate_ergometer_zones,
    zone_for_percent,
)


class TestCPZones:
    """Zones scaled from critical power."""

    def test_six_zones(self):
        zones = calculate_ergometer_zones(280, ThresholdMethod.CP)

        assert [z.zone for z in zones.zones] == [1, 2, 3, 4, 5, 6]
        assert zones.anchor_watts == 280

    def test_threshold_zone_brackets_cp(self):
        """Zone 4 spans 91-105% of CP."""
        z4 = calculate_ergometer_zones(280).zones[3]

        assert z4.name == "Threshold"
        assert z4.min_watts == 255
        assert z4.max_watts == 294

    def test_zones_increase(self):
        zones = calculate_ergometer_zones(300).zones
        for lower, upper in zip(zones, zones[1:]):
            assert lower.max_watts < upper.max_watts

    def test_zone_for_power(self):
        zones = calculate_ergometer_zones(280)

        assert zones.zone_for_power(100) == 1
        assert zones.zone_for_power(280) == 4
        assert zones.zone_for_power(1000) == 6

    def test_implausible_power_warns(self):
        zones = calculate_ergometer_zones(30)
        assert any("outside the plausible range" in w for w in zones.warnings)

    def test_non_positive_power(self):
        with pytest.raises(InvalidInputError):
            calculate_ergometer_zones(0)


class TestThresholdMethods:
    """Conversion of each test type into the zone anchor."""

    @pytest.mark.parametrize("background,expected", [
        (CyclingBackground.CYCLIST, 285),
        (CyclingBackground.TRAINED_NON_CYCLIST, 276),
        (CyclingBackground.UNTRAINED, 270),
    ])
    def test_ftp_correction(self, background, expected):
        """20-min power is corrected for cycling background."""
        zones = calculate_ergometer_zones(300, ThresholdMethod.FTP_20MIN, background=background)
        assert zones.anchor_watts == expected

    def test_interval_test_anchor(self):
        assert anchor_from_test(300, ThresholdMethod.INTERVAL_4X4) == pytest.approx(285)

    def test_map_uses_map_bands(self):
        """MAP zones use their own percentage bands."""
        zones = calculate_ergometer_zones(400, ThresholdMethod.MAP)

        assert zones.anchor_watts == 400
        assert zones.zones[3].max_watts == 340
        assert zones.zones[4].max_watts == 400


class TestConcept2Pace:
    """Optional pace per zone boundary."""

    def test_paces_present(self):
        zones = calculate_ergometer_zones(280, include_concept2_pace=True).zones

        assert zones[0].pace_slow is None  # 0W has no pace
        assert zones[0].pace_fast == round(watts_to_pace(zones[0].max_watts).value, 1)
        for zone in zones[1:]:
            assert zone.pace_slow > zone.pace_fast

    def test_paces_absent_by_default(self):
        zones = calculate_ergometer_zones(280).zones
        assert all(z.pace_fast is None for z in zones)

    def test_tiny_power_skips_zero_watt_bands(self):
        """Bands that round to 0W get no pace instead of failing the whole set."""
        zones = calculate_ergometer_zones(0.4, include_concept2_pace=True).zones

        assert zones[0].max_watts == 0
        assert zones[0].pace_fast is None
        assert zones[-1].max_watts == 1
        assert zones[-1].pace_fast == round(watts_to_pace(1).value, 1)


class TestZoneForPercent:

    @pytest.mark.parametrize("percent,expected", [
        (50, 1),
        (70, 2),
        (85, 3),
        (100, 4),
        (110, 5),
        (130, 6),
    ])
    def test_zone_lookup(self, percent, expected):
        assert zone_for_percent(percent) == expected
