"""
Tests for Evidence Tiers and the Methodology Pace Resolver

Tests cover:
1. Each tier's anchor (data source, confidence, marathon pace)
2. Fall-through from a tier with invalid input to the next one
3. Heart-rate zones from a measured threshold heart rate
4. Consistency between the chosen tier and lower measured tiers
5. Methodology pace sets and their ordering invariant
"""

import pytest

from core.exceptions import InvalidInputError, UnknownDistanceError
from services.vdot_calculator import calculate_daniels_paces
from services.training_engine.constants import (
    Confidence,
    DataSource,
    ExperienceLevel,
    Methodology,
)
from services.training_engine.evidence import (
    FieldTestEvidence,
    HeuristicEvidence,
    LabEvidence,
    RaceEvidence,
    build_heart_rate_zones,
    check_consistency,
    collect_evidence,
    resolve_fitness_anchor,
)
from services.training_engine.models import (
    FieldTestResult,
    MethodologyPaceSet,
    PhysiologicalProfile,
    RaceResult,
)
from services.training_engine.pace_resolver import (
    pace_set_problems,
    resolve_pace_set,
    resolve_pace_set_for_anchor,
)
from services.training_engine.trace import GenerationTrace


INTERMEDIATE = ExperienceLevel.INTERMEDIATE


class TestEvidenceTiers:
    """Each tier turns its input into a FitnessAnchor."""

    def test_lab_tier(self):
        """Lab VO2max scaled by efficiency, highest confidence."""
        anchor = LabEvidence(60, INTERMEDIATE).to_anchor()

        assert anchor.data_source == DataSource.LAB
        assert anchor.confidence == Confidence.VERY_HIGH
        assert anchor.vdot == pytest.approx(57.6)
        assert anchor.marathon_kmh == calculate_daniels_paces(57.6).marathon_kmh

    def test_lab_efficiency_by_level(self):
        elite = LabEvidence(60, ExperienceLevel.ELITE).to_anchor()
        beginner = LabEvidence(60, ExperienceLevel.BEGINNER).to_anchor()

        assert elite.vdot == 60
        assert beginner.vdot == 57
        assert elite.marathon_kmh > beginner.marathon_kmh

    def test_lab_out_of_range(self):
        with pytest.raises(InvalidInputError):
            LabEvidence(150, INTERMEDIATE).to_anchor()

    def test_field_test_tier(self):
        """Measured threshold is kept; marathon pace is derived from it."""
        anchor = FieldTestEvidence(15.0, INTERMEDIATE).to_anchor()

        assert anchor.data_source == DataSource.FIELD_TEST
        assert anchor.confidence == Confidence.HIGH
        assert anchor.threshold_kmh == 15.0
        assert anchor.marathon_kmh == pytest.approx(15.0 / 1.048)

    def test_field_test_out_of_range(self):
        with pytest.raises(InvalidInputError):
            FieldTestEvidence(45.0, INTERMEDIATE).to_anchor()

    @pytest.mark.parametrize("distance,time,confidence", [
        ("5K", "20:00", Confidence.MEDIUM),
        ("10K", "42:30", Confidence.MEDIUM),
        ("half", "1:30:00", Confidence.HIGH),
        ("marathon", "3:10:00", Confidence.HIGH),
    ])
    def test_race_tier_confidence(self, distance, time, confidence):
        """Long races predict marathon pace with more confidence."""
        anchor = RaceEvidence(distance, time, INTERMEDIATE).to_anchor()

        assert anchor.data_source == DataSource.RACE_TIME
        assert anchor.confidence == confidence
        assert anchor.vdot is not None
        assert anchor.daniels.marathon_kmh == anchor.marathon_kmh

    def test_race_unknown_distance(self):
        with pytest.raises(UnknownDistanceError):
            RaceEvidence("ultra", "5:00:00", INTERMEDIATE).to_anchor()

    def test_race_bad_time(self):
        with pytest.raises(InvalidInputError):
            RaceEvidence("10K", "soon", INTERMEDIATE).to_anchor()

    @pytest.mark.parametrize("level,volume,expected", [
        (ExperienceLevel.BEGINNER, None, 9.0),
        (ExperienceLevel.INTERMEDIATE, None, 11.0),
        (ExperienceLevel.ADVANCED, 30, 13.0),
        (ExperienceLevel.ELITE, None, 15.0),
        (ExperienceLevel.INTERMEDIATE, 45, 11.5),
        (ExperienceLevel.INTERMEDIATE, 70, 12.0),
        (ExperienceLevel.INTERMEDIATE, 10, 10.5),
    ])
    def test_heuristic_tier(self, level, volume, expected):
        """Experience level plus a weekly-volume nudge."""
        anchor = HeuristicEvidence(level, volume).to_anchor()

        assert anchor.data_source == DataSource.ESTIMATE
        assert anchor.confidence == Confidence.LOW
        assert anchor.marathon_kmh == expected


class TestResolveFitnessAnchor:
    """Tier priority and fall-through."""

    def test_collect_order(self):
        profile = PhysiologicalProfile(
            lab_vo2max=55,
            field_test=FieldTestResult(threshold_speed_kmh=15),
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        tiers = [e.source for e in collect_evidence(profile)]

        assert tiers == [DataSource.LAB, DataSource.FIELD_TEST, DataSource.RACE_TIME, DataSource.ESTIMATE]

    def test_highest_tier_wins(self):
        profile = PhysiologicalProfile(
            lab_vo2max=55,
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        assert resolve_fitness_anchor(profile).data_source == DataSource.LAB

    def test_invalid_lab_falls_through_to_race(self):
        """Rejected tier is skipped with a warning and a trace step."""
        profile = PhysiologicalProfile(
            lab_vo2max=150,
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        trace = GenerationTrace()
        warnings = []

        anchor = resolve_fitness_anchor(profile, trace=trace, warnings=warnings)

        assert anchor.data_source == DataSource.RACE_TIME
        assert len(warnings) == 1
        assert warnings[0].startswith("LAB evidence rejected")
        steps = trace.for_stage("evidence")
        assert len(steps) == 2
        assert steps[0].data["error_code"] == "INVALID_INPUT_LAB_VO2MAX"
        assert steps[1].data["tier"] == "RACE_TIME"

    def test_everything_invalid_falls_to_heuristic(self):
        profile = PhysiologicalProfile(
            lab_vo2max=5,
            field_test=FieldTestResult(threshold_speed_kmh=2),
            race_result=RaceResult(distance="ultra", time="5:00:00"),
            experience_level="advanced",
        )
        warnings = []

        anchor = resolve_fitness_anchor(profile, warnings=warnings)

        assert anchor.data_source == DataSource.ESTIMATE
        assert anchor.marathon_kmh == 13.0
        assert len(warnings) == 3
        assert "Unrecognized race distance: ultra" in warnings[2]

    def test_empty_profile(self):
        anchor = resolve_fitness_anchor(PhysiologicalProfile())

        assert anchor.data_source == DataSource.ESTIMATE
        assert anchor.experience_level == ExperienceLevel.INTERMEDIATE

    def test_experience_level_case_insensitive(self):
        profile = PhysiologicalProfile(experience_level="ELITE")
        assert profile.experience_level == ExperienceLevel.ELITE

    def test_scaled_anchor_keeps_threshold_ratio(self):
        anchor = FieldTestEvidence(15.0, INTERMEDIATE).to_anchor()
        scaled = anchor.scaled_to(anchor.marathon_kmh * 1.1)

        assert scaled.threshold_kmh == pytest.approx(16.5)
        assert scaled.data_source == DataSource.FIELD_TEST
        assert anchor.scaled_to(anchor.marathon_kmh) is anchor


class TestHeartRateZones:
    """Zones from a measured threshold heart rate."""

    def test_zone_bounds(self):
        zones = build_heart_rate_zones(172)

        assert [(z.min_bpm, z.max_bpm) for z in zones] == [
            (129, 146), (146, 155), (155, 163), (163, 172), (172, 182),
        ]
        assert [z.name for z in zones] == ["Recovery", "Aerobic", "Tempo", "Threshold", "VO2max"]

    def test_zones_contiguous(self):
        zones = build_heart_rate_zones(165)
        for lower, upper in zip(zones, zones[1:]):
            assert lower.max_bpm == upper.min_bpm

    def test_field_test_carries_zones(self):
        anchor = FieldTestEvidence(15.0, INTERMEDIATE, threshold_heart_rate=172).to_anchor()

        assert len(anchor.heart_rate_zones) == 5
        assert anchor.heart_rate_zones[3].max_bpm == 172

    def test_no_heart_rate_no_zones(self):
        assert FieldTestEvidence(15.0, INTERMEDIATE).to_anchor().heart_rate_zones == ()

    def test_zones_reach_pace_set(self, field_test_profile):
        data = resolve_pace_set(field_test_profile, Methodology.POLARIZED).to_dict()

        assert data["heart_rate_zones"][3] == {"zone": 4, "name": "Threshold", "min_bpm": 163, "max_bpm": 172}

    @pytest.mark.parametrize("kwargs,field", [
        ({"threshold_heart_rate": 60}, "THRESHOLD_HEART_RATE"),
        ({"threshold_heart_rate": 250}, "THRESHOLD_HEART_RATE"),
        ({"lactate_mmol": 0.2}, "LACTATE_MMOL"),
        ({"lactate_mmol": 25.0}, "LACTATE_MMOL"),
    ])
    def test_implausible_measurements(self, kwargs, field):
        with pytest.raises(InvalidInputError) as exc:
            FieldTestEvidence(15.0, INTERMEDIATE, **kwargs).to_anchor()
        assert exc.value.error_code == f"INVALID_INPUT_{field}"

    def test_bad_heart_rate_falls_through(self):
        profile = PhysiologicalProfile(
            field_test=FieldTestResult(threshold_speed_kmh=15.0, threshold_heart_rate=300),
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        warnings = []

        anchor = resolve_fitness_anchor(profile, warnings=warnings)

        assert anchor.data_source == DataSource.RACE_TIME
        assert warnings[0].startswith("FIELD_TEST evidence rejected: Threshold heart rate 300")

    def test_lactate_in_trace(self):
        profile = PhysiologicalProfile(field_test=FieldTestResult(threshold_speed_kmh=15.0, lactate_mmol=4.0))
        trace = GenerationTrace()

        resolve_fitness_anchor(profile, trace=trace)

        assert trace.for_stage("evidence")[-1].data["lactate_mmol"] == 4.0


class TestConsistency:
    """Lower measured tiers are checked against the chosen anchor."""

    def test_agreeing_tiers(self):
        """Field test at 15 km/h and a 42:30 10K agree within 15%."""
        profile = PhysiologicalProfile(
            field_test=FieldTestResult(threshold_speed_kmh=15.0),
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        trace = GenerationTrace()
        warnings = []

        anchor = resolve_fitness_anchor(profile, trace=trace, warnings=warnings)

        assert anchor.data_source == DataSource.FIELD_TEST
        assert warnings == []
        step = trace.for_stage("consistency")[0]
        assert step.data["consistent"] is True
        assert step.data["mismatch_pct"] < 15

    def test_disagreeing_tiers_warn(self):
        profile = PhysiologicalProfile(
            field_test=FieldTestResult(threshold_speed_kmh=18.0),
            race_result=RaceResult(distance="10K", time="42:30"),
        )
        warnings = []

        anchor = resolve_fitness_anchor(profile, warnings=warnings)

        assert anchor.data_source == DataSource.FIELD_TEST
        assert anchor.threshold_kmh == 18.0
        assert len(warnings) == 1
        assert warnings[0].startswith("FIELD_TEST and RACE_TIME evidence disagree")

    def test_heuristic_not_compared(self, race_profile):
        trace = GenerationTrace()
        resolve_fitness_anchor(race_profile, trace=trace)

        assert trace.for_stage("consistency") == []

    def test_invalid_lower_tier_skipped(self):
        anchor = FieldTestEvidence(15.0, INTERMEDIATE).to_anchor()
        lower = [RaceEvidence("ultra", "5:00:00", INTERMEDIATE), HeuristicEvidence(INTERMEDIATE)]

        assert check_consistency(anchor, lower) == []

    def test_returns_mismatch(self):
        anchor = FieldTestEvidence(15.0, INTERMEDIATE).to_anchor()
        other = FieldTestEvidence(15.0 * 1.2, INTERMEDIATE)
        warnings = []

        mismatches = check_consistency(anchor, [other], warnings=warnings)

        assert mismatches == [pytest.approx(20.0)]
        assert len(warnings) == 1


class TestPaceResolver:
    """Methodology pace sets built from the anchor."""

    def test_polarized_ordering(self, race_profile):
        """easy < marathon <= threshold < interval < repetition."""
        paces = resolve_pace_set(race_profile, Methodology.POLARIZED)

        assert paces.easy_kmh < paces.marathon_kmh <= paces.threshold_kmh
        assert paces.threshold_kmh < paces.interval_kmh < paces.repetition_kmh
        assert pace_set_problems(paces) == []

    @pytest.mark.parametrize("profile_fixture", ["race_profile", "field_test_profile", "heuristic_profile"])
    @pytest.mark.parametrize("methodology", list(Methodology))
    def test_every_pace_positive(self, request, profile_fixture, methodology):
        paces = resolve_pace_set(request.getfixturevalue(profile_fixture), methodology)

        assert paces.methodology == methodology
        assert all(v > 0 for v in paces.all_paces().values())

    def test_source_and_confidence_disclosed(self, field_test_profile):
        paces = resolve_pace_set(field_test_profile, Methodology.POLARIZED)

        assert paces.data_source == DataSource.FIELD_TEST
        assert paces.confidence == Confidence.HIGH
        assert paces.threshold_kmh == 15.0

    def test_polarized_zones(self, heuristic_profile):
        paces = resolve_pace_set(heuristic_profile, Methodology.POLARIZED)

        assert paces.easy_kmh == pytest.approx(11.5 * 0.85)
        assert paces.threshold_kmh == pytest.approx(11.5 * 1.05)
        assert paces.interval_kmh == pytest.approx(11.5 * 1.19)
        assert set(paces.zones) == {"zone1", "zone2", "zone3"}

    def test_pyramidal_tempo_is_threshold(self, race_profile):
        paces = resolve_pace_set(race_profile, Methodology.PYRAMIDAL)
        assert paces.zone("tempo") == paces.threshold_kmh

    def test_norwegian_single_zones(self, field_test_profile):
        paces = resolve_pace_set(field_test_profile, Methodology.NORWEGIAN_SINGLE)

        assert paces.zone("sub_threshold") == pytest.approx(15.0 * 0.97)
        assert paces.easy_kmh == pytest.approx(paces.marathon_kmh * 0.78)

    def test_norwegian_doubles_zones(self, field_test_profile):
        paces = resolve_pace_set(field_test_profile, Methodology.NORWEGIAN_DOUBLES)

        assert paces.zone("am_threshold") == pytest.approx(15.0 * 0.94)
        assert paces.zone("pm_threshold") == pytest.approx(15.0 * 0.97)
        assert paces.zone("hill") == 16.0

    def test_canova_zones(self, heuristic_profile):
        """Canova paces are percentages of marathon pace."""
        paces = resolve_pace_set(heuristic_profile, Methodology.CANOVA)
        mp = paces.marathon_kmh

        assert paces.zone("fundamental") == pytest.approx(mp * 0.80)
        assert paces.zone("active_recovery") == pytest.approx(mp * 0.875)
        assert paces.zone("special_speed") == pytest.approx(mp * 1.075)
        assert paces.threshold_kmh == pytest.approx(mp / 0.85)

    def test_canova_compression_by_level(self):
        elite = resolve_pace_set(PhysiologicalProfile(experience_level="elite"), Methodology.CANOVA)
        assert elite.threshold_kmh == pytest.approx(15.0 / 0.96)

    def test_canova_set_not_order_checked(self, heuristic_profile):
        """Canova interval pace sits below threshold and that is accepted."""
        paces = resolve_pace_set(heuristic_profile, Methodology.CANOVA)

        assert paces.interval_kmh < paces.threshold_kmh
        assert pace_set_problems(paces) == []

    def test_disordered_polarized_set_rejected(self, race_profile):
        paces = resolve_pace_set(race_profile, Methodology.POLARIZED)
        broken = MethodologyPaceSet(
            methodology=Methodology.POLARIZED,
            data_source=paces.data_source,
            confidence=paces.confidence,
            marathon_kmh=paces.marathon_kmh,
            easy_kmh=paces.marathon_kmh + 1,
            threshold_kmh=paces.threshold_kmh,
            interval_kmh=paces.interval_kmh,
            repetition_kmh=paces.repetition_kmh,
        )

        problems = pace_set_problems(broken)
        assert len(problems) == 1
        assert problems[0].startswith("easy pace")

    def test_for_anchor_uses_strategy(self):
        anchor = HeuristicEvidence(INTERMEDIATE).to_anchor()
        paces = resolve_pace_set_for_anchor(anchor, Methodology.POLARIZED)

        assert paces.marathon_kmh == 11.0
        assert isinstance(paces, MethodologyPaceSet)

    def test_to_dict(self, race_profile):
        data = resolve_pace_set(race_profile, Methodology.CANOVA).to_dict()

        assert data["methodology"] == "CANOVA"
        assert data["data_source"] == "RACE_TIME"
        assert "special_speed" in data["paces_kmh"]
