"""
tests/test_road_condition.py
────────────────────────────
Tests for drainage risk, road condition tiering, report and batch submission,
repair actions and the warnings board.
"""
import pytest

from src.analytics.road_condition import (
    assess_drainage,
    assess_road,
    build_warning_board,
    clear_all_soft_spots,
    clear_soft_spot,
    condition_tier,
    drainage_risk,
    evaluate_batch,
    evaluate_submission,
    overall_risk,
    road_warning,
)
from src.analytics.soft_spots import aggregate_soft_spots
from src.data.models import (
    Confidence,
    DrainageRisk,
    RiskLevel,
    RoadCondition,
    RoadState,
    SlowdownSeverity,
)


class TestDrainage:
    def test_no_deficiency_is_safe(self):
        assert drainage_risk(0.0) == DrainageRisk.SAFE

    def test_one_degree_is_moderate(self):
        assert drainage_risk(1.0) == DrainageRisk.MODERATE

    def test_just_over_one_degree_is_severe(self):
        assert drainage_risk(1.0001) == DrainageRisk.SEVERE

    def test_moderate_assessment(self):
        road = RoadState(road_id="R1", required_cross_fall=3.0, current_cross_fall=2.0)
        result = assess_drainage(road)
        assert result.risk == DrainageRisk.MODERATE
        assert result.message == "Water will pond - deficiency: 1.0°"
        assert result.action == "Schedule regrading before next rainfall"
        assert result.requires_regrading is True

    def test_severe_assessment(self):
        road = RoadState(road_id="R1", required_cross_fall=3.0, current_cross_fall=0.5)
        result = assess_drainage(road)
        assert result.risk == DrainageRisk.SEVERE
        assert result.message == "Significant drainage problem - deficiency: 2.5°"
        assert result.action == "URGENT: Regrading required immediately"

    def test_safe_assessment(self, sample_road):
        result = assess_drainage(sample_road)
        assert result.message == "Road drainage is adequate"
        assert result.action == "None required"
        assert result.requires_regrading is False


class TestConditionTier:
    def test_clean_road_is_good(self):
        assert condition_tier([], DrainageRisk.SAFE) == RoadCondition.GOOD

    def test_severe_drainage_is_critical(self):
        assert condition_tier([], DrainageRisk.SEVERE) == RoadCondition.CRITICAL

    def test_moderate_drainage_is_soft(self):
        assert condition_tier([], DrainageRisk.MODERATE) == RoadCondition.SOFT

    def test_flag_alone_is_soft(self):
        assert condition_tier([], DrainageRisk.SAFE, soft_spot_detected=True) == RoadCondition.SOFT

    def test_unconfirmed_critical_site_does_not_force_critical(self, make_report):
        sites = aggregate_soft_spots([make_report("T-01", average=30.0, current=10.0)])
        assert condition_tier(sites, DrainageRisk.SAFE) == RoadCondition.GOOD

    def test_confirmed_critical_site_is_critical(self, make_report):
        sites = aggregate_soft_spots([make_report("T-01"), make_report("T-02", minutes=1)])
        assert condition_tier(sites, DrainageRisk.SAFE) == RoadCondition.CRITICAL

    def test_confirmed_soft_site_is_soft(self, make_report):
        sites = aggregate_soft_spots(
            [make_report("T-01", current=20.0), make_report("T-02", current=20.0, minutes=1)]
        )
        assert condition_tier(sites, DrainageRisk.SAFE) == RoadCondition.SOFT


class TestOverallRisk:
    def test_no_factors_is_low(self):
        assert overall_risk(DrainageRisk.SAFE, False, 0.0) == RiskLevel.LOW

    def test_one_factor_is_medium(self):
        assert overall_risk(DrainageRisk.SAFE, False, 12.0) == RiskLevel.MEDIUM

    def test_two_factors_is_high(self):
        assert overall_risk(DrainageRisk.SEVERE, True, 0.0) == RiskLevel.HIGH

    def test_water_at_threshold_not_counted(self):
        assert overall_risk(DrainageRisk.SAFE, False, 10.0) == RiskLevel.LOW


class TestAssessRoad:
    def test_awaiting_confirmation(self, sample_road, make_report):
        sites = aggregate_soft_spots([make_report("T-01")])
        result = assess_road(sample_road, sites)
        assert result.awaiting_confirmation is True
        assert result.site_count == 1
        assert result.high_confidence_sites == 0

    def test_maintenance_follows_regrading(self):
        road = RoadState(road_id="R1", required_cross_fall=3.0, current_cross_fall=2.5)
        assert assess_road(road, []).maintenance_required is True


class TestEvaluateSubmission:
    def test_single_critical_report_awaits_confirmation(self, sample_road, make_report):
        report = make_report("T-01", average=30.0, current=15.0)
        result = evaluate_submission(sample_road, report, [report])
        assert result.severity == SlowdownSeverity.CRITICAL
        assert result.confidence == Confidence.LOW
        assert result.soft_spot_detected is True
        assert result.message.startswith("CRITICAL SLOWDOWN RECORDED")
        assert result.note == "Will be confirmed when another truck reports slowdown at this location"
        assert result.road.soft_spot_detected is True
        assert result.road.condition == RoadCondition.SOFT
        assert result.confirmed_sites == []

    def test_single_soft_report(self, sample_road, make_report):
        report = make_report("T-01", average=30.0, current=20.0)
        result = evaluate_submission(sample_road, report, [report])
        assert result.message == "SOFT SPOT DETECTED: Speed drop ≥30% recorded"

    def test_second_truck_confirms_critical(self, sample_road, make_report):
        first = make_report("T-01", average=30.0, current=15.0, minutes=0)
        second = make_report("T-02", average=30.0, current=20.0, x=102.0, y=203.0, minutes=5)
        result = evaluate_submission(sample_road, second, [first, second])
        assert result.confidence == Confidence.HIGH
        assert result.trucks_confirmed == 2
        assert result.message.startswith("CRITICAL SPOT CONFIRMED")
        assert result.note is None
        assert result.road.condition == RoadCondition.CRITICAL
        assert len(result.confirmed_sites) == 1

    def test_second_truck_confirms_soft(self, sample_road, make_report):
        first = make_report("T-01", current=20.0, minutes=0)
        second = make_report("T-02", current=20.0, minutes=5)
        result = evaluate_submission(sample_road, second, [first, second])
        assert result.message == "SOFT SPOT CONFIRMED: Multiple trucks reported slowdown at this location"
        assert result.road.condition == RoadCondition.SOFT

    def test_no_issue(self, sample_road, make_report):
        report = make_report(average=30.0, current=25.0)
        result = evaluate_submission(sample_road, report, [report])
        assert result.severity == SlowdownSeverity.NONE
        assert result.message == "No issue detected"
        assert result.soft_spot_detected is False
        assert result.road.condition == RoadCondition.GOOD


class TestEvaluateBatch:
    def test_batch_confirms_across_trucks(self, sample_road, make_report):
        reports = [
            make_report("T-01", current=15.0, minutes=0),
            make_report("T-02", current=20.0, x=102.0, y=203.0, minutes=1),
            make_report("T-03", current=28.0, x=400.0, y=400.0, minutes=2),
        ]
        result = evaluate_batch(sample_road, reports, reports)
        assert result.processed == 3
        assert result.slowdowns_detected == 2
        assert result.high_confidence_sites == 1
        assert [r.truck_id for r in result.results] == ["T-01", "T-02"]
        assert result.results[0].severity == SlowdownSeverity.CRITICAL
        assert result.road.soft_spot_detected is True
        assert result.road.condition == RoadCondition.CRITICAL
        assert result.message == "3 telemetry readings processed"

    def test_single_truck_batch_leaves_flag(self, sample_road, make_report):
        reports = [make_report("T-01", minutes=0), make_report("T-01", minutes=5)]
        result = evaluate_batch(sample_road, reports, reports)
        assert result.slowdowns_detected == 2
        assert result.high_confidence_sites == 0
        assert result.road.soft_spot_detected is False
        assert result.road.condition == RoadCondition.GOOD
        assert result.assessment.awaiting_confirmation is True

    def test_batch_uses_earlier_reports(self, sample_road, make_report):
        earlier = make_report("T-01", current=20.0, minutes=0)
        new = [make_report("T-02", current=20.0, minutes=30)]
        result = evaluate_batch(sample_road, new, [earlier, *new])
        assert result.processed == 1
        assert result.high_confidence_sites == 1
        assert result.road.condition == RoadCondition.SOFT


class TestRepairActions:
    @pytest.fixture
    def reports(self, make_report):
        return [
            make_report("T-01", x=100.0, y=200.0, minutes=0),
            make_report("T-02", x=101.0, y=201.0, minutes=1),
            make_report("T-01", x=300.0, y=400.0, current=20.0, minutes=2),
            make_report("T-03", x=302.0, y=401.0, current=20.0, minutes=3),
        ]

    def test_clear_one_spot(self, sample_road, reports):
        road = sample_road.model_copy(update={"soft_spot_detected": True})
        result = clear_soft_spot(road, reports, 100.0, 200.0)
        assert result.removed_reports == 2
        assert len(result.remaining_reports) == 2
        assert result.message == "Soft spot at (100m, 200m) marked as repaired."
        # the confirmed soft spot at (300, 400) remains
        assert result.road.soft_spot_detected is True
        assert result.road.condition == RoadCondition.SOFT

    def test_clear_last_spot_resets_flag(self, sample_road, make_report):
        road = sample_road.model_copy(update={"soft_spot_detected": True, "condition": RoadCondition.CRITICAL})
        reports = [make_report("T-01"), make_report("T-02", minutes=1)]
        result = clear_soft_spot(road, reports, 100.0, 200.0)
        assert result.road.soft_spot_detected is False
        assert result.road.condition == RoadCondition.GOOD
        assert result.assessment.site_count == 0

    def test_clear_all(self, reports):
        road = RoadState(
            road_id="R1",
            required_cross_fall=3.0,
            current_cross_fall=2.0,
            soft_spot_detected=True,
            condition=RoadCondition.CRITICAL,
        )
        result = clear_all_soft_spots(road, reports)
        assert result.removed_reports == 4
        assert result.remaining_reports == []
        assert result.road.condition == RoadCondition.GOOD
        assert result.road.soft_spot_detected is False
        assert result.road.drainage_risk == DrainageRisk.MODERATE
        assert result.message == "Road marked as repaired. All soft spots cleared."


class TestWarningBoard:
    def test_no_confirmed_sites_no_warning(self, sample_road, make_report):
        sites = aggregate_soft_spots([make_report("T-01")])
        assert road_warning(sample_road, sites) is None

    def test_critical_roads_first(self, make_report):
        soft_road = RoadState(road_id="R-SOFT", name="West Haul")
        critical_road = RoadState(road_id="R-CRIT", name="Ramp 2")
        quiet_road = RoadState(road_id="R-QUIET")

        soft_sites = aggregate_soft_spots(
            [make_report("T-01", current=20.0), make_report("T-02", current=20.0, minutes=1)]
        )
        critical_sites = aggregate_soft_spots([make_report("T-01"), make_report("T-02", minutes=1)])

        board = build_warning_board(
            [(soft_road, soft_sites), (critical_road, critical_sites), (quiet_road, [])]
        )
        assert board.total_roads == 3
        assert board.roads_with_warnings == 2
        assert [w.road_id for w in board.warnings] == ["R-CRIT", "R-SOFT"]

        critical = board.warnings[0]
        assert critical.warning_level == "critical"
        assert critical.message == "CRITICAL: 1 critical spot(s) at Ramp 2 - immediate repair required"
        assert critical.recommendation == "Restrict heavy traffic. Deploy maintenance crew immediately."

        soft = board.warnings[1]
        assert soft.warning_level == "warning"
        assert soft.message == "SOFT SPOTS: 1 confirmed spot(s) at West Haul - schedule maintenance"

    def test_top_locations_capped_and_critical_first(self, sample_road, make_report):
        reports = []
        for i in range(7):
            current = 15.0 if i == 6 else 20.0
            reports.append(make_report("T-01", x=50.0 * i, y=0.0, current=current, minutes=i))
            reports.append(make_report("T-02", x=50.0 * i, y=0.0, current=current, minutes=i + 10))
        warning = road_warning(sample_road, aggregate_soft_spots(reports))
        assert warning.soft_spot_count == 7
        assert warning.critical_count == 1
        assert len(warning.top_locations) == 5
        assert warning.top_locations[0].severity == SlowdownSeverity.CRITICAL
        assert warning.top_locations[0].x_m == 300.0
