"""
src/analytics/road_condition.py
───────────────────────────────
Haul-road condition assessment.

Drainage (cross-fall deficiency = max(0, required − current)):
  0     → safe
  ≤ 1   → moderate  (water will pond, schedule regrading)
  > 1   → severe    (regrade immediately)

Condition tier:
  CRITICAL  any HIGH-confidence CRITICAL site, or severe drainage
  SOFT      any HIGH-confidence SOFT site, the soft-spot flag, or moderate drainage
  GOOD      otherwise

LOW-confidence (single-truck) sites only mark the road as awaiting
confirmation; they never force CRITICAL on their own.

Also provides the repair actions (clear one coordinate / clear all), the
evaluations returned when one report or a batch of reports is submitted,
and the cross-road warnings board.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from config.alerts import MAX_WARNING_LOCATIONS
from config.settings import settings
from config.thresholds import DRAINAGE_THRESHOLDS, DrainageThresholds
from src.analytics.slowdown import classify_report
from src.analytics.soft_spots import aggregate_soft_spots, confirmed_sites, find_matching_site
from src.data.models import (
    BatchReportResult,
    BatchResult,
    Confidence,
    DrainageAssessment,
    DrainageRisk,
    RepairResult,
    RiskLevel,
    RoadAssessment,
    RoadCondition,
    RoadState,
    RoadWarning,
    RoadWarningBoard,
    SlowdownSeverity,
    SoftSpotSite,
    SubmissionResult,
    TruckReport,
    WarningLocation,
)
from src.data.reports import remove_reports_near

logger = logging.getLogger(__name__)


# ── Drainage ──────────────────────────────────────────────────────────────────


def drainage_risk(deficiency: float, thr: DrainageThresholds = DRAINAGE_THRESHOLDS) -> DrainageRisk:
    if deficiency <= 0:
        return DrainageRisk.SAFE
    if deficiency <= thr.moderate_max_deficiency:
        return DrainageRisk.MODERATE
    return DrainageRisk.SEVERE


def assess_drainage(road: RoadState) -> DrainageAssessment:
    deficiency = road.cross_fall_deficiency
    risk = drainage_risk(deficiency)

    if risk == DrainageRisk.SAFE:
        message, action = "Road drainage is adequate", "None required"
    elif risk == DrainageRisk.MODERATE:
        message = f"Water will pond - deficiency: {deficiency:.1f}°"
        action = "Schedule regrading before next rainfall"
    else:
        message = f"Significant drainage problem - deficiency: {deficiency:.1f}°"
        action = "URGENT: Regrading required immediately"

    return DrainageAssessment(
        risk=risk,
        deficiency=deficiency,
        message=message,
        action=action,
        requires_regrading=risk != DrainageRisk.SAFE,
    )


# ── Condition tier ────────────────────────────────────────────────────────────


def condition_tier(
    sites: Iterable[SoftSpotSite],
    drainage: DrainageRisk,
    soft_spot_detected: bool = False,
) -> RoadCondition:
    confirmed = confirmed_sites(sites)
    if drainage == DrainageRisk.SEVERE or any(s.severity == SlowdownSeverity.CRITICAL for s in confirmed):
        return RoadCondition.CRITICAL
    if confirmed or soft_spot_detected or drainage == DrainageRisk.MODERATE:
        return RoadCondition.SOFT
    return RoadCondition.GOOD


def overall_risk(
    drainage: DrainageRisk,
    soft_spot_detected: bool,
    water_level_cm: float,
    thr: DrainageThresholds = DRAINAGE_THRESHOLDS,
) -> RiskLevel:
    factors = [
        drainage == DrainageRisk.SEVERE,
        soft_spot_detected,
        water_level_cm > thr.standing_water_cm,
    ]
    count = sum(factors)
    if count == 0:
        return RiskLevel.LOW
    if count == 1:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


def assess_road(road: RoadState, sites: list[SoftSpotSite]) -> RoadAssessment:
    """Merge drainage state and the current soft-spot aggregate into a road tier."""
    drainage = assess_drainage(road)
    condition = condition_tier(sites, drainage.risk, road.soft_spot_detected)
    high = len(confirmed_sites(sites))

    logger.debug("Road %s assessed %s (%d sites, %d confirmed)", road.road_id, condition.value, len(sites), high)

    return RoadAssessment(
        road_id=road.road_id,
        condition=condition,
        drainage=drainage,
        soft_spot_detected=road.soft_spot_detected,
        awaiting_confirmation=any(s.confidence == Confidence.LOW for s in sites),
        site_count=len(sites),
        high_confidence_sites=high,
        maintenance_required=drainage.requires_regrading or road.soft_spot_detected,
        overall_risk=overall_risk(drainage.risk, road.soft_spot_detected, road.water_level_cm),
        sites=sites,
    )


def apply_assessment(road: RoadState, assessment: RoadAssessment) -> RoadState:
    """Copy of `road` carrying the derived fields the store persists."""
    return road.model_copy(
        update={
            "condition": assessment.condition,
            "drainage_risk": assessment.drainage.risk,
            "soft_spot_detected": assessment.soft_spot_detected,
        }
    )


# ── Report submission ─────────────────────────────────────────────────────────


def evaluate_submission(
    road: RoadState,
    report: TruckReport,
    road_reports: list[TruckReport],
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> SubmissionResult:
    """
    Outcome of a newly stored truck report.

    Args:
        road: Road the report belongs to
        report: The report just persisted
        road_reports: Every live report for the road, including `report`

    Returns:
        SubmissionResult with the operator message and the updated road
    """
    classification = classify_report(report)
    sites = aggregate_soft_spots(road_reports, tolerance_m)
    matching = find_matching_site(sites, report.x_m, report.y_m, tolerance_m)

    detected = classification.severity != SlowdownSeverity.NONE
    if detected:
        road = road.model_copy(update={"soft_spot_detected": True})
    updated = apply_assessment(road, assess_road(road, sites))

    confidence = Confidence.LOW
    trucks_confirmed = None
    note = None

    if not detected:
        message = "No issue detected"
    elif matching is not None and matching.is_confirmed:
        confidence = Confidence.HIGH
        trucks_confirmed = matching.unique_trucks
        if matching.severity == SlowdownSeverity.CRITICAL or classification.severity == SlowdownSeverity.CRITICAL:
            message = (
                "CRITICAL SPOT CONFIRMED: Multiple trucks confirmed, at least one with ≥50% speed drop"
            )
        else:
            message = "SOFT SPOT CONFIRMED: Multiple trucks reported slowdown at this location"
    else:
        if classification.severity == SlowdownSeverity.CRITICAL:
            message = "CRITICAL SLOWDOWN RECORDED: Speed drop ≥50% - awaiting 2nd truck confirmation"
        else:
            message = "SOFT SPOT DETECTED: Speed drop ≥30% recorded"
        note = "Will be confirmed when another truck reports slowdown at this location"

    return SubmissionResult(
        speed_drop_percent=classification.speed_drop_percent,
        severity=classification.severity,
        soft_spot_detected=detected,
        confidence=confidence,
        message=message,
        note=note,
        trucks_confirmed=trucks_confirmed,
        road=updated,
        confirmed_sites=confirmed_sites(sites),
    )


def evaluate_batch(
    road: RoadState,
    new_reports: list[TruckReport],
    road_reports: list[TruckReport],
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> BatchResult:
    """
    Outcome of a batch of stored reports (offline sync from a truck).

    The road is re-aggregated once after the whole batch. The soft-spot
    flag is raised only when a site is confirmed by two trucks; a batch of
    single-truck slowdowns leaves it as it was.

    Args:
        road: Road the reports belong to
        new_reports: The reports just persisted
        road_reports: Every live report for the road, including `new_reports`
    """
    results = []
    for report in new_reports:
        classification = classify_report(report)
        if classification.severity != SlowdownSeverity.NONE:
            results.append(
                BatchReportResult(
                    truck_id=report.truck_id,
                    severity=classification.severity,
                    speed_drop_percent=classification.speed_drop_percent,
                )
            )

    sites = aggregate_soft_spots(road_reports, tolerance_m)
    confirmed = confirmed_sites(sites)
    if confirmed:
        road = road.model_copy(update={"soft_spot_detected": True})
    assessment = assess_road(road, sites)

    logger.debug(
        "Batch of %d reports on road %s: %d slowdowns, %d confirmed sites",
        len(new_reports),
        road.road_id,
        len(results),
        len(confirmed),
    )

    return BatchResult(
        processed=len(new_reports),
        slowdowns_detected=len(results),
        high_confidence_sites=len(confirmed),
        road=apply_assessment(road, assessment),
        assessment=assessment,
        results=results,
        message=f"{len(new_reports)} telemetry readings processed",
    )


# ── Repair actions ────────────────────────────────────────────────────────────


def clear_soft_spot(
    road: RoadState,
    road_reports: list[TruckReport],
    x: float,
    y: float,
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> RepairResult:
    """Mark the spot at (x, y) repaired and re-derive the road from what is left."""
    kept, removed = remove_reports_near(road_reports, x, y, tolerance_m)
    sites = aggregate_soft_spots(kept, tolerance_m)

    road = road.model_copy(update={"soft_spot_detected": any(s.is_confirmed for s in sites)})
    assessment = assess_road(road, sites)

    logger.info("Cleared %d reports at (%.1f, %.1f) on road %s", len(removed), x, y, road.road_id)

    return RepairResult(
        road=apply_assessment(road, assessment),
        assessment=assessment,
        removed_reports=len(removed),
        remaining_reports=kept,
        message=f"Soft spot at ({x:g}m, {y:g}m) marked as repaired.",
    )


def clear_all_soft_spots(road: RoadState, road_reports: list[TruckReport]) -> RepairResult:
    """Mark the whole road repaired: every report goes and the road returns to GOOD."""
    drainage = assess_drainage(road)
    road = road.model_copy(
        update={
            "soft_spot_detected": False,
            "condition": RoadCondition.GOOD,
            "drainage_risk": drainage.risk,
        }
    )
    assessment = RoadAssessment(
        road_id=road.road_id,
        condition=RoadCondition.GOOD,
        drainage=drainage,
        soft_spot_detected=False,
        awaiting_confirmation=False,
        site_count=0,
        high_confidence_sites=0,
        maintenance_required=drainage.requires_regrading,
        overall_risk=overall_risk(drainage.risk, False, road.water_level_cm),
    )

    logger.info("Cleared all %d reports on road %s", len(road_reports), road.road_id)

    return RepairResult(
        road=road,
        assessment=assessment,
        removed_reports=len(road_reports),
        message="Road marked as repaired. All soft spots cleared.",
    )


# ── Warnings board ────────────────────────────────────────────────────────────


def _warning_location(site: SoftSpotSite) -> WarningLocation:
    return WarningLocation(
        x_m=site.location.x_m,
        y_m=site.location.y_m,
        severity=site.severity,
        confidence=site.confidence,
        detection_count=site.detection_count,
        detected_by_trucks=site.detected_by_trucks,
    )


def road_warning(road: RoadState, sites: list[SoftSpotSite]) -> RoadWarning | None:
    """Warning for one road, or None when no site is confirmed by two trucks."""
    confirmed = confirmed_sites(sites)
    critical = [s for s in confirmed if s.severity == SlowdownSeverity.CRITICAL]
    soft = [s for s in confirmed if s.severity == SlowdownSeverity.SOFT]
    if not critical and not soft:
        return None

    name = road.display_name
    if critical:
        level = "critical"
        message = f"CRITICAL: {len(critical)} critical spot(s) at {name} - immediate repair required"
        recommendation = "Restrict heavy traffic. Deploy maintenance crew immediately."
    else:
        level = "warning"
        message = f"SOFT SPOTS: {len(soft)} confirmed spot(s) at {name} - schedule maintenance"
        recommendation = "Monitor closely. Plan maintenance before conditions worsen."

    return RoadWarning(
        road_id=road.road_id,
        road_name=name,
        priority=road.priority,
        condition=road.condition,
        warning_level=level,
        soft_spot_count=len(critical) + len(soft),
        critical_count=len(critical),
        soft_count=len(soft),
        top_locations=[_warning_location(s) for s in (critical + soft)[:MAX_WARNING_LOCATIONS]],
        message=message,
        recommendation=recommendation,
    )


def build_warning_board(roads: Iterable[tuple[RoadState, list[SoftSpotSite]]]) -> RoadWarningBoard:
    """Dashboard list of roads with confirmed soft spots, critical roads first."""
    total = 0
    warnings: list[RoadWarning] = []
    for road, sites in roads:
        total += 1
        warning = road_warning(road, sites)
        if warning is not None:
            warnings.append(warning)

    warnings.sort(key=lambda w: (w.warning_level != "critical", -w.critical_count))
    return RoadWarningBoard(total_roads=total, roads_with_warnings=len(warnings), warnings=warnings)
