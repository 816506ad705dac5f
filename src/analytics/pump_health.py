"""
src/analytics/pump_health.py
────────────────────────────
Pump health tiering and siltation inference.

Capacity % = current / rated discharge (rated 0 is floored to 1).

Siltation is suspected only when motor torque is RISING *and* discharge is
FALLING; either trend alone is not enough.

Tier:
  capacity < 60 or siltation → red (maintenance required)
  capacity < 70              → yellow
  otherwise                  → green
A FAULT status overrides the recommendation message regardless of tier.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from config.thresholds import PUMP_THRESHOLDS, PumpHealthThresholds
from src.data.models import (
    DischargeTrend,
    HealthTier,
    PumpFleetSummary,
    PumpHealth,
    PumpState,
    PumpStatus,
    SiltationCheck,
    TorqueTrend,
    round_half_up,
)

logger = logging.getLogger(__name__)


def capacity_percent(rated_discharge: float, current_discharge: float) -> int:
    if rated_discharge <= 0:
        logger.warning("Rated discharge %.2f is not positive; using 1 m³/h", rated_discharge)
        rated_discharge = 1.0
    return round_half_up(current_discharge / rated_discharge * 100.0)


def is_siltation_suspected(torque_trend: TorqueTrend, discharge_trend: DischargeTrend) -> bool:
    return torque_trend == TorqueTrend.RISING and discharge_trend == DischargeTrend.FALLING


def check_siltation(torque_trend: TorqueTrend, discharge_trend: DischargeTrend) -> SiltationCheck:
    if is_siltation_suspected(torque_trend, discharge_trend):
        return SiltationCheck(
            detected=True,
            message="Siltation suspected - desilting required",
            recommendation="Deploy vacuum truck or manual cleaning",
        )
    return SiltationCheck(detected=False, message="No siltation detected")


def health_tier(
    capacity_pct: float,
    siltation: bool,
    thr: PumpHealthThresholds = PUMP_THRESHOLDS,
) -> HealthTier:
    if capacity_pct < thr.red_below or siltation:
        return HealthTier.RED
    if capacity_pct < thr.green_from:
        return HealthTier.YELLOW
    return HealthTier.GREEN


def health_message(
    status: PumpStatus,
    capacity_pct: float,
    siltation: bool,
    thr: PumpHealthThresholds = PUMP_THRESHOLDS,
) -> str:
    if status == PumpStatus.FAULT:
        return "FAULT: Pump malfunction - immediate attention required"
    if siltation:
        return "ALERT: Siltation detected - desilting required"
    if capacity_pct < thr.red_below:
        return "CRITICAL: Maintenance urgently required"
    if capacity_pct < thr.green_from:
        return "WARNING: Performance degrading, schedule maintenance"
    return "HEALTHY: Pump operating normally"


def evaluate_pump_health(
    rated_discharge: float,
    current_discharge: float,
    torque_trend: TorqueTrend = TorqueTrend.NORMAL,
    discharge_trend: DischargeTrend = DischargeTrend.NORMAL,
    status: PumpStatus = PumpStatus.RUNNING,
    pump_id: str | None = None,
) -> PumpHealth:
    pct = capacity_percent(rated_discharge, current_discharge)
    siltation = check_siltation(torque_trend, discharge_trend)
    tier = health_tier(pct, siltation.detected)

    return PumpHealth(
        pump_id=pump_id,
        status=status,
        health=tier,
        capacity_percent=pct,
        rated_discharge=rated_discharge,
        current_discharge=current_discharge,
        capacity_loss=rated_discharge - current_discharge,
        siltation_suspected=siltation.detected,
        maintenance_required=tier == HealthTier.RED,
        message=health_message(status, pct, siltation.detected),
        siltation=siltation,
    )


def evaluate_pump(pump: PumpState) -> PumpHealth:
    """Health evaluation for a validated PumpState."""
    return evaluate_pump_health(
        pump.rated_discharge,
        pump.current_discharge,
        torque_trend=pump.torque_trend,
        discharge_trend=pump.discharge_trend,
        status=pump.status,
        pump_id=pump.pump_id,
    )


def summarize_pump_fleet(pumps: Iterable[PumpState]) -> PumpFleetSummary:
    """Counts by operating status and health tier across a set of pumps."""
    summary = PumpFleetSummary()
    for pump in pumps:
        result = evaluate_pump(pump)
        summary.total_pumps += 1
        if pump.status == PumpStatus.RUNNING:
            summary.running_pumps += 1
            summary.total_active_discharge += pump.current_discharge
        elif pump.status == PumpStatus.STOPPED:
            summary.stopped_pumps += 1
        else:
            summary.fault_pumps += 1

        if result.health == HealthTier.GREEN:
            summary.healthy += 1
        elif result.health == HealthTier.YELLOW:
            summary.warning += 1
        else:
            summary.critical += 1

        if result.siltation_suspected:
            summary.siltation_issues += 1
    return summary
