"""
src/analytics/flood.py
──────────────────────
Sump flood projection.

  net inflow  = inflow rate − Σ effective discharge of linked pumps  (m³/h)
  net ≤ 0     → safe, pumps keeping up (time to flood = ∞)
  otherwise t = remaining capacity / net inflow  (h)
      t > 24      → safe
      6 < t ≤ 24  → warning
      t ≤ 6       → critical

Also assembles the full sump analysis: volumes, pump health per linked
pump, and which pumps are suspected of siltation.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from config.thresholds import FLOOD_THRESHOLDS, FloodThresholds
from src.analytics.pump_health import evaluate_pump
from src.data.models import (
    FloodProjection,
    FloodStatus,
    PumpState,
    PumpStatus,
    SiltationAlert,
    SumpAnalysis,
    SumpState,
    round_half_up,
)

logger = logging.getLogger(__name__)


def _flood_message(hours: float, thr: FloodThresholds) -> str:
    if hours > thr.safe_hours:
        return "Safe - More than 24 hours buffer"
    if hours > thr.critical_hours:
        return f"Warning - {round_half_up(hours)} hours until critical"
    return f"Critical - {hours:.1f} hours until flood"


def project_flood(
    remaining_capacity: float,
    inflow_rate: float,
    total_pumping_capacity: float,
    thr: FloodThresholds = FLOOD_THRESHOLDS,
) -> FloodProjection:
    """
    Project time until the sump overflows.

    Args:
        remaining_capacity: Free volume left in the sump (m³)
        inflow_rate: Water entering the sump (m³/h)
        total_pumping_capacity: Discharge of all running linked pumps (m³/h)

    Returns:
        FloodProjection with status, hours (∞ when pumps keep up) and net inflow
    """
    net_inflow = inflow_rate - total_pumping_capacity

    if net_inflow <= 0:
        return FloodProjection(
            status=FloodStatus.SAFE,
            time_to_flood_hours=math.inf,
            time_to_flood_minutes=None,
            net_inflow=net_inflow,
            remaining_volume=remaining_capacity,
            message="Pumps are keeping up with inflow",
        )

    hours = remaining_capacity / net_inflow

    if hours > thr.safe_hours:
        status = FloodStatus.SAFE
    elif hours > thr.critical_hours:
        status = FloodStatus.WARNING
    else:
        status = FloodStatus.CRITICAL

    return FloodProjection(
        status=status,
        time_to_flood_hours=hours,
        time_to_flood_minutes=round_half_up(hours * 60.0),
        net_inflow=net_inflow,
        remaining_volume=remaining_capacity,
        message=_flood_message(hours, thr),
    )


def total_pumping_capacity(pumps: Iterable[PumpState]) -> float:
    """Sum of effective discharge; stopped and faulted pumps contribute nothing."""
    return float(sum(p.effective_discharge for p in pumps))


def project_sump(sump: SumpState, pumps: Iterable[PumpState] = ()) -> FloodProjection:
    return project_flood(sump.remaining_capacity, sump.inflow_rate, total_pumping_capacity(pumps))


def analyze_sump(sump: SumpState, pumps: list[PumpState] | None = None) -> SumpAnalysis:
    """Full flood and pump analysis for one sump and its linked pumps."""
    pumps = pumps or []
    pumping = total_pumping_capacity(pumps)
    flood = project_flood(sump.remaining_capacity, sump.inflow_rate, pumping)
    health = [evaluate_pump(p) for p in pumps]

    silted = [h.pump_id or f"pump-{i}" for i, h in enumerate(health) if h.siltation_suspected]

    logger.debug(
        "Sump %s: net inflow %.2f m³/h, status %s",
        sump.sump_id or sump.name,
        flood.net_inflow,
        flood.status.value,
    )

    return SumpAnalysis(
        sump_id=sump.sump_id,
        name=sump.name,
        max_volume=sump.max_volume,
        current_volume=sump.current_volume,
        remaining_capacity=sump.remaining_capacity,
        capacity_percent=sump.capacity_percent,
        inflow_rate=sump.inflow_rate,
        total_pumping_capacity=pumping,
        active_pumps=sum(1 for p in pumps if p.status == PumpStatus.RUNNING),
        total_pumps=len(pumps),
        flood=flood,
        pumps=health,
        siltation_alert=SiltationAlert(detected=bool(silted), affected_pumps=silted),
    )
