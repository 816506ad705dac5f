"""
src/analytics/slowdown.py
─────────────────────────
Per-report truck slowdown classification.

  drop % = (average − current) / average × 100, floored at 0
  drop ≥ 50 → CRITICAL
  drop ≥ 30 → SOFT   (provisional until a second truck corroborates)
  otherwise → NONE

A single report never confirms a soft spot on its own; that is decided
by the soft-spot aggregator across trucks.
"""
from __future__ import annotations

import logging

from config.thresholds import SLOWDOWN_THRESHOLDS, SlowdownThresholds
from src.data.models import SlowdownClassification, SlowdownSeverity, TruckReport

logger = logging.getLogger(__name__)


def speed_drop_percent(average_speed: float, current_speed: float) -> float:
    """Percentage drop of current speed below the truck's average, never negative."""
    if average_speed <= 0:
        logger.warning("Non-positive average speed %.2f; treating drop as 0%%", average_speed)
        return 0.0
    drop = (average_speed - current_speed) / average_speed * 100.0
    return max(0.0, drop)


def severity_for_drop(
    drop_percent: float,
    thr: SlowdownThresholds = SLOWDOWN_THRESHOLDS,
) -> SlowdownSeverity:
    if drop_percent >= thr.critical_pct:
        return SlowdownSeverity.CRITICAL
    if drop_percent >= thr.soft_pct:
        return SlowdownSeverity.SOFT
    return SlowdownSeverity.NONE


def classify_slowdown(average_speed: float, current_speed: float) -> SlowdownClassification:
    drop = speed_drop_percent(average_speed, current_speed)
    return SlowdownClassification(speed_drop_percent=drop, severity=severity_for_drop(drop))


def classify_report(report: TruckReport) -> SlowdownClassification:
    return classify_slowdown(report.average_speed, report.current_speed)
