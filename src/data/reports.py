"""
src/data/reports.py
───────────────────
Helpers over already-persisted truck reports.

Provides:
  - active_reports()        : Drop reports older than the retention window
  - canonical_order()       : Stable ordering used wherever "first reported" matters
  - remove_reports_near()   : Split reports around a repaired coordinate
  - reports_to_dataframe()  : DataFrame view for aggregation and export
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

import pandas as pd

from config.settings import settings
from src.data.models import TruckReport


def active_reports(
    reports: Iterable[TruckReport],
    now: datetime | None = None,
    retention_days: int = settings.REPORT_RETENTION_DAYS,
) -> list[TruckReport]:
    """Reports whose timestamp is inside the retention window ending at `now`."""
    now = now or datetime.now(tz=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    since = now - timedelta(days=retention_days)
    return [r for r in reports if r.timestamp > since]


def _canonical_key(report: TruckReport) -> tuple:
    return (report.timestamp, report.truck_id, report.x_m, report.y_m, report.report_id or "")


def canonical_order(reports: Iterable[TruckReport]) -> list[TruckReport]:
    """Sort by timestamp, then truck id, then position, so input order never matters."""
    return sorted(reports, key=_canonical_key)


def is_near(report: TruckReport, x: float, y: float, tolerance_m: float) -> bool:
    return abs(report.x_m - x) <= tolerance_m and abs(report.y_m - y) <= tolerance_m


def remove_reports_near(
    reports: Iterable[TruckReport],
    x: float,
    y: float,
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> tuple[list[TruckReport], list[TruckReport]]:
    """
    Split reports around (x, y).

    Returns:
        (kept, removed) where removed holds every report within
        `tolerance_m` of the point on both axes (inclusive)
    """
    kept: list[TruckReport] = []
    removed: list[TruckReport] = []
    for report in reports:
        (removed if is_near(report, x, y, tolerance_m) else kept).append(report)
    return kept, removed


def reports_to_dataframe(reports: Iterable[TruckReport]) -> pd.DataFrame:
    """Convert reports to a DataFrame with UTC timestamps, in canonical order."""
    df = pd.DataFrame([r.model_dump() for r in canonical_order(reports)])
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df
