"""
src/analytics/soft_spots.py
───────────────────────────
Multi-truck soft-spot aggregation for a haul road.

Algorithm:
  1. Classify every report; NONE-tier slowdowns are dropped.
  2. Bin each report into a square grid cell of side 2 × tolerance:
       cell = floor(coord / grid) × grid      (per axis)
     Floor binning is order-independent and O(n).
  3. Per cell: detection count, mean/max speed drop, distinct trucks,
     first/last timestamp. The representative location is the FIRST
     report's coordinate in canonical order, never the centroid, so a spot
     reported at x=100 stays at x=100.
  4. Severity: CRITICAL if any report in the cell was CRITICAL, else SOFT.
  5. Confidence: HIGH only with ≥ 2 distinct trucks. Repeat reports from a
     single truck stay LOW.
  6. Order: distinct trucks desc, detections desc, then cell key.

The aggregate is recomputed in full from the live report set each time;
no state is kept between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np
import pandas as pd

from config.settings import settings
from src.analytics.slowdown import classify_report
from src.data.models import (
    Confidence,
    SiteLocation,
    SiteSummary,
    SlowdownSeverity,
    SoftSpotSite,
    TruckReport,
)
from src.data.reports import canonical_order

logger = logging.getLogger(__name__)

MIN_TRUCKS_FOR_HIGH_CONFIDENCE = 2


def grid_size(tolerance_m: float) -> float:
    if tolerance_m <= 0:
        raise ValueError(f"tolerance must be positive, got {tolerance_m}")
    return tolerance_m * 2.0


def grid_cell(x: float, y: float, tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M) -> tuple[float, float]:
    """Cell key (lower-left corner) that a coordinate falls into."""
    grid = grid_size(tolerance_m)
    # + 0.0 folds -0.0 into 0.0 so keys compare and print consistently
    return float(np.floor(x / grid) * grid + 0.0), float(np.floor(y / grid) * grid + 0.0)


def _slowdown_frame(reports: Iterable[TruckReport]) -> pd.DataFrame:
    """Canonically ordered DataFrame of SOFT/CRITICAL reports with derived columns."""
    rows = []
    for report in canonical_order(reports):
        result = classify_report(report)
        if result.severity == SlowdownSeverity.NONE:
            continue
        rows.append(
            {
                "truck_id": report.truck_id,
                "x_m": report.x_m,
                "y_m": report.y_m,
                "timestamp": report.timestamp,
                "speed_drop_percent": result.speed_drop_percent,
                "is_critical": result.severity == SlowdownSeverity.CRITICAL,
            }
        )
    df = pd.DataFrame(rows)
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    return df


def aggregate_soft_spots(
    reports: Iterable[TruckReport],
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> list[SoftSpotSite]:
    """
    Group a road's slowdown reports into soft-spot sites.

    Args:
        reports: Non-expired truck reports for one road (any order)
        tolerance_m: Grouping tolerance in metres; grid cell side is 2×

    Returns:
        Sites sorted by corroboration (distinct trucks, then detections).
        Empty list when no report reaches the SOFT tier.
    """
    grid = grid_size(tolerance_m)
    df = _slowdown_frame(reports)
    if df.empty:
        return []

    df["grid_x"] = np.floor(df["x_m"] / grid) * grid + 0.0
    df["grid_y"] = np.floor(df["y_m"] / grid) * grid + 0.0

    grouped = df.groupby(["grid_x", "grid_y"], sort=True)
    cells = grouped.agg(
        detection_count=("truck_id", "size"),
        avg_speed_drop=("speed_drop_percent", "mean"),
        max_speed_drop=("speed_drop_percent", "max"),
        first_x=("x_m", "first"),
        first_y=("y_m", "first"),
        first_detected_at=("timestamp", "min"),
        last_detected_at=("timestamp", "max"),
        has_critical=("is_critical", "any"),
    )
    # Distinct trucks in first-seen order (rows are already canonical)
    trucks = {key: list(dict.fromkeys(group["truck_id"])) for key, group in grouped}

    sites: list[SoftSpotSite] = []
    for (gx, gy), row in cells.iterrows():
        truck_ids = trucks[(gx, gy)]
        sites.append(
            SoftSpotSite(
                grid_x=float(gx),
                grid_y=float(gy),
                location=SiteLocation(x_m=float(round(row["first_x"])), y_m=float(round(row["first_y"]))),
                severity=SlowdownSeverity.CRITICAL if bool(row["has_critical"]) else SlowdownSeverity.SOFT,
                confidence=(
                    Confidence.HIGH if len(truck_ids) >= MIN_TRUCKS_FOR_HIGH_CONFIDENCE else Confidence.LOW
                ),
                detection_count=int(row["detection_count"]),
                unique_trucks=len(truck_ids),
                detected_by_trucks=truck_ids,
                avg_speed_drop=round(float(row["avg_speed_drop"]), 1),
                max_speed_drop=round(float(row["max_speed_drop"]), 1),
                first_detected_at=row["first_detected_at"].to_pydatetime(),
                last_detected_at=row["last_detected_at"].to_pydatetime(),
            )
        )

    sites.sort(key=lambda s: (-s.unique_trucks, -s.detection_count, s.grid_x, s.grid_y))
    logger.debug("Aggregated %d slowdown reports into %d sites", len(df), len(sites))
    return sites


def summarize_sites(sites: Iterable[SoftSpotSite]) -> SiteSummary:
    summary = SiteSummary()
    for site in sites:
        if site.severity == SlowdownSeverity.CRITICAL:
            summary.severe_count += 1
        else:
            summary.soft_count += 1
        if site.is_confirmed:
            summary.high_confidence_count += 1
    return summary


def find_matching_site(
    sites: Iterable[SoftSpotSite],
    x: float,
    y: float,
    tolerance_m: float = settings.SOFT_SPOT_TOLERANCE_M,
) -> SoftSpotSite | None:
    """First site whose representative location is within tolerance of (x, y) on both axes."""
    for site in sites:
        if abs(site.location.x_m - x) <= tolerance_m and abs(site.location.y_m - y) <= tolerance_m:
            return site
    return None


def confirmed_sites(sites: Iterable[SoftSpotSite]) -> list[SoftSpotSite]:
    return [s for s in sites if s.is_confirmed]
