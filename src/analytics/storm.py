"""
src/analytics/storm.py
──────────────────────
Storm risk over the next 24 hours of forecast and the combined sump early
warning.

Flags over the first 8 three-hour slots:
  heavy rain   rainfall > 50 mm
  storm        rain probability > 70 %
  humidity     > 85 %
  strong wind  > 10 m/s

Risk: high = heavy rain AND storm probable; medium = storm probable; else low.

The early warning crosses the storm risk with how full the sump is
(> 70 %, > 50 %, otherwise) through a fixed table in config/alerts.py.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from config.alerts import EARLY_WARNING_TABLE, CapacityBand, WarningLevel
from config.settings import settings
from config.thresholds import CAPACITY_BANDS, STORM_THRESHOLDS, CapacityBands, StormThresholds
from src.data.models import EarlyWarning, ForecastPoint, RiskLevel, StormAnalysis

logger = logging.getLogger(__name__)


def analyze_storm_risk(
    forecast: Sequence[ForecastPoint],
    horizon: int = settings.FORECAST_HORIZON_POINTS,
    thr: StormThresholds = STORM_THRESHOLDS,
) -> StormAnalysis:
    analysis = StormAnalysis()

    for point in forecast[:horizon]:
        if point.rainfall_mm > thr.heavy_rain_mm:
            analysis.heavy_rain_detected = True
            analysis.recommendations.append(f"Heavy rainfall expected: {point.rainfall_mm:.1f}mm")
        if point.rain_probability > thr.storm_probability_pct:
            analysis.storm_probable = True
        if point.humidity > thr.high_humidity_pct:
            analysis.high_humidity = True
        if point.wind_speed > thr.strong_wind_ms:
            analysis.strong_wind = True
            analysis.recommendations.append(f"Strong winds: {point.wind_speed:.1f} m/s")

    if analysis.heavy_rain_detected and analysis.storm_probable:
        analysis.risk_level = RiskLevel.HIGH
        analysis.recommendations.append("URGENT: Start pumping early to create surge capacity")
    elif analysis.storm_probable:
        analysis.risk_level = RiskLevel.MEDIUM
        analysis.recommendations.append("Prepare pumping systems in advance")

    logger.debug("Storm risk %s over %d points", analysis.risk_level.value, min(len(forecast), horizon))
    return analysis


def capacity_band(capacity_percent: float, bands: CapacityBands = CAPACITY_BANDS) -> CapacityBand:
    if capacity_percent > bands.high_pct:
        return CapacityBand.ABOVE_HIGH
    if capacity_percent > bands.mid_pct:
        return CapacityBand.ABOVE_MID
    return CapacityBand.AT_OR_BELOW_MID


def early_warning(
    storm: StormAnalysis,
    capacity_percent: float | None = None,
) -> EarlyWarning:
    """Warning level and recommended actions for a sump facing the forecast."""
    if capacity_percent is None:
        capacity_percent = settings.DEFAULT_SUMP_CAPACITY_PCT

    level, actions = EARLY_WARNING_TABLE[(storm.risk_level.value, capacity_band(capacity_percent))]

    return EarlyWarning(
        level=level,
        recommended_actions=list(actions),
        weather_risk=storm.risk_level,
        sump_capacity_percent=capacity_percent,
        should_proceed_with_activity=level != WarningLevel.CRITICAL,
    )


def forecast_early_warning(
    forecast: Sequence[ForecastPoint],
    capacity_percent: float | None = None,
) -> tuple[StormAnalysis, EarlyWarning]:
    storm = analyze_storm_risk(forecast)
    return storm, early_warning(storm, capacity_percent)
