"""
config/thresholds.py
────────────────────
Operational cut-offs for sumps, pumps, haul roads and weather.

Flood buffer (hours until overflow):
  > safe_hours              → safe
  critical_hours < t ≤ safe → warning
  ≤ critical_hours          → critical

Pump capacity (% of rated discharge):
  < red_below   → red
  < green_from  → yellow
  otherwise     → green

Truck speed drop (% below average):
  ≥ critical_pct → CRITICAL
  ≥ soft_pct     → SOFT
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class FloodThresholds:
    safe_hours: float
    critical_hours: float


@dataclass(frozen=True)
class PumpHealthThresholds:
    red_below: float
    green_from: float


@dataclass(frozen=True)
class SlowdownThresholds:
    critical_pct: float
    soft_pct: float


@dataclass(frozen=True)
class DrainageThresholds:
    moderate_max_deficiency: float    # deficiency ≤ this → moderate, above → severe
    standing_water_cm: float          # water on the road surface above this is a risk factor


@dataclass(frozen=True)
class StormThresholds:
    heavy_rain_mm: float              # per 3h forecast slot
    storm_probability_pct: float
    high_humidity_pct: float
    strong_wind_ms: float


@dataclass(frozen=True)
class CapacityBands:
    high_pct: float                   # sump fuller than this → most cautious column
    mid_pct: float


FLOOD_THRESHOLDS = FloodThresholds(safe_hours=24.0, critical_hours=6.0)

PUMP_THRESHOLDS = PumpHealthThresholds(red_below=60.0, green_from=70.0)

SLOWDOWN_THRESHOLDS = SlowdownThresholds(critical_pct=50.0, soft_pct=30.0)

DRAINAGE_THRESHOLDS = DrainageThresholds(moderate_max_deficiency=1.0, standing_water_cm=10.0)

STORM_THRESHOLDS = StormThresholds(
    heavy_rain_mm=50.0,
    storm_probability_pct=70.0,
    high_humidity_pct=85.0,
    strong_wind_ms=10.0,
)

CAPACITY_BANDS = CapacityBands(high_pct=70.0, mid_pct=50.0)
