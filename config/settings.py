"""
config/settings.py
──────────────────
Engine configuration loaded from environment variables.
"""
import os
from dataclasses import dataclass


@dataclass
class Settings:
    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Soft-spot aggregation (grid cell = 2 × tolerance)
    SOFT_SPOT_TOLERANCE_M: float = float(os.getenv("SOFT_SPOT_TOLERANCE_M", "5.0"))

    # Truck reports older than this are ignored (TTL on the document store)
    REPORT_RETENTION_DAYS: int = int(os.getenv("REPORT_RETENTION_DAYS", "30"))

    # Weather
    WEATHER_CACHE_TTL_S: int = int(os.getenv("WEATHER_CACHE_TTL_S", "3600"))
    WEATHER_CACHE_MAX_ENTRIES: int = int(os.getenv("WEATHER_CACHE_MAX_ENTRIES", "500"))
    FORECAST_HORIZON_POINTS: int = int(os.getenv("FORECAST_HORIZON_POINTS", "8"))  # 8 × 3h = 24h

    # Early warning fallback when the caller does not send a sump fill level
    DEFAULT_SUMP_CAPACITY_PCT: float = float(os.getenv("DEFAULT_SUMP_CAPACITY_PCT", "50"))


settings = Settings()
