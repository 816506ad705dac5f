"""
config/alerts.py
────────────────
Early-warning levels and the fixed action lists issued
for each storm-risk × sump-fill combination.
"""

from enum import Enum


class WarningLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CapacityBand(str, Enum):
    ABOVE_HIGH = "above_high"   # > 70 %
    ABOVE_MID = "above_mid"     # > 50 %, ≤ 70 %
    AT_OR_BELOW_MID = "at_or_below_mid"


# (storm risk, capacity band) → (warning level, recommended actions)
EARLY_WARNING_TABLE: dict[tuple[str, CapacityBand], tuple[WarningLevel, tuple[str, ...]]] = {
    ("high", CapacityBand.ABOVE_HIGH): (
        WarningLevel.CRITICAL,
        (
            "START PUMPING IMMEDIATELY",
            "Monitor sump water level continuously",
            "Prepare for potential flooding",
        ),
    ),
    ("high", CapacityBand.ABOVE_MID): (
        WarningLevel.HIGH,
        (
            "Increase pumping rate",
            "Monitor weather updates",
            "Prepare additional pumps if available",
        ),
    ),
    ("high", CapacityBand.AT_OR_BELOW_MID): (
        WarningLevel.MEDIUM,
        (
            "Start preventive pumping",
            "Monitor sump level closely",
        ),
    ),
    ("medium", CapacityBand.ABOVE_HIGH): (
        WarningLevel.MEDIUM,
        ("Increase pumping", "Monitor weather"),
    ),
    ("medium", CapacityBand.ABOVE_MID): (WarningLevel.LOW, ("Routine monitoring",)),
    ("medium", CapacityBand.AT_OR_BELOW_MID): (WarningLevel.LOW, ("Routine monitoring",)),
    ("low", CapacityBand.ABOVE_HIGH): (WarningLevel.NONE, ()),
    ("low", CapacityBand.ABOVE_MID): (WarningLevel.NONE, ()),
    ("low", CapacityBand.AT_OR_BELOW_MID): (WarningLevel.NONE, ()),
}

# Road warnings board: how many located sites to surface per road
MAX_WARNING_LOCATIONS = 5
