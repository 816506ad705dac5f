"""
src/data/models.py
──────────────────
Pydantic v2 data models for sump, pump, haul-road and truck readings,
forecast points, and every derived result the engine returns.

Input models carry the canonical schema the persistence and validation
collaborators share; range violations raise pydantic.ValidationError.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from config.alerts import WarningLevel


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (operator-facing percentages)."""
    return int(math.floor(value + 0.5))


# ── Enumerations ──────────────────────────────────────────────────────────────


class FloodStatus(str, Enum):
    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"


class PumpStatus(str, Enum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    FAULT = "FAULT"


class TorqueTrend(str, Enum):
    NORMAL = "NORMAL"
    RISING = "RISING"


class DischargeTrend(str, Enum):
    NORMAL = "NORMAL"
    FALLING = "FALLING"


class HealthTier(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


class SlowdownSeverity(str, Enum):
    NONE = "NONE"
    SOFT = "SOFT"
    CRITICAL = "CRITICAL"


class Confidence(str, Enum):
    LOW = "LOW"
    HIGH = "HIGH"


class RoadCondition(str, Enum):
    GOOD = "GOOD"
    SOFT = "SOFT"
    CRITICAL = "CRITICAL"


class DrainageRisk(str, Enum):
    SAFE = "safe"
    MODERATE = "moderate"
    SEVERE = "severe"


class RoadPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Inputs ────────────────────────────────────────────────────────────────────


class SumpState(BaseModel):
    sump_id: str | None = None
    name: str | None = None
    length: float = Field(gt=0.0)
    width: float = Field(gt=0.0)
    depth: float = Field(gt=0.0)
    current_water_height: float = Field(ge=0.0)
    inflow_rate: float = Field(ge=0.0)      # m³/h
    lat: float | None = Field(default=None, ge=-90.0, le=90.0)
    lng: float | None = Field(default=None, ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def _water_within_depth(self) -> SumpState:
        if self.current_water_height > self.depth:
            raise ValueError("current_water_height cannot exceed sump depth")
        return self

    @property
    def max_volume(self) -> float:
        return self.length * self.width * self.depth

    @property
    def current_volume(self) -> float:
        return self.length * self.width * self.current_water_height

    @property
    def remaining_capacity(self) -> float:
        return self.max_volume - self.current_volume

    @property
    def capacity_percent(self) -> int:
        return round_half_up(self.current_volume / self.max_volume * 100.0)


class PumpState(BaseModel):
    pump_id: str | None = None
    sump_id: str | None = None
    rated_discharge: float = Field(ge=0.0)    # m³/h, design capacity
    current_discharge: float = Field(ge=0.0)  # m³/h, measured
    status: PumpStatus = PumpStatus.STOPPED
    torque_trend: TorqueTrend = TorqueTrend.NORMAL
    discharge_trend: DischargeTrend = DischargeTrend.NORMAL

    @model_validator(mode="after")
    def _current_within_rated(self) -> PumpState:
        if self.current_discharge > self.rated_discharge:
            raise ValueError("current_discharge cannot exceed rated_discharge")
        return self

    @property
    def capacity_percent(self) -> int:
        rated = self.rated_discharge or 1.0
        return round_half_up(self.current_discharge / rated * 100.0)

    @property
    def effective_discharge(self) -> float:
        # Only running pumps move water
        return self.current_discharge if self.status == PumpStatus.RUNNING else 0.0


class TruckReport(BaseModel):
    report_id: str | None = None
    road_id: str | None = None
    truck_id: str = Field(min_length=1)
    payload_tonnes: float = Field(default=0.0, ge=0.0)
    average_speed: float = Field(ge=0.0)   # km/h
    current_speed: float = Field(ge=0.0)   # km/h
    x_m: float                             # metres east of mine origin
    y_m: float                             # metres north of mine origin
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _naive_timestamp_is_utc(cls, value: datetime) -> datetime:
        # Devices without a zone send UTC
        if value.tzinfo is None or value.utcoffset() is None:
            return value.replace(tzinfo=UTC)
        return value


class RoadGeometry(BaseModel):
    length_m: float = Field(default=0.0, ge=0.0)
    design_cross_fall_percent: float = Field(default=3.0, ge=0.0, le=15.0)


class RoadState(BaseModel):
    road_id: str
    name: str | None = None
    priority: RoadPriority = RoadPriority.MEDIUM
    geometry: RoadGeometry = Field(default_factory=RoadGeometry)
    required_cross_fall: float = Field(default=3.0, ge=0.0, le=45.0)
    current_cross_fall: float = Field(default=3.0, ge=0.0, le=45.0)
    water_level_cm: float = Field(default=0.0, ge=0.0)
    soft_spot_detected: bool = False
    condition: RoadCondition = RoadCondition.GOOD
    drainage_risk: DrainageRisk = DrainageRisk.SAFE

    @property
    def cross_fall_deficiency(self) -> float:
        return max(0.0, self.required_cross_fall - self.current_cross_fall)

    @property
    def display_name(self) -> str:
        return self.name or self.road_id


class ForecastPoint(BaseModel):
    timestamp: datetime | None = None
    rainfall_mm: float = Field(default=0.0, ge=0.0)          # per 3h slot
    rain_probability: float = Field(default=0.0, ge=0.0, le=100.0)
    humidity: float = Field(default=0.0, ge=0.0, le=100.0)
    wind_speed: float = Field(default=0.0, ge=0.0)           # m/s


# ── Sump / pump results ───────────────────────────────────────────────────────


class FloodProjection(BaseModel):
    status: FloodStatus
    time_to_flood_hours: float              # math.inf when pumps keep up
    time_to_flood_minutes: int | None = None
    net_inflow: float
    remaining_volume: float
    message: str


class SiltationCheck(BaseModel):
    detected: bool
    message: str
    recommendation: str | None = None


class PumpHealth(BaseModel):
    pump_id: str | None = None
    status: PumpStatus
    health: HealthTier
    capacity_percent: int
    rated_discharge: float
    current_discharge: float
    capacity_loss: float
    siltation_suspected: bool
    maintenance_required: bool
    message: str
    siltation: SiltationCheck


class SiltationAlert(BaseModel):
    detected: bool
    affected_pumps: list[str] = Field(default_factory=list)


class SumpAnalysis(BaseModel):
    sump_id: str | None = None
    name: str | None = None
    max_volume: float
    current_volume: float
    remaining_capacity: float
    capacity_percent: int
    inflow_rate: float
    total_pumping_capacity: float
    active_pumps: int
    total_pumps: int
    flood: FloodProjection
    pumps: list[PumpHealth] = Field(default_factory=list)
    siltation_alert: SiltationAlert


class PumpFleetSummary(BaseModel):
    total_pumps: int = 0
    running_pumps: int = 0
    stopped_pumps: int = 0
    fault_pumps: int = 0
    healthy: int = 0
    warning: int = 0
    critical: int = 0
    siltation_issues: int = 0
    total_active_discharge: float = 0.0


# ── Truck / soft-spot results ─────────────────────────────────────────────────


class SlowdownClassification(BaseModel):
    speed_drop_percent: float = Field(ge=0.0)
    severity: SlowdownSeverity


class SiteLocation(BaseModel):
    x_m: float
    y_m: float


class SoftSpotSite(BaseModel):
    grid_x: float
    grid_y: float
    location: SiteLocation
    severity: SlowdownSeverity
    confidence: Confidence
    detection_count: int = Field(ge=1)
    unique_trucks: int = Field(ge=1)
    detected_by_trucks: list[str]
    avg_speed_drop: float
    max_speed_drop: float
    first_detected_at: datetime
    last_detected_at: datetime
    status: str = "OPEN"

    @property
    def is_confirmed(self) -> bool:
        return self.confidence == Confidence.HIGH


class SiteSummary(BaseModel):
    severe_count: int = 0
    soft_count: int = 0
    high_confidence_count: int = 0


# ── Road results ──────────────────────────────────────────────────────────────


class DrainageAssessment(BaseModel):
    risk: DrainageRisk
    deficiency: float
    message: str
    action: str
    requires_regrading: bool


class RoadAssessment(BaseModel):
    road_id: str
    condition: RoadCondition
    drainage: DrainageAssessment
    soft_spot_detected: bool
    awaiting_confirmation: bool
    site_count: int
    high_confidence_sites: int
    maintenance_required: bool
    overall_risk: RiskLevel
    sites: list[SoftSpotSite] = Field(default_factory=list)


class RepairResult(BaseModel):
    road: RoadState
    assessment: RoadAssessment
    removed_reports: int
    remaining_reports: list[TruckReport] = Field(default_factory=list)
    message: str


class SubmissionResult(BaseModel):
    speed_drop_percent: float
    severity: SlowdownSeverity
    soft_spot_detected: bool
    confidence: Confidence
    message: str
    note: str | None = None
    trucks_confirmed: int | None = None
    road: RoadState
    confirmed_sites: list[SoftSpotSite] = Field(default_factory=list)


class BatchReportResult(BaseModel):
    truck_id: str
    severity: SlowdownSeverity
    speed_drop_percent: float


class BatchResult(BaseModel):
    processed: int
    slowdowns_detected: int
    high_confidence_sites: int
    road: RoadState
    assessment: RoadAssessment
    results: list[BatchReportResult] = Field(default_factory=list)
    message: str


class WarningLocation(BaseModel):
    x_m: float
    y_m: float
    severity: SlowdownSeverity
    confidence: Confidence
    detection_count: int
    detected_by_trucks: list[str]


class RoadWarning(BaseModel):
    road_id: str
    road_name: str
    priority: RoadPriority
    condition: RoadCondition
    warning_level: str                  # "critical" | "warning"
    soft_spot_count: int
    critical_count: int
    soft_count: int
    top_locations: list[WarningLocation]
    message: str
    recommendation: str


class RoadWarningBoard(BaseModel):
    total_roads: int
    roads_with_warnings: int
    warnings: list[RoadWarning] = Field(default_factory=list)


# ── Weather results ───────────────────────────────────────────────────────────


class StormAnalysis(BaseModel):
    heavy_rain_detected: bool = False
    storm_probable: bool = False
    high_humidity: bool = False
    strong_wind: bool = False
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: list[str] = Field(default_factory=list)


class EarlyWarning(BaseModel):
    level: WarningLevel
    recommended_actions: list[str] = Field(default_factory=list)
    weather_risk: RiskLevel
    sump_capacity_percent: float
    should_proceed_with_activity: bool
