"""
tests/conftest.py
─────────────────
Shared pytest fixtures for the mine risk engine test suite.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("SOFT_SPOT_TOLERANCE_M", "5.0")
os.environ.setdefault("REPORT_RETENTION_DAYS", "30")


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_report(now):
    """Factory for TruckReports; `minutes` offsets the timestamp from `now`."""
    from src.data.models import TruckReport

    def _make(truck_id="T-01", average=30.0, current=15.0, x=100.0, y=200.0, minutes=0, **kw):
        return TruckReport(
            truck_id=truck_id,
            payload_tonnes=kw.pop("payload_tonnes", 220.0),
            average_speed=average,
            current_speed=current,
            x_m=x,
            y_m=y,
            timestamp=now + timedelta(minutes=minutes),
            **kw,
        )

    return _make


@pytest.fixture
def sample_sump():
    from src.data.models import SumpState
    return SumpState(
        sump_id="SUMP-N1",
        name="North Pit Sump",
        length=20.0,
        width=10.0,
        depth=5.0,
        current_water_height=2.0,
        inflow_rate=150.0,
    )


@pytest.fixture
def running_pump():
    from src.data.models import PumpState, PumpStatus
    return PumpState(
        pump_id="P-01",
        rated_discharge=100.0,
        current_discharge=80.0,
        status=PumpStatus.RUNNING,
    )


@pytest.fixture
def silted_pump():
    """Running pump with rising torque and falling discharge."""
    from src.data.models import DischargeTrend, PumpState, PumpStatus, TorqueTrend
    return PumpState(
        pump_id="P-02",
        rated_discharge=100.0,
        current_discharge=75.0,
        status=PumpStatus.RUNNING,
        torque_trend=TorqueTrend.RISING,
        discharge_trend=DischargeTrend.FALLING,
    )


@pytest.fixture
def sample_road():
    from src.data.models import RoadState
    return RoadState(road_id="HR-07", name="Ramp 7", required_cross_fall=3.0, current_cross_fall=3.0)
