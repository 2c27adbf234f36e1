"""Domain types for zone readings, limits, alerts, and building events."""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# Injectable time source returning epoch seconds.
Clock = Callable[[], float]


def system_clock() -> float:
    return time.time()


# ── Readings & Snapshots ────────────────────────────────────────


class ZoneReading(BaseModel):
    """Raw per-zone reading as produced by a sensor feed."""

    zone: str
    usage: float = Field(ge=0.0)
    timestamp: float = 0.0
    sensor_id: str = ""
    temperature: float = 0.0
    humidity: float = 0.0
    occupancy: int = 0


class Snapshot(BaseModel):
    """A reading enriched with the zone's limit at read time."""

    model_config = ConfigDict(frozen=True)

    zone: str
    usage: float = Field(ge=0.0)
    limit: float = 0.0
    captured_at: float = 0.0
    reading_timestamp: float = 0.0
    sensor_id: str = ""
    temperature: float = 0.0
    humidity: float = 0.0
    occupancy: int = 0

    @property
    def violating(self) -> bool:
        """True when a limit is set and usage exceeds it."""
        return self.limit > 0 and self.usage > self.limit

    @property
    def excess(self) -> float:
        return self.usage - self.limit

    @property
    def margin(self) -> float:
        return self.limit - self.usage


class BuildingStats(BaseModel):
    """Building-wide totals and averages over one snapshot set."""

    zone_count: int = 0
    total_usage: float = 0.0
    average_usage: float = 0.0
    total_limit: float = 0.0
    total_occupancy: int = 0
    average_temperature: float = 0.0
    average_humidity: float = 0.0


# ── Limits ──────────────────────────────────────────────────────


class AdjustmentRecord(BaseModel):
    """One limit change, with provenance."""

    model_config = ConfigDict(frozen=True)

    timestamp: float
    zone: str
    old_limit: float
    new_limit: float
    reason: str = ""


class DonorContribution(BaseModel):
    """Capacity a single donor zone gives up in a redistribution."""

    zone: str
    usage: float
    old_limit: float
    margin: float
    contributable: float
    contribution: float
    new_limit: int


class RedistributionPlan(BaseModel):
    """A computed, not yet applied, reallocation for one violating zone."""

    zone: str
    usage: float
    old_limit: float
    excess: float
    total_available: float
    new_limit: int
    donors: list[DonorContribution] = Field(default_factory=list)


# ── Alerts ──────────────────────────────────────────────────────


class AlertStatus(StrEnum):
    """Lifecycle state of a power alert."""

    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class Alert(BaseModel):
    """One detected limit-violation episode."""

    id: str
    zone: str
    usage_at_detection: float
    limit_at_detection: float
    detected_at: float
    status: AlertStatus = AlertStatus.ACTIVE
    acknowledged_at: float | None = None
    resolved_at: float | None = None
    notes: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status != AlertStatus.RESOLVED


# ── Events ──────────────────────────────────────────────────────


class BuildingEventType(StrEnum):
    """Type of building monitor event."""

    CYCLE_COMPLETED = "CYCLE_COMPLETED"
    LIMIT_CHANGED = "LIMIT_CHANGED"
    ALERT_RAISED = "ALERT_RAISED"
    ALERT_AUTO_RESOLVED = "ALERT_AUTO_RESOLVED"
    ALERT_ACKNOWLEDGED = "ALERT_ACKNOWLEDGED"
    ALERT_RESOLVED = "ALERT_RESOLVED"
    ALERT_ANNOTATED = "ALERT_ANNOTATED"
    ALERT_DISMISSED = "ALERT_DISMISSED"


class BuildingEvent(BaseModel):
    """Event emitted by the building monitor."""

    event_type: BuildingEventType
    zone: str = ""
    alert: Alert | None = None
    adjustment: AdjustmentRecord | None = None
    stats: BuildingStats | None = None
    reason: str = ""
    timestamp: float = 0.0


class CycleResult(BaseModel):
    """Everything one monitoring cycle produced."""

    snapshots: list[Snapshot] = Field(default_factory=list)
    alerts: list[Alert] = Field(default_factory=list)
    adjustments: list[AdjustmentRecord] = Field(default_factory=list)
    stats: BuildingStats = Field(default_factory=BuildingStats)
