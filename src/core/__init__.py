"""Core module — config, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import setup_logging
from src.core.types import (
    AdjustmentRecord,
    Alert,
    AlertStatus,
    BuildingEvent,
    BuildingEventType,
    BuildingStats,
    Clock,
    Snapshot,
    ZoneReading,
)

__all__ = [
    "AdjustmentRecord",
    "Alert",
    "AlertStatus",
    "BuildingEvent",
    "BuildingEventType",
    "BuildingStats",
    "Clock",
    "Settings",
    "Snapshot",
    "ZoneReading",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
