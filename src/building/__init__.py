"""Building orchestration — monitoring cycles, operator actions, history."""

from src.building.history import DailyAggregate, HistoryRecorder
from src.building.monitor import BuildingEventCallback, BuildingMonitor

__all__ = [
    "BuildingEventCallback",
    "BuildingMonitor",
    "DailyAggregate",
    "HistoryRecorder",
]
