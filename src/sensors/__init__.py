"""Sensor readings — feeds, limit attachment, and aggregate statistics."""

from src.sensors.base import BaseSensorFeed, ReadingsCallback
from src.sensors.reader import SnapshotReader
from src.sensors.simulator import SimulatedSensorFeed
from src.sensors.stats import AggregateStatsCalculator

__all__ = [
    "AggregateStatsCalculator",
    "BaseSensorFeed",
    "ReadingsCallback",
    "SimulatedSensorFeed",
    "SnapshotReader",
]
