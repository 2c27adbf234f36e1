"""SnapshotReader — attaches current zone limits to raw readings."""

from __future__ import annotations

from collections.abc import Iterable

from src.core.types import Clock, Snapshot, ZoneReading, system_clock
from src.power.registry import ZoneRegistry


class SnapshotReader:
    """Turns raw readings into snapshots carrying each zone's limit."""

    def __init__(self, registry: ZoneRegistry, clock: Clock = system_clock) -> None:
        self._registry = registry
        self._clock = clock

    def attach_limits(self, readings: Iterable[ZoneReading]) -> list[Snapshot]:
        """One snapshot per reading, in input order."""
        captured_at = self._clock()
        return [
            Snapshot(
                zone=r.zone,
                usage=r.usage,
                limit=self._registry.get_limit(r.zone),
                captured_at=captured_at,
                reading_timestamp=r.timestamp,
                sensor_id=r.sensor_id,
                temperature=r.temperature,
                humidity=r.humidity,
                occupancy=r.occupancy,
            )
            for r in readings
        ]
