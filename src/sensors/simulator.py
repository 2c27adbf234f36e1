"""SimulatedSensorFeed — random per-zone readings at a fixed cadence."""

from __future__ import annotations

import random

from src.core.config import SimulatorConfig
from src.core.types import Clock, ZoneReading, system_clock
from src.sensors.base import BaseSensorFeed


class SimulatedSensorFeed(BaseSensorFeed):
    """Generates one uniformly random reading per zone every tick.

    Reading timestamps are backdated by up to ``max_reading_age_minutes``
    to mimic sensors reporting at different times.
    """

    def __init__(
        self,
        zones: list[str],
        config: SimulatorConfig | None = None,
        clock: Clock = system_clock,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or SimulatorConfig()
        super().__init__(name="simulator", poll_interval_ms=self._config.poll_interval_ms)
        self._zones = list(zones)
        self._clock = clock
        self._rng = rng or random.Random(self._config.seed)

    @property
    def zones(self) -> list[str]:
        return list(self._zones)

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def poll(self) -> list[ZoneReading]:
        return self.generate()

    def generate(self) -> list[ZoneReading]:
        """Build one reading set synchronously."""
        cfg = self._config
        rng = self._rng
        now = self._clock()
        readings: list[ZoneReading] = []
        for index, zone in enumerate(self._zones):
            age_minutes = rng.randrange(max(cfg.max_reading_age_minutes, 1))
            readings.append(ZoneReading(
                zone=zone,
                sensor_id=f"sensor-{index + 1}",
                usage=rng.uniform(cfg.usage_min_kwh, cfg.usage_max_kwh),
                temperature=rng.uniform(cfg.temperature_min_c, cfg.temperature_max_c),
                humidity=rng.uniform(cfg.humidity_min_pct, cfg.humidity_max_pct),
                occupancy=rng.randrange(max(cfg.max_occupancy, 1)),
                timestamp=now - age_minutes * 60,
            ))
        return readings
