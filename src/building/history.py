"""HistoryRecorder — per-day aggregates of monitoring cycles, CSV export.

Each cycle's snapshot set is folded into a bucket keyed by its UTC date:
- mean building usage across the day's cycles
- mean temperature
- peak total occupancy
- mean usage per zone
"""

from __future__ import annotations

import csv
import datetime
import io
from collections.abc import Sequence
from dataclasses import dataclass, field

from src.core.types import BuildingStats, Snapshot

CSV_BASE_HEADERS = [
    "Date",
    "Total Energy (kWh)",
    "Average Temperature (°C)",
    "Peak Occupancy",
]


@dataclass
class DailyAggregate:
    """Running aggregate of every cycle recorded on one UTC day."""

    date: datetime.date
    samples: int = 0
    usage_sum: float = 0.0
    temperature_sum: float = 0.0
    peak_occupancy: int = 0
    zone_usage_sums: dict[str, float] = field(default_factory=dict)
    zone_samples: dict[str, int] = field(default_factory=dict)

    @property
    def total_energy(self) -> float:
        """Mean building-wide usage per cycle."""
        if self.samples == 0:
            return 0.0
        return self.usage_sum / self.samples

    @property
    def average_temperature(self) -> float:
        if self.samples == 0:
            return 0.0
        return self.temperature_sum / self.samples

    def zone_usage(self, zone: str) -> float:
        count = self.zone_samples.get(zone, 0)
        if count == 0:
            return 0.0
        return self.zone_usage_sums[zone] / count


class HistoryRecorder:
    """Keeps the most recent ``max_days`` daily aggregates.

    Usage::

        history = HistoryRecorder(max_days=90)
        history.record(snapshots, stats, at=time.time())
        csv_text = history.to_csv()
    """

    def __init__(self, max_days: int = 90) -> None:
        self._max_days = max_days
        self._days: dict[datetime.date, DailyAggregate] = {}
        self._zones: list[str] = []

    @property
    def zones(self) -> list[str]:
        """Zones seen so far, in first-seen order."""
        return list(self._zones)

    def days(self) -> list[DailyAggregate]:
        """Aggregates in chronological order."""
        return [self._days[d] for d in sorted(self._days)]

    def record(
        self,
        snapshots: Sequence[Snapshot],
        stats: BuildingStats,
        at: float,
    ) -> DailyAggregate:
        day = datetime.datetime.fromtimestamp(at, tz=datetime.UTC).date()
        agg = self._days.get(day)
        if agg is None:
            agg = DailyAggregate(date=day)
            self._days[day] = agg
            self._trim()

        agg.samples += 1
        agg.usage_sum += stats.total_usage
        agg.temperature_sum += stats.average_temperature
        agg.peak_occupancy = max(agg.peak_occupancy, stats.total_occupancy)
        for snap in snapshots:
            if snap.zone not in self._zones:
                self._zones.append(snap.zone)
            agg.zone_usage_sums[snap.zone] = (
                agg.zone_usage_sums.get(snap.zone, 0.0) + snap.usage
            )
            agg.zone_samples[snap.zone] = agg.zone_samples.get(snap.zone, 0) + 1
        return agg

    def to_csv(self, zones: Sequence[str] | None = None) -> str:
        """Comma-separated export with a header row, one row per day."""
        columns = list(zones) if zones is not None else self.zones
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow([*CSV_BASE_HEADERS, *columns])
        for agg in self.days():
            writer.writerow([
                agg.date.isoformat(),
                round(agg.total_energy),
                f"{agg.average_temperature:.1f}",
                agg.peak_occupancy,
                *(round(agg.zone_usage(z)) for z in columns),
            ])
        return buf.getvalue()

    def _trim(self) -> None:
        while len(self._days) > self._max_days:
            del self._days[min(self._days)]
