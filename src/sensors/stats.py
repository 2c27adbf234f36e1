"""AggregateStatsCalculator — building-wide totals over a snapshot set."""

from __future__ import annotations

from collections.abc import Sequence

from src.core.types import BuildingStats, Snapshot


class AggregateStatsCalculator:
    """Reduces a snapshot set to :class:`BuildingStats`.

    Averages over an empty set are reported as 0.0 rather than NaN.
    """

    def compute(self, snapshots: Sequence[Snapshot]) -> BuildingStats:
        count = len(snapshots)
        total_usage = sum(s.usage for s in snapshots)
        if count == 0:
            return BuildingStats()

        return BuildingStats(
            zone_count=count,
            total_usage=total_usage,
            average_usage=total_usage / count,
            total_limit=sum(s.limit for s in snapshots),
            total_occupancy=sum(s.occupancy for s in snapshots),
            average_temperature=sum(s.temperature for s in snapshots) / count,
            average_humidity=sum(s.humidity for s in snapshots) / count,
        )
