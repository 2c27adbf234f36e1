"""Tests for HistoryRecorder daily buckets and CSV export."""

from __future__ import annotations

import datetime

from src.building.history import CSV_BASE_HEADERS, HistoryRecorder
from src.core.types import BuildingStats, Snapshot
from src.sensors.stats import AggregateStatsCalculator

DAY = 86_400.0
# 2023-11-14 22:13:20 UTC
T0 = 1_700_000_000.0


def _cycle(
    history: HistoryRecorder,
    at: float,
    **usage: float,
) -> None:
    snaps = [
        Snapshot(zone=z, usage=u, temperature=20.0 + i, occupancy=10 * (i + 1))
        for i, (z, u) in enumerate(usage.items())
    ]
    stats = AggregateStatsCalculator().compute(snaps)
    history.record(snaps, stats, at=at)


class TestRecord:
    def test_same_day_folds_into_one_bucket(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, A=100, B=200)
        _cycle(history, T0 + 60, A=300, B=400)
        days = history.days()
        assert len(days) == 1
        day = days[0]
        assert day.date == datetime.date(2023, 11, 14)
        assert day.samples == 2
        assert day.total_energy == 500
        assert day.zone_usage("A") == 200
        assert day.zone_usage("B") == 300
        assert day.peak_occupancy == 30

    def test_buckets_by_utc_date(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, A=1)
        _cycle(history, T0 + 2 * 3600, A=1)  # past midnight UTC
        assert [d.date for d in history.days()] == [
            datetime.date(2023, 11, 14),
            datetime.date(2023, 11, 15),
        ]

    def test_days_chronological(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0 + 3 * DAY, A=1)
        _cycle(history, T0, A=1)
        dates = [d.date for d in history.days()]
        assert dates == sorted(dates)

    def test_trims_oldest(self) -> None:
        history = HistoryRecorder(max_days=2)
        for i in range(4):
            _cycle(history, T0 + i * DAY, A=1)
        days = history.days()
        assert len(days) == 2
        assert days[0].date == datetime.date(2023, 11, 16)

    def test_zones_first_seen_order(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, B=1, A=1)
        _cycle(history, T0, C=1, A=1)
        assert history.zones == ["B", "A", "C"]

    def test_missing_zone_usage_is_zero(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, A=1)
        assert history.days()[0].zone_usage("Z") == 0.0


class TestCsv:
    def test_header_only_when_empty(self) -> None:
        assert HistoryRecorder().to_csv(["A"]) == ",".join([*CSV_BASE_HEADERS, "A"]) + "\n"

    def test_rows(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, A=100.4, B=200.2)
        lines = history.to_csv().splitlines()
        assert lines[0] == (
            "Date,Total Energy (kWh),Average Temperature (°C),Peak Occupancy,A,B"
        )
        assert lines[1] == "2023-11-14,301,20.5,30,100,200"

    def test_explicit_zone_columns(self) -> None:
        history = HistoryRecorder()
        _cycle(history, T0, A=10, B=20)
        lines = history.to_csv(["B", "Z"]).splitlines()
        assert lines[0].endswith("Peak Occupancy,B,Z")
        assert lines[1].endswith(",20,0")

    def test_stats_drive_totals(self) -> None:
        history = HistoryRecorder()
        snaps = [Snapshot(zone="A", usage=50)]
        history.record(snaps, BuildingStats(total_usage=999, total_occupancy=4), at=T0)
        day = history.days()[0]
        assert day.total_energy == 999
        assert day.peak_occupancy == 4
