"""Tests for AlertDispatcher — routing, throttling, WARNING bypass, feed buffer."""

from __future__ import annotations

from unittest.mock import patch

from src.core.types import (
    AdjustmentRecord,
    Alert,
    BuildingEvent,
    BuildingEventType,
    BuildingStats,
)
from src.monitor.dispatcher import AlertDispatcher
from src.monitor.types import AlertMessage, Severity

# ── Helpers ─────────────────────────────────────────────────────


def _alert(zone: str = "Library") -> Alert:
    return Alert(
        id=f"{zone.lower()}-1-1",
        zone=zone,
        usage_at_detection=480.0,
        limit_at_detection=450.0,
        detected_at=1000.0,
    )


def _raised(zone: str = "Library") -> BuildingEvent:
    return BuildingEvent(
        event_type=BuildingEventType.ALERT_RAISED, zone=zone, alert=_alert(zone),
    )


def _limit_changed(zone: str = "Library") -> BuildingEvent:
    record = AdjustmentRecord(
        timestamp=1.0, zone=zone, old_limit=100, new_limit=200, reason="Manual adjustment",
    )
    return BuildingEvent(
        event_type=BuildingEventType.LIMIT_CHANGED, zone=zone, adjustment=record,
    )


# ── Routing ─────────────────────────────────────────────────────


class TestRouting:
    async def test_warning_published(self) -> None:
        disp = AlertDispatcher()
        await disp.on_building_event(_raised())
        recent = disp.recent()
        assert len(recent) == 1
        assert recent[0].title == "Power limit exceeded"

    async def test_debug_is_log_only(self) -> None:
        disp = AlertDispatcher()
        await disp.on_building_event(BuildingEvent(
            event_type=BuildingEventType.CYCLE_COMPLETED, stats=BuildingStats(),
        ))
        assert disp.recent() == []

    async def test_every_event_logged(self) -> None:
        disp = AlertDispatcher()
        with patch("src.monitor.dispatcher.decision_logger") as dl:
            await disp.on_building_event(BuildingEvent(
                event_type=BuildingEventType.CYCLE_COMPLETED,
            ))
            await disp.on_building_event(_raised())
        assert dl.info.call_count == 2
        _, kwargs = dl.info.call_args
        assert kwargs["severity"] == "WARNING"
        assert kwargs["zone"] == "Library"

    def test_send_bypasses_throttle(self) -> None:
        disp = AlertDispatcher(throttle_secs=3600)
        msg = AlertMessage(severity=Severity.INFO, title="t", source_event_type="X")
        disp.send(msg)
        disp.send(msg)
        assert len(disp.recent()) == 2


# ── Throttling ──────────────────────────────────────────────────


class TestThrottle:
    async def test_info_throttled_per_key(self) -> None:
        disp = AlertDispatcher(throttle_secs=3600)
        await disp.on_building_event(_limit_changed("Library"))
        await disp.on_building_event(_limit_changed("Library"))
        assert len(disp.recent()) == 1
        assert disp.suppressed == 1

    async def test_different_zones_not_throttled(self) -> None:
        disp = AlertDispatcher(throttle_secs=3600)
        await disp.on_building_event(_limit_changed("Library"))
        await disp.on_building_event(_limit_changed("Cafeteria"))
        assert len(disp.recent()) == 2
        assert disp.suppressed == 0

    async def test_zero_throttle_allows_repeats(self) -> None:
        disp = AlertDispatcher(throttle_secs=0)
        await disp.on_building_event(_limit_changed())
        await disp.on_building_event(_limit_changed())
        assert len(disp.recent()) == 2

    async def test_warning_bypasses_throttle(self) -> None:
        disp = AlertDispatcher(throttle_secs=3600)
        await disp.on_building_event(_raised())
        await disp.on_building_event(_raised())
        assert len(disp.recent()) == 2
        assert disp.suppressed == 0

    async def test_throttle_expires(self) -> None:
        disp = AlertDispatcher(throttle_secs=10)
        with patch("src.monitor.dispatcher.time.monotonic", side_effect=[100.0, 105.0, 111.0]):
            await disp.on_building_event(_limit_changed())
            await disp.on_building_event(_limit_changed())
            await disp.on_building_event(_limit_changed())
        assert len(disp.recent()) == 2
        assert disp.suppressed == 1


# ── Feed buffer ─────────────────────────────────────────────────


class TestFeed:
    def test_newest_first_and_limit(self) -> None:
        disp = AlertDispatcher()
        for i in range(3):
            disp.send(AlertMessage(severity=Severity.INFO, title=f"m{i}"))
        assert [m.title for m in disp.recent()] == ["m2", "m1", "m0"]
        assert [m.title for m in disp.recent(2)] == ["m2", "m1"]

    def test_buffer_keeps_newest(self) -> None:
        disp = AlertDispatcher(buffer_size=2)
        for i in range(5):
            disp.send(AlertMessage(severity=Severity.INFO, title=f"m{i}"))
        assert [m.title for m in disp.recent()] == ["m4", "m3"]
