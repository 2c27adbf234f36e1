"""Tests for event formatters — severity mapping, titles, fields."""

from __future__ import annotations

from src.core.types import (
    AdjustmentRecord,
    Alert,
    AlertStatus,
    BuildingEvent,
    BuildingEventType,
    BuildingStats,
)
from src.monitor.formatters import format_building_event
from src.monitor.types import Severity


def _alert(**kw: object) -> Alert:
    defaults: dict[str, object] = {
        "id": "library-1-1",
        "zone": "Library",
        "usage_at_detection": 480.0,
        "limit_at_detection": 450.0,
        "detected_at": 1000.0,
    }
    defaults.update(kw)
    return Alert(**defaults)  # type: ignore[arg-type]


class TestSeverity:
    def test_alert_raised_is_warning(self) -> None:
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.ALERT_RAISED, zone="Library", alert=_alert(),
        ))
        assert msg.severity == Severity.WARNING
        assert msg.title == "Power limit exceeded"

    def test_cycle_completed_is_debug(self) -> None:
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.CYCLE_COMPLETED,
            stats=BuildingStats(zone_count=5, total_usage=1234.5),
        ))
        assert msg.severity == Severity.DEBUG
        assert msg.fields["total_usage"] == "1234.5 kWh"
        assert msg.fields["zones"] == "5"

    def test_operator_actions_are_info(self) -> None:
        for etype in (
            BuildingEventType.ALERT_ACKNOWLEDGED,
            BuildingEventType.ALERT_RESOLVED,
            BuildingEventType.ALERT_DISMISSED,
            BuildingEventType.ALERT_AUTO_RESOLVED,
        ):
            msg = format_building_event(BuildingEvent(event_type=etype, alert=_alert()))
            assert msg.severity == Severity.INFO


class TestContent:
    def test_alert_body_shows_excess(self) -> None:
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.ALERT_RAISED, zone="Library", alert=_alert(),
        ))
        assert "480.0 kWh" in msg.body
        assert "over by 30.0 kWh" in msg.body
        assert msg.fields["alert_id"] == "library-1-1"
        assert msg.fields["status"] == "active"
        assert msg.zone == "Library"

    def test_limit_change(self) -> None:
        record = AdjustmentRecord(
            timestamp=5.0, zone="Library", old_limit=200, new_limit=180,
            reason="Contributed 20 kWh to Main Hall",
        )
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.LIMIT_CHANGED,
            zone="Library",
            adjustment=record,
            reason=record.reason,
            timestamp=5.0,
        ))
        assert msg.title == "Power limit changed"
        assert msg.fields == {"old_limit": "200.0 kWh", "new_limit": "180.0 kWh"}
        assert "Contributed 20 kWh to Main Hall" in msg.body
        assert msg.timestamp == 5.0

    def test_notes_used_as_body(self) -> None:
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.ALERT_RESOLVED,
            alert=_alert(status=AlertStatus.RESOLVED, resolved_at=2000.0, notes="fixed"),
        ))
        assert msg.body == "fixed"

    def test_source_event_type_and_throttle_key(self) -> None:
        msg = format_building_event(BuildingEvent(
            event_type=BuildingEventType.ALERT_ACKNOWLEDGED, zone="Library", alert=_alert(),
        ))
        assert msg.source_event_type == "ALERT_ACKNOWLEDGED"
        assert msg.throttle_key == "ALERT_ACKNOWLEDGED:Library"

    def test_zero_timestamp_keeps_default(self) -> None:
        msg = format_building_event(BuildingEvent(event_type=BuildingEventType.CYCLE_COMPLETED))
        assert msg.timestamp > 0
