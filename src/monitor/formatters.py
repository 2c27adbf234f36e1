"""Pure functions that convert building events into AlertMessage objects."""

from __future__ import annotations

from src.core.types import BuildingEvent, BuildingEventType
from src.monitor.types import AlertMessage, Severity

# ── Severity mapping ────────────────────────────────────────────

_BUILDING_SEVERITY: dict[BuildingEventType, Severity] = {
    BuildingEventType.CYCLE_COMPLETED: Severity.DEBUG,
    BuildingEventType.LIMIT_CHANGED: Severity.INFO,
    BuildingEventType.ALERT_RAISED: Severity.WARNING,
    BuildingEventType.ALERT_AUTO_RESOLVED: Severity.INFO,
    BuildingEventType.ALERT_ACKNOWLEDGED: Severity.INFO,
    BuildingEventType.ALERT_RESOLVED: Severity.INFO,
    BuildingEventType.ALERT_ANNOTATED: Severity.DEBUG,
    BuildingEventType.ALERT_DISMISSED: Severity.INFO,
}

_TITLES: dict[BuildingEventType, str] = {
    BuildingEventType.CYCLE_COMPLETED: "Cycle completed",
    BuildingEventType.LIMIT_CHANGED: "Power limit changed",
    BuildingEventType.ALERT_RAISED: "Power limit exceeded",
    BuildingEventType.ALERT_AUTO_RESOLVED: "Alert resolved by redistribution",
    BuildingEventType.ALERT_ACKNOWLEDGED: "Alert acknowledged",
    BuildingEventType.ALERT_RESOLVED: "Alert resolved",
    BuildingEventType.ALERT_ANNOTATED: "Alert note added",
    BuildingEventType.ALERT_DISMISSED: "Alert dismissed",
}


def _kwh(value: float) -> str:
    return f"{value:.1f} kWh"


# ── Formatter ───────────────────────────────────────────────────


def format_building_event(event: BuildingEvent) -> AlertMessage:
    """Convert a BuildingEvent to an AlertMessage."""
    etype = event.event_type
    severity = _BUILDING_SEVERITY.get(etype, Severity.DEBUG)
    title = _TITLES.get(etype, etype.value)
    fields: dict[str, str] = {}
    body = event.reason

    if event.alert is not None:
        alert = event.alert
        fields["alert_id"] = alert.id
        fields["status"] = alert.status.value
        fields["usage"] = _kwh(alert.usage_at_detection)
        fields["limit"] = _kwh(alert.limit_at_detection)
        if etype == BuildingEventType.ALERT_RAISED:
            over = alert.usage_at_detection - alert.limit_at_detection
            body = (
                f"{alert.zone}: using {_kwh(alert.usage_at_detection)}"
                f" (limit {_kwh(alert.limit_at_detection)}, over by {_kwh(over)})"
            )
        if alert.notes and not body:
            body = alert.notes

    if event.adjustment is not None:
        adj = event.adjustment
        fields["old_limit"] = _kwh(adj.old_limit)
        fields["new_limit"] = _kwh(adj.new_limit)
        body = f"{adj.zone}: {adj.old_limit:g} kWh → {adj.new_limit:g} kWh ({adj.reason})"

    if event.stats is not None:
        fields["total_usage"] = _kwh(event.stats.total_usage)
        fields["zones"] = str(event.stats.zone_count)

    msg = AlertMessage(
        severity=severity,
        title=title,
        body=body,
        zone=event.zone,
        fields=fields,
        source_event_type=etype.value,
    )
    if event.timestamp:
        msg.timestamp = event.timestamp
    return msg
