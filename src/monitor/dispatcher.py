"""Central alert dispatcher — decision log plus a throttled notification feed."""

from __future__ import annotations

import time
from collections import deque

import structlog

from src.core.types import BuildingEvent
from src.monitor.formatters import format_building_event
from src.monitor.types import AlertMessage, Severity

# Dedicated structured logger for decision records.
decision_logger = structlog.get_logger("decision_log")

logger = structlog.get_logger(__name__)


class AlertDispatcher:
    """Routes building events to the operator notification feed.

    - Every event is logged via *decision_logger*.
    - DEBUG events are log-only — never added to the feed.
    - INFO events are throttled per event type and zone.
    - WARNING/CRITICAL events bypass the throttle.

    The feed keeps the newest ``buffer_size`` messages.
    """

    def __init__(
        self,
        throttle_secs: float = 30.0,
        buffer_size: int = 100,
    ) -> None:
        self._throttle_secs = throttle_secs
        self._last_sent: dict[str, float] = {}
        self._feed: deque[AlertMessage] = deque(maxlen=buffer_size)
        self._suppressed = 0

    @property
    def suppressed(self) -> int:
        """INFO messages dropped by the throttle so far."""
        return self._suppressed

    def recent(self, limit: int | None = None) -> list[AlertMessage]:
        """Dispatched messages, newest first."""
        items = list(reversed(self._feed))
        return items[:limit] if limit is not None else items

    # ── Callback entry point ────────────────────────────────────

    async def on_building_event(self, event: BuildingEvent) -> None:
        msg = format_building_event(event)
        self._handle(msg)

    # ── Direct send ─────────────────────────────────────────────

    def send(self, msg: AlertMessage) -> None:
        """Dispatch an AlertMessage directly (bypasses throttle)."""
        self._log_decision(msg)
        self._publish(msg)

    # ── Internal routing ────────────────────────────────────────

    def _handle(self, msg: AlertMessage) -> None:
        self._log_decision(msg)

        if msg.severity == Severity.DEBUG:
            return

        if msg.severity >= Severity.WARNING:
            self._last_sent[msg.throttle_key] = time.monotonic()
            self._publish(msg)
            return

        now = time.monotonic()
        last = self._last_sent.get(msg.throttle_key, -float("inf"))
        if now - last < self._throttle_secs:
            self._suppressed += 1
            return

        self._last_sent[msg.throttle_key] = now
        self._publish(msg)

    def _log_decision(self, msg: AlertMessage) -> None:
        decision_logger.info(
            "decision",
            severity=msg.severity.name,
            title=msg.title,
            body=msg.body,
            zone=msg.zone,
            source_event_type=msg.source_event_type,
            fields=msg.fields,
        )

    def _publish(self, msg: AlertMessage) -> None:
        self._feed.append(msg)
        if msg.severity >= Severity.WARNING:
            logger.warning("notification", title=msg.title, zone=msg.zone, body=msg.body)
