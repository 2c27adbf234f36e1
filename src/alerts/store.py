"""AlertLifecycleStore — live alert collection with operator transitions."""

from __future__ import annotations

import threading
from collections.abc import Iterable

import structlog

from src.alerts.exceptions import AlertNotFoundError, AlertTransitionError
from src.core.types import Alert, AlertStatus, Clock, system_clock

logger = structlog.stdlib.get_logger()


class AlertLifecycleStore:
    """Holds alerts newest first and drives their status transitions.

    Allowed transitions::

        active ──acknowledge──▶ acknowledged ──resolve──▶ resolved
        active ──resolve(automatic=True)──────────────▶ resolved

    Nothing leaves ``resolved``.  ``dismiss`` removes an alert in any
    state.  The non-raising methods return False for an unknown id or a
    disallowed transition; the ``*_or_raise`` variants raise instead.
    """

    def __init__(self, clock: Clock = system_clock) -> None:
        self._alerts: list[Alert] = []
        self._clock = clock
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._alerts)

    def __contains__(self, alert_id: object) -> bool:
        return any(a.id == alert_id for a in self._alerts)

    # ── Reads ────────────────────────────────────────────────────

    def get(self, alert_id: str) -> Alert | None:
        """Copy of the alert with *alert_id*, if present."""
        with self._lock:
            alert = self._find(alert_id)
            return alert.model_copy() if alert is not None else None

    def list(self, status: AlertStatus | None = None) -> list[Alert]:
        """Copies of stored alerts, newest first, optionally by status."""
        with self._lock:
            return [
                a.model_copy() for a in self._alerts
                if status is None or a.status == status
            ]

    def open_zones(self) -> set[str]:
        """Zones with an active or acknowledged alert."""
        with self._lock:
            return {a.zone for a in self._alerts if a.is_open}

    def counts(self) -> dict[str, int]:
        with self._lock:
            counts = {s.value: 0 for s in AlertStatus}
            for a in self._alerts:
                counts[a.status.value] += 1
            return counts

    # ── Mutation ─────────────────────────────────────────────────

    def add(self, alerts: Iterable[Alert]) -> list[Alert]:
        """Insert new alerts ahead of existing ones, keeping their order.

        Alerts whose id is already stored are skipped.  Returns the ones
        actually added.
        """
        with self._lock:
            known = {a.id for a in self._alerts}
            fresh: list[Alert] = []
            for alert in alerts:
                if alert.id in known:
                    continue
                known.add(alert.id)
                fresh.append(alert.model_copy())
            self._alerts[:0] = fresh
            return [a.model_copy() for a in fresh]

    def acknowledge(self, alert_id: str) -> bool:
        try:
            self.acknowledge_or_raise(alert_id)
        except (AlertNotFoundError, AlertTransitionError) as exc:
            logger.warning("alert_acknowledge_rejected", alert_id=alert_id, reason=str(exc))
            return False
        return True

    def acknowledge_or_raise(self, alert_id: str) -> Alert:
        """Move an active alert to acknowledged."""
        with self._lock:
            alert = self._require(alert_id)
            if alert.status != AlertStatus.ACTIVE:
                raise AlertTransitionError(
                    f"Cannot acknowledge alert {alert_id} in state {alert.status.value}",
                )
            alert.status = AlertStatus.ACKNOWLEDGED
            alert.acknowledged_at = self._clock()
            logger.info("alert_acknowledged", alert_id=alert_id, zone=alert.zone)
            return alert.model_copy()

    def resolve(
        self,
        alert_id: str,
        automatic: bool = False,
        note: str | None = None,
    ) -> bool:
        try:
            self.resolve_or_raise(alert_id, automatic=automatic, note=note)
        except (AlertNotFoundError, AlertTransitionError) as exc:
            logger.warning("alert_resolve_rejected", alert_id=alert_id, reason=str(exc))
            return False
        return True

    def resolve_or_raise(
        self,
        alert_id: str,
        automatic: bool = False,
        note: str | None = None,
    ) -> Alert:
        """Resolve an acknowledged alert, or an active one when *automatic*."""
        with self._lock:
            alert = self._require(alert_id)
            allowed = {AlertStatus.ACKNOWLEDGED}
            if automatic:
                allowed.add(AlertStatus.ACTIVE)
            if alert.status not in allowed:
                raise AlertTransitionError(
                    f"Cannot resolve alert {alert_id} in state {alert.status.value}",
                )
            now = self._clock()
            if alert.acknowledged_at is not None:
                now = max(now, alert.acknowledged_at)
            alert.status = AlertStatus.RESOLVED
            alert.resolved_at = now
            if note:
                alert.notes = note
            logger.info(
                "alert_resolved",
                alert_id=alert_id,
                zone=alert.zone,
                automatic=automatic,
            )
            return alert.model_copy()

    def annotate(self, alert_id: str, note: str) -> bool:
        try:
            self.annotate_or_raise(alert_id, note)
        except (AlertNotFoundError, ValueError) as exc:
            logger.warning("alert_annotate_rejected", alert_id=alert_id, reason=str(exc))
            return False
        return True

    def annotate_or_raise(self, alert_id: str, note: str) -> Alert:
        """Replace the alert's notes; allowed in any state."""
        text = note.strip()
        if not text:
            raise ValueError("Note must not be blank")
        with self._lock:
            alert = self._require(alert_id)
            alert.notes = text
            return alert.model_copy()

    def dismiss(self, alert_id: str) -> bool:
        try:
            self.dismiss_or_raise(alert_id)
        except AlertNotFoundError:
            logger.warning("alert_dismiss_rejected", alert_id=alert_id)
            return False
        return True

    def dismiss_or_raise(self, alert_id: str) -> Alert:
        """Remove an alert from the live set regardless of state."""
        with self._lock:
            alert = self._require(alert_id)
            self._alerts.remove(alert)
            logger.info("alert_dismissed", alert_id=alert_id, zone=alert.zone)
            return alert

    # ── Internals ────────────────────────────────────────────────

    def _find(self, alert_id: str) -> Alert | None:
        for alert in self._alerts:
            if alert.id == alert_id:
                return alert
        return None

    def _require(self, alert_id: str) -> Alert:
        alert = self._find(alert_id)
        if alert is None:
            raise AlertNotFoundError(f"No alert with id {alert_id}")
        return alert
