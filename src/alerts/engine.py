"""AlertEngine — detects limit violations and tries automatic redistribution."""

from __future__ import annotations

import itertools
import re
from collections.abc import Collection, Sequence

import structlog

from src.alerts.store import AlertLifecycleStore
from src.core.types import Alert, Clock, Snapshot, system_clock
from src.power.redistributor import PowerRedistributor

logger = structlog.stdlib.get_logger()

AUTO_RESOLVED_NOTE = "Automatically resolved through power redistribution"

# Shared across engines so ids stay unique within one clock tick.
_alert_seq = itertools.count(1)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slug(zone: str) -> str:
    return _SLUG_RE.sub("-", zone.lower()).strip("-") or "zone"


class AlertEngine:
    """Scans snapshot sets for zones drawing more than their limit.

    Every alert is added to *store* as soon as it is raised; a successful
    redistribution then resolves it there through the automatic path.

    Usage::

        engine = AlertEngine(redistributor, store)
        alerts = engine.scan(snapshots)
    """

    def __init__(
        self,
        redistributor: PowerRedistributor,
        store: AlertLifecycleStore | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._redistributor = redistributor
        self._store = store if store is not None else AlertLifecycleStore(clock=clock)
        self._clock = clock

    @property
    def store(self) -> AlertLifecycleStore:
        return self._store

    def new_alert_id(self, zone: str, detected_at: float) -> str:
        """Zone slug + millisecond timestamp + process-wide sequence."""
        return f"{_slug(zone)}-{int(detected_at * 1000)}-{next(_alert_seq)}"

    def scan(
        self,
        snapshots: Sequence[Snapshot],
        skip_zones: Collection[str] = (),
    ) -> list[Alert]:
        """Raise an alert per violating snapshot and attempt to resolve it.

        Alerts come back in snapshot order.  Each one is either still
        ``active`` or, if redistribution succeeded, ``resolved``.  Zones in
        *skip_zones* are not alerted on.
        """
        alerts: list[Alert] = []
        for snap in snapshots:
            if not snap.violating or snap.zone in skip_zones:
                continue

            now = self._clock()
            alert = Alert(
                id=self.new_alert_id(snap.zone, now),
                zone=snap.zone,
                usage_at_detection=snap.usage,
                limit_at_detection=snap.limit,
                detected_at=now,
            )
            logger.warning(
                "alert_raised",
                alert_id=alert.id,
                zone=snap.zone,
                usage=snap.usage,
                limit=snap.limit,
            )

            self._store.add([alert])
            if self._redistributor.attempt(snap, snapshots):
                alert = self._store.resolve_or_raise(
                    alert.id, automatic=True, note=AUTO_RESOLVED_NOTE,
                )

            alerts.append(alert)
        return alerts
