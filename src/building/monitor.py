"""BuildingMonitor — runs monitoring cycles and the operator surface."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog

from src.alerts.engine import AlertEngine
from src.alerts.store import AlertLifecycleStore
from src.building.history import HistoryRecorder
from src.core.config import (
    AlertsConfig,
    BuildingConfig,
    RedistributionConfig,
    Settings,
)
from src.core.types import (
    AdjustmentRecord,
    Alert,
    AlertStatus,
    BuildingEvent,
    BuildingEventType,
    BuildingStats,
    Clock,
    CycleResult,
    Snapshot,
    ZoneReading,
    system_clock,
)
from src.power.exceptions import UnknownZoneError
from src.power.ledger import AdjustmentLedger
from src.power.redistributor import PowerRedistributor
from src.power.registry import MANUAL_ADJUSTMENT, ZoneRegistry, validate_limit
from src.sensors.reader import SnapshotReader
from src.sensors.stats import AggregateStatsCalculator

logger = structlog.stdlib.get_logger()

BuildingEventCallback = Callable[[BuildingEvent], Awaitable[None] | None]


class BuildingMonitor:
    """Owns the zone registry, ledger and alert store for one building.

    Each reading set goes through: attach limits → scan for violations
    (with automatic redistribution) → store alerts → aggregate stats →
    daily history.  Operator actions validate their input before touching
    any state.  Cycles and operator actions are serialized so a
    redistribution always reads and commits against one consistent view.

    Usage::

        monitor = BuildingMonitor.from_settings(settings)
        monitor.on_event(dispatcher.on_building_event)
        feed.on_readings(monitor.on_readings)

        await monitor.set_limit("Library", 300)
        await monitor.acknowledge(alert_id)
    """

    def __init__(
        self,
        building: BuildingConfig | None = None,
        redistribution: RedistributionConfig | None = None,
        alerts: AlertsConfig | None = None,
        history: HistoryRecorder | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._building = building or BuildingConfig()
        self._alerts_config = alerts or AlertsConfig()
        self._clock = clock

        self._ledger = AdjustmentLedger()
        self._registry = ZoneRegistry(
            ledger=self._ledger,
            initial_limits={
                z.name: z.initial_limit for z in self._building.zones
                if z.initial_limit > 0
            },
            clock=clock,
        )
        self._reader = SnapshotReader(self._registry, clock=clock)
        self._redistributor = PowerRedistributor(self._registry, redistribution)
        self._store = AlertLifecycleStore(clock=clock)
        self._engine = AlertEngine(self._redistributor, self._store, clock=clock)
        self._stats_calc = AggregateStatsCalculator()
        self._history = history or HistoryRecorder()

        self._callbacks: list[BuildingEventCallback] = []
        self._lock = threading.RLock()
        self._latest_readings: list[ZoneReading] = []
        self._latest_snapshots: list[Snapshot] = []
        self._latest_stats = BuildingStats()
        self._cycle_count = 0

    @classmethod
    def from_settings(cls, settings: Settings, clock: Clock = system_clock) -> BuildingMonitor:
        return cls(
            building=settings.building,
            redistribution=settings.redistribution,
            alerts=settings.alerts,
            history=HistoryRecorder(max_days=settings.history.max_days),
            clock=clock,
        )

    # ── Properties ───────────────────────────────────────────────

    @property
    def zones(self) -> list[str]:
        return self._building.zone_names

    @property
    def registry(self) -> ZoneRegistry:
        return self._registry

    @property
    def ledger(self) -> AdjustmentLedger:
        return self._ledger

    @property
    def alerts(self) -> AlertLifecycleStore:
        return self._store

    @property
    def history(self) -> HistoryRecorder:
        return self._history

    @property
    def redistributor(self) -> PowerRedistributor:
        return self._redistributor

    @property
    def latest_snapshots(self) -> list[Snapshot]:
        return list(self._latest_snapshots)

    @property
    def latest_stats(self) -> BuildingStats:
        return self._latest_stats.model_copy()

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    # ── Events ───────────────────────────────────────────────────

    def on_event(self, callback: BuildingEventCallback) -> None:
        """Register a callback for building events."""
        self._callbacks.append(callback)

    async def _emit(self, event: BuildingEvent) -> None:
        for cb in self._callbacks:
            try:
                result = cb(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(
                    "building_event_callback_error",
                    event_type=event.event_type,
                )

    # ── Cycle ────────────────────────────────────────────────────

    async def on_readings(self, readings: list[ZoneReading]) -> None:
        """Sensor feed callback."""
        await self.run_cycle(readings)

    def process(self, readings: Sequence[ZoneReading]) -> CycleResult:
        """Run one cycle synchronously, without emitting events."""
        with self._lock:
            ledger_mark = len(self._ledger)
            snapshots = self._reader.attach_limits(readings)

            skip: set[str] = set()
            if self._alerts_config.suppress_duplicates:
                skip = self._store.open_zones()
            alerts = self._engine.scan(snapshots, skip_zones=skip)

            stats = self._stats_calc.compute(snapshots)
            now = self._clock()
            if snapshots:
                self._history.record(snapshots, stats, at=now)

            self._latest_readings = list(readings)
            self._latest_snapshots = snapshots
            self._latest_stats = stats
            self._cycle_count += 1
            adjustments = list(self._ledger.records()[ledger_mark:])

        logger.debug(
            "cycle_completed",
            cycle=self._cycle_count,
            zones=len(snapshots),
            alerts=len(alerts),
            adjustments=len(adjustments),
            total_usage=round(stats.total_usage, 1),
        )
        return CycleResult(
            snapshots=snapshots,
            alerts=alerts,
            adjustments=adjustments,
            stats=stats,
        )

    async def run_cycle(self, readings: Sequence[ZoneReading]) -> CycleResult:
        """Run one monitoring cycle and emit its events."""
        result = self.process(readings)
        now = self._clock()

        for alert in result.alerts:
            await self._emit(BuildingEvent(
                event_type=BuildingEventType.ALERT_RAISED,
                zone=alert.zone,
                alert=alert,
                timestamp=alert.detected_at,
            ))
            if alert.status == AlertStatus.RESOLVED:
                await self._emit(BuildingEvent(
                    event_type=BuildingEventType.ALERT_AUTO_RESOLVED,
                    zone=alert.zone,
                    alert=alert,
                    reason=alert.notes or "",
                    timestamp=alert.resolved_at or now,
                ))

        for record in result.adjustments:
            await self._emit(self._limit_event(record))

        await self._emit(BuildingEvent(
            event_type=BuildingEventType.CYCLE_COMPLETED,
            stats=result.stats,
            timestamp=now,
        ))
        return result

    # ── Operator actions ─────────────────────────────────────────

    async def set_limit(
        self,
        zone: str,
        value: Any,
        reason: str = MANUAL_ADJUSTMENT,
    ) -> AdjustmentRecord:
        """Validate and apply an operator limit change.

        The latest snapshots are re-read so they reflect the new limit.

        Raises:
            InvalidLimitError: *value* is not a finite positive number.
            UnknownZoneError: *zone* is not configured for this building.
        """
        limit = validate_limit(value)
        if zone not in self.zones:
            raise UnknownZoneError(f"Unknown zone {zone!r}")

        with self._lock:
            record = self._registry.set_limit(zone, limit, reason)
            if self._latest_readings:
                self._latest_snapshots = self._reader.attach_limits(
                    self._latest_readings,
                )
                self._latest_stats = self._stats_calc.compute(self._latest_snapshots)

        await self._emit(self._limit_event(record))
        return record

    async def acknowledge(self, alert_id: str) -> Alert:
        """Raises AlertNotFoundError / AlertTransitionError on bad input."""
        with self._lock:
            alert = self._store.acknowledge_or_raise(alert_id)
        await self._emit(self._alert_event(BuildingEventType.ALERT_ACKNOWLEDGED, alert))
        return alert

    async def resolve(self, alert_id: str, note: str | None = None) -> Alert:
        with self._lock:
            alert = self._store.resolve_or_raise(alert_id, note=note)
        await self._emit(self._alert_event(BuildingEventType.ALERT_RESOLVED, alert))
        return alert

    async def annotate(self, alert_id: str, note: str) -> Alert:
        with self._lock:
            alert = self._store.annotate_or_raise(alert_id, note)
        await self._emit(self._alert_event(
            BuildingEventType.ALERT_ANNOTATED, alert, reason=alert.notes or "",
        ))
        return alert

    async def dismiss(self, alert_id: str) -> Alert:
        with self._lock:
            alert = self._store.dismiss_or_raise(alert_id)
        await self._emit(self._alert_event(BuildingEventType.ALERT_DISMISSED, alert))
        return alert

    # ── Views ────────────────────────────────────────────────────

    def zone_rows(self) -> list[dict[str, object]]:
        """Per-zone current state for display."""
        by_zone = {s.zone: s for s in self._latest_snapshots}
        rows: list[dict[str, object]] = []
        for zone in self.zones:
            snap = by_zone.get(zone)
            rows.append({
                "zone": zone,
                "limit": self._registry.get_limit(zone),
                "usage": snap.usage if snap else None,
                "temperature": snap.temperature if snap else None,
                "humidity": snap.humidity if snap else None,
                "occupancy": snap.occupancy if snap else None,
                "violating": snap.violating if snap else False,
            })
        return rows

    def snapshot(self) -> dict[str, object]:
        """Return a snapshot of current building state."""
        stats = self._latest_stats
        return {
            "cycles": self._cycle_count,
            "zones": self.zone_rows(),
            "total_usage": stats.total_usage,
            "average_usage": stats.average_usage,
            "total_limit": stats.total_limit,
            "total_occupancy": stats.total_occupancy,
            "average_temperature": stats.average_temperature,
            "average_humidity": stats.average_humidity,
            "alerts": self._store.counts(),
            "adjustments": len(self._ledger),
        }

    # ── Internals ────────────────────────────────────────────────

    def _limit_event(self, record: AdjustmentRecord) -> BuildingEvent:
        return BuildingEvent(
            event_type=BuildingEventType.LIMIT_CHANGED,
            zone=record.zone,
            adjustment=record,
            reason=record.reason,
            timestamp=record.timestamp,
        )

    def _alert_event(
        self,
        event_type: BuildingEventType,
        alert: Alert,
        reason: str = "",
    ) -> BuildingEvent:
        return BuildingEvent(
            event_type=event_type,
            zone=alert.zone,
            alert=alert,
            reason=reason,
            timestamp=self._clock(),
        )
