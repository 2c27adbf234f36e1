"""Tests for AlertLifecycleStore — transitions, ordering invariants, dismiss."""

from __future__ import annotations

import pytest

from src.alerts.exceptions import AlertNotFoundError, AlertTransitionError
from src.alerts.store import AlertLifecycleStore
from src.core.types import Alert, AlertStatus

# ── Helpers ─────────────────────────────────────────────────────


class _Clock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


def _alert(alert_id: str = "a1", zone: str = "Library", **kw: object) -> Alert:
    defaults: dict[str, object] = {
        "id": alert_id,
        "zone": zone,
        "usage_at_detection": 120.0,
        "limit_at_detection": 100.0,
        "detected_at": 50.0,
    }
    defaults.update(kw)
    return Alert(**defaults)  # type: ignore[arg-type]


def _store(*alerts: Alert) -> AlertLifecycleStore:
    store = AlertLifecycleStore(clock=_Clock())
    store.add(alerts)
    return store


# ── Add / list ──────────────────────────────────────────────────


class TestAddAndList:
    def test_newest_batch_first(self) -> None:
        store = _store(_alert("a1"), _alert("a2"))
        store.add([_alert("b1"), _alert("b2")])
        assert [a.id for a in store.list()] == ["b1", "b2", "a1", "a2"]

    def test_duplicate_ids_ignored(self) -> None:
        store = _store(_alert("a1"))
        added = store.add([_alert("a1"), _alert("a2")])
        assert [a.id for a in added] == ["a2"]
        assert len(store) == 2

    def test_filter_by_status(self) -> None:
        store = _store(
            _alert("a1"),
            _alert("a2", status=AlertStatus.RESOLVED, resolved_at=60.0),
        )
        assert [a.id for a in store.list(AlertStatus.ACTIVE)] == ["a1"]
        assert [a.id for a in store.list(AlertStatus.RESOLVED)] == ["a2"]

    def test_returned_alerts_are_copies(self) -> None:
        store = _store(_alert("a1"))
        copy = store.get("a1")
        assert copy is not None
        copy.status = AlertStatus.RESOLVED
        assert store.get("a1").status == AlertStatus.ACTIVE  # type: ignore[union-attr]

    def test_open_zones(self) -> None:
        store = _store(
            _alert("a1", zone="A"),
            _alert("a2", zone="B", status=AlertStatus.ACKNOWLEDGED, acknowledged_at=55.0),
            _alert("a3", zone="C", status=AlertStatus.RESOLVED, resolved_at=60.0),
        )
        assert store.open_zones() == {"A", "B"}

    def test_counts(self) -> None:
        store = _store(_alert("a1"), _alert("a2"))
        store.acknowledge("a1")
        assert store.counts() == {"active": 1, "acknowledged": 1, "resolved": 0}


# ── Transitions ─────────────────────────────────────────────────


class TestAcknowledge:
    def test_active_to_acknowledged(self) -> None:
        store = _store(_alert())
        assert store.acknowledge("a1") is True
        alert = store.get("a1")
        assert alert is not None
        assert alert.status == AlertStatus.ACKNOWLEDGED
        assert alert.acknowledged_at == 101.0

    def test_twice_is_rejected(self) -> None:
        store = _store(_alert())
        store.acknowledge("a1")
        first = store.get("a1").acknowledged_at  # type: ignore[union-attr]
        assert store.acknowledge("a1") is False
        assert store.get("a1").acknowledged_at == first  # type: ignore[union-attr]

    def test_unknown_id(self) -> None:
        store = _store()
        assert store.acknowledge("missing") is False
        with pytest.raises(AlertNotFoundError):
            store.acknowledge_or_raise("missing")

    def test_resolved_cannot_be_acknowledged(self) -> None:
        store = _store(_alert())
        store.resolve("a1", automatic=True)
        with pytest.raises(AlertTransitionError):
            store.acknowledge_or_raise("a1")


class TestResolve:
    def test_manual_requires_acknowledged(self) -> None:
        store = _store(_alert())
        assert store.resolve("a1") is False
        assert store.get("a1").status == AlertStatus.ACTIVE  # type: ignore[union-attr]

    def test_manual_path(self) -> None:
        store = _store(_alert())
        store.acknowledge("a1")
        assert store.resolve("a1") is True
        alert = store.get("a1")
        assert alert is not None
        assert alert.status == AlertStatus.RESOLVED
        assert alert.acknowledged_at is not None
        assert alert.resolved_at is not None
        assert alert.acknowledged_at <= alert.resolved_at

    def test_automatic_from_active(self) -> None:
        store = _store(_alert())
        assert store.resolve("a1", automatic=True, note="auto") is True
        alert = store.get("a1")
        assert alert is not None
        assert alert.status == AlertStatus.RESOLVED
        assert alert.acknowledged_at is None
        assert alert.notes == "auto"

    def test_resolved_is_terminal(self) -> None:
        store = _store(_alert())
        store.acknowledge("a1")
        store.resolve("a1")
        resolved_at = store.get("a1").resolved_at  # type: ignore[union-attr]
        assert store.resolve("a1") is False
        assert store.resolve("a1", automatic=True) is False
        assert store.get("a1").resolved_at == resolved_at  # type: ignore[union-attr]

    def test_resolved_at_never_before_acknowledged_at(self) -> None:
        times = iter([500.0, 400.0])
        store = AlertLifecycleStore(clock=lambda: next(times))
        store.add([_alert()])
        store.acknowledge("a1")
        store.resolve("a1")
        alert = store.get("a1")
        assert alert is not None
        assert alert.acknowledged_at == 500.0
        assert alert.resolved_at == 500.0


class TestAnnotate:
    @pytest.mark.parametrize("status", list(AlertStatus))
    def test_any_state(self, status: AlertStatus) -> None:
        kw: dict[str, object] = {"status": status}
        if status == AlertStatus.RESOLVED:
            kw["resolved_at"] = 60.0
        store = _store(_alert(**kw))
        assert store.annotate("a1", "  checked HVAC  ") is True
        assert store.get("a1").notes == "checked HVAC"  # type: ignore[union-attr]

    def test_replaces_existing(self) -> None:
        store = _store(_alert(notes="old"))
        store.annotate("a1", "new")
        assert store.get("a1").notes == "new"  # type: ignore[union-attr]

    def test_blank_rejected(self) -> None:
        store = _store(_alert(notes="keep"))
        assert store.annotate("a1", "   ") is False
        assert store.get("a1").notes == "keep"  # type: ignore[union-attr]


class TestDismiss:
    @pytest.mark.parametrize("status", list(AlertStatus))
    def test_removes_in_any_state(self, status: AlertStatus) -> None:
        kw: dict[str, object] = {"status": status}
        if status == AlertStatus.RESOLVED:
            kw["resolved_at"] = 60.0
        store = _store(_alert(**kw), _alert("a2"))
        assert store.dismiss("a1") is True
        assert "a1" not in store
        assert [a.id for a in store.list()] == ["a2"]

    def test_dismissed_cannot_be_acknowledged(self) -> None:
        store = _store(_alert())
        store.dismiss("a1")
        assert store.acknowledge("a1") is False

    def test_dismiss_unknown(self) -> None:
        store = _store()
        assert store.dismiss("nope") is False
