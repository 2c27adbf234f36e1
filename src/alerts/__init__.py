"""Alerting — violation detection and the operator alert lifecycle."""

from src.alerts.engine import AUTO_RESOLVED_NOTE, AlertEngine
from src.alerts.exceptions import AlertError, AlertNotFoundError, AlertTransitionError
from src.alerts.store import AlertLifecycleStore

__all__ = [
    "AUTO_RESOLVED_NOTE",
    "AlertEngine",
    "AlertError",
    "AlertLifecycleStore",
    "AlertNotFoundError",
    "AlertTransitionError",
]
