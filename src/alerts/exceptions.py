"""Alert lifecycle exceptions."""

from __future__ import annotations


class AlertError(Exception):
    """Base exception for alert lifecycle errors."""


class AlertNotFoundError(AlertError):
    """No alert with the given id is in the store."""


class AlertTransitionError(AlertError):
    """The requested status change is not allowed from the current state."""
