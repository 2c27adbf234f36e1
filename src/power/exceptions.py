"""Power management exceptions."""

from __future__ import annotations


class PowerError(Exception):
    """Base exception for power management errors."""


class InvalidLimitError(PowerError):
    """An operator-supplied limit is not a finite positive number."""


class UnknownZoneError(PowerError):
    """The zone is not part of the configured building."""
