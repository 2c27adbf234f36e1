"""Domain types for the notification subsystem."""

from __future__ import annotations

import time
from enum import IntEnum

from pydantic import BaseModel, Field


class Severity(IntEnum):
    """Notification severity — ordered so comparisons work naturally."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    CRITICAL = 3


class AlertMessage(BaseModel):
    """Normalised notification derived from a building event."""

    severity: Severity
    title: str
    body: str = ""
    zone: str = ""
    fields: dict[str, str] = Field(default_factory=dict)
    source_event_type: str = ""
    timestamp: float = Field(default_factory=time.time)

    @property
    def throttle_key(self) -> str:
        """Throttling is per event type and zone."""
        return f"{self.source_event_type}:{self.zone}"
