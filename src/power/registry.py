"""ZoneRegistry — current power limit per zone, with ledgered changes."""

from __future__ import annotations

import math
import threading
from collections.abc import Mapping
from typing import Any

import structlog

from src.core.types import AdjustmentRecord, Clock, system_clock
from src.power.exceptions import InvalidLimitError
from src.power.ledger import AdjustmentLedger

logger = structlog.stdlib.get_logger()

MANUAL_ADJUSTMENT = "Manual adjustment"


def validate_limit(value: Any) -> float:
    """Coerce operator input to a limit, rejecting anything not finite and > 0.

    Raises:
        InvalidLimitError: for non-numeric, non-finite or non-positive input.
    """
    if isinstance(value, bool):
        raise InvalidLimitError(f"Limit must be a number, got {value!r}")
    try:
        limit = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidLimitError(f"Limit must be a number, got {value!r}") from exc
    if not math.isfinite(limit):
        raise InvalidLimitError(f"Limit must be finite, got {value!r}")
    if limit <= 0:
        raise InvalidLimitError(f"Limit must be positive, got {value!r}")
    return limit


class ZoneRegistry:
    """Holds each zone's configured limit.  A limit of 0 means unset.

    Every ``set_limit`` call appends an :class:`AdjustmentRecord` to the
    ledger.  Initial limits passed to the constructor are configuration,
    not adjustments, and are not ledgered.

    ``lock`` is re-entrant so a caller can hold it across several
    ``set_limit`` calls and commit them as one unit.
    """

    def __init__(
        self,
        ledger: AdjustmentLedger | None = None,
        initial_limits: Mapping[str, float] | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self._ledger = ledger if ledger is not None else AdjustmentLedger()
        self._limits: dict[str, float] = dict(initial_limits or {})
        self._clock = clock
        self.lock = threading.RLock()

    @property
    def ledger(self) -> AdjustmentLedger:
        return self._ledger

    @property
    def limits(self) -> dict[str, float]:
        """Copy of the current limit map."""
        with self.lock:
            return dict(self._limits)

    @property
    def zones(self) -> list[str]:
        """Zones that have ever had a limit configured."""
        with self.lock:
            return list(self._limits)

    def get_limit(self, zone: str) -> float:
        """Current limit for *zone*, or 0 if never set."""
        with self.lock:
            return self._limits.get(zone, 0.0)

    def set_limit(
        self,
        zone: str,
        new_limit: float,
        reason: str = MANUAL_ADJUSTMENT,
    ) -> AdjustmentRecord:
        """Store *new_limit* for *zone* and ledger the change.

        No range checks happen here; operator input goes through
        :func:`validate_limit` first.
        """
        with self.lock:
            old_limit = self._limits.get(zone, 0.0)
            record = AdjustmentRecord(
                timestamp=self._clock(),
                zone=zone,
                old_limit=old_limit,
                new_limit=new_limit,
                reason=reason,
            )
            self._limits[zone] = new_limit
            self._ledger.append(record)

        logger.info(
            "limit_changed",
            zone=zone,
            old_limit=old_limit,
            new_limit=new_limit,
            reason=reason,
        )
        return record

    def history(self) -> tuple[AdjustmentRecord, ...]:
        """Full adjustment history, oldest first."""
        return self._ledger.records()
