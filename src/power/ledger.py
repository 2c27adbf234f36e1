"""AdjustmentLedger — append-only log of every zone limit change."""

from __future__ import annotations

import threading
from collections.abc import Iterator

from src.core.types import AdjustmentRecord


class AdjustmentLedger:
    """Ordered, append-only record of limit changes.

    Records are kept in insertion order.  There is no way to edit or
    remove an entry once appended.
    """

    def __init__(self) -> None:
        self._records: list[AdjustmentRecord] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AdjustmentRecord]:
        return iter(self.records())

    def append(self, record: AdjustmentRecord) -> None:
        with self._lock:
            self._records.append(record)

    def records(self) -> tuple[AdjustmentRecord, ...]:
        """All records, oldest first."""
        with self._lock:
            return tuple(self._records)

    def recent(self, limit: int | None = None) -> list[AdjustmentRecord]:
        """Records newest first, optionally capped at *limit* entries."""
        with self._lock:
            newest_first = list(reversed(self._records))
        if limit is not None:
            return newest_first[:limit]
        return newest_first

    def for_zone(self, zone: str) -> list[AdjustmentRecord]:
        """Chronological records for a single zone."""
        return [r for r in self.records() if r.zone == zone]
