"""Abstract sensor feed — poll loop, reading-set callbacks, lifecycle."""

from __future__ import annotations

import abc
import asyncio
import time
from collections.abc import Awaitable, Callable
from types import TracebackType

import structlog

from src.core.types import ZoneReading

logger = structlog.stdlib.get_logger()

# Called once per tick with the full reading set for all zones.
ReadingsCallback = Callable[[list[ZoneReading]], Awaitable[None] | None]


class BaseSensorFeed(abc.ABC):
    """Abstract base class for sensor feeds.

    Subclasses implement ``connect()``, ``close()``, and ``poll()``; the
    base class runs the background loop and hands each reading set to the
    registered callbacks in order.  A tick finishes (callbacks included)
    before the next one is scheduled, so cycles never overlap.

    Usage::

        feed = MyFeed(poll_interval_ms=5000)
        feed.on_readings(monitor.on_readings)
        async with feed:
            await asyncio.sleep(60)
    """

    def __init__(self, name: str, poll_interval_ms: int = 5000) -> None:
        self._name = name
        self._poll_interval_ms = poll_interval_ms
        self._callbacks: list[ReadingsCallback] = []
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._error_count = 0
        self._tick_count = 0
        self._last_poll_time: float = 0.0

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        return self._running

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def last_poll_time(self) -> float:
        return self._last_poll_time

    def on_readings(self, callback: ReadingsCallback) -> None:
        """Register a callback for each reading set."""
        self._callbacks.append(callback)

    async def _emit(self, readings: list[ZoneReading]) -> None:
        for cb in self._callbacks:
            try:
                result = cb(readings)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception(
                    "sensor_callback_error",
                    feed=self._name,
                    readings=len(readings),
                )

    @abc.abstractmethod
    async def connect(self) -> None:
        """Prepare the reading source."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the reading source."""

    @abc.abstractmethod
    async def poll(self) -> list[ZoneReading]:
        """Return one reading per zone for the current instant."""

    async def tick(self) -> list[ZoneReading]:
        """Poll once and dispatch the readings."""
        readings = await self.poll()
        self._last_poll_time = time.time()
        self._tick_count += 1
        await self._emit(readings)
        return readings

    async def start(self) -> None:
        """Start the background poll loop."""
        if self._running:
            return
        self._running = True
        await self.connect()
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "sensor_feed_started",
            feed=self._name,
            poll_interval_ms=self._poll_interval_ms,
        )

    async def stop(self) -> None:
        """Stop the poll loop and close the source."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.close()
        logger.info("sensor_feed_stopped", feed=self._name, ticks=self._tick_count)

    async def _poll_loop(self) -> None:
        interval_secs = self._poll_interval_ms / 1000.0
        while self._running:
            try:
                await self.tick()
            except asyncio.CancelledError:
                break
            except Exception:
                self._error_count += 1
                logger.exception(
                    "sensor_poll_error",
                    feed=self._name,
                    error_count=self._error_count,
                )

            try:
                await asyncio.sleep(interval_secs)
            except asyncio.CancelledError:
                break

    async def __aenter__(self) -> BaseSensorFeed:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
