#!/usr/bin/env python3
"""Main entrypoint — wires the building monitor, sensor feed, and dashboard.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level, fix the simulator seed
    python scripts/run.py --log-level DEBUG --seed 42
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from src.building.monitor import BuildingMonitor
from src.core.config import load_settings
from src.core.logging import setup_logging
from src.monitor.dispatcher import AlertDispatcher
from src.monitor.web_dashboard import start_web_dashboard
from src.sensors.simulator import SimulatedSensorFeed

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Start all components and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, config=settings.logging)

    if args.seed is not None:
        settings.simulator.seed = args.seed

    logger.info(
        "monitor_starting",
        zones=settings.building.zone_names,
        simulator=settings.simulator.enabled,
        dashboard=settings.dashboard.enabled,
    )

    # ── Building monitor ─────────────────────────────────────────
    monitor = BuildingMonitor.from_settings(settings)

    # ── Notification dispatcher ──────────────────────────────────
    dispatcher = AlertDispatcher(
        throttle_secs=settings.alerts.throttle_secs,
        buffer_size=settings.alerts.notification_buffer,
    )
    monitor.on_event(dispatcher.on_building_event)

    # ── Sensor feed ──────────────────────────────────────────────
    if not settings.simulator.enabled:
        logger.error("no_sensor_feed_enabled")
        print(
            "No sensor feed enabled. Set simulator.enabled in config/settings.yaml.",
            file=sys.stderr,
        )
        return 1

    feed = SimulatedSensorFeed(settings.building.zone_names, settings.simulator)
    feed.on_readings(monitor.on_readings)

    # ── Start everything ─────────────────────────────────────────
    runner = None
    if settings.dashboard.enabled:
        runner = await start_web_dashboard(
            monitor,
            dispatcher,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
        )

    await feed.start()
    logger.info("monitor_running", poll_interval_ms=settings.simulator.poll_interval_ms)

    # ── Wait for shutdown signal ─────────────────────────────────
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("monitor_shutting_down")
    await feed.stop()
    if runner is not None:
        await runner.cleanup()

    snap = monitor.snapshot()
    logger.info(
        "monitor_stopped",
        cycles=snap["cycles"],
        adjustments=snap["adjustments"],
        alerts=snap["alerts"],
    )
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the campus power monitor with automatic limit redistribution.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the sensor simulator",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
