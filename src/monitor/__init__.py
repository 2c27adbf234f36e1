"""Notification, decision logging, and web dashboard subsystem."""

from src.monitor.dispatcher import AlertDispatcher
from src.monitor.formatters import format_building_event
from src.monitor.types import AlertMessage, Severity
from src.monitor.web_dashboard import create_web_app, start_web_dashboard

__all__ = [
    "AlertDispatcher",
    "AlertMessage",
    "Severity",
    "create_web_app",
    "format_building_event",
    "start_web_dashboard",
]
