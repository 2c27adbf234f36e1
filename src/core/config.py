"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")

DEFAULT_ZONES: list[str] = [
    "Main Hall",
    "Library",
    "Cafeteria",
    "Computer Lab",
    "Auditorium",
]


class ZoneConfig(BaseModel):
    """A single monitored zone and its starting power limit (0 = unset)."""

    name: str
    initial_limit: float = Field(default=0.0, ge=0.0)


class BuildingConfig(BaseModel):
    """The fixed zone set of the building."""

    zones: list[ZoneConfig] = Field(
        default_factory=lambda: [ZoneConfig(name=name) for name in DEFAULT_ZONES],
    )

    @property
    def zone_names(self) -> list[str]:
        return [z.name for z in self.zones]


class RedistributionConfig(BaseModel):
    """Power redistribution policy."""

    donor_share: float = Field(default=0.8, gt=0.0, le=1.0)
    safety_buffer: float = Field(default=1.1, ge=1.0)


class AlertsConfig(BaseModel):
    """Alert engine and notification dispatch configuration."""

    suppress_duplicates: bool = True
    throttle_secs: float = 30.0
    notification_buffer: int = 100


class SimulatorConfig(BaseModel):
    """Simulated sensor feed — random readings at a fixed cadence."""

    enabled: bool = True
    poll_interval_ms: int = 5000
    seed: int | None = None
    usage_min_kwh: float = 100.0
    usage_max_kwh: float = 500.0
    temperature_min_c: float = 20.0
    temperature_max_c: float = 28.0
    humidity_min_pct: float = 30.0
    humidity_max_pct: float = 70.0
    max_occupancy: int = 100
    max_reading_age_minutes: int = 30


class HistoryConfig(BaseModel):
    """Daily aggregate retention for the history view and CSV export."""

    max_days: int = 90


class DashboardConfig(BaseModel):
    """Web dashboard / operator API configuration."""

    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8080


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    building: BuildingConfig = BuildingConfig()
    redistribution: RedistributionConfig = RedistributionConfig()
    alerts: AlertsConfig = AlertsConfig()
    simulator: SimulatorConfig = SimulatorConfig()
    history: HistoryConfig = HistoryConfig()
    dashboard: DashboardConfig = DashboardConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
