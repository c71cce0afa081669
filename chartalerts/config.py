"""Settings for chartalerts, read from a TOML file.

Example ``~/.config/chartalerts/config.toml``::

    [logging]
    level = "INFO"

    [alerts]
    exchange = "NSE"
    frequency = "every_time"
    interval = "5m"
"""

from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from chartalerts.errors import ConfigError
from chartalerts.models import AlertFrequency

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "chartalerts" / "config.toml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Resolved application settings."""

    log_level: str = Field(default="WARNING", description="Root log level for the CLI")
    default_exchange: str = Field(default="NSE", min_length=1)
    default_frequency: AlertFrequency = Field(default=AlertFrequency.ONCE_PER_BAR)
    default_interval: str = Field(default="1m", min_length=1)

    model_config = {"frozen": True}

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, level: str) -> str:
        level = level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level '{level}'")
        return level


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    A missing file yields the defaults.

    Args:
        config_path: File to read; defaults to DEFAULT_CONFIG_PATH.

    Returns:
        Settings built from the file.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return Settings()

    try:
        raw = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    logging_section = raw.get("logging", {})
    alerts_section = raw.get("alerts", {})
    values = {
        "log_level": logging_section.get("level"),
        "default_exchange": alerts_section.get("exchange"),
        "default_frequency": alerts_section.get("frequency"),
        "default_interval": alerts_section.get("interval"),
    }

    try:
        return Settings(**{k: v for k, v in values.items() if v is not None})
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
