"""Configuration management for the telemetry batcher.

Settings are validated with pydantic and may be overridden from
``TELEMETRY_BATCHER_*`` environment variables.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError

ENV_PREFIX = "TELEMETRY_BATCHER_"


class ExportErrorPolicy(str, Enum):
    """What a reporter does when the export function raises."""

    DROP = "drop"  # log, drop the batch, keep draining
    HALT = "halt"  # log, drop the batch, stop the worker with remaining events kept


class ReporterSettings(BaseModel):
    """Settings shared by batch reporters and the logging setup."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True, extra="forbid")

    batch_size: int = Field(default=1, gt=0, description="Maximum events per exported batch")
    export_error_policy: ExportErrorPolicy = Field(default=ExportErrorPolicy.DROP, description="Behaviour on export failure")
    stop_timeout_seconds: float = Field(default=5.0, gt=0, description="How long stop() waits for the worker thread")

    # Logging
    log_level: str = Field(default="INFO", min_length=1, description="Minimum loguru level")
    log_to_console: bool = Field(default=True, description="Emit records to stderr")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")
    log_rotation: str = Field(default="10 MB", min_length=1, description="loguru rotation rule for the log file")
    log_retention: str = Field(default="7 days", min_length=1, description="loguru retention rule for the log file")

    @field_validator("batch_size", mode="before")
    @classmethod
    def reject_bool_batch_size(cls, v: Any) -> Any:
        """bool is an int subclass; True must not silently become a batch size of 1."""
        if isinstance(v, bool):
            raise ValueError("batch_size must be an integer, not a boolean")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def from_env(cls, **overrides: Any) -> "ReporterSettings":
        """Build settings from defaults, environment overrides, then keyword overrides.

        Invalid environment values are logged and ignored. Invalid keyword
        overrides raise ConfigurationError.
        """
        settings = cls()

        for field_name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is None or raw == "":
                continue
            try:
                setattr(settings, field_name, raw)
            except ValidationError as e:
                logger.warning(f"Invalid {ENV_PREFIX}{field_name.upper()}: {raw!r} ({e.errors()[0]['msg']})")

        for key, value in overrides.items():
            try:
                setattr(settings, key, value)
            except ValueError as e:
                raise ConfigurationError(f"Invalid reporter setting {key}={value!r}: {e}") from e

        return settings


class ConfigManager:
    """Holds the process-wide reporter settings."""

    def __init__(self):
        self._settings: Optional[ReporterSettings] = None

    def load_settings(self, **overrides: Any) -> ReporterSettings:
        """Load settings from the environment with optional overrides.

        Returns:
            The loaded ReporterSettings, which also becomes the current settings
        """
        settings = ReporterSettings.from_env(**overrides)
        self._settings = settings
        return settings

    def get_settings(self) -> ReporterSettings:
        """Get the current settings, loading them from the environment on first use."""
        if self._settings is None:
            return self.load_settings()
        return self._settings

    def reset(self) -> None:
        """Forget the loaded settings."""
        self._settings = None

    def describe(self) -> Dict[str, Any]:
        """Current settings as a plain dict."""
        return self.get_settings().model_dump(mode="json")


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager."""
    return _config_manager


def get_current_settings() -> ReporterSettings:
    """Get the current settings."""
    return _config_manager.get_settings()
