"""Configuration module for the telemetry batcher."""

from .logger_config import setup_logging
from .settings import ConfigManager, ExportErrorPolicy, ReporterSettings, get_config_manager, get_current_settings

__all__ = ["ReporterSettings", "ExportErrorPolicy", "ConfigManager", "get_config_manager", "get_current_settings", "setup_logging"]
