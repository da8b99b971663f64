"""Telemetry batcher - coalesces telemetry events into bounded batches for an export function."""

from .config import ExportErrorPolicy, ReporterSettings, get_config_manager, setup_logging
from .errors import BatchReporterError, ConfigurationError, ReporterNotFoundError, ReporterRegistryError, ReporterStoppedError
from .queuer import EventProducer
from .reporter import BatchReporter, enqueue_event, get_reporter

__version__ = "0.1.0"

__all__ = [
    "BatchReporter",
    "EventProducer",
    "ReporterSettings",
    "ExportErrorPolicy",
    "get_config_manager",
    "setup_logging",
    "enqueue_event",
    "get_reporter",
    "BatchReporterError",
    "ConfigurationError",
    "ReporterStoppedError",
    "ReporterRegistryError",
    "ReporterNotFoundError",
]
