"""Batch reporting: the coordinator, its state and the named reporter registry."""

from .batch_reporter import BatchReporter
from .registry import DEFAULT_REPORTER_NAME, enqueue_event, get_reporter, register, registered_names, unregister
from .state import ReporterState

__all__ = [
    "BatchReporter",
    "ReporterState",
    "DEFAULT_REPORTER_NAME",
    "register",
    "unregister",
    "get_reporter",
    "registered_names",
    "enqueue_event",
]
