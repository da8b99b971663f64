"""Process-wide registry of named batch reporters.

Lets producers enqueue by name without holding a reporter reference.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from loguru import logger

from ..errors import ReporterNotFoundError, ReporterRegistryError

if TYPE_CHECKING:
    from .batch_reporter import BatchReporter

DEFAULT_REPORTER_NAME = "default"

_reporters: Dict[str, "BatchReporter"] = {}
_lock = threading.Lock()


def register(name: str, reporter: "BatchReporter") -> None:
    """Register a reporter under ``name``.

    Raises:
        ReporterRegistryError: another reporter already holds the name
    """
    with _lock:
        existing = _reporters.get(name)
        if existing is not None and existing is not reporter:
            raise ReporterRegistryError(f"A batch reporter is already registered as {name!r}")
        _reporters[name] = reporter
    logger.debug(f"Registered batch reporter {name!r}")


def unregister(name: str, reporter: Optional["BatchReporter"] = None) -> bool:
    """Remove ``name`` from the registry, only if it maps to ``reporter`` when one is given."""
    with _lock:
        existing = _reporters.get(name)
        if existing is None or (reporter is not None and existing is not reporter):
            return False
        del _reporters[name]
    logger.debug(f"Unregistered batch reporter {name!r}")
    return True


def get_reporter(name: str = DEFAULT_REPORTER_NAME) -> "BatchReporter":
    with _lock:
        try:
            return _reporters[name]
        except KeyError:
            raise ReporterNotFoundError(f"No batch reporter registered as {name!r}") from None


def registered_names() -> List[str]:
    with _lock:
        return sorted(_reporters)


def enqueue_event(event: Any, config: Any = None, name: str = DEFAULT_REPORTER_NAME) -> None:
    """Enqueue on the reporter registered as ``name``.

    Raises:
        ReporterNotFoundError: nothing is registered under ``name``
    """
    get_reporter(name).enqueue(event, config)
