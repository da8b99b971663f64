"""Producer helper bound to a reporter and a fixed export config."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from ..reporter.batch_reporter import BatchReporter


class EventProducer:
    """Helper class for components to produce events."""

    def __init__(self, reporter: "BatchReporter", config: Any = None, component_name: str = "unknown"):
        """Initialize producer.

        Args:
            reporter: Reporter to send events to
            config: Export config attached to every emitted event
            component_name: Name of the component producing events
        """
        self.reporter = reporter
        self.config = config
        self.component_name = component_name
        self._emitted = 0

    def emit(self, event: Any) -> None:
        """Enqueue an event with this producer's config."""
        self.reporter.enqueue(event, self.config)
        self._emitted += 1
        logger.trace(f"{self.component_name}: emitted event #{self._emitted}")

    @property
    def emitted(self) -> int:
        return self._emitted
