"""Mutable state owned by a single batch reporter worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple


@dataclass
class ReporterState:
    """Pending events, export config and the scheduled-report flag.

    Only the reporter's worker thread touches an instance.
    """

    batch_size: int = 1
    config: Any = None
    report_scheduled: bool = False
    unreported_events: List[Any] = field(default_factory=list)

    def enqueue_event(self, event: Any, config: Any) -> None:
        """Append an event; the latest config wins for every queued event."""
        self.unreported_events.append(event)
        self.config = config

    def split_batch(self) -> Tuple[List[Any], List[Any]]:
        """Return (first batch_size events, the rest) as new lists."""
        return self.unreported_events[: self.batch_size], self.unreported_events[self.batch_size :]

    def set_unreported_events(self, remaining_events: List[Any]) -> None:
        self.unreported_events = remaining_events

    def set_report_scheduled(self) -> None:
        self.report_scheduled = True

    def reset_report_scheduled(self) -> None:
        self.report_scheduled = False

    def should_schedule(self) -> bool:
        """True when nothing is scheduled and there is something to report."""
        if self.report_scheduled:
            return False
        return len(self.unreported_events) > 0
