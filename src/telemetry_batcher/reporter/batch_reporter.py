"""Batch reporter: coalesces enqueued events into bounded batches for an export function.

Producers call :meth:`BatchReporter.enqueue` from any thread. Each call only
posts a message to the reporter's mailbox; a single worker thread applies the
messages in order and decides when to flush. A flush is never run inline with
the enqueue that triggered it: the worker posts a ``ReportEvents`` message to
itself, so every enqueue that arrives before that message is handled lands in
the same batch. At most one flush is scheduled at any time.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from ..config.settings import ExportErrorPolicy, ReporterSettings, get_current_settings
from ..errors import ConfigurationError, ReporterStoppedError
from ..queuer.mailbox import Enqueue, Mailbox, Message, ReportEvents, Stop
from . import registry
from .state import ReporterState

ReportFn = Callable[[List[Any], Any], None]
ExportErrorCallback = Callable[[BaseException, Sequence[Any], Any], None]


class BatchReporter:
    """Sequential actor that drains enqueued events through ``report_fn`` in batches."""

    def __init__(
        self,
        report_fn: ReportFn,
        batch_size: Optional[int] = None,
        *,
        name: Optional[str] = None,
        settings: Optional[ReporterSettings] = None,
        export_error_policy: Optional[ExportErrorPolicy] = None,
        on_export_error: Optional[ExportErrorCallback] = None,
    ):
        """Initialize the reporter. Call :meth:`start` to begin flushing.

        Args:
            report_fn: Called as ``report_fn(batch, config)`` once per flush with a non-empty batch
            batch_size: Maximum events per batch, defaults to ``settings.batch_size``
            name: Register the reporter under this name while it runs
            settings: Reporter settings, defaults to the current global settings
            export_error_policy: Overrides ``settings.export_error_policy``
            on_export_error: Called as ``on_export_error(exc, batch, config)`` when report_fn raises

        Raises:
            ConfigurationError: report_fn is not callable or batch_size is not a positive integer
        """
        if not callable(report_fn):
            raise ConfigurationError("report_fn must be callable")

        self.settings = settings or get_current_settings()
        if batch_size is None:
            batch_size = self.settings.batch_size
        if isinstance(batch_size, bool) or not isinstance(batch_size, int):
            raise ConfigurationError(f"batch_size must be an integer, got {batch_size!r}")
        if batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")

        self.name = name
        try:
            self.export_error_policy = ExportErrorPolicy(export_error_policy or self.settings.export_error_policy)
        except ValueError:
            raise ConfigurationError(f"Unknown export_error_policy {export_error_policy!r}") from None
        self._report_fn = report_fn
        self._on_export_error = on_export_error

        self._state = ReporterState(batch_size=batch_size)
        self._mailbox = Mailbox()

        # Guards lifecycle flags, counters, the outstanding message count and state changes outside report_fn
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._outstanding = 0
        self._accepting = True
        self._started = False
        self._stopped = False
        self._halted = False
        self._abandoned = False
        self._in_flight = 0
        self._thread: Optional[threading.Thread] = None

        # Statistics
        self._total_events_enqueued = 0
        self._total_events_reported = 0
        self._total_batches_reported = 0
        self._total_export_failures = 0
        self._total_events_dropped = 0

    @property
    def batch_size(self) -> int:
        return self._state.batch_size

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def halted(self) -> bool:
        """True once an export failure stopped the worker under the HALT policy."""
        return self._halted

    @property
    def pending_count(self) -> int:
        """Events held by the worker and not yet reported. Approximate while running."""
        return len(self._state.unreported_events)

    def __enter__(self) -> "BatchReporter":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop(flush=True)

    # Lifecycle

    def start(self) -> None:
        """Start the worker thread. Messages posted before start are processed in order.

        Raises:
            ReporterStoppedError: the reporter was already stopped
        """
        with self._lock:
            if self._stopped or not self._accepting:
                raise ReporterStoppedError(f"Batch reporter {self._label} has been stopped and cannot be restarted")
            if self._started:
                logger.warning(f"Batch reporter {self._label} is already running")
                return

            if self.name is not None:
                registry.register(self.name, self)

            self._started = True
            self._thread = threading.Thread(target=self._run, name=f"batch-reporter-{self._label}", daemon=True)
            self._thread.start()

        logger.info(f"Started batch reporter {self._label} (batch_size={self.batch_size})")

    def stop(self, flush: bool = True, timeout: Optional[float] = None) -> List[Any]:
        """Stop accepting events and shut the worker down.

        Every event enqueued before this call is applied first. With ``flush``
        the worker then drains the queue through report_fn; without it the
        remaining events are left unreported.

        If the worker is still inside report_fn when ``timeout`` expires, it is
        abandoned: it exits as soon as that export returns, and every event it
        has not handed to report_fn yet is returned here instead.

        Called from inside report_fn, stop cannot wait for the worker. With
        ``flush`` the worker drains the queue once the current export returns
        and nothing is returned; without it the worker is abandoned as above.

        Args:
            flush: Report pending events before exiting
            timeout: Seconds to wait for the worker, defaults to ``settings.stop_timeout_seconds``

        Returns:
            Events left unreported (empty after a successful drain)
        """
        timeout = self.settings.stop_timeout_seconds if timeout is None else timeout

        with self._lock:
            if self._stopped:
                return []
            self._stopped = True
            self._accepting = False
            started = self._started
            on_worker = self._thread is not None and threading.current_thread() is self._thread

            if not started and flush:
                # Nothing has run yet; let a worker drain what was buffered.
                self._started = True
                self._thread = threading.Thread(target=self._run, name=f"batch-reporter-{self._label}", daemon=True)
                self._thread.start()
                started = True

            if started:
                self._post(Stop(flush=flush), force=True)

        if not started:
            self._shutdown_mailbox()
            remaining = list(self._state.unreported_events)
        elif on_worker:
            if flush:
                logger.info(f"Batch reporter {self._label} stop requested from report_fn; draining after the current export")
                remaining = []
            else:
                remaining = self._abandon()
        else:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Batch reporter {self._label} did not stop within {timeout}s; abandoning the export still running")
                remaining = self._abandon()
            else:
                remaining = list(self._state.unreported_events)

        if self.name is not None:
            registry.unregister(self.name, self)

        if remaining:
            logger.warning(f"Batch reporter {self._label} stopped with {len(remaining)} unreported events")

        logger.info(
            f"Stopped batch reporter {self._label}. Stats - Enqueued: {self._total_events_enqueued}, "
            f"Reported: {self._total_events_reported}, Batches: {self._total_batches_reported}, "
            f"Export failures: {self._total_export_failures}"
        )
        return remaining

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every posted message is handled and no flush is scheduled.

        Returns:
            True once idle, False on timeout
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._outstanding == 0, timeout=timeout)

    # Producer API

    def enqueue(self, event: Any, config: Any = None) -> None:
        """Queue an event for reporting with ``config`` as the export config.

        Never blocks on the exporter and never raises. After stop the event is
        dropped with a warning.
        """
        if not self._post(Enqueue(event, config)):
            with self._lock:
                self._total_events_dropped += 1
            logger.warning(f"Batch reporter {self._label} is not accepting events, dropping event")

    def get_stats(self) -> Dict[str, Any]:
        """Get reporter statistics."""
        with self._lock:
            return {
                "name": self.name,
                "running": self.running,
                "halted": self._halted,
                "batch_size": self.batch_size,
                "pending_events": self.pending_count,
                "report_scheduled": self._state.report_scheduled,
                "mailbox_size": self._mailbox.size(),
                "total_events_enqueued": self._total_events_enqueued,
                "total_events_reported": self._total_events_reported,
                "total_batches_reported": self._total_batches_reported,
                "total_export_failures": self._total_export_failures,
                "total_events_dropped": self._total_events_dropped,
                "export_error_policy": self.export_error_policy.value,
            }

    # Worker

    @property
    def _label(self) -> str:
        return self.name or hex(id(self))

    def _post(self, message: Message, force: bool = False) -> bool:
        with self._lock:
            if not force and not self._accepting:
                return False
            if not self._mailbox.put(message):
                return False
            self._outstanding += 1
            return True

    def _message_done(self) -> None:
        with self._idle:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._idle.notify_all()

    def _abandon(self) -> List[Any]:
        """Detach from a worker that cannot be joined and take back the events it has not exported.

        The batch inside report_fn stays with the exporter. The worker leaves
        its state untouched from here on and exits at its next step.
        """
        with self._lock:
            self._abandoned = True
            remaining = self._state.unreported_events[self._in_flight :]
            remaining.extend(message.event for message in self._mailbox.snapshot() if isinstance(message, Enqueue))
            return remaining

    def _run(self) -> None:
        logger.debug(f"Batch reporter {self._label} loop started")

        try:
            while True:
                message = self._mailbox.get()
                if message is None:
                    break
                try:
                    keep_going = self._handle(message)
                finally:
                    self._message_done()
                if not keep_going:
                    break
        finally:
            self._shutdown_mailbox()
            logger.debug(f"Batch reporter {self._label} loop finished")

    def _handle(self, message: Message) -> bool:
        if isinstance(message, Enqueue):
            with self._lock:
                if self._abandoned:
                    return False
                self._state.enqueue_event(message.event, message.config)
                self._total_events_enqueued += 1
                self._maybe_report_events()
            return True

        if isinstance(message, ReportEvents):
            return self._report_events()

        if isinstance(message, Stop):
            if message.flush:
                self._drain()
            return False

        logger.error(f"Batch reporter {self._label} got unknown message {message!r}")
        return True

    def _maybe_report_events(self) -> None:
        if not self._state.should_schedule():
            return
        self._state.set_report_scheduled()
        # Outstanding count stays above zero until this message is handled.
        self._post(ReportEvents(), force=True)

    def _report_events(self) -> bool:
        """Run one flush. Returns False when the worker must exit."""
        self._state.reset_report_scheduled()
        if not self._export_next_batch():
            return False
        with self._lock:
            self._maybe_report_events()
        return True

    def _drain(self) -> None:
        while self._state.unreported_events:
            if not self._export_next_batch():
                return

    def _export_next_batch(self) -> bool:
        """Export one batch. Returns False when the worker must exit."""
        with self._lock:
            if self._abandoned:
                return False
            batch, remaining = self._state.split_batch()
            if not batch:
                return True
            config = self._state.config
            self._in_flight = len(batch)

        try:
            self._report_fn(batch, config)
        except Exception as e:
            logger.exception(f"Batch reporter {self._label} failed to export batch of {len(batch)} events: {e}")
            self._notify_export_error(e, batch, config)

            with self._lock:
                self._in_flight = 0
                self._total_export_failures += 1
                self._total_events_dropped += len(batch)
                if self._abandoned:
                    return False
                self._state.set_unreported_events(remaining)

                if self.export_error_policy is ExportErrorPolicy.HALT:
                    self._halted = True
                    self._accepting = False
                    logger.error(f"Batch reporter {self._label} halted with {len(remaining)} unreported events")
                    return False
            return True

        with self._lock:
            self._in_flight = 0
            self._total_events_reported += len(batch)
            self._total_batches_reported += 1
            if self._abandoned:
                return False
            self._state.set_unreported_events(remaining)
        logger.debug(f"Batch reporter {self._label} reported {len(batch)} events, {len(remaining)} remaining")
        return True

    def _notify_export_error(self, exc: Exception, batch: List[Any], config: Any) -> None:
        if self._on_export_error is None:
            return
        try:
            self._on_export_error(exc, batch, config)
        except Exception:  # noqa: BLE001
            logger.exception(f"Export error callback of batch reporter {self._label} raised")

    def _shutdown_mailbox(self) -> None:
        """Close the mailbox, keeping events from unprocessed Enqueue messages.

        An abandoned worker already handed those events back through stop().
        """
        with self._idle:
            leftovers = self._mailbox.close()
            if not self._abandoned:
                for message in leftovers:
                    if isinstance(message, Enqueue):
                        self._state.enqueue_event(message.event, message.config)
                        self._total_events_enqueued += 1

            self._outstanding = 0
            self._idle.notify_all()
