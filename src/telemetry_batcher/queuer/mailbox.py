"""Ordered inbox for a batch reporter.

Producers on any thread post messages; the reporter's single worker thread
takes them off one at a time, so every state change the messages cause is
serialized.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional, Union

from loguru import logger


@dataclass(frozen=True)
class Enqueue:
    """Append an event and replace the export config."""

    event: Any
    config: Any


@dataclass(frozen=True)
class ReportEvents:
    """Run one flush. Only the reporter posts this, to itself."""


@dataclass(frozen=True)
class Stop:
    """Ask the worker to exit, optionally draining pending events first."""

    flush: bool = True


Message = Union[Enqueue, ReportEvents, Stop]


class Mailbox:
    """Thread-safe FIFO of reporter messages."""

    def __init__(self):
        self._messages: deque[Message] = deque()
        self._lock = threading.RLock()
        self._not_empty = threading.Condition(self._lock)
        self._closed = False

        # Statistics
        self._total_put = 0
        self._total_taken = 0

    def put(self, message: Message) -> bool:
        """Append a message.

        Returns:
            True if accepted, False if the mailbox is closed
        """
        with self._lock:
            if self._closed:
                return False

            self._messages.append(message)
            self._total_put += 1
            self._not_empty.notify()
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[Message]:
        """Remove and return the oldest message.

        Args:
            timeout: Maximum time to wait, None waits until a message arrives

        Returns:
            The message, or None on timeout or when closed and empty
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._lock:
            while not self._messages:
                if self._closed:
                    return None
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return None
                self._not_empty.wait(remaining)

            self._total_taken += 1
            return self._messages.popleft()

    def snapshot(self) -> list[Message]:
        """Queued messages in order, without removing them."""
        with self._lock:
            return list(self._messages)

    def size(self) -> int:
        with self._lock:
            return len(self._messages)

    def is_empty(self) -> bool:
        with self._lock:
            return len(self._messages) == 0

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> list[Message]:
        """Stop accepting messages and return whatever was still queued."""
        with self._lock:
            self._closed = True
            leftovers = list(self._messages)
            self._messages.clear()
            self._not_empty.notify_all()

        if leftovers:
            logger.debug(f"Mailbox closed with {len(leftovers)} unprocessed messages")
        return leftovers

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "current_size": len(self._messages),
                "total_put": self._total_put,
                "total_taken": self._total_taken,
                "closed": self._closed,
            }
