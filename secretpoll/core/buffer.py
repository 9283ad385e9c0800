"""Timestamp-keyed event buffer shared by the watch thread and the poller."""

import threading
import time
from collections.abc import Callable

from .models import SecretEvent


def current_millis() -> int:
    """Return wall-clock time in milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


class EventBuffer:
    """Thread-safe mapping of arrival timestamp to SecretEvent.

    Writers (the watch callback) and the drainer (the poll cycle) run in
    different threads. Every operation takes the buffer's own lock, so a
    snapshot never observes a half-applied insert or removal.

    Keys have millisecond resolution. Two events arriving within the same
    millisecond share a key and the later one replaces the earlier one.
    """

    def __init__(self) -> None:
        self._entries: dict[int, SecretEvent] = {}
        self._lock = threading.Lock()

    def put(self, timestamp: int, event: SecretEvent) -> None:
        """Insert an event, replacing any event already stored at this key."""
        with self._lock:
            self._entries[timestamp] = event

    def get(self, timestamp: int) -> SecretEvent | None:
        with self._lock:
            return self._entries.get(timestamp)

    def remove(self, timestamp: int) -> SecretEvent | None:
        """Remove and return the event at this key, if still present."""
        with self._lock:
            return self._entries.pop(timestamp, None)

    def snapshot(self) -> list[tuple[int, SecretEvent]]:
        """Return a point-in-time copy of all entries in insertion order."""
        with self._lock:
            return list(self._entries.items())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, timestamp: object) -> bool:
        with self._lock:
            return timestamp in self._entries


Clock = Callable[[], int]

__all__ = ["Clock", "EventBuffer", "current_millis"]
