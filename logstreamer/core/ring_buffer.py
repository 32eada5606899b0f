"""
Bounded in-memory store for the live rolling window of log entries.
"""

import threading
from typing import List

from .models import LogEntry


class RingBuffer:
    """
    Fixed-capacity, arrival-ordered store of log entries.

    When an append pushes the length past capacity, the whole overflow is
    dropped from the front in a single slice deletion. Every public method
    holds the lock for exactly one mutation or one copy, so readers never see
    a half-evicted buffer.
    """

    def __init__(self, capacity: int = 1000):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: List[LogEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: LogEntry) -> None:
        """Add an entry at the tail, evicting the oldest overflow in one step."""
        with self._lock:
            self._entries.append(entry)
            overflow = len(self._entries) - self.capacity
            if overflow > 0:
                del self._entries[:overflow]

    def recent(self, count: int) -> List[LogEntry]:
        """
        Get the most recent entries.

        Args:
            count: Maximum number of entries to return

        Returns:
            Up to ``count`` entries, oldest first
        """
        if count <= 0:
            return []
        with self._lock:
            return self._entries[-count:]

    def snapshot(self) -> List[LogEntry]:
        """Copy of every buffered entry, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
