"""
Shared state for one log streaming session.

A ``LogContext`` owns the rolling buffer, the stream running flag and the
event bus. It is constructed explicitly and handed to every component that
needs it, so several independent contexts can coexist (one per test, for
example).
"""

import threading
import logging
from typing import Optional

from .event_bus import EventBus
from .ring_buffer import RingBuffer


class LogContext:
    """
    Owner of the buffer, the running flag and the event bus.
    """

    def __init__(self, config=None, buffer: Optional[RingBuffer] = None,
                 event_bus: Optional[EventBus] = None):
        """
        Initialize the context.

        Args:
            config: Application configuration (optional)
            buffer: Pre-built buffer, created from ``config.buffer.capacity`` when omitted
            event_bus: Pre-built event bus, a fresh one when omitted
        """
        self.config = config
        self.logger = logging.getLogger(__name__)

        if buffer is None:
            capacity = config.buffer.capacity if config is not None else 1000
            buffer = RingBuffer(capacity)
        self.buffer = buffer
        self.event_bus = event_bus or EventBus()

        self._state_lock = threading.Lock()
        self._running = False
        self._generation = 0

    @property
    def stream_running(self) -> bool:
        with self._state_lock:
            return self._running

    def try_begin_stream(self) -> Optional[int]:
        """
        Atomically move the stream from idle to running.

        Returns:
            The generation number owned by the new run, or None when a
            stream is already running
        """
        with self._state_lock:
            if self._running:
                return None
            self._running = True
            self._generation += 1
            return self._generation

    def request_stop(self) -> None:
        """Clear the running flag; the active run notices on its next check."""
        with self._state_lock:
            self._running = False

    def is_current(self, generation: int) -> bool:
        """True while the run holding ``generation`` is still asked to run."""
        with self._state_lock:
            return self._running and self._generation == generation

    def end_stream(self, generation: int) -> None:
        """
        Return to idle at the end of a run.

        A stale run finishing after a newer ``start()`` leaves the flag alone.
        """
        with self._state_lock:
            if self._generation == generation:
                self._running = False
