"""
Log service module for logstreamer.

This module wires the parser, buffer, stream supervisor, query executor and
activity aggregator around one ``LogContext`` and exposes the operations a
presentation layer needs.
"""

import logging
from typing import Callable, List, Optional

from .activity import summarize
from .event_bus import Event, LOG_ENTRY_ADDED
from .log_context import LogContext
from .log_sources import list_log_sources
from .models import ActivitySummary, LogEntry, LogSource
from .query_executor import QueryExecutor
from .stream_supervisor import StreamSupervisor
from ..parsers.log_parser import LogParser


class LogService:
    """
    Entry point for live streaming, recent entries, history and summaries.
    """

    def __init__(self, config, context: Optional[LogContext] = None):
        """
        Initialize the service.

        Args:
            config: Application configuration
            context: Shared context, built from ``config`` when omitted
        """
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.context = context or LogContext(config)

        parser = LogParser(config)
        self.supervisor = StreamSupervisor(self.context, parser)
        self.query_executor = QueryExecutor(config, parser, self.context.event_bus)

        self._listeners = {}

    @property
    def is_running(self) -> bool:
        return self.supervisor.running

    def start(self) -> None:
        """Start the live stream; a no-op while it is already running."""
        self.supervisor.start()

    def stop(self) -> None:
        """Request the live stream to stop without waiting for it."""
        self.supervisor.stop()

    async def wait_stopped(self, timeout: Optional[float] = None) -> bool:
        return await self.supervisor.wait_stopped(timeout)

    def recent(self, count: Optional[int] = None, process: Optional[str] = None) -> List[LogEntry]:
        """
        Get the most recent buffered entries.

        Args:
            count: Number of entries, ``buffer.default_recent`` when omitted
            process: Case-insensitive substring the process name must contain

        Returns:
            Entries in arrival order
        """
        if count is None:
            count = self.config.buffer.default_recent
        entries = self.context.buffer.recent(count)
        if process:
            needle = process.lower()
            entries = [entry for entry in entries if needle in entry.process.lower()]
        return entries

    async def query(self, minutes: Optional[int] = None, predicate: Optional[str] = None) -> List[LogEntry]:
        if minutes is None:
            minutes = self.config.query.default_minutes
        return await self.query_executor.query(minutes, predicate)

    async def query_by_process(self, process_name: str, minutes: Optional[int] = None) -> List[LogEntry]:
        if minutes is None:
            minutes = self.config.query.default_minutes
        return await self.query_executor.query_by_process(process_name, minutes)

    def summarize(self) -> List[ActivitySummary]:
        """Per-process activity over a snapshot of the buffer."""
        return summarize(self.context.buffer.snapshot())

    def sources(self) -> List[LogSource]:
        return list_log_sources(self.config.sources.directories, self.config.sources.extensions)

    def subscribe(self, callback: Callable[[LogEntry], None]) -> None:
        """
        Receive every entry appended by the live stream.

        Subscribing a callback that is already subscribed does nothing, so one
        ``unsubscribe`` always removes it.

        Args:
            callback: Called with each new ``LogEntry``
        """
        if callback in self._listeners:
            return

        def handler(event: Event):
            callback(event.data)

        self._listeners[callback] = handler
        self.context.event_bus.subscribe(LOG_ENTRY_ADDED, handler)

    def unsubscribe(self, callback: Callable[[LogEntry], None]) -> None:
        handler = self._listeners.pop(callback, None)
        if handler is not None:
            self.context.event_bus.unsubscribe(LOG_ENTRY_ADDED, handler)
