"""Core functionality module for logstreamer."""

from .models import LogEntry, LogLevel, ActivitySummary, LogSource
from .ring_buffer import RingBuffer
from .event_bus import EventBus
from .log_context import LogContext
from .stream_supervisor import StreamSupervisor
from .query_executor import QueryExecutor
from .log_service import LogService

__all__ = [
    'LogEntry', 'LogLevel', 'ActivitySummary', 'LogSource', 'RingBuffer',
    'EventBus', 'LogContext', 'StreamSupervisor', 'QueryExecutor', 'LogService',
]
