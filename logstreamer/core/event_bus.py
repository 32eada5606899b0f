"""
Event bus module for logstreamer.

Components report what happened to them here: each new buffered entry, the
start and end of a stream run, and the failures that public operations
swallow (a stream that could not be spawned, a query whose host command
failed). Callers that care subscribe; everyone else keeps the plain
"never raises" contract.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Type, Union


LOG_ENTRY_ADDED = 'log_entry_added'
STREAM_STARTED = 'stream_started'
STREAM_ENDED = 'stream_ended'
STREAM_SPAWN_FAILED = 'stream_spawn_failed'
QUERY_FAILED = 'query_failed'


@dataclass
class Event:
    """Something a component wants its observers to know about."""
    type: str
    data: Any = None
    source: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class StreamEvent(Event):
    """Published by the stream supervisor."""


class QueryEvent(Event):
    """Published by the query executor."""


Handler = Callable[[Event], None]
SubscriptionKey = Union[str, Type[Event]]


class EventBus:
    """
    Synchronous publish/subscribe channel owned by a ``LogContext``.

    Handlers subscribe either to an event type name or to an event class
    (matching subclasses too). They run in the publishing thread, outside the
    bus lock, so a handler may subscribe or unsubscribe while being called.
    A handler that raises is logged and skipped.
    """

    def __init__(self):
        self._subscriptions: Dict[SubscriptionKey, List[Handler]] = {}
        self._lock = threading.RLock()
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Call ``handler`` for every event whose ``type`` equals ``event_type``."""
        self._add(event_type, handler)

    def subscribe_to_type(self, event_class: Type[Event], handler: Handler) -> None:
        """Call ``handler`` for every instance of ``event_class``."""
        self._add(event_class, handler)

    def unsubscribe(self, key: SubscriptionKey, handler: Handler) -> None:
        """Remove one subscription; unknown handlers are ignored."""
        with self._lock:
            handlers = self._subscriptions.get(key)
            if handlers and handler in handlers:
                handlers.remove(handler)

    def publish(self, event: Union[Event, str], data: Any = None, source: Optional[str] = None) -> None:
        """
        Deliver an event to its subscribers.

        Args:
            event: Event object, or a type name to wrap in a plain ``Event``
            data: Payload when ``event`` is a type name
            source: Publisher name when ``event`` is a type name
        """
        if isinstance(event, str):
            event = Event(type=event, data=data, source=source)

        for handler in self._handlers_for(event):
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Handler for {event.type!r} failed: {e}")

    def clear_subscribers(self, event_type: Optional[str] = None) -> None:
        """Drop the subscribers of one type name, or every subscription."""
        with self._lock:
            if event_type is None:
                self._subscriptions.clear()
            else:
                self._subscriptions.pop(event_type, None)

    def _add(self, key: SubscriptionKey, handler: Handler) -> None:
        with self._lock:
            self._subscriptions.setdefault(key, []).append(handler)
        self.logger.debug(f"Subscribed to {getattr(key, '__name__', key)}")

    def _handlers_for(self, event: Event) -> List[Handler]:
        with self._lock:
            handlers = list(self._subscriptions.get(event.type, ()))
            for key, class_handlers in self._subscriptions.items():
                if isinstance(key, type) and isinstance(event, key):
                    handlers.extend(class_handlers)
        return handlers
