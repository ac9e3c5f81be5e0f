"""
Event Bus.

Routes backend stream payloads (progress events, log entries, scan
progress) to the handlers subscribed to that stream.

Design Notes:
    - The backend may publish from its own thread; the registry is guarded
      by a lock and handlers are invoked outside of it
    - A failing handler is logged and does not prevent delivery to the
      remaining handlers of the same payload
    - Subscriptions are context managers so a caller can scope them to a
      ``with`` block
"""

from __future__ import annotations

import itertools
import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from dicom_workbench.domain.entities import Stage

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class EventStream(str, Enum):
    """Named event streams emitted by the backend."""

    ANONYMIZATION_PROGRESS = "anonymization_progress"
    CONVERSION_PROGRESS = "conversion_progress"
    LOG_EVENT = "log_event"
    TAG_DETAILS_PROGRESS = "tag_details_progress"


def progress_stream_for(stage: Stage) -> EventStream:
    """Return the progress stream a stage reports on."""
    if stage is Stage.ANONYMIZE:
        return EventStream.ANONYMIZATION_PROGRESS
    return EventStream.CONVERSION_PROGRESS


class Subscription:
    """Handle for one registered handler."""

    def __init__(
        self,
        bus: "EventBus",
        stream: EventStream,
        handler: EventHandler,
        subscription_id: int,
    ) -> None:
        self._bus = bus
        self.stream = stream
        self.handler = handler
        self.subscription_id = subscription_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        """Detach the handler. Safe to call more than once."""
        if not self._active:
            return
        self._active = False
        self._bus._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        state = "active" if self._active else "closed"
        return f"Subscription({self.stream.value}#{self.subscription_id}, {state})"


class EventBus:
    """
    Thread-safe publish/subscribe registry keyed by EventStream.

    Example:
        >>> bus = EventBus()
        >>> sub = bus.subscribe(EventStream.LOG_EVENT, entries.append)
        >>> bus.publish(EventStream.LOG_EVENT, entry)
        1
        >>> sub.unsubscribe()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: Dict[EventStream, Dict[int, Subscription]] = {
            stream: {} for stream in EventStream
        }
        self._ids = itertools.count(1)

    def subscribe(self, stream: EventStream, handler: EventHandler) -> Subscription:
        """
        Register a handler for a stream.

        Args:
            stream: Stream to listen to
            handler: Callable receiving each payload

        Returns:
            Subscription handle used to detach the handler
        """
        stream = EventStream(stream)
        with self._lock:
            subscription = Subscription(self, stream, handler, next(self._ids))
            self._handlers[stream][subscription.subscription_id] = subscription
        logger.debug(f"Subscribed {subscription!r}")
        return subscription

    def publish(self, stream: EventStream, payload: Any) -> int:
        """
        Deliver a payload to every current subscriber of a stream.

        Args:
            stream: Stream the payload belongs to
            payload: Event payload

        Returns:
            Number of handlers the payload was delivered to
        """
        stream = EventStream(stream)
        with self._lock:
            subscribers: List[Subscription] = list(self._handlers[stream].values())

        delivered = 0
        for subscription in subscribers:
            if not subscription.active:
                continue
            try:
                subscription.handler(payload)
                delivered += 1
            except Exception as e:
                logger.exception(
                    f"Handler {subscription!r} failed on {stream.value}: {e}"
                )
        return delivered

    def subscription_count(self, stream: Optional[EventStream] = None) -> int:
        """Number of live subscriptions, for one stream or overall."""
        with self._lock:
            if stream is not None:
                return len(self._handlers[EventStream(stream)])
            return sum(len(handlers) for handlers in self._handlers.values())

    def clear(self) -> None:
        """Detach every handler."""
        with self._lock:
            subscriptions = [
                sub for handlers in self._handlers.values() for sub in handlers.values()
            ]
        for subscription in subscriptions:
            subscription.unsubscribe()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            self._handlers[subscription.stream].pop(subscription.subscription_id, None)
        logger.debug(f"Unsubscribed {subscription!r}")
