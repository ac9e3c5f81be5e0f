"""
Events Package - Typed Event Bus for Backend Streams.

The backend engine pushes progress and log payloads while a long call is
in flight. This package routes them to subscribers by stream kind.

Components:
    - EventStream: Enum of the four backend streams
    - EventBus: Thread-safe publish/subscribe registry
    - Subscription: Handle returned by ``subscribe``; call ``unsubscribe``

Design Principles:
    - One handler per subscription, scoped by the subscriber
    - Handlers run on the publishing thread
    - Unsubscribe is idempotent
"""

from dicom_workbench.events.event_bus import (
    EventBus,
    EventHandler,
    EventStream,
    Subscription,
    progress_stream_for,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "EventStream",
    "Subscription",
    "progress_stream_for",
]
