"""Notification bus - publishes committed market events to subscribers."""

from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING, Callable

import structlog

from predpool.models import MarketEvent

if TYPE_CHECKING:
    from predpool.storage.writer import LedgerWriter

log = structlog.get_logger(__name__)

Subscriber = Callable[[MarketEvent], None]


class NotificationBus:
    """Synchronous fan-out. A failing subscriber is logged and skipped;
    the operation that produced the event has already committed."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.append(callback)

        def _unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, event: MarketEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                log.exception("subscriber_failed", event_type=event.event_type, market_id=event.market_id)


class EventLogWriter:
    """Subscriber that appends every event to the market_events table."""

    def __init__(self, writer: LedgerWriter) -> None:
        self._writer = writer

    def __call__(self, event: MarketEvent) -> None:
        self._writer.append_event(event)


class EventRecorder:
    """Subscriber that keeps events in memory (inspection and tests)."""

    def __init__(self) -> None:
        self.events: list[MarketEvent] = []

    def __call__(self, event: MarketEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: str) -> list[MarketEvent]:
        return [e for e in self.events if e.event_type == event_type]
