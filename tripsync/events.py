"""In-process event bus for domain events."""

import logging
import threading
from collections import deque
from collections.abc import Callable
from typing import Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Subscriber = Callable[[BaseModel], None]


class EventBus(Protocol):
    """Protocol for event publishers."""

    def publish(self, event: BaseModel) -> None:
        """Deliver an event to subscribers. Must not raise for subscriber errors."""
        ...


class InMemoryEventBus:
    """Synchronous fan-out to registered subscribers.

    Keeps the most recent ``history_size`` events for inspection.
    """

    def __init__(self, history_size: int = 1000) -> None:
        self._lock = threading.Lock()
        self._subscribers: list[tuple[type[BaseModel] | None, Subscriber]] = []
        self.published: deque[BaseModel] = deque(maxlen=history_size)

    def subscribe(self, handler: Subscriber, event_type: type[BaseModel] | None = None) -> None:
        """Register a handler, optionally for one event type only."""
        with self._lock:
            self._subscribers.append((event_type, handler))

    def publish(self, event: BaseModel) -> None:
        """Deliver to every matching subscriber; failures are logged."""
        with self._lock:
            self.published.append(event)
            subscribers = list(self._subscribers)

        for event_type, handler in subscribers:
            if event_type is not None and not isinstance(event, event_type):
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    f"Event subscriber failed for {type(event).__name__}",
                    extra={"structured": {"event": event.model_dump(mode="json")}},
                )

    def events_of(self, event_type: type[BaseModel]) -> list[BaseModel]:
        """Published events of one type, oldest first."""
        with self._lock:
            return [e for e in self.published if isinstance(e, event_type)]
