from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

ITEM_ADDED = "item_added"
ITEM_REMOVED = "item_removed"
CART_CLEARED = "cart_cleared"
WISHLIST_CHANGED = "wishlist_changed"

@dataclass(frozen=True)
class StoreEvent:
    name: str
    data: dict[str, Any] = field(default_factory=dict)

Listener = Callable[[StoreEvent], None]

class EventBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event_name: str, /, **data: Any) -> None:
        event = StoreEvent(event_name, data)
        logger.debug("event %s %s", event_name, data)
        for listener in list(self._listeners):
            listener(event)

class EventLog:
    """Listener that keeps the most recent events, newest last."""

    def __init__(self, limit: int = 50):
        self.limit = limit
        self.events: list[StoreEvent] = []

    def __call__(self, event: StoreEvent) -> None:
        self.events.append(event)
        del self.events[:-self.limit]
