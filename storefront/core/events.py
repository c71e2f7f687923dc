"""
In-process change notifications.

Listeners (a cart badge, a cart page) subscribe to a named event and are
called synchronously on every emit. There is no ordering guarantee among
listeners, and one failing listener does not prevent the others from
running.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class EventType(str, Enum):
    """Events emitted by storefront services."""

    CART_UPDATED = "cartUpdated"
    AUTH_CHANGED = "authChanged"
    ORDER_CONFIRMED = "orderConfirmed"


def _event_name(event: str | Enum) -> str:
    return event.value if isinstance(event, Enum) else str(event)


class EventBus:
    """Simple pub/sub for a single session."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[EventHandler]] = {}

    def subscribe(self, event: str, handler: EventHandler) -> Callable[[], None]:
        """Register handler; returns a callable that removes it again."""
        self._subscribers.setdefault(_event_name(event), set()).add(handler)
        logger.debug(f"Subscribed to {event}, total: {len(self._subscribers[_event_name(event)])}")

        def _unsubscribe() -> None:
            self.unsubscribe(event, handler)

        return _unsubscribe

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(_event_name(event))
        if not handlers:
            return
        handlers.discard(handler)
        if not handlers:
            del self._subscribers[_event_name(event)]

    def emit(self, event: str, payload: Any = None) -> int:
        """Call every subscriber; returns how many ran without error."""
        handlers = self._subscribers.get(_event_name(event), set()).copy()
        delivered = 0
        for handler in handlers:
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler error for event {event}: {e}")
        return delivered

    def listener_count(self, event: str) -> int:
        return len(self._subscribers.get(_event_name(event), ()))

    def clear(self) -> None:
        self._subscribers.clear()
