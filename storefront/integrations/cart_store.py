"""Storage-backed cart persistence with change notifications."""
from __future__ import annotations

import json
import logging
from decimal import Decimal

from storefront.core.constants import CART_KEY
from storefront.core.events import EventBus, EventType
from storefront.core.storage import KeyValueStorage
from storefront.domain.cart import Cart

logger = logging.getLogger(__name__)


class PersistentCartStore:
    """Reads and writes the whole cart under a single storage key.

    ``load`` never raises: a missing, unreadable or malformed payload is an
    empty cart. Every ``save``/``clear`` emits ``cartUpdated`` with the new
    cart so listeners stay in sync without polling.
    """

    def __init__(self, storage: KeyValueStorage, events: EventBus, key: str = CART_KEY):
        self._storage = storage
        self._events = events
        self._key = key

    def load(self) -> Cart:
        try:
            raw = self._storage.get(self._key)
        except Exception as exc:
            logger.warning(f"Cart storage read failed, using empty cart: {exc}")
            return Cart()
        if not raw:
            return Cart()
        try:
            payload = json.loads(raw, parse_float=Decimal)
            if not isinstance(payload, dict):
                raise ValueError("cart payload is not an object")
            return Cart.from_dict(payload)
        except (ValueError, TypeError, KeyError, AttributeError, ArithmeticError) as exc:
            logger.warning(f"Corrupt cart payload ignored: {exc}")
            return Cart()

    def save(self, cart: Cart) -> None:
        serialized = json.dumps(cart.to_dict(), ensure_ascii=False)
        self._storage.set(self._key, serialized)
        self._events.emit(EventType.CART_UPDATED, cart)

    def clear(self) -> None:
        self._storage.delete(self._key)
        self._events.emit(EventType.CART_UPDATED, Cart())
