"""Persists the receipt of the last confirmed order."""
from __future__ import annotations

import json
import logging
from decimal import Decimal

from storefront.core.constants import LAST_ORDER_KEY
from storefront.core.storage import KeyValueStorage
from storefront.domain.order import OrderReceipt

logger = logging.getLogger(__name__)


class LastOrderStore:
    def __init__(self, storage: KeyValueStorage, key: str = LAST_ORDER_KEY):
        self._storage = storage
        self._key = key

    def save(self, receipt: OrderReceipt) -> None:
        self._storage.set(self._key, json.dumps(receipt.to_dict(), ensure_ascii=False))

    def load(self) -> OrderReceipt | None:
        raw = self._storage.get(self._key)
        if not raw:
            return None
        try:
            return OrderReceipt.from_dict(json.loads(raw, parse_float=Decimal))
        except (ValueError, TypeError, KeyError, AttributeError, ArithmeticError) as exc:
            logger.warning(f"Ignoring unreadable last order: {exc}")
            return None
