"""Profile page order actions: history, current orders, cancel, reorder."""
from __future__ import annotations

import logging
from typing import Any

from storefront.domain.cart import Cart
from storefront.domain.order import OrderReceipt
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.receipt_store import LastOrderStore
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)


class OrderHistoryService:
    def __init__(self, api: StorefrontApiClient, cart: CartService, last_order: LastOrderStore):
        self._api = api
        self._cart = cart
        self._last_order = last_order

    async def order_history(self) -> list[dict[str, Any]]:
        return await self._api.fetch_order_history()

    async def current_orders(self) -> list[dict[str, Any]]:
        return await self._api.fetch_current_orders()

    async def cancel_order(self, order_id: str) -> dict[str, Any]:
        """Cancel on the server; ``ApiException`` propagates to the page."""
        result = await self._api.cancel_order(order_id)
        logger.info(f"Order {order_id} cancelled")
        return result

    def reorder(self, order: dict[str, Any]) -> Cart:
        """Put every line of a past order back into the cart."""
        items = order.get("items") or []
        return self._cart.add_multiple_items(items)

    def last_order(self) -> OrderReceipt | None:
        return self._last_order.load()
