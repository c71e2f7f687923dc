"""
Cart mutation API.

Every operation loads the current cart from the store, computes the next
cart, saves it and returns it. Invalid input is clamped or ignored, never
raised: the cart is low-stakes client state.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from storefront.core.constants import MIN_QUANTITY
from storefront.domain.cart import Cart, CartItem, clamp_quantity
from storefront.integrations.cart_store import PersistentCartStore

logger = logging.getLogger(__name__)


class CartService:
    def __init__(self, store: PersistentCartStore):
        self._store = store

    def get_cart(self) -> Cart:
        return self._store.load()

    def get_item_count(self) -> int:
        """Total units in the cart (what the navigation badge shows)."""
        return self._store.load().item_count

    def is_empty(self) -> bool:
        return self._store.load().is_empty()

    def add_item(self, product: dict[str, Any], quantity: int = 1) -> Cart:
        """Add product or increase quantity of an existing line."""
        cart = self._store.load()
        if not self._apply_add(cart, product, quantity):
            return cart
        self._store.save(cart)
        return cart

    def update_quantity(self, product_id: str, new_quantity: int) -> Cart:
        try:
            quantity = int(new_quantity)
        except (TypeError, ValueError, OverflowError):
            logger.debug(f"Ignoring non-numeric quantity {new_quantity!r} for {product_id}")
            return self._store.load()

        if quantity < MIN_QUANTITY:
            return self.remove_item(product_id)

        cart = self._store.load()
        item = cart.find(product_id)
        if item is None:
            return cart
        item.quantity = quantity
        self._store.save(cart)
        return cart

    def remove_item(self, product_id: str) -> Cart:
        cart = self._store.load()
        before = len(cart.items)
        cart.items = [item for item in cart.items if item.product_id != str(product_id)]
        if len(cart.items) == before:
            return cart
        self._store.save(cart)
        logger.info(f"Removed product {product_id} from cart")
        return cart

    def add_multiple_items(self, items: Iterable[dict[str, Any]]) -> Cart:
        """Add each order line in sequence, e.g. when reordering from history."""
        cart = self._store.load()
        changed = False
        for entry in items or ():
            quantity = entry.get("quantity", 1) if isinstance(entry, dict) else 1
            changed = self._apply_add(cart, entry, quantity) or changed
        if changed:
            self._store.save(cart)
        return cart

    def clear(self) -> Cart:
        self._store.clear()
        logger.info("Cleared cart")
        return Cart()

    @staticmethod
    def _apply_add(cart: Cart, product: Any, quantity: Any) -> bool:
        if not isinstance(product, dict):
            logger.debug(f"Ignoring non-mapping product {product!r}")
            return False
        amount = clamp_quantity(quantity)
        try:
            candidate = CartItem.from_product(product, amount)
        except ValueError as e:
            logger.debug(f"Ignoring invalid product {product!r}: {e}")
            return False

        existing = cart.find(candidate.product_id)
        if existing is not None:
            existing.quantity += amount
            logger.info(f"Updated cart item {existing.product_id} qty={existing.quantity}")
        else:
            cart.items.append(candidate)
            logger.info(f"Added item {candidate.product_id} to cart")
        return True
