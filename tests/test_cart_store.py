from __future__ import annotations

import json
from decimal import Decimal

import pytest

from storefront.core.events import EventType
from storefront.core.storage import MemoryStorage, RedisStorage
from storefront.domain.cart import Cart, CartItem
from storefront.integrations.cart_store import PersistentCartStore


def _item(product_id: str, price: str, quantity: int = 1) -> CartItem:
    return CartItem(
        product_id=product_id,
        name=f"Item {product_id}",
        image_url="",
        price=Decimal(price),
        quantity=quantity,
    )


def test_load_returns_empty_cart_when_nothing_saved(cart_store) -> None:
    cart = cart_store.load()
    assert cart.items == []
    assert cart.total_amount == 0


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '{"items": "nope"}',
        '{"items": [{"name": "missing id", "price": 3}]}',
        '{"items": [{"productId": "p1", "price": "abc", "quantity": 1}]}',
        '{"items": [{"productId": "p1", "price": 3, "quantity": 0}]}',
        '{"items": [{"productId": "p1", "price": NaN, "quantity": 1}]}',
        '{"items": [{"productId": "p1", "price": Infinity, "quantity": 1}]}',
        '{"items": [{"productId": "p1", "price": 3, "quantity": Infinity}]}',
    ],
)
def test_load_fails_soft_on_corrupt_payload(storage, cart_store, raw: str) -> None:
    storage.set("cart", raw)
    assert cart_store.load().is_empty()


def test_load_survives_storage_errors(events) -> None:
    class BrokenStorage(MemoryStorage):
        def get(self, key: str):
            raise OSError("disk gone")

    store = PersistentCartStore(BrokenStorage(), events)
    assert store.load().is_empty()


def test_save_overwrites_full_payload(storage, cart_store) -> None:
    cart_store.save(Cart(items=[_item("a", "10", 2), _item("b", "5")]))
    cart_store.save(Cart(items=[_item("c", "1.25", 4)]))

    payload = json.loads(storage.get("cart"))
    assert [item["productId"] for item in payload["items"]] == ["c"]
    assert payload["totalAmount"] == 5


def test_save_then_load_keeps_order_and_exact_total(cart_store) -> None:
    cart_store.save(Cart(items=[_item("b", "19.99", 3), _item("a", "0.10", 1)]))

    loaded = cart_store.load()

    assert [item.product_id for item in loaded.items] == ["b", "a"]
    assert loaded.total_amount == Decimal("60.07")


def test_stored_total_is_recomputed_on_load(storage, cart_store) -> None:
    storage.set(
        "cart",
        json.dumps(
            {
                "items": [{"productId": "p1", "name": "x", "imageUrl": "", "price": 4, "quantity": 2}],
                "totalAmount": 999,
            }
        ),
    )
    assert cart_store.load().total_amount == 8


def test_clear_then_load_is_empty(storage, cart_store) -> None:
    cart_store.save(Cart(items=[_item("a", "10")]))
    cart_store.clear()

    assert storage.get("cart") is None
    cart = cart_store.load()
    assert cart.items == []
    assert cart.total_amount == 0


def test_every_save_and_clear_notifies_listeners(events, cart_store) -> None:
    seen: list[int] = []
    events.subscribe(EventType.CART_UPDATED, lambda cart: seen.append(cart.item_count))

    cart_store.save(Cart(items=[_item("a", "10", 3)]))
    cart_store.clear()

    assert seen == [3, 0]


def test_failing_listener_does_not_block_others(events, cart_store) -> None:
    seen: list[str] = []

    def broken(_cart):
        raise RuntimeError("badge crashed")

    events.subscribe(EventType.CART_UPDATED, broken)
    events.subscribe("cartUpdated", lambda _cart: seen.append("page"))

    cart_store.save(Cart(items=[_item("a", "1")]))

    assert seen == ["page"]


def test_cart_persists_in_redis_between_stores(fake_redis, events) -> None:
    store_a = PersistentCartStore(RedisStorage("redis://fake", namespace="s1"), events)
    store_b = PersistentCartStore(RedisStorage("redis://fake", namespace="s1"), events)

    store_a.save(Cart(items=[_item("a", "2.50", 2)]))

    assert "s1:cart" in fake_redis.data
    assert store_b.load().total_amount == Decimal("5")


def test_redis_outage_falls_back_to_memory(fake_redis, events) -> None:
    storage = RedisStorage("redis://fake")
    store = PersistentCartStore(storage, events)
    fake_redis.fail = True

    store.save(Cart(items=[_item("a", "3")]))

    assert not storage.connected
    assert store.load().total_amount == 3
