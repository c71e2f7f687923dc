from __future__ import annotations

from decimal import Decimal

import pytest

from storefront.core.exceptions import ApiException
from storefront.domain.cart import CartItem
from storefront.domain.order import CheckoutForm, OrderReceipt
from storefront.integrations.receipt_store import LastOrderStore
from storefront.services.order_history import OrderHistoryService


class FakeOrdersApi:
    def __init__(self):
        self.cancelled: list[str] = []

    async def fetch_order_history(self):
        return [{"_id": "o1", "status": "delivered"}]

    async def fetch_current_orders(self):
        return [{"_id": "o2", "status": "processing"}]

    async def cancel_order(self, order_id):
        if order_id == "shipped":
            raise ApiException(400, "Order already shipped")
        self.cancelled.append(order_id)
        return {"_id": order_id, "status": "cancelled"}


@pytest.fixture
def orders(cart_service, storage):
    return OrderHistoryService(FakeOrdersApi(), cart_service, LastOrderStore(storage))


@pytest.mark.asyncio
async def test_history_and_current_orders(orders) -> None:
    assert await orders.order_history() == [{"_id": "o1", "status": "delivered"}]
    assert await orders.current_orders() == [{"_id": "o2", "status": "processing"}]


@pytest.mark.asyncio
async def test_cancel_order_errors_propagate(orders) -> None:
    assert (await orders.cancel_order("o2"))["status"] == "cancelled"
    with pytest.raises(ApiException):
        await orders.cancel_order("shipped")


def test_reorder_merges_into_cart(orders, cart_service, make_product) -> None:
    cart_service.add_item(make_product("p1", 3))
    past_order = {
        "_id": "o1",
        "items": [
            {"productId": "p1", "name": "Tea", "imageUrl": "", "price": 3, "quantity": 2},
            {"productId": "p2", "name": "Cup", "imageUrl": "", "price": 7, "quantity": 1},
        ],
    }

    cart = orders.reorder(past_order)

    assert [(i.product_id, i.quantity) for i in cart.items] == [("p1", 3), ("p2", 1)]
    assert cart.total_amount == 16


def test_last_order_round_trips_through_storage(orders, storage) -> None:
    assert orders.last_order() is None
    receipt = OrderReceipt(
        order_id="ORDER_1",
        payment_id="pay_1",
        items=(CartItem("p1", "Tea", "", Decimal("2.50"), 2),),
        total_amount=Decimal("5.00"),
        amount_paid=Decimal("415.00"),
        currency="INR",
        customer_info=CheckoutForm(name="Asha"),
    )
    LastOrderStore(storage).save(receipt)

    loaded = orders.last_order()

    assert loaded.order_id == "ORDER_1"
    assert loaded.total_amount == Decimal("5")
    assert loaded.items[0].price == Decimal("2.5")


@pytest.mark.parametrize(
    "raw",
    [
        '{"orderId": "x"}',
        '{"orderId": "x", "totalAmount": NaN, "timestamp": "2026-01-01T00:00:00+00:00"}',
        '{"orderId": "x", "totalAmount": 5, "amountPaid": Infinity, "timestamp": "2026-01-01T00:00:00+00:00"}',
    ],
)
def test_corrupt_last_order_is_ignored(orders, storage, raw) -> None:
    storage.set("lastOrder", raw)
    assert orders.last_order() is None
