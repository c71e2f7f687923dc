"""Cart value objects and their JSON wire format."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any

from storefront.core.constants import MAX_DISCOUNT_PERCENT, MIN_QUANTITY


def _require_finite(parsed: Decimal, raw: Any) -> Decimal:
    if not parsed.is_finite():
        raise ValueError(f"Invalid amount: {raw!r}")
    return parsed


def to_decimal(value: Any) -> Decimal:
    """Parse a price-like value exactly; floats go through their repr."""
    if isinstance(value, Decimal):
        return _require_finite(value, value)
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    return _require_finite(parsed, value)


def decimal_to_json(value: Decimal) -> int | float:
    """JSON number for a Decimal; integral values stay ints."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def clamp_quantity(value: Any) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError, OverflowError):
        return MIN_QUANTITY
    return max(MIN_QUANTITY, quantity)


def _clamp_discount(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    discount = to_decimal(value)
    return min(max(discount, Decimal(0)), Decimal(MAX_DISCOUNT_PERCENT))


@dataclass(slots=True)
class CartItem:
    """Single product line in the cart."""

    product_id: str
    name: str
    image_url: str
    price: Decimal
    quantity: int = MIN_QUANTITY
    discount: Decimal | None = None

    def __post_init__(self) -> None:
        if not self.product_id:
            raise ValueError("CartItem requires a product id")
        self.price = to_decimal(self.price)
        if self.price < 0:
            raise ValueError(f"Negative price for product {self.product_id}")
        if isinstance(self.quantity, bool) or int(self.quantity) < MIN_QUANTITY:
            raise ValueError(f"Quantity must be >= {MIN_QUANTITY} for product {self.product_id}")
        self.quantity = int(self.quantity)
        self.discount = _clamp_discount(self.discount)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "productId": self.product_id,
            "name": self.name,
            "imageUrl": self.image_url,
            "price": decimal_to_json(self.price),
            "quantity": self.quantity,
        }
        if self.discount is not None:
            data["discount"] = decimal_to_json(self.discount)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartItem:
        return cls(
            product_id=str(data["productId"]),
            name=str(data.get("name", "")),
            image_url=str(data.get("imageUrl", "") or ""),
            price=to_decimal(data["price"]),
            quantity=data.get("quantity", MIN_QUANTITY),
            discount=data.get("discount"),
        )

    @classmethod
    def from_product(cls, product: dict[str, Any], quantity: int = MIN_QUANTITY) -> CartItem:
        """Build a line from an API product (``_id``) or an order line (``productId``)."""
        product_id = product.get("productId") or product.get("_id") or product.get("id")
        if isinstance(product_id, dict):
            product_id = product_id.get("_id")
        return cls(
            product_id=str(product_id) if product_id else "",
            name=str(product.get("name", "")),
            image_url=str(product.get("imageUrl") or product.get("image") or ""),
            price=to_decimal(product.get("price", 0)),
            quantity=clamp_quantity(quantity),
            discount=product.get("discount"),
        )


@dataclass(slots=True)
class Cart:
    """Ordered cart lines; the total is always derived from them."""

    items: list[CartItem] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal(0))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: str) -> CartItem | None:
        for item in self.items:
            if item.product_id == str(product_id):
                return item
        return None

    def copy(self) -> Cart:
        return Cart(items=[replace(item) for item in self.items])

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "totalAmount": decimal_to_json(self.total_amount),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Cart:
        """Parse the persisted payload; the stored total is ignored and recomputed."""
        raw_items = data.get("items", [])
        if not isinstance(raw_items, list):
            raise ValueError("Cart items must be a list")
        return cls(items=[CartItem.from_dict(raw) for raw in raw_items])
