"""Checkout form, payment result and order receipt models."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from storefront.domain.cart import CartItem, decimal_to_json, to_decimal


class OrderStatus:
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    ALL = frozenset({CONFIRMED, CANCELLED})


@dataclass(slots=True)
class CheckoutForm:
    """Contact and shipping details typed by the customer."""

    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    pincode: str = ""
    payment_method: str = "razorpay"

    REQUIRED_FIELDS = ("name", "email", "phone", "address", "city", "pincode")

    def normalized(self) -> CheckoutForm:
        """Copy with surrounding whitespace stripped from every field."""
        return CheckoutForm(
            name=(self.name or "").strip(),
            email=(self.email or "").strip(),
            phone=(self.phone or "").strip(),
            address=(self.address or "").strip(),
            city=(self.city or "").strip(),
            pincode=(self.pincode or "").strip(),
            payment_method=(self.payment_method or "").strip().lower(),
        )

    def to_dict(self) -> dict[str, str]:
        data = asdict(self)
        data["paymentMethod"] = data.pop("payment_method")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckoutForm:
        return cls(
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            phone=str(data.get("phone", "")),
            address=str(data.get("address", "")),
            city=str(data.get("city", "")),
            pincode=str(data.get("pincode", "")),
            payment_method=str(data.get("paymentMethod", data.get("payment_method", "razorpay"))),
        )


@dataclass(slots=True)
class PaymentResult:
    """Outcome reported by a payment provider."""

    success: bool
    payment_id: str | None = None
    order_id: str | None = None
    signature: str | None = None
    status: str = "pending"
    error: str | None = None
    amount: int | None = None  # provider subunits (paise, cents)

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """Write-once snapshot of a paid order."""

    order_id: str
    payment_id: str
    items: tuple[CartItem, ...]
    total_amount: Decimal
    amount_paid: Decimal
    currency: str
    customer_info: CheckoutForm
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = OrderStatus.CONFIRMED

    def to_dict(self) -> dict[str, Any]:
        return {
            "orderId": self.order_id,
            "paymentId": self.payment_id,
            "items": [item.to_dict() for item in self.items],
            "totalAmount": decimal_to_json(self.total_amount),
            "amountPaid": decimal_to_json(self.amount_paid),
            "currency": self.currency,
            "customerInfo": self.customer_info.to_dict(),
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OrderReceipt:
        status = str(data.get("status", OrderStatus.CONFIRMED))
        if status not in OrderStatus.ALL:
            raise ValueError(f"Unknown receipt status: {status}")
        return cls(
            order_id=str(data["orderId"]),
            payment_id=str(data.get("paymentId", "")),
            items=tuple(CartItem.from_dict(raw) for raw in data.get("items", [])),
            total_amount=to_decimal(data["totalAmount"]),
            amount_paid=to_decimal(data.get("amountPaid", data["totalAmount"])),
            currency=str(data.get("currency", "")),
            customer_info=CheckoutForm.from_dict(data.get("customerInfo", {})),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            status=status,
        )
