"""
Payment integrations for checkout.

Supports:
- Razorpay (https://razorpay.com), charged in INR
- BasePay crypto checkout, charged in USD settled as a stablecoin

Each gateway creates a payment on the provider side, then hands control to
a checkout handler (the payment dialog shown to the customer). The handler
returns the provider's confirmation payload, or ``None`` when the customer
closes the dialog.

To enable a provider, set environment variables:
- RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET
- BASEPAY_API_KEY (and optionally BASEPAY_API_URL)
"""
from __future__ import annotations

import asyncio
import hashlib
import hmac
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Protocol

import aiohttp

from storefront.core.config import PaymentConfig
from storefront.core.constants import (
    DEFAULT_CRYPTO_CURRENCY,
    HTTP_TIMEOUT_SECONDS,
    RAZORPAY_API_URL,
    RAZORPAY_SUBUNITS,
)
from storefront.core.exceptions import (
    ConfigurationException,
    PaymentCancelledException,
    PaymentException,
)
from storefront.domain.order import PaymentResult

logger = logging.getLogger(__name__)

CheckoutHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any] | None]]


class PaymentProvider(str, Enum):
    """Supported payment providers."""

    RAZORPAY = "razorpay"
    BASEPAY = "basepay"


class PaymentStatus(str, Enum):
    """Payment statuses."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class PaymentRequest:
    amount: Decimal
    currency: str
    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    crypto_currency: str | None = None


def to_razorpay_amount(amount: Decimal | int | float) -> int:
    """Major units to paise, rounded half-up."""
    value = Decimal(str(amount)) * RAZORPAY_SUBUNITS
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def from_razorpay_amount(amount: int) -> Decimal:
    return Decimal(int(amount)) / RAZORPAY_SUBUNITS


class PaymentGateway(Protocol):
    provider: PaymentProvider
    name: str
    currency: str

    async def process(self, request: PaymentRequest) -> PaymentResult: ...

    async def verify(self, payment_id: str, order_id: str, signature: str) -> bool: ...


async def _read_json(resp: aiohttp.ClientResponse) -> Any:
    """Response body as JSON, or None when the provider answered with HTML or text."""
    try:
        return await resp.json(content_type=None)
    except ValueError:
        return None


async def _dismissed_checkout(_payload: dict[str, Any]) -> dict[str, Any] | None:
    return None


class RazorpayGateway:
    """Razorpay orders API plus the standard checkout signature check."""

    provider = PaymentProvider.RAZORPAY
    name = "Razorpay"
    currency = "INR"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        checkout_handler: CheckoutHandler | None = None,
        api_url: str = RAZORPAY_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        if not key_id or not key_secret:
            raise ConfigurationException("Razorpay integration not configured")
        self.key_id = key_id
        self._key_secret = key_secret
        self._checkout_handler = checkout_handler or _dismissed_checkout
        self._api_url = api_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def create_order(self, request: PaymentRequest) -> dict[str, Any]:
        """Create a Razorpay order; amount is sent in paise."""
        payload = {
            "amount": to_razorpay_amount(request.amount),
            "currency": request.currency,
            "receipt": request.order_id,
            "notes": {
                "customer_name": request.customer_name,
                "customer_email": request.customer_email,
            },
        }
        auth = aiohttp.BasicAuth(self.key_id, self._key_secret)
        async with aiohttp.ClientSession(auth=auth, timeout=self._timeout) as session:
            async with session.post(f"{self._api_url}/orders", json=payload) as resp:
                data = await _read_json(resp)
                if resp.status >= 400:
                    error = data.get("error") if isinstance(data, dict) else None
                    error = error if isinstance(error, dict) else {}
                    raise PaymentException(
                        self.provider.value,
                        error.get("description") or f"Razorpay order failed ({resp.status})",
                    )
                if not isinstance(data, dict) or not data.get("id"):
                    raise PaymentException(self.provider.value, "Razorpay returned an unreadable order")
                return data

    async def process(self, request: PaymentRequest) -> PaymentResult:
        order = await self.create_order(request)
        logger.info(f"Razorpay order created: {order.get('id')} for {request.order_id}")

        response = await self._checkout_handler(
            {
                "key": self.key_id,
                "amount": order.get("amount"),
                "currency": order.get("currency", request.currency),
                "order_id": order.get("id"),
                "receipt": request.order_id,
                "prefill": {
                    "name": request.customer_name,
                    "email": request.customer_email,
                    "contact": request.customer_phone,
                },
            }
        )
        if response is None:
            raise PaymentCancelledException(self.provider.value)
        if response.get("error"):
            error = response["error"]
            description = error.get("description") if isinstance(error, dict) else str(error)
            raise PaymentException(self.provider.value, description or "Payment failed")

        return PaymentResult(
            success=True,
            payment_id=response.get("razorpay_payment_id"),
            order_id=response.get("razorpay_order_id") or order.get("id"),
            signature=response.get("razorpay_signature"),
            status=PaymentStatus.COMPLETED.value,
            amount=order.get("amount"),
        )

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self._key_secret.encode(), message, hashlib.sha256).hexdigest()

    async def verify(self, payment_id: str, order_id: str, signature: str) -> bool:
        if not payment_id or not order_id or not signature:
            return False
        return hmac.compare_digest(self.expected_signature(order_id, payment_id), signature)


class BasePayGateway:
    """Crypto checkout: a hosted charge confirmed on-chain."""

    provider = PaymentProvider.BASEPAY
    name = "BasePay (crypto)"
    currency = "USD"

    SETTLED_STATUSES = frozenset({"confirmed", "completed"})

    def __init__(
        self,
        api_key: str,
        api_url: str,
        checkout_handler: CheckoutHandler | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ):
        if not api_key:
            raise ConfigurationException("BasePay integration not configured")
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._checkout_handler = checkout_handler or _dismissed_checkout
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            headers={"X-API-Key": self._api_key},
            timeout=self._timeout,
        )

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        async with self._session() as session:
            async with session.request(method, f"{self._api_url}{path}", **kwargs) as resp:
                data = await _read_json(resp)
                if resp.status >= 400:
                    message = data.get("message") if isinstance(data, dict) else None
                    raise PaymentException(
                        self.provider.value, message or f"BasePay request failed ({resp.status})"
                    )
                return data if isinstance(data, dict) else {}

    async def process(self, request: PaymentRequest) -> PaymentResult:
        charge = await self._request_json(
            "POST",
            "/charges",
            json={
                "amount": str(request.amount),
                "currency": request.currency,
                "crypto_currency": request.crypto_currency or DEFAULT_CRYPTO_CURRENCY,
                "metadata": {
                    "order_id": request.order_id,
                    "customer_email": request.customer_email,
                },
            },
        )
        charge_id = charge.get("id")
        logger.info(f"BasePay charge created: {charge_id} for {request.order_id}")

        response = await self._checkout_handler(charge)
        if response is None:
            raise PaymentCancelledException(self.provider.value)

        return PaymentResult(
            success=True,
            payment_id=charge_id,
            order_id=request.order_id,
            signature=response.get("transaction_hash"),
            status=PaymentStatus.COMPLETED.value,
        )

    async def verify(self, payment_id: str, order_id: str, signature: str) -> bool:
        if not payment_id:
            return False
        charge = await self._request_json("GET", f"/charges/{payment_id}")
        metadata = charge.get("metadata") or {}
        return (
            str(charge.get("status", "")).lower() in self.SETTLED_STATUSES
            and metadata.get("order_id") == order_id
            and (not signature or charge.get("transaction_hash") == signature)
        )


class PaymentService:
    """Dispatches payments to the configured provider gateways."""

    def __init__(self, gateways: dict[str, PaymentGateway] | None = None):
        self._gateways: dict[str, PaymentGateway] = dict(gateways or {})

    @classmethod
    def from_config(
        cls,
        config: PaymentConfig,
        checkout_handlers: dict[str, CheckoutHandler] | None = None,
    ) -> PaymentService:
        handlers = checkout_handlers or {}
        gateways: dict[str, PaymentGateway] = {}
        if config.razorpay_enabled:
            gateways[PaymentProvider.RAZORPAY.value] = RazorpayGateway(
                config.razorpay_key_id,
                config.razorpay_key_secret,
                checkout_handler=handlers.get(PaymentProvider.RAZORPAY.value),
            )
        if config.basepay_enabled:
            gateways[PaymentProvider.BASEPAY.value] = BasePayGateway(
                config.basepay_api_key,
                config.basepay_api_url,
                checkout_handler=handlers.get(PaymentProvider.BASEPAY.value),
            )
        if not gateways:
            logger.warning("No payment providers configured")
        return cls(gateways)

    def register(self, provider_id: str, gateway: PaymentGateway) -> None:
        self._gateways[str(provider_id)] = gateway

    @property
    def provider_ids(self) -> frozenset[str]:
        return frozenset(self._gateways)

    def get_gateway(self, provider_id: str) -> PaymentGateway:
        gateway = self._gateways.get(str(provider_id))
        if gateway is None:
            raise ConfigurationException(f"Payment provider '{provider_id}' is not available")
        return gateway

    def initialize_providers(self) -> list[dict[str, str]]:
        """Describe available providers for the payment method picker."""
        return [
            {"id": provider_id, "name": gateway.name, "currency": gateway.currency}
            for provider_id, gateway in self._gateways.items()
        ]

    async def process_payment(self, request: PaymentRequest, provider_id: str) -> PaymentResult:
        """Run one payment; failures and cancellations come back as results."""
        try:
            gateway = self.get_gateway(provider_id)
            return await gateway.process(request)
        except PaymentCancelledException:
            logger.info(f"Payment {request.order_id} cancelled by user ({provider_id})")
            return PaymentResult(
                success=False,
                order_id=request.order_id,
                status=PaymentStatus.CANCELLED.value,
                error="Payment cancelled",
            )
        except (PaymentException, ConfigurationException) as e:
            logger.error(f"Payment {request.order_id} failed ({provider_id}): {e.message}")
            return PaymentResult(
                success=False,
                order_id=request.order_id,
                status=PaymentStatus.FAILED.value,
                error=e.message,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Payment provider unreachable ({provider_id}): {e}")
            return PaymentResult(
                success=False,
                order_id=request.order_id,
                status=PaymentStatus.FAILED.value,
                error="Payment provider is unreachable. Please try again.",
            )

    async def verify_payment(self, params: dict[str, Any], provider_id: str) -> dict[str, bool]:
        """Verify ``{paymentId, orderId, signature}`` with the provider."""
        try:
            gateway = self.get_gateway(provider_id)
            verified = await gateway.verify(
                params.get("paymentId") or "",
                params.get("orderId") or "",
                params.get("signature") or "",
            )
        except (PaymentException, ConfigurationException, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Payment verification error ({provider_id}): {e}")
            verified = False
        if not verified:
            logger.warning(f"Payment {params.get('paymentId')} failed verification")
        return {"verified": bool(verified)}
