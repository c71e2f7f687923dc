"""Use case: pay for the current cart and confirm the order."""
from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

from storefront.application.checkout.currency import convert_amount
from storefront.core.constants import DEFAULT_CRYPTO_CURRENCY
from storefront.core.events import EventBus, EventType
from storefront.core.exceptions import CheckoutValidationError, ConfigurationException
from storefront.core.validation import CheckoutValidator
from storefront.domain.cart import Cart
from storefront.domain.checkout_fsm import CheckoutState, CheckoutStateMachine
from storefront.domain.order import CheckoutForm, OrderReceipt, OrderStatus, PaymentResult
from storefront.integrations.cart_store import PersistentCartStore
from storefront.integrations.payment_service import (
    PaymentProvider,
    PaymentRequest,
    PaymentService,
)
from storefront.integrations.receipt_store import LastOrderStore

logger = logging.getLogger(__name__)

GENERIC_PAYMENT_ERROR = "Payment failed. Please try again."
VERIFICATION_ERROR = "Payment verification failed. Please contact support."


def generate_order_id() -> str:
    return f"ORDER_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


@dataclass
class CheckoutOutcome:
    ok: bool
    state: str
    error_key: str | None = None
    message: str | None = None
    field_name: str | None = None
    receipt: OrderReceipt | None = None
    payment_result: PaymentResult | None = None
    history: list[str] = field(default_factory=list)


class CheckoutOrchestrator:
    """Drives one checkout attempt at a time over the session's cart.

    The cart is cleared only after the provider reports success and the
    payment verifies; any other outcome leaves it exactly as it was.
    """

    def __init__(
        self,
        cart_store: PersistentCartStore,
        payments: PaymentService,
        events: EventBus,
        last_order: LastOrderStore,
        usd_inr_rate: Decimal,
        order_id_factory: Callable[[], str] = generate_order_id,
    ):
        self._cart_store = cart_store
        self._payments = payments
        self._events = events
        self._last_order = last_order
        self._rates = {"INR": usd_inr_rate}
        self._order_id_factory = order_id_factory
        self._machine = CheckoutStateMachine()
        self._in_progress = False

    @property
    def state(self) -> str:
        return self._machine.state

    @property
    def in_progress(self) -> bool:
        """True while payment or verification is pending; the UI disables resubmission."""
        return self._in_progress

    async def place_order(self, form: CheckoutForm) -> CheckoutOutcome:
        if self._in_progress:
            return CheckoutOutcome(
                False,
                self._machine.state,
                "checkout_in_progress",
                "A payment is already in progress.",
            )

        self._in_progress = True
        self._machine = CheckoutStateMachine()
        try:
            return await self._run(form)
        finally:
            self._in_progress = False

    async def _run(self, form: CheckoutForm) -> CheckoutOutcome:
        machine = self._machine
        machine.transition(CheckoutState.VALIDATING)

        try:
            form = CheckoutValidator.validate(form, allowed_methods=self._payments.provider_ids)
        except CheckoutValidationError as e:
            logger.info(f"Checkout form rejected: {e.field}")
            return self._fail("validation_error", e.message, field_name=e.field)

        cart = self._cart_store.load()
        if cart.is_empty():
            return self._fail("empty_cart", "Your cart is empty")

        provider_id = form.payment_method
        try:
            gateway = self._payments.get_gateway(provider_id)
            amount = convert_amount(cart.total_amount, gateway.currency, self._rates)
        except (ConfigurationException, ValueError) as e:
            logger.error(f"Checkout cannot use provider {provider_id}: {e}")
            return self._fail("provider_unavailable", GENERIC_PAYMENT_ERROR)

        order_id = self._order_id_factory()
        request = PaymentRequest(
            amount=amount,
            currency=gateway.currency,
            order_id=order_id,
            customer_name=form.name,
            customer_email=form.email,
            customer_phone=form.phone,
            crypto_currency=(
                DEFAULT_CRYPTO_CURRENCY if provider_id == PaymentProvider.BASEPAY.value else None
            ),
        )

        machine.transition(CheckoutState.AWAITING_PAYMENT)
        result = await self._payments.process_payment(request, provider_id)
        if not result.success:
            if result.cancelled:
                machine.transition(CheckoutState.CANCELLED)
                outcome = CheckoutOutcome(
                    False,
                    machine.state,
                    "cancelled",
                    payment_result=result,
                    history=list(machine.history),
                )
                machine.reset()
                return outcome
            return self._fail("payment_failed", result.error or GENERIC_PAYMENT_ERROR, payment_result=result)

        machine.transition(CheckoutState.VERIFYING)
        verification = await self._payments.verify_payment(
            {
                "paymentId": result.payment_id,
                "orderId": result.order_id,
                "signature": result.signature,
            },
            provider_id,
        )
        if not verification.get("verified"):
            return self._fail("verification_failed", VERIFICATION_ERROR, payment_result=result)

        receipt = OrderReceipt(
            order_id=order_id,
            payment_id=result.payment_id or "",
            items=tuple(cart.copy().items),
            total_amount=cart.total_amount,
            amount_paid=amount,
            currency=gateway.currency,
            customer_info=form,
            status=OrderStatus.CONFIRMED,
        )
        self._settle_cart(cart)
        self._last_order.save(receipt)
        machine.transition(CheckoutState.CONFIRMED)
        logger.info(f"Order {order_id} confirmed, paid {amount} {gateway.currency} via {provider_id}")
        self._events.emit(EventType.ORDER_CONFIRMED, receipt)

        return CheckoutOutcome(
            True,
            machine.state,
            receipt=receipt,
            payment_result=result,
            history=list(machine.history),
        )

    def _settle_cart(self, paid: Cart) -> None:
        """Remove the paid lines; anything added while the payment was open stays."""
        current = self._cart_store.load()
        paid_quantities = {item.product_id: item.quantity for item in paid.items}
        remaining = []
        for item in current.items:
            left = item.quantity - paid_quantities.get(item.product_id, 0)
            if left >= 1:
                item.quantity = left
                remaining.append(item)
        if not remaining:
            self._cart_store.clear()
            return
        logger.warning(
            f"Cart changed during payment; keeping {len(remaining)} unpaid line(s) after checkout"
        )
        self._cart_store.save(Cart(items=remaining))

    def _fail(
        self,
        error_key: str,
        message: str,
        *,
        field_name: str | None = None,
        payment_result: PaymentResult | None = None,
    ) -> CheckoutOutcome:
        machine = self._machine
        machine.transition(CheckoutState.FAILED)
        outcome = CheckoutOutcome(
            False,
            machine.state,
            error_key,
            message,
            field_name=field_name,
            payment_result=payment_result,
            history=list(machine.history),
        )
        machine.reset()
        return outcome


__all__ = ["CheckoutOrchestrator", "CheckoutOutcome", "generate_order_id"]
