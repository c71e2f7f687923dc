"""Checkout use case: validate, pay, verify, confirm."""
from storefront.application.checkout.place_order import (
    CheckoutOrchestrator,
    CheckoutOutcome,
    generate_order_id,
)

__all__ = ["CheckoutOrchestrator", "CheckoutOutcome", "generate_order_id"]
