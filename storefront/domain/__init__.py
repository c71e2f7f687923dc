"""Domain layer: cart, order receipt and checkout state rules."""
from storefront.domain.cart import Cart, CartItem
from storefront.domain.checkout_fsm import CheckoutState, CheckoutStateMachine
from storefront.domain.order import CheckoutForm, OrderReceipt, OrderStatus, PaymentResult

__all__ = [
    "Cart",
    "CartItem",
    "CheckoutForm",
    "CheckoutState",
    "CheckoutStateMachine",
    "OrderReceipt",
    "OrderStatus",
    "PaymentResult",
]
