"""Session wiring: one explicit context object per application session."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from logging_config import setup_logging
from storefront.application.checkout import CheckoutOrchestrator
from storefront.core.config import Settings, load_settings
from storefront.core.events import EventBus
from storefront.core.sentry_integration import init_sentry
from storefront.core.storage import KeyValueStorage, build_storage
from storefront.domain.order import CheckoutForm
from storefront.integrations.api_client import StorefrontApiClient
from storefront.integrations.cart_store import PersistentCartStore
from storefront.integrations.payment_service import CheckoutHandler, PaymentService
from storefront.integrations.receipt_store import LastOrderStore
from storefront.services.auth_session import AuthSession
from storefront.services.cart_service import CartService
from storefront.services.order_history import OrderHistoryService
from storefront.services.search_service import SuggestionSearch

logger = logging.getLogger(__name__)


@dataclass
class StorefrontSession:
    """Everything a UI handler needs, scoped to one session."""

    settings: Settings
    storage: KeyValueStorage
    events: EventBus
    cart_store: PersistentCartStore
    cart: CartService
    auth: AuthSession
    api: StorefrontApiClient
    payments: PaymentService
    checkout: CheckoutOrchestrator
    orders: OrderHistoryService

    def new_search(self, on_results=None) -> SuggestionSearch:
        """Fresh suggestion box bound to the product search endpoint."""
        return SuggestionSearch(
            lookup=lambda query: self.api.list_products(search=query),
            debounce_seconds=self.settings.search.debounce_seconds,
            min_query_length=self.settings.search.min_query_length,
            on_results=on_results,
        )

    def new_checkout_form(self) -> CheckoutForm:
        """Blank checkout form preselecting the configured payment method, prefilled from the user."""
        method = self.settings.payments.default_provider
        providers = [provider["id"] for provider in self.payments.initialize_providers()]
        if providers and method not in providers:
            method = providers[0]
        return self.auth.prefill(CheckoutForm(payment_method=method))

    def close(self) -> None:
        self.events.clear()


def build_session(
    settings: Settings | None = None,
    *,
    storage: KeyValueStorage | None = None,
    payments: PaymentService | None = None,
    checkout_handlers: dict[str, CheckoutHandler] | None = None,
    namespace: str = "storefront",
) -> StorefrontSession:
    """Create session components from configuration."""
    settings = settings or load_settings()
    if storage is None:
        storage = build_storage(settings.redis_url, namespace=namespace)

    events = EventBus()
    cart_store = PersistentCartStore(storage, events)
    cart = CartService(cart_store)
    last_order = LastOrderStore(storage)

    auth = AuthSession(storage, events)
    api = StorefrontApiClient(settings.api_base_url, token_provider=auth.get_token)
    auth.attach_api(api)

    if payments is None:
        payments = PaymentService.from_config(settings.payments, checkout_handlers)

    checkout = CheckoutOrchestrator(
        cart_store=cart_store,
        payments=payments,
        events=events,
        last_order=last_order,
        usd_inr_rate=settings.payments.usd_inr_rate,
    )
    orders = OrderHistoryService(api, cart, last_order)

    logger.info(f"Storefront session ready (providers={sorted(payments.provider_ids)})")
    return StorefrontSession(
        settings=settings,
        storage=storage,
        events=events,
        cart_store=cart_store,
        cart=cart,
        auth=auth,
        api=api,
        payments=payments,
        checkout=checkout,
        orders=orders,
    )


def init_app(settings: Settings | None = None) -> Settings:
    """Process-level setup: logging and error tracking."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)
    return settings
