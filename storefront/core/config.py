"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from storefront.core.constants import (
    DEFAULT_API_URL,
    DEFAULT_BASEPAY_API_URL,
    DEFAULT_USD_INR_RATE,
    SEARCH_DEBOUNCE_SECONDS,
    SEARCH_MIN_QUERY_LENGTH,
)


def _str_to_decimal(value: str | None, default: Decimal) -> Decimal:
    if not value:
        return default
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return default
    return parsed if parsed.is_finite() and parsed > 0 else default


def _str_to_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _str_to_float(value: str | None, default: float) -> float:
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if math.isfinite(parsed) and parsed >= 0 else default


@dataclass(slots=True)
class PaymentConfig:
    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = None
    basepay_api_key: str | None = None
    basepay_api_url: str = DEFAULT_BASEPAY_API_URL
    usd_inr_rate: Decimal = DEFAULT_USD_INR_RATE
    default_provider: str = "razorpay"

    @property
    def razorpay_enabled(self) -> bool:
        return bool(self.razorpay_key_id and self.razorpay_key_secret)

    @property
    def basepay_enabled(self) -> bool:
        return bool(self.basepay_api_key)


@dataclass(slots=True)
class SearchConfig:
    debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS
    min_query_length: int = SEARCH_MIN_QUERY_LENGTH


@dataclass(slots=True)
class Settings:
    api_base_url: str = DEFAULT_API_URL
    redis_url: str | None = None
    payments: PaymentConfig = field(default_factory=PaymentConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    log_level: str = "INFO"
    sentry_dsn: str | None = None
    environment: str = "development"


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    payments = PaymentConfig(
        razorpay_key_id=os.getenv("RAZORPAY_KEY_ID") or None,
        razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET") or None,
        basepay_api_key=os.getenv("BASEPAY_API_KEY") or None,
        basepay_api_url=os.getenv("BASEPAY_API_URL", DEFAULT_BASEPAY_API_URL),
        usd_inr_rate=_str_to_decimal(os.getenv("STOREFRONT_USD_INR_RATE"), DEFAULT_USD_INR_RATE),
        default_provider=os.getenv("STOREFRONT_DEFAULT_PAYMENT", "razorpay").strip().lower(),
    )

    search = SearchConfig(
        debounce_seconds=_str_to_float(
            os.getenv("STOREFRONT_SEARCH_DEBOUNCE"), SEARCH_DEBOUNCE_SECONDS
        ),
        min_query_length=_str_to_int(
            os.getenv("STOREFRONT_SEARCH_MIN_LENGTH"), SEARCH_MIN_QUERY_LENGTH
        ),
    )

    return Settings(
        api_base_url=os.getenv("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
        redis_url=os.getenv("REDIS_URL") or None,
        payments=payments,
        search=search,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("STOREFRONT_ENV", "development"),
    )
