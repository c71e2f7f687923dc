"""Store-currency to provider-currency conversion."""
from __future__ import annotations

from decimal import Decimal

from storefront.core.constants import STORE_CURRENCY


def convert_amount(
    amount: Decimal,
    target_currency: str,
    rates: dict[str, Decimal],
    source_currency: str = STORE_CURRENCY,
) -> Decimal:
    """Convert with a fixed rate; ``rates`` maps target currency -> units per source unit."""
    if target_currency == source_currency:
        return amount
    rate = rates.get(target_currency)
    if rate is None:
        raise ValueError(f"No exchange rate for {source_currency} -> {target_currency}")
    return amount * rate
