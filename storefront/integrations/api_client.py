"""
JSON-over-HTTP client for the storefront REST API.

Endpoints return ``{"data": ...}`` envelopes; errors carry ``message``.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from storefront.core.constants import HTTP_TIMEOUT_SECONDS
from storefront.core.exceptions import ApiException

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], str | None]


class StorefrontApiClient:
    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider or (lambda: None)
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self, auth: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if auth:
            token = self._token_provider()
            if not token:
                raise ApiException(401, "Not authenticated")
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = False,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._base_url}{path}"
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.request(
                    method, url, params=params, json=json, headers=self._headers(auth)
                ) as resp:
                    try:
                        body = await resp.json(content_type=None)
                    except ValueError:
                        body = None
                    if resp.status >= 400:
                        message = body.get("message") if isinstance(body, dict) else None
                        raise ApiException(resp.status, message or f"Request failed ({resp.status})")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise ApiException(0, "Could not reach the server. Please try again.") from e

        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # ===================== PRODUCTS =====================

    async def list_products(self, search: str | None = None) -> list[dict[str, Any]]:
        params = {"search": search} if search else None
        data = await self._request("GET", "/api/products", params=params)
        return data or []

    async def get_product(self, product_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/products/{product_id}")

    # ===================== AUTH =====================

    async def login(self, email: str, password: str, supabase_id: str | None = None) -> dict[str, Any]:
        payload = {"email": email, "password": password}
        if supabase_id:
            payload["supabaseId"] = supabase_id
        return await self._request("POST", "/api/auth/login", json=payload)

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )

    async def fetch_profile(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/profile", auth=True)

    async def update_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", "/api/auth/profile", auth=True, json=profile)

    # ===================== ORDERS =====================

    async def fetch_order_history(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/orders/myorders", auth=True) or []

    async def fetch_current_orders(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/orders/current", auth=True) or []

    async def cancel_order(self, order_id: str) -> dict[str, Any]:
        return await self._request("PUT", f"/api/orders/{order_id}/cancel", auth=True, json={})
