"""Cached login session (``token`` and ``user`` storage keys)."""
from __future__ import annotations

import json
import logging
from typing import Any

from storefront.core.constants import TOKEN_KEY, USER_KEY
from storefront.core.events import EventBus, EventType
from storefront.core.exceptions import ApiException
from storefront.core.storage import KeyValueStorage
from storefront.domain.order import CheckoutForm
from storefront.integrations.api_client import StorefrontApiClient

logger = logging.getLogger(__name__)

_USER_FIELDS = ("name", "email", "address", "phoneNumber", "secondaryEmail")


def _user_from_payload(data: dict[str, Any]) -> dict[str, str]:
    user = {"id": str(data.get("_id") or data.get("id") or "")}
    for key in _USER_FIELDS:
        user[key] = data.get(key) or ""
    return user


class AuthSession:
    def __init__(self, storage: KeyValueStorage, events: EventBus, api: StorefrontApiClient | None = None):
        self._storage = storage
        self._events = events
        self._api = api
        self.token: str | None = None
        self.user: dict[str, Any] | None = None
        self.restore()

    def attach_api(self, api: StorefrontApiClient) -> None:
        self._api = api

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    def get_token(self) -> str | None:
        return self.token

    def restore(self) -> None:
        """Load the cached session; a broken cache means logged out."""
        token = self._storage.get(TOKEN_KEY)
        raw_user = self._storage.get(USER_KEY)
        if not token or not raw_user:
            return
        try:
            user = json.loads(raw_user)
        except ValueError:
            logger.warning("Discarding unreadable cached user")
            return
        if isinstance(user, dict):
            self.token = token
            self.user = user

    async def login(self, email: str, password: str, supabase_id: str | None = None) -> dict[str, Any]:
        """Log in against the API; returns ``{"success": bool, "message"?: str}``."""
        if self._api is None:
            raise RuntimeError("AuthSession has no API client")
        try:
            data = await self._api.login(email, password, supabase_id=supabase_id)
        except ApiException as e:
            return {"success": False, "message": e.message or "Login failed"}
        if not isinstance(data, dict) or not data.get("token"):
            return {"success": False, "message": "Login failed"}
        self._store(data["token"], _user_from_payload(data))
        logger.info(f"User {self.user['id']} logged in")
        return {"success": True}

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        if self._api is None:
            raise RuntimeError("AuthSession has no API client")
        try:
            await self._api.register(name, email, password)
        except ApiException as e:
            return {"success": False, "message": e.message or "Registration failed"}
        return {"success": True}

    def update_user(self, data: dict[str, Any]) -> None:
        if not self.token:
            return
        merged = dict(self.user or {})
        merged.update(_user_from_payload({**merged, **data}))
        self._store(self.token, merged)

    def logout(self) -> None:
        self._storage.delete(TOKEN_KEY)
        self._storage.delete(USER_KEY)
        self.token = None
        self.user = None
        self._events.emit(EventType.AUTH_CHANGED, None)

    def prefill(self, form: CheckoutForm) -> CheckoutForm:
        """Fill empty name/email from the logged-in user."""
        if not self.user:
            return form
        return CheckoutForm(
            name=form.name or self.user.get("name", ""),
            email=form.email or self.user.get("email", ""),
            phone=form.phone or self.user.get("phoneNumber", ""),
            address=form.address or self.user.get("address", ""),
            city=form.city,
            pincode=form.pincode,
            payment_method=form.payment_method,
        )

    def _store(self, token: str, user: dict[str, Any]) -> None:
        self._storage.set(TOKEN_KEY, token)
        self._storage.set(USER_KEY, json.dumps(user, ensure_ascii=False))
        self.token = token
        self.user = user
        self._events.emit(EventType.AUTH_CHANGED, user)
