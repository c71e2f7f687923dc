"""Key/value storage used for the cart and the auth session cache.

Mirrors the browser's local storage contract: string keys, string values,
whole-value overwrite. ``RedisStorage`` persists across processes and
falls back to memory when Redis goes away.
"""
from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import redis

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage, one instance per session."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStorage:
    """Storage persisted in Redis under a per-session namespace."""

    def __init__(
        self,
        redis_url: str,
        namespace: str = "storefront",
        ttl_seconds: int | None = None,
        client=None,
    ) -> None:
        self._namespace = namespace
        self._ttl = ttl_seconds
        self._fallback = MemoryStorage()
        self._client = client if client is not None else self._init_client(redis_url)

    @property
    def connected(self) -> bool:
        return self._client is not None

    def _init_client(self, redis_url: str):
        try:
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info(f"Redis storage enabled (namespace={self._namespace})")
            return client
        except redis.RedisError as exc:
            logger.warning(f"Redis storage init failed, fallback to in-memory: {exc}")
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning(f"Redis storage fallback to memory mode: {reason}")
        self._client = None

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        if not self._client:
            return self._fallback.get(key)
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            self._switch_to_memory_fallback(exc)
            return self._fallback.get(key)

    def set(self, key: str, value: str) -> None:
        if self._client:
            try:
                if self._ttl:
                    self._client.setex(self._key(key), self._ttl, value)
                else:
                    self._client.set(self._key(key), value)
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._fallback.set(key, value)

    def delete(self, key: str) -> None:
        if self._client:
            try:
                self._client.delete(self._key(key))
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._fallback.delete(key)


def build_storage(redis_url: str | None, namespace: str = "storefront") -> KeyValueStorage:
    """Redis when a URL is configured, memory otherwise."""
    if redis_url:
        return RedisStorage(redis_url, namespace=namespace)
    logger.info("REDIS_URL is not set; storage uses in-memory mode")
    return MemoryStorage()
