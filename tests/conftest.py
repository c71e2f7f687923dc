"""Shared pytest fixtures for storefront tests."""
from __future__ import annotations

from dataclasses import dataclass, field

import pytest
import redis

from storefront.core.config import PaymentConfig, SearchConfig, Settings
from storefront.core.events import EventBus
from storefront.core.storage import MemoryStorage
from storefront.integrations.cart_store import PersistentCartStore
from storefront.services.cart_service import CartService


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    fail: bool = False

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("redis down")

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key: str):
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str):
        self._check()
        self.data[key] = value
        return True

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self._check()
        self.data[key] = value
        self.expiry[key] = ttl
        return True

    def delete(self, key: str) -> int:
        self._check()
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        self.expiry.pop(key, None)
        return existed


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedisClient:
    import storefront.core.storage as storage_module

    client = FakeRedisClient()
    monkeypatch.setattr(storage_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def cart_store(storage: MemoryStorage, events: EventBus) -> PersistentCartStore:
    return PersistentCartStore(storage, events)


@pytest.fixture
def cart_service(cart_store: PersistentCartStore) -> CartService:
    return CartService(cart_store)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url="http://api.test",
        payments=PaymentConfig(),
        search=SearchConfig(debounce_seconds=0.0, min_query_length=2),
    )


@pytest.fixture()
async def aiohttp_client():
    """Minimal aiohttp_client fixture to avoid pytest-aiohttp dependency."""
    clients: list[object] = []

    async def _make_client(app):
        from aiohttp.test_utils import TestClient, TestServer

        server = TestServer(app)
        client = TestClient(server)
        await client.start_server()
        clients.append(client)
        return client

    try:
        yield _make_client
    finally:
        for client in clients:
            await client.close()


@pytest.fixture
def make_product():
    def _make(product_id: str, price, name: str | None = None, **extra) -> dict:
        return {
            "_id": product_id,
            "name": name or f"Product {product_id}",
            "imageUrl": f"https://cdn.test/{product_id}.jpg",
            "price": price,
            **extra,
        }

    return _make
