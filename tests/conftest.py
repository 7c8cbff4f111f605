"""
Shared fixtures: an in-memory key-value store with switchable failures and a
scripted stand-in for the remote ordering service.
"""
import asyncio
import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from ordersync.clients.order_api import OrderApiClient
from ordersync.core.config import Settings
from ordersync.core.errors import StorageReadError, StorageWriteError

BASE_URL = "http://orders.test"

# ─── Sample data ───────────────────────────────────────────────────────────────
MENU_PAYLOAD = {
    "drink_of_the_day": {
        "id": "dotd",
        "name": "Honey Lavender Latte",
        "type": "drink",
        "price": {"small": 4.0, "large": 5.5},
    },
    "full_menu": {
        "menu": [
            {"id": "latte", "name": "Latte", "type": "drink", "price": {"small": 3.5, "large": 4.5}},
            {"id": "croissant", "name": "Croissant", "type": "food", "price": 2.75},
        ],
        "addons": [{"id": "oat", "name": "Oat Milk", "type": "addon", "price": 0.5}],
    },
}

DELIVERY = {
    "name": "Ada Park",
    "phoneNumber": "+1 (555) 010-0000",
    "email": "ada@example.com",
    "address": "12 Orchard Lane",
    "city": "Springfield",
    "zipCode": "12345",
}

CART_ITEMS = [
    {
        "id": "Lattelarge",
        "name": "Latte",
        "type": "drink",
        "price": 4.5,
        "quantity": 2,
        "selectedSize": "large",
        "selectedOptions": [],
    }
]

CONFIRMED_REPLY = {
    "success": True,
    "orderId": "srv-1001",
    "orderNumber": "ORD-1001",
    "estimatedDeliveryTime": "30 minutes",
    "message": "Order received",
}


# ─── Test doubles ──────────────────────────────────────────────────────────────
class MemoryStore:
    """KeyValueStore kept in a dict. Every call yields to the event loop once."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail_reads = False
        self.fail_keys: set[str] = set()
        self.fail_next_writes = 0
        self.writes: list[str] = []

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        if self.fail_reads:
            raise StorageReadError(f"Could not read '{key}'")
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.sleep(0)
        self._check_write(key)
        self.data[key] = value
        self.writes.append(key)

    async def remove(self, key: str) -> None:
        await asyncio.sleep(0)
        self._check_write(key)
        self.data.pop(key, None)
        self.writes.append(key)

    def _check_write(self, key: str) -> None:
        if self.fail_next_writes:
            self.fail_next_writes -= 1
            raise StorageWriteError(f"Could not write '{key}'")
        if key in self.fail_keys:
            raise StorageWriteError(f"Could not write '{key}'")

    # Synchronous helpers for arranging and asserting
    def load(self, key: str, default: Any = None) -> Any:
        raw = self.data.get(key)
        return json.loads(raw) if raw is not None else default

    def put(self, key: str, value: Any) -> None:
        self.data[key] = json.dumps(value)


class ServiceStub:
    """
    httpx.MockTransport handler. Replies queued for a path are served in
    order; the last one keeps being served.
    """

    def __init__(self):
        self.routes: dict[str, list[tuple]] = {}
        self.requests: list[httpx.Request] = []

    def reply(
        self,
        path: str,
        status_code: int = 200,
        json: Any = None,
        raises: Exception | None = None,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        content: bytes | None = None,
    ) -> "ServiceStub":
        self.routes.setdefault(path, []).append((status_code, json, raises, handler, content))
        return self

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"error": "Not found"})
        status_code, body, raises, handler, content = queue.pop(0) if len(queue) > 1 else queue[0]
        if raises is not None:
            raise raises
        if handler is not None:
            return handler(request)
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=body)


def make_api_client(settings: Settings, service: ServiceStub) -> OrderApiClient:
    client = httpx.AsyncClient(base_url=settings.ORDER_API_BASE_URL, transport=httpx.MockTransport(service))
    return OrderApiClient(settings, client=client)


# ─── Fixtures ──────────────────────────────────────────────────────────────────
@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ORDER_API_BASE_URL=BASE_URL,
        METRICS_ENABLED=False,
        CHECKOUT_RETRY_DELAY_SECONDS=0.0,
        MENU_CACHE_FRESHNESS_ENABLED=False,
    )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def service() -> ServiceStub:
    return ServiceStub()


@pytest_asyncio.fixture
async def api(settings, service):
    client = make_api_client(settings, service)
    yield client
    await client.aclose()
