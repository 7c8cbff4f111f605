"""
ordersync — Persistent key-value store

String keys, string values. Callers own serialization; the JSON helpers
below are what the repositories use.
"""
import json
import logging
from typing import Any, Protocol

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from ordersync.core.errors import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

# Key names are shared with the mobile client and must not change.
CART_DATA_KEY = "@cart_data"
DELIVERY_INFO_KEY = "@delivery_info"
MENU_DATA_KEY = "@menu_data"
PENDING_ORDERS_KEY = "@pending_orders"
ORDER_HISTORY_KEY = "@order_history"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class RedisStore:
    """KeyValueStore backed by a redis.asyncio client."""

    def __init__(self, client: aioredis.Redis):
        self._client = client

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            raise StorageReadError(f"Could not read '{key}': {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client.set(key, value)
        except RedisError as exc:
            raise StorageWriteError(f"Could not write '{key}': {exc}") from exc

    async def remove(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise StorageWriteError(f"Could not remove '{key}': {exc}") from exc


async def read_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Read and decode a JSON value. Missing, unreadable or corrupt → default."""
    try:
        raw = await store.get(key)
    except StorageReadError as exc:
        logger.warning("Storage read failed for %s: %s", key, exc)
        return default
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding unparsable value stored under %s", key)
        return default


async def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Encode and persist a JSON value. Raises StorageWriteError."""
    await store.set(key, json.dumps(value))
