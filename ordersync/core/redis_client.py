"""
ordersync — Redis connection behind the key-value store

One client per process, built lazily from Settings. The RedisStore handed to
the repositories wraps that same client, so closing the client at shutdown
retires the store with it.
"""
import asyncio
import logging

import redis.asyncio as aioredis

from ordersync.core.config import Settings, get_settings
from ordersync.core.storage import RedisStore

logger = logging.getLogger(__name__)

_redis_client: aioredis.Redis | None = None
_redis_store: RedisStore | None = None


def get_redis(settings: Settings | None = None) -> aioredis.Redis:
    global _redis_client
    if _redis_client is None:
        settings = settings or get_settings()
        _redis_client = aioredis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.HEALTH_CHECK_TIMEOUT,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        logger.info("Redis client created for %s:%s db=%s", settings.REDIS_HOST, settings.REDIS_PORT, settings.REDIS_DB)
    return _redis_client


def get_redis_store(settings: Settings | None = None) -> RedisStore:
    global _redis_store
    if _redis_store is None:
        _redis_store = RedisStore(get_redis(settings))
    return _redis_store


async def ping_redis(settings: Settings | None = None) -> str:
    """'ok', or a short error description for the health report."""
    settings = settings or get_settings()
    try:
        await asyncio.wait_for(get_redis(settings).ping(), timeout=settings.HEALTH_CHECK_TIMEOUT)
    except Exception as e:
        return f"error: {str(e)[:100]}"
    return "ok"


async def close_redis():
    global _redis_client, _redis_store
    _redis_store = None
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None
