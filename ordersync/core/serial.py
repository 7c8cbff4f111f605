"""
ordersync — Serialized mutation queue

Every read-modify-write cycle against a storage slot runs inside a
MutationQueue. asyncio.Lock hands itself to waiters in arrival order, so
operations issued against the same queue run FIFO and never interleave.
A failing operation still releases its slot; the next one re-reads state
from the store instead of trusting the previous operation's result.
"""
import asyncio
import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MutationQueue:
    def __init__(self, name: str = "queue"):
        self.name = name
        self._lock = asyncio.Lock()
        self._depth = 0

    @property
    def depth(self) -> int:
        """Operations queued or running."""
        return self._depth

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        self._depth += 1
        try:
            async with self._lock:
                return await func(*args, **kwargs)
        except Exception:
            logger.debug("Queued operation %s failed on %s", getattr(func, "__name__", func), self.name)
            raise
        finally:
            self._depth -= 1


def serialized(attr: str = "_queue"):
    """
    Decorator for async methods that must run through the instance's queue.

    Usage:
        class CartRepository:
            def __init__(self, store):
                self._queue = MutationQueue("cart")

            @serialized()
            async def add_to_cart(self, item):
                ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            queue: MutationQueue = getattr(self, attr)
            return await queue.run(func, self, *args, **kwargs)
        return wrapper
    return decorator
