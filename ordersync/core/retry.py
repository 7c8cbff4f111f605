"""
ordersync — Bounded sequential retry

Attempts run one after another and stop at the first success. The pause
between attempts is a fixed, caller-supplied delay; there is no backoff curve.
"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from ordersync.core.errors import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    max_attempts: int,
    delay_seconds: float = 0.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """
    Run `operation(attempt)` up to `max_attempts` times.

    Exceptions listed in `retry_on` trigger another attempt; anything else
    propagates immediately. Exhaustion raises RetryExhaustedError naming the
    number of attempts actually made.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation(attempt)
        except retry_on as exc:
            last_error = exc
            if attempt == max_attempts:
                break
            logger.warning(
                "%s failed on attempt %d/%d (%s), retrying in %.3fs",
                label, attempt, max_attempts, exc, delay_seconds,
            )
            if delay_seconds > 0:
                await asyncio.sleep(delay_seconds)

    logger.error("%s unresolved after %d attempts", label, max_attempts)
    raise RetryExhaustedError(
        f"Failed to {label} after {max_attempts} retries: {last_error}",
        attempts=max_attempts,
        last_error=str(last_error) if last_error else None,
    )
