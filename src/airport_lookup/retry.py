"""Backoff-and-retry for Duffel API calls.

Only transient failures are worth a second attempt (connection errors, rate
limiting, 5xx); the client passes a predicate saying which ones those are.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import random
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int, base_delay: float, max_delay: float, jitter: bool = True
) -> float:
    """Seconds to wait before retry number ``attempt + 1`` (attempt is 0-based)."""
    delay = min(base_delay * (2**attempt), max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


def async_retry(
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    jitter: bool = True,
    retry_if: Callable[[Exception], bool] | None = None,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorate a coroutine so transient failures are retried with backoff.

    An exception is retried when it is one of *exceptions* and *retry_if*
    (if given) accepts it. The last failure is re-raised once
    ``max_retries`` extra attempts are used up.
    """

    def should_retry(exc: Exception) -> bool:
        return retry_if is None or retry_if(exc)

    def decorator(
        func: Callable[..., Awaitable[T]],
    ) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: object, **kwargs: object) -> T:
            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as exc:
                    if attempt >= max_retries or not should_retry(exc):
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay, jitter)
                    attempt += 1
                    logger.warning(
                        "Duffel call %s failed (%s); retry %d of %d in %.2fs",
                        func.__name__,
                        exc,
                        attempt,
                        max_retries,
                        delay,
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
