# dealscout/utils/retry.py

"""Bounded retry with pluggable backoff for async operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger("dealscout.retry")

T = TypeVar("T")

BackoffFn = Callable[[int], float]


def linear_backoff(base: float) -> BackoffFn:
    """Delay grows by *base* seconds per attempt (1-based)."""

    def _delay(attempt: int) -> float:
        return base * attempt

    return _delay


def always_retry(exc: BaseException) -> bool:
    """Retry predicate that treats every exception as transient."""
    return True


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    backoff: BackoffFn,
    is_retryable: Callable[[BaseException], bool] = always_retry,
    label: str = "operation",
) -> T:
    """Run *operation* until it succeeds or the attempt budget is spent.

    The last exception is re-raised once *max_attempts* is exhausted,
    or immediately when *is_retryable* rejects it. Cancellation is
    never retried.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if attempt >= max_attempts or not is_retryable(exc):
                raise
            delay = backoff(attempt)
            logger.warning(
                "%s failed on attempt %d/%d (%s), retrying in %.1fs",
                label,
                attempt,
                max_attempts,
                exc,
                delay,
            )
            await asyncio.sleep(delay)

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"{label} exhausted retries")
