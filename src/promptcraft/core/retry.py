"""Retry helper with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    initial_delay_ms: int = 1000,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    retry_if: Callable[[Exception], bool] | None = None,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    Attempts are strictly sequential.  After failed attempt ``k`` (1-based)
    the helper waits ``initial_delay_ms * 2 ** (k - 1)`` milliseconds, with
    no jitter.  The error of the final attempt is re-raised unchanged.

    Cancellation is not handled here; an outer caller that needs to stop
    early must make ``operation`` itself abort.

    Args:
        operation: Zero-argument coroutine factory
        max_attempts: Total number of attempts (at least 1)
        initial_delay_ms: Delay after the first failure, in milliseconds
        sleep: Awaitable sleep taking seconds (injectable for tests)
        retry_if: Optional predicate; an error it rejects is re-raised at
            once without further attempts.  All errors are retried when None.

    Returns:
        The value produced by the first successful attempt
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if retry_if is not None and not retry_if(e):
                logger.warning(f"Attempt {attempt}/{max_attempts} failed, not retryable: {e}")
                raise
            if attempt == max_attempts:
                logger.warning(f"Attempt {attempt}/{max_attempts} failed, giving up: {e}")
                raise

            delay_ms = initial_delay_ms * 2 ** (attempt - 1)
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed, retrying in {delay_ms} ms: {e}"
            )
            await sleep(delay_ms / 1000)

    # Unreachable: the loop either returns or re-raises.
    raise AssertionError("retry loop exited without result")
