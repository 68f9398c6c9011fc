"""Retry with exponential backoff for recoverable per-item failures.

Only errors whose ``recoverable`` flag is set (network and disk-space
failures) are retried; everything else is raised on the first attempt.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import anyio

from bulkops.core.constants import MAX_BACKOFF_SECONDS
from bulkops.core.errors import FileOperationError

T = TypeVar("T")

OnRetry = Callable[[int, float, FileOperationError], None]


def calculate_backoff_delay(attempt: int, base_delay: float) -> float:
    """Calculate exponential backoff delay for retry attempt.

    Args:
        attempt: Retry attempt number (1-indexed)
        base_delay: Base delay in seconds

    Returns:
        Delay in seconds (base, 2*base, 4*base, ...) capped at 60s
    """
    delay: float = min(base_delay * (2 ** (attempt - 1)), MAX_BACKOFF_SECONDS)
    return delay


async def run_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    base_delay: float,
    on_retry: OnRetry | None = None,
) -> T:
    """Await ``func()``, retrying recoverable FileOperationErrors.

    Args:
        func: Zero-argument coroutine factory
        max_retries: Retries after the first attempt (0 disables)
        base_delay: Base backoff delay in seconds
        on_retry: Optional hook called before each sleep

    Returns:
        Result of the first successful attempt

    Raises:
        FileOperationError: Non-recoverable error, or the last error once
            retries are exhausted
    """
    attempt = 0
    while True:
        try:
            return await func()
        except FileOperationError as exc:
            if not exc.recoverable or attempt >= max_retries:
                raise

            attempt += 1
            delay = calculate_backoff_delay(attempt, base_delay)
            if on_retry is not None:
                on_retry(attempt, delay, exc)
            await anyio.sleep(delay)
