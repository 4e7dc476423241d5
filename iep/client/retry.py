"""Retry with exponential backoff."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(retry: int, base_delay: float) -> float:
    """Delay in seconds before the ``retry``-th retry (1-based)."""
    return base_delay * 2 ** (retry - 1)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    should_retry: Callable[[T], bool],
    max_retries: int = 2,
    base_delay: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> tuple[T, int]:
    """Run ``operation`` and repeat it while ``should_retry`` holds for its outcome.

    The operation reports failure through its return value rather than by
    raising. At most ``max_retries`` retries follow the first attempt.

    Returns:
        (last outcome, number of retries made)
    """
    outcome = await operation()
    retries = 0
    while retries < max_retries and should_retry(outcome):
        retries += 1
        delay = backoff_delay(retries, base_delay)
        logger.warning(f"Attempt {retries} of {max_retries + 1} failed, retrying in {delay:.2f}s")
        await sleep(delay)
        outcome = await operation()
    return outcome, retries
