"""Bounded exponential backoff."""
import asyncio
import logging
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-based)."""
    return base_delay * (2 ** attempt)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await ``operation`` until it succeeds or ``max_attempts`` is reached.

    Between attempts ``i`` and ``i + 1`` the loop waits
    ``backoff_delay(i, base_delay)``. There is no wait after the last
    attempt; its exception is re-raised.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(max_attempts):
        try:
            return await operation()
        except retry_on as e:
            if attempt == max_attempts - 1:
                raise
            delay = backoff_delay(attempt, base_delay)
            logger.info(
                f"Attempt {attempt + 1}/{max_attempts} failed ({e}); "
                f"retrying in {delay:g} seconds..."
            )
            await sleep(delay)
