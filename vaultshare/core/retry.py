import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from vaultshare.config import settings
from vaultshare.core.errors import ErrorKind, RetryExhaustedError, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay awaited before `attempt` (attempt >= 2): base, 2x base, 4x base, ..."""
    return base_delay * (2 ** (attempt - 2))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    label: str = "operation",
    base_delay: Optional[float] = None,
) -> T:
    """Run `operation`, retrying transient failures with exponential backoff.

    Non-transient errors are re-raised on the attempt that produced them.
    After `max_retries` retries of transient failures a RetryExhaustedError
    carrying the label and attempt count is raised.
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")
    if base_delay is None:
        base_delay = settings.retry_base_delay

    total_attempts = max_retries + 1
    last_error: Optional[BaseException] = None
    for attempt in range(1, total_attempts + 1):
        if attempt > 1:
            await asyncio.sleep(backoff_delay(attempt, base_delay))
        try:
            return await operation()
        except Exception as e:
            kind = classify_error(e)
            logger.warning(
                "%s: attempt %d/%d failed (%s): %s",
                label, attempt, total_attempts, kind.value, e,
            )
            if kind is not ErrorKind.TRANSIENT:
                raise
            last_error = e

    raise RetryExhaustedError(label, total_attempts, last_error)
