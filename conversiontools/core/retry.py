"""Retry helper with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from conversiontools.core.errors import NetworkError, RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_STATUSES = (408, 500, 502, 503, 504)


@dataclass
class RetryOptions:
    """Retry policy for a single logical request."""

    retries: int = 3
    retry_delay: float = 1.0
    retryable_statuses: Sequence[int] = DEFAULT_RETRYABLE_STATUSES
    should_retry: Optional[Callable[[BaseException], bool]] = None


def should_retry_error(error: BaseException, options: RetryOptions) -> bool:
    """Decide whether ``error`` is transient.

    A caller supplied ``should_retry`` replaces the default heuristic entirely.
    """
    if options.should_retry is not None:
        return options.should_retry(error)
    if isinstance(error, RequestTimeoutError) and error.aborted:
        return False
    if isinstance(error, (NetworkError, RequestTimeoutError)):
        return True
    status = getattr(error, "status", None)
    return status is not None and status in options.retryable_statuses


async def with_retry(fn: Callable[[], Awaitable[T]], options: RetryOptions) -> T:
    """Run ``fn`` until it succeeds or the retry budget is spent.

    The delay before retry ``n`` (1-indexed) is ``retry_delay * 2 ** (n - 1)``.
    Once retries are exhausted the last error is re-raised as is.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            attempt += 1
            if attempt > options.retries or not should_retry_error(exc, options):
                raise
            delay = options.retry_delay * (2 ** (attempt - 1))
            logger.debug(f"Retry attempt {attempt}/{options.retries} after {delay}s: {exc}")
            await asyncio.sleep(delay)
