"""Polling loop with capped exponential backoff."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from conversiontools.core.errors import RequestTimeoutError
from conversiontools.core.models import TaskStatusResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class PollingOptions:
    """Polling cadence. Durations are in seconds; ``timeout`` of 0 or None means no limit."""

    interval: float = 5.0
    max_interval: float = 30.0
    backoff: float = 1.5
    timeout: Optional[float] = None
    on_progress: Optional[Callable[[object], None]] = None


def setting_or(value: Optional[float], default: float) -> float:
    """Return ``value`` unless it is None; an explicit 0 is kept."""
    return default if value is None else value


async def poll(
    fetch: Callable[[], Awaitable[T]],
    should_continue: Callable[[T], bool],
    options: PollingOptions,
) -> T:
    """Call ``fetch`` until ``should_continue`` returns False and return that result."""
    start = time.monotonic()
    current_interval = options.interval

    while True:
        result = await fetch()
        if not should_continue(result):
            return result

        if options.timeout and options.timeout > 0:
            elapsed = time.monotonic() - start
            if elapsed >= options.timeout:
                raise RequestTimeoutError(
                    f"Polling timed out after {options.timeout}s", options.timeout
                )

        if options.on_progress is not None:
            options.on_progress(result)

        await asyncio.sleep(current_interval)
        current_interval = min(current_interval * options.backoff, options.max_interval)


async def poll_task_status(
    get_status: Callable[[], Awaitable[TaskStatusResponse]],
    options: PollingOptions,
) -> TaskStatusResponse:
    """Poll a task until it leaves the PENDING/RUNNING states."""

    def in_flight(response: TaskStatusResponse) -> bool:
        if response.status.is_running:
            logger.debug(f"Task is {response.status.value} ({response.conversion_progress}%)")
            return True
        return False

    return await poll(get_status, in_flight, options)
