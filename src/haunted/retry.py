# retry helpers for llm calls with exponential backoff
import asyncio
import logging
import math
from typing import Any, Awaitable, Callable, Optional, TypeVar

import requests

from .models import RetryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_OPTIONS = RetryOptions(max_retries=3, base_delay_ms=1000, max_delay_ms=10000)

# message fragments that point at a temporary problem
RETRYABLE_MARKERS = (
    # network errors
    "network", "timeout", "econnrefused", "enotfound",
    # rate limiting
    "rate limit", "quota", "429",
    # temporary server errors
    "502", "503", "504",
)


async def delay(ms: float) -> None:
    """Suspend the calling task without blocking the event loop"""
    await asyncio.sleep(ms / 1000)


def compute_backoff_delay(attempt: int, options: RetryOptions) -> float:
    """Delay in ms before retry number `attempt` (1-based): base * 2^(attempt-1), capped"""
    exponential = options.base_delay_ms * (2 ** (attempt - 1))
    cap = options.max_delay_ms if options.max_delay_ms else math.inf
    return min(exponential, cap)


async def retry_with_backoff(operation: Callable[[], Awaitable[T]], options: Optional[RetryOptions] = None,
                             should_retry: Optional[Callable[[Exception], bool]] = None) -> T:
    """
    Run an async operation, retrying failures with exponential backoff.

    Makes at most max_retries + 1 attempts. When every attempt fails the
    exception from the last one is re-raised as-is. If should_retry is given
    it is checked on every failure and a rejected error is raised straight away.
    """
    config = options or DEFAULT_RETRY_OPTIONS
    attempt = 0

    while True:
        try:
            return await operation()
        except Exception as e:
            attempt += 1

            if should_retry is not None and not should_retry(e):
                logger.debug(f"Attempt {attempt} failed with a permanent error: {e}")
                raise

            # out of retries, hand the original error back
            if attempt > config.max_retries:
                if config.max_retries:
                    logger.error(f"Giving up after {attempt} attempts: {e}")
                raise

            delay_ms = compute_backoff_delay(attempt, config)
            logger.warning(f"Attempt {attempt} failed ({e}); retrying in {delay_ms:.0f}ms")
            await delay(delay_ms)


async def call_with_retry(operation: Callable[[], Awaitable[T]], options: Optional[RetryOptions] = None) -> T:
    """Retry an operation only while its failures look temporary"""
    return await retry_with_backoff(operation, options, should_retry=is_retryable_error)


def is_retryable_error(error: Any) -> bool:
    """Check if an error is worth retrying (network errors, timeouts, rate limits, 5xx gateways)"""
    if not isinstance(error, Exception):
        return False

    if isinstance(error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True

    message = str(error).lower()
    return any(marker in message for marker in RETRYABLE_MARKERS)
