"""Retry helpers for external API calls.

Only transient failures (rate limits, network trouble) are retried; any other
exception propagates on the first attempt.
"""

import functools
import logging
import random
import time
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class APIRateLimitError(Exception):
    """Raised when an API reports rate limiting or quota exhaustion."""


class NetworkError(Exception):
    """Raised on connection problems talking to an API."""


RETRYABLE_ERRORS = (APIRateLimitError, NetworkError)


def classify_api_error(error: Exception) -> Exception:
    """Map a raw SDK error onto a retryable error type when it looks transient."""
    message = str(error).lower()
    if "rate limit" in message or "quota" in message or "429" in message:
        return APIRateLimitError(f"Rate limit hit: {error}")
    if "network" in message or "connection" in message or "timed out" in message:
        return NetworkError(f"Network error: {error}")
    return error


def retry_api_call(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a synchronous API call with exponential backoff and jitter.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry (seconds)
        max_delay: Upper bound for any single delay (seconds)
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    if attempt >= max_retries:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {e}"
                        )
                        raise
                    delay = min(max_delay, base_delay * (2 ** attempt))
                    delay *= random.uniform(0.5, 1.5)
                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.1f}s"
                    )
                    time.sleep(delay)
            raise RuntimeError("unreachable")

        return wrapper

    return decorator
