"""
HTTP helpers for pricing pages, with retry and exponential backoff.

Transient failures (5xx responses, timeouts, connection errors) are retried
with delays of base_delay * multiplier ** attempt plus up to 20% jitter.
Client errors (4xx) fail immediately.

Example:
    >>> html = fetch_page("https://www.anthropic.com/pricing", timeout=20.0)
"""

import functools
import logging
import random
import time
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = "Mozilla/5.0 (compatible; routeopt/0.4; model routing optimizer)"


class RetryConfig:
    """
    Backoff settings.

    Attributes:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry, in seconds
        multiplier: Growth factor per retry
        jitter_ratio: Random variance applied to each delay (0.0-1.0)
    """

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 1.0,
        multiplier: float = 2.0,
        jitter_ratio: float = 0.2,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if not 0.0 <= jitter_ratio <= 1.0:
            raise ValueError("jitter_ratio must be between 0.0 and 1.0")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.jitter_ratio = jitter_ratio

    def delay_for(self, attempt: int) -> float:
        delay = self.base_delay * (self.multiplier**attempt)
        variance = delay * self.jitter_ratio
        return max(0.0, delay + random.uniform(-variance, variance))


def is_retryable_error(exception: Exception) -> bool:
    """True for 5xx responses and transport-level failures."""
    # HTTPStatusError is checked first; it is also an HTTPError
    if isinstance(exception, httpx.HTTPStatusError):
        return 500 <= exception.response.status_code < 600
    return isinstance(exception, httpx.HTTPError)


def with_retry(
    max_retries: int = 2,
    base_delay: float = 1.0,
    multiplier: float = 2.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator retrying a function on transient HTTP errors.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Initial delay in seconds
        multiplier: Exponential backoff multiplier

    Returns:
        Decorator wrapping the target function
    """
    config = RetryConfig(max_retries=max_retries, base_delay=base_delay, multiplier=multiplier)

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            func_name = getattr(func, "__name__", repr(func))
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable_error(e):
                        logger.debug(f"{func_name}: not retrying after attempt {attempt + 1}: {e}")
                        raise
                    if attempt >= config.max_retries:
                        logger.warning(f"{func_name}: giving up after {attempt + 1} attempt(s): {e}")
                        raise
                    delay = config.delay_for(attempt)
                    logger.info(
                        f"{func_name}: retry {attempt + 1}/{config.max_retries} in {delay:.2f}s ({e})"
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper

    return decorator


def fetch_page(url: str, timeout: float = 20.0, max_retries: int = 2) -> str:
    """
    GET a page and return its body text.

    Raises:
        httpx.HTTPStatusError: On 4xx, or 5xx after retries
        httpx.HTTPError: On transport failures after retries
    """

    @with_retry(max_retries=max_retries)
    def _get() -> httpx.Response:
        response = httpx.get(
            url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
        response.raise_for_status()
        return response

    return _get().text


__all__ = [
    "RetryConfig",
    "USER_AGENT",
    "fetch_page",
    "is_retryable_error",
    "with_retry",
]
