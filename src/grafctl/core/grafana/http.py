"""
Retry with exponential backoff for Grafana API calls.

Requests are retried on 5xx responses, timeouts and dropped
connections. 4xx responses are final.

Example:
    >>> @with_retry(RetryPolicy(max_retries=2))
    ... def fetch(client: httpx.Client) -> httpx.Response:
    ...     response = client.get("/api/health")
    ...     response.raise_for_status()
    ...     return response
"""

from __future__ import annotations

import functools
import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How often and how patiently to retry.

    The delay before retry ``n`` (0-based) is
    ``base_delay * multiplier ** n``, varied by up to ``jitter_ratio``
    in either direction.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    jitter_ratio: float = 0.2

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")
        if not 0.0 <= self.jitter_ratio <= 1.0:
            raise ValueError("jitter_ratio must be between 0.0 and 1.0")

    def delay(self, attempt: int) -> float:
        """Seconds to wait before retry ``attempt``."""
        delay = self.base_delay * self.multiplier**attempt
        if self.jitter_ratio:
            spread = delay * self.jitter_ratio
            delay += random.uniform(-spread, spread)
        return max(0.0, delay)


def is_transient(error: Exception) -> bool:
    """True for 5xx responses, timeouts and other transport failures."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.RequestError)


def with_retry(policy: RetryPolicy | None = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorate a function so that transient httpx errors are retried.

    Non-transient errors, and the last transient one once retries are
    used up, propagate unchanged.
    """
    policy = policy or RetryPolicy()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_transient(e) or attempt >= policy.max_retries:
                        raise
                    delay = policy.delay(attempt)
                    attempt += 1
                    logger.info(
                        "transient error (%s), retry %d/%d in %.2fs",
                        e, attempt, policy.max_retries, delay,
                    )
                    time.sleep(delay)

        return wrapper

    return decorator


__all__ = ["RetryPolicy", "is_transient", "with_retry"]
