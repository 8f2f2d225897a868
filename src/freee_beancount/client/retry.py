"""Retry logic with exponential backoff for remote API calls."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

import httpx

from freee_beancount.domain.errors import RemoteAPIError

T = TypeVar("T")

logger = logging.getLogger(__name__)

# Jitter constants to prevent thundering herd problem
JITTER_MIN_MULTIPLIER = 0.5
JITTER_MAX_MULTIPLIER = 1.5

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryConfig:
    """Retry configuration."""

    max_attempts: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 60.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True


def is_retryable(error: Exception) -> bool:
    """Transport failures and throttling/server errors are worth another attempt."""
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, RemoteAPIError):
        return error.status_code in RETRYABLE_STATUS_CODES
    return False


def backoff_delay(attempt: int, config: RetryConfig) -> float:
    delay = min(config.initial_delay * (config.exponential_base**attempt), config.max_delay)
    if config.jitter:
        delay = delay * random.uniform(JITTER_MIN_MULTIPLIER, JITTER_MAX_MULTIPLIER)
    return delay


def call_with_retry(
    func: Callable[[], T],
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call a function, retrying retryable failures with exponential backoff.

    Args:
        func: Function to call
        config: Retry configuration
        sleep: Sleep function, replaceable in tests

    Returns:
        Result of the first successful call

    Raises:
        The last exception once attempts are exhausted, or any non-retryable
        exception immediately.
    """
    config = config or RetryConfig()

    for attempt in range(config.max_attempts):
        try:
            result = func()
            if attempt > 0:
                logger.info(f"Retry succeeded on attempt {attempt + 1}")
            return result
        except Exception as e:
            if not is_retryable(e) or attempt + 1 >= config.max_attempts:
                raise

            delay = backoff_delay(attempt, config)
            logger.warning(
                f"Attempt {attempt + 1}/{config.max_attempts} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            sleep(delay)

    raise ValueError("max_attempts must be at least 1")
