"""Remote API client for freee_beancount."""

from freee_beancount.client.freee_client import PAGE_SIZE, FreeeClient
from freee_beancount.client.retry import RetryConfig, call_with_retry

__all__ = ["FreeeClient", "PAGE_SIZE", "RetryConfig", "call_with_retry"]
