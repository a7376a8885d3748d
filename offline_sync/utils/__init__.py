"""Shared utilities for configuration, logging, and error handling"""

from offline_sync.utils.retry import backoff_delay, exponential_backoff_retry

__all__ = ["backoff_delay", "exponential_backoff_retry"]
