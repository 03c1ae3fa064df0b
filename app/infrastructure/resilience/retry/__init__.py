"""Retry policies and the retry executor."""

from infrastructure.resilience.retry.config import RetryPolicy
from infrastructure.resilience.retry.executor import RetryExecutor

__all__ = ["RetryPolicy", "RetryExecutor"]
