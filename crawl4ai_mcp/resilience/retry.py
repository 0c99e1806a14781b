"""Retry policy with exponential backoff for upstream calls.

The policy retries only failures whose ``ClassifiedError.retryable`` is set
(rate limiting, server errors, network errors, timeouts). Everything else
fails on first occurrence.

Example:
    Basic retry with default delays (1s, 2s, 4s):
        >>> policy = RetryPolicy()
        >>> result = await policy.execute_async(some_async_operation, classify)

    Custom retry configuration:
        >>> policy = RetryPolicy(max_retries=5, initial_delay=0.5, max_delay=8.0)
        >>> [policy.get_delay(n) for n in range(5)]
        [0.5, 1.0, 2.0, 4.0, 8.0]
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from crawl4ai_mcp.resilience.errors import ClassifiedError

T = TypeVar("T")


class RetryPolicy:
    """Configurable retry policy with exponential backoff.

    Attributes:
        max_retries: Retries after the first attempt (default: 3), so a call
            that never succeeds makes ``max_retries + 1`` attempts
        initial_delay: Delay before the first retry in seconds (default: 1.0)
        backoff_factor: Multiplier per retry (default: 2.0)
        max_delay: Cap on any single delay in seconds (default: 10.0)
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay: float = 1.0,
        backoff_factor: float = 2.0,
        max_delay: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize retry policy.

        Args:
            max_retries: Maximum number of retry attempts
            initial_delay: Seconds to wait before the first retry
            backoff_factor: Growth factor applied per attempt
            max_delay: Upper bound on a single wait
            sleep: Awaitable sleep function, injectable for tests
        """
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.backoff_factor = backoff_factor
        self.max_delay = max_delay
        self._sleep = sleep
        self._logger = logging.getLogger(__name__)

    async def execute_async(
        self,
        operation: Callable[[], Awaitable[T]],
        classify: Callable[[BaseException], ClassifiedError],
        operation_name: str = "operation",
    ) -> T:
        """Execute async operation with retry logic.

        Args:
            operation: Async callable performing one attempt
            classify: Turns a raised exception into a ClassifiedError
            operation_name: Human-readable operation name for logging

        Returns:
            Result from the first successful attempt

        Raises:
            ClassifiedError: When the failure is not retryable or the retry
                budget is exhausted
        """
        attempt = 0
        while True:
            self._logger.debug(
                "%s attempt %d/%d",
                operation_name,
                attempt + 1,
                self.max_retries + 1,
                extra={"operation": operation_name, "attempt": attempt + 1},
            )
            try:
                return await operation()
            except Exception as exc:  # noqa: BLE001
                error = classify(exc)
                if not error.retryable or attempt >= self.max_retries:
                    if error.retryable:
                        self._logger.error(
                            "%s failed after %d attempts: %s",
                            operation_name,
                            attempt + 1,
                            error.message,
                            extra={"operation": operation_name, "attempt": attempt + 1},
                        )
                    if error is exc:
                        raise
                    raise error from exc

                delay = self.get_delay(attempt)
                self._logger.warning(
                    "%s failed (attempt %d/%d, %s), retrying in %.1fs",
                    operation_name,
                    attempt + 1,
                    self.max_retries + 1,
                    error.kind.value,
                    delay,
                    extra={
                        "operation": operation_name,
                        "attempt": attempt + 1,
                        "delay": delay,
                    },
                )
                await self._sleep(delay)
                attempt += 1

    def get_delay(self, attempt: int) -> float:
        """Calculate delay before retrying after the given attempt.

        Args:
            attempt: Failed attempt number (0-indexed)

        Returns:
            ``min(max_delay, initial_delay * backoff_factor ** attempt)``
        """
        return min(self.max_delay, self.initial_delay * self.backoff_factor**attempt)
