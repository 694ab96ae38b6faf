"""
Retry policies for request execution.

A policy runs one attempt at a time, stops at the first success and wraps the
last failure in RequestExhaustedError once it gives up. Errors are classified
so that permanent failures (4xx, serialization) stop the loop early.
"""

import logging
import random
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from ..runtime.errors import (
    DispatchCancelledError,
    RequestExhaustedError,
    is_retriable,
)


logger = logging.getLogger(__name__)


class RetryPolicy(ABC):
    """
    Abstract base class for retry policies.

    One policy instance is shared by every worker of a dispatch pass, so the
    statistics counters are guarded by a lock.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.0,
        max_delay: float = 30.0,
        jitter: bool = False,
        jitter_factor: float = 0.1,
        retry_client_errors: bool = False,
    ):
        """
        Initialize retry policy.

        Args:
            max_attempts: Maximum number of attempts, including the first one
            base_delay: Base delay between attempts in seconds
            max_delay: Maximum delay between attempts in seconds
            jitter: Whether to add jitter to delays
            jitter_factor: Jitter factor (0.0 to 1.0)
            retry_client_errors: Also retry 4xx responses
        """
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.jitter_factor = jitter_factor
        self.retry_client_errors = retry_client_errors

        self._lock = threading.Lock()
        self.total_attempts = 0
        self.total_retries = 0
        self.total_successes = 0
        self.total_failures = 0

    @abstractmethod
    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay after the given attempt number.

        Args:
            attempt: Attempt number (1-based)

        Returns:
            Delay in seconds
        """

    def should_retry(self, attempt: int, exception: Exception) -> bool:
        if attempt >= self.max_attempts:
            return False
        return is_retriable(exception, self.retry_client_errors)

    def add_jitter(self, delay: float) -> float:
        if not self.jitter:
            return delay
        jitter_amount = delay * self.jitter_factor * (random.random() - 0.5)
        return max(0, delay + jitter_amount)

    def _count(self, name: str) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + 1)

    def execute(
        self,
        func: Callable[[], Any],
        label: str = "",
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """
        Execute a zero-argument callable under this policy.

        Args:
            func: Callable performing one attempt
            label: Name used in logs and in the exhausted error (usually the endpoint)
            cancel_event: Checked before every attempt; also interrupts backoff sleeps

        Returns:
            Result of the first successful attempt

        Raises:
            RequestExhaustedError: If no attempt succeeded
            DispatchCancelledError: If cancel_event was set before an attempt
        """
        attempt = 0
        last_exception: Optional[Exception] = None

        while attempt < self.max_attempts:
            if cancel_event is not None and cancel_event.is_set():
                raise DispatchCancelledError(endpoint=label)

            attempt += 1
            self._count("total_attempts")

            try:
                result = func()
            except Exception as e:
                last_exception = e

                if not self.should_retry(attempt, e):
                    if attempt < self.max_attempts:
                        logger.warning(f"Attempt {attempt} for {label} failed permanently: {e}")
                    break

                delay = self.add_jitter(min(self.calculate_delay(attempt), self.max_delay))
                self._count("total_retries")
                logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} for {label} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                if delay > 0:
                    if cancel_event is not None:
                        cancel_event.wait(delay)
                    else:
                        time.sleep(delay)
                continue

            self._count("total_successes")
            if attempt > 1:
                logger.info(f"Request to {label} succeeded on attempt {attempt}")
            return result

        self._count("total_failures")
        logger.error(f"Giving up on {label} after {attempt} attempt(s): {last_exception}")
        raise RequestExhaustedError(label, last_exception, attempt)

    def get_stats(self) -> dict:
        """Get retry policy statistics."""
        with self._lock:
            return {
                "total_attempts": self.total_attempts,
                "total_retries": self.total_retries,
                "total_successes": self.total_successes,
                "total_failures": self.total_failures,
                "success_rate": self.total_successes / max(self.total_attempts, 1),
                "retry_rate": self.total_retries / max(self.total_attempts, 1),
            }


class ExponentialBackoff(RetryPolicy):
    """
    Exponential backoff retry policy.

    Delay grows as base_delay * (factor ^ (attempt - 1)).
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 30.0,
        factor: float = 2.0,
        jitter: bool = True,
        jitter_factor: float = 0.1,
        retry_client_errors: bool = False,
    ):
        super().__init__(max_attempts, base_delay, max_delay, jitter, jitter_factor,
                         retry_client_errors)
        self.factor = factor

    def calculate_delay(self, attempt: int) -> float:
        return min(self.base_delay * (self.factor ** (attempt - 1)), self.max_delay)


class FixedBackoff(RetryPolicy):
    """
    Fixed delay retry policy.

    With the default delay of zero this retries immediately.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 0.0,
        jitter: bool = False,
        jitter_factor: float = 0.1,
        retry_client_errors: bool = False,
    ):
        super().__init__(max_attempts, delay, delay, jitter, jitter_factor, retry_client_errors)

    def calculate_delay(self, attempt: int) -> float:
        return self.base_delay


def policy_from_config(config) -> RetryPolicy:
    """Build the retry policy described by a ConnectionConfig."""
    if config.retry_delay > 0 and config.retry_backoff > 1:
        return ExponentialBackoff(
            max_attempts=config.max_retries,
            base_delay=config.retry_delay,
            max_delay=config.max_retry_delay,
            factor=config.retry_backoff,
            retry_client_errors=config.retry_client_errors,
        )
    return FixedBackoff(
        max_attempts=config.max_retries,
        delay=config.retry_delay,
        retry_client_errors=config.retry_client_errors,
    )
