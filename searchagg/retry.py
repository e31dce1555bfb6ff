"""
Retry with exponential backoff and per-provider circuit breaking.

Backoff wraps blocking calls made by HTTP-backed providers; the circuit
breaker lets the aggregator stop calling a provider that keeps failing.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional
from datetime import datetime


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""
    pass


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    give_up_after: Optional[float] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)
        give_up_after: Optional budget in seconds, measured from the first
            attempt; no retry is started that would begin past it

    Example:
        @exponential_backoff(max_retries=2, base_delay=0.1, give_up_after=1.0)
        def search(url, params):
            return requests.get(url, params=params, timeout=1)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            started = time.monotonic()

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {str(e)}"
                        ) from e

                    current_delay = min(delay, max_delay)
                    if give_up_after is not None:
                        elapsed = time.monotonic() - started
                        if elapsed + current_delay >= give_up_after:
                            raise RetryError(
                                f"Gave up after {attempt + 1} attempts "
                                f"({give_up_after:.2f}s budget): {str(e)}"
                            ) from e

                    if on_retry:
                        on_retry(attempt + 1, e, current_delay)

                    time.sleep(current_delay)
                    delay *= exponential_base

        return wrapper
    return decorator


class CircuitBreaker:
    """
    Circuit breaker guarding calls to a single provider.

    States:
    - CLOSED: Normal operation, calls pass through
    - OPEN: Too many consecutive failures, calls are skipped
    - HALF_OPEN: Recovery timeout elapsed and one trial call is in flight;
      other calls are skipped until it settles
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        """
        Args:
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before attempting recovery
        """
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout

        self.failure_count = 0
        self.last_failure_time: Optional[datetime] = None
        self.state = self.CLOSED

    def allow_request(self) -> bool:
        """Return True if a call may go through.

        A due OPEN circuit moves to HALF_OPEN and admits exactly that one call.
        """
        if self.state == self.CLOSED:
            return True
        if self.state == self.OPEN and self._should_attempt_reset():
            self.state = self.HALF_OPEN
            return True
        return False

    def _should_attempt_reset(self) -> bool:
        if self.last_failure_time is None:
            return True

        elapsed = (datetime.now() - self.last_failure_time).total_seconds()
        return elapsed >= self.recovery_timeout

    def time_until_reset(self) -> float:
        """Seconds until an open circuit lets a trial call through."""
        if self.last_failure_time is None:
            return 0

        elapsed = (datetime.now() - self.last_failure_time).total_seconds()
        return max(0, self.recovery_timeout - elapsed)

    def record_success(self):
        self.failure_count = 0
        self.state = self.CLOSED

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = datetime.now()

        # a failed trial call reopens immediately
        if self.state == self.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = self.OPEN

    def cancel_trial(self):
        """Drop an unsettled trial call; the next request may try again."""
        if self.state == self.HALF_OPEN:
            self.state = self.OPEN



def is_transient_error(exception: Exception) -> bool:
    """
    Determine if an exception is likely transient.

    Args:
        exception: Exception to check

    Returns:
        True if error is likely transient (timeout, connection, 5xx)
    """
    if isinstance(exception, (TimeoutError, ConnectionError)):
        return True

    error_str = str(exception).lower()

    transient_keywords = [
        'timeout',
        'timed out',
        'connection',
        'temporary failure',
        'service unavailable',
        '503',
        '502',
        '500',
        '429',  # Rate limit
    ]

    return any(keyword in error_str for keyword in transient_keywords)


def should_retry_http_status(status_code: int) -> bool:
    """
    Check if HTTP status code indicates a retryable error.
    """
    retryable_codes = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    return status_code in retryable_codes
