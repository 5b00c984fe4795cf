"""Backoff for outbound feed requests.

Timeouts, dropped connections, HTTP 429 and 5xx responses are transient and
retried with exponential backoff plus jitter. Other HTTP errors mean the
feed location itself is wrong and fail on the first attempt.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)


class RetryableError(Exception):
    """A failure worth another attempt."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(RetryableError):
    """Feed host asked us to slow down (HTTP 429)."""


class NetworkTimeoutError(RetryableError):
    """Request took longer than the configured timeout."""


class NetworkConnectionError(RetryableError):
    """Host unreachable, connection reset, DNS failure and the like."""


class ServerError(RetryableError):
    """Feed host answered with a 5xx."""


class NonRetryableError(Exception):
    """A failure that another attempt will not fix."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidRequestError(NonRetryableError):
    """Feed host rejected the request (4xx), e.g. a feed that moved."""


RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    RateLimitError,
    NetworkTimeoutError,
    NetworkConnectionError,
    ServerError,
)


@dataclass(frozen=True)
class RetryConfig:
    """Backoff settings.

    ``max_attempts`` counts the first try. Waits grow exponentially from
    ``min_wait_seconds`` and never exceed ``max_wait_seconds``; with
    ``jitter`` up to ``min_wait_seconds`` of randomness is added per wait.
    """

    max_attempts: int = 3
    max_wait_seconds: float = 30
    min_wait_seconds: float = 1
    jitter: bool = True


DEFAULT_RETRY_CONFIG = RetryConfig()

# Near-instant waits for tests
TEST_RETRY_CONFIG = RetryConfig(max_wait_seconds=0.1, min_wait_seconds=0.01, jitter=False)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log a failed attempt before tenacity sleeps."""
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return
    exception = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed ({type(exception).__name__}: "
        f"{exception}); retrying in {wait:.1f}s"
    )


def _retry_options(config: RetryConfig, retry_on: tuple[type[Exception], ...]) -> dict[str, Any]:
    return {
        "stop": stop_after_attempt(config.max_attempts),
        "wait": wait_exponential_jitter(
            initial=config.min_wait_seconds,
            max=config.max_wait_seconds,
            jitter=config.min_wait_seconds if config.jitter else 0,
        ),
        "retry": retry_if_exception_type(retry_on),
        "before_sleep": log_retry_attempt,
        "reraise": True,
    }


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> Callable:
    """Retry the decorated function on transient errors.

    Coroutine functions are retried without blocking the event loop. When
    ``config`` is None, ``DEFAULT_RETRY_CONFIG`` is looked up on every call.

    Usage:
        @with_retry()
        async def download(url): ...

        content = await with_retry(config=RetryConfig(max_attempts=5))(download)(url)

    Args:
        config: Backoff settings
        retry_on: Exception types worth retrying (RETRYABLE_ERRORS by default)

    Returns:
        Decorator; the last exception is re-raised once attempts run out
    """
    exceptions = retry_on or RETRYABLE_ERRORS

    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                options = _retry_options(config or DEFAULT_RETRY_CONFIG, exceptions)
                async for attempt in AsyncRetrying(**options):
                    with attempt:
                        return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            options = _retry_options(config or DEFAULT_RETRY_CONFIG, exceptions)
            for attempt in Retrying(**options):
                with attempt:
                    return func(*args, **kwargs)

        return wrapper

    return decorator


def classify_http_error(status_code: int, reason: str = "") -> Exception:
    """Map an HTTP error status to a retryable or final exception."""
    detail = f"HTTP {status_code} {reason}".rstrip()

    if status_code == 429:
        return RateLimitError(f"Rate limited by feed host ({detail})", status_code)
    if status_code == 408:
        return NetworkTimeoutError(f"Feed host timed out ({detail})", status_code)
    if 500 <= status_code < 600:
        return ServerError(f"Feed host error ({detail})", status_code)
    if 400 <= status_code < 500:
        return InvalidRequestError(f"Feed request rejected ({detail})", status_code)
    return NonRetryableError(f"Unexpected feed response ({detail})", status_code)
