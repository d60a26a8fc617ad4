"""
Bounded retry with exponential backoff for outbound calls
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_ERRORS: tuple[str, ...] = (
    "ECONNRESET",
    "ETIMEDOUT",
    "ENOTFOUND",
    "ECONNREFUSED",
    "TIMEOUT",
    "NETWORK_ERROR",
    # httpx transport errors
    "ConnectError",
    "ConnectTimeout",
    "ReadTimeout",
    "WriteTimeout",
    "PoolTimeout",
    "ReadError",
    "WriteError",
    "RemoteProtocolError",
)


@dataclass(frozen=True)
class RetryOptions:
    """Retry policy; delays are in seconds"""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 10.0
    backoff_multiplier: float = 2.0
    retryable_errors: tuple[str, ...] = field(default=DEFAULT_RETRYABLE_ERRORS)


def is_retryable(error: BaseException, tokens: tuple[str, ...]) -> bool:
    """True if any token is a case-sensitive substring of the error message or type name."""
    message = str(error)
    name = type(error).__name__
    return any(token in message or token in name for token in tokens)


def backoff_delay(retry_index: int, options: RetryOptions) -> float:
    """Delay before retry number ``retry_index + 1`` (the first retry has index 0)."""
    return min(options.initial_delay * options.backoff_multiplier**retry_index, options.max_delay)


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    label: str,
    options: RetryOptions | None = None,
) -> T:
    """
    Run an async operation, retrying transient failures.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        label: Name used in log messages
        options: Retry policy (default: 3 attempts, 1s initial delay doubling to 10s)

    Returns:
        The operation's result

    Raises:
        Exception: The first non-retryable error, or the last error once attempts run out
    """
    options = options or RetryOptions()
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= options.max_attempts or not is_retryable(e, options.retryable_errors):
                raise
            delay = backoff_delay(attempt - 1, options)
            logger.warning(
                f"[RETRY] {label} failed (attempt {attempt}/{options.max_attempts}): "
                f"{type(e).__name__}: {e}. Retrying in {delay:.2f}s"
            )
            await _sleep(delay)
            attempt += 1
