"""
Error taxonomy and retry utilities for the Rich Results automation.
Includes the bounded exponential-backoff retrier and the task failure reasons.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar
from functools import wraps
from dataclasses import dataclass

from .utils.message_types import MessageType
from .utils.notification import NotificationManager

# Custom exceptions for better error handling
class RichResultsError(Exception):
    """Base exception for Rich Results automation errors."""
    pass

class TransientOperationFailure(RichResultsError):
    """A low-level, retryable browser step failed."""
    pass

class BrowserConnectionError(TransientOperationFailure):
    """Browser connection or initialization failed."""
    pass

class PageLoadError(TransientOperationFailure):
    """Page failed to load within timeout."""
    pass

class NavigationError(TransientOperationFailure):
    """Navigation to URL failed."""
    pass

class ElementNotFoundError(TransientOperationFailure):
    """Required element not found on page."""
    pass

class RemoteTransientError(RichResultsError):
    """The remote tool kept reporting its error modal after every recovery attempt."""
    pass

class DeadlineExceeded(RichResultsError):
    """No terminal signal was observed before the task deadline."""
    pass

class PreconditionMissing(RichResultsError):
    """Required input is absent; nothing was sent to the remote tool."""
    pass

class FailureReason(Enum):
    """Why a task ended in the FAILED state."""
    REMOTE_TRANSIENT_ERROR = "remote_transient_error"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    PRECONDITION_MISSING = "precondition_missing"

    @property
    def exception_type(self) -> type[RichResultsError]:
        return _REASON_EXCEPTIONS[self]

_REASON_EXCEPTIONS: dict[FailureReason, type[RichResultsError]] = {
    FailureReason.REMOTE_TRANSIENT_ERROR: RemoteTransientError,
    FailureReason.DEADLINE_EXCEEDED: DeadlineExceeded,
    FailureReason.PRECONDITION_MISSING: PreconditionMissing,
}

@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 3
    base_delay: float = 1.0  # Base delay in seconds

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")

    def get_delay(self, attempt: int) -> float:
        """Delay to wait after failed attempt number ``attempt`` (1-indexed)."""
        return self.base_delay * (2 ** (attempt - 1))

T = TypeVar('T')

async def retry_operation(
    operation: Callable[[], Awaitable[T]],
    retries: int = 3,
    base_delay: float = 1.0,
    *,
    exceptions: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: Optional[logging.Logger] = None,
    notifier: Optional[NotificationManager] = None,
    name: Optional[str] = None,
) -> T:
    """
    Run ``operation`` with bounded exponential backoff.

    The operation is executed once, then retried up to ``retries`` more times.
    Before retry ``k`` the coroutine sleeps ``base_delay * 2 ** (k - 1)``.
    When the budget is exhausted the last exception is re-raised unchanged.

    Args:
        operation: Zero-argument callable returning an awaitable
        retries: Maximum number of retries (0 = run once)
        base_delay: Delay in seconds before the first retry
        exceptions: Exception types that trigger a retry; others propagate at once
        sleep: Awaitable sleep used between attempts
        logger: Logger for retry information
        notifier: Optional progress event sink
        name: Label used in log messages
    """
    config = RetryConfig(max_retries=retries, base_delay=base_delay)

    if logger is None:
        logger = logging.getLogger(__name__)

    label = name or getattr(operation, "__name__", "operation")
    attempt = 0
    while True:
        try:
            return await operation()
        except exceptions as e:
            attempt += 1
            if attempt > config.max_retries:
                if config.max_retries:
                    logger.error(f"{label} failed after {attempt} attempts: {e}")
                raise

            delay = config.get_delay(attempt)
            logger.warning(
                f"{label} failed (attempt {attempt}/{config.max_retries}): {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            if notifier is not None:
                notifier.notify(
                    f"{label} retry {attempt}/{config.max_retries} in {delay:.2f}s",
                    MessageType.RETRY.value,
                )
            await sleep(delay)

def with_async_retry(
    retry_config: Optional[RetryConfig] = None,
    exceptions: tuple[type[BaseException], ...] = (TransientOperationFailure,),
    logger: Optional[logging.Logger] = None
):
    """
    Decorator that runs an async function through :func:`retry_operation`.

    Args:
        retry_config: Retry configuration, defaults to RetryConfig()
        exceptions: Tuple of exception types to catch and retry
        logger: Logger for retry information
    """
    if retry_config is None:
        retry_config = RetryConfig()

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await retry_operation(
                lambda: func(*args, **kwargs),
                retry_config.max_retries,
                retry_config.base_delay,
                exceptions=exceptions,
                logger=logger,
                name=func.__name__,
            )

        return wrapper
    return decorator

def format_error_message(error: BaseException, context: str = "") -> str:
    """
    Format an error message with context for better debugging.

    Args:
        error: The exception object
        context: Additional context about where the error occurred

    Returns:
        Formatted error message
    """
    error_type = type(error).__name__
    error_msg = str(error)

    if context:
        return f"[{error_type}] {context}: {error_msg}"
    return f"[{error_type}] {error_msg}"
