"""
Retry logic with exponential backoff using tenacity.
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_random_exponential,
    retry_if_exception_type,
    RetryCallState,
)

from app.core.config import get_settings
from app.core.exceptions import StorageError, map_storage_error

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry logic."""

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 5.0
    retryable_exceptions: tuple = (StorageError,)


def create_async_retry_decorator(
    config: Optional[RetryConfig] = None,
    operation: str = "storage",
) -> Callable:
    """Create a retry decorator for async storage operations."""

    config = config or RetryConfig()

    def _before_sleep(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "Retrying failed storage operation",
            operation=operation,
            attempt=retry_state.attempt_number,
            max_attempts=config.max_attempts,
            delay=retry_state.next_action.sleep,
            exception=str(retry_state.outcome.exception()),
        )

    # Jittered backoff keeps concurrent stateless instances from retrying in lockstep
    wait_strategy = wait_random_exponential(
        multiplier=config.base_delay,
        max=config.max_delay,
    )

    return retry(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_strategy,
        retry=retry_if_exception_type(config.retryable_exceptions),
        before_sleep=_before_sleep,
        reraise=True,
    )


async def call_storage(
    fn: Callable[[], Awaitable[T]],
    operation: str,
    config: Optional[RetryConfig] = None,
) -> T:
    """
    Await a storage call under the retry policy.

    Raises:
        StorageUnavailableError: once the retry budget is exhausted
    """
    @create_async_retry_decorator(config or get_storage_retry_config(), operation)
    async def attempt() -> T:
        return await fn()

    try:
        return await attempt()
    except StorageError as e:
        logger.error("Storage operation failed after retries", operation=operation, error=str(e))
        raise map_storage_error(e) from e


def get_storage_retry_config() -> RetryConfig:
    """Get retry configuration for persistent store calls from settings."""
    settings = get_settings()
    return RetryConfig(
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay_seconds,
        max_delay=settings.retry_max_delay_seconds,
        retryable_exceptions=(StorageError,),
    )
