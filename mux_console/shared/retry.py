"""
Retry utility with exponential backoff.

This module provides a decorator for retrying async functions with exponential
backoff on transient failures. Used for idempotent Mux reads that fail at the
transport level (connection resets, read timeouts).
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    exponential_base: float = 2.0,
    max_delay: float = 60.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for retrying async functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        initial_delay: Initial delay in seconds before first retry (default: 1.0)
        exponential_base: Base for exponential backoff calculation (default: 2.0)
        max_delay: Maximum delay in seconds between retries (default: 60.0)
        exceptions: Tuple of exception types to catch and retry (default: all exceptions)

    Returns:
        Decorated async function with retry logic

    Example:
        >>> @retry_with_backoff(max_retries=2, exceptions=(httpx.TransportError,))
        ... async def fetch_asset(asset_id: str) -> dict:
        ...     response = await http.get(f"/video/v1/assets/{asset_id}")
        ...     return response.json()
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        logger.error(f"{func.__name__} failed after {max_retries} retries: {e}")
                        raise

                    delay = min(initial_delay * (exponential_base**attempt), max_delay)

                    logger.warning(
                        f"{func.__name__} attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )

                    await asyncio.sleep(delay)

            raise RuntimeError(f"{func.__name__} exhausted retries without exception")

        return wrapper

    return decorator


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    initial_delay: float = 0.5,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """Run ``func`` under :func:`retry_with_backoff` with a retry count chosen at call time."""
    decorated = retry_with_backoff(
        max_retries=max_retries, initial_delay=initial_delay, exceptions=exceptions
    )(func)
    return await decorated()
