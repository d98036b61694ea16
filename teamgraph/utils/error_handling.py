#!/usr/bin/env python3
"""
Error Handling Utility Module

Shared error types and structured error logging helpers.

This module provides:
1. TeamGraphError / FetchError - Exceptions raised outside the pure graph core
2. log_and_continue() - Log error and continue execution (for expected failures)
3. log_and_return_default() - Log error and return a default value
4. log_and_raise() - Log error with context and re-raise (for unexpected errors)
5. with_async_retry() - Decorator for coroutine retry with exponential backoff

The graph core itself never raises for bad data; these are used by the collector,
the view model and the CLI.
"""

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")


class TeamGraphError(Exception):
    """Base exception for teamgraph."""


class FetchError(TeamGraphError):
    """A dependency collection could not be retrieved from the backend."""

    def __init__(self, message: str, endpoint: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


def log_and_continue(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error with structured context and continue execution gracefully.

    Args:
        logger: Logger instance from get_logger(__name__)
        error: The caught exception
        context: Structured data about what failed
        error_type: Human-readable description of the operation
    """
    logger.warning(
        f"{error_type} failed: {error}",
        extra={
            "extra_fields": {
                "error_type": error_type,
                "exception_class": error.__class__.__name__,
                "context": context,
            }
        },
    )


def log_and_return_default(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    default_value: Any = None,
    error_type: str = "Operation",
) -> Any:
    """
    Log an error and return a default value.

    Returns:
        default_value

    Example:
        try:
            pis = await collector.fetch_available_pis()
        except FetchError as e:
            pis = log_and_return_default(logger, e, {"endpoint": "pis"}, [], "PI listing")
    """
    logger.warning(
        f"{error_type} failed, returning default value: {error}",
        extra={
            "extra_fields": {
                "error_type": error_type,
                "exception_class": error.__class__.__name__,
                "context": context,
                "default_value": str(default_value),
            }
        },
    )
    return default_value


def log_and_raise(
    logger: logging.Logger,
    error: Exception,
    context: dict[str, Any],
    error_type: str = "Operation",
) -> None:
    """
    Log an error with context and re-raise it.

    Raises:
        The original exception after logging
    """
    logger.error(
        f"{error_type} failed critically: {error}",
        exc_info=True,
        extra={
            "extra_fields": {
                "error_type": error_type,
                "exception_class": error.__class__.__name__,
                "context": context,
            }
        },
    )
    raise error


def with_async_retry(
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator to retry a coroutine function with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        backoff_seconds: Initial backoff time, doubles each retry
        exceptions: Tuple of exception types that trigger a retry

    Example:
        @with_async_retry(max_attempts=3, exceptions=(httpx.TransportError,))
        async def fetch(client, url):
            return await client.get(url)
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            logger = logging.getLogger(func.__module__)

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(
                            f"Function {func.__name__} failed after {max_attempts} attempts",
                            extra={
                                "extra_fields": {
                                    "function": func.__name__,
                                    "max_attempts": max_attempts,
                                    "final_exception": e.__class__.__name__,
                                }
                            },
                        )
                        raise

                    wait_time = backoff_seconds * (2 ** (attempt - 1))
                    logger.warning(
                        f"Function {func.__name__} failed (attempt {attempt}/{max_attempts}), "
                        f"retrying in {wait_time:.1f}s: {e}"
                    )
                    await asyncio.sleep(wait_time)

            raise RuntimeError("Retry logic failed unexpectedly")

        return wrapper

    return decorator
