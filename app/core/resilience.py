"""Error policies shared by the service layer.

Read paths favour availability: a store failure is logged and the caller
gets a typed empty result. Write paths favour correctness: a store failure
is logged and surfaced as ``StoreError``. Page aggregation fans out several
reads concurrently and substitutes the empty result of every failed branch.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import StoreError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def fallback_on_error(default: Callable[[], Any]):
    """Decorator for read-path service methods.

    Args:
        default: Factory producing the empty result returned on store failure

    Example:
        @fallback_on_error(default=list)
        async def get_book_reading_sessions(self, user_id, book_id) -> list[...]:
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.warning(
                    "Read failed, returning empty result",
                    operation=func.__name__,
                    error=str(e),
                )
                return default()

        return wrapper

    return decorator


def translate_store_errors(action: str):
    """Decorator for write-path service methods.

    Domain errors propagate untouched; store failures are logged and raised
    as ``StoreError`` so callers handle a single typed failure.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Failed to {action}", operation=func.__name__, error=str(e))
                raise StoreError(f"Failed to {action}") from e

        return wrapper

    return decorator


async def gather_with_fallback(
    branches: dict[str, tuple[Callable[[], Awaitable[Any]], Callable[[], Any]]],
) -> dict[str, Any]:
    """Run independent branches concurrently, tolerating partial failure.

    Args:
        branches: Mapping of branch name to ``(coroutine factory, default factory)``

    Returns:
        Mapping of branch name to its result, or its default if it failed
    """
    names = list(branches)
    outcomes = await asyncio.gather(
        *(branches[name][0]() for name in names),
        return_exceptions=True,
    )

    results: dict[str, Any] = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Aggregation branch failed", branch=name, error=str(outcome))
            results[name] = branches[name][1]()
        else:
            results[name] = outcome
    return results
