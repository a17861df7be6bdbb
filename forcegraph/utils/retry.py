"""Async exponential backoff retry decorator."""

from __future__ import annotations

import asyncio
import functools
import random
from typing import Any, Callable, TypeVar

from forcegraph.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def async_retry(
    max_attempts: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 10.0,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    non_retryable_status_codes: tuple[int, ...] = (400, 401, 403, 404, 410, 422),
) -> Callable[[F], F]:
    """Decorator for async functions with exponential backoff + jitter.

    Client errors (4xx except 429) surface immediately. The attempt count may
    also be supplied per call through a ``max_attempts`` keyword argument,
    which is consumed by the wrapper.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempts = max(1, int(kwargs.pop("max_attempts", max_attempts)))
            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except retryable_exceptions as exc:
                    status = getattr(getattr(exc, "response", None), "status_code", None)
                    if status and status in non_retryable_status_codes:
                        logger.warning(
                            "retry_skipped_client_error",
                            func=func.__name__,
                            status=status,
                        )
                        raise

                    if attempt == attempts:
                        raise

                    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                    total_delay = delay + random.uniform(0, delay * 0.5)
                    logger.warning(
                        "retry_attempt",
                        func=func.__name__,
                        attempt=attempt,
                        delay=round(total_delay, 2),
                        error=str(exc),
                    )
                    await asyncio.sleep(total_delay)

            raise RuntimeError(f"Exhausted retries for {func.__name__}")

        return wrapper  # type: ignore[return-value]

    return decorator
