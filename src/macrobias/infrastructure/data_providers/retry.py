"""Timeout-and-retry boundary for collaborator calls."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
import structlog

from macrobias.domain.exceptions import DataSourceError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS = frozenset({408, 425, 429, 500, 502, 503, 504})


def is_retryable(error: BaseException) -> bool:
    """Transport failures, timeouts and 429/5xx responses are worth another try."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS
    return isinstance(error, (httpx.TransportError, asyncio.TimeoutError, OSError))


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    source: str,
    retries: int = 2,
    backoff_seconds: float = 0.5,
    timeout_seconds: float | None = None,
    retryable: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` with up to ``retries`` retries and exponential backoff.

    Waits ``backoff_seconds * 2**attempt`` between attempts (0.5s, 1s with the
    defaults). Non-retryable errors and the last failure are raised as
    DataSourceError.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        source: Name used in logs and errors
        retries: Extra attempts after the first one
        backoff_seconds: Initial delay
        timeout_seconds: Optional per-attempt timeout
        retryable: Predicate deciding whether an error is retried
        sleep: Injected for tests
    """
    attempt = 0
    while True:
        try:
            if timeout_seconds is not None:
                return await asyncio.wait_for(operation(), timeout=timeout_seconds)
            return await operation()
        except DataSourceError:
            raise
        except Exception as e:
            if attempt >= retries or not retryable(e):
                logger.warning(
                    "Data source call failed",
                    source=source,
                    attempts=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise DataSourceError(source, f"{type(e).__name__}: {e}") from e
            delay = backoff_seconds * (2**attempt)
            logger.info(
                "Retrying data source call",
                source=source,
                attempt=attempt + 1,
                delay_seconds=delay,
                error=str(e),
            )
            attempt += 1
            await sleep(delay)
