"""Bounded-concurrency task queue for batch jobs over the asset universe.

Upstream providers are rate limited, so jobs default to one task at a time.
A failing task is reported through its AssetJobResult; it never cancels the
remaining tasks.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

from macrobias.domain.models.job_results import AssetJobResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BoundedTaskQueue:
    """Run per-asset coroutines with at most ``concurrency`` in flight."""

    def __init__(self, concurrency: int = 1) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._concurrency = concurrency
        self._in_flight = 0
        self.max_in_flight = 0

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run(
        self,
        symbols: Sequence[str],
        task: Callable[[str], Awaitable[T]],
    ) -> list[AssetJobResult[T]]:
        """Run ``task`` for every symbol; results keep the input order.

        Exceptions raised by a task are logged and turned into a failed
        AssetJobResult so the rest of the batch still runs.
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _guarded(symbol: str) -> AssetJobResult[T]:
            async with semaphore:
                self._in_flight += 1
                self.max_in_flight = max(self.max_in_flight, self._in_flight)
                try:
                    data = await task(symbol)
                except Exception as e:
                    logger.error(
                        "Job task failed, skipping asset",
                        symbol=symbol,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    return AssetJobResult[T](symbol=symbol, success=False, error=str(e))
                finally:
                    self._in_flight -= 1
                return AssetJobResult[T](symbol=symbol, success=True, data=data)

        return list(await asyncio.gather(*(_guarded(s) for s in symbols)))
