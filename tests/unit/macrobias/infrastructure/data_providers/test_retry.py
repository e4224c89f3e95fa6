"""Unit tests for the retry boundary."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from macrobias.domain.exceptions import DataSourceError
from macrobias.infrastructure.data_providers.retry import is_retryable, with_retries


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.com/x")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("boom", request=request, response=response)


class Recorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.mark.unit
class TestWithRetries:
    async def test_returns_first_success(self) -> None:
        calls = 0

        async def op() -> str:
            nonlocal calls
            calls += 1
            return "ok"

        assert await with_retries(op, source="test") == "ok"
        assert calls == 1

    async def test_retries_with_exponential_backoff(self) -> None:
        sleep = Recorder()
        attempts = 0

        async def op() -> int:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                raise httpx.ConnectError("down")
            return attempts

        result = await with_retries(op, source="test", sleep=sleep)

        assert result == 3
        assert sleep.delays == [0.5, 1.0]

    async def test_gives_up_after_retries(self) -> None:
        sleep = Recorder()
        attempts = 0

        async def op() -> None:
            nonlocal attempts
            attempts += 1
            raise _status_error(503)

        with pytest.raises(DataSourceError) as exc_info:
            await with_retries(op, source="fred:DTWEXBGS", retries=2, sleep=sleep)

        assert attempts == 3
        assert exc_info.value.source == "fred:DTWEXBGS"
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)

    async def test_non_retryable_error_fails_fast(self) -> None:
        sleep = Recorder()
        attempts = 0

        async def op() -> None:
            nonlocal attempts
            attempts += 1
            raise _status_error(404)

        with pytest.raises(DataSourceError):
            await with_retries(op, source="test", sleep=sleep)

        assert attempts == 1
        assert sleep.delays == []

    async def test_timeout_is_retried(self) -> None:
        sleep = Recorder()

        async def op() -> None:
            await asyncio.sleep(1)

        with pytest.raises(DataSourceError, match="TimeoutError"):
            await with_retries(op, source="test", retries=1, timeout_seconds=0.01, sleep=sleep)

        assert sleep.delays == [0.5]


@pytest.mark.unit
class TestIsRetryable:
    def test_classification(self) -> None:
        assert is_retryable(_status_error(429))
        assert is_retryable(_status_error(500))
        assert not is_retryable(_status_error(400))
        assert is_retryable(httpx.ReadTimeout("slow"))
        assert not is_retryable(ValueError("bad payload"))
