"""yfinance daily close source for tradable assets."""

from __future__ import annotations

import asyncio
import math
from collections.abc import Mapping
from datetime import date, timedelta
from typing import Any

import structlog
import yfinance as yf  # type: ignore[import-untyped]
from yfinance.exceptions import YFRateLimitError  # type: ignore[import-untyped]

from macrobias.domain.models.observation import Frequency, Observation, ObservationSeries
from macrobias.domain.ports.data_providers import ObservationSource
from macrobias.infrastructure.data_providers.retry import is_retryable, with_retries

logger = structlog.get_logger(__name__)


def is_transient_yfinance_error(error: BaseException) -> bool:
    """Network failures and Yahoo rate limiting; missing or bad tickers fail fast."""
    return is_retryable(error) or isinstance(error, YFRateLimitError)


class YFinanceObservationSource(ObservationSource):
    """Daily closing prices from Yahoo Finance via yfinance.

    Args:
        tickers: Engine symbol -> Yahoo ticker (EURUSD -> EURUSD=X); unknown
            symbols are requested as-is
    """

    def __init__(
        self,
        tickers: Mapping[str, str] | None = None,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        backoff_seconds: float = 0.5,
    ) -> None:
        self._tickers = {k.upper(): v for k, v in (tickers or {}).items()}
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    def get_provider_name(self) -> str:
        return "yfinance"

    def ticker_for(self, symbol: str) -> str:
        return self._tickers.get(symbol.upper(), symbol)

    def _download(self, ticker: str, start: date, end: date) -> Any:
        # yfinance treats ``end`` as exclusive
        return yf.Ticker(ticker).history(
            start=start.isoformat(),
            end=(end + timedelta(days=1)).isoformat(),
            interval="1d",
            auto_adjust=True,
            raise_errors=True,
        )

    async def get_series(self, symbol: str, start: date, end: date) -> ObservationSeries:
        ticker = self.ticker_for(symbol)
        history = await with_retries(
            lambda: asyncio.to_thread(self._download, ticker, start, end),
            source=f"yfinance:{ticker}",
            retries=self._max_retries,
            backoff_seconds=self._backoff_seconds,
            timeout_seconds=self._timeout_seconds,
            retryable=is_transient_yfinance_error,
        )

        observations: dict[date, Observation] = {}
        if history is not None and not history.empty and "Close" in history:
            for timestamp, close in history["Close"].items():
                value = float(close)
                if math.isfinite(value):
                    day = timestamp.date()
                    observations[day] = Observation(date=day, value=value)

        logger.debug("Fetched yfinance series", symbol=symbol, ticker=ticker, points=len(observations))
        return ObservationSeries(
            symbol=symbol,
            frequency=Frequency.DAILY,
            observations=[observations[d] for d in sorted(observations)],
        )
