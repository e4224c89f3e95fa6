"""FRED (Federal Reserve Economic Data) observation source.

Serves the USD benchmark (trade-weighted dollar index, series DTWEXBGS) and
any other FRED series requested by id.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import httpx
import structlog

from macrobias.domain.models.observation import Frequency, Observation, ObservationSeries
from macrobias.domain.ports.data_providers import ObservationSource
from macrobias.infrastructure.data_providers.retry import with_retries

logger = structlog.get_logger(__name__)

DEFAULT_SERIES_IDS: dict[str, str] = {"DXY": "DTWEXBGS", "USD": "DTWEXBGS"}

DEFAULT_FREQUENCIES: dict[str, Frequency] = {"DTWEXBGS": Frequency.DAILY}


class FredObservationSource(ObservationSource):
    """FRED implementation of ObservationSource."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.stlouisfed.org/fred",
        rate_limit_delay: float = 0.1,
        timeout_seconds: float = 15.0,
        max_retries: int = 2,
        backoff_seconds: float = 0.5,
        series_ids: Mapping[str, str] | None = None,
        frequencies: Mapping[str, Frequency] | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._rate_limit_delay = rate_limit_delay
        self._timeout_seconds = timeout_seconds
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds
        self._series_ids = dict(series_ids or DEFAULT_SERIES_IDS)
        self._frequencies = dict(frequencies or DEFAULT_FREQUENCIES)
        self._client: httpx.AsyncClient | None = None

    def get_provider_name(self) -> str:
        return "fred"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout_seconds,
                follow_redirects=True,
            )
        return self._client

    async def is_available(self) -> bool:
        if not self._api_key:
            logger.debug("FRED API key not set", has_api_key=False)
            return False
        try:
            client = await self._get_client()
            resp = await client.get(
                "/series",
                params={"series_id": "DTWEXBGS", "api_key": self._api_key, "file_type": "json"},
                timeout=5.0,
            )
        except httpx.HTTPError as e:
            logger.warning(
                "FRED availability check failed with exception",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
        if resp.status_code != 200:
            logger.warning(
                "FRED availability check failed",
                status_code=resp.status_code,
                response_text=resp.text[:200] if resp.text else None,
            )
            return False
        return True

    def series_id_for(self, symbol: str) -> str:
        return self._series_ids.get(symbol.upper(), symbol)

    async def _fetch_observations(self, params: dict[str, Any]) -> dict[str, Any]:
        client = await self._get_client()
        await asyncio.sleep(self._rate_limit_delay)
        resp = await client.get("/series/observations", params=params)
        resp.raise_for_status()
        payload: dict[str, Any] = resp.json()
        return payload

    async def get_series(self, symbol: str, start: date, end: date) -> ObservationSeries:
        if not self._api_key:
            raise RuntimeError("FRED API key not configured (set MACROBIAS_FRED_API_KEY)")

        series_id = self.series_id_for(symbol)
        params: dict[str, Any] = {
            "series_id": series_id,
            "api_key": self._api_key,
            "file_type": "json",
            "observation_start": start.isoformat(),
            "observation_end": end.isoformat(),
        }
        payload = await with_retries(
            lambda: self._fetch_observations(params),
            source=f"fred:{series_id}",
            retries=self._max_retries,
            backoff_seconds=self._backoff_seconds,
        )

        observations: dict[date, Observation] = {}
        for obs in payload.get("observations", []):
            date_str = obs.get("date")
            value_str = obs.get("value")
            # FRED marks missing values with "."
            if not date_str or not value_str or value_str == ".":
                continue
            try:
                day = datetime.strptime(date_str, "%Y-%m-%d").date()
                value = float(value_str)
            except ValueError:
                continue
            if not math.isfinite(value):
                continue
            observations[day] = Observation(date=day, value=value)

        logger.debug("Fetched FRED series", series_id=series_id, points=len(observations))
        return ObservationSeries(
            symbol=symbol,
            frequency=self._frequencies.get(series_id, Frequency.DAILY),
            observations=[observations[d] for d in sorted(observations)],
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
