"""Observation source composition: routing by symbol and TTL caching."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

import structlog

from macrobias.domain.models.observation import ObservationSeries
from macrobias.domain.ports.data_providers import ObservationSource
from macrobias.infrastructure.cache import CacheManager

logger = structlog.get_logger(__name__)


class RoutingObservationSource(ObservationSource):
    """Send benchmark symbols to one source and everything else to another."""

    def __init__(
        self,
        benchmark_source: ObservationSource,
        asset_source: ObservationSource,
        benchmark_symbols: Iterable[str],
    ) -> None:
        self._benchmark_source = benchmark_source
        self._asset_source = asset_source
        self._benchmark_symbols = {s.upper() for s in benchmark_symbols}

    def get_provider_name(self) -> str:
        return (
            f"{self._benchmark_source.get_provider_name()}+"
            f"{self._asset_source.get_provider_name()}"
        )

    def source_for(self, symbol: str) -> ObservationSource:
        if symbol.upper() in self._benchmark_symbols:
            return self._benchmark_source
        return self._asset_source

    async def get_series(self, symbol: str, start: date, end: date) -> ObservationSeries:
        return await self.source_for(symbol).get_series(symbol, start, end)


class CachedObservationSource(ObservationSource):
    """Wrap a source with the injected TTL cache."""

    def __init__(
        self,
        source: ObservationSource,
        cache: CacheManager,
        ttl: timedelta | None = None,
    ) -> None:
        self._source = source
        self._cache = cache
        self._ttl = ttl

    def get_provider_name(self) -> str:
        return self._source.get_provider_name()

    async def get_series(self, symbol: str, start: date, end: date) -> ObservationSeries:
        key = f"series:{self.get_provider_name()}:{symbol.upper()}:{start}:{end}"
        cached = await self._cache.get(key)
        if isinstance(cached, ObservationSeries):
            logger.debug("Series cache hit", symbol=symbol)
            return cached
        series = await self._source.get_series(symbol, start, end)
        await self._cache.set(key, series, ttl=self._ttl)
        return series
