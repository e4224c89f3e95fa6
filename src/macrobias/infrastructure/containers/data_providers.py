"""Data provider container configuration."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from dependency_injector import providers

from macrobias.infrastructure.cache import CacheManager, InMemoryCacheBackend
from macrobias.infrastructure.config import Settings
from macrobias.infrastructure.data_providers import (
    CachedObservationSource,
    FredObservationSource,
    JsonCalendarSource,
    JsonMacroFactorSource,
    RoutingObservationSource,
    YFinanceObservationSource,
)
from macrobias.infrastructure.weights import AssetUniverse, bundled_data_path


def _tickers(universe: AssetUniverse) -> dict[str, str]:
    return {a.symbol: a.ticker for a in universe.assets if a.ticker}


def _cache_ttl(settings: Settings) -> timedelta:
    return timedelta(seconds=settings.cache_ttl_seconds)


def _fred_api_key(override: str | None, settings: Settings) -> str | None:
    # Library integrators pass their own key; CLI users rely on MACROBIAS_FRED_API_KEY.
    return override if override is not None else settings.fred_api_key


def _benchmark_series(settings: Settings) -> dict[str, str]:
    return {settings.benchmark_symbol.upper(): settings.benchmark_series_id}


def _factors_path(settings: Settings) -> Path:
    return settings.factors_path or bundled_data_path("factors.json")


def configure_data_providers(
    settings: providers.Provider,
    universe: providers.Provider,
    fred_api_key: providers.Provider,
) -> dict[str, providers.Provider]:
    """Configure data provider providers.

    Args:
        settings: Provider of runtime Settings
        universe: Provider of the validated asset universe (used for ticker mapping)
        fred_api_key: Provider of an optional FRED API key override

    Returns:
        Dictionary of data provider providers
    """
    cache_manager = providers.Singleton(
        CacheManager,
        backend=providers.Singleton(InMemoryCacheBackend),
        default_ttl=providers.Callable(_cache_ttl, settings),
    )
    benchmark_source = providers.Singleton(
        FredObservationSource,
        api_key=providers.Callable(_fred_api_key, fred_api_key, settings),
        base_url=settings.provided.fred_base_url,
        rate_limit_delay=settings.provided.fred_rate_limit_delay,
        timeout_seconds=settings.provided.request_timeout_seconds,
        max_retries=settings.provided.max_retries,
        backoff_seconds=settings.provided.retry_backoff_seconds,
        series_ids=providers.Callable(_benchmark_series, settings),
    )
    asset_source = providers.Singleton(
        YFinanceObservationSource,
        tickers=providers.Callable(_tickers, universe),
        timeout_seconds=settings.provided.request_timeout_seconds,
        max_retries=settings.provided.max_retries,
        backoff_seconds=settings.provided.retry_backoff_seconds,
    )
    routing_source = providers.Singleton(
        RoutingObservationSource,
        benchmark_source=benchmark_source,
        asset_source=asset_source,
        benchmark_symbols=providers.List(settings.provided.benchmark_symbol),
    )

    return {
        "cache_manager": cache_manager,
        "benchmark_source": benchmark_source,
        "asset_source": asset_source,
        "observation_source": providers.Singleton(
            CachedObservationSource,
            source=routing_source,
            cache=cache_manager,
            ttl=providers.Callable(_cache_ttl, settings),
        ),
        "factor_source": providers.Singleton(
            JsonMacroFactorSource,
            path=providers.Callable(_factors_path, settings),
        ),
        "calendar_source": providers.Singleton(
            JsonCalendarSource, path=settings.provided.calendar_path
        ),
    }
