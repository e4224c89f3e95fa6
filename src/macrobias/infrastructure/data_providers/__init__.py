"""Data provider implementations."""

from macrobias.infrastructure.data_providers.composite import (
    CachedObservationSource,
    RoutingObservationSource,
)
from macrobias.infrastructure.data_providers.fred import FredObservationSource
from macrobias.infrastructure.data_providers.snapshots import (
    JsonCalendarSource,
    JsonMacroFactorSource,
)
from macrobias.infrastructure.data_providers.yfinance_source import YFinanceObservationSource

__all__ = [
    "FredObservationSource",
    "YFinanceObservationSource",
    "RoutingObservationSource",
    "CachedObservationSource",
    "JsonMacroFactorSource",
    "JsonCalendarSource",
]
