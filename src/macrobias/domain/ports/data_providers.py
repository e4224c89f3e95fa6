"""Data provider interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import BiasInputs
from macrobias.domain.models.calendar import CalendarEvent
from macrobias.domain.models.observation import ObservationSeries
from macrobias.domain.models.quality import IndicatorReading


class DataProvider(ABC):
    """Base interface shared by every external data source."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short identifier used in logs (e.g. ``fred``)."""

    async def is_available(self) -> bool:
        return True


class ObservationSource(DataProvider):
    """Source of ordered, date-deduplicated price or macro observations."""

    @abstractmethod
    async def get_series(self, symbol: str, start: date, end: date) -> ObservationSeries:
        """Fetch observations for ``symbol`` between ``start`` and ``end`` inclusive.

        Args:
            symbol: Engine symbol (e.g. EURUSD, DXY)
            start: First calendar date to include
            end: Last calendar date to include

        Returns:
            Series sorted ascending by date; empty when the source has no data
        """


class MacroFactorSource(DataProvider):
    """Source of per-asset macro factor snapshots."""

    @abstractmethod
    async def get_inputs(self, asset: AssetMeta) -> BiasInputs:
        """Return the latest factor snapshot; unknown assets get empty inputs."""

    async def get_indicator_readings(self) -> list[IndicatorReading]:
        """Latest headline indicator releases (e.g. cpi_yoy, gdp_yoy); none by default."""
        return []


class CalendarSource(DataProvider):
    """Source of scheduled macro events."""

    @abstractmethod
    async def get_upcoming_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events scheduled in ``[start, end]``."""
