"""Price and macro observation models."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from macrobias.domain.models.base import ValueObject


class Frequency(str, Enum):
    """Publication frequency of a series."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class Observation(ValueObject):
    """Value object representing one sample of a price or macro series."""

    date: dt.date = Field(..., description="Observation calendar date")
    value: float = Field(..., description="Observation value")


class ObservationSeries(ValueObject):
    """Ordered observations for one symbol, as returned by a source."""

    symbol: str = Field(..., description="Symbol or provider series id")
    frequency: Frequency = Field(default=Frequency.DAILY, description="Series frequency")
    observations: list[Observation] = Field(default_factory=list)

    @property
    def last_date(self) -> dt.date | None:
        if not self.observations:
            return None
        return max(o.date for o in self.observations)


class AlignedPair(ValueObject):
    """One aligned sample of asset and benchmark values."""

    date: dt.date
    asset_value: float
    benchmark_value: float
