"""Quality check models."""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import Field

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.base import ValueObject
from macrobias.domain.models.bias import MacroBias
from macrobias.domain.models.calendar import CalendarEvent
from macrobias.domain.models.correlation import CorrelationResult
from macrobias.domain.models.observation import Frequency
from macrobias.domain.models.tactical import NarrativeOutput, TacticalRow, UsdRegime


class QualityLevel(str, Enum):
    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


class InvariantResult(ValueObject):
    name: str
    level: QualityLevel
    message: str


class SeriesFreshness(ValueObject):
    """Last update of one input series."""

    key: str
    frequency: Frequency | None = Field(default=None, description="None resolves by key")
    last_date: dt.date | None = None


class IndicatorReading(ValueObject):
    """A derived indicator value checked against plausibility bounds."""

    key: str
    value: float | None
    previous: float | None = Field(default=None, description="Prior release, when known")
    unit: str = Field(default="yoy_pct", description="yoy_pct, level or correlation")


class AssetSnapshot(ValueObject):
    """Computed outputs for one asset inside a quality snapshot."""

    asset: AssetMeta
    bias: MacroBias | None = None
    narrative: NarrativeOutput | None = None
    row: TacticalRow | None = None
    correlation_12m: CorrelationResult | None = None


class QualitySnapshot(ValueObject):
    """Everything the checker inspects at one point in time."""

    now: dt.datetime
    usd_regime: UsdRegime = UsdRegime.NEUTRAL
    assets: list[AssetSnapshot] = Field(default_factory=list)
    correlations: list[CorrelationResult] = Field(default_factory=list)
    series: list[SeriesFreshness] = Field(default_factory=list)
    readings: list[IndicatorReading] = Field(default_factory=list)
    upcoming_events: list[CalendarEvent] = Field(default_factory=list)


class QualityReport(ValueObject):
    results: list[InvariantResult] = Field(default_factory=list)
    passed: int = 0
    warned: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.failed == 0
