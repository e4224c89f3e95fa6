"""Correlation domain models."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import Field

from macrobias.domain.models.base import ValueObject


class CorrelationWindow(str, Enum):
    """Rolling correlation windows with their nominal size and minimum sample count."""

    M3 = "3m"
    M6 = "6m"
    M12 = "12m"
    M24 = "24m"

    @property
    def size(self) -> int:
        return _WINDOW_SPECS[self][0]

    @property
    def min_obs(self) -> int:
        return _WINDOW_SPECS[self][1]

    @classmethod
    def parse(cls, value: str) -> CorrelationWindow:
        """Parse a window label, accepting day/year aliases such as ``90d`` or ``1y``."""
        key = value.strip().lower()
        key = _WINDOW_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown correlation window: {value}") from None


_WINDOW_SPECS: dict[CorrelationWindow, tuple[int, int]] = {
    CorrelationWindow.M3: (63, 40),
    CorrelationWindow.M6: (126, 80),
    CorrelationWindow.M12: (252, 150),
    CorrelationWindow.M24: (504, 300),
}

_WINDOW_ALIASES = {"90d": "3m", "180d": "6m", "1y": "12m", "2y": "24m"}


class CorrelationOk(ValueObject):
    """A correlation computed from enough fresh aligned samples."""

    kind: Literal["ok"] = "ok"
    value: float = Field(..., ge=-1.0, le=1.0, description="Pearson coefficient")
    n_obs: int = Field(..., ge=0, description="Return pairs used")
    last_date: dt.date = Field(..., description="Most recent aligned date")


class InsufficientData(ValueObject):
    """Not enough aligned observations to produce a coefficient."""

    kind: Literal["insufficient_data"] = "insufficient_data"
    n_obs: int = Field(..., ge=0)
    reason: Literal["no_data", "no_overlap", "too_few_points", "zero_variance"] = "too_few_points"


class Stale(ValueObject):
    """The most recent aligned sample is too old, or dated after ``asof``."""

    kind: Literal["stale"] = "stale"
    last_date: dt.date
    reason: Literal["stale", "future"] = "stale"


CorrelationOutcome = CorrelationOk | InsufficientData | Stale


class CorrelationResult(ValueObject):
    """Persisted correlation row; ``value`` is null when it could not be computed."""

    symbol: str = Field(..., description="Asset symbol")
    benchmark: str = Field(..., description="Benchmark symbol (e.g. DXY)")
    window: CorrelationWindow = Field(..., description="Rolling window")
    value: float | None = Field(default=None, ge=-1.0, le=1.0)
    n_obs: int = Field(default=0, ge=0, description="Observations behind the value")
    asof: dt.date = Field(..., description="Computation date")
    reason: str | None = Field(default=None, description="Why value is null, if it is")

    @property
    def key(self) -> tuple[str, str, str, dt.date]:
        return (self.symbol, self.benchmark, self.window.value, self.asof)


class ShiftRegime(str, Enum):
    BREAK = "Break"
    REINFORCING = "Reinforcing"
    STABLE = "Stable"
    WEAK = "Weak"


class CorrelationTrend(str, Enum):
    STRENGTHENING = "Strengthening"
    WEAKENING = "Weakening"
    STABLE = "Stable"
    INCONCLUSIVE = "Inconclusive"


class CorrelationSummary(ValueObject):
    """Short vs long window comparison for one symbol/benchmark pair."""

    symbol: str
    benchmark: str
    corr_12m: float | None = None
    corr_3m: float | None = None
    delta: float | None = None
    regime: ShiftRegime = ShiftRegime.WEAK
    trend: CorrelationTrend = CorrelationTrend.INCONCLUSIVE
    relevance: float = Field(default=0.0, ge=0.0, le=1.0, description="Macro relevance 0..1")

    @property
    def correlation_now(self) -> float | None:
        """Most reactive available reading: 3m, falling back to 12m."""
        return self.corr_3m if self.corr_3m is not None else self.corr_12m
