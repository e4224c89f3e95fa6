"""Macro bias domain models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from macrobias.domain.models.base import ValueObject


class FactorKey(str, Enum):
    """Macro factors combined into a bias score, in display order."""

    RISK_REGIME = "risk_regime"
    USD_BIAS = "usd_bias"
    INFLATION_MOMENTUM = "inflation_momentum"
    GROWTH_MOMENTUM = "growth_momentum"
    EXTERNAL_BALANCE = "external_balance"
    RATES_CONTEXT = "rates_context"


class RiskLabel(str, Enum):
    RISK_ON = "RISK_ON"
    RISK_OFF = "RISK_OFF"
    NEUTRAL = "NEUTRAL"


class UsdLabel(str, Enum):
    STRONG = "STRONG"
    WEAK = "WEAK"
    NEUTRAL = "NEUTRAL"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"
    NEUTRAL = "neutral"


class DriverSign(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


_LABEL_THRESHOLD = 0.2


class BiasInputs(ValueObject):
    """Snapshot of normalized macro factor sub-scores for one asset.

    Every factor is optional; a missing factor lowers coverage instead of
    failing the computation.
    """

    risk_regime: float | None = Field(default=None, ge=-1.0, le=1.0)
    usd_bias: float | None = Field(default=None, ge=-1.0, le=1.0)
    inflation_momentum: float | None = Field(default=None, ge=-1.0, le=1.0)
    growth_momentum: float | None = Field(default=None, ge=-1.0, le=1.0)
    external_balance: float | None = Field(default=None, ge=-1.0, le=1.0)
    rates_context: float | None = Field(default=None, ge=-1.0, le=1.0)
    risk_label: RiskLabel | None = Field(default=None, description="Explicit risk regime label")
    usd_label: UsdLabel | None = Field(default=None, description="Explicit USD bias label")

    def factor(self, key: FactorKey) -> float | None:
        value: float | None = getattr(self, key.value)
        return value

    def available(self) -> dict[FactorKey, float]:
        return {k: v for k in FactorKey if (v := self.factor(k)) is not None}

    def is_empty(self) -> bool:
        return not self.available()

    def without(self, *keys: FactorKey) -> BiasInputs:
        """Copy of the inputs with the given factors removed."""
        return self.model_copy(update={k.value: None for k in keys})

    def resolved_risk_label(self) -> RiskLabel | None:
        if self.risk_label is not None:
            return self.risk_label
        if self.risk_regime is None:
            return None
        if self.risk_regime > _LABEL_THRESHOLD:
            return RiskLabel.RISK_ON
        if self.risk_regime < -_LABEL_THRESHOLD:
            return RiskLabel.RISK_OFF
        return RiskLabel.NEUTRAL

    def resolved_usd_label(self) -> UsdLabel | None:
        if self.usd_label is not None:
            return self.usd_label
        if self.usd_bias is None:
            return None
        if self.usd_bias > _LABEL_THRESHOLD:
            return UsdLabel.STRONG
        if self.usd_bias < -_LABEL_THRESHOLD:
            return UsdLabel.WEAK
        return UsdLabel.NEUTRAL


class BiasDriver(ValueObject):
    """One factor's contribution to a bias score."""

    key: FactorKey
    name: str
    weight: float = Field(..., ge=0.0, le=1.0, description="Effective weight after renormalization")
    sign: DriverSign
    value: float = Field(..., ge=-1.0, le=1.0, description="Translated factor value")
    contribution: float = Field(..., description="Score points contributed")
    description: str


class BiasMeta(ValueObject):
    coverage: float = Field(..., ge=0.0, le=1.0)
    coherence: float = Field(..., ge=0.0, le=1.0)
    drivers_used: int = Field(..., ge=0)
    drivers_total: int = Field(..., ge=0)


class MacroBias(ValueObject):
    """Directional macro bias for one asset."""

    asset: str = Field(..., description="Asset symbol")
    score: float = Field(..., ge=-100.0, le=100.0)
    direction: Direction
    confidence: float = Field(..., ge=0.0, le=1.0)
    drivers: list[BiasDriver] = Field(default_factory=list)
    meta: BiasMeta
    weights_version: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def driver(self, key: FactorKey) -> BiasDriver | None:
        return next((d for d in self.drivers if d.key == key), None)


class ExpandedNarrative(ValueObject):
    """Monetary stance and cycle phase read from the macro inputs."""

    monetary_stance: str
    monetary_reason: str
    cycle_phase: str
    cycle_reason: str
