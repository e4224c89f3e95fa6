"""Trading playbook models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import Field

from macrobias.domain.models.base import ValueObject
from macrobias.domain.models.bias import Direction, RiskLabel
from macrobias.domain.models.tactical import ConfidenceLevel, UsdRegime

Environment = Literal["trend", "range"]


class TradingAssetPlan(ValueObject):
    """Directional plan for one asset with the reasons behind it."""

    asset: str
    bias: Direction
    confidence: ConfidenceLevel
    environment: Environment
    corr12m: float | None = None
    corr3m: float | None = None
    reasons: list[str] = Field(default_factory=list)


class TradingPlaybook(ValueObject):
    usd_direction: UsdRegime
    risk_label: RiskLabel | None = None
    assets: list[TradingAssetPlan] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def plan(self, asset: str) -> TradingAssetPlan | None:
        return next((p for p in self.assets if p.asset == asset), None)
