"""Portfolio USD exposure models."""

from __future__ import annotations

from pydantic import Field, field_validator

from macrobias.domain.models.base import ValueObject


class TradePosition(ValueObject):
    """An open or planned trade; positive size is long, negative is short."""

    pair: str = Field(..., description="Pair or ticker, e.g. EURUSD or EUR/USD")
    size: float = Field(..., description="Signed position size (+1 long, -1 short)")

    @field_validator("pair")
    @classmethod
    def _normalize_pair(cls, value: str) -> str:
        return value.replace("/", "").strip().upper()


class ExposureSide(ValueObject):
    label: str
    percentage: int = Field(default=0, ge=0, le=100)
    trades: list[str] = Field(default_factory=list)


class ExposureOverlap(ValueObject):
    """How a set of trades splits between USD-strong and USD-weak bets."""

    usd_strong: ExposureSide
    usd_weak: ExposureSide
    neutral: ExposureSide
    alert: str | None = Field(default=None, description="Set when one side concentrates the risk")
