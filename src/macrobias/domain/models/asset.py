"""Tradable asset metadata."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import Field

from macrobias.domain.models.base import ValueObject


class AssetClass(str, Enum):
    FX = "fx"
    INDEX = "index"
    METAL = "metal"
    CRYPTO = "crypto"
    ENERGY = "energy"


class RiskSensitivity(str, Enum):
    RISK_ON = "risk_on"
    RISK_OFF = "risk_off"
    NEUTRAL = "neutral"


class UsdExposure(str, Enum):
    LONG_USD = "long_usd"
    SHORT_USD = "short_usd"
    MIXED = "mixed"
    NONE = "none"


class AssetMeta(ValueObject):
    """Static description of a tradable asset used to translate macro factors."""

    symbol: str = Field(..., description="Pair or ticker, e.g. EURUSD, USDJPY, SPX")
    asset_class: AssetClass = Field(..., description="Weight table the asset uses")
    base: str | None = Field(default=None, description="Base currency for FX-like pairs")
    quote: str | None = Field(default=None, description="Quote currency for FX-like pairs")
    risk_sensitivity: RiskSensitivity = RiskSensitivity.NEUTRAL
    usd_exposure: UsdExposure = UsdExposure.NONE
    region: str = Field(default="global", description="Economic region, e.g. US, EU")
    ticker: str | None = Field(default=None, description="Market data ticker, e.g. EURUSD=X")

    def currencies(self) -> set[str]:
        """Currencies quoted in this asset, from explicit legs or the pair symbol."""
        legs = {c.upper() for c in (self.base, self.quote) if c}
        if legs:
            return legs
        parsed = split_pair(self.symbol)
        return set(parsed) if parsed else set()

    def usd_leg(self) -> Literal["base", "quote"] | None:
        """Which leg of the pair is USD, if any."""
        if self.base or self.quote:
            legs = ((self.base or "").upper(), (self.quote or "").upper())
        else:
            parsed = split_pair(self.symbol)
            if parsed is None:
                return None
            legs = parsed
        if legs[0] == "USD":
            return "base"
        if legs[1] == "USD":
            return "quote"
        return None


def split_pair(symbol: str) -> tuple[str, str] | None:
    """Split a six-letter pair symbol (``EURUSD``, ``EUR/USD``) into its legs."""
    cleaned = symbol.replace("/", "").replace("-", "").strip().upper()
    if len(cleaned) != 6 or not cleaned.isalpha():
        return None
    return cleaned[:3], cleaned[3:]
