"""Tactical signal and narrative models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator

from macrobias.domain.models.base import ValueObject


class TacticalAction(str, Enum):
    BUY = "Buscar compras"
    SELL = "Buscar ventas"
    RANGE = "Rango/táctico"


class ConfidenceLevel(str, Enum):
    HIGH = "Alta"
    MEDIUM = "Media"
    LOW = "Baja"


class UsdRegime(str, Enum):
    STRONG = "Fuerte"
    WEAK = "Débil"
    NEUTRAL = "Neutral"


class TrendLabel(str, Enum):
    BULLISH = "Alcista"
    BEARISH = "Bajista"
    NEUTRAL = "Neutral"


class TacticalRow(ValueObject):
    """Actionable per-pair row combining bias, correlation and USD regime."""

    pair: str
    trend: TrendLabel
    action: TacticalAction
    confidence: ConfidenceLevel
    corr12m: float | None = None
    corr3m: float | None = None
    motivo: str = Field(..., description="Human-readable reason for the action")
    usd_driven: bool = Field(default=False, description="Action derived from USD regime logic")


class NarrativeOutput(ValueObject):
    """Headline, 3-5 bullets and a confidence note for one asset."""

    headline: str
    bullets: list[str] = Field(..., min_length=3, max_length=5)
    confidence_note: str

    @field_validator("bullets")
    @classmethod
    def _non_empty_bullets(cls, bullets: list[str]) -> list[str]:
        if any(not b.strip() for b in bullets):
            raise ValueError("Narrative bullets must be non-empty")
        return bullets

    def text(self) -> str:
        return "\n".join([self.headline, *self.bullets, self.confidence_note])
