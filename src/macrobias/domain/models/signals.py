"""Historical signal and opportunity models."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import uuid4

from pydantic import Field

from macrobias.domain.models.base import ValueObject
from macrobias.domain.models.tactical import ConfidenceLevel, TacticalAction


class PastSignal(ValueObject):
    """A tactical action issued in the past, with its realized outcome when known."""

    signal_id: str = Field(default_factory=lambda: uuid4().hex, description="Stable identifier")
    symbol: str
    action: TacticalAction
    issued_at: datetime
    realized_return: float | None = Field(
        default=None, description="Pair return over the evaluation horizon, as a fraction"
    )

    def succeeded(self) -> bool | None:
        if self.realized_return is None or self.action == TacticalAction.RANGE:
            return None
        if self.action == TacticalAction.BUY:
            return self.realized_return > 0
        return self.realized_return < 0


class HistoricalConfidence(ValueObject):
    kind: Literal["ok"] = "ok"
    symbol: str
    confidence_pct: int = Field(..., ge=0, le=100)
    total_signals: int
    successful_signals: int


class InsufficientHistory(ValueObject):
    """Fewer evaluable past signals than required."""

    kind: Literal["no_data"] = "no_data"
    symbol: str
    total_signals: int
    required: int


class OpportunityPair(ValueObject):
    pair: str
    action: TacticalAction
    confidence: ConfidenceLevel
    score: int
    reasoning: str


class ReliabilityStatus(ValueObject):
    """How trustworthy the correlation picture is right now."""

    status: Literal["normal", "caution", "chaos"]
    score: int
    pct_weakening: float
    pct_break: float
    events_within_3h: int
    reasons: list[str] = Field(default_factory=list)
