"""In-memory repositories."""

from __future__ import annotations

from datetime import date, datetime

from macrobias.domain.models.calendar import ensure_utc
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.signals import PastSignal
from macrobias.domain.models.tactical import TacticalAction
from macrobias.domain.ports.repositories import CorrelationRepository, SignalRepository


class InMemoryCorrelationRepository(CorrelationRepository):
    def __init__(self) -> None:
        self._rows: dict[tuple[str, str, str, date], CorrelationResult] = {}

    async def upsert(self, result: CorrelationResult) -> None:
        self._rows[result.key] = result

    async def get(
        self, symbol: str, benchmark: str, window: CorrelationWindow, asof: date
    ) -> CorrelationResult | None:
        return self._rows.get((symbol, benchmark, window.value, asof))

    async def latest(
        self, symbol: str, benchmark: str, window: CorrelationWindow
    ) -> CorrelationResult | None:
        matches = [
            row
            for (s, b, w, _), row in self._rows.items()
            if s == symbol and b == benchmark and w == window.value
        ]
        return max(matches, key=lambda r: r.asof, default=None)

    async def list_for_date(self, asof: date) -> list[CorrelationResult]:
        return [row for row in self._rows.values() if row.asof == asof]

    def __len__(self) -> int:
        return len(self._rows)


class InMemorySignalRepository(SignalRepository):
    def __init__(self) -> None:
        self._signals: list[PastSignal] = []

    async def add(self, signal: PastSignal) -> None:
        self._signals.append(signal)

    async def list_signals(self, symbol: str, limit: int = 50) -> list[PastSignal]:
        matches = [s for s in self._signals if s.symbol == symbol]
        matches.sort(key=lambda s: ensure_utc(s.issued_at), reverse=True)
        return matches[:limit]

    async def list_pending(self, issued_before: datetime) -> list[PastSignal]:
        cutoff = ensure_utc(issued_before)
        pending = [
            s
            for s in self._signals
            if s.realized_return is None
            and s.action != TacticalAction.RANGE
            and ensure_utc(s.issued_at) <= cutoff
        ]
        return sorted(pending, key=lambda s: ensure_utc(s.issued_at))

    async def update_outcome(self, signal_id: str, realized_return: float) -> bool:
        for index, signal in enumerate(self._signals):
            if signal.signal_id == signal_id:
                self._signals[index] = signal.model_copy(update={"realized_return": realized_return})
                return True
        return False
