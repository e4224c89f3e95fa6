"""Repository interfaces for persisted engine outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime

from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.signals import PastSignal


class CorrelationRepository(ABC):
    """Storage for correlation rows keyed by (symbol, benchmark, window, asof)."""

    @abstractmethod
    async def upsert(self, result: CorrelationResult) -> None:
        """Insert or replace the row with the same key; repeating a write is a no-op."""

    @abstractmethod
    async def get(
        self, symbol: str, benchmark: str, window: CorrelationWindow, asof: date
    ) -> CorrelationResult | None:
        pass

    @abstractmethod
    async def latest(
        self, symbol: str, benchmark: str, window: CorrelationWindow
    ) -> CorrelationResult | None:
        """Most recent row by ``asof`` for the key prefix."""

    @abstractmethod
    async def list_for_date(self, asof: date) -> list[CorrelationResult]:
        pass


class SignalRepository(ABC):
    """Storage for issued tactical signals and their outcomes."""

    @abstractmethod
    async def add(self, signal: PastSignal) -> None:
        pass

    @abstractmethod
    async def list_signals(self, symbol: str, limit: int = 50) -> list[PastSignal]:
        """Signals for ``symbol``, newest first."""

    @abstractmethod
    async def list_pending(self, issued_before: datetime) -> list[PastSignal]:
        """Directional signals without an outcome issued at or before ``issued_before``, oldest first."""

    @abstractmethod
    async def update_outcome(self, signal_id: str, realized_return: float) -> bool:
        """Store the realized return of a signal; False when the id is unknown."""
