"""Unit tests for the in-memory and SQLite repositories."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.signals import PastSignal
from macrobias.domain.models.tactical import TacticalAction
from macrobias.domain.ports.repositories import CorrelationRepository, SignalRepository
from macrobias.infrastructure.repositories.memory import (
    InMemoryCorrelationRepository,
    InMemorySignalRepository,
)
from macrobias.infrastructure.repositories.sqlite import (
    SqliteCorrelationRepository,
    SqliteSignalRepository,
    SqliteStorage,
)


def _result(
    asof: date, value: float | None = -0.5, window: CorrelationWindow = CorrelationWindow.M12
) -> CorrelationResult:
    return CorrelationResult(
        symbol="EURUSD",
        benchmark="DXY",
        window=window,
        value=value,
        n_obs=200 if value is not None else 12,
        asof=asof,
        reason=None if value is not None else "too_few_points",
    )


@pytest.fixture(params=["memory", "sqlite"])
def correlation_repository(
    request: pytest.FixtureRequest, tmp_path: Path
) -> CorrelationRepository:
    if request.param == "memory":
        return InMemoryCorrelationRepository()
    return SqliteCorrelationRepository(SqliteStorage(tmp_path / "test.db"))


@pytest.fixture(params=["memory", "sqlite"])
def signal_repository(request: pytest.FixtureRequest, tmp_path: Path) -> SignalRepository:
    if request.param == "memory":
        return InMemorySignalRepository()
    return SqliteSignalRepository(SqliteStorage(tmp_path / "signals.db"))


@pytest.mark.unit
class TestCorrelationRepository:
    async def test_upsert_is_idempotent(self, correlation_repository: CorrelationRepository) -> None:
        asof = date(2025, 6, 9)
        await correlation_repository.upsert(_result(asof, -0.5))
        await correlation_repository.upsert(_result(asof, -0.5))
        await correlation_repository.upsert(_result(asof, -0.6))

        rows = await correlation_repository.list_for_date(asof)

        assert len(rows) == 1
        assert rows[0].value == -0.6

    async def test_get_and_null_values(self, correlation_repository: CorrelationRepository) -> None:
        asof = date(2025, 6, 9)
        await correlation_repository.upsert(_result(asof, None, CorrelationWindow.M24))

        row = await correlation_repository.get("EURUSD", "DXY", CorrelationWindow.M24, asof)
        missing = await correlation_repository.get("EURUSD", "DXY", CorrelationWindow.M3, asof)

        assert row == _result(asof, None, CorrelationWindow.M24)
        assert missing is None

    async def test_latest_by_asof(self, correlation_repository: CorrelationRepository) -> None:
        for offset in (2, 0, 1):
            await correlation_repository.upsert(
                _result(date(2025, 6, 9) - timedelta(days=offset), -0.1 * (offset + 1))
            )

        latest = await correlation_repository.latest("EURUSD", "DXY", CorrelationWindow.M12)

        assert latest is not None
        assert latest.asof == date(2025, 6, 9)
        assert latest.value == pytest.approx(-0.1)
        assert await correlation_repository.latest("GBPUSD", "DXY", CorrelationWindow.M12) is None


@pytest.mark.unit
class TestSignalRepository:
    async def test_newest_first_with_limit(self, signal_repository: SignalRepository) -> None:
        base = datetime(2025, 1, 1, 12, 0)
        for day in range(5):
            await signal_repository.add(
                PastSignal(
                    symbol="EURUSD",
                    action=TacticalAction.BUY if day % 2 else TacticalAction.SELL,
                    issued_at=base + timedelta(days=day),
                    realized_return=0.01 if day else None,
                )
            )
        await signal_repository.add(
            PastSignal(symbol="GBPUSD", action=TacticalAction.BUY, issued_at=base)
        )

        signals = await signal_repository.list_signals("EURUSD", limit=3)

        assert [s.issued_at for s in signals] == [base + timedelta(days=d) for d in (4, 3, 2)]
        assert signals[1].action == TacticalAction.BUY
        assert signals[0].realized_return == 0.01

    async def test_pending_signals_oldest_first(self, signal_repository: SignalRepository) -> None:
        base = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)
        await signal_repository.add(
            PastSignal(symbol="EURUSD", action=TacticalAction.BUY, issued_at=base + timedelta(days=2))
        )
        # Naive timestamps count as UTC.
        await signal_repository.add(
            PastSignal(symbol="GBPUSD", action=TacticalAction.SELL, issued_at=datetime(2025, 3, 3))
        )
        await signal_repository.add(
            PastSignal(symbol="EURUSD", action=TacticalAction.RANGE, issued_at=base)
        )
        await signal_repository.add(
            PastSignal(
                symbol="EURUSD", action=TacticalAction.SELL, issued_at=base, realized_return=0.01
            )
        )
        await signal_repository.add(
            PastSignal(symbol="USDJPY", action=TacticalAction.BUY, issued_at=base + timedelta(days=9))
        )

        pending = await signal_repository.list_pending(base + timedelta(days=3))

        assert [(s.symbol, s.action) for s in pending] == [
            ("GBPUSD", TacticalAction.SELL),
            ("EURUSD", TacticalAction.BUY),
        ]

    async def test_update_outcome(self, signal_repository: SignalRepository) -> None:
        signal = PastSignal(
            symbol="EURUSD", action=TacticalAction.BUY, issued_at=datetime(2025, 3, 3, tzinfo=UTC)
        )
        await signal_repository.add(signal)

        updated = await signal_repository.update_outcome(signal.signal_id, -0.004)
        unknown = await signal_repository.update_outcome("missing", 0.01)

        (stored,) = await signal_repository.list_signals("EURUSD")
        assert updated is True
        assert unknown is False
        assert stored.signal_id == signal.signal_id
        assert stored.realized_return == -0.004
        assert await signal_repository.list_pending(datetime(2026, 1, 1, tzinfo=UTC)) == []
