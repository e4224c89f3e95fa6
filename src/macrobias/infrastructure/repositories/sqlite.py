"""SQLite repositories.

Calls run in a worker thread so the event loop is never blocked; every call
opens its own connection, which keeps the repository safe to share.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

import structlog

from macrobias.domain.models.calendar import ensure_utc
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.signals import PastSignal
from macrobias.domain.models.tactical import TacticalAction
from macrobias.domain.ports.repositories import CorrelationRepository, SignalRepository

logger = structlog.get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS correlations (
    symbol TEXT NOT NULL,
    benchmark TEXT NOT NULL,
    window_label TEXT NOT NULL,
    asof TEXT NOT NULL,
    value REAL,
    n_obs INTEGER NOT NULL,
    reason TEXT,
    PRIMARY KEY (symbol, benchmark, window_label, asof)
);
CREATE TABLE IF NOT EXISTS signals (
    id TEXT PRIMARY KEY,
    symbol TEXT NOT NULL,
    action TEXT NOT NULL,
    issued_at TEXT NOT NULL,
    realized_return REAL
);
CREATE INDEX IF NOT EXISTS idx_signals_symbol ON signals (symbol, issued_at);
CREATE INDEX IF NOT EXISTS idx_signals_pending ON signals (realized_return);
"""


class SqliteStorage:
    """Owns the database file and schema."""

    def __init__(self, path: Path | str) -> None:
        self._path = str(path)
        self._initialized = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed."""
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            if not self._initialized:
                conn.executescript(_SCHEMA)
                self._initialized = True
                logger.debug("SQLite schema ready", path=self._path)
            with conn:
                yield conn
        finally:
            conn.close()


def _row_to_result(row: sqlite3.Row) -> CorrelationResult:
    return CorrelationResult(
        symbol=row["symbol"],
        benchmark=row["benchmark"],
        window=CorrelationWindow(row["window_label"]),
        value=row["value"],
        n_obs=row["n_obs"],
        asof=date.fromisoformat(row["asof"]),
        reason=row["reason"],
    )


class SqliteCorrelationRepository(CorrelationRepository):
    def __init__(self, storage: SqliteStorage) -> None:
        self._storage = storage

    def _upsert(self, result: CorrelationResult) -> None:
        with self._storage.connect() as conn:
            conn.execute(
                """
                INSERT INTO correlations (symbol, benchmark, window_label, asof, value, n_obs, reason)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (symbol, benchmark, window_label, asof)
                DO UPDATE SET value = excluded.value, n_obs = excluded.n_obs, reason = excluded.reason
                """,
                (
                    result.symbol,
                    result.benchmark,
                    result.window.value,
                    result.asof.isoformat(),
                    result.value,
                    result.n_obs,
                    result.reason,
                ),
            )

    async def upsert(self, result: CorrelationResult) -> None:
        await asyncio.to_thread(self._upsert, result)

    def _query(self, sql: str, params: tuple[object, ...]) -> list[CorrelationResult]:
        with self._storage.connect() as conn:
            return [_row_to_result(row) for row in conn.execute(sql, params).fetchall()]

    async def get(
        self, symbol: str, benchmark: str, window: CorrelationWindow, asof: date
    ) -> CorrelationResult | None:
        rows = await asyncio.to_thread(
            self._query,
            "SELECT * FROM correlations WHERE symbol = ? AND benchmark = ? AND window_label = ? AND asof = ?",
            (symbol, benchmark, window.value, asof.isoformat()),
        )
        return rows[0] if rows else None

    async def latest(
        self, symbol: str, benchmark: str, window: CorrelationWindow
    ) -> CorrelationResult | None:
        rows = await asyncio.to_thread(
            self._query,
            "SELECT * FROM correlations WHERE symbol = ? AND benchmark = ? AND window_label = ? "
            "ORDER BY asof DESC LIMIT 1",
            (symbol, benchmark, window.value),
        )
        return rows[0] if rows else None

    async def list_for_date(self, asof: date) -> list[CorrelationResult]:
        return await asyncio.to_thread(
            self._query,
            "SELECT * FROM correlations WHERE asof = ? ORDER BY symbol, window_label",
            (asof.isoformat(),),
        )


def _row_to_signal(row: sqlite3.Row) -> PastSignal:
    return PastSignal(
        signal_id=row["id"],
        symbol=row["symbol"],
        action=TacticalAction(row["action"]),
        issued_at=datetime.fromisoformat(row["issued_at"]),
        realized_return=row["realized_return"],
    )


class SqliteSignalRepository(SignalRepository):
    def __init__(self, storage: SqliteStorage) -> None:
        self._storage = storage

    def _add(self, signal: PastSignal) -> None:
        with self._storage.connect() as conn:
            conn.execute(
                "INSERT INTO signals (id, symbol, action, issued_at, realized_return) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    signal.signal_id,
                    signal.symbol,
                    signal.action.value,
                    signal.issued_at.isoformat(),
                    signal.realized_return,
                ),
            )

    async def add(self, signal: PastSignal) -> None:
        await asyncio.to_thread(self._add, signal)

    def _select(self, sql: str, params: tuple[object, ...]) -> list[PastSignal]:
        with self._storage.connect() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_signal(row) for row in rows]

    async def list_signals(self, symbol: str, limit: int = 50) -> list[PastSignal]:
        return await asyncio.to_thread(
            self._select,
            "SELECT * FROM signals WHERE symbol = ? ORDER BY issued_at DESC LIMIT ?",
            (symbol, limit),
        )

    async def list_pending(self, issued_before: datetime) -> list[PastSignal]:
        # issued_at is stored as ISO text with mixed offsets, so the cutoff is applied here
        candidates = await asyncio.to_thread(
            self._select,
            "SELECT * FROM signals WHERE realized_return IS NULL AND action != ?",
            (TacticalAction.RANGE.value,),
        )
        cutoff = ensure_utc(issued_before)
        pending = [s for s in candidates if ensure_utc(s.issued_at) <= cutoff]
        return sorted(pending, key=lambda s: ensure_utc(s.issued_at))

    def _update_outcome(self, signal_id: str, realized_return: float) -> bool:
        with self._storage.connect() as conn:
            cursor = conn.execute(
                "UPDATE signals SET realized_return = ? WHERE id = ?",
                (realized_return, signal_id),
            )
            return cursor.rowcount > 0

    async def update_outcome(self, signal_id: str, realized_return: float) -> bool:
        return await asyncio.to_thread(self._update_outcome, signal_id, realized_return)
