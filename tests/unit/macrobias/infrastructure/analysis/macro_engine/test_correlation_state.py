"""Unit tests for short vs long window correlation state."""

from __future__ import annotations

from datetime import date

import pytest

from macrobias.domain.models.correlation import (
    CorrelationResult,
    CorrelationTrend,
    CorrelationWindow,
    ShiftRegime,
)
from macrobias.infrastructure.analysis.macro_engine.correlation_state import (
    correlation_trend,
    detect_shift,
    macro_relevance,
    summarize_correlations,
)


def _row(
    symbol: str, window: CorrelationWindow, value: float | None, asof: date
) -> CorrelationResult:
    return CorrelationResult(
        symbol=symbol, benchmark="DXY", window=window, value=value, n_obs=200, asof=asof
    )


@pytest.mark.unit
class TestShiftAndTrend:
    @pytest.mark.parametrize(
        ("c12", "c3", "expected"),
        [
            (-0.6, 0.3, ShiftRegime.BREAK),
            (-0.2, -0.7, ShiftRegime.BREAK),
            (0.1, 0.15, ShiftRegime.WEAK),
            (-0.6, -0.65, ShiftRegime.STABLE),
            (0.4, 0.6, ShiftRegime.REINFORCING),
            (None, -0.5, ShiftRegime.WEAK),
        ],
    )
    def test_detect_shift(self, c12: float | None, c3: float | None, expected: ShiftRegime) -> None:
        assert detect_shift(c12, c3) == expected

    def test_trend(self) -> None:
        assert correlation_trend(-0.5, -0.7) == CorrelationTrend.STRENGTHENING
        assert correlation_trend(-0.7, -0.4) == CorrelationTrend.WEAKENING
        assert correlation_trend(-0.5, -0.55) == CorrelationTrend.STABLE
        assert correlation_trend(None, -0.5) == CorrelationTrend.INCONCLUSIVE

    def test_relevance_bounds(self) -> None:
        assert macro_relevance(None, None, ShiftRegime.WEAK) == 0.0
        for c12 in (-1.0, -0.5, 0.0, 0.5, 1.0):
            for regime in ShiftRegime:
                assert 0.0 <= macro_relevance(c12, c12, regime) <= 1.0


@pytest.mark.unit
class TestSummarize:
    def test_latest_rows_win(self) -> None:
        old, new = date(2025, 6, 2), date(2025, 6, 9)
        rows = [
            _row("EURUSD", CorrelationWindow.M12, -0.2, old),
            _row("EURUSD", CorrelationWindow.M12, -0.6, new),
            _row("EURUSD", CorrelationWindow.M3, -0.8, new),
            _row("EURUSD", CorrelationWindow.M24, 0.9, new),
            _row("SPX", CorrelationWindow.M12, None, new),
        ]

        summaries = summarize_correlations(rows)

        eurusd = summaries["EURUSD"]
        assert eurusd.corr_12m == -0.6
        assert eurusd.corr_3m == -0.8
        assert eurusd.delta == pytest.approx(-0.2)
        assert eurusd.trend == CorrelationTrend.STRENGTHENING
        assert summaries["SPX"].trend == CorrelationTrend.INCONCLUSIVE
        assert summaries["SPX"].relevance == 0.0
