"""Unit tests for the tactical signal builder."""

from __future__ import annotations

from datetime import date

import pytest

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import BiasMeta, Direction, MacroBias
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.tactical import (
    ConfidenceLevel,
    TacticalAction,
    TrendLabel,
    UsdRegime,
)
from macrobias.infrastructure.analysis.macro_engine.tactical import (
    bucket_confidence,
    build_tactical_board,
    build_tactical_row,
    correlation_confidence,
    derive_action,
    usd_regime_from_bias,
)


def _bias(symbol: str, score: float, confidence: float) -> MacroBias:
    if score > 10:
        direction = Direction.LONG
    elif score < -10:
        direction = Direction.SHORT
    else:
        direction = Direction.NEUTRAL
    return MacroBias(
        asset=symbol,
        score=score,
        direction=direction,
        confidence=confidence,
        meta=BiasMeta(coverage=1.0, coherence=0.8, drivers_used=6, drivers_total=6),
    )


def _corr(
    symbol: str, value: float | None, window: CorrelationWindow = CorrelationWindow.M12
) -> CorrelationResult:
    return CorrelationResult(
        symbol=symbol,
        benchmark="DXY",
        window=window,
        value=value,
        n_obs=252 if value is not None else 0,
        asof=date(2025, 6, 9),
    )


@pytest.mark.unit
class TestBuckets:
    @pytest.mark.parametrize(
        ("confidence", "expected"),
        [
            (0.9, ConfidenceLevel.HIGH),
            (0.7, ConfidenceLevel.HIGH),
            (0.69, ConfidenceLevel.MEDIUM),
            (0.5, ConfidenceLevel.MEDIUM),
            (0.49, ConfidenceLevel.LOW),
        ],
    )
    def test_bucket_confidence(self, confidence: float, expected: ConfidenceLevel) -> None:
        assert bucket_confidence(confidence) == expected

    @pytest.mark.parametrize(
        ("corr", "base", "expected"),
        [
            (-0.75, ConfidenceLevel.LOW, ConfidenceLevel.HIGH),
            (0.6, ConfidenceLevel.HIGH, ConfidenceLevel.HIGH),
            (0.6, ConfidenceLevel.LOW, ConfidenceLevel.MEDIUM),
            (0.2, ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM),
            (0.2, ConfidenceLevel.LOW, ConfidenceLevel.LOW),
            (None, ConfidenceLevel.LOW, ConfidenceLevel.LOW),
        ],
    )
    def test_correlation_adjustment(
        self, corr: float | None, base: ConfidenceLevel, expected: ConfidenceLevel
    ) -> None:
        assert correlation_confidence(corr, base) == expected


@pytest.mark.unit
class TestBuildTacticalRow:
    def test_strong_usd_sells_usd_quote_pair(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd, _bias("EURUSD", 25.0, 0.8), _corr("EURUSD", -0.45), UsdRegime.STRONG
        )

        assert row.action == TacticalAction.SELL
        assert row.usd_driven
        assert row.motivo == "USD Fuerte ⇒ Buscar ventas (corr. 12m DXY -0.45)"

    def test_strong_usd_buys_usd_base_pair(self, usdjpy: AssetMeta) -> None:
        row = build_tactical_row(
            usdjpy, _bias("USDJPY", 0.0, 0.3), _corr("USDJPY", 0.55), UsdRegime.STRONG
        )

        assert row.action == TacticalAction.BUY
        assert "USD" in row.motivo

    def test_weak_usd_buys_usd_quote_pair(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd, _bias("EURUSD", -30.0, 0.8), _corr("EURUSD", -0.6), UsdRegime.WEAK
        )

        assert row.action == TacticalAction.BUY
        assert row.trend == TrendLabel.BEARISH

    def test_atypical_sign_is_noted(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd, _bias("EURUSD", 0.0, 0.5), _corr("EURUSD", 0.4), UsdRegime.STRONG
        )

        assert row.action == TacticalAction.SELL
        assert row.motivo.endswith("; signo de correlación atípico")

    def test_weak_correlation_falls_back_to_bias(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd, _bias("EURUSD", 40.0, 0.8), _corr("EURUSD", -0.29), UsdRegime.STRONG
        )

        assert not row.usd_driven
        assert row.action == TacticalAction.BUY
        assert row.confidence == ConfidenceLevel.MEDIUM

    def test_neutral_regime_uses_bias(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd, _bias("EURUSD", -40.0, 0.75), _corr("EURUSD", -0.8), UsdRegime.NEUTRAL
        )

        assert row.action == TacticalAction.SELL
        assert row.confidence == ConfidenceLevel.HIGH
        assert not row.usd_driven

    def test_missing_correlation_keeps_bias_bucket(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(eurusd, _bias("EURUSD", 40.0, 0.55), None, UsdRegime.STRONG)

        assert row.corr12m is None
        assert row.action == TacticalAction.RANGE
        assert row.confidence == ConfidenceLevel.MEDIUM

    def test_index_never_uses_usd_logic(self, spx: AssetMeta) -> None:
        row = build_tactical_row(spx, _bias("SPX", 30.0, 0.8), _corr("SPX", -0.9), UsdRegime.STRONG)

        assert not row.usd_driven
        assert row.action == TacticalAction.BUY

    def test_reports_short_window(self, eurusd: AssetMeta) -> None:
        row = build_tactical_row(
            eurusd,
            _bias("EURUSD", 5.0, 0.4),
            _corr("EURUSD", -0.5),
            UsdRegime.NEUTRAL,
            _corr("EURUSD", -0.2, CorrelationWindow.M3),
        )

        assert row.corr3m == -0.2
        assert row.action == TacticalAction.RANGE


@pytest.mark.unit
class TestDeriveAction:
    def test_low_confidence_is_range(self) -> None:
        assert derive_action(_bias("EURUSD", 50.0, 0.59)) == TacticalAction.RANGE
        assert derive_action(_bias("EURUSD", 50.0, 0.6)) == TacticalAction.BUY
        assert derive_action(_bias("EURUSD", -50.0, 0.6)) == TacticalAction.SELL
        assert derive_action(_bias("EURUSD", 5.0, 0.9)) == TacticalAction.RANGE


@pytest.mark.unit
class TestBoard:
    def test_board_skips_assets_without_bias(self, eurusd: AssetMeta, spx: AssetMeta) -> None:
        rows = build_tactical_board(
            [eurusd, spx],
            {"EURUSD": _bias("EURUSD", 20.0, 0.7)},
            {"EURUSD": _corr("EURUSD", -0.5)},
            UsdRegime.NEUTRAL,
        )

        assert [r.pair for r in rows] == ["EURUSD"]

    def test_usd_regime_from_bias(self) -> None:
        assert usd_regime_from_bias(0.35) == UsdRegime.STRONG
        assert usd_regime_from_bias(-0.21) == UsdRegime.WEAK
        assert usd_regime_from_bias(0.2) == UsdRegime.NEUTRAL
        assert usd_regime_from_bias(None) == UsdRegime.NEUTRAL
