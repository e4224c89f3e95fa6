"""Unit tests for the trading playbook."""

from __future__ import annotations

import pytest

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import Direction, ExpandedNarrative, RiskLabel
from macrobias.domain.models.correlation import CorrelationSummary
from macrobias.domain.models.quality import IndicatorReading
from macrobias.domain.models.tactical import ConfidenceLevel, UsdRegime
from macrobias.infrastructure.analysis.macro_engine.playbook import (
    build_trading_playbook,
    determine_bias,
    determine_confidence,
    determine_environment,
    plan_reasons,
)
from macrobias.infrastructure.weights import AssetUniverse


@pytest.mark.unit
class TestDetermineBias:
    def test_usd_quoted_pair_moves_against_usd(self, eurusd: AssetMeta) -> None:
        assert determine_bias(eurusd, UsdRegime.WEAK, None, -0.59, -0.63) == Direction.LONG
        assert determine_bias(eurusd, UsdRegime.STRONG, None, -0.59, -0.63) == Direction.SHORT

    def test_weak_correlation_is_neutral(self, eurusd: AssetMeta) -> None:
        assert determine_bias(eurusd, UsdRegime.WEAK, None, -0.2, -0.5) == Direction.NEUTRAL
        assert determine_bias(eurusd, UsdRegime.WEAK, None, None, None) == Direction.NEUTRAL

    def test_falls_back_to_short_window(self, eurusd: AssetMeta) -> None:
        assert determine_bias(eurusd, UsdRegime.WEAK, None, None, -0.45) == Direction.LONG

    def test_usd_based_pair_follows_usd(self, usdjpy: AssetMeta) -> None:
        assert determine_bias(usdjpy, UsdRegime.STRONG, None, None, None) == Direction.LONG
        assert determine_bias(usdjpy, UsdRegime.WEAK, None, None, None) == Direction.SHORT
        assert determine_bias(usdjpy, UsdRegime.NEUTRAL, None, None, None) == Direction.NEUTRAL

    def test_gold_needs_risk_regime_agreement(self, xauusd: AssetMeta) -> None:
        assert determine_bias(xauusd, UsdRegime.WEAK, RiskLabel.RISK_OFF, None, None) == Direction.LONG
        assert determine_bias(xauusd, UsdRegime.WEAK, RiskLabel.RISK_ON, None, None) == Direction.NEUTRAL
        assert determine_bias(xauusd, UsdRegime.STRONG, RiskLabel.RISK_ON, None, None) == Direction.SHORT

    def test_benchmark_follows_usd(self) -> None:
        assert determine_bias(None, UsdRegime.STRONG, None, None, None) == Direction.LONG
        assert determine_bias(None, UsdRegime.WEAK, None, None, None) == Direction.SHORT

    def test_asset_without_usd_leg_is_neutral(self, spx: AssetMeta) -> None:
        assert determine_bias(spx, UsdRegime.STRONG, RiskLabel.RISK_ON, 0.7, 0.7) == Direction.NEUTRAL


@pytest.mark.unit
class TestConfidenceAndEnvironment:
    def test_high_confidence(self) -> None:
        level = determine_confidence(
            Direction.LONG, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.65, -0.70
        )

        assert level == ConfidenceLevel.HIGH

    def test_medium_confidence(self) -> None:
        level = determine_confidence(Direction.LONG, UsdRegime.WEAK, RiskLabel.NEUTRAL, -0.45, None)

        assert level == ConfidenceLevel.MEDIUM

    def test_low_confidence(self) -> None:
        assert (
            determine_confidence(Direction.LONG, UsdRegime.NEUTRAL, None, -0.15, None)
            == ConfidenceLevel.LOW
        )
        assert (
            determine_confidence(Direction.NEUTRAL, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.9, -0.9)
            == ConfidenceLevel.LOW
        )

    def test_diverging_windows_mean_range(self) -> None:
        environment = determine_environment(
            Direction.LONG, ConfidenceLevel.HIGH, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.60, -0.20
        )

        assert environment == "range"

    def test_aligned_windows_with_clear_regime_mean_trend(self) -> None:
        environment = determine_environment(
            Direction.LONG, ConfidenceLevel.HIGH, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.59, -0.63
        )

        assert environment == "trend"

    def test_low_confidence_or_neutral_backdrop_mean_range(self) -> None:
        assert (
            determine_environment(
                Direction.LONG, ConfidenceLevel.LOW, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.6, -0.6
            )
            == "range"
        )
        assert (
            determine_environment(
                Direction.LONG, ConfidenceLevel.HIGH, UsdRegime.NEUTRAL, None, -0.6, -0.6
            )
            == "range"
        )


@pytest.mark.unit
class TestPlanReasons:
    def test_correlation_and_regime_reasons(self, eurusd: AssetMeta) -> None:
        reasons = plan_reasons(eurusd, UsdRegime.WEAK, RiskLabel.RISK_OFF, -0.65, -0.20, "DXY")

        assert reasons == [
            "USD débil según régimen macro",
            "Correlación 12m con DXY fuertemente negativa (-0.65)",
            "Divergencia entre correlaciones 12m y 3m (0.45)",
            "Régimen Risk OFF favorece activos defensivos",
        ]

    def test_indicator_and_cycle_reasons(self, xauusd: AssetMeta) -> None:
        readings = [
            IndicatorReading(key="cpi_yoy", value=3.1, previous=3.4),
            IndicatorReading(key="gdp_yoy", value=1.8, previous=2.3),
        ]
        expanded = ExpandedNarrative(
            monetary_stance="Dovish",
            monetary_reason="Inflación desacelerando y crecimiento débil sugieren postura acomodaticia",
            cycle_phase="Contracción",
            cycle_reason="Crecimiento e inflación desacelerando",
        )

        reasons = plan_reasons(
            xauusd, UsdRegime.NEUTRAL, None, None, None, "DXY", readings, expanded
        )

        assert reasons == [
            "USD neutral según régimen macro",
            "Fase de ciclo Contracción (crecimiento e inflación desacelerando)",
            "Inflación elevada (CPI: 3.10%) favorece oro",
            "Crecimiento desacelerando",
        ]


@pytest.mark.unit
class TestBuildTradingPlaybook:
    def test_plans_benchmark_and_usd_pairs(self, universe: AssetUniverse) -> None:
        summaries = {
            "EURUSD": CorrelationSummary(
                symbol="EURUSD", benchmark="DXY", corr_12m=-0.59, corr_3m=-0.63
            )
        }
        readings = [IndicatorReading(key="cpi_yoy", value=3.1)]

        playbook = build_trading_playbook(
            universe.assets, summaries, UsdRegime.WEAK, RiskLabel.RISK_OFF, readings=readings
        )

        assert [p.asset for p in playbook.assets] == ["DXY", "EURUSD", "USDJPY", "XAUUSD"]
        assert playbook.usd_direction == UsdRegime.WEAK
        dxy = playbook.plan("DXY")
        assert dxy is not None
        assert dxy.bias == Direction.SHORT
        assert dxy.corr12m is None

        eurusd = playbook.plan("EURUSD")
        assert eurusd is not None
        assert eurusd.bias == Direction.LONG
        assert eurusd.confidence == ConfidenceLevel.MEDIUM
        assert eurusd.environment == "trend"
        assert eurusd.corr12m == -0.59
        assert "Correlaciones 12m y 3m alineadas" in eurusd.reasons

        gold = playbook.plan("XAUUSD")
        assert gold is not None
        assert gold.bias == Direction.LONG
        assert "Inflación elevada (CPI: 3.10%) favorece oro" in gold.reasons
        assert playbook.plan("SPX") is None

    def test_quiet_backdrop_is_all_range(self, universe: AssetUniverse) -> None:
        playbook = build_trading_playbook(universe.assets, {}, UsdRegime.NEUTRAL, None)

        assert all(p.bias == Direction.NEUTRAL for p in playbook.assets)
        assert all(p.environment == "range" for p in playbook.assets)
        assert all(p.confidence == ConfidenceLevel.LOW for p in playbook.assets)
