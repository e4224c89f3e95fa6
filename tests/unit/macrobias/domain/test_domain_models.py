"""Unit tests for domain value objects."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from macrobias.domain.models.asset import AssetClass, AssetMeta, split_pair
from macrobias.domain.models.bias import BiasInputs, FactorKey, RiskLabel, UsdLabel
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.observation import Frequency, Observation, ObservationSeries
from macrobias.domain.models.signals import PastSignal
from macrobias.domain.models.tactical import NarrativeOutput, TacticalAction


@pytest.mark.unit
class TestCorrelationWindow:
    @pytest.mark.parametrize(
        ("window", "size", "min_obs"),
        [
            (CorrelationWindow.M3, 63, 40),
            (CorrelationWindow.M6, 126, 80),
            (CorrelationWindow.M12, 252, 150),
            (CorrelationWindow.M24, 504, 300),
        ],
    )
    def test_sizes(self, window: CorrelationWindow, size: int, min_obs: int) -> None:
        assert window.size == size
        assert window.min_obs == min_obs

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("3m", CorrelationWindow.M3),
            ("90d", CorrelationWindow.M3),
            ("1Y", CorrelationWindow.M12),
            ("2y", CorrelationWindow.M24),
        ],
    )
    def test_parse_accepts_aliases(self, label: str, expected: CorrelationWindow) -> None:
        assert CorrelationWindow.parse(label) is expected

    def test_parse_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown correlation window"):
            CorrelationWindow.parse("5w")


@pytest.mark.unit
class TestCorrelationResult:
    def test_value_outside_unit_interval_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CorrelationResult(
                symbol="EURUSD",
                benchmark="DXY",
                window=CorrelationWindow.M12,
                value=1.2,
                n_obs=200,
                asof=date(2025, 1, 10),
            )

    def test_key(self) -> None:
        result = CorrelationResult(
            symbol="EURUSD", benchmark="DXY", window=CorrelationWindow.M3, asof=date(2025, 1, 10)
        )
        assert result.key == ("EURUSD", "DXY", "3m", date(2025, 1, 10))
        assert result.value is None


@pytest.mark.unit
class TestAssetMeta:
    def test_split_pair(self) -> None:
        assert split_pair("EURUSD") == ("EUR", "USD")
        assert split_pair("eur/usd") == ("EUR", "USD")
        assert split_pair("SPX") is None
        assert split_pair("US500X") is None

    def test_usd_leg_from_explicit_legs(self, eurusd: AssetMeta, usdjpy: AssetMeta) -> None:
        assert eurusd.usd_leg() == "quote"
        assert usdjpy.usd_leg() == "base"

    def test_usd_leg_parsed_from_symbol(self) -> None:
        asset = AssetMeta(symbol="USDCAD", asset_class=AssetClass.FX)
        assert asset.usd_leg() == "base"
        assert asset.currencies() == {"USD", "CAD"}

    def test_index_has_no_usd_leg(self, spx: AssetMeta) -> None:
        assert spx.usd_leg() is None
        assert spx.currencies() == set()


@pytest.mark.unit
class TestBiasInputs:
    def test_out_of_range_factor_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BiasInputs(usd_bias=1.5)

    def test_available_and_without(self, bearish_inputs: BiasInputs) -> None:
        assert len(bearish_inputs.available()) == 6
        reduced = bearish_inputs.without(FactorKey.RATES_CONTEXT)
        assert FactorKey.RATES_CONTEXT not in reduced.available()
        assert reduced.usd_bias == bearish_inputs.usd_bias

    def test_resolved_labels(self) -> None:
        inputs = BiasInputs(risk_regime=-0.5, usd_bias=0.1)
        assert inputs.resolved_risk_label() == RiskLabel.RISK_OFF
        assert inputs.resolved_usd_label() == UsdLabel.NEUTRAL
        assert BiasInputs().is_empty()

    def test_explicit_label_wins(self) -> None:
        inputs = BiasInputs(risk_regime=-0.5, risk_label=RiskLabel.RISK_ON)
        assert inputs.resolved_risk_label() == RiskLabel.RISK_ON


@pytest.mark.unit
class TestNarrativeOutput:
    def test_requires_three_bullets(self) -> None:
        with pytest.raises(ValidationError):
            NarrativeOutput(headline="h", bullets=["a", "b"], confidence_note="c")

    def test_rejects_blank_bullet(self) -> None:
        with pytest.raises(ValidationError):
            NarrativeOutput(headline="h", bullets=["a", " ", "c"], confidence_note="c")

    def test_text_joins_parts(self) -> None:
        narrative = NarrativeOutput(headline="h", bullets=["a", "b", "c"], confidence_note="n")
        assert narrative.text() == "h\na\nb\nc\nn"


@pytest.mark.unit
class TestPastSignal:
    def test_success_follows_action_direction(self) -> None:
        issued = datetime(2025, 1, 1, tzinfo=UTC)
        buy = PastSignal(
            symbol="EURUSD", action=TacticalAction.BUY, issued_at=issued, realized_return=0.01
        )
        sell = PastSignal(
            symbol="EURUSD", action=TacticalAction.SELL, issued_at=issued, realized_return=0.01
        )
        pending = PastSignal(symbol="EURUSD", action=TacticalAction.BUY, issued_at=issued)
        assert buy.succeeded() is True
        assert sell.succeeded() is False
        assert pending.succeeded() is None

    def test_each_signal_gets_its_own_id(self) -> None:
        issued = datetime(2025, 1, 1, tzinfo=UTC)
        first = PastSignal(symbol="EURUSD", action=TacticalAction.BUY, issued_at=issued)
        second = PastSignal(symbol="EURUSD", action=TacticalAction.BUY, issued_at=issued)

        assert first.signal_id != second.signal_id
        assert len(first.signal_id) == 32


@pytest.mark.unit
class TestObservationSeries:
    def test_last_date(self) -> None:
        series = ObservationSeries(
            symbol="DXY",
            frequency=Frequency.DAILY,
            observations=[
                Observation(date=date(2025, 1, 2), value=1.0),
                Observation(date=date(2025, 1, 3), value=1.1),
            ],
        )
        assert series.last_date == date(2025, 1, 3)
        assert ObservationSeries(symbol="DXY", frequency=Frequency.DAILY).last_date is None
