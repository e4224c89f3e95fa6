"""Unit tests for the quality invariants checker."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import BiasInputs, BiasMeta, Direction, MacroBias
from macrobias.domain.models.calendar import CalendarEvent, EventImpact
from macrobias.domain.models.correlation import CorrelationResult, CorrelationWindow
from macrobias.domain.models.quality import (
    AssetSnapshot,
    IndicatorReading,
    QualityLevel,
    QualitySnapshot,
    SeriesFreshness,
)
from macrobias.domain.models.tactical import (
    ConfidenceLevel,
    NarrativeOutput,
    TacticalAction,
    TacticalRow,
    TrendLabel,
    UsdRegime,
)
from macrobias.infrastructure.analysis.macro_engine.bias import compute_bias
from macrobias.infrastructure.analysis.macro_engine.invariants import (
    check_correlation_observations,
    check_correlation_signs,
    check_coverage,
    check_freshness,
    check_narrative_vs_bias,
    check_plausibility,
    check_tactical_vs_bias,
    check_upcoming_dates,
    check_usd_logic,
    run_quality_checks,
)
from macrobias.infrastructure.analysis.macro_engine.narrative import build_narrative
from macrobias.infrastructure.analysis.macro_engine.tactical import build_tactical_row
from macrobias.infrastructure.weights import WeightConfig


def _levels(results: list) -> set[QualityLevel]:
    return {r.level for r in results}


def _corr(symbol: str, value: float | None, n_obs: int = 252) -> CorrelationResult:
    return CorrelationResult(
        symbol=symbol,
        benchmark="DXY",
        window=CorrelationWindow.M12,
        value=value,
        n_obs=n_obs,
        asof=date(2025, 6, 9),
    )


@pytest.fixture
def bearish_bias(eurusd: AssetMeta, bearish_inputs: BiasInputs, weights: WeightConfig) -> MacroBias:
    return compute_bias(eurusd, bearish_inputs, weights)


@pytest.mark.unit
class TestNarrativeVsBias:
    def test_consistent_narrative_passes(self, eurusd: AssetMeta, bearish_bias: MacroBias) -> None:
        results = check_narrative_vs_bias(bearish_bias, build_narrative(bearish_bias, eurusd))
        assert _levels(results) == {QualityLevel.PASS}

    def test_contradicting_headline_fails(self, eurusd: AssetMeta, bearish_bias: MacroBias) -> None:
        narrative = build_narrative(bearish_bias, eurusd)
        wrong = narrative.model_copy(update={"headline": "Sesgo macro alcista para EURUSD"})

        results = check_narrative_vs_bias(bearish_bias, wrong)

        assert QualityLevel.FAIL in _levels(results)

    def test_placeholder_fails(self, eurusd: AssetMeta, bearish_bias: MacroBias) -> None:
        narrative = build_narrative(bearish_bias, eurusd)
        broken = NarrativeOutput(
            headline=narrative.headline,
            bullets=[*narrative.bullets[:2], "El {factor} pesa"],
            confidence_note=narrative.confidence_note,
        )

        results = check_narrative_vs_bias(bearish_bias, broken)

        assert any("placeholder" in r.message for r in results if r.level == QualityLevel.FAIL)


@pytest.mark.unit
class TestUsdLogic:
    def test_built_row_passes(self, eurusd: AssetMeta, bearish_bias: MacroBias) -> None:
        corr = _corr("EURUSD", -0.6)
        row = build_tactical_row(eurusd, bearish_bias, corr, UsdRegime.STRONG)

        results = check_usd_logic(row, eurusd, UsdRegime.STRONG, corr)

        assert _levels(results) == {QualityLevel.PASS}

    def test_wrong_action_fails(self, eurusd: AssetMeta) -> None:
        row = TacticalRow(
            pair="EURUSD",
            trend=TrendLabel.BULLISH,
            action=TacticalAction.BUY,
            confidence=ConfidenceLevel.HIGH,
            corr12m=-0.6,
            motivo="USD Fuerte",
            usd_driven=True,
        )

        results = check_usd_logic(row, eurusd, UsdRegime.STRONG, _corr("EURUSD", -0.6))

        assert QualityLevel.FAIL in _levels(results)

    def test_atypical_sign_warns(self, eurusd: AssetMeta, bearish_bias: MacroBias) -> None:
        corr = _corr("EURUSD", 0.5)
        row = build_tactical_row(eurusd, bearish_bias, corr, UsdRegime.STRONG)

        results = check_usd_logic(row, eurusd, UsdRegime.STRONG, corr)

        assert _levels(results) == {QualityLevel.WARN}


@pytest.mark.unit
class TestCoverageAndTactical:
    def _bias(self, direction: Direction, confidence: float, used: int) -> MacroBias:
        return MacroBias(
            asset="EURUSD",
            score=30.0 if direction == Direction.LONG else 0.0,
            direction=direction,
            confidence=confidence,
            meta=BiasMeta(coverage=used / 6, coherence=0.5, drivers_used=used, drivers_total=6),
        )

    def test_low_coverage_directional_bias_fails(self) -> None:
        results = check_coverage(self._bias(Direction.LONG, 0.8, 2))
        assert _levels(results) == {QualityLevel.FAIL}

    def test_low_coverage_neutral_passes(self) -> None:
        results = check_coverage(self._bias(Direction.NEUTRAL, 0.4, 2))
        assert _levels(results) == {QualityLevel.PASS}

    def test_action_mismatch_fails(self) -> None:
        row = TacticalRow(
            pair="EURUSD",
            trend=TrendLabel.BULLISH,
            action=TacticalAction.SELL,
            confidence=ConfidenceLevel.HIGH,
            motivo="Sesgo macro alcista",
        )
        results = check_tactical_vs_bias(row, self._bias(Direction.LONG, 0.8, 6))
        assert _levels(results) == {QualityLevel.FAIL}


@pytest.mark.unit
class TestDataChecks:
    def test_correlation_sign_warns(self, eurusd: AssetMeta, usdjpy: AssetMeta) -> None:
        results = check_correlation_signs(
            [_corr("EURUSD", 0.5), _corr("USDJPY", 0.6)], [eurusd, usdjpy]
        )
        by_name = {r.name: r.level for r in results}
        assert by_name["correlation_sign:EURUSD:12m"] == QualityLevel.WARN
        assert by_name["correlation_sign:USDJPY:12m"] == QualityLevel.PASS

    def test_null_correlation_explained(self) -> None:
        results = check_correlation_observations([_corr("EURUSD", None, n_obs=100)])
        assert len(results) == 1
        assert results[0].level == QualityLevel.WARN
        assert "150 required" in results[0].message

    def test_freshness_share_fails(self, now: datetime) -> None:
        today = now.date()
        series = [
            SeriesFreshness(key="vix", last_date=today),
            SeriesFreshness(key="cpi_yoy", last_date=today - timedelta(days=20)),
            SeriesFreshness(key="claims_4w", last_date=today - timedelta(days=30)),
            SeriesFreshness(key="gdp_qoq", last_date=None),
        ]

        results = check_freshness(series, now)

        names = {r.name: r.level for r in results}
        assert names["freshness:claims_4w"] == QualityLevel.WARN
        assert names["freshness:gdp_qoq"] == QualityLevel.WARN
        assert names["freshness_sla"] == QualityLevel.FAIL

    def test_plausibility(self) -> None:
        results = check_plausibility(
            [
                IndicatorReading(key="corr", value=1.3, unit="correlation"),
                IndicatorReading(key="cpi_yoy", value=150.0),
                IndicatorReading(key="gdp_yoy", value=2.1),
                IndicatorReading(key="missing", value=None),
            ]
        )
        assert [r.level for r in results] == [QualityLevel.FAIL, QualityLevel.WARN, QualityLevel.PASS]

    def test_past_upcoming_event_fails(self, now: datetime) -> None:
        events = [
            CalendarEvent(name="CPI YoY", country="US", scheduled_at=now - timedelta(hours=2)),
            CalendarEvent(name="NFP", country="US", scheduled_at=now + timedelta(days=1)),
        ]

        results = check_upcoming_dates(events, now)

        assert len(results) == 1
        assert results[0].name == "upcoming_past"
        assert results[0].level == QualityLevel.FAIL

    def test_naive_event_times_are_read_as_utc(self, now: datetime) -> None:
        events = [
            CalendarEvent(name="CPI YoY", country="US", scheduled_at=datetime(2025, 6, 10, 10, 0)),
            CalendarEvent(name="NFP", country="US", scheduled_at=datetime(2025, 6, 10, 13, 30)),
        ]

        results = check_upcoming_dates(events, now)

        assert [r.level for r in results] == [QualityLevel.FAIL]
        assert "CPI YoY" in results[0].message

    def test_naive_reference_time(self) -> None:
        events = [CalendarEvent(name="NFP", country="US", scheduled_at=datetime(2030, 1, 1, 13, 30))]

        results = check_upcoming_dates(events, datetime(2025, 6, 10, 12, 0))

        assert [r.level for r in results] == [QualityLevel.PASS]


@pytest.mark.unit
class TestRunQualityChecks:
    def test_consistent_snapshot_has_no_failures(
        self, eurusd: AssetMeta, bearish_bias: MacroBias, now: datetime
    ) -> None:
        corr = _corr("EURUSD", -0.6)
        row = build_tactical_row(eurusd, bearish_bias, corr, UsdRegime.STRONG)
        snapshot = QualitySnapshot(
            now=now,
            usd_regime=UsdRegime.STRONG,
            assets=[
                AssetSnapshot(
                    asset=eurusd,
                    bias=bearish_bias,
                    narrative=build_narrative(bearish_bias, eurusd),
                    row=row,
                    correlation_12m=corr,
                )
            ],
            correlations=[corr],
            upcoming_events=[
                CalendarEvent(
                    name="CPI YoY",
                    country="US",
                    scheduled_at=now + timedelta(days=2),
                    impact=EventImpact.HIGH,
                )
            ],
        )

        report = run_quality_checks(snapshot)

        assert report.failed == 0
        assert report.ok
        assert report.passed == len(report.results) - report.warned

    def test_report_counts(self, now: datetime) -> None:
        snapshot = QualitySnapshot(
            now=now,
            upcoming_events=[
                CalendarEvent(name="CPI YoY", country="US", scheduled_at=now - timedelta(days=1))
            ],
        )

        report = run_quality_checks(snapshot)

        assert report.failed == 1
        assert not report.ok
