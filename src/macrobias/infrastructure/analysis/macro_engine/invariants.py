"""Quality invariants over engine outputs.

Every check is a pure function returning InvariantResult values. Checks never
mutate what they inspect and never raise for a violation: findings are
diagnostics for monitoring, not control flow.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

import structlog

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import Direction, FactorKey, MacroBias
from macrobias.domain.models.calendar import CalendarEvent, ensure_utc
from macrobias.domain.models.correlation import CorrelationResult
from macrobias.domain.models.quality import (
    IndicatorReading,
    InvariantResult,
    QualityLevel,
    QualityReport,
    QualitySnapshot,
    SeriesFreshness,
)
from macrobias.domain.models.tactical import NarrativeOutput, TacticalRow, UsdRegime
from macrobias.infrastructure.analysis.macro_engine.freshness import (
    check_freshness as freshness_status,
    frequency_for,
)
from macrobias.infrastructure.analysis.macro_engine.narrative import (
    DIRECTION_ADJECTIVES,
    confidence_note,
)
from macrobias.infrastructure.analysis.macro_engine.tactical import (
    USD_CORRELATION_THRESHOLD,
    derive_action,
    expected_usd_correlation_sign,
    usd_action,
    usd_logic_applies,
    usd_pair_leg,
)

logger = structlog.get_logger(__name__)

MIN_DRIVERS_USED = 3
NEUTRAL_MAX_CONFIDENCE = 0.5
USD_DRIVER_THRESHOLD = 0.2
MAX_STALE_SHARE = 0.25
MAX_ABS_YOY_PCT = 100.0


def _result(name: str, level: QualityLevel, message: str) -> InvariantResult:
    return InvariantResult(name=name, level=level, message=message)


def _pass(name: str, message: str = "OK") -> InvariantResult:
    return _result(name, QualityLevel.PASS, message)


def check_narrative_vs_bias(bias: MacroBias, narrative: NarrativeOutput) -> list[InvariantResult]:
    """Narrative tone, placeholders and confidence wording against the bias."""
    name = f"narrative_vs_bias:{bias.asset}"
    results: list[InvariantResult] = []
    headline = narrative.headline.lower()
    expected = DIRECTION_ADJECTIVES[bias.direction]
    contradicting = [
        adjective
        for direction, adjective in DIRECTION_ADJECTIVES.items()
        if direction not in (bias.direction, Direction.NEUTRAL) and adjective in headline
    ]

    if contradicting:
        results.append(
            _result(
                name,
                QualityLevel.FAIL,
                f"Headline says '{contradicting[0]}' but bias direction is {bias.direction.value}",
            )
        )
    elif expected not in headline:
        results.append(
            _result(name, QualityLevel.WARN, f"Headline lacks expected adjective '{expected}'")
        )

    if "{" in narrative.text() or "}" in narrative.text():
        results.append(_result(name, QualityLevel.FAIL, "Unresolved template placeholder in narrative"))

    expected_note = confidence_note(bias).split(":")[0]
    if not narrative.confidence_note.startswith(expected_note):
        results.append(
            _result(
                name,
                QualityLevel.WARN,
                f"Confidence note does not match bucket ({expected_note})",
            )
        )

    return results or [_pass(name)]


def check_usd_logic(
    row: TacticalRow,
    asset: AssetMeta,
    usd_regime: UsdRegime,
    correlation: CorrelationResult | None,
) -> list[InvariantResult]:
    """Action and motivo of a USD pair against the USD regime and correlation."""
    name = f"usd_logic:{row.pair}"
    leg = usd_pair_leg(asset)
    corr = correlation.value if correlation is not None else None
    if leg is None or corr is None or not usd_logic_applies(asset, usd_regime, corr):
        if row.usd_driven:
            return [_result(name, QualityLevel.FAIL, "Row marked USD-driven without USD conditions")]
        return [_pass(name, "USD logic not applicable")]

    results: list[InvariantResult] = []
    expected_action = usd_action(leg, usd_regime)
    if row.action != expected_action:
        results.append(
            _result(
                name,
                QualityLevel.FAIL,
                f"USD {usd_regime.value} with USD as {leg} expects '{expected_action.value}', "
                f"got '{row.action.value}'",
            )
        )
    if "USD" not in row.motivo:
        results.append(_result(name, QualityLevel.FAIL, "motivo does not mention USD"))

    expected_sign = expected_usd_correlation_sign(asset)
    if expected_sign is not None and corr * expected_sign < 0:
        results.append(
            _result(
                name,
                QualityLevel.WARN,
                f"Correlation {corr:+.2f} contradicts the expected sign for USD as {leg}",
            )
        )
    return results or [_pass(name)]


def check_usd_driver_consistency(bias: MacroBias, asset: AssetMeta) -> list[InvariantResult]:
    """For USD-quote pairs a strong USD reading should not coexist with a long bias."""
    name = f"usd_driver:{bias.asset}"
    driver = bias.driver(FactorKey.USD_BIAS)
    if usd_pair_leg(asset) != "quote" or driver is None or driver.weight == 0:
        return [_pass(name, "Not applicable")]
    # Translated value is negative when USD strength hurts the pair.
    if driver.value < -USD_DRIVER_THRESHOLD and bias.direction == Direction.LONG:
        return [_result(name, QualityLevel.WARN, "Strong USD but bias is long")]
    if driver.value > USD_DRIVER_THRESHOLD and bias.direction == Direction.SHORT:
        return [_result(name, QualityLevel.WARN, "Weak USD but bias is short")]
    return [_pass(name)]


def check_coverage(bias: MacroBias) -> list[InvariantResult]:
    name = f"coverage:{bias.asset}"
    used = bias.meta.drivers_used
    if used >= MIN_DRIVERS_USED:
        return [_pass(name, f"{used} drivers used")]
    if bias.direction == Direction.NEUTRAL and bias.confidence <= NEUTRAL_MAX_CONFIDENCE:
        return [_pass(name, f"Low coverage ({used}) reported as neutral")]
    return [
        _result(
            name,
            QualityLevel.FAIL,
            f"Only {used} drivers used but bias is {bias.direction.value} "
            f"with confidence {bias.confidence:.2f}",
        )
    ]


def check_tactical_vs_bias(row: TacticalRow, bias: MacroBias) -> list[InvariantResult]:
    """Rows not driven by USD logic must carry the action implied by the bias."""
    name = f"tactical_vs_bias:{row.pair}"
    if row.usd_driven:
        return [_pass(name, "USD-driven row")]
    expected = derive_action(bias)
    if row.action != expected:
        return [
            _result(
                name,
                QualityLevel.FAIL,
                f"Action '{row.action.value}' differs from bias action '{expected.value}'",
            )
        ]
    return [_pass(name)]


def check_correlation_signs(
    results: Iterable[CorrelationResult], assets: Sequence[AssetMeta]
) -> list[InvariantResult]:
    """USD-quote pairs should correlate negatively with a USD index, USD-base pairs positively."""
    by_symbol = {a.symbol: a for a in assets}
    findings: list[InvariantResult] = []
    for result in results:
        asset = by_symbol.get(result.symbol)
        if asset is None or result.value is None:
            continue
        expected = expected_usd_correlation_sign(asset)
        if expected is None:
            continue
        name = f"correlation_sign:{result.symbol}:{result.window.value}"
        if result.value * expected < -USD_CORRELATION_THRESHOLD:
            findings.append(
                _result(
                    name,
                    QualityLevel.WARN,
                    f"{result.symbol} vs {result.benchmark} = {result.value:+.2f}, "
                    f"expected {'positive' if expected > 0 else 'negative'}",
                )
            )
        else:
            findings.append(_pass(name))
    return findings


def check_correlation_observations(results: Iterable[CorrelationResult]) -> list[InvariantResult]:
    """Null correlations should be explained by missing observations or staleness."""
    findings: list[InvariantResult] = []
    for result in results:
        if result.value is not None:
            continue
        name = f"correlation_obs:{result.symbol}:{result.window.value}"
        minimum = result.window.min_obs
        if result.n_obs < minimum:
            findings.append(
                _result(
                    name,
                    QualityLevel.WARN,
                    f"{result.n_obs} observations, {minimum} required ({result.reason or 'n/a'})",
                )
            )
        else:
            findings.append(
                _result(name, QualityLevel.WARN, f"Null value despite {result.n_obs} observations")
            )
    return findings


def check_freshness(series: Sequence[SeriesFreshness], now: datetime) -> list[InvariantResult]:
    """Each stale series is a WARN; more than a quarter of series stale is a FAIL."""
    today = now.date()
    findings: list[InvariantResult] = []
    stale = 0
    for item in series:
        frequency = item.frequency or frequency_for(item.key)
        status = freshness_status(item.last_date, frequency, today)
        name = f"freshness:{item.key}"
        if status.stale:
            stale += 1
            findings.append(
                _result(
                    name,
                    QualityLevel.WARN,
                    f"{frequency.value} series is {status.age} {status.unit} days old "
                    f"(max {status.max_age})",
                )
            )
        else:
            findings.append(_pass(name))

    if series and stale / len(series) > MAX_STALE_SHARE:
        findings.append(
            _result(
                "freshness_sla",
                QualityLevel.FAIL,
                f"{stale} of {len(series)} series stale (> {MAX_STALE_SHARE:.0%})",
            )
        )
    return findings


def check_plausibility(readings: Iterable[IndicatorReading]) -> list[InvariantResult]:
    """Flag values outside plausible magnitudes instead of trusting them."""
    findings: list[InvariantResult] = []
    for reading in readings:
        name = f"plausibility:{reading.key}"
        if reading.value is None:
            continue
        if reading.unit == "correlation" and not -1.0 <= reading.value <= 1.0:
            findings.append(
                _result(name, QualityLevel.FAIL, f"Correlation {reading.value} outside [-1, 1]")
            )
        elif reading.unit == "yoy_pct" and abs(reading.value) > MAX_ABS_YOY_PCT:
            findings.append(
                _result(name, QualityLevel.WARN, f"YoY change {reading.value:.1f}% looks implausible")
            )
        else:
            findings.append(_pass(name))
    return findings


def check_upcoming_dates(events: Iterable[CalendarEvent], now: datetime) -> list[InvariantResult]:
    """Upcoming-event lists must not contain events already in the past."""
    now = ensure_utc(now)
    findings = [
        _result(
            "upcoming_past",
            QualityLevel.FAIL,
            f"'{event.name}' ({event.country}) scheduled {event.scheduled_at.isoformat()} "
            f"is before {now.isoformat()}",
        )
        for event in events
        if event.scheduled_at < now
    ]
    return findings or [_pass("upcoming_past")]


def summarize(results: Sequence[InvariantResult]) -> QualityReport:
    levels = [r.level for r in results]
    return QualityReport(
        results=list(results),
        passed=levels.count(QualityLevel.PASS),
        warned=levels.count(QualityLevel.WARN),
        failed=levels.count(QualityLevel.FAIL),
    )


def run_quality_checks(snapshot: QualitySnapshot) -> QualityReport:
    """Run every check against a snapshot and summarize the findings."""
    results: list[InvariantResult] = []
    assets = [item.asset for item in snapshot.assets]

    for item in snapshot.assets:
        if item.bias is not None:
            results.extend(check_coverage(item.bias))
            results.extend(check_usd_driver_consistency(item.bias, item.asset))
            if item.narrative is not None:
                results.extend(check_narrative_vs_bias(item.bias, item.narrative))
            if item.row is not None:
                results.extend(check_tactical_vs_bias(item.row, item.bias))
        if item.row is not None:
            results.extend(
                check_usd_logic(item.row, item.asset, snapshot.usd_regime, item.correlation_12m)
            )

    results.extend(check_correlation_signs(snapshot.correlations, assets))
    results.extend(check_correlation_observations(snapshot.correlations))
    results.extend(check_freshness(snapshot.series, snapshot.now))
    results.extend(check_plausibility(snapshot.readings))
    results.extend(check_upcoming_dates(snapshot.upcoming_events, snapshot.now))

    report = summarize(results)
    logger.info(
        "Quality checks completed",
        passed=report.passed,
        warned=report.warned,
        failed=report.failed,
    )
    return report
