"""Short vs long window correlation comparison (shift regime, trend, relevance)."""

from __future__ import annotations

from collections.abc import Iterable

from macrobias.domain.models.bias import RiskLabel
from macrobias.domain.models.correlation import (
    CorrelationResult,
    CorrelationSummary,
    CorrelationTrend,
    CorrelationWindow,
    ShiftRegime,
)

BREAK_DELTA = 0.4
STABLE_DELTA = 0.1
WEAK_LEVEL = 0.3
STRONG_LEVEL = 0.6


def detect_shift(corr_12m: float | None, corr_3m: float | None) -> ShiftRegime:
    """Classify how the 3m correlation moved relative to the 12m one."""
    if corr_12m is None or corr_3m is None:
        return ShiftRegime.WEAK
    delta = corr_3m - corr_12m
    if corr_12m * corr_3m < 0 or abs(delta) > BREAK_DELTA:
        return ShiftRegime.BREAK
    if abs(corr_12m) < WEAK_LEVEL and abs(corr_3m) < WEAK_LEVEL:
        return ShiftRegime.WEAK
    if abs(delta) <= STABLE_DELTA:
        return ShiftRegime.STABLE
    return ShiftRegime.REINFORCING if delta > 0 else ShiftRegime.STABLE


def correlation_trend(corr_12m: float | None, corr_3m: float | None) -> CorrelationTrend:
    if corr_12m is None or corr_3m is None:
        return CorrelationTrend.INCONCLUSIVE
    if abs(corr_3m - corr_12m) <= STABLE_DELTA:
        return CorrelationTrend.STABLE
    if abs(corr_3m) > abs(corr_12m):
        return CorrelationTrend.STRENGTHENING
    return CorrelationTrend.WEAKENING


def macro_relevance(
    corr_12m: float | None,
    corr_3m: float | None,
    regime: ShiftRegime,
    risk_label: RiskLabel | None = None,
) -> float:
    """Relevance in [0, 1] of the benchmark for the asset right now."""
    reference = corr_12m if corr_12m is not None else corr_3m
    if reference is None:
        return 0.0
    score = min(1.0, abs(reference))
    if regime == ShiftRegime.BREAK:
        score += 0.2
    elif regime == ShiftRegime.WEAK:
        score -= 0.2
    if risk_label == RiskLabel.RISK_OFF and reference > STRONG_LEVEL:
        score += 0.1
    elif risk_label == RiskLabel.RISK_ON and reference < -STRONG_LEVEL:
        score += 0.1
    return round(max(0.0, min(1.0, score)), 4)


def summarize_correlations(
    results: Iterable[CorrelationResult],
    risk_label: RiskLabel | None = None,
) -> dict[str, CorrelationSummary]:
    """Build one summary per symbol from its 12m and 3m rows.

    When several rows exist for the same window the most recent ``asof`` wins.

    Returns:
        Mapping of symbol to summary, in first-seen order
    """
    latest: dict[tuple[str, str], dict[CorrelationWindow, CorrelationResult]] = {}
    for result in results:
        if result.window not in (CorrelationWindow.M12, CorrelationWindow.M3):
            continue
        by_window = latest.setdefault((result.symbol, result.benchmark), {})
        current = by_window.get(result.window)
        if current is None or result.asof >= current.asof:
            by_window[result.window] = result

    summaries: dict[str, CorrelationSummary] = {}
    for (symbol, benchmark), by_window in latest.items():
        long_row = by_window.get(CorrelationWindow.M12)
        short_row = by_window.get(CorrelationWindow.M3)
        c12 = long_row.value if long_row else None
        c3 = short_row.value if short_row else None
        regime = detect_shift(c12, c3)
        summaries[symbol] = CorrelationSummary(
            symbol=symbol,
            benchmark=benchmark,
            corr_12m=c12,
            corr_3m=c3,
            delta=round(c3 - c12, 6) if c12 is not None and c3 is not None else None,
            regime=regime,
            trend=correlation_trend(c12, c3),
            relevance=macro_relevance(c12, c3, regime, risk_label),
        )
    return summaries
