"""Historical signal confidence, opportunities radar and correlation reliability."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date, datetime, timedelta

import structlog

from macrobias.domain.models.asset import split_pair
from macrobias.domain.models.calendar import CalendarEvent, EventImpact, ensure_utc
from macrobias.domain.models.correlation import CorrelationSummary, CorrelationTrend, ShiftRegime
from macrobias.domain.models.observation import Observation
from macrobias.domain.models.signals import (
    HistoricalConfidence,
    InsufficientHistory,
    OpportunityPair,
    PastSignal,
    ReliabilityStatus,
)
from macrobias.domain.models.tactical import ConfidenceLevel, TacticalAction, TacticalRow
from macrobias.domain.ports.repositories import SignalRepository

logger = structlog.get_logger(__name__)

MIN_SIGNALS = 5
MAX_SIGNALS = 50
DEFAULT_HORIZON_DAYS = 5
RADAR_SIZE = 5
EVENT_PENALTY_WINDOW = timedelta(hours=24)
RELIABILITY_EVENT_WINDOW = timedelta(hours=3)

_CONFIDENCE_POINTS = {ConfidenceLevel.HIGH: 3, ConfidenceLevel.MEDIUM: 1, ConfidenceLevel.LOW: 0}
_TREND_POINTS = {CorrelationTrend.STRENGTHENING: 2, CorrelationTrend.STABLE: 1}

# Calendar countries whose releases move a currency.
COUNTRY_CURRENCIES = {
    "US": "USD",
    "EU": "EUR",
    "EA": "EUR",
    "DE": "EUR",
    "FR": "EUR",
    "IT": "EUR",
    "ES": "EUR",
    "UK": "GBP",
    "GB": "GBP",
    "JP": "JPY",
    "CA": "CAD",
    "AU": "AUD",
    "NZ": "NZD",
    "CH": "CHF",
    "CN": "CNY",
}


def score_historical_signals(
    symbol: str,
    signals: Sequence[PastSignal],
    min_signals: int = MIN_SIGNALS,
) -> HistoricalConfidence | InsufficientHistory:
    """Share of past directional signals that moved the right way.

    Only the ``MAX_SIGNALS`` most recent buy/sell signals with a realized
    return are evaluated. Below ``min_signals`` there is no percentage at all.
    """
    ordered = sorted(signals, key=lambda s: ensure_utc(s.issued_at), reverse=True)
    outcomes = [ok for s in ordered if (ok := s.succeeded()) is not None][:MAX_SIGNALS]
    if len(outcomes) < min_signals:
        return InsufficientHistory(symbol=symbol, total_signals=len(outcomes), required=min_signals)
    successes = sum(outcomes)
    return HistoricalConfidence(
        symbol=symbol,
        confidence_pct=round(successes / len(outcomes) * 100),
        total_signals=len(outcomes),
        successful_signals=successes,
    )


async def calculate_historical_confidence(
    symbol: str,
    repository: SignalRepository,
    min_signals: int = MIN_SIGNALS,
) -> HistoricalConfidence | InsufficientHistory:
    signals = await repository.list_signals(symbol, limit=MAX_SIGNALS * 2)
    result = score_historical_signals(symbol, signals, min_signals)
    logger.debug("Historical confidence", symbol=symbol, kind=result.kind)
    return result


def _last_close_on_or_before(closes: Sequence[Observation], day: date) -> Observation | None:
    eligible = [o for o in closes if o.date <= day]
    return max(eligible, key=lambda o: o.date, default=None)


def realized_return(
    signal: PastSignal,
    closes: Sequence[Observation],
    asof: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> float | None:
    """Pair return from the close at issue to the close ``horizon_days`` later.

    The entry is the last close on or before the issue date and the exit the
    last close on or before issue date + horizon. None while the horizon has
    not elapsed by ``asof`` or when either close is missing.
    """
    issued = ensure_utc(signal.issued_at).date()
    target = issued + timedelta(days=horizon_days)
    if target > asof:
        return None
    entry = _last_close_on_or_before(closes, issued)
    exit_ = _last_close_on_or_before(closes, target)
    if entry is None or exit_ is None or exit_.date <= entry.date or entry.value <= 0:
        return None
    return exit_.value / entry.value - 1


def pair_currencies(pair: str) -> set[str]:
    legs = split_pair(pair)
    return set(legs) if legs else set()


def event_currency(event: CalendarEvent) -> str | None:
    if event.currency:
        return event.currency.upper()
    return COUNTRY_CURRENCIES.get(event.country.upper())


def _has_imminent_event(
    pair: str, events: Sequence[CalendarEvent], now: datetime, window: timedelta
) -> bool:
    currencies = pair_currencies(pair)
    if not currencies:
        return False
    now = ensure_utc(now)
    return any(
        event.impact == EventImpact.HIGH
        and now <= event.scheduled_at <= now + window
        and event_currency(event) in currencies
        for event in events
    )


def calculate_opportunities_radar(
    rows: Sequence[TacticalRow],
    summaries: Mapping[str, CorrelationSummary],
    events: Sequence[CalendarEvent],
    now: datetime,
    top_n: int = RADAR_SIZE,
) -> list[OpportunityPair]:
    """Rank actionable rows and return the best ``top_n``.

    Score: +3 Alta / +1 Media confidence, +2 strengthening / +1 stable
    correlation (a pair with no summary counts as stable), up to +4 for
    macro relevance, and -2 when a high-impact event for one of the pair's
    currencies is due within 24 hours. Ties keep the input order.
    """
    candidates: list[OpportunityPair] = []
    for row in rows:
        if row.action == TacticalAction.RANGE:
            continue
        summary = summaries.get(row.pair)
        score = _CONFIDENCE_POINTS[row.confidence]
        reasons: list[str] = []
        if row.confidence == ConfidenceLevel.HIGH:
            reasons.append("Confianza alta")

        # Pairs without a summary count as stable with no macro relevance.
        trend = summary.trend if summary is not None else CorrelationTrend.STABLE
        relevance = summary.relevance if summary is not None else 0.0
        score += _TREND_POINTS.get(trend, 0)
        if trend == CorrelationTrend.STRENGTHENING:
            reasons.append("correlación reforzando")
        elif trend == CorrelationTrend.STABLE:
            reasons.append("correlación estable")
        score += round(relevance * 4)
        if relevance >= 0.7:
            reasons.append("alta relevancia macro")

        if _has_imminent_event(row.pair, events, now, EVENT_PENALTY_WINDOW):
            score -= 2
            reasons.append("evento de alto impacto en 24h")

        candidates.append(
            OpportunityPair(
                pair=row.pair,
                action=row.action,
                confidence=row.confidence,
                score=score,
                reasoning=", ".join(reasons) if reasons else "Señal macro favorable",
            )
        )

    # sorted() is stable, so equal scores keep insertion order.
    ranked = sorted(candidates, key=lambda c: c.score, reverse=True)
    return ranked[:top_n]


def assess_reliability(
    summaries: Mapping[str, CorrelationSummary],
    events: Sequence[CalendarEvent],
    now: datetime,
) -> ReliabilityStatus:
    """Flag periods where correlations are breaking down or big releases are imminent."""
    now = ensure_utc(now)
    total = len(summaries)
    weakening = sum(1 for s in summaries.values() if s.trend == CorrelationTrend.WEAKENING)
    breaks = sum(1 for s in summaries.values() if s.regime == ShiftRegime.BREAK)
    pct_weakening = weakening / total * 100 if total else 0.0
    pct_break = breaks / total * 100 if total else 0.0
    imminent = sum(
        1
        for e in events
        if e.impact == EventImpact.HIGH and now <= e.scheduled_at <= now + RELIABILITY_EVENT_WINDOW
    )

    score = 0
    reasons: list[str] = []
    if pct_weakening > 35:
        score += 2
        reasons.append(f"{pct_weakening:.0f}% de correlaciones debilitándose")
    if pct_break > 10:
        score += 2
        reasons.append(f"{pct_break:.0f}% de correlaciones en ruptura")
    if imminent:
        score += 2
        reasons.append(f"{imminent} evento(s) de alto impacto en 3h")

    status = "chaos" if score >= 4 else "caution" if score >= 2 else "normal"
    return ReliabilityStatus(
        status=status,
        score=score,
        pct_weakening=round(pct_weakening, 1),
        pct_break=round(pct_break, 1),
        events_within_3h=imminent,
        reasons=reasons,
    )
