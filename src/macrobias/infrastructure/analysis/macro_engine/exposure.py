"""USD exposure overlap across a set of trades."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from macrobias.domain.models.asset import split_pair
from macrobias.domain.models.correlation import CorrelationSummary
from macrobias.domain.models.exposure import ExposureOverlap, ExposureSide, TradePosition

logger = structlog.get_logger(__name__)

NEUTRAL_BAND = 0.1
CONCENTRATION_PCT = 60.0

USD_STRONG_LABEL = "USD fuerte"
USD_WEAK_LABEL = "USD débil"
NEUTRAL_LABEL = "Neutral"


def usd_exposure(position: TradePosition, summary: CorrelationSummary | None) -> float:
    """Signed USD exposure of a trade: positive bets on a strong USD.

    Long EURUSD is short USD and long USDJPY is long USD. Pairs without a USD
    leg use the sign of their current correlation with the USD benchmark as a
    proxy, and count as neutral when there is no correlation to go on.
    """
    legs = split_pair(position.pair)
    if legs is not None and legs[0] == "USD":
        return position.size
    if legs is not None and legs[1] == "USD":
        return -position.size
    corr = summary.correlation_now if summary is not None else None
    if corr is None or corr == 0:
        return 0.0
    return position.size if corr > 0 else -position.size


def exposure_weight(position: TradePosition, summary: CorrelationSummary | None) -> float:
    """Size scaled by correlation strength and macro relevance; 1 when that is zero."""
    if summary is None:
        return 1.0
    corr = summary.correlation_now or 0.0
    weight = abs(position.size) * abs(corr) * summary.relevance
    return weight or 1.0


def _empty_overlap() -> ExposureOverlap:
    return ExposureOverlap(
        usd_strong=ExposureSide(label=USD_STRONG_LABEL),
        usd_weak=ExposureSide(label=USD_WEAK_LABEL),
        neutral=ExposureSide(label=NEUTRAL_LABEL),
    )


def calculate_exposure_overlap(
    positions: Sequence[TradePosition],
    summaries: Mapping[str, CorrelationSummary],
) -> ExposureOverlap:
    """Split trades into USD-strong, USD-weak and neutral buckets.

    Each bucket's percentage is its share of the total weight. An alert is
    raised when more than 60% of the weight sits on one side of the USD.

    Args:
        positions: Open or planned trades
        summaries: Correlation summaries by symbol

    Returns:
        ExposureOverlap with rounded percentages and the trades in each bucket
    """
    if not positions:
        return _empty_overlap()

    totals = {USD_STRONG_LABEL: 0.0, USD_WEAK_LABEL: 0.0, NEUTRAL_LABEL: 0.0}
    trades: dict[str, list[str]] = {label: [] for label in totals}
    for position in positions:
        summary = summaries.get(position.pair)
        exposure = usd_exposure(position, summary)
        if exposure > NEUTRAL_BAND:
            side = USD_STRONG_LABEL
        elif exposure < -NEUTRAL_BAND:
            side = USD_WEAK_LABEL
        else:
            side = NEUTRAL_LABEL
        totals[side] += exposure_weight(position, summary)
        trades[side].append(position.pair)

    total_weight = sum(totals.values())
    pct = {
        label: (value / total_weight * 100 if total_weight else 0.0)
        for label, value in totals.items()
    }

    alert = None
    if pct[USD_STRONG_LABEL] > CONCENTRATION_PCT:
        alert = (
            f"Tienes {len(trades[USD_STRONG_LABEL])} trades apuntando a USD fuerte: "
            "riesgo de concentración macro"
        )
    elif pct[USD_WEAK_LABEL] > CONCENTRATION_PCT:
        alert = (
            f"Tienes {len(trades[USD_WEAK_LABEL])} trades apuntando a USD débil: "
            "riesgo de concentración macro"
        )
    if alert:
        logger.info("USD exposure concentrated", alert=alert, positions=len(positions))

    return ExposureOverlap(
        usd_strong=ExposureSide(
            label=USD_STRONG_LABEL,
            percentage=round(pct[USD_STRONG_LABEL]),
            trades=trades[USD_STRONG_LABEL],
        ),
        usd_weak=ExposureSide(
            label=USD_WEAK_LABEL,
            percentage=round(pct[USD_WEAK_LABEL]),
            trades=trades[USD_WEAK_LABEL],
        ),
        neutral=ExposureSide(
            label=NEUTRAL_LABEL,
            percentage=round(pct[NEUTRAL_LABEL]),
            trades=trades[NEUTRAL_LABEL],
        ),
        alert=alert,
    )
