"""Tactical signal builder: bias + USD correlation + USD regime -> action row."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Literal

import structlog

from macrobias.domain.models.asset import AssetClass, AssetMeta
from macrobias.domain.models.bias import Direction, MacroBias
from macrobias.domain.models.correlation import CorrelationResult
from macrobias.domain.models.tactical import (
    ConfidenceLevel,
    TacticalAction,
    TacticalRow,
    TrendLabel,
    UsdRegime,
)

logger = structlog.get_logger(__name__)

USD_CORRELATION_THRESHOLD = 0.30
ACTION_MIN_CONFIDENCE = 0.6
HIGH_CONFIDENCE = 0.7
MEDIUM_CONFIDENCE = 0.5
STRONG_CORRELATION = 0.70
MODERATE_CORRELATION = 0.50

_USD_PAIR_CLASSES = (AssetClass.FX, AssetClass.METAL)

_TREND_BY_DIRECTION = {
    Direction.LONG: TrendLabel.BULLISH,
    Direction.SHORT: TrendLabel.BEARISH,
    Direction.NEUTRAL: TrendLabel.NEUTRAL,
}


def usd_pair_leg(asset: AssetMeta) -> Literal["base", "quote"] | None:
    """USD leg of an FX or metal pair; None for assets outside USD pair logic."""
    if asset.asset_class not in _USD_PAIR_CLASSES:
        return None
    return asset.usd_leg()


def expected_usd_correlation_sign(asset: AssetMeta) -> int | None:
    """Expected sign of the correlation against a USD index: -1, +1 or None."""
    leg = usd_pair_leg(asset)
    if leg == "quote":
        return -1
    if leg == "base":
        return 1
    return None


def bucket_confidence(confidence: float) -> ConfidenceLevel:
    """Bucket a bias confidence: >= 0.7 Alta, >= 0.5 Media, otherwise Baja."""
    if confidence >= HIGH_CONFIDENCE:
        return ConfidenceLevel.HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def correlation_confidence(corr: float | None, base: ConfidenceLevel) -> ConfidenceLevel:
    """Adjust a base confidence bucket by correlation strength.

    |corr| >= 0.70 is Alta; 0.50 <= |corr| < 0.70 keeps Alta only when the base
    already was Alta, else Media; |corr| < 0.50 is Baja when the base is Baja,
    else Media. A missing correlation keeps the base.
    """
    if corr is None:
        return base
    strength = abs(corr)
    if strength >= STRONG_CORRELATION:
        return ConfidenceLevel.HIGH
    if strength >= MODERATE_CORRELATION:
        return ConfidenceLevel.HIGH if base == ConfidenceLevel.HIGH else ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW if base == ConfidenceLevel.LOW else ConfidenceLevel.MEDIUM


def derive_action(bias: MacroBias) -> TacticalAction:
    """Action implied by the bias alone; weak or neutral biases stay tactical."""
    if bias.direction == Direction.NEUTRAL or bias.confidence < ACTION_MIN_CONFIDENCE:
        return TacticalAction.RANGE
    return TacticalAction.BUY if bias.direction == Direction.LONG else TacticalAction.SELL


def usd_action(leg: Literal["base", "quote"], regime: UsdRegime) -> TacticalAction:
    """Strong USD lifts USD-base pairs and sinks USD-quote pairs; weak USD the opposite."""
    pair_rises = (leg == "base") == (regime == UsdRegime.STRONG)
    return TacticalAction.BUY if pair_rises else TacticalAction.SELL


def usd_logic_applies(
    asset: AssetMeta, usd_regime: UsdRegime, corr12m: float | None
) -> bool:
    return (
        usd_pair_leg(asset) is not None
        and usd_regime != UsdRegime.NEUTRAL
        and corr12m is not None
        and abs(corr12m) >= USD_CORRELATION_THRESHOLD
    )


def build_tactical_row(
    asset: AssetMeta,
    bias: MacroBias,
    correlation: CorrelationResult | None,
    usd_regime: UsdRegime,
    correlation_3m: CorrelationResult | None = None,
) -> TacticalRow:
    """Build the tactical row for one pair.

    Args:
        asset: Pair metadata
        bias: Macro bias of the pair
        correlation: 12m correlation against the USD benchmark (may be None)
        usd_regime: Current USD regime
        correlation_3m: Optional 3m correlation, reported only

    Returns:
        TacticalRow; ``motivo`` mentions USD whenever USD logic chose the action
    """
    corr12m = correlation.value if correlation is not None else None
    corr3m = correlation_3m.value if correlation_3m is not None else None
    benchmark = correlation.benchmark if correlation is not None else "USD"

    base = bucket_confidence(bias.confidence)
    confidence = correlation_confidence(corr12m, base)
    trend = _TREND_BY_DIRECTION[bias.direction]

    leg = usd_pair_leg(asset)
    if leg is not None and corr12m is not None and usd_logic_applies(asset, usd_regime, corr12m):
        action = usd_action(leg, usd_regime)
        motivo = f"USD {usd_regime.value} ⇒ {action.value} (corr. 12m {benchmark} {corr12m:+.2f})"
        expected = expected_usd_correlation_sign(asset)
        if expected is not None and corr12m * expected < 0:
            motivo += "; signo de correlación atípico"
        usd_driven = True
    else:
        action = derive_action(bias)
        motivo = f"Sesgo macro {trend.value.lower()} (score {bias.score:+.0f}, confianza {bias.confidence:.2f})"
        if action == TacticalAction.RANGE and bias.direction != Direction.NEUTRAL:
            motivo += " sin convicción suficiente"
        usd_driven = False

    return TacticalRow(
        pair=asset.symbol,
        trend=trend,
        action=action,
        confidence=confidence,
        corr12m=corr12m,
        corr3m=corr3m,
        motivo=motivo,
        usd_driven=usd_driven,
    )


def build_tactical_board(
    assets: Sequence[AssetMeta],
    biases: Mapping[str, MacroBias],
    correlations_12m: Mapping[str, CorrelationResult],
    usd_regime: UsdRegime,
    correlations_3m: Mapping[str, CorrelationResult] | None = None,
) -> list[TacticalRow]:
    """Rows for every asset that has a bias, in universe order."""
    rows: list[TacticalRow] = []
    for asset in assets:
        bias = biases.get(asset.symbol)
        if bias is None:
            logger.debug("Skipping asset without bias", asset=asset.symbol)
            continue
        rows.append(
            build_tactical_row(
                asset,
                bias,
                correlations_12m.get(asset.symbol),
                usd_regime,
                (correlations_3m or {}).get(asset.symbol),
            )
        )
    return rows


def usd_regime_from_bias(usd_bias: float | None, threshold: float = 0.2) -> UsdRegime:
    """USD regime label from the usd_bias factor value."""
    if usd_bias is None:
        return UsdRegime.NEUTRAL
    if usd_bias > threshold:
        return UsdRegime.STRONG
    if usd_bias < -threshold:
        return UsdRegime.WEAK
    return UsdRegime.NEUTRAL
