"""Macro bias scorer.

Each available factor is translated into the asset's own direction with an
asset-class multiplier (USD strength is bearish for EURUSD and bullish for
USDJPY), weighted, and summed into a score in [-100, 100]. Weights are
renormalized over the factors that are present, so a missing factor lowers
coverage and confidence but does not shrink the score toward zero.
"""

from __future__ import annotations

from itertools import combinations

import structlog

from macrobias.domain.models.asset import AssetClass, AssetMeta, RiskSensitivity, UsdExposure
from macrobias.domain.models.bias import (
    BiasDriver,
    BiasInputs,
    BiasMeta,
    Direction,
    DriverSign,
    FactorKey,
    MacroBias,
)
from macrobias.infrastructure.weights import ConfidenceParams, WeightConfig

logger = structlog.get_logger(__name__)

DRIVER_NAMES: dict[FactorKey, str] = {
    FactorKey.RISK_REGIME: "Régimen de riesgo",
    FactorKey.USD_BIAS: "Sesgo USD",
    FactorKey.INFLATION_MOMENTUM: "Momentum de inflación",
    FactorKey.GROWTH_MOMENTUM: "Momentum de crecimiento",
    FactorKey.EXTERNAL_BALANCE: "Balanza externa",
    FactorKey.RATES_CONTEXT: "Contexto de tipos",
}

# Contributions within +/- this many score points count as neutral drivers.
SIGN_DEADBAND = 1.0


def _clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _risk_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.METAL:
        return -1.0
    if asset.asset_class == AssetClass.FX:
        if asset.usd_exposure == UsdExposure.LONG_USD:
            multiplier = -1.0
        elif asset.usd_exposure == UsdExposure.SHORT_USD:
            multiplier = 1.0
        else:
            multiplier = 0.75 if asset.risk_sensitivity == RiskSensitivity.RISK_ON else -0.5
    else:
        multiplier = 1.0
    if asset.risk_sensitivity == RiskSensitivity.RISK_OFF:
        multiplier *= -1
    return multiplier


def _usd_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.FX:
        return {UsdExposure.LONG_USD: 1.0, UsdExposure.SHORT_USD: -1.0}.get(asset.usd_exposure, 0.0)
    return {
        AssetClass.METAL: -1.0,
        AssetClass.ENERGY: -1.0,
        AssetClass.INDEX: -0.6,
        AssetClass.CRYPTO: -0.5,
    }[asset.asset_class]


def _inflation_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.FX:
        return 0.6 if asset.usd_exposure == UsdExposure.SHORT_USD else -0.6
    return {
        AssetClass.METAL: 1.0,
        AssetClass.ENERGY: 0.8,
        AssetClass.INDEX: -0.6,
        AssetClass.CRYPTO: -0.5,
    }[asset.asset_class]


def _growth_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.FX:
        return 0.7 if asset.usd_exposure == UsdExposure.SHORT_USD else -0.7
    return {
        AssetClass.INDEX: 1.0,
        AssetClass.CRYPTO: 0.9,
        AssetClass.ENERGY: 0.8,
        AssetClass.METAL: -0.5,
    }[asset.asset_class]


def _external_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.FX:
        return {UsdExposure.SHORT_USD: 1.0, UsdExposure.LONG_USD: -1.0}.get(asset.usd_exposure, 0.5)
    return {
        AssetClass.METAL: 0.2,
        AssetClass.CRYPTO: 0.2,
        AssetClass.INDEX: 0.3,
        AssetClass.ENERGY: 0.3,
    }[asset.asset_class]


def _rates_multiplier(asset: AssetMeta) -> float:
    if asset.asset_class == AssetClass.FX:
        return 0.8 if asset.usd_exposure == UsdExposure.LONG_USD else -0.6
    return {
        AssetClass.METAL: -1.0,
        AssetClass.CRYPTO: -0.8,
        AssetClass.INDEX: -0.6,
        AssetClass.ENERGY: -0.4,
    }[asset.asset_class]


_MULTIPLIERS = {
    FactorKey.RISK_REGIME: _risk_multiplier,
    FactorKey.USD_BIAS: _usd_multiplier,
    FactorKey.INFLATION_MOMENTUM: _inflation_multiplier,
    FactorKey.GROWTH_MOMENTUM: _growth_multiplier,
    FactorKey.EXTERNAL_BALANCE: _external_multiplier,
    FactorKey.RATES_CONTEXT: _rates_multiplier,
}


def factor_multiplier(key: FactorKey, asset: AssetMeta) -> float:
    """Signed sensitivity of ``asset`` to a positive reading of factor ``key``."""
    return _MULTIPLIERS[key](asset)


def driver_sign(contribution: float) -> DriverSign:
    if contribution > SIGN_DEADBAND:
        return DriverSign.POSITIVE
    if contribution < -SIGN_DEADBAND:
        return DriverSign.NEGATIVE
    return DriverSign.NEUTRAL


def calculate_coherence(drivers: list[BiasDriver], top_n: int) -> float:
    """Share of agreeing pairs among the top ``top_n`` non-neutral drivers.

    Returns 0.5 when fewer than two drivers carry a direction.
    """
    active = sorted(
        (d for d in drivers if d.sign != DriverSign.NEUTRAL),
        key=lambda d: abs(d.contribution),
        reverse=True,
    )[:top_n]
    pairs = list(combinations(active, 2))
    if not pairs:
        return 0.5
    conflicts = sum(1 for a, b in pairs if a.sign != b.sign)
    return 1.0 - conflicts / len(pairs)


def calculate_confidence(coverage: float, coherence: float, params: ConfidenceParams) -> float:
    """Confidence from coverage and coherence; non-decreasing in both.

    base = floor + coverage_weight * coverage + coherence_weight * coherence,
    clamped to [floor, ceiling], then a bonus for strong agreement or a
    penalty for conflicting drivers, clamped again.
    """
    base = params.floor + params.coverage_weight * coverage + params.coherence_weight * coherence
    confidence = max(params.floor, min(params.ceiling, base))
    if coherence > 0.75:
        confidence += params.coherence_bonus
    elif coherence < 0.45:
        confidence -= params.conflict_penalty
    return round(max(params.floor, min(params.ceiling, confidence)), 4)


def direction_for_score(score: float, neutral_threshold: float) -> Direction:
    if score > neutral_threshold:
        return Direction.LONG
    if score < -neutral_threshold:
        return Direction.SHORT
    return Direction.NEUTRAL


def _describe(key: FactorKey, raw: float, translated: float) -> str:
    effect = "apoya" if translated > 0 else "penaliza" if translated < 0 else "no mueve"
    return f"{DRIVER_NAMES[key]} en {raw:+.2f} {effect} al activo ({translated:+.2f})"


def _empty_bias(asset: AssetMeta, weights: WeightConfig) -> MacroBias:
    drivers = [
        BiasDriver(
            key=key,
            name=DRIVER_NAMES[key],
            weight=0.0,
            sign=DriverSign.NEUTRAL,
            value=0.0,
            contribution=0.0,
            description="Sin datos suficientes",
        )
        for key in FactorKey
    ]
    return MacroBias(
        asset=asset.symbol,
        score=0.0,
        direction=Direction.NEUTRAL,
        confidence=0.0,
        drivers=drivers,
        meta=BiasMeta(coverage=0.0, coherence=0.0, drivers_used=0, drivers_total=len(FactorKey)),
        weights_version=weights.version,
    )


def compute_bias(asset: AssetMeta, inputs: BiasInputs, weights: WeightConfig) -> MacroBias:
    """Combine weighted macro factors into a directional bias for one asset.

    Args:
        asset: Asset metadata (class, USD exposure, risk sensitivity)
        inputs: Factor snapshot; missing factors reduce coverage
        weights: Validated weight configuration

    Returns:
        MacroBias; a neutral zero-confidence bias when no factor is available
    """
    available = inputs.available()
    if not available:
        logger.debug("No macro inputs available", asset=asset.symbol)
        return _empty_bias(asset, weights)

    table = weights.for_class(asset.asset_class)
    total_weight = sum(table[key] for key in available)

    drivers: list[BiasDriver] = []
    for key in FactorKey:
        raw = available.get(key)
        if raw is None:
            drivers.append(
                BiasDriver(
                    key=key,
                    name=DRIVER_NAMES[key],
                    weight=0.0,
                    sign=DriverSign.NEUTRAL,
                    value=0.0,
                    contribution=0.0,
                    description="Sin datos suficientes",
                )
            )
            continue

        weight = table[key] / total_weight if total_weight > 0 else 1.0 / len(available)
        translated = _clamp(raw * factor_multiplier(key, asset))
        contribution = translated * weight * 100
        drivers.append(
            BiasDriver(
                key=key,
                name=DRIVER_NAMES[key],
                weight=round(weight, 6),
                sign=driver_sign(contribution),
                value=round(translated, 6),
                contribution=round(contribution, 4),
                description=_describe(key, raw, translated),
            )
        )

    score = round(_clamp(sum(d.contribution for d in drivers), -100.0, 100.0), 2)
    drivers_used = sum(1 for d in drivers if d.weight > 0)
    coverage = drivers_used / len(FactorKey)
    coherence = calculate_coherence(drivers, weights.confidence.top_drivers)
    confidence = calculate_confidence(coverage, coherence, weights.confidence)

    drivers.sort(key=lambda d: abs(d.contribution), reverse=True)

    bias = MacroBias(
        asset=asset.symbol,
        score=score,
        direction=direction_for_score(score, weights.thresholds.neutral),
        confidence=confidence,
        drivers=drivers,
        meta=BiasMeta(
            coverage=round(coverage, 4),
            coherence=round(coherence, 4),
            drivers_used=drivers_used,
            drivers_total=len(FactorKey),
        ),
        weights_version=weights.version,
    )
    logger.debug(
        "Computed macro bias",
        asset=asset.symbol,
        score=bias.score,
        direction=bias.direction.value,
        confidence=bias.confidence,
        coverage=bias.meta.coverage,
    )
    return bias
