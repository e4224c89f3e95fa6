"""Trading playbook: per-asset long/short plan from the USD regime and correlations."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog

from macrobias.domain.models.asset import AssetClass, AssetMeta
from macrobias.domain.models.bias import Direction, ExpandedNarrative, RiskLabel
from macrobias.domain.models.correlation import CorrelationSummary
from macrobias.domain.models.playbook import Environment, TradingAssetPlan, TradingPlaybook
from macrobias.domain.models.quality import IndicatorReading
from macrobias.domain.models.tactical import ConfidenceLevel, UsdRegime
from macrobias.infrastructure.analysis.macro_engine.tactical import usd_pair_leg
from macrobias.infrastructure.analysis.macro_engine.trend import classify_trend

logger = structlog.get_logger(__name__)

MIN_CORRELATION = 0.3
HIGH_CORRELATION = 0.6
MEDIUM_CORRELATION = 0.4
DIVERGENCE = 0.3
ALIGNED = 0.1
GOLD_CPI_THRESHOLD = 2.5


def _risk_is_neutral(risk: RiskLabel | None) -> bool:
    return risk is None or risk == RiskLabel.NEUTRAL


def determine_bias(
    asset: AssetMeta | None,
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    corr12m: float | None,
    corr3m: float | None,
) -> Direction:
    """Direction for one asset; ``asset`` None stands for the USD benchmark itself.

    USD-base pairs follow the USD. USD-quote FX pairs move against it once the
    correlation is at least 0.3. Metals quoted in USD need the risk regime to
    agree: weak USD with risk-off is long, strong USD with risk-on is short.
    """
    strong = usd_regime == UsdRegime.STRONG
    weak = usd_regime == UsdRegime.WEAK
    if asset is None:
        return Direction.LONG if strong else Direction.SHORT if weak else Direction.NEUTRAL

    leg = usd_pair_leg(asset)
    if leg is None:
        return Direction.NEUTRAL

    if asset.asset_class == AssetClass.METAL:
        if weak and risk == RiskLabel.RISK_OFF:
            return Direction.LONG
        if strong and risk == RiskLabel.RISK_ON:
            return Direction.SHORT
        return Direction.NEUTRAL

    if leg == "base":
        return Direction.LONG if strong else Direction.SHORT if weak else Direction.NEUTRAL

    corr = corr12m if corr12m is not None else corr3m
    if corr is None or abs(corr) < MIN_CORRELATION:
        return Direction.NEUTRAL
    return Direction.LONG if weak else Direction.SHORT if strong else Direction.NEUTRAL


def determine_confidence(
    bias: Direction,
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    corr12m: float | None,
    corr3m: float | None,
) -> ConfidenceLevel:
    if bias == Direction.NEUTRAL:
        return ConfidenceLevel.LOW
    reference = corr12m if corr12m is not None else corr3m
    strength = abs(reference) if reference is not None else 0.0
    usd_clear = usd_regime != UsdRegime.NEUTRAL
    risk_clear = not _risk_is_neutral(risk)
    if strength >= HIGH_CORRELATION and (usd_clear or risk_clear):
        return ConfidenceLevel.HIGH
    if strength >= MEDIUM_CORRELATION or (usd_clear and risk_clear):
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def determine_environment(
    bias: Direction,
    confidence: ConfidenceLevel,
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    corr12m: float | None,
    corr3m: float | None,
) -> Environment:
    """Trend when the signal is directional, confident and the windows agree; range otherwise."""
    if bias == Direction.NEUTRAL or confidence == ConfidenceLevel.LOW:
        return "range"
    if corr12m is not None and corr3m is not None and abs(corr12m - corr3m) > DIVERGENCE:
        return "range"
    if _risk_is_neutral(risk) and usd_regime == UsdRegime.NEUTRAL:
        return "range"
    return "trend"


def _reading(readings: Sequence[IndicatorReading], key: str) -> IndicatorReading | None:
    return next((r for r in readings if r.key.lower() == key), None)


def plan_reasons(
    asset: AssetMeta | None,
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    corr12m: float | None,
    corr3m: float | None,
    benchmark: str,
    readings: Sequence[IndicatorReading] = (),
    expanded: ExpandedNarrative | None = None,
) -> list[str]:
    reasons: list[str] = []
    if usd_regime == UsdRegime.STRONG:
        reasons.append("USD fuerte según régimen macro")
    elif usd_regime == UsdRegime.WEAK:
        reasons.append("USD débil según régimen macro")
    else:
        reasons.append("USD neutral según régimen macro")

    if corr12m is not None:
        kind = "negativa" if corr12m < 0 else "positiva"
        if abs(corr12m) >= HIGH_CORRELATION:
            reasons.append(f"Correlación 12m con {benchmark} fuertemente {kind} ({corr12m:.2f})")
        elif abs(corr12m) >= MIN_CORRELATION:
            reasons.append(f"Correlación 12m con {benchmark} {kind} moderada ({corr12m:.2f})")
        if corr3m is not None:
            divergence = abs(corr12m - corr3m)
            if divergence > DIVERGENCE:
                reasons.append(f"Divergencia entre correlaciones 12m y 3m ({divergence:.2f})")
            elif divergence < ALIGNED:
                reasons.append("Correlaciones 12m y 3m alineadas")

    if risk == RiskLabel.RISK_ON:
        reasons.append("Régimen Risk ON favorece activos de riesgo")
    elif risk == RiskLabel.RISK_OFF:
        reasons.append("Régimen Risk OFF favorece activos defensivos")

    if expanded is not None and expanded.cycle_reason != "Sin datos suficientes":
        reasons.append(f"Fase de ciclo {expanded.cycle_phase} ({expanded.cycle_reason.lower()})")

    if asset is not None and asset.asset_class == AssetClass.METAL:
        cpi = _reading(readings, "cpi_yoy")
        if cpi is not None and cpi.value is not None and cpi.value > GOLD_CPI_THRESHOLD:
            reasons.append(f"Inflación elevada (CPI: {cpi.value:.2f}%) favorece oro")

    gdp = _reading(readings, "gdp_yoy")
    if gdp is not None:
        trend = classify_trend(gdp.key, gdp.value, gdp.previous)
        if trend == "Empeora":
            reasons.append("Crecimiento desacelerando")
        elif trend == "Mejora":
            reasons.append("Crecimiento acelerando")
    return reasons


def build_asset_plan(
    symbol: str,
    asset: AssetMeta | None,
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    summary: CorrelationSummary | None,
    benchmark: str,
    readings: Sequence[IndicatorReading] = (),
    expanded: ExpandedNarrative | None = None,
) -> TradingAssetPlan:
    corr12m = summary.corr_12m if summary is not None and asset is not None else None
    corr3m = summary.corr_3m if summary is not None and asset is not None else None
    bias = determine_bias(asset, usd_regime, risk, corr12m, corr3m)
    confidence = determine_confidence(bias, usd_regime, risk, corr12m, corr3m)
    return TradingAssetPlan(
        asset=symbol,
        bias=bias,
        confidence=confidence,
        environment=determine_environment(bias, confidence, usd_regime, risk, corr12m, corr3m),
        corr12m=corr12m,
        corr3m=corr3m,
        reasons=plan_reasons(
            asset, usd_regime, risk, corr12m, corr3m, benchmark, readings, expanded
        ),
    )


def build_trading_playbook(
    assets: Sequence[AssetMeta],
    summaries: Mapping[str, CorrelationSummary],
    usd_regime: UsdRegime,
    risk: RiskLabel | None,
    benchmark: str = "DXY",
    readings: Sequence[IndicatorReading] = (),
    expanded: Mapping[str, ExpandedNarrative] | None = None,
) -> TradingPlaybook:
    """Plan the USD benchmark plus every USD-quoted FX pair or metal.

    Assets outside FX and metals, or without a USD leg, have no playbook
    rule and are left out.

    Args:
        assets: Universe assets, in display order
        summaries: Correlation summaries by symbol
        usd_regime: Current USD regime
        risk: Prevailing risk label, None when unknown
        benchmark: USD benchmark symbol, planned first
        readings: Indicator readings used for inflation and growth reasons
        expanded: Expanded narrative per symbol, for the cycle phase reason

    Returns:
        TradingPlaybook with one plan per covered asset
    """
    narratives = expanded or {}
    plans = [
        build_asset_plan(benchmark, None, usd_regime, risk, None, benchmark, readings)
    ]
    for asset in assets:
        if asset.symbol == benchmark or usd_pair_leg(asset) is None:
            continue
        plans.append(
            build_asset_plan(
                asset.symbol,
                asset,
                usd_regime,
                risk,
                summaries.get(asset.symbol),
                benchmark,
                readings,
                narratives.get(asset.symbol),
            )
        )
    logger.debug("Trading playbook built", assets=len(plans), usd_regime=usd_regime.value)
    return TradingPlaybook(usd_direction=usd_regime, risk_label=risk, assets=plans)
