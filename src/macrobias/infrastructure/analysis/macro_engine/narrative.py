"""Template-based Spanish narrative for a macro bias."""

from __future__ import annotations

import structlog

from macrobias.domain.models.asset import AssetMeta
from macrobias.domain.models.bias import (
    BiasDriver,
    BiasInputs,
    Direction,
    DriverSign,
    ExpandedNarrative,
    FactorKey,
    MacroBias,
)
from macrobias.domain.models.tactical import ConfidenceLevel, NarrativeOutput
from macrobias.infrastructure.analysis.macro_engine.bias import factor_multiplier
from macrobias.infrastructure.analysis.macro_engine.tactical import bucket_confidence

logger = structlog.get_logger(__name__)

MIN_BULLETS = 3
MAX_BULLETS = 5
PRIMARY_CONTRIBUTION = 5.0

DIRECTION_ADJECTIVES: dict[Direction, str] = {
    Direction.LONG: "alcista",
    Direction.SHORT: "bajista",
    Direction.NEUTRAL: "neutral",
}

HEADLINE_TEMPLATES: dict[Direction, str] = {
    Direction.LONG: "Sesgo macro alcista para {symbol} (score {score})",
    Direction.SHORT: "Sesgo macro bajista para {symbol} (score {score})",
    Direction.NEUTRAL: "Sesgo macro neutral para {symbol} (score {score}), sin dirección clara",
}

DRIVER_TEMPLATES: dict[FactorKey, dict[DriverSign, str]] = {
    FactorKey.RISK_REGIME: {
        DriverSign.POSITIVE: "El régimen {regime} favorece a {asset_side} en {symbol}.",
        DriverSign.NEGATIVE: "El régimen {regime} pesa sobre {symbol} y favorece a {asset_side}.",
        DriverSign.NEUTRAL: "El régimen de riesgo ({regime}) apenas influye en {symbol}.",
    },
    FactorKey.USD_BIAS: {
        DriverSign.POSITIVE: "Un USD {usd_dir} apoya a {asset_side} en {symbol}.",
        DriverSign.NEGATIVE: "Un USD {usd_dir} penaliza a {symbol}; ventaja para {asset_side}.",
        DriverSign.NEUTRAL: "El USD {usd_dir} no marca dirección para {symbol}.",
    },
    FactorKey.INFLATION_MOMENTUM: {
        DriverSign.POSITIVE: "La inflación {trend} juega a favor de {asset_side}.",
        DriverSign.NEGATIVE: "La inflación {trend} resta soporte a {symbol}.",
        DriverSign.NEUTRAL: "La inflación {trend} tiene efecto limitado sobre {symbol}.",
    },
    FactorKey.GROWTH_MOMENTUM: {
        DriverSign.POSITIVE: "El crecimiento {trend} respalda a {asset_side} en {symbol}.",
        DriverSign.NEGATIVE: "El crecimiento {trend} lastra a {symbol}.",
        DriverSign.NEUTRAL: "El crecimiento {trend} no es determinante para {symbol}.",
    },
    FactorKey.EXTERNAL_BALANCE: {
        DriverSign.POSITIVE: "La balanza externa {trend} suma a favor de {asset_side}.",
        DriverSign.NEGATIVE: "La balanza externa {trend} resta apoyo a {symbol}.",
        DriverSign.NEUTRAL: "La balanza externa {trend} es neutral para {symbol}.",
    },
    FactorKey.RATES_CONTEXT: {
        DriverSign.POSITIVE: "El contexto de tipos ({trend}) favorece a {asset_side}.",
        DriverSign.NEGATIVE: "El contexto de tipos ({trend}) penaliza a {symbol}.",
        DriverSign.NEUTRAL: "El contexto de tipos ({trend}) no altera el sesgo de {symbol}.",
    },
}

FILLER_BULLETS = (
    "Cobertura limitada: {used} de {total} factores macro con datos.",
    "Sin más drivers con datos suficientes para {symbol}; conviene operar con cautela.",
    "Revisar el sesgo de {symbol} cuando se actualicen los datos macro pendientes.",
)

_RAW_TRENDS: dict[FactorKey, tuple[str, str, str]] = {
    # (rising, falling, flat) wording of the raw factor reading
    FactorKey.RISK_REGIME: ("Risk ON", "Risk OFF", "Neutral"),
    FactorKey.USD_BIAS: ("fuerte", "débil", "neutral"),
    FactorKey.INFLATION_MOMENTUM: ("acelerando", "desacelerando", "estable"),
    FactorKey.GROWTH_MOMENTUM: ("acelerando", "desacelerando", "estable"),
    FactorKey.EXTERNAL_BALANCE: ("mejorando", "deteriorándose", "estable"),
    FactorKey.RATES_CONTEXT: ("restrictivo", "acomodaticio", "neutral"),
}

_CONFIDENCE_WORDS = {
    ConfidenceLevel.HIGH: "alta",
    ConfidenceLevel.MEDIUM: "media",
    ConfidenceLevel.LOW: "baja",
}


def _safe(value: object) -> str:
    return str(value).replace("{", "").replace("}", "")


def _render(template: str, context: dict[str, str]) -> str:
    return template.format_map(context).strip()


def _raw_direction(driver: BiasDriver, asset: AssetMeta) -> int:
    """Sign of the raw factor reading behind a translated driver value."""
    multiplier = factor_multiplier(driver.key, asset)
    if multiplier == 0 or driver.value == 0:
        return 0
    return 1 if driver.value / multiplier > 0 else -1


def _driver_context(driver: BiasDriver, bias: MacroBias, asset: AssetMeta) -> dict[str, str]:
    rising, falling, flat = _RAW_TRENDS[driver.key]
    direction = _raw_direction(driver, asset)
    trend = rising if direction > 0 else falling if direction < 0 else flat
    if driver.sign == DriverSign.POSITIVE:
        side, opposite = "los largos", "los cortos"
    elif driver.sign == DriverSign.NEGATIVE:
        side, opposite = "los cortos", "los largos"
    else:
        side, opposite = "el mercado", "el otro lado"
    return {
        "symbol": _safe(asset.symbol),
        "score": f"{bias.score:+.0f}",
        "asset_side": side,
        "asset_side_opposite": opposite,
        "regime": trend,
        "usd_dir": trend,
        "trend": trend,
    }


def _driver_bullet(driver: BiasDriver, bias: MacroBias, asset: AssetMeta) -> str | None:
    template = DRIVER_TEMPLATES[driver.key][driver.sign]
    try:
        bullet = _render(template, _driver_context(driver, bias, asset))
    except KeyError as e:
        logger.warning("Narrative template missing context", key=driver.key.value, missing=str(e))
        return None
    return bullet or None


def _coherence_word(coherence: float) -> str:
    if coherence >= 0.75:
        return "alta"
    if coherence >= 0.45:
        return "media"
    return "baja"


def confidence_note(bias: MacroBias) -> str:
    """Prose confidence note; its bucket word follows the tactical confidence thresholds."""
    word = _CONFIDENCE_WORDS[bucket_confidence(bias.confidence)]
    if bias.meta.drivers_used == 0:
        return f"Confianza {word} ({bias.confidence:.2f}): sin drivers con datos suficientes."
    return (
        f"Confianza {word} ({bias.confidence:.2f}): coherencia "
        f"{_coherence_word(bias.meta.coherence)} y cobertura "
        f"{bias.meta.drivers_used} de {bias.meta.drivers_total} drivers."
    )


def build_narrative(bias: MacroBias, asset: AssetMeta) -> NarrativeOutput:
    """Render headline, bullets and confidence note for a bias.

    Drivers with data are taken by absolute contribution, the ones moving the
    score by at least 5 points first, topped up to three and capped at five.
    Filler bullets cover assets with fewer than three usable drivers.
    """
    headline = _render(
        HEADLINE_TEMPLATES[bias.direction],
        {"symbol": _safe(asset.symbol), "score": f"{bias.score:+.0f}"},
    )

    ranked = sorted(
        (d for d in bias.drivers if d.weight > 0),
        key=lambda d: abs(d.contribution),
        reverse=True,
    )
    primary = [d for d in ranked if abs(d.contribution) >= PRIMARY_CONTRIBUTION]
    secondary = [d for d in ranked if abs(d.contribution) < PRIMARY_CONTRIBUTION]

    bullets: list[str] = []
    for drivers, limit in ((primary, MAX_BULLETS), (secondary, MIN_BULLETS)):
        for driver in drivers:
            if len(bullets) >= limit:
                break
            bullet = _driver_bullet(driver, bias, asset)
            if bullet and bullet not in bullets:
                bullets.append(bullet)

    filler_context = {
        "symbol": _safe(asset.symbol),
        "used": str(bias.meta.drivers_used),
        "total": str(bias.meta.drivers_total),
    }
    for filler in FILLER_BULLETS:
        if len(bullets) >= MIN_BULLETS:
            break
        bullets.append(_render(filler, filler_context))

    return NarrativeOutput(
        headline=headline,
        bullets=bullets,
        confidence_note=confidence_note(bias),
    )


def build_expanded_narrative(inputs: BiasInputs) -> ExpandedNarrative:
    """Monetary stance and cycle phase implied by inflation and growth momentum."""
    inflation = inputs.inflation_momentum
    growth = inputs.growth_momentum
    if inflation is None or growth is None:
        return ExpandedNarrative(
            monetary_stance="Neutral",
            monetary_reason="Sin datos suficientes",
            cycle_phase="Desaceleración",
            cycle_reason="Sin datos suficientes",
        )

    if inflation > 0.2 and growth > 0.1:
        stance = ("Hawkish", "Inflación acelerando y crecimiento sólido sugieren postura restrictiva")
    elif inflation < -0.2 and growth < -0.1:
        stance = ("Dovish", "Inflación desacelerando y crecimiento débil sugieren postura acomodaticia")
    else:
        stance = ("Neutral", "Señales mixtas entre inflación y crecimiento")

    if growth > 0.2 and inflation > 0:
        phase = ("Expansión", "Crecimiento acelerando con inflación presente")
    elif growth < -0.2 and inflation < 0:
        phase = ("Contracción", "Crecimiento e inflación desacelerando")
    elif growth > 0 and inflation < 0:
        phase = ("Recuperación", "Crecimiento positivo con inflación controlada")
    else:
        phase = ("Desaceleración", "Crecimiento moderado o negativo")

    return ExpandedNarrative(
        monetary_stance=stance[0],
        monetary_reason=stance[1],
        cycle_phase=phase[0],
        cycle_reason=phase[1],
    )
