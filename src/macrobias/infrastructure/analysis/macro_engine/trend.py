"""Indicator trend classification (improving / worsening / stable)."""

from __future__ import annotations

from typing import Literal

TrendClass = Literal["Mejora", "Empeora", "Estable"]

LOWER_IS_BETTER = frozenset(
    {"CPIAUCSL", "CPILFESL", "PCEPI", "PCEPILFE", "PPIACO", "UNRATE", "ICSA",
     "CPI_YOY", "CORECPI_YOY", "PCE_YOY", "COREPCE_YOY", "PPI_YOY", "CLAIMS_4W"}
)
HIGHER_IS_BETTER = frozenset(
    {"GDPC1", "INDPRO", "RSXFS", "PAYEMS", "USPMI", "PMI_SERV",
     "GDP_YOY", "GDP_QOQ", "INDPRO_YOY", "RETAIL_YOY", "PAYEMS_DELTA"}
)

STABLE_THRESHOLD = 0.01


def is_lower_better(indicator_key: str) -> bool:
    # Unknown indicators are read as higher-is-better.
    return indicator_key.upper() in LOWER_IS_BETTER


def classify_trend(
    indicator_key: str, current: float | None, previous: float | None
) -> TrendClass | None:
    """Classify the move from ``previous`` to ``current`` for an indicator.

    A relative change under 1% is Estable. Otherwise the direction is read
    through the indicator's polarity: a CPI drop is Mejora, a GDP drop Empeora.

    Returns:
        Trend class, or None when either value is missing
    """
    if current is None or previous is None:
        return None
    change = current - previous
    if previous != 0:
        relative = abs(change / previous)
    else:
        relative = abs(change)
    if relative < STABLE_THRESHOLD:
        return "Estable"
    improving = change < 0 if is_lower_better(indicator_key) else change > 0
    return "Mejora" if improving else "Empeora"
