"""Macro bias and correlation engine.

Pure, deterministic functions: given the same inputs they return the same
outputs and never touch the network or storage.
"""

from macrobias.infrastructure.analysis.macro_engine.bias import compute_bias
from macrobias.infrastructure.analysis.macro_engine.correlation import (
    calculate_correlation,
    compute_correlation_windows,
    correlation_result,
)
from macrobias.infrastructure.analysis.macro_engine.correlation_state import (
    summarize_correlations,
)
from macrobias.infrastructure.analysis.macro_engine.exposure import calculate_exposure_overlap
from macrobias.infrastructure.analysis.macro_engine.invariants import run_quality_checks
from macrobias.infrastructure.analysis.macro_engine.narrative import (
    build_expanded_narrative,
    build_narrative,
)
from macrobias.infrastructure.analysis.macro_engine.opportunities import (
    assess_reliability,
    calculate_historical_confidence,
    calculate_opportunities_radar,
    score_historical_signals,
)
from macrobias.infrastructure.analysis.macro_engine.playbook import build_trading_playbook
from macrobias.infrastructure.analysis.macro_engine.tactical import (
    build_tactical_board,
    build_tactical_row,
)
from macrobias.infrastructure.analysis.macro_engine.trend import classify_trend

__all__ = [
    "calculate_correlation",
    "compute_correlation_windows",
    "correlation_result",
    "summarize_correlations",
    "compute_bias",
    "build_tactical_row",
    "build_tactical_board",
    "build_narrative",
    "build_expanded_narrative",
    "run_quality_checks",
    "score_historical_signals",
    "calculate_historical_confidence",
    "calculate_opportunities_radar",
    "assess_reliability",
    "classify_trend",
    "calculate_exposure_overlap",
    "build_trading_playbook",
]
