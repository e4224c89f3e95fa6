"""Rolling correlation between an asset and a benchmark.

Both series are aligned on the benchmark's dates. An asset value is carried
forward onto a benchmark date only when it is at most ``max_fill_days``
calendar days old; older samples are dropped, never filled.

Methodology:
- Log returns r_t = ln(P_t / P_{t-1}) on the aligned window, so the coefficient
  measures co-movement rather than shared trends in price levels.
- Returns are winsorized at the 1st/99th percentile before the Pearson
  coefficient, which keeps a single bad print from dominating the window.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime

import numpy as np
import pandas as pd  # type: ignore[import-untyped]
import structlog

from macrobias.domain.models.correlation import (
    CorrelationOk,
    CorrelationOutcome,
    CorrelationResult,
    CorrelationWindow,
    InsufficientData,
    Stale,
)
from macrobias.domain.models.observation import AlignedPair, Observation

logger = structlog.get_logger(__name__)

DEFAULT_MAX_FILL_DAYS = 3
DEFAULT_MAX_STALENESS_DAYS = 5
WINSOR_LOWER = 0.01
WINSOR_UPPER = 0.99


def _to_frame(series: Iterable[Observation], column: str) -> pd.DataFrame:
    """Normalize observations: finite values only, unique dates (last wins), sorted."""
    rows = [(o.date, o.value) for o in series if o.value is not None and math.isfinite(o.value)]
    frame = pd.DataFrame(rows, columns=["date", column])
    if frame.empty:
        return frame
    frame["date"] = pd.to_datetime(frame["date"])
    frame = frame.drop_duplicates(subset="date", keep="last")
    return frame.sort_values("date").reset_index(drop=True)


def align_series(
    asset_series: Iterable[Observation],
    benchmark_series: Iterable[Observation],
    max_fill_days: int = DEFAULT_MAX_FILL_DAYS,
) -> pd.DataFrame:
    """Align asset values onto benchmark dates with bounded forward-fill.

    Args:
        asset_series: Asset observations (any order)
        benchmark_series: Benchmark observations (any order)
        max_fill_days: Largest gap in calendar days an asset value may be carried

    Returns:
        DataFrame with ``date``, ``asset`` and ``benchmark`` columns, ascending
    """
    asset = _to_frame(asset_series, "asset")
    benchmark = _to_frame(benchmark_series, "benchmark")
    if asset.empty or benchmark.empty:
        return pd.DataFrame(columns=["date", "asset", "benchmark"])

    # merge_asof tolerance is inclusive: a gap of exactly max_fill_days is filled.
    merged = pd.merge_asof(
        benchmark,
        asset,
        on="date",
        direction="backward",
        tolerance=pd.Timedelta(days=max_fill_days),
    )
    merged = merged.dropna(subset=["asset"])
    return merged[["date", "asset", "benchmark"]].reset_index(drop=True)


def aligned_pairs(frame: pd.DataFrame) -> list[AlignedPair]:
    return [
        AlignedPair(date=row.date.date(), asset_value=row.asset, benchmark_value=row.benchmark)
        for row in frame.itertuples(index=False)
    ]


def _log_returns(values: pd.Series) -> pd.Series:
    return np.log(values / values.shift(1))


def _winsorize(values: pd.Series) -> pd.Series:
    lower = values.quantile(WINSOR_LOWER)
    upper = values.quantile(WINSOR_UPPER)
    return values.clip(lower=lower, upper=upper)


def calculate_correlation(
    asset_series: Sequence[Observation],
    benchmark_series: Sequence[Observation],
    window_size: int,
    min_obs: int,
    *,
    asof: date | None = None,
    max_fill_days: int = DEFAULT_MAX_FILL_DAYS,
    max_staleness_days: int = DEFAULT_MAX_STALENESS_DAYS,
) -> CorrelationOutcome:
    """Pearson correlation of log returns over the last ``window_size`` aligned samples.

    Args:
        asset_series: Asset price observations
        benchmark_series: Benchmark observations (e.g. USD index)
        window_size: Nominal number of aligned samples (252 for 12m, 63 for 3m)
        min_obs: Minimum samples required, checked on the window and on the returns
        asof: Reference date for the staleness guard (defaults to today, UTC)
        max_fill_days: Forward-fill tolerance in calendar days
        max_staleness_days: Largest allowed age of the most recent aligned date

    Returns:
        CorrelationOk, InsufficientData or Stale; never raises for missing data
    """
    if window_size < 2 or min_obs < 1:
        raise ValueError("window_size must be >= 2 and min_obs >= 1")

    reference = asof or datetime.now(UTC).date()

    if not asset_series or not benchmark_series:
        return InsufficientData(n_obs=0, reason="no_data")

    aligned = align_series(asset_series, benchmark_series, max_fill_days=max_fill_days)
    if aligned.empty:
        return InsufficientData(n_obs=0, reason="no_overlap")

    last_date = aligned["date"].iloc[-1].date()
    if last_date > reference:
        return Stale(last_date=last_date, reason="future")
    if (reference - last_date).days > max_staleness_days:
        return Stale(last_date=last_date, reason="stale")

    window = aligned.tail(window_size)
    if len(window) < min_obs:
        return InsufficientData(n_obs=len(window), reason="too_few_points")

    returns = pd.DataFrame(
        {
            "asset": _log_returns(window["asset"]),
            "benchmark": _log_returns(window["benchmark"]),
        }
    )
    returns = returns.replace([np.inf, -np.inf], np.nan).dropna()
    # n returns need n + 1 prices; n_obs counts the aligned samples behind them.
    n_obs = len(returns) + 1
    if n_obs < min_obs or len(returns) < 2:
        return InsufficientData(n_obs=n_obs, reason="too_few_points")

    asset_returns = _winsorize(returns["asset"])
    benchmark_returns = _winsorize(returns["benchmark"])
    if asset_returns.std() == 0 or benchmark_returns.std() == 0:
        return InsufficientData(n_obs=n_obs, reason="zero_variance")

    value = float(asset_returns.corr(benchmark_returns))
    if not math.isfinite(value):
        return InsufficientData(n_obs=n_obs, reason="zero_variance")

    value = max(-1.0, min(1.0, round(value, 6)))
    return CorrelationOk(value=value, n_obs=n_obs, last_date=last_date)


def correlation_result(
    symbol: str,
    benchmark: str,
    window: CorrelationWindow,
    outcome: CorrelationOutcome,
    asof: date,
) -> CorrelationResult:
    """Convert an outcome into the persisted row; degraded outcomes keep a null value."""
    if isinstance(outcome, CorrelationOk):
        return CorrelationResult(
            symbol=symbol,
            benchmark=benchmark,
            window=window,
            value=outcome.value,
            n_obs=outcome.n_obs,
            asof=asof,
        )
    if isinstance(outcome, InsufficientData):
        return CorrelationResult(
            symbol=symbol,
            benchmark=benchmark,
            window=window,
            value=None,
            n_obs=outcome.n_obs,
            asof=asof,
            reason=outcome.reason,
        )
    return CorrelationResult(
        symbol=symbol,
        benchmark=benchmark,
        window=window,
        value=None,
        n_obs=0,
        asof=asof,
        reason=f"{outcome.reason}:{outcome.last_date.isoformat()}",
    )


def compute_correlation_windows(
    symbol: str,
    benchmark: str,
    asset_series: Sequence[Observation],
    benchmark_series: Sequence[Observation],
    *,
    windows: Sequence[CorrelationWindow] = tuple(CorrelationWindow),
    asof: date | None = None,
    max_fill_days: int = DEFAULT_MAX_FILL_DAYS,
    max_staleness_days: int = DEFAULT_MAX_STALENESS_DAYS,
) -> list[CorrelationResult]:
    """Compute one CorrelationResult per window for a symbol/benchmark pair."""
    reference = asof or datetime.now(UTC).date()
    results: list[CorrelationResult] = []
    for window in windows:
        outcome = calculate_correlation(
            asset_series,
            benchmark_series,
            window.size,
            window.min_obs,
            asof=reference,
            max_fill_days=max_fill_days,
            max_staleness_days=max_staleness_days,
        )
        if not isinstance(outcome, CorrelationOk):
            logger.debug(
                "Correlation unavailable",
                symbol=symbol,
                benchmark=benchmark,
                window=window.value,
                outcome=outcome.kind,
            )
        results.append(correlation_result(symbol, benchmark, window, outcome, reference))
    return results
