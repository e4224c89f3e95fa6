"""Engine CLI commands: correlations, tactical board, playbook, radar, signals and checks."""

from __future__ import annotations

from datetime import datetime

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from macrobias.application.use_cases import (
    BuildTacticalBoardRequest,
    BuildTradingPlaybookRequest,
    EvaluateSignalsRequest,
    ExposureOverlapRequest,
    GetLatestCorrelationsRequest,
    HistoricalConfidenceRequest,
    InspectAlignmentRequest,
    OpportunitiesRadarRequest,
    RefreshCorrelationsRequest,
    RunQualityChecksRequest,
)
from macrobias.cli.error_handler import handle_cli_error
from macrobias.cli.utils import async_command, format_corr
from macrobias.domain.models.bias import Direction
from macrobias.domain.models.correlation import CorrelationOk, CorrelationWindow
from macrobias.domain.models.exposure import TradePosition
from macrobias.domain.models.quality import QualityLevel
from macrobias.domain.models.signals import HistoricalConfidence
from macrobias.domain.models.tactical import TacticalAction
from macrobias.infrastructure.containers import Container, get_container

console = Console()

_ACTION_STYLES = {
    TacticalAction.BUY: "green",
    TacticalAction.SELL: "red",
    TacticalAction.RANGE: "yellow",
}
_LEVEL_STYLES = {QualityLevel.PASS: "green", QualityLevel.WARN: "yellow", QualityLevel.FAIL: "red"}
_DIRECTION_STYLES = {Direction.LONG: "green", Direction.SHORT: "red", Direction.NEUTRAL: "yellow"}


def _container() -> Container:
    try:
        return get_container()
    except Exception as e:
        handle_cli_error(e, context={"stage": "startup"})


def _symbols(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [s.strip().upper() for s in value.split(",") if s.strip()]


def _positions(value: str) -> list[TradePosition]:
    """Parse ``EURUSD:1,USDJPY:-0.5``; a pair without a size is a 1 lot long."""
    positions: list[TradePosition] = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        pair, _, size = item.partition(":")
        try:
            positions.append(TradePosition(pair=pair, size=float(size) if size else 1.0))
        except ValueError as e:
            raise typer.BadParameter(f"invalid position '{item}'") from e
    return positions


def register(app: typer.Typer) -> None:
    app.command("correlations")(refresh_correlations)
    app.command("stored")(stored_correlations)
    app.command("align")(inspect_alignment)
    app.command("board")(tactical_board)
    app.command("playbook")(trading_playbook)
    app.command("exposure")(exposure_overlap)
    app.command("radar")(opportunities_radar)
    app.command("check")(quality_check)
    app.command("evaluate")(evaluate_signals)
    app.command("confidence")(historical_confidence)


@async_command
async def refresh_correlations(
    symbols: str | None = typer.Option(
        None, "--symbols", "-s", help="Comma-separated symbols (default: whole universe)"
    ),
    asof: datetime | None = typer.Option(
        None, "--asof", formats=["%Y-%m-%d"], help="Evaluation date (default: today)"
    ),
) -> None:
    """Recompute 3m/6m/12m/24m correlations against the USD benchmark and store them."""
    container = _container()
    use_case = container.refresh_correlations_use_case()
    request = RefreshCorrelationsRequest(
        symbols=_symbols(symbols),
        asof=asof.date() if asof else None,
    )
    try:
        with console.status("[bold blue]Computing correlations..."):
            response = await use_case.execute(request)
    except Exception as e:
        handle_cli_error(e, context={"command": "correlations"})

    table = Table(title=f"Correlations vs {container.settings().benchmark_symbol}")
    table.add_column("Symbol", style="cyan")
    for window in CorrelationWindow:
        table.add_column(window.value, justify="right")

    by_symbol: dict[str, dict[CorrelationWindow, str]] = {}
    for result in response.results:
        cell = format_corr(result.value)
        if result.value is None:
            cell = f"[dim]{result.reason or 'n/a'}[/dim]"
        by_symbol.setdefault(result.symbol, {})[result.window] = cell
    for symbol, cells in by_symbol.items():
        table.add_row(symbol, *(cells.get(w, "-") for w in CorrelationWindow))
    console.print(table)

    console.print(f"✓ {response.summary.rows_written} rows stored", style="bold green")
    for symbol, error in response.summary.skipped.items():
        console.print(f"  ✗ {symbol} skipped: {error}", style="red")


@async_command
async def tactical_board(
    symbols: str | None = typer.Option(None, "--symbols", "-s", help="Comma-separated symbols"),
    narrative: bool = typer.Option(False, "--narrative", "-n", help="Print each narrative"),
    record: bool = typer.Option(False, "--record", help="Store directional rows as signals"),
) -> None:
    """Show the tactical board: trend, action, confidence and motivo per pair."""
    container = _container()
    use_case = container.build_tactical_board_use_case()
    try:
        response = await use_case.execute(
            BuildTacticalBoardRequest(symbols=_symbols(symbols), record_signals=record)
        )
    except Exception as e:
        handle_cli_error(e, context={"command": "board"})

    console.print(f"USD regime: [bold]{response.usd_regime.value}[/bold]")
    table = Table(title="Tactical board")
    table.add_column("Par", style="cyan")
    table.add_column("Tendencia")
    table.add_column("Acción")
    table.add_column("Confianza")
    table.add_column("Corr 12m", justify="right")
    table.add_column("Corr 3m", justify="right")
    table.add_column("Motivo")
    for row in response.rows:
        style = _ACTION_STYLES[row.action]
        table.add_row(
            row.pair,
            row.trend.value,
            f"[{style}]{row.action.value}[/{style}]",
            row.confidence.value,
            format_corr(row.corr12m),
            format_corr(row.corr3m),
            row.motivo,
        )
    console.print(table)

    if narrative:
        for analysis in response.analyses:
            expanded = analysis.expanded
            text = (
                f"{analysis.narrative.text()}\n\n"
                f"Política monetaria: {expanded.monetary_stance} ({expanded.monetary_reason})\n"
                f"Ciclo: {expanded.cycle_phase} ({expanded.cycle_reason})"
            )
            console.print(Panel(text, title=analysis.asset.symbol, border_style="blue"))
    for symbol, error in response.summary.skipped.items():
        console.print(f"  ✗ {symbol} skipped: {error}", style="red")


@async_command
async def opportunities_radar(
    top: int = typer.Option(5, "--top", "-t", min=1, help="Number of opportunities"),
) -> None:
    """Rank the best actionable pairs and report correlation reliability."""
    container = _container()
    use_case = container.opportunities_radar_use_case()
    try:
        response = await use_case.execute(OpportunitiesRadarRequest(top_n=top))
    except Exception as e:
        handle_cli_error(e, context={"command": "radar"})

    table = Table(title="Opportunities radar")
    table.add_column("#", justify="right")
    table.add_column("Par", style="cyan")
    table.add_column("Acción")
    table.add_column("Confianza")
    table.add_column("Score", justify="right")
    table.add_column("Razones")
    for rank, item in enumerate(response.opportunities, start=1):
        table.add_row(
            str(rank), item.pair, item.action.value, item.confidence.value, str(item.score), item.reasoning
        )
    console.print(table)

    reliability = response.reliability
    console.print(f"Reliability: [bold]{reliability.status}[/bold] (score {reliability.score})")
    for reason in reliability.reasons:
        console.print(f"  • {reason}")


@async_command
async def quality_check(
    symbols: str | None = typer.Option(None, "--symbols", "-s", help="Comma-separated symbols"),
    show_passed: bool = typer.Option(False, "--show-passed", help="Also list passing checks"),
) -> None:
    """Run the quality invariants; exits with code 1 when any check fails."""
    container = _container()
    use_case = container.run_quality_checks_use_case()
    try:
        response = await use_case.execute(RunQualityChecksRequest(symbols=_symbols(symbols)))
    except Exception as e:
        handle_cli_error(e, context={"command": "check"})

    report = response.report
    table = Table(title="Quality checks")
    table.add_column("Level")
    table.add_column("Check", style="cyan")
    table.add_column("Message")
    for result in report.results:
        if result.level == QualityLevel.PASS and not show_passed:
            continue
        style = _LEVEL_STYLES[result.level]
        table.add_row(f"[{style}]{result.level.value}[/{style}]", result.name, result.message)
    console.print(table)
    console.print(f"PASS {report.passed} · WARN {report.warned} · FAIL {report.failed}")
    if not report.ok:
        raise typer.Exit(code=1)


@async_command
async def historical_confidence(
    symbols: str = typer.Argument(..., help="Comma-separated symbols"),
) -> None:
    """Success rate of past directional signals per symbol."""
    container = _container()
    use_case = container.historical_confidence_use_case()
    response = await use_case.execute(
        HistoricalConfidenceRequest(symbols=_symbols(symbols) or [])
    )
    for result in response.results:
        if isinstance(result, HistoricalConfidence):
            console.print(
                f"{result.symbol}: {result.confidence_pct}% "
                f"({result.successful_signals}/{result.total_signals} signals)"
            )
        else:
            console.print(
                f"{result.symbol}: insufficient history "
                f"({result.total_signals} of {result.required} signals)",
                style="dim",
            )


@async_command
async def stored_correlations(
    symbols: str = typer.Argument(..., help="Comma-separated symbols"),
    asof: datetime | None = typer.Option(
        None, "--asof", formats=["%Y-%m-%d"], help="Rows computed on this date (default: latest)"
    ),
) -> None:
    """Show stored correlation rows without recomputing them."""
    container = _container()
    use_case = container.get_latest_correlations_use_case()
    try:
        response = await use_case.execute(
            GetLatestCorrelationsRequest(
                symbols=_symbols(symbols) or [],
                windows=list(CorrelationWindow),
                asof=asof.date() if asof else None,
            )
        )
    except Exception as e:
        handle_cli_error(e, context={"command": "stored"})

    table = Table(title="Stored correlations")
    table.add_column("Symbol", style="cyan")
    table.add_column("Window")
    table.add_column("Value", justify="right")
    table.add_column("Obs", justify="right")
    table.add_column("As of")
    table.add_column("Reason", style="dim")
    for row in response.results:
        table.add_row(
            row.symbol,
            row.window.value,
            format_corr(row.value),
            str(row.n_obs),
            row.asof.isoformat(),
            row.reason or "",
        )
    console.print(table)
    if not response.results:
        console.print("No stored rows", style="dim")


@async_command
async def inspect_alignment(
    symbol: str = typer.Argument(..., help="Asset symbol, e.g. EURUSD"),
    window: str = typer.Option("12m", "--window", "-w", help="Correlation window (3m, 6m, 12m, 24m)"),
    tail: int = typer.Option(10, "--tail", min=1, help="Aligned samples to show"),
) -> None:
    """Show the last aligned asset/benchmark samples and the resulting correlation."""
    container = _container()
    use_case = container.inspect_alignment_use_case()
    try:
        request = InspectAlignmentRequest(
            symbol=symbol, window=CorrelationWindow.parse(window), tail=tail
        )
        response = await use_case.execute(request)
    except Exception as e:
        handle_cli_error(e, context={"command": "align", "symbol": symbol})

    console.print(
        f"{response.symbol} vs {response.benchmark}: "
        f"{response.asset_points} asset points, {response.benchmark_points} benchmark points, "
        f"{response.aligned_points} aligned"
    )
    table = Table(title=f"Last {len(response.samples)} aligned samples")
    table.add_column("Date")
    table.add_column(response.symbol, justify="right")
    table.add_column(response.benchmark, justify="right")
    for sample in response.samples:
        table.add_row(
            sample.date.isoformat(), f"{sample.asset_value:.5f}", f"{sample.benchmark_value:.5f}"
        )
    console.print(table)

    outcome = response.outcome
    if isinstance(outcome, CorrelationOk):
        console.print(
            f"Correlation {response.window.value}: [bold]{format_corr(outcome.value)}[/bold] "
            f"({outcome.n_obs} obs)"
        )
    else:
        console.print(
            f"Correlation {response.window.value}: {outcome.kind} ({outcome.reason})", style="yellow"
        )


@async_command
async def trading_playbook(
    symbols: str | None = typer.Option(None, "--symbols", "-s", help="Comma-separated symbols"),
    reasons: bool = typer.Option(False, "--reasons", "-r", help="List the reasons behind each plan"),
) -> None:
    """Long/short plan for the USD benchmark and every USD pair."""
    container = _container()
    use_case = container.trading_playbook_use_case()
    try:
        response = await use_case.execute(BuildTradingPlaybookRequest(symbols=_symbols(symbols)))
    except Exception as e:
        handle_cli_error(e, context={"command": "playbook"})

    playbook = response.playbook
    risk = playbook.risk_label.value if playbook.risk_label else "n/a"
    console.print(f"USD: [bold]{playbook.usd_direction.value}[/bold] · Risk: [bold]{risk}[/bold]")
    table = Table(title="Trading playbook")
    table.add_column("Activo", style="cyan")
    table.add_column("Sesgo")
    table.add_column("Confianza")
    table.add_column("Entorno")
    table.add_column("Corr 12m", justify="right")
    table.add_column("Corr 3m", justify="right")
    for plan in playbook.assets:
        style = _DIRECTION_STYLES[plan.bias]
        table.add_row(
            plan.asset,
            f"[{style}]{plan.bias.value}[/{style}]",
            plan.confidence.value,
            plan.environment,
            format_corr(plan.corr12m),
            format_corr(plan.corr3m),
        )
    console.print(table)

    if reasons:
        for plan in playbook.assets:
            console.print(f"[cyan]{plan.asset}[/cyan]")
            for reason in plan.reasons:
                console.print(f"  • {reason}")


@async_command
async def exposure_overlap(
    positions: str = typer.Argument(..., help="Trades as PAIR:SIZE, e.g. EURUSD:1,USDJPY:-1"),
) -> None:
    """How much of a set of trades is the same bet on the USD."""
    container = _container()
    use_case = container.exposure_overlap_use_case()
    request = ExposureOverlapRequest(positions=_positions(positions))
    try:
        response = await use_case.execute(request)
    except Exception as e:
        handle_cli_error(e, context={"command": "exposure"})

    overlap = response.overlap
    table = Table(title="USD exposure")
    table.add_column("Lado", style="cyan")
    table.add_column("%", justify="right")
    table.add_column("Trades")
    for side in (overlap.usd_strong, overlap.usd_weak, overlap.neutral):
        table.add_row(side.label, str(side.percentage), ", ".join(side.trades))
    console.print(table)
    if overlap.alert:
        console.print(f"⚠ {overlap.alert}", style="bold yellow")


@async_command
async def evaluate_signals(
    asof: datetime | None = typer.Option(
        None, "--asof", formats=["%Y-%m-%d"], help="Evaluation date (default: today)"
    ),
    horizon: int | None = typer.Option(
        None, "--horizon", min=1, help="Days between entry and exit (default: configured)"
    ),
) -> None:
    """Fill in the realized return of recorded signals whose horizon has elapsed."""
    container = _container()
    use_case = container.evaluate_signals_use_case()
    try:
        response = await use_case.execute(
            EvaluateSignalsRequest(asof=asof.date() if asof else None, horizon_days=horizon)
        )
    except Exception as e:
        handle_cli_error(e, context={"command": "evaluate"})

    console.print(
        f"✓ {response.evaluated} signals evaluated, {response.pending} still pending",
        style="bold green",
    )
    for symbol, error in response.summary.skipped.items():
        console.print(f"  ✗ {symbol} skipped: {error}", style="red")
