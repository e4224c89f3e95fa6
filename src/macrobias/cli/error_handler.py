"""Uniform error reporting for CLI commands."""

from __future__ import annotations

from typing import Any, NoReturn

import structlog
import typer
from rich.console import Console

from macrobias.domain.exceptions import (
    DataSourceError,
    InvalidConfigurationError,
    MacroBiasError,
)

logger = structlog.get_logger(__name__)
error_console = Console(stderr=True)


def handle_cli_error(error: Exception, context: dict[str, Any] | None = None) -> NoReturn:
    """Print a readable error, log it with context and exit with code 1."""
    context = context or {}
    if isinstance(error, InvalidConfigurationError):
        title = "Invalid configuration"
    elif isinstance(error, DataSourceError):
        title = f"Data source '{error.source}' unavailable"
    elif isinstance(error, MacroBiasError):
        title = "Engine error"
    else:
        title = "Unexpected error"

    logger.error(title, error=str(error), error_type=type(error).__name__, **context)
    error_console.print(f"✗ {title}", style="bold red")
    error_console.print(f"  {error}")
    raise typer.Exit(code=1)
