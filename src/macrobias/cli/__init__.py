"""Command line interface."""

import typer

from macrobias.cli.engine import register
from macrobias.infrastructure.config import get_settings
from macrobias.infrastructure.logging_config import configure_logging

app = typer.Typer(help="Macro bias & correlation engine", no_args_is_help=True)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging before any command runs."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, json_logs=settings.log_json)


register(app)

__all__ = ["app"]
