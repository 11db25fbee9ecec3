"""ChainSentry CLI - attack detection and transaction history analysis."""

import typer

from chainsentry.cli_commands import (  # noqa: F401  (registers commands)
    analyze_command,
    config_command,
    history_command,
    patterns_command,
)
from chainsentry.cli_commands.shared import app, console, current_settings
from chainsentry.utils.logging_setup import setup_logging


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Attack-outcome detection and historical transaction analysis."""
    setup_logging(verbose or current_settings().verbose)


@app.command()
def version() -> None:
    """Show the installed ChainSentry version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as pkg_version

    try:
        current_version = pkg_version("chainsentry")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"ChainSentry {current_version}")


def main():
    """Entry point for the CLI."""
    app()
