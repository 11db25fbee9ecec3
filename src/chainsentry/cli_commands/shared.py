"""Shared CLI app objects and helpers."""

from pathlib import Path

import typer
from rich.console import Console

from chainsentry.config import Settings, get_db_path, load_settings

app = typer.Typer(
    name="chainsentry",
    help="Attack-outcome detection and historical transaction analysis for on-chain programs",
    no_args_is_help=True,
)
console = Console()


def current_settings() -> Settings:
    """Resolve settings for the current command."""
    return load_settings()


def results_db_path(settings: Settings) -> Path:
    return get_db_path(settings)
