"""``chainsentry patterns`` command: the vulnerability pattern catalog."""

import typer
from rich.table import Table

from chainsentry.modules.detection import VULNERABILITY_PATTERNS, match_indicators

from .shared import app, console


@app.command()
def patterns(
    match: str | None = typer.Option(
        None, "--match", help="Only show patterns whose indicators occur in this text"
    ),
) -> None:
    """Show known vulnerability patterns and their indicators."""
    entries = match_indicators(match) if match is not None else list(VULNERABILITY_PATTERNS)
    if not entries:
        console.print("[dim]No patterns matched.[/dim]")
        return

    table = Table(title="Vulnerability Patterns")
    table.add_column("Pattern")
    table.add_column("Severity")
    table.add_column("Category")
    table.add_column("Indicators")
    for entry in entries:
        table.add_row(entry.pattern, entry.severity, entry.category, ", ".join(entry.indicators))
    console.print(table)
