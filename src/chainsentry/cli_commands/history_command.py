"""``chainsentry history``, ``compare`` and ``events`` commands."""

import typer
from rich.markdown import Markdown
from rich.table import Table

from chainsentry.config import Settings
from chainsentry.modules.chain import ChainRPCError, SolanaRPCClient, TransactionAnalyzer
from chainsentry.modules.history import (
    HistoricalAnalyzer,
    HistoricalReport,
    PeriodComparison,
    render_historical_report,
)
from chainsentry.modules.storage import ResultStore
from chainsentry.utils.async_utils import safe_async_run

from .shared import app, console, current_settings, results_db_path


async def _run_history(settings: Settings, rpc_url: str, program: str, hours: float):
    async with SolanaRPCClient(rpc_url) as rpc:
        analyzer = HistoricalAnalyzer(rpc, TransactionAnalyzer(fetcher=rpc), settings.history)
        return await analyzer.analyze_program(program, hours)


async def _run_compare(
    settings: Settings, rpc_url: str, program: str, earlier: float, recent: float
):
    async with SolanaRPCClient(rpc_url) as rpc:
        analyzer = HistoricalAnalyzer(rpc, TransactionAnalyzer(fetcher=rpc), settings.history)
        return await analyzer.compare_periods(program, earlier, recent)


@app.command()
def history(
    program: str = typer.Argument(..., help="Program address to analyze"),
    hours: float = typer.Option(24.0, "--hours", help="Hours of history to analyze"),
    rpc_url: str | None = typer.Option(None, "--rpc-url", help="Override the RPC endpoint"),
    save: bool = typer.Option(False, "--save", help="Store attack events in the results DB"),
) -> None:
    """Analyze a program's recent transaction history."""
    settings = current_settings()
    url = rpc_url or settings.rpc_url
    console.print(f"[blue]Analyzing {hours:g}h of history for {program} via {url}...[/blue]")

    try:
        report: HistoricalReport = safe_async_run(_run_history(settings, url, program, hours))
    except ChainRPCError as e:
        console.print(f"[red]History analysis failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(Markdown(render_historical_report(report)))

    if save:
        store = ResultStore(results_db_path(settings))
        written = store.save_events(report.attack_timeline)
        store.close()
        console.print(f"[dim]Saved {written} attack events[/dim]")


@app.command()
def compare(
    program: str = typer.Argument(..., help="Program address to analyze"),
    earlier: float = typer.Option(24.0, "--earlier", help="Length of the earlier window (hours)"),
    recent: float = typer.Option(24.0, "--recent", help="Length of the recent window (hours)"),
    rpc_url: str | None = typer.Option(None, "--rpc-url", help="Override the RPC endpoint"),
) -> None:
    """Compare the most recent window of history with the one before it."""
    settings = current_settings()
    url = rpc_url or settings.rpc_url

    try:
        comparison: PeriodComparison = safe_async_run(
            _run_compare(settings, url, program, earlier, recent)
        )
    except ChainRPCError as e:
        console.print(f"[red]Period comparison failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Period Comparison for {program}")
    table.add_column("Metric")
    table.add_column("Earlier", justify="right")
    table.add_column("Recent", justify="right")
    table.add_column("Change", justify="right")
    table.add_row(
        "Transactions",
        str(comparison.earlier.total_transactions),
        str(comparison.recent.total_transactions),
        f"{comparison.volume_change:+d}",
    )
    table.add_row(
        "Risk Score",
        str(comparison.earlier.risk_score),
        str(comparison.recent.risk_score),
        f"{comparison.risk_change:+d}",
    )
    console.print(table)

    if comparison.new_patterns:
        console.print("[bold]New patterns:[/bold]")
        for pattern in comparison.new_patterns:
            console.print(f"  [red]+[/red] {pattern.pattern} (x{pattern.frequency})")
    if comparison.resolved_patterns:
        console.print("[bold]Resolved patterns:[/bold]")
        for pattern in comparison.resolved_patterns:
            console.print(f"  [green]-[/green] {pattern.pattern}")
    if not comparison.new_patterns and not comparison.resolved_patterns:
        console.print("[dim]No pattern changes between periods.[/dim]")


@app.command()
def events(
    program: str | None = typer.Option(None, "--program", "-p", help="Filter by program"),
    limit: int = typer.Option(50, "--limit", help="Number of events to show"),
) -> None:
    """List attack events stored by 'chainsentry history --save'."""
    settings = current_settings()
    store = ResultStore(results_db_path(settings))
    stored = store.recent_events(program, limit)
    if not stored:
        store.close()
        console.print("[dim]No stored attack events. Use 'chainsentry history --save'.[/dim]")
        return

    table = Table(title="Attack Events")
    table.add_column("Time")
    table.add_column("Program")
    table.add_column("Severity")
    table.add_column("Type")
    table.add_column("Signature")
    for event in stored:
        table.add_row(
            event.occurred_at.strftime("%Y-%m-%d %H:%M:%S"),
            event.program,
            event.severity,
            event.type,
            event.signature,
        )
    store.close()
    console.print(table)
