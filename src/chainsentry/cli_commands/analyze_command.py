"""``chainsentry analyze`` command: detection reports from attack outcomes."""

import json
from pathlib import Path
from typing import Any

import typer
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from chainsentry.modules.detection import AttackSuccessDetector, parse_outcomes
from chainsentry.modules.storage import ResultStore

from .shared import app, console, current_settings, results_db_path

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
}


def load_outcome_records(path: Path) -> tuple[list[Any], str | None]:
    """Read outcome records from a JSON list or an object with an ``outcomes`` list."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return data, None
    if isinstance(data, dict) and isinstance(data.get("outcomes"), list):
        program = data.get("program")
        return data["outcomes"], str(program) if program else None
    raise ValueError("expected a JSON list of outcomes or an object with an 'outcomes' list")


@app.command()
def analyze(
    outcomes_file: Path = typer.Argument(..., help="JSON file with attack outcomes"),
    program: str | None = typer.Option(None, "--program", "-p", help="Program under test"),
    save: bool = typer.Option(False, "--save", help="Store the report in the results DB"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Classify attack outcomes and print a detection report."""
    settings = current_settings()
    try:
        records, file_program = load_outcome_records(outcomes_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Could not read outcomes from {outcomes_file}: {e}[/red]")
        raise typer.Exit(1)

    outcomes = parse_outcomes(records)
    if len(outcomes) < len(records):
        console.print(
            f"[yellow]Skipped {len(records) - len(outcomes)} unrecognized outcome records.[/yellow]"
        )

    detector = AttackSuccessDetector(settings)
    report = detector.analyze(program or file_program or "unknown", outcomes)

    if save:
        store = ResultStore(results_db_path(settings))
        run_id = store.save_report(report)
        store.close()
        if run_id is None:
            console.print("[yellow]Report could not be saved; see log for details.[/yellow]")
        else:
            console.print(f"[dim]Saved detection run #{run_id}[/dim]")

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return

    style = SEVERITY_STYLES.get(report.risk_level, "green")
    console.print(
        Panel(
            f"[bold]Program:[/bold] {report.program}\n"
            f"[bold]Vulnerabilities:[/bold] {report.vulnerabilities_found} "
            f"({report.critical_vulnerabilities} critical)\n"
            f"[bold]Risk:[/bold] [{style}]{report.risk_score}/100 {report.risk_level}[/]",
            title="Detection Report",
            border_style=style,
        )
    )

    if report.findings:
        table = Table(title="Findings")
        table.add_column("Severity")
        table.add_column("Category")
        table.add_column("Function")
        table.add_column("Details")
        for finding in report.findings:
            sev_style = SEVERITY_STYLES.get(finding.severity, "white")
            table.add_row(
                f"[{sev_style}]{finding.severity}[/]",
                finding.category,
                finding.target_function or "-",
                finding.details,
            )
        console.print(table)

    console.print(Markdown(detector.executive_summary(report)))


@app.command()
def runs(
    program: str | None = typer.Option(None, "--program", "-p", help="Filter by program"),
    limit: int = typer.Option(10, "--limit", help="Number of runs to show"),
) -> None:
    """List stored detection runs."""
    settings = current_settings()
    store = ResultStore(results_db_path(settings))
    stored = store.recent_runs(program, limit)
    if not stored:
        store.close()
        console.print("[dim]No stored detection runs. Use 'chainsentry analyze --save'.[/dim]")
        return

    table = Table(title="Detection Runs")
    table.add_column("#", justify="right")
    table.add_column("Program")
    table.add_column("Date")
    table.add_column("Findings", justify="right")
    table.add_column("Risk")
    for run in stored:
        table.add_row(
            str(run.id),
            run.program,
            run.run_at.strftime("%Y-%m-%d %H:%M:%S"),
            f"{run.vulnerabilities_found} ({run.critical_vulnerabilities} critical)",
            f"{run.risk_score} {run.risk_level}",
        )
    store.close()
    console.print(table)
