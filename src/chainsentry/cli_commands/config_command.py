"""Configuration CLI command."""

import typer
import yaml

from chainsentry.config import create_global_config, get_global_config_path, load_global_config

from .shared import app, console, current_settings, results_db_path


@app.command()
def config(
    action: str = typer.Argument("show", help="Action: show, init"),
) -> None:
    """Show the effective configuration or create the global config file."""
    if action == "init":
        config_path = create_global_config()
        console.print(f"[green]Global config:[/green] {config_path}")
        return

    if action == "show":
        settings = current_settings()
        console.print("[bold]Effective Configuration:[/bold]")
        console.print(f"  rpc_url={settings.rpc_url}")
        console.print(f"  data_dir={settings.data_dir}")
        console.print(f"  results_db={results_db_path(settings)}")
        console.print(f"  verbose={settings.verbose}")
        console.print(f"  history_limit={settings.history.history_limit}")

        path = get_global_config_path()
        if not path.exists():
            console.print("[dim]No global config found. Run 'chainsentry config init'.[/dim]")
            return
        console.print(f"\n[bold]Global Configuration ({path}):[/bold]")
        console.print(yaml.safe_dump(load_global_config(), default_flow_style=False))
        return

    console.print(f"[red]Unknown action: {action}. Use 'show' or 'init'.[/red]")
    raise typer.Exit(1)
