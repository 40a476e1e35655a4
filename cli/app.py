from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_chart, render_import, render_snapshot


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the greenhouse chart service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Chart API base URL (defaults to API_BASE_URL env or http://localhost:8000/api).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("day")
def day_command(
    ctx: typer.Context,
    day: str = typer.Argument(..., help="UTC calendar date as YYYY-MM-DD."),
) -> None:
    """Show hourly aggregates for one day."""
    state = _get_state(ctx)
    render_chart(state.client.get_day_chart(day))


@app.command("month")
def month_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., help="Four-digit year."),
    month: int = typer.Argument(..., min=1, max=12, help="Month number, 1-12."),
) -> None:
    """Show daily aggregates for one month."""
    state = _get_state(ctx)
    render_chart(state.client.get_month_chart(year, month))


@app.command("year")
def year_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., help="Four-digit year."),
) -> None:
    """Show monthly aggregates for one year."""
    state = _get_state(ctx)
    render_chart(state.client.get_year_chart(year))


@app.command("current")
def current_command(ctx: typer.Context) -> None:
    """Show the most recent reading from every sensor."""
    state = _get_state(ctx)
    render_snapshot(state.client.get_current())


@app.command("import")
def import_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
) -> None:
    """Import a CSV file of readings into the service."""
    state = _get_state(ctx)
    typer.echo(f"Importing {file} to {state.config.base_url} ...")
    render_import(state.client.import_file(file))
