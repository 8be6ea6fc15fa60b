from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

import httpx
import typer

from cli.client import ApiClient, ApiError
from cli.config import CLIConfig, load_config
from cli.render import echo_heading, render_page, render_period, render_table, render_warnings
from services.aggregator import Aggregator
from services.parser import parse_readings
from services.readings import decode_upload


class GroupBy(str, Enum):
    day = "day"
    month = "month"


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Upload sensor frequency files and browse their statistics.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _render_local(path: Path, group_by: GroupBy) -> None:
    try:
        text = decode_upload(path.read_bytes())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    result = parse_readings(text)
    aggregator = Aggregator()
    daily = aggregator.daily(result.readings)
    if group_by is GroupBy.month:
        rows = [
            {"date": stat.month, "min": stat.min, "max": stat.max, "count": stat.count}
            for stat in aggregator.monthly(daily)
        ]
    else:
        rows = [
            {"date": stat.date, "min": stat.min, "max": stat.max, "count": stat.count}
            for stat in daily
        ]

    echo_heading(f"Local results for {path.name}")
    render_table(rows)
    render_warnings(result.warnings)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="API base URL (defaults to API_BASE_URL env or http://localhost:8000/api).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a readings file."),
    group_by: GroupBy = typer.Option(GroupBy.day, "--by", help="Grouping for the local fallback table."),
) -> None:
    """Upload a readings file and store it."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    try:
        payload = state.client.upload_file(file)
    except httpx.TransportError:
        typer.secho("Backend unreachable. Showing local results.", fg=typer.colors.YELLOW, err=True)
        _render_local(file, group_by)
        return
    except ApiError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        typer.secho("Upload was not stored. Showing local results.", fg=typer.colors.YELLOW, err=True)
        _render_local(file, group_by)
        return

    typer.secho(payload.get("message") or "Upload stored.", fg=typer.colors.GREEN)
    typer.echo(f"count: {payload.get('count')}")
    render_warnings(payload.get("warnings") or [])


@app.command("preview")
def preview_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a readings file."),
    group_by: GroupBy = typer.Option(GroupBy.day, "--by", help="Group results by day or month."),
) -> None:
    """Parse a readings file locally without contacting the API."""
    _render_local(file, group_by)


@app.command("daily")
def daily_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1),
    limit: Optional[int] = typer.Option(None, "--limit", min=1),
) -> None:
    """List stored per-day statistics, newest first."""
    state = _get_state(ctx)
    render_page(state.client.daily_stats(page=page, limit=limit), "Daily Statistics")


@app.command("monthly")
def monthly_command(
    ctx: typer.Context,
    page: int = typer.Option(1, "--page", min=1),
    limit: Optional[int] = typer.Option(None, "--limit", min=1),
) -> None:
    """List stored per-month statistics, newest first."""
    state = _get_state(ctx)
    render_page(state.client.monthly_stats(page=page, limit=limit), "Monthly Statistics")


@app.command("month")
def month_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., min=1, max=9999),
    month: int = typer.Argument(..., min=1, max=12),
) -> None:
    """Show statistics for one calendar month."""
    state = _get_state(ctx)
    render_period(state.client.month_stats(year, month))


@app.command("day")
def day_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., min=1, max=9999),
    month: int = typer.Argument(..., min=1, max=12),
    day: int = typer.Argument(..., min=1, max=31),
) -> None:
    """Show statistics for one calendar day."""
    state = _get_state(ctx)
    render_period(state.client.day_stats(year, month, day))
