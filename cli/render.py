from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Sequence

import typer

_COLUMNS = ("Period", "Min Freq (Hz)", "Max Freq (Hz)", "Count")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def _cell(value: Any) -> str:
    return "-" if value is None else str(value)


def render_table(rows: Iterable[Mapping[str, Any]]) -> None:
    body = [
        (_cell(row.get("date")), _cell(row.get("min")), _cell(row.get("max")), _cell(row.get("count")))
        for row in rows
    ]
    if not body:
        typer.echo("No data found.")
        return

    widths = [max(len(column), *(len(line[i]) for line in body)) for i, column in enumerate(_COLUMNS)]
    typer.echo("  ".join(column.ljust(widths[i]) for i, column in enumerate(_COLUMNS)))
    typer.echo("  ".join("-" * width for width in widths))
    for line in body:
        typer.echo(
            "  ".join(
                cell.ljust(widths[i]) if i == 0 else cell.rjust(widths[i])
                for i, cell in enumerate(line)
            )
        )


def render_page(payload: Dict[str, Any], title: str) -> None:
    echo_heading(title)
    render_table(payload.get("data") or [])
    meta = payload.get("meta") or {}
    typer.echo()
    typer.echo(
        f"Page {meta.get('page', 1)} of {meta.get('totalPages', 1)} "
        f"({meta.get('total', 0)} periods)"
    )


def render_period(payload: Dict[str, Any]) -> None:
    echo_heading(f"Statistics for {payload.get('period')}")
    if not payload.get("count"):
        typer.echo("No data for this period.")
        return
    render_table(
        [
            {
                "date": payload.get("period"),
                "min": payload.get("min"),
                "max": payload.get("max"),
                "count": payload.get("count"),
            }
        ]
    )


def render_warnings(warnings: Sequence[str]) -> None:
    if not warnings:
        return
    typer.echo()
    echo_heading("Warnings")
    for warning in warnings:
        typer.secho(f"  - {warning}", fg=typer.colors.YELLOW)
