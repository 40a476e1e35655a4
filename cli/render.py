from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

import typer

_MISSING = "-"


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_value(value: Optional[float]) -> str:
    if value is None:
        return _MISSING
    return f"{value:.1f}"


def _row(cells: Sequence[str], widths: Sequence[int]) -> str:
    return "  ".join(cell.rjust(width) for cell, width in zip(cells, widths))


def render_chart(payload: Dict[str, Any]) -> None:
    labels = payload.get("labels") or []
    echo_heading(f"Chart ({payload.get('period', 'unknown')})")
    sensors = payload.get("sensorData") or []
    if not sensors:
        typer.echo("No chart data available.")
        return

    header = ["bucket", "t_avg", "t_min", "t_max", "h_avg", "h_min", "h_max"]
    for sensor in sensors:
        typer.echo()
        echo_heading(f"Sensor {sensor.get('sensorId')}")
        columns = [
            sensor.get(name) or []
            for name in (
                "temperature_avg",
                "temperature_min",
                "temperature_max",
                "humidity_avg",
                "humidity_min",
                "humidity_max",
            )
        ]
        rows = [
            [str(label)] + [format_value(column[index]) for column in columns]
            for index, label in enumerate(labels)
        ]
        widths = [
            max(len(cells[position]) for cells in [header, *rows])
            for position in range(len(header))
        ]
        typer.echo(_row(header, widths))
        for cells in rows:
            typer.echo(_row(cells, widths))


def render_snapshot(payload: Dict[str, Any]) -> None:
    echo_heading("Current Reading")
    echo_key_values([("timestamp", payload.get("timestamp"))])
    for sensor in payload.get("sensorData") or []:
        typer.echo(
            f"  - {sensor.get('sensorId')}: "
            f"temperature={format_value(sensor.get('temperature'))} "
            f"humidity={format_value(sensor.get('humidity'))}"
        )


def render_import(payload: Dict[str, Any]) -> None:
    echo_heading("Import Result")
    echo_key_values([("accepted", payload.get("accepted"))])
    errors = payload.get("errors") or []
    typer.echo()
    echo_heading("Errors")
    if errors:
        for error in errors:
            typer.echo(
                f"  - row {error.get('row_number')}: {error.get('reason')}"
            )
    else:
        typer.echo("No errors recorded.")
