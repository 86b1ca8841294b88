from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]], indent: str = "") -> None:
    for key, value in pairs:
        typer.echo(f"{indent}{key}: {value}")


def render_sensors(payload: Dict[str, Any]) -> None:
    sensors = payload.get("sensors") or []
    echo_heading(f"Sensors ({payload.get('count', len(sensors))})")
    if not sensors:
        typer.echo("No readings received yet.")
        return

    for sensor in sensors:
        typer.echo()
        typer.secho(str(sensor.get("sensor_id")), fg=typer.colors.CYAN)
        echo_key_values(
            [
                ("model", sensor.get("model")),
                ("time", sensor.get("time")),
                ("temperature_c", sensor.get("temperature_c")),
                ("humidity", sensor.get("humidity")),
                ("battery_ok", sensor.get("battery_ok")),
            ],
            indent="  ",
        )
