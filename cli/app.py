from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_sensors


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Follow an SDR sensor log and export the latest readings over HTTP.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


def parse_bind(value: str) -> Tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise typer.BadParameter(f"Expected ADDRESS:PORT, got {value!r}.", param_hint="--bind")
    try:
        port_number = int(port)
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid port in {value!r}.", param_hint="--bind") from exc
    if not 0 < port_number < 65536:
        raise typer.BadParameter(f"Port out of range in {value!r}.", param_hint="--bind")
    return host.strip("[]"), port_number


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-u",
        help="Exporter base URL (defaults to SENSOR_API_BASE_URL env or http://localhost:4547).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the exporter to answer.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    path: Optional[Path] = typer.Argument(
        None,
        dir_okay=False,
        help="Sensor log to follow (defaults to SENSOR_LOG_PATH).",
    ),
    bind: Optional[str] = typer.Option(
        None,
        "--bind",
        "-b",
        help="ADDRESS:PORT to listen on (defaults to SENSOR_BIND_ADDRESS or 0.0.0.0:4547).",
    ),
    poll_interval: Optional[float] = typer.Option(
        None,
        "--poll-interval",
        help="Seconds to wait at end of file before checking again.",
    ),
    backoff: Optional[float] = typer.Option(
        None,
        "--backoff",
        help="Seconds to wait before reopening the log after a session ends.",
    ),
) -> None:
    """Tail the sensor log and serve /metrics until interrupted."""
    from app.main import create_app
    from services.supervisor import build_default_supervisor
    from settings import get_settings

    overrides = {
        "SENSOR_LOG_PATH": str(path) if path is not None else None,
        "SENSOR_BIND_ADDRESS": bind,
        "SENSOR_POLL_INTERVAL": str(poll_interval) if poll_interval is not None else None,
        "SENSOR_RESTART_BACKOFF": str(backoff) if backoff is not None else None,
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = value
    get_settings.cache_clear()
    build_default_supervisor.cache_clear()

    settings = get_settings()
    if not settings.log_path:
        raise typer.BadParameter("Specify the sensor log path.", param_hint="PATH")
    host, port = parse_bind(settings.bind_address)

    typer.echo(f"Following {settings.log_path}, listening on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


@app.command("sensors")
def sensors_command(ctx: typer.Context) -> None:
    """Show the latest reading of every sensor known to a running exporter."""
    state = _get_state(ctx)
    render_sensors(state.client.get_sensors())


@app.command("metrics")
def metrics_command(ctx: typer.Context) -> None:
    """Print the raw metrics exposition from a running exporter."""
    state = _get_state(ctx)
    typer.echo(state.client.get_metrics(), nl=False)
