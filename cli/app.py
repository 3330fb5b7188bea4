from __future__ import annotations

import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_series


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the Metrical metrics service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Metrics API base URL (defaults to METRICAL_BASE_URL env or http://localhost:4340).",
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


@app.command("push")
def push_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Metric name."),
    key: str = typer.Argument(..., help="Metric key."),
    value: float = typer.Argument(..., help="Sample value."),
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        "-t",
        min=0,
        help="Epoch milliseconds (defaults to now).",
    ),
) -> None:
    """Send a single sample to the service."""
    state = _get_state(ctx)
    ts = timestamp if timestamp is not None else _now_ms()
    state.client.push_sample(name, key, ts, value)
    typer.secho(f"Stored {name}/{key} @ {ts} = {value}", fg=typer.colors.GREEN)


@app.command("query")
def query_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Metric name."),
    key: str = typer.Argument(..., help="Metric key."),
    raw: bool = typer.Option(False, "--raw", help="List every sample after the summary."),
) -> None:
    """Fetch a series and print its summary."""
    state = _get_state(ctx)
    payload = state.client.query_series(name, key)
    render_series(name, key, payload, raw=raw)


@app.command("smoke")
def smoke_command(
    ctx: typer.Context,
    count: int = typer.Option(1000, "--count", "-n", min=1, help="Number of samples to send."),
    name: str = typer.Option("test", "--name", help="Metric name to write under."),
    key: str = typer.Option("test", "--key", help="Metric key to write under."),
) -> None:
    """Post COUNT random samples, then verify they can all be read back."""
    state = _get_state(ctx)
    baseline = len(state.client.query_series(name, key))

    for index in range(1, count + 1):
        state.client.push_sample(name, key, _now_ms(), random.randrange(1000))
        typer.echo(f"POST {index}/{count}")

    returned = len(state.client.query_series(name, key)) - baseline
    if returned == count:
        typer.secho(f"Test succeeded: {returned}/{count} samples returned.", fg=typer.colors.GREEN)
        return
    typer.secho(f"Test failed: {returned}/{count} samples returned.", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to METRICAL_HOST)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (defaults to METRICAL_PORT)."),
    db_path: Optional[Path] = typer.Option(
        None,
        "--db-path",
        help="Directory for persisted samples (defaults to METRICAL_DB_PATH; memory only when unset).",
    ),
) -> None:
    """Run the metrics HTTP service."""
    import uvicorn

    from datastore.metric_store import StorageUnavailableError, build_default_store
    from settings import get_settings

    if db_path is not None:
        os.environ["METRICAL_DB_PATH"] = str(db_path)
        get_settings.cache_clear()
        build_default_store.cache_clear()
    settings = get_settings()

    try:
        build_default_store()
    except StorageUnavailableError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    from app.main import create_app

    typer.echo(f"Serving on {host or settings.host}:{port or settings.port} (db_path={settings.db_path or 'memory'})")
    uvicorn.run(
        create_app(),
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )
