from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

from models.records import Sample
from services.aggregator import Aggregator


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_series(name: str, key: str, payload: List[Dict[str, Any]], raw: bool = False) -> None:
    samples = [Sample(timestamp=int(item["timestamp"]), value=float(item["value"])) for item in payload]
    summary = Aggregator().aggregate(samples)

    echo_heading("Series")
    echo_key_values([("name", name), ("key", key)])

    typer.echo()
    echo_heading("Summary")
    if summary.count:
        echo_key_values(
            [
                ("count", summary.count),
                ("min_value", summary.min_value),
                ("max_value", summary.max_value),
                ("mean_value", summary.mean_value),
                ("first_timestamp", summary.first_timestamp),
                ("last_timestamp", summary.last_timestamp),
            ]
        )
    else:
        typer.echo("No samples recorded.")

    if raw and samples:
        typer.echo()
        echo_heading("Samples")
        for sample in samples:
            typer.echo(f"  - {sample.timestamp}: {sample.value}")
