"""Summary statistics for a series of samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from models.records import Sample


@dataclass
class SeriesSummary:
    """Computed statistics for a batch of samples."""

    count: int = 0
    min_value: float | None = None
    max_value: float | None = None
    mean_value: float | None = None
    first_timestamp: int | None = None
    last_timestamp: int | None = None


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate(self, samples: Iterable[Sample]) -> SeriesSummary:
        summary = SeriesSummary()
        total = 0.0

        for sample in samples:
            summary.count += 1
            value = sample.value
            total += value

            if summary.min_value is None or value < summary.min_value:
                summary.min_value = value
            if summary.max_value is None or value > summary.max_value:
                summary.max_value = value

            if summary.first_timestamp is None:
                summary.first_timestamp = sample.timestamp
            summary.last_timestamp = sample.timestamp

        if summary.count:
            summary.mean_value = total / summary.count

        return summary
