"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

SeriesId = Tuple[str, str]


@dataclass(frozen=True, slots=True)
class Sample:
    """A single data point of a series; ``timestamp`` is epoch milliseconds."""

    timestamp: int
    value: float
