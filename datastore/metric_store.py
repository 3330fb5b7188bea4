from __future__ import annotations

import hashlib
import json
import logging
import math
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional

from models.records import Sample, SeriesId
from settings import get_settings

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when a sample is rejected before touching the store."""


class StorageUnavailableError(RuntimeError):
    """Raised when the persistence directory cannot be prepared."""


@dataclass
class _Series:
    name: str
    key: str
    lock: Lock = field(default_factory=Lock)
    samples: List[Sample] = field(default_factory=list)


def _validate(name: Any, key: Any, timestamp: Any, value: Any) -> Sample:
    if not isinstance(name, str) or not name:
        raise InvalidInputError("name must be a non-empty string.")
    if not isinstance(key, str) or not key:
        raise InvalidInputError("key must be a non-empty string.")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise InvalidInputError("timestamp must be an integer.")
    if timestamp < 0:
        raise InvalidInputError("timestamp must be non-negative.")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInputError("value must be a number.")
    if not math.isfinite(value):
        raise InvalidInputError("value must be finite.")
    return Sample(timestamp=timestamp, value=float(value))


def _series_filename(name: str, key: str) -> str:
    digest = hashlib.sha256(json.dumps([name, key]).encode("utf-8")).hexdigest()
    return f"{digest}.jsonl"


class MetricStore:
    """In-memory series store keyed by ``(name, key)``.

    Each series carries its own lock, so appends to one series never wait on
    another. The registry lock is held only to look up or create a series.
    When ``persistence_path`` is set, accepted samples are appended to one
    JSON-lines file per series and replayed on construction.
    """

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self.persistence_path = persistence_path
        self._series: Dict[SeriesId, _Series] = {}
        self._registry_lock = Lock()
        if persistence_path:
            _prepare_directory(persistence_path)
            self._load_from_disk()

    def ingest(self, name: str, key: str, timestamp: int, value: float) -> Sample:
        sample = _validate(name, key, timestamp, value)
        series = self._get_or_create(name, key)
        with series.lock:
            if self.persistence_path:
                self._append_to_disk(series, sample)
            series.samples.append(sample)
        return sample

    def query(self, name: str, key: str) -> List[Sample]:
        with self._registry_lock:
            series = self._series.get((name, key))
        if series is None:
            return []
        with series.lock:
            return list(series.samples)

    def list_series(self) -> List[SeriesId]:
        with self._registry_lock:
            return sorted(self._series.keys())

    def sample_count(self) -> int:
        with self._registry_lock:
            series_list = list(self._series.values())
        total = 0
        for series in series_list:
            with series.lock:
                total += len(series.samples)
        return total

    def _get_or_create(self, name: str, key: str) -> _Series:
        with self._registry_lock:
            series = self._series.get((name, key))
            if series is None:
                series = _Series(name=name, key=key)
                self._series[(name, key)] = series
            return series

    def _append_to_disk(self, series: _Series, sample: Sample) -> None:
        assert self.persistence_path is not None
        path = self.persistence_path / _series_filename(series.name, series.key)
        line = json.dumps(
            {
                "name": series.name,
                "key": series.key,
                "timestamp": sample.timestamp,
                "value": sample.value,
            }
        )
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def _load_from_disk(self) -> None:
        assert self.persistence_path is not None
        for path in sorted(self.persistence_path.glob("*.jsonl")):
            with path.open("r", encoding="utf-8") as handle:
                for line_number, line in enumerate(handle, start=1):
                    if not line.strip():
                        continue
                    try:
                        payload = json.loads(line)
                        name, key = payload["name"], payload["key"]
                        sample = _validate(name, key, payload["timestamp"], payload["value"])
                    except (json.JSONDecodeError, KeyError, TypeError, InvalidInputError) as exc:
                        logger.warning(
                            "Skipping unreadable line %d",
                            line_number,
                            extra={"path": path, "reason": str(exc)},
                        )
                        continue
                    self._get_or_create(name, key).samples.append(sample)

        logger.info(
            "Loaded persisted samples",
            extra={
                "path": self.persistence_path,
                "series_count": len(self._series),
                "sample_count": self.sample_count(),
            },
        )


def _prepare_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as exc:
        raise StorageUnavailableError(
            f"Permission denied to create the data directory {str(path)!r}."
        ) from exc
    except OSError as exc:
        raise StorageUnavailableError(
            f"Unable to create the data directory {str(path)!r}: {exc}"
        ) from exc
    if not path.is_dir():
        raise StorageUnavailableError(f"Data path {str(path)!r} is not a directory.")


@lru_cache
def build_default_store(path: Optional[str] = None) -> MetricStore:
    settings = get_settings()
    db_path = settings.db_path if path is None else path
    persistence = Path(db_path) if db_path else None
    return MetricStore(persistence_path=persistence)
