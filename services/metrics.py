"""Ingestion and lookup orchestration between the API and the store."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

from app.schemas import MetricIn, SampleOut
from datastore.metric_store import InvalidInputError, MetricStore, build_default_store

logger = logging.getLogger(__name__)


class MetricsService:
    """Translates API payloads into store calls and back."""

    def __init__(self, store: MetricStore) -> None:
        self.store = store

    def ingest(self, metric: MetricIn) -> None:
        """Append one sample; raises ``InvalidInputError`` without side effects."""
        try:
            self.store.ingest(metric.name, metric.key, metric.timestamp, metric.value)
        except InvalidInputError as exc:
            logger.warning(
                "Rejected sample",
                extra={
                    "metric_name": metric.name,
                    "metric_key": metric.key,
                    "reason": str(exc),
                },
            )
            raise
        logger.debug(
            "Ingested sample",
            extra={
                "metric_name": metric.name,
                "metric_key": metric.key,
                "timestamp": metric.timestamp,
            },
        )

    def query(self, name: str, key: str) -> List[SampleOut]:
        samples = self.store.query(name, key)
        logger.debug(
            "Queried series",
            extra={"metric_name": name, "metric_key": key, "sample_count": len(samples)},
        )
        return [SampleOut(timestamp=sample.timestamp, value=sample.value) for sample in samples]


@lru_cache
def build_default_service() -> MetricsService:
    """Factory that wires the service with the default store."""
    return MetricsService(store=build_default_store())
