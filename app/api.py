"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.schemas import MetricIn, SampleOut
from datastore.metric_store import InvalidInputError
from services.metrics import MetricsService, build_default_service

router = APIRouter()


def get_service() -> MetricsService:
    return build_default_service()


@router.post(
    "/metrics",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    summary="Append a sample to the series identified by name and key.",
)
def post_metric(
    metric: MetricIn,
    service: MetricsService = Depends(get_service),
) -> Response:
    try:
        service.ingest(metric)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/metrics",
    response_model=List[SampleOut],
    summary="Return every sample of a series in insertion order.",
)
def get_metrics(
    name: Optional[str] = Query(None, description="Metric name."),
    key: Optional[str] = Query(None, description="Metric key."),
    service: MetricsService = Depends(get_service),
) -> List[SampleOut]:
    missing = [param for param, value in (("name", name), ("key", key)) if value is None]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required query parameter(s): {', '.join(missing)}",
        )
    assert name is not None and key is not None
    return service.query(name, key)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
