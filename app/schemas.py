"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MetricIn(BaseModel):
    """A single sample submitted to ``POST /metrics``."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, strict=True, description="Metric name, e.g. ``cpu``.")
    key: str = Field(
        ..., min_length=1, strict=True, description="Identifies the reporting source."
    )
    timestamp: int = Field(..., ge=0, strict=True, description="Epoch milliseconds.")
    value: float = Field(..., strict=True, allow_inf_nan=False)


class SampleOut(BaseModel):
    """One element of the ``GET /metrics`` response array."""

    timestamp: int
    value: float
