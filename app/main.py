from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import router
from datastore.metric_store import build_default_store
from logging_config import configure_logging
from services.metrics import build_default_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    logger.info(
        "Metric store ready",
        extra={
            "path": service.store.persistence_path,
            "series_count": len(service.store.list_series()),
        },
    )
    try:
        yield
    finally:
        build_default_service.cache_clear()
        build_default_store.cache_clear()


_ERROR_FIELDS = ("type", "loc", "msg")


async def validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Rejected inputs may be non-finite floats, which JSONResponse cannot render.
    details = [
        {field: error[field] for field in _ERROR_FIELDS if field in error}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(details)},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Metrical",
        description="Ingest timestamped samples and read them back by name and key.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(router)
    return app

app = create_app()
