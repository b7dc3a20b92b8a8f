"""Health check endpoints (root level, unauthenticated)."""

from __future__ import annotations

import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from notebridge.core.database import ping
from notebridge.core.time import format_iso, utc_now

router = APIRouter()

_STARTED = time.monotonic()


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str
    uptime: float
    timestamp: str


class ReadinessResponse(BaseModel):
    status: str
    database: str
    timestamp: str


def _now() -> str:
    return format_iso(utc_now()) or ""


@router.get("/health", response_model=HealthResponse)
@router.get("/health/live", response_model=HealthResponse)
def liveness() -> HealthResponse:
    """Liveness probe - is the process serving requests?"""
    return HealthResponse(
        status="ok",
        uptime=round(time.monotonic() - _STARTED, 3),
        timestamp=_now(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness() -> JSONResponse:
    """Readiness probe - 503 while the database is unreachable."""
    healthy = ping()
    body = ReadinessResponse(
        status="ok" if healthy else "unavailable",
        database="ok" if healthy else "error",
        timestamp=_now(),
    )
    return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)
