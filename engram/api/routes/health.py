"""Health, readiness and metrics endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from engram import __version__
from engram.api.dependencies import MemoryServiceDep
from engram.api.models.health import HealthResponse, ReadinessResponse
from engram.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()
metrics_router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; does not touch the database."""
    return HealthResponse(version=__version__, timestamp=datetime.now(UTC))


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(service: MemoryServiceDep) -> JSONResponse:
    """Readiness probe; 503 until the episode store answers queries."""
    ready = await service.store.health_check()
    if not ready:
        logger.warning("readiness_check_failed")
    body = ReadinessResponse(ready=ready, database_ready=ready)
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump())


@metrics_router.get("/metrics")
async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
