"""API route registration."""

from fastapi import APIRouter, FastAPI

from engram.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the /api/v1 router with all versioned routes."""
    router = APIRouter(prefix="/api/v1")

    from engram.api.routes.memory import router as memory_router
    from engram.api.routes.status import router as status_router

    router.include_router(memory_router, tags=["Memory"])
    router.include_router(status_router, tags=["Status"])

    return router


def register_routes(app: FastAPI, *, metrics_enabled: bool = True) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    from engram.api.routes.health import metrics_router
    from engram.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])
    if metrics_enabled:
        app.include_router(metrics_router, tags=["Health"])

    logger.debug("routes_registered")
