"""FastAPI application factory.

Creates and configures the FastAPI application with middleware, exception
handlers and route registration.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.types import ASGIApp

from engram import __version__
from engram.api.exceptions import EngramAPIError, from_store_error
from engram.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from engram.api.routes import register_routes
from engram.bootstrap import open_service
from engram.config import Settings, get_settings
from engram.db.errors import StoreError
from engram.memory.service import MemoryService
from engram.observability.logging import get_logger

logger = get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    service: MemoryService | None = None,
    mcp_app: ASGIApp | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (loaded from config when omitted)
        service: An already opened MemoryService. When omitted, the
            application lifespan opens one and closes it on shutdown.
        mcp_app: MCP SSE application to mount at ``settings.mcp.mount_path``
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if service is not None:
            app.state.memory_service = service
            yield
            return

        async with open_service(settings) as opened:
            app.state.memory_service = opened
            yield
        app.state.memory_service = None

    app = FastAPI(
        title="Engram API",
        description="Episode memory with vector similarity search",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.memory_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    register_routes(app, metrics_enabled=settings.observability.metrics_enabled)

    if mcp_app is not None:
        app.mount(settings.mcp.mount_path, mcp_app)
        logger.info("mcp_sse_mounted", path=settings.mcp.mount_path)

    logger.info("app_created", cors_origins=settings.api.cors_origins)
    return app


def _error_response(status_code: int, body: ErrorBody) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=body).model_dump(mode="json", exclude_none=True),
    )


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(EngramAPIError)
    async def engram_api_error_handler(request: Request, exc: EngramAPIError) -> JSONResponse:
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _error_response(exc.status_code, ErrorBody(code=exc.error_code, message=exc.message))

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        return await engram_api_error_handler(request, from_store_error(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("validation_error", errors=len(exc.errors()), path=request.url.path)

        details = [
            ErrorDetail(field=".".join(str(loc) for loc in error["loc"]), message=error["msg"])
            for error in exc.errors()
        ]
        return _error_response(
            400,
            ErrorBody(
                code=ErrorCode.INVALID_REQUEST,
                message="Request validation failed",
                details=details,
            ),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(
            500,
            ErrorBody(code=ErrorCode.INTERNAL_ERROR, message="An unexpected error occurred"),
        )
