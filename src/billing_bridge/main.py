"""Billing Bridge - FastAPI Application.

Tool-invocation facade over Salesforce billing records for LLM agents.

Features:
- Fixed catalog of schema-described billing tools
- Uniform success/error result envelope
- Shared-secret API key authentication
- Per-client fixed-window rate limiting on /api/
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from billing_bridge import __version__
from billing_bridge.config import Settings, get_settings
from billing_bridge.middleware import (
    FixedWindowRateLimiter,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from billing_bridge.routers import health_router, tools_router
from billing_bridge.services.record_store import RecordStore, SalesforceRecordStore
from billing_bridge.services.salesforce_session import SalesforceSession
from billing_bridge.tools.dispatcher import ToolDispatcher
from billing_bridge.tools.registry import build_registry

logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = {
    "health": "GET /health",
    "tools": "GET /api/tools",
    "executeTool": "POST /api/tools/:toolName",
    "invoke": "POST /api/invoke",
}


def configure_logging(level: str) -> None:
    """Configure root and uvicorn loggers at the same level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.SERVICE_NAME} {__version__}")
    for tool in app.state.registry.list_tools():
        logger.info(f"Available tool - {tool['name']}: {tool['description']}")

    yield

    logger.info(f"Shutting down {settings.SERVICE_NAME}")
    session: SalesforceSession | None = app.state.session
    if session is not None:
        await session.disconnect()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors in the {success, error} envelope.

    Unmatched routes and methods get a directory of available endpoints.
    """
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED) and not isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={
                "success": False,
                "error": "Endpoint not found",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )

    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"success": False, "error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are a 400, not a 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Invalid request body",
            "details": [
                {"loc": list(error.get("loc", [])), "msg": error.get("msg", "")}
                for error in exc.errors()
            ],
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler for faults outside the tool routes."""
    logger.error(f"Server error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc),
        },
    )


def create_app(
    settings: Settings | None = None,
    store: RecordStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        store: Record store to bind tools to. When omitted a Salesforce
            session and record store are created from settings.
    """
    settings = settings or get_settings()

    session: SalesforceSession | None = None
    if store is None:
        session = SalesforceSession(settings)
        store = SalesforceRecordStore(session, summary_page_size=settings.SUMMARY_PAGE_SIZE)

    registry = build_registry(store, summary_page_size=settings.SUMMARY_PAGE_SIZE)
    dispatcher = ToolDispatcher(registry, validate_params=settings.VALIDATE_TOOL_PARAMS)

    app = FastAPI(
        title=settings.SERVICE_NAME,
        description="Tool-invocation facade over Salesforce billing records",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.settings = settings
    app.state.session = session
    app.state.store = store
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.rate_limiter = FixedWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )

    # Middleware: the last one added runs first
    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter, path_prefix="/api/")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    if settings.LOG_REQUESTS:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(tools_router)

    return app


def run(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the server with uvicorn; unset options fall back to settings."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "billing_bridge.main:create_app",
        factory=True,
        host=host or settings.HOST,
        port=port or settings.PORT,
        reload=reload or settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
