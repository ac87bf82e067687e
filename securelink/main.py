"""SecureLink FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory; config and HTTP client factory
                   may be injected so tests need neither environment nor network
  - lifespan     — @asynccontextmanager startup/shutdown sequence
  - app = create_app() — module-level instance for uvicorn and serverless hosts

Startup sequence:
  1. load_config()           → app.state.config   (SystemExit if GOOGLE_API_KEY missing)
  2. create_http_client()    → app.state.http_client
  3. ThreatChecker(...)      → app.state.checker
  4. app.state.ready = True

Shutdown (reverse): app.state.ready = False → close HTTP client
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from securelink import __version__
from securelink.checker.client import ThreatChecker, create_http_client
from securelink.config import Config, load_config
from securelink.dependencies import require_ready
from securelink.health import router as health_router
from securelink.utils.logger import configure_logging, get_logger
from securelink.web.middleware import BodySizeLimitMiddleware, RequestIDMiddleware
from securelink.web.pages import STATIC_DIR, create_templates
from securelink.web.routes import router as web_router

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)

# Static asset prefixes served from securelink/static/<name>
STATIC_MOUNTS: tuple[str, ...] = ("css", "js", "images")


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build every per-process dependency, serve, then tear down in reverse."""
    logger.info("SecureLink starting up...")

    # load_config() raises SystemExit when GOOGLE_API_KEY is missing, so the
    # process exits before ready=True is ever set.
    config: Config = app.state.config or load_config()
    app.state.config = config

    client_factory: Callable[[], httpx.AsyncClient] = (
        app.state.http_client_factory or create_http_client
    )
    http_client = client_factory()
    app.state.http_client = http_client

    sb = config.safe_browsing
    app.state.checker = ThreatChecker(
        http_client,
        sb.api_key,
        sb.client_id,
        endpoint=sb.endpoint,
        client_version=sb.client_version,
        timeout=sb.timeout_s,
    )
    logger.info(
        "Safe Browsing checker ready",
        client_id=sb.client_id,
        timeout_s=sb.timeout_s,
    )

    app.state.ready = True
    logger.info("SecureLink ready", version=__version__)

    yield

    logger.info("SecureLink shutting down...")
    app.state.ready = False

    try:
        await http_client.aclose()
        logger.info("HTTP client closed")
    except Exception as exc:
        logger.warning("HTTP client close error (non-fatal)", error=str(exc))

    logger.info("SecureLink shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(
    config: Optional[Config] = None,
    http_client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> FastAPI:
    """Create and configure the SecureLink FastAPI application.

    Args:
        config:              Pre-built Config. When None, the lifespan calls
                             load_config() (environment + optional YAML file).
        http_client_factory: Zero-argument callable returning the AsyncClient used
                             for lookups. When None, create_http_client() is used.

    Returns:
        Configured FastAPI application with lifespan, routers, middleware and
        static mounts.
    """
    application = FastAPI(
        title="SecureLink",
        description="URL safety checks backed by Google Safe Browsing",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # Requests that arrive before startup completes get 503.
    application.state.ready = False
    application.state.config = config
    application.state.http_client_factory = http_client_factory
    application.state.templates = create_templates()

    # In Starlette the LAST-added middleware is OUTERMOST, so every response,
    # including a 413, carries X-Request-ID.
    application.add_middleware(BodySizeLimitMiddleware)
    application.add_middleware(RequestIDMiddleware)

    application.include_router(health_router)
    application.include_router(web_router, dependencies=[Depends(require_ready)])

    for name in STATIC_MOUNTS:
        application.mount(
            f"/{name}",
            StaticFiles(directory=str(STATIC_DIR / name)),
            name=name,
        )

    @application.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────
#   uvicorn securelink.main:app --host 0.0.0.0 --port 8080

app = create_app()
