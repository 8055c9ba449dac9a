"""
DiscoverHealth Backend — FastAPI Application Factory
======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings, database) builds the service
       graph, registers middleware, exception handlers and routers, and
       returns a ready FastAPI instance.
Who:   uvicorn (discoverhealth.main:app) and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────────┐
    │                         FastAPI App                           │
    │                                                               │
    │  Middleware Chain:                                            │
    │  RateLimit → RequestID → Logging → Session → GZip → CORS      │
    │                                                               │
    │  Routes ({API_PREFIX}):                                       │
    │  /resources/...   /users/...              /health (no prefix) │
    │                                                               │
    │  app.state:                                                   │
    │  settings · database · services (UserService, ResourceService,│
    │  ReviewService, SessionDAO, SessionCookieSigner)              │
    └───────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (refuse to start without SESSION_SECRET)
    3. Create missing tables (AUTO_CREATE_TABLES)
    4. Purge expired sessions

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from discoverhealth import __version__
from discoverhealth.config import Settings
from discoverhealth.database import Database
from discoverhealth.exceptions import (
    DiscoverHealthError,
    RateLimitExceededError,
    StorageError,
    ValidationError,
)
from discoverhealth.middleware.logging import RequestLoggingMiddleware
from discoverhealth.middleware.rate_limit import RateLimitMiddleware
from discoverhealth.middleware.request_id import RequestIDMiddleware, request_id_var
from discoverhealth.middleware.session import SessionMiddleware
from discoverhealth.routes import health, resources, users
from discoverhealth.services import build_services

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Noisy at INFO; access lines come from discoverhealth.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown around the serving period (see module docstring)."""
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("DiscoverHealth Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        # Unsigned sessions are not an option; refuse to serve
        raise

    if settings.auto_create_tables:
        await database.create_all()
    await app.state.services.sessions.purge_expired()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("DiscoverHealth Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    return {
        "error": error,
        "message": message,
        "details": details,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError  → 400 (malformed JSON, wrong types, non-integer id)
        StorageError            → 500 generic message, context logged only
        RateLimitExceededError  → 429 with Retry-After
        DiscoverHealthError     → exc.status_code / exc.error_code
        Exception (fallback)    → 500 internal_server_error

    Exception handlers NEVER expose internal details (stack traces, SQL) in the
    API response. Details are logged server-side.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """FastAPI could not parse the request; report the first bad field."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = [
            part for part in first.get("loc", ())
            if isinstance(part, str) and part not in ("body", "path", "query")
        ]
        field = loc[-1] if loc else None
        message = f"Invalid value for {field}" if field else "Malformed request body"
        # Inputs stay out of the log; they may hold passwords
        logger.warning(
            "[%s] Request validation failed: %s",
            request_id_var.get(""),
            [(e.get("loc"), e.get("type")) for e in errors],
        )
        error = ValidationError(message=message, field=field)
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(error.error_code, error.message, error.context or None),
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        """Database error: generic message to user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                exc.error_code, "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, exc.context),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DiscoverHealthError)
    async def handle_application_error(request: Request, exc: DiscoverHealthError):
        """Client-side failures: validation, conflict, auth, not found."""
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return JSONResponse(
                status_code=exc.status_code,
                content=_error_body(exc.error_code, "An internal error occurred. Please try again later."),
            )
        logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, exc.message, exc.context or None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 with a request ID; stack trace to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the module-level settings object.
        database: Pre-built database handle (tests share one with fixtures).

    Returns:
        Fully configured FastAPI instance ready to receive requests.
    """
    if settings is None:
        from discoverhealth.config import settings as default_settings
        settings = default_settings
    if database is None:
        database = Database(settings)
    services = build_services(settings, database)

    app = FastAPI(
        title="DiscoverHealth API",
        description=(
            "Community directory of healthcare resources: search by region, "
            "add resources, recommend and review them."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.services = services

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added runs first):
    # RateLimit → RequestID → Logging → Session → GZip → CORS

    # Credentialed requests need explicit origins, never "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # Don't compress small responses (overhead > savings)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(
        SessionMiddleware,
        sessions=services.sessions,
        signer=services.cookie_signer,
        settings=settings,
    )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window=settings.rate_limit_window,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(resources.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `discoverhealth.main:app` to be importable
app = create_app()
