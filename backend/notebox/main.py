"""
Notebox Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the per-application context (Settings,
       Database, TokenService) on app.state, registers middleware, exception
       handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn notebox.main:app`) and the test suite, which calls
       create_app() with its own Settings.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  app.state: settings │ db (engine/pool) │ tokens    │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │  Req ID      │→│ Access   │→│  Rate Limit     │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  /api/register  /api/login        (public)          │
    │  /api/notes[/{id}]                (bearer token)    │
    │  /  /health                       (public)          │
    │                                                     │
    │  Exception Handlers:                                │
    │  400 validation/bad request │ 401 │ 404 │ 409 │ 500 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging → check secrets → wait for the database
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notebox import __version__
from notebox.config import Settings
from notebox.database import Database, wait_for_database
from notebox.exceptions import (
    ConflictError,
    DatabaseError,
    NoteboxError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from notebox.middleware.logging import RequestLoggingMiddleware
from notebox.middleware.rate_limit import RateLimitMiddleware
from notebox.middleware.request_id import RequestIDMiddleware, request_id_var
from notebox.routes import auth, health, notes, web
from notebox.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notebox.access: GET /api/notes 200 ...
    Called once from the lifespan handler, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # notebox.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Warn loudly about a default/short JWT secret
        3. Wait for the database (tenacity backoff); give up → startup fails
    Shutdown:
        1. Dispose database engine
    """
    settings: Settings = app.state.settings
    database: Database = app.state.db

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("Notebox backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("%s", str(e))
        logger.error("Tokens signed with this secret are not safe outside development.")

    await wait_for_database(
        database,
        attempts=settings.db_connect_attempts,
        max_wait=settings.db_connect_max_wait,
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Notebox backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler table:
        ValidationError            → 400 validation_error
        RequestValidationError     → 400 bad_request (bad JSON, missing field, non-int id)
        routing 404/405            → 400 bad_request (unregistered path or method)
        UnauthorizedError          → 401 unauthorized (+ WWW-Authenticate: Bearer)
        NotFoundError              → 404 not_found
        ConflictError              → 409 conflict
        DatabaseError              → 500 server_error
        NoteboxError (base)        → 500 server_error
        Exception (fallback)       → 500 internal_server_error

    Stack traces and database context are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.message, "validation_error", details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        message = "Invalid request payload"
        if any(e["loc"][:1] == ["path"] for e in errors):
            message = "Invalid note ID"
        return _error_response(400, message, "bad_request", details={"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return _error_response(
                400,
                f"Unknown route: {request.method} {request.url.path}",
                "bad_request",
            )
        return _error_response(exc.status_code, str(exc.detail), "http_error")

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error_response(
            401,
            exc.message,
            "unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message, "not_found")

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, exc.message, "conflict")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, exc.message, "server_error")

    @app.exception_handler(NoteboxError)
    async def handle_app_error(request: Request, exc: NoteboxError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(500, exc.message, "server_error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500,
            "An unexpected error occurred. Please try again later.",
            "internal_server_error",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration; read from the environment when omitted

    Returns:
        Fully configured FastAPI instance. The database engine connects
        lazily, so building an app never opens a connection.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Notebox API",
        description="Multi-user personal notes: register, log in, and manage your own notes.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Per-application context ───────────────────────────────────────────
    app.state.settings = settings
    app.state.db = Database(settings)
    app.state.token_service = TokenService.from_settings(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS,
    # so throttled responses still carry a request id and an access-log line
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RateLimitMiddleware,
        limit=settings.rate_limit_requests,
        window=settings.rate_limit_window,
        enabled=settings.rate_limit_enabled,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(notes.router)
    app.include_router(health.router)
    app.include_router(web.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
