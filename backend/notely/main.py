"""
Notely Backend — FastAPI Application Factory & Entrypoint
==========================================================

What:  Creates and configures the FastAPI application, and runs it.
How:   create_app(database, settings) is a pure factory; main() performs the
       bootstrap (which may abort the process) and then serves with uvicorn.
Who:   `notely` console script, `python -m notely`, and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────────────────────────────┐  │
    │  │ GET /    │ │ /v1: healthz [+ users, notes]    │  │
    │  └──────────┘ └──────────────────────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Auth→401 │ Storage/Asset→500│   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup (main):
    1. Read settings, initialize logging
    2. Bootstrap the database (or degraded mode); exit 1 on failure
    3. Build the app with the matching router variant
    4. Serve on HOST:PORT

    Shutdown (lifespan):
    1. Dispose the database engine, if any
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notely import __version__
from notely.bootstrap import ServiceMode, bootstrap, service_mode
from notely.config import Settings, load_settings
from notely.database import Database
from notely.exceptions import (
    AssetError,
    AuthError,
    ConfigurationError,
    DatabaseConnectionError,
    StorageError,
    ValidationError,
    describe_validation_errors,
)
from notely.middleware.auth import AUTH_SCHEME
from notely.middleware.logging import RequestLoggingMiddleware
from notely.middleware.request_id import (
    RequestIDMiddleware,
    error_body,
    request_id_var,
    unexpected_error_response,
)
from notely.routes import build_v1_router, health, index

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notely.bootstrap: Connected to database!

    Called once by main() before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # container runtimes capture stdout
        ],
        force=True,
    )

    # Third-party libraries are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

def build_lifespan(database: Optional[Database]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Notely %s started in %s mode", __version__, app.state.mode.value)

        yield

        logger.info("Notely shutting down...")
        if database is not None:
            await database.dispose()
        logger.info("Shutdown complete.")

    return lifespan


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler table:
        ValidationError         → 400 (message names the violated constraint)
        RequestValidationError  → 400 (body is not the expected JSON shape)
        AuthError               → 401 + WWW-Authenticate (details.kind)
        StorageError            → 500 (generic message, details logged)
        AssetError              → 500
        Exception (fallback)    → 500 (unexpected errors inside the app are
                                   answered by RequestIDMiddleware first)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = describe_validation_errors(exc.errors())
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", message),
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning(
            "[%s] Authentication failed (%s) for %s %s",
            request_id_var.get(""),
            exc.kind,
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=401,
            content=error_body("unauthorized", exc.message, {"kind": exc.kind}),
            headers={"WWW-Authenticate": AUTH_SCHEME},
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        # Full context server-side only
        logger.error("[%s] Storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(AssetError)
    async def handle_asset_error(request: Request, exc: AssetError):
        logger.error("[%s] Asset error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return unexpected_error_response()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    database: Optional[Database] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: the bootstrapped handle, or None for degraded mode. The
                  router variant is chosen here and never changes afterwards.
        settings: read from the environment when omitted.
    """
    settings = settings or load_settings()
    mode = service_mode(database)

    app = FastAPI(
        title="Notely API",
        description="Users and notes behind API-key authentication.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=build_lifespan(database),
    )
    app.state.mode = mode

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(index.router)
    app.include_router(health.router)  # unversioned /healthz alias
    app.include_router(build_v1_router(database))

    if mode is ServiceMode.DEGRADED:
        logger.info("CRUD endpoints not registered (degraded mode)")
    return app


# ══════════════════════════════════════════════════════════════════════════
# Entrypoint
# ══════════════════════════════════════════════════════════════════════════

def main() -> None:
    """
    Start the service: bootstrap, build the app, serve.

    Any ConfigurationError or DatabaseConnectionError during bootstrap ends
    the process with exit status 1 before a socket is opened.
    """
    setup_logging()

    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        database = asyncio.run(bootstrap(settings))
    except (ConfigurationError, DatabaseConnectionError) as e:
        logger.critical("Startup failed: %s", e.message)
        sys.exit(1)

    app = create_app(database=database, settings=settings)

    logger.info("Serving on port: %s", settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,  # keep the logging configured above
    )


if __name__ == "__main__":
    main()
