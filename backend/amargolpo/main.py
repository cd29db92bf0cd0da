"""
AmarGolpo Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the DocumentStore, registers middleware, exception
       handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn amargolpo.main:app`) and `python -m amargolpo`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────────────┐ ┌─────┐ │
    │  │  Req ID  │→│ Logging  │→│ Origin Guard │→│CORS │ │
    │  └──────────┘ └──────────┘ └──────────────┘ └─────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │ / health │ │ /books CRUD  │ │ /quotes + likes │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  State: app.state.store (DocumentStore)             │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Connect the document store (retried, then fatal on failure)
    Shutdown:
    1. Close the document store client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from amargolpo import __version__
from amargolpo.config import Settings, settings as default_settings
from amargolpo.database import DocumentStore
from amargolpo.exceptions import (
    AmarGolpoError,
    DatabaseError,
    NotFoundError,
    StoreConnectionError,
    ValidationError,
)
from amargolpo.middleware.cors import configure_cors
from amargolpo.middleware.logging import RequestLoggingMiddleware
from amargolpo.middleware.request_id import RequestIDMiddleware, request_id_var
from amargolpo.routes import books, health, quotes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the whole application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes capture it)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The access middleware already logs every request; the driver logs
    # heartbeats and pool events at DEBUG.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the document store on startup and close it on shutdown.

    A store that cannot be reached at startup is fatal: the error is logged
    and re-raised, uvicorn aborts startup, and the process exits instead of
    serving requests without a database.
    """
    config: Settings = app.state.settings
    store: DocumentStore = app.state.store

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("AmarGolpo Backend %s starting up...", __version__)

    try:
        await store.connect()
    except StoreConnectionError as e:
        logger.critical(
            "Server startup aborted due to DB connection error: %s",
            e.context.get("reason", e.message),
        )
        raise

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("AmarGolpo Backend shutting down...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        ValidationError   → 400 Bad Request
        NotFoundError     → 404 Not Found
        DatabaseError     → 500 (includes StoreConnectionError)
        AmarGolpoError    → 500 (any other application error)
        Exception         → 500 (unexpected errors, stack trace logged)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        details = {"reason": exc.context["reason"]} if "reason" in exc.context else None
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "details": details,
                "request_id": rid,
            },
        )

    @app.exception_handler(AmarGolpoError)
    async def handle_application_error(request: Request, exc: AmarGolpoError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded singleton.
        store:    Document store; defaults to a new DocumentStore(settings).
                  Tests inject a store with mocked collections.
    """
    config = settings or default_settings

    app = FastAPI(
        title="AmarGolpo API",
        description="Stories, ratings and quotes for the AmarGolpo storytelling app.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.store = store or DocumentStore(config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → OriginGuard → CORS
    configure_cors(app, config)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(books.router)
    app.include_router(quotes.router)

    return app


app = create_app()
