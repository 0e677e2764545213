"""
Notes Service — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers,
       and returns the app. uvicorn serves `notes_service.main:app`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: Request ID → Logging → GZip → CORS     │
    │                                                     │
    │  Routes:  /api/notes (CRUD)      /health            │
    │                                                     │
    │  Error normalizer (/api only):                      │
    │    validation → 422 │ not found → 404 │ other → N   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, optionally create tables
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from notes_service import __version__
from notes_service.config import settings
from notes_service.database import create_tables, dispose_engine
from notes_service.error_handlers import register_exception_handlers
from notes_service.middleware.logging import RequestLoggingMiddleware
from notes_service.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from notes_service.routes import health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure application logging once, at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output goes to stdout so container runtimes capture it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at DEBUG/INFO
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging and optional schema creation. Shutdown: close the pool."""
    setup_logging()
    logger.info("Notes Service %s starting up (debug=%s)", __version__, settings.debug)

    if settings.auto_create_tables:
        await create_tables()
        logger.info("Database tables ensured (AUTO_CREATE_TABLES=true)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Notes Service shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this directly to get a fresh app per test.
    """
    app = FastAPI(
        title="Notes Service API",
        description="RESTful API for managing notes",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition: the last one added
    # (RequestID) sees the request first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Error normalizer ──────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(health.router)

    return app


# uvicorn expects `notes_service.main:app` to be importable
app = create_app()
