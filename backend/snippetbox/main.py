"""
SnippetBox — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the template cache, the engine and the
       snippet store, bundles them into an Application, and wires
       middleware, exception handlers, routes and the static mount.
Who:   uvicorn (`uvicorn snippetbox.main:app`) or `python -m snippetbox`.

Lifecycle:
    Build (create_app):
    1. Compile the template cache; a broken template aborts here
    2. Create the engine and session factory (no connection yet)

    Startup (lifespan):
    1. Configure logging
    2. Create the snippets table if configured to

    Shutdown (lifespan):
    1. Dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippetbox import __version__
from snippetbox.application import Application
from snippetbox.config import Settings, settings as default_settings
from snippetbox.database import (
    create_engine,
    create_schema,
    create_session_factory,
    dispose_engine,
)
from snippetbox.exceptions import NoRecordError, SnippetBoxError
from snippetbox.middleware.logging import RequestLoggingMiddleware
from snippetbox.middleware.request_id import RequestIDMiddleware
from snippetbox.responses import client_error, not_found, server_error
from snippetbox.routes import health, snippets
from snippetbox.services.snippet_store import SnippetStore
from snippetbox.services.templates import TemplateCache

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

class _BelowErrorFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Records below ERROR go to stdout; ERROR and above (server errors with
    their tracebacks) go to stderr.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    formatter = logging.Formatter(log_format, datefmt="%Y-%m-%dT%H:%M:%S")

    info_handler = logging.StreamHandler(sys.stdout)
    info_handler.addFilter(_BelowErrorFilter())
    info_handler.setFormatter(formatter)

    error_handler = logging.StreamHandler(sys.stderr)
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        handlers=[info_handler, error_handler],
        force=True,  # Override any existing logging config
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    application: Application = app.state.application
    config = application.settings

    setup_logging(config.log_level)
    logger.info("SnippetBox starting up...")
    logger.info("Templates: %s", ", ".join(application.templates.pages))

    if config.db_create_schema:
        await create_schema(application.engine)

    logger.info("Server ready at http://%s:%d", config.host, config.port)

    yield  # Application runs here

    logger.info("SnippetBox shutting down...")
    await dispose_engine(application.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to plain-text responses.

    Handler hierarchy:
        NoRecordError             → 404 Not Found
        SnippetBoxError (base)    → 500 via server_error()
        HTTPException (router)    → its status; keeps headers such as Allow
        RequestValidationError    → 400 Bad Request
        Exception (fallback)      → 500 via server_error()

    Security: responses never carry exception text; server_error() logs it.
    """

    @app.exception_handler(NoRecordError)
    async def handle_no_record(request: Request, exc: NoRecordError):
        return not_found()

    @app.exception_handler(SnippetBoxError)
    async def handle_app_error(request: Request, exc: SnippetBoxError):
        return server_error(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # 404 for unknown paths/static files, 405 + Allow from the router
        return client_error(exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return client_error(400)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        return server_error(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Raises:
        TemplateCacheError: a template is missing or does not parse; the
        server must not start with a partial cache
    """
    config = settings or default_settings

    templates = TemplateCache.build(config.templates_dir)
    engine = create_engine(config)
    application = Application(
        settings=config,
        engine=engine,
        snippets=SnippetStore(create_session_factory(engine)),
        templates=templates,
    )

    app = FastAPI(
        title="SnippetBox",
        description="Share short text snippets that expire after a number of days.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.application = application

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(snippets.router)
    app.include_router(health.router)

    # /static/css/main.css → <static_dir>/css/main.css
    app.mount("/static", StaticFiles(directory=config.static_dir), name="static")

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `snippetbox.main:app` to be importable
app = create_app()
