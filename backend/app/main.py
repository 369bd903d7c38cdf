"""
DoctorWeb Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the document store, the content service, the
       middleware chain, the exception handlers and the routers.
Who:   uvicorn (`uvicorn app.main:app`) or `python -m app.main`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware (outer → inner):                        │
    │  RequestID → Logging → BodySizeLimit → GZip → CORS  │
    │                                                     │
    │  Routes:                                            │
    │  /health   /api/<collection>[/...]   /api/db        │
    │                                                     │
    │  app.state.store            DocumentStore(DATA_DIR) │
    │  app.state.content_service  ContentService(store)   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create DATA_DIR, seed missing collection files
    Shutdown: log and exit (the store holds no open handles between requests)
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
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.exceptions import (
    DuplicateSlugError,
    NotFoundError,
    StorageUnavailableError,
    StorageWriteError,
    UnknownCollectionError,
    ValidationError,
)
from app.middleware.body_limit import BodySizeLimitMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import export, health
from app.routes.content import build_content_routers
from app.schemas.responses import error_envelope
from app.services.content_service import ContentService
from app.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates doctorweb.access
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    store: DocumentStore = app.state.store

    logger.info("=" * 60)
    logger.info("Doctor Web Server starting up...")
    logger.info("Content directory: %s", store.data_dir)

    if settings.seed_missing_collections:
        await store.ensure_collections()

    logger.info("Server running on port %d", settings.backend_port)
    logger.info("Health check: http://%s:%d/health", settings.backend_host, settings.backend_port)
    logger.info("API base URL: http://%s:%d/api", settings.backend_host, settings.backend_port)
    logger.info("Environment: %s", settings.environment)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Doctor Web Server shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _server_error_message(exc: Exception) -> str:
    """Exception text in development, a generic message everywhere else."""
    if settings.is_development:
        return getattr(exc, "message", None) or str(exc) or GENERIC_ERROR_MESSAGE
    return GENERIC_ERROR_MESSAGE


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP status codes and the failure envelope.

    Handler table:
        ValidationError / RequestValidationError → 400 validation_error
        NotFoundError / UnknownCollectionError   → 404 not_found
        unmatched route or verb (404/405)        → 404 route_not_found
        DuplicateSlugError                       → 409 duplicate_slug
        StorageUnavailableError                  → 500 storage_unavailable
        StorageWriteError                        → 500 storage_write_failed
        Exception (fallback)                     → 500 internal_server_error

    Exception context (file paths, OS errors) is logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        details = {"errors": exc.errors} if exc.errors else None
        return JSONResponse(
            status_code=400,
            content=error_envelope("validation_error", exc.message, rid, details=details),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=error_envelope(
                "validation_error",
                "Request body must be a JSON object",
                rid,
                details={"errors": errors},
            ),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_envelope("not_found", exc.message, request_id_var.get("")),
        )

    @app.exception_handler(UnknownCollectionError)
    async def handle_unknown_collection(request: Request, exc: UnknownCollectionError):
        return JSONResponse(
            status_code=404,
            content=error_envelope("not_found", exc.message, request_id_var.get("")),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        # A known path with an unsupported verb is an unknown route too
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content=error_envelope(
                    "route_not_found",
                    f"Cannot {request.method} {request.url.path}",
                    rid,
                ),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope("http_error", str(exc.detail), rid),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(DuplicateSlugError)
    async def handle_duplicate_slug(request: Request, exc: DuplicateSlugError):
        rid = request_id_var.get("")
        logger.warning("[%s] Duplicate slug: %s", rid, exc.message)
        return JSONResponse(
            status_code=409,
            content=error_envelope("duplicate_slug", exc.message, rid),
        )

    @app.exception_handler(StorageUnavailableError)
    async def handle_storage_unavailable(request: Request, exc: StorageUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage unavailable: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_envelope("storage_unavailable", _server_error_message(exc), rid),
        )

    @app.exception_handler(StorageWriteError)
    async def handle_storage_write(request: Request, exc: StorageWriteError):
        rid = request_id_var.get("")
        logger.error("[%s] Storage write failed: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_envelope("storage_write_failed", _server_error_message(exc), rid),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_envelope("internal_server_error", _server_error_message(exc), rid),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(data_dir: Optional[str] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        data_dir: Content directory for this app instance. Defaults to
                  settings.data_dir; tests pass a temporary directory.
    """
    app = FastAPI(
        title="Doctor Web API",
        description=(
            "Content API for the practice website: pages, blog posts, doctor "
            "profiles, case studies, services, testimonials and site settings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        # /api/pages/ is not /api/pages
        redirect_slashes=False,
    )

    store = DocumentStore(
        data_dir or settings.data_dir,
        enforce_unique_slugs=settings.enforce_unique_slugs,
    )
    app.state.store = store
    app.state.content_service = ContentService(store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(BodySizeLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(export.router)
    for router in build_content_routers():
        app.include_router(router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
