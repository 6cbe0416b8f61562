"""
RentOK Admin Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn rentok.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌─────────────┐ ┌──────┐    │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Access Gate │→│ GZip │    │
    │  └──────┘ └────────┘ └─────────┘ └─────────────┘ └──────┘    │
    │                                                              │
    │  Routes:                                                     │
    │  /login /logout  /api/coupons  /api/tags  /api/orders        │
    │  /api/vendors/welcome-email  /api/imagekit/*  /health        │
    │                                                              │
    │  Exception Handlers:                                         │
    │  Validation→400 │ Auth→401/403 │ NotFound→404 │ Conflict→409 │
    │  Database→500 │ ExternalService→500 │ Exception→500          │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration report, ready banner
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from rentok import __version__
from rentok.config import settings
from rentok.database import dispose_engine
from rentok.exceptions import (
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    NotFoundError,
    RentokError,
    ValidationError,
)
from rentok.middleware.access_gate import AccessGateMiddleware
from rentok.middleware.logging import RequestLoggingMiddleware
from rentok.middleware.request_id import RequestIDMiddleware, request_id_var
from rentok.routes import auth, coupons, health, imagekit, orders, tags, vendors

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2025-01-15T10:30:00 [INFO] rentok.access: GET /api/tags → 200 (12ms)

    Third-party loggers that log every connection or statement are raised
    to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("RentOK Admin Backend %s starting up...", __version__)

    # Missing secrets only disable the endpoints that need them; the gate
    # and the CRUD API keep working.
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("Configuration incomplete: %s", str(e))

    logger.info(
        "Session cookie '%s', valid for %dh",
        settings.session_cookie_name, settings.session_max_age_hours,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("RentOK Admin Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(exc: RentokError, rid: str) -> dict:
    return {"error": exc.message, "code": exc.code, "request_id": rid}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Handler lookup follows the exception's MRO, so the RentokError handler
    covers AuthenticationError, PermissionDeniedError and ConfigurationError.

    Body shape:
        {"error": "<message>", "code": "<code>", "request_id": "<id>"}
    plus `details` for validation and external-service errors, and the
    conflict payload (e.g. `products`) merged in for 409s.

    Internal details (stack traces, SQL, driver errors) are logged, never
    returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        body = _error_body(exc, rid)
        if exc.context:
            body["details"] = exc.context
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, rid))

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        rid = request_id_var.get("")
        logger.info("[%s] Conflict: %s", rid, exc.message)
        body = _error_body(exc, rid)
        body.update(exc.payload)
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, rid))

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service_error(request: Request, exc: ExternalServiceError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s call failed: %s (%s)", rid, exc.service or "external", exc.message, exc.detail
        )
        body = _error_body(exc, rid)
        body["details"] = exc.detail
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RentokError)
    async def handle_rentok_error(request: Request, exc: RentokError):
        rid = request_id_var.get("")
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(level, "[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc, rid))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "code": "internal_server_error",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="RentOK Admin API",
        description=(
            "Admin and vendor back office for the RentOK rental marketplace: "
            "session-gated coupons, tags, orders, vendor onboarding email and "
            "ImageKit upload signing."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition. Added here as
    # GZip → Access Gate → Logging → Request ID → CORS, so requests pass
    # CORS → Request ID → Logging → Access Gate → GZip → route.

    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(AccessGateMiddleware)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # CORS outermost: preflight OPTIONS never reaches the gate
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(coupons.router)
    app.include_router(tags.router)
    app.include_router(orders.router)
    app.include_router(vendors.router)
    app.include_router(imagekit.router)
    app.include_router(health.router)

    return app


app = create_app()
