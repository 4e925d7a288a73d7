"""
School API Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn school_api.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                         FastAPI App                          │
    │                                                              │
    │  Middleware:  Request ID → Locale → Logging → GZip → CORS    │
    │                                                              │
    │  Routes:      /api/students      /api/departments            │
    │               /api/instructors   /api/subjects               │
    │               /api/authorization /api/users                  │
    │               /api/authentication/sign-in      /health       │
    │                                                              │
    │  Exception handlers → failure envelope:                      │
    │    ValidationError, RequestValidationError → 400             │
    │    AuthenticationError → 401   AuthorizationError → 403      │
    │    PersistenceError → 400      DispatchError, other → 500    │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → settings check → (optional) create schema → seed roles/admin
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_api import __version__
from school_api.config import settings
from school_api.database import async_session_factory, create_schema, dispose_engine
from school_api.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DispatchError,
    PersistenceError,
    ValidationError,
)
from school_api.localization import MessageKeys, resolve
from school_api.middleware.locale import LocaleMiddleware
from school_api.middleware.logging import RequestLoggingMiddleware
from school_api.middleware.request_id import RequestIDMiddleware, request_id_var
from school_api.responses import (
    Outcome,
    StatusCode,
    bad_request,
    build,
    forbidden,
    server_error,
    unauthorized,
    validation_failed,
)
from school_api.routes import (
    authentication,
    authorization,
    departments,
    health,
    instructors,
    students,
    subjects,
    users,
)
from school_api.routes.common import render
from school_api.seed import seed

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once at startup, before anything else logs.
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
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("School API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: /health and anonymous routes keep working, token routes fail.
        logger.error("Configuration error: %s", str(e))

    if settings.create_schema_on_startup:
        await create_schema()
        logger.info("Database schema created (create_schema_on_startup=true)")

    try:
        async with async_session_factory() as session:
            async with session.begin():
                await seed(session)
    except SQLAlchemyError as e:
        logger.error("Seeding skipped, database not ready: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("School API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _field_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    message = error.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


# Framework HTTP errors (unknown route, wrong method, ...) → envelope outcome
_HTTP_OUTCOMES = {
    StatusCode.UNAUTHORIZED: Outcome.UNAUTHORIZED,
    StatusCode.FORBIDDEN: Outcome.FORBIDDEN,
    StatusCode.NOT_FOUND: Outcome.NOT_FOUND,
    StatusCode.METHOD_NOT_ALLOWED: Outcome.METHOD_NOT_ALLOWED,
}


def _request_culture(request: Request):
    return getattr(request.state, "culture", None)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error as a failure envelope; never a stack trace.

        ValidationError         → 400 (body not JSON / form)
        RequestValidationError  → 400 (wrong primitive types)
        AuthenticationError     → 401 + WWW-Authenticate
        AuthorizationError      → 403
        PersistenceError        → 400 generic message
        HTTPException           → 401 / 403 / 404 / 405, anything else 400
        DispatchError           → 500
        Exception (fallback)    → 500

    The fallback handler runs outside the middleware stack, after the
    request's `locale_var` has been reset, so it reads the culture that
    LocaleMiddleware left on `request.state`.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Unreadable request: %s", rid, exc.message)
        return render(bad_request(exc.message, errors=exc.errors))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        errors = [_field_error(error) for error in exc.errors()]
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return render(validation_failed(errors))

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        response = render(unauthorized(exc.message))
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(AuthorizationError)
    async def handle_authorization_error(request: Request, exc: AuthorizationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Forbidden: %s", rid, exc.context)
        return render(forbidden(exc.message))

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error("[%s] Persistence error | Context: %s", rid, exc.context)
        return render(bad_request())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        rid = request_id_var.get("")
        outcome = _HTTP_OUTCOMES.get(exc.status_code, Outcome.BAD_REQUEST)
        logger.warning("[%s] HTTP %s on %s %s", rid, exc.status_code, request.method, request.url.path)
        response = render(build(outcome))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(DispatchError)
    async def handle_dispatch_error(request: Request, exc: DispatchError):
        rid = request_id_var.get("")
        logger.error("[%s] Dispatch error: %s", rid, exc.message)
        return render(server_error(resolve(MessageKeys.INTERNAL_ERROR)))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return render(server_error(resolve(MessageKeys.INTERNAL_ERROR, _request_culture(request))))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="School API",
        description=(
            "School administration backend: students, departments, instructors, "
            "subjects, user accounts and role-based authorization."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Locale → Logging → GZip → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Language"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(LocaleMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(authorization.router)
    app.include_router(students.router)
    app.include_router(departments.router)
    app.include_router(instructors.router)
    app.include_router(subjects.router)
    app.include_router(users.router)
    app.include_router(authentication.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
