"""FastAPI application entry point."""

import uuid as _uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.middleware.base import BaseHTTPMiddleware

from marketplace_auth.api.v1.router import api_router
from marketplace_auth.config import get_settings
from marketplace_auth.dependencies import (
    connect_with_backoff,
    create_engine,
    create_redis,
    create_session_factory,
)
from marketplace_auth.errors import (
    AuthError,
    DuplicateEmailError,
    ValidationError,
    field_errors_from_pydantic,
)
from marketplace_auth.repositories.account_repository import is_email_conflict
from marketplace_auth.services.kafka_producer import create_kafka_producer
from marketplace_auth.utils.logging import get_logger, setup_logging
from marketplace_auth.utils.rate_limit import limiter

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager: owns all shared resources."""
    # Startup
    logger.info("Starting Marketplace Auth Service...")
    logger.info("Environment: %s", settings.environment)
    logger.info("Debug mode: %s", settings.debug)

    engine = create_engine(settings)
    try:
        await connect_with_backoff(engine, settings)
    except Exception:
        await engine.dispose()
        raise
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.redis = create_redis(settings)

    # Kafka producer (best-effort, the service works without Kafka)
    try:
        app.state.kafka_producer = await create_kafka_producer(settings)
    except Exception:
        logger.warning("Kafka producer failed to start, account events won't be published")
        app.state.kafka_producer = None

    yield

    # Shutdown: dispose every resource we created
    logger.info("Shutting down Marketplace Auth Service...")
    if app.state.kafka_producer is not None:
        try:
            await app.state.kafka_producer.stop()
        except Exception:
            logger.warning("Failed to close Kafka producer", exc_info=True)
    await app.state.redis.aclose()
    await engine.dispose()
    logger.info("Shutdown complete.")


# ---------------------------------------------------------------------------
# Request ID middleware: inject X-Request-ID for distributed tracing
# ---------------------------------------------------------------------------


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Inject a unique request ID into every request/response cycle."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(_uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


# ---------------------------------------------------------------------------
# Security headers middleware
# ---------------------------------------------------------------------------


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=63072000; includeSubDomains; preload"
            )
        return response


# ---------------------------------------------------------------------------
# Exception handlers: typed domain errors, never leak internals
# ---------------------------------------------------------------------------


def _error_response(exc: AuthError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


def _internal_error_response(exc: Exception) -> JSONResponse:
    content = {"detail": "Internal server error", "code": "internal_error"}
    if settings.debug and not settings.is_production:
        content["error"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthError)
    async def _auth_error_handler(request: Request, exc: AuthError):
        request_id = getattr(request.state, "request_id", "n/a")
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "%s on %s %s (request_id=%s): %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            request_id,
            exc,
        )
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        errors = field_errors_from_pydantic(exc.errors())
        return _error_response(ValidationError(errors))

    @app.exception_handler(IntegrityError)
    async def _integrity_error_handler(request: Request, exc: IntegrityError):
        request_id = getattr(request.state, "request_id", "n/a")
        if is_email_conflict(exc):
            logger.info(
                "Email uniqueness conflict on %s %s (request_id=%s)",
                request.method,
                request.url.path,
                request_id,
            )
            return _error_response(DuplicateEmailError(""))
        logger.error(
            "Integrity constraint violation on %s %s (request_id=%s): %s",
            request.method,
            request.url.path,
            request_id,
            exc.orig,
        )
        return _internal_error_response(exc)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        request_id = getattr(request.state, "request_id", "n/a")
        logger.exception(
            "Unhandled exception on %s %s (request_id=%s)",
            request.method,
            request.url.path,
            request_id,
        )
        return _internal_error_response(exc)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_application() -> FastAPI:
    """Application factory."""
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Marketplace Auth Service API",
        description="Identity, credentials and role-based permissions for the marketplace.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Request ID and security headers (outermost = runs first)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    _register_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    # ------------------------------------------------------------------
    # Health check endpoints (no prefix)
    # ------------------------------------------------------------------

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness check: is the process running?"""
        return {
            "status": "healthy",
            "service": "marketplace-auth-service",
            "version": "1.0.0",
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request):
        """Readiness check: can the service handle traffic?"""
        checks: dict[str, str] = {}

        try:
            async with request.app.state.session_factory() as session:
                await session.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception:
            logger.warning("Readiness: database check failed", exc_info=True)
            checks["database"] = "unavailable"

        try:
            await request.app.state.redis.ping()
            checks["redis"] = "ok"
        except Exception:
            logger.warning("Readiness: redis check failed", exc_info=True)
            checks["redis"] = "unavailable"

        all_ok = all(v == "ok" for v in checks.values())
        payload = {
            "status": "ready" if all_ok else "degraded",
            "checks": checks,
        }

        if not all_ok:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload)
        return payload

    return app


# Create the application instance
app = create_application()
