"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    AcademyError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PaymentRequiredError,
    StoreUnavailableError,
    ValidationError,
)
from modules.auth.exceptions import AuthNotConfiguredError
from modules.billing.routes import router as webhooks_router
from modules.students.routes import router as students_router

from .routes import admin, auth, health, progress

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases.
_STATUS_BY_ERROR: list[tuple[type[AcademyError], int]] = [
    (AuthNotConfiguredError, 500),
    (AuthenticationError, 401),
    (PaymentRequiredError, 402),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (StoreUnavailableError, 503),
    (ExternalServiceError, 502),
]


def status_for_error(exc: AcademyError) -> int:
    """HTTP status code for a domain error."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def academy_error_handler(request: Request, exc: AcademyError) -> JSONResponse:
    """Render domain errors as {error, message, details}."""
    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic.
    """
    # Startup
    settings = get_settings()
    logger.info(f"Starting Academy API on {settings.host}:{settings.port} ({settings.environment})")
    yield
    # Shutdown
    logger.info("Shutting down Academy API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Subscription-gated course platform API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(AcademyError, academy_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(progress.router, prefix="/api/progress", tags=["progress"])
    app.include_router(students_router, prefix="/api/students", tags=["students"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(webhooks_router, prefix="/api/webhooks", tags=["webhooks"])

    return app


# Application instance for uvicorn
app = create_app()
