"""
FastAPI application entry point for the eventflow backend.

This module initializes the FastAPI application with:
- CORS middleware for the frontend
- Signed session cookies (when SESSION_SECRET_KEY is set)
- Navigation guard redirects for page routes
- Exception handlers for consistent error responses
- Logging configuration

Environment Variables:
    EVENTFLOW_ENV: Environment (production/development, default: development)
    EVENTFLOW_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
    EVENTFLOW_DB_URL: Database connection URL
    JWT_SECRET_KEY: Secret for identity tokens
    SESSION_SECRET_KEY: Secret for session cookies (optional)
    CORS_ORIGINS: Comma-separated allowed origins
"""

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from backend.src.config.settings import get_settings
from backend.src.middleware.navigation import NavigationGuardMiddleware
from backend.src.utils.logging_config import init_logging, get_logger


APP_VERSION = "1.0.0"

# Error codes used in the "error" field of error bodies
ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "validation_error",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "internal_error",
}


def error_body(status_code: int, message: Any, **extra: Any) -> Dict[str, Any]:
    """Build the error response body for a status code."""
    body = {
        "error": ERROR_CODES.get(status_code, "error"),
        "message": message,
    }
    body.update(extra)
    return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Args:
        app: FastAPI application instance

    Yields:
        Control to the application
    """
    # Startup
    logger = get_logger("api")
    logger.info("Starting eventflow backend application")

    settings = get_settings()
    if not settings.jwt_configured:
        logger.warning("JWT_SECRET_KEY is not set; bearer tokens will be rejected")
    if not settings.session_secret_key:
        logger.warning("SESSION_SECRET_KEY is not set; session cookies are disabled")

    logger.info("Eventflow backend started successfully")

    yield

    # Shutdown
    logger.info("Shutting down eventflow backend application")


# Initialize logging before creating app
init_logging()

# Create FastAPI application
app = FastAPI(
    title="Eventflow API",
    description="Backend API for coordinating events, their tasks, "
                "specialized graphics/logistics/outreach/sponsorship work, "
                "and task notifications.",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Middleware: the last one added runs first, so the session is decoded
# before the navigation guard looks at it.
app.add_middleware(NavigationGuardMiddleware)

_settings = get_settings()
if _settings.session_secret_key:
    app.add_middleware(
        SessionMiddleware,
        secret_key=_settings.session_secret_key,
        same_site="lax",
        https_only=_settings.is_production,
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render HTTPException as {"error": <code>, "message": <text>}.

    Covers routing errors (404, 405) as well as raised HTTPExceptions.
    Headers set on the exception (e.g. WWW-Authenticate) are kept.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors as 400.

    Args:
        request: HTTP request
        exc: FastAPI RequestValidationError

    Returns:
        JSON response with validation error details
    """
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": jsonable_encoder(exc.errors()),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status.HTTP_400_BAD_REQUEST,
            "Request validation failed",
            details=jsonable_encoder(exc.errors()),
        ),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Args:
        request: HTTP request
        exc: SQLAlchemy exception

    Returns:
        JSON response with a generic database error message
    """
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An error occurred while accessing the database. Please try again later.",
        ),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    Args:
        request: HTTP request
        exc: Unhandled exception

    Returns:
        JSON response with generic error message
    """
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        ),
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "eventflow-backend",
        "version": APP_VERSION,
    }


# API routers
from backend.src.api import events, notifications, subtasks, tasks, users  # noqa: E402

app.include_router(events.router, prefix="/api")
app.include_router(tasks.router, prefix="/api")
app.include_router(subtasks.graphics_router, prefix="/api")
app.include_router(subtasks.logistics_router, prefix="/api")
app.include_router(subtasks.outreach_router, prefix="/api")
app.include_router(subtasks.sponsorship_router, prefix="/api")
app.include_router(notifications.router, prefix="/api")
app.include_router(users.router, prefix="/api")


# Root endpoint


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint with API information.

    Returns:
        API metadata and documentation links
    """
    return {
        "message": "Eventflow API",
        "version": APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }
