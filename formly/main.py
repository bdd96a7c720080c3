"""FastAPI application entry point for Formly.

This module initializes the FastAPI application, sets up logging,
registers middleware and routers, and maps service errors to JSON
responses of the form {"error": message}.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from formly.config import get_settings
from formly.logging_config import setup_logging, get_logger
from formly.middleware.cors import apply_cors
from formly.middleware.session_auth import DashboardGateMiddleware
from formly.models.database import Base, engine
from formly.routes import auth, forms, health, responses
from formly.services.errors import FormlyError

# Initialize logger (will be configured during startup)
logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup:
    - Configure logging
    - Create missing tables when auto_create_tables is set
    - Log application startup information

    Shutdown:
    - Log shutdown event
    - Dispose of pooled database connections

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    # Startup
    settings = get_settings()
    setup_logging()

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)

    logger.info(
        f"Formly starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'configured'}"
    )

    yield

    # Shutdown
    logger.info("Formly shutting down")
    engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title="Formly",
    description="Build forms, publish them, collect anonymous responses and analyze the results",
    version="1.0.0",
    lifespan=lifespan
)

apply_cors(app, origins=get_settings().get_allowed_origins_list())
app.add_middleware(DashboardGateMiddleware)


# Root endpoint
@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information.

    Returns:
        dict: API information and status
    """
    settings = get_settings()
    return {
        "service": "Formly",
        "version": "1.0.0",
        "environment": settings.environment,
        "status": "operational"
    }


# Register routers
app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, tags=["Auth"])
app.include_router(forms.router, tags=["Forms"])
app.include_router(responses.router, tags=["Responses"])


def describe_validation_error(exc: RequestValidationError) -> str:
    """Readable message for the first request validation problem.

    Only the field location and message are reported; submitted values
    (passwords included) never appear in the response.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid input")
    return f"{field}: {message}" if field else message


@app.exception_handler(FormlyError)
async def formly_error_handler(request: Request, exc: FormlyError) -> JSONResponse:
    """Map service errors to their HTTP status with a JSON error body."""
    if exc.status_code >= 500:
        logger.error(f"Service error for {request.method} {request.url.path}: {exc.message}")
    else:
        logger.debug(f"{exc.status_code} for {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors (400)."""
    message = describe_validation_error(exc)
    logger.debug(f"Rejected request body for {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs all unhandled exceptions and returns a generic error response
    to prevent leaking sensitive information.

    Args:
        request: FastAPI request object
        exc: Exception that was raised

    Returns:
        JSONResponse: Generic error response
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url.path}: {exc}",
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_ERROR_MESSAGE}
    )
