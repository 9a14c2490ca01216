"""
Obligation Discovery Service - Main Application
===============================================

FastAPI application exposing the obligation discovery pipeline.

Version: 0.1.0
"""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.obligation_discovery import __version__
from services.obligation_discovery.errors import SessionError, ValidationError
from services.obligation_discovery.routes import discovery
from shared.config import settings
from shared.logging import get_logger, setup_logging
from shared.models.common import ErrorResponse, HealthResponse


# Setup logging
setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="obligation-discovery",
)

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "obligation_discovery_starting",
        environment=settings.environment.value,
        port=settings.port,
        headless=settings.browser.headless,
    )

    yield

    logger.info("obligation_discovery_shutting_down")


# Create FastAPI application
app = FastAPI(
    title="Obligation Discovery Service",
    description="Licence, permit and registration discovery by postcode and activity",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins_list,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Service health check."""
    return HealthResponse(
        status="healthy",
        service="obligation-discovery",
        version=__version__,
        components={
            "browser": {
                "status": "healthy",
                "engine": settings.browser.engine,
                "headless": settings.browser.headless,
            },
        },
    )


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": "Obligation Discovery Service",
        "version": __version__,
        "docs": "/docs",
    }


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(
    discovery.router,
    prefix="/api/v1/discovery",
    tags=["Discovery"],
)


# ============================================================================
# Error Handlers
# ============================================================================


def _error(status_code: int, message: str, field: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, field=field)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(ValidationError)
async def discovery_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Reject requests missing mandatory fields."""
    logger.info("discovery_rejected", field=exc.field, error=str(exc), path=request.url.path)
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), exc.field)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed request bodies."""
    first = exc.errors()[0] if exc.errors() else {}
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc) or None
    logger.info("discovery_rejected", field=field, path=request.url.path)
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        f"{field or 'body'}: {first.get('msg', 'invalid request')}",
        field,
    )


@app.exception_handler(SessionError)
async def session_error_handler(request: Request, exc: SessionError) -> JSONResponse:
    """Browser session could not be used; nothing was searched."""
    logger.error("discovery_session_failed", error=str(exc), path=request.url.path)
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, f"Search session unavailable: {exc}")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ============================================================================
# Run with Uvicorn
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.obligation_discovery.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
