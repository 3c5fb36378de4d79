"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gasboard import __version__
from gasboard.config.settings import get_settings
from gasboard.config.logging_config import setup_logging
from gasboard.repositories.sqlalchemy.database import init_db
from gasboard.api.routers import gas_data_router
from gasboard.core.exceptions import (
    AppError,
    InvalidAddressError,
    NotFoundError,
    PartialDataLossError,
    RateLimitedError,
    SyncFailedError,
    TransportError,
    ValidationError,
)

ERROR_STATUS_CODES: list[tuple[type[AppError], int]] = [
    (ValidationError, 400),
    (InvalidAddressError, 400),
    (NotFoundError, 404),
    (RateLimitedError, 429),
    (SyncFailedError, 502),
    (TransportError, 502),
    (PartialDataLossError, 503),
]


def status_code_for(exc: AppError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    init_db()
    timeout = get_settings().request_timeout_seconds
    async with httpx.AsyncClient(timeout=timeout) as client:
        app.state.http_client = client
        yield
    # Shutdown: the client is closed by the context manager


settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Per-day Solana transaction fee board",
    version=__version__,
    lifespan=lifespan,
)

# Include routers
app.include_router(gas_data_router)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Global handler for application errors."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"error": exc.code, "message": exc.message},
    )


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }
