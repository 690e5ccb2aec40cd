"""
Point-of-Sale Sales API - Main Application.

FastAPI application with CORS enabled for frontend communication and
exception handlers that turn domain errors into client-facing responses.
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import __version__
from domain.errors import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    SalesError,
    ValidationError,
)

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] [%(levelname)-8s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Point-of-Sale Sales API",
    description="REST API for recording and reviewing point-of-sale transactions",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    # wildcard origins cannot be combined with credentials
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


@app.exception_handler(SalesError)
def handle_sales_error(request: Request, exc: SalesError) -> JSONResponse:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return _error(status_code, exc.message)

    if isinstance(exc, PersistenceError):
        logger.error(
            "Persistence failure on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
            exc_info=exc,
        )
    else:
        logger.error("Unhandled sales error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(500, "Internal server error")


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(500, "Internal server error")


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Malformed request on %s %s: %s", request.method, request.url.path, exc.errors())
    return _error(400, "Malformed request body")


@app.exception_handler(StarletteHTTPException)
def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "pos-sales-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Point-of-Sale Sales API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import sales  # noqa: E402

app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
