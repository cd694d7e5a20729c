"""
FastAPI application entry point for the Ledgerbooks backend.

This module creates the FastAPI app instance, configures logging, CORS and
the error handlers, and registers all routers.

Every error response is a flat JSON object:

    {"error": "<code>", "message": "<text>"}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledgerbooks.config import settings
from ledgerbooks.routes.accounts import router as accounts_router
from ledgerbooks.routes.auth import router as auth_router
from ledgerbooks.routes.bank_transactions import router as bank_transactions_router
from ledgerbooks.routes.estimates import router as estimates_router
from ledgerbooks.routes.expenses import router as expenses_router
from ledgerbooks.routes.health import router as health_router
from ledgerbooks.routes.invoices import router as invoices_router
from ledgerbooks.routes.projects import router as projects_router
from ledgerbooks.routes.timesheets import router as timesheets_router
from ledgerbooks.routes.vendors import router as vendors_router
from ledgerbooks.utils.logging import configure_logging

configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Get allowed CORS origins based on environment.

    - ENVIRONMENT=production: CORS_ALLOWED_ORIGINS (no web origins when unset)
    - anything else: all origins, for local development

    Returns:
        List of allowed origin URLs, or ["*"] outside production.
    """
    if settings.is_production():
        origins = settings.CORS_ALLOWED_ORIGINS
        if origins:
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
        else:
            logger.warning(
                "CORS_ALLOWED_ORIGINS not set in production. "
                "No web origins allowed. Set CORS_ALLOWED_ORIGINS for web clients."
            )
        return list(origins)

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


app = FastAPI(
    title="Ledgerbooks API",
    description="Accounting backend: accounts, bank transactions, invoices and business records",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Return dict details as the body; wrap plain string details."""
    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = {"error": "http_error", "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors (never the body) and return them in the common shape."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {len(exc.errors())} error(s)")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error", "message": "An unexpected error occurred"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(bank_transactions_router)
app.include_router(invoices_router)
app.include_router(estimates_router)
app.include_router(expenses_router)
app.include_router(vendors_router)
app.include_router(projects_router)
app.include_router(timesheets_router)

logger.info("FastAPI app initialized successfully")
