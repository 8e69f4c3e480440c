"""
FastAPI application entry point for the Venue CRM API.

This module serves as the central orchestration file for the backend service.
It configures logging and CORS, registers API routers and error handlers,
and starts the ASGI server.

Error Contract:
- Request validation failures (including malformed JSON) return 400 with
  {"error": "Invalid request body", "details": [...]}
- HTTP errors raised by routes return their status with {"error": "<detail>"}
- Routes turn fetch and computation failures into 500 {"error": "<message>"}
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from venue_crm import __version__
from venue_crm.api import api_router
from venue_crm.core.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application startup and shutdown events.

    Logs the data source and whether AI helpers are enabled; nothing needs
    to be opened or closed.
    """
    logger.info("Venue CRM API starting")
    logger.info(f"Reading Google Sheet {settings.google_sheet_id}")
    if not settings.groq_api_key:
        logger.warning("GROQ_API_KEY not set; AI helpers will return fallback values")

    yield

    logger.info("Venue CRM API shutting down")


# Create FastAPI application
app = FastAPI(
    title="Venue CRM API",
    version=__version__,
    description=(
        "FastAPI backend for the venue CRM dashboard. "
        "Provides sheet-backed records, funnel, revenue, channel and "
        "time-of-day analytics, AI-assisted helpers and saved filters."
    ),
    lifespan=lifespan,
)

# Configure CORS middleware for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path} rejected: invalid request body")
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request body",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


# Register API routers; each carries its own prefix
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancer checks.

    Returns:
        Dict with status 'healthy'
    """
    return {"status": "healthy"}


@app.get("/")
async def root():
    """
    Root endpoint providing API information.

    Returns:
        Dict with API name and version
    """
    return {
        "name": "Venue CRM API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Run with uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "venue_crm.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
