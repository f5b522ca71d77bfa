"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from fastapi import FastAPI

from faaxis.api.router import api_router
from faaxis.core.config import settings
from faaxis.core.errors import register_exception_handlers
from faaxis.core.logging_config import setup_logging

setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="FA Axis authentication service.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

register_exception_handlers(app)

# Include API router
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "faaxis-auth",
        "version": settings.VERSION
    }


@app.get("/info")
async def info():
    return {
        "project name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "project url": settings.PROJECT_URL
    }
