"""
Main FastAPI application entry point for Volt.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from loguru import logger
import uvicorn

from volt.core.config import settings
from volt.core.database import create_tables
from volt.core.exceptions import (
    volt_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)
from volt.core.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from volt.api.routes import api_router
from volt.utils.exceptions import VoltError

VERSION = "1.0.0"
STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Volt application")

    await create_tables()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title="Volt API",
    description="Encrypted personal credential vault",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add custom middleware (order matters - first added is outermost)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

# Add exception handlers
app.add_exception_handler(VoltError, volt_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include API routes
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION}


@app.get("/status")
async def status():
    """Liveness with process uptime."""
    return {
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "message": "Systems nominal",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
