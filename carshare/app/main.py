"""
FastAPI Application Entry Point.

This is the main application file for the Shared-Vehicle Coordination API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from carshare.app.core.config import settings
from carshare.app.api.v1.router import router as api_v1_router
from carshare.app.core.observability import ObservabilityMiddleware, configure_logging
from carshare.app.core.redis_client import ping_redis
from carshare.app.db.session import engine, Base
from carshare.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from carshare.app.models.user import User
from carshare.app.models.audit_log import AuditLog
from carshare.app.models.vehicle import Vehicle
from carshare.app.models.vehicle_co_owner import VehicleCoOwner
from carshare.app.models.reservation import Reservation
from carshare.app.models.trip import Trip
from carshare.app.models.refueling import Refueling

configure_logging(settings.log_level)
logger = logging.getLogger("carshare")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Creates database tables on startup.
    2. Disposes the connection pool on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Reservations, usage tracking and fuel cost settlement for shared vehicles",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Redis only backs token revocation, so an unreachable Redis degrades
    the service instead of failing it.

    Returns:
        dict: Status and application information
    """
    redis_ok = await ping_redis()
    return {
        "status": "healthy" if redis_ok else "degraded",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if redis_ok else "down",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Shared-Vehicle Coordination API",
        "docs": "/docs",
        "health": "/health",
    }
