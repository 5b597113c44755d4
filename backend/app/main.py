"""
FastAPI Application Entry Point.

This is the main application file for the Fleet Dashboard Backend.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.core.config import settings
from backend.app.api.v1.router import router as api_v1_router
from backend.app.db.session import engine, Base, get_db
from backend.app.core.observability import ObservabilityMiddleware, configure_logging
from backend.app.core.redis_client import get_redis, ping_redis
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from fastapi import HTTPException

# Import models to ensure they are registered with Base
from backend.app.models.company import Company
from backend.app.models.vehicle import Vehicle
from backend.app.models.driver import Driver
from backend.app.models.audit_log import AuditLog

logger = configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    1. Creates database tables on startup.
    2. Disposes the engine pool on shutdown.
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
    description="Fleet dashboard backend: companies, vehicles and drivers with conditional updates",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis)
):
    """
    Health check endpoint.
    
    Returns:
        dict: Status, application information and dependency reachability
    """
    try:
        await db.execute(text("SELECT 1"))
        database_ok = True
    except (SQLAlchemyError, OSError) as exc:
        logger.error("Database health check failed: %s", exc)
        database_ok = False
    
    redis_ok = await ping_redis(redis)
    
    return {
        "status": "healthy" if database_ok else "degraded",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "database": "ok" if database_ok else "unreachable",
        "redis": "ok" if redis_ok else "unreachable",
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
        "message": "Welcome to Fleet Dashboard Backend API",
        "docs": "/docs",
        "health": "/health",
    }
