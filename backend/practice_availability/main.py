"""
Practice Availability API - Main Application Entry Point
Staff availability resolution for practice management
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
import time

from practice_availability.config import get_settings
from practice_availability.database import Database
from practice_availability.routers import (
    availability,
    base_availability,
    occupancy,
    organisations,
    weekly_overrides,
)
from practice_availability.utils.exceptions import register_exception_handlers

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management - startup and shutdown"""
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Validate production settings
    errors = settings.validate_production_settings()
    for error in errors:
        logger.warning(f"Configuration warning: {error}")

    # Connect to database
    await Database.connect()

    yield

    # Shutdown
    logger.info("Shutting down application")
    await Database.disconnect()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Availability resolution for practice staff",
    version=settings.APP_VERSION,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(round(process_time * 1000, 2))
    return response


# Exception handlers
register_exception_handlers(app)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs" if settings.DEBUG else "Disabled in production",
        "api_prefix": settings.API_V1_PREFIX
    }


# Include routers
prefix = settings.API_V1_PREFIX
app.include_router(base_availability.router, prefix=f"{prefix}/base-availability", tags=["Base Availability"])
app.include_router(weekly_overrides.router, prefix=f"{prefix}/weekly-override", tags=["Weekly Overrides"])
app.include_router(occupancy.router, prefix=f"{prefix}/occupancy", tags=["Occupancy"])
app.include_router(availability.router, prefix=prefix, tags=["Availability"])
app.include_router(organisations.router, prefix=f"{prefix}/organisations", tags=["Organisations"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "practice_availability.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
