"""
Festival Registration API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Logging
- Database and Redis connections
- CORS middleware and the common error envelope
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import fest_api.models  # noqa: F401  (registers every table on Base.metadata)
from fest_api import __version__
from fest_api.api import api_router
from fest_api.core.config import settings
from fest_api.core.database import close_db, init_db
from fest_api.core.http import register_exception_handlers
from fest_api.core.redis import close_redis, init_redis

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Connects Redis (rate limiting) and checks the database on startup.
    Outside production a failed connection is logged and the API still
    starts; rate limiting then falls back to in-process memory.
    """
    logger.info(f"Starting Festival Registration API in {settings.python_env} mode...")

    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    yield

    logger.info("Shutting down Festival Registration API...")
    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title="Festival Registration API",
    description="College registration, review and final approval for the cultural festival",
    version=__version__,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix=settings.api_prefix)

register_exception_handlers(app)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to the Festival Registration API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for load balancers and Lambda warmers."""
    return {"status": "healthy"}
