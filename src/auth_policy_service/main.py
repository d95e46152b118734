"""FaultMaven Auth Policy Service

Main FastAPI application entry point.
Reconciles tenant authentication method policy against Microsoft Graph.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth_policy_service.config.settings import get_settings
from auth_policy_service.api.routes import policy
from auth_policy_service.core.policy.factory import initialize_policy_reconciler, reset_reconciler
from auth_policy_service.infrastructure.redis.client import (
    close_redis_client,
    get_redis_client,
    get_redis_status,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings = get_settings()

    # Startup
    logger.info(f"Starting {settings.service_name} v{settings.service_version}")
    logger.info(f"Environment: {settings.environment}")

    # Redis is optional: without it settings fall back to defaults and
    # outcomes are only logged
    redis = None
    try:
        redis_client = await get_redis_client()
        redis = redis_client.get_client()
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Failed to connect to Redis: {e}")
        logger.warning("Tenant settings overrides and audit trail will not be available")
        await close_redis_client()

    http_client = httpx.AsyncClient(timeout=settings.graph_timeout_seconds)
    initialize_policy_reconciler(settings, http_client, redis)

    yield

    # Shutdown
    logger.info("Shutting down Auth Policy Service")
    reset_reconciler()
    await http_client.aclose()
    await close_redis_client()
    logger.info("Connections closed")


# Create FastAPI application
app = FastAPI(
    title="FaultMaven Auth Policy Service",
    version=settings.service_version,
    description="Tenant authentication method policy reconciliation",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Health check endpoint
@app.get("/health")
async def root_health_check():
    """Root health check endpoint

    Redis is optional, so an unavailable Redis leaves the service healthy;
    a connected but unresponsive Redis marks it degraded.
    """
    redis_status = await get_redis_status()
    return {
        "status": "degraded" if redis_status == "unhealthy" else "healthy",
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
        "services": {
            "redis": redis_status,
        },
    }


@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "service": settings.service_name,
        "version": settings.service_version,
        "description": "FaultMaven Authentication Policy Service",
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(policy.router, tags=["authentication-policy"])


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please try again later."
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "auth_policy_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
