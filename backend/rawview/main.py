"""
Main FastAPI application for the raw volume slice server
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .middleware.conditional_gzip import ConditionalGZipMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .config import settings
from .api import volumes

# Configure logging
logging.basicConfig(
    level  = getattr(logging, settings.log_level.upper()),
    format = settings.log_format
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {settings.app_name}, version {settings.app_version}")
    logger.info(f"Data path: {settings.data_root_path}")
    logger.info(f"Max file size: {settings.max_file_size} bytes, cached files: {settings.max_cached_files}")

    yield

    # Buffers can be large; release them all on shutdown
    volumes.volume_service.clear_cache()
    logger.info(f"Shutting down {settings.app_name} API")

# Create FastAPI application
app = FastAPI(
    title       = settings.app_name,
    version     = settings.app_version,
    description = settings.app_description,
    docs_url    = "/docs" if settings.debug else None,
    redoc_url   = "/redoc" if settings.debug else None,
    lifespan    = lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins     = settings.cors_origins,
    allow_credentials = True,
    allow_methods     = ["GET", "DELETE", "OPTIONS"],
    allow_headers     = ["*"],
    expose_headers    = ["X-Slice-Width", "X-Slice-Height", "X-Window-Min", "X-Window-Max"],
)

# Compress JSON metadata responses; slice payloads are left as-is.
app.add_middleware(ConditionalGZipMiddleware, minimum_size=settings.gzip_minimum_size)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "data_root_path_exists": settings.data_root_path.exists(),
        "cached_volumes": len(volumes.volume_service.cache),
    }

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.debug else "Documentation disabled in production"
    }

app.include_router(volumes.router, tags=[settings.app_api_version])

if __name__ == "__main__":
    uvicorn.run(
        "rawview.main:app",
        host      = settings.host,
        port      = settings.port,
        reload    = settings.debug,
        log_level = settings.log_level.lower()
    )
