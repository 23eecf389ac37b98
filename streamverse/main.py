"""
StreamVerse - FastAPI Backend

Aggregates public M3U playlists into a deduplicated channel catalog with
ordered fallback streams per channel.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from streamverse.config import get_settings
from streamverse.exceptions import CatalogUnavailableError
from streamverse.rate_limit import limiter
from streamverse.routers import channels, sources
from streamverse.services.catalog_service import get_catalog_service
from streamverse.services.validator import get_validation_worker

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting StreamVerse backend...")
    settings = get_settings()

    # Build the catalog before serving; failing here aborts startup
    service = get_catalog_service()
    if not service.has_catalog:
        try:
            await service.initialize()
        except CatalogUnavailableError as e:
            logger.critical(f"Cannot build channel catalog: {e.message}")
            raise

    worker = get_validation_worker()
    if settings.validate_on_startup:
        worker.start()

    yield

    logger.info("Shutting down StreamVerse backend...")
    await worker.stop()


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Multi-source IPTV channel catalog with stream fallback",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(channels.router)
app.include_router(sources.router)


# API endpoints
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "catalogLoaded": get_catalog_service().has_catalog,
    }


# Error handlers
@app.exception_handler(CatalogUnavailableError)
async def catalog_unavailable_handler(request: Request, exc: CatalogUnavailableError):
    """Catalog not built yet."""
    return JSONResponse(
        status_code=503,
        content={"detail": exc.message}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "streamverse.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
