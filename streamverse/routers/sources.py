"""
Source status, validation and refresh endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from streamverse.config import get_settings
from streamverse.exceptions import CatalogUnavailableError
from streamverse.models.catalog import CatalogStats, ValidationStatus
from streamverse.models.source import SourceListResponse, SourceStatus
from streamverse.services.catalog_service import get_catalog_service
from streamverse.services.validator import get_validation_worker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sources"])


@router.get("/sources", response_model=SourceListResponse)
async def list_sources():
    """
    List configured sources with the outcome of their latest fetch.
    """
    sources = get_catalog_service().source_infos()
    return SourceListResponse(
        sources=sources,
        active_sources=sum(1 for s in sources if s.stats.status == SourceStatus.SUCCESS),
        total_sources=len(sources),
    )


@router.get("/stats", response_model=CatalogStats)
async def get_stats():
    """Get catalog statistics."""
    return get_catalog_service().stats()


@router.get("/validation-status", response_model=ValidationStatus)
async def get_validation_status():
    """
    Get background validation progress.
    """
    return get_validation_worker().status()


@router.post("/validation/start")
async def start_validation():
    """
    Start a validation run.
    Responds already_running, already_validated or started.
    """
    result = get_validation_worker().start()
    return {"status": result.value}


@router.post("/refresh")
async def refresh_catalog(x_admin_key: Optional[str] = Header(None)):
    """
    Rebuild the catalog from all sources and swap it in.
    Requires the X-Admin-Key header; set STREAMVERSE_ADMIN_API_KEY to configure.
    """
    settings = get_settings()
    if x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing admin API key")

    service = get_catalog_service()
    try:
        catalog = await service.refresh()
    except CatalogUnavailableError as e:
        logger.error(f"Catalog refresh failed: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)

    logger.info(f"Catalog refreshed: {len(catalog.channels)} channels")
    return {"status": "completed", "stats": service.stats()}
