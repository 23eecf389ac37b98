"""
Channel discovery API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from streamverse.config import get_settings
from streamverse.models.channel import (
    AlternativeItem,
    AlternativesResponse,
    ChannelListResponse,
    TagListResponse,
)
from streamverse.rate_limit import DEFAULT_LIMIT, limiter
from streamverse.services.catalog_query import list_tags, query
from streamverse.services.catalog_service import get_catalog_service
from streamverse.services.validator import get_validation_worker

router = APIRouter(prefix="/api", tags=["channels"])


@router.get("/channels", response_model=ChannelListResponse)
@limiter.limit(DEFAULT_LIMIT)
async def list_channels(
    request: Request,
    category: Optional[str] = Query(None, description="Filter by category tag (e.g., news, sports)"),
    country: Optional[str] = Query(None, description="Filter by country tag (e.g., India, USA)"),
    search: Optional[str] = Query(None, description="Search in channel names"),
    validated: bool = Query(False, description="Only show channels with a verified stream"),
    page: int = Query(1, ge=1, description="Page number"),
    per_page: Optional[int] = Query(None, ge=1, description="Results per page"),
):
    """
    List channels with filtering and pagination.

    - **category**: Topical tag from /api/categories
    - **country**: Country tag from /api/categories
    - **search**: Search term for channel name
    - **validated**: Only channels verified by the background validator
    - **total** is the full match count; a short page does not mean no more results
    """
    settings = get_settings()
    per_page = min(per_page or settings.default_page_size, settings.max_page_size)

    catalog = get_catalog_service().catalog
    channel_ids = get_validation_worker().validated_ids() if validated else None

    result = query(
        catalog,
        category=category,
        country=country,
        search=search,
        channel_ids=channel_ids,
        offset=(page - 1) * per_page,
        limit=per_page,
    )

    return ChannelListResponse(
        channels=result.channels,
        total=result.total,
        page=page,
        per_page=per_page,
        has_more=(page * per_page) < result.total,
    )


@router.get("/channel/{channel_id}/alternatives", response_model=AlternativesResponse)
async def get_alternatives(channel_id: int):
    """
    Get the fallback streams of a channel, in the order clients should try them.
    """
    catalog = get_catalog_service().catalog
    if catalog.get_channel(channel_id) is None:
        raise HTTPException(status_code=404, detail="Channel not found")

    return AlternativesResponse(
        channel_id=channel_id,
        alternatives=[
            AlternativeItem(**record.model_dump(), alternative_index=index)
            for index, record in enumerate(catalog.alternatives_for(channel_id))
        ],
    )


@router.get("/categories", response_model=TagListResponse)
async def list_categories(
    validated: bool = Query(False, description="Only count channels with a verified stream"),
):
    """
    List topical categories and countries present in the catalog.
    """
    catalog = get_catalog_service().catalog
    channel_ids = get_validation_worker().validated_ids() if validated else None
    categories, countries = list_tags(catalog, channel_ids)
    return TagListResponse(categories=categories, countries=countries)
