"""
HTTP client for the catalog API, used by players to list channels and fetch
fallback streams.
"""
import logging
from typing import Optional

import httpx

from streamverse.models.channel import AlternativesResponse, ChannelListResponse, ChannelRecord

logger = logging.getLogger(__name__)


class CatalogApiClient:
    """Thin async client over /api/channels and /api/channel/{id}/alternatives."""

    def __init__(self, base_url: str = "", client: Optional[httpx.AsyncClient] = None, timeout: float = 15.0):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

    async def close(self):
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "CatalogApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def list_channels(
        self,
        category: Optional[str] = None,
        country: Optional[str] = None,
        search: Optional[str] = None,
        validated: bool = False,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> ChannelListResponse:
        """Fetch one page of channels. Check `total`, not page length, for more results."""
        params = {"page": page}
        if category:
            params["category"] = category
        if country:
            params["country"] = country
        if search:
            params["search"] = search
        if validated:
            params["validated"] = "true"
        if per_page:
            params["per_page"] = per_page

        response = await self._client.get("/api/channels", params=params)
        response.raise_for_status()
        return ChannelListResponse.model_validate(response.json())

    async def fetch_alternatives(self, channel_id: int) -> list[ChannelRecord]:
        """Fetch a channel's alternatives fresh. Any error yields an empty list."""
        try:
            response = await self._client.get(f"/api/channel/{channel_id}/alternatives")
            response.raise_for_status()
            alternatives = AlternativesResponse.model_validate(response.json()).alternatives
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading alternatives for channel {channel_id}: {e}")
            return []

        logger.info(f"Loaded {len(alternatives)} alternatives for channel {channel_id}")
        return list(alternatives)
