"""
Playlist source fetcher.
Downloads raw playlist text with per-attempt timeouts and exponential backoff.
"""
import asyncio
import logging
from typing import Optional

import httpx

from streamverse.config import Settings, get_settings
from streamverse.exceptions import SourceFetchError
from streamverse.models.source import SourceConfig

logger = logging.getLogger(__name__)


class SourceFetcher:
    """Fetches playlist documents from remote sources."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client = client
        self.max_attempts = max(1, self.settings.fetch_max_attempts)
        self.timeout = httpx.Timeout(
            self.settings.fetch_read_timeout,
            connect=self.settings.fetch_connect_timeout,
        )
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "*/*",
        }

    async def fetch(self, source: SourceConfig) -> tuple[str, int]:
        """
        Fetch one source's playlist text.

        Returns:
            The playlist text and the number of attempts it took

        Raises:
            SourceFetchError: The source failed on every attempt, or returned
                a non-retryable HTTP status
        """
        if self._client is not None:
            return await self._fetch_with_retries(self._client, source)

        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._fetch_with_retries(client, source)

    async def _fetch_with_retries(self, client: httpx.AsyncClient, source: SourceConfig) -> tuple[str, int]:
        last_error = "unknown error"

        for attempt in range(self.max_attempts):
            try:
                response = await client.get(source.url, headers=self.headers, timeout=self.timeout)
                response.raise_for_status()
                return response.text, attempt + 1
            except httpx.HTTPStatusError as e:
                last_error = f"HTTP {e.response.status_code}"
                # Retry on 5xx errors only
                if e.response.status_code < 500:
                    raise SourceFetchError(source.name, last_error, attempts=attempt + 1) from e
            except httpx.TimeoutException:
                last_error = "Timeout"
            except httpx.HTTPError as e:
                last_error = str(e) or e.__class__.__name__

            if attempt + 1 < self.max_attempts:
                wait_time = (2 ** attempt) * self.settings.fetch_backoff_base
                logger.warning(
                    f"{source.name}: {last_error}, retry {attempt + 1}/{self.max_attempts - 1} in {wait_time}s"
                )
                await asyncio.sleep(wait_time)

        raise SourceFetchError(source.name, last_error, attempts=self.max_attempts)
