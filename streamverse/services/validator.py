"""
Stream Validation Service

Best-effort liveness probing of stream URLs. A probe is a HEAD request,
falling back to a small ranged GET when HEAD is rejected. Results are
advisory: any failure simply counts as "not validated".

The background worker validates the current catalog in batches, one run at a
time, and remembers which channels had at least one working stream.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import httpx

from streamverse.config import Settings, get_settings
from streamverse.models.catalog import Catalog, ValidationStatus
from streamverse.models.channel import Channel, SourceType
from streamverse.services.catalog_service import CatalogService, get_catalog_service
from streamverse.services.validation_cache import ValidationCache

logger = logging.getLogger(__name__)

PLAYLIST_CONTENT_TYPES = (
    "application/vnd.apple.mpegurl",
    "application/x-mpegurl",
    "audio/mpegurl",
    "audio/x-mpegurl",
)
AUDIO_CONTENT_TYPES = ("audio/", "application/ogg", "application/octet-stream") + PLAYLIST_CONTENT_TYPES
VIDEO_CONTENT_TYPES = (
    "video/",
    "application/dash+xml",
    "application/octet-stream",
) + PLAYLIST_CONTENT_TYPES

PROBE_RANGE = "bytes=0-1023"


def allowed_content_types(source_type: SourceType) -> tuple[str, ...]:
    return AUDIO_CONTENT_TYPES if source_type == SourceType.RADIO else VIDEO_CONTENT_TYPES


def looks_playable(response: httpx.Response, source_type: SourceType) -> bool:
    """2xx and either an expected content type or a plausible size."""
    if not 200 <= response.status_code < 300:
        return False

    content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type and content_type.startswith(allowed_content_types(source_type)):
        return True

    content_length = response.headers.get("content-length")
    if content_length is None:
        return True
    try:
        return int(content_length) > 0
    except ValueError:
        return False


class StreamValidator:
    """Probes single stream URLs."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ValidationCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.client = client
        self.cache = cache
        self.timeout = self.settings.validation_timeout
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "*/*",
        }

    async def validate(
        self,
        url: str,
        source_type: SourceType = SourceType.IPTV,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> bool:
        """
        Check whether a stream URL looks alive.

        Never raises: network errors, timeouts and unexpected responses all
        yield False.
        """
        if not url or not url.strip():
            return False

        if self.cache is not None:
            try:
                cached = await self.cache.get(url)
            except Exception as e:
                logger.warning(f"Validation cache read failed: {e}")
                cached = None
            if cached is not None:
                return cached

        client = client or self.client
        try:
            if client is not None:
                ok = await self._probe(client, url, source_type, timeout or self.timeout)
            else:
                async with httpx.AsyncClient(follow_redirects=True, verify=False) as own_client:
                    ok = await self._probe(own_client, url, source_type, timeout or self.timeout)
        except Exception as e:
            logger.debug(f"Validation failed for {url}: {e!r}")
            ok = False

        if self.cache is not None:
            try:
                await self.cache.set(url, ok)
            except Exception as e:
                logger.warning(f"Validation cache write failed: {e}")
        return ok

    async def _probe(self, client: httpx.AsyncClient, url: str, source_type: SourceType, timeout: float) -> bool:
        # Try HEAD first
        response = await client.head(url, headers=self.headers, timeout=timeout)
        if 200 <= response.status_code < 300:
            return looks_playable(response, source_type)

        # Some servers don't support HEAD; only read headers of the ranged GET
        async with client.stream(
            "GET", url, headers={**self.headers, "Range": PROBE_RANGE}, timeout=timeout
        ) as response:
            return looks_playable(response, source_type)


class ValidationStart(str, Enum):
    ALREADY_RUNNING = "already_running"
    ALREADY_VALIDATED = "already_validated"
    STARTED = "started"


class ValidationWorker:
    """Background worker that validates the catalog in batches."""

    def __init__(
        self,
        catalog_service: Optional[CatalogService] = None,
        validator: Optional[StreamValidator] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog_service = catalog_service or get_catalog_service()
        self.validator = validator or StreamValidator(
            cache=ValidationCache(self.settings.validation_cache_path, self.settings.validation_ttl_seconds),
            settings=self.settings,
        )
        self.batch_size = max(1, self.settings.validation_batch_size)
        self.batch_delay = self.settings.validation_batch_delay
        self.max_channels = self.settings.validation_max_channels

        self._task: Optional[asyncio.Task] = None
        self._catalog: Optional[Catalog] = None
        self._validated: dict[int, str] = {}  # channel id -> source of the working stream
        self._checked_sources = 0
        self._completed = False
        self._last_run: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _is_current(self) -> bool:
        return self.catalog_service.has_catalog and self._catalog is self.catalog_service.catalog

    def start(self) -> ValidationStart:
        """Start a validation run unless one is active or already done for this catalog."""
        if self.running:
            return ValidationStart.ALREADY_RUNNING
        if self._completed and self._is_current():
            return ValidationStart.ALREADY_VALIDATED

        catalog = self.catalog_service.catalog
        self._task = asyncio.create_task(self.run(catalog))
        logger.info("🏥 Validation run started")
        return ValidationStart.STARTED

    async def stop(self):
        """Cancel the active run, if any."""
        if self.running:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Validation run cancelled")

    async def wait(self):
        """Wait for the active run to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)

    def validated_ids(self) -> set[int]:
        """Ids validated for the current catalog."""
        if not self._is_current():
            return set()
        return set(self._validated)

    def status(self) -> ValidationStatus:
        total = len(self.catalog_service.catalog.channels) if self.catalog_service.has_catalog else 0
        current = self._is_current()
        breakdown: dict[str, int] = {}
        if current:
            for source_name in self._validated.values():
                breakdown[source_name] = breakdown.get(source_name, 0) + 1

        return ValidationStatus(
            validation_in_progress=self.running,
            validated_count=len(self._validated) if current else 0,
            total_channels=total,
            checked_sources=self._checked_sources if current else 0,
            validation_limit=min(total, self.max_channels),
            last_run=self._last_run if current else None,
            source_breakdown=breakdown,
        )

    async def run(self, catalog: Catalog):
        """Validate up to max_channels channels of `catalog`, batch by batch."""
        self._catalog = catalog
        self._validated = {}
        self._checked_sources = 0
        self._completed = False

        if self.validator.cache is not None:
            try:
                await self.validator.cache.clear_expired()
            except Exception as e:
                logger.warning(f"Validation cache cleanup failed: {e}")

        channels = catalog.channels[:self.max_channels]
        skipped = len(catalog.channels) - len(channels)
        if skipped:
            logger.info(f"Validating first {len(channels)} channels, {skipped} left unvalidated")

        if self.validator.client is not None:
            await self._run_batches(catalog, channels, self.validator.client)
        else:
            # One pooled client for the whole run
            async with httpx.AsyncClient(follow_redirects=True, verify=False) as client:
                await self._run_batches(catalog, channels, client)

        self._completed = True
        self._last_run = datetime.now(timezone.utc)
        logger.info(f"✅ Validation complete: {len(self._validated)}/{len(channels)} channels verified")

    async def _run_batches(self, catalog: Catalog, channels: list[Channel], client: httpx.AsyncClient):
        for start in range(0, len(channels), self.batch_size):
            batch = channels[start:start + self.batch_size]
            results = await asyncio.gather(
                *[self._validate_channel(catalog, ch, client) for ch in batch],
                return_exceptions=True,
            )

            for channel, result in zip(batch, results):
                if isinstance(result, Exception):
                    logger.error(f"Validation error for channel {channel.id}: {result!r}")
                elif result:
                    self._validated[channel.id] = result

            logger.info(
                f"Batch complete: {len(self._validated)}/{start + len(batch)} channels verified"
            )
            if start + self.batch_size < len(channels):
                await asyncio.sleep(self.batch_delay)

    async def _validate_channel(
        self,
        catalog: Catalog,
        channel: Channel,
        client: httpx.AsyncClient,
    ) -> Optional[str]:
        """Return the source name of the first working stream of a channel."""
        for record in [channel, *catalog.alternatives_for(channel.id)]:
            self._checked_sources += 1
            if await self.validator.validate(record.stream_url, record.source_type, client=client):
                return record.source_name
        return None


# Singleton
_validation_worker: Optional[ValidationWorker] = None


def get_validation_worker() -> ValidationWorker:
    """Get or create validation worker singleton."""
    global _validation_worker
    if _validation_worker is None:
        _validation_worker = ValidationWorker()
    return _validation_worker
