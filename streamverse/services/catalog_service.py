"""
Catalog service.
Owns the current catalog: builds it from sources or a snapshot at startup,
rebuilds it on refresh and swaps the reference once the new one is complete.
"""
import asyncio
import logging
from typing import Optional

from streamverse.config import Settings, get_settings
from streamverse.exceptions import CatalogUnavailableError
from streamverse.models.catalog import Catalog, CatalogStats
from streamverse.models.source import SourceConfig, SourceInfo, SourceStats
from streamverse.services.aggregator import Aggregator
from streamverse.services.dedup import dedupe
from streamverse.services.snapshot import load_snapshot, save_snapshot
from streamverse.services.sources import load_sources

logger = logging.getLogger(__name__)


class CatalogService:
    """Holds the live catalog and rebuilds it wholesale."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        aggregator: Optional[Aggregator] = None,
        sources: Optional[list[SourceConfig]] = None,
    ):
        self.settings = settings or get_settings()
        self.aggregator = aggregator or Aggregator(settings=self.settings)
        self._sources = sources
        self._catalog: Optional[Catalog] = None
        self._refresh_lock = asyncio.Lock()

    @property
    def sources(self) -> list[SourceConfig]:
        if self._sources is None:
            self._sources = load_sources()
        return self._sources

    @property
    def has_catalog(self) -> bool:
        return self._catalog is not None

    @property
    def catalog(self) -> Catalog:
        """The current catalog. Readers always get a fully built one."""
        if self._catalog is None:
            raise CatalogUnavailableError("Catalog has not been built yet")
        return self._catalog

    def swap(self, catalog: Catalog) -> None:
        """Replace the current catalog."""
        self._catalog = catalog
        logger.info(
            f"📺 Catalog ready: {len(catalog.channels)} channels, "
            f"{catalog.total_alternatives} alternatives"
        )

    async def initialize(self) -> Catalog:
        """
        Build the startup catalog.

        Uses the snapshot when enabled and loadable, otherwise runs the full
        pipeline and saves a fresh snapshot.

        Raises:
            CatalogUnavailableError: No snapshot and no source succeeded
        """
        if self.settings.use_snapshot:
            catalog = load_snapshot(self.settings.snapshot_path)
            if catalog is not None:
                self.swap(catalog)
                return catalog

        return await self.refresh()

    async def build(self) -> Catalog:
        """
        Run aggregation and deduplication into a new catalog.

        Raises:
            CatalogUnavailableError: Every source failed, or none of them
                yielded a single playable entry
        """
        result = await self.aggregator.aggregate(self.sources)
        if result.succeeded == 0:
            raise CatalogUnavailableError(
                f"No playlist source could be loaded ({len(result.source_stats)} tried)"
            )
        if not result.records:
            raise CatalogUnavailableError(
                f"{result.succeeded} source(s) loaded but contained no playable entries"
            )

        channels, alternatives = dedupe(
            result.records,
            merge_empty_names=self.settings.dedup_merge_empty_names,
        )
        return Catalog(
            channels=channels,
            alternatives=alternatives,
            source_stats=result.source_stats,
        )

    async def refresh(self) -> Catalog:
        """Rebuild from sources and swap. The previous catalog stays live on failure."""
        async with self._refresh_lock:
            catalog = await self.build()
            self.swap(catalog)

        if self.settings.save_snapshot:
            try:
                save_snapshot(catalog, self.settings.snapshot_path)
            except OSError as e:
                logger.error(f"Failed to save catalog snapshot: {e}")
        return catalog

    def source_infos(self) -> list[SourceInfo]:
        """Configured sources with their stats from the current catalog."""
        stats = self._catalog.source_stats if self._catalog else {}
        return [
            SourceInfo(
                name=source.name,
                url=source.url,
                type=source.type,
                priority=source.priority,
                enabled=source.enabled,
                stats=stats.get(source.name) or SourceStats(source_type=source.type),
            )
            for source in self.sources
        ]

    def stats(self) -> CatalogStats:
        catalog = self.catalog
        return CatalogStats(
            total_channels=len(catalog.channels),
            total_alternatives=catalog.total_alternatives,
            total_sources=len(self.sources),
            active_sources=catalog.active_sources,
            built_at=catalog.built_at,
            from_snapshot=catalog.from_snapshot,
        )


# Singleton
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create catalog service singleton."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
