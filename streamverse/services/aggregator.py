"""
Playlist aggregation service.
Fetches and parses every configured source with bounded concurrency and
tolerates individual source failures.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from streamverse.config import Settings, get_settings
from streamverse.exceptions import SourceFetchError
from streamverse.models.channel import ChannelRecord
from streamverse.models.source import SourceConfig, SourceStats, SourceStatus
from streamverse.services.fetcher import SourceFetcher
from streamverse.services.m3u_parser import parse_playlist

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    records: list[ChannelRecord] = field(default_factory=list)
    source_stats: dict[str, SourceStats] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return sum(1 for s in self.source_stats.values() if s.status == SourceStatus.SUCCESS)


class Aggregator:
    """Runs fetch + parse for all sources and merges the results."""

    def __init__(self, fetcher: Optional[SourceFetcher] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.fetcher = fetcher or SourceFetcher(settings=self.settings)
        self.concurrency = max(1, self.settings.fetch_concurrency)

    async def aggregate(self, sources: list[SourceConfig]) -> AggregationResult:
        """
        Fetch and parse all enabled sources.

        Records are concatenated in source configuration order regardless of
        completion order. Failed sources contribute no records. Every
        configured source gets a stats entry; disabled ones stay pending.
        """
        enabled = [s for s in sources if s.enabled]
        semaphore = asyncio.Semaphore(self.concurrency)

        async def load_with_sem(source: SourceConfig):
            async with semaphore:
                return await self._load_source(source)

        logger.info(f"Aggregating {len(enabled)} sources ({self.concurrency} at a time)")
        outcomes = dict(zip(
            [s.name for s in enabled],
            await asyncio.gather(*[load_with_sem(s) for s in enabled]),
        ))

        # Merge after every fetch is done so no partial source is ever visible
        result = AggregationResult()
        for source in sources:
            if source.name not in outcomes:
                result.source_stats[source.name] = SourceStats(source_type=source.type)
                continue
            records, stats = outcomes[source.name]
            result.records.extend(records)
            result.source_stats[source.name] = stats

        logger.info(
            f"Aggregation complete: {len(result.records)} records from "
            f"{result.succeeded}/{len(enabled)} sources"
        )
        return result

    async def _load_source(self, source: SourceConfig) -> tuple[list[ChannelRecord], SourceStats]:
        try:
            text, attempts = await self.fetcher.fetch(source)
        except SourceFetchError as e:
            logger.warning(f"✗ {source.name}: {e.message} after {e.attempts} attempt(s)")
            return [], SourceStats(
                status=SourceStatus.FAILED,
                error=e.message,
                attempts=e.attempts,
                source_type=source.type,
            )
        except Exception as e:
            logger.error(f"✗ {source.name}: unexpected error {e!r}")
            return [], SourceStats(
                status=SourceStatus.FAILED,
                error=str(e) or e.__class__.__name__,
                attempts=1,
                source_type=source.type,
            )

        records = parse_playlist(text, source.name, source.type, priority=source.priority)
        logger.info(f"✓ {source.name}: {len(records)} channels")
        return records, SourceStats(
            record_count=len(records),
            status=SourceStatus.SUCCESS,
            attempts=attempts,
            source_type=source.type,
        )
