"""
Catalog, snapshot and status models.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from streamverse.models.channel import ApiModel, Channel, ChannelRecord
from streamverse.models.source import SourceStats, SourceStatus


class Catalog(ApiModel):
    """
    One fully built catalog snapshot.

    Never patched in place: a refresh builds a new Catalog and the owning
    service swaps the reference.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    channels: list[Channel] = Field(default_factory=list)
    alternatives: dict[int, list[ChannelRecord]] = Field(default_factory=dict)
    source_stats: dict[str, SourceStats] = Field(default_factory=dict)
    built_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    from_snapshot: bool = False

    _by_id: dict[int, Channel] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._by_id = {channel.id: channel for channel in self.channels}

    def get_channel(self, channel_id: int) -> Optional[Channel]:
        return self._by_id.get(channel_id)

    def alternatives_for(self, channel_id: int) -> list[ChannelRecord]:
        return self.alternatives.get(channel_id, [])

    @property
    def total_alternatives(self) -> int:
        return sum(len(alts) for alts in self.alternatives.values())

    @property
    def active_sources(self) -> int:
        return sum(1 for s in self.source_stats.values() if s.status == SourceStatus.SUCCESS)


class CatalogSnapshot(ApiModel):
    """On-disk form of a catalog. Alternatives are stored as [id, records] pairs."""
    timestamp: datetime
    channels: list[Channel]
    alternatives: list[tuple[int, list[ChannelRecord]]] = Field(default_factory=list)
    source_stats: dict[str, SourceStats] = Field(default_factory=dict)

    @classmethod
    def from_catalog(cls, catalog: Catalog) -> "CatalogSnapshot":
        return cls(
            timestamp=catalog.built_at,
            channels=catalog.channels,
            alternatives=list(catalog.alternatives.items()),
            source_stats=catalog.source_stats,
        )

    def to_catalog(self) -> Catalog:
        known_ids = {channel.id for channel in self.channels}
        return Catalog(
            channels=self.channels,
            alternatives={
                channel_id: records
                for channel_id, records in self.alternatives
                if records and channel_id in known_ids
            },
            source_stats=self.source_stats,
            built_at=self.timestamp,
            from_snapshot=True,
        )


class ValidationStatus(ApiModel):
    """Progress and results of background stream validation."""
    validation_in_progress: bool = False
    validated_count: int = 0
    total_channels: int = 0
    checked_sources: int = 0
    validation_limit: int = 0
    last_run: Optional[datetime] = None
    source_breakdown: dict[str, int] = Field(default_factory=dict)


class CatalogStats(ApiModel):
    total_channels: int
    total_alternatives: int
    total_sources: int
    active_sources: int
    built_at: datetime
    from_snapshot: bool
