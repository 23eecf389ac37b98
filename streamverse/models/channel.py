"""
Channel record and catalog channel models.
Records come out of the playlist parser; channels are the deduplicated primaries.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialized with camelCase keys, accepting either spelling on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceType(str, Enum):
    """Coarse content kind of a playlist source."""
    IPTV = "iptv"
    WEBTV = "webtv"
    RADIO = "radio"
    PLUTO = "pluto"
    TUBI = "tubi"
    SAMSUNG = "samsung"
    PLEX = "plex"
    OTHER = "other"


class ChannelRecord(ApiModel):
    """One playlist entry as parsed from a single source."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    record_id: str
    name: str
    logo_url: Optional[str] = None
    category: str
    source_name: str
    source_type: SourceType = SourceType.IPTV
    source_priority: Optional[int] = None
    stream_url: str
    tvg_id: Optional[str] = None
    quality: Optional[str] = None


class Channel(ChannelRecord):
    """Primary record of a dedup cluster, with its catalog-wide id."""
    id: int

    @classmethod
    def from_record(cls, record: ChannelRecord, channel_id: int) -> "Channel":
        return cls(**record.model_dump(), id=channel_id)


# Response models for API
class ChannelSummary(Channel):
    """Channel as listed by the API, with the size of its fallback list."""
    alternatives_count: int = 0


class AlternativeItem(ChannelRecord):
    """Alternative stream with its position in the fallback order."""
    alternative_index: int


class ChannelListResponse(ApiModel):
    """Paginated channel list response."""
    channels: list[ChannelSummary]
    total: int
    page: int
    per_page: int
    has_more: bool


class AlternativesResponse(ApiModel):
    """Fallback streams for one channel."""
    channel_id: int
    alternatives: list[AlternativeItem]


class TagListResponse(ApiModel):
    """Topical categories and countries present in the catalog."""
    categories: list[str]
    countries: list[str]
