"""
Playlist source configuration and per-source fetch statistics.
"""
from enum import Enum
from typing import Optional

from streamverse.models.channel import ApiModel, SourceType


class SourceConfig(ApiModel):
    """A configured remote origin publishing one playlist document."""
    name: str
    url: str
    type: SourceType = SourceType.IPTV
    priority: Optional[int] = None  # Lower is preferred; None sorts last
    enabled: bool = True


class SourceStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class SourceStats(ApiModel):
    """Outcome of the latest fetch of one source."""
    record_count: int = 0
    status: SourceStatus = SourceStatus.PENDING
    error: Optional[str] = None
    attempts: int = 0
    source_type: Optional[SourceType] = None


class SourceInfo(ApiModel):
    """Source as exposed by the API: its configuration plus current stats."""
    name: str
    url: str
    type: SourceType
    priority: Optional[int] = None
    enabled: bool = True
    stats: SourceStats


class SourceListResponse(ApiModel):
    sources: list[SourceInfo]
    active_sources: int
    total_sources: int
