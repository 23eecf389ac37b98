"""
Catalog query service.
Filters the current catalog by category, country, name search and validation.
"""
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Optional

from streamverse.models.catalog import Catalog
from streamverse.models.channel import Channel, ChannelSummary
from streamverse.services.tags import TagKind, classify_tags

ALL = "all"


@dataclass
class QueryResult:
    channels: list[ChannelSummary] = field(default_factory=list)
    total: int = 0


def _active(value: Optional[str]) -> Optional[str]:
    """Return a filter value, or None when it is blank or 'all'."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == ALL:
        return None
    return value


def matches(
    channel: Channel,
    category: Optional[str] = None,
    country: Optional[str] = None,
    search: Optional[str] = None,
) -> bool:
    """Check one channel against already-normalized filters."""
    if category or country:
        tags = classify_tags(channel.category)
        if category and not tags.has(TagKind.CATEGORY, category):
            return False
        if country and not tags.has(TagKind.COUNTRY, country):
            return False
    if search and search.lower() not in channel.name.lower():
        return False
    return True


def query(
    catalog: Catalog,
    category: Optional[str] = None,
    country: Optional[str] = None,
    search: Optional[str] = None,
    channel_ids: Optional[Collection[int]] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> QueryResult:
    """
    Query channels with filters and pagination.

    All filters AND together and results keep catalog order. `total` is the
    number of matches before the offset/limit slice is applied.

    Args:
        catalog: Catalog to search
        category: Topical category tag ("all" or blank disables the filter)
        country: Country tag ("all" or blank disables the filter)
        search: Case-insensitive substring of the channel name
        channel_ids: Restrict to these channel ids (e.g. validated channels)
        offset: Number of matches to skip
        limit: Maximum number of channels to return
    """
    category, country = _active(category), _active(country)
    search = (search or "").strip() or None

    hits = [
        channel for channel in catalog.channels
        if (channel_ids is None or channel.id in channel_ids)
        and matches(channel, category, country, search)
    ]

    end = None if limit is None else offset + limit
    page = hits[offset:end]

    return QueryResult(
        channels=[
            ChannelSummary(
                **channel.model_dump(),
                alternatives_count=len(catalog.alternatives_for(channel.id)),
            )
            for channel in page
        ],
        total=len(hits),
    )


def list_tags(
    catalog: Catalog,
    channel_ids: Optional[Collection[int]] = None,
) -> tuple[list[str], list[str]]:
    """Distinct topical categories and countries, sorted case-insensitively."""
    categories: dict[str, str] = {}
    countries: dict[str, str] = {}

    for channel in catalog.channels:
        if channel_ids is not None and channel.id not in channel_ids:
            continue
        tags = classify_tags(channel.category)
        for tag in tags.categories:
            categories.setdefault(tag.lower(), tag)
        for tag in tags.countries:
            countries.setdefault(tag.lower(), tag)

    return (
        sorted(categories.values(), key=str.lower),
        sorted(countries.values(), key=str.lower),
    )
