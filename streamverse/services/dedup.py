"""
Channel deduplication.
Clusters records whose names normalize to the same key and picks one
primary per cluster; the remaining members become its alternatives.
"""
import logging
import re

from streamverse.models.channel import Channel, ChannelRecord

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Normalize channel name for clustering ("BBC News HD!!" -> "bbc news hd")."""
    if not name:
        return ''
    name = name.lower()
    name = _NON_WORD.sub('', name)
    name = _WHITESPACE.sub(' ', name)
    return name.strip()


def _priority_key(indexed: tuple[int, ChannelRecord]) -> tuple:
    index, record = indexed
    priority = record.source_priority
    # Missing priority sorts after every explicit one; discovery order breaks ties
    return (priority is None, priority or 0, index)


def dedupe(
    records: list[ChannelRecord],
    merge_empty_names: bool = True,
) -> tuple[list[Channel], dict[int, list[ChannelRecord]]]:
    """
    Group records into channels with ordered alternatives.

    Args:
        records: Records in discovery order
        merge_empty_names: Put every record whose name normalizes to an empty
            string into a single cluster. When False each of them stands alone.

    Returns:
        Primaries (ids assigned from 0 in cluster order) and a mapping from
        primary id to its alternatives. Singleton clusters have no entry.
    """
    clusters: dict[str, list[tuple[int, ChannelRecord]]] = {}
    for index, record in enumerate(records):
        key = normalize_name(record.name)
        if not key and not merge_empty_names:
            key = f"\x00{index}"
        clusters.setdefault(key, []).append((index, record))

    channels: list[Channel] = []
    alternatives: dict[int, list[ChannelRecord]] = {}

    for members in clusters.values():
        ordered = [record for _, record in sorted(members, key=_priority_key)]
        channel_id = len(channels)
        channels.append(Channel.from_record(ordered[0], channel_id))
        if len(ordered) > 1:
            alternatives[channel_id] = ordered[1:]

    logger.info(f"Deduplicated {len(records)} records into {len(channels)} channels")
    return channels, alternatives
