"""
M3U Parser Service.
Turns raw M3U/M3U8 playlist text into channel records.
"""
import logging
import re
from typing import Optional

from streamverse.models.channel import ChannelRecord, SourceType

logger = logging.getLogger(__name__)

EXTINF_PREFIX = "#EXTINF:"

# Quoted key="value" attributes on the EXTINF line
LOGO_PATTERN = re.compile(r'tvg-logo="([^"]*)"')
GROUP_PATTERN = re.compile(r'group-title="([^"]*)"')
TVG_ID_PATTERN = re.compile(r'tvg-id="([^"]*)"')

LINE_SPLIT_PATTERN = re.compile(r"\r\n|\r|\n")

STREAM_SCHEMES = ("http://", "https://", "rtmp://", "rtmps://", "rtsp://", "rtp://", "udp://", "mms://")

DEFAULT_NAME = "Unknown Channel"
DEFAULT_CATEGORIES = {
    SourceType.IPTV: "TV",
    SourceType.RADIO: "Radio",
    SourceType.WEBTV: "Web TV",
}
FALLBACK_CATEGORY = "Live TV"


def default_category(source_type: SourceType) -> str:
    """Category assigned to entries that declare no group-title."""
    return DEFAULT_CATEGORIES.get(source_type, FALLBACK_CATEGORY)


def is_stream_url(line: str) -> bool:
    return line.lower().startswith(STREAM_SCHEMES)


def extract_quality(name: str) -> Optional[str]:
    """Extract quality from stream name."""
    name_lower = name.lower()

    if '4k' in name_lower or '2160' in name_lower:
        return '4K'
    elif '1080' in name_lower:
        return '1080p'
    elif '720' in name_lower:
        return '720p'
    elif '480' in name_lower:
        return '480p'
    elif '360' in name_lower:
        return '360p'

    return None


def _parse_extinf(line: str, source_type: SourceType) -> dict:
    """Pull name, logo, group and tvg-id out of one EXTINF line."""
    _, comma, label = line.rpartition(",")
    name = label.strip() if comma else ""

    logo_match = LOGO_PATTERN.search(line)
    group_match = GROUP_PATTERN.search(line)
    tvg_id_match = TVG_ID_PATTERN.search(line)

    category = group_match.group(1).strip() if group_match else ""

    return {
        "name": name or DEFAULT_NAME,
        "logo_url": (logo_match.group(1).strip() or None) if logo_match else None,
        "category": category or default_category(source_type),
        "tvg_id": (tvg_id_match.group(1).strip() or None) if tvg_id_match else None,
    }


def parse_playlist(
    text: str,
    source_name: str,
    source_type: SourceType = SourceType.IPTV,
    priority: Optional[int] = None,
) -> list[ChannelRecord]:
    """
    Parse playlist text into channel records.

    Only entries made of an EXTINF line followed by a URL line with a known
    stream scheme are emitted. Anything else is skipped; this never raises on
    malformed content.

    Args:
        text: Raw playlist document
        source_name: Name of the source the text came from
        source_type: Kind of source, used for the default category
        priority: Source priority copied onto every record

    Returns:
        Records in playlist order
    """
    records: list[ChannelRecord] = []
    pending: Optional[dict] = None

    for raw_line in LINE_SPLIT_PATTERN.split(text or ""):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(EXTINF_PREFIX):
            pending = _parse_extinf(line, source_type)
            continue

        if line.startswith("#") or pending is None:
            continue

        if not is_stream_url(line):
            # Stray text between EXTINF and its URL
            continue

        records.append(ChannelRecord(
            record_id=f"{source_name}_{len(records) + 1}",
            source_name=source_name,
            source_type=source_type,
            source_priority=priority,
            stream_url=line,
            quality=extract_quality(pending["name"]),
            **pending,
        ))
        pending = None

    logger.debug(f"Parsed {len(records)} entries from {source_name}")
    return records
