"""
Playlist source configuration.
Sources come from a JSON file when STREAMVERSE_SOURCES_FILE is set,
otherwise from the built-in list below.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter

from streamverse.config import get_settings
from streamverse.models.source import SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = [
    SourceConfig(name="IPTV-org Main", url="https://iptv-org.github.io/iptv/index.m3u", type="iptv", priority=1),
    SourceConfig(name="IPTV-org US", url="https://iptv-org.github.io/iptv/countries/us.m3u", type="iptv", priority=2),
    SourceConfig(name="IPTV-org IN", url="https://iptv-org.github.io/iptv/countries/in.m3u", type="iptv", priority=3),
    SourceConfig(
        name="Free-TV",
        url="https://raw.githubusercontent.com/Free-TV/IPTV/master/playlist.m3u8",
        type="iptv",
        priority=4,
    ),
]

_source_list_adapter = TypeAdapter(list[SourceConfig])


def load_sources(path: Optional[str | Path] = None) -> list[SourceConfig]:
    """
    Load source configs from a JSON file.

    Args:
        path: File holding a JSON list of sources. Defaults to the configured
            sources_file; when neither is set the built-in list is returned.

    Raises:
        FileNotFoundError: The configured file does not exist
        pydantic.ValidationError: The file does not describe a list of sources
    """
    path = path or get_settings().sources_file
    if not path:
        return list(DEFAULT_SOURCES)

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Sources file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        sources = _source_list_adapter.validate_python(json.load(f))

    names = [s.name for s in sources]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate source names in {path}: {', '.join(duplicates)}")

    logger.info(f"Loaded {len(sources)} sources from {path}")
    return sources
