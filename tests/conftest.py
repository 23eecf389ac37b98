"""
Pytest configuration and fixtures for StreamVerse backend tests.
"""
import pytest

from streamverse.config import Settings
from streamverse.models.catalog import Catalog
from streamverse.models.channel import ChannelRecord, SourceType
from streamverse.models.source import SourceStats, SourceStatus
from streamverse.rate_limit import limiter
from streamverse.services import catalog_service as catalog_service_module
from streamverse.services import validator as validator_module
from streamverse.services.dedup import dedupe


def make_record(name, source="Src", priority=None, url=None, category="News", seq=1,
                source_type=SourceType.IPTV):
    """Build a ChannelRecord with sensible defaults."""
    return ChannelRecord(
        record_id=f"{source}_{seq}",
        name=name,
        category=category,
        source_name=source,
        source_type=source_type,
        source_priority=priority,
        stream_url=url or f"http://{source.lower().replace(' ', '-')}.example.com/{seq}.m3u8",
    )


@pytest.fixture
def test_settings(tmp_path):
    """Settings that never sleep and keep files under tmp_path."""
    return Settings(
        _env_file=None,
        snapshot_path=str(tmp_path / "channels-cache.json"),
        validation_cache_path=str(tmp_path / "validation.db"),
        fetch_max_attempts=3,
        fetch_backoff_base=0,
        fetch_concurrency=2,
        validation_batch_size=2,
        validation_batch_delay=0,
        validate_on_startup=False,
    )


@pytest.fixture
def sample_m3u_content():
    """Sample M3U content for testing."""
    return """#EXTM3U
#EXTINF:-1 tvg-id="ABC.us@East" tvg-logo="http://example.com/abc.png" group-title="News;USA",ABC East
http://example.com/abc-east.m3u8
#EXTINF:-1 tvg-id="CNN.us" group-title="News",CNN (1080p)
http://example.com/cnn.m3u8
#EXTINF:-1,Channel Without Group
http://example.com/no-group.m3u8
"""


@pytest.fixture
def sample_catalog():
    """Catalog with one three-way cluster and a few singletons."""
    records = [
        make_record("BBC News HD", source="Beta", priority=2, category="News;UK", seq=1),
        make_record("Sky Sports", source="Beta", priority=2, category="Sports;UK", seq=2),
        make_record("bbc news hd", source="Alpha", priority=1, category="News", seq=1),
        make_record("Aaj Tak", source="Alpha", priority=1, category="News;India", seq=2),
        make_record("BBC NEWS HD!!", source="Gamma", priority=3, category="News;UK", seq=1),
        make_record("Jazz Radio", source="Gamma", priority=3, category="Music",
                    source_type=SourceType.RADIO, seq=2),
    ]
    channels, alternatives = dedupe(records)
    return Catalog(
        channels=channels,
        alternatives=alternatives,
        source_stats={
            "Alpha": SourceStats(record_count=2, status=SourceStatus.SUCCESS, attempts=1),
            "Beta": SourceStats(record_count=2, status=SourceStatus.SUCCESS, attempts=1),
            "Gamma": SourceStats(record_count=2, status=SourceStatus.SUCCESS, attempts=2),
        },
    )


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Give every test fresh service singletons and no rate limiting."""
    monkeypatch.setattr(catalog_service_module, "_catalog_service", None)
    monkeypatch.setattr(validator_module, "_validation_worker", None)
    monkeypatch.setattr(limiter, "enabled", False)
