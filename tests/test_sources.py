"""
Tests for source configuration loading.
"""
import json

import pytest
from pydantic import ValidationError

from streamverse.models.channel import SourceType
from streamverse.services.sources import DEFAULT_SOURCES, load_sources


def test_builtin_sources_when_unconfigured(monkeypatch):
    monkeypatch.delenv("STREAMVERSE_SOURCES_FILE", raising=False)
    sources = load_sources()

    assert sources == DEFAULT_SOURCES
    assert [s.priority for s in sources] == [1, 2, 3, 4]


def test_load_from_file(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps([
        {"name": "Radio", "url": "http://radio.example.com/all.m3u", "type": "radio", "priority": 2},
        {"name": "Web", "url": "http://web.example.com/all.m3u", "type": "webtv", "enabled": False},
    ]))

    sources = load_sources(path)

    assert [s.name for s in sources] == ["Radio", "Web"]
    assert sources[0].type == SourceType.RADIO
    assert sources[1].priority is None
    assert not sources[1].enabled


def test_duplicate_names_rejected(tmp_path):
    path = tmp_path / "sources.json"
    entry = {"name": "Same", "url": "http://a.example.com/list.m3u"}
    path.write_text(json.dumps([entry, entry]))

    with pytest.raises(ValueError, match="Same"):
        load_sources(path)


def test_invalid_file(tmp_path):
    path = tmp_path / "sources.json"
    path.write_text(json.dumps([{"url": "http://a.example.com/list.m3u"}]))

    with pytest.raises(ValidationError):
        load_sources(path)

    with pytest.raises(FileNotFoundError):
        load_sources(tmp_path / "missing.json")
