"""
Tests for stream probing, the validation cache and the background worker.
"""
import aiosqlite
import httpx
import pytest

from streamverse.models.catalog import Catalog
from streamverse.models.channel import SourceType
from streamverse.services.catalog_service import CatalogService
from streamverse.services.validation_cache import ValidationCache
from streamverse.services.validator import (
    StreamValidator,
    ValidationStart,
    ValidationWorker,
    looks_playable,
)

ALIVE = {
    "http://beta.example.com/1.m3u8",
    "http://alpha.example.com/2.m3u8",
}


def alive_handler(request):
    if str(request.url) in ALIVE:
        return httpx.Response(200, headers={"content-type": "video/mp2t"})
    return httpx.Response(404)


def make_worker(settings, catalog, handler=alive_handler):
    service = CatalogService(settings=settings, sources=[])
    service.swap(catalog)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    validator = StreamValidator(client=client, settings=settings)
    return ValidationWorker(catalog_service=service, validator=validator, settings=settings), service


class TestLooksPlayable:

    def test_expected_content_type(self):
        assert looks_playable(httpx.Response(200, headers={"content-type": "video/mp2t"}), SourceType.IPTV)
        assert looks_playable(
            httpx.Response(200, headers={"content-type": "application/vnd.apple.mpegurl; charset=utf-8"}),
            SourceType.IPTV,
        )
        assert looks_playable(httpx.Response(200, headers={"content-type": "audio/mpeg"}), SourceType.RADIO)

    def test_non_success_status(self):
        assert not looks_playable(httpx.Response(404, headers={"content-type": "video/mp2t"}), SourceType.IPTV)
        assert not looks_playable(httpx.Response(302), SourceType.IPTV)

    def test_plausible_size(self):
        html_empty = httpx.Response(200, headers={"content-type": "text/html", "content-length": "0"})
        html_large = httpx.Response(200, headers={"content-type": "text/html", "content-length": "5000"})

        assert not looks_playable(html_empty, SourceType.IPTV)
        assert looks_playable(html_large, SourceType.IPTV)
        assert looks_playable(httpx.Response(200), SourceType.IPTV)


class TestStreamValidator:

    @pytest.mark.asyncio
    async def test_head_success(self, test_settings):
        async with httpx.AsyncClient(transport=httpx.MockTransport(alive_handler)) as client:
            validator = StreamValidator(client=client, settings=test_settings)
            assert await validator.validate("http://beta.example.com/1.m3u8")
            assert not await validator.validate("http://beta.example.com/9.m3u8")

    @pytest.mark.asyncio
    async def test_falls_back_to_ranged_get(self, test_settings):
        seen = []

        def handler(request):
            seen.append(request.method)
            if request.method == "HEAD":
                return httpx.Response(405)
            assert request.headers["range"] == "bytes=0-1023"
            return httpx.Response(206, headers={"content-type": "video/mp2t"}, content=b"\x47" * 1024)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            validator = StreamValidator(client=client, settings=test_settings)
            assert await validator.validate("http://cdn.example.com/live.ts")

        assert seen == ["HEAD", "GET"]

    @pytest.mark.asyncio
    async def test_network_errors_are_not_raised(self, test_settings):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            validator = StreamValidator(client=client, settings=test_settings)
            assert await validator.validate("http://down.example.com/live.m3u8") is False
            assert await validator.validate("   ") is False

    @pytest.mark.asyncio
    async def test_cached_result_skips_network(self, test_settings, tmp_path):
        calls = {"n": 0}

        def handler(request):
            calls["n"] += 1
            return alive_handler(request)

        cache = ValidationCache(str(tmp_path / "validation.db"), ttl_seconds=60)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            validator = StreamValidator(client=client, cache=cache, settings=test_settings)
            assert await validator.validate("http://beta.example.com/1.m3u8")
            assert await validator.validate("http://beta.example.com/1.m3u8")

        assert calls["n"] == 1


class TestValidationCache:

    @pytest.mark.asyncio
    async def test_get_and_set(self, tmp_path):
        cache = ValidationCache(str(tmp_path / "validation.db"), ttl_seconds=60)

        assert await cache.get("http://a.example.com/1") is None
        await cache.set("http://a.example.com/1", True)
        await cache.set("http://a.example.com/2", False)

        assert await cache.get("http://a.example.com/1") is True
        assert await cache.get("http://a.example.com/2") is False

    @pytest.mark.asyncio
    async def test_expired_entries(self, tmp_path):
        cache = ValidationCache(str(tmp_path / "validation.db"), ttl_seconds=-1)
        await cache.set("http://a.example.com/1", True)

        assert await cache.get("http://a.example.com/1") is None
        assert await cache.clear_expired() == 1


class TestValidationWorker:

    @pytest.mark.asyncio
    async def test_run_records_working_source(self, test_settings, sample_catalog):
        worker, _ = make_worker(test_settings, sample_catalog)
        await worker.run(sample_catalog)

        # Channel 0 fails on its primary and passes on the first alternative
        assert worker.validated_ids() == {0, 2}
        status = worker.status()
        assert status.validated_count == 2
        assert status.total_channels == 4
        assert status.checked_sources == 5
        assert status.source_breakdown == {"Beta": 1, "Alpha": 1}
        assert status.last_run is not None
        assert not status.validation_in_progress

    @pytest.mark.asyncio
    async def test_single_flight(self, test_settings, sample_catalog):
        worker, _ = make_worker(test_settings, sample_catalog)

        assert worker.start() == ValidationStart.STARTED
        assert worker.start() == ValidationStart.ALREADY_RUNNING
        await worker.wait()
        assert worker.start() == ValidationStart.ALREADY_VALIDATED

    @pytest.mark.asyncio
    async def test_results_go_stale_after_catalog_swap(self, test_settings, sample_catalog):
        worker, service = make_worker(test_settings, sample_catalog)
        await worker.run(sample_catalog)
        assert worker.validated_ids()

        service.swap(Catalog(
            channels=sample_catalog.channels[:1],
            alternatives={0: sample_catalog.alternatives_for(0)},
        ))

        assert worker.validated_ids() == set()
        assert worker.status().validated_count == 0
        assert worker.start() == ValidationStart.STARTED
        await worker.wait()
        assert worker.validated_ids() == {0}

    @pytest.mark.asyncio
    async def test_max_channels_cap(self, test_settings, sample_catalog):
        probed = []

        def handler(request):
            probed.append(str(request.url))
            return alive_handler(request)

        settings = test_settings.model_copy(update={"validation_max_channels": 2})
        worker, _ = make_worker(settings, sample_catalog, handler)
        await worker.run(sample_catalog)

        assert worker.status().validation_limit == 2
        assert worker.validated_ids() == {0}
        assert "http://alpha.example.com/2.m3u8" not in probed

    @pytest.mark.asyncio
    async def test_stop_cancels_run(self, test_settings, sample_catalog):
        worker, _ = make_worker(test_settings, sample_catalog)
        worker.start()
        await worker.stop()

        assert not worker.running

    @pytest.mark.asyncio
    async def test_run_purges_expired_cache_entries(self, test_settings, sample_catalog, tmp_path):
        db_path = str(tmp_path / "validation.db")
        await ValidationCache(db_path, ttl_seconds=-1).set("http://gone.example.com/old.m3u8", True)

        worker, _ = make_worker(test_settings, sample_catalog)
        worker.validator.cache = ValidationCache(db_path, ttl_seconds=60)
        await worker.run(sample_catalog)

        async with aiosqlite.connect(db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM validation_results WHERE url = ?",
                ("http://gone.example.com/old.m3u8",)
            )
            (count,) = await cursor.fetchone()
        assert count == 0
        # Fresh results from this run are kept
        assert await worker.validator.cache.get("http://beta.example.com/1.m3u8") is True
