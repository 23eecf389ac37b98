#!/usr/bin/env python3
"""
Catalog Build Script

Fetches every configured playlist source, deduplicates the channels and writes
the catalog snapshot so the server starts without waiting on the network.

Usage:
    python -m streamverse.scripts.build_catalog --output data/channels-cache.json

Exit status is 1 when no source could be loaded.
"""

import argparse
import asyncio
import logging
import sys

from streamverse.config import get_settings
from streamverse.exceptions import CatalogUnavailableError
from streamverse.models.catalog import Catalog
from streamverse.models.source import SourceStatus
from streamverse.services.catalog_service import CatalogService
from streamverse.services.snapshot import save_snapshot
from streamverse.services.sources import load_sources

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def print_summary(catalog: Catalog):
    """
    Print a human-readable summary of the build.
    """
    print("\n" + "=" * 60)
    print("CATALOG BUILD RESULTS")
    print("=" * 60)
    print(f"Channels:     {len(catalog.channels)}")
    print(f"Alternatives: {catalog.total_alternatives}")
    print(f"Built at:     {catalog.built_at.isoformat()}")
    print("-" * 60)

    for name, stats in catalog.source_stats.items():
        mark = "✓" if stats.status == SourceStatus.SUCCESS else "✗"
        detail = f"{stats.record_count} channels" if stats.status == SourceStatus.SUCCESS else stats.error
        print(f"{mark} {name:30} {detail} ({stats.attempts} attempt(s))")

    print("=" * 60)


async def build(sources_file: str | None, output: str) -> int:
    settings = get_settings()
    service = CatalogService(settings=settings, sources=load_sources(sources_file))

    try:
        catalog = await service.build()
    except CatalogUnavailableError as e:
        logger.error(f"❌ Build failed: {e.message}")
        return 1

    print_summary(catalog)
    save_snapshot(catalog, output)
    print(f"\n📄 Snapshot saved to: {output}")
    return 0


async def main() -> int:
    parser = argparse.ArgumentParser(description="Build the channel catalog snapshot")
    parser.add_argument(
        "--sources", "-s",
        type=str,
        default=None,
        help="JSON file listing playlist sources (default: built-in list or STREAMVERSE_SOURCES_FILE)"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Snapshot path (default: STREAMVERSE_SNAPSHOT_PATH)"
    )

    args = parser.parse_args()
    return await build(args.sources, args.output or get_settings().snapshot_path)


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
