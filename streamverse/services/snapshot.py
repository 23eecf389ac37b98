"""
Catalog snapshot persistence.
Saves the built catalog as JSON so the next start can skip aggregation.
"""
import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from streamverse.models.catalog import Catalog, CatalogSnapshot

logger = logging.getLogger(__name__)


def save_snapshot(catalog: Catalog, path: str | Path) -> Path:
    """Write the catalog to `path`, replacing any previous snapshot atomically."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    snapshot = CatalogSnapshot.from_catalog(catalog)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(snapshot.model_dump_json(by_alias=True, indent=2))
    os.replace(tmp_path, path)

    logger.info(f"📸 Catalog snapshot saved: {len(catalog.channels)} channels to {path}")
    return path


def load_snapshot(path: str | Path) -> Optional[Catalog]:
    """
    Load a catalog from a snapshot file.

    Returns:
        The catalog, or None when the file is missing, unreadable, malformed
        or holds no channels
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No catalog snapshot at {path}")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            snapshot = CatalogSnapshot.model_validate(json.load(f))
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable catalog snapshot {path}: {e}")
        return None

    if not snapshot.channels:
        logger.warning(f"Ignoring empty catalog snapshot {path}")
        return None

    catalog = snapshot.to_catalog()
    logger.info(f"📥 Loaded catalog snapshot: {len(catalog.channels)} channels from {snapshot.timestamp}")
    return catalog
