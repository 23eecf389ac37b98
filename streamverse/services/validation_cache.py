"""
SQLite-backed cache of stream validation results.
Keeps the outcome of each probed URL for a TTL so unchanged streams are not
re-probed on every validation run.
"""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import aiosqlite

logger = logging.getLogger(__name__)


class ValidationCache:
    """Async SQLite cache of per-URL validation outcomes."""

    def __init__(self, db_path: str, ttl_seconds: int = 1800):
        self.db_path = db_path
        self.ttl_seconds = ttl_seconds
        self._initialized = False
        self._ensure_directory()

    def _ensure_directory(self):
        """Create data directory if it doesn't exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    async def initialize(self):
        """Create the results table if it doesn't exist."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS validation_results (
                    url TEXT PRIMARY KEY,
                    ok INTEGER NOT NULL,
                    checked_at TIMESTAMP NOT NULL,
                    expires_at TIMESTAMP NOT NULL
                )
            """)
            await db.execute(
                "CREATE INDEX IF NOT EXISTS idx_validation_expires ON validation_results(expires_at)"
            )
            await db.commit()
        self._initialized = True

    async def _ensure_initialized(self):
        if not self._initialized:
            await self.initialize()

    async def get(self, url: str) -> Optional[bool]:
        """Get the cached outcome for a URL if not expired."""
        await self._ensure_initialized()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT ok FROM validation_results WHERE url = ? AND expires_at > ?",
                (url, datetime.now(timezone.utc).isoformat())
            )
            row = await cursor.fetchone()
            if row:
                return bool(row[0])
            return None

    async def set(self, url: str, ok: bool):
        """Store the outcome for a URL with the cache TTL."""
        await self._ensure_initialized()
        now = datetime.now(timezone.utc)
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """INSERT OR REPLACE INTO validation_results (url, ok, checked_at, expires_at)
                   VALUES (?, ?, ?, ?)""",
                (url, int(ok), now.isoformat(), expires_at.isoformat())
            )
            await db.commit()

    async def clear_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""
        await self._ensure_initialized()
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM validation_results WHERE expires_at < ?",
                (datetime.now(timezone.utc).isoformat(),)
            )
            await db.commit()
            if cursor.rowcount:
                logger.debug(f"Removed {cursor.rowcount} expired validation results")
            return cursor.rowcount
