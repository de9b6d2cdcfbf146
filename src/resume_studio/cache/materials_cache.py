"""SQLite cache for generated application materials, keyed by job id."""

from __future__ import annotations

import logging
import sqlite3
import time
from pathlib import Path

from resume_studio.models.enhanced import BulletUpdateStatus, EnhancedResume

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".resume-studio" / "materials.db"
DEFAULT_TTL_DAYS = 30


class MaterialsCache:
    """SQLite-backed store of enhanced résumés with optional TTL expiration.

    A ``ttl_days`` of 0 keeps entries forever.
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_PATH,
        ttl_days: int = DEFAULT_TTL_DAYS,
    ):
        self.db_path = Path(db_path)
        self.ttl_seconds = ttl_days * 86400
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS materials_cache (
                    job_id TEXT PRIMARY KEY,
                    enhanced_json TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _expired(self, created_at: float, now: float | None = None) -> bool:
        if self.ttl_seconds == 0:
            return False
        return (now or time.time()) - created_at > self.ttl_seconds

    @staticmethod
    def _key(job_id: str) -> str:
        key = job_id.strip()
        if not key:
            raise ValueError("job_id must not be empty")
        return key

    def get(self, job_id: str) -> EnhancedResume | None:
        """Get cached materials for a job if present and not expired."""
        key = self._key(job_id)
        with self._connect() as conn:
            row = conn.execute(
                "SELECT enhanced_json, created_at FROM materials_cache WHERE job_id = ?",
                (key,),
            ).fetchone()

        if row is None:
            return None

        enhanced_json, created_at = row
        if self._expired(created_at):
            logger.debug("Materials for job %s expired", key)
            self.delete(key)
            return None

        return EnhancedResume.model_validate_json(enhanced_json)

    def put(self, job_id: str, enhanced: EnhancedResume) -> None:
        """Cache the materials for a job, replacing any earlier entry."""
        key = self._key(job_id)
        now = time.time()
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO materials_cache
                   (job_id, enhanced_json, created_at, updated_at)
                   VALUES (?, ?, ?, ?)""",
                (key, enhanced.model_dump_json(), now, now),
            )

    def update_statuses(self, job_id: str, statuses: list[BulletUpdateStatus]) -> bool:
        """Replace the per-bullet statuses of a cached entry.

        Returns False when there is no live entry for the job. The entry's
        creation time, and so its expiry, is left as it was.
        """
        enhanced = self.get(job_id)
        if enhanced is None:
            return False
        key = self._key(job_id)
        with self._connect() as conn:
            conn.execute(
                "UPDATE materials_cache SET enhanced_json = ?, updated_at = ? WHERE job_id = ?",
                (enhanced.with_statuses(statuses).model_dump_json(), time.time(), key),
            )
        return True

    def delete(self, job_id: str) -> None:
        """Delete the cached materials for a job."""
        key = self._key(job_id)
        with self._connect() as conn:
            conn.execute("DELETE FROM materials_cache WHERE job_id = ?", (key,))

    def clear(self) -> int:
        """Clear all cached entries. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM materials_cache")
            return cursor.rowcount

    def stats(self) -> dict:
        """Return cache statistics."""
        with self._connect() as conn:
            total = conn.execute("SELECT COUNT(*) FROM materials_cache").fetchone()[0]
            if self.ttl_seconds == 0:
                expired = 0
            else:
                expired = conn.execute(
                    "SELECT COUNT(*) FROM materials_cache WHERE ? - created_at > ?",
                    (time.time(), self.ttl_seconds),
                ).fetchone()[0]
        return {"total": total, "expired": expired, "active": total - expired}
