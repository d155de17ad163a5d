"""
FTNed Last-Read Store

Separate SQLite database holding per-user read positions, so they
survive independently of the shared jnode database.
"""

import sqlite3
import logging
import time
from pathlib import Path
from contextlib import contextmanager
from typing import Optional, Generator

from .models import LastRead

logger = logging.getLogger(__name__)


class LastReadStore:
    """
    SQLite store for last-read positions, keyed by (username, area).

    Uses WAL mode so a second reader process does not block writes.
    """

    def __init__(self, path: str):
        """
        Initialize the store.

        Args:
            path: Path to SQLite database file, or ":memory:"
        """
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def initialize(self):
        """Open the database connection and create the schema."""
        if self.path != ":memory:":
            path = Path(self.path).expanduser().resolve()
            path.parent.mkdir(parents=True, exist_ok=True)
            self.path = str(path)

        self._conn = sqlite3.connect(
            self.path,
            check_same_thread=False,
            isolation_level=None  # Autocommit mode
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.row_factory = sqlite3.Row

        self._run_migrations()
        logger.info(f"Initialized lastread database at {self.path}")

    def _run_migrations(self):
        """Run database migrations."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                id INTEGER PRIMARY KEY,
                name TEXT UNIQUE NOT NULL,
                applied_at INTEGER NOT NULL
            )
        """)

        applied = {
            row[0] for row in
            self._conn.execute("SELECT name FROM _migrations").fetchall()
        }

        migrations = [
            ("001_lastread", self._migration_001_lastread),
        ]

        for name, func in migrations:
            if name not in applied:
                logger.info(f"Running migration: {name}")
                func()
                self._conn.execute(
                    "INSERT INTO _migrations (name, applied_at) VALUES (?, ?)",
                    (name, int(time.time()))
                )

    def _migration_001_lastread(self):
        """Initial lastread schema."""
        self._conn.executescript("""
            CREATE TABLE IF NOT EXISTS lastread (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                username        TEXT NOT NULL,
                area_name       TEXT NOT NULL,
                last_read_msg   INTEGER NOT NULL DEFAULT 0,
                high_read_msg   INTEGER NOT NULL DEFAULT 0,
                last_updated    INTEGER NOT NULL,
                UNIQUE(username, area_name)
            );
            CREATE INDEX IF NOT EXISTS idx_lastread_username ON lastread(username);
            CREATE INDEX IF NOT EXISTS idx_lastread_area ON lastread(area_name);
        """)

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database transactions."""
        conn = self._require()
        conn.execute("BEGIN")
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception:
            conn.execute("ROLLBACK")
            raise

    def close(self):
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            logger.info("Lastread database closed")

    def _require(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Lastread database not initialized")
        return self._conn

    # === Read positions ===

    def get_last_read(self, username: str, area_name: str) -> int:
        """Get last read position, 0 if the user never read the area."""
        row = self._require().execute(
            "SELECT last_read_msg FROM lastread WHERE username = ? AND area_name = ?",
            (username, area_name)
        ).fetchone()
        return row[0] if row else 0

    def get_high_read(self, username: str, area_name: str) -> int:
        """Get the highest position ever read, 0 if none."""
        row = self._require().execute(
            "SELECT high_read_msg FROM lastread WHERE username = ? AND area_name = ?",
            (username, area_name)
        ).fetchone()
        return row[0] if row else 0

    def set_last_read(self, username: str, area_name: str, position: int):
        """Store last read position; the high-water mark only grows."""
        self._require().execute("""
            INSERT INTO lastread (username, area_name, last_read_msg, high_read_msg, last_updated)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(username, area_name) DO UPDATE SET
                last_read_msg = excluded.last_read_msg,
                high_read_msg = MAX(high_read_msg, excluded.high_read_msg),
                last_updated = excluded.last_updated
        """, (username, area_name, position, position, int(time.time())))

    def get_all_last_reads(self, username: str) -> list[LastRead]:
        """Get all positions for a user."""
        rows = self._require().execute(
            "SELECT * FROM lastread WHERE username = ? ORDER BY area_name",
            (username,)
        ).fetchall()
        return [self._row_to_lastread(row) for row in rows]

    def get_last_reads_by_area(self, area_name: str) -> list[LastRead]:
        """Get all users' positions in an area."""
        rows = self._require().execute(
            "SELECT * FROM lastread WHERE area_name = ? ORDER BY username",
            (area_name,)
        ).fetchall()
        return [self._row_to_lastread(row) for row in rows]

    def delete_last_read(self, username: str, area_name: str) -> bool:
        """Delete a user's position in an area."""
        cursor = self._require().execute(
            "DELETE FROM lastread WHERE username = ? AND area_name = ?",
            (username, area_name)
        )
        return cursor.rowcount > 0

    def delete_all_for_user(self, username: str) -> int:
        """Delete all positions for a user."""
        cursor = self._require().execute(
            "DELETE FROM lastread WHERE username = ?", (username,)
        )
        logger.info(f"Deleted {cursor.rowcount} lastread records for user {username}")
        return cursor.rowcount

    def delete_all_for_area(self, area_name: str) -> int:
        """Delete all positions for an area."""
        cursor = self._require().execute(
            "DELETE FROM lastread WHERE area_name = ?", (area_name,)
        )
        logger.info(f"Deleted {cursor.rowcount} lastread records for area {area_name}")
        return cursor.rowcount

    def get_stats(self) -> dict[str, int]:
        """Record, user and area totals."""
        row = self._require().execute("""
            SELECT COUNT(*),
                   COUNT(DISTINCT username),
                   COUNT(DISTINCT area_name)
            FROM lastread
        """).fetchone()
        return {
            "total_records": row[0],
            "unique_users": row[1],
            "unique_areas": row[2],
        }

    def _row_to_lastread(self, row) -> LastRead:
        """Convert database row to LastRead object."""
        return LastRead(
            id=row["id"],
            username=row["username"],
            area_name=row["area_name"],
            last_read_msg=row["last_read_msg"],
            high_read_msg=row["high_read_msg"],
            last_updated=row["last_updated"]
        )
