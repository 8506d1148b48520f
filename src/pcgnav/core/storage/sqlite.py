"""
SQLite key/value backend.

Features:
- Schema versioning and migrations
- Connection per operation via a context manager
- Batch deletes in a single transaction
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .base import KeyValueBackend, StoredEntry

SCHEMA_VERSION = 1


class SQLiteBackend(KeyValueBackend):
    """Persistent key/value storage in a local SQLite file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_db()

    @contextmanager
    def _connection(self):
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema with versioning."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL,
                    description TEXT
                )
            """)

            current_version = self._get_schema_version_internal(conn)
            if current_version < SCHEMA_VERSION:
                self._migrate(conn, current_version)

    def _get_schema_version_internal(self, conn: sqlite3.Connection) -> int:
        row = conn.execute("SELECT MAX(version) as v FROM schema_version").fetchone()
        return row["v"] if row and row["v"] else 0

    def _migrate(self, conn: sqlite3.Connection, from_version: int) -> None:
        """Run schema migrations."""
        if from_version < 1:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    accessed_at REAL NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_entries_accessed ON entries(accessed_at)")
            conn.execute("""
                INSERT INTO schema_version (version, applied_at, description)
                VALUES (1, ?, 'Initial schema')
            """, (datetime.now(timezone.utc).isoformat(),))

    def get_schema_version(self) -> int:
        with self._connection() as conn:
            return self._get_schema_version_internal(conn)

    def get(self, key: str) -> Optional[StoredEntry]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value, accessed_at FROM entries WHERE key = ?", (key,)
            ).fetchone()
            return StoredEntry(row["value"], row["accessed_at"]) if row else None

    def put(self, key: str, value: str, accessed_at: float) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO entries (key, value, accessed_at) VALUES (?, ?, ?)",
                (key, value, accessed_at),
            )

    def touch(self, key: str, accessed_at: float) -> None:
        with self._connection() as conn:
            conn.execute("UPDATE entries SET accessed_at = ? WHERE key = ?", (accessed_at, key))

    def delete(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM entries WHERE key = ?", (key,))

    def delete_many(self, keys: List[str]) -> int:
        if not keys:
            return 0
        with self._connection() as conn:
            conn.executemany("DELETE FROM entries WHERE key = ?", [(k,) for k in keys])
        return len(keys)

    def keys(self, prefix: str = "") -> List[str]:
        with self._connection() as conn:
            rows = conn.execute("SELECT key FROM entries ORDER BY key").fetchall()
        return [row["key"] for row in rows if row["key"].startswith(prefix)]
