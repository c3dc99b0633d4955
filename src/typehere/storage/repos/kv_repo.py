"""Key/value repository - pure data access for persisted app state."""

import sqlite3
from datetime import datetime, timezone


class KeyValueRepo:
    """Repository for versioned key/value rows."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize key/value repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def get(self, key: str) -> tuple[str, int] | None:
        """Get ``(value, version)`` for a key, or None if not set."""
        row = self.conn.execute(
            "SELECT value, version FROM kv WHERE key = ?",
            (key,),
        ).fetchone()
        if row:
            return row["value"], row["version"]
        return None

    def set(self, key: str, value: str) -> int:
        """Insert or replace a value; returns the new version."""
        now = datetime.now(timezone.utc).isoformat()
        self.conn.execute(
            """
            INSERT INTO kv (key, value, version, updated_at)
            VALUES (?, ?, 1, ?)
            ON CONFLICT (key) DO UPDATE SET
                value = excluded.value,
                version = kv.version + 1,
                updated_at = excluded.updated_at
            """,
            (key, value, now),
        )
        row = self.conn.execute(
            "SELECT version FROM kv WHERE key = ?", (key,)
        ).fetchone()
        return row["version"]

    def versions(self, keys: list[str]) -> dict[str, int]:
        """Current versions for the given keys (missing keys omitted)."""
        if not keys:
            return {}
        placeholders = ", ".join("?" for _ in keys)
        rows = self.conn.execute(
            f"SELECT key, version FROM kv WHERE key IN ({placeholders})",
            keys,
        ).fetchall()
        return {row["key"]: row["version"] for row in rows}
