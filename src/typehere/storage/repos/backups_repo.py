"""Backups repository - append-only snapshots of the note list."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class BackupRecord:
    """A stored snapshot."""

    id: int
    date: datetime
    data: str


class BackupsRepo:
    """Repository for backup snapshots."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize backups repository.

        Args:
            conn: SQLite connection with row_factory set
        """
        self.conn = conn

    def append(self, date: datetime, data: str) -> int:
        """Store a snapshot; returns its id."""
        cursor = self.conn.execute(
            "INSERT INTO backups (date, data) VALUES (?, ?)",
            (date.isoformat(), data),
        )
        return int(cursor.lastrowid)

    def list_recent(self, limit: int = 10) -> list[BackupRecord]:
        rows = self.conn.execute(
            "SELECT id, date, data FROM backups ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [
            BackupRecord(
                id=row["id"],
                date=datetime.fromisoformat(row["date"]),
                data=row["data"],
            )
            for row in rows
        ]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM backups").fetchone()[0]
