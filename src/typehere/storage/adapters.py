"""SQLite-backed persistence adapter and backup sink."""

import logging
import sqlite3
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from typehere.core.persistence import ChangeCallback, StorageError, Subscribers
from typehere.storage.db import get_connection, init_db
from typehere.storage.repos import BackupRecord, BackupsRepo, KeyValueRepo

logger = logging.getLogger(__name__)


class SqliteKeyValueStore:
    """Key/value adapter over the ``kv`` table.

    Every write bumps a per-key version. ``poll`` compares versions with
    the ones this instance last saw and notifies subscribers about keys
    another process has changed since.
    """

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = init_db(db_path)
        self._subscribers = Subscribers()
        self._versions: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        try:
            with get_connection(self.db_path) as conn:
                row = KeyValueRepo(conn).get(key)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {key}") from exc
        if row is None:
            return None
        value, version = row
        self._versions[key] = version
        return value

    def set(self, key: str, value: str) -> None:
        try:
            with get_connection(self.db_path) as conn:
                self._versions[key] = KeyValueRepo(conn).set(key, value)
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to write {key}") from exc

    def subscribe(self, key: str, callback: ChangeCallback) -> Callable[[], None]:
        return self._subscribers.add(key, callback)

    def poll(self, keys: list[str]) -> list[str]:
        """Notify subscribers of keys changed elsewhere; returns the keys delivered.

        Notifications go out in the order of ``keys``.
        """
        try:
            with get_connection(self.db_path) as conn:
                current = KeyValueRepo(conn).versions(keys)
        except sqlite3.Error:
            logger.error("Failed to poll for changes", exc_info=True)
            return []

        changed = [
            key
            for key in keys
            if key in current and self._versions.get(key) != current[key]
        ]
        notified = []
        for key in changed:
            try:
                value = self.get(key)
            except StorageError:
                logger.error("Failed to read changed key %s", key, exc_info=True)
                continue
            self._subscribers.notify(key, value)
            notified.append(key)
        return notified


class SqliteBackupSink:
    """Secondary store receiving periodic snapshots."""

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = init_db(db_path)

    def append_snapshot(self, timestamp: datetime, payload: str) -> None:
        try:
            with get_connection(self.db_path) as conn:
                backup_id = BackupsRepo(conn).append(timestamp, payload)
        except sqlite3.Error as exc:
            raise StorageError("Failed to append backup snapshot") from exc
        logger.info("Backup %s stored", backup_id)

    def recent(self, limit: int = 10) -> list[BackupRecord]:
        with get_connection(self.db_path) as conn:
            return BackupsRepo(conn).list_recent(limit)

    def count(self) -> int:
        with get_connection(self.db_path) as conn:
            return BackupsRepo(conn).count()
