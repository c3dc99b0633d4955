"""Storage layer for typehere - SQLite database, repositories and adapters."""

from typehere.storage.adapters import SqliteBackupSink, SqliteKeyValueStore
from typehere.storage.db import get_connection, init_db
from typehere.storage.repos import BackupsRepo, KeyValueRepo

__all__ = [
    "get_connection",
    "init_db",
    "BackupsRepo",
    "KeyValueRepo",
    "SqliteBackupSink",
    "SqliteKeyValueStore",
]
