"""Repository classes for data access."""

from typehere.storage.repos.backups_repo import BackupRecord, BackupsRepo
from typehere.storage.repos.kv_repo import KeyValueRepo

__all__ = [
    "BackupRecord",
    "BackupsRepo",
    "KeyValueRepo",
]
