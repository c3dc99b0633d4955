"""Periodic snapshots of the note list to a secondary store."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Protocol

from typehere.core.config import BACKUP_INTERVAL_HOURS, LAST_BACKUP_KEY
from typehere.core.notes import NoteStore, encode_notes
from typehere.core.persistence import KeyValueStore, PersistentValue, StorageError
from typehere.core.types import utcnow

logger = logging.getLogger(__name__)


class BackupSink(Protocol):
    """Secondary store that accepts whole-list snapshots."""

    def append_snapshot(self, timestamp: datetime, payload: str) -> None:
        pass


class BackupScheduler:
    """Backs the note list up once per interval.

    The time of the last successful backup is kept in the key/value store
    so the schedule survives restarts.
    """

    def __init__(
        self,
        store: NoteStore,
        kv: KeyValueStore,
        sink: BackupSink,
        interval: timedelta | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.sink = sink
        self.interval = interval or timedelta(hours=BACKUP_INTERVAL_HOURS)
        self._clock = clock
        self._last_backup: PersistentValue[str | None] = PersistentValue(
            kv, LAST_BACKUP_KEY, None
        )

    @property
    def last_backup(self) -> datetime | None:
        raw = self._last_backup.value
        if not raw:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except (TypeError, ValueError):
            logger.warning("Ignoring unreadable last backup date %r", raw)
            return None

    def is_due(self, now: datetime | None = None) -> bool:
        last = self.last_backup
        if last is None:
            return True
        return (now or self._clock()) - last >= self.interval

    def backup_now(self, now: datetime | None = None) -> bool:
        """Snapshot the notes immediately; returns False on failure."""
        now = now or self._clock()
        try:
            self.sink.append_snapshot(now, encode_notes(self.store.notes))
        except StorageError:
            logger.error("Backup failed", exc_info=True)
            return False
        self._last_backup.set(now.isoformat())
        logger.info("Backed up %d notes", len(self.store.notes))
        return True

    def tick(self, now: datetime | None = None) -> bool:
        """Back up if the interval has elapsed; returns True if it did."""
        now = now or self._clock()
        if not self.is_due(now):
            return False
        return self.backup_now(now)

    def startup(self, now: datetime | None = None) -> bool:
        """Eager backup when the last one is older than the interval."""
        return self.tick(now)
