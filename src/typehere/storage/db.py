"""SQLite data file shared by every typehere process on the machine."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from typehere.core.config import DATABASE_PATH

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Another process may hold the write lock while it saves the note list.
BUSY_TIMEOUT_MS = 5000


def _connect(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    return conn


def _run_migrations(conn: sqlite3.Connection) -> list[str]:
    """Apply pending ``migrations/*.sql`` files; returns the names applied."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS _migrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            applied_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """)
    done = {row["name"] for row in conn.execute("SELECT name FROM _migrations")}

    applied = []
    for script in sorted(MIGRATIONS_DIR.glob("*.sql")):
        if script.name in done:
            continue
        logger.info("Applying migration: %s", script.name)
        conn.executescript(script.read_text())
        conn.execute("INSERT INTO _migrations (name) VALUES (?)", (script.name,))
        conn.commit()
        applied.append(script.name)
    return applied


def init_db(db_path: Path | str | None = None) -> Path:
    """
    Create the data file if needed and bring its schema up to date.

    Args:
        db_path: Path to the SQLite file (defaults to DATABASE_PATH)

    Returns:
        The resolved path, for adapters to reconnect with
    """
    path = Path(db_path) if db_path else DATABASE_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(path)
    try:
        # WAL lets other processes keep reading while one writes
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        applied = _run_migrations(conn)
    finally:
        conn.close()

    if applied:
        logger.debug("Schema of %s updated (%d migrations)", path, len(applied))
    return path


@contextmanager
def get_connection(
    db_path: Path | str | None = None,
) -> Generator[sqlite3.Connection, None, None]:
    """Open a connection that commits on success and rolls back on error."""
    conn = _connect(Path(db_path) if db_path else DATABASE_PATH)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
