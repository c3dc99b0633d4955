"""Configuration management for typehere core."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid integer for %s: %r, using %s", key, value, default)
        return default


def get_env_float(key: str, default: float) -> float:
    """Get environment variable as float."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid float for %s: %r, using %s", key, value, default)
        return default


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get environment variable as boolean."""
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    return default


# Data directory (XDG-style, defaults to ~/.typehere)
TYPEHERE_DATA_DIR = Path(
    get_env("TYPEHERE_DATA_DIR", os.path.expanduser("~/.typehere"))
    or os.path.expanduser("~/.typehere")
)

# Database path (key/value state + backups)
DATABASE_PATH = TYPEHERE_DATA_DIR / "typehere.db"

# Periodic backup
BACKUP_INTERVAL_HOURS = get_env_float("BACKUP_INTERVAL_HOURS", 24.0)

# Palette matching
NOTE_MATCH_THRESHOLD = get_env_float("NOTE_MATCH_THRESHOLD", 0.3)
WORKSPACE_MATCH_THRESHOLD = get_env_float("WORKSPACE_MATCH_THRESHOLD", 0.05)
MAX_ACTION_QUERY_CHARS = get_env_int("MAX_ACTION_QUERY_CHARS", 20)

# Export file name offered by the CLI
EXPORT_FILENAME = get_env("EXPORT_FILENAME", "notes_export.json") or "notes_export.json"

# Logging
LOG_LEVEL = get_env("LOG_LEVEL", "INFO")

# Persisted keys
DATABASE_KEY = "typehere-database"
CURRENT_NOTE_KEY = "typehere-currentNoteId"
CURRENT_WORKSPACE_KEY = "typehere-currentWorkspace"
THEME_KEY = "typehere-theme"
VIM_KEY = "typehere-vim"
NARROW_KEY = "typehere-narrow"
LAST_BACKUP_KEY = "lastBackupDate"


def setup_logging() -> logging.Logger:
    """Configure and return logger."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, (LOG_LEVEL or "INFO").upper(), logging.INFO),
    )
    return logging.getLogger(__name__)
