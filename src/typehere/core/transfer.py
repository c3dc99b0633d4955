"""Import/export of the whole note list as a compact URL-safe blob."""

import base64
import binascii
import logging
import zlib
from collections.abc import Iterable

from typehere.core.notes import decode_notes, encode_notes
from typehere.core.types import Note

logger = logging.getLogger(__name__)


def export_notes(notes: Iterable[Note]) -> str:
    """Serialize notes to compressed, URL-safe text."""
    payload = zlib.compress(encode_notes(notes).encode("utf-8"), 9)
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")


def import_notes(blob: str) -> list[Note] | None:
    """Decode an exported blob; returns None if it cannot be decoded."""
    text = blob.strip()
    padded = text + "=" * (-len(text) % 4)
    try:
        raw = zlib.decompress(base64.urlsafe_b64decode(padded.encode("ascii")))
        return list(decode_notes(raw.decode("utf-8")))
    except (binascii.Error, zlib.error, UnicodeError, ValueError):
        logger.warning("Import payload could not be decoded", exc_info=True)
        return None
