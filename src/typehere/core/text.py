"""Text cleanup applied whenever note content is saved."""

import re

from typehere.core.types import Note

# Applied in order; literal entries replace every occurrence, patterns only the first.
TEXT_REPLACEMENTS: list[tuple[str | re.Pattern[str], str]] = [
    (" -> ", " → "),
    (" <- ", " ← "),
    ("\n-> ", "\n→ "),
    ("<- \n", "← \n"),
    (re.compile(r"^-> "), "→ "),
    (re.compile(r"^<- "), "← "),
    ("(c)", "©"),
    ("(r)", "®"),
    ("+-", "±"),
]


def apply_replacements(text: str) -> str:
    """Apply the substitution table to ``text``."""
    for source, target in TEXT_REPLACEMENTS:
        if isinstance(source, re.Pattern):
            text = source.sub(target, text, count=1)
        else:
            text = text.replace(source, target)
    return text


def note_title(note: Note) -> str:
    """First line of the note, or an empty string for a blank note."""
    content = note.content.strip()
    if not content:
        return ""
    return content.split("\n", 1)[0]
