"""typehere core library - note store, suggestions and palette."""

from typing import TYPE_CHECKING

from typehere.core.types import (
    ActionKind,
    ActionSuggestion,
    AppState,
    KeyEvent,
    Note,
    NoteSuggestion,
    Preferences,
    Suggestion,
    Theme,
)

if TYPE_CHECKING:
    from typehere.core.notes import NoteStore
    from typehere.core.palette import Palette

__all__ = [
    # Core classes
    "NoteStore",
    "Palette",
    # Types
    "ActionKind",
    "ActionSuggestion",
    "AppState",
    "KeyEvent",
    "Note",
    "NoteSuggestion",
    "Preferences",
    "Suggestion",
    "Theme",
]


def __getattr__(name: str):
    if name == "NoteStore":
        from typehere.core.notes import NoteStore

        return NoteStore
    if name == "Palette":
        from typehere.core.palette import Palette

        return Palette
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
