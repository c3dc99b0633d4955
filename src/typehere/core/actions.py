"""Apply palette suggestions against the note store."""

import logging

from typehere.core.notes import NoteStore
from typehere.core.types import (
    ActionKind,
    ActionSuggestion,
    NoteSuggestion,
    Suggestion,
)

logger = logging.getLogger(__name__)


def _reset_palette_input(store: NoteStore) -> None:
    store.state.query = ""
    store.state.selected_index = 0


def run_action(store: NoteStore, action: ActionSuggestion) -> bool:
    """Apply an action; returns True when the palette should close."""
    argument = action.argument or ""

    if action.kind is ActionKind.CREATE_NOTE:
        store.create(argument)
        _reset_palette_input(store)
        return True

    if action.kind is ActionKind.MOVE_TO_WORKSPACE:
        note = store.active_note
        if note is None:
            logger.warning("move to %s requested without an active note", argument)
            return True
        store.move_to_workspace(note.id, argument)
        store.set_workspace(argument)
        store.open(note.id)
        _reset_palette_input(store)
        return False

    if action.kind is ActionKind.CREATE_WORKSPACE:
        store.create("", argument)
        store.set_workspace(argument)
        _reset_palette_input(store)
        return False

    if action.kind is ActionKind.RENAME_WORKSPACE:
        store.rename_workspace(store.state.active_workspace, argument)
        store.set_workspace(argument)
        _reset_palette_input(store)
        return False

    if action.kind is ActionKind.UNLINK_NOTE:
        note = store.active_note
        # Widen the filter first so the note stays active once untagged.
        store.set_workspace(None)
        if note is not None:
            store.unlink_workspace(note.id)
        return False

    raise ValueError(f"Unknown action kind: {action.kind}")


def run_suggestion(store: NoteStore, suggestion: Suggestion | None) -> bool:
    """Run a palette row; returns True when the palette should close."""
    if suggestion is None:
        return True
    if isinstance(suggestion, NoteSuggestion):
        store.open(suggestion.note.id)
        return True
    return run_action(store, suggestion)
