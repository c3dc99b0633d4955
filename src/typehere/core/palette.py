"""Keyboard-driven command palette.

The palette is a small state machine over ``AppState``: closed, or open
with a selected row, a query and a pending-chord flag. Key presses are
fed in as ``KeyEvent`` objects through ``key_down`` / ``key_up``; all
effects go through the note store, so suggestions rebuilt after an event
always reflect the store as it is now.

Holding Control/Meta while tapping a navigation key (k/j/u/i) marks a
chord; releasing the modifier then commits the selected row as Enter
would.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from typehere.core.actions import run_suggestion
from typehere.core.notes import NoteStore
from typehere.core.suggestions import build_suggestions
from typehere.core.types import AppState, KeyEvent, NoteSuggestion, Suggestion

logger = logging.getLogger(__name__)

OPEN_KEYS = ("p", "k")
MODIFIER_KEYS = ("Control", "Meta")

# Navigation keys used together with Control/Meta.
CHORD_UP = "k"
CHORD_DOWN = "j"
CHORD_LEFT = "u"
CHORD_RIGHT = "i"
CHORD_KEYS = (CHORD_UP, CHORD_DOWN, CHORD_LEFT, CHORD_RIGHT)


class Palette:
    """Command palette state machine."""

    def __init__(
        self,
        store: NoteStore,
        on_selection_changed: Callable[[int], None] | None = None,
    ):
        """
        Initialize the palette.

        Args:
            store: Note store; its ``state`` is the palette's state
            on_selection_changed: Called with the new index whenever the
                selected row changes (e.g. to scroll it into view)
        """
        self.store = store
        self.on_selection_changed = on_selection_changed
        self._in_event = False
        store.on_change(self._on_store_change)

    @property
    def state(self) -> AppState:
        return self.store.state

    @property
    def is_open(self) -> bool:
        return self.state.palette_open

    @property
    def suggestions(self) -> list[Suggestion]:
        """Current palette rows, rebuilt from the store."""
        return build_suggestions(
            self.store.workspace_notes,
            self.store.workspaces(),
            self.state.query,
            self.store.active_note,
            self.state.active_workspace,
        )

    @property
    def selected(self) -> Suggestion | None:
        suggestions = self.suggestions
        if 0 <= self.state.selected_index < len(suggestions):
            return suggestions[self.state.selected_index]
        return None

    # Public events

    def open(self) -> None:
        with self._event():
            self._open()

    def close(self) -> None:
        with self._event():
            self._close()

    def toggle_help(self) -> None:
        self.state.help_open = not self.state.help_open

    def click_outside(self) -> None:
        if self.is_open:
            self.close()

    def input_query(self, text: str) -> None:
        """Replace the whole query (e.g. pasted text)."""
        with self._event():
            self.state.query = text
            self.state.selected_index = 0

    def key_down(self, event: KeyEvent) -> bool:
        """Handle a key press; returns True if the palette consumed it."""
        with self._event():
            if self.is_open:
                return self._key_down_open(event)
            return self._key_down_closed(event)

    def key_up(self, event: KeyEvent) -> bool:
        """Handle a key release; commits a pending chord."""
        if event.key not in MODIFIER_KEYS:
            return False
        if not (self.is_open and self.state.vim_chord_pending):
            return False
        with self._event():
            self._commit()
            self.state.vim_chord_pending = False
        return True

    # Closed state

    def _key_down_closed(self, event: KeyEvent) -> bool:
        if self.state.help_open and event.key in ("Escape", "Enter"):
            self.state.help_open = False
            return True

        if event.modifier and event.key.lower() in OPEN_KEYS:
            self._open()
            return True

        if event.modifier and event.shift and event.key == "Enter":
            note = self.store.active_note
            if note is not None and note.content.strip():
                self.store.create()
            return True

        return False

    # Open state

    def _key_down_open(self, event: KeyEvent) -> bool:
        key = event.key
        chord = key.lower() if event.modifier else ""

        if key == "Escape":
            self._close()
            return True

        if chord in CHORD_KEYS:
            self.state.vim_chord_pending = True

        if event.modifier and key == "Backspace":
            self._quick_delete()
            return True

        if chord == "z":
            if self.store.deletion_stack:
                self.store.undo_last_deletion()
            return True

        if key == "ArrowUp" or chord == CHORD_UP:
            self._move_selection(-1)
            return True
        if key == "ArrowDown" or chord == CHORD_DOWN:
            self._move_selection(1)
            return True

        if key == "Enter":
            self._commit()
            return True

        if key == "ArrowLeft" or chord == CHORD_LEFT:
            self._cycle_workspace(-1)
            return True
        if key == "ArrowRight" or chord == CHORD_RIGHT:
            self._cycle_workspace(1)
            return True

        if event.modifier:
            # Other chords are reserved and never reach the query.
            return True

        if key == "Backspace":
            self._set_query(self.state.query[:-1])
        elif len(key) == 1:
            self._set_query(self.state.query + key)
        return True

    # Transitions

    def _open(self) -> None:
        self.state.palette_open = True
        self.state.help_open = False
        self.state.selected_index = 0
        self.state.query = ""
        self.state.vim_chord_pending = False

    def _close(self) -> None:
        self.state.palette_open = False
        self.state.vim_chord_pending = False

    def _set_query(self, query: str) -> None:
        self.state.query = query
        self.state.selected_index = 0

    def _move_selection(self, step: int) -> None:
        count = len(self.suggestions)
        if count == 0:
            return
        self.state.selected_index = (self.state.selected_index + step) % count

    def _cycle_workspace(self, step: int) -> None:
        sequence = self.store.navigable_workspaces()
        current = self.state.active_workspace
        try:
            position = sequence.index(current)
        except ValueError:
            logger.warning("Active workspace %r no longer exists", current)
            position = 0
        target = sequence[(position + step) % len(sequence)]
        if target != current:
            self.state.selected_index = 0
            self.store.set_workspace(target)

    def _commit(self) -> None:
        should_close = run_suggestion(self.store, self.selected)
        if should_close:
            self._close()
            self.state.selected_index = 0

    def _quick_delete(self) -> None:
        suggestion = self.selected
        if not isinstance(suggestion, NoteSuggestion):
            return
        if len(self.store.workspace_notes) <= 1:
            return
        self.store.delete(suggestion.note.id)
        self.state.selected_index = max(self.state.selected_index - 1, 0)

    # Bookkeeping

    @contextmanager
    def _event(self) -> Iterator[None]:
        if self._in_event:
            yield
            return
        previous = self.state.selected_index
        self._in_event = True
        try:
            yield
        finally:
            self._in_event = False
            self._clamp_selection()
            if self.state.selected_index != previous and self.on_selection_changed:
                self.on_selection_changed(self.state.selected_index)

    def _clamp_selection(self) -> None:
        count = len(self.suggestions)
        if count == 0:
            self.state.selected_index = 0
        else:
            self.state.selected_index = min(max(self.state.selected_index, 0), count - 1)

    def _on_store_change(self) -> None:
        # Changes made while handling an event are settled when it ends.
        if not self._in_event:
            self._clamp_selection()
