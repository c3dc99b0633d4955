"""Workspace-partitioned note store with session undo."""

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from uuid import uuid4

from typehere.core.config import (
    CURRENT_NOTE_KEY,
    CURRENT_WORKSPACE_KEY,
    DATABASE_KEY,
)
from typehere.core.persistence import KeyValueStore, PersistentValue, dumps_compact
from typehere.core.text import apply_replacements
from typehere.core.types import AppState, Note, utcnow

logger = logging.getLogger(__name__)


def encode_notes(notes: Iterable[Note]) -> str:
    """Serialize a note list to compact JSON."""
    return dumps_compact([note.to_dict() for note in notes])


def decode_notes(raw: str) -> tuple[Note, ...]:
    """Parse a JSON note list; raises ValueError on malformed input."""
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of notes, got {type(data).__name__}")
    return tuple(Note.from_dict(item) for item in data)


def sort_by_recency(notes: Iterable[Note]) -> list[Note]:
    """Most recently updated first; equal timestamps keep their order."""
    return sorted(notes, key=lambda note: note.updated_at, reverse=True)


class NoteStore:
    """Owns the note list, workspace membership and the deletion stack.

    Every mutation replaces the whole persisted list in a single write.
    Changes written by another instance replace the local list as-is.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        state: AppState | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the note store.

        Args:
            kv: Persistence adapter
            state: Session state shared with the palette (created if omitted)
            clock: Source of timestamps for new and edited notes
        """
        self.state = state or AppState()
        self._clock = clock
        self._issued_ids: set[str] = set()
        self._deleted: list[Note] = []
        self._listeners: list[Callable[[], None]] = []

        self._database: PersistentValue[tuple[Note, ...]] = PersistentValue(
            kv,
            DATABASE_KEY,
            (Note(id=self._new_id(), content="", updated_at=clock()),),
            encode=encode_notes,
            decode=decode_notes,
        )
        self._current_note: PersistentValue[str | None] = PersistentValue(
            kv, CURRENT_NOTE_KEY, None
        )
        self._current_workspace: PersistentValue[str | None] = PersistentValue(
            kv, CURRENT_WORKSPACE_KEY, None
        )
        self._issued_ids.update(note.id for note in self._database.value)
        if not self._database.exists:
            # First run: store the seed note so its id is stable.
            self._database.set(self._database.value)

        self.state.active_note_id = self._current_note.value
        self.state.active_workspace = self._current_workspace.value

        self._database.on_change(self._on_remote_notes)
        self._current_note.on_change(self._on_remote_note_id)
        self._current_workspace.on_change(self._on_remote_workspace)

        self.ensure_active()

    # Reads

    @property
    def notes(self) -> tuple[Note, ...]:
        """All notes in store order."""
        return self._database.value

    @property
    def deletion_stack(self) -> tuple[Note, ...]:
        """Notes deleted this session, oldest first."""
        return tuple(self._deleted)

    @property
    def active_note(self) -> Note | None:
        return self.get(self.state.active_note_id)

    @property
    def workspace_notes(self) -> list[Note]:
        """Notes visible under the active workspace filter."""
        return self.list_by_workspace(self.state.active_workspace)

    def get(self, note_id: str | None) -> Note | None:
        if note_id is None:
            return None
        return next((note for note in self.notes if note.id == note_id), None)

    def list_by_workspace(self, workspace: str | None) -> list[Note]:
        """Notes tagged ``workspace``; ``None`` means all notes."""
        if workspace is None:
            return list(self.notes)
        return [note for note in self.notes if note.workspace == workspace]

    def workspaces(self) -> list[str]:
        """Distinct workspace tags, most recently touched first."""
        seen: set[str] = set()
        ordered: list[str] = []
        for note in sort_by_recency(self.notes):
            if not note.workspace or note.workspace in seen:
                continue
            seen.add(note.workspace)
            ordered.append(note.workspace)
        return ordered

    def navigable_workspaces(self) -> list[str | None]:
        """``None`` ("all notes") followed by every workspace."""
        return [None, *self.workspaces()]

    # Mutations

    def create(self, content: str = "", workspace: str | None = None) -> Note:
        """Create a note and make it active.

        Without an explicit ``workspace`` the note joins the active filter.
        """
        note = Note(
            id=self._new_id(),
            content=content,
            updated_at=self._clock(),
            workspace=workspace or self.state.active_workspace,
        )
        self._write((*self.notes, note))
        if self.state.active_workspace not in (None, note.workspace):
            self._set_filter(note.workspace)
        self.activate(note.id)
        logger.debug("Created note %s in %s", note.id, note.workspace or "all")
        return note

    def update(self, note_id: str, content: str) -> None:
        """Replace a note's content; unknown ids are ignored."""
        index = self._index(note_id)
        if index is None:
            logger.debug("update: note %s not found", note_id)
            return
        notes = list(self.notes)
        notes[index] = notes[index].model_copy(
            update={"content": content, "updated_at": self._clock()}
        )
        self._write(notes)

    def save(self, note_id: str, raw_text: str) -> str:
        """Editing-surface entry point: clean up ``raw_text`` and store it."""
        text = apply_replacements(raw_text)
        self.update(note_id, text)
        return text

    def open(self, note_id: str) -> bool:
        """Activate a note and bump its recency."""
        index = self._index(note_id)
        if index is None:
            return False
        notes = list(self.notes)
        notes[index] = notes[index].model_copy(update={"updated_at": self._clock()})
        self._write(notes)
        self.activate(note_id)
        return True

    def delete(self, note_id: str) -> Note | None:
        """Remove a note, keeping a copy on the deletion stack."""
        note = self.get(note_id)
        if note is None:
            logger.debug("delete: note %s not found", note_id)
            return None
        self._deleted.append(note.model_copy(deep=True))
        self._write(n for n in self.notes if n.id != note_id)
        self.ensure_active()
        return note

    def undo_last_deletion(self) -> Note | None:
        """Put the most recently deleted note back, unchanged."""
        if not self._deleted:
            return None
        note = self._deleted.pop()
        if self._index(note.id) is not None:
            logger.debug("undo: note %s already present", note.id)
            return None
        self._write((*self.notes, note))
        self.ensure_active()
        return note

    def move_to_workspace(self, note_id: str, workspace: str) -> None:
        self._retag(note_id, workspace or None)

    def unlink_workspace(self, note_id: str) -> None:
        self._retag(note_id, None)

    def rename_workspace(self, old: str | None, new: str) -> int:
        """Re-tag every note carrying ``old``; returns how many changed."""
        if not old:
            return 0
        changed = 0
        notes = []
        for note in self.notes:
            if note.workspace == old:
                note = note.model_copy(update={"workspace": new or None})
                changed += 1
            notes.append(note)
        if changed:
            self._write(notes)
        if self.state.active_workspace == old:
            self._set_filter(new or None)
        self.ensure_active()
        return changed

    def replace_all(self, notes: Iterable[Note]) -> None:
        """Swap in a whole new note list (import)."""
        notes = tuple(notes)
        self._issued_ids.update(note.id for note in notes)
        self._write(notes)
        self.ensure_active()

    # Session state

    def activate(self, note_id: str | None) -> None:
        if self.state.active_note_id == note_id:
            return
        self.state.active_note_id = note_id
        self._current_note.set(note_id)

    def set_workspace(self, workspace: str | None) -> None:
        """Change the active workspace filter."""
        self._set_filter(workspace)
        self.ensure_active()

    def ensure_active(self, persist: bool = True) -> None:
        """Keep the active note inside the active filter."""
        visible = self.workspace_notes
        if any(note.id == self.state.active_note_id for note in visible):
            return
        fallback = visible[0].id if visible else None
        if persist:
            self.activate(fallback)
        else:
            self.state.active_note_id = fallback

    def on_change(self, listener: Callable[[], None]) -> None:
        """Register a listener fired after every local or remote change."""
        self._listeners.append(listener)

    # Internals

    def _new_id(self) -> str:
        note_id = uuid4().hex[:12]
        while note_id in self._issued_ids:
            note_id = uuid4().hex[:12]
        self._issued_ids.add(note_id)
        return note_id

    def _index(self, note_id: str) -> int | None:
        for index, note in enumerate(self.notes):
            if note.id == note_id:
                return index
        return None

    def _retag(self, note_id: str, workspace: str | None) -> None:
        index = self._index(note_id)
        if index is None:
            logger.debug("retag: note %s not found", note_id)
            return
        notes = list(self.notes)
        notes[index] = notes[index].model_copy(update={"workspace": workspace})
        self._write(notes)
        self.ensure_active()

    def _set_filter(self, workspace: str | None) -> None:
        if self.state.active_workspace == workspace:
            return
        self.state.active_workspace = workspace
        self._current_workspace.set(workspace)

    def _write(self, notes: Iterable[Note]) -> None:
        self._database.set(tuple(notes))
        self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _on_remote_notes(self, notes: tuple[Note, ...]) -> None:
        self._issued_ids.update(note.id for note in notes)
        self.ensure_active(persist=False)
        self._emit()

    def _on_remote_note_id(self, note_id: str | None) -> None:
        self.state.active_note_id = note_id
        self.ensure_active(persist=False)
        self._emit()

    def _on_remote_workspace(self, workspace: str | None) -> None:
        self.state.active_workspace = workspace
        self.ensure_active(persist=False)
        self._emit()
