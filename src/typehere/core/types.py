"""Shared types and data structures for typehere."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator


class TypehereError(Exception):
    """Base error for user-facing failures outside the palette core."""


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Note(BaseModel, frozen=True):
    """A single note.

    Serialized with the ``updatedAt`` key so exported and persisted
    payloads stay readable by older builds of the app.
    """

    id: str
    content: str = ""
    updated_at: datetime = Field(
        default_factory=utcnow,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )
    workspace: str | None = None

    @field_validator("updated_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("workspace")
    @classmethod
    def _empty_workspace_is_none(cls, value: str | None) -> str | None:
        return value or None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        """Create from dictionary."""
        return cls.model_validate(data)


class ActionKind(StrEnum):
    """Synthesized palette actions."""

    CREATE_NOTE = "create_note"
    MOVE_TO_WORKSPACE = "move_to_workspace"
    CREATE_WORKSPACE = "create_workspace"
    RENAME_WORKSPACE = "rename_workspace"
    UNLINK_NOTE = "unlink_note"


@dataclass(frozen=True)
class NoteSuggestion:
    """Palette row that opens an existing note."""

    note: Note


@dataclass(frozen=True)
class ActionSuggestion:
    """Palette row describing an action; applied by the dispatcher."""

    kind: ActionKind
    title: str
    preview: str
    color: str | None = None
    argument: str | None = None


Suggestion = NoteSuggestion | ActionSuggestion


@dataclass
class AppState:
    """Session state owned by the palette.

    ``active_note_id`` and ``active_workspace`` are persisted by the note
    store; everything else lives only for the session.
    """

    active_note_id: str | None = None
    active_workspace: str | None = None
    palette_open: bool = False
    selected_index: int = 0
    query: str = ""
    vim_chord_pending: bool = False
    help_open: bool = False


@dataclass(frozen=True)
class KeyEvent:
    """A keyboard event as seen by the palette."""

    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def modifier(self) -> bool:
        """True when Control or Meta is held."""
        return self.ctrl or self.meta


class Theme(StrEnum):
    """Color theme."""

    LIGHT = "light"
    DARK = "dark"


class Preferences(BaseModel, frozen=True):
    """User display preferences."""

    theme: Theme = Theme.LIGHT
    use_vim: bool = False
    narrow: bool = False
