"""Shared test fixtures and configuration."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from typehere.core.notes import NoteStore
from typehere.core.persistence import MemoryBackend, MemoryKeyValueStore
from typehere.core.types import Note

BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock that advances by a fixed step (one second by default) on every call."""

    def __init__(
        self,
        start: datetime = BASE_TIME + timedelta(days=1),
        step: timedelta = timedelta(seconds=1),
    ):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        self.now += self.step
        return self.now


@pytest.fixture
def clock():
    """Deterministic, strictly increasing clock."""
    return FakeClock()


@pytest.fixture
def make_clock():
    """Factory for clocks with a custom start or step."""
    return FakeClock


@pytest.fixture
def backend():
    """Shared in-memory storage (one per test)."""
    return MemoryBackend()


@pytest.fixture
def kv(backend):
    """In-memory key/value adapter."""
    return MemoryKeyValueStore(backend)


@pytest.fixture
def store(kv, clock):
    """Fresh note store holding the default empty note."""
    return NoteStore(kv, clock=clock)


@pytest.fixture
def make_note():
    """Factory for notes timestamped minutes after BASE_TIME."""

    def _make_note(
        note_id: str,
        content: str = "",
        minutes: int = 0,
        workspace: str | None = None,
    ) -> Note:
        return Note(
            id=note_id,
            content=content,
            updated_at=BASE_TIME + timedelta(minutes=minutes),
            workspace=workspace,
        )

    return _make_note


@pytest.fixture
def sample_notes(make_note):
    """Four notes across two workspaces, oldest first."""
    return [
        make_note("n1", "Groceries: milk, eggs", 0),
        make_note("n2", "Meeting notes", 1, "work"),
        make_note("n3", "Standup agenda", 2, "work"),
        make_note("n4", "Trip plan", 3, "personal"),
    ]


@pytest.fixture
def seeded_store(store, sample_notes):
    """Note store holding sample_notes; n1 is active."""
    store.replace_all(sample_notes)
    return store
