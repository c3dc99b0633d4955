"""Suggestion list for the command palette.

The list is a pure function of the notes visible under the active filter,
the known workspaces, the query and the active note/workspace. It is
cheap enough to rebuild on every key press.
"""

from collections.abc import Sequence

from typehere.core import fuzzy
from typehere.core.config import (
    MAX_ACTION_QUERY_CHARS,
    NOTE_MATCH_THRESHOLD,
    WORKSPACE_MATCH_THRESHOLD,
)
from typehere.core.notes import sort_by_recency
from typehere.core.types import (
    ActionKind,
    ActionSuggestion,
    Note,
    NoteSuggestion,
    Suggestion,
)

UNLINK_TITLE = "unlink note"


def action_query(query: str, max_chars: int = MAX_ACTION_QUERY_CHARS) -> str:
    """Query text used by actions: trimmed and truncated."""
    return query.strip()[:max_chars]


def match_notes(
    notes: Sequence[Note], query: str, threshold: float = NOTE_MATCH_THRESHOLD
) -> list[Note]:
    """Notes for the palette, by recency or by match quality."""
    if not query:
        return sort_by_recency(notes)
    # Equal scores keep recency order.
    matches = fuzzy.search(
        query, sort_by_recency(notes), threshold, key=lambda note: note.content
    )
    return [match.item for match in matches]


def match_workspaces(
    workspaces: Sequence[str],
    query: str,
    threshold: float = WORKSPACE_MATCH_THRESHOLD,
) -> list[str]:
    if not query:
        return []
    return [match.item for match in fuzzy.search(query, workspaces, threshold)]


def build_suggestions(
    notes_in_workspace: Sequence[Note],
    workspaces: Sequence[str],
    query: str,
    active_note: Note | None,
    active_workspace: str | None,
    *,
    note_threshold: float = NOTE_MATCH_THRESHOLD,
    workspace_threshold: float = WORKSPACE_MATCH_THRESHOLD,
    max_query_chars: int = MAX_ACTION_QUERY_CHARS,
) -> list[Suggestion]:
    """
    Build the ordered palette rows.

    Order: matching notes, then create note, move to workspace, create
    workspace, rename workspace and unlink note (each when applicable).

    Args:
        notes_in_workspace: Notes under the active filter, in store order
        workspaces: Known workspace tags
        query: Raw palette input
        active_note: Note currently open, if any
        active_workspace: Active filter (None for all notes)

    Returns:
        Suggestions in display order
    """
    suggestions: list[Suggestion] = [
        NoteSuggestion(note=note)
        for note in match_notes(notes_in_workspace, query, note_threshold)
    ]

    q = action_query(query, max_query_chars)
    if q:
        suggestions.append(
            ActionSuggestion(
                kind=ActionKind.CREATE_NOTE,
                title="create new note",
                preview=f'"{q}"',
                color="green",
                argument=q,
            )
        )

        matched = match_workspaces(workspaces, query, workspace_threshold)
        if matched:
            target = matched[0]
            suggestions.append(
                ActionSuggestion(
                    kind=ActionKind.MOVE_TO_WORKSPACE,
                    title=f"move note to {target}",
                    preview=f"→[{target}]",
                    color="cyan",
                    argument=target,
                )
            )

        if q not in workspaces:
            suggestions.append(
                ActionSuggestion(
                    kind=ActionKind.CREATE_WORKSPACE,
                    title="create workspace",
                    preview=f"+[{q}]",
                    color="red",
                    argument=q,
                )
            )

        # Offered even without an active filter; it then re-tags nothing.
        suggestions.append(
            ActionSuggestion(
                kind=ActionKind.RENAME_WORKSPACE,
                title="rename workspace",
                preview=f"±[{q}]",
                color="gray",
                argument=q,
            )
        )

    if active_note is not None and active_note.workspace and (
        not q or q in UNLINK_TITLE
    ):
        suggestions.append(
            ActionSuggestion(
                kind=ActionKind.UNLINK_NOTE,
                title=UNLINK_TITLE,
                preview=f"-[{active_note.workspace}]",
                color="purple",
                argument=active_note.workspace,
            )
        )

    return suggestions
