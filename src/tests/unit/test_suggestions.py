"""Tests for typehere.core.suggestions module."""

import pytest

from typehere.core.suggestions import (
    action_query,
    build_suggestions,
    match_notes,
    match_workspaces,
)
from typehere.core.types import ActionKind, ActionSuggestion, NoteSuggestion


def kinds(suggestions):
    return [
        s.kind if isinstance(s, ActionSuggestion) else s.note.id for s in suggestions
    ]


class TestActionQuery:
    """Tests for action_query."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  ideas  ", "ideas"),
            ("", ""),
            ("x" * 25, "x" * 20),
        ],
    )
    def test_trims_and_truncates(self, raw, expected):
        """Actions see the trimmed query, at most 20 characters."""
        assert action_query(raw) == expected


class TestMatching:
    """Tests for note and workspace matching."""

    def test_empty_query_lists_by_recency(self, sample_notes):
        """Without a query every note is listed, newest first."""
        assert [n.id for n in match_notes(sample_notes, "")] == ["n4", "n3", "n2", "n1"]

    def test_query_ranks_by_match(self, sample_notes):
        """Matching notes come back best first."""
        assert [n.id for n in match_notes(sample_notes, "groc")] == ["n1"]

    def test_equal_matches_newest_first(self, make_note):
        """Notes that match equally well are listed by recency."""
        notes = [
            make_note("old", "standup", 0),
            make_note("new", "standup", 5),
        ]

        assert [n.id for n in match_notes(notes, "standup")] == ["new", "old"]

    def test_no_workspaces_for_empty_query(self):
        """Workspaces are only matched against a query."""
        assert match_workspaces(["work"], "") == []


class TestBuildSuggestions:
    """Tests for the palette rows."""

    def test_empty_query(self, sample_notes):
        """An empty query lists notes only."""
        rows = build_suggestions(sample_notes, ["personal", "work"], "", None, None)

        assert kinds(rows) == ["n4", "n3", "n2", "n1"]
        assert all(isinstance(row, NoteSuggestion) for row in rows)

    def test_query_with_no_workspace_match(self, sample_notes):
        """Notes first, then create note, create workspace and rename."""
        rows = build_suggestions(
            sample_notes, ["personal", "work"], "groc", sample_notes[0], None
        )

        assert kinds(rows) == [
            "n1",
            ActionKind.CREATE_NOTE,
            ActionKind.CREATE_WORKSPACE,
            ActionKind.RENAME_WORKSPACE,
        ]
        create, create_ws, rename = rows[1:]
        assert (create.title, create.preview, create.color) == (
            "create new note",
            '"groc"',
            "green",
        )
        assert (create_ws.title, create_ws.preview, create_ws.color) == (
            "create workspace",
            "+[groc]",
            "red",
        )
        assert (rename.title, rename.preview, rename.color) == (
            "rename workspace",
            "±[groc]",
            "gray",
        )

    def test_existing_workspace_offers_move(self, sample_notes):
        """A matching workspace is offered as a move target instead of creation."""
        rows = build_suggestions(
            sample_notes, ["personal", "work"], "work", sample_notes[0], None
        )
        actions = [row for row in rows if isinstance(row, ActionSuggestion)]

        assert [a.kind for a in actions] == [
            ActionKind.CREATE_NOTE,
            ActionKind.MOVE_TO_WORKSPACE,
            ActionKind.RENAME_WORKSPACE,
        ]
        move = actions[1]
        assert move.title == "move note to work"
        assert move.preview == "→[work]"
        assert move.color == "cyan"
        assert move.argument == "work"

    def test_near_miss_workspace_is_not_a_move_target(self, sample_notes):
        """Workspace matching is strict."""
        rows = build_suggestions(sample_notes, ["work"], "wrk", None, None)

        assert ActionKind.MOVE_TO_WORKSPACE not in kinds(rows)
        assert ActionKind.CREATE_WORKSPACE in kinds(rows)

    def test_unlink_offered_for_tagged_note(self, sample_notes):
        """The active note's workspace can be removed."""
        active = sample_notes[1]

        rows = build_suggestions(sample_notes[1:3], ["work"], "", active, "work")

        unlink = rows[-1]
        assert unlink.kind is ActionKind.UNLINK_NOTE
        assert unlink.title == "unlink note"
        assert unlink.preview == "-[work]"
        assert unlink.color == "purple"

    @pytest.mark.parametrize(
        "query,offered",
        [
            ("", True),
            ("unl", True),
            ("link", True),
            ("xyz", False),
        ],
    )
    def test_unlink_needs_matching_query(self, sample_notes, query, offered):
        """Unlink shows for an empty query or a piece of its title."""
        rows = build_suggestions(sample_notes, ["work"], query, sample_notes[1], None)

        assert (ActionKind.UNLINK_NOTE in kinds(rows)) is offered

    def test_no_unlink_for_untagged_note(self, sample_notes):
        """Notes without a workspace have nothing to unlink."""
        rows = build_suggestions(sample_notes, [], "", sample_notes[0], None)

        assert ActionKind.UNLINK_NOTE not in kinds(rows)

    def test_long_query_is_truncated_in_actions(self):
        """Action arguments use at most 20 characters."""
        rows = build_suggestions([], [], "a" * 30, None, None)

        create = rows[0]
        assert create.argument == "a" * 20
        assert create.preview == '"' + "a" * 20 + '"'

    def test_whitespace_query_offers_no_actions(self, sample_notes):
        """A blank query synthesizes nothing."""
        rows = build_suggestions(sample_notes, ["work"], "   ", None, None)

        assert all(isinstance(row, NoteSuggestion) for row in rows)
        assert len(rows) == 4
