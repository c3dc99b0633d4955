"""Tests for typehere.interfaces.cli.app module."""

from datetime import timedelta

import pytest
from typer.testing import CliRunner

from typehere.core.notes import NoteStore
from typehere.core.palette import Palette
from typehere.interfaces.cli.app import app, handle_palette_input
from typehere.storage import SqliteBackupSink, SqliteKeyValueStore

runner = CliRunner()


@pytest.fixture
def db(tmp_path):
    """Path to a throwaway database."""
    return str(tmp_path / "typehere.db")


def invoke(db, *args, **kwargs):
    return runner.invoke(app, [*args, "--db", db], **kwargs)


def load(db):
    return NoteStore(SqliteKeyValueStore(db))


def find(db, content):
    return next(note for note in load(db).notes if note.content == content)


class TestNoteCommands:
    """Tests for the note subcommands."""

    def test_new_and_list(self, db):
        """New notes are cleaned up and listed."""
        result = invoke(db, "new", "hello -> world")
        assert result.exit_code == 0
        assert "Created note" in result.stdout

        result = invoke(db, "list")
        assert result.exit_code == 0
        assert "hello → world" in result.stdout

    def test_list_by_workspace(self, db):
        """--workspace filters the listing."""
        invoke(db, "new", "office", "--workspace", "work")
        invoke(db, "new", "garden")

        result = runner.invoke(app, ["list", "-w", "work", "--db", db])

        assert "office" in result.stdout
        assert "garden" not in result.stdout

    def test_show_by_prefix(self, db):
        """Notes can be addressed by an id prefix."""
        invoke(db, "new", "Groceries\nmilk")
        note = find(db, "Groceries\nmilk")

        result = invoke(db, "show", note.id[:6])

        assert result.exit_code == 0
        assert "milk" in result.stdout

    def test_show_unknown(self, db):
        """Unknown ids exit with an error."""
        result = invoke(db, "show", "zzzzzz")

        assert result.exit_code == 1
        assert "Note not found" in result.stdout

    def test_seed_note_is_stable(self, db):
        """The first note keeps its id across loads and can be edited."""
        first_id = load(db).notes[0].id
        assert [n.id for n in load(db).notes] == [first_id]

        result = invoke(db, "edit", first_id, "hello")

        assert result.exit_code == 0
        assert load(db).get(first_id).content == "hello"

    def test_edit(self, db):
        """edit replaces content through the save path."""
        invoke(db, "new", "draft")
        note = find(db, "draft")

        result = invoke(db, "edit", note.id, "final (c)")

        assert result.exit_code == 0
        assert load(db).get(note.id).content == "final ©"

    def test_delete(self, db):
        """delete removes the note."""
        invoke(db, "new", "temporary")
        note = find(db, "temporary")

        result = invoke(db, "delete", note.id)

        assert result.exit_code == 0
        assert load(db).get(note.id) is None


class TestWorkspaceCommands:
    """Tests for workspace subcommands."""

    def test_move_and_list_workspaces(self, db):
        """Moved notes show up under their workspace."""
        invoke(db, "new", "report")
        note = find(db, "report")

        invoke(db, "move", note.id, "work")
        result = invoke(db, "workspaces")

        assert load(db).get(note.id).workspace == "work"
        assert "work" in result.stdout

    def test_unlink(self, db):
        """unlink clears the workspace."""
        invoke(db, "new", "report", "-w", "work")
        note = find(db, "report")

        invoke(db, "unlink", note.id)

        assert load(db).get(note.id).workspace is None

    def test_rename(self, db):
        """rename re-tags every member."""
        invoke(db, "new", "a", "-w", "work")
        invoke(db, "new", "b", "-w", "work")

        result = invoke(db, "rename", "work", "job")

        assert result.exit_code == 0
        assert "2 notes" in result.stdout
        assert len(load(db).list_by_workspace("job")) == 2

    def test_rename_unknown(self, db):
        """Renaming a missing workspace fails."""
        result = invoke(db, "rename", "nope", "job")

        assert result.exit_code == 1
        assert "Workspace not found" in result.stdout

    def test_no_workspaces(self, db):
        """An empty store has no workspaces."""
        result = invoke(db, "workspaces")

        assert "No workspaces yet" in result.stdout


class TestTransferCommands:
    """Tests for export, import and backup."""

    def test_export_then_import(self, db, tmp_path):
        """Notes move between databases through an export file."""
        invoke(db, "new", "portable")
        out = tmp_path / "export.txt"

        result = invoke(db, "export", "--out", str(out))
        assert result.exit_code == 0
        assert out.exists()

        other = str(tmp_path / "other.db")
        result = invoke(other, "import", str(out))

        assert result.exit_code == 0
        assert any(note.content == "portable" for note in load(other).notes)

    def test_import_garbage(self, db, tmp_path):
        """A file that is not an export is rejected."""
        bad = tmp_path / "bad.txt"
        bad.write_text("definitely not notes")

        result = invoke(db, "import", str(bad))

        assert result.exit_code == 1
        assert "Could not read notes" in result.stdout

    def test_backup(self, db):
        """backup stores one snapshot."""
        invoke(db, "new", "keep me")

        result = invoke(db, "backup")

        assert result.exit_code == 0
        assert SqliteBackupSink(db).count() == 1

    def test_backups_lists_snapshots(self, db):
        """backups shows each snapshot with its note count."""
        invoke(db, "new", "keep me")
        invoke(db, "backup")

        result = invoke(db, "backups")

        assert result.exit_code == 0
        assert "Backups" in result.stdout
        assert "2" in result.stdout

    def test_backups_empty(self, db):
        """An empty backup table says so."""
        result = invoke(db, "backups")

        assert result.exit_code == 0
        assert "No backups yet" in result.stdout


class TestSettingsCommand:
    """Tests for the settings subcommand."""

    def test_defaults(self, db):
        """Settings start light with vim disabled."""
        result = invoke(db, "settings")

        assert "light" in result.stdout
        assert "disabled" in result.stdout

    def test_toggle_theme_persists(self, db):
        """Toggled settings are remembered."""
        invoke(db, "settings", "--toggle-theme")

        result = invoke(db, "settings")

        assert "dark" in result.stdout


class TestPaletteRepl:
    """Tests for the interactive palette."""

    @pytest.fixture
    def palette(self, seeded_store):
        palette = Palette(seeded_store)
        palette.open()
        return palette

    @pytest.mark.parametrize("token", [":q", ":quit", ":exit"])
    def test_quit(self, palette, token):
        """Quit tokens end the loop."""
        assert handle_palette_input(palette, token) is False

    def test_search_then_enter(self, palette, seeded_store):
        """A line of text is the query; an empty line runs the top row."""
        handle_palette_input(palette, "trip")
        assert palette.state.query == "trip"

        handle_palette_input(palette, "")

        assert not palette.is_open
        assert seeded_store.state.active_note_id == "n4"

    def test_each_line_replaces_query(self, palette):
        """A new line starts a new search."""
        handle_palette_input(palette, "meet")
        handle_palette_input(palette, "trip")

        assert palette.state.query == "trip"

    def test_hold_chord(self, palette, seeded_store):
        """:hold taps keys with Ctrl held and then releases it."""
        handle_palette_input(palette, ":hold j j")

        assert not palette.is_open
        assert seeded_store.state.active_note_id == "n2"

    def test_key_tokens(self, palette):
        """Tokens map to navigation keys."""
        handle_palette_input(palette, ":down")
        assert palette.state.selected_index == 1

        handle_palette_input(palette, ":esc")
        assert not palette.is_open

    def test_text_reopens_closed_palette(self, palette):
        """Typing while closed opens the palette first."""
        palette.close()

        handle_palette_input(palette, "trip")

        assert palette.is_open
        assert palette.state.query == "trip"

    def test_palette_command_quits(self, db):
        """The palette command runs until :quit."""
        result = invoke(db, "palette", input=":help\n:q\n")

        assert result.exit_code == 0
        assert "Palette keys" in result.stdout

    def test_palette_backs_up_on_schedule(self, db, make_clock, monkeypatch):
        """The loop takes another snapshot once the interval has passed."""
        monkeypatch.setattr(
            "typehere.interfaces.cli.app.utcnow", make_clock(step=timedelta(hours=25))
        )

        result = invoke(db, "palette", input=":q\n")

        assert result.exit_code == 0
        assert SqliteBackupSink(db).count() == 2

    def test_palette_backs_up_once_within_interval(self, db, make_clock, monkeypatch):
        """Only the startup snapshot is taken inside one interval."""
        monkeypatch.setattr("typehere.interfaces.cli.app.utcnow", make_clock())

        result = invoke(db, "palette", input=":help\n:q\n")

        assert result.exit_code == 0
        assert SqliteBackupSink(db).count() == 1
