"""CLI application for typehere using Rich and Typer."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from typehere.core.backup import BackupScheduler
from typehere.core.config import (
    CURRENT_NOTE_KEY,
    CURRENT_WORKSPACE_KEY,
    DATABASE_KEY,
    EXPORT_FILENAME,
    setup_logging,
)
from typehere.core.notes import NoteStore, decode_notes
from typehere.core.palette import Palette
from typehere.core.preferences import PreferencesStore
from typehere.core.text import apply_replacements, note_title
from typehere.core.transfer import export_notes, import_notes
from typehere.core.types import (
    ActionSuggestion,
    KeyEvent,
    Note,
    NoteSuggestion,
    TypehereError,
    utcnow,
)
from typehere.storage import SqliteBackupSink, SqliteKeyValueStore

app = typer.Typer(
    name="typehere",
    help="typehere - keyboard-first notes",
    no_args_is_help=False,
)

console = Console()

SYNC_KEYS = [DATABASE_KEY, CURRENT_NOTE_KEY, CURRENT_WORKSPACE_KEY]

# Palette REPL tokens mapped to key presses
PALETTE_KEYS = {
    ":up": KeyEvent("ArrowUp"),
    ":down": KeyEvent("ArrowDown"),
    ":left": KeyEvent("ArrowLeft"),
    ":right": KeyEvent("ArrowRight"),
    ":enter": KeyEvent("Enter"),
    ":esc": KeyEvent("Escape"),
    ":back": KeyEvent("Backspace"),
    ":del": KeyEvent("Backspace", ctrl=True),
    ":undo": KeyEvent("z", ctrl=True),
    ":open": KeyEvent("k", ctrl=True),
    ":new": KeyEvent("Enter", ctrl=True, shift=True),
}


def _db_option():
    return typer.Option(
        None,
        "--db",
        help="Path to the SQLite data file (default: ~/.typehere/typehere.db)",
    )


def _open_store(db: Optional[str]) -> tuple[SqliteKeyValueStore, NoteStore]:
    kv = SqliteKeyValueStore(db)
    return kv, NoteStore(kv)


def _resolve_note(store: NoteStore, note_id: str) -> Note:
    matches = [note for note in store.notes if note.id.startswith(note_id)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise TypehereError(f"Multiple notes match {note_id!r}. Be more specific.")
    raise TypehereError(f"Note not found: {note_id}")


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _format_time(note: Note) -> str:
    return note.updated_at.astimezone().strftime("%Y-%m-%d %H:%M")


def print_notes(notes: list[Note], active_id: str | None, title: str) -> None:
    if not notes:
        console.print("[dim]No notes yet.[/dim]")
        return

    table = Table(title=title, show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Workspace", style="cyan")
    table.add_column("Updated")

    for note in notes:
        label = escape(note_title(note)) or "[italic]New Note[/italic]"
        if note.id == active_id:
            label = f"[bold]{label}[/bold]"
        table.add_row(note.id, label, escape(note.workspace or ""), _format_time(note))

    console.print(table)


def print_palette(palette: Palette) -> None:
    """Render the palette rows with the selection marker."""
    state = palette.state
    footer = (
        escape(f"workspace: [{state.active_workspace}]")
        if state.active_workspace
        else "all notes"
    )
    table = Table(
        title=escape(f"> {state.query}"),
        caption=footer,
        show_header=False,
        box=None,
    )
    table.add_column("", width=1)
    table.add_column("Row")
    table.add_column("Detail", style="dim")

    for index, suggestion in enumerate(palette.suggestions):
        marker = "▸" if index == state.selected_index else ""
        if isinstance(suggestion, NoteSuggestion):
            note = suggestion.note
            label = escape(note_title(note)) or "[italic]New Note[/italic]"
            if note.id == state.active_note_id:
                label = f"[bold]{label}[/bold]"
            detail = _format_time(note)
            if not state.active_workspace and note.workspace:
                detail += f" • {escape(note.workspace)}"
            table.add_row(marker, label, detail)
        elif isinstance(suggestion, ActionSuggestion):
            color = suggestion.color or "white"
            table.add_row(
                marker,
                f"[{color}]{escape(suggestion.title)}[/{color}]",
                escape(suggestion.preview),
            )

    console.print(table)


def print_help():
    """Print palette key help."""
    table = Table(title="Palette keys", show_header=True, header_style="bold cyan")
    table.add_column("Input", style="green")
    table.add_column("Effect")

    rows = [
        ("text", "Search / type into the palette"),
        (":up :down", "Move the selection"),
        (":left :right", "Switch workspace"),
        (":enter (or empty line)", "Run the selected row"),
        (":hold j j k", "Hold ctrl, tap keys, release to run"),
        (":del", "Delete the selected note"),
        (":undo", "Restore the last deleted note"),
        (":back", "Delete one query character"),
        (":esc / :open", "Close / reopen the palette"),
        (":new", "New empty note (palette closed)"),
        (":help", "Show this help message"),
        (":quit", "Exit"),
    ]
    for key, desc in rows:
        table.add_row(key, desc)

    console.print(table)


def handle_palette_input(palette: Palette, text: str) -> bool:
    """
    Feed one line of REPL input to the palette.

    Returns True if the REPL should continue, False to exit.
    """
    token = text.strip()

    if token in (":q", ":quit", ":exit"):
        return False

    if token == ":help":
        print_help()
        return True

    if not token:
        palette.key_down(PALETTE_KEYS[":enter"])
        return True

    if token.startswith(":hold"):
        for key in token.split()[1:]:
            palette.key_down(KeyEvent(key, ctrl=True))
        palette.key_up(KeyEvent("Control"))
        return True

    if token in PALETTE_KEYS:
        palette.key_down(PALETTE_KEYS[token])
        return True

    if not palette.is_open:
        palette.open()
    palette.input_query("")
    for char in text:
        palette.key_down(KeyEvent(char))
    return True


@app.command("list")
def list_notes(
    workspace: Optional[str] = typer.Option(
        None, "--workspace", "-w", help="Only notes in this workspace"
    ),
    db: Optional[str] = _db_option(),
):
    """List notes, most recently updated first."""
    _, store = _open_store(db)
    notes = sorted(
        store.list_by_workspace(workspace),
        key=lambda note: note.updated_at,
        reverse=True,
    )
    print_notes(notes, store.state.active_note_id, f"Notes ({workspace or 'all'})")


@app.command()
def new(
    text: str = typer.Argument("", help="Note content"),
    workspace: Optional[str] = typer.Option(
        None, "--workspace", "-w", help="Workspace tag"
    ),
    db: Optional[str] = _db_option(),
):
    """Create a note."""
    _, store = _open_store(db)
    note = store.create(apply_replacements(text), workspace)
    console.print(f"[green]Created note {note.id}[/green]")


@app.command()
def show(note_id: str, db: Optional[str] = _db_option()):
    """Print a note."""
    _, store = _open_store(db)
    try:
        note = _resolve_note(store, note_id)
    except TypehereError as exc:
        _fail(str(exc))
        return
    title = note.workspace and f"{note.id} [{note.workspace}]" or note.id
    console.print(Panel(escape(note.content) or "[dim](empty)[/dim]", title=escape(title)))


@app.command()
def edit(note_id: str, text: str, db: Optional[str] = _db_option()):
    """Replace a note's content."""
    _, store = _open_store(db)
    try:
        note = _resolve_note(store, note_id)
    except TypehereError as exc:
        _fail(str(exc))
        return
    store.save(note.id, text)
    console.print(f"[green]Saved {note.id}[/green]")


@app.command()
def delete(note_id: str, db: Optional[str] = _db_option()):
    """Delete a note."""
    _, store = _open_store(db)
    try:
        note = _resolve_note(store, note_id)
    except TypehereError as exc:
        _fail(str(exc))
        return
    store.delete(note.id)
    console.print(f"[yellow]Deleted {note.id}[/yellow]")


@app.command()
def workspaces(db: Optional[str] = _db_option()):
    """List workspaces, most recently used first."""
    _, store = _open_store(db)
    names = store.workspaces()
    if not names:
        console.print("[dim]No workspaces yet.[/dim]")
        return

    table = Table(title="Workspaces", show_header=True)
    table.add_column("Workspace", style="cyan")
    table.add_column("Notes")
    table.add_column("Status")
    for name in names:
        status = "[green]current[/green]" if name == store.state.active_workspace else ""
        table.add_row(escape(name), str(len(store.list_by_workspace(name))), status)
    console.print(table)


@app.command()
def move(note_id: str, workspace: str, db: Optional[str] = _db_option()):
    """Move a note to a workspace."""
    _, store = _open_store(db)
    try:
        note = _resolve_note(store, note_id)
    except TypehereError as exc:
        _fail(str(exc))
        return
    store.move_to_workspace(note.id, workspace)
    console.print(f"[green]Moved {note.id} to {escape(workspace)}[/green]")


@app.command()
def unlink(note_id: str, db: Optional[str] = _db_option()):
    """Remove a note from its workspace."""
    _, store = _open_store(db)
    try:
        note = _resolve_note(store, note_id)
    except TypehereError as exc:
        _fail(str(exc))
        return
    store.unlink_workspace(note.id)
    console.print(f"[green]Unlinked {note.id}[/green]")


@app.command()
def rename(old: str, new_name: str, db: Optional[str] = _db_option()):
    """Rename a workspace."""
    _, store = _open_store(db)
    changed = store.rename_workspace(old, new_name)
    if not changed:
        _fail(f"Workspace not found: {old}")
    console.print(
        f"[green]Renamed {escape(old)} to {escape(new_name)} ({changed} notes)[/green]"
    )


@app.command("export")
def export_command(
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file"),
    db: Optional[str] = _db_option(),
):
    """Export all notes to a compressed file."""
    _, store = _open_store(db)
    path = out or Path(EXPORT_FILENAME)
    path.write_text(export_notes(store.notes), encoding="utf-8")
    console.print(f"[green]Exported {len(store.notes)} notes to {path}[/green]")


@app.command("import")
def import_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Exported file"),
    db: Optional[str] = _db_option(),
):
    """Replace all notes with the contents of an export file."""
    notes = import_notes(file.read_text(encoding="utf-8"))
    if notes is None:
        _fail(f"Could not read notes from {file}")
        return
    _, store = _open_store(db)
    store.replace_all(notes)
    console.print(f"[green]Imported {len(notes)} notes[/green]")


@app.command()
def backup(db: Optional[str] = _db_option()):
    """Snapshot all notes to the backup table now."""
    kv, store = _open_store(db)
    scheduler = BackupScheduler(store, kv, SqliteBackupSink(kv.db_path))
    if not scheduler.backup_now():
        _fail("Backup failed")
    console.print("[green]Backup stored[/green]")


@app.command()
def backups(
    limit: int = typer.Option(10, "--limit", "-n", help="How many snapshots to show"),
    db: Optional[str] = _db_option(),
):
    """List recent backup snapshots, newest first."""
    records = SqliteBackupSink(db).recent(limit)
    if not records:
        console.print("[dim]No backups yet.[/dim]")
        return

    table = Table(title="Backups", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Taken")
    table.add_column("Notes")
    for record in records:
        try:
            count = str(len(decode_notes(record.data)))
        except ValueError:
            count = "[red]unreadable[/red]"
        table.add_row(
            str(record.id),
            record.date.astimezone().strftime("%Y-%m-%d %H:%M"),
            count,
        )
    console.print(table)


@app.command()
def settings(
    toggle_theme: bool = typer.Option(False, "--toggle-theme", help="Switch light/dark"),
    toggle_vim: bool = typer.Option(False, "--toggle-vim", help="Switch vim mode"),
    toggle_narrow: bool = typer.Option(False, "--toggle-narrow", help="Switch narrow layout"),
    db: Optional[str] = _db_option(),
):
    """View or change display preferences."""
    prefs_store = PreferencesStore(SqliteKeyValueStore(db))
    if toggle_theme:
        prefs_store.toggle_theme()
    if toggle_vim:
        prefs_store.toggle_vim()
    if toggle_narrow:
        prefs_store.toggle_narrow()
    prefs = prefs_store.get()

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Theme", prefs.theme.value)
    table.add_row("Vim", "enabled" if prefs.use_vim else "disabled")
    table.add_row("Narrow", "enabled" if prefs.narrow else "disabled")
    console.print(table)


@app.command()
def palette(db: Optional[str] = _db_option()):
    """Start the interactive command palette."""
    kv, store = _open_store(db)
    scheduler = BackupScheduler(store, kv, SqliteBackupSink(kv.db_path), clock=utcnow)
    scheduler.startup()

    engine = Palette(store)
    engine.open()
    console.print(
        Panel.fit(
            "[bold blue]typehere[/bold blue]\n"
            "Type to search, empty line to run the selected row.\n"
            "Type :help for keys, :quit to exit.",
            title="Palette",
            border_style="blue",
        )
    )

    while True:
        kv.poll(SYNC_KEYS)
        scheduler.tick()
        if engine.is_open:
            print_palette(engine)
        else:
            note = store.active_note
            if note is not None:
                console.print(
                    Panel(escape(note.content) or "[dim](empty)[/dim]", title=note.id)
                )

        try:
            text = Prompt.ask("[bold blue]>[/bold blue]", default="", show_default=False)
        except (KeyboardInterrupt, EOFError):
            break

        if not handle_palette_input(engine, text):
            break


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """typehere - keyboard-first notes."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        setup_logging()
    if ctx.invoked_subcommand is None:
        palette(db=None)


def run_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run_cli()
