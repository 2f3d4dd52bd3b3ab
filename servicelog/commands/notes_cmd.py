"""
CLI commands for reading and writing notes.

Commands:
- servicelog list                  - Table of notes, newest first
- servicelog show NOTE_ID          - Full read-only card for one note
- servicelog add                   - Interactive add workflow
- servicelog edit NOTE_ID          - Interactive edit workflow
- servicelog recategorize NOTE_ID  - Interactive recategorize workflow
- servicelog export FILE           - Write every note as a JSON array
- servicelog import FILE           - Merge notes from a JSON array
"""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..categories import AccessTier, FormHelpers, get_category_display_label
from ..config import LogbookConfig
from ..models import Note
from ..render import note_user_name, render_note
from ..stacks import stack_identifiers
from ..stacks.history import latest_serials
from ..store import NoteNotFoundError, NoteStore, StoreError
from ..util import from_epoch_ms
from ..workflows import AddNoteWorkflow, Dialog, EditNoteWorkflow, RecategorizeNoteWorkflow

console = Console()
err = Console(stderr=True)


def open_store(config: LogbookConfig) -> NoteStore:
    return NoteStore(config.store_path, author_id=config.author_id, author_name=config.author_name)


def build_helpers(config: LogbookConfig, store: NoteStore) -> FormHelpers:
    identifiers = stack_identifiers(config.stack_count)
    return FormHelpers(
        stack_count=config.stack_count,
        latest_serials=lambda: latest_serials(store.list_notes(), identifiers),
    )


def visible_notes(notes: list[Note], access: AccessTier) -> list[Note]:
    """Basic access only sees notes marked external."""
    if access == AccessTier.ELEVATED:
        return notes
    return [note for note in notes if note.external_note is True]


def _find_visible(store: NoteStore, note_id: str, access: AccessTier) -> Note | None:
    try:
        note = store.get(note_id)
    except NoteNotFoundError:
        return None
    return note if visible_notes([note], access) else None


# ============================================================================
# Read commands
# ============================================================================


def run_list(config: LogbookConfig, *, category: str | None = None, json_output: bool = False) -> int:
    store = open_store(config)
    try:
        notes = visible_notes(store.list_notes(), config.access)
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    if category:
        notes = [note for note in notes if note.note_category == category]

    if json_output:
        print(json.dumps([note.to_dict() for note in notes], indent=2))
        return 0

    table = Table(title=f"Service logbook ({len(notes)} notes)")
    table.add_column("ID", style="dim")
    table.add_column("Performed on")
    table.add_column("Category", style="cyan")
    table.add_column("Author")
    table.add_column("Subject")
    for note in notes:
        performed = from_epoch_ms(note.performed_on).date().isoformat() if note.performed_on else "-"
        table.add_row(
            note.id,
            performed,
            get_category_display_label(note.note_category),
            note_user_name(note) or "-",
            note.subject or "",
        )
    console.print(table)
    return 0


def run_show(config: LogbookConfig, note_id: str, *, json_output: bool = False) -> int:
    store = open_store(config)
    try:
        note = _find_visible(store, note_id, config.access)
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    if note is None:
        err.print(f"Note not found: {note_id}", style="red")
        return 1

    if json_output:
        print(json.dumps(note.to_dict(), indent=2))
        return 0
    console.print(render_note(note))
    return 0


# ============================================================================
# Workflow commands
# ============================================================================


def run_add(config: LogbookConfig, dialog: Dialog) -> int:
    store = open_store(config)
    workflow = AddNoteWorkflow(store, build_helpers(config, store), config.access)
    try:
        note = workflow.run(dialog)
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    if note is None:
        console.print("Cancelled.", style="dim")
        return 0
    console.print(f"Added: {note.id}", style="green")
    return 0


def run_edit(config: LogbookConfig, note_id: str, dialog: Dialog) -> int:
    store = open_store(config)
    try:
        note = _find_visible(store, note_id, config.access)
        if note is None:
            err.print(f"Note not found: {note_id}", style="red")
            return 1
        workflow = EditNoteWorkflow(note, store, build_helpers(config, store), config.access)
        updated = workflow.run(dialog)
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    if updated is None:
        console.print("Cancelled.", style="dim")
        return 0
    console.print(f"Updated: {note.id}", style="green")
    return 0


def run_recategorize(config: LogbookConfig, note_id: str, dialog: Dialog) -> int:
    store = open_store(config)
    try:
        note = _find_visible(store, note_id, config.access)
        if note is None:
            err.print(f"Note not found: {note_id}", style="red")
            return 1
        workflow = RecategorizeNoteWorkflow(note, store, build_helpers(config, store), config.access)
        updated = workflow.run(dialog)
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    if updated is None:
        console.print("Cancelled.", style="dim")
        return 0
    console.print(
        f"Recategorized: {note.id} "
        f"({get_category_display_label(note.note_category)} -> {get_category_display_label(updated.note_category)})",
        style="green",
    )
    return 0


# ============================================================================
# Bulk transfer
# ============================================================================


def run_export(config: LogbookConfig, out: Path) -> int:
    store = open_store(config)
    try:
        records = store.export_all()
    except StoreError as e:
        err.print(str(e), style="red")
        return 1
    out.write_text(json.dumps(records, indent=2), encoding="utf-8")
    console.print(f"Exported {len(records)} notes to {out}", style="green")
    return 0


def run_import(config: LogbookConfig, src: Path) -> int:
    try:
        records = json.loads(src.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        err.print(f"Cannot read {src}: {e}", style="red")
        return 1
    if not isinstance(records, list):
        err.print(f"{src}: expected a JSON array of notes", style="red")
        return 1

    store = open_store(config)
    try:
        count = store.import_all(records)
    except StoreError as e:
        err.print(f"Import failed: {e}", style="red")
        return 1
    console.print(f"Imported {count} notes into {config.store_path}", style="green")
    return 0
