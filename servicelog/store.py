"""
File-backed note store.

Notes are kept as a JSON array of wire records in a single file. Every
mutation rewrites the file through a temporary sibling and an atomic
rename; there is no locking, the last writer wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from .models import Note, Patch
from .util import new_ulid, now_ms

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """The store file is unreadable or a record is malformed."""


class NoteNotFoundError(KeyError):
    """No note with the requested id."""


class NoteStore:
    """
    Persistence collaborator for the note workflows.

    ``author_id``/``author_name`` are stamped on notes this store creates and,
    as editor, on notes it updates.
    """

    def __init__(self, path: Path, *, author_id: str | None = None, author_name: str | None = None):
        self.path = path
        self.author_id = author_id
        self.author_name = author_name

    # -------------------------------------------------------------------------
    # File I/O
    # -------------------------------------------------------------------------

    def _load(self) -> list[Note]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except json.JSONDecodeError as e:
            raise StoreError(f"{self.path}: invalid JSON ({e})") from e
        if not isinstance(data, list):
            raise StoreError(f"{self.path}: expected a JSON array of notes")
        return self._parse_records(data)

    def _parse_records(self, records: Iterable[Any]) -> list[Note]:
        notes: list[Note] = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise StoreError(f"record {i} is not an object")
            try:
                notes.append(Note.from_dict(record))
            except (TypeError, ValueError) as e:
                raise StoreError(f"record {i}: {e}") from e
        return notes

    def _save(self, notes: list[Note]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps([n.to_dict() for n in notes], indent=2), encoding="utf-8")
        tmp.replace(self.path)
        logger.debug("wrote %d notes to %s", len(notes), self.path)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_notes(self) -> list[Note]:
        """All notes, newest first."""
        return sorted(self._load(), key=lambda n: n.created_on, reverse=True)

    def get(self, note_id: str) -> Note:
        for note in self._load():
            if note.id == note_id:
                return note
        raise NoteNotFoundError(note_id)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, patch: Patch) -> Note:
        created_on = now_ms()
        note = Note(
            id=new_ulid(timestamp_ms=created_on),
            created_on=created_on,
            author_id=self.author_id,
            author_name=self.author_name,
        ).apply(patch)
        notes = self._load()
        notes.append(note)
        self._save(notes)
        return note

    def edit(self, note_id: str, patch: Patch) -> Note:
        notes = self._load()
        for i, note in enumerate(notes):
            if note.id != note_id:
                continue
            stamped = {
                **patch,
                "editor_id": self.author_id,
                "editor_name": self.author_name,
                "updated_on": now_ms(),
            }
            notes[i] = note.apply(stamped)
            self._save(notes)
            return notes[i]
        raise NoteNotFoundError(note_id)

    def export_all(self) -> list[dict[str, Any]]:
        return [note.to_dict() for note in self._load()]

    def import_all(self, records: Iterable[Any]) -> int:
        """
        Merge wire records into the store. Records whose id already exists
        replace the stored note; the rest are appended. Returns the number of
        records imported. Nothing is written if any record is malformed.
        """
        incoming = self._parse_records(records)
        notes = self._load()
        index = {note.id: i for i, note in enumerate(notes)}
        for note in incoming:
            if note.id in index:
                notes[index[note.id]] = note
            else:
                index[note.id] = len(notes)
                notes.append(note)
        self._save(notes)
        logger.info("imported %d notes into %s", len(incoming), self.path)
        return len(incoming)
