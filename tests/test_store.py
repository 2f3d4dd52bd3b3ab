"""Tests for the JSON file note store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from servicelog.models import Note
from servicelog.store import NoteNotFoundError, NoteStore, StoreError


def test_add_stamps_identity_and_author(store: NoteStore):
    note = store.add({"note_category": "Other", "text": "hello", "id": "forged", "author_name": "Mallory"})
    assert len(note.id) == 26
    assert note.id != "forged"
    assert note.created_on > 0
    assert note.author_id == "u-1"
    assert note.author_name == "Sam Doe"
    assert store.get(note.id) == note


def test_missing_store_file_is_empty(tmp_path: Path):
    assert NoteStore(tmp_path / "nope.json").list_notes() == []


def test_get_unknown_id(store: NoteStore):
    with pytest.raises(NoteNotFoundError):
        store.get("missing")
    with pytest.raises(NoteNotFoundError):
        store.edit("missing", {"text": "x"})


def test_edit_stamps_editor(store: NoteStore):
    note = store.add({"note_category": "Other", "text": "v1"})
    updated = store.edit(note.id, {"text": "v2", "created_on": 1})
    assert updated.text == "v2"
    assert updated.created_on == note.created_on
    assert updated.editor_id == "u-1"
    assert updated.editor_name == "Sam Doe"
    assert updated.updated_on is not None


def test_list_notes_newest_first(store: NoteStore):
    store.import_all(
        [
            {"_id": "old", "created_on": 1000, "text": ""},
            {"_id": "new", "created_on": 3000, "text": ""},
            {"_id": "mid", "created_on": 2000, "text": ""},
        ]
    )
    assert [n.id for n in store.list_notes()] == ["new", "mid", "old"]


def test_import_merges_by_id(store: NoteStore):
    store.import_all([{"_id": "n1", "created_on": 1, "text": "first"}])
    count = store.import_all(
        [
            {"_id": "n1", "created_on": 1, "text": "replaced"},
            {"_id": "n2", "created_on": 2, "text": "added"},
        ]
    )
    assert count == 2
    assert {n.id: n.text for n in store.list_notes()} == {"n1": "replaced", "n2": "added"}


def test_import_rejects_malformed_records_without_writing(store: NoteStore):
    store.import_all([{"_id": "n1", "created_on": 1}])
    with pytest.raises(StoreError):
        store.import_all([{"_id": "n2", "created_on": 2}, {"created_on": 3}])
    with pytest.raises(StoreError):
        store.import_all(["not an object"])
    assert [n.id for n in store.list_notes()] == ["n1"]


def test_invalid_store_file(tmp_path: Path):
    path = tmp_path / "notes.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        NoteStore(path).list_notes()
    path.write_text('{"_id": "n1"}', encoding="utf-8")
    with pytest.raises(StoreError):
        NoteStore(path).list_notes()


def test_unknown_keys_survive_round_trip(store: NoteStore):
    store.import_all([{"_id": "n1", "created_on": 1, "user": "legacy-user", "attachments": ["a.pdf"]}])
    exported = store.export_all()[0]
    assert exported["user"] == "legacy-user"
    assert exported["attachments"] == ["a.pdf"]

    on_disk = json.loads(store.path.read_text(encoding="utf-8"))
    assert on_disk[0]["_id"] == "n1"
    assert "id" not in on_disk[0]


def test_note_apply_ignores_read_only_and_unknown_keys():
    note = Note(id="n1", created_on=5, author_id="u-1")
    patched = note.apply({"id": "n2", "author_id": "u-2", "bogus": 1, "subject": "Title"})
    assert patched.id == "n1"
    assert patched.author_id == "u-1"
    assert patched.subject == "Title"
    assert note.subject is None
