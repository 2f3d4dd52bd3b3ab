"""Latest known stack serial numbers, recovered from note history."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from .codec import decode_inspections, decode_installs, decode_replacements, decode_tensioning

if TYPE_CHECKING:
    from ..models import Note


def _serials_in(note: "Note") -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    pairs.extend((i.identifier, i.serial_number) for i in decode_installs(note.stack_installs))
    pairs.extend((r.identifier, r.added_serial_number) for r in decode_replacements(note.stack_replacements))
    pairs.extend((i.identifier, i.serial_number) for i in decode_inspections(note.stack_inspections))
    pairs.extend((t.identifier, t.serial_number) for t in decode_tensioning(note.stack_tensioning))
    return [(identifier, serial) for identifier, serial in pairs if serial]


def _moment(note: "Note") -> int:
    return note.performed_on if note.performed_on is not None else note.created_on


def latest_serials(notes: Iterable["Note"], identifiers: Iterable[str]) -> dict[str, str]:
    """
    Most recently recorded serial number per stack identifier.

    Notes are scanned newest first (performed_on, else created_on). Within one
    note installs win over replacements (added serial), then inspections, then
    tensioning. The scan stops once every requested identifier is resolved.
    """
    wanted = set(identifiers)
    found: dict[str, str] = {}
    if not wanted:
        return found

    for note in sorted(notes, key=_moment, reverse=True):
        for identifier, serial in _serials_in(note):
            if identifier in wanted and identifier not in found:
                found[identifier] = serial
        if len(found) == len(wanted):
            break
    return found
