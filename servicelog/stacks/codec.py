"""
Tuple-list codec for stack sub-records.

Stack categories pack their sub-records into a single string field:

    ('a','SN-100','looks fine','true');('b','SN-101','','false');

Each record is a parenthesized, single-quoted, comma-separated tuple in a
fixed field order. Tuples are joined by ``;`` and a trailing ``;`` is always
written. An empty list is stored as a null field, never as an empty string.

Two generations of the inspection/tensioning shape exist. The older one
lacks the trailing ``completed`` flag; it still decodes, with the flag
defaulting to false.

The format has no escaping, so values may not contain ``'`` or ``;``.
Decoding is lenient: segments that match no known pattern are dropped and
decoding continues with the remaining segments.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields
from typing import Any, Generic, Iterable, Sequence, TypeVar

logger = logging.getLogger(__name__)

FORBIDDEN_CHARS: tuple[str, ...] = ("'", ";")


class MicroFormatError(ValueError):
    """Raised when a record cannot be represented in the tuple format."""


# -----------------------------------------------------------------------------
# Sub-record shapes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class StackReplacement:
    identifier: str
    removed_serial_number: str = ""
    added_serial_number: str = ""
    stack_symptom: str = ""
    stack_symptom_confirmed: bool = False


@dataclass(frozen=True)
class StackInspection:
    identifier: str
    serial_number: str = ""
    insight: str = ""
    completed: bool = False


@dataclass(frozen=True)
class StackTensioning:
    identifier: str
    serial_number: str = ""
    insight: str = ""
    completed: bool = False


@dataclass(frozen=True)
class StackInstall:
    identifier: str
    serial_number: str = ""


R = TypeVar("R")


def has_forbidden_chars(value: Any) -> bool:
    """True when a value cannot be stored in the tuple format."""
    text = str(value) if value is not None else ""
    return any(ch in text for ch in FORBIDDEN_CHARS)


def _tuple_pattern(field_names: Sequence[str], flags: frozenset[str]) -> re.Pattern[str]:
    groups: list[str] = []
    for i, name in enumerate(field_names):
        # identifier and flags must be non-empty, free-text fields may be blank
        groups.append("([^']+)" if i == 0 or name in flags else "([^']*)")
    return re.compile(r"\('" + "','".join(groups) + r"'\)")


class TupleFormat(Generic[R]):
    """
    Codec for one sub-record shape.

    ``field_names`` is the tuple order. ``legacy_field_names`` (optional) is an
    older, shorter tuple order that is tried when the current one fails; fields
    it lacks take the record's defaults.
    """

    def __init__(
        self,
        name: str,
        record_type: type[R],
        field_names: Sequence[str],
        *,
        flags: Iterable[str] = (),
        legacy_field_names: Sequence[str] | None = None,
    ):
        self.name = name
        self.record_type = record_type
        self.field_names = tuple(field_names)
        self.flags = frozenset(flags)

        known = {f.name for f in fields(record_type)}  # type: ignore[arg-type]
        unknown = set(self.field_names) - known
        if unknown:
            raise ValueError(f"{name}: unknown fields {sorted(unknown)}")

        self._layouts: list[tuple[tuple[str, ...], re.Pattern[str]]] = [
            (self.field_names, _tuple_pattern(self.field_names, self.flags))
        ]
        if legacy_field_names is not None:
            legacy = tuple(legacy_field_names)
            self._layouts.append((legacy, _tuple_pattern(legacy, self.flags)))

    # -------------------------------------------------------------------------
    # Encoding
    # -------------------------------------------------------------------------

    def encode(self, records: Sequence[R]) -> str | None:
        """Encode records into the tuple-list string; an empty list encodes to None."""
        if not records:
            return None
        return ";".join(self._render(record) for record in records) + ";"

    def _render(self, record: R) -> str:
        parts: list[str] = []
        for name in self.field_names:
            value = getattr(record, name)
            if name in self.flags:
                parts.append("true" if value else "false")
                continue
            text = "" if value is None else str(value)
            if has_forbidden_chars(text):
                raise MicroFormatError(f"{self.name}.{name} may not contain ' or ;: {text!r}")
            parts.append(text)
        if not parts[0]:
            raise MicroFormatError(f"{self.name}: identifier must be non-empty")
        return "('" + "','".join(parts) + "')"

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def decode(self, raw: str | None) -> list[R]:
        """Decode a tuple-list string. None or empty input decodes to []."""
        if not raw:
            return []
        records: list[R] = []
        for segment in raw.split(";"):
            if not segment.strip():
                continue
            record = self._parse_segment(segment)
            if record is None:
                logger.debug("dropping malformed %s segment: %r", self.name, segment)
                continue
            records.append(record)
        return records

    def _parse_segment(self, segment: str) -> R | None:
        for field_names, pattern in self._layouts:
            match = pattern.search(segment)
            if match is None:
                continue
            values: dict[str, Any] = {}
            for name, text in zip(field_names, match.groups()):
                values[name] = text == "true" if name in self.flags else text
            return self.record_type(**values)
        return None


# ============================================================================
# SHAPES
# ============================================================================

REPLACEMENTS: TupleFormat[StackReplacement] = TupleFormat(
    "stack_replacements",
    StackReplacement,
    (
        "identifier",
        "removed_serial_number",
        "added_serial_number",
        "stack_symptom",
        "stack_symptom_confirmed",
    ),
    flags=("stack_symptom_confirmed",),
)

INSPECTIONS: TupleFormat[StackInspection] = TupleFormat(
    "stack_inspections",
    StackInspection,
    ("identifier", "serial_number", "insight", "completed"),
    flags=("completed",),
    legacy_field_names=("identifier", "serial_number", "insight"),
)

TENSIONING: TupleFormat[StackTensioning] = TupleFormat(
    "stack_tensioning",
    StackTensioning,
    ("identifier", "serial_number", "insight", "completed"),
    flags=("completed",),
    legacy_field_names=("identifier", "serial_number", "insight"),
)

INSTALLS: TupleFormat[StackInstall] = TupleFormat(
    "stack_installs",
    StackInstall,
    ("identifier", "serial_number"),
)


def decode_replacements(raw: str | None) -> list[StackReplacement]:
    return REPLACEMENTS.decode(raw)


def encode_replacements(records: Sequence[StackReplacement]) -> str | None:
    return REPLACEMENTS.encode(records)


def decode_inspections(raw: str | None) -> list[StackInspection]:
    return INSPECTIONS.decode(raw)


def encode_inspections(records: Sequence[StackInspection]) -> str | None:
    return INSPECTIONS.encode(records)


def decode_tensioning(raw: str | None) -> list[StackTensioning]:
    return TENSIONING.decode(raw)


def encode_tensioning(records: Sequence[StackTensioning]) -> str | None:
    return TENSIONING.encode(records)


def decode_installs(raw: str | None) -> list[StackInstall]:
    return INSTALLS.decode(raw)


def encode_installs(records: Sequence[StackInstall]) -> str | None:
    return INSTALLS.encode(records)
