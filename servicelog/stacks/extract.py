"""
Extraction of stack sub-records from submitted form values.

Stack forms hold one group per stack identifier. The group key and the keys
of its children carry the identifier as a suffix:

    {
        "stack_group_inspection_a": {
            "stack_serial_number_a": "SN-100",
            "insight_a": "looks fine",
            "stack_completed_a": True,
        },
        ...
    }

Missing groups and missing children are read as "" (or False for flags).
A group produces a sub-record only when one of its presence fields is
non-empty, which is how unused stack slots are left blank.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Mapping, TypeVar

from .codec import StackInspection, StackInstall, StackReplacement, StackTensioning

R = TypeVar("R")


@dataclass(frozen=True)
class GroupLayout(Generic[R]):
    """Key-naming convention for one sub-record shape inside a form value."""

    group_prefix: str
    record_type: type[R]
    # record attribute -> child key stem (child key is f"{stem}_{identifier}")
    stems: dict[str, str]
    presence: tuple[str, ...]
    flags: frozenset[str] = field(default_factory=frozenset)

    def group_key(self, identifier: str) -> str:
        return f"{self.group_prefix}_{identifier}"

    def child_key(self, attr: str, identifier: str) -> str:
        return f"{self.stems[attr]}_{identifier}"

    # -------------------------------------------------------------------------
    # form value -> records
    # -------------------------------------------------------------------------

    def extract(self, value: Mapping[str, Any] | None, identifiers: Iterable[str]) -> list[R]:
        """Build one record per identifier whose group has any presence data."""
        value = value or {}
        items: list[R] = []
        for identifier in identifiers:
            group = value.get(self.group_key(identifier))
            if not isinstance(group, Mapping):
                group = {}

            attrs: dict[str, Any] = {}
            for attr in self.stems:
                raw = group.get(self.child_key(attr, identifier))
                if attr in self.flags:
                    attrs[attr] = bool(raw)
                else:
                    attrs[attr] = raw if isinstance(raw, str) else ("" if raw is None else str(raw))

            if any(attrs[attr] for attr in self.presence):
                items.append(self.record_type(identifier=identifier, **attrs))
        return items

    # -------------------------------------------------------------------------
    # records -> form value
    # -------------------------------------------------------------------------

    def expand(self, records: Iterable[R]) -> dict[str, dict[str, Any]]:
        """Inverse of extract: nested group values for a dialog pre-fill."""
        initial: dict[str, dict[str, Any]] = {}
        for record in records:
            identifier = getattr(record, "identifier")
            initial[self.group_key(identifier)] = {
                self.child_key(attr, identifier): getattr(record, attr) for attr in self.stems
            }
        return initial


REPLACEMENT_LAYOUT: GroupLayout[StackReplacement] = GroupLayout(
    group_prefix="stack_group",
    record_type=StackReplacement,
    stems={
        "removed_serial_number": "removed_serial_number",
        "added_serial_number": "added_serial_number",
        "stack_symptom": "stack_symptom",
        "stack_symptom_confirmed": "stack_symptom_confirmed",
    },
    presence=("removed_serial_number", "added_serial_number"),
    flags=frozenset({"stack_symptom_confirmed"}),
)

INSPECTION_LAYOUT: GroupLayout[StackInspection] = GroupLayout(
    group_prefix="stack_group_inspection",
    record_type=StackInspection,
    stems={
        "serial_number": "stack_serial_number",
        "insight": "insight",
        "completed": "stack_completed",
    },
    presence=("serial_number", "insight"),
    flags=frozenset({"completed"}),
)

TENSIONING_LAYOUT: GroupLayout[StackTensioning] = GroupLayout(
    group_prefix="stack_group_tensioning",
    record_type=StackTensioning,
    stems={
        "serial_number": "stack_serial_number",
        "insight": "insight",
        "completed": "stack_completed",
    },
    presence=("serial_number", "insight"),
    flags=frozenset({"completed"}),
)

INSTALL_LAYOUT: GroupLayout[StackInstall] = GroupLayout(
    group_prefix="stack_group_installs",
    record_type=StackInstall,
    stems={"serial_number": "stack_serial_number"},
    presence=("serial_number",),
)
