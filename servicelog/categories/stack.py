"""
Stack categories.

Each stack category stores one sub-record per stack identifier in its own
tuple-list field and edits them through one form group per identifier.
The shared behaviour lives in StackCategory; subclasses pick the field, the
codec shape, the group layout and the group children.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping

from rich.console import RenderableType
from rich.table import Table
from rich.text import Text

from ..fields import FieldSpec, Option, read_only, read_only_group
from ..models import Note, Patch
from ..stacks import stack_label
from ..stacks.codec import (
    INSPECTIONS,
    INSTALLS,
    REPLACEMENTS,
    TENSIONING,
    TupleFormat,
    has_forbidden_chars,
)
from ..stacks.extract import (
    INSPECTION_LAYOUT,
    INSTALL_LAYOUT,
    REPLACEMENT_LAYOUT,
    TENSIONING_LAYOUT,
    GroupLayout,
)
from .base import CategoryConfig, FormHelpers, field_line, view_block

STACK_SYMPTOM_OPTIONS: tuple[Option, ...] = (
    Option("None", ""),
    Option("Broken MEA (Membrane Electrode Assembly)", "Broken MEA"),
    Option("Coolant leak", "Coolant leak"),
    Option("H2 leak", "H2 leak"),
    Option("Low cell performance", "Low cell performance"),
    Option("Low cell voltage", "Low cell voltage"),
    Option("Other (describe in text field)", "Other"),
)


def symptom_label(value: str) -> str:
    for option in STACK_SYMPTOM_OPTIONS:
        if option.value == value:
            return option.label
    return value or "-"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


@dataclass(frozen=True)
class Column:
    """One sub-record attribute as shown in views and read-only fields."""

    stem: str
    label: str
    getter: Callable[[Any], str]


class StackCategory(CategoryConfig):
    internal_only = True

    field_name: ClassVar[str]
    codec: ClassVar[TupleFormat[Any]]
    layout: ClassVar[GroupLayout[Any]]
    noun: ClassVar[str]  # used in "At least one <noun> must be filled in."
    read_only_prefix: ClassVar[str]
    view_title: ClassVar[str]
    columns: ClassVar[tuple[Column, ...]]
    flag_column: ClassVar[str | None] = None

    # -------------------------------------------------------------------------
    # Form
    # -------------------------------------------------------------------------

    def group_children(self, identifier: str, prefill: Mapping[str, str]) -> list[FieldSpec]:
        raise NotImplementedError

    def prefill_serials(self, helpers: FormHelpers) -> Mapping[str, str]:
        return {}

    def build_form_inputs(self, helpers: FormHelpers) -> list[FieldSpec]:
        # one history lookup per form, shared by every group
        prefill = self.prefill_serials(helpers)
        return [
            FieldSpec(
                key=self.layout.group_key(identifier),
                type="Group",
                label=stack_label(identifier),
                children=tuple(self.group_children(identifier, prefill)),
            )
            for identifier in helpers.identifiers
        ]

    def extract(self, value: Mapping[str, Any], helpers: FormHelpers) -> list[Any]:
        return self.layout.extract(value, helpers.identifiers)

    def validate(self, value: Mapping[str, Any], helpers: FormHelpers) -> str | None:
        items = self.extract(value, helpers)
        if not items:
            return f"At least one {self.noun} must be filled in."
        for item in items:
            for attr in self.layout.stems:
                if attr not in self.layout.flags and has_forbidden_chars(getattr(item, attr)):
                    return f"{stack_label(item.identifier)}: values may not contain ' or ;."
        return None

    def serialize(self, value: Mapping[str, Any], helpers: FormHelpers) -> Patch:
        return {self.field_name: self.codec.encode(self.extract(value, helpers))}

    def records(self, note: Note) -> list[Any]:
        return self.codec.decode(getattr(note, self.field_name))

    def build_edit_initial_value(self, note: Note, helpers: FormHelpers) -> dict[str, Any]:
        return dict(self.layout.expand(self.records(note)))

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def stack_table(self, records: list[Any]) -> Table:
        table = Table(title=self.view_title, title_justify="left", show_edge=False)
        table.add_column("Stack", style="bold")
        for column in self.columns:
            table.add_column(column.label)
        for record in records:
            stack = Text(stack_label(record.identifier))
            if self.flag_column and getattr(record, self.flag_column):
                stack.append(" ✓", style="green")
            table.add_row(stack, *(column.getter(record) for column in self.columns))
        return table

    def render_view(self, note: Note) -> RenderableType | None:
        records = self.records(note)
        if not records:
            return None
        return self.stack_table(records)

    def is_present(self, record: Any) -> bool:
        return any(getattr(record, attr) for attr in self.layout.presence)

    def build_read_only_fields(self, note: Note) -> list[FieldSpec]:
        inputs: list[FieldSpec] = []
        for record in self.records(note):
            if not self.is_present(record):
                continue
            identifier = record.identifier
            inputs.append(
                read_only_group(
                    f"{self.read_only_prefix}_{identifier}",
                    f"Current {stack_label(identifier)}",
                    [
                        read_only(f"current_{column.stem}_{identifier}", column.label, column.getter(record))
                        for column in self.columns
                    ],
                )
            )
        return inputs


# ============================================================================
# Stack replacements
# ============================================================================


class StackReplacementsCategory(StackCategory):
    value = "Stack replacements"
    label = "Stack replacements"

    field_name = "stack_replacements"
    codec = REPLACEMENTS
    layout = REPLACEMENT_LAYOUT
    noun = "stack replacement"
    read_only_prefix = "current_stack"
    view_title = "Stack Replacements"
    flag_column = "stack_symptom_confirmed"
    columns = (
        Column("removed", "Removed Serial", lambda r: r.removed_serial_number or "-"),
        Column("added", "Added Serial", lambda r: r.added_serial_number or "-"),
        Column("symptom", "Symptom", lambda r: symptom_label(r.stack_symptom)),
        Column("confirmed", "Confirmed", lambda r: _yes_no(r.stack_symptom_confirmed)),
    )

    def group_children(self, identifier: str, prefill: Mapping[str, str]) -> list[FieldSpec]:
        return [
            FieldSpec(
                key=f"removed_serial_number_{identifier}",
                type="String",
                label="Removed Stack Serial Number",
                placeholder="Enter serial number of removed stack",
            ),
            FieldSpec(
                key=f"added_serial_number_{identifier}",
                type="String",
                label="Added Stack Serial Number",
                placeholder="Enter serial number of added stack",
            ),
            FieldSpec(
                key=f"stack_symptom_{identifier}",
                type="Selection",
                label="Stack Symptom",
                options=STACK_SYMPTOM_OPTIONS,
            ),
            FieldSpec(
                key=f"stack_symptom_confirmed_{identifier}",
                type="Checkbox",
                label="Stack Symptom Confirmed",
                default=False,
            ),
        ]

    def build_form_inputs(self, helpers: FormHelpers) -> list[FieldSpec]:
        workorder = FieldSpec(
            key="workorder_id",
            type="String",
            label="Workorder ID",
            placeholder="Enter the workorder ID if applicable e.g., (WO-002527)",
        )
        return [workorder, *super().build_form_inputs(helpers)]

    def validate(self, value: Mapping[str, Any], helpers: FormHelpers) -> str | None:
        error = super().validate(value, helpers)
        if error is None and has_forbidden_chars(value.get("workorder_id")):
            return "Workorder ID may not contain ' or ;."
        return error

    def serialize(self, value: Mapping[str, Any], helpers: FormHelpers) -> Patch:
        patch = super().serialize(value, helpers)
        patch["workorder_id"] = value.get("workorder_id") or None
        return patch

    def build_edit_initial_value(self, note: Note, helpers: FormHelpers) -> dict[str, Any]:
        return {"workorder_id": note.workorder_id or "", **super().build_edit_initial_value(note, helpers)}

    def render_view(self, note: Note) -> RenderableType | None:
        records = self.records(note)
        if not records:
            return None
        return view_block(
            field_line("Workorder ID", note.workorder_id) if note.workorder_id else None,
            self.stack_table(records),
        )


# ============================================================================
# Stack inspection / tensioning
# ============================================================================


class _SerialInsightCategory(StackCategory):
    """Serial + insight + completed flag; serials prefill from history."""

    completed_label: ClassVar[str]
    flag_column = "completed"

    def prefill_serials(self, helpers: FormHelpers) -> Mapping[str, str]:
        return {} if helpers.is_edit else helpers.latest_serials()

    def group_children(self, identifier: str, prefill: Mapping[str, str]) -> list[FieldSpec]:
        return [
            FieldSpec(
                key=f"stack_serial_number_{identifier}",
                type="String",
                label="Stack Serial Number",
                placeholder="Enter serial number",
                default=prefill.get(identifier, ""),
            ),
            FieldSpec(
                key=f"insight_{identifier}",
                type="String",
                label="Insight",
                placeholder="Enter insight",
            ),
            FieldSpec(
                key=f"stack_completed_{identifier}",
                type="Checkbox",
                label=self.completed_label,
                default=False,
            ),
        ]


class StackInspectionCategory(_SerialInsightCategory):
    value = "Stack inspection"
    label = "Stack visual inspection"

    field_name = "stack_inspections"
    codec = INSPECTIONS
    layout = INSPECTION_LAYOUT
    noun = "stack inspection"
    read_only_prefix = "current_stack_inspection"
    view_title = "Stack Visual Inspections"
    completed_label = "Inspection Completed"
    columns = (
        Column("serial", "Serial Number", lambda r: r.serial_number or "-"),
        Column("insight", "Insight", lambda r: r.insight or "-"),
        Column("completed", "Inspection Completed", lambda r: _yes_no(r.completed)),
    )


class StackTensioningCategory(_SerialInsightCategory):
    value = "Stack tensioning"
    label = "Stack tensioning"

    field_name = "stack_tensioning"
    codec = TENSIONING
    layout = TENSIONING_LAYOUT
    noun = "stack tensioning"
    read_only_prefix = "current_stack_tensioning"
    view_title = "Stack Tensioning"
    completed_label = "Tensioning Completed"
    columns = (
        Column("serial", "Serial Number", lambda r: r.serial_number or "-"),
        Column("insight", "Insight", lambda r: r.insight or "-"),
        Column("completed", "Tensioning Completed", lambda r: _yes_no(r.completed)),
    )


# ============================================================================
# Stack installs
# ============================================================================


class StackInstallsCategory(StackCategory):
    value = "Stack installs"
    label = "Stack installs"

    field_name = "stack_installs"
    codec = INSTALLS
    layout = INSTALL_LAYOUT
    noun = "stack install"
    read_only_prefix = "current_stack_install"
    view_title = "Stack Installs"
    columns = (Column("serial", "Serial Number", lambda r: r.serial_number or "-"),)

    def group_children(self, identifier: str, prefill: Mapping[str, str]) -> list[FieldSpec]:
        return [
            FieldSpec(
                key=f"stack_serial_number_{identifier}",
                type="String",
                label="Stack Serial Number",
                placeholder="Enter serial number",
            )
        ]
