"""Categories with flat, non-stack fields."""

from __future__ import annotations

from typing import Any, Mapping

from rich.console import RenderableType

from ..fields import FieldSpec, Option, read_only
from ..models import Note, Patch
from .base import CategoryConfig, FormHelpers, field_line, view_block


def normalize_tag_numbers(raw: Any) -> list[str] | None:
    """
    Tag list items arrive either as plain strings or as ``{"tag_number": ...}``
    mappings (List inputs wrap each element in its item schema).
    """
    if not isinstance(raw, list):
        return None
    tags: list[str] = []
    for item in raw:
        if isinstance(item, Mapping):
            item = item.get("tag_number")
        if item is None:
            continue
        tags.append(str(item))
    return tags


class TagListCategory(CategoryConfig):
    """A category whose only data is a list of tag numbers."""

    def __init__(self, value: str, label: str | None = None, *, internal_only: bool = False):
        self.value = value
        self.label = label or value
        self.internal_only = internal_only

    def build_form_inputs(self, helpers: FormHelpers) -> list[FieldSpec]:
        return [
            FieldSpec(
                key="tag_numbers",
                type="List",
                label="Tag Numbers",
                required=True,
                item=FieldSpec(
                    key="tag_number",
                    type="String",
                    label="Tag Number",
                    placeholder="Enter tag number",
                ),
            )
        ]

    def serialize(self, value: Mapping[str, Any], helpers: FormHelpers) -> Patch:
        return {"tag_numbers": normalize_tag_numbers(value.get("tag_numbers"))}

    def build_edit_initial_value(self, note: Note, helpers: FormHelpers) -> dict[str, Any]:
        return {"tag_numbers": list(note.tag_numbers or [])}

    def render_view(self, note: Note) -> RenderableType | None:
        if not note.tag_numbers:
            return None
        return field_line("Tag Numbers", ", ".join(note.tag_numbers))

    def build_read_only_fields(self, note: Note) -> list[FieldSpec]:
        if not note.tag_numbers:
            return []
        return [read_only("current_tag_numbers", "Current Tag Numbers", ", ".join(note.tag_numbers))]


SOFTWARE_TYPE_OPTIONS: tuple[Option, ...] = (
    Option("PLC software", "PLC software"),
    Option("Ixon router", "Ixon router"),
    Option("HMI software", "HMI software"),
    Option("Other (please specify the updated software in the text field below)", "Other"),
)


class SoftwareUpdateCategory(CategoryConfig):
    value = "Software update"
    label = "Software update"
    internal_only = False

    def build_form_inputs(self, helpers: FormHelpers) -> list[FieldSpec]:
        return [
            FieldSpec(
                key="software_type",
                type="Selection",
                label="Software Type",
                required=True,
                options=SOFTWARE_TYPE_OPTIONS,
            ),
            FieldSpec(
                key="version",
                type="String",
                label="Software Version",
                placeholder="Enter new software version (e.g., v2.1.0)",
            ),
        ]

    def serialize(self, value: Mapping[str, Any], helpers: FormHelpers) -> Patch:
        return {
            "software_type": value.get("software_type") or None,
            "version": value.get("version") or None,
        }

    def build_edit_initial_value(self, note: Note, helpers: FormHelpers) -> dict[str, Any]:
        return {
            "software_type": note.software_type or "",
            "version": note.version or "",
        }

    def render_view(self, note: Note) -> RenderableType | None:
        return view_block(
            field_line("Software Type", note.software_type) if note.software_type else None,
            field_line("Version", note.version) if note.version else None,
        )

    def build_read_only_fields(self, note: Note) -> list[FieldSpec]:
        inputs: list[FieldSpec] = []
        if note.software_type:
            inputs.append(read_only("current_software_type", "Current Software Type", note.software_type))
        if note.version:
            inputs.append(read_only("current_version", "Current Version", note.version))
        return inputs


class OtherCategory(CategoryConfig):
    """Free-form note; no category-specific fields."""

    value = "Other"
    label = "Other"
    internal_only = False
