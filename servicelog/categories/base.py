"""
Category capability contract.

A category owns a slice of the flat note record. Its config object knows how
to build the form inputs for that slice, validate and serialize submitted
values into a patch, rebuild form state from a stored note, and present the
stored values read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping

from rich.console import Group, RenderableType
from rich.text import Text

from ..fields import FieldSpec
from ..models import Note, Patch
from ..stacks import clamp_stack_count, stack_identifiers


class AccessTier(str, Enum):
    BASIC = "basic"  # external users: internal-only categories hidden
    ELEVATED = "elevated"  # company users: everything visible


def _no_serials() -> dict[str, str]:
    return {}


@dataclass(frozen=True)
class FormHelpers:
    """
    Context handed to every category call.

    ``latest_serials`` is called lazily, only by categories that prefill serial
    numbers, since resolving it means scanning the note history.
    """

    stack_count: int = 1
    latest_serials: Callable[[], Mapping[str, str]] = field(default=_no_serials, compare=False)
    is_edit: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "stack_count", clamp_stack_count(self.stack_count))

    @property
    def identifiers(self) -> list[str]:
        return stack_identifiers(self.stack_count)

    def for_edit(self) -> FormHelpers:
        return replace(self, is_edit=True)


@dataclass(frozen=True)
class CategoryOption:
    value: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"value": self.value, "label": self.label}


class CategoryConfig:
    """
    Base config. Subclasses set ``value``/``label``/``internal_only`` and
    override the operations they support; the defaults describe a category
    with no fields of its own.
    """

    value: str = ""
    label: str = ""
    internal_only: bool = False

    def build_form_inputs(self, helpers: FormHelpers) -> list[FieldSpec]:
        return []

    def validate(self, value: Mapping[str, Any], helpers: FormHelpers) -> str | None:
        return None

    def serialize(self, value: Mapping[str, Any], helpers: FormHelpers) -> Patch:
        return {}

    def build_edit_initial_value(self, note: Note, helpers: FormHelpers) -> dict[str, Any]:
        return {}

    def render_view(self, note: Note) -> RenderableType | None:
        return None

    def build_read_only_fields(self, note: Note) -> list[FieldSpec]:
        return []

    def option(self) -> CategoryOption:
        return CategoryOption(value=self.value, label=self.label)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value!r})"


# -----------------------------------------------------------------------------
# View helpers
# -----------------------------------------------------------------------------


def field_line(label: str, value: str) -> Text:
    return Text.assemble((f"{label}: ", "bold dim"), value)


def view_block(*lines: RenderableType) -> RenderableType | None:
    """Group non-empty view lines, or None when there is nothing to show."""
    present = [line for line in lines if line is not None]
    if not present:
        return None
    return Group(*present)
