"""
Form field descriptors.

Categories describe their inputs as a list of FieldSpec values. The dialog
collaborator turns them into prompts; the engine never renders them itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

FieldType = Literal[
    "String",
    "RichText",
    "Selection",
    "Checkbox",
    "List",
    "Group",
    "DateTime",
]


@dataclass(frozen=True)
class Option:
    label: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class FieldSpec:
    """One input in a form dialog."""

    key: str
    type: FieldType
    label: str
    required: bool = False
    placeholder: str | None = None
    description: str | None = None
    default: Any = None
    disabled: bool = False
    options: tuple[Option, ...] = ()
    children: tuple[FieldSpec, ...] = ()
    item: FieldSpec | None = None  # element schema for List fields

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output; empty optional attributes are omitted."""
        data: dict[str, Any] = {"key": self.key, "type": self.type, "label": self.label}
        if self.required:
            data["required"] = True
        if self.placeholder is not None:
            data["placeholder"] = self.placeholder
        if self.description is not None:
            data["description"] = self.description
        if self.default is not None:
            data["defaultValue"] = self.default
        if self.disabled:
            data["disabled"] = True
        if self.options:
            data["options"] = [o.to_dict() for o in self.options]
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        if self.item is not None:
            data["itemType"] = self.item.to_dict()
        return data


def read_only(key: str, label: str, value: str) -> FieldSpec:
    """A disabled String field showing a current value."""
    return FieldSpec(key=key, type="String", label=label, default=value, disabled=True)


def read_only_group(key: str, label: str, children: list[FieldSpec]) -> FieldSpec:
    return FieldSpec(key=key, type="Group", label=label, disabled=True, children=tuple(children))


def separator(key: str, label: str) -> FieldSpec:
    return FieldSpec(key=key, type="String", label=label, default="", disabled=True)
