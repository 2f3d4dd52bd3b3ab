"""Data model for logbook notes."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

# Fields owned by a single category. Every record carries all of them; the
# ones that do not belong to the note's category are null.
CATEGORY_OWNED_FIELDS: tuple[str, ...] = (
    "tag_numbers",
    "software_type",
    "version",
    "workorder_id",
    "stack_replacements",
    "stack_inspections",
    "stack_tensioning",
    "stack_installs",
)

# Fields a patch may never overwrite.
READ_ONLY_FIELDS: frozenset[str] = frozenset({"id", "created_on", "author_id", "author_name"})


Patch = dict[str, Any]


@dataclass(frozen=True)
class Note:
    """One logbook entry. Replaced, never mutated in place."""

    id: str
    text: str = ""
    created_on: int = 0
    subject: str | None = None
    category: int | None = None  # legacy numeric category
    note_category: str | None = None

    author_id: str | None = None
    author_name: str | None = None
    editor_id: str | None = None
    editor_name: str | None = None
    updated_on: int | None = None

    performed_on: int | None = None
    external_note: bool | None = None

    # Calibration / Settings change
    tag_numbers: list[str] | None = None
    # Software update
    software_type: str | None = None
    version: str | None = None
    # Stack replacements
    workorder_id: str | None = None
    stack_replacements: str | None = None
    # Stack inspection / tensioning / installs
    stack_inspections: str | None = None
    stack_tensioning: str | None = None
    stack_installs: str | None = None

    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape (``id`` is written as ``_id``)."""
        data = asdict(self)
        extra = data.pop("extra")
        data["_id"] = data.pop("id")
        if data["tag_numbers"] is not None:
            data["tag_numbers"] = list(data["tag_numbers"])
        return {**extra, **data}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        """Deserialize from the wire shape. Unknown keys are kept in ``extra``."""
        known = {f.name for f in fields(cls)} - {"extra"}
        values: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            name = "id" if key == "_id" else key
            if name in known:
                values[name] = value
            else:
                extra[key] = value
        if "id" not in values:
            raise ValueError("note record is missing _id")
        tags = values.get("tag_numbers")
        if tags is not None:
            values["tag_numbers"] = [str(t) for t in tags]
        return cls(**values, extra=extra)

    def apply(self, patch: Patch) -> Note:
        """Return a copy with the patch applied. Unknown and read-only keys are ignored."""
        known = {f.name for f in fields(self)} - {"extra"} - READ_ONLY_FIELDS
        changes = {key: value for key, value in patch.items() if key in known}
        return replace(self, **changes)
