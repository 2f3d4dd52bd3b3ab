"""
Read-only presentation of a note.

Builds the rich renderable shown by ``servicelog show``: who wrote the note
and when, the category, the performed-on date, the category's own fields,
and the description with markup stripped.
"""

from __future__ import annotations

from typing import Mapping

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from .categories import get_category_config, get_category_display_label
from .categories.base import field_line
from .models import Note
from .util import from_epoch_ms, strip_tags

DATE_FORMAT = "%B %d, %Y"
DATETIME_FORMAT = "%B %d, %Y %H:%M"


def note_user_name(note: Note, users: Mapping[str, str] | None = None) -> str:
    """Author display name; ``users`` maps user ids to current names."""
    users = users or {}
    if note.author_id:
        return users.get(note.author_id) or note.author_name or ""
    legacy_user = note.extra.get("user")
    if isinstance(legacy_user, str) and legacy_user:
        return users.get(legacy_user, "")
    return ""


def note_edited_by(note: Note, users: Mapping[str, str] | None = None) -> str:
    users = users or {}
    if note.editor_id:
        return users.get(note.editor_id) or note.editor_name or ""
    return ""


def render_category_fields(note: Note) -> RenderableType | None:
    config = get_category_config(note.note_category)
    return config.render_view(note) if config is not None else None


def _byline(note: Note, users: Mapping[str, str] | None) -> Text:
    line = Text(note_user_name(note, users) or "unknown", style="bold")
    if note.created_on:
        line.append(f"  {from_epoch_ms(note.created_on).strftime(DATETIME_FORMAT)}", style="dim")
    if note.editor_id and note.editor_name:
        edited = f"  edited by {note_edited_by(note, users)}"
        if note.updated_on:
            edited += f" on {from_epoch_ms(note.updated_on).strftime(DATETIME_FORMAT)}"
        line.append(edited, style="dim italic")
    return line


def render_note(note: Note, users: Mapping[str, str] | None = None) -> Panel:
    parts: list[RenderableType] = []
    if note.subject:
        parts.append(Text(note.subject, style="bold underline"))
    if note.external_note is True:
        parts.append(Text(" EXTERNAL NOTE ", style="bold white on blue"))
    parts.append(field_line("Category", get_category_display_label(note.note_category)))
    if note.performed_on:
        parts.append(field_line("Performed On", from_epoch_ms(note.performed_on).strftime(DATE_FORMAT)))

    category_fields = render_category_fields(note)
    if category_fields is not None:
        parts.append(category_fields)

    description = strip_tags(note.text).strip()
    if description:
        parts.append(Text(""))
        parts.append(Text(description))

    return Panel(Group(*parts), title=_byline(note, users), title_align="left", subtitle=note.id, subtitle_align="right")
