"""
Recategorize workflow.

Moves a note to another category. The new category's fields are collected
alongside a read-only summary of the current note, and every
category-owned field the new category does not write is reset to null so
no stale data from the old category survives.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from ..categories import (
    CATEGORY_OWNED_FIELDS,
    AccessTier,
    FormHelpers,
    get_category_config,
    get_category_display_label,
)
from ..fields import FieldSpec, read_only, separator
from ..models import Note, Patch
from ..util import from_epoch_ms, strip_tags, truncate
from .base import FormRequest, NotePersistence, Workflow, build_full_inputs, build_note_patch, category_selection

logger = logging.getLogger(__name__)

DESCRIPTION_PREVIEW_LENGTH = 200


class RecategorizeState(Enum):
    SELECT_NEW_CATEGORY = "select_new_category"
    FILL_NEW_FIELDS = "fill_new_fields"
    DONE = "done"


def current_note_fields(note: Note) -> list[FieldSpec]:
    """Read-only block describing the note as it is now."""
    inputs = [
        separator("separator_current", "━━━━━ CURRENT NOTE (for reference) ━━━━━"),
        read_only("current_category_display", "Current Category", get_category_display_label(note.note_category)),
    ]
    if note.performed_on:
        performed = from_epoch_ms(note.performed_on).date().isoformat()
        inputs.append(read_only("current_performed_on", "Current Performed On", performed))

    config = get_category_config(note.note_category)
    if config is not None:
        inputs.extend(config.build_read_only_fields(note))

    preview = truncate(strip_tags(note.text), DESCRIPTION_PREVIEW_LENGTH)
    inputs.append(read_only("current_text", "Current Description", preview))
    return inputs


class RecategorizeNoteWorkflow(Workflow):
    """
    SELECT_NEW_CATEGORY --chosen--> FILL_NEW_FIELDS --valid submit--> DONE (note updated)
    SELECT_NEW_CATEGORY --cancel--> DONE
    FILL_NEW_FIELDS --invalid submit--> FILL_NEW_FIELDS (error shown, values kept)
    FILL_NEW_FIELDS --cancel--> SELECT_NEW_CATEGORY
    """

    done_state = RecategorizeState.DONE

    def __init__(self, note: Note, persistence: NotePersistence, helpers: FormHelpers, access: AccessTier):
        super().__init__(persistence, helpers, access)
        self.state = RecategorizeState.SELECT_NEW_CATEGORY
        self.note = note
        self.new_category: str | None = None

    def current_request(self) -> FormRequest | None:
        if self.state is RecategorizeState.SELECT_NEW_CATEGORY:
            return FormRequest(
                title="Recategorize Note - Select New Category",
                inputs=[
                    category_selection(
                        "new_category",
                        "New Category",
                        self.access,
                        description="Choose the category you want to recategorize this note to",
                    )
                ],
                initial_value={"new_category": self.new_category} if self.new_category else {},
                submit_text="Next: Fill New Fields",
                cancel_text="Cancel",
                error=self.error,
            )
        if self.state is RecategorizeState.FILL_NEW_FIELDS:
            if self.new_category is None:
                raise RuntimeError("no new category selected")
            label = get_category_display_label(self.new_category)
            inputs = [
                *current_note_fields(self.note),
                separator("separator_new", f"━━━━━ NEW: {label} ━━━━━"),
                *build_full_inputs(self.new_category, self.helpers, self.access),
            ]
            return FormRequest(
                title=f"Recategorize to: {label}",
                inputs=inputs,
                initial_value=dict(self._entered),
                submit_text="Recategorize",
                cancel_text="Back",
                error=self.error,
                discard_changes_prompt=True,
            )
        return None

    def build_patch(self, value: Mapping[str, Any]) -> Patch:
        if self.new_category is None:
            raise RuntimeError("no new category selected")
        config = get_category_config(self.new_category)
        patch = build_note_patch(self.new_category, value, config, self.helpers, self.access)
        for name in CATEGORY_OWNED_FIELDS:
            patch.setdefault(name, None)
        return patch

    def submit(self, value: Mapping[str, Any]) -> str | None:
        if self.state is RecategorizeState.SELECT_NEW_CATEGORY:
            category = value.get("new_category")
            if not category:
                return self._reject(value, "A new category is required.")
            if not self._selectable(str(category)):
                return self._reject(value, f"Category not available: {category}")
            self.new_category = str(category)
            self._transition(RecategorizeState.FILL_NEW_FIELDS)
            return None

        if self.state is RecategorizeState.FILL_NEW_FIELDS:
            config = get_category_config(self.new_category)
            error = config.validate(value, self.helpers) if config is not None else None
            if error:
                return self._reject(value, error)
            self.result = self.persistence.edit(self.note.id, self.build_patch(value))
            logger.info(
                "recategorized note %s: %s -> %s", self.note.id, self.note.note_category, self.new_category
            )
            self._transition(RecategorizeState.DONE)
            return None

        raise RuntimeError(f"cannot submit in state {self.state.value}")

    def cancel(self) -> None:
        if self.state is RecategorizeState.FILL_NEW_FIELDS:
            self._transition(RecategorizeState.SELECT_NEW_CATEGORY)
        elif self.state is RecategorizeState.SELECT_NEW_CATEGORY:
            self._transition(RecategorizeState.DONE)
