"""Edit-note workflow: one form pre-filled from the stored note."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from ..categories import (
    FALLBACK_CATEGORY,
    AccessTier,
    FormHelpers,
    get_category_config,
    get_category_display_label,
)
from ..models import Note, Patch
from ..util import from_epoch_ms
from .base import FormRequest, NotePersistence, Workflow, build_full_inputs, parse_performed_on

logger = logging.getLogger(__name__)


class EditState(Enum):
    FILL_FIELDS = "fill_fields"
    DONE = "done"


class EditNoteWorkflow(Workflow):
    """
    FILL_FIELDS --valid submit--> DONE (note updated)
    FILL_FIELDS --invalid submit--> FILL_FIELDS (error shown, values kept)
    FILL_FIELDS --cancel--> DONE (nothing written)
    """

    done_state = EditState.DONE

    def __init__(self, note: Note, persistence: NotePersistence, helpers: FormHelpers, access: AccessTier):
        # stored values win over "latest known" serial guesses
        super().__init__(persistence, helpers.for_edit(), access)
        self.state = EditState.FILL_FIELDS
        self.note = note
        self.config = get_category_config(note.note_category)

    def initial_value(self) -> dict[str, Any]:
        note = self.note
        initial = note.to_dict()
        initial["performed_on"] = from_epoch_ms(note.performed_on).isoformat() if note.performed_on else None
        initial["external_note"] = bool(note.external_note) if note.external_note is not None else False
        if self.config is not None:
            initial.update(self.config.build_edit_initial_value(note, self.helpers))
        return initial

    def current_request(self) -> FormRequest | None:
        if self.state is not EditState.FILL_FIELDS:
            return None
        return FormRequest(
            title=f"Edit {get_category_display_label(self.note.note_category)}",
            inputs=build_full_inputs(self.note.note_category or FALLBACK_CATEGORY, self.helpers, self.access),
            initial_value=dict(self._entered) if self._entered else self.initial_value(),
            submit_text="Confirm",
            cancel_text="Cancel",
            error=self.error,
            discard_changes_prompt=True,
        )

    def build_patch(self, value: Mapping[str, Any]) -> Patch:
        patch: Patch = {}
        for key in ("text", "subject"):
            if key in value:
                patch[key] = value[key]
        if self.access == AccessTier.ELEVATED and "external_note" in value:
            patch["external_note"] = bool(value["external_note"])
        performed_on = parse_performed_on(value.get("performed_on"))
        if performed_on is not None:
            patch["performed_on"] = performed_on
        if self.config is not None:
            patch.update(self.config.serialize(value, self.helpers))
        return patch

    def submit(self, value: Mapping[str, Any]) -> str | None:
        if self.state is not EditState.FILL_FIELDS:
            raise RuntimeError(f"cannot submit in state {self.state.value}")
        error = self.config.validate(value, self.helpers) if self.config is not None else None
        if error:
            return self._reject(value, error)
        self.result = self.persistence.edit(self.note.id, self.build_patch(value))
        logger.info("edited note %s", self.note.id)
        self._transition(EditState.DONE)
        return None

    def cancel(self) -> None:
        self._transition(EditState.DONE)
