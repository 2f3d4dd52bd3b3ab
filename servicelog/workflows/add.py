"""Add-note workflow: pick a category, then fill in its form."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping

from ..categories import AccessTier, FormHelpers, get_category_config, get_category_display_label
from .base import FormRequest, NotePersistence, Workflow, build_full_inputs, build_note_patch, category_selection

logger = logging.getLogger(__name__)


class AddState(Enum):
    SELECT_CATEGORY = "select_category"
    FILL_FIELDS = "fill_fields"
    DONE = "done"


class AddNoteWorkflow(Workflow):
    """
    SELECT_CATEGORY --chosen--> FILL_FIELDS --valid submit--> DONE (note added)
    SELECT_CATEGORY --cancel--> DONE
    FILL_FIELDS --invalid submit--> FILL_FIELDS (error shown, values kept)
    FILL_FIELDS --cancel--> SELECT_CATEGORY
    """

    done_state = AddState.DONE

    def __init__(self, persistence: NotePersistence, helpers: FormHelpers, access: AccessTier):
        super().__init__(persistence, helpers, access)
        self.state = AddState.SELECT_CATEGORY
        self.category: str | None = None

    def current_request(self) -> FormRequest | None:
        if self.state is AddState.SELECT_CATEGORY:
            return FormRequest(
                title="Select a category",
                inputs=[category_selection("category", "Category", self.access)],
                initial_value={"category": self.category} if self.category else {},
                submit_text="Next",
                cancel_text="Cancel",
                error=self.error,
            )
        if self.state is AddState.FILL_FIELDS:
            if self.category is None:
                raise RuntimeError("no category selected")
            return FormRequest(
                title=f"Add {get_category_display_label(self.category)}",
                inputs=build_full_inputs(self.category, self.helpers, self.access),
                initial_value=dict(self._entered),
                submit_text="Add",
                cancel_text="Previous",
                error=self.error,
                discard_changes_prompt=True,
            )
        return None

    def submit(self, value: Mapping[str, Any]) -> str | None:
        if self.state is AddState.SELECT_CATEGORY:
            category = value.get("category")
            if not category:
                return self._reject(value, "A category is required.")
            if not self._selectable(str(category)):
                return self._reject(value, f"Category not available: {category}")
            self.category = str(category)
            self._transition(AddState.FILL_FIELDS)
            return None

        if self.state is AddState.FILL_FIELDS:
            if self.category is None:
                raise RuntimeError("no category selected")
            config = get_category_config(self.category)
            error = config.validate(value, self.helpers) if config is not None else None
            if error:
                return self._reject(value, error)
            patch = build_note_patch(self.category, value, config, self.helpers, self.access)
            self.result = self.persistence.add(patch)
            logger.info("added %s note %s", self.category, self.result.id)
            self._transition(AddState.DONE)
            return None

        raise RuntimeError(f"cannot submit in state {self.state.value}")

    def cancel(self) -> None:
        if self.state is AddState.FILL_FIELDS:
            self._transition(AddState.SELECT_CATEGORY)
        elif self.state is AddState.SELECT_CATEGORY:
            self._transition(AddState.DONE)
