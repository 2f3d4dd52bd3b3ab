"""
Shared workflow infrastructure.

Workflows are explicit state machines. Each interactive step is described by
a FormRequest; the caller (or ``run``) shows it through a Dialog and feeds the
answer back with ``submit`` or ``cancel``. Those two calls are the only
transitions, so every control path can be driven directly from tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol

from ..categories import (
    AccessTier,
    CategoryConfig,
    FormHelpers,
    get_category_config,
    get_category_options,
)
from ..fields import FieldSpec, Option
from ..models import Note, Patch
from ..util import to_epoch_ms

logger = logging.getLogger(__name__)

VALIDATION_ERROR_TITLE = "Validation Error"


# -----------------------------------------------------------------------------
# Collaborators
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FormRequest:
    """Everything a dialog needs to show one workflow step."""

    title: str
    inputs: list[FieldSpec]
    initial_value: dict[str, Any] = field(default_factory=dict)
    submit_text: str = "Submit"
    cancel_text: str = "Cancel"
    error: str | None = None
    discard_changes_prompt: bool = False


class Dialog(Protocol):
    def open_form(self, request: FormRequest) -> dict[str, Any] | None:
        """Show a form; return the submitted values, or None when cancelled."""
        ...

    def alert(self, title: str, message: str) -> None:
        ...


class NotePersistence(Protocol):
    def add(self, patch: Patch) -> Note:
        ...

    def edit(self, note_id: str, patch: Patch) -> Note:
        ...


# -----------------------------------------------------------------------------
# Form layout
# -----------------------------------------------------------------------------


def parse_performed_on(value: Any) -> int | None:
    """
    ISO-8601 instant to epoch milliseconds.

    Missing or unparseable input yields None and the caller leaves the field
    out of the patch; a bad date is not treated as an error.
    """
    if isinstance(value, datetime):
        return to_epoch_ms(value)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        moment = datetime.fromisoformat(value.strip())
    except ValueError:
        logger.debug("ignoring unparseable performed_on %r", value)
        return None
    return to_epoch_ms(moment)


def category_selection(key: str, label: str, access: AccessTier, *, description: str | None = None) -> FieldSpec:
    return FieldSpec(
        key=key,
        type="Selection",
        label=label,
        required=True,
        description=description,
        options=tuple(Option(o.label, o.value) for o in get_category_options(access)),
    )


def build_common_inputs(category: str, access: AccessTier) -> list[FieldSpec]:
    """Description and (elevated access only) the external-visibility flag."""
    inputs = [
        FieldSpec(
            key="text",
            type="RichText",
            label="Description of event",
            placeholder="Description of event",
            description="---\n**Required**" if category == "Stack replacements" else "**Required**",
        )
    ]
    if access == AccessTier.ELEVATED:
        inputs.append(
            FieldSpec(
                key="external_note",
                type="Checkbox",
                label="External Note",
                default=False,
                description=(
                    "Mark this note as external if it can be viewed by parties outside "
                    "the company (e.g., external partners or customers)"
                ),
            )
        )
    return inputs


def build_full_inputs(category: str, helpers: FormHelpers, access: AccessTier) -> list[FieldSpec]:
    """performed_on first, then the category's fields, then the shared fields."""
    inputs = [FieldSpec(key="performed_on", type="DateTime", label="Performed on", required=True)]
    config = get_category_config(category)
    if config is not None:
        inputs.extend(config.build_form_inputs(helpers))
    inputs.extend(build_common_inputs(category, access))
    return inputs


def external_flag(value: Mapping[str, Any], access: AccessTier) -> bool:
    """Basic-access users can only write externally visible notes."""
    if access != AccessTier.ELEVATED:
        return True
    return bool(value.get("external_note") or False)


def build_note_patch(
    category: str,
    value: Mapping[str, Any],
    config: CategoryConfig | None,
    helpers: FormHelpers,
    access: AccessTier,
) -> Patch:
    """Patch for a note (re)written under ``category`` from submitted form values."""
    patch: Patch = {
        "note_category": category,
        "external_note": external_flag(value, access),
    }
    performed_on = parse_performed_on(value.get("performed_on"))
    if performed_on is not None:
        patch["performed_on"] = performed_on
    for key in ("text", "subject"):
        if key in value:
            patch[key] = value[key]
    if config is not None:
        patch.update(config.serialize(value, helpers))
    return patch


# -----------------------------------------------------------------------------
# State machine base
# -----------------------------------------------------------------------------


class Workflow:
    """Base for the interactive note workflows."""

    done_state: Enum

    def __init__(self, persistence: NotePersistence, helpers: FormHelpers, access: AccessTier):
        self.persistence = persistence
        self.helpers = helpers
        self.access = access
        self.state: Enum
        self.error: str | None = None
        self.result: Note | None = None
        self._entered: dict[str, Any] = {}

    @property
    def done(self) -> bool:
        return self.state == self.done_state

    def current_request(self) -> FormRequest | None:
        raise NotImplementedError

    def submit(self, value: Mapping[str, Any]) -> str | None:
        """Feed submitted values into the current step; returns a validation error or None."""
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    def _transition(self, state: Enum) -> None:
        logger.debug("%s: %s -> %s", type(self).__name__, self.state.value, state.value)
        self.state = state
        self.error = None
        self._entered = {}

    def _selectable(self, category: str) -> bool:
        """Only categories offered at this access tier may be chosen."""
        return category in {option.value for option in get_category_options(self.access)}

    def _reject(self, value: Mapping[str, Any], error: str) -> str:
        """Stay on the current step, keeping what the user entered."""
        logger.debug("%s: validation failed in %s: %s", type(self).__name__, self.state.value, error)
        self.error = error
        self._entered = dict(value)
        return error

    def run(self, dialog: Dialog) -> Note | None:
        """Drive the workflow to completion through ``dialog``."""
        while not self.done:
            request = self.current_request()
            if request is None:
                break
            value = dialog.open_form(request)
            if value is None:
                self.cancel()
                continue
            error = self.submit(value)
            if error:
                dialog.alert(VALIDATION_ERROR_TITLE, error)
        return self.result
