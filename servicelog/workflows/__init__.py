"""
Interactive note workflows (add, edit, recategorize).

Each workflow is a small state machine over dialog steps; see base.Workflow.
"""

from __future__ import annotations

from .add import AddNoteWorkflow, AddState
from .base import (
    Dialog,
    FormRequest,
    NotePersistence,
    Workflow,
    build_common_inputs,
    build_full_inputs,
    build_note_patch,
    parse_performed_on,
)
from .edit import EditNoteWorkflow, EditState
from .recategorize import RecategorizeNoteWorkflow, RecategorizeState, current_note_fields

__all__ = [
    # Collaborators
    "Dialog",
    "FormRequest",
    "NotePersistence",
    # Shared
    "Workflow",
    "build_common_inputs",
    "build_full_inputs",
    "build_note_patch",
    "parse_performed_on",
    # Flows
    "AddNoteWorkflow",
    "AddState",
    "EditNoteWorkflow",
    "EditState",
    "RecategorizeNoteWorkflow",
    "RecategorizeState",
    "current_note_fields",
]
