"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from servicelog.categories import AccessTier, FormHelpers
from servicelog.config import LogbookConfig
from servicelog.store import NoteStore
from servicelog.workflows import FormRequest


class ScriptedDialog:
    """Dialog that replays canned answers and records what it was shown."""

    def __init__(self, answers: list[dict[str, Any] | None]):
        self.answers = list(answers)
        self.requests: list[FormRequest] = []
        self.alerts: list[tuple[str, str]] = []

    def open_form(self, request: FormRequest) -> dict[str, Any] | None:
        self.requests.append(request)
        return self.answers.pop(0)

    def alert(self, title: str, message: str) -> None:
        self.alerts.append((title, message))


@pytest.fixture
def logbook_config(tmp_path: Path) -> LogbookConfig:
    """Elevated-access config for a two-stack unit, storing notes under tmp_path."""
    return LogbookConfig(
        root=tmp_path,
        store_path=tmp_path / "notes.json",
        equipment_model="HyPM XR 2",
        stack_count=2,
        access=AccessTier.ELEVATED,
        author_id="u-1",
        author_name="Sam Doe",
    )


@pytest.fixture
def store(logbook_config: LogbookConfig) -> NoteStore:
    return NoteStore(
        logbook_config.store_path,
        author_id=logbook_config.author_id,
        author_name=logbook_config.author_name,
    )


@pytest.fixture
def helpers() -> FormHelpers:
    return FormHelpers(stack_count=2)


@pytest.fixture
def scripted_dialog() -> type[ScriptedDialog]:
    return ScriptedDialog
