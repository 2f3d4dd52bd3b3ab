"""Tests for the terminal dialog."""

from __future__ import annotations

from io import StringIO
from typing import Any

import pytest
from rich.console import Console

from servicelog import dialog as dialog_module
from servicelog.categories import AccessTier, FormHelpers
from servicelog.dialog import ConsoleDialog
from servicelog.fields import FieldSpec
from servicelog.workflows import FormRequest, build_full_inputs


class _Answers:
    """Stand-in for a rich prompt class that replays answers."""

    def __init__(self, answers: list[Any]):
        self.answers = list(answers)
        self.asked: list[str] = []
        self.kwargs: list[dict[str, Any]] = []

    def ask(self, prompt: str, **kwargs: Any) -> Any:
        self.asked.append(prompt)
        self.kwargs.append(kwargs)
        return self.answers.pop(0)


@pytest.fixture
def console() -> Console:
    return Console(file=StringIO(), width=120, color_system=None)


def _install(monkeypatch, prompts: list[Any], confirms: list[Any]) -> tuple[_Answers, _Answers]:
    prompt, confirm = _Answers(prompts), _Answers(confirms)
    monkeypatch.setattr(dialog_module, "Prompt", prompt)
    monkeypatch.setattr(dialog_module, "Confirm", confirm)
    return prompt, confirm


def test_software_update_form(monkeypatch, console: Console):
    request = FormRequest(
        title="Add Software update",
        inputs=build_full_inputs("Software update", FormHelpers(), AccessTier.ELEVATED),
    )
    _install(monkeypatch, ["2024-03-01", "1", "v2.1.0", "Flashed PLC"], [False, True])

    value = ConsoleDialog(console).open_form(request)
    assert value == {
        "performed_on": "2024-03-01",
        "software_type": "PLC software",
        "version": "v2.1.0",
        "text": "Flashed PLC",
        "external_note": False,
    }


def test_groups_and_lists(monkeypatch, console: Console):
    request = FormRequest(
        title="Add",
        inputs=build_full_inputs("Calibration", FormHelpers(), AccessTier.BASIC),
    )
    _install(monkeypatch, ["2024-03-01", "PT-101, TT-7,", "done"], [True])
    value = ConsoleDialog(console).open_form(request)
    assert value["tag_numbers"] == ["PT-101", "TT-7"]

    request = FormRequest(
        title="Add",
        inputs=build_full_inputs("Stack installs", FormHelpers(stack_count=2), AccessTier.BASIC),
    )
    _install(monkeypatch, ["2024-03-01", "SN-A", "", "installed"], [True])
    value = ConsoleDialog(console).open_form(request)
    assert value["stack_group_installs_a"] == {"stack_serial_number_a": "SN-A"}
    assert value["stack_group_installs_b"] == {"stack_serial_number_b": ""}


def test_cancel_and_discard(monkeypatch, console: Console):
    request = FormRequest(title="Add", inputs=[], discard_changes_prompt=True)
    _install(monkeypatch, [], [False, True])
    assert ConsoleDialog(console).open_form(request) is None


def test_alert_prints_message(console: Console):
    ConsoleDialog(console).alert("Validation Error", "At least one stack install must be filled in.")
    out = console.file.getvalue()
    assert "Validation Error" in out
    assert "At least one stack install must be filled in." in out


def test_keeping_changes_reopens_with_entered_values(monkeypatch, console: Console):
    request = FormRequest(
        title="Edit",
        inputs=[FieldSpec(key="version", type="String", label="Software Version")],
        initial_value={"version": "v1", "software_type": "PLC software"},
        discard_changes_prompt=True,
    )
    prompt, _ = _install(monkeypatch, ["v2", "v3"], [False, False, True])

    value = ConsoleDialog(console).open_form(request)
    assert value == {"version": "v3"}
    assert prompt.kwargs[0]["default"] == "v1"
    assert prompt.kwargs[1]["default"] == "v2"
