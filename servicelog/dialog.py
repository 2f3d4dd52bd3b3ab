"""
Terminal implementation of the workflow Dialog protocol.

Each FormRequest is shown as a sequence of rich prompts. After the last
field the user either submits the form or takes the cancel action (which
the workflow interprets as "back" or "cancel").
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from .categories.base import field_line
from .fields import FieldSpec
from .workflows.base import FormRequest


class ConsoleDialog:
    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def alert(self, title: str, message: str) -> None:
        self.console.print(Panel(message, title=title, border_style="red"))

    def open_form(self, request: FormRequest) -> dict[str, Any] | None:
        self.console.rule(request.title)
        if request.error:
            self.console.print(f"[red]{request.error}[/red]")

        values: dict[str, Any] = {}
        for spec in request.inputs:
            self._ask(spec, request.initial_value, values)

        if Confirm.ask(f"{request.submit_text}? (no = {request.cancel_text})", console=self.console, default=True):
            return values
        if request.discard_changes_prompt and not Confirm.ask(
            "Discard entered values?", console=self.console, default=True
        ):
            return self.open_form(replace(request, initial_value={**request.initial_value, **values}))
        return None

    # -------------------------------------------------------------------------
    # Field prompts
    # -------------------------------------------------------------------------

    def _ask(self, spec: FieldSpec, initial: Mapping[str, Any], out: dict[str, Any]) -> None:
        current = initial.get(spec.key, spec.default)

        if spec.disabled:
            if spec.type == "Group":
                self.console.print(f"[bold dim]{spec.label}[/bold dim]")
                for child in spec.children:
                    self._ask(child, {}, {})
            elif spec.default:
                self.console.print(field_line(spec.label, str(spec.default)))
            else:
                self.console.print(f"[dim]{spec.label}[/dim]")
            return

        if spec.type == "Group":
            self.console.print(f"[bold]{spec.label}[/bold]")
            nested: dict[str, Any] = {}
            group_initial = current if isinstance(current, Mapping) else {}
            for child in spec.children:
                self._ask(child, group_initial, nested)
            out[spec.key] = nested
        elif spec.type == "Checkbox":
            out[spec.key] = Confirm.ask(spec.label, console=self.console, default=bool(current))
        elif spec.type == "Selection":
            out[spec.key] = self._ask_selection(spec, current)
        elif spec.type == "List":
            out[spec.key] = self._ask_list(spec, current)
        elif spec.type == "DateTime":
            out[spec.key] = self._ask_text(spec, current or date.today().isoformat(), hint="YYYY-MM-DD or ISO 8601")
        else:
            out[spec.key] = self._ask_text(spec, current)

    def _ask_text(self, spec: FieldSpec, current: Any, *, hint: str | None = None) -> str:
        label = f"{spec.label} ({hint})" if hint else spec.label
        default = "" if current is None else str(current)
        while True:
            answer = Prompt.ask(label, console=self.console, default=default, show_default=bool(default))
            if answer or not spec.required:
                return answer
            self.console.print("[red]This field is required.[/red]")

    def _ask_selection(self, spec: FieldSpec, current: Any) -> str:
        for i, option in enumerate(spec.options, start=1):
            self.console.print(f"  {i}) {option.label}")
        choices = [str(i) for i in range(1, len(spec.options) + 1)]
        default = next((str(i) for i, o in enumerate(spec.options, start=1) if o.value == current), None)
        if not spec.required:
            choices.append("")
            default = default or ""
        extra: dict[str, Any] = {} if default is None else {"default": default}
        answer = Prompt.ask(spec.label, console=self.console, choices=choices, show_choices=False, **extra)
        if not answer:
            return ""
        return spec.options[int(answer) - 1].value

    def _ask_list(self, spec: FieldSpec, current: Any) -> list[str]:
        items = current if isinstance(current, list) else []
        default = ", ".join(str(i.get("tag_number", "")) if isinstance(i, Mapping) else str(i) for i in items)
        while True:
            answer = Prompt.ask(f"{spec.label} (comma separated)", console=self.console, default=default)
            values = [part.strip() for part in answer.split(",") if part.strip()]
            if values or not spec.required:
                return values
            self.console.print("[red]At least one value is required.[/red]")
