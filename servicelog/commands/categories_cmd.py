"""
CLI commands for category introspection.

Commands:
- servicelog categories list     - List categories visible at an access tier
- servicelog categories schema   - Show the full form schema for one category
"""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from ..categories import (
    AccessTier,
    FormHelpers,
    get_category_config,
    get_category_options,
)
from ..fields import FieldSpec
from ..workflows import build_full_inputs

console = Console()
err = Console(stderr=True)


def run_categories_list(access: AccessTier, *, json_output: bool = False) -> int:
    options = get_category_options(access)

    if json_output:
        rows = []
        for option in options:
            config = get_category_config(option.value)
            rows.append({**option.to_dict(), "internal_only": bool(config and config.internal_only)})
        print(json.dumps(rows, indent=2))
        return 0

    table = Table(title=f"Note categories ({access.value} access)")
    table.add_column("Value", style="cyan")
    table.add_column("Label")
    table.add_column("Internal only")
    for option in options:
        config = get_category_config(option.value)
        table.add_row(option.value, option.label, "Yes" if config and config.internal_only else "No")
    console.print(table)
    return 0


def _add_spec(tree: Tree, spec: FieldSpec) -> None:
    required = " [red]*[/red]" if spec.required else ""
    node = tree.add(f"[cyan]{spec.key}[/cyan] [dim]{spec.type}[/dim] {spec.label}{required}")
    for option in spec.options:
        node.add(f"[dim]option[/dim] {option.value!r}: {option.label}")
    if spec.item is not None:
        _add_spec(node, spec.item)
    for child in spec.children:
        _add_spec(node, child)


def run_category_schema(
    category: str,
    *,
    stack_count: int,
    access: AccessTier,
    json_output: bool = False,
) -> int:
    """Print the inputs an add dialog would show for ``category``."""
    if get_category_config(category) is None:
        err.print(f"Unknown category: {category}", style="red")
        return 1

    inputs = build_full_inputs(category, FormHelpers(stack_count=stack_count), access)

    if json_output:
        print(json.dumps([spec.to_dict() for spec in inputs], indent=2))
        return 0

    tree = Tree(f"[bold]{category}[/bold] ({stack_count} stacks)")
    for spec in inputs:
        _add_spec(tree, spec)
    console.print(tree)
    return 0
