"""CLI entrypoint for servicelog."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .categories import AccessTier, list_categories
from .config import ConfigError, LogbookConfig, load_config


def _config(ctx: click.Context) -> LogbookConfig:
    return ctx.obj["config"]


@click.group()
@click.version_option(__version__, prog_name="servicelog")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to servicelog.toml (defaults to auto-detected from the working directory)",
)
@click.option(
    "--elevated/--basic",
    "elevated",
    default=None,
    help="Override the configured access tier",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, elevated: bool | None, verbose: bool) -> None:
    """servicelog - Equipment service logbook.

    Record calibrations, software updates and fuel-cell stack work against
    a piece of equipment.
    """
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if elevated is not None:
        config = replace(config, access=AccessTier.ELEVATED if elevated else AccessTier.BASIC)
    ctx.obj["config"] = config


# ============================================================================
# Categories
# ============================================================================


@cli.group()
def categories() -> None:
    """Inspect note categories and their forms."""


@categories.command("list")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def categories_list(ctx: click.Context, output_json: bool) -> None:
    """List categories available at the current access tier."""
    from .commands.categories_cmd import run_categories_list

    sys.exit(run_categories_list(_config(ctx).access, json_output=output_json))


@categories.command("schema")
@click.argument("category", type=click.Choice(list_categories()))
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def categories_schema(ctx: click.Context, category: str, output_json: bool) -> None:
    """Show the form an add dialog would present for CATEGORY.

    Examples:

        servicelog categories schema "Stack installs"

        servicelog categories schema Calibration --json
    """
    from .commands.categories_cmd import run_category_schema

    config = _config(ctx)
    sys.exit(
        run_category_schema(category, stack_count=config.stack_count, access=config.access, json_output=output_json)
    )


# ============================================================================
# Notes
# ============================================================================


@cli.command("list")
@click.option("--category", type=str, default=None, help="Only notes in this category")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_cmd(ctx: click.Context, category: str | None, output_json: bool) -> None:
    """List notes, newest first."""
    from .commands.notes_cmd import run_list

    sys.exit(run_list(_config(ctx), category=category, json_output=output_json))


@cli.command()
@click.argument("note_id")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, note_id: str, output_json: bool) -> None:
    """Show one note."""
    from .commands.notes_cmd import run_show

    sys.exit(run_show(_config(ctx), note_id, json_output=output_json))


@cli.command()
@click.pass_context
def add(ctx: click.Context) -> None:
    """Add a note interactively."""
    from .commands.notes_cmd import run_add
    from .dialog import ConsoleDialog

    sys.exit(run_add(_config(ctx), ConsoleDialog()))


@cli.command()
@click.argument("note_id")
@click.pass_context
def edit(ctx: click.Context, note_id: str) -> None:
    """Edit a note interactively."""
    from .commands.notes_cmd import run_edit
    from .dialog import ConsoleDialog

    sys.exit(run_edit(_config(ctx), note_id, ConsoleDialog()))


@cli.command()
@click.argument("note_id")
@click.pass_context
def recategorize(ctx: click.Context, note_id: str) -> None:
    """Move a note to another category, resetting the old category's fields."""
    from .commands.notes_cmd import run_recategorize
    from .dialog import ConsoleDialog

    sys.exit(run_recategorize(_config(ctx), note_id, ConsoleDialog()))


@cli.command("export")
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_cmd(ctx: click.Context, out: Path) -> None:
    """Write every note to OUT as a JSON array."""
    from .commands.notes_cmd import run_export

    sys.exit(run_export(_config(ctx), out))


@cli.command("import")
@click.argument("src", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_cmd(ctx: click.Context, src: Path) -> None:
    """Merge notes from SRC (a JSON array) into the store."""
    from .commands.notes_cmd import run_import

    sys.exit(run_import(_config(ctx), src))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
