"""
mdsync CLI - uuid command.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from mdsync.cli.errors import (
    ExitCode,
    print_document_error,
    print_invalid_config_error,
    print_not_found_error,
)
from mdsync.core.config import load_config
from mdsync.core.documents import inject_guid
from mdsync.core.errors import DocumentError
from mdsync.core.guids import new_guid
from mdsync.utils.project import find_project_root

console = Console()


def uuid(
    files: list[Path] | None = typer.Argument(
        None, help="Files to give an ID (only files without one are changed)"
    ),
) -> None:
    """
    Generate a unique ID for use in a Markdown file.

    Without arguments, prints a fresh urn:uuid: ID. With files, writes a
    fresh ID into each file that does not have one yet; existing IDs are
    never replaced.

    Examples:
        mdsync uuid
        mdsync uuid drafts/*.md
    """
    if not files:
        typer.echo(new_guid())
        return

    cwd = Path.cwd()
    try:
        serializer = load_config(find_project_root(cwd) or cwd).serializer
    except ValidationError as e:
        print_invalid_config_error(e)
        raise typer.Exit(ExitCode.USER_ERROR) from e
    failed = 0

    for path in files:
        if not path.is_file():
            print_not_found_error(str(path))
            failed += 1
            continue
        guid = new_guid()
        try:
            written = inject_guid(path, guid, width=serializer.width, indent=serializer.indent)
        except DocumentError as e:
            print_document_error(e)
            failed += 1
            continue
        if written:
            console.print(f"[green]✓[/green] {path}: {guid}", highlight=False)
        else:
            console.print(f"[dim]{path} already has an ID[/dim]", highlight=False)

    if failed:
        raise typer.Exit(ExitCode.GENERAL_ERROR)
