"""
mdsync CLI - export command.
"""

from pathlib import Path

import typer
from rich.console import Console

from mdsync.cli.errors import ExitCode, print_document_error, print_error
from mdsync.cli.session import handle_fatal_errors, open_session
from mdsync.core.errors import DocumentError
from mdsync.core.sync.exporters import find_record

console = Console()


def export(
    ctx: typer.Context,
    ref: str = typer.Argument(..., help="Record ID or GUID to export"),
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Directory to write the .md file into",
    ),
    porcelain: bool = typer.Option(
        False, "--porcelain", help="Output just the path of the written file"
    ),
) -> None:
    """
    Export a store record as a Markdown document.

    The file is named after the record's slug (<slug>.md, or <slug>-1.md
    and so on if a file with a different ID already has that name).

    Examples:
        mdsync export 42
        mdsync export urn:uuid:5b1f... --dir content/posts
    """
    with handle_fatal_errors():
        session = open_session(ctx)
        if directory.exists() and not directory.is_dir():
            print_error(f"{directory} is not a directory")
            raise typer.Exit(ExitCode.USER_ERROR)

        exporter = session.workspace.registry.kind("post").exporter
        if exporter is None:
            print_error("No exporter is registered for posts")
            raise typer.Exit(ExitCode.USER_ERROR)

        try:
            record = find_record(session.store, ref)
            path = exporter.export(record, directory, session.workspace)
        except DocumentError as e:
            print_document_error(e)
            raise typer.Exit(ExitCode.GENERAL_ERROR) from e

        if porcelain:
            typer.echo(str(path))
        else:
            console.print(
                f"[green]✓[/green] Exported record {record['id']} to {path}", highlight=False
            )
