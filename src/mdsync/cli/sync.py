"""
mdsync CLI - sync, tree and update commands.

``sync`` and ``tree`` push documents into the store; ``update`` pulls
store-side meta back into each document's sidecar file.
"""

from pathlib import Path

import typer
from rich.console import Console

from mdsync.cli.errors import (
    ExitCode,
    print_document_error,
    print_not_found_error,
    print_warning,
)
from mdsync.cli.session import Session, handle_fatal_errors, open_session
from mdsync.core.documents import Document
from mdsync.core.errors import DocumentError
from mdsync.core.sync import OutcomeStatus, SyncOrchestrator, SyncReport

console = Console()


def _print_report(report: SyncReport, porcelain: bool) -> None:
    for outcome in report.outcomes:
        if outcome.status == OutcomeStatus.FAILED:
            console.print(f"[red]Error:[/red] {outcome.error}", highlight=False)
        elif outcome.status == OutcomeStatus.SKIPPED:
            print_warning(outcome.error or f"{outcome.path} skipped")
        elif porcelain:
            if outcome.identifier is not None:
                typer.echo(outcome.identifier)
        elif outcome.status == OutcomeStatus.CACHED:
            console.print(f"[dim]{outcome.path} already synced[/dim]", highlight=False)
        elif outcome.status == OutcomeStatus.SYNCED:
            console.print(
                f"[green]✓[/green] {outcome.path} successfully synced, ID={outcome.identifier}",
                highlight=False,
            )
        else:
            console.print(f"[blue]{outcome.path} queued[/blue]", highlight=False)

    for message in report.followup_errors:
        print_warning(f"follow-up failed: {message}")


def _run(
    session: Session,
    docs: list[Document],
    *,
    force: bool,
    skip_create: bool,
    porcelain: bool,
    lenient: bool,
    missing: int,
) -> None:
    allow_create = False if skip_create else None
    orchestrator = SyncOrchestrator(
        session.workspace, session.store, use_cache=not force, allow_create=allow_create
    )
    report = orchestrator.run(docs, lenient=lenient)
    _print_report(report, porcelain)

    if missing or not report.ok:
        raise typer.Exit(ExitCode.GENERAL_ERROR)


FORCE = typer.Option(False, "--force", help="Update records even if the files are unchanged")
SKIP_CREATE = typer.Option(
    False, "--skip-create", help="Don't add IDs to files that lack them; fail instead"
)
PORCELAIN = typer.Option(
    False, "--porcelain", help="Output just the IDs of the created or updated records"
)


def sync(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help="One or more .md files to sync"),
    force: bool = FORCE,
    skip_create: bool = SKIP_CREATE,
    porcelain: bool = PORCELAIN,
) -> None:
    """
    Sync one or more Markdown files into the store.

    Each file's parent index documents are synced first. Files whose
    content has not changed since the last sync are skipped.

    Examples:
        mdsync sync posts/hello.md
        mdsync sync --force posts/*.md
        mdsync sync --porcelain about.md     # Print only the record ID
    """
    with handle_fatal_errors():
        session = open_session(ctx)
        docs = []
        missing = 0
        for path in files:
            if not path.is_file():
                print_not_found_error(str(path))
                missing += 1
                continue
            docs.append(session.workspace.doc(path))

        _run(
            session,
            docs,
            force=force,
            skip_create=skip_create,
            porcelain=porcelain,
            lenient=False,
            missing=missing,
        )


def tree(
    ctx: typer.Context,
    directories: list[Path] = typer.Argument(..., help="Directories containing .md files"),
    force: bool = FORCE,
    skip_create: bool = SKIP_CREATE,
    porcelain: bool = PORCELAIN,
) -> None:
    """
    Sync every .md file beneath one or more directories.

    Files without an ID are reported as warnings when --skip-create is
    given, rather than failing the run.

    Examples:
        mdsync tree content/
        mdsync tree --skip-create docs/ blog/
    """
    with handle_fatal_errors():
        session = open_session(ctx)
        docs = []
        missing = 0
        for directory in directories:
            if not directory.is_dir():
                print_not_found_error(str(directory))
                missing += 1
                continue
            found = session.workspace.docs(directory)
            if not found:
                print_warning(f"no .md files found in {directory.resolve()}")
            docs.extend(found)

        _run(
            session,
            docs,
            force=force,
            skip_create=skip_create,
            porcelain=porcelain,
            lenient=True,
            missing=missing,
        )


def update(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help="One or more synced .md files"),
) -> None:
    """
    Refresh sidecar files from the store.

    Writes the record meta keys listed in each document's Export-Meta
    field to <name>.meta.yml next to the document, so store-side changes
    show up in version control.

    Examples:
        mdsync update posts/hello.md
    """
    with handle_fatal_errors():
        session = open_session(ctx)
        exporter = session.workspace.registry.kind("post").exporter
        failed = 0

        for path in files:
            if not path.is_file():
                print_not_found_error(str(path))
                failed += 1
                continue
            doc = session.workspace.doc(path)
            try:
                written = exporter.update_sidecar(doc, session.store)
            except DocumentError as e:
                print_document_error(e)
                failed += 1
                continue
            if written is None:
                console.print(f"[dim]{path}: nothing to export[/dim]", highlight=False)
            else:
                console.print(f"[green]✓[/green] Updated {written}", highlight=False)

        if failed:
            raise typer.Exit(ExitCode.GENERAL_ERROR)
