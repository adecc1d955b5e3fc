"""
mdsync CLI - Main application entry point.

This module sets up the Typer CLI application with all subcommands.
"""

import typer
from rich.console import Console

from mdsync import __version__
from mdsync.cli import export, sync, uuid_cmd
from mdsync.cli.session import setup_logging
from mdsync.core.config.env import load_layered_env

# Help panel names for command grouping
PANEL_SYNC = "Sync Documents"
PANEL_STORE = "Work with Store Records"

app = typer.Typer(
    name="mdsync",
    help="Sync trees of Markdown documents into a record store",
    no_args_is_help=True,
    add_completion=True,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"mdsync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    store: str | None = typer.Option(
        None,
        "--store",
        help="Path of the store database (default: .mdsync/store.db in the project root)",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """
    mdsync - keep Markdown files and store records in sync.

    Every Markdown file (YAML front matter + body) becomes one record.
    Files carry their record's durable ID in an ID field; unchanged files
    are skipped using content fingerprints.

    Common Workflows:
        mdsync uuid posts/new.md     # Give a file an ID up front
        mdsync sync posts/new.md     # Sync one file (and its parents)
        mdsync tree content/         # Sync a whole directory tree
        mdsync export 42 --dir out/  # Write a record back out as a file
        mdsync update posts/new.md   # Refresh the file's .meta.yml sidecar
    """
    # Precedence: OS env > project .env > user .env
    load_layered_env()
    setup_logging(debug)

    ctx.obj = {"debug": debug, "store": store}


# =============================================================================
# Sync Documents
# =============================================================================

app.command(name="sync", rich_help_panel=PANEL_SYNC)(sync.sync)
app.command(name="tree", rich_help_panel=PANEL_SYNC)(sync.tree)
app.command(name="uuid", rich_help_panel=PANEL_SYNC)(uuid_cmd.uuid)


# =============================================================================
# Work with Store Records
# =============================================================================

app.command(name="export", rich_help_panel=PANEL_STORE)(export.export)
app.command(name="update", rich_help_panel=PANEL_STORE)(sync.update)


__all__ = ["app", "main"]
