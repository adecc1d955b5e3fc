"""
Shared setup for mdsync commands: logging, configuration, workspace and store.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from mdsync.cli.errors import (
    ExitCode,
    print_configuration_error,
    print_error,
    print_invalid_config_error,
)
from mdsync.core.config import MdsyncConfig, load_config
from mdsync.core.documents import Workspace
from mdsync.core.errors import ConfigurationError, StoreError
from mdsync.core.store import SqliteStore
from mdsync.utils.project import find_project_root

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for mdsync commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@dataclass
class Session:
    """Everything a command needs for one run."""

    project_root: Path
    config: MdsyncConfig
    workspace: Workspace
    store: SqliteStore


def resolve_store_path(option: str | None, config: MdsyncConfig, project_root: Path) -> Path:
    """
    Locate the store database.

    ``--store`` wins over the configured path; relative configured paths
    are taken from the project root, a relative ``--store`` from the
    current directory.
    """
    if option:
        return Path(option).expanduser().resolve()
    path = Path(config.store.path).expanduser()
    return path if path.is_absolute() else project_root / path


def open_session(ctx: typer.Context) -> Session:
    """
    Load configuration and open the store for the current directory.

    Raises:
        typer.Exit: With USER_ERROR if the configuration is invalid
    """
    options = ctx.obj or {}
    cwd = Path.cwd()
    project_root = find_project_root(cwd) or cwd

    try:
        config = load_config(project_root)
    except ValidationError as e:
        print_invalid_config_error(e)
        raise typer.Exit(ExitCode.USER_ERROR) from e

    store_path = resolve_store_path(options.get("store"), config, project_root)
    logger.debug(f"Project root {project_root}, store {store_path}")
    return Session(
        project_root=project_root,
        config=config,
        workspace=Workspace(config),
        store=SqliteStore(store_path),
    )


@contextmanager
def handle_fatal_errors() -> Iterator[None]:
    """
    Turn run-aborting errors into messages and exit codes.

    Configuration errors exit with USER_ERROR; a store that cannot be
    opened exits with GENERAL_ERROR.
    """
    try:
        yield
    except ConfigurationError as e:
        print_configuration_error(e)
        raise typer.Exit(ExitCode.USER_ERROR) from e
    except StoreError as e:
        print_error(str(e), reason="The record store could not be read or written")
        raise typer.Exit(ExitCode.GENERAL_ERROR) from e
    except KeyboardInterrupt as e:
        raise typer.Exit(ExitCode.SIGINT) from e
