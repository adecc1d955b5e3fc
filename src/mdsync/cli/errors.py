"""
Standardized error handling and exit codes for the mdsync CLI.

This module provides consistent error messaging with actionable guidance
and standardized exit codes across all CLI commands.
"""

from enum import IntEnum

from pydantic import ValidationError
from rich.console import Console

from mdsync.core.errors import (
    ConfigurationError,
    CyclicPrototype,
    InvalidKind,
    MdsyncError,
    PrototypeNotFound,
)

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for mdsync CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """One or more documents failed to sync, export or update."""

    USER_ERROR = 2
    """Configuration or input error (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
    doc_url: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
        doc_url: Optional documentation URL for more help

    Example:
        >>> print_error(
        ...     "posts/hello.md: document has no ID",
        ...     reason="Creating new IDs was disabled with --skip-create",
        ...     solution="mdsync uuid posts/hello.md",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}", highlight=False)

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")

    if doc_url:
        console.print(f"[dim]Docs: {doc_url}[/dim]")


def print_warning(message: str) -> None:
    """Print a non-fatal warning."""
    console.print(f"[yellow]⚠[/yellow]  {message}", highlight=False)


def print_configuration_error(error: ConfigurationError) -> None:
    """Print a run-aborting setup defect with a hint for fixing it."""
    if isinstance(error, PrototypeNotFound):
        print_error(
            str(error),
            reason="Documents can only inherit from prototypes defined in the lookup directory",
            solution="create the prototype file, or fix the Prototype field",
        )
    elif isinstance(error, CyclicPrototype):
        print_error(
            str(error),
            reason="Each prototype may only appear once in its own inheritance chain",
            solution="remove the Prototype field from one of the listed prototypes",
        )
    elif isinstance(error, InvalidKind):
        print_error(
            str(error),
            reason="Resource-Kind must name a registered kind ('post' or 'option')",
        )
    else:
        print_error(str(error))


def print_invalid_config_error(error: ValidationError) -> None:
    """Print error when the merged configuration fails validation."""
    print_error(
        "Invalid configuration",
        reason=str(error),
        solution="check .mdsync.json and ~/.config/mdsync/config.json",
    )


def print_document_error(error: MdsyncError) -> None:
    """Print a per-document failure, prefixed with the document's path."""
    print_error(str(error))


def print_not_found_error(path: str) -> None:
    """Print error when a file named on the command line does not exist."""
    print_error(f"{path} does not exist")


__all__ = [
    "ExitCode",
    "print_configuration_error",
    "print_document_error",
    "print_error",
    "print_invalid_config_error",
    "print_not_found_error",
    "print_warning",
]
