"""
Project root discovery utilities for mdsync.

A project root is the nearest ancestor directory holding one of the
marker entries below. Documents resolve their relative paths (and thus
their fingerprints) against it, and prototype definitions live in its
lookup directory.
"""

from pathlib import Path

# Markers that indicate a project root, in order of priority
PROJECT_ROOT_MARKERS = [
    "_mdsync",  # Visible mdsync lookup directory
    ".mdsync",  # Hidden mdsync lookup directory
    ".git",
    ".hg",
    ".svn",
]

# Directories beneath a project root that hold prototype definitions
LOOKUP_DIRS = ["_mdsync", ".mdsync"]

# Store database files, which never make their directory a project marker
STORE_SUFFIXES = (".db", ".db-wal", ".db-shm", ".db-journal")


def _is_marker(path: Path, marker: str) -> bool:
    entry = path / marker
    if marker != ".mdsync":
        return entry.exists()
    # The default store lives in .mdsync/, so creating it must not turn
    # the directory into a project root
    if not entry.is_dir():
        return False
    return any(not child.name.endswith(STORE_SUFFIXES) for child in entry.iterdir())


def is_project_root(path: Path) -> bool:
    """
    Return True if ``path`` contains any project root marker.

    A ``.mdsync/`` directory only counts once it holds something other
    than store database files.
    """
    return any(_is_marker(path, marker) for marker in PROJECT_ROOT_MARKERS)


def is_filesystem_root(path: Path) -> bool:
    """Return True if ``path`` has no parent directory."""
    return path == path.parent


def find_project_root(start: Path | None = None) -> Path | None:
    """
    Find the project root directory by searching upward for marker files.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the project root directory, or None if no marker was found.

    Example:
        >>> find_project_root(Path("/site/docs/guide"))  # /site/.git exists
        PosixPath('/site')
    """
    if start is None:
        start = Path.cwd()

    current = start.resolve()
    while True:
        if is_project_root(current):
            return current
        if is_filesystem_root(current):
            return None
        current = current.parent


def get_project_root(start: Path | None = None) -> Path:
    """
    Get the project root directory, falling back to the filesystem root.

    Documents outside of any marked project are still valid: their paths
    are then taken relative to the filesystem root.

    Args:
        start: Directory to start searching from. Defaults to current working directory.

    Returns:
        Path to the project root directory.
    """
    root = find_project_root(start)
    if root is None:
        start_dir = (start or Path.cwd()).resolve()
        return Path(start_dir.anchor)
    return root


def find_lookup_dir(root: Path) -> Path | None:
    """Return the first existing lookup directory beneath ``root``."""
    for name in LOOKUP_DIRS:
        candidate = root / name
        if candidate.is_dir():
            return candidate
    return None
