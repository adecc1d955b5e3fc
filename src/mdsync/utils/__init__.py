"""Utility modules for mdsync."""

from .merge import deep_merge
from .project import (
    LOOKUP_DIRS,
    PROJECT_ROOT_MARKERS,
    find_lookup_dir,
    find_project_root,
    get_project_root,
    is_project_root,
)

__all__ = [
    "LOOKUP_DIRS",
    "PROJECT_ROOT_MARKERS",
    "deep_merge",
    "find_lookup_dir",
    "find_project_root",
    "get_project_root",
    "is_project_root",
]
