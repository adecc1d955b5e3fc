"""
Workspace: the per-run context that owns projects and documents.

A single Workspace holds the configuration, the resource-kind registry,
the renderer and the hook registry, and memoizes one Project per root and
one Document per resolved path. Everything that needs "the current run"
receives the workspace explicitly rather than reaching for globals.
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from mdsync.core.config.models import MdsyncConfig
from mdsync.core.hooks import SyncHooks
from mdsync.core.render import MarkdownRenderer, Renderer
from mdsync.utils.project import (
    LOOKUP_DIRS,
    get_project_root,
    is_filesystem_root,
    is_project_root,
)

from .document import INDEX_NAME, MARKDOWN_SUFFIX, Document
from .project import Project

if TYPE_CHECKING:
    from mdsync.core.sync.kinds import KindRegistry

logger = logging.getLogger(__name__)

INDEX_FILE = INDEX_NAME + MARKDOWN_SUFFIX


class Workspace:
    """
    Owns the project table and the document table for one run.

    Args:
        config: Effective configuration (defaults if omitted)
        registry: Resource-kind registry (``post`` and ``option`` if omitted)
        renderer: Markdown/template renderer (markdown-it-py + Jinja2 if omitted)
        hooks: Hook registry

    Example:
        >>> ws = Workspace()
        >>> doc = ws.doc("site/about.md")
        >>> doc is ws.doc("./site/../site/about.md")
        True
    """

    def __init__(
        self,
        config: MdsyncConfig | None = None,
        *,
        registry: "KindRegistry | None" = None,
        renderer: Renderer | None = None,
        hooks: SyncHooks | None = None,
    ) -> None:
        self.config = config or MdsyncConfig()
        self.hooks = hooks or SyncHooks()
        self.renderer = renderer or MarkdownRenderer(self.config.render, hooks=self.hooks)
        if registry is None:
            from mdsync.core.sync.kinds import default_registry

            registry = default_registry()
        self.registry = registry
        self._projects: dict[Path, Project] = {}
        self._docs: dict[Path, Document] = {}

    def project_for(self, directory: Path) -> Project:
        """Return the memoized Project whose root contains ``directory``."""
        root = get_project_root(Path(directory))
        if root not in self._projects:
            self._projects[root] = Project(root)
        return self._projects[root]

    def doc(self, path: Path | str) -> Document:
        """Return the memoized Document for ``path``."""
        resolved = Path(path).resolve()
        if resolved not in self._docs:
            self._docs[resolved] = Document(self, resolved)
        return self._docs[resolved]

    def docs(self, directory: Path | str) -> list[Document]:
        """
        Return every Markdown document beneath ``directory``.

        Hidden directories and prototype lookup directories are skipped.
        Paths are returned in sorted order.
        """
        root = Path(directory).resolve()
        return [self.doc(path) for path in sorted(self._walk(root))]

    def _walk(self, directory: Path) -> Iterable[Path]:
        for entry in directory.iterdir():
            if entry.name.startswith(".") or entry.name in LOOKUP_DIRS:
                continue
            if entry.is_dir():
                yield from self._walk(entry)
            elif entry.is_file() and entry.name.endswith(MARKDOWN_SUFFIX):
                yield entry

    def is_root(self, directory: Path) -> bool:
        """Return True if ``directory`` is a project root or the filesystem root."""
        return is_project_root(directory) or is_filesystem_root(directory)

    def parent_of(self, path: Path | str) -> Path | None:
        """
        Locate the parent document of ``path``.

        The parent of ``dir/page.md`` is ``dir/index.md``; the parent of
        ``dir/index.md`` is ``dir/../index.md``. Missing or empty index
        files are skipped, continuing upward. The search stops at a
        project root (whose ``index.md`` has no parent) or the filesystem
        root.

        Returns:
            Resolved path of the parent document, or None
        """
        path = Path(path).resolve()
        directory = path.parent

        if path.name == INDEX_FILE:
            if self.is_root(directory):
                return None
            directory = directory.parent

        while True:
            candidate = directory / INDEX_FILE
            if candidate != path and candidate.is_file() and candidate.stat().st_size > 0:
                return candidate
            if self.is_root(directory):
                return None
            directory = directory.parent
