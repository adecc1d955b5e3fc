"""
Project roots and their prototype lookup directories.
"""

from pathlib import Path

from mdsync.core.errors import PrototypeNotFound
from mdsync.utils.project import LOOKUP_DIRS, find_lookup_dir

from .prototype import Prototype

PROTOTYPE_SUFFIXES = {"yml": ".type.yml", "md": ".type.md", "j2": ".type.j2"}


class Project:
    """
    A directory tree rooted at a project marker.

    Attributes:
        root: Project root directory
        lookup_dir: ``_mdsync/`` or ``.mdsync/`` beneath the root, if present
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.lookup_dir = find_lookup_dir(root)
        self._prototypes: dict[str, Prototype] = {}

    def __repr__(self) -> str:
        return f"Project({str(self.root)!r})"

    def relative_path(self, path: Path) -> str:
        """Return ``path`` relative to the root, in POSIX form."""
        return Path(path).relative_to(self.root).as_posix()

    def prototype(self, name: str, referrer: Path | None = None) -> Prototype:
        """
        Return the prototype called ``name``.

        Args:
            name: Prototype name
            referrer: File that referenced the prototype (for error messages)

        Raises:
            PrototypeNotFound: If none of the prototype's files exist
        """
        if name in self._prototypes:
            return self._prototypes[name]

        lookup = self.lookup_dir or self.root / LOOKUP_DIRS[0]
        files = {
            kind: lookup / f"{name}{suffix}"
            for kind, suffix in PROTOTYPE_SUFFIXES.items()
            if (lookup / f"{name}{suffix}").is_file()
        }
        if not files:
            expected = f"{lookup}/{name}.type.{{yml,md,j2}}"
            raise PrototypeNotFound(
                f"Prototype '{name}' not found; expected {expected}", path=referrer
            )

        prototype = Prototype(self, name, files)
        self._prototypes[name] = prototype
        return prototype
