"""
The Document model: one Markdown file as the sync engine sees it.

Loading a document merges, in order of increasing precedence:

1. prototype defaults (``Prototype`` field, or a dotted file-name suffix
   such as ``about.page.md``)
2. the sidecar file ``<stem>.meta.yml`` next to the document
3. the document's own front matter

After loading, ``kind``, ``slug`` and ``fingerprint`` are cached. The
fingerprint covers the merged result, so editing a prototype or a sidecar
invalidates every document that uses it.
"""

import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from mdsync.core import serialize
from mdsync.core.errors import InvalidDocument, MdsyncError
from mdsync.core.guids import classify_kind
from mdsync.utils.project import is_filesystem_root

from .markdown import MarkdownFile, inject_guid
from .metadata import Metadata

if TYPE_CHECKING:
    from .project import Project
    from .workspace import Workspace

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
SIDECAR_SUFFIX = ".meta.yml"
INDEX_NAME = "index"


class Document:
    """
    A lazily loaded Markdown document.

    Documents are created and memoized by ``Workspace.doc()``; use that
    rather than constructing them directly so each file maps to exactly
    one Document per run.

    Attributes:
        workspace: Owning workspace (config, registry, renderer, hooks)
        filename: Resolved path of the file
        project: Project the file belongs to
    """

    def __init__(self, workspace: "Workspace", filename: Path) -> None:
        self.workspace = workspace
        self.filename = Path(filename)
        self.project: "Project" = workspace.project_for(self.filename.parent)
        self._meta = Metadata()
        self._body = ""
        self._loaded = False
        self._slug: str | None = None
        self._kind: str | None = None
        self._fingerprint: str | None = None

    def __repr__(self) -> str:
        return f"Document({str(self.filename)!r})"

    # -- lazily loaded state ------------------------------------------------

    @property
    def meta(self) -> Metadata:
        """Merged front matter."""
        self.load()
        return self._meta

    @property
    def body(self) -> str:
        """Markdown body (possibly generated by a prototype template)."""
        self.load()
        return self._body

    @body.setter
    def body(self, value: str) -> None:
        self._body = value

    @property
    def guid(self) -> str | None:
        """The document's ``ID``, or None if it has none yet."""
        return self.meta.get_string("ID") or None

    def kind(self) -> str:
        """Resource kind, declared or inferred."""
        self.load()
        assert self._kind is not None
        return self._kind

    def slug(self) -> str | None:
        """Slug derived from the file name (None for an index at the filesystem root)."""
        self.load()
        return self._slug

    def fingerprint(self) -> str:
        """``<relative path>:<md5 of the merged document>``."""
        self.load()
        assert self._fingerprint is not None
        return self._fingerprint

    def load(self, reload: bool = False) -> "Document":
        """
        Read and merge the document.

        Idempotent; templates rendered during the load may access the
        document again without re-triggering it.

        Raises:
            InvalidDocument: If the file or its sidecar cannot be parsed
            PrototypeNotFound: If the named prototype does not exist
            CyclicPrototype: If the prototype chain loops
            InvalidKind: If no import handler exists for the document's kind
        """
        if self._loaded and not reload:
            return self

        self._loaded = True
        try:
            self._load()
        except MdsyncError as e:
            self._loaded = False
            if e.path is None:
                e.path = self.filename
            raise
        except Exception:
            self._loaded = False
            raise
        return self

    def _load(self) -> None:
        config = self.workspace.config
        source = MarkdownFile.from_file(self.filename)
        self._meta = source.meta
        self._body = source.body
        self._kind = self._fingerprint = None

        metafile = self.metafile()
        if metafile.exists():
            self._meta.inherit(self._read_sidecar(metafile))

        stem = self.stem()
        if "." in stem and not self._meta.has("Prototype"):
            stem, _, prototype_name = stem.rpartition(".")
            self._meta["Prototype"] = prototype_name

        if stem == INDEX_NAME:
            directory = self.filename.parent
            self._slug = None if is_filesystem_root(directory) else directory.name
        else:
            self._slug = stem

        if prototype_name := self._meta.get_string("Prototype"):
            self.project.prototype(prototype_name, self.filename).apply_to(self)

        self.workspace.hooks.fire("on_load", self)

        self._kind = classify_kind(
            self._meta.get_string("ID"),
            self._meta.get_string("Resource-Kind"),
            default=config.sync.default_kind,
        )
        self._meta.set_default("Resource-Kind", self._kind)
        self.workspace.registry.kind(self._kind).get_importer(self)

        try:
            text = self.dump()
        except TypeError as e:
            raise InvalidDocument(f"unsupported front matter value: {e}") from e
        digest = hashlib.md5(text.encode("utf-8")).hexdigest()
        self._fingerprint = f"{self.relative_path()}:{digest}"
        logger.debug(f"Loaded {self.filename} as {self._kind} ({self._fingerprint})")

    def _read_sidecar(self, path: Path) -> dict[str, Any]:
        try:
            data = serialize.load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise InvalidDocument(f"cannot read metadata file: {e}", path=path) from e
        if not isinstance(data, dict):
            raise InvalidDocument("metadata file must be a mapping of fields", path=path)
        return data

    # -- pure path helpers --------------------------------------------------

    def stem(self) -> str:
        """File name without the ``.md`` extension."""
        name = self.filename.name
        return name[: -len(MARKDOWN_SUFFIX)] if name.endswith(MARKDOWN_SUFFIX) else self.filename.stem

    def metafile(self) -> Path:
        """Path of the sidecar file holding store-exported fields."""
        return self.filename.with_name(self.stem() + SIDECAR_SUFFIX)

    def relative_path(self) -> str:
        """Path relative to the project root, POSIX style."""
        return self.project.relative_path(self.filename)

    # -- relationships and writes -------------------------------------------

    def parent(self) -> "Document | None":
        """Nearest ancestor index document, or None at a project root."""
        parent_path = self.workspace.parent_of(self.filename)
        return self.workspace.doc(parent_path) if parent_path else None

    def dump(self) -> str:
        """Serialize the merged document with the diff-stable emitter."""
        self.load()
        config = self.workspace.config.serializer
        return MarkdownFile(self._meta, self._body, has_front_matter=True).dump(
            width=config.width, indent=config.indent
        )

    def save_guid(self, guid: str) -> None:
        """
        Write ``guid`` into the file's front matter and reload.

        The file on disk gains an ``ID`` line; the document is then
        reloaded so its fingerprint matches what the next run will read.

        Raises:
            SaveFailed: If the file cannot be written
        """
        config = self.workspace.config.serializer
        inject_guid(self.filename, guid, width=config.width, indent=config.indent)
        self.load(reload=True)
