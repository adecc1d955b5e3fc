"""
Prototypes: named bundles of inherited fields and body templates.

A prototype ``page`` is defined by any of these files in the project's
lookup directory:

- ``page.type.yml``: field defaults
- ``page.type.md``: field defaults in front matter, plus an optional
  template body (optionally wrapped in a ```` ```jinja ```` fence)
- ``page.type.j2``: a template body

A prototype may name its own ``Prototype``; that chain is resolved
prototype-first, so the most specific definition wins.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import frontmatter
import yaml

from mdsync.core.errors import CyclicPrototype, InvalidDocument
from mdsync.utils.merge import deep_merge

from .markdown import MarkdownFile

if TYPE_CHECKING:
    from .document import Document
    from .project import Project

logger = logging.getLogger(__name__)

TEMPLATE_LANGUAGE = "jinja"


class Prototype:
    """
    A resolved prototype definition.

    Args:
        project: Project whose lookup directory holds the files
        name: Prototype name
        files: Mapping of ``yml``/``md``/``j2`` to existing file paths
    """

    def __init__(self, project: "Project", name: str, files: dict[str, Path]) -> None:
        self.project = project
        self.name = name
        self.files = files
        self._meta: dict[str, Any] | None = None
        self._template: str | None = None
        self._super: Prototype | None = None
        self._loaded = False

    def meta(self, chain: tuple[str, ...] = ()) -> dict[str, Any]:
        """
        Return the fully inherited field defaults of this prototype.

        Args:
            chain: Names of prototypes already being resolved

        Raises:
            CyclicPrototype: If the chain refers back to a prototype in ``chain``
        """
        if self.name in chain:
            cycle = " -> ".join([*chain, self.name])
            raise CyclicPrototype(f"Prototype chain loops back on itself: {cycle}")
        self._load((*chain, self.name))
        assert self._meta is not None
        return self._meta

    def template(self) -> str | None:
        """Return the template body of the ``.md`` definition, or an inherited one."""
        self._load((self.name,))
        if self._template:
            return self._template
        if self._super is not None:
            return self._super.template()
        return None

    def apply_to(self, doc: "Document") -> None:
        """
        Merge this prototype into a document.

        The document's own fields win over inherited defaults. When the
        document has no body of its own, the prototype's templates render
        one: first the ``.md`` template, then the ``.j2`` template (which
        sees the former's output as ``body``).
        """
        doc.meta.inherit(self.meta())

        if doc.body.strip():
            return

        renderer = doc.workspace.renderer
        search_path = [self.project.lookup_dir] if self.project.lookup_dir else []

        if source := self.template():
            doc.body = renderer.render_template(source, self._context(doc), search_path)
        if "j2" in self.files:
            source = self.files["j2"].read_text(encoding="utf-8")
            doc.body = renderer.render_template(source, self._context(doc), search_path)

    @staticmethod
    def _context(doc: "Document") -> dict[str, Any]:
        return {**doc.meta.to_dict(), "doc": doc, "body": doc.body}

    def _load(self, chain: tuple[str, ...]) -> None:
        if self._loaded:
            return

        data: dict[str, Any] = {}
        if "yml" in self.files:
            data = self._read_yaml(self.files["yml"])

        if "md" in self.files:
            try:
                post = frontmatter.load(str(self.files["md"]))
            except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
                raise InvalidDocument(f"cannot load prototype: {e}", path=self.files["md"]) from e
            # Defaults from the .yml file win over the .md front matter
            data = deep_merge(dict(post.metadata), data)
            body = MarkdownFile(body=post.content).unfence(TEMPLATE_LANGUAGE)
            if body.strip():
                self._template = body

        if super_name := data.get("Prototype"):
            self._super = self.project.prototype(str(super_name), self.files.get("md"))
            data = deep_merge(self._super.meta(chain), data)

        self._meta = data
        self._loaded = True
        logger.debug(f"Loaded prototype {self.name!r} from {sorted(self.files)}")

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise InvalidDocument(f"cannot load prototype defaults: {e}", path=path) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidDocument("prototype defaults must be a mapping", path=path)
        return data
