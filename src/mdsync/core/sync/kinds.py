"""
Resource kinds and their registry.

A resource kind names a family of store records (``post``, ``option``)
and bundles the callables that sync documents of that kind:

- ``importer(doc, orchestrator)``: commit a document, returning its
  identifier or a Pending handle for it
- ``exporter``: turns store records back into files (optional)
- ``fingerprint_source(store)``: fingerprints already in the store (optional)
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mdsync.core.errors import InvalidKind

if TYPE_CHECKING:
    from mdsync.core.documents.document import Document
    from mdsync.core.store.base import Store

Importer = Callable[..., Any]
FingerprintSource = Callable[["Store"], Mapping[str, str]]


@dataclass
class Kind:
    """A registered resource kind."""

    name: str
    importer: Importer | None = None
    exporter: Any = None
    fingerprint_source: FingerprintSource | None = None

    def get_importer(self, doc: "Document | None" = None) -> Importer:
        """
        Return the import handler.

        Raises:
            InvalidKind: If no callable importer is registered
        """
        if not callable(self.importer):
            raise InvalidKind(
                f"No import handler defined for resource kind '{self.name}'",
                path=doc.filename if doc is not None else None,
            )
        return self.importer


class KindRegistry:
    """
    Registry of resource kinds by name.

    Example:
        >>> registry = KindRegistry()
        >>> registry.register("post", importer=lambda doc, sync: "1")
        Kind(name='post', ...)
        >>> registry.kind("page")
        Traceback (most recent call last):
        ...
        InvalidKind: Unknown resource kind 'page'
    """

    def __init__(self) -> None:
        self._kinds: dict[str, Kind] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def __iter__(self) -> Iterator[Kind]:
        return iter(self._kinds.values())

    def register(
        self,
        name: str,
        *,
        importer: Importer | None = None,
        exporter: Any = None,
        fingerprint_source: FingerprintSource | None = None,
    ) -> Kind:
        """Register (or replace) the kind called ``name``."""
        kind = Kind(
            name=name,
            importer=importer,
            exporter=exporter,
            fingerprint_source=fingerprint_source,
        )
        self._kinds[name] = kind
        return kind

    def kind(self, name: str) -> Kind:
        """
        Return the kind called ``name``.

        Raises:
            InvalidKind: If no such kind is registered
        """
        if name not in self._kinds:
            raise InvalidKind(f"Unknown resource kind '{name}'")
        return self._kinds[name]


def default_registry() -> KindRegistry:
    """Return a registry with the built-in ``post`` and ``option`` kinds."""
    from .exporters import PostExporter
    from .importers import OptionImporter, PostImporter

    registry = KindRegistry()
    registry.register(
        "post",
        importer=PostImporter(),
        exporter=PostExporter(),
        fingerprint_source=lambda store: store.query_cached_fingerprints("post"),
    )
    registry.register(
        "option",
        importer=OptionImporter(),
        fingerprint_source=lambda store: store.query_cached_fingerprints("option"),
    )
    return registry
