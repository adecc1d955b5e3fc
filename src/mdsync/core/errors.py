"""
Exception taxonomy for document synchronization.

Two families of errors exist:

- ``DocumentError`` subclasses describe a problem with one document. They
  short-circuit that document's sync; siblings keep going.
- ``ConfigurationError`` subclasses describe a setup defect (an unknown
  resource kind, a missing or cyclic prototype) and abort the whole run.

Every error carries a stable ``code`` and an optional ``path`` naming the
offending file, which is prefixed to the message when the error is printed.
"""

from pathlib import Path


class MdsyncError(Exception):
    """Base class for all mdsync errors."""

    code = "error"

    def __init__(self, message: str, *, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


class DocumentError(MdsyncError):
    """A recoverable, per-document failure."""

    code = "document_error"


class MissingGuid(DocumentError):
    """Document has no ID and minting new GUIDs is disabled."""

    code = "missing_guid"


class SaveFailed(DocumentError):
    """A minted GUID or an exported file could not be written."""

    code = "save_failed"


class ExcludedType(DocumentError):
    """The record type is not permitted to sync."""

    code = "excluded_type"


class BadReference(DocumentError):
    """A linked document, parent or option value could not be resolved."""

    code = "bad_reference"


class StoreError(DocumentError):
    """Opaque failure surfaced by the resource store."""

    code = "store_error"


class InvalidDocument(DocumentError):
    """Document could not be read or its front matter is malformed."""

    code = "invalid_document"


class ConfigurationError(MdsyncError):
    """A setup defect that is fatal for the whole run."""

    code = "configuration_error"


class InvalidKind(ConfigurationError):
    """Unregistered or misconfigured resource-kind handler."""

    code = "invalid_kind"


class PrototypeNotFound(ConfigurationError):
    """None of a referenced prototype's files exist."""

    code = "prototype_not_found"


class CyclicPrototype(ConfigurationError):
    """A prototype chain refers back to itself."""

    code = "cyclic_prototype"


__all__ = [
    "BadReference",
    "ConfigurationError",
    "CyclicPrototype",
    "DocumentError",
    "ExcludedType",
    "InvalidDocument",
    "InvalidKind",
    "MdsyncError",
    "MissingGuid",
    "PrototypeNotFound",
    "SaveFailed",
    "StoreError",
]
