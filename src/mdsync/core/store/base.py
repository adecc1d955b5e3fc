"""
The resource store protocol.

The sync engine talks to its store only through these operations, so any
backend (a local SQLite file, a remote CMS API client) can be plugged in.
"""

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from mdsync.core.sync.tasks import Pending


class Store(Protocol):
    """Create/update/query primitives of a record store."""

    def lookup_by_guid(self, guid: str, kind: str = "post") -> str | None:
        """Return the identifier of the record carrying ``guid``, if any."""
        ...

    def commit(
        self, kind: str, identifier: str | None, fields: Mapping[str, Any]
    ) -> "str | Pending[str]":
        """
        Create (``identifier`` is None) or update a record.

        Field values may be Pending handles; the store resolves them
        before writing. Returns the record identifier, or a handle for it
        if the store commits lazily.
        """
        ...

    def query_cached_fingerprints(self, kind: str) -> dict[str, str]:
        """Return ``{fingerprint: identifier}`` for records of ``kind``."""
        ...

    def fetch(self, identifier: str) -> dict[str, Any] | None:
        """Return a record by identifier, or None."""
        ...

    def get_option(self, keypath: Sequence[str]) -> Any:
        """Return the value at ``keypath`` (option name first), or None."""
        ...

    def patch_option(self, keypath: Sequence[str], value: Any) -> None:
        """Set the value at ``keypath``; None deletes it."""
        ...
