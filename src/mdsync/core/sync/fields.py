"""
Field sets built with set-if-absent precedence.

Importers assemble a record from many contributors (front matter, hooks,
rendered content, defaults). Contributors run in priority order and each
may only fill a field that is still empty, so the first contributor to
speak wins. Any contributor may instead supply an exception; that becomes
the set's terminal ``error`` and every later contribution is ignored.
"""

from collections.abc import Callable, Iterator
from typing import Any

from mdsync.core.errors import DocumentError


class FieldSet:
    """
    Record fields under construction.

    Example:
        >>> fields = FieldSet()
        >>> fields.set("title", "From front matter")
        True
        >>> fields.set("title", "From heading")
        False
        >>> fields["title"]
        'From front matter'
    """

    def __init__(self) -> None:
        self._fields: dict[str, Any] = {}
        self.error: Exception | None = None

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    def __getitem__(self, field: str) -> Any:
        return self._fields[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, field: str, default: Any = None) -> Any:
        """Return ``field`` or ``default``."""
        return self._fields.get(field, default)

    def has(self, field: str) -> bool:
        """Return True if ``field`` has been set."""
        return field in self._fields

    def set(self, field: str, value: Any) -> bool:
        """
        Set ``field`` unless it is already set.

        None never sets a field. An exception value becomes the terminal
        error instead.

        Returns:
            True if the field was set
        """
        if self.error is not None:
            return False
        if isinstance(value, Exception):
            self.error = value
            return False
        if value is None or field in self._fields:
            return False
        self._fields[field] = value
        return True

    def replace(self, field: str, value: Any) -> None:
        """Overwrite an already set ``field``, for contributors that split one field into two."""
        if self.error is None and field in self._fields:
            self._fields[field] = value

    def compute(self, field: str, fn: Callable[[], Any], *, when: Any = True) -> bool:
        """
        Lazily set ``field`` to ``fn()``.

        ``fn`` is only called if the set has no error, the field is still
        absent and ``when`` is not None. A DocumentError raised by ``fn``
        becomes the terminal error.
        """
        if self.error is not None or field in self._fields or when is None:
            return False
        try:
            value = fn()
        except DocumentError as e:
            value = e
        return self.set(field, value)

    def as_dict(self) -> dict[str, Any]:
        """Return the fields as a plain dict."""
        return dict(self._fields)
