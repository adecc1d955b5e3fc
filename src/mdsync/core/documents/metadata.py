"""
Ordered front-matter mapping with typed accessors.
"""

import copy
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

from mdsync.core.errors import InvalidDocument
from mdsync.utils.merge import deep_merge

TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")


class Metadata(MutableMapping[str, Any]):
    """
    A document's front matter.

    Behaves like a dict whose insertion order is preserved, plus accessors
    that coerce values to the shape a caller expects and raise
    InvalidDocument when the value cannot be coerced. A key whose value is
    None counts as absent for ``has`` and ``set_default``.

    Example:
        >>> meta = Metadata({"Tags": "a, b", "Draft": "yes"})
        >>> meta.get_list("Tags", split=True)
        ['a', 'b']
        >>> meta.get_bool("Draft")
        True
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Metadata({self._data!r})"

    def has(self, key: str) -> bool:
        """Return True if ``key`` is present with a non-null value."""
        return self._data.get(key) is not None

    def set_default(self, key: str, value: Any) -> Any:
        """Set ``key`` to ``value`` unless it already has a non-null value."""
        if not self.has(key):
            self._data[key] = value
        return self._data[key]

    def get_string(self, key: str, default: str | None = None) -> str | None:
        """Return a scalar field as a string."""
        value = self._data.get(key)
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            raise InvalidDocument(f"{key} must be a single value, not a {type(value).__name__}")
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def get_list(self, key: str, *, split: bool = False) -> list[Any]:
        """
        Return a field as a list.

        Scalars become one-element lists. With ``split``, strings are split
        on commas and stripped.
        """
        value = self._data.get(key)
        if value is None:
            return []
        if isinstance(value, list):
            return list(value)
        if isinstance(value, dict):
            raise InvalidDocument(f"{key} must be a list, not a mapping")
        if split and isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return [value]

    def get_bool(self, key: str, default: bool | None = None) -> bool | None:
        """Return a field as a boolean, accepting yes/no style strings."""
        value = self._data.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, (str, int)):
            text = str(value).strip().lower()
            if text in TRUE_STRINGS:
                return True
            if text in FALSE_STRINGS:
                return False
        raise InvalidDocument(f"{key} must be true or false, got {value!r}")

    def get_mapping(self, key: str) -> dict[str, Any]:
        """Return a field as a dict (empty if absent)."""
        value = self._data.get(key)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise InvalidDocument(f"{key} must be a mapping, not a {type(value).__name__}")
        return dict(value)

    def inherit(self, defaults: Mapping[str, Any]) -> None:
        """
        Merge ``defaults`` underneath the current values.

        Nested mappings merge key by key; scalars and lists already present
        here win wholesale. Inherited containers are copied so documents
        sharing a prototype never share mutable state.
        """
        self._data = deep_merge(copy.deepcopy(dict(defaults)), self._data)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy as a plain dict."""
        return copy.deepcopy(self._data)
