"""
Key-path access into nested option values.

Options are JSON-like values (dicts, lists, scalars). A key path is a list
of string segments; a segment that looks like an integer addresses a list
index, or an integer-like dict key, which is stored as its string form.
"""

import copy
from collections.abc import Sequence
from typing import Any

from mdsync.core.errors import BadReference


def _index(key: str) -> int | None:
    return int(key) if key.lstrip("-").isdigit() else None


def pluck(value: Any, path: Sequence[str]) -> Any:
    """
    Return the nested value at ``path``, or None if any segment is missing.

    Example:
        >>> pluck({"widgets": [{"text": "hi"}]}, ["widgets", "0", "text"])
        'hi'
    """
    for key in path:
        if isinstance(value, dict):
            value = value.get(key)
        elif isinstance(value, list) and (i := _index(key)) is not None:
            if not -len(value) <= i < len(value):
                return None
            value = value[i]
        else:
            return None
    return value


def patch(value: Any, path: Sequence[str], new: Any) -> Any:
    """
    Return a copy of ``value`` with ``path`` set to ``new``.

    Missing intermediate containers are created as dicts. Setting None
    deletes the key (or list item).

    Raises:
        BadReference: If a segment addresses into a scalar, or a list
            index is out of range
    """
    if not path:
        return copy.deepcopy(new)

    key, rest = path[0], path[1:]
    if value is None:
        value = {}

    if isinstance(value, dict):
        result = dict(value)
        if rest or new is not None:
            result[key] = patch(result.get(key), rest, new)
        else:
            result.pop(key, None)
        return result

    if isinstance(value, list):
        i = _index(key)
        if i is None or not 0 <= i <= len(value):
            raise BadReference(f"cannot address list item '{key}' in option value")
        result = list(value)
        if i == len(result):
            if rest or new is not None:
                result.append(patch(None, rest, new))
        elif rest or new is not None:
            result[i] = patch(result[i], rest, new)
        else:
            del result[i]
        return result

    raise BadReference(f"cannot address '{key}' inside a {type(value).__name__} option value")
