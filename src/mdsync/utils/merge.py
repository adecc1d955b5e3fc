"""Recursive dictionary merging shared by config loading and metadata inheritance."""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested dicts
    are merged key by key; scalars and lists are replaced wholesale. Keys
    keep the order in which they first appear in `base`, followed by keys
    only present in `override`.

    Args:
        base: Base dictionary (lower priority)
        override: Override dictionary (higher priority)

    Returns:
        Merged dictionary with override values taking precedence

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10, "y": 20}}, {"b": {"y": 30}, "c": [3]})
        {'a': 1, 'b': {'x': 10, 'y': 30}, 'c': [3]}
    """
    result = dict(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result
