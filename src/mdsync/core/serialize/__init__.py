"""
Diff-stable YAML serialization.

``dump`` writes mappings with a fixed layout (see ``StableEmitter``);
``load`` is its inverse, built on PyYAML's safe loader.
"""

from collections.abc import Mapping
from typing import Any

import yaml

from .emitter import StableEmitter


def dump(data: Mapping[str, Any], width: int = 120, indent: int = 2) -> str:
    """
    Serialize a mapping to diff-stable YAML.

    Args:
        data: Mapping to serialize (keys are written in iteration order)
        width: Maximum line width for flow collections
        indent: Spaces per nesting level

    Returns:
        YAML text ending in a newline
    """
    return StableEmitter(width=width, indent=indent).dump(data)


def load(text: str) -> Any:
    """
    Parse YAML text produced by ``dump`` (or written by hand).

    Empty documents load as an empty dict.

    Raises:
        yaml.YAMLError: If the text is not valid YAML
    """
    data = yaml.safe_load(text)
    return {} if data is None else data


__all__ = ["StableEmitter", "dump", "load"]
