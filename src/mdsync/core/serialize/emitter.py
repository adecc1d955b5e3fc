"""
Deterministic, diff-stable YAML emitter.

PyYAML's own dumper reflows long strings, picks flow or block style per
call and happily reorders keys, so a small edit to one value can rewrite
many lines of a file. ``StableEmitter`` produces the same text for the
same data every time and keeps each scalar on its own line(s):

- Mappings and sequences whose children are all leaves are written in
  flow style (``{a: 1}`` / ``[a, b]``) when the whole line fits the
  configured width; otherwise one child per line.
- Multi-line strings become literal blocks (``|``, ``|-``, ``|+``).
- Strings are quoted only when a plain scalar would load back as
  something else.
- Key order is preserved exactly.

Output is always loadable with ``yaml.safe_load`` and loads back to the
input.
"""

import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

import yaml

# Characters that may not start a plain scalar
INDICATORS = "-?:,[]{}#&*!|>'\"%@`"

# Characters that may not appear anywhere in a plain scalar inside flow collections
FLOW_INDICATORS = ",?[]{}"

# Line breaks YAML recognizes besides \n and \r
EXTRA_BREAKS = "\x85\u2028\u2029"

ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\v": "\\v",
    "\f": "\\f",
    "\r": "\\r",
    "\x1b": "\\e",
}


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


class StableEmitter:
    """
    Width-aware YAML emitter with a fixed, diff-friendly layout.

    Args:
        width: Maximum line width for flow collections
        indent: Spaces per nesting level (1-9)

    Example:
        >>> print(StableEmitter(width=40).dump({"ID": "urn:uuid:1", "Tags": ["a", "b"]}), end="")
        ID: urn:uuid:1
        Tags: [a, b]
    """

    def __init__(self, width: int = 120, indent: int = 2) -> None:
        if not 1 <= indent <= 9:
            raise ValueError(f"indent must be between 1 and 9, got {indent}")
        self.width = width
        self.indent = indent

    def dump(self, data: Mapping[str, Any]) -> str:
        """Serialize a mapping as a block-style YAML document."""
        if not isinstance(data, Mapping):
            raise TypeError(f"Top-level value must be a mapping, not {type(data).__name__}")
        if not data:
            return "{}\n"
        return "\n".join(self._mapping(data, 0)) + "\n"

    # -- block layout -------------------------------------------------------

    def _mapping(self, data: Mapping[Any, Any], level: int) -> list[str]:
        pad = " " * level
        lines: list[str] = []
        for key, value in data.items():
            lines.extend(self._entry(f"{pad}{self._key(key)}:", value, level))
        return lines

    def _sequence(self, items: list[Any] | tuple[Any, ...], level: int) -> list[str]:
        pad = " " * level
        lines: list[str] = []
        for item in items:
            if isinstance(item, Mapping) and item and self._flow_fits(f"{pad}-", item) is None:
                # Compact form: first key shares the line with the dash
                child = self._mapping(item, level + 2)
                child[0] = f"{pad}- {child[0][level + 2:]}"
                lines.extend(child)
            else:
                lines.extend(self._entry(f"{pad}-", item, level))
        return lines

    def _entry(self, prefix: str, value: Any, level: int) -> list[str]:
        """Lines for ``prefix`` followed by ``value``, children indented one level."""
        child_level = level + self.indent

        if isinstance(value, Mapping):
            if not value:
                return [f"{prefix} {{}}"]
            if (flow := self._flow_fits(prefix, value)) is not None:
                return [f"{prefix} {flow}"]
            return [prefix, *self._mapping(value, child_level)]

        if isinstance(value, (list, tuple)):
            if not value:
                return [f"{prefix} []"]
            if (flow := self._flow_fits(prefix, value)) is not None:
                return [f"{prefix} {flow}"]
            return [prefix, *self._sequence(value, child_level)]

        if isinstance(value, str) and self._wants_literal(value):
            return self._literal(prefix, value, child_level)

        return [f"{prefix} {self._scalar(value)}"]

    def _literal(self, prefix: str, text: str, level: int) -> list[str]:
        if not text.endswith("\n"):
            chomp, content = "-", text
        elif text.endswith("\n\n"):
            chomp, content = "+", text[:-1]
        else:
            chomp, content = "", text[:-1]

        lines = content.split("\n")
        first = next((line for line in lines if line), "")
        header = "|"
        if first.startswith(" "):
            header += str(self.indent)
        header += chomp

        pad = " " * level
        return [f"{prefix} {header}", *(f"{pad}{line}" if line else "" for line in lines)]

    # -- flow layout --------------------------------------------------------

    def _flow_fits(self, prefix: str, value: Any) -> str | None:
        """Return the flow rendering of ``value`` if it qualifies and fits the width."""
        flow = self._flow(value)
        if flow is None or len(prefix) + 1 + len(flow) > self.width:
            return None
        return flow

    def _flow(self, value: Any) -> str | None:
        if isinstance(value, Mapping):
            children = list(value.values())
        else:
            children = list(value)
        if any(_is_container(c) or (isinstance(c, str) and self._wants_literal(c)) for c in children):
            return None

        if isinstance(value, Mapping):
            items = (
                f"{self._key(k, flow=True)}: {self._scalar(v, flow=True)}" for k, v in value.items()
            )
            return "{" + ", ".join(items) + "}"
        return "[" + ", ".join(self._scalar(v, flow=True) for v in value) + "]"

    # -- scalars ------------------------------------------------------------

    def _key(self, key: Any, flow: bool = False) -> str:
        if isinstance(key, str):
            return self._string(key, flow)
        if _is_container(key):
            raise TypeError(f"Unsupported mapping key type: {type(key).__name__}")
        return self._scalar(key, flow)

    def _scalar(self, value: Any, flow: bool = False) -> str:
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return self._float(value)
        if isinstance(value, datetime):
            return str(value)
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, str):
            return self._string(value, flow)
        raise TypeError(f"Cannot serialize value of type {type(value).__name__}")

    @staticmethod
    def _float(value: float) -> str:
        if math.isnan(value):
            return ".nan"
        if math.isinf(value):
            return ".inf" if value > 0 else "-.inf"
        text = repr(value)
        # YAML 1.1 floats need a dot in the mantissa
        if "e" in text and "." not in text:
            mantissa, exponent = text.split("e")
            text = f"{mantissa}.0e{exponent}"
        return text

    def _string(self, text: str, flow: bool = False) -> str:
        if self._is_plain(text, flow):
            return text
        if text.isprintable():
            return "'" + text.replace("'", "''") + "'"
        return self._double_quoted(text)

    @staticmethod
    def _is_plain(text: str, flow: bool) -> bool:
        if not text or text != text.strip() or not text.isprintable():
            return False
        if text[0] in INDICATORS:
            return False
        if ": " in text or " #" in text or text.endswith(":"):
            return False
        if flow and any(ch in FLOW_INDICATORS for ch in text):
            return False
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError:
            return False
        return isinstance(loaded, str) and loaded == text

    @staticmethod
    def _double_quoted(text: str) -> str:
        out = []
        for ch in text:
            if ch in ESCAPES:
                out.append(ESCAPES[ch])
            elif ch.isprintable():
                out.append(ch)
            else:
                code = ord(ch)
                if code <= 0xFF:
                    out.append(f"\\x{code:02X}")
                elif code <= 0xFFFF:
                    out.append(f"\\u{code:04X}")
                else:
                    out.append(f"\\U{code:08X}")
        return '"' + "".join(out) + '"'

    @staticmethod
    def _wants_literal(text: str) -> bool:
        if text.count("\n") < 2 or "\r" in text or not text.strip():
            return False
        if any(ch in EXTRA_BREAKS for ch in text):
            return False
        return all(ch.isprintable() or ch in "\n\t" for ch in text)
