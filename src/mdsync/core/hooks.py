"""
In-process extension points for the sync pipeline.

Hooks are plain callables registered by name. Action hooks are called for
their side effects; filter hooks receive a value and return a replacement.

Action hooks:
    on_load(doc)                  - after a document is parsed and merged
    before_sync(doc, fields)      - before any field is computed
    metadata(fields, doc)         - after front-matter fields are set
    content(fields, doc)          - after content fields are set
    after_sync(doc, identifier)   - after the store commit resolved
    export(markdown_file, record) - before an exported file is written

Filter hooks:
    markdown(text, doc) -> text   - markdown source before rendering
    html(text, doc) -> text       - rendered HTML

Example:
    >>> hooks = SyncHooks()
    >>> hooks.add("html", lambda html, doc: html.replace("<p>", '<p class="x">'))
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

ACTIONS = ("on_load", "before_sync", "metadata", "content", "after_sync", "export")
FILTERS = ("markdown", "html")


@dataclass
class SyncHooks:
    """Registry of hook callables, keyed by hook name."""

    callbacks: dict[str, list[Callable[..., Any]]] = field(
        default_factory=lambda: {name: [] for name in ACTIONS + FILTERS}
    )

    def add(self, name: str, callback: Callable[..., Any]) -> None:
        """Register ``callback`` for hook ``name``."""
        if name not in self.callbacks:
            raise ValueError(f"Unknown hook '{name}'. Valid hooks: {', '.join(self.callbacks)}")
        self.callbacks[name].append(callback)

    def fire(self, name: str, *args: Any) -> None:
        """Call every action callback registered for ``name``."""
        for callback in self.callbacks[name]:
            logger.debug(f"Running {name} hook {getattr(callback, '__name__', callback)!r}")
            callback(*args)

    def filter(self, name: str, value: Any, *args: Any) -> Any:
        """Pass ``value`` through every filter callback registered for ``name``."""
        for callback in self.callbacks[name]:
            value = callback(value, *args)
        return value
