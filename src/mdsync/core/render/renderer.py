"""
Markdown and template rendering.

The sync engine only depends on the ``Renderer`` protocol. The default
implementation renders Markdown with markdown-it-py and prototype
templates with Jinja2.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, TemplateError
from markdown_it import MarkdownIt

from mdsync.core.config.models import RenderConfig
from mdsync.core.errors import InvalidDocument
from mdsync.core.hooks import SyncHooks

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    """Rendering collaborator used by prototypes and importers."""

    def render(self, markdown: str, context: Mapping[str, Any] | None = None) -> str:
        """Render Markdown source to HTML."""
        ...

    def render_template(
        self,
        source: str,
        context: Mapping[str, Any],
        search_path: Sequence[Path] = (),
    ) -> str:
        """Expand a template body with ``context``."""
        ...


class MarkdownRenderer:
    """
    markdown-it-py + Jinja2 renderer.

    ``render`` passes the source through the ``markdown`` filter hooks,
    renders it, then passes the HTML through the ``html`` filter hooks.
    The document being rendered, if any, is taken from ``context["doc"]``
    and handed to the hooks.

    Example:
        >>> MarkdownRenderer().render("# Hi")
        '<h1>Hi</h1>\\n'
    """

    def __init__(self, config: RenderConfig | None = None, hooks: SyncHooks | None = None) -> None:
        self.config = config or RenderConfig()
        self.hooks = hooks or SyncHooks()
        self._md = MarkdownIt(self.config.markdown_preset)
        if self.config.markdown_features:
            self._md.enable(self.config.markdown_features)
        self._environments: dict[tuple[Path, ...], Environment] = {}

    def render(self, markdown: str, context: Mapping[str, Any] | None = None) -> str:
        doc = (context or {}).get("doc")
        source = self.hooks.filter("markdown", markdown, doc)
        html = self._md.render(source)
        return self.hooks.filter("html", html, doc)

    def render_template(
        self,
        source: str,
        context: Mapping[str, Any],
        search_path: Sequence[Path] = (),
    ) -> str:
        env = self._environment(tuple(Path(p) for p in search_path))
        try:
            return env.from_string(source).render(dict(context))
        except TemplateError as e:
            raise InvalidDocument(f"template error: {e}") from e

    def _environment(self, search_path: tuple[Path, ...]) -> Environment:
        if search_path not in self._environments:
            loader = ChoiceLoader(
                [DictLoader(self.config.templates), FileSystemLoader([str(p) for p in search_path])]
            )
            self._environments[search_path] = Environment(
                loader=loader,
                autoescape=False,
                keep_trailing_newline=True,
            )
        return self._environments[search_path]
