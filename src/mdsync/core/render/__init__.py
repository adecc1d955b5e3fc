"""Rendering collaborators: Markdown to HTML and prototype templates."""

from .renderer import MarkdownRenderer, Renderer

__all__ = ["MarkdownRenderer", "Renderer"]
