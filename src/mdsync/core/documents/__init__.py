"""
Document model: Markdown files, their front matter, prototypes and projects.
"""

from .document import Document
from .markdown import MarkdownFile, inject_guid, write_file
from .metadata import Metadata
from .project import Project
from .prototype import Prototype
from .workspace import Workspace

__all__ = [
    "Document",
    "MarkdownFile",
    "Metadata",
    "Project",
    "Prototype",
    "Workspace",
    "inject_guid",
    "write_file",
]
