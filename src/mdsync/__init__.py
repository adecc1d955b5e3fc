"""
mdsync - Markdown document synchronization

Keeps a tree of Markdown files (YAML front matter + body) in sync with the
records of a resource store.
"""

__version__ = "0.4.0"

# Re-export core types for convenience
from mdsync.core.config.models import MdsyncConfig
from mdsync.core.documents import Document, Workspace
from mdsync.core.sync.orchestrator import SyncOrchestrator

__all__ = ["Document", "MdsyncConfig", "SyncOrchestrator", "Workspace", "__version__"]
