"""
Resource stores: the protocol the sync engine depends on, and a SQLite backend.
"""

from .base import Store
from .sqlite import SqliteStore

__all__ = ["SqliteStore", "Store"]
